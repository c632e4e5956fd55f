"""
Application intake API endpoint
"""
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from fastapi.responses import JSONResponse

from funding_intake.core.dependencies import get_intake_service
from funding_intake.schemas.intake import SubmissionAccepted, SubmissionFailed
from funding_intake.services.intake_service import IntakeForm, IntakeService
from funding_intake.services.submission import UploadedFile
from funding_intake.utils.exceptions import EmailDeliveryError, IntakeProcessingError
from funding_intake.utils.logging import get_logger

logger = get_logger(__name__)
router = APIRouter()


async def _read_upload(upload: Optional[UploadFile]) -> Optional[UploadedFile]:
    if upload is None or not upload.filename:
        return None
    content = await upload.read()
    return UploadedFile(filename=upload.filename, content=content)


def _failure_response(exc: HTTPException) -> JSONResponse:
    body = SubmissionFailed(error=str(exc.detail))
    if isinstance(exc, EmailDeliveryError):
        body.details = exc.reason or None
    elif isinstance(exc, IntakeProcessingError):
        body.details = exc.details
        body.step = exc.step
    return JSONResponse(status_code=exc.status_code, content=body.model_dump(exclude_none=True))


@router.post(
    "/submit-application",
    response_model=SubmissionAccepted,
    response_model_by_alias=True,
    responses={400: {"model": SubmissionFailed}, 500: {"model": SubmissionFailed}},
)
async def submit_application(
    formData: Optional[str] = Form(None),
    signature: str = Form(""),
    secondSignature: str = Form(""),
    recaptchaToken: str = Form(""),
    submissionDate: str = Form(""),
    bankStatement0: Optional[UploadFile] = File(None),
    bankStatement1: Optional[UploadFile] = File(None),
    bankStatement2: Optional[UploadFile] = File(None),
    bankStatement3: Optional[UploadFile] = File(None),
    service: IntakeService = Depends(get_intake_service),
):
    """
    Receive a completed funding application.

    The PDF and bank statements are emailed to the submissions mailbox, then a
    CRM lead is created. Field names match the multipart payload the
    application form posts.
    """
    form = IntakeForm(
        form_data=formData,
        signature=signature,
        second_signature=secondSignature,
        recaptcha_token=recaptchaToken,
        submission_date=submissionDate,
        bank_statements=[
            await _read_upload(upload)
            for upload in (bankStatement0, bankStatement1, bankStatement2, bankStatement3)
        ],
    )

    try:
        accepted = await service.process(form)
    except HTTPException as e:
        return _failure_response(e)

    return JSONResponse(content=accepted.model_dump(by_alias=True, exclude_none=True))
