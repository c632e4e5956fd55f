"""
Intake orchestrator: one application submission from multipart fields to email and CRM
"""
import json
import time
from datetime import date
from typing import Any, Dict, List, Optional

import pydantic
from fastapi import HTTPException
from pydantic import BaseModel, Field
from rich.markup import escape

from funding_intake.core.config import DeliveryConfig, IntakeConfig, settings
from funding_intake.external.crm.zoho_crm import format_application_for_crm
from funding_intake.schemas.application import ApplicationDraft
from funding_intake.schemas.intake import SubmissionAccepted
from funding_intake.services.document_composer import application_filename, compose_application_pdf
from funding_intake.services.email_service import (
    EmailAttachment,
    EmailService,
    build_notification_html,
    build_subject,
)
from funding_intake.services.lead_router import LeadRouter
from funding_intake.services.submission import UploadedFile
from funding_intake.services.verification_service import VerificationService
from funding_intake.utils.exceptions import (
    CRMAPIError,
    CRMNotConfiguredError,
    EmailDeliveryError,
    EmailNotConfiguredError,
    FileTooLargeError,
    IntakeProcessingError,
    TotalFileSizeError,
    ValidationError,
    VerificationFailedError,
)
from funding_intake.utils.helpers import sanitize_data
from funding_intake.utils.incidents import applicant_context, report_incident
from funding_intake.utils.logging import get_logger

logger = get_logger(__name__)

MIB = 1024 * 1024


class IntakeForm(BaseModel):
    """Raw multipart fields of one submission"""
    form_data: Optional[str] = None
    signature: str = ""
    second_signature: str = ""
    recaptcha_token: str = ""
    submission_date: str = ""
    bank_statements: List[Optional[UploadedFile]] = Field(default_factory=list)


class IntakeService:
    """
    Runs the intake pipeline for a single request.

    Stages run strictly in order and each sets `step` before doing any work,
    so an unexpected failure is always attributed to the stage that raised.
    """

    def __init__(
        self,
        verification: Optional[VerificationService] = None,
        email: Optional[EmailService] = None,
        lead_router: Optional[LeadRouter] = None,
        limits: Optional[IntakeConfig] = None,
        delivery: Optional[DeliveryConfig] = None,
    ):
        self.verification = verification or VerificationService()
        self.email = email or EmailService()
        self.lead_router = lead_router
        self.limits = limits or settings.intake
        self.delivery = delivery or settings.delivery
        self.step = "initializing"
        self._application: Optional[Dict[str, Any]] = None

    async def process(self, form: IntakeForm) -> SubmissionAccepted:
        """
        Process one submission.

        Returns:
            SubmissionAccepted once the email went out (or was not required)

        Raises:
            HTTPException subclasses for rejections and fatal delivery failures;
            IntakeProcessingError for anything unexpected
        """
        started = time.monotonic()
        try:
            return await self._run(form, started)
        except HTTPException:
            raise
        except Exception as e:
            duration_ms = int((time.monotonic() - started) * 1000)
            report_incident(
                "application-submit",
                "unexpected_error",
                error=e,
                failed_step=self.step,
                duration_ms=duration_ms,
                **applicant_context(self._application),
            )
            logger.error(
                f"[red]❌ Failed at step \"{self.step}\" after {duration_ms}ms:[/red] {escape(str(e))}"
            )
            raise IntakeProcessingError(step=self.step, details=str(e)) from e

    async def _run(self, form: IntakeForm, started: float) -> SubmissionAccepted:
        self.step = "parsing_form_data"
        logger.info("[cyan]📨 Starting application submission[/cyan]")

        self.step = "parsing_json_data"
        draft = self._parse_draft(form.form_data)
        logger.info(f"[cyan]Parsed application for:[/cyan] {escape(draft.legal_business_name)}")

        self.step = "verifying_recaptcha"
        await self._verify(form.recaptcha_token, draft)

        self.step = "collecting_bank_statements"
        statements = self._collect_statements(form.bank_statements, draft)

        self.step = "generating_pdf"
        names = [upload.filename for upload in statements]
        pdf_bytes = compose_application_pdf(
            draft,
            form.signature or None,
            form.second_signature or None,
            form.submission_date,
            names,
        )
        pdf_filename = application_filename(draft.legal_business_name, date.today())
        logger.info(f"[green]✅ PDF generated[/green] ({len(pdf_bytes)} bytes)")

        self.step = "sending_email"
        pdf_attachment = EmailAttachment(filename=pdf_filename, content=pdf_bytes, content_type="application/pdf")
        attachments = [pdf_attachment] + [
            EmailAttachment(filename=upload.filename, content=upload.content, content_type=upload.content_type)
            for upload in statements
        ]
        message_id = await self._send_email(draft, names, form.submission_date, attachments)

        self.step = "creating_crm_lead"
        lead_id = await self._route_lead(draft, statements)

        duration_ms = int((time.monotonic() - started) * 1000)
        logger.info(
            f"[green]✅ Application submitted successfully[/green] in {duration_ms}ms "
            f"for {escape(draft.legal_business_name)}"
        )
        return SubmissionAccepted(success=True, message_id=message_id, zoho_lead_id=lead_id)

    def _parse_draft(self, raw: Optional[str]) -> ApplicationDraft:
        if not raw:
            logger.warning("[yellow]⚠️  Submission without formData[/yellow]")
            raise ValidationError("Missing application data", status_code=400)
        try:
            data = json.loads(raw)
        except ValueError:
            logger.warning("[yellow]⚠️  formData is not valid JSON[/yellow]")
            raise ValidationError("Invalid application data", status_code=400)
        if not isinstance(data, dict):
            logger.warning("[yellow]⚠️  formData is not a JSON object[/yellow]")
            raise ValidationError("Invalid application data", status_code=400)

        self._application = sanitize_data(data)
        try:
            return ApplicationDraft.model_validate(self._application)
        except pydantic.ValidationError as e:
            logger.warning(f"[yellow]⚠️  formData has the wrong shape:[/yellow] {e.error_count()} error(s)")
            raise ValidationError("Invalid application data", status_code=400)

    async def _verify(self, token: str, draft: ApplicationDraft) -> None:
        if not token:
            logger.info("[dim]No reCAPTCHA token provided, skipping verification[/dim]")
            return

        result = await self.verification.verify(token)
        logger.info(f"[cyan]reCAPTCHA result:[/cyan] success={result.success}, score={result.score}")
        if not result.success:
            logger.warning(
                f"[yellow]⚠️  reCAPTCHA failed for {escape(draft.legal_business_name)}[/yellow] "
                f"({escape(result.reason)})"
            )
            raise VerificationFailedError()

    def _collect_statements(self, uploads: List[Optional[UploadedFile]], draft: ApplicationDraft) -> List[UploadedFile]:
        statements: List[UploadedFile] = []
        total = 0
        for upload in uploads[: self.limits.max_files]:
            if upload is None:
                continue
            total += upload.size
            if total > self.limits.max_total_size:
                logger.warning(
                    f"[yellow]⚠️  Total file size exceeded:[/yellow] {total / MIB:.1f}MB "
                    f"({escape(draft.legal_business_name)})"
                )
                raise TotalFileSizeError(total)
            if upload.size > self.limits.max_file_size:
                logger.warning(
                    f"[yellow]⚠️  File too large:[/yellow] {escape(upload.filename)} ({upload.size / MIB:.1f}MB)"
                )
                raise FileTooLargeError(upload.filename, upload.size)
            statements.append(upload)

        logger.info(f"[cyan]Collected {len(statements)} bank statements[/cyan] ({total / MIB:.2f}MB total)")
        return statements

    async def _send_email(
        self,
        draft: ApplicationDraft,
        names: List[str],
        submission_date: str,
        attachments: List[EmailAttachment],
    ) -> Optional[str]:
        required = self.delivery.email.required
        context = applicant_context(self._application)
        try:
            return await self.email.send(
                build_subject(draft),
                build_notification_html(draft, names, submission_date),
                attachments,
            )
        except EmailNotConfiguredError:
            report_incident("email-send", "configuration", message="Email API key missing", **context)
            if required:
                raise
        except EmailDeliveryError as e:
            report_incident(
                "email-send",
                "send_failure",
                message=e.reason,
                attachment_count=len(attachments),
                total_attachment_size=sum(len(att.content) for att in attachments),
                **context,
            )
            if required:
                raise
        logger.warning("[yellow]⚠️  Email not delivered; continuing because email delivery is optional[/yellow]")
        return None

    async def _route_lead(self, draft: ApplicationDraft, statements: List[UploadedFile]) -> Optional[str]:
        required = self.delivery.crm.required
        context = applicant_context(self._application)

        if self.lead_router is None and not settings.crm.configured:
            logger.warning("[yellow]⚠️  Zoho CRM not configured, skipping lead creation[/yellow]")
            if required:
                raise CRMNotConfiguredError()
            return None

        try:
            router = self.lead_router or LeadRouter()
            record = format_application_for_crm(draft)
            result = await router.route(record, statements, draft.funding_specialist_name)
        except Exception as e:
            report_incident("crm-lead-creation", "crm_exception", error=e, **context)
            if required:
                raise CRMAPIError(detail="Failed to create CRM lead") from e
            return None

        if result.success:
            logger.info(
                f"[green]✅ Zoho lead created:[/green] {escape(str(result.lead_id))} "
                f"assigned to {escape(str(result.assigned_to))}"
            )
            return result.lead_id

        error_type = "validation_failure" if result.validation_errors else "lead_creation_failure"
        report_incident(
            "crm-lead-creation",
            error_type,
            message=result.error,
            validation_errors=result.validation_errors,
            **context,
        )
        if required:
            raise CRMAPIError(detail="Failed to create CRM lead")
        return None
