"""
Submission assembler: turns a completed draft into the multipart intake payload
"""
import base64
import json
from datetime import date
from typing import Any, Awaitable, Callable, Dict, List, Optional

import httpx
from pydantic import BaseModel, model_validator
from rich.markup import escape

from funding_intake.core.config import settings
from funding_intake.schemas.application import ApplicationDraft
from funding_intake.utils.helpers import content_type_for
from funding_intake.utils.logging import get_logger

logger = get_logger(__name__)

MIB = 1024 * 1024
TOO_MANY_FILES_MESSAGE = "You can upload up to {max_files} bank statements."
TOTAL_SIZE_MESSAGE = "Total file size is too large. Please compress your PDF files or upload fewer statements."

ChallengeProvider = Callable[[str], Awaitable[str]]


class SubmissionRejected(Exception):
    """Raised when a submission is refused, locally or by the intake endpoint"""

    def __init__(self, message: str, status_code: Optional[int] = None, step: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.step = step


class UploadedFile(BaseModel):
    """A bank statement as picked by the applicant or received by the endpoint"""
    filename: str
    content: bytes
    content_type: str = ""

    @model_validator(mode="after")
    def guess_content_type(self):
        if not self.content_type:
            self.content_type = content_type_for(self.filename)
        return self

    @property
    def size(self) -> int:
        return len(self.content)


def _too_large_message(upload: UploadedFile) -> str:
    return f'"{upload.filename}" is too large ({upload.size / MIB:.1f}MB). Please compress your PDF files.'


class BankStatementSelection:
    """Bank statements picked in the upload step, kept within the intake limits"""

    def __init__(self, max_files: Optional[int] = None, max_file_size: Optional[int] = None,
                 max_total_size: Optional[int] = None):
        self.max_files = max_files or settings.intake.max_files
        self.max_file_size = max_file_size or settings.intake.max_file_size
        self.max_total_size = max_total_size or settings.intake.max_total_size
        self.files: List[UploadedFile] = []

    @property
    def total_size(self) -> int:
        return sum(f.size for f in self.files)

    @property
    def filenames(self) -> List[str]:
        return [f.filename for f in self.files]

    def add(self, uploads: List[UploadedFile]) -> List[str]:
        """
        Add newly picked files.

        Only as many files as there are free slots are considered; each
        oversized file, or file that would push the total over the limit, is
        skipped with a message.

        Returns:
            List of user-facing messages for skipped files
        """
        errors: List[str] = []
        remaining = max(self.max_files - len(self.files), 0)
        running_total = self.total_size

        for upload in uploads[:remaining]:
            if upload.size > self.max_file_size:
                errors.append(_too_large_message(upload))
                continue
            if running_total + upload.size > self.max_total_size:
                errors.append(TOTAL_SIZE_MESSAGE)
                continue
            self.files.append(upload)
            running_total += upload.size

        return errors

    def remove(self, index: int) -> None:
        if 0 <= index < len(self.files):
            del self.files[index]


class SignaturePad:
    """Captured signature; empty until an image has been drawn"""

    def __init__(self):
        self._png: Optional[bytes] = None

    def draw(self, png: bytes) -> None:
        self._png = png or None

    def clear(self) -> None:
        self._png = None

    def is_empty(self) -> bool:
        return self._png is None

    def to_data_url(self) -> str:
        """PNG data URL, or "" for an empty pad (never a blank image)"""
        if self._png is None:
            return ""
        return "data:image/png;base64," + base64.b64encode(self._png).decode("ascii")


def format_submission_date(day: Optional[date] = None) -> str:
    """Long US form, e.g. "January 5, 2025" """
    day = day or date.today()
    return f"{day:%B} {day.day}, {day.year}"


class SubmissionAssembler:
    """
    Builds and posts the multipart payload for the intake endpoint.

    File limits are re-checked before any network call so an oversized
    selection fails fast with the same message the server would return.
    """

    def __init__(
        self,
        endpoint_url: str,
        challenge: Optional[ChallengeProvider] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: Optional[float] = None,
    ):
        self.endpoint_url = endpoint_url
        self.challenge = challenge
        self.http_client = http_client
        self.timeout = timeout or settings.intake.max_duration_seconds

    async def _verification_token(self) -> str:
        if self.challenge is None:
            return ""
        try:
            return await self.challenge(settings.recaptcha.expected_action) or ""
        except Exception as e:
            logger.warning(f"[yellow]⚠️  Verification challenge unavailable:[/yellow] {escape(str(e))}")
            return ""

    def check_files(self, statements: List[UploadedFile]) -> None:
        """Raise SubmissionRejected when the files break the intake limits"""
        limits = settings.intake
        if len(statements) > limits.max_files:
            raise SubmissionRejected(TOO_MANY_FILES_MESSAGE.format(max_files=limits.max_files))
        total = 0
        for upload in statements:
            total += upload.size
            if total > limits.max_total_size:
                raise SubmissionRejected(TOTAL_SIZE_MESSAGE)
            if upload.size > limits.max_file_size:
                raise SubmissionRejected(f'"{upload.filename}" is too large. Please compress your PDF files.')

    async def build(
        self,
        draft: ApplicationDraft,
        signature: SignaturePad,
        second_signature: Optional[SignaturePad],
        statements: List[UploadedFile],
        submission_date: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Assemble the form fields and file parts (no network call besides the challenge)"""
        self.check_files(statements)
        token = await self._verification_token()

        second = ""
        if draft.second_owner_present and second_signature is not None:
            second = second_signature.to_data_url()

        data = {
            "formData": json.dumps(draft.to_payload()),
            "signature": signature.to_data_url(),
            "secondSignature": second,
            "recaptchaToken": token,
            "submissionDate": submission_date or format_submission_date(),
        }
        files = {
            f"bankStatement{index}": (upload.filename, upload.content, upload.content_type)
            for index, upload in enumerate(statements)
        }
        return {"data": data, "files": files}

    async def submit(
        self,
        draft: ApplicationDraft,
        signature: SignaturePad,
        second_signature: Optional[SignaturePad] = None,
        statements: Optional[List[UploadedFile]] = None,
        submission_date: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Post the application.

        Returns:
            The endpoint's JSON body on success

        Raises:
            SubmissionRejected: Local limit violation or a non-2xx response
        """
        payload = await self.build(draft, signature, second_signature, statements or [], submission_date)
        # Always multipart: plain fields are sent as filename-less parts
        parts = [(name, (None, value)) for name, value in payload["data"].items()]
        parts.extend(payload["files"].items())

        client = self.http_client or httpx.AsyncClient(timeout=self.timeout)
        try:
            response = await client.post(self.endpoint_url, files=parts)
        except httpx.HTTPError as e:
            logger.error(f"[red]❌ Submission request failed:[/red] {escape(str(e))}")
            raise SubmissionRejected("Failed to submit application") from e
        finally:
            if self.http_client is None:
                await client.aclose()

        try:
            body = response.json()
        except ValueError:
            body = {}

        if response.is_error:
            message = body.get("error") or "Failed to submit application"
            logger.warning(f"[yellow]⚠️  Submission rejected ({response.status_code}):[/yellow] {escape(str(message))}")
            raise SubmissionRejected(message, status_code=response.status_code, step=body.get("step"))

        logger.info(f"[green]✅ Application submitted[/green] messageId={escape(str(body.get('messageId')))}")
        return body
