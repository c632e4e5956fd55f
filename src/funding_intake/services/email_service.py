"""
Email service for delivering application notifications through the Resend HTTP API
"""
import base64
from html import escape
from typing import List, Optional

import httpx
from pydantic import BaseModel
from rich.markup import escape as escape_markup

from funding_intake.core.config import DocumentConfig, EmailConfig, settings
from funding_intake.schemas.application import ApplicationDraft
from funding_intake.utils.exceptions import EmailDeliveryError, EmailNotConfiguredError
from funding_intake.utils.formatters import format_currency_or_na
from funding_intake.utils.logging import get_logger

logger = get_logger(__name__)


class EmailAttachment(BaseModel):
    filename: str
    content: bytes
    content_type: str = "application/octet-stream"


def build_subject(draft: ApplicationDraft) -> str:
    return f"New Funding Application - {draft.legal_business_name} - {format_currency_or_na(draft.amount_requested)}"


_STYLE = """
    body { font-family: Georgia, 'Times New Roman', serif; line-height: 1.6; color: #1a1a2e;
           max-width: 600px; margin: 0 auto; padding: 0; background-color: #f8fafc; }
    .container { background-color: #ffffff; margin: 20px auto; border-radius: 8px; overflow: hidden; }
    .title-bar { background-color: #2aafab; color: white; text-align: center; padding: 15px 20px;
                 font-size: 18px; font-weight: bold; letter-spacing: 1px; }
    .content { padding: 30px; }
    .intro { color: #64748b; font-size: 14px; margin-bottom: 25px; text-align: center; }
    .card { background: #f8fafc; padding: 20px; border-radius: 8px; margin: 15px 0; border-left: 4px solid #2aafab; }
    .card-label { color: #2aafab; font-size: 11px; text-transform: uppercase; letter-spacing: 1px;
                  margin-bottom: 5px; font-weight: bold; }
    .card-value { color: #0f172a; font-size: 18px; font-weight: bold; }
    .card-sub { color: #64748b; font-size: 13px; margin-top: 5px; }
    .footer { text-align: center; padding: 25px; background-color: #0f172a; color: #94a3b8; font-size: 12px; }
    .footer-brand { color: #2aafab; font-weight: bold; font-size: 14px; margin-bottom: 5px; }
"""


def _card(label: str, value: str, *subs: str) -> str:
    sub_html = "".join(f'<div class="card-sub">{escape(sub)}</div>' for sub in subs)
    return (
        '<div class="card">'
        f'<div class="card-label">{escape(label)}</div>'
        f'<div class="card-value">{escape(value)}</div>'
        f"{sub_html}"
        "</div>"
    )


def build_notification_html(
    draft: ApplicationDraft,
    bank_statement_names: List[str],
    submission_date: str,
    document: Optional[DocumentConfig] = None,
) -> str:
    """HTML body summarizing a new application for the submissions mailbox"""
    document = document or settings.document

    cards = [
        _card(
            "Business Name",
            draft.legal_business_name,
            *([f"DBA: {draft.dba}"] if draft.dba else []),
        ),
        _card(
            "Amount Requested",
            format_currency_or_na(draft.amount_requested),
            f"Use of Funds: {draft.use_of_funds}",
        ),
        _card(
            "Primary Contact",
            draft.owner_full_name,
            draft.owner_email,
            f"{draft.owner_phone_country} {draft.owner_phone}".strip(),
        ),
    ]
    if draft.funding_specialist_name:
        cards.append(_card("Funding Specialist", draft.funding_specialist_name))
    if bank_statement_names:
        cards.append(
            _card("Attached Bank Statements", f"{len(bank_statement_names)} file(s)",
                  *[f"• {name}" for name in bank_statement_names])
        )

    return f"""<!DOCTYPE html>
<html>
<head>
  <meta charset="utf-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <style>{_STYLE}</style>
</head>
<body>
  <div class="container">
    <div class="title-bar">NEW FUNDING APPLICATION</div>
    <div class="content">
      <p class="intro">A new business funding application has been submitted. The complete application is attached as a PDF document.</p>
      {"".join(cards)}
    </div>
    <div class="footer">
      <div class="footer-brand">{escape(document.company_name)}</div>
      <div>{escape(document.company_tagline)}</div>
      <div style="margin-top: 10px;">Application submitted on {escape(submission_date or "")}</div>
    </div>
  </div>
</body>
</html>
"""


class EmailService:
    """Service for sending notification emails"""

    def __init__(self, config: Optional[EmailConfig] = None, http_client: Optional[httpx.AsyncClient] = None):
        self.config = config or settings.email
        self.http_client = http_client

    @property
    def configured(self) -> bool:
        return self.config.configured

    def _get_headers(self) -> dict:
        return {
            "Authorization": f"Bearer {self.config.api_key}",
            "Content-Type": "application/json",
        }

    async def send(self, subject: str, html: str, attachments: List[EmailAttachment]) -> str:
        """
        Send an email to the configured recipients.

        Args:
            subject: Message subject
            html: HTML body
            attachments: Files to attach

        Returns:
            Provider message id

        Raises:
            EmailNotConfiguredError: No API key configured
            EmailDeliveryError: Provider rejected the message or was unreachable
        """
        if not self.configured:
            raise EmailNotConfiguredError()

        payload = {
            "from": self.config.sender,
            "to": self.config.recipients,
            "subject": subject,
            "html": html,
            "attachments": [
                {
                    "filename": att.filename,
                    "content": base64.b64encode(att.content).decode("ascii"),
                    "content_type": att.content_type,
                }
                for att in attachments
            ],
        }
        total_bytes = sum(len(att.content) for att in attachments)
        logger.info(
            f"[cyan]📧 Sending email[/cyan] with {len(attachments)} attachment(s) ({total_bytes} bytes)"
        )

        client = self.http_client or httpx.AsyncClient(timeout=self.config.timeout)
        try:
            response = await client.post(self.config.api_url, headers=self._get_headers(), json=payload)
        except httpx.HTTPError as e:
            logger.error(f"[red]❌ Email provider unreachable:[/red] {escape_markup(str(e))}")
            raise EmailDeliveryError(reason="Email provider unreachable") from e
        finally:
            if self.http_client is None:
                await client.aclose()

        if response.is_error:
            logger.error(f"[red]❌ Email send failed:[/red] {response.status_code} - {escape_markup(response.text)}")
            raise EmailDeliveryError(reason=f"Email provider returned {response.status_code}")

        message_id = response.json().get("id")
        logger.info(f"[green]✅ Email sent[/green] messageId={escape_markup(str(message_id))}")
        return message_id
