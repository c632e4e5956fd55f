"""
Lead router: creates the CRM lead, assigns its owner and attaches the bank statements
"""
import json
from typing import Any, Dict, List, Optional

import httpx
from pydantic import BaseModel, Field
from rich.markup import escape

from funding_intake.core.config import settings
from funding_intake.external.crm.client import ZohoCRMClient
from funding_intake.external.crm.zoho_crm import validate_lead_data
from funding_intake.services.round_robin import CRMCursorSource, DatabaseCursorStore, RoundRobinAssigner
from funding_intake.services.submission import UploadedFile
from funding_intake.utils.helpers import safe_get
from funding_intake.utils.logging import get_logger

logger = get_logger(__name__)


class LeadRoutingResult(BaseModel):
    """Outcome of one lead creation attempt"""
    success: bool
    lead_id: Optional[str] = None
    assigned_to: Optional[str] = None
    error: Optional[str] = None
    validation_errors: List[str] = Field(default_factory=list)
    raw_response: Optional[Dict[str, Any]] = None


def _failure_message(entry: Optional[Dict[str, Any]]) -> str:
    entry = entry or {}
    parts = [
        entry.get("message") or "Unknown error",
        f"(code: {entry['code']})" if entry.get("code") else "",
        f"details: {json.dumps(entry['details'])}" if entry.get("details") else "",
    ]
    return " ".join(part for part in parts if part)


def build_cursor(client: ZohoCRMClient):
    if settings.round_robin.cursor_store == "database":
        return DatabaseCursorStore()
    return CRMCursorSource(client)


class LeadRouter:
    """
    Creates a Zoho lead from a mapped record.

    Never raises: every failure is returned as an unsuccessful LeadRoutingResult
    so the caller decides whether CRM problems are fatal.
    """

    def __init__(self, client: Optional[ZohoCRMClient] = None, assigner: Optional[RoundRobinAssigner] = None):
        self.client = client or ZohoCRMClient()
        self.assigner = assigner or RoundRobinAssigner(build_cursor(self.client))

    async def route(
        self,
        record: Dict[str, Any],
        attachments: Optional[List[UploadedFile]] = None,
        funding_specialist_name: Optional[str] = None,
    ) -> LeadRoutingResult:
        valid, errors = validate_lead_data(record)
        if not valid:
            logger.warning(f"[yellow]⚠️  Zoho lead validation failed:[/yellow] {escape(str(errors))}")
            return LeadRoutingResult(
                success=False,
                error=f"Validation failed: {', '.join(errors)}",
                validation_errors=errors,
            )

        try:
            access_token = await self.client.access_token()
            rep = await self.assigner.assign(access_token, funding_specialist_name)

            lead = dict(record)
            if rep is not None:
                lead["Owner"] = rep.id

            response = await self.client.create_lead(access_token, lead)
            if response.is_error:
                return LeadRoutingResult(success=False, error=f"API error: {response.status_code}")

            result = response.json()
            logger.debug(f"[dim]Lead creation response:[/dim] {escape(str(result))}")
            entry = safe_get(result, "data", 0)

            if not entry or entry.get("status") != "success":
                return LeadRoutingResult(success=False, error=_failure_message(entry), raw_response=result)

            lead_id = safe_get(entry, "details", "id")
            logger.info(
                f"[green]✅ Created Zoho lead[/green] [cyan]{escape(str(lead_id))}[/cyan] "
                f"assigned to {rep.name if rep else 'default owner'}"
            )

            await self._upload_attachments(access_token, lead_id, attachments or [])

            return LeadRoutingResult(success=True, lead_id=lead_id, assigned_to=rep.name if rep else None)
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"[red]❌ Error creating Zoho lead:[/red] {escape(str(e))}")
            return LeadRoutingResult(success=False, error=str(e))
        except Exception as e:
            # CRMAPIError / CRMNotConfiguredError carry their message in detail
            message = getattr(e, "detail", None) or str(e) or "Unknown error"
            logger.error(f"[red]❌ Error creating Zoho lead:[/red] {escape(str(message))}")
            return LeadRoutingResult(success=False, error=message)

    async def _upload_attachments(self, access_token: str, lead_id: str, attachments: List[UploadedFile]) -> None:
        if not attachments:
            return
        logger.info(f"[cyan]Uploading {len(attachments)} attachment(s) to lead {escape(str(lead_id))}[/cyan]")
        for attachment in attachments:
            await self.client.upload_attachment(
                access_token,
                lead_id,
                attachment.filename,
                attachment.content,
                attachment.content_type,
            )
