"""
Zoho CRM REST API client
"""
from typing import Any, Dict, Optional

import httpx
from rich.markup import escape

from funding_intake.core.config import CRMConfig, settings
from funding_intake.utils.exceptions import CRMAPIError, CRMNotConfiguredError
from funding_intake.utils.logging import get_logger

logger = get_logger(__name__)


class ZohoCRMClient:
    """
    Client for the Zoho CRM v2 API.
    Handles the refresh-token exchange, lead search, lead creation and attachments.
    """

    def __init__(self, config: Optional[CRMConfig] = None, http_client: Optional[httpx.AsyncClient] = None):
        self.config = config or settings.crm
        self.http_client = http_client

    @property
    def configured(self) -> bool:
        return self.config.configured

    def _module_url(self, *parts: str) -> str:
        base = self.config.api_base_url.rstrip("/")
        return "/".join([f"{base}/crm/v2/{self.config.module}", *parts])

    @staticmethod
    def _get_headers(access_token: str) -> Dict[str, str]:
        return {"Authorization": f"Zoho-oauthtoken {access_token}"}

    async def _request(self, method: str, url: str, **kwargs) -> httpx.Response:
        client = self.http_client or httpx.AsyncClient(timeout=self.config.timeout)
        try:
            logger.debug(f"[cyan]Zoho request:[/cyan] {method} {escape(url)}")
            return await client.request(method, url, **kwargs)
        finally:
            if self.http_client is None:
                await client.aclose()

    async def access_token(self) -> str:
        """
        Exchange the configured refresh token for an access token.

        Raises:
            CRMNotConfiguredError: Credentials missing
            CRMAPIError: Token endpoint refused the exchange
        """
        if not self.configured:
            raise CRMNotConfiguredError()

        url = f"{self.config.accounts_url.rstrip('/')}/oauth/v2/token"
        try:
            response = await self._request(
                "POST",
                url,
                data={
                    "grant_type": "refresh_token",
                    "client_id": self.config.client_id,
                    "client_secret": self.config.client_secret,
                    "refresh_token": self.config.refresh_token,
                },
            )
        except httpx.HTTPError as e:
            logger.error(f"[red]❌ HTTP error requesting Zoho access token:[/red] {escape(str(e))}")
            raise CRMAPIError(detail="Failed to get Zoho access token") from e

        if response.is_error:
            logger.error(
                f"[red]❌ Failed to get Zoho access token:[/red] "
                f"[yellow]{response.status_code}[/yellow] - {escape(response.text)}"
            )
            raise CRMAPIError(detail=f"Failed to get Zoho access token: {response.status_code}")

        token = response.json().get("access_token")
        if not token:
            logger.error("[red]❌ Zoho token response carried no access_token[/red]")
            raise CRMAPIError(detail="Failed to get Zoho access token")
        return token

    async def search_latest_lead(self, access_token: str, lead_source: Optional[str] = None) -> Optional[Dict[str, Any]]:
        """
        Most recently created lead carrying the given lead source.

        Returns:
            The lead record, or None when the search matched nothing

        Raises:
            httpx.HTTPError: Transport failure or error status
        """
        params = {
            "criteria": f"(Lead_Source:equals:{lead_source or self.config.lead_source})",
            "sort_by": "Created_Time",
            "sort_order": "desc",
            "per_page": "1",
        }
        response = await self._request(
            "GET", self._module_url("search"), headers=self._get_headers(access_token), params=params
        )
        # Zoho answers an empty search with 204 and no body
        if response.status_code == 204:
            return None
        response.raise_for_status()

        data = response.json().get("data") or []
        return data[0] if data else None

    async def create_lead(self, access_token: str, record: Dict[str, Any]) -> httpx.Response:
        """
        POST a single lead record.

        The raw response is returned so the caller can inspect per-record status.

        Raises:
            httpx.HTTPError: Transport failure
        """
        headers = self._get_headers(access_token)
        headers["Content-Type"] = "application/json"
        response = await self._request("POST", self._module_url(), headers=headers, json={"data": [record]})
        logger.debug(f"[dim]Response status:[/dim] {response.status_code}")
        if response.is_error:
            logger.error(
                f"[red]❌ Zoho CRM API error:[/red] "
                f"[yellow]{response.status_code}[/yellow] - {escape(response.text)}"
            )
        return response

    async def upload_attachment(
        self,
        access_token: str,
        record_id: str,
        filename: str,
        content: bytes,
        content_type: str,
    ) -> bool:
        """Attach a file to a lead; failures are logged and reported as False"""
        try:
            response = await self._request(
                "POST",
                self._module_url(record_id, "Attachments"),
                headers=self._get_headers(access_token),
                files={"file": (filename, content, content_type)},
            )
        except httpx.HTTPError as e:
            logger.error(f"[red]❌ Error uploading attachment[/red] {escape(filename)}: {escape(str(e))}")
            return False

        if response.is_error:
            logger.error(
                f"[red]❌ Failed to upload attachment[/red] {escape(filename)}: "
                f"[yellow]{response.status_code}[/yellow] - {escape(response.text)}"
            )
            return False

        logger.info(f"[green]✅ Uploaded attachment:[/green] [cyan]{escape(filename)}[/cyan]")
        return True
