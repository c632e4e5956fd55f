"""
Human-verification (reCAPTCHA Enterprise) assessment service
"""
from typing import Optional

import httpx
from pydantic import BaseModel
from rich.markup import escape

from funding_intake.core.config import RecaptchaConfig, settings
from funding_intake.utils.incidents import report_incident
from funding_intake.utils.logging import get_logger

logger = get_logger(__name__)


class VerificationResult(BaseModel):
    success: bool
    score: Optional[float] = None
    skipped: bool = False
    reason: str = ""


class VerificationService:
    """Scores a client token; missing configuration passes every token"""

    def __init__(self, config: Optional[RecaptchaConfig] = None, http_client: Optional[httpx.AsyncClient] = None):
        self.config = config or settings.recaptcha
        self.http_client = http_client

    def _assessment_url(self) -> str:
        return f"{self.config.base_url}/projects/{self.config.project_id}/assessments"

    async def verify(self, token: str) -> VerificationResult:
        if not self.config.configured:
            logger.warning("[yellow]⚠️  reCAPTCHA not configured, skipping verification[/yellow]")
            return VerificationResult(success=True, skipped=True)

        body = {
            "event": {
                "token": token,
                "expectedAction": self.config.expected_action,
                "siteKey": self.config.site_key,
            }
        }

        client = self.http_client or httpx.AsyncClient(timeout=self.config.timeout)
        try:
            response = await client.post(
                self._assessment_url(),
                params={"key": self.config.api_key},
                json=body,
            )
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            report_incident("recaptcha-verification", "provider_error", error=e)
            return VerificationResult(success=False, reason="provider_error")
        finally:
            if self.http_client is None:
                await client.aclose()

        error = data.get("error")
        if error:
            if isinstance(error, dict):
                error = error.get("message", error)
            report_incident("recaptcha-verification", "provider_error", message=str(error))
            return VerificationResult(success=False, reason="provider_error")

        token_properties = data.get("tokenProperties") or {}
        score = (data.get("riskAnalysis") or {}).get("score")

        if not token_properties.get("valid"):
            reason = token_properties.get("invalidReason", "invalid_token")
            logger.warning(f"[yellow]⚠️  reCAPTCHA token invalid:[/yellow] {escape(str(reason))}")
            return VerificationResult(success=False, score=score, reason=str(reason))

        passed = score is not None and score >= self.config.min_score
        logger.info(f"[cyan]🛡️  reCAPTCHA score[/cyan] {score} (pass={passed})")
        return VerificationResult(success=passed, score=score, reason="" if passed else "low_score")
