"""
Tests for the reCAPTCHA Enterprise assessment
"""
import json
from unittest.mock import patch

import httpx

from funding_intake.core.config import RecaptchaConfig
from funding_intake.services.verification_service import VerificationService

CONFIG = RecaptchaConfig(api_key="key", project_id="proj", site_key="site")


def _assessment(valid=True, score=0.9, invalid_reason=None):
    body = {"tokenProperties": {"valid": valid}, "riskAnalysis": {"score": score}}
    if invalid_reason:
        body["tokenProperties"]["invalidReason"] = invalid_reason
    return body


async def test_unconfigured_skips_verification():
    result = await VerificationService(RecaptchaConfig()).verify("anything")
    assert result.success
    assert result.skipped


async def test_passing_score(mock_http):
    seen = {}

    def handler(request):
        seen["url"] = request.url
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json=_assessment(score=0.9))

    result = await VerificationService(CONFIG, mock_http(handler)).verify("tok")

    assert result.success
    assert result.score == 0.9
    assert seen["url"].path == "/v1/projects/proj/assessments"
    assert seen["url"].params["key"] == "key"
    assert seen["body"]["event"] == {"token": "tok", "expectedAction": "submit_application", "siteKey": "site"}


async def test_low_score_fails(mock_http):
    result = await VerificationService(CONFIG, mock_http(lambda r: httpx.Response(200, json=_assessment(score=0.1)))).verify("tok")
    assert not result.success
    assert result.reason == "low_score"


async def test_threshold_is_inclusive(mock_http):
    result = await VerificationService(CONFIG, mock_http(lambda r: httpx.Response(200, json=_assessment(score=0.5)))).verify("tok")
    assert result.success


async def test_invalid_token(mock_http):
    body = _assessment(valid=False, score=None, invalid_reason="EXPIRED")
    result = await VerificationService(CONFIG, mock_http(lambda r: httpx.Response(200, json=body))).verify("tok")
    assert not result.success
    assert result.reason == "EXPIRED"


async def test_provider_error_is_reported(mock_http):
    body = {"error": {"code": 403, "message": "API key not valid"}}
    with patch("funding_intake.services.verification_service.report_incident") as report:
        result = await VerificationService(CONFIG, mock_http(lambda r: httpx.Response(403, json=body))).verify("tok")

    assert not result.success
    assert result.reason == "provider_error"
    report.assert_called_once_with("recaptcha-verification", "provider_error", message="API key not valid")


async def test_unreachable_provider_is_reported(mock_http):
    def handler(request):
        raise httpx.ConnectError("down", request=request)

    with patch("funding_intake.services.verification_service.report_incident") as report:
        result = await VerificationService(CONFIG, mock_http(handler)).verify("tok")

    assert not result.success
    assert report.call_count == 1
