"""
Tests for Zoho lead creation, owner assignment and attachment upload
"""
import json

import httpx
import pytest

from funding_intake.core.config import CRMConfig, settings
from funding_intake.external.crm.client import ZohoCRMClient
from funding_intake.external.crm.zoho_crm import format_application_for_crm
from funding_intake.services.lead_router import LeadRouter
from funding_intake.services.round_robin import CRMCursorSource, RoundRobinAssigner
from funding_intake.services.submission import UploadedFile

CRM_CONFIG = CRMConfig(client_id="id", client_secret="secret", refresh_token="refresh")
TOM_JONES_ID = "6522534000022419009"


class FakeZoho:
    """Answers the Zoho endpoints and records what was sent"""

    def __init__(self, last_owner_id=None, create_status=200, create_body=None, attachment_status=200):
        self.last_owner_id = last_owner_id
        self.create_status = create_status
        self.create_body = create_body or {
            "data": [{"code": "SUCCESS", "status": "success", "details": {"id": "lead-1"}, "message": "record added"}]
        }
        self.attachment_status = attachment_status
        self.requests = []
        self.created = None

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if path == "/oauth/v2/token":
            return httpx.Response(200, json={"access_token": "tok", "expires_in": 3600})
        if path.endswith("/Leads/search"):
            if self.last_owner_id is None:
                return httpx.Response(204)
            return httpx.Response(200, json={"data": [{"Owner": {"id": self.last_owner_id}}]})
        if path.endswith("/Attachments"):
            return httpx.Response(self.attachment_status, json={})
        if path.endswith("/Leads"):
            self.created = json.loads(request.content)["data"][0]
            return httpx.Response(self.create_status, json=self.create_body)
        return httpx.Response(404)

    def paths(self):
        return [request.url.path for request in self.requests]


def _router(fake, mock_http):
    client = ZohoCRMClient(CRM_CONFIG, http_client=mock_http(fake))
    return LeadRouter(client, RoundRobinAssigner(CRMCursorSource(client), settings.round_robin.roster))


async def test_named_specialist_bypasses_round_robin(draft, mock_http):
    fake = FakeZoho(last_owner_id="6522534000001975859")
    result = await _router(fake, mock_http).route(
        format_application_for_crm(draft), funding_specialist_name="Tom Jones"
    )

    assert result.success
    assert result.lead_id == "lead-1"
    assert result.assigned_to == "Tom Jones"
    assert fake.created["Owner"] == TOM_JONES_ID
    assert not any(path.endswith("/search") for path in fake.paths())


async def test_round_robin_assigns_next_rep(draft, mock_http):
    roster = settings.round_robin.roster
    fake = FakeZoho(last_owner_id=roster[3].id)
    result = await _router(fake, mock_http).route(format_application_for_crm(draft), funding_specialist_name="")

    assert result.success
    assert result.assigned_to == roster[4].name
    assert fake.created["Owner"] == roster[4].id


async def test_round_robin_without_prior_lead(draft, mock_http):
    fake = FakeZoho(last_owner_id=None)
    result = await _router(fake, mock_http).route(format_application_for_crm(draft))
    assert result.assigned_to == settings.round_robin.roster[0].name


async def test_validation_failure_makes_no_network_call(draft, mock_http):
    record = format_application_for_crm(draft)
    record.pop("Email")
    fake = FakeZoho()

    result = await _router(fake, mock_http).route(record)

    assert not result.success
    assert result.validation_errors == ["Email is required"]
    assert result.error == "Validation failed: Email is required"
    assert fake.requests == []


async def test_invalid_email_is_reported(draft, mock_http):
    record = format_application_for_crm(draft)
    record["Email"] = "jane-at-acme"
    fake = FakeZoho()

    result = await _router(fake, mock_http).route(record)

    assert result.validation_errors == ["Invalid email format: jane-at-acme"]
    assert fake.requests == []


async def test_api_error_status(draft, mock_http):
    fake = FakeZoho(create_status=500, create_body={"code": "INTERNAL_ERROR"})
    result = await _router(fake, mock_http).route(format_application_for_crm(draft), funding_specialist_name="Tom Jones")
    assert not result.success
    assert result.error == "API error: 500"


async def test_record_level_failure(draft, mock_http):
    body = {"data": [{"code": "INVALID_DATA", "status": "error", "message": "invalid data", "details": {"api_name": "EIN"}}]}
    fake = FakeZoho(create_body=body)
    result = await _router(fake, mock_http).route(format_application_for_crm(draft), funding_specialist_name="Tom Jones")

    assert not result.success
    assert result.error == 'invalid data (code: INVALID_DATA) details: {"api_name": "EIN"}'
    assert result.raw_response == body


async def test_attachments_uploaded_and_failures_tolerated(draft, mock_http):
    fake = FakeZoho(attachment_status=500)
    statements = [
        UploadedFile(filename="jan.pdf", content=b"%PDF-1"),
        UploadedFile(filename="feb.pdf", content=b"%PDF-2"),
    ]

    result = await _router(fake, mock_http).route(
        format_application_for_crm(draft), statements, funding_specialist_name="Tom Jones"
    )

    assert result.success
    uploads = [path for path in fake.paths() if path.endswith("/Attachments")]
    assert uploads == ["/crm/v2/Leads/lead-1/Attachments"] * 2


async def test_missing_credentials_is_a_failed_result(draft):
    router = LeadRouter(ZohoCRMClient(CRMConfig()), RoundRobinAssigner(None, settings.round_robin.roster))
    result = await router.route(format_application_for_crm(draft))
    assert not result.success
    assert result.error == "Zoho CRM credentials not configured"


@pytest.mark.parametrize("status", [400, 401])
async def test_token_refusal_is_a_failed_result(draft, mock_http, status):
    client = ZohoCRMClient(CRM_CONFIG, http_client=mock_http(lambda request: httpx.Response(status, text="invalid_code")))
    router = LeadRouter(client, RoundRobinAssigner(CRMCursorSource(client), settings.round_robin.roster))
    result = await router.route(format_application_for_crm(draft))
    assert not result.success
    assert result.error == f"Failed to get Zoho access token: {status}"
