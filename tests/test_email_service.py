"""
Tests for the notification email
"""
import base64
import json

import httpx
import pytest

from funding_intake.core.config import EmailConfig
from funding_intake.services.email_service import (
    EmailAttachment,
    EmailService,
    build_notification_html,
    build_subject,
)
from funding_intake.utils.exceptions import EmailDeliveryError, EmailNotConfiguredError

CONFIG = EmailConfig(api_key="re_test", recipients=["inbox@example.com"])


async def test_not_configured():
    with pytest.raises(EmailNotConfiguredError) as exc:
        await EmailService(EmailConfig()).send("s", "<p></p>", [])
    assert exc.value.status_code == 500
    assert exc.value.detail == "Email service not configured"


async def test_send_returns_message_id(mock_http):
    seen = {}

    def handler(request):
        seen["auth"] = request.headers["Authorization"]
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"id": "msg_123"})

    attachment = EmailAttachment(filename="app.pdf", content=b"%PDF-1.4", content_type="application/pdf")
    message_id = await EmailService(CONFIG, mock_http(handler)).send("Subject", "<p>hi</p>", [attachment])

    assert message_id == "msg_123"
    assert seen["auth"] == "Bearer re_test"
    assert seen["body"]["to"] == ["inbox@example.com"]
    assert seen["body"]["subject"] == "Subject"
    assert seen["body"]["attachments"] == [
        {"filename": "app.pdf", "content": base64.b64encode(b"%PDF-1.4").decode(), "content_type": "application/pdf"}
    ]


async def test_provider_error_status(mock_http):
    service = EmailService(CONFIG, mock_http(lambda r: httpx.Response(422, json={"message": "bad attachment"})))
    with pytest.raises(EmailDeliveryError) as exc:
        await service.send("s", "<p></p>", [])
    assert exc.value.detail == "Failed to send email"
    assert exc.value.reason == "Email provider returned 422"


async def test_unreachable_provider(mock_http):
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(EmailDeliveryError) as exc:
        await EmailService(CONFIG, mock_http(handler)).send("s", "<p></p>", [])
    assert exc.value.reason == "Email provider unreachable"


def test_subject(draft):
    assert build_subject(draft) == "New Funding Application - Acme Widgets LLC - $50,000"


def test_html_summarizes_and_escapes(application_payload):
    from funding_intake.schemas.application import ApplicationDraft

    application_payload["legalBusinessName"] = "Smith & <Sons>"
    html = build_notification_html(
        ApplicationDraft.model_validate(application_payload), ["jan.pdf", "feb.pdf"], "January 5, 2025"
    )

    assert "Smith &amp; &lt;Sons&gt;" in html
    assert "<Sons>" not in html
    assert "2 file(s)" in html
    assert "• jan.pdf" in html
    assert "Tom Jones" in html
    assert "Application submitted on January 5, 2025" in html
