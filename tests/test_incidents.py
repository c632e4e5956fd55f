"""
Tests for incident reporting on the ops channel
"""
from funding_intake.utils.incidents import applicant_context, report_incident
from funding_intake.utils.logging import ops_logger


def _console():
    return ops_logger.handlers[0].console


def test_incident_with_bracketed_context_is_logged():
    with _console().capture() as captured:
        report_incident(
            "email-send",
            "send_failure",
            message="provider said [/i]",
            business_name="Acme [/b] Holdings",
        )

    output = captured.get()
    assert "email-send" in output
    assert "[/i]" in output
    assert "[/b]" in output


def test_incident_from_exception_is_logged():
    try:
        raise RuntimeError("bad [bold]value")
    except RuntimeError as e:
        with _console().capture() as captured:
            report_incident("application-submit", "unexpected_error", error=e, failed_step="generating_pdf")

    output = captured.get()
    assert "RuntimeError" in output
    assert "[bold]" in output


def test_applicant_context(application_payload):
    assert applicant_context(application_payload) == {
        "business_name": "Acme Widgets LLC",
        "contact_name": "Jane Doe",
        "contact_email": "jane@acmewidgets.com",
        "contact_phone": "+1 (217) 555-0199",
        "amount_requested": "50000",
        "funding_specialist": "Tom Jones",
    }
    assert applicant_context(None) == {}
