"""
Operator-visibility reporting for provider failures and unexpected errors
"""
import logging
from typing import Any, Dict, Optional

from rich.markup import escape

from funding_intake.utils.logging import ops_logger


def applicant_context(application: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """
    Triage context pulled from a (possibly partial) application payload.
    Returns an empty dict when parsing never got far enough to have one.
    """
    if not application:
        return {}
    first = application.get("ownerFirstName") or ""
    last = application.get("ownerLastName") or ""
    country = application.get("ownerPhoneCountry") or ""
    phone = application.get("ownerPhone") or ""
    return {
        "business_name": application.get("legalBusinessName"),
        "contact_name": f"{first} {last}".strip(),
        "contact_email": application.get("ownerEmail"),
        "contact_phone": f"{country} {phone}".strip(),
        "amount_requested": application.get("amountRequested"),
        "funding_specialist": application.get("fundingSpecialistName") or "N/A",
    }


def report_incident(
    feature: str,
    error_type: str,
    error: Optional[BaseException] = None,
    message: Optional[str] = None,
    level: int = logging.ERROR,
    **extra: Any,
) -> None:
    """
    Record an incident on the ops channel.

    Args:
        feature: Area of the system (e.g. "email-send", "crm-lead-creation")
        error_type: Short classification (e.g. "configuration", "send_failure")
        error: Exception that triggered the incident, if any
        message: Human-readable summary when there is no exception
        level: Logging level for the record
        **extra: Triage context (business name, contact info, step, duration...)
    """
    # Applicant and provider text is escaped so it never parses as markup
    summary = escape(message or (f"{type(error).__name__}: {error}" if error else "incident"))
    context = escape(", ".join(
        f"{key}={value!r}" for key, value in extra.items() if value not in (None, "", [])
    ))
    ops_logger.log(
        level,
        f"[bold red]🚨 {feature}[/bold red] [yellow]{error_type}[/yellow] - {summary}"
        + (f" [dim]({context})[/dim]" if context else ""),
        exc_info=error if error is not None and level >= logging.ERROR else None,
        extra={"feature": feature, "error_type": error_type, "context": extra},
    )
