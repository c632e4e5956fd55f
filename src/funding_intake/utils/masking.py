"""
PII transforms for the transmitted application document.

The on-screen SSN mask lives in utils.formatters (format_ssn_for_screen);
the document carries the full SSN for underwriting. Keep the two separate.
"""
from typing import Optional

from funding_intake.utils.formatters import digits_only

MASKED_EMAIL_FALLBACK = "***@***.***"
MASKED_PHONE_FALLBACK = "***-***-****"


def format_ssn_for_underwriting(value: Optional[str]) -> str:
    """Full SSN grouped AAA-BB-CCCC; values that are not 9 digits pass through"""
    if not value:
        return "N/A"
    digits = digits_only(value)
    if len(digits) != 9:
        return value
    return f"{digits[:3]}-{digits[3:5]}-{digits[5:]}"


def mask_email(email: Optional[str]) -> str:
    """
    Keep the first two characters of the local part and the first character
    of the domain name; the remaining domain labels stay readable.

    >>> mask_email("john.smith@example.com")
    'jo******@e****.com'
    """
    if not email or "@" not in email:
        return MASKED_EMAIL_FALLBACK

    local, domain = email.split("@", 1)
    if len(local) > 2:
        masked_local = local[:2] + "*" * min(len(local) - 2, 6)
    else:
        masked_local = "*" * len(local)

    labels = domain.split(".")
    if len(labels) > 1:
        head = labels[0]
        masked_domain = head[:1] + "*" * min(max(len(head) - 1, 0), 4) + "." + ".".join(labels[1:])
    else:
        masked_domain = "****.com"

    return f"{masked_local}@{masked_domain}"


def mask_phone(phone: Optional[str], country_code: Optional[str] = None) -> str:
    """Country code, stars, and the last four digits only"""
    if not phone:
        return MASKED_PHONE_FALLBACK
    digits = digits_only(phone)
    if len(digits) < 4:
        return MASKED_PHONE_FALLBACK
    prefix = f"{country_code} " if country_code else ""
    return f"{prefix}***-***-{digits[-4:]}"
