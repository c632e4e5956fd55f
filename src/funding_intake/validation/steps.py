"""
Wizard step definitions and per-step required-field checks
"""
import re
from typing import List, NamedTuple, Optional
from urllib.parse import urlsplit

from pydantic import BaseModel

from funding_intake.schemas.application import ApplicationDraft
from funding_intake.validation.drivers_license import validate_drivers_license


class Step(BaseModel):
    class Config:
        frozen = True

    id: int
    title: str
    short_title: str


STEPS = (
    Step(id=1, title="Funding Request", short_title="Funding"),
    Step(id=2, title="Business Information", short_title="Business"),
    Step(id=3, title="Primary Owner", short_title="Owner"),
    Step(id=4, title="Additional Owners", short_title="Co-Owners"),
    Step(id=5, title="Financial Details", short_title="Financials"),
    Step(id=6, title="Property Ownership", short_title="Property"),
    Step(id=7, title="Bank Statements", short_title="Documents"),
    Step(id=8, title="Review & Sign", short_title="Sign"),
)
FIRST_STEP = STEPS[0].id
LAST_STEP = STEPS[-1].id

NO_WEBSITE_TOKENS = frozenset({"n/a", "na", "none", "-"})
WEBSITE_ERROR = "Website must be a valid URL (e.g., https://www.example.com)"

# Code points a URL host may never contain
_FORBIDDEN_HOST_CHARS = re.compile(r"[\s#%/:<>?@\[\\\]^|]")


class Signatures(NamedTuple):
    """Whether each signature pad holds any strokes"""
    primary: bool = False
    second: bool = False


def normalize_website(value: Optional[str]) -> Optional[str]:
    """
    Lower-cased URL with a default https scheme, or None when the value is
    empty, a "no website" token, or has no dotted hostname.
    """
    if not value or not value.strip():
        return None
    url = value.strip().lower()
    if url in NO_WEBSITE_TOKENS:
        return None
    if not url.startswith("http://") and not url.startswith("https://"):
        url = "https://" + url
    try:
        hostname = urlsplit(url).hostname or ""
    except ValueError:
        return None
    if "." not in hostname or _FORBIDDEN_HOST_CHARS.search(hostname):
        return None
    return url


def is_valid_website(value: Optional[str]) -> bool:
    """Empty and placeholder tokens are valid (the field is optional)"""
    if not value or not value.strip():
        return True
    if value.strip().lower() in NO_WEBSITE_TOKENS:
        return True
    return normalize_website(value) is not None


def _require(errors: List[str], value: str, message: str) -> None:
    if not value:
        errors.append(message)


def _validate_funding(draft: ApplicationDraft) -> List[str]:
    errors: List[str] = []
    _require(errors, draft.amount_requested, "Amount requested is required")
    _require(errors, draft.use_of_funds, "Use of funds is required")
    return errors


def _validate_business(draft: ApplicationDraft) -> List[str]:
    errors: List[str] = []
    _require(errors, draft.legal_business_name, "Legal business name is required")
    _require(errors, draft.business_address, "Business address is required")
    _require(errors, draft.business_phone, "Business phone is required")
    _require(errors, draft.business_start_date, "Business start date is required")
    _require(errors, draft.legal_structure, "Legal structure is required")
    _require(errors, draft.state_of_incorporation, "State of incorporation is required")
    _require(errors, draft.federal_tax_id, "Federal Tax ID is required")
    _require(errors, draft.industry, "Industry is required")
    if not is_valid_website(draft.website):
        errors.append(WEBSITE_ERROR)
    return errors


def _validate_primary_owner(draft: ApplicationDraft) -> List[str]:
    errors: List[str] = []
    _require(errors, draft.owner_first_name, "First name is required")
    _require(errors, draft.owner_last_name, "Last name is required")
    _require(errors, draft.owner_title, "Title is required")
    _require(errors, draft.ownership_percentage, "Ownership percentage is required")
    _require(errors, draft.owner_home_address, "Home address is required")
    if len(draft.owner_ssn) != 9 or not draft.owner_ssn.isdigit():
        errors.append("Valid SSN is required")
    _require(errors, draft.owner_dob, "Date of birth is required")
    _require(errors, draft.owner_phone, "Phone number is required")
    _require(errors, draft.owner_email, "Email is required")
    # License is optional; once entered it must be complete for its state
    if draft.owner_drivers_license:
        valid, message = validate_drivers_license(
            draft.owner_drivers_license, draft.owner_drivers_license_state
        )
        if not valid:
            errors.append(message)
    return errors


def _validate_second_owner(draft: ApplicationDraft) -> List[str]:
    errors: List[str] = []
    if not draft.has_second_owner:
        errors.append("Please indicate if there is a second owner")
    if not draft.second_owner_present:
        return errors

    _require(errors, draft.second_owner_first_name, "Second owner first name is required")
    _require(errors, draft.second_owner_last_name, "Second owner last name is required")
    _require(errors, draft.second_owner_title, "Second owner title is required")
    _require(errors, draft.second_owner_ownership_percentage, "Second owner ownership percentage is required")
    _require(errors, draft.second_owner_home_address, "Second owner home address is required")
    if len(draft.second_owner_ssn) != 9 or not draft.second_owner_ssn.isdigit():
        errors.append("Second owner valid SSN is required")
    _require(errors, draft.second_owner_dob, "Second owner date of birth is required")
    _require(errors, draft.second_owner_phone, "Second owner phone is required")
    _require(errors, draft.second_owner_email, "Second owner email is required")
    if draft.second_owner_drivers_license:
        valid, message = validate_drivers_license(
            draft.second_owner_drivers_license, draft.second_owner_drivers_license_state
        )
        if not valid:
            errors.append(f"Second owner: {message}")
    return errors


def _validate_financials(draft: ApplicationDraft) -> List[str]:
    errors: List[str] = []
    _require(errors, draft.gross_annual_sales, "Gross annual sales is required")
    _require(errors, draft.average_monthly_revenue, "Average monthly revenue is required")
    _require(errors, draft.open_loans_advances, "Open loans or advances is required")
    _require(errors, draft.has_bankruptcy, "Bankruptcy history is required")
    return errors


def _validate_signatures(draft: ApplicationDraft, signatures: Signatures) -> List[str]:
    errors: List[str] = []
    if not signatures.primary:
        errors.append("Primary owner signature is required")
    if draft.second_owner_present and not signatures.second:
        errors.append("Second owner signature is required")
    return errors


def validate_step(step: int, draft: ApplicationDraft, signatures: Optional[Signatures] = None) -> List[str]:
    """
    Human-readable errors blocking forward navigation from ``step``.

    Steps 6 (properties) and 7 (bank statements) are optional and never fail.
    """
    if step == 1:
        return _validate_funding(draft)
    if step == 2:
        return _validate_business(draft)
    if step == 3:
        return _validate_primary_owner(draft)
    if step == 4:
        return _validate_second_owner(draft)
    if step == 5:
        return _validate_financials(draft)
    if step == 8:
        return _validate_signatures(draft, signatures or Signatures())
    return []
