"""
Zoho CRM lead mapping: turns an application draft into a Leads record
"""
import math
import re
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from funding_intake.core.config import settings
from funding_intake.schemas.application import US_STATES, ApplicationDraft
from funding_intake.schemas.zoho_crm import ZohoLeadRecord
from funding_intake.utils.helpers import remove_empty_values
from funding_intake.validation.steps import normalize_website

_STATE_ZIP = re.compile(r"^([A-Za-z]{2,})\s*(\d{5}(?:-\d{4})?)?$")
_EMAIL = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_PHONE_STRIP = re.compile(r"[^0-9+ \-]")
_NUMERIC_FIELDS = ("Amount_Requested", "Monthly_Revenue", "Annual_Revenue", "EIN", "Owner1_Ownership", "Owner_2_Ownership")
_DATE_FORMATS = ("%Y-%m-%d", "%m/%d/%Y", "%m-%d-%Y", "%B %d, %Y", "%b %d, %Y")


def parse_address(address: Optional[str]) -> Dict[str, str]:
    """
    Split "123 Main St, City, ST 12345" into street, city, state and zip.

    Only recognised US state/territory codes are kept as the state; anything
    else (country names, "USA") leaves it empty.
    """
    result = {"street": "", "city": "", "state": "", "zip": ""}
    if not address:
        return result

    parts = [part.strip() for part in address.split(",")]
    result["street"] = parts[0]
    if len(parts) >= 2:
        result["city"] = parts[1]
    if len(parts) >= 3:
        last = parts[-1]
        match = _STATE_ZIP.match(last)
        if match:
            candidate = match.group(1).upper()
            if candidate in US_STATES:
                result["state"] = candidate
            result["zip"] = match.group(2) or ""
        elif last.upper() in US_STATES:
            result["state"] = last.upper()
    return result


def parse_currency(value: Optional[str]) -> Optional[int]:
    """Whole-dollar amount; empty or zero becomes None"""
    digits = re.sub(r"[^0-9]", "", value or "")
    if not digits:
        return None
    amount = int(digits)
    return amount or None


def parse_ein(value: Optional[str]) -> Optional[int]:
    """EIN as an integer, only when exactly nine digits were entered"""
    digits = re.sub(r"[^0-9]", "", value or "")
    if len(digits) != 9:
        return None
    return int(digits)


def parse_ownership(value: Optional[str]) -> Optional[float]:
    cleaned = re.sub(r"[^0-9.]", "", value or "")
    try:
        return float(cleaned)
    except ValueError:
        return None


def clean_phone_number(phone: Optional[str], country_code: Optional[str] = None) -> Optional[str]:
    """Phone with stray characters removed and the country code prefixed"""
    if not phone:
        return None
    cleaned = _PHONE_STRIP.sub("", phone).strip()
    if len(cleaned) < 7:
        return None
    if country_code and country_code.strip():
        return f"{country_code.strip()} {cleaned}"
    return cleaned


def clean_website_url(website: Optional[str]) -> Optional[str]:
    return normalize_website(website)


def format_date_for_crm(value: Optional[str]) -> Optional[str]:
    """YYYY-MM-DD, or None when the value is empty or not a recognisable date"""
    if not value or not value.strip():
        return None
    value = value.strip()
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00")).date().isoformat()
    except ValueError:
        pass
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(value, fmt).date().isoformat()
        except ValueError:
            continue
    return None


def format_currency_display(value: Optional[str]) -> str:
    amount = parse_currency(value)
    return f"${amount:,}" if amount else "N/A"


def build_description(draft: ApplicationDraft) -> str:
    """Free-text summary stored on the lead (specialist, amounts, properties)"""
    open_loans = format_currency_display(draft.open_loans_advances) if draft.open_loans_advances else "None"
    lines: List[str] = [
        f"Funding Specialist: {draft.funding_specialist_name or 'N/A'}",
        f"Amount Requested: {format_currency_display(draft.amount_requested)}",
        f"Use of Funds: {draft.use_of_funds or 'N/A'}",
        f"Monthly Revenue: {format_currency_display(draft.average_monthly_revenue)}",
        f"Gross Annual Sales: {format_currency_display(draft.gross_annual_sales)}",
        f"Open Loans/Advances: {open_loans}",
    ]
    if draft.properties:
        lines.append("--- PROPERTIES ---")
        for index, prop in enumerate(draft.properties, start=1):
            lines.append("\n".join([
                f"Property {index}:",
                f"  Address: {prop.address or 'N/A'}",
                f"  Type: {prop.property_type or 'N/A'}",
                f"  Year Acquired: {prop.year_acquired or 'N/A'}",
                f"  Purchase Price: {format_currency_display(prop.purchase_price)}",
                f"  Current Value: {format_currency_display(prop.current_value)}",
                f"  Loan Balance: {format_currency_display(prop.loan_balance)}",
                f"  Lender: {prop.lender or 'N/A'}",
                f"  Title Holders: {prop.title_holders or 'N/A'}",
            ]))
    return "\n".join(line for line in lines if line)


def _yes_no(value: str) -> Optional[str]:
    if value == "yes":
        return "Yes"
    if value == "no":
        return "No"
    return None


def format_application_for_crm(draft: ApplicationDraft, lead_source: Optional[str] = None) -> Dict[str, Any]:
    """
    Map an application draft onto Zoho Leads field names.

    Fields with no value are dropped so the API never receives nulls.
    """
    business_addr = parse_address(draft.business_address)
    owner_addr = parse_address(draft.owner_home_address)
    second_addr = parse_address(draft.second_owner_home_address)

    owner_phone = clean_phone_number(draft.owner_phone, draft.owner_phone_country)
    email = draft.owner_email.strip()
    open_loans = draft.open_loans_advances.strip()

    record = ZohoLeadRecord(
        First_Name=draft.owner_first_name.strip() or None,
        Last_Name=draft.owner_last_name.strip() or None,
        Email=email or None,
        Phone=owner_phone,
        Company=draft.legal_business_name.strip() or None,
        Website=clean_website_url(draft.website),
        Industry=draft.industry or None,
        Lead_Source=lead_source or settings.crm.lead_source,
        Designation=draft.owner_title.strip() or None,
        Street=business_addr["street"] or draft.business_address or None,
        City=business_addr["city"] or None,
        State=business_addr["state"] or draft.state_of_incorporation or None,
        Zip_Code=business_addr["zip"] or None,
        Amount_Requested=parse_currency(draft.amount_requested),
        Monthly_Revenue=parse_currency(draft.average_monthly_revenue),
        Annual_Revenue=parse_currency(draft.gross_annual_sales),
        Use_For_Funding=draft.use_of_funds or None,
        DBA=draft.dba.strip() or None,
        EIN=parse_ein(draft.federal_tax_id),
        Date_business_opened=format_date_for_crm(draft.business_start_date),
        Legal_Structure=draft.legal_structure or None,
        Phone_2=clean_phone_number(draft.business_phone, draft.business_phone_country),
        Owner_1_Street=owner_addr["street"] or draft.owner_home_address or None,
        Owner_1_City=owner_addr["city"] or None,
        Owner_1_State=owner_addr["state"] or None,
        Owner_1_Zip=owner_addr["zip"] or None,
        Owner_1_Phone=owner_phone,
        Owner_1_Email=email or None,
        Owner_1_SSN=draft.owner_ssn or None,
        Owner_1_Date_of_Birth=format_date_for_crm(draft.owner_dob),
        Owner_1_Drivers_License_Number=draft.owner_drivers_license or None,
        Owner_1_DL_State_Issuance=draft.owner_drivers_license_state or None,
        Owner1_Ownership=parse_ownership(draft.ownership_percentage),
        Additional_owners="Yes" if draft.second_owner_present else "No",
        Owner_2_First_Name=draft.second_owner_first_name.strip() or None,
        Owner_2_Last_Name=draft.second_owner_last_name.strip() or None,
        Owner_2_Street=second_addr["street"] or draft.second_owner_home_address or None,
        Owner_2_City=second_addr["city"] or None,
        Owner_2_State=second_addr["state"] or None,
        Owner_2_Zip=second_addr["zip"] or None,
        Owner_2_Phone=clean_phone_number(draft.second_owner_phone, draft.second_owner_phone_country),
        Owner_2_Email=draft.second_owner_email.strip() or None,
        Owner_2_SSN=draft.second_owner_ssn or None,
        Owner_2_Date_of_Birth=format_date_for_crm(draft.second_owner_dob),
        Owner_2_Ownership=parse_ownership(draft.second_owner_ownership_percentage),
        Have_any_open_loans_advances="Yes" if open_loans and open_loans != "0" else "No",
        Any_Liens_defaults_bankruptcy=_yes_no(draft.has_bankruptcy),
        Description=build_description(draft),
    )
    return remove_empty_values(record.model_dump())


def validate_lead_data(record: Dict[str, Any]) -> Tuple[bool, List[str]]:
    """Check a mapped record before it is sent; returns (valid, errors)"""
    errors: List[str] = []
    for field in ("First_Name", "Last_Name", "Email", "Company"):
        if not str(record.get(field) or "").strip():
            errors.append(f"{field} is required")

    for field in _NUMERIC_FIELDS:
        value = record.get(field)
        if isinstance(value, float) and math.isnan(value):
            errors.append(f"{field} has invalid numeric value")

    email = record.get("Email")
    if isinstance(email, str) and email and not _EMAIL.match(email):
        errors.append(f"Invalid email format: {email}")

    return not errors, errors
