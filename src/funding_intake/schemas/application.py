"""
Application draft schemas and the display labels that go with them
"""
import uuid
from typing import Any, Dict, List

from pydantic import Field, model_validator

from funding_intake.schemas.base import CamelSchema

MAX_PROPERTIES = 4

US_STATES: Dict[str, str] = {
    "AL": "Alabama", "AK": "Alaska", "AZ": "Arizona", "AR": "Arkansas",
    "CA": "California", "CO": "Colorado", "CT": "Connecticut", "DE": "Delaware",
    "FL": "Florida", "GA": "Georgia", "HI": "Hawaii", "ID": "Idaho",
    "IL": "Illinois", "IN": "Indiana", "IA": "Iowa", "KS": "Kansas",
    "KY": "Kentucky", "LA": "Louisiana", "ME": "Maine", "MD": "Maryland",
    "MA": "Massachusetts", "MI": "Michigan", "MN": "Minnesota", "MS": "Mississippi",
    "MO": "Missouri", "MT": "Montana", "NE": "Nebraska", "NV": "Nevada",
    "NH": "New Hampshire", "NJ": "New Jersey", "NM": "New Mexico", "NY": "New York",
    "NC": "North Carolina", "ND": "North Dakota", "OH": "Ohio", "OK": "Oklahoma",
    "OR": "Oregon", "PA": "Pennsylvania", "RI": "Rhode Island", "SC": "South Carolina",
    "SD": "South Dakota", "TN": "Tennessee", "TX": "Texas", "UT": "Utah",
    "VT": "Vermont", "VA": "Virginia", "WA": "Washington", "WV": "West Virginia",
    "WI": "Wisconsin", "WY": "Wyoming",
    "DC": "District of Columbia",
    "PR": "Puerto Rico", "VI": "U.S. Virgin Islands", "GU": "Guam",
    "AS": "American Samoa", "MP": "Northern Mariana Islands",
}

LEGAL_STRUCTURES: Dict[str, str] = {
    "sole_proprietorship": "Sole Proprietorship",
    "partnership": "Partnership",
    "llc": "Limited Liability Company (LLC)",
    "llp": "Limited Liability Partnership (LLP)",
    "corporation": "Corporation (C-Corp)",
    "s_corporation": "S Corporation (S-Corp)",
    "nonprofit": "Non-Profit Organization",
    "cooperative": "Cooperative",
    "professional_corporation": "Professional Corporation (PC)",
    "benefit_corporation": "Benefit Corporation (B-Corp)",
}

PROPERTY_TYPES: Dict[str, str] = {
    "residential": "Residential",
    "commercial": "Commercial",
    "industrial": "Industrial",
    "land": "Land",
    "mixed_use": "Mixed Use",
}


def state_name(code: str) -> str:
    return US_STATES.get(code, code)


def legal_structure_name(value: str) -> str:
    return LEGAL_STRUCTURES.get(value, value)


def property_type_name(value: str) -> str:
    return PROPERTY_TYPES.get(value, value)


def _form_value(value: Any) -> Any:
    if isinstance(value, bool):
        return value
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (int, float)):
        return str(value)
    return value


class FormFields(CamelSchema):
    """
    Form sections whose scalars are kept as text.

    JSON numbers are read as their decimal text and nulls fall back to the
    field default, so a client posting `100` or `null` is not rejected.
    """

    @model_validator(mode="before")
    @classmethod
    def coerce_form_values(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        return {key: _form_value(value) for key, value in data.items() if value is not None}


def _new_property_id() -> str:
    return uuid.uuid4().hex


class PropertyRecord(FormFields):
    """One owned real-estate property listed on the application"""
    id: str = Field(default_factory=_new_property_id)
    address: str = ""
    property_type: str = ""
    year_acquired: str = ""
    purchase_price: str = ""
    current_value: str = ""
    loan_balance: str = ""
    lender: str = ""
    title_holders: str = ""


class ApplicationDraft(FormFields):
    """
    Full application form state.

    Every scalar is a free-form string while the applicant is editing; shape
    rules (9-digit SSN, required fields) are enforced by the step validator.
    Currency fields and the EIN are stored as digits only.
    """
    # Funding request
    funding_specialist_name: str = ""
    amount_requested: str = ""
    use_of_funds: str = ""

    # Business
    legal_business_name: str = ""
    dba: str = ""
    business_address: str = ""
    business_phone: str = ""
    business_phone_country: str = "+1"
    business_start_date: str = ""
    legal_structure: str = ""
    state_of_incorporation: str = ""
    federal_tax_id: str = ""
    industry: str = ""
    website: str = ""

    # Primary owner
    owner_first_name: str = ""
    owner_last_name: str = ""
    owner_title: str = ""
    ownership_percentage: str = ""
    owner_home_address: str = ""
    owner_ssn: str = Field(default="", alias="ownerSSN")
    owner_dob: str = Field(default="", alias="ownerDOB")
    owner_phone: str = ""
    owner_phone_country: str = "+1"
    owner_email: str = ""
    owner_drivers_license: str = ""
    owner_drivers_license_state: str = ""

    # Second owner
    has_second_owner: str = ""
    second_owner_first_name: str = ""
    second_owner_last_name: str = ""
    second_owner_title: str = ""
    second_owner_ownership_percentage: str = ""
    second_owner_home_address: str = ""
    second_owner_ssn: str = Field(default="", alias="secondOwnerSSN")
    second_owner_dob: str = Field(default="", alias="secondOwnerDOB")
    second_owner_phone: str = ""
    second_owner_phone_country: str = "+1"
    second_owner_email: str = ""
    second_owner_drivers_license: str = ""
    second_owner_drivers_license_state: str = ""

    # Financials
    gross_annual_sales: str = ""
    average_monthly_revenue: str = ""
    open_loans_advances: str = ""
    has_bankruptcy: str = ""

    properties: List[PropertyRecord] = Field(default_factory=list)

    @property
    def second_owner_present(self) -> bool:
        return self.has_second_owner == "yes"

    @property
    def owner_full_name(self) -> str:
        return f"{self.owner_first_name} {self.owner_last_name}".strip()

    def to_payload(self) -> dict:
        """Wire form (camelCase keys) as posted in the formData field"""
        return self.model_dump(by_alias=True)
