"""
Multi-step application wizard state
"""
from typing import Dict, List, Optional

from funding_intake.schemas.application import MAX_PROPERTIES, ApplicationDraft, PropertyRecord
from funding_intake.services.submission import (
    BankStatementSelection,
    SignaturePad,
    SubmissionAssembler,
    UploadedFile,
)
from funding_intake.utils.formatters import (
    SSNInput,
    format_phone_number,
    parse_currency_digits,
    digits_only,
    EIN_LENGTH,
)
from funding_intake.validation.drivers_license import LicenseInput
from funding_intake.validation.steps import FIRST_STEP, LAST_STEP, Signatures, validate_step

PHONE_FIELDS = ("business_phone", "owner_phone", "second_owner_phone")
CURRENCY_FIELDS = ("amount_requested", "gross_annual_sales", "average_monthly_revenue", "open_loans_advances")
PROPERTY_CURRENCY_FIELDS = ("purchase_price", "current_value", "loan_balance")


class ApplicationWizard:
    """
    Holds the draft being edited and gates navigation between the 8 steps.

    SSN and license fields are edited through their dedicated inputs, which
    write their canonical value back into the draft.
    """

    def __init__(self, draft: Optional[ApplicationDraft] = None):
        self.draft = draft or ApplicationDraft()
        self.current_step = FIRST_STEP
        self.step_errors: Dict[int, List[str]] = {}

        self.ssn = SSNInput(self.draft.owner_ssn)
        self.second_ssn = SSNInput(self.draft.second_owner_ssn)
        self.license = LicenseInput(self.draft.owner_drivers_license_state, self.draft.owner_drivers_license)
        self.second_license = LicenseInput(
            self.draft.second_owner_drivers_license_state, self.draft.second_owner_drivers_license
        )

        self.bank_statements = BankStatementSelection()
        self.signature = SignaturePad()
        self.second_signature = SignaturePad()

    # Field editing

    def set_field(self, field: str, value: str) -> None:
        """Set a plain draft field, applying the field's formatter if it has one"""
        if field in PHONE_FIELDS:
            value = format_phone_number(value)
        elif field in CURRENCY_FIELDS:
            value = parse_currency_digits(value)
        elif field == "federal_tax_id":
            value = digits_only(value)[:EIN_LENGTH]
        setattr(self.draft, field, value)

    def ssn_key(self, key: str, second_owner: bool = False) -> bool:
        ssn = self.second_ssn if second_owner else self.ssn
        passthrough = ssn.handle_key(key)
        if second_owner:
            self.draft.second_owner_ssn = ssn.raw
        else:
            self.draft.owner_ssn = ssn.raw
        return passthrough

    def license_input(self, value: str, second_owner: bool = False) -> bool:
        license_field = self.second_license if second_owner else self.license
        accepted = license_field.on_input(value)
        if second_owner:
            self.draft.second_owner_drivers_license = license_field.value
        else:
            self.draft.owner_drivers_license = license_field.value
        return accepted

    def license_jurisdiction(self, code: str, second_owner: bool = False) -> None:
        license_field = self.second_license if second_owner else self.license
        license_field.on_jurisdiction_change(code)
        if second_owner:
            self.draft.second_owner_drivers_license_state = code
            self.draft.second_owner_drivers_license = ""
        else:
            self.draft.owner_drivers_license_state = code
            self.draft.owner_drivers_license = ""

    # Properties

    def add_property(self) -> Optional[PropertyRecord]:
        """Append an empty property; refused (None) once the list is full"""
        if len(self.draft.properties) >= MAX_PROPERTIES:
            return None
        record = PropertyRecord()
        self.draft.properties.append(record)
        return record

    def update_property(self, property_id: str, field: str, value: str) -> None:
        if field in PROPERTY_CURRENCY_FIELDS:
            value = parse_currency_digits(value)
        for record in self.draft.properties:
            if record.id == property_id:
                setattr(record, field, value)

    def remove_property(self, property_id: str) -> None:
        self.draft.properties = [p for p in self.draft.properties if p.id != property_id]

    # Uploads

    def add_bank_statements(self, uploads: List[UploadedFile]) -> List[str]:
        return self.bank_statements.add(uploads)

    def remove_bank_statement(self, index: int) -> None:
        self.bank_statements.remove(index)

    # Navigation

    def signatures(self) -> Signatures:
        return Signatures(primary=not self.signature.is_empty(), second=not self.second_signature.is_empty())

    def validate(self, step: Optional[int] = None) -> bool:
        step = step or self.current_step
        errors = validate_step(step, self.draft, self.signatures())
        self.step_errors[step] = errors
        return not errors

    def next_step(self) -> bool:
        if not self.validate(self.current_step):
            return False
        self.current_step = min(self.current_step + 1, LAST_STEP)
        return True

    def prev_step(self) -> None:
        self.current_step = max(self.current_step - 1, FIRST_STEP)

    def go_to_step(self, step: int) -> bool:
        """Jump back to an earlier step; forward jumps are refused"""
        if FIRST_STEP <= step < self.current_step:
            self.current_step = step
            return True
        return False

    async def submit(self, assembler: SubmissionAssembler, submission_date: Optional[str] = None) -> Optional[dict]:
        """Validate the final step and post the application; None when blocked"""
        if not self.validate(LAST_STEP):
            return None
        return await assembler.submit(
            self.draft,
            self.signature,
            self.second_signature,
            list(self.bank_statements.files),
            submission_date,
        )
