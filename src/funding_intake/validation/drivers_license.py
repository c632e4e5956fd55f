"""
Driver's license number rules per issuing jurisdiction.

Each rule carries two grammars: ``pattern`` is the full-value grammar checked
at submission time, ``allowed_chars`` is the looser per-keystroke grammar a
partially typed value must satisfy. Passing the incremental checks does not
imply a complete, valid number.
"""
import re
from typing import Dict, Optional, Tuple

from pydantic import BaseModel

from funding_intake.schemas.application import state_name

LETTER = "letter"
DIGIT = "digit"
EITHER = "either"

FALLBACK_MIN_LENGTH = 4
FALLBACK_MAX_LENGTH = 20

SELECT_STATE_ADVISORY = "Please select a state first"


class DriversLicenseRule(BaseModel):
    """Compiled grammars and display hints for one jurisdiction"""

    class Config:
        frozen = True

    pattern: re.Pattern
    description: str
    placeholder: str
    max_length: int
    first_char_rule: str
    allowed_chars: re.Pattern


def _rule(pattern: str, description: str, placeholder: str, max_length: int,
          first_char_rule: str, allowed_chars: str) -> DriversLicenseRule:
    return DriversLicenseRule(
        pattern=re.compile(pattern, re.ASCII),
        description=description,
        placeholder=placeholder,
        max_length=max_length,
        first_char_rule=first_char_rule,
        allowed_chars=re.compile(allowed_chars, re.ASCII),
    )


_DIGITS = r"\d+"
_LETTER_THEN_DIGITS = r"[A-Z]?\d*"
_ALNUM = r"[A-Z0-9]*"

DRIVERS_LICENSE_RULES: Dict[str, DriversLicenseRule] = {
    "AL": _rule(r"\d{7,8}", "7-8 digits", "1234567", 8, DIGIT, _DIGITS),
    "AK": _rule(r"\d{1,7}", "1-7 digits", "1234567", 7, DIGIT, _DIGITS),
    "AZ": _rule(r"[A-Z]\d{8}|\d{9}", "1 letter + 8 digits, or 9 digits", "D12345678", 9, EITHER, _LETTER_THEN_DIGITS),
    "AR": _rule(r"\d{4,9}", "4-9 digits", "123456789", 9, DIGIT, _DIGITS),
    "CA": _rule(r"[A-Z]\d{7}", "1 letter + 7 digits", "D1234567", 8, LETTER, _LETTER_THEN_DIGITS),
    "CO": _rule(r"\d{9}|[A-Z]{2}\d{3,6}", "9 digits, or 2 letters + 3-6 digits", "123456789", 9, EITHER, _ALNUM),
    "CT": _rule(r"\d{9}", "9 digits", "123456789", 9, DIGIT, _DIGITS),
    "DE": _rule(r"\d{1,7}", "1-7 digits", "1234567", 7, DIGIT, _DIGITS),
    "DC": _rule(r"\d{7,9}", "7-9 digits", "1234567", 9, DIGIT, _DIGITS),
    "FL": _rule(r"[A-Z]\d{12}", "1 letter + 12 digits", "D123456789012", 13, LETTER, _LETTER_THEN_DIGITS),
    "GA": _rule(r"\d{7,9}", "7-9 digits", "123456789", 9, DIGIT, _DIGITS),
    "HI": _rule(r"H\d{8}|\d{9}", "H + 8 digits, or 9 digits", "H12345678", 9, EITHER, r"H?\d*"),
    "ID": _rule(r"[A-Z]{2}\d{6}[A-Z]|\d{9}", "2 letters + 6 digits + 1 letter, or 9 digits", "AB123456C", 9, EITHER, _ALNUM),
    "IL": _rule(r"[A-Z]\d{11,12}", "1 letter + 11-12 digits", "D12345678901", 13, LETTER, _LETTER_THEN_DIGITS),
    "IN": _rule(r"[A-Z]\d{9}|\d{9,10}", "1 letter + 9 digits, or 9-10 digits", "1234567890", 10, EITHER, _LETTER_THEN_DIGITS),
    "IA": _rule(r"\d{9}|\d{3}[A-Z]{2}\d{4}", "9 digits, or 3 digits + 2 letters + 4 digits", "123AB4567", 9, DIGIT, r"[0-9A-Z]+"),
    "KS": _rule(r"[A-Z]\d{8}|\d{9}", "1 letter + 8 digits, or 9 digits", "K12345678", 9, EITHER, _LETTER_THEN_DIGITS),
    "KY": _rule(r"[A-Z]\d{8,9}|\d{9}", "1 letter + 8-9 digits, or 9 digits", "D12345678", 10, EITHER, _LETTER_THEN_DIGITS),
    "LA": _rule(r"0[01]\d{7}", "9 digits (starts with 00 or 01)", "001234567", 9, DIGIT, _DIGITS),
    "ME": _rule(r"\d{7}[A-Z]?", "7 digits + optional letter", "1234567", 8, DIGIT, r"\d+[A-Z]?"),
    "MD": _rule(r"[A-Z]\d{12}", "1 letter + 12 digits", "D123456789012", 13, LETTER, _LETTER_THEN_DIGITS),
    "MA": _rule(r"S\d{8}|\d{9}", "S + 8 digits, or 9 digits", "S12345678", 9, EITHER, r"S?\d*"),
    "MI": _rule(r"[A-Z]\d{10,12}", "1 letter + 10-12 digits", "D1234567890", 13, LETTER, _LETTER_THEN_DIGITS),
    "MN": _rule(r"[A-Z]\d{12}", "1 letter + 12 digits", "D123456789012", 13, LETTER, _LETTER_THEN_DIGITS),
    "MS": _rule(r"\d{9}", "9 digits", "123456789", 9, DIGIT, _DIGITS),
    "MO": _rule(r"[A-Z]\d{5,9}|\d{9}", "1 letter + 5-9 digits, or 9 digits", "D123456789", 10, EITHER, _LETTER_THEN_DIGITS),
    "MT": _rule(r"[A-Z]\d{8}|\d{9,13}", "1 letter + 8 digits, or 9-13 digits", "123456789", 13, EITHER, _LETTER_THEN_DIGITS),
    "NE": _rule(r"[A-Z]\d{6,8}", "1 letter + 6-8 digits", "D1234567", 9, LETTER, _LETTER_THEN_DIGITS),
    "NV": _rule(r"\d{9,10}|\d{12}|X\d{8}", "9-12 digits, or X + 8 digits", "1234567890", 12, EITHER, r"X?\d*"),
    "NH": _rule(r"\d{2}[A-Z]{3}\d{5}", "2 digits + 3 letters + 5 digits", "12ABC34567", 10, DIGIT, r"[0-9A-Z]+"),
    "NJ": _rule(r"[A-Z]\d{14}", "1 letter + 14 digits", "D12345678901234", 15, LETTER, _LETTER_THEN_DIGITS),
    "NM": _rule(r"\d{8,9}", "8-9 digits", "123456789", 9, DIGIT, _DIGITS),
    "NY": _rule(r"[A-Z]\d{7}|\d{8,9}|\d{16}", "1 letter + 7 digits, or 8-9 or 16 digits", "D1234567", 16, EITHER, _LETTER_THEN_DIGITS),
    "NC": _rule(r"\d{1,12}", "1-12 digits", "123456789012", 12, DIGIT, _DIGITS),
    "ND": _rule(r"[A-Z]{3}\d{6}|\d{9}", "3 letters + 6 digits, or 9 digits", "ABC123456", 9, EITHER, r"[A-Z]*\d*"),
    "OH": _rule(r"[A-Z]{2}\d{6}|[A-Z]\d{4,8}|\d{8}", "2 letters + 6 digits, 1 letter + 4-8 digits, or 8 digits", "AB123456", 8, EITHER, r"[A-Z]*\d*"),
    "OK": _rule(r"[A-Z]\d{9}|\d{9}", "1 letter + 9 digits, or 9 digits", "D123456789", 10, EITHER, _LETTER_THEN_DIGITS),
    "OR": _rule(r"\d{1,9}|[A-Z]\d{6}[A-Z]?", "1-9 digits, or 1 letter + 6 digits", "123456789", 9, EITHER, r"[A-Z]?\d*[A-Z]?"),
    "PA": _rule(r"\d{8}", "8 digits", "12345678", 8, DIGIT, _DIGITS),
    "RI": _rule(r"\d{7}|V\d{6}", "7 digits, or V + 6 digits", "1234567", 7, EITHER, r"V?\d*"),
    "SC": _rule(r"\d{5,11}", "5-11 digits", "12345678", 11, DIGIT, _DIGITS),
    "SD": _rule(r"\d{6,10}|\d{12}", "6-10 or 12 digits", "12345678", 12, DIGIT, _DIGITS),
    "TN": _rule(r"\d{7,9}", "7-9 digits", "123456789", 9, DIGIT, _DIGITS),
    "TX": _rule(r"\d{7,8}", "7-8 digits", "12345678", 8, DIGIT, _DIGITS),
    "UT": _rule(r"\d{4,10}", "4-10 digits", "123456789", 10, DIGIT, _DIGITS),
    "VT": _rule(r"\d{8}|\d{7}A", "8 digits, or 7 digits + A", "12345678", 8, DIGIT, r"\d+A?"),
    "VA": _rule(r"[A-Z]\d{8,11}|\d{9}", "1 letter + 8-11 digits, or 9 digits", "D12345678", 12, EITHER, _LETTER_THEN_DIGITS),
    # Washington numbers embed name fragments; only the length and alphabet are checked
    "WA": _rule(r"[A-Z0-9*]{12}", "12 characters (letters, digits, *)", "SMITHJA123BC", 12, LETTER, r"[A-Z0-9*]+"),
    "WV": _rule(r"\d{7}|[A-Z]{1,2}\d{5,6}", "7 digits, or 1-2 letters + 5-6 digits", "1234567", 8, EITHER, r"[A-Z]*\d*"),
    "WI": _rule(r"[A-Z]\d{13}", "1 letter + 13 digits", "D1234567890123", 14, LETTER, _LETTER_THEN_DIGITS),
    "WY": _rule(r"\d{9,10}", "9-10 digits", "123456789", 10, DIGIT, _DIGITS),
    # Territories
    "PR": _rule(r"\d{5,7}|\d{9}", "5-7 or 9 digits", "1234567", 9, DIGIT, _DIGITS),
    "VI": _rule(r"\d{9}", "9 digits", "123456789", 9, DIGIT, _DIGITS),
    "GU": _rule(r"[A-Z]\d{14}", "1 letter + 14 digits", "A12345678901234", 15, LETTER, _LETTER_THEN_DIGITS),
    "AS": _rule(r"\d{6,9}", "6-9 digits", "1234567", 9, DIGIT, _DIGITS),
    "MP": _rule(r"\d{5,9}", "5-9 digits", "1234567", 9, DIGIT, _DIGITS),
}


def get_rule(jurisdiction: Optional[str]) -> Optional[DriversLicenseRule]:
    if not jurisdiction:
        return None
    return DRIVERS_LICENSE_RULES.get(jurisdiction)


def _is_letter(ch: str) -> bool:
    return "A" <= ch <= "Z"


def _is_digit(ch: str) -> bool:
    return "0" <= ch <= "9"


def check_incremental(candidate: str, jurisdiction: Optional[str]) -> Tuple[bool, str]:
    """
    Per-keystroke check of a partially typed license number.

    Args:
        candidate: Upper-cased value the field would hold after the keystroke
        jurisdiction: Selected issuing jurisdiction code, may be empty

    Returns:
        (accepted, advisory) - a rejected candidate must not replace the
        field's current value; the advisory may be non-empty either way
    """
    if not jurisdiction:
        return True, SELECT_STATE_ADVISORY

    rule = get_rule(jurisdiction)
    if rule is None:
        return True, ""

    name = state_name(jurisdiction)

    if len(candidate) > rule.max_length:
        return False, f"Maximum {rule.max_length} characters for {name}"

    if candidate:
        first = candidate[0]
        if rule.first_char_rule == LETTER and not _is_letter(first):
            return False, f"{name} licenses must start with a letter"
        if rule.first_char_rule == DIGIT and not _is_digit(first):
            return False, f"{name} licenses must start with a number"

        if not rule.allowed_chars.fullmatch(candidate):
            if _is_letter(candidate[-1]):
                return False, f"Letters not allowed at this position for {name}"
            return False, f"Invalid character for {name} license format"

    return True, ""


def validate_drivers_license(license_number: Optional[str], jurisdiction: Optional[str]) -> Tuple[bool, str]:
    """
    Full-value check used before submission.

    Returns:
        (valid, message) - message is empty when valid
    """
    if not license_number or not jurisdiction:
        return False, "License number and state are required"

    rule = get_rule(jurisdiction)
    if rule is None:
        if FALLBACK_MIN_LENGTH <= len(license_number) <= FALLBACK_MAX_LENGTH:
            return True, ""
        return False, f"License number should be {FALLBACK_MIN_LENGTH}-{FALLBACK_MAX_LENGTH} characters"

    if rule.pattern.fullmatch(license_number):
        return True, ""

    return False, f"Invalid format for {state_name(jurisdiction)}. Expected: {rule.description}"


class LicenseInput:
    """State of one license-number field and its issuing-jurisdiction selector"""

    def __init__(self, jurisdiction: str = "", value: str = ""):
        self.jurisdiction = jurisdiction
        self.value = value
        self.advisory = ""

    @property
    def rule(self) -> Optional[DriversLicenseRule]:
        return get_rule(self.jurisdiction)

    def on_input(self, candidate: str) -> bool:
        """Apply a new raw field value; returns False when it was refused"""
        upper = (candidate or "").upper()
        accepted, advisory = check_incremental(upper, self.jurisdiction)
        self.advisory = advisory
        if accepted:
            self.value = upper
        return accepted

    def on_jurisdiction_change(self, jurisdiction: str) -> None:
        self.jurisdiction = jurisdiction
        self.value = ""
        self.advisory = ""

    def validate(self) -> Tuple[bool, str]:
        return validate_drivers_license(self.value, self.jurisdiction)
