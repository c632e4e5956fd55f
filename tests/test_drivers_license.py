"""
Tests for the jurisdiction license rules and the license input field
"""
import pytest

from funding_intake.schemas.application import US_STATES
from funding_intake.validation.drivers_license import (
    DRIVERS_LICENSE_RULES,
    LicenseInput,
    check_incremental,
    validate_drivers_license,
)


def test_rule_table_covers_every_jurisdiction():
    assert len(DRIVERS_LICENSE_RULES) == 56
    assert set(DRIVERS_LICENSE_RULES) == set(US_STATES)


@pytest.mark.parametrize("code", sorted(DRIVERS_LICENSE_RULES))
def test_placeholder_is_a_valid_license(code):
    rule = DRIVERS_LICENSE_RULES[code]
    assert len(rule.placeholder) <= rule.max_length
    assert validate_drivers_license(rule.placeholder, code) == (True, "")


@pytest.mark.parametrize("code", sorted(DRIVERS_LICENSE_RULES))
def test_placeholder_is_accepted_keystroke_by_keystroke(code):
    placeholder = DRIVERS_LICENSE_RULES[code].placeholder
    for end in range(1, len(placeholder) + 1):
        accepted, _ = check_incremental(placeholder[:end], code)
        assert accepted, placeholder[:end]


@pytest.mark.parametrize("code", sorted(DRIVERS_LICENSE_RULES))
def test_one_past_max_length_is_rejected_incrementally(code):
    rule = DRIVERS_LICENSE_RULES[code]
    candidate = rule.placeholder + "1" * (rule.max_length + 1 - len(rule.placeholder))
    accepted, advisory = check_incremental(candidate, code)
    assert not accepted
    assert advisory.startswith(f"Maximum {rule.max_length} characters")


def test_first_character_rules():
    assert check_incremental("1", "CA") == (False, "California licenses must start with a letter")
    assert check_incremental("A", "TX") == (False, "Texas licenses must start with a number")
    assert check_incremental("D", "CA") == (True, "")


def test_letter_in_digit_position():
    accepted, advisory = check_incremental("D12A", "CA")
    assert not accepted
    assert advisory == "Letters not allowed at this position for California"


def test_invalid_character():
    accepted, advisory = check_incremental("12-", "TX")
    assert not accepted
    assert advisory == "Invalid character for Texas license format"


def test_no_jurisdiction_selected():
    assert check_incremental("ABC", "") == (True, "Please select a state first")


def test_full_validation_messages():
    assert validate_drivers_license("", "CA") == (False, "License number and state are required")
    assert validate_drivers_license("D1234567", "") == (False, "License number and state are required")
    assert validate_drivers_license("D123", "CA") == (
        False,
        "Invalid format for California. Expected: 1 letter + 7 digits",
    )


def test_unknown_jurisdiction_uses_length_fallback():
    assert validate_drivers_license("ABCD", "ZZ") == (True, "")
    assert validate_drivers_license("ABC", "ZZ") == (False, "License number should be 4-20 characters")


def test_license_input_upper_cases_and_refuses():
    field = LicenseInput("CA")
    assert field.on_input("d123")
    assert field.value == "D123"

    assert not field.on_input("D123X")
    assert field.value == "D123"
    assert field.advisory


@pytest.mark.parametrize("value", ["", "D1", "D1234567"])
def test_jurisdiction_change_resets_value_and_advisory(value):
    field = LicenseInput("CA")
    field.on_input(value)
    field.on_input(value + "!")
    field.on_jurisdiction_change("NY")
    assert field.value == ""
    assert field.advisory == ""
    assert field.jurisdiction == "NY"
