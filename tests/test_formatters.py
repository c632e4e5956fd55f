"""
Tests for keystroke formatters and the masked SSN input
"""
import pytest

from funding_intake.utils.formatters import (
    SSNInput,
    format_currency,
    format_ein,
    format_phone_number,
    format_ssn_for_screen,
    parse_currency_digits,
)


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("", ""),
        ("217", "217"),
        ("2175", "(217) 5"),
        ("217555", "(217) 555"),
        ("2175550100", "(217) 555-0100"),
        ("+1 (217) 555-0100 ext 9", "(121) 755-5010"),
        ("abc", ""),
    ],
)
def test_format_phone_number(raw, expected):
    assert format_phone_number(raw) == expected


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("12", "12"),
        ("123", "12-3"),
        ("12-3456789", "12-3456789"),
        ("1234567890", "12-3456789"),
        ("x", ""),
    ],
)
def test_format_ein(raw, expected):
    assert format_ein(raw) == expected


def test_format_ein_nine_digits_is_grouped():
    assert format_ein("12 345 6789") == "12-3456789"


@pytest.mark.parametrize("raw", ["0", "7", "1000", "250000", "1234567890"])
def test_currency_formatting_is_idempotent(raw):
    once = format_currency(parse_currency_digits(raw))
    assert format_currency(parse_currency_digits(once)) == once


def test_format_currency_examples():
    assert format_currency("250000") == "$250,000"
    assert format_currency("$1,500") == "$1,500"
    assert format_currency("") == ""


def test_ssn_screen_rendering():
    assert format_ssn_for_screen("123456789", show=True) == "123-45-6789"
    assert format_ssn_for_screen("1234", show=True) == "123-4"
    assert format_ssn_for_screen("12", show=False) == "••"
    assert format_ssn_for_screen("1234", show=False) == "•••-•"
    assert format_ssn_for_screen("123456789", show=False) == "•••-••-6789"


@pytest.mark.parametrize("length", range(0, 10))
def test_ssn_input_buffer_tracks_accepted_digits(length):
    digits = "987654321"[:length]
    ssn = SSNInput()
    for key in digits:
        assert ssn.handle_key(key) is False
    assert ssn.raw == digits

    hidden = ssn.display(show=False)
    visible_digits = [ch for ch in hidden if ch.isdigit()]
    assert len(visible_digits) <= 4
    assert "".join(visible_digits) == digits[5:]


def test_ssn_input_caps_at_nine_and_backspace():
    ssn = SSNInput()
    for key in "1234567890":
        ssn.handle_key(key)
    assert ssn.raw == "123456789"
    assert ssn.complete

    ssn.handle_key("Backspace")
    assert ssn.raw == "12345678"
    assert not ssn.complete


def test_ssn_input_key_passthrough():
    ssn = SSNInput()
    assert ssn.handle_key("Tab") is True
    assert ssn.handle_key("ArrowLeft") is True
    assert ssn.handle_key("a") is False
    assert ssn.handle_key("-") is False
    assert ssn.raw == ""


def test_ssn_input_visibility_toggle():
    ssn = SSNInput("123456789")
    assert ssn.display() == "•••-••-6789"
    ssn.toggle_visibility()
    assert ssn.display() == "123-45-6789"
    ssn.clear()
    assert ssn.display() == ""
