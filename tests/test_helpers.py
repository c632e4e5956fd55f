"""
Tests for input sanitization and small helpers
"""
import pytest

from funding_intake.utils.helpers import content_type_for, remove_empty_values, safe_get, sanitize_data, sanitize_string


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("  Acme  ", "Acme"),
        ("Acme    Widgets", "Acme Widgets"),
        ("Acme\tWidgets", "Acme Widgets"),
        ("Acme\r\nWidgets\nLLC", "Acme Widgets LLC"),
        ("Ac\x00me\x07 Co\x7f", "Acme Co"),
        ("\tAcme\n\x07  Co ", "Acme Co"),
        ("", ""),
    ],
)
def test_sanitize_string(raw, expected):
    assert sanitize_string(raw) == expected


def test_sanitize_string_leaves_non_strings():
    assert sanitize_string(None) is None
    assert sanitize_string(42) == 42


def test_sanitize_data_recurses():
    data = {
        "legalBusinessName": " Acme\tCo ",
        "amountRequested": 50000,
        "properties": [{"address": "1 Oak\nAve ", "lender": None}],
        "tags": ["  a ", "b\x07"],
    }
    assert sanitize_data(data) == {
        "legalBusinessName": "Acme Co",
        "amountRequested": 50000,
        "properties": [{"address": "1 Oak Ave", "lender": None}],
        "tags": ["a", "b"],
    }


def test_safe_get():
    data = {"data": [{"details": {"id": "1"}}]}
    assert safe_get(data, "data", 0, "details", "id") == "1"
    assert safe_get(data, "data", 3, "details") is None
    assert safe_get(data, "missing", default="x") == "x"


def test_remove_empty_values():
    assert remove_empty_values({"a": 1, "b": "", "c": None, "d": 0}) == {"a": 1, "d": 0}


@pytest.mark.parametrize(
    "name, expected",
    [("a.PDF", "application/pdf"), ("b.png", "image/png"), ("c.jpeg", "image/jpeg"), ("d", "application/octet-stream")],
)
def test_content_type_for(name, expected):
    assert content_type_for(name) == expected
