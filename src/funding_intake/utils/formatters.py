"""
Keystroke-level field formatters for the application form.

Every function here is total: any input string produces a string, never an
exception. Storage keeps digits only; the formatted value is for display.
"""
import re
from typing import Optional

_NON_DIGITS = re.compile(r"\D")

SSN_LENGTH = 9
EIN_LENGTH = 9
PHONE_LENGTH = 10

BULLET = "•"
NAVIGATION_KEYS = frozenset({"Tab", "ArrowLeft", "ArrowRight", "Home", "End"})


def digits_only(value: Optional[str]) -> str:
    """Strip everything except ASCII digits"""
    if not value:
        return ""
    return "".join(ch for ch in _NON_DIGITS.sub("", value) if ch in "0123456789")


def format_phone_number(value: Optional[str]) -> str:
    """Render (AAA) BBB-CCCC progressively; digits past the tenth are dropped"""
    numbers = digits_only(value)[:PHONE_LENGTH]
    if len(numbers) <= 3:
        return numbers
    if len(numbers) <= 6:
        return f"({numbers[:3]}) {numbers[3:]}"
    return f"({numbers[:3]}) {numbers[3:6]}-{numbers[6:]}"


def format_ein(value: Optional[str]) -> str:
    """Render AA-BBBBBBB, capped at 9 digits"""
    numbers = digits_only(value)[:EIN_LENGTH]
    if len(numbers) <= 2:
        return numbers
    return f"{numbers[:2]}-{numbers[2:]}"


def parse_currency_digits(value: Optional[str]) -> str:
    """Keep the digits of a currency entry (the stored form of amount fields)"""
    return digits_only(value)


def format_currency(value: Optional[str]) -> str:
    """Render whole dollars with thousands separators; empty input stays empty"""
    numbers = digits_only(value)
    if not numbers:
        return ""
    return f"${int(numbers):,}"


def format_ssn_for_screen(digits: str, show: bool) -> str:
    """
    On-screen SSN rendering.

    Shown: AAA-BB-CCCC as digits accumulate. Hidden: bullets in the same
    grouping, revealing only the final group once typing reaches it.
    """
    numbers = digits_only(digits)[:SSN_LENGTH]
    if show:
        if len(numbers) <= 3:
            return numbers
        if len(numbers) <= 5:
            return f"{numbers[:3]}-{numbers[3:]}"
        return f"{numbers[:3]}-{numbers[3:5]}-{numbers[5:]}"

    if len(numbers) <= 3:
        return BULLET * len(numbers)
    if len(numbers) <= 5:
        return f"{BULLET * 3}-{BULLET * (len(numbers) - 3)}"
    return f"{BULLET * 3}-{BULLET * 2}-{numbers[5:]}"


class SSNInput:
    """
    Hidden raw-digit buffer behind a masked SSN field.

    Keys are consumed one at a time; the visible text is always derived from
    the buffer, never parsed back from the display.
    """

    def __init__(self, initial: str = ""):
        self.raw = digits_only(initial)[:SSN_LENGTH]
        self.show = False

    def handle_key(self, key: str) -> bool:
        """
        Apply a key press to the buffer.

        Returns True when the key should reach the underlying input control
        (navigation keys), False when it was consumed or suppressed.
        """
        if key == "Backspace":
            self.raw = self.raw[:-1]
            return False

        if len(key) == 1 and key in "0123456789":
            if len(self.raw) < SSN_LENGTH:
                self.raw += key
            return False

        return key in NAVIGATION_KEYS

    def toggle_visibility(self) -> None:
        self.show = not self.show

    def clear(self) -> None:
        self.raw = ""

    @property
    def complete(self) -> bool:
        return len(self.raw) == SSN_LENGTH

    def display(self, show: Optional[bool] = None) -> str:
        return format_ssn_for_screen(self.raw, self.show if show is None else show)


def format_currency_or_na(value: Optional[str]) -> str:
    """Currency display for documents: "N/A" instead of an empty string"""
    return format_currency(value) or "N/A"
