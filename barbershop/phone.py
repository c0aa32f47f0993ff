# barbershop/phone.py
# Canonical form is (31) 97322-3898; clients are keyed by the 11 bare digits.

import re

BRAZILIAN_PHONE_RE = re.compile(r"^\(\d{2}\) 9\d{4}-\d{4}$")
PHONE_DIGITS = 11


def phone_digits(phone: str) -> str:
    """Strip everything but digits."""
    return re.sub(r"\D", "", phone or "")


def format_phone(value: str) -> str:
    """
    Format raw input progressively, the way the booking form does while typing.

    Extra digits beyond 11 are dropped. Partial input gets partial formatting:
    ``"31"`` -> ``"31"``, ``"31997"`` -> ``"(31) 997"``,
    ``"31997223898"`` -> ``"(31) 99722-3898"``.
    """
    digits = phone_digits(value)[:PHONE_DIGITS]
    if len(digits) <= 2:
        return digits
    if len(digits) <= 7:
        return f"({digits[:2]}) {digits[2:]}"
    return f"({digits[:2]}) {digits[2:7]}-{digits[7:]}"


def is_valid_brazilian_phone(phone: str) -> bool:
    return bool(BRAZILIAN_PHONE_RE.match(phone or ""))
