"""Domain primitives: scalar aliases and normalisation helpers."""

from __future__ import annotations

import re
from decimal import ROUND_HALF_UP, Decimal

type Email = str
type Phone = str
type Address = str

_NON_DIGITS = re.compile(r"\D+")
_WHITESPACE = re.compile(r"\s+")
_CENT = Decimal("0.01")


def normalize_email(value: str | None) -> Email | None:
    if value is None:
        return None
    cleaned = value.strip().lower()
    return cleaned or None


def normalize_phone(value: str | None) -> Phone | None:
    if value is None:
        return None
    digits = _NON_DIGITS.sub("", value)
    return digits or None


def normalize_name(value: str | None) -> str | None:
    if value is None:
        return None
    cleaned = _WHITESPACE.sub(" ", value).strip()
    return cleaned or None


def normalize_address(value: str | None) -> Address | None:
    return normalize_name(value)


def to_money(value: Decimal | float | str | None) -> Decimal:
    """Coerce a currency amount to a two-place Decimal (``None`` -> 0.00)."""

    if value is None or value == "":
        return Decimal("0.00")
    if isinstance(value, float):
        value = repr(value)
    return Decimal(value).quantize(_CENT, rounding=ROUND_HALF_UP)
