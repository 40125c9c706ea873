from __future__ import annotations

from decimal import Decimal

import pytest

from claimsync.domain.model import (
    ContactDetails,
    normalize_email,
    normalize_name,
    normalize_phone,
    to_money,
)


def test_normalize_email_lowercases_and_strips() -> None:
    assert normalize_email("  Jane.Doe@Example.COM ") == "jane.doe@example.com"
    assert normalize_email("   ") is None
    assert normalize_email(None) is None


def test_normalize_phone_keeps_digits_only() -> None:
    assert normalize_phone("+1 (555) 010-2030") == "15550102030"
    assert normalize_phone("n/a") is None


def test_normalize_name_collapses_whitespace() -> None:
    assert normalize_name("  Jane \t  Doe ") == "Jane Doe"
    assert normalize_name("") is None


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (None, Decimal("0.00")),
        ("", Decimal("0.00")),
        ("12.345", Decimal("12.35")),
        (19.99, Decimal("19.99")),
        (Decimal(5), Decimal("5.00")),
    ],
)
def test_to_money_quantizes_to_cents(
    value: Decimal | float | str | None,
    expected: Decimal,
) -> None:
    assert to_money(value) == expected


def test_contact_details_normalized() -> None:
    contact = ContactDetails(
        email=" JANE@example.com",
        phone="555-0100",
        name=" Jane   Doe ",
        address=" 1 Main  St ",
    ).normalized()

    assert contact == ContactDetails(
        email="jane@example.com",
        phone="5550100",
        name="Jane Doe",
        address="1 Main St",
    )
