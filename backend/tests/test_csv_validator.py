"""Tests for lenient contact field validation."""
import pytest

from app.schemas.imports import CandidateRecord
from app.services.csv_validator import format_phone, normalize_phone, validate_contact, validate_contacts


def _contact(**fields) -> CandidateRecord:
    fields.setdefault("row_number", 1)
    return CandidateRecord(**fields)


def _fields(report) -> list[str]:
    return [w.field for w in report.warnings]


# ─── Phone normalization ──────────────────────────────────────────────────────

@pytest.mark.parametrize("raw, expected", [
    ("+1 (555) 123-4567", "5551234567"),
    ("1-555-123-4567", "5551234567"),
    ("555.123.4567", "5551234567"),
    ("555-1234", "5551234"),
])
def test_normalize_phone(raw, expected):
    assert normalize_phone(raw) == expected


def test_format_phone():
    assert format_phone("+1 555 123 4567") == "(555) 123-4567"
    assert format_phone("555-1234") == "555-1234"


# ─── Field checks ─────────────────────────────────────────────────────────────

def test_clean_contact_has_no_findings():
    report = validate_contact(_contact(
        full_name="Ada Lovelace", email="Ada@Example.com", phone="(555) 123-4567", organization="Acme",
    ))
    assert report.warnings == []
    assert report.is_valid is True


@pytest.mark.parametrize("email", ["not-an-email", "a b@example.com", "ada@example", "@example.com"])
def test_malformed_email_warns(email):
    report = validate_contact(_contact(full_name="Ada Lovelace", email=email))
    assert _fields(report) == ["email"]
    assert report.warnings[0].severity == "warning"


def test_incomplete_phone_warns():
    report = validate_contact(_contact(full_name="Ada Lovelace", phone="555-1234"))
    assert _fields(report) == ["phone"]
    assert "incomplete" in report.warnings[0].message


def test_missing_identity_warns():
    report = validate_contact(_contact(organization="Acme"))
    assert _fields(report) == ["name"]


def test_length_checks():
    report = validate_contact(_contact(
        row_number=7,
        full_name="Ada Lovelace",
        organization="A",
        address="x" * 501,
        notes="y" * 2001,
    ))
    assert _fields(report) == ["organization", "address", "notes"]
    assert {w.row for w in report.warnings} == {7}


def test_limits_are_inclusive():
    report = validate_contact(_contact(
        full_name="Ada Lovelace", organization="AB", address="x" * 500, notes="y" * 2000,
    ))
    assert report.warnings == []


# ─── Batch ────────────────────────────────────────────────────────────────────

def test_validate_contacts_collects_in_row_order_and_never_blocks():
    report = validate_contacts([
        _contact(row_number=1, full_name="Ada Lovelace", email="bad"),
        _contact(row_number=2, full_name="Bob Stone"),
        _contact(row_number=3, full_name="Cy Young", phone="12"),
    ])
    assert [(w.row, w.field) for w in report.warnings] == [(1, "email"), (3, "phone")]
    assert report.errors == []
    assert report.is_valid is True


def test_validate_empty_list():
    report = validate_contacts([])
    assert report.warnings == []
    assert report.is_valid is True
