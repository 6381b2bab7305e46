"""Lenient field validation for parsed contacts.

Every check produces a warning; nothing here blocks an import.
"""
import re

from app.schemas.imports import CandidateRecord, ValidationFinding, ValidationReport

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

_PHONE_FORMATTING_RE = re.compile(r"[\s\-().]")

MIN_PHONE_DIGITS = 10
MIN_ORGANIZATION_LENGTH = 2
MAX_ADDRESS_LENGTH = 500
MAX_NOTES_LENGTH = 2000


def normalize_phone(phone: str) -> str:
    """Strip formatting and a leading US country code."""
    digits = _PHONE_FORMATTING_RE.sub("", phone)
    digits = digits.removeprefix("+1")
    digits = digits.removeprefix("1")
    return digits.strip()


def format_phone(phone: str) -> str:
    """Render a 10-digit number as (XXX) XXX-XXXX; anything else unchanged."""
    normalized = normalize_phone(phone)
    if len(normalized) == 10:
        return f"({normalized[:3]}) {normalized[3:6]}-{normalized[6:]}"
    return phone


def validate_contact(contact: CandidateRecord) -> ValidationReport:
    warnings: list[ValidationFinding] = []

    def warn(field: str, message: str) -> None:
        warnings.append(ValidationFinding(row=contact.row_number, field=field, message=message))

    if contact.email and not EMAIL_RE.match(contact.email.strip().lower()):
        warn("email", f'Invalid email format: "{contact.email}"')

    if contact.phone and len(normalize_phone(contact.phone)) < MIN_PHONE_DIGITS:
        warn("phone", f'Phone number appears incomplete: "{contact.phone}"')

    has_name = contact.full_name or contact.first_name or contact.last_name
    if not has_name and not contact.email and not contact.phone:
        warn("name", "No name provided and no email/phone for identification")

    if contact.organization and len(contact.organization) < MIN_ORGANIZATION_LENGTH:
        warn("organization", "Organization name seems too short")

    if contact.address and len(contact.address) > MAX_ADDRESS_LENGTH:
        warn("address", "Address seems unusually long")

    if contact.notes and len(contact.notes) > MAX_NOTES_LENGTH:
        warn("notes", f"Notes are very long (over {MAX_NOTES_LENGTH} characters)")

    return ValidationReport(is_valid=True, warnings=warnings)


def validate_contacts(contacts: list[CandidateRecord]) -> ValidationReport:
    """Validate every candidate and merge the findings in row order."""
    report = ValidationReport()
    for contact in contacts:
        single = validate_contact(contact)
        report.warnings.extend(single.warnings)
        report.errors.extend(single.errors)
    report.is_valid = not report.errors
    return report
