"""Pydantic schemas for the contact CSV import pipeline."""
import uuid
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


# ─── Parser output ───

class CandidateRecord(BaseModel):
    """One data row extracted from an import file, not yet committed."""
    model_config = ConfigDict(frozen=True)

    row_number: int
    full_name: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    phone: str | None = None
    organization: str | None = None
    job_title: str | None = None
    address: str | None = None
    notes: str | None = None
    raw_fields: dict[str, str] = Field(default_factory=dict)


class ParseError(BaseModel):
    row: int  # 0 = whole file
    message: str
    field: str | None = None


class ParseResult(BaseModel):
    contacts: list[CandidateRecord] = []
    errors: list[ParseError] = []
    warnings: list[str] = []


# ─── Validation ───

class ValidationFinding(BaseModel):
    row: int
    field: str
    message: str
    severity: Literal["warning"] = "warning"


class ValidationReport(BaseModel):
    is_valid: bool = True
    warnings: list[ValidationFinding] = []
    errors: list[ValidationFinding] = []


# ─── Duplicate detection ───

MatchType = Literal["email", "name", "fuzzy_name"]
Confidence = Literal["exact", "high", "medium"]


class ExistingContactSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    full_name: str | None = None
    email: str | None = None
    phone: str | None = None
    organization: str | None = None


class DuplicateMatch(BaseModel):
    candidate: CandidateRecord
    existing_id: uuid.UUID
    existing_contact: ExistingContactSummary
    match_type: MatchType
    confidence: Confidence
    similarity: float = 1.0


class DuplicateDetectionResult(BaseModel):
    duplicates: list[DuplicateMatch] = []
    unique: list[CandidateRecord] = []


# ─── Preview response ───

class ImportPreview(BaseModel):
    contacts: list[CandidateRecord]
    duplicates: list[DuplicateMatch]
    validation: ValidationReport
    parse_warnings: list[str] = []
    parse_errors: list[ParseError] = []
    total_rows: int
    unique_count: int


# ─── Execute ───

class ImportDecision(BaseModel):
    row_number: int
    action: Literal["skip", "update", "create"]
    # Kept as a string so a malformed id fails only its own row.
    existing_id: str | None = None


class ImportExecuteRequest(BaseModel):
    contacts: list[CandidateRecord]
    actions: list[ImportDecision] = []


class ImportRowError(BaseModel):
    row: int
    message: str


class ImportOutcome(BaseModel):
    success: bool = True
    created: int = 0
    updated: int = 0
    skipped: int = 0
    errors: list[ImportRowError] = []
    warnings: list[str] = []
    rolled_back: bool = False
