"""CSV parser with flexible column mapping for contact imports.

Header names are matched against an injected ColumnAliases value, so files
exported from different address books ("E-Mail", "Email Address", "Given
Name", ...) all land on the same normalized fields. Rows missing every
identifying field (name, email, phone) are dropped with a warning.
"""
import csv
import logging
import re
from dataclasses import dataclass

from app.schemas.imports import CandidateRecord, ParseError, ParseResult

logger = logging.getLogger(__name__)

# Contained aliases shorter than this only ever match exactly.
MIN_CONTAINMENT_KEY = 3

_NON_ALNUM = re.compile(r"[^a-z0-9]+")
_LINE_BREAK_RE = re.compile(r"\r?\n")


# ─── Column alias configuration ───

@dataclass(frozen=True)
class ColumnAliases:
    """Immutable field → accepted header spellings table.

    Field order matters: when two fields match a header equally well the
    earlier one wins.
    """
    fields: tuple[tuple[str, tuple[str, ...]], ...]

    @classmethod
    def default(cls) -> "ColumnAliases":
        return DEFAULT_ALIASES

    def match(self, header: str) -> str | None:
        """Return the field a header maps to, or None if unmapped."""
        key = column_key(header)
        if not key:
            return None

        for field, aliases in self.fields:
            if any(column_key(alias) == key for alias in aliases):
                return field

        best_field: str | None = None
        best_len = 0
        for field, aliases in self.fields:
            for alias in aliases:
                alias_key = column_key(alias)
                contained = _contained_length(key, alias_key)
                if contained > best_len:
                    best_field, best_len = field, contained
        return best_field


def _contained_length(key: str, alias_key: str) -> int:
    """Length of whichever key is contained in the other (0 if neither)."""
    shorter, longer = sorted((key, alias_key), key=len)
    if len(shorter) >= MIN_CONTAINMENT_KEY and shorter in longer:
        return len(shorter)
    return 0


def column_key(name: str) -> str:
    """Case, space and punctuation insensitive comparison key."""
    return _NON_ALNUM.sub("", name.lower())


DEFAULT_ALIASES = ColumnAliases(fields=(
    ("full_name", ("full name", "fullname", "name", "display name", "displayname")),
    ("first_name", ("first name", "firstname", "first", "given name", "givenname")),
    ("last_name", ("last name", "lastname", "last", "family name", "familyname", "surname")),
    ("email", ("email", "e-mail", "email address", "emailaddress", "mail")),
    ("phone", ("phone", "telephone", "tel", "mobile", "cell", "phone number", "phonenumber")),
    ("organization", ("organization", "organisation", "org", "company", "employer", "workplace")),
    ("job_title", ("job title", "jobtitle", "title", "position", "role", "job")),
    ("address", ("address", "street", "street address", "streetaddress", "location")),
    ("notes", ("notes", "note", "comments", "comment", "remarks", "description")),
))


# ─── Line splitting ───

def split_csv_line(line: str) -> list[str]:
    """Split one CSV line into trimmed field values.

    Double-quoted fields may contain commas and doubled quotes, and may be
    followed by spaces before the next comma. An unterminated quote raises
    csv.Error.
    """
    # Doubled quotes come in pairs, so an odd count means one was never closed.
    if line.count('"') % 2:
        raise csv.Error("unterminated quoted field")
    # Field size is bounded by the upload limit, not csv's default cap.
    if len(line) > csv.field_size_limit():
        csv.field_size_limit(len(line))
    reader = csv.reader([line], skipinitialspace=True)
    values = next(reader, [])
    return [v.strip() for v in values]


# ─── Parsing ───

def parse_csv(raw_text: str, aliases: ColumnAliases | None = None) -> ParseResult:
    """Parse raw CSV text into candidate contact records plus diagnostics.

    Pure function: never touches the store, never raises for bad input.
    Row numbers are 1-indexed over data rows (the header is not counted).
    """
    aliases = aliases or ColumnAliases.default()
    result = ParseResult()

    if not raw_text or not raw_text.strip():
        result.errors.append(ParseError(row=0, message="CSV file is empty"))
        return result

    lines = [line for line in _LINE_BREAK_RE.split(raw_text) if line.strip()]
    if len(lines) < 2:
        result.errors.append(
            ParseError(row=0, message="CSV must have at least a header row and one data row")
        )
        return result

    try:
        headers = split_csv_line(lines[0])
    except csv.Error as exc:
        result.errors.append(ParseError(row=0, message=f"Could not parse header row: {exc}"))
        return result

    column_map, unmapped = _build_column_map(headers, aliases, result.warnings)
    if unmapped:
        result.warnings.append(
            f"Unmapped columns found: {', '.join(unmapped)}. These will be ignored."
        )

    for row_number, line in enumerate(lines[1:], start=1):
        try:
            values = split_csv_line(line)
            record = _build_record(row_number, headers, values, column_map)
        except Exception as exc:
            logger.debug("parse_csv: row %d failed: %s", row_number, exc)
            result.errors.append(ParseError(row=row_number, message=str(exc) or "Failed to parse row"))
            continue

        if record.full_name or record.email or record.phone:
            result.contacts.append(record)
        else:
            result.warnings.append(
                f"Row {row_number}: Skipped - no identifying information (name, email, or phone)"
            )

    logger.info(
        "parse_csv: %d contacts, %d errors, %d warnings",
        len(result.contacts), len(result.errors), len(result.warnings),
    )
    return result


def _build_column_map(
    headers: list[str],
    aliases: ColumnAliases,
    warnings: list[str],
) -> tuple[dict[str, int], list[str]]:
    column_map: dict[str, int] = {}
    unmapped: list[str] = []
    for index, header in enumerate(headers):
        field = aliases.match(header)
        if field is None:
            unmapped.append(header)
        elif field in column_map:
            warnings.append(
                f"Column '{header}' also maps to {field}; "
                f"using '{headers[column_map[field]]}' instead."
            )
        else:
            column_map[field] = index
    return column_map, unmapped


def _build_record(
    row_number: int,
    headers: list[str],
    values: list[str],
    column_map: dict[str, int],
) -> CandidateRecord:
    raw_fields = {
        header: values[index] if index < len(values) else ""
        for index, header in enumerate(headers)
    }

    fields: dict[str, str | None] = {}
    for field, index in column_map.items():
        value = values[index] if index < len(values) else ""
        fields[field] = value or None

    _reconcile_names(fields)
    return CandidateRecord(row_number=row_number, raw_fields=raw_fields, **fields)


def _reconcile_names(fields: dict[str, str | None]) -> None:
    """Fill full_name from its parts, or the parts from full_name."""
    first, last = fields.get("first_name"), fields.get("last_name")
    full = fields.get("full_name")

    if not full and (first or last):
        fields["full_name"] = " ".join(p for p in (first, last) if p) or None
    elif full and not first and not last:
        parts = full.split()
        if len(parts) >= 2:
            fields["first_name"] = " ".join(parts[:-1])
            fields["last_name"] = parts[-1]
        elif parts:
            fields["first_name"] = parts[0]
