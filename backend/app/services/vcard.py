"""vCard 3.0 serialization for contacts.

Every contact row stores its canonical vCard text (vcard_data) and the
vCard UID (vcard_id) used to keep it in step with the CardDAV address book.
Creating, updating and single-record saves all go through
to_external_record so the UID is generated or preserved in one place.
"""
import re
import uuid
from dataclasses import dataclass
from typing import Mapping

_UID_RE = re.compile(r"^UID:(.+)$", re.MULTILINE)


@dataclass(frozen=True)
class ExternalRecord:
    external_id: str
    serialized: str


def escape_text(value: str) -> str:
    """Escape a TEXT value (RFC 6350 §3.4)."""
    return (
        value.replace("\\", "\\\\")
        .replace("\r\n", "\\n")
        .replace("\n", "\\n")
        .replace(",", "\\,")
        .replace(";", "\\;")
    )


def generate_vcard(fields: Mapping[str, str | None], uid: str) -> str:
    """Render contact fields as a CRLF-separated vCard 3.0 document."""
    def value(name: str) -> str:
        return escape_text(fields.get(name) or "")

    lines = [
        "BEGIN:VCARD",
        "VERSION:3.0",
        f"UID:{uid}",
        f"FN:{value('full_name') or 'Unknown'}",
        f"N:{value('last_name')};{value('first_name')};;;",
    ]
    if fields.get("email"):
        lines.append(f"EMAIL;TYPE=INTERNET:{value('email')}")
    if fields.get("phone"):
        lines.append(f"TEL;TYPE=CELL:{value('phone')}")
    if fields.get("organization"):
        lines.append(f"ORG:{value('organization')}")
    if fields.get("job_title"):
        lines.append(f"TITLE:{value('job_title')}")
    if fields.get("address"):
        lines.append(f"ADR;TYPE=HOME:;;{value('address')};;;;")
    if fields.get("notes"):
        lines.append(f"NOTE:{value('notes')}")
    lines.append("END:VCARD")
    return "\r\n".join(lines)


def extract_uid(vcard: str) -> str | None:
    match = _UID_RE.search(vcard)
    return match.group(1).strip() if match else None


def to_external_record(
    fields: Mapping[str, str | None],
    existing_external_id: str | None = None,
) -> ExternalRecord:
    """Serialize fields, reusing the existing UID when there is one."""
    uid = existing_external_id or str(uuid.uuid4())
    serialized = generate_vcard(fields, uid)
    return ExternalRecord(external_id=extract_uid(serialized) or uid, serialized=serialized)
