"""Apply user-resolved import decisions to the contact store.

The whole batch runs in one transaction and is all-or-nothing: every row is
attempted and failures are reported per row, but if any row failed the
transaction is rolled back, undoing the rows that succeeded too. Counters in
the outcome still describe what was applied before the rollback.

Each row runs in its own savepoint so a database error on one row does not
leave the enclosing transaction unusable for the rows after it.
"""
import logging
import uuid
from typing import Callable, Mapping, Sequence

from app.core.exceptions import ContactNotFoundError, ImportTransactionError
from app.models.contact import Contact
from app.schemas.imports import CandidateRecord, ImportDecision, ImportOutcome, ImportRowError
from app.services.contact_store import ContactStore
from app.services.vcard import ExternalRecord, to_external_record

logger = logging.getLogger(__name__)

Serializer = Callable[..., ExternalRecord]


def candidate_fields(candidate: CandidateRecord) -> dict[str, str | None]:
    """Canonical store fields for a candidate (empty strings become None)."""
    return {
        name: (getattr(candidate, name) or "").strip() or None
        for name in Contact.IMPORTABLE_FIELDS
    }


def merge_fields(existing: Contact, incoming: Mapping[str, str | None]) -> dict[str, str | None]:
    """Overlay the non-empty incoming values onto the existing contact's values."""
    merged = {name: getattr(existing, name) for name in Contact.IMPORTABLE_FIELDS}
    merged.update({name: value for name, value in incoming.items() if value})
    return merged


def _parse_contact_id(value: str | None) -> uuid.UUID:
    if not value:
        raise ValueError("existing_id is required for an update")
    try:
        return uuid.UUID(str(value))
    except ValueError:
        raise ValueError(f"Invalid existing_id: '{value}'") from None


async def _apply_row(
    store: ContactStore,
    candidate: CandidateRecord,
    decision: ImportDecision,
    serializer: Serializer,
) -> None:
    fields = candidate_fields(candidate)

    if decision.action == "update":
        contact_id = _parse_contact_id(decision.existing_id)
        existing = await store.get_by_id(contact_id)
        if existing is None:
            raise ContactNotFoundError(contact_id)
        fields = merge_fields(existing, fields)
        external = serializer(fields, existing.vcard_id)
        await store.update(
            contact_id,
            {**fields, "vcard_id": external.external_id, "vcard_data": external.serialized},
        )
    else:
        external = serializer(fields)
        await store.create(
            {**fields, "vcard_id": external.external_id, "vcard_data": external.serialized}
        )


async def execute_import(
    store: ContactStore,
    candidates: Sequence[CandidateRecord],
    decisions: Sequence[ImportDecision],
    serializer: Serializer = to_external_record,
) -> ImportOutcome:
    """Create/update contacts per decision inside a single transaction.

    Rows without a decision, or with an explicit skip, are counted as
    skipped and never touch the store.

    Raises:
        ImportTransactionError: the transaction could not be opened,
            committed or rolled back.
    """
    by_row = {decision.row_number: decision for decision in decisions}
    outcome = ImportOutcome()

    known_rows = {candidate.row_number for candidate in candidates}
    for row_number in sorted(set(by_row) - known_rows):
        outcome.warnings.append(f"Row {row_number}: action ignored - no matching contact in this import")

    try:
        await store.begin()
    except Exception as exc:
        logger.error("execute_import: could not open transaction: %s", exc)
        raise ImportTransactionError(f"Could not open import transaction: {exc}") from exc

    try:
        for candidate in candidates:
            decision = by_row.get(candidate.row_number)
            if decision is None or decision.action == "skip":
                outcome.skipped += 1
                continue

            try:
                async with store.savepoint():
                    await _apply_row(store, candidate, decision, serializer)
            except Exception as exc:
                logger.warning(
                    "execute_import: row %d (%s) failed: %s",
                    candidate.row_number, decision.action, exc,
                )
                outcome.errors.append(ImportRowError(
                    row=candidate.row_number,
                    message=str(exc) or "Failed to import contact",
                ))
                outcome.success = False
                continue

            if decision.action == "update":
                outcome.updated += 1
            else:
                outcome.created += 1

        if outcome.success:
            await store.commit()
        else:
            await store.rollback()
            outcome.rolled_back = True
    except Exception as exc:
        logger.error("execute_import: transaction failed: %s", exc, exc_info=True)
        try:
            await store.rollback()
        except Exception:
            logger.exception("execute_import: rollback after failure also failed")
        raise ImportTransactionError(f"Import transaction failed: {exc}") from exc

    logger.info(
        "execute_import: created=%d updated=%d skipped=%d failed=%d rolled_back=%s",
        outcome.created, outcome.updated, outcome.skipped, len(outcome.errors), outcome.rolled_back,
    )
    return outcome
