"""Contact CSV import endpoints: preview (parse + validate + dedup) and execute."""
import logging
from typing import Annotated

from fastapi import APIRouter, Depends, File, Request, UploadFile, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.exceptions import ImportTransactionError
from app.core.limiter import limiter
from app.db.session import get_session
from app.schemas.imports import ImportExecuteRequest, ImportOutcome, ImportPreview
from app.services.contact_store import ContactStore
from app.services.csv_parser import parse_csv
from app.services.csv_validator import validate_contacts
from app.services.duplicate_detection import detect_duplicates
from app.services.import_executor import execute_import

logger = logging.getLogger(__name__)

router = APIRouter()

CSV_CONTENT_TYPES = {"text/csv", "application/csv", "application/vnd.ms-excel"}


async def get_contact_store(
    db: Annotated[AsyncSession, Depends(get_session)],
) -> ContactStore:
    return ContactStore(db)


def _error(status_code: int, error: str, details=None) -> JSONResponse:
    body = {"error": error}
    if details is not None:
        body["details"] = details
    return JSONResponse(status_code=status_code, content=body)


def _is_csv(file: UploadFile) -> bool:
    filename = (file.filename or "").lower()
    content_type = (file.content_type or "").split(";")[0].strip().lower()
    return filename.endswith(".csv") or content_type in CSV_CONTENT_TYPES


# ─── POST /contacts/import ───

@router.post("/import", response_model=ImportPreview, summary="Preview a contact CSV import")
@limiter.limit(settings.IMPORT_RATE_LIMIT)
async def preview_import(
    request: Request,
    store: Annotated[ContactStore, Depends(get_contact_store)],
    file: UploadFile | None = File(None),
):
    if file is None or not file.filename:
        return _error(status.HTTP_400_BAD_REQUEST, "No file provided")
    if not _is_csv(file):
        return _error(status.HTTP_400_BAD_REQUEST, "File must be a CSV file")

    content = await file.read(settings.IMPORT_MAX_FILE_BYTES + 1)
    if len(content) > settings.IMPORT_MAX_FILE_BYTES:
        return _error(
            status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            f"File exceeds the {settings.IMPORT_MAX_FILE_BYTES} byte import limit",
        )

    try:
        parsed = parse_csv(content.decode("utf-8-sig", errors="replace"))
        if parsed.errors and not parsed.contacts:
            return _error(
                status.HTTP_400_BAD_REQUEST,
                "Failed to parse CSV",
                [e.model_dump() for e in parsed.errors],
            )

        validation = validate_contacts(parsed.contacts)
        existing = await store.list_all()
        detection = detect_duplicates(parsed.contacts, existing)
    except Exception as exc:
        logger.error("preview_import: %s failed: %s", file.filename, exc, exc_info=True)
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to process CSV file", str(exc))

    logger.info(
        "preview_import: %s → %d rows, %d duplicates, %d warnings",
        file.filename, len(parsed.contacts), len(detection.duplicates), len(validation.warnings),
    )
    return ImportPreview(
        contacts=parsed.contacts,
        duplicates=detection.duplicates,
        validation=validation,
        parse_warnings=parsed.warnings,
        parse_errors=parsed.errors,
        total_rows=len(parsed.contacts),
        unique_count=len(detection.unique),
    )


# ─── POST /contacts/import/execute ───

@router.post("/import/execute", response_model=ImportOutcome, summary="Apply resolved import actions")
async def execute_import_route(
    body: ImportExecuteRequest,
    store: Annotated[ContactStore, Depends(get_contact_store)],
):
    try:
        return await execute_import(store, body.contacts, body.actions)
    except ImportTransactionError as exc:
        logger.error("execute_import_route: %s", exc)
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to execute import", str(exc))
