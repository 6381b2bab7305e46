"""Contact persistence over an async SQLAlchemy session.

The import pipeline only talks to contacts through this class, which keeps
transaction scoping (begin / savepoint / commit / rollback) explicit.
"""
import logging
import uuid
from typing import Any, Mapping

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import ContactNotFoundError
from app.models.contact import Contact

logger = logging.getLogger(__name__)


class ContactStore:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    # ─── Reads ───

    async def list_all(self) -> list[Contact]:
        """All contacts ordered by id, so fuzzy tie-breaks are reproducible."""
        result = await self.session.execute(select(Contact).order_by(Contact.id))
        return list(result.scalars().all())

    async def get_by_id(self, contact_id: uuid.UUID) -> Contact | None:
        return await self.session.get(Contact, contact_id)

    # ─── Writes ───

    async def create(self, fields: Mapping[str, Any]) -> Contact:
        contact = Contact(**fields)
        self.session.add(contact)
        await self.session.flush()
        return contact

    async def update(self, contact_id: uuid.UUID, fields: Mapping[str, Any]) -> Contact:
        contact = await self.get_by_id(contact_id)
        if contact is None:
            raise ContactNotFoundError(contact_id)
        for key, value in fields.items():
            setattr(contact, key, value)
        await self.session.flush()
        return contact

    async def delete(self, contact_id: uuid.UUID) -> None:
        contact = await self.get_by_id(contact_id)
        if contact is None:
            raise ContactNotFoundError(contact_id)
        await self.session.delete(contact)
        await self.session.flush()

    # ─── Transactions ───

    async def begin(self) -> None:
        if not self.session.in_transaction():
            await self.session.begin()

    def savepoint(self):
        """Nested transaction; use as ``async with store.savepoint():``."""
        return self.session.begin_nested()

    async def commit(self) -> None:
        await self.session.commit()

    async def rollback(self) -> None:
        await self.session.rollback()
