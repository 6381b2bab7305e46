"""Shared test fixtures: an in-memory stand-in for ContactStore."""
import uuid
from contextlib import asynccontextmanager
from types import SimpleNamespace

import pytest

from app.core.exceptions import ContactNotFoundError
from app.models.contact import Contact

CONTACT_FIELDS = Contact.IMPORTABLE_FIELDS + ("vcard_id", "vcard_data")


def make_contact(**fields) -> SimpleNamespace:
    """Contact-shaped object; unspecified fields default to None."""
    values = {name: None for name in CONTACT_FIELDS}
    values.update(fields)
    values.setdefault("id", uuid.uuid4())
    return SimpleNamespace(**values)


def _copy(contacts: dict) -> dict:
    return {cid: SimpleNamespace(**vars(c)) for cid, c in contacts.items()}


class FakeContactStore:
    """Transactional in-memory store.

    Writes go to a working copy; commit publishes it, rollback discards it,
    and a failing savepoint restores the copy taken when it was entered.
    """

    def __init__(self, contacts=()):
        self.committed = {c.id: c for c in contacts}
        self.working = _copy(self.committed)
        self.writes = 0
        self.commits = 0
        self.rollbacks = 0

    async def list_all(self):
        return sorted(self.committed.values(), key=lambda c: c.id)

    async def get_by_id(self, contact_id):
        return self.working.get(contact_id)

    async def create(self, fields):
        self.writes += 1
        contact = make_contact(**fields)
        self.working[contact.id] = contact
        return contact

    async def update(self, contact_id, fields):
        self.writes += 1
        contact = self.working.get(contact_id)
        if contact is None:
            raise ContactNotFoundError(contact_id)
        for key, value in fields.items():
            setattr(contact, key, value)
        return contact

    async def delete(self, contact_id):
        self.writes += 1
        if self.working.pop(contact_id, None) is None:
            raise ContactNotFoundError(contact_id)

    async def begin(self):
        self.working = _copy(self.committed)

    @asynccontextmanager
    async def savepoint(self):
        snapshot = _copy(self.working)
        try:
            yield
        except Exception:
            self.working = snapshot
            raise

    async def commit(self):
        self.commits += 1
        self.committed = self.working
        self.working = _copy(self.committed)

    async def rollback(self):
        self.rollbacks += 1
        self.working = _copy(self.committed)


@pytest.fixture
def fake_store():
    return FakeContactStore()
