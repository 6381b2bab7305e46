"""Tests for ContactStore against a mocked AsyncSession."""
import uuid
from unittest.mock import AsyncMock, MagicMock

import pytest

from app.core.exceptions import ContactNotFoundError
from app.models.contact import Contact
from app.services.contact_store import ContactStore


def _mock_session(get_result=None, in_transaction: bool = False) -> AsyncMock:
    session = AsyncMock()
    session.get = AsyncMock(return_value=get_result)
    session.add = MagicMock()
    session.in_transaction = MagicMock(return_value=in_transaction)
    session.begin_nested = MagicMock()
    return session


@pytest.mark.asyncio
async def test_list_all_orders_by_id():
    contacts = [Contact(full_name="Ada Lovelace"), Contact(full_name="Bob Stone")]
    result = MagicMock()
    result.scalars.return_value.all.return_value = contacts
    session = _mock_session()
    session.execute = AsyncMock(return_value=result)

    listed = await ContactStore(session).list_all()

    assert listed == contacts
    stmt = session.execute.call_args[0][0]
    assert "ORDER BY contacts.id" in str(stmt)


@pytest.mark.asyncio
async def test_create_adds_and_flushes():
    session = _mock_session()
    contact = await ContactStore(session).create({"full_name": "Ada Lovelace", "email": "ada@example.com"})

    assert isinstance(contact, Contact)
    assert contact.email == "ada@example.com"
    session.add.assert_called_once_with(contact)
    session.flush.assert_awaited_once()


@pytest.mark.asyncio
async def test_update_sets_fields():
    contact = Contact(full_name="Ada Lovelace", email="old@example.com")
    session = _mock_session(get_result=contact)

    updated = await ContactStore(session).update(uuid.uuid4(), {"email": "new@example.com"})

    assert updated is contact
    assert contact.email == "new@example.com"
    session.flush.assert_awaited_once()


@pytest.mark.asyncio
async def test_update_missing_contact_raises():
    session = _mock_session(get_result=None)
    with pytest.raises(ContactNotFoundError):
        await ContactStore(session).update(uuid.uuid4(), {"email": "x@example.com"})
    session.flush.assert_not_awaited()


@pytest.mark.asyncio
async def test_delete_missing_contact_raises():
    session = _mock_session(get_result=None)
    with pytest.raises(ContactNotFoundError):
        await ContactStore(session).delete(uuid.uuid4())


@pytest.mark.asyncio
async def test_begin_only_when_no_transaction_open():
    idle = _mock_session(in_transaction=False)
    await ContactStore(idle).begin()
    idle.begin.assert_called_once()

    busy = _mock_session(in_transaction=True)
    await ContactStore(busy).begin()
    busy.begin.assert_not_called()


def test_savepoint_uses_nested_transaction():
    session = _mock_session()
    ContactStore(session).savepoint()
    session.begin_nested.assert_called_once()
