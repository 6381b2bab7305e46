"""Seed script — creates the sample contacts used in development.

Idempotent: contacts are matched by email before inserting.
Run: docker exec contacts-backend-1 python scripts/seed.py
"""
import asyncio
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from sqlalchemy import select
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from app.core.config import settings
from app.models.contact import Contact
from app.services.contact_store import ContactStore
from app.services.vcard import to_external_record

SAMPLE_CONTACTS = [
    {
        "full_name": "John Doe",
        "first_name": "John",
        "last_name": "Doe",
        "email": "john.doe@example.com",
        "phone": "+1-555-0101",
        "organization": "Acme Corporation",
        "job_title": "Software Engineer",
        "address": "123 Main Street, Anytown, ST 12345",
        "notes": "Sample contact for testing purposes. Loves coding and coffee.",
    },
    {
        "full_name": "Jane Doe",
        "first_name": "Jane",
        "last_name": "Doe",
        "email": "jane.doe@example.com",
        "phone": "+1-555-0102",
        "organization": "Tech Solutions Inc",
        "job_title": "Product Manager",
        "address": "456 Oak Avenue, Somewhere, ST 67890",
        "notes": "Sample contact for testing purposes. Enjoys hiking and photography.",
    },
]


async def seed():
    engine = create_async_engine(settings.DATABASE_URL)
    SessionLocal = async_sessionmaker(engine, expire_on_commit=False)

    async with SessionLocal() as db:
        store = ContactStore(db)
        print("\n── Contacts ──")
        for fields in SAMPLE_CONTACTS:
            result = await db.execute(select(Contact).where(Contact.email == fields["email"]))
            if result.scalars().first():
                print(f"  [skip] Contact {fields['email']}")
                continue
            external = to_external_record(fields)
            await store.create({**fields, "vcard_id": external.external_id, "vcard_data": external.serialized})
            print(f"  [new]  Contact {fields['full_name']} ({external.external_id})")
        await db.commit()

    await engine.dispose()
    print("\n✓ Seed complete.")


if __name__ == "__main__":
    asyncio.run(seed())
