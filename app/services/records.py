# =============================================================================
# Record CRUD — Single-Record Glue Around the Store
# =============================================================================
#
# Get, create, replace and delete one person record.
#
# Email uniqueness (case-insensitive) is checked with find_one before the
# write. Two concurrent writers can both pass that check; the unique
# constraint on persons.email then rejects the loser at flush time and the
# store adapter reports it as the same DuplicateEmailError.
# =============================================================================

from __future__ import annotations

import logging
from datetime import UTC, datetime

from sqlalchemy import func

from app.config import settings
from app.db.models import Person, utcnow
from app.errors import DuplicateEmailError, NotFoundFailure
from app.models.requests import PersonWrite
from app.services.record_store import RecordStore

logger = logging.getLogger(__name__)


async def get_record(store: RecordStore, record_id: int) -> Person:
    person = await store.get(record_id)
    if person is None:
        raise NotFoundFailure()
    return person


async def create_record(
    store: RecordStore, data: PersonWrite, default_country: str | None = None,
) -> Person:
    await _ensure_email_free(store, data.email)

    now = utcnow()
    person = Person(created_at=now, updated_at=now)
    _apply(person, data, default_country)
    await store.add(person)
    await store.commit()

    logger.info("Created person id=%d email=%s", person.id, person.email)
    return person


async def update_record(
    store: RecordStore,
    record_id: int,
    data: PersonWrite,
    default_country: str | None = None,
) -> Person:
    person = await get_record(store, record_id)
    await _ensure_email_free(store, data.email, exclude_id=record_id)

    _apply(person, data, default_country)
    person.updated_at = max(utcnow(), _aware(person.created_at))
    await store.flush()
    await store.commit()

    logger.info("Updated person id=%d", person.id)
    return person


async def delete_record(store: RecordStore, record_id: int) -> None:
    person = await get_record(store, record_id)
    await store.delete(person)
    await store.commit()
    logger.info("Deleted person id=%d", record_id)


async def _ensure_email_free(
    store: RecordStore, email: str, exclude_id: int | None = None,
) -> None:
    predicate = func.lower(Person.email) == email.lower()
    if exclude_id is not None:
        predicate = predicate & (Person.id != exclude_id)
    if await store.find_one(predicate) is not None:
        raise DuplicateEmailError()


def _apply(
    person: Person, data: PersonWrite, default_country: str | None,
) -> None:
    person.first_name = data.first_name
    person.last_name = data.last_name
    person.email = data.email.lower()
    person.phone = data.phone
    person.date_of_birth = data.date_of_birth
    person.gender = data.gender
    person.status = data.status

    address = data.address
    person.street = address.street
    person.city = address.city
    person.state = address.state
    person.zip_code = address.zip_code
    person.country = (
        address.country or default_country or settings.default_country
    )


def _aware(value: datetime) -> datetime:
    # SQLite hands timestamps back without tzinfo; they were written as UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value
