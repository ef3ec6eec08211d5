# =============================================================================
# Database Models — SQLAlchemy ORM
# =============================================================================
#
# SCHEMA OVERVIEW:
#
# ┌─────────────────────────────┐
# │  persons                    │
# ├─────────────────────────────┤
# │ id (PK, autoincrement)      │
# │ first_name / last_name      │
# │ email (unique, lower-cased) │
# │ phone                       │
# │ date_of_birth (date)        │
# │ gender (Male/Female/Other)  │
# │ street (nullable)           │
# │ city / state / zip_code     │
# │ country                     │
# │ status (Active/Inactive)    │
# │ created_at / updated_at     │
# └─────────────────────────────┘
#
# DESIGN DECISIONS:
#
# 1. The address is flattened into columns on the same row. The API nests
#    it back under `address` (see app/models/responses.py). Every address
#    field is then a plain column the filter builder and sorter can reach.
#
# 2. The integer primary key doubles as the insertion order. The query
#    engine uses it as the tie-break so equal sort values come back in the
#    order they were stored, identically on every call.
#
# 3. Emails are lower-cased before they are written, so the unique
#    constraint on `email` enforces case-insensitive uniqueness.
#
# 4. Enums are stored by value ("Active", not "ACTIVE") so the raw column
#    sorts and reads the same way the API presents it. They are plain
#    VARCHAR columns (native_enum=False), so sorting by gender or status is
#    alphabetical on every backend.
# =============================================================================

import enum
from datetime import UTC, date, datetime

from sqlalchemy import Date, DateTime, Enum, Index, Integer, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """SQLAlchemy declarative base class."""

    pass


class Gender(str, enum.Enum):
    MALE = "Male"
    FEMALE = "Female"
    OTHER = "Other"


class PersonStatus(str, enum.Enum):
    ACTIVE = "Active"
    INACTIVE = "Inactive"


def utcnow() -> datetime:
    return datetime.now(UTC)


def _enum_values(enum_cls: type[enum.Enum]) -> list[str]:
    return [member.value for member in enum_cls]


class Person(Base):
    """
    A managed person record.

    `created_at` is written once at insert; `updated_at` is refreshed by
    app.services.records on every mutation and never precedes `created_at`.
    """

    __tablename__ = "persons"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    first_name: Mapped[str] = mapped_column(String(50), nullable=False)
    last_name: Mapped[str] = mapped_column(String(50), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    phone: Mapped[str] = mapped_column(String(20), nullable=False)
    date_of_birth: Mapped[date] = mapped_column(Date, nullable=False)

    gender: Mapped[Gender] = mapped_column(
        Enum(
            Gender,
            name="person_gender",
            values_callable=_enum_values,
            native_enum=False,
        ),
        nullable=False,
    )

    # Address
    street: Mapped[str | None] = mapped_column(String(100), nullable=True)
    city: Mapped[str] = mapped_column(String(50), nullable=False)
    state: Mapped[str] = mapped_column(String(50), nullable=False)
    zip_code: Mapped[str] = mapped_column(String(6), nullable=False)
    country: Mapped[str] = mapped_column(String(100), nullable=False)

    status: Mapped[PersonStatus] = mapped_column(
        Enum(
            PersonStatus,
            name="person_status",
            values_callable=_enum_values,
            native_enum=False,
        ),
        nullable=False,
        default=PersonStatus.ACTIVE,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
    )

    __table_args__ = (
        Index("ix_persons_created_at", "created_at"),
        Index("ix_persons_status_gender", "status", "gender"),
    )

    def __repr__(self) -> str:
        return f"<Person(id={self.id}, email='{self.email}', status={self.status})>"
