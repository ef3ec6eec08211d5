# =============================================================================
# API Request Models — Pydantic V2 Schemas
# =============================================================================
#
# These models define the shape of data coming INTO the API. FastAPI uses
# them for request body validation and OpenAPI docs. Validation errors are
# turned into the common error envelope by app/api/errors.py.
#
# Query parameters for list/search/export are deliberately NOT modelled
# here: they are read loosely by QuerySpec.from_params so a noisy parameter
# falls back to its default instead of failing the request.
# =============================================================================

from datetime import date
from typing import Any

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from app.db.models import Gender, PersonStatus


class AddressIn(BaseModel):
    """Nested address. Only `street` may be omitted; `country` has a default."""

    model_config = ConfigDict(str_strip_whitespace=True)

    street: str | None = Field(default=None, max_length=100)
    city: str = Field(..., min_length=1, max_length=50)
    state: str = Field(..., min_length=1, max_length=50)
    zip_code: str = Field(..., pattern=r"^[0-9]{5,6}$")
    # None → settings.default_country, applied in app.services.records
    country: str | None = Field(default=None, min_length=1, max_length=100)

    @field_validator("street")
    @classmethod
    def blank_street_is_missing(cls, value: str | None) -> str | None:
        return value or None


class PersonWrite(BaseModel):
    """
    Request body for POST /api/users and PUT /api/users/{id}.

    PUT replaces the whole record, so both use the same full schema.

    Example:
        {
            "first_name": "Ana",
            "last_name": "Silva",
            "email": "ana.silva@example.com",
            "phone": "9876543210",
            "date_of_birth": "1994-03-12",
            "gender": "Female",
            "address": {"city": "Pune", "state": "MH", "zip_code": "411001"}
        }
    """

    model_config = ConfigDict(
        str_strip_whitespace=True,
        json_schema_extra={
            "examples": [
                {
                    "first_name": "Ana",
                    "last_name": "Silva",
                    "email": "ana.silva@example.com",
                    "phone": "9876543210",
                    "date_of_birth": "1994-03-12",
                    "gender": "Female",
                    "address": {
                        "street": "12 MG Road",
                        "city": "Pune",
                        "state": "MH",
                        "zip_code": "411001",
                    },
                    "status": "Active",
                }
            ]
        },
    )

    first_name: str = Field(..., min_length=1, max_length=50)
    last_name: str = Field(..., min_length=1, max_length=50)
    email: EmailStr
    phone: str = Field(..., pattern=r"^[0-9]{10}$")
    date_of_birth: date
    gender: Gender
    address: AddressIn
    status: PersonStatus = PersonStatus.ACTIVE

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, value: str) -> str:
        return value.lower()


class BulkDeleteRequest(BaseModel):
    """
    Request body for POST /api/users/bulk-delete.

    `ids` is left untyped on purpose: shape checks (non-empty collection)
    belong to the bulk delete executor, which reports them as a
    validation failure with its own message.
    """

    ids: Any = Field(default=None, examples=[[1, 2, 3]])
