# =============================================================================
# API Response Models — Pydantic V2 Schemas
# =============================================================================
#
# These models define the shape of data coming OUT of the API.
#
# DESIGN DECISION: Separate response models from DB models. The persons
# table stores the address flattened into columns; the API nests it back
# under `address`, and the table layout can change without touching
# clients.
# =============================================================================

from datetime import date, datetime

from pydantic import BaseModel, Field

from app.db.models import Person
from app.services.pager import PageMeta


class HealthResponse(BaseModel):
    """Response for GET /api/health — confirms the API is running."""

    status: str = "ok"
    version: str
    service: str


class AddressResponse(BaseModel):
    street: str | None = None
    city: str
    state: str
    zip_code: str
    country: str


class PersonResponse(BaseModel):
    id: int
    first_name: str
    last_name: str
    email: str
    phone: str
    date_of_birth: date
    gender: str
    address: AddressResponse
    status: str
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_record(cls, person: Person) -> "PersonResponse":
        return cls(
            id=person.id,
            first_name=person.first_name,
            last_name=person.last_name,
            email=person.email,
            phone=person.phone,
            date_of_birth=person.date_of_birth,
            gender=person.gender.value,
            address=AddressResponse(
                street=person.street,
                city=person.city,
                state=person.state,
                zip_code=person.zip_code,
                country=person.country,
            ),
            status=person.status.value,
            created_at=person.created_at,
            updated_at=person.updated_at,
        )


class PaginationResponse(BaseModel):
    """
    Paging metadata for list and search responses.

    `total_pages` is ceil(total / limit) and is 0 for an empty result;
    clients that always want at least one page use `display_total_pages`.
    """

    current_page: int
    total_pages: int
    display_total_pages: int
    total_users: int
    limit: int
    has_next_page: bool
    has_prev_page: bool

    @classmethod
    def from_meta(cls, meta: PageMeta) -> "PaginationResponse":
        return cls(
            current_page=meta.page,
            total_pages=meta.total_pages,
            display_total_pages=meta.display_total_pages,
            total_users=meta.total_count,
            limit=meta.page_size,
            has_next_page=meta.has_next,
            has_prev_page=meta.has_prev,
        )


class PersonListResponse(BaseModel):
    """Response for GET /api/users and GET /api/users/search."""

    success: bool = True
    data: list[PersonResponse]
    pagination: PaginationResponse


class PersonEnvelope(BaseModel):
    success: bool = True
    message: str | None = None
    data: PersonResponse


class MessageResponse(BaseModel):
    success: bool = True
    message: str


class BulkDeleteResponse(BaseModel):
    success: bool = True
    message: str
    deleted_count: int = Field(description="Records actually removed")


class ErrorResponse(BaseModel):
    """Body of every error response."""

    success: bool = False
    kind: str = Field(description="Machine-readable error kind")
    message: str
    errors: list[str] | None = None
