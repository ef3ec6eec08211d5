# =============================================================================
# Domain Errors
# =============================================================================
#
# Every failure that reaches the HTTP boundary carries a machine-readable
# `kind`, a human-readable `message`, and the status code it maps to.
# app/api/errors.py turns these into JSON envelopes.
#
# Two deliberate asymmetries:
# - Filter, sort and paging mistakes never raise; they degrade to defaults.
# - Bulk delete with no ids and export with no rows raise, because both
#   point at a caller bug that should not be masked.
# =============================================================================

from __future__ import annotations


class RecordsError(Exception):
    """Base class for errors surfaced to API callers."""

    kind: str = "error"
    status_code: int = 500
    default_message: str = "Unexpected error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"success": False, "kind": self.kind, "message": self.message}


class ValidationFailure(RecordsError):
    kind = "validation"
    status_code = 400
    default_message = "Validation error"


class EmptyInputError(ValidationFailure):
    """Bulk delete called without a non-empty collection of ids."""

    default_message = "Please provide an array of user IDs to delete"


class DuplicateEmailError(ValidationFailure):
    kind = "duplicate_email"
    default_message = "Email already exists"


class NotFoundFailure(RecordsError):
    kind = "not_found"
    status_code = 404
    default_message = "User not found"


class NoRowsError(RecordsError):
    """Export matched zero records."""

    kind = "no_rows"
    status_code = 404
    default_message = "No users found to export"


class StoreUnavailable(RecordsError):
    """The record store call failed. Driver details are logged, not exposed."""

    kind = "store_unavailable"
    status_code = 503
    default_message = "Record store is unavailable"
