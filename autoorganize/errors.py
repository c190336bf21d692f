"""
Errors raised by the workshop store.

Reads never raise for a missing id (they return None) and updates/deletes
of a missing id return 0 rows affected. Everything else that goes wrong is
raised to the caller; the store does not retry.
"""
from typing import Any, List, Optional


class StoreError(Exception):
    """Base class for every error raised by the store."""


class ValidationError(StoreError):
    """Caller data broke a required-field or format rule. Nothing was written."""

    def __init__(self, message: str, errors: Optional[List[Any]] = None):
        super().__init__(message)
        self.errors = errors or []


class NotFoundError(StoreError):
    """A referenced id does not exist (used by the HTTP layer for 404s)."""


class PersistenceError(StoreError):
    """The storage engine failed. The enclosing transaction was rolled back."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause


class ConstraintViolationError(PersistenceError):
    """A uniqueness or foreign-key constraint was violated (e.g. duplicate VIN)."""


class PaidInvoiceLinkedError(ConstraintViolationError):
    """A task cannot be deleted while a paid invoice is linked to it."""
