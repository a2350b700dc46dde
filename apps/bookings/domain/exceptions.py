"""Booking domain exceptions."""

from shared.domain.exceptions import DomainError, InvalidWindow

__all__ = ["BookingConflictError", "DomainError", "InvalidWindow", "LookupFailed"]


class LookupFailed(DomainError):
    """
    The booking store could not answer a query.

    Covers connectivity errors, statement timeouts and rows that do not
    parse into domain objects. Callers must treat it as "conflict
    present" and deny the booking.
    """


class BookingConflictError(DomainError):
    """The store rejected a write because it overlaps an occupying booking."""
