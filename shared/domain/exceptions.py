"""
Shared domain exceptions

Errors that any bounded context may raise while enforcing its invariants.
"""


class DomainError(Exception):
    """Base class for all domain rule violations"""


class InvalidWindow(DomainError, ValueError):
    """
    A time window is missing one of its bounds or is not ordered.

    Raised for `end <= start`: an empty or inverted window can never be
    booked, so callers must fix the input rather than retry.
    """
