"""
Booking domain

Pure-Python core of the lending system: the conflict checker and the
booking validator plus the types they exchange. Nothing here imports
Django, so the whole admission decision can run against any store that
implements `BookingStore`.
"""

from apps.bookings.domain.conflicts import ConflictChecker, ConflictReport, windows_overlap
from apps.bookings.domain.entities import (
    BookingKind,
    BookingRequest,
    BookingStatus,
    EquipmentStatus,
    OccupyingBooking,
    Requester,
    RequesterStatus,
    Resource,
)
from apps.bookings.domain.exceptions import InvalidWindow, LookupFailed
from apps.bookings.domain.policy import BookingPolicy
from apps.bookings.domain.ports import BookingStore
from apps.bookings.domain.results import Accepted, Rejected, RejectionReason
from apps.bookings.domain.validator import BookingValidator, validate_booking

__all__ = [
    "Accepted",
    "BookingKind",
    "BookingPolicy",
    "BookingRequest",
    "BookingStatus",
    "BookingStore",
    "BookingValidator",
    "ConflictChecker",
    "ConflictReport",
    "EquipmentStatus",
    "InvalidWindow",
    "LookupFailed",
    "OccupyingBooking",
    "Rejected",
    "RejectionReason",
    "Requester",
    "RequesterStatus",
    "Resource",
    "validate_booking",
    "windows_overlap",
]
