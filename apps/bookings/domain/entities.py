"""
Booking Domain Entities

- BookingStatus: lifecycle states, split into occupying and terminal
- BookingKind: loan (pick up now) or reservation (pick up later)
- RequesterStatus / EquipmentStatus: eligibility and catalog states
- Requester, Resource, OccupyingBooking, BookingRequest: the values the
  validator and the conflict checker exchange with the store
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Optional

from shared.domain.value_objects import TimeWindow


class BookingStatus(Enum):
    """
    Booking lifecycle

    State transitions (driven by the approval/return workflow):
    - PENDING -> APPROVED (staff approved the request)
    - PENDING -> REJECTED (staff rejected the request)
    - APPROVED -> ACTIVE (equipment handed over)
    - ACTIVE -> COMPLETED (equipment returned)
    - PENDING/APPROVED -> CANCELLED (requester or staff cancelled)
    """
    PENDING = 'pending'
    APPROVED = 'approved'
    ACTIVE = 'active'
    COMPLETED = 'completed'
    CANCELLED = 'cancelled'
    REJECTED = 'rejected'

    @property
    def occupies(self) -> bool:
        """Non-terminal bookings reserve their equipment for their window"""
        return self in OCCUPYING_STATUSES


OCCUPYING_STATUSES = frozenset({
    BookingStatus.PENDING,
    BookingStatus.APPROVED,
    BookingStatus.ACTIVE,
})

TERMINAL_STATUSES = frozenset(set(BookingStatus) - OCCUPYING_STATUSES)


class BookingKind(Enum):
    LOAN = 'loan'
    RESERVATION = 'reservation'


class RequesterStatus(Enum):
    """Account status; only APPROVED requesters may book"""
    APPROVED = 'approved'
    PENDING = 'pending'
    SUSPENDED = 'suspended'

    @classmethod
    def coerce(cls, value) -> Optional['RequesterStatus']:
        """Return the member for `value`, or None when it is not a known status"""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return None


class EquipmentStatus(Enum):
    READY = 'ready'
    BORROWED = 'borrowed'
    MAINTENANCE = 'maintenance'
    RETIRED = 'retired'


STAFF_ROLES = frozenset({'staff', 'admin'})


@dataclass(frozen=True)
class Requester:
    """The identity asking for a booking, with its eligibility status"""
    id: Any
    status: RequesterStatus
    role: str = 'user'
    requester_type: str = 'student'

    @property
    def is_eligible(self) -> bool:
        return RequesterStatus.coerce(self.status) is RequesterStatus.APPROVED

    @property
    def is_staff(self) -> bool:
        return self.role in STAFF_ROLES


@dataclass(frozen=True)
class Resource:
    """
    A bookable equipment unit as seen by the booking subsystem

    `type_is_exclusive_pool` marks types whose units form one shared
    pool: a booking of any unit blocks every unit of the type.
    """
    id: Any
    type_id: Any = None
    is_active: bool = True
    status: EquipmentStatus = EquipmentStatus.READY
    type_is_exclusive_pool: bool = False

    @property
    def is_bookable(self) -> bool:
        return self.is_active and self.status is not EquipmentStatus.RETIRED


@dataclass(frozen=True)
class OccupyingBooking:
    """An existing booking that holds its resource for `window`"""
    booking_id: Any
    resource_id: Any
    window: TimeWindow
    status: BookingStatus = BookingStatus.APPROVED

    def to_dict(self) -> dict:
        return {
            'booking_id': self.booking_id,
            'resource_id': self.resource_id,
            'status': self.status.value,
            **self.window.to_dict(),
        }


@dataclass(frozen=True)
class BookingRequest:
    """
    A proposal to book `resource_id` for [start, end)

    `now` is supplied by the caller whenever a time-dependent policy
    (advance notice, advance horizon) must be checked.
    `exclude_booking_id` is set when re-validating an existing booking
    during an edit, so that it does not conflict with itself.
    """
    resource_id: Any
    requester: Requester
    start: Optional[datetime]
    end: Optional[datetime]
    now: Optional[datetime] = None
    exclude_booking_id: Any = None
    kind: BookingKind = BookingKind.LOAN
