"""
Booking Domain Events

Published through the message bus after the surrounding transaction
commits.
"""

from dataclasses import dataclass
from typing import Any

from shared.domain.base import DomainEvent
from shared.domain.value_objects import TimeWindow


@dataclass
class BookingSubmitted(DomainEvent):
    """A validated booking request was stored"""
    booking_id: Any = None
    equipment_id: Any = None
    requester_id: Any = None
    window: TimeWindow = None
    status: str = ''
    kind: str = ''


@dataclass
class BookingCancelled(DomainEvent):
    """An occupying booking was cancelled and its window released"""
    booking_id: Any = None
    equipment_id: Any = None
    cancelled_by: Any = None
    reason: str = ''


@dataclass
class BookingExpired(DomainEvent):
    """A pending request was never acted upon and has been released"""
    booking_id: Any = None
    equipment_id: Any = None
