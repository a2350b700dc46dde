"""
In-memory booking store

Implements `BookingStore` over plain Python collections. Used by the
domain tests and handy for exercising the validator without a database.
"""

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Set

from apps.bookings.domain.entities import BookingStatus, OccupyingBooking, Resource
from apps.bookings.domain.ports import BookingStore
from shared.domain.value_objects import TimeWindow


@dataclass
class StoredBooking:
    booking_id: Any
    resource_id: Any
    requester_id: Any
    window: TimeWindow
    status: BookingStatus = BookingStatus.APPROVED


class InMemoryBookingStore(BookingStore):
    """
    Set `fail_with` to an exception instance to simulate an outage:
    every read then raises it. `calls` records the name of each read.
    """

    def __init__(self, resources: Iterable[Resource] = (), bookings: Iterable[StoredBooking] = ()):
        self.resources: Dict[Any, Resource] = {resource.id: resource for resource in resources}
        self.bookings: List[StoredBooking] = list(bookings)
        self.fail_with: Optional[Exception] = None
        self.calls: List[str] = []

    def add_resource(self, resource: Resource) -> Resource:
        self.resources[resource.id] = resource
        return resource

    def add_booking(
        self,
        booking_id,
        resource_id,
        start,
        end,
        *,
        requester_id=None,
        status: BookingStatus = BookingStatus.APPROVED,
    ) -> StoredBooking:
        booking = StoredBooking(booking_id, resource_id, requester_id, TimeWindow(start, end), status)
        self.bookings.append(booking)
        return booking

    def query_occupying_bookings(
        self,
        resource_ids,
        exclude_booking_id=None,
        *,
        window=None,
        timeout=None,
    ) -> List[OccupyingBooking]:
        self._read('query_occupying_bookings')
        wanted = set(resource_ids)
        return [
            OccupyingBooking(b.booking_id, b.resource_id, b.window, b.status)
            for b in self.bookings
            if b.resource_id in wanted
            and b.status.occupies
            and (exclude_booking_id is None or b.booking_id != exclude_booking_id)
            and (window is None or b.window.overlaps_with(window))
        ]

    def get_resource(self, resource_id) -> Optional[Resource]:
        self._read('get_resource')
        return self.resources.get(resource_id)

    def resource_ids_of_type(self, type_id) -> Set[Any]:
        self._read('resource_ids_of_type')
        return {r.id for r in self.resources.values() if r.type_id == type_id}

    def count_requester_bookings(self, requester_id, type_id=None, exclude_booking_id=None) -> int:
        self._read('count_requester_bookings')
        count = 0
        for booking in self.bookings:
            if booking.requester_id != requester_id or not booking.status.occupies:
                continue
            if exclude_booking_id is not None and booking.booking_id == exclude_booking_id:
                continue
            if type_id is not None:
                resource = self.resources.get(booking.resource_id)
                if resource is None or resource.type_id != type_id:
                    continue
            count += 1
        return count

    def _read(self, name: str):
        self.calls.append(name)
        if self.fail_with is not None:
            raise self.fail_with

