"""
Store port

The only way the booking core reads the outside world. Production code
plugs in the Django ORM adapter; tests plug in the in-memory store.
"""

from abc import ABC, abstractmethod
from typing import Any, Iterable, List, Optional, Set

from apps.bookings.domain.entities import OccupyingBooking, Resource
from shared.domain.value_objects import TimeWindow


class BookingStore(ABC):
    """
    Read access to bookings and equipment

    Every method raises `LookupFailed` when the store is unreachable,
    times out or returns data that cannot be parsed.
    """

    @abstractmethod
    def query_occupying_bookings(
        self,
        resource_ids: Iterable[Any],
        exclude_booking_id: Any = None,
        *,
        window: Optional[TimeWindow] = None,
        timeout: Optional[float] = None,
    ) -> List[OccupyingBooking]:
        """
        Return non-terminal bookings holding any of `resource_ids`

        `window` only narrows the query; callers must not rely on it
        being applied. `timeout` is in seconds.
        """

    @abstractmethod
    def get_resource(self, resource_id: Any) -> Optional[Resource]:
        """Return the resource or None if it does not exist"""

    @abstractmethod
    def resource_ids_of_type(self, type_id: Any) -> Set[Any]:
        """Return the ids of every resource of the given type"""

    @abstractmethod
    def count_requester_bookings(
        self,
        requester_id: Any,
        type_id: Any = None,
        exclude_booking_id: Any = None,
    ) -> int:
        """Count the requester's occupying bookings, optionally for one type"""
