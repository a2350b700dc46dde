"""
Conflict Checker

Finds the existing bookings a proposed window would collide with.

A booking collides when it is occupying (pending, approved or active),
holds the same equipment unit, or any unit of the same type when that
type is an exclusive pool, and its window overlaps the proposal under
half-open semantics. The checker only reads; it never writes to the
store.

Failure policy: when the store cannot answer, the report says "conflict
present". Denying a valid booking is recoverable; a double booking is not.
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional, Set, Tuple

from apps.bookings.domain.entities import OccupyingBooking, Resource
from apps.bookings.domain.exceptions import LookupFailed
from apps.bookings.domain.ports import BookingStore
from shared.domain.value_objects import TimeWindow

logger = logging.getLogger(__name__)


def windows_overlap(first: TimeWindow, second: TimeWindow) -> bool:
    """Half-open overlap test; touching windows do not overlap"""
    return first.overlaps_with(second)


@dataclass(frozen=True)
class ConflictReport:
    conflicts: Tuple[OccupyingBooking, ...] = ()
    lookup_failed: bool = False

    @property
    def has_conflict(self) -> bool:
        return self.lookup_failed or bool(self.conflicts)

    @property
    def booking_ids(self) -> Tuple[Any, ...]:
        return tuple(conflict.booking_id for conflict in self.conflicts)

    @property
    def windows(self) -> Tuple[TimeWindow, ...]:
        return tuple(conflict.window for conflict in self.conflicts)

    def to_detail(self) -> dict:
        return {
            'conflicts': [conflict.to_dict() for conflict in self.conflicts],
            'lookup_failed': self.lookup_failed,
        }


class ConflictChecker:
    """
    Usage:
        checker = ConflictChecker(store)
        report = checker.find_conflicts(resource, TimeWindow(start, end))
        if report.has_conflict:
            ...  # deny, show report.windows to the user
    """

    def __init__(self, store: BookingStore):
        self.store = store

    def find_conflicts(
        self,
        resource,
        window,
        *,
        exclude_booking_id: Any = None,
        timeout: Optional[float] = None,
    ) -> ConflictReport:
        """
        Check a proposed window against the occupying bookings

        Args:
            resource: a Resource, or a bare resource id (looked up in the store)
            window: a TimeWindow or a (start, end) pair
            exclude_booking_id: booking to ignore, used when re-validating an edit
            timeout: upper bound in seconds for the store read

        Raises:
            InvalidWindow: if end <= start (before any store access)
            ValueError: if the resource id is empty
        """
        window = TimeWindow.coerce(window)
        resource_id = resource.id if isinstance(resource, Resource) else resource
        if resource_id is None or resource_id == '':
            raise ValueError("A resource id is required for a conflict check")

        try:
            resource_ids = self._resource_scope(resource)
            rows = self.store.query_occupying_bookings(
                resource_ids,
                exclude_booking_id,
                window=window,
                timeout=timeout,
            )
            conflicts = tuple(sorted(
                (
                    row for row in rows
                    if self._collides(row, resource_ids, window, exclude_booking_id)
                ),
                key=lambda row: row.window.start,
            ))
        except (LookupFailed, TimeoutError) as exc:
            logger.error(
                f"conflict_lookup_failed resource={resource_id} window={window}: {exc}"
            )
            return ConflictReport(lookup_failed=True)
        except (AttributeError, TypeError, ValueError) as exc:
            logger.error(
                f"conflict_lookup_failed resource={resource_id} window={window}: "
                f"malformed store data ({exc})"
            )
            return ConflictReport(lookup_failed=True)

        if conflicts:
            logger.warning(
                f"Window {window} for resource {resource_id} overlaps "
                f"{len(conflicts)} booking(s): {[c.booking_id for c in conflicts]}"
            )
        return ConflictReport(conflicts=conflicts)

    def _resource_scope(self, resource) -> Set[Any]:
        """Resource ids whose bookings count against this resource"""
        if not isinstance(resource, Resource):
            found = self.store.get_resource(resource)
            if found is None:
                return {resource}
            resource = found

        scope = {resource.id}
        if resource.type_is_exclusive_pool and resource.type_id is not None:
            scope |= set(self.store.resource_ids_of_type(resource.type_id))
        return scope

    @staticmethod
    def _collides(row: OccupyingBooking, resource_ids: Set[Any], window: TimeWindow, exclude_booking_id: Any) -> bool:
        # The store already filters; re-check so a sloppy adapter cannot leak rows
        if exclude_booking_id is not None and row.booking_id == exclude_booking_id:
            return False
        if not row.status.occupies:
            return False
        if row.resource_id not in resource_ids:
            return False
        return row.window.overlaps_with(window)
