"""
Django ORM booking store

Implements the `BookingStore` port over the `Booking` and `Equipment`
models. Database faults and rows that do not parse are reported as
`LookupFailed`; the checker turns that into a denial.
"""

from __future__ import annotations

import logging
from typing import Any, List, Optional, Set

from django.db import DatabaseError, connections, router, transaction  # type: ignore
from django.db.utils import NotSupportedError  # type: ignore

from apps.bookings.domain.entities import BookingStatus, OccupyingBooking, Resource
from apps.bookings.domain.exceptions import InvalidWindow, LookupFailed
from apps.bookings.domain.ports import BookingStore
from apps.bookings.models import Booking
from apps.equipment.models import Equipment, EquipmentType
from shared.domain.value_objects import TimeWindow

logger = logging.getLogger(__name__)


def _lock_queryset_if_possible(queryset, using=None):
    """Apply select_for_update when inside transaction.atomic()."""

    if not transaction.get_connection(using).in_atomic_block:
        return queryset

    try:
        return queryset.select_for_update()
    except NotSupportedError:
        return queryset


class DjangoBookingStore(BookingStore):
    """
    Args:
        lock: take row locks on what is read. Only has an effect inside
            an enclosing transaction, where the locks are held until it ends.
        using: database alias, defaults to the router's choice for Booking.
    """

    def __init__(self, *, lock: bool = False, using: Optional[str] = None):
        self.lock = lock
        self.using = using or router.db_for_read(Booking)

    def query_occupying_bookings(
        self,
        resource_ids,
        exclude_booking_id=None,
        *,
        window: Optional[TimeWindow] = None,
        timeout: Optional[float] = None,
    ) -> List[OccupyingBooking]:
        in_transaction = transaction.get_connection(self.using).in_atomic_block
        queryset = Booking.objects.using(self.using).occupying().for_equipment(resource_ids)
        if exclude_booking_id is not None:
            queryset = queryset.exclude(pk=exclude_booking_id)
        if window is not None:
            queryset = queryset.overlapping(window.start, window.end)
        if self.lock and in_transaction:
            queryset = _lock_queryset_if_possible(queryset, self.using)

        fields = ("pk", "equipment_id", "start_at", "end_at", "status")
        try:
            # Savepoint, so a failed read leaves the caller's transaction usable
            with transaction.atomic(using=self.using):
                if timeout is not None:
                    self._set_statement_timeout(timeout)
                rows = list(queryset.values_list(*fields))
                if timeout is not None:
                    self._set_statement_timeout(None)
        except DatabaseError as exc:
            raise LookupFailed(f"Booking query failed: {exc}") from exc

        return [self._to_occupying(row) for row in rows]

    def get_resource(self, resource_id) -> Optional[Resource]:
        try:
            equipment = (
                Equipment.objects.using(self.using)
                .select_related("equipment_type")
                .filter(pk=resource_id)
                .first()
            )
        except (ValueError, TypeError):
            # Not a valid primary key, so no such equipment
            return None
        except DatabaseError as exc:
            raise LookupFailed(f"Equipment lookup failed: {exc}") from exc

        if equipment is None:
            return None
        try:
            return equipment.to_resource()
        except ValueError as exc:
            raise LookupFailed(f"Equipment {resource_id} has an unknown status: {exc}") from exc

    def resource_ids_of_type(self, type_id) -> Set[Any]:
        try:
            return set(
                Equipment.objects.using(self.using)
                .filter(equipment_type_id=type_id)
                .values_list("pk", flat=True)
            )
        except DatabaseError as exc:
            raise LookupFailed(f"Equipment type lookup failed: {exc}") from exc

    def count_requester_bookings(self, requester_id, type_id=None, exclude_booking_id=None) -> int:
        queryset = Booking.objects.using(self.using).occupying().filter(requester_id=requester_id)
        if type_id is not None:
            queryset = queryset.filter(equipment__equipment_type_id=type_id)
        if exclude_booking_id is not None:
            queryset = queryset.exclude(pk=exclude_booking_id)
        try:
            return queryset.count()
        except DatabaseError as exc:
            raise LookupFailed(f"Booking count failed: {exc}") from exc

    def lock_scope(self, equipment_id) -> Optional[Equipment]:
        """
        Lock the equipment row, and its type row for exclusive pools.

        Must be called inside transaction.atomic(). Concurrent submissions
        for the same scope queue behind the lock, so the check they run
        afterwards sees every committed booking.
        """
        try:
            equipment = (
                _lock_queryset_if_possible(Equipment.objects.using(self.using), self.using)
                .filter(pk=equipment_id)
                .first()
            )
            if equipment is not None:
                pool = _lock_queryset_if_possible(
                    EquipmentType.objects.using(self.using), self.using
                ).filter(pk=equipment.equipment_type_id, is_exclusive_pool=True)
                list(pool)
        except (ValueError, TypeError):
            return None
        except DatabaseError as exc:
            raise LookupFailed(f"Could not lock equipment {equipment_id}: {exc}") from exc
        return equipment

    def _set_statement_timeout(self, timeout: Optional[float]) -> None:
        connection = connections[self.using]
        if connection.vendor != "postgresql":
            return
        with connection.cursor() as cursor:
            if timeout is None:
                cursor.execute("SET LOCAL statement_timeout TO DEFAULT")
            else:
                cursor.execute(f"SET LOCAL statement_timeout = {max(int(timeout * 1000), 1)}")

    @staticmethod
    def _to_occupying(row) -> OccupyingBooking:
        booking_id, equipment_id, start_at, end_at, status = row
        try:
            return OccupyingBooking(
                booking_id=booking_id,
                resource_id=equipment_id,
                window=TimeWindow(start_at, end_at),
                status=BookingStatus(status),
            )
        except (InvalidWindow, ValueError, TypeError) as exc:
            logger.error(f"Malformed booking row {booking_id}: {exc}")
            raise LookupFailed(f"Booking {booking_id} could not be read: {exc}") from exc
