"""Tests for the ORM booking store and the booking model."""

from __future__ import annotations

from unittest import mock

from django.core.exceptions import ValidationError
from django.db import DatabaseError, IntegrityError, transaction
from django.db.models.query import QuerySet
from django.test import TestCase

from apps.bookings.domain.entities import BookingStatus, EquipmentStatus
from apps.bookings.domain.exceptions import LookupFailed
from apps.bookings.infrastructure.store import DjangoBookingStore
from apps.bookings.models import Booking
from apps.equipment.models import Equipment
from shared.domain.value_objects import TimeWindow

from .utils import at
from .factories import make_booking, make_equipment, make_type, make_user


class DjangoBookingStoreTests(TestCase):

    def setUp(self) -> None:
        self.store = DjangoBookingStore()
        self.user = make_user()
        self.camera_type = make_type("Cameras")
        self.camera = make_equipment(self.camera_type)
        self.other_camera = make_equipment(self.camera_type)

    def test_only_occupying_bookings_are_returned(self) -> None:
        approved = make_booking(self.camera, self.user, at(9), at(10))
        make_booking(self.camera, self.user, at(11), at(12), status=Booking.Status.CANCELLED)
        make_booking(self.camera, self.user, at(13), at(14), status=Booking.Status.COMPLETED)
        active = make_booking(self.camera, self.user, at(15), at(16), status=Booking.Status.ACTIVE)

        rows = self.store.query_occupying_bookings([self.camera.pk])

        self.assertEqual({row.booking_id for row in rows}, {approved.pk, active.pk})
        row = next(row for row in rows if row.booking_id == active.pk)
        self.assertEqual(row.resource_id, self.camera.pk)
        self.assertEqual(row.window, TimeWindow(at(15), at(16)))
        self.assertIs(row.status, BookingStatus.ACTIVE)

    def test_query_is_limited_to_the_given_units(self) -> None:
        make_booking(self.other_camera, self.user, at(9), at(10))

        self.assertEqual(self.store.query_occupying_bookings([self.camera.pk]), [])
        self.assertEqual(len(self.store.query_occupying_bookings([self.camera.pk, self.other_camera.pk])), 1)

    def test_window_narrows_with_half_open_semantics(self) -> None:
        make_booking(self.camera, self.user, at(9), at(11))
        inside = make_booking(self.camera, self.user, at(12), at(13))

        rows = self.store.query_occupying_bookings([self.camera.pk], window=TimeWindow(at(11), at(14)))

        self.assertEqual([row.booking_id for row in rows], [inside.pk])

    def test_excluded_booking_is_skipped(self) -> None:
        booking = make_booking(self.camera, self.user, at(9), at(11))

        rows = self.store.query_occupying_bookings([self.camera.pk], booking.pk)

        self.assertEqual(rows, [])

    def test_database_errors_become_lookup_failures(self) -> None:
        make_booking(self.camera, self.user, at(9), at(10))

        with mock.patch.object(QuerySet, "_fetch_all", side_effect=DatabaseError("gone away")):
            with self.assertRaises(LookupFailed):
                self.store.query_occupying_bookings([self.camera.pk])

    def test_row_parsing_rejects_inverted_windows(self) -> None:
        with self.assertRaises(LookupFailed):
            DjangoBookingStore._to_occupying((1, self.camera.pk, at(11), at(9), "approved"))
        with self.assertRaises(LookupFailed):
            DjangoBookingStore._to_occupying((1, self.camera.pk, at(9), at(11), "lost"))

    def test_get_resource(self) -> None:
        self.camera_type.is_exclusive_pool = True
        self.camera_type.save()
        self.camera.status = Equipment.Status.MAINTENANCE
        self.camera.save()

        resource = self.store.get_resource(self.camera.pk)

        self.assertEqual(resource.id, self.camera.pk)
        self.assertEqual(resource.type_id, self.camera_type.pk)
        self.assertIs(resource.status, EquipmentStatus.MAINTENANCE)
        self.assertTrue(resource.type_is_exclusive_pool)
        self.assertTrue(resource.is_bookable)

    def test_unknown_or_malformed_resource_ids(self) -> None:
        self.assertIsNone(self.store.get_resource(999999))
        self.assertIsNone(self.store.get_resource("not-a-number"))

    def test_resource_ids_of_type(self) -> None:
        make_equipment()

        ids = self.store.resource_ids_of_type(self.camera_type.pk)

        self.assertEqual(ids, {self.camera.pk, self.other_camera.pk})

    def test_count_requester_bookings(self) -> None:
        other_type_unit = make_equipment()
        first = make_booking(self.camera, self.user, at(9), at(10))
        make_booking(other_type_unit, self.user, at(9), at(10), status=Booking.Status.PENDING)
        make_booking(self.other_camera, self.user, at(9), at(10), status=Booking.Status.COMPLETED)
        make_booking(self.other_camera, make_user(), at(11), at(12))

        self.assertEqual(self.store.count_requester_bookings(self.user.pk), 2)
        self.assertEqual(self.store.count_requester_bookings(self.user.pk, type_id=self.camera_type.pk), 1)
        self.assertEqual(self.store.count_requester_bookings(self.user.pk, exclude_booking_id=first.pk), 1)

    def test_lock_scope_returns_the_unit(self) -> None:
        with transaction.atomic():
            locked = DjangoBookingStore(lock=True).lock_scope(self.camera.pk)

        self.assertEqual(locked, self.camera)
        self.assertIsNone(self.store.lock_scope(999999))


class BookingModelTests(TestCase):

    def setUp(self) -> None:
        self.user = make_user()
        self.camera = make_equipment()

    def test_inverted_window_is_refused_by_clean(self) -> None:
        with self.assertRaises(ValidationError):
            make_booking(self.camera, self.user, at(11), at(9))

    def test_database_constraint_refuses_empty_windows(self) -> None:
        booking = make_booking(self.camera, self.user, at(9), at(11))

        with self.assertRaises(IntegrityError):
            with transaction.atomic():
                Booking.objects.filter(pk=booking.pk).update(end_at=at(9))

    def test_queryset_helpers(self) -> None:
        kept = make_booking(self.camera, self.user, at(9), at(11), status=Booking.Status.PENDING)
        make_booking(self.camera, self.user, at(9), at(11), status=Booking.Status.REJECTED)
        make_booking(self.camera, self.user, at(11), at(12))

        overlapping = Booking.objects.for_equipment([self.camera.pk]).occupying().overlapping(at(10), at(11))

        self.assertEqual(list(overlapping), [kept])

    def test_mark_cancelled_releases_the_window(self) -> None:
        booking = make_booking(self.camera, self.user, at(9), at(11))

        booking.mark_cancelled("no longer needed")
        booking.refresh_from_db()

        self.assertEqual(booking.status, Booking.Status.CANCELLED)
        self.assertEqual(booking.cancellation_reason, "no longer needed")
        self.assertIsNotNone(booking.cancelled_at)
        self.assertFalse(booking.occupies)

    def test_to_occupying(self) -> None:
        booking = make_booking(self.camera, self.user, at(9), at(11), status=Booking.Status.PENDING)

        occupying = booking.to_occupying()

        self.assertEqual(occupying.booking_id, booking.pk)
        self.assertEqual(occupying.window, TimeWindow(at(9), at(11)))
        self.assertIs(occupying.status, BookingStatus.PENDING)
