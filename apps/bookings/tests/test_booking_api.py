"""Integration tests for booking API endpoints."""

from __future__ import annotations

from unittest import mock

from django.db import IntegrityError
from django.test import override_settings
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from apps.bookings.domain.exceptions import LookupFailed
from apps.bookings.infrastructure.store import DjangoBookingStore
from apps.bookings.models import Booking
from apps.equipment.models import Equipment
from apps.users.models import Profile

from .utils import at
from .factories import make_booking, make_equipment, make_user


class BookingAPITests(APITestCase):
    """Covers submission, conflicts, checks and cancellation."""

    def setUp(self) -> None:
        # Requests are validated against the clock; pin it to the test day
        clock = mock.patch("django.utils.timezone.now", return_value=at(0))
        clock.start()
        self.addCleanup(clock.stop)

        self.student = make_user()
        self.camera = make_equipment(name="Canon EOS R6")
        self.client.force_authenticate(self.student)
        self.list_url = reverse("bookings:booking-list")
        self.check_url = reverse("bookings:booking-check")

    def _payload(self, start, end, equipment=None, **extra) -> dict:
        payload = {
            "equipment": (equipment or self.camera).pk,
            "start": start.isoformat(),
            "end": end.isoformat(),
        }
        payload.update(extra)
        return payload

    def test_approved_user_can_submit_booking(self) -> None:
        response = self.client.post(self.list_url, self._payload(at(9), at(11)), format="json")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        booking = Booking.objects.get()
        self.assertEqual(booking.requester, self.student)
        self.assertEqual(booking.equipment, self.camera)
        self.assertEqual(booking.status, Booking.Status.PENDING)
        self.assertEqual(booking.kind, Booking.Kind.LOAN)
        self.assertEqual(response.data["id"], booking.pk)
        self.assertEqual(response.data["equipment_name"], "Canon EOS R6")

    def test_staff_bookings_are_approved_immediately(self) -> None:
        self.client.force_authenticate(make_user(role=Profile.Role.STAFF))

        response = self.client.post(
            self.list_url,
            self._payload(at(9), at(11), kind=Booking.Kind.RESERVATION),
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertEqual(response.data["status"], Booking.Status.APPROVED)
        self.assertEqual(response.data["kind"], Booking.Kind.RESERVATION)

    def test_prevent_double_booking_on_overlap(self) -> None:
        existing = make_booking(self.camera, make_user(), at(9), at(11))

        response = self.client.post(self.list_url, self._payload(at(10), at(12)), format="json")

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT, response.data)
        self.assertEqual(response.data["reason"], "scheduling_conflict")
        self.assertEqual(response.data["detail"]["conflicts"][0]["booking_id"], existing.pk)
        self.assertEqual(Booking.objects.count(), 1)

    def test_back_to_back_bookings_are_allowed(self) -> None:
        make_booking(self.camera, make_user(), at(9), at(11))

        response = self.client.post(self.list_url, self._payload(at(11), at(13)), format="json")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)

    def test_pending_user_is_forbidden(self) -> None:
        self.client.force_authenticate(make_user(status=Profile.Status.PENDING))

        response = self.client.post(self.list_url, self._payload(at(9), at(11)), format="json")

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN, response.data)
        self.assertEqual(response.data["reason"], "not_eligible")
        self.assertFalse(Booking.objects.exists())

    def test_user_without_profile_is_forbidden(self) -> None:
        self.client.force_authenticate(make_user(status=None))

        response = self.client.post(self.list_url, self._payload(at(9), at(11)), format="json")

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN, response.data)

    def test_booking_in_the_past_is_a_policy_violation(self) -> None:
        response = self.client.post(self.list_url, self._payload(at(9, day=-7), at(11, day=-7)), format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, response.data)
        self.assertEqual(response.data["reason"], "policy_violation")
        self.assertEqual(response.data["detail"]["threshold"], "start_in_past")
        self.assertFalse(Booking.objects.exists())

    def test_inverted_window_is_a_bad_request(self) -> None:
        response = self.client.post(self.list_url, self._payload(at(11), at(9)), format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, response.data)
        self.assertEqual(response.data["reason"], "invalid_window")

    def test_missing_end_is_an_invalid_window(self) -> None:
        response = self.client.post(
            self.list_url,
            {"equipment": self.camera.pk, "start": at(9).isoformat()},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, response.data)
        self.assertEqual(response.data["reason"], "invalid_window")

    def test_malformed_datetime_is_rejected_by_the_serializer(self) -> None:
        payload = {"equipment": self.camera.pk, "start": "tomorrow", "end": at(9).isoformat()}

        response = self.client.post(self.list_url, payload, format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("start", response.data)

    def test_missing_or_retired_equipment_is_unavailable(self) -> None:
        retired = make_equipment(status=Equipment.Status.RETIRED)

        missing = self.client.post(
            self.list_url,
            {"start": at(9).isoformat(), "end": at(11).isoformat()},
            format="json",
        )
        gone = self.client.post(self.list_url, self._payload(at(9), at(11), equipment=retired), format="json")

        for response in (missing, gone):
            self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, response.data)
            self.assertEqual(response.data["reason"], "resource_unavailable")

    @override_settings(EQUIPMENT_BOOKING={"POLICY": {"maxDurationDays": 1}})
    def test_policy_violation_is_a_bad_request(self) -> None:
        response = self.client.post(self.list_url, self._payload(at(9), at(9, day=3)), format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, response.data)
        self.assertEqual(response.data["reason"], "policy_violation")
        self.assertEqual(response.data["detail"]["threshold"], "max_duration_days")

    @override_settings(EQUIPMENT_BOOKING={
        "POLICY": {"maxDurationDays": 1},
        "POLICY_BY_REQUESTER_TYPE": {"lecturer": {"maxDurationDays": 7}},
    })
    def test_policy_depends_on_requester_type(self) -> None:
        self.client.force_authenticate(make_user(requester_type=Profile.RequesterType.LECTURER))

        response = self.client.post(self.list_url, self._payload(at(9), at(9, day=3)), format="json")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)

    def test_store_outage_refuses_the_booking(self) -> None:
        with mock.patch.object(
            DjangoBookingStore,
            "query_occupying_bookings",
            side_effect=LookupFailed("statement timeout"),
        ):
            response = self.client.post(self.list_url, self._payload(at(9), at(11)), format="json")

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT, response.data)
        self.assertTrue(response.data["detail"]["lookup_failed"])
        self.assertFalse(Booking.objects.exists())

    def test_store_constraint_violation_is_a_conflict(self) -> None:
        with mock.patch.object(Booking.objects, "create", side_effect=IntegrityError("booking_no_overlap")):
            with self.assertLogs("apps.bookings.application.command_handlers", "WARNING") as logs:
                response = self.client.post(self.list_url, self._payload(at(9), at(11)), format="json")

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT, response.data)
        self.assertEqual(response.data["reason"], "scheduling_conflict")
        self.assertIn("conflict_detected", logs.output[0])

    def test_conflict_is_logged_for_follow_up(self) -> None:
        make_booking(self.camera, make_user(), at(9), at(11))

        with self.assertLogs("apps.bookings.application.command_handlers", "WARNING") as logs:
            self.client.post(self.list_url, self._payload(at(10), at(12)), format="json")

        self.assertTrue(any("conflict_detected" in line for line in logs.output))

    def test_submission_event_is_published_after_commit(self) -> None:
        with self.assertLogs("apps.bookings.application.event_handlers", "INFO") as logs:
            with self.captureOnCommitCallbacks(execute=True) as callbacks:
                self.client.post(self.list_url, self._payload(at(9), at(11)), format="json")

        self.assertEqual(len(callbacks), 1)
        self.assertIn("booking_submitted", logs.output[0])

    def test_check_reports_acceptance_without_storing(self) -> None:
        response = self.client.post(self.check_url, self._payload(at(9), at(11)), format="json")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data, {"accepted": True})
        self.assertFalse(Booking.objects.exists())

    def test_check_reports_conflicts_with_status_200(self) -> None:
        existing = make_booking(self.camera, make_user(), at(9), at(11))

        response = self.client.post(self.check_url, self._payload(at(10), at(12)), format="json")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(response.data["accepted"])
        self.assertEqual(response.data["reason"], "scheduling_conflict")
        self.assertEqual(response.data["detail"]["conflicts"][0]["booking_id"], existing.pk)

    def test_check_can_exclude_the_booking_being_edited(self) -> None:
        own = make_booking(self.camera, self.student, at(9), at(11))

        response = self.client.post(
            self.check_url,
            self._payload(at(10), at(12), exclude_booking=own.pk),
            format="json",
        )

        self.assertEqual(response.data, {"accepted": True})

    def test_check_cannot_exclude_another_users_booking(self) -> None:
        theirs = make_booking(self.camera, make_user(), at(9), at(11))

        response = self.client.post(
            self.check_url,
            self._payload(at(10), at(12), exclude_booking=theirs.pk),
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("exclude_booking", response.data)

    def test_list_shows_only_own_bookings(self) -> None:
        own = make_booking(self.camera, self.student, at(9), at(11))
        make_booking(self.camera, make_user(), at(12), at(13))

        response = self.client.get(self.list_url)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([item["id"] for item in response.data], [own.pk])

    def test_staff_see_every_booking_and_can_filter(self) -> None:
        make_booking(self.camera, self.student, at(9), at(11), status=Booking.Status.PENDING)
        approved = make_booking(self.camera, make_user(), at(12), at(13))
        self.client.force_authenticate(make_user(role=Profile.Role.ADMIN))

        everything = self.client.get(self.list_url)
        filtered = self.client.get(self.list_url, {"status": "approved", "equipment": self.camera.pk})

        self.assertEqual(len(everything.data), 2)
        self.assertEqual([item["id"] for item in filtered.data], [approved.pk])

    def test_requester_can_cancel_and_the_window_is_released(self) -> None:
        booking = make_booking(self.camera, self.student, at(9), at(11))
        cancel_url = reverse("bookings:booking-cancel", args=[booking.pk])

        response = self.client.post(cancel_url, {"reason": "plans changed"}, format="json")

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["status"], Booking.Status.CANCELLED)
        self.assertEqual(response.data["cancellation_reason"], "plans changed")

        rebook = self.client.post(self.list_url, self._payload(at(9), at(11)), format="json")
        self.assertEqual(rebook.status_code, status.HTTP_201_CREATED, rebook.data)

    def test_cancelled_booking_cannot_be_cancelled_again(self) -> None:
        booking = make_booking(self.camera, self.student, at(9), at(11), status=Booking.Status.CANCELLED)

        response = self.client.post(reverse("bookings:booking-cancel", args=[booking.pk]), {}, format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_other_users_cannot_see_or_cancel_a_booking(self) -> None:
        booking = make_booking(self.camera, make_user(), at(9), at(11))

        detail = self.client.get(reverse("bookings:booking-detail", args=[booking.pk]))
        cancel = self.client.post(reverse("bookings:booking-cancel", args=[booking.pk]), {}, format="json")

        self.assertEqual(detail.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(cancel.status_code, status.HTTP_404_NOT_FOUND)
        booking.refresh_from_db()
        self.assertEqual(booking.status, Booking.Status.APPROVED)

    def test_staff_can_cancel_any_booking(self) -> None:
        booking = make_booking(self.camera, make_user(), at(9), at(11))
        self.client.force_authenticate(make_user(role=Profile.Role.STAFF))

        response = self.client.post(reverse("bookings:booking-cancel", args=[booking.pk]), {}, format="json")

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)

    def test_anonymous_requests_are_refused(self) -> None:
        self.client.force_authenticate(None)

        response = self.client.post(self.check_url, self._payload(at(9), at(11)), format="json")

        self.assertIn(response.status_code, (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN))
