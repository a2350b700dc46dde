"""Booking models for equipment loans and reservations."""

from __future__ import annotations

from django.conf import settings  # type: ignore
from django.core.exceptions import ValidationError  # type: ignore
from django.db import models, transaction  # type: ignore
from django.utils import timezone  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from apps.bookings.domain.entities import BookingStatus, OccupyingBooking
from shared.domain.value_objects import TimeWindow


class BookingQuerySet(models.QuerySet):
    def occupying(self):
        return self.filter(status__in=Booking.OCCUPYING_STATUSES)

    def overlapping(self, start, end):
        """Half-open overlap: touching windows are not returned."""
        return self.filter(start_at__lt=end, end_at__gt=start)

    def for_equipment(self, equipment_ids):
        return self.filter(equipment_id__in=list(equipment_ids))


class Booking(models.Model):
    """A loan or reservation of one equipment unit for [start_at, end_at)."""

    class Status(models.TextChoices):
        PENDING = "pending", _("Waiting for approval")
        APPROVED = "approved", _("Approved")
        ACTIVE = "active", _("Equipment handed over")
        COMPLETED = "completed", _("Returned")
        CANCELLED = "cancelled", _("Cancelled")
        REJECTED = "rejected", _("Rejected")

    class Kind(models.TextChoices):
        LOAN = "loan", _("Loan")
        RESERVATION = "reservation", _("Reservation")

    OCCUPYING_STATUSES = (Status.PENDING, Status.APPROVED, Status.ACTIVE)

    equipment = models.ForeignKey(
        "equipment.Equipment",
        on_delete=models.PROTECT,
        related_name="bookings",
    )
    requester = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="equipment_bookings",
    )
    kind = models.CharField(max_length=20, choices=Kind.choices, default=Kind.LOAN)
    start_at = models.DateTimeField()
    end_at = models.DateTimeField()
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.PENDING)
    rejection_reason = models.CharField(max_length=500, blank=True)
    cancellation_reason = models.CharField(max_length=255, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = BookingQuerySet.as_manager()

    class Meta:
        verbose_name = _("Booking")
        verbose_name_plural = _("Bookings")
        ordering = ["-created_at"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(end_at__gt=models.F("start_at")),
                name="booking_valid_window",
            ),
        ]
        indexes = [
            models.Index(fields=["equipment", "start_at", "end_at"], name="booking_equipment_window_idx"),
            models.Index(fields=["status"], name="booking_status_idx"),
            models.Index(fields=["requester", "status"], name="booking_requester_status_idx"),
        ]

    def __str__(self) -> str:
        return f"Booking #{self.pk} {self.kind} of {self.equipment_id} ({self.status})"

    def clean(self) -> None:
        if self.start_at and self.end_at and self.end_at <= self.start_at:
            raise ValidationError(_("The end of a booking must be after its start."))

    def save(self, *args, **kwargs):  # type: ignore
        with transaction.atomic():
            self.clean()
            super().save(*args, **kwargs)

    @property
    def occupies(self) -> bool:
        return self.status in self.OCCUPYING_STATUSES

    @property
    def window(self) -> TimeWindow:
        return TimeWindow(self.start_at, self.end_at)

    def to_occupying(self) -> OccupyingBooking:
        return OccupyingBooking(
            booking_id=self.pk,
            resource_id=self.equipment_id,
            window=self.window,
            status=BookingStatus(self.status),
        )

    def mark_cancelled(self, reason: str = "") -> None:
        self.status = self.Status.CANCELLED
        self.cancellation_reason = reason
        self.cancelled_at = timezone.now()
        self.save(update_fields=["status", "cancellation_reason", "cancelled_at", "updated_at"])
