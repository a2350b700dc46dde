"""Celery tasks for the booking domain."""

from __future__ import annotations

import logging
from datetime import timedelta

from celery import shared_task  # type: ignore
from django.utils import timezone  # type: ignore

from apps.bookings.conf import pending_expiry_hours
from apps.bookings.domain.events import BookingExpired
from shared.application.uow import DjangoUnitOfWork

from .models import Booking

logger = logging.getLogger(__name__)

EXPIRED_REASON = "expired"


# ============================================================================
# PERIODIC TASKS (scheduled by Celery Beat, see config.celery)
# ============================================================================

@shared_task(name="bookings.expire_stale_pending_bookings")
def expire_stale_pending_bookings() -> dict[str, int]:
    """
    Cancel pending requests nobody approved in time.

    A pending booking whose start lies more than PENDING_EXPIRY_HOURS in
    the past is cancelled with reason "expired", which releases its window.

    Returns:
        dict: {"expired": number of cancelled bookings}
    """
    cutoff = timezone.now() - timedelta(hours=pending_expiry_hours())
    stale_ids = list(
        Booking.objects.filter(status=Booking.Status.PENDING, start_at__lte=cutoff).values_list("pk", flat=True)
    )

    expired_count = 0
    for booking_id in stale_ids:
        try:
            with DjangoUnitOfWork() as uow:
                booking = Booking.objects.select_for_update().filter(
                    pk=booking_id, status=Booking.Status.PENDING
                ).first()
                if booking is None:
                    continue
                booking.mark_cancelled(EXPIRED_REASON)
                uow.record(BookingExpired(
                    aggregate_id=booking.pk,
                    booking_id=booking.pk,
                    equipment_id=booking.equipment_id,
                ))
            expired_count += 1
            logger.info(f"Booking {booking_id} expired while pending")
        except Exception as e:
            logger.error(f"Error expiring booking {booking_id}: {e}", exc_info=True)

    if expired_count > 0:
        logger.info(f"Expired {expired_count} pending bookings")

    return {"expired": expired_count}


@shared_task(name="bookings.flag_overdue_loans")
def flag_overdue_loans() -> list[int]:
    """
    Report active loans whose window has ended without a return.

    Overdue loans keep their status; they stay occupying until staff
    record the return.
    """
    now = timezone.now()
    overdue = Booking.objects.filter(
        status=Booking.Status.ACTIVE,
        kind=Booking.Kind.LOAN,
        end_at__lt=now,
    ).order_by("end_at")

    overdue_ids = []
    for booking in overdue.select_related("equipment", "requester"):
        overdue_ids.append(booking.pk)
        logger.warning(
            f"Loan {booking.pk} of {booking.equipment} by {booking.requester} "
            f"is overdue since {booking.end_at.isoformat()}"
        )

    return overdue_ids
