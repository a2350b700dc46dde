"""Subscribers for booking domain events."""

import logging

from apps.bookings.domain.events import BookingCancelled, BookingExpired, BookingSubmitted

logger = logging.getLogger(__name__)


def log_booking_submitted(event: BookingSubmitted):
    logger.info(
        f"booking_submitted booking={event.booking_id} equipment={event.equipment_id} "
        f"requester={event.requester_id} status={event.status} window={event.window}"
    )


def log_booking_released(event):
    logger.info(
        f"booking_released booking={event.booking_id} equipment={event.equipment_id} "
        f"event={event.to_dict()}"
    )


EVENT_HANDLERS = {
    BookingSubmitted: [log_booking_submitted],
    BookingCancelled: [log_booking_released],
    BookingExpired: [log_booking_released],
}
