"""
Booking Command Handlers

The use cases of the booking domain. They load the requester and the
policy that applies to them, run the validator against the ORM store and,
for submissions, write the booking inside the same transaction.

Commands:
- ValidateBookingCommand: dry run, returns the decision only
- SubmitBookingCommand: validate and store a new booking
- CancelBookingCommand: release an occupying booking
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional, Tuple
import logging

from django.contrib.auth import get_user_model
from django.db import IntegrityError, transaction
from django.utils import timezone

from apps.bookings.conf import lookup_timeout, policy_for_requester
from apps.bookings.domain.entities import BookingKind, BookingRequest, Requester
from apps.bookings.domain.events import BookingCancelled, BookingSubmitted
from apps.bookings.domain.exceptions import LookupFailed
from apps.bookings.domain.results import Decision, Rejected, RejectionReason
from apps.bookings.domain.validator import LOOKUP_FAILED_MESSAGE, BookingValidator
from apps.bookings.infrastructure.store import DjangoBookingStore
from apps.bookings.models import Booking
from apps.users.services import requester_for_user
from shared.application.uow import DjangoUnitOfWork

logger = logging.getLogger(__name__)


# ===== Commands =====

@dataclass
class ValidateBookingCommand:
    """
    Ask whether a booking would be admitted, without storing anything

    `exclude_booking_id` is set when an existing booking is being edited.
    """
    equipment_id: Any
    requester_id: Any
    start: Optional[datetime]
    end: Optional[datetime]
    kind: str = BookingKind.LOAN.value
    exclude_booking_id: Any = None
    now: Optional[datetime] = None


@dataclass
class SubmitBookingCommand:
    """Command to create a new loan or reservation"""
    equipment_id: Any
    requester_id: Any
    start: Optional[datetime]
    end: Optional[datetime]
    kind: str = BookingKind.LOAN.value
    now: Optional[datetime] = None


@dataclass
class CancelBookingCommand:
    booking_id: Any
    cancelled_by: Any
    reason: str = ''


# ===== Command Handlers =====

class ValidateBookingHandler:
    """Handler for ValidateBooking command"""

    def handle(self, command: ValidateBookingCommand) -> Decision:
        requester = load_requester(command.requester_id)
        validator = build_validator(requester, DjangoBookingStore())
        return validator.validate(build_request(command, requester))


class SubmitBookingHandler:
    """
    Handler for SubmitBooking command

    Double booking prevention:
    1. Start database transaction (atomic)
    2. Lock the equipment row, and the type row for exclusive pools
    3. Validate against the bookings visible under the lock
    4. Insert the booking
    5. Commit; BookingSubmitted is published after commit
    6. On PostgreSQL the exclusion constraint rejects anything that slipped
       through; the IntegrityError becomes a scheduling conflict
    """

    def handle(self, command: SubmitBookingCommand) -> Tuple[Decision, Optional[Booking]]:
        logger.info(
            f"Submitting {command.kind} of equipment {command.equipment_id} "
            f"for requester {command.requester_id}: {command.start} - {command.end}"
        )
        requester = load_requester(command.requester_id)

        with DjangoUnitOfWork() as uow:
            store = DjangoBookingStore(lock=True)
            try:
                store.lock_scope(command.equipment_id)
            except LookupFailed as exc:
                logger.error(f"conflict_lookup_failed equipment={command.equipment_id}: {exc}")
                return lookup_failed_rejection(), None

            decision = build_validator(requester, store).validate(build_request(command, requester))
            if not decision.accepted:
                log_rejection(command, decision)
                return decision, None

            status = Booking.Status.APPROVED if requester.is_staff else Booking.Status.PENDING
            try:
                with transaction.atomic():
                    booking = Booking.objects.create(
                        equipment_id=command.equipment_id,
                        requester_id=command.requester_id,
                        kind=command.kind,
                        start_at=decision.window.start,
                        end_at=decision.window.end,
                        status=status,
                    )
            except IntegrityError as exc:
                logger.warning(
                    f"conflict_detected equipment={command.equipment_id} "
                    f"requester={command.requester_id}: store constraint rejected the insert ({exc})"
                )
                return Rejected(
                    RejectionReason.SCHEDULING_CONFLICT,
                    "The selected period overlaps an existing booking",
                    {'conflicts': [], 'lookup_failed': False},
                ), None

            event = BookingSubmitted(
                aggregate_id=booking.pk,
                booking_id=booking.pk,
                equipment_id=booking.equipment_id,
                requester_id=booking.requester_id,
                window=decision.window,
                status=booking.status,
                kind=booking.kind,
            )
            uow.record(event)

        logger.info(f"Booking {booking.pk} stored with status {booking.status}")
        return decision, booking


class CancelBookingHandler:
    """Handler for cancelling a booking"""

    def handle(self, command: CancelBookingCommand) -> Booking:
        logger.info(f"Cancelling booking {command.booking_id}, reason: {command.reason}")

        with DjangoUnitOfWork() as uow:
            booking = Booking.objects.select_for_update().filter(pk=command.booking_id).first()
            if booking is None:
                raise ValueError(f"Booking {command.booking_id} not found")
            if not booking.occupies:
                raise ValueError(
                    f"Booking {booking.pk} cannot be cancelled. Current status: {booking.status}"
                )

            booking.mark_cancelled(command.reason)
            uow.record(BookingCancelled(
                aggregate_id=booking.pk,
                booking_id=booking.pk,
                equipment_id=booking.equipment_id,
                cancelled_by=command.cancelled_by,
                reason=command.reason,
            ))

        logger.info(f"Booking {booking.pk} cancelled")
        return booking


# ===== Helpers =====

def load_requester(requester_id) -> Optional[Requester]:
    """Requester for a user id, or None when the user does not exist"""
    user = get_user_model().objects.select_related('profile').filter(pk=requester_id).first()
    if user is None:
        return None
    return requester_for_user(user)


def build_validator(requester: Optional[Requester], store: DjangoBookingStore) -> BookingValidator:
    requester_type = requester.requester_type if requester else None
    return BookingValidator(
        store,
        policy_for_requester(requester_type),
        lookup_timeout=lookup_timeout(),
    )


def build_request(command, requester: Optional[Requester]) -> BookingRequest:
    return BookingRequest(
        resource_id=command.equipment_id,
        requester=requester,
        start=command.start,
        end=command.end,
        now=command.now or timezone.now(),
        exclude_booking_id=getattr(command, 'exclude_booking_id', None),
        kind=BookingKind(command.kind),
    )


def lookup_failed_rejection() -> Rejected:
    return Rejected(
        RejectionReason.SCHEDULING_CONFLICT,
        LOOKUP_FAILED_MESSAGE,
        {'conflicts': [], 'lookup_failed': True},
    )


def log_rejection(command, decision: Rejected):
    if decision.reason is RejectionReason.SCHEDULING_CONFLICT and not decision.lookup_failed:
        logger.warning(
            f"conflict_detected equipment={command.equipment_id} requester={command.requester_id} "
            f"window={command.start} - {command.end} conflicts={decision.detail.get('conflicts')}"
        )
    else:
        logger.info(
            f"Booking rejected ({decision.reason.value}) equipment={command.equipment_id} "
            f"requester={command.requester_id}: {decision.message}"
        )
