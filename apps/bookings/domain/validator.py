"""
Booking Validator

Single entry point that decides whether a booking request may be
admitted. The checks run in a fixed order and stop at the first failure:

1. Eligibility: the requester must be approved (no store access yet)
2. Structure: both bounds present and start < end, then policy thresholds
3. Resource state: the equipment exists, is active and not retired
4. Requester quotas, when the policy defines any
5. Conflicts: no occupying booking overlaps the window

The validator only authorizes. Creating the booking row and notifying
anyone is the caller's job.
"""

import logging
from typing import Optional

from apps.bookings.domain.conflicts import ConflictChecker
from apps.bookings.domain.entities import BookingRequest
from apps.bookings.domain.exceptions import InvalidWindow, LookupFailed
from apps.bookings.domain.policy import BookingPolicy, PolicyBreach
from apps.bookings.domain.ports import BookingStore
from apps.bookings.domain.results import Accepted, Decision, Rejected, RejectionReason
from shared.domain.value_objects import TimeWindow

logger = logging.getLogger(__name__)

LOOKUP_FAILED_MESSAGE = "Availability could not be confirmed, please try again later"


class BookingValidator:

    def __init__(
        self,
        store: BookingStore,
        policy: Optional[BookingPolicy] = None,
        checker: Optional[ConflictChecker] = None,
        *,
        lookup_timeout: Optional[float] = None,
    ):
        self.store = store
        self.policy = policy or BookingPolicy()
        self.checker = checker or ConflictChecker(store)
        self.lookup_timeout = lookup_timeout

    def validate(self, request: BookingRequest) -> Decision:
        """Return Accepted or Rejected; never raises for expected conditions"""
        requester = request.requester

        if requester is None or not requester.is_eligible:
            status = getattr(requester, 'status', None)
            return Rejected(
                RejectionReason.NOT_ELIGIBLE,
                "Your account has not been approved for borrowing",
                {'requester_status': getattr(status, 'value', status)},
            )

        try:
            window = TimeWindow(request.start, request.end)
            if request.now is not None and _is_aware(request.now) != _is_aware(window.start):
                raise InvalidWindow("The booking window and the current time must both carry a timezone")
        except (InvalidWindow, TypeError) as exc:
            # TypeError: naive and aware datetimes mixed
            return Rejected(
                RejectionReason.INVALID_WINDOW,
                str(exc),
                {'start': _isoformat(request.start), 'end': _isoformat(request.end)},
            )

        breach = self.policy.check_window(window, request.now)
        if breach:
            return self._policy_rejection(breach)

        if request.resource_id is None or request.resource_id == '':
            return Rejected(RejectionReason.RESOURCE_UNAVAILABLE, "Equipment is required")

        try:
            resource = self.store.get_resource(request.resource_id)
        except LookupFailed as exc:
            logger.error(f"resource_lookup_failed resource={request.resource_id}: {exc}")
            return self._lookup_failed()

        if resource is None or not resource.is_bookable:
            return Rejected(
                RejectionReason.RESOURCE_UNAVAILABLE,
                "This equipment cannot be booked",
                {
                    'resource_id': request.resource_id,
                    'status': resource.status.value if resource else None,
                    'is_active': resource.is_active if resource else False,
                },
            )

        if self.policy.has_quotas:
            try:
                breach = self._check_quotas(request, resource.type_id)
            except LookupFailed as exc:
                logger.error(f"quota_lookup_failed requester={requester.id}: {exc}")
                return self._lookup_failed()
            if breach:
                return self._policy_rejection(breach)

        report = self.checker.find_conflicts(
            resource,
            window,
            exclude_booking_id=request.exclude_booking_id,
            timeout=self.lookup_timeout,
        )
        if report.lookup_failed:
            return self._lookup_failed()
        if report.has_conflict:
            return Rejected(
                RejectionReason.SCHEDULING_CONFLICT,
                "The selected period overlaps an existing booking",
                report.to_detail(),
            )

        logger.info(
            f"Booking admitted: resource={resource.id} requester={requester.id} window={window}"
        )
        return Accepted(window=window)

    def _check_quotas(self, request: BookingRequest, type_id) -> Optional[PolicyBreach]:
        requester_id = request.requester.id
        exclude = request.exclude_booking_id

        active_count = 0
        if self.policy.max_active_items is not None:
            active_count = self.store.count_requester_bookings(requester_id, exclude_booking_id=exclude)

        type_count = 0
        if self.policy.limit_for_type(type_id) is not None:
            type_count = self.store.count_requester_bookings(
                requester_id, type_id=type_id, exclude_booking_id=exclude
            )

        return self.policy.check_quota(active_count, type_id=type_id, type_count=type_count)

    @staticmethod
    def _policy_rejection(breach: PolicyBreach) -> Rejected:
        return Rejected(RejectionReason.POLICY_VIOLATION, breach.message, breach.to_detail())

    @staticmethod
    def _lookup_failed() -> Rejected:
        return Rejected(
            RejectionReason.SCHEDULING_CONFLICT,
            LOOKUP_FAILED_MESSAGE,
            {'conflicts': [], 'lookup_failed': True},
        )


def validate_booking(
    store: BookingStore,
    request: BookingRequest,
    policy: Optional[BookingPolicy] = None,
) -> Decision:
    """Validate one request with a throwaway validator"""
    return BookingValidator(store, policy).validate(request)


def _is_aware(value) -> bool:
    return value.tzinfo is not None and value.utcoffset() is not None


def _isoformat(value):
    return value.isoformat() if hasattr(value, 'isoformat') else value
