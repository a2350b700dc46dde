"""API views for the booking domain."""

from __future__ import annotations

import logging

from drf_spectacular.utils import extend_schema  # type: ignore
from rest_framework import mixins, permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.exceptions import ValidationError  # type: ignore
from rest_framework.response import Response  # type: ignore
from django_filters.rest_framework import DjangoFilterBackend  # type: ignore
from rest_framework.filters import OrderingFilter  # type: ignore

from apps.bookings.application.command_handlers import (
    CancelBookingCommand,
    SubmitBookingCommand,
    ValidateBookingCommand,
)
from apps.bookings.domain.results import RejectionReason
from apps.users.services import is_staff_member
from shared.application.message_bus import message_bus

from .filters import BookingFilterSet
from .models import Booking
from .serializers import (
    BookingCancelSerializer,
    BookingRequestSerializer,
    BookingSerializer,
    DecisionSerializer,
)

logger = logging.getLogger(__name__)

REJECTION_STATUS_CODES = {
    RejectionReason.NOT_ELIGIBLE: status.HTTP_403_FORBIDDEN,
    RejectionReason.SCHEDULING_CONFLICT: status.HTTP_409_CONFLICT,
}


class IsBookingStakeholder(permissions.BasePermission):
    """The requester of a booking and staff members have access to it."""

    def has_object_permission(self, request, view, obj: Booking):  # type: ignore
        user = request.user
        if not user.is_authenticated:
            return False
        if is_staff_member(user):
            return True
        return obj.requester_id == user.id


class BookingViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    """Submit, check, list and cancel equipment bookings."""

    queryset = Booking.objects.select_related("equipment", "equipment__equipment_type", "requester").all()
    serializer_class = BookingSerializer
    permission_classes = [permissions.IsAuthenticated, IsBookingStakeholder]
    filter_backends = [DjangoFilterBackend, OrderingFilter]
    filterset_class = BookingFilterSet
    ordering_fields = ["start_at", "end_at", "created_at"]

    def get_queryset(self):  # type: ignore
        user = self.request.user
        qs = super().get_queryset()
        if not user.is_authenticated:
            return qs.none()
        if is_staff_member(user):
            return qs
        return qs.filter(requester=user)

    def get_serializer_class(self):  # type: ignore
        if self.action in {"create", "check"}:
            return BookingRequestSerializer
        if self.action == "cancel":
            return BookingCancelSerializer
        return BookingSerializer

    @extend_schema(request=BookingRequestSerializer, responses={201: BookingSerializer, 400: DecisionSerializer, 403: DecisionSerializer, 409: DecisionSerializer})
    def create(self, request, *args, **kwargs):  # type: ignore
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        decision, booking = message_bus.handle_command(SubmitBookingCommand(
            equipment_id=data.get("equipment"),
            requester_id=request.user.pk,
            start=data.get("start"),
            end=data.get("end"),
            kind=data["kind"],
        ))
        if not decision.accepted:
            code = REJECTION_STATUS_CODES.get(decision.reason, status.HTTP_400_BAD_REQUEST)
            return Response(decision.to_dict(), status=code)

        read_serializer = BookingSerializer(booking, context=self.get_serializer_context())
        return Response(read_serializer.data, status=status.HTTP_201_CREATED)

    @extend_schema(request=BookingRequestSerializer, responses={200: DecisionSerializer})
    @action(detail=False, methods=["post"])
    def check(self, request):  # type: ignore
        """Dry run: tell whether a booking would be admitted, without storing it."""
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        # Only a booking the caller may see can be left out of the check
        exclude_booking = data.get("exclude_booking")
        if exclude_booking is not None and not self.get_queryset().filter(pk=exclude_booking).exists():
            raise ValidationError({"exclude_booking": ["Booking not found."]})

        decision = message_bus.handle_command(ValidateBookingCommand(
            equipment_id=data.get("equipment"),
            requester_id=request.user.pk,
            start=data.get("start"),
            end=data.get("end"),
            kind=data["kind"],
            exclude_booking_id=exclude_booking,
        ))
        return Response(decision.to_dict(), status=status.HTTP_200_OK)

    @extend_schema(request=BookingCancelSerializer, responses={200: BookingSerializer})
    @action(detail=True, methods=["post"])
    def cancel(self, request, pk=None):  # type: ignore
        booking: Booking = self.get_object()  # type: ignore
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            booking = message_bus.handle_command(CancelBookingCommand(
                booking_id=booking.pk,
                cancelled_by=request.user.pk,
                reason=serializer.validated_data["reason"],
            ))
        except ValueError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)
        return Response(BookingSerializer(booking, context=self.get_serializer_context()).data)
