"""Serializers for the booking domain."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .models import Booking


class BookingRequestSerializer(serializers.Serializer):
    """
    Input of a booking check or submission.

    Only the shape is validated here. Missing bounds, a missing unit and
    every business rule are left to the validator, which reports them as
    a tagged rejection.
    """

    equipment = serializers.IntegerField(required=False, allow_null=True)
    start = serializers.DateTimeField(required=False, allow_null=True)
    end = serializers.DateTimeField(required=False, allow_null=True)
    kind = serializers.ChoiceField(choices=Booking.Kind.choices, default=Booking.Kind.LOAN)
    exclude_booking = serializers.IntegerField(required=False, allow_null=True)


class DecisionSerializer(serializers.Serializer):
    """Schema of a booking decision, used for API documentation."""

    accepted = serializers.BooleanField()
    reason = serializers.CharField(required=False)
    message = serializers.CharField(required=False)
    detail = serializers.DictField(required=False)


class BookingSerializer(serializers.ModelSerializer):
    """Read representation of a booking."""

    requester_id = serializers.ReadOnlyField(source="requester.id")
    equipment_id = serializers.ReadOnlyField(source="equipment.id")
    equipment_name = serializers.ReadOnlyField(source="equipment.name")
    equipment_number = serializers.ReadOnlyField(source="equipment.equipment_number")

    class Meta:
        model = Booking
        fields = [
            "id",
            "equipment_id",
            "equipment_name",
            "equipment_number",
            "requester_id",
            "kind",
            "start_at",
            "end_at",
            "status",
            "rejection_reason",
            "cancellation_reason",
            "cancelled_at",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class BookingCancelSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, max_length=255, default="")


class OccupancyQuerySerializer(serializers.Serializer):
    """Period of an occupancy query; both bounds are optional."""

    start = serializers.DateTimeField(required=False)
    end = serializers.DateTimeField(required=False)

    def validate(self, attrs):  # type: ignore
        start, end = attrs.get("start"), attrs.get("end")
        if start and end and start >= end:
            raise serializers.ValidationError("The end of the period must be after its start.")
        return attrs
