"""Serializers for the equipment catalog."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .models import Equipment, EquipmentType


class EquipmentTypeSerializer(serializers.ModelSerializer):
    class Meta:
        model = EquipmentType
        fields = ["id", "name", "slug", "description", "is_exclusive_pool"]


class EquipmentSerializer(serializers.ModelSerializer):
    equipment_type = EquipmentTypeSerializer(read_only=True)
    is_bookable = serializers.BooleanField(read_only=True)

    class Meta:
        model = Equipment
        fields = [
            "id",
            "name",
            "equipment_number",
            "equipment_type",
            "status",
            "is_active",
            "is_bookable",
        ]


class OccupiedWindowSerializer(serializers.Serializer):
    """One occupying booking as shown on the equipment calendar."""

    booking_id = serializers.IntegerField()
    resource_id = serializers.IntegerField()
    status = serializers.CharField()
    start = serializers.DateTimeField()
    end = serializers.DateTimeField()
