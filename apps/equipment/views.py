"""Equipment catalog API views."""

from __future__ import annotations

import logging

from django_filters.rest_framework import DjangoFilterBackend  # type: ignore
from drf_spectacular.utils import OpenApiParameter, extend_schema  # type: ignore
from rest_framework import permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from apps.bookings.domain.exceptions import LookupFailed
from apps.bookings.infrastructure.store import DjangoBookingStore
from apps.bookings.serializers import OccupancyQuerySerializer
from shared.domain.value_objects import TimeWindow

from .models import Equipment
from .serializers import EquipmentSerializer, OccupiedWindowSerializer

logger = logging.getLogger(__name__)


class EquipmentViewSet(viewsets.ReadOnlyModelViewSet):
    """Browse equipment units and see when they are taken."""

    queryset = Equipment.objects.select_related("equipment_type").all()
    serializer_class = EquipmentSerializer
    permission_classes = [permissions.IsAuthenticated]
    filter_backends = [DjangoFilterBackend]
    filterset_fields = ["equipment_type", "status", "is_active"]

    @extend_schema(
        parameters=[
            OpenApiParameter("start", str, description="ISO 8601 start of the period"),
            OpenApiParameter("end", str, description="ISO 8601 end of the period"),
        ],
        responses={200: OccupiedWindowSerializer(many=True)},
    )
    @action(detail=True, methods=["get"])
    def occupancy(self, request, pk=None):  # type: ignore
        """Occupying windows of this unit, optionally limited to [start, end)."""
        equipment: Equipment = self.get_object()  # type: ignore
        query = OccupancyQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        start, end = query.validated_data.get("start"), query.validated_data.get("end")

        window = TimeWindow(start, end) if start and end else None
        try:
            rows = DjangoBookingStore().query_occupying_bookings([equipment.pk], window=window)
        except LookupFailed as exc:
            logger.error(f"Occupancy lookup failed for equipment {equipment.pk}: {exc}")
            return Response(
                {"detail": "Availability could not be loaded, please try again later"},
                status=status.HTTP_503_SERVICE_UNAVAILABLE,
            )

        if start:
            rows = [row for row in rows if row.window.end > start]
        if end:
            rows = [row for row in rows if row.window.start < end]
        rows.sort(key=lambda row: row.window.start)
        payload = [row.to_dict() for row in rows]
        return Response(OccupiedWindowSerializer(payload, many=True).data)
