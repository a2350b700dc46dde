"""URL routing for the equipment catalog, mounted under /api/v1/equipment/."""

from __future__ import annotations

from rest_framework.routers import SimpleRouter  # type: ignore

from .views import EquipmentViewSet

app_name = "equipment"

router = SimpleRouter()
router.register(r"", EquipmentViewSet, basename="equipment")

urlpatterns = router.urls
