"""URL configuration for the equipment lending service.

The `urlpatterns` list routes URLs to the DRF routers of each app and to
the generated API schema.
"""
from django.urls import path, include  # type: ignore
from drf_spectacular.views import SpectacularAPIView, SpectacularSwaggerView  # type: ignore

# API versioning. v1 is our initial version; future versions can be added here.

urlpatterns = [
    path('api/v1/bookings/', include('apps.bookings.urls')),
    path('api/v1/equipment/', include('apps.equipment.urls')),
    # API schema and docs
    path('api/schema/', SpectacularAPIView.as_view(), name='schema'),
    path('api/docs/', SpectacularSwaggerView.as_view(url_name='schema'), name='swagger-ui'),
]
