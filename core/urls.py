"""
URL configuration for the OfferRoom backend.

Public API lives under /api/; the seller-facing admin link and the buyer link
both resolve to JSON endpoints consumed by the frontend.
"""

from django.contrib import admin
from django.urls import path
from django.urls import include
from django.http import JsonResponse
from drf_spectacular.views import SpectacularAPIView, SpectacularSwaggerView, SpectacularRedocView


def home_view(request):
    return JsonResponse({
        "message": "OfferRoom API",
        "status": "running",
        "endpoints": {
            "admin": "/admin/",
            "api": "/api/",
            "docs": "/api/docs/",
            "schema": "/api/schema/"
        }
    })


urlpatterns = [
    path("", home_view, name="home"),
    path("admin/", admin.site.urls),
    path("api/", include("apps.rooms.urls")),
    path("api/", include("apps.billing.urls")),
    path('api/schema/', SpectacularAPIView.as_view(), name='schema'),
    path('api/docs/', SpectacularSwaggerView.as_view(url_name='schema'), name='swagger-ui'),
    path('api/redoc/', SpectacularRedocView.as_view(url_name='schema'), name='redoc'),
]
