"""
URL configuration for the storefront backend.

Every app mounts its own urls module under /api/.
"""

from django.contrib import admin
from django.http import JsonResponse
from django.urls import path, include


def health_check(request):
    """Simple health check endpoint that doesn't require authentication"""
    return JsonResponse({"status": "ok", "message": "Backend is running"})


urlpatterns = [
    path("api/health/", health_check, name="health_check"),
    path("admin/", admin.site.urls),
    path("api/availability/", include("availability.urls")),
    path("api/menu/", include("menu.urls")),
    path("api/cart/", include("cart.urls")),
    path("api/checkout/", include("checkout.urls")),
]
