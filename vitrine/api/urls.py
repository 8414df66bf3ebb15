from __future__ import annotations

from django.http import JsonResponse
from django.urls import include, path
from rest_framework.routers import DefaultRouter

from .views import ProductViewSet, StorefrontViewSet, currency_rates, expand_variants


def health_check(request):
    """
    Healthcheck endpoint para monitoramento.

    Returns:
        200 OK com {"status": "healthy", "version": "X.X.X"}
    """
    from vitrine import __version__

    return JsonResponse({
        "status": "healthy",
        "version": __version__,
    })


router = DefaultRouter(trailing_slash=False)
router.register("products", ProductViewSet, basename="products")
router.register("storefront", StorefrontViewSet, basename="storefront")

urlpatterns = [
    path("health", health_check, name="health-check"),
    path("variants/expand", expand_variants, name="variants-expand"),
    path("currency/rates", currency_rates, name="currency-rates"),
    path("", include(router.urls)),
]
