"""
Vitrine Currency Contrib — Taxas de câmbio para exibição de preços.

Uso:
    from vitrine.contrib.currency import get_rate_backend

    rates = get_rate_backend().get_rates("INR")

Backend configurável via settings.VITRINE["RATE_BACKEND"]:
    "vitrine.contrib.currency.adapters.static.StaticRateBackend" (padrão)
    "vitrine.contrib.currency.adapters.exchangerate.ExchangeRateApiBackend"
"""

from __future__ import annotations

from django.utils.module_loading import import_string

from vitrine.conf import get_vitrine_setting

from .protocols import RateBackend

__all__ = ["RateBackend", "get_rate_backend"]


def get_rate_backend() -> RateBackend:
    """Instancia o backend de taxas configurado."""
    backend_path = get_vitrine_setting("RATE_BACKEND")
    return import_string(backend_path)()
