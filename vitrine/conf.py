from __future__ import annotations

from django.conf import settings
from django.utils.module_loading import import_string


VITRINE_DEFAULTS = {
    "DEFAULT_PERMISSION_CLASSES": ["rest_framework.permissions.IsAuthenticated"],
    "STOREFRONT_PERMISSION_CLASSES": ["rest_framework.permissions.AllowAny"],
    "BASE_CURRENCY": "INR",
    "RATE_BACKEND": "vitrine.contrib.currency.adapters.static.StaticRateBackend",
    "RATE_CACHE_SECONDS": 3600,
    "RATES_API_URL": "https://api.exchangerate-api.com/v4/latest/",
    "RATES_API_TIMEOUT": 5,
    # Tabela de contingência quando o provedor externo está fora do ar
    "FALLBACK_RATES": {
        "INR": "1",
        "USD": "0.012",
        "EUR": "0.011",
        "GBP": "0.0095",
        "AUD": "0.018",
        "CAD": "0.016",
        "SGD": "0.016",
        "AED": "0.044",
    },
}


def get_vitrine_setting(key: str):
    """Retrieve a Vitrine setting, falling back to VITRINE_DEFAULTS."""
    user_settings = getattr(settings, "VITRINE", {})
    value = user_settings.get(key, VITRINE_DEFAULTS.get(key))
    if key.endswith("_CLASSES") and isinstance(value, list) and value and isinstance(value[0], str):
        return [import_string(cls) for cls in value]
    return value
