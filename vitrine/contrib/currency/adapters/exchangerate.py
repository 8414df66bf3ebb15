"""
Vitrine ExchangeRate Adapter — Taxas via exchangerate-api.com.

GET {RATES_API_URL}{base} → {"rates": {"USD": 0.012, ...}}

As taxas ficam no cache do Django por RATE_CACHE_SECONDS (1h por padrão).
Se o provedor falhar, usa a última resposta conhecida e, na falta dela,
a tabela estática.
"""

from __future__ import annotations

import json
import logging
from decimal import Decimal, InvalidOperation
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from django.core.cache import cache

from vitrine.conf import get_vitrine_setting

from .static import StaticRateBackend

logger = logging.getLogger(__name__)

CACHE_KEY = "vitrine:rates:{base}"
STALE_CACHE_KEY = "vitrine:rates:{base}:last"


class ExchangeRateApiBackend:
    """
    Backend HTTP com cache e contingência.

    Args:
        url: URL base do provedor (a moeda base é concatenada ao final)
        timeout: Timeout em segundos
        cache_seconds: Validade das taxas em cache
    """

    def __init__(
        self,
        url: str | None = None,
        timeout: int | None = None,
        cache_seconds: int | None = None,
        fallback: StaticRateBackend | None = None,
    ):
        self.url = url or get_vitrine_setting("RATES_API_URL")
        self.timeout = timeout or get_vitrine_setting("RATES_API_TIMEOUT")
        self.cache_seconds = cache_seconds or get_vitrine_setting("RATE_CACHE_SECONDS")
        self.fallback = fallback or StaticRateBackend()

    def get_rates(self, base_currency: str) -> dict[str, Decimal]:
        base = base_currency.upper()
        cached = cache.get(CACHE_KEY.format(base=base))
        if cached:
            return cached

        try:
            rates = self._fetch(base)
        except (
            HTTPError,
            URLError,
            TimeoutError,
            ValueError,
            KeyError,
            TypeError,
            AttributeError,
            InvalidOperation,
        ) as exc:
            logger.warning(
                "Rate provider unavailable",
                extra={"base_currency": base, "url": self.url, "error": str(exc)},
            )
            stale = cache.get(STALE_CACHE_KEY.format(base=base))
            if stale:
                return stale
            return self.fallback.get_rates(base)

        cache.set(CACHE_KEY.format(base=base), rates, self.cache_seconds)
        cache.set(STALE_CACHE_KEY.format(base=base), rates, None)
        logger.info("Rates refreshed", extra={"base_currency": base, "count": len(rates)})
        return rates

    def _fetch(self, base: str) -> dict[str, Decimal]:
        request = Request(f"{self.url}{base}", headers={"Accept": "application/json"}, method="GET")
        with urlopen(request, timeout=self.timeout) as response:
            payload = json.loads(response.read().decode("utf-8"), parse_float=Decimal)
        rates = {code.upper(): Decimal(str(rate)) for code, rate in payload["rates"].items()}
        rates[base] = Decimal(1)
        return rates
