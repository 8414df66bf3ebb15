"""
Vitrine Static Rate Adapter — Taxas fixas a partir das settings.

Usa VITRINE["FALLBACK_RATES"]; também serve de contingência para o
adapter HTTP quando o provedor externo falha.
"""

from __future__ import annotations

from decimal import Decimal

from vitrine.conf import get_vitrine_setting


class StaticRateBackend:
    """
    Backend de taxas fixas.

    Uso:
        backend = StaticRateBackend(rates={"INR": "1", "USD": "0.012"})
    """

    def __init__(self, rates: dict | None = None):
        raw = rates if rates is not None else get_vitrine_setting("FALLBACK_RATES")
        self.rates = {code.upper(): Decimal(str(rate)) for code, rate in (raw or {}).items()}

    def get_rates(self, base_currency: str) -> dict[str, Decimal]:
        base = base_currency.upper()
        base_rate = self.rates.get(base)
        if not base_rate:
            return {base: Decimal(1)}
        # Tabela declarada em outra base: rebaseia dividindo pela taxa da base
        rebased = {code: rate / base_rate for code, rate in self.rates.items()}
        rebased[base] = Decimal(1)
        return rebased
