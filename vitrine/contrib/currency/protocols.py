"""
Vitrine Currency Protocols — Interface para backends de taxas de câmbio.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Protocol, runtime_checkable


@runtime_checkable
class RateBackend(Protocol):
    """
    Protocol para backends de taxas de câmbio.

    Taxas são multiplicadores a partir da moeda base:
    valor_exibido = valor_base × rates[moeda].
    """

    def get_rates(self, base_currency: str) -> dict[str, Decimal]:
        """
        Retorna as taxas a partir de `base_currency`.

        Args:
            base_currency: Moeda base (ex.: "INR")

        Returns:
            dict moeda → taxa (Decimal); sempre inclui a própria base com taxa 1
        """
        ...
