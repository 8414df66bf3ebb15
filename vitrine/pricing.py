"""
Vitrine Pricing — Preço final, preço por variante e conversão de exibição.

Convenções monetárias:
- Valores armazenados estão sempre na moeda base (BASE_CURRENCY, INR por padrão)
- Aritmética sempre em Decimal; nunca float
- Arredondamento ROUND_HALF_UP na menor unidade da moeda
  (2 casas; 0 para JPY/KRW)
- Conversão para a moeda do visitante acontece só na apresentação
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from .exceptions import NotFoundError


@dataclass(frozen=True)
class CurrencyInfo:
    code: str
    symbol: str
    name: str
    decimals: int = 2


SUPPORTED_CURRENCIES: dict[str, CurrencyInfo] = {
    "INR": CurrencyInfo("INR", "₹", "Indian Rupee"),
    "USD": CurrencyInfo("USD", "$", "US Dollar"),
    "EUR": CurrencyInfo("EUR", "€", "Euro"),
    "GBP": CurrencyInfo("GBP", "£", "British Pound"),
    "AUD": CurrencyInfo("AUD", "A$", "Australian Dollar"),
    "CAD": CurrencyInfo("CAD", "C$", "Canadian Dollar"),
    "SGD": CurrencyInfo("SGD", "S$", "Singapore Dollar"),
    "AED": CurrencyInfo("AED", "د.إ", "UAE Dirham"),
    "JPY": CurrencyInfo("JPY", "¥", "Japanese Yen", decimals=0),
    "KRW": CurrencyInfo("KRW", "₩", "South Korean Won", decimals=0),
}

HUNDRED = Decimal("100")


def to_decimal(value: Any) -> Decimal:
    """Converte int/str/Decimal para Decimal sem passar por float binário."""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def currency_info(currency: str) -> CurrencyInfo:
    return SUPPORTED_CURRENCIES.get(currency.upper(), CurrencyInfo(currency.upper(), currency.upper(), currency.upper()))


def quantize(amount: Any, currency: str = "INR") -> Decimal:
    """Arredonda para a menor unidade da moeda (sem frações de centavo)."""
    exponent = Decimal(1).scaleb(-currency_info(currency).decimals)
    return to_decimal(amount).quantize(exponent, rounding=ROUND_HALF_UP)


class PricingEngine:
    """
    Cálculos de preço do catálogo. Sem IO e sem mutação do produto.

    - final_price: base × (1 − desconto/100)
    - price_for_selection: preço da variante (override integral, sem desconto)
    - display: conversão linear amount × rate para apresentação
    """

    @staticmethod
    def final_price(base_price: Any, discount_percentage: int = 0, currency: str = "INR") -> Decimal:
        """
        Preço final com desconto.

        O intervalo [0, 100] do desconto é validado na escrita
        (CatalogService), não aqui.
        """
        base = to_decimal(base_price)
        factor = (HUNDRED - to_decimal(discount_percentage)) / HUNDRED
        return quantize(base * factor, currency)

    @staticmethod
    def product_final_price(product: Any) -> Decimal:
        return PricingEngine.final_price(
            product.base_price,
            product.discount_percentage,
            getattr(product, "currency", None) or "INR",
        )

    @staticmethod
    def find_variant(product: Any, size: str | None = None, color: str | None = None):
        """Primeira variante que casa com tamanho/cor informados (ou None)."""
        for variant in getattr(product, "variants", None) or []:
            if size is not None and variant.size != size:
                continue
            if color is not None and variant.color != color:
                continue
            return variant
        return None

    @staticmethod
    def price_for_selection(product: Any, size: str | None = None, color: str | None = None) -> Decimal:
        """
        Preço exibido para uma seleção de tamanho/cor.

        Com variantes, o preço da variante é o preço de venda integral e não
        recebe o desconto do produto. Sem seleção (ou sem variantes) vale o
        preço final do produto.

        Raises:
            NotFoundError: Seleção informada sem variante correspondente
        """
        variants = getattr(product, "variants", None) or []
        if not variants or (size is None and color is None):
            return PricingEngine.product_final_price(product)

        variant = PricingEngine.find_variant(product, size, color)
        if variant is None:
            raise NotFoundError(
                code="variant_not_found",
                message="Nenhuma variante para a seleção informada",
                context={"size": size, "color": color},
            )
        if variant.price is None:
            return quantize(product.base_price, getattr(product, "currency", None) or "INR")
        return quantize(variant.price, getattr(product, "currency", None) or "INR")

    @staticmethod
    def display(amount: Any, rate: Any, currency: str = "INR") -> Decimal:
        """Converte um valor da moeda base para exibição: amount × rate."""
        return quantize(to_decimal(amount) * to_decimal(rate), currency)

    @staticmethod
    def convert_for_display(
        amount: Any,
        target_currency: str,
        rates: dict[str, Any],
        base_currency: str = "INR",
    ) -> tuple[Decimal, str]:
        """
        Converte usando uma tabela de taxas.

        Moeda sem suporte ou sem taxa cai para a moeda base (taxa 1).

        Returns:
            (valor convertido, moeda efetivamente usada)
        """
        target = (target_currency or base_currency).upper()
        if target not in SUPPORTED_CURRENCIES or target not in rates:
            target = base_currency
        rate = Decimal(1) if target == base_currency else to_decimal(rates[target])
        return PricingEngine.display(amount, rate, target), target

    @staticmethod
    def total_stock(product: Any) -> int:
        """Soma do estoque das variantes; sem variantes, estoque do produto."""
        variants = getattr(product, "variants", None) or []
        if variants:
            return sum(int(v.stock) for v in variants)
        return int(product.stock or 0)

    @staticmethod
    def stock_for_selection(product: Any, size: str | None = None, color: str | None = None) -> int:
        variants = getattr(product, "variants", None) or []
        if not variants or (size is None and color is None):
            return PricingEngine.total_stock(product)
        variant = PricingEngine.find_variant(product, size, color)
        return int(variant.stock) if variant is not None else 0

    @staticmethod
    def format_amount(amount: Any, currency: str = "INR") -> str:
        """Ex.: format_amount(Decimal("1299.5"), "INR") → "₹1,299.50"."""
        info = currency_info(currency)
        value = quantize(amount, info.code)
        return f"{info.symbol}{value:,.{info.decimals}f}"
