from __future__ import annotations

from decimal import Decimal
from types import SimpleNamespace

from django.test import SimpleTestCase

from vitrine.exceptions import NotFoundError
from vitrine.pricing import PricingEngine, quantize
from vitrine.variants import ConcreteVariant


def _product(**kwargs):
    defaults = {
        "base_price": Decimal("1000"),
        "discount_percentage": 0,
        "currency": "INR",
        "stock": 7,
        "variants": [],
    }
    defaults.update(kwargs)
    return SimpleNamespace(**defaults)


class FinalPriceTests(SimpleTestCase):
    def test_discount(self) -> None:
        self.assertEqual(PricingEngine.final_price(Decimal("1000"), 20), Decimal("800.00"))

    def test_no_discount_is_base(self) -> None:
        self.assertEqual(PricingEngine.final_price(Decimal("1299.50"), 0), Decimal("1299.50"))

    def test_full_discount_is_zero(self) -> None:
        self.assertEqual(PricingEngine.final_price(Decimal("1299.50"), 100), Decimal("0.00"))

    def test_never_above_base_and_monotonic(self) -> None:
        base = Decimal("1999.99")
        prices = [PricingEngine.final_price(base, d) for d in range(0, 101)]
        self.assertTrue(all(p <= base for p in prices))
        self.assertEqual(prices, sorted(prices, reverse=True))

    def test_rounds_half_up_to_minor_unit(self) -> None:
        # 999.99 × 0.85 = 849.9915
        self.assertEqual(PricingEngine.final_price(Decimal("999.99"), 15), Decimal("849.99"))
        self.assertEqual(quantize(Decimal("0.005")), Decimal("0.01"))

    def test_zero_decimal_currency(self) -> None:
        self.assertEqual(PricingEngine.final_price(Decimal("1005"), 50, "JPY"), Decimal("503"))


class SelectionPriceTests(SimpleTestCase):
    def test_without_variants_uses_final_price(self) -> None:
        product = _product(discount_percentage=20)
        self.assertEqual(PricingEngine.price_for_selection(product, size="M"), Decimal("800.00"))

    def test_variant_price_overrides_without_discount(self) -> None:
        product = _product(
            discount_percentage=20,
            variants=[
                ConcreteVariant(size="M", color="Black", price=Decimal("1200.00"), stock=2),
                ConcreteVariant(size="L", color="Black", price=Decimal("1300.00"), stock=5),
            ],
        )
        self.assertEqual(PricingEngine.price_for_selection(product, size="L", color="Black"), Decimal("1300.00"))
        self.assertEqual(PricingEngine.price_for_selection(product), Decimal("800.00"))

    def test_unknown_selection(self) -> None:
        product = _product(variants=[ConcreteVariant(size="M", price=Decimal("10"))])
        with self.assertRaises(NotFoundError) as ctx:
            PricingEngine.price_for_selection(product, size="XXL")
        self.assertEqual(ctx.exception.code, "variant_not_found")

    def test_stock(self) -> None:
        product = _product(variants=[ConcreteVariant(size="M", stock=2), ConcreteVariant(size="L", stock=5)])
        self.assertEqual(PricingEngine.total_stock(product), 7)
        self.assertEqual(PricingEngine.stock_for_selection(product, size="L"), 5)
        self.assertEqual(PricingEngine.stock_for_selection(product, size="S"), 0)
        self.assertEqual(PricingEngine.total_stock(_product(stock=3)), 3)


class DisplayTests(SimpleTestCase):
    def test_display_is_linear(self) -> None:
        rate = Decimal("0.012")
        self.assertEqual(PricingEngine.display(Decimal("1000"), rate, "USD"), Decimal("12.00"))
        self.assertEqual(
            PricingEngine.display(Decimal("2000"), rate, "USD"),
            2 * PricingEngine.display(Decimal("1000"), rate, "USD"),
        )

    def test_convert_for_display(self) -> None:
        rates = {"INR": Decimal("1"), "USD": Decimal("0.012")}
        self.assertEqual(
            PricingEngine.convert_for_display(Decimal("800"), "usd", rates),
            (Decimal("9.60"), "USD"),
        )

    def test_convert_falls_back_to_base(self) -> None:
        rates = {"INR": Decimal("1")}
        self.assertEqual(
            PricingEngine.convert_for_display(Decimal("800"), "EUR", rates),
            (Decimal("800.00"), "INR"),
        )
        self.assertEqual(
            PricingEngine.convert_for_display(Decimal("800"), "XYZ", {"XYZ": Decimal("3")}),
            (Decimal("800.00"), "INR"),
        )

    def test_format_amount(self) -> None:
        self.assertEqual(PricingEngine.format_amount(Decimal("1299.5"), "INR"), "₹1,299.50")
        self.assertEqual(PricingEngine.format_amount(Decimal("1500.4"), "JPY"), "¥1,500")
