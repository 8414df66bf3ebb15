from __future__ import annotations

from decimal import Decimal

from django.test import SimpleTestCase

from vitrine.exceptions import ValidationError
from vitrine.variants import (
    BulkVariantTemplate,
    ConcreteVariant,
    apply_all_bulk_variants,
    apply_bulk_variant,
    derive_sku,
    ensure_no_bulk_rows,
    ensure_unique_skus,
    expand_bulk_template,
    parse_variant_row,
    parse_variant_rows,
    with_default_price,
)


class ParseVariantRowTests(SimpleTestCase):
    def test_concrete_row(self) -> None:
        row = parse_variant_row({"size": "M", "color": "Black", "colorCode": "#000", "sku": "TS-M", "price": "999.00", "stock": 3})
        self.assertIsInstance(row, ConcreteVariant)
        self.assertEqual(row.color_code, "#000")
        self.assertEqual(row.price, Decimal("999.00"))
        self.assertEqual(row.stock, 3)

    def test_bulk_row_by_flag_or_sizes_list(self) -> None:
        by_flag = parse_variant_row({"bulk": True, "sizes": ["S"], "sku": "TS"})
        by_sizes = parse_variant_row({"sizes": ["S", "M"], "sku": "TS"})
        self.assertTrue(by_flag.is_bulk)
        self.assertTrue(by_sizes.is_bulk)
        self.assertEqual(by_sizes.sizes, ("S", "M"))

    def test_bulk_sizes_are_deduplicated_in_order(self) -> None:
        row = parse_variant_row({"bulk": True, "sizes": ["M", "S", "M", " ", "L"]})
        self.assertEqual(row.sizes, ("M", "S", "L"))

    def test_missing_price_stays_none(self) -> None:
        row = parse_variant_row({"size": "M"})
        self.assertIsNone(row.price)
        self.assertEqual(row.stock, 0)

    def test_negative_price_reports_field_path(self) -> None:
        with self.assertRaises(ValidationError) as ctx:
            parse_variant_rows([{"size": "S"}, {"size": "M", "price": "-1"}])
        self.assertEqual(ctx.exception.code, "invalid_field")
        self.assertEqual(ctx.exception.context["field"], "variants[1].price")

    def test_invalid_stock(self) -> None:
        with self.assertRaises(ValidationError) as ctx:
            parse_variant_row({"size": "M", "stock": "many"}, index=0)
        self.assertEqual(ctx.exception.context["field"], "variants[0].stock")


class ExpansionTests(SimpleTestCase):
    def _template(self, **kwargs) -> BulkVariantTemplate:
        defaults = {
            "sizes": ("S", "M", "L"),
            "color": "Black",
            "color_code": "#000000",
            "sku": "TSHIRT",
            "price": Decimal("999.00"),
            "stock": 10,
        }
        defaults.update(kwargs)
        return BulkVariantTemplate(**defaults)

    def test_derive_sku(self) -> None:
        self.assertEqual(derive_sku("TSHIRT", "M"), "TSHIRT-M")
        self.assertEqual(derive_sku("", "M"), "")

    def test_expand_one_variant_per_size(self) -> None:
        variants = expand_bulk_template(self._template())

        self.assertEqual([v.size for v in variants], ["S", "M", "L"])
        self.assertEqual([v.sku for v in variants], ["TSHIRT-S", "TSHIRT-M", "TSHIRT-L"])
        for variant in variants:
            self.assertFalse(variant.is_bulk)
            self.assertEqual(variant.color, "Black")
            self.assertEqual(variant.color_code, "#000000")
            self.assertEqual(variant.price, Decimal("999.00"))
            self.assertEqual(variant.stock, 10)

    def test_expand_without_sku_gives_empty_skus(self) -> None:
        variants = expand_bulk_template(self._template(sku=""))
        self.assertEqual({v.sku for v in variants}, {""})

    def test_empty_size_selection(self) -> None:
        with self.assertRaises(ValidationError) as ctx:
            expand_bulk_template(self._template(sizes=()))
        self.assertEqual(ctx.exception.code, "empty_size_selection")

    def test_apply_replaces_row_in_place(self) -> None:
        first = ConcreteVariant(size="XS", sku="OTHER-XS")
        last = ConcreteVariant(size="XL", sku="OTHER-XL")
        rows = [first, self._template(), last]

        inserted = apply_bulk_variant(rows, 1)

        self.assertEqual(len(inserted), 3)
        self.assertEqual([r.size for r in rows], ["XS", "S", "M", "L", "XL"])
        self.assertIs(rows[0], first)
        self.assertIs(rows[-1], last)

    def test_apply_is_idempotent_on_concrete_rows(self) -> None:
        rows = [self._template()]
        apply_bulk_variant(rows, 0)
        snapshot = list(rows)

        self.assertEqual(apply_bulk_variant(rows, 0), [])
        self.assertEqual(rows, snapshot)

    def test_apply_failure_leaves_rows_untouched(self) -> None:
        rows = [ConcreteVariant(size="M"), self._template(sizes=())]
        snapshot = list(rows)
        with self.assertRaises(ValidationError):
            apply_bulk_variant(rows, 1)
        self.assertEqual(rows, snapshot)

    def test_apply_all_is_all_or_nothing(self) -> None:
        rows = [self._template(), self._template(sku="EMPTY", sizes=())]
        snapshot = list(rows)
        with self.assertRaises(ValidationError):
            apply_all_bulk_variants(rows)
        self.assertEqual(rows, snapshot)

    def test_apply_all(self) -> None:
        rows = [self._template(), ConcreteVariant(size="XL", sku="TSHIRT-XL")]
        apply_all_bulk_variants(rows)
        self.assertEqual([r.sku for r in rows], ["TSHIRT-S", "TSHIRT-M", "TSHIRT-L", "TSHIRT-XL"])
        ensure_no_bulk_rows(rows)


class PersistenceGuardTests(SimpleTestCase):
    def test_unexpanded_bulk_rows_are_rejected(self) -> None:
        rows = [ConcreteVariant(size="M"), BulkVariantTemplate(sizes=("S",))]
        with self.assertRaises(ValidationError) as ctx:
            ensure_no_bulk_rows(rows)
        self.assertEqual(ctx.exception.code, "unexpanded_bulk_variant")
        self.assertEqual(ctx.exception.context["rows"], [1])

    def test_default_price_only_fills_missing(self) -> None:
        rows = [ConcreteVariant(size="S"), ConcreteVariant(size="M", price=Decimal("10"))]
        priced = with_default_price(rows, Decimal("99"))
        self.assertEqual([r.price for r in priced], [Decimal("99"), Decimal("10")])

    def test_duplicate_skus(self) -> None:
        rows = [ConcreteVariant(sku="A"), ConcreteVariant(sku="A"), ConcreteVariant(sku=""), ConcreteVariant(sku="")]
        with self.assertRaises(ValidationError) as ctx:
            ensure_unique_skus(rows)
        self.assertEqual(ctx.exception.code, "duplicate_sku")
        self.assertEqual(ctx.exception.context["skus"], ["A"])

    def test_empty_skus_are_exempt(self) -> None:
        ensure_unique_skus([ConcreteVariant(sku=""), ConcreteVariant(sku="")])
