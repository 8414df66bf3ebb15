from __future__ import annotations

from decimal import Decimal

from django.test import TestCase

from vitrine.actors import Actor
from vitrine.exceptions import ValidationError
from vitrine.services import CatalogService, ListingService


ADMIN = Actor(role="admin", id="alice")
VENDOR = Actor(role="vendor", id="v-1")


def _create(actor=ADMIN, **overrides):
    draft = {
        "title": "Product",
        "description": "Descrição",
        "category": "tshirts",
        "brand": "basics",
        "base_price": "1000",
        "images": ["https://example.com/p.jpg"],
        "is_published": True,
    }
    draft.update(overrides)
    return CatalogService.create(draft, actor)


class VisibilityTests(TestCase):
    def test_only_approved_and_published(self) -> None:
        visible = _create(title="Visible")
        _create(title="Unpublished", is_published=False)
        _create(VENDOR, title="Pending")

        self.assertEqual(list(ListingService.visible()), [visible])

    def test_for_actor(self) -> None:
        _create(title="Admin")
        own = _create(VENDOR, title="Own")
        _create(Actor(role="vendor", id="v-2"), title="Other")

        self.assertEqual(ListingService.for_actor(ADMIN).count(), 3)
        self.assertEqual(list(ListingService.for_actor(VENDOR)), [own])


class FilterTests(TestCase):
    def setUp(self) -> None:
        super().setUp()
        self.tee = _create(
            title="Black Tee",
            category="tshirts",
            brand="basics",
            gender="MEN",
            base_price="500",
            variants=[{"size": "M", "sku": "TEE-M"}, {"size": "L", "sku": "TEE-L"}],
        )
        self.dress = _create(
            title="Summer Dress",
            description="Vestido leve",
            category="dresses",
            brand="aurora",
            gender="WOMEN",
            base_price="3000",
            discount_percentage=50,
            variants=[{"size": "S", "sku": "DRS-S"}],
        )
        self.jacket = _create(
            title="Denim Jacket",
            category="jackets",
            brand="basics",
            base_price="4000",
        )

    def _filter(self, **filters):
        return list(ListingService.filter_products(ListingService.visible(), filters))

    def test_search(self) -> None:
        self.assertEqual(self._filter(search="vestido"), [self.dress])

    def test_category_and_brand_lists(self) -> None:
        self.assertEqual(set(self._filter(category="tshirts,dresses")), {self.tee, self.dress})
        self.assertEqual(set(self._filter(brand="basics")), {self.tee, self.jacket})

    def test_gender_and_sale(self) -> None:
        self.assertEqual(self._filter(gender="men"), [self.tee])
        self.assertEqual(self._filter(sale="true"), [self.dress])

    def test_sizes_are_distinct(self) -> None:
        self.assertEqual(self._filter(sizes="M,L"), [self.tee])

    def test_price_range_uses_final_price(self) -> None:
        self.assertEqual(set(self._filter(min_price="400", max_price="1500")), {self.tee, self.dress})

    def test_sort(self) -> None:
        self.assertEqual(self._filter(sort="final_price-asc"), [self.tee, self.dress, self.jacket])
        self.assertEqual(self._filter(sort="finalPrice-desc"), [self.jacket, self.dress, self.tee])

    def test_invalid_sort(self) -> None:
        with self.assertRaises(ValidationError):
            self._filter(sort="stock-asc")

    def test_invalid_price(self) -> None:
        with self.assertRaises(ValidationError):
            self._filter(min_price="cheap")

    def test_list_visible_paginates(self) -> None:
        result = ListingService.list_visible({"sort": "title-asc"}, page=2, limit=2)
        self.assertEqual(result["total"], 3)
        self.assertEqual(result["total_pages"], 2)
        self.assertEqual(result["products"], [self.dress])

    def test_limit_is_capped(self) -> None:
        self.assertEqual(ListingService.list_visible({}, limit=1000)["limit"], 100)

    def test_related(self) -> None:
        related = ListingService.related(self.tee)
        self.assertEqual(related, [self.jacket])
        self.assertEqual(self.tee.final_price, Decimal("500.00"))
