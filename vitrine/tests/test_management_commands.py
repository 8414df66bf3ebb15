from __future__ import annotations

from io import StringIO

from django.core.management import call_command
from django.test import TestCase

from vitrine.approval import ApprovalStatus
from vitrine.models import Product


class SeedCatalogCommandTests(TestCase):
    def test_seed_catalog(self) -> None:
        call_command("seed_catalog", stdout=StringIO())

        self.assertEqual(Product.objects.count(), 3)
        self.assertEqual(Product.objects.visible().count(), 2)
        pending = Product.objects.get(approval_status=ApprovalStatus.PENDING)
        self.assertEqual(pending.vendor, "seed-vendor")

        shirt = Product.objects.get(title="Classic Linen Shirt")
        self.assertEqual([v.sku for v in shirt.variants], ["LIN-WHT-S", "LIN-WHT-M", "LIN-WHT-L"])

    def test_seed_catalog_reset(self) -> None:
        call_command("seed_catalog", stdout=StringIO())
        call_command("seed_catalog", "--reset", stdout=StringIO())

        self.assertEqual(Product.objects.count(), 3)
