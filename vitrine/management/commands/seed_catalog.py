"""
Management command to seed example catalog data.

Usage:
    python manage.py seed_catalog
    python manage.py seed_catalog --reset  # Clear and reseed
"""

from decimal import Decimal

from django.core.management.base import BaseCommand

from vitrine.actors import Actor
from vitrine.models import Product
from vitrine.services import CatalogService


ADMIN = Actor(role="admin", id="seed-admin")
VENDOR = Actor(role="vendor", id="seed-vendor")


class Command(BaseCommand):
    help = "Seed example products for the catalog"

    def add_arguments(self, parser):
        parser.add_argument(
            "--reset",
            action="store_true",
            help="Clear existing products before seeding",
        )

    def handle(self, *args, **options):
        if options["reset"]:
            self.stdout.write("Clearing existing products...")
            Product.objects.all().delete()

        self.seed_admin_products()
        self.seed_vendor_products()

        self.stdout.write(self.style.SUCCESS("\nCatalog seeded successfully!"))
        self.stdout.write("\nNext steps:")
        self.stdout.write("  1. Run: python manage.py runserver")
        self.stdout.write("  2. Visit: http://localhost:8000/admin/")
        self.stdout.write("  3. Storefront: http://localhost:8000/api/storefront")

    def seed_admin_products(self):
        """Produtos do admin: entram APPROVED."""
        self.stdout.write("\nCreating admin products...")

        drafts = [
            {
                "title": "Classic Linen Shirt",
                "description": "Camisa de linho com corte reto.",
                "category": "shirts",
                "brand": "linea",
                "gender": "MEN",
                "base_price": Decimal("1999.00"),
                "discount_percentage": 10,
                "images": ["https://example.com/img/linen-shirt.jpg"],
                "is_published": True,
                "variants": [
                    {"bulk": True, "sizes": ["S", "M", "L"], "color": "White", "colorCode": "#FFFFFF", "sku": "LIN-WHT", "stock": 8},
                ],
            },
            {
                "title": "Pleated Midi Skirt",
                "description": "Saia midi plissada.",
                "category": "skirts",
                "brand": "aurora",
                "gender": "WOMEN",
                "base_price": Decimal("2499.00"),
                "discount_percentage": 25,
                "images": ["https://example.com/img/midi-skirt.jpg"],
                "is_published": True,
            },
        ]
        for draft in drafts:
            self._create(CatalogService.apply_bulk_variant(draft), ADMIN)

    def seed_vendor_products(self):
        """Produtos de vendor: entram PENDING, aguardando moderação."""
        self.stdout.write("\nCreating vendor products...")

        drafts = [
            {
                "title": "Everyday Cotton Tee",
                "description": "Camiseta de algodão.",
                "category": "tshirts",
                "brand": "basics",
                "gender": "UNISEX",
                "base_price": Decimal("599.00"),
                "images": ["https://example.com/img/cotton-tee.jpg"],
                "is_published": True,
                "variants": [
                    {"size": "M", "color": "Black", "sku": "TEE-BLK-M", "stock": 12},
                    {"size": "L", "color": "Black", "sku": "TEE-BLK-L", "price": "649.00", "stock": 5},
                ],
            },
        ]
        for draft in drafts:
            self._create(draft, VENDOR)

    def _create(self, draft, actor):
        product = CatalogService.create(draft, actor)
        self.stdout.write(f"  Created: {product.ref} {product.title} ({product.approval_status})")
        return product
