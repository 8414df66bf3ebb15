from __future__ import annotations

from django.contrib.auth import get_user_model
from django.test import TestCase
from rest_framework.test import APIClient

from vitrine.actors import Actor
from vitrine.models import Product
from vitrine.services import CatalogService


def _payload(**overrides) -> dict:
    payload = {
        "title": "Cotton Tee",
        "description": "Camiseta básica",
        "category": "tshirts",
        "brand": "basics",
        "basePrice": "1000.00",
        "discountPercentage": 20,
        "images": ["https://example.com/tee.jpg"],
        "isPublished": True,
    }
    payload.update(overrides)
    return payload


class ProductApiTests(TestCase):
    def setUp(self) -> None:
        super().setUp()
        User = get_user_model()
        self.vendor_user = User.objects.create_user("vendor1", password="testpass")
        self.admin_user = User.objects.create_user("mod", password="testpass", is_staff=True)
        self.vendor = APIClient()
        self.vendor.force_authenticate(user=self.vendor_user)
        self.admin = APIClient()
        self.admin.force_authenticate(user=self.admin_user)

    def test_requires_authentication(self) -> None:
        resp = APIClient().get("/api/products")
        self.assertIn(resp.status_code, (401, 403))

    def test_vendor_create_is_pending(self) -> None:
        resp = self.vendor.post("/api/products", _payload(), format="json")
        self.assertEqual(resp.status_code, 201, resp.data)
        self.assertEqual(resp.data["approval_status"], "PENDING")
        self.assertFalse(resp.data["is_published"])
        self.assertEqual(resp.data["final_price"], "800.00")
        self.assertEqual(resp.data["vendor"], "vendor1")

    def test_validation_error_is_400(self) -> None:
        resp = self.vendor.post("/api/products", {"title": "x"}, format="json")
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.data["code"], "missing_fields")
        self.assertIn("description", resp.data["context"]["fields"])

    def test_bulk_row_is_400(self) -> None:
        payload = _payload(variants=[{"bulk": True, "sizes": ["S", "M"], "sku": "TS"}])
        resp = self.vendor.post("/api/products", payload, format="json")
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.data["code"], "unexpanded_bulk_variant")

    def test_moderation_flow(self) -> None:
        ref = self.vendor.post("/api/products", _payload(), format="json").data["ref"]

        resp = self.vendor.post(f"/api/products/{ref}/approve", format="json")
        self.assertEqual(resp.status_code, 403)
        self.assertEqual(resp.data["code"], "admin_required")

        resp = self.admin.post(f"/api/products/{ref}/reject", {"reason": ""}, format="json")
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.data["code"], "missing_rejection_reason")

        resp = self.admin.post(f"/api/products/{ref}/approve", format="json")
        self.assertEqual(resp.status_code, 200, resp.data)
        self.assertEqual(resp.data["approval_status"], "APPROVED")

        resp = self.admin.post(f"/api/products/{ref}/approve", format="json")
        self.assertEqual(resp.status_code, 409)
        self.assertEqual(resp.data["code"], "invalid_transition")

        resp = self.admin.get(f"/api/products/{ref}/events")
        self.assertEqual([e["type"] for e in resp.data], ["created", "approved"])

    def test_vendor_sees_only_own_products(self) -> None:
        CatalogService.create(_payload(), Actor(role="vendor", id="someone-else"))
        resp = self.vendor.get("/api/products")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.data["total"], 0)

        resp = self.admin.get("/api/products?approval_status=pending")
        self.assertEqual(resp.data["total"], 1)

    def test_update_and_delete(self) -> None:
        ref = self.vendor.post("/api/products", _payload(), format="json").data["ref"]

        resp = self.vendor.patch(f"/api/products/{ref}", {"discountPercentage": 50}, format="json")
        self.assertEqual(resp.status_code, 200, resp.data)
        self.assertEqual(resp.data["final_price"], "500.00")

        resp = self.vendor.patch(f"/api/products/{ref}", {"approvalStatus": "APPROVED"}, format="json")
        self.assertEqual(resp.status_code, 403)

        resp = self.vendor.delete(f"/api/products/{ref}")
        self.assertEqual(resp.status_code, 204)
        self.assertFalse(Product.objects.filter(ref=ref).exists())

    def test_missing_product_is_404(self) -> None:
        resp = self.admin.get("/api/products/PRD-NOPE")
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(resp.data["code"], "product_not_found")

    def test_price_for_selection(self) -> None:
        payload = _payload(variants=[{"size": "M", "color": "Black", "sku": "TS-M", "price": "1200.00", "stock": 4}])
        ref = self.admin.post("/api/products", payload, format="json").data["ref"]

        resp = self.admin.get(f"/api/products/{ref}/price?size=M&color=Black&currency=USD")
        self.assertEqual(resp.status_code, 200, resp.data)
        self.assertEqual(resp.data["price"], "1200.00")
        self.assertEqual(resp.data["stock"], 4)
        self.assertEqual(resp.data["display_currency"], "USD")
        self.assertEqual(resp.data["display_price"], "14.40")

        resp = self.admin.get(f"/api/products/{ref}/price?size=XL")
        self.assertEqual(resp.status_code, 404)

    def test_expand_variants(self) -> None:
        body = {"variants": [{"bulk": True, "sizes": ["S", "M"], "sku": "TS", "price": "10"}], "index": 0}
        resp = self.vendor.post("/api/variants/expand", body, format="json")
        self.assertEqual(resp.status_code, 200, resp.data)
        self.assertEqual([v["sku"] for v in resp.data["variants"]], ["TS-S", "TS-M"])

        resp = self.vendor.post("/api/variants/expand", {"variants": [{"bulk": True, "sizes": []}]}, format="json")
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.data["code"], "empty_size_selection")

    def test_form_post_parses_booleans_and_single_image(self) -> None:
        form = {
            "title": "Form Tee",
            "description": "Camiseta",
            "category": "tshirts",
            "brand": "basics",
            "base_price": "1000.00",
            "images": "x.jpg",
            "is_published": "false",
        }
        resp = self.admin.post("/api/products", form, format="multipart")
        self.assertEqual(resp.status_code, 201, resp.data)
        self.assertFalse(resp.data["is_published"])
        self.assertFalse(resp.data["is_visible"])
        self.assertEqual(resp.data["images"], ["x.jpg"])

        form["is_published"] = "true"
        resp = self.admin.post("/api/products", form, format="multipart")
        self.assertEqual(resp.status_code, 201, resp.data)
        self.assertTrue(resp.data["is_published"])

    def test_unsupported_currency_is_400(self) -> None:
        resp = self.admin.post("/api/products", _payload(currency="rupees"), format="json")
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.data["context"]["field"], "currency")


class StorefrontApiTests(TestCase):
    def setUp(self) -> None:
        super().setUp()
        self.client = APIClient()
        admin = Actor(role="admin", id="alice")
        self.visible = CatalogService.create(_payload(title="Visible Tee"), admin)
        self.hidden = CatalogService.create(_payload(title="Hidden Tee", isPublished=False), admin)
        self.related = CatalogService.create(_payload(title="Another Tee"), admin)

    def test_list_only_visible(self) -> None:
        resp = self.client.get("/api/storefront?sort=title-asc")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual([p["title"] for p in resp.data["products"]], ["Another Tee", "Visible Tee"])
        self.assertEqual(resp.data["total"], 2)

    def test_retrieve_by_slug_or_ref(self) -> None:
        self.assertEqual(self.client.get(f"/api/storefront/{self.visible.ref}").status_code, 200)
        self.assertEqual(self.client.get("/api/storefront/visible-tee").status_code, 200)
        self.assertEqual(self.client.get(f"/api/storefront/{self.hidden.ref}").status_code, 404)

    def test_display_currency(self) -> None:
        resp = self.client.get(f"/api/storefront/{self.visible.ref}?currency=EUR")
        self.assertEqual(resp.data["display_currency"], "EUR")
        self.assertEqual(resp.data["display_price"], "8.80")

    def test_related(self) -> None:
        resp = self.client.get(f"/api/storefront/{self.visible.ref}/related")
        self.assertEqual([p["title"] for p in resp.data], ["Another Tee"])

    def test_invalid_sort_is_400(self) -> None:
        resp = self.client.get("/api/storefront?sort=stock-asc")
        self.assertEqual(resp.status_code, 400)

    def test_currency_rates(self) -> None:
        resp = self.client.get("/api/currency/rates")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.data["base"], "INR")
        self.assertIn("USD", resp.data["rates"])
        self.assertEqual(resp.data["currencies"]["JPY"]["decimals"], 0)

    def test_health(self) -> None:
        resp = self.client.get("/api/health")
        self.assertEqual(resp.json()["status"], "healthy")
