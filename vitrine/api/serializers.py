from __future__ import annotations

from rest_framework import serializers

from vitrine.models import Product, ProductEvent
from vitrine.pricing import PricingEngine


class VariantSerializer(serializers.Serializer):
    """Variante concreta (ConcreteVariant) — somente leitura."""

    size = serializers.CharField()
    color = serializers.CharField()
    color_code = serializers.CharField()
    sku = serializers.CharField()
    price = serializers.DecimalField(max_digits=12, decimal_places=2)
    stock = serializers.IntegerField()
    variant_image = serializers.JSONField(allow_null=True)


class ProductSerializer(serializers.ModelSerializer):
    """
    Produto para a vitrine.

    Com `currency` e `rates` no contexto, inclui display_price/display_currency
    (conversão só de apresentação; valores armazenados ficam na moeda base).
    """

    variants = VariantSerializer(many=True, read_only=True)
    total_stock = serializers.IntegerField(read_only=True)
    is_visible = serializers.BooleanField(read_only=True)
    display_price = serializers.SerializerMethodField()
    display_currency = serializers.SerializerMethodField()

    class Meta:
        model = Product
        fields = (
            "ref",
            "title",
            "slug",
            "description",
            "category",
            "brand",
            "gender",
            "currency",
            "base_price",
            "discount_percentage",
            "final_price",
            "display_price",
            "display_currency",
            "stock",
            "total_stock",
            "images",
            "variants",
            "approval_status",
            "rejection_reason",
            "is_published",
            "is_visible",
            "vendor",
            "created_at",
            "updated_at",
        )
        read_only_fields = fields

    def _display(self, obj: Product):
        currency = self.context.get("currency")
        rates = self.context.get("rates")
        if not currency or rates is None:
            return None
        return PricingEngine.convert_for_display(obj.final_price, currency, rates, base_currency=obj.currency)

    def get_display_price(self, obj: Product):
        converted = self._display(obj)
        return str(converted[0]) if converted else None

    def get_display_currency(self, obj: Product):
        converted = self._display(obj)
        return converted[1] if converted else None


class ConsoleProductSerializer(ProductSerializer):
    """Produto para o console (admin/vendor): inclui preço de custo."""

    class Meta(ProductSerializer.Meta):
        fields = ProductSerializer.Meta.fields + ("cost_price",)
        read_only_fields = fields


class ProductEventSerializer(serializers.ModelSerializer):
    class Meta:
        model = ProductEvent
        fields = ("id", "type", "actor", "payload", "created_at")


class RejectSerializer(serializers.Serializer):
    """POST /api/products/{ref}/reject"""

    # Motivo vazio é validado pela máquina de estados (missing_rejection_reason)
    reason = serializers.CharField(required=False, allow_blank=True, default="")


class ExpandVariantsSerializer(serializers.Serializer):
    """
    POST /api/variants/expand

    - variants: linhas do rascunho (concretas e/ou em lote)
    - index: linha a expandir; ausente expande todas
    """

    variants = serializers.ListField(child=serializers.DictField(), allow_empty=True)
    index = serializers.IntegerField(required=False, min_value=0)


class PriceQuerySerializer(serializers.Serializer):
    """GET /api/products/{ref}/price?size=&color=&currency="""

    size = serializers.CharField(required=False, allow_blank=False)
    color = serializers.CharField(required=False, allow_blank=False)
    currency = serializers.CharField(required=False, allow_blank=False, max_length=3)
