from __future__ import annotations

from decimal import Decimal

from django.db import migrations, models
import django.db.models.deletion

import vitrine.ids
import vitrine.models.product


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Product",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True, primary_key=True, serialize=False, verbose_name="ID"
                    ),
                ),
                (
                    "ref",
                    models.CharField(
                        default=vitrine.ids.generate_product_ref,
                        editable=False,
                        max_length=32,
                        unique=True,
                        verbose_name="referência",
                    ),
                ),
                ("title", models.CharField(max_length=200, verbose_name="título")),
                ("slug", models.SlugField(blank=True, max_length=220, unique=True, verbose_name="slug")),
                ("description", models.TextField(verbose_name="descrição")),
                ("category", models.CharField(db_index=True, max_length=64, verbose_name="categoria")),
                ("brand", models.CharField(db_index=True, max_length=64, verbose_name="marca")),
                (
                    "gender",
                    models.CharField(
                        choices=[("MEN", "masculino"), ("WOMEN", "feminino"), ("UNISEX", "unissex")],
                        default="UNISEX",
                        max_length=8,
                        verbose_name="gênero",
                    ),
                ),
                ("currency", models.CharField(default="INR", max_length=3, verbose_name="moeda")),
                (
                    "base_price",
                    models.DecimalField(
                        decimal_places=2, default=Decimal("0"), max_digits=12, verbose_name="preço base"
                    ),
                ),
                (
                    "cost_price",
                    models.DecimalField(
                        blank=True, decimal_places=2, max_digits=12, null=True, verbose_name="preço de custo"
                    ),
                ),
                (
                    "discount_percentage",
                    models.PositiveSmallIntegerField(default=0, verbose_name="desconto (%)"),
                ),
                (
                    "final_price",
                    models.DecimalField(
                        db_index=True,
                        decimal_places=2,
                        default=Decimal("0"),
                        max_digits=12,
                        verbose_name="preço final",
                    ),
                ),
                ("stock", models.PositiveIntegerField(default=0, verbose_name="estoque")),
                ("images", models.JSONField(blank=True, default=list, verbose_name="imagens")),
                (
                    "approval_status",
                    models.CharField(
                        choices=[("PENDING", "pendente"), ("APPROVED", "aprovado"), ("REJECTED", "rejeitado")],
                        db_index=True,
                        default="PENDING",
                        max_length=16,
                        verbose_name="aprovação",
                    ),
                ),
                (
                    "rejection_reason",
                    models.TextField(blank=True, null=True, verbose_name="motivo da rejeição"),
                ),
                ("is_published", models.BooleanField(db_index=True, default=False, verbose_name="publicado")),
                (
                    "vendor",
                    models.CharField(blank=True, db_index=True, max_length=64, null=True, verbose_name="vendedor"),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="criado em")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="atualizado em")),
            ],
            options={
                "verbose_name": "produto",
                "verbose_name_plural": "produtos",
                "ordering": ("-created_at", "id"),
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("discount_percentage__gte", 0), ("discount_percentage__lte", 100)),
                        name="product_discount_range",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("base_price__gte", 0)),
                        name="product_base_price_non_negative",
                    ),
                ],
            },
            managers=[
                ("objects", vitrine.models.product.ProductManager()),
            ],
        ),
        migrations.CreateModel(
            name="ProductVariant",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True, primary_key=True, serialize=False, verbose_name="ID"
                    ),
                ),
                ("position", models.PositiveIntegerField(default=0, verbose_name="posição")),
                ("size", models.CharField(blank=True, default="", max_length=32, verbose_name="tamanho")),
                ("color", models.CharField(blank=True, default="", max_length=64, verbose_name="cor")),
                (
                    "color_code",
                    models.CharField(blank=True, default="", max_length=16, verbose_name="código da cor"),
                ),
                ("sku", models.CharField(blank=True, default="", max_length=64, verbose_name="SKU")),
                ("price", models.DecimalField(decimal_places=2, max_digits=12, verbose_name="preço")),
                ("stock", models.PositiveIntegerField(default=0, verbose_name="estoque")),
                (
                    "variant_image",
                    models.JSONField(blank=True, null=True, verbose_name="imagem da variante"),
                ),
                (
                    "product",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="product_variants",
                        to="vitrine.product",
                        verbose_name="produto",
                    ),
                ),
            ],
            options={
                "verbose_name": "variante",
                "verbose_name_plural": "variantes",
                "ordering": ("position", "id"),
                "constraints": [
                    models.UniqueConstraint(
                        condition=models.Q(("sku", ""), _negated=True),
                        fields=("product", "sku"),
                        name="uniq_product_variant_sku",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="ProductEvent",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True, primary_key=True, serialize=False, verbose_name="ID"
                    ),
                ),
                ("type", models.CharField(db_index=True, max_length=64, verbose_name="tipo")),
                ("actor", models.CharField(max_length=128, verbose_name="ator")),
                (
                    "payload",
                    models.JSONField(
                        default=dict,
                        encoder=vitrine.models.product.DecimalEncoder,
                        verbose_name="payload",
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="criado em")),
                (
                    "product",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="events",
                        to="vitrine.product",
                        verbose_name="produto",
                    ),
                ),
            ],
            options={
                "verbose_name": "evento do produto",
                "verbose_name_plural": "eventos do produto",
                "ordering": ("created_at", "id"),
            },
        ),
    ]
