from __future__ import annotations

import copy
from decimal import Decimal

from django.core.serializers.json import DjangoJSONEncoder
from django.db import models, transaction
from django.db.models import Q
from django.utils.text import slugify
from django.utils.translation import gettext_lazy as _

from ..approval import ApprovalStateMachine, ApprovalStatus
from ..ids import generate_product_ref
from ..pricing import PricingEngine
from ..variants import ConcreteVariant


# =============================================================================
# CONVENÇÕES DE VALORES MONETÁRIOS
# =============================================================================
#
# PREÇOS (base_price, final_price, price da variante):
#   - Decimal com 2 casas na moeda base (INR por padrão)
#   - Nunca float: conversões repetidas não acumulam erro
#   - final_price é desnormalizado e recalculado em todo save()
#
# SERIALIZAÇÃO JSON:
#   - DecimalEncoder converte Decimal → string apenas para JSON
#   - Campos JSONField que podem conter Decimal usam encoder=DecimalEncoder
#
# =============================================================================


class DecimalEncoder(DjangoJSONEncoder):
    """JSON encoder that handles Decimal by converting to string for precision."""

    def default(self, obj):
        if isinstance(obj, Decimal):
            return str(obj)
        return super().default(obj)


class ProductQuerySet(models.QuerySet):
    def visible(self):
        """Produtos exibidos na vitrine: aprovados e publicados."""
        return self.filter(approval_status=ApprovalStatus.APPROVED, is_published=True)

    def for_actor(self, actor):
        """Admin vê tudo; vendor vê apenas os próprios produtos."""
        if actor.is_admin:
            return self
        return self.filter(vendor=actor.id)


class ProductManager(models.Manager.from_queryset(ProductQuerySet)):
    """
    Manager para Product com suporte a criação atômica com variantes.

    Uso:
        product = Product.objects.create(
            title="Linen Shirt",
            base_price=Decimal("1999.00"),
            variants=[ConcreteVariant(size="M", sku="LIN-M", price=Decimal("1999.00"), stock=4)],
        )
    """

    use_in_migrations = True

    def create(self, **kwargs):
        variants = kwargs.pop("variants", None)
        with transaction.atomic():
            product = self.model(**kwargs)
            if variants is not None:
                product.variants = variants
            product.save(force_insert=True, using=self.db)
        return product


class Product(models.Model):
    """
    Produto do catálogo (agregado).

    Compõe variantes, estado de aprovação e preço. Escritas devem passar
    por CatalogService, que valida invariantes e grava atomicamente.

    Visibilidade na vitrine: approval_status == APPROVED e is_published.
    """

    class Gender(models.TextChoices):
        MEN = "MEN", _("masculino")
        WOMEN = "WOMEN", _("feminino")
        UNISEX = "UNISEX", _("unissex")

    ApprovalStatus = ApprovalStatus

    objects = ProductManager()

    ref = models.CharField(_("referência"), max_length=32, unique=True, default=generate_product_ref, editable=False)
    title = models.CharField(_("título"), max_length=200)
    slug = models.SlugField(_("slug"), max_length=220, unique=True, blank=True)
    description = models.TextField(_("descrição"))

    # Referências opacas para entidades externas (categoria/marca)
    category = models.CharField(_("categoria"), max_length=64, db_index=True)
    brand = models.CharField(_("marca"), max_length=64, db_index=True)
    gender = models.CharField(_("gênero"), max_length=8, choices=Gender.choices, default=Gender.UNISEX)

    currency = models.CharField(_("moeda"), max_length=3, default="INR")
    base_price = models.DecimalField(_("preço base"), max_digits=12, decimal_places=2, default=Decimal("0"))
    cost_price = models.DecimalField(_("preço de custo"), max_digits=12, decimal_places=2, null=True, blank=True)
    discount_percentage = models.PositiveSmallIntegerField(_("desconto (%)"), default=0)
    final_price = models.DecimalField(_("preço final"), max_digits=12, decimal_places=2, default=Decimal("0"), db_index=True)

    stock = models.PositiveIntegerField(_("estoque"), default=0)
    images = models.JSONField(_("imagens"), default=list, blank=True)

    approval_status = models.CharField(
        _("aprovação"),
        max_length=16,
        choices=ApprovalStatus.choices,
        default=ApprovalStatus.PENDING,
        db_index=True,
    )
    rejection_reason = models.TextField(_("motivo da rejeição"), null=True, blank=True)
    is_published = models.BooleanField(_("publicado"), default=False, db_index=True)
    vendor = models.CharField(_("vendedor"), max_length=64, null=True, blank=True, db_index=True)

    created_at = models.DateTimeField(_("criado em"), auto_now_add=True)
    updated_at = models.DateTimeField(_("atualizado em"), auto_now=True)

    class Meta:
        app_label = "vitrine"
        verbose_name = _("produto")
        verbose_name_plural = _("produtos")
        ordering = ("-created_at", "id")
        constraints = [
            models.CheckConstraint(
                condition=Q(discount_percentage__gte=0) & Q(discount_percentage__lte=100),
                name="product_discount_range",
            ),
            models.CheckConstraint(
                condition=Q(base_price__gte=0),
                name="product_base_price_non_negative",
            ),
        ]

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._original_title = self.title

    def __str__(self) -> str:
        return self.title or self.ref

    @property
    def is_visible(self) -> bool:
        return ApprovalStateMachine.is_visible(self)

    @property
    def is_admin_authored(self) -> bool:
        return not self.vendor

    @property
    def total_stock(self) -> int:
        return PricingEngine.total_stock(self)

    # ------------------------------------------------------------------ variants API

    @property
    def variants(self) -> list[ConcreteVariant]:
        if not hasattr(self, "_variants_cache"):
            self._variants_cache = self._load_variants() if self.pk else []
        return list(self._variants_cache)

    @variants.setter
    def variants(self, value: list[ConcreteVariant]):
        self._variants_cache = list(value or [])
        self._variants_dirty = True

    def invalidate_variants_cache(self) -> None:
        if hasattr(self, "_variants_cache"):
            delattr(self, "_variants_cache")
        self._variants_dirty = False

    def refresh_from_db(self, *args, **kwargs):
        super().refresh_from_db(*args, **kwargs)
        self._original_title = self.title
        self.invalidate_variants_cache()

    def save(self, *args, **kwargs):
        self.final_price = PricingEngine.product_final_price(self)
        if not self.slug or self.title != self._original_title:
            self.slug = self._unique_slug()
            update_fields = kwargs.get("update_fields")
            if update_fields is not None and "slug" not in update_fields:
                kwargs["update_fields"] = [*update_fields, "slug"]

        dirty = getattr(self, "_variants_dirty", False)
        with transaction.atomic():
            super().save(*args, **kwargs)
            if dirty:
                self._persist_variants(self._variants_cache)
        self._original_title = self.title

    # ------------------------------------------------------------------ internal

    def _unique_slug(self) -> str:
        base = slugify(self.title)[:200] or self.ref.lower()
        slug = base
        suffix = 2
        while Product.objects.filter(slug=slug).exclude(pk=self.pk).exists():
            slug = f"{base}-{suffix}"
            suffix += 1
        return slug

    def _load_variants(self) -> list[ConcreteVariant]:
        return [row.to_variant() for row in self.product_variants.order_by("position", "id")]

    def _persist_variants(self, variants: list[ConcreteVariant]) -> None:
        # Variantes não têm identidade própria: substituição integral
        self.product_variants.all().delete()
        ProductVariant.objects.bulk_create(
            [
                ProductVariant(
                    product=self,
                    position=position,
                    size=v.size,
                    color=v.color,
                    color_code=v.color_code,
                    sku=v.sku,
                    price=v.price if v.price is not None else self.base_price,
                    stock=v.stock,
                    variant_image=copy.deepcopy(v.variant_image),
                )
                for position, v in enumerate(variants)
            ]
        )
        self._variants_cache = list(variants)
        self._variants_dirty = False


class ProductVariant(models.Model):
    """Linha persistida de uma variante concreta (pertence ao Product)."""

    product = models.ForeignKey(
        Product,
        on_delete=models.CASCADE,
        related_name="product_variants",
        verbose_name=_("produto"),
    )
    position = models.PositiveIntegerField(_("posição"), default=0)
    size = models.CharField(_("tamanho"), max_length=32, blank=True, default="")
    color = models.CharField(_("cor"), max_length=64, blank=True, default="")
    color_code = models.CharField(_("código da cor"), max_length=16, blank=True, default="")
    sku = models.CharField(_("SKU"), max_length=64, blank=True, default="")
    price = models.DecimalField(_("preço"), max_digits=12, decimal_places=2)
    stock = models.PositiveIntegerField(_("estoque"), default=0)
    variant_image = models.JSONField(_("imagem da variante"), null=True, blank=True)

    class Meta:
        app_label = "vitrine"
        verbose_name = _("variante")
        verbose_name_plural = _("variantes")
        ordering = ("position", "id")
        constraints = [
            models.UniqueConstraint(
                fields=["product", "sku"],
                condition=~Q(sku=""),
                name="uniq_product_variant_sku",
            ),
        ]

    def __str__(self) -> str:
        return self.sku or f"{self.size} / {self.color}".strip(" /")

    def to_variant(self) -> ConcreteVariant:
        return ConcreteVariant(
            size=self.size,
            color=self.color,
            color_code=self.color_code,
            sku=self.sku,
            price=self.price,
            stock=self.stock,
            variant_image=self.variant_image,
        )


class ProductEvent(models.Model):
    """
    Audit log append-only para produtos.

    Tipos: created, updated, approved, rejected, resubmitted.
    """

    product = models.ForeignKey(Product, verbose_name=_("produto"), on_delete=models.CASCADE, related_name="events")

    type = models.CharField(_("tipo"), max_length=64, db_index=True)
    actor = models.CharField(_("ator"), max_length=128)
    payload = models.JSONField(_("payload"), default=dict, encoder=DecimalEncoder)

    created_at = models.DateTimeField(_("criado em"), auto_now_add=True)

    class Meta:
        app_label = "vitrine"
        verbose_name = _("evento do produto")
        verbose_name_plural = _("eventos do produto")
        ordering = ("created_at", "id")

    def __str__(self) -> str:
        return f"{self.type} @ {self.created_at}"
