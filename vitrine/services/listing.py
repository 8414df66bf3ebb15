"""
ListingService — Consultas de leitura da vitrine e do console.
"""

from __future__ import annotations

import math
from decimal import Decimal, InvalidOperation

from django.db.models import Q, QuerySet

from vitrine.actors import Actor
from vitrine.exceptions import ValidationError
from vitrine.models import Product


SORTABLE_FIELDS = {"created_at", "final_price", "title", "discount_percentage"}
DEFAULT_LIMIT = 20
MAX_LIMIT = 100


def _split(value: str | None) -> list[str]:
    return [token.strip() for token in (value or "").split(",") if token.strip()]


class ListingService:
    """
    Listagens somente leitura.

    A vitrine só enxerga produtos aprovados e publicados; o console
    enxerga tudo (admin) ou apenas os produtos do próprio vendedor.
    """

    @staticmethod
    def visible() -> QuerySet:
        return Product.objects.visible()

    @staticmethod
    def for_actor(actor: Actor) -> QuerySet:
        return Product.objects.for_actor(actor)

    @staticmethod
    def filter_products(qs: QuerySet, filters: dict) -> QuerySet:
        """
        Aplica filtros da vitrine.

        Filtros suportados:
        - search: busca em título/descrição
        - category, brand: um ou vários (separados por vírgula)
        - gender: MEN | WOMEN | UNISEX
        - sale: "true" → apenas com desconto
        - sizes: algum tamanho de variante (separados por vírgula)
        - min_price, max_price: faixa sobre final_price
        - sort: "<campo>-asc|desc" (padrão: mais recentes primeiro)
        """
        search = (filters.get("search") or "").strip()
        if search:
            qs = qs.filter(Q(title__icontains=search) | Q(description__icontains=search))

        categories = _split(filters.get("category"))
        if categories:
            qs = qs.filter(category__in=categories)

        brands = _split(filters.get("brand"))
        if brands:
            qs = qs.filter(brand__in=brands)

        gender = (filters.get("gender") or "").strip().upper()
        if gender:
            qs = qs.filter(gender=gender)

        if str(filters.get("sale", "")).lower() == "true":
            qs = qs.filter(discount_percentage__gt=0)

        sizes = _split(filters.get("sizes"))
        if sizes:
            qs = qs.filter(product_variants__size__in=sizes).distinct()

        min_price = ListingService._price_bound(filters, "min_price")
        if min_price is not None:
            qs = qs.filter(final_price__gte=min_price)
        max_price = ListingService._price_bound(filters, "max_price")
        if max_price is not None:
            qs = qs.filter(final_price__lte=max_price)

        return qs.order_by(*ListingService._ordering(filters.get("sort")))

    @staticmethod
    def list_visible(filters: dict | None = None, page: int = 1, limit: int = DEFAULT_LIMIT) -> dict:
        """
        Página da vitrine.

        Returns:
            {"products", "total", "page", "limit", "total_pages"}
        """
        qs = ListingService.filter_products(ListingService.visible(), filters or {})
        return ListingService.paginate(qs, page, limit)

    @staticmethod
    def paginate(qs: QuerySet, page: int = 1, limit: int = DEFAULT_LIMIT) -> dict:
        page = max(int(page or 1), 1)
        limit = min(max(int(limit or DEFAULT_LIMIT), 1), MAX_LIMIT)
        total = qs.count()
        offset = (page - 1) * limit
        return {
            "products": list(qs[offset:offset + limit]),
            "total": total,
            "page": page,
            "limit": limit,
            "total_pages": math.ceil(total / limit) if total else 0,
        }

    @staticmethod
    def related(product: Product, limit: int = 4) -> list[Product]:
        """Outros produtos visíveis da mesma categoria ou marca."""
        return list(
            ListingService.visible()
            .exclude(pk=product.pk)
            .filter(Q(category=product.category) | Q(brand=product.brand))
            .order_by("-created_at", "id")[:limit]
        )

    # ------------------------------------------------------------------ internal

    @staticmethod
    def _price_bound(filters: dict, key: str) -> Decimal | None:
        value = filters.get(key)
        if value in (None, ""):
            return None
        try:
            return Decimal(str(value))
        except InvalidOperation:
            raise ValidationError(
                code="invalid_field",
                message=f"Valor inválido para {key}",
                context={"field": key, "value": value},
            )

    @staticmethod
    def _ordering(sort: str | None) -> tuple[str, ...]:
        if not sort:
            return ("-created_at", "id")
        field, _, direction = sort.rpartition("-")
        if not field:
            field, direction = direction, "desc"
        field = {"finalPrice": "final_price", "createdAt": "created_at"}.get(field, field)
        if field not in SORTABLE_FIELDS:
            raise ValidationError(
                code="invalid_field",
                message=f"Ordenação não suportada: {sort}",
                context={"field": "sort", "value": sort, "allowed": sorted(SORTABLE_FIELDS)},
            )
        prefix = "" if direction == "asc" else "-"
        return (f"{prefix}{field}", "id")
