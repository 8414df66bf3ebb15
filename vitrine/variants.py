"""
Vitrine Variants — Expansão de linhas de variante em lote.

Uma linha em lote (BulkVariantTemplate) carrega vários tamanhos e é
expandida em N variantes concretas (ConcreteVariant), uma por tamanho,
antes da persistência. Linhas em lote nunca chegam ao banco.

Formato de fio (dict) de uma linha:
    concreta: {"size": "M", "color": "Black", "color_code": "#000",
               "sku": "TSHIRT-M", "price": "999.00", "stock": 10,
               "variant_image": {...}}
    em lote:  {"bulk": true, "sizes": ["S", "M", "L"], "sku": "TSHIRT", ...}
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, replace
from decimal import Decimal, InvalidOperation
from typing import Any, Union

from .exceptions import ValidationError


# camelCase vindo do front → snake_case interno
_FIELD_ALIASES = {
    "colorCode": "color_code",
    "variantImage": "variant_image",
    "isBulk": "bulk",
}


@dataclass(frozen=True)
class ConcreteVariant:
    """Combinação concreta tamanho/cor/SKU com preço e estoque próprios."""

    size: str = ""
    color: str = ""
    color_code: str = ""
    sku: str = ""
    price: Decimal | None = None
    stock: int = 0
    variant_image: Any = None

    is_bulk = False

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class BulkVariantTemplate:
    """Linha transitória de edição com um conjunto de tamanhos selecionados."""

    sizes: tuple[str, ...] = field(default_factory=tuple)
    color: str = ""
    color_code: str = ""
    sku: str = ""
    price: Decimal | None = None
    stock: int = 0
    variant_image: Any = None

    is_bulk = True

    def to_dict(self) -> dict:
        data = asdict(self)
        data["sizes"] = list(self.sizes)
        data["bulk"] = True
        return data


VariantRow = Union[ConcreteVariant, BulkVariantTemplate]


# =============================================================================
# PARSING
# =============================================================================


def _field_path(name: str, index: int | None) -> str:
    return name if index is None else f"variants[{index}].{name}"


def _parse_price(value: Any, index: int | None) -> Decimal | None:
    if value is None or value == "":
        return None
    try:
        price = Decimal(str(value))
    except InvalidOperation:
        raise ValidationError(
            code="invalid_field",
            message="Preço da variante inválido",
            context={"field": _field_path("price", index), "value": value},
        )
    if not price.is_finite() or price < 0:
        raise ValidationError(
            code="invalid_field",
            message="Preço da variante não pode ser negativo",
            context={"field": _field_path("price", index), "value": str(value)},
        )
    return price


def _parse_stock(value: Any, index: int | None) -> int:
    if value is None or value == "":
        return 0
    try:
        stock = int(value)
    except (TypeError, ValueError):
        raise ValidationError(
            code="invalid_field",
            message="Estoque da variante inválido",
            context={"field": _field_path("stock", index), "value": value},
        )
    if stock < 0:
        raise ValidationError(
            code="invalid_field",
            message="Estoque da variante não pode ser negativo",
            context={"field": _field_path("stock", index), "value": stock},
        )
    return stock


def _normalize_sizes(raw_sizes: Any) -> tuple[str, ...]:
    """Remove tokens vazios e duplicados preservando a ordem de seleção."""
    if isinstance(raw_sizes, str):
        raw_sizes = [raw_sizes]
    seen: dict[str, None] = {}
    for token in raw_sizes or []:
        token = str(token).strip()
        if token:
            seen.setdefault(token, None)
    return tuple(seen)


def parse_variant_row(raw: dict | VariantRow, index: int | None = None) -> VariantRow:
    """
    Converte um dict de fio em linha tipada.

    A linha é em lote se trouxer `bulk: true` ou `sizes` como lista.
    """
    if isinstance(raw, (ConcreteVariant, BulkVariantTemplate)):
        return raw

    data = {_FIELD_ALIASES.get(k, k): v for k, v in (raw or {}).items()}
    is_bulk = bool(data.get("bulk")) or isinstance(data.get("sizes"), (list, tuple))
    if is_bulk and "sizes" not in data and isinstance(data.get("size"), (list, tuple)):
        data["sizes"] = data["size"]

    common = {
        "color": str(data.get("color") or ""),
        "color_code": str(data.get("color_code") or ""),
        "sku": str(data.get("sku") or "").strip(),
        "price": _parse_price(data.get("price"), index),
        "stock": _parse_stock(data.get("stock"), index),
        "variant_image": data.get("variant_image") or None,
    }

    if is_bulk:
        return BulkVariantTemplate(sizes=_normalize_sizes(data.get("sizes")), **common)
    return ConcreteVariant(size=str(data.get("size") or "").strip(), **common)


def parse_variant_rows(raws: list[Any] | None) -> list[VariantRow]:
    return [parse_variant_row(raw, index=i) for i, raw in enumerate(raws or [])]


# =============================================================================
# EXPANSION
# =============================================================================


def derive_sku(template_sku: str, size: str) -> str:
    """SKU derivado: "{sku}-{size}", ou vazio quando o template não tem SKU."""
    if not template_sku:
        return ""
    return f"{template_sku}-{size}"


def expand_bulk_template(template: BulkVariantTemplate) -> list[ConcreteVariant]:
    """
    Expande um template em uma variante concreta por tamanho selecionado.

    Raises:
        ValidationError: Se nenhum tamanho foi selecionado
    """
    if not template.sizes:
        raise ValidationError(
            code="empty_size_selection",
            message="Selecione ao menos um tamanho",
            context={"sku": template.sku},
        )

    return [
        ConcreteVariant(
            size=size,
            color=template.color,
            color_code=template.color_code,
            sku=derive_sku(template.sku, size),
            price=template.price,
            stock=template.stock,
            variant_image=template.variant_image,
        )
        for size in template.sizes
    ]


def apply_bulk_variant(rows: list[VariantRow], index: int) -> list[ConcreteVariant]:
    """
    Substitui, in-place, a linha em lote `index` pela sua expansão.

    Linhas concretas não mudam (idempotente após aplicado). Em caso de erro
    a lista não é alterada.

    Returns:
        As variantes inseridas (vazio se a linha já era concreta)
    """
    row = rows[index]
    if not row.is_bulk:
        return []
    expanded = expand_bulk_template(row)
    rows[index:index + 1] = expanded
    return expanded


def apply_all_bulk_variants(rows: list[VariantRow]) -> list[VariantRow]:
    """Expande todas as linhas em lote pendentes, in-place (tudo ou nada)."""
    expanded: list[VariantRow] = []
    for row in rows:
        expanded.extend(expand_bulk_template(row) if row.is_bulk else [row])
    rows[:] = expanded
    return rows


def ensure_no_bulk_rows(rows: list[VariantRow]) -> None:
    """
    Garante que nenhuma linha em lote ficou sem expandir.

    Raises:
        ValidationError: "apply all bundles before saving"
    """
    pending = [i for i, row in enumerate(rows) if row.is_bulk]
    if pending:
        raise ValidationError(
            code="unexpanded_bulk_variant",
            message="Aplique todos os lotes de variantes antes de salvar",
            context={"rows": pending},
        )


def with_default_price(rows: list[ConcreteVariant], base_price: Decimal) -> list[ConcreteVariant]:
    """Variantes sem preço herdam o preço base do produto."""
    return [row if row.price is not None else replace(row, price=base_price) for row in rows]


def ensure_unique_skus(rows: list[ConcreteVariant]) -> None:
    """
    SKU é único dentro do produto (SKU vazio é isento).

    Raises:
        ValidationError: Se houver SKU repetido
    """
    seen: set[str] = set()
    duplicated: list[str] = []
    for row in rows:
        if not row.sku:
            continue
        if row.sku in seen and row.sku not in duplicated:
            duplicated.append(row.sku)
        seen.add(row.sku)
    if duplicated:
        raise ValidationError(
            code="duplicate_sku",
            message=f"SKU repetido: {', '.join(duplicated)}",
            context={"field": "variants", "skus": duplicated},
        )
