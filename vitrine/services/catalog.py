"""
CatalogService — Fronteira transacional do agregado Product.
"""

from __future__ import annotations

import logging
from decimal import Decimal, InvalidOperation
from typing import Any

from django.db import transaction

from vitrine.actors import Actor
from vitrine.approval import ApprovalStateMachine, ApprovalStatus
from vitrine.conf import get_vitrine_setting
from vitrine.exceptions import AuthorizationError, NotFoundError, StateConflictError, ValidationError
from vitrine.models import Product, ProductEvent
from vitrine.pricing import SUPPORTED_CURRENCIES, quantize
from vitrine.variants import (
    VariantRow,
    apply_all_bulk_variants,
    apply_bulk_variant,
    ensure_no_bulk_rows,
    ensure_unique_skus,
    parse_variant_rows,
    with_default_price,
)


logger = logging.getLogger(__name__)


# camelCase vindo do front → snake_case interno
FIELD_ALIASES = {
    "basePrice": "base_price",
    "costPrice": "cost_price",
    "discountPercentage": "discount_percentage",
    "isPublished": "is_published",
    "approvalStatus": "approval_status",
    "rejectionReason": "rejection_reason",
}

REQUIRED_FIELDS = ("title", "description", "category", "brand", "base_price")

EDITABLE_FIELDS = (
    "title",
    "description",
    "category",
    "brand",
    "gender",
    "currency",
    "base_price",
    "cost_price",
    "discount_percentage",
    "stock",
    "images",
    "is_published",
)

APPROVAL_FIELDS = ("approval_status", "rejection_reason")

# Formas textuais aceitas em posts de formulário
TRUE_VALUES = frozenset({"true", "1", "yes", "on"})
FALSE_VALUES = frozenset({"false", "0", "no", "off"})


def _normalize_keys(data: dict | None) -> dict:
    return {FIELD_ALIASES.get(k, k): v for k, v in (data or {}).items()}


class CatalogService:
    """
    Serviço de escrita do catálogo.

    Toda escrita passa por aqui para que as invariantes sejam garantidas
    atomicamente:
    1. Valida campos obrigatórios e faixas numéricas
    2. Rejeita linhas de variante em lote não expandidas
    3. Define/preserva o estado de aprovação conforme o ator
    4. Persiste produto + variantes + evento em uma única transação
    """

    # ------------------------------------------------------------------ reads

    @staticmethod
    def get(ref: str) -> Product:
        try:
            return Product.objects.get(ref=ref)
        except Product.DoesNotExist:
            raise NotFoundError(
                code="product_not_found",
                message=f"Produto não encontrado: {ref}",
                context={"ref": ref},
            )

    # ------------------------------------------------------------------ writes

    @staticmethod
    @transaction.atomic
    def create(draft: dict, actor: Actor) -> Product:
        """
        Cria um produto a partir de um rascunho.

        Args:
            draft: Documento no formato do Product (snake_case ou camelCase)
            actor: Quem está submetendo

        Returns:
            Product persistido

        Raises:
            ValidationError: Campos inválidos ou lote não expandido
        """
        data = _normalize_keys(draft)
        cleaned = CatalogService._clean_document(data)

        status, is_published = ApprovalStateMachine.initial_state(actor, cleaned["is_published"])
        cleaned["is_published"] = is_published

        product = Product.objects.create(
            **cleaned,
            approval_status=status,
            rejection_reason=None,
            vendor=None if actor.is_admin else actor.id,
        )

        CatalogService._emit(
            product,
            "created",
            actor,
            {"approval_status": product.approval_status, "variants": len(cleaned["variants"])},
        )
        logger.info(
            "Product created",
            extra={
                "product_ref": product.ref,
                "actor": str(actor),
                "approval_status": product.approval_status,
                "variants_count": len(cleaned["variants"]),
            },
        )
        return product

    @staticmethod
    @transaction.atomic
    def update(ref: str, patch: dict, actor: Actor) -> Product:
        """
        Substitui o documento do produto (campos ausentes no patch são mantidos).

        Não-admin não altera approval_status/rejection_reason; admin só os
        altera através das transições approve/reject.

        Raises:
            NotFoundError: Produto inexistente
            AuthorizationError: Ator sem permissão
            ValidationError: Documento inválido
            StateConflictError: Mudança de aprovação fora de PENDING
        """
        product = CatalogService._lock(ref)
        CatalogService._require_owner(product, actor, "update")

        data = _normalize_keys(patch)
        requested_status = data.pop("approval_status", None)
        requested_reason = data.pop("rejection_reason", None)
        wants_status_change = requested_status is not None and requested_status != product.approval_status
        wants_reason_change = requested_reason is not None and requested_reason != (product.rejection_reason or "")

        if not actor.is_admin and (wants_status_change or wants_reason_change):
            raise AuthorizationError(
                code="approval_field_forbidden",
                message="Somente administradores alteram o estado de aprovação",
                context={"ref": ref, "fields": [f for f in APPROVAL_FIELDS if f in _normalize_keys(patch)]},
            )

        document = CatalogService._document(product)
        document.update({k: v for k, v in data.items() if k in EDITABLE_FIELDS or k == "variants"})
        cleaned = CatalogService._clean_document(document)

        changed = [
            field
            for field in EDITABLE_FIELDS
            if field in data and getattr(product, field) != cleaned[field]
        ]
        for field in EDITABLE_FIELDS:
            setattr(product, field, cleaned[field])
        if "variants" in data:
            product.variants = cleaned["variants"]
            changed.append("variants")

        event = None
        if wants_status_change:
            event = CatalogService._apply_requested_status(product, actor, requested_status, requested_reason)
        else:
            event = ApprovalStateMachine.on_edit(product, actor)

        product.save()

        CatalogService._emit(product, "updated", actor, {"changed": changed})
        if event:
            CatalogService._emit(product, event, actor, {"approval_status": product.approval_status})
        logger.info(
            "Product updated",
            extra={"product_ref": ref, "actor": str(actor), "changed": changed, "approval_event": event},
        )
        return product

    @staticmethod
    @transaction.atomic
    def delete(ref: str, actor: Actor) -> None:
        """Remove o produto (variantes e eventos em cascata)."""
        product = CatalogService._lock(ref)
        CatalogService._require_owner(product, actor, "delete")
        product.delete()
        logger.info("Product deleted", extra={"product_ref": ref, "actor": str(actor)})

    @staticmethod
    @transaction.atomic
    def approve(ref: str, actor: Actor) -> Product:
        """PENDING → APPROVED."""
        product = CatalogService._lock(ref)
        old_status = ApprovalStateMachine.approve(product, actor)
        product.save(update_fields=["approval_status", "rejection_reason", "updated_at"])
        CatalogService._emit(
            product,
            "approved",
            actor,
            {"old_status": old_status, "new_status": product.approval_status},
        )
        logger.info("Product approved", extra={"product_ref": ref, "actor": str(actor)})
        return product

    @staticmethod
    @transaction.atomic
    def reject(ref: str, actor: Actor, reason: str | None) -> Product:
        """PENDING → REJECTED com motivo."""
        product = CatalogService._lock(ref)
        old_status = ApprovalStateMachine.reject(product, actor, reason)
        product.save(update_fields=["approval_status", "rejection_reason", "updated_at"])
        CatalogService._emit(
            product,
            "rejected",
            actor,
            {"old_status": old_status, "new_status": product.approval_status, "reason": product.rejection_reason},
        )
        logger.info("Product rejected", extra={"product_ref": ref, "actor": str(actor)})
        return product

    # ------------------------------------------------------------------ drafts

    @staticmethod
    def apply_bulk_variant(draft: dict, index: int | None = None) -> dict:
        """
        Expande linha(s) em lote de um rascunho, sem persistir.

        Args:
            draft: Rascunho com "variants"
            index: Linha a expandir; None expande todas

        Returns:
            Novo rascunho com as variantes expandidas (dicts)
        """
        data = dict(draft or {})
        rows: list[VariantRow] = parse_variant_rows(data.get("variants"))
        if index is None:
            apply_all_bulk_variants(rows)
        else:
            if not 0 <= index < len(rows):
                raise ValidationError(
                    code="invalid_field",
                    message="Linha de variante inexistente",
                    context={"field": "index", "value": index},
                )
            apply_bulk_variant(rows, index)
        data["variants"] = [row.to_dict() for row in rows]
        return data

    # ------------------------------------------------------------------ internal

    @staticmethod
    def _lock(ref: str) -> Product:
        try:
            return Product.objects.select_for_update().get(ref=ref)
        except Product.DoesNotExist:
            raise NotFoundError(
                code="product_not_found",
                message=f"Produto não encontrado: {ref}",
                context={"ref": ref},
            )

    @staticmethod
    def _require_owner(product: Product, actor: Actor, action: str) -> None:
        if actor.is_admin:
            return
        if product.vendor != actor.id:
            raise AuthorizationError(
                code="not_owner",
                message="Vendedor só pode alterar os próprios produtos",
                context={"ref": product.ref, "action": action, "actor": str(actor)},
            )

    @staticmethod
    def _apply_requested_status(product: Product, actor: Actor, status: str, reason: str | None) -> str:
        """Mudança de aprovação pedida por admin via update → transição dedicada."""
        if status == ApprovalStatus.APPROVED:
            ApprovalStateMachine.approve(product, actor)
            return "approved"
        if status == ApprovalStatus.REJECTED:
            ApprovalStateMachine.reject(product, actor, reason)
            return "rejected"
        raise StateConflictError(
            code="invalid_transition",
            message=f"Transição {product.approval_status} → {status} não permitida",
            context={"current_status": product.approval_status, "requested_status": status},
        )

    @staticmethod
    def _emit(product: Product, event_type: str, actor: Actor, payload: dict | None = None) -> ProductEvent:
        return ProductEvent.objects.create(
            product=product,
            type=event_type,
            actor=str(actor),
            payload=payload or {},
        )

    @staticmethod
    def _document(product: Product) -> dict:
        document = {field: getattr(product, field) for field in EDITABLE_FIELDS}
        document["variants"] = product.variants
        return document

    @staticmethod
    def _clean_document(data: dict) -> dict:
        """
        Valida e normaliza um documento completo de produto.

        Returns:
            dict com EDITABLE_FIELDS + "variants" (list[ConcreteVariant])
        """
        missing = [f for f in REQUIRED_FIELDS if data.get(f) in (None, "") or (isinstance(data.get(f), str) and not data[f].strip())]
        images = CatalogService._images_field(data)
        if not images:
            missing.append("images")
        if missing:
            raise ValidationError(
                code="missing_fields",
                message=f"Campos obrigatórios ausentes: {', '.join(missing)}",
                context={"fields": missing},
            )

        currency = str(data.get("currency") or get_vitrine_setting("BASE_CURRENCY")).strip().upper()
        if currency not in SUPPORTED_CURRENCIES:
            raise ValidationError(
                code="invalid_field",
                message=f"Moeda não suportada: {currency}",
                context={"field": "currency", "value": currency, "allowed": sorted(SUPPORTED_CURRENCIES)},
            )

        base_price = CatalogService._money_field(data, "base_price", currency)
        cost_price = CatalogService._money_field(data, "cost_price", currency) if data.get("cost_price") not in (None, "") else None
        discount = CatalogService._int_field(data, "discount_percentage", default=0, upper=100)
        stock = CatalogService._int_field(data, "stock", default=0)

        gender = str(data.get("gender") or Product.Gender.UNISEX).upper()
        if gender not in Product.Gender.values:
            raise ValidationError(
                code="invalid_field",
                message=f"Gênero inválido: {gender}",
                context={"field": "gender", "value": gender, "allowed": list(Product.Gender.values)},
            )

        rows = parse_variant_rows(data.get("variants"))
        ensure_no_bulk_rows(rows)
        for index, row in enumerate(rows):
            if row.price is not None:
                CatalogService._check_minor_unit(row.price, currency, f"variants[{index}].price")
        variants = with_default_price(rows, base_price)
        ensure_unique_skus(variants)

        return {
            "title": str(data["title"]).strip(),
            "description": str(data["description"]).strip(),
            "category": str(data["category"]).strip(),
            "brand": str(data["brand"]).strip(),
            "gender": gender,
            "currency": currency,
            "base_price": base_price,
            "cost_price": cost_price,
            "discount_percentage": discount,
            "stock": stock,
            "images": images,
            "is_published": CatalogService._bool_field(data, "is_published"),
            "variants": variants,
        }

    @staticmethod
    def _decimal_field(data: dict, field: str) -> Decimal:
        value = data.get(field)
        try:
            amount = Decimal(str(value))
        except InvalidOperation:
            amount = None
        if amount is None or not amount.is_finite() or amount < 0:
            raise ValidationError(
                code="invalid_field",
                message=f"Valor inválido para {field}",
                context={"field": field, "value": str(value)},
            )
        return amount

    @staticmethod
    def _money_field(data: dict, field: str, currency: str) -> Decimal:
        amount = CatalogService._decimal_field(data, field)
        CatalogService._check_minor_unit(amount, currency, field)
        return amount

    @staticmethod
    def _check_minor_unit(amount: Decimal, currency: str, field: str) -> None:
        """Valor monetário não pode ter frações abaixo da menor unidade da moeda."""
        if amount != quantize(amount, currency):
            raise ValidationError(
                code="invalid_field",
                message=f"Casas decimais demais para {currency} em {field}",
                context={"field": field, "value": str(amount), "currency": currency},
            )

    @staticmethod
    def _int_field(data: dict, field: str, default: int, upper: int | None = None) -> int:
        value = data.get(field)
        if value is None or value == "":
            return default
        try:
            number = int(str(value))
        except ValueError:
            number = None
        if number is None or isinstance(value, bool) or number < 0 or (upper is not None and number > upper):
            raise ValidationError(
                code="invalid_field",
                message=f"Valor inválido para {field}",
                context={"field": field, "value": value},
            )
        return number

    @staticmethod
    def _bool_field(data: dict, field: str, default: bool = False) -> bool:
        """Aceita bool e as formas textuais de formulário ("true"/"false", "1"/"0", "on"/"off")."""
        value = data.get(field)
        if value is None or value == "":
            return default
        if isinstance(value, bool):
            return value
        token = str(value).strip().lower()
        if token in TRUE_VALUES:
            return True
        if token in FALSE_VALUES:
            return False
        raise ValidationError(
            code="invalid_field",
            message=f"Valor inválido para {field}",
            context={"field": field, "value": str(value)},
        )

    @staticmethod
    def _images_field(data: dict) -> list:
        """Lista de imagens; uma referência solta (string/dict) vira lista de um item."""
        value = data.get("images")
        if value in (None, ""):
            return []
        if isinstance(value, (str, dict)):
            value = [value]
        if not isinstance(value, (list, tuple)):
            raise ValidationError(
                code="invalid_field",
                message="Imagens devem ser uma lista",
                context={"field": "images", "value": str(value)},
            )
        return [img for img in value if img]
