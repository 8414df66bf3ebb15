"""
Vitrine Approval — Máquina de estados de moderação do produto.

Estados: PENDING, APPROVED, REJECTED (nenhum terminal).

    (novo)   --submit/vendor-->  PENDING   (is_published forçado False)
    (novo)   --submit/admin--->  APPROVED  (is_published como informado)
    PENDING  --approve/admin-->  APPROVED  (limpa rejection_reason)
    PENDING  --reject/admin--->  REJECTED  (grava rejection_reason)
    REJECTED --edit/vendor---->  PENDING   (limpa rejection_reason)
    qualquer --edit/admin----->  inalterado

As funções só mutam o objeto em memória; persistência, lock e audit log
ficam com CatalogService.
"""

from __future__ import annotations

import logging
from typing import Any

from django.db import models
from django.utils.translation import gettext_lazy as _

from .actors import Actor
from .exceptions import AuthorizationError, StateConflictError, ValidationError


logger = logging.getLogger(__name__)


class ApprovalStatus(models.TextChoices):
    PENDING = "PENDING", _("pendente")
    APPROVED = "APPROVED", _("aprovado")
    REJECTED = "REJECTED", _("rejeitado")


class ApprovalStateMachine:
    """Transições de aprovação, sempre com o ator explícito."""

    # ação → {estado de origem: estado de destino}
    TRANSITIONS = {
        "approve": {ApprovalStatus.PENDING: ApprovalStatus.APPROVED},
        "reject": {ApprovalStatus.PENDING: ApprovalStatus.REJECTED},
        "resubmit": {ApprovalStatus.REJECTED: ApprovalStatus.PENDING},
    }

    @staticmethod
    def initial_state(actor: Actor, is_published: bool) -> tuple[str, bool]:
        """
        Estado inicial de um produto recém-submetido.

        Returns:
            (approval_status, is_published)
        """
        if actor.is_admin:
            return ApprovalStatus.APPROVED, bool(is_published)
        return ApprovalStatus.PENDING, False

    @staticmethod
    def is_visible(product: Any) -> bool:
        """Visível na vitrine sse APPROVED e publicado."""
        return product.approval_status == ApprovalStatus.APPROVED and bool(product.is_published)

    @staticmethod
    def approve(product: Any, actor: Actor) -> str:
        """
        PENDING → APPROVED.

        Returns:
            Status anterior
        """
        old_status = ApprovalStateMachine._transition(product, actor, "approve")
        product.rejection_reason = None
        return old_status

    @staticmethod
    def reject(product: Any, actor: Actor, reason: str | None) -> str:
        """
        PENDING → REJECTED com motivo obrigatório.

        Returns:
            Status anterior
        """
        ApprovalStateMachine._require_admin(actor, "reject")
        reason = (reason or "").strip()
        if not reason:
            raise ValidationError(
                code="missing_rejection_reason",
                message="Informe o motivo da rejeição",
                context={"field": "rejection_reason"},
            )
        old_status = ApprovalStateMachine._transition(product, actor, "reject")
        product.rejection_reason = reason
        return old_status

    @staticmethod
    def on_edit(product: Any, actor: Actor) -> str | None:
        """
        Efeitos de uma edição sobre o estado de aprovação.

        - admin: nada muda
        - vendor em REJECTED: volta para PENDING (reenvio)
        - vendor: só publica produto já APPROVED

        Returns:
            "resubmitted" quando houve reenvio, senão None
        """
        if actor.is_admin:
            return None

        event = None
        if product.approval_status == ApprovalStatus.REJECTED:
            product.approval_status = ApprovalStateMachine.TRANSITIONS["resubmit"][ApprovalStatus.REJECTED]
            product.rejection_reason = None
            event = "resubmitted"

        if product.approval_status != ApprovalStatus.APPROVED:
            product.is_published = False
        return event

    # ------------------------------------------------------------------ internal

    @staticmethod
    def _require_admin(actor: Actor, action: str) -> None:
        if not actor.is_admin:
            raise AuthorizationError(
                code="admin_required",
                message="Apenas administradores podem moderar produtos",
                context={"action": action, "actor": str(actor)},
            )

    @staticmethod
    def _transition(product: Any, actor: Actor, action: str) -> str:
        ApprovalStateMachine._require_admin(actor, action)

        allowed = ApprovalStateMachine.TRANSITIONS[action]
        current = product.approval_status
        if current not in allowed:
            raise StateConflictError(
                code="invalid_transition",
                message=f"Ação '{action}' não permitida a partir de {current}",
                context={
                    "action": action,
                    "current_status": str(current),
                    "allowed_from": [str(s) for s in allowed],
                },
            )

        product.approval_status = allowed[current]
        logger.debug(
            "Approval transition",
            extra={"action": action, "from": str(current), "to": str(product.approval_status), "actor": str(actor)},
        )
        return current
