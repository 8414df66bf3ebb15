"""
Vitrine Exceptions — Exceções específicas do Vitrine.

Todas as exceções seguem o padrão:
- code: Código máquina do erro (ex.: "missing_fields", "invalid_transition")
- message: Mensagem legível para humanos
- context: Dados adicionais sobre o erro (ex.: campo inválido)
"""

from __future__ import annotations


class VitrineError(Exception):
    """
    Classe base para todas as exceções do Vitrine.

    Attributes:
        code: Código máquina do erro
        message: Mensagem legível para humanos
        context: Dados adicionais sobre o erro
    """

    def __init__(self, code: str = "error", message: str = "", context: dict | None = None):
        self.code = code
        self.message = message
        self.context = context or {}
        super().__init__(message)


class ValidationError(VitrineError):
    """
    Erro de validação de rascunho/patch de produto.

    Recuperável localmente: o chamador corrige o campo e reenvia.

    Codes: "missing_fields", "invalid_field", "empty_size_selection",
    "unexpanded_bulk_variant", "duplicate_sku", "missing_rejection_reason"
    """


class AuthorizationError(VitrineError):
    """
    Ator sem privilégio para a operação.

    Codes: "admin_required", "approval_field_forbidden", "not_owner"
    """


class StateConflictError(VitrineError):
    """
    Transição de aprovação fora do estado PENDING.

    O chamador deve recarregar o produto antes de tentar novamente.

    Codes: "invalid_transition"
    """


class NotFoundError(VitrineError):
    """
    Produto ou variante inexistente.

    Codes: "product_not_found", "variant_not_found"
    """
