"""
Vitrine IDs — Geração de identificadores únicos.
"""

from __future__ import annotations

import secrets
import string


# Caracteres seguros para IDs (sem ambíguos: 0/O, 1/l/I)
_SAFE_CHARS = string.ascii_uppercase.replace("O", "").replace("I", "") + string.digits.replace("0", "").replace("1", "")


def _generate_id(prefix: str, length: int = 8) -> str:
    """
    Gera um ID único com prefixo.

    Args:
        prefix: Prefixo do ID (ex.: "PRD")
        length: Comprimento da parte aleatória

    Returns:
        ID no formato PREFIX-XXXXXXXX
    """
    random_part = "".join(secrets.choice(_SAFE_CHARS) for _ in range(length))
    return f"{prefix}-{random_part}"


def generate_product_ref() -> str:
    """
    Gera referência opaca para Product.

    Formato: PRD-XXXXXXXX
    """
    return _generate_id("PRD", 8)
