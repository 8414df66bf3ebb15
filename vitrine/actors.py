"""
Vitrine Actors — Descritor explícito de quem executa uma operação.

Toda operação mutável recebe o ator como argumento; nada é lido de
estado global de sessão.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


ROLE_VENDOR = "vendor"
ROLE_ADMIN = "admin"
ROLE_SUPER_ADMIN = "super_admin"

ROLES = (ROLE_VENDOR, ROLE_ADMIN, ROLE_SUPER_ADMIN)
ADMIN_ROLES = frozenset({ROLE_ADMIN, ROLE_SUPER_ADMIN})


@dataclass(frozen=True)
class Actor:
    """Ator de uma operação: papel + identificador."""

    role: str
    id: str

    def __post_init__(self) -> None:
        if self.role not in ROLES:
            raise ValueError(f"Papel desconhecido: {self.role!r}")

    @property
    def is_admin(self) -> bool:
        return self.role in ADMIN_ROLES

    def __str__(self) -> str:
        return f"{self.role}:{self.id}"

    @classmethod
    def from_user(cls, user: Any) -> Actor:
        """
        Deriva o ator de um usuário Django.

        superuser → super_admin, staff → admin, demais → vendor.
        """
        username = getattr(user, "username", None) or str(getattr(user, "pk", "")) or "anonymous"
        if getattr(user, "is_superuser", False):
            return cls(role=ROLE_SUPER_ADMIN, id=username)
        if getattr(user, "is_staff", False):
            return cls(role=ROLE_ADMIN, id=username)
        return cls(role=ROLE_VENDOR, id=username)
