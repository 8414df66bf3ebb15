"""
Vitrine Services — Serviços do catálogo.

    from vitrine.services import CatalogService, ListingService
"""

from .catalog import CatalogService  # noqa: F401
from .listing import ListingService  # noqa: F401
