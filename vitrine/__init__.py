"""
Django Vitrine — Headless Fashion Catalog Core para Django.

Uso básico:
    from vitrine.models import Product
    from vitrine.services import CatalogService, ListingService
    from vitrine.pricing import PricingEngine
    from vitrine.actors import Actor

Para extensões (contrib):
    from vitrine.contrib.currency import get_rate_backend
"""

__title__ = "Django Vitrine"
__version__ = "0.1.0a1"
