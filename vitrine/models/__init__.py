"""
Vitrine Models — Modelos do catálogo.

Re-exports:
    from vitrine.models import Product, ProductVariant, ProductEvent
"""

from .product import DecimalEncoder, Product, ProductEvent, ProductManager, ProductVariant  # noqa: F401
