"""
Módulo Productos - Catálogo de productos y su stock

La cantidad en stock es de solo lectura para este módulo; la mantiene el
motor de consistencia de stock (módulo stock).
"""

from .router import router as products_router
from .service import ProductService
from .repository import ProductRepository

__all__ = [
    "products_router",
    "ProductService",
    "ProductRepository"
]
