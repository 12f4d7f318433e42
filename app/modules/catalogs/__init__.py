"""
Módulo Catálogos - Categorías, almacenamientos especiales y estados de bulto

Tablas de nombre único que clasifican productos y bultos. No se puede
eliminar un elemento mientras algún producto o bulto lo use.
"""

from .router import categories_router, special_storages_router, package_states_router
from .service import CatalogService
from .repository import CatalogRepository, CATEGORIES, SPECIAL_STORAGES, PACKAGE_STATES

__all__ = [
    "categories_router",
    "special_storages_router",
    "package_states_router",
    "CatalogService",
    "CatalogRepository",
    "CATEGORIES",
    "SPECIAL_STORAGES",
    "PACKAGE_STATES"
]
