"""
Módulo Bultos - Bultos físicos y sus líneas de contenido

Funcionalidades:
- CRUD de bultos con filtros por ubicación y estado
- Líneas de bulto (producto, cantidad, lote, caducidad)
- Borrado en cascada con reversión de stock
- Exportación a Excel
"""

from .router import router as packages_router, details_router as package_details_router
from .service import PackageService
from .repository import PackageRepository

__all__ = [
    "packages_router",
    "package_details_router",
    "PackageService",
    "PackageRepository"
]
