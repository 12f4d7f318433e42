"""
Módulo Usuarios - Usuarios del almacén y sus roles

Las altas, ediciones y bajas requieren el rol administrador.
"""

from .router import router as users_router, roles_router
from .service import UserService, ADMIN_ROLE
from .repository import UserRepository

__all__ = [
    "users_router",
    "roles_router",
    "UserService",
    "UserRepository",
    "ADMIN_ROLE"
]
