# app/api/v1/router.py
from fastapi import APIRouter

from app.config.settings import settings
from app.core.auth.router import router as auth_router
from app.modules.stock import stock_router
from app.modules.products import products_router
from app.modules.catalogs import categories_router, special_storages_router, package_states_router
from app.modules.packages import packages_router, package_details_router
from app.modules.entries import entries_router
from app.modules.exits import exits_router
from app.modules.movements import movements_router
from app.modules.users import users_router, roles_router

# Router principal de la API v1
api_router = APIRouter()

# ==================== AUTENTICACIÓN ====================

api_router.include_router(auth_router, prefix="/auth", tags=["Autenticación"])

# ==================== CATÁLOGOS ====================

api_router.include_router(products_router)
api_router.include_router(categories_router)
api_router.include_router(special_storages_router)
api_router.include_router(package_states_router)

# ==================== BULTOS Y STOCK ====================

api_router.include_router(packages_router)
api_router.include_router(package_details_router)
api_router.include_router(entries_router)
api_router.include_router(exits_router)
api_router.include_router(movements_router)
api_router.include_router(stock_router)

# ==================== USUARIOS ====================

api_router.include_router(users_router)
api_router.include_router(roles_router)

@api_router.get("/")
async def api_root():
    """Root endpoint de la API"""
    return {
        "message": f"{settings.app_name} v1",
        "version": settings.version,
        "status": "active",
        "available_endpoints": {
            "authentication": "/api/v1/auth",
            "products": "/api/v1/products",
            "packages": "/api/v1/packages",
            "package_details": "/api/v1/package-details",
            "entries": "/api/v1/entries",
            "exits": "/api/v1/exits",
            "movements": "/api/v1/movements",
            "users": "/api/v1/users"
        }
    }

@api_router.get("/health")
async def health_check():
    return {
        "status": "healthy",
        "service": settings.app_name,
        "version": settings.version
    }
