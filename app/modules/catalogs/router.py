# app/modules/catalogs/router.py
from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.config.database import get_db
from app.core.auth.dependencies import get_current_user
from app.shared.database.models import User
from .repository import CatalogDefinition, CATEGORIES, SPECIAL_STORAGES, PACKAGE_STATES
from .service import CatalogService
from .schemas import CatalogItemCreate, CatalogPage, CatalogOperationResponse

def build_catalog_router(prefix: str, tag: str, definition: CatalogDefinition) -> APIRouter:
    """Router CRUD + exportación para un catálogo de nombre único"""
    router = APIRouter(prefix=prefix, tags=[tag])

    @router.get("/", response_model=CatalogPage)
    async def list_items(
        page: int = Query(1, ge=1),
        page_size: int = Query(10, ge=1, le=100),
        name: Optional[str] = Query(None, description="Filtrar por nombre"),
        current_user: User = Depends(get_current_user),
        db: Session = Depends(get_db)
    ):
        return CatalogService(db, definition).list_items(page, page_size, name)

    @router.get("/export")
    async def export_items(
        current_user: User = Depends(get_current_user),
        db: Session = Depends(get_db)
    ):
        """Exportar a Excel"""
        return CatalogService(db, definition).export_items()

    @router.post("/", response_model=CatalogOperationResponse)
    async def create_item(
        data: CatalogItemCreate,
        current_user: User = Depends(get_current_user),
        db: Session = Depends(get_db)
    ):
        return CatalogService(db, definition).create_item(data)

    @router.put("/{item_id}", response_model=CatalogOperationResponse)
    async def update_item(
        item_id: int,
        data: CatalogItemCreate,
        current_user: User = Depends(get_current_user),
        db: Session = Depends(get_db)
    ):
        return CatalogService(db, definition).update_item(item_id, data)

    @router.delete("/{item_id}", response_model=CatalogOperationResponse)
    async def delete_item(
        item_id: int,
        current_user: User = Depends(get_current_user),
        db: Session = Depends(get_db)
    ):
        """Eliminar si no tiene registros que dependan de él"""
        return CatalogService(db, definition).delete_item(item_id)

    return router

categories_router = build_catalog_router("/categories", "Categorías", CATEGORIES)
special_storages_router = build_catalog_router("/special-storages", "Almacenamiento especial", SPECIAL_STORAGES)
package_states_router = build_catalog_router("/package-states", "Estados de bulto", PACKAGE_STATES)
