# app/modules/packages/router.py
from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.config.database import get_db
from app.core.auth.dependencies import get_current_user
from app.shared.database.models import User
from app.modules.stock.router import to_operation_response
from app.modules.stock.schemas import OperationResponse
from .service import PackageService
from .schemas import (
    PackageCreate, PackageDetailResponse, PackagePage,
    PackageLineCreate, PackageLineResponse, PackageLinePage
)

router = APIRouter(prefix="/packages", tags=["Bultos"])
details_router = APIRouter(prefix="/package-details", tags=["Detalles de Bulto"])

# ===== BULTOS =====

@router.get("/", response_model=PackagePage)
async def list_packages(
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100),
    location: Optional[str] = Query(None, description="Filtrar por ubicación (contiene)"),
    state: Optional[str] = Query(None, description="Filtrar por nombre de estado"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return PackageService(db).list_packages(page, page_size, location, state)

@router.get("/export")
async def export_packages(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Exportar bultos a Excel"""
    return PackageService(db).export_packages()

@router.get("/{package_id}", response_model=PackageDetailResponse)
async def get_package(
    package_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Obtener un bulto con sus líneas

    Incluye si tiene entrada y/o salida registrada.
    """
    return PackageService(db).get_package(package_id)

@router.post("/", response_model=OperationResponse)
async def create_package(
    data: PackageCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return PackageService(db).create_package(data)

@router.put("/{package_id}", response_model=OperationResponse)
async def update_package(
    package_id: int,
    data: PackageCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Actualizar descripción, ubicación y estado (no afecta al stock)"""
    return PackageService(db).update_package(package_id, data)

@router.delete("/{package_id}", response_model=OperationResponse)
async def delete_package(
    package_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Eliminar un bulto

    Revierte el stock que aportaron su entrada y su salida y borra en cascada
    líneas, entrada, salida y movimientos. Se rechaza si algún producto
    quedaría con stock negativo.
    """
    return to_operation_response(PackageService(db).delete_package(package_id))

# ===== DETALLES DE BULTO =====

@details_router.get("/", response_model=PackageLinePage)
async def list_package_details(
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100),
    package: Optional[str] = Query(None, description="Filtrar por descripción del bulto"),
    product: Optional[str] = Query(None, description="Filtrar por nombre del producto"),
    lot: Optional[str] = Query(None, description="Filtrar por lote (contiene)"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return PackageService(db).list_details(page, page_size, package, product, lot)

@details_router.get("/export")
async def export_package_details(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Exportar detalles de bulto a Excel"""
    return PackageService(db).export_details()

@details_router.get("/{detail_id}", response_model=PackageLineResponse)
async def get_package_detail(
    detail_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return PackageService(db).get_detail(detail_id)

@details_router.post("/", response_model=OperationResponse)
async def create_package_detail(
    data: PackageLineCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Añadir una línea a un bulto

    Si el bulto ya tiene entrada (o salida) el stock del producto se ajusta
    en la misma operación.
    """
    return to_operation_response(PackageService(db).create_detail(data))

@details_router.put("/{detail_id}", response_model=OperationResponse)
async def update_package_detail(
    detail_id: int,
    data: PackageLineCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return to_operation_response(PackageService(db).update_detail(detail_id, data))

@details_router.delete("/{detail_id}", response_model=OperationResponse)
async def delete_package_detail(
    detail_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return to_operation_response(PackageService(db).delete_detail(detail_id))
