# app/modules/entries/router.py
from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.config.database import get_db
from app.core.auth.dependencies import get_current_user
from app.shared.database.models import User
from app.modules.stock.router import to_operation_response
from app.modules.stock.schemas import OperationResponse, StockMovementKind
from .service import StockRecordService
from .schemas import StockRecordCreate, StockRecordResponse, StockRecordPage, EligiblePackage

def build_record_router(kind: StockMovementKind, prefix: str, tag: str) -> APIRouter:
    """Router de entradas o salidas; las escrituras ajustan el stock del bulto completo"""
    router = APIRouter(prefix=prefix, tags=[tag])

    @router.get("/", response_model=StockRecordPage)
    async def list_records(
        page: int = Query(1, ge=1),
        page_size: int = Query(10, ge=1, le=100),
        username: Optional[str] = Query(None, description="Filtrar por usuario"),
        package: Optional[str] = Query(None, description="Filtrar por descripción del bulto"),
        current_user: User = Depends(get_current_user),
        db: Session = Depends(get_db)
    ):
        return StockRecordService(db, kind).list_records(page, page_size, username, package)

    @router.get("/export")
    async def export_records(
        current_user: User = Depends(get_current_user),
        db: Session = Depends(get_db)
    ):
        """Exportar a Excel"""
        return StockRecordService(db, kind).export_records()

    @router.get("/eligible-packages", response_model=List[EligiblePackage])
    async def eligible_packages(
        include_package_id: Optional[int] = Query(None, description="Bulto del registro en edición"),
        current_user: User = Depends(get_current_user),
        db: Session = Depends(get_db)
    ):
        """Bultos con detalles que aún no tienen este tipo de registro"""
        return StockRecordService(db, kind).eligible_packages(include_package_id)

    @router.get("/{record_id}", response_model=StockRecordResponse)
    async def get_record(
        record_id: int,
        current_user: User = Depends(get_current_user),
        db: Session = Depends(get_db)
    ):
        return StockRecordService(db, kind).get_record(record_id)

    @router.post("/", response_model=OperationResponse)
    async def create_record(
        data: StockRecordCreate,
        current_user: User = Depends(get_current_user),
        db: Session = Depends(get_db)
    ):
        return to_operation_response(StockRecordService(db, kind).create_record(data, current_user.id))

    @router.put("/{record_id}", response_model=OperationResponse)
    async def update_record(
        record_id: int,
        data: StockRecordCreate,
        current_user: User = Depends(get_current_user),
        db: Session = Depends(get_db)
    ):
        return to_operation_response(
            StockRecordService(db, kind).update_record(record_id, data, current_user.id)
        )

    @router.delete("/{record_id}", response_model=OperationResponse)
    async def delete_record(
        record_id: int,
        current_user: User = Depends(get_current_user),
        db: Session = Depends(get_db)
    ):
        return to_operation_response(StockRecordService(db, kind).delete_record(record_id))

    return router

router = build_record_router(StockMovementKind.ENTRY, "/entries", "Entradas")
