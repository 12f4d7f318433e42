# app/modules/movements/router.py
from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.config.database import get_db
from app.core.auth.dependencies import get_current_user
from app.shared.database.models import User
from .service import MovementService
from .schemas import MovementCreate, MovementResponse, MovementPage, MovementOperationResponse

router = APIRouter(prefix="/movements", tags=["Movimientos"])

@router.get("/", response_model=MovementPage)
async def list_movements(
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100),
    username: Optional[str] = Query(None, description="Filtrar por usuario"),
    package: Optional[str] = Query(None, description="Filtrar por descripción del bulto"),
    origin: Optional[str] = Query(None, description="Ubicación de origen exacta"),
    destination: Optional[str] = Query(None, description="Ubicación de destino exacta"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return MovementService(db).list_movements(page, page_size, username, package, origin, destination)

@router.get("/export")
async def export_movements(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Exportar movimientos a Excel"""
    return MovementService(db).export_movements()

@router.get("/{movement_id}", response_model=MovementResponse)
async def get_movement(
    movement_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return MovementService(db).get_movement(movement_id)

@router.post("/", response_model=MovementOperationResponse)
async def create_movement(
    data: MovementCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Registrar un movimiento de bulto

    La ubicación actual del bulto pasa a ser el destino. No afecta al stock.
    """
    return MovementService(db).create_movement(data, current_user.id)

@router.put("/{movement_id}", response_model=MovementOperationResponse)
async def update_movement(
    movement_id: int,
    data: MovementCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return MovementService(db).update_movement(movement_id, data, current_user.id)

@router.delete("/{movement_id}", response_model=MovementOperationResponse)
async def delete_movement(
    movement_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return MovementService(db).delete_movement(movement_id)
