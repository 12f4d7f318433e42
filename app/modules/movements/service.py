# app/modules/movements/service.py
import logging
from datetime import datetime
from typing import Optional
from fastapi import HTTPException, Response, status
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from app.shared.database.models import Movement, Package
from app.shared.excel import excel_response, format_datetime
from app.shared.pagination import paginate, clamp_page_size
from .repository import MovementRepository
from .schemas import MovementCreate, MovementResponse, MovementPage, MovementOperationResponse

logger = logging.getLogger(__name__)

class MovementService:
    """
    Movimientos de bultos entre ubicaciones.

    No afectan al stock: solo registran el traslado y dejan la ubicación
    actual del bulto en el destino.
    """

    def __init__(self, db: Session):
        self.db = db
        self.repository = MovementRepository(db)

    def list_movements(self, page: int, page_size: int, username: Optional[str] = None,
                       package: Optional[str] = None, origin: Optional[str] = None,
                       destination: Optional[str] = None) -> MovementPage:
        records, total, total_pages = paginate(
            self.repository.list_query(username, package, origin, destination), page, page_size
        )
        return MovementPage(
            items=[self._build_response(m) for m in records],
            page=max(page, 1),
            page_size=clamp_page_size(page_size),
            total=total,
            total_pages=total_pages,
            user_filter=username,
            package_filter=package,
            origin_filter=origin,
            destination_filter=destination,
            origin_locations=self.repository.distinct_locations(Movement.origin_location),
            destination_locations=self.repository.distinct_locations(Movement.destination_location)
        )

    def get_movement(self, movement_id: int) -> MovementResponse:
        return self._build_response(self._get_or_404(movement_id))

    def create_movement(self, data: MovementCreate, current_user_id: int) -> MovementOperationResponse:
        package = self._get_package_or_404(data.package_id)
        user_id = self._resolve_user(data.user_id, current_user_id)
        origin = self._resolve_origin(data.origin_location, package)

        try:
            movement = self.repository.create({
                "package_id": package.id,
                "user_id": user_id,
                "date": data.date or datetime.now(),
                "origin_location": origin,
                "destination_location": data.destination_location
            })
            package.current_location = data.destination_location
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception(f"Error registrando movimiento del bulto {data.package_id}")
            return MovementOperationResponse(
                success=False, message="No se pudo guardar el movimiento. Intente nuevamente."
            )

        logger.info(f"Bulto {package.id} movido de '{origin}' a '{data.destination_location}'")
        return MovementOperationResponse(success=True, message="Movimiento guardado correctamente.", id=movement.id)

    def update_movement(self, movement_id: int, data: MovementCreate,
                        current_user_id: int) -> MovementOperationResponse:
        movement = self._get_or_404(movement_id)
        package = self._get_package_or_404(data.package_id)
        user_id = self._resolve_user(data.user_id, current_user_id)
        origin = self._resolve_origin(data.origin_location, package)

        try:
            movement.package_id = package.id
            movement.user_id = user_id
            if data.date is not None:
                movement.date = data.date
            movement.origin_location = origin
            movement.destination_location = data.destination_location
            if package.current_location != data.destination_location:
                package.current_location = data.destination_location
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception(f"Error actualizando movimiento {movement_id}")
            return MovementOperationResponse(
                success=False, message="No se pudo guardar el movimiento. Intente nuevamente."
            )

        return MovementOperationResponse(success=True, message="Movimiento guardado correctamente.", id=movement.id)

    def delete_movement(self, movement_id: int) -> MovementOperationResponse:
        """Elimina el registro; la ubicación actual del bulto no cambia"""
        movement = self._get_or_404(movement_id)
        try:
            self.repository.delete(movement)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception(f"Error eliminando movimiento {movement_id}")
            return MovementOperationResponse(
                success=False, message="No se pudo eliminar el movimiento. Intente nuevamente."
            )
        return MovementOperationResponse(success=True, message="Movimiento eliminado correctamente.", id=movement_id)

    def export_movements(self) -> Response:
        rows = [
            (
                m.id,
                format_datetime(m.date),
                m.user.username if m.user else "N/A",
                m.package.description if m.package else "N/A",
                m.origin_location,
                m.destination_location
            )
            for m in self.repository.get_all()
        ]
        return excel_response(
            "Movimientos.xlsx",
            "Movimientos",
            ["ID", "Fecha", "Usuario", "Bulto", "Ubicación Origen", "Ubicación Destino"],
            rows
        )

    # ==================== HELPERS ====================

    def _get_or_404(self, movement_id: int) -> Movement:
        movement = self.repository.get_by_id(movement_id)
        if not movement:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Movimiento no encontrado")
        return movement

    def _get_package_or_404(self, package_id: int) -> Package:
        package = self.repository.get_package(package_id)
        if not package:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Bulto no encontrado")
        return package

    def _resolve_user(self, user_id: Optional[int], current_user_id: int) -> int:
        if user_id is None:
            return current_user_id
        if not self.repository.user_exists(user_id):
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Usuario no encontrado")
        return user_id

    @staticmethod
    def _resolve_origin(origin: Optional[str], package: Package) -> str:
        resolved = origin or package.current_location
        if not resolved:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Debe indicar la ubicación de origen: el bulto no tiene ubicación actual."
            )
        return resolved

    def _build_response(self, movement: Movement) -> MovementResponse:
        return MovementResponse(
            id=movement.id,
            package_id=movement.package_id,
            package_description=movement.package.description if movement.package else None,
            user_id=movement.user_id,
            username=movement.user.username if movement.user else None,
            date=movement.date,
            origin_location=movement.origin_location,
            destination_location=movement.destination_location
        )
