# app/modules/catalogs/service.py
import logging
from typing import Optional
from fastapi import HTTPException, Response, status
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from app.shared.excel import excel_response
from app.shared.pagination import paginate, clamp_page_size
from .repository import CatalogRepository, CatalogDefinition
from .schemas import CatalogItemCreate, CatalogItemResponse, CatalogPage, CatalogOperationResponse

logger = logging.getLogger(__name__)

class CatalogService:
    """Alta, edición, baja y exportación de catálogos de nombre único"""

    def __init__(self, db: Session, definition: CatalogDefinition):
        self.db = db
        self.definition = definition
        self.repository = CatalogRepository(db, definition)

    def list_items(self, page: int, page_size: int, name: Optional[str] = None) -> CatalogPage:
        records, total, total_pages = paginate(self.repository.list_query(name), page, page_size)
        return CatalogPage(
            items=[CatalogItemResponse.model_validate(r) for r in records],
            page=max(page, 1),
            page_size=clamp_page_size(page_size),
            total=total,
            total_pages=total_pages,
            name_filter=name
        )

    def create_item(self, data: CatalogItemCreate) -> CatalogOperationResponse:
        self._ensure_unique_name(data.name)
        try:
            item = self.repository.create(data.name)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception(f"Error creando {self.definition.singular.lower()}")
            return self._retry_response()
        return CatalogOperationResponse(success=True, message=self.definition.saved_message, id=item.id)

    def update_item(self, item_id: int, data: CatalogItemCreate) -> CatalogOperationResponse:
        item = self._get_or_404(item_id)
        self._ensure_unique_name(data.name, exclude_id=item_id)
        try:
            item.name = data.name
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception(f"Error actualizando {self.definition.singular.lower()} {item_id}")
            return self._retry_response()
        return CatalogOperationResponse(success=True, message=self.definition.saved_message, id=item.id)

    def delete_item(self, item_id: int) -> CatalogOperationResponse:
        item = self._get_or_404(item_id)
        if self.repository.is_referenced(item_id):
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=self.definition.in_use_message)
        try:
            self.repository.delete(item)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception(f"Error eliminando {self.definition.singular.lower()} {item_id}")
            return CatalogOperationResponse(
                success=False,
                message=f"No se pudo eliminar {self.definition.singular.lower()}. Intente nuevamente."
            )
        return CatalogOperationResponse(
            success=True,
            message=self.definition.deleted_message,
            id=item_id
        )

    def export_items(self) -> Response:
        rows = [(item.id, item.name) for item in self.repository.get_all()]
        return excel_response(self.definition.filename, self.definition.sheet_title, ["ID", "Nombre"], rows)

    # ==================== HELPERS ====================

    def _get_or_404(self, item_id: int):
        item = self.repository.get_by_id(item_id)
        if not item:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=self.definition.not_found_message
            )
        return item

    def _ensure_unique_name(self, name: str, exclude_id: Optional[int] = None) -> None:
        existing = self.repository.get_by_name(name)
        if existing and existing.id != exclude_id:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=f"Ya existe un registro con el nombre '{name}'"
            )

    def _retry_response(self) -> CatalogOperationResponse:
        return CatalogOperationResponse(
            success=False,
            message=f"No se pudo guardar {self.definition.singular.lower()}. Intente nuevamente."
        )
