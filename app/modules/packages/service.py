# app/modules/packages/service.py
import logging
from typing import Optional
from fastapi import HTTPException, Response, status
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from app.shared.database.models import Package, PackageDetail
from app.shared.excel import excel_response, format_date, format_datetime
from app.shared.pagination import paginate, clamp_page_size
from app.modules.stock.service import StockService
from app.modules.stock.schemas import StockResult
from .repository import PackageRepository
from .schemas import (
    PackageCreate, PackageResponse, PackageDetailResponse, PackageDetailItem, PackagePage,
    PackageLineCreate, PackageLineResponse, PackageLinePage
)

logger = logging.getLogger(__name__)

class PackageService:
    """
    Bultos y sus líneas de contenido.

    Los datos descriptivos del bulto (descripción, ubicación, estado) se
    guardan aquí; todo lo que cambia el stock se delega en StockService.
    """

    def __init__(self, db: Session):
        self.db = db
        self.repository = PackageRepository(db)
        self.stock = StockService(db)

    # ==================== BULTOS ====================

    def list_packages(self, page: int, page_size: int, location: Optional[str] = None,
                      state: Optional[str] = None) -> PackagePage:
        records, total, total_pages = paginate(self.repository.list_query(location, state), page, page_size)
        return PackagePage(
            items=[self._build_package(p) for p in records],
            page=max(page, 1),
            page_size=clamp_page_size(page_size),
            total=total,
            total_pages=total_pages,
            location_filter=location,
            state_filter=state,
            states=self.repository.get_state_names()
        )

    def get_package(self, package_id: int) -> PackageDetailResponse:
        package = self.repository.get_by_id(package_id)
        if not package:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Bulto no encontrado")

        classification = self.stock.classify_package(package_id)
        details = [
            PackageDetailItem(
                id=d.id,
                product_id=d.product_id,
                product_name=d.product.name if d.product else None,
                quantity=d.quantity,
                lot=d.lot,
                expiry_date=d.expiry_date
            )
            for d in sorted(package.details, key=lambda d: d.id)
        ]
        return PackageDetailResponse(
            **self._build_package(package).model_dump(),
            details=details,
            has_entry=classification.has_entry,
            has_exit=classification.has_exit,
            total_units=sum(d.quantity for d in details)
        )

    def create_package(self, data: PackageCreate) -> dict:
        self._validate_state(data.state_id)
        try:
            package = self.repository.create(data.model_dump())
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception("Error creando bulto")
            return {"success": False, "message": "No se pudo guardar el bulto. Intente nuevamente."}
        logger.info(f"Bulto {package.id} creado: {package.description}")
        return {"success": True, "message": "Bulto guardado correctamente.", "id": package.id}

    def update_package(self, package_id: int, data: PackageCreate) -> dict:
        package = self.repository.get_by_id(package_id)
        if not package:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Bulto no encontrado")
        self._validate_state(data.state_id)
        try:
            package.description = data.description
            package.current_location = data.current_location
            package.state_id = data.state_id
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception(f"Error actualizando bulto {package_id}")
            return {"success": False, "message": "No se pudo guardar el bulto. Intente nuevamente."}
        return {"success": True, "message": "Bulto guardado correctamente.", "id": package.id}

    def delete_package(self, package_id: int) -> StockResult:
        """Borra el bulto con sus líneas, entrada, salida y movimientos revirtiendo el stock"""
        return self.stock.delete_package(package_id)

    def export_packages(self) -> Response:
        rows = [
            (
                p.id,
                p.description,
                p.current_location or "N/A",
                p.state.name if p.state else "N/A",
                format_datetime(p.created_at)
            )
            for p in self.repository.get_all()
        ]
        return excel_response(
            "Bultos.xlsx",
            "Bultos",
            ["ID", "Descripción", "Ubicación Actual", "Estado", "Fecha de Creación"],
            rows
        )

    # ==================== DETALLES DE BULTO ====================

    def list_details(self, page: int, page_size: int, package: Optional[str] = None,
                     product: Optional[str] = None, lot: Optional[str] = None) -> PackageLinePage:
        records, total, total_pages = paginate(
            self.repository.detail_list_query(package, product, lot), page, page_size
        )
        return PackageLinePage(
            items=[self._build_line(d) for d in records],
            page=max(page, 1),
            page_size=clamp_page_size(page_size),
            total=total,
            total_pages=total_pages,
            package_filter=package,
            product_filter=product,
            lot_filter=lot
        )

    def get_detail(self, detail_id: int) -> PackageLineResponse:
        detail = self.repository.get_detail(detail_id)
        if not detail:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Detalle de bulto no encontrado")
        return self._build_line(detail)

    def create_detail(self, data: PackageLineCreate) -> StockResult:
        return self.stock.create_detail(
            data.package_id, data.product_id, data.quantity, data.lot, data.expiry_date
        )

    def update_detail(self, detail_id: int, data: PackageLineCreate) -> StockResult:
        return self.stock.update_detail(
            detail_id, data.product_id, data.quantity, data.lot, data.expiry_date,
            package_id=data.package_id
        )

    def delete_detail(self, detail_id: int) -> StockResult:
        return self.stock.delete_detail(detail_id)

    def export_details(self) -> Response:
        rows = [
            (
                d.id,
                d.package.description if d.package else "N/A",
                d.product.name if d.product else "N/A",
                d.quantity,
                d.lot or "Sin Lote",
                format_date(d.expiry_date)
            )
            for d in self.repository.get_all_details()
        ]
        return excel_response(
            "DetallesBulto.xlsx",
            "Detalles de Bulto",
            ["ID", "Bulto", "Producto", "Cantidad", "Lote", "Fecha de Caducidad"],
            rows
        )

    # ==================== HELPERS ====================

    def _validate_state(self, state_id: Optional[int]) -> None:
        if state_id is not None and not self.repository.state_exists(state_id):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Estado de bulto no encontrado")

    def _build_package(self, package: Package) -> PackageResponse:
        return PackageResponse(
            id=package.id,
            description=package.description,
            current_location=package.current_location,
            state_id=package.state_id,
            state_name=package.state.name if package.state else None,
            created_at=package.created_at
        )

    def _build_line(self, detail: PackageDetail) -> PackageLineResponse:
        return PackageLineResponse(
            id=detail.id,
            package_id=detail.package_id,
            package_description=detail.package.description if detail.package else None,
            product_id=detail.product_id,
            product_name=detail.product.name if detail.product else None,
            quantity=detail.quantity,
            lot=detail.lot,
            expiry_date=detail.expiry_date
        )
