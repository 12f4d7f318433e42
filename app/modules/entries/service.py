# app/modules/entries/service.py
from datetime import datetime
from typing import List, Optional
from fastapi import HTTPException, Response, status
from sqlalchemy.orm import Session

from app.shared.excel import excel_response, format_datetime
from app.shared.pagination import paginate, clamp_page_size
from app.modules.stock.service import StockService
from app.modules.stock.schemas import StockMovementKind, StockResult
from app.modules.stock.repository import StockRecord
from .repository import StockRecordRepository
from .schemas import StockRecordCreate, StockRecordResponse, StockRecordPage, EligiblePackage

EXPORTS = {
    StockMovementKind.ENTRY: ("Entradas.xlsx", "Entradas"),
    StockMovementKind.EXIT: ("Salidas.xlsx", "Salidas"),
}

class StockRecordService:
    """
    Entradas o salidas de bultos.

    Listados, bultos elegibles y exportación se resuelven aquí; alta,
    edición y baja pasan por StockService, que mantiene el stock.
    """

    def __init__(self, db: Session, kind: StockMovementKind):
        self.db = db
        self.kind = kind
        self.repository = StockRecordRepository(db, kind)
        self.stock = StockService(db)

    def list_records(self, page: int, page_size: int, username: Optional[str] = None,
                     package: Optional[str] = None) -> StockRecordPage:
        records, total, total_pages = paginate(self.repository.list_query(username, package), page, page_size)
        return StockRecordPage(
            items=[self._build_response(r) for r in records],
            page=max(page, 1),
            page_size=clamp_page_size(page_size),
            total=total,
            total_pages=total_pages,
            user_filter=username,
            package_filter=package
        )

    def get_record(self, record_id: int) -> StockRecordResponse:
        record = self.repository.get_by_id(record_id)
        if not record:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"{self.kind.label.capitalize()} no encontrada"
            )
        return self._build_response(record)

    def eligible_packages(self, include_package_id: Optional[int] = None) -> List[EligiblePackage]:
        return [
            EligiblePackage(id=p.id, description=p.description, current_location=p.current_location)
            for p in self.repository.eligible_packages(include_package_id)
        ]

    def create_record(self, data: StockRecordCreate, current_user_id: int) -> StockResult:
        user_id = data.user_id or current_user_id
        date = data.date or datetime.now()
        if self.kind is StockMovementKind.ENTRY:
            return self.stock.create_entry(data.package_id, user_id, date)
        return self.stock.create_exit(data.package_id, user_id, date)

    def update_record(self, record_id: int, data: StockRecordCreate, current_user_id: int) -> StockResult:
        user_id = data.user_id or current_user_id
        if self.kind is StockMovementKind.ENTRY:
            return self.stock.update_entry(record_id, data.package_id, user_id, data.date)
        return self.stock.update_exit(record_id, data.package_id, user_id, data.date)

    def delete_record(self, record_id: int) -> StockResult:
        if self.kind is StockMovementKind.ENTRY:
            return self.stock.delete_entry(record_id)
        return self.stock.delete_exit(record_id)

    def export_records(self) -> Response:
        filename, sheet_title = EXPORTS[self.kind]
        rows = [
            (
                r.id,
                r.package.description if r.package else "N/A",
                r.user.username if r.user else "N/A",
                format_datetime(r.date)
            )
            for r in self.repository.get_all()
        ]
        return excel_response(filename, sheet_title, ["ID", "Bulto", "Usuario", "Fecha"], rows)

    def _build_response(self, record: StockRecord) -> StockRecordResponse:
        return StockRecordResponse(
            id=record.id,
            package_id=record.package_id,
            package_description=record.package.description if record.package else None,
            user_id=record.user_id,
            username=record.user.username if record.user else None,
            date=record.date
        )
