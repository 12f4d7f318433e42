# app/modules/entries/repository.py
from typing import List, Optional
from sqlalchemy import exists, select
from sqlalchemy.orm import Session, joinedload

from app.shared.database.models import Package, PackageDetail, User
from app.modules.stock.repository import StockRepository, StockRecord
from app.modules.stock.schemas import StockMovementKind

class StockRecordRepository:
    """Consultas de listado sobre entradas o salidas según `kind`"""

    def __init__(self, db: Session, kind: StockMovementKind):
        self.db = db
        self.kind = kind
        self.model = StockRepository.model_for(kind)

    def list_query(self, username: Optional[str] = None, package: Optional[str] = None):
        model = self.model
        query = self.db.query(model)\
            .join(User, model.user_id == User.id)\
            .join(Package, model.package_id == Package.id)\
            .options(joinedload(model.user), joinedload(model.package))
        if username:
            query = query.filter(User.username.ilike(f"%{username}%"))
        if package:
            query = query.filter(Package.description.ilike(f"%{package}%"))
        return query.order_by(model.date.desc(), model.id.desc())

    def get_all(self) -> List[StockRecord]:
        return self.list_query().all()

    def get_by_id(self, record_id: int) -> Optional[StockRecord]:
        model = self.model
        return self.db.query(model).options(
            joinedload(model.user),
            joinedload(model.package)
        ).filter(model.id == record_id).first()

    def eligible_packages(self, include_package_id: Optional[int] = None) -> List[Package]:
        """Bultos con al menos un detalle y sin registro de este tipo.

        `include_package_id` mantiene en la lista el bulto del registro que
        se está editando.
        """
        model = self.model
        has_details = exists().where(PackageDetail.package_id == Package.id)
        without_record = ~Package.id.in_(select(model.package_id))
        condition = without_record
        if include_package_id is not None:
            condition = without_record | (Package.id == include_package_id)
        return self.db.query(Package)\
            .filter(has_details, condition)\
            .order_by(Package.description)\
            .all()
