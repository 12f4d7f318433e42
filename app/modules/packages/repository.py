# app/modules/packages/repository.py
from typing import List, Optional
from sqlalchemy.orm import Session, joinedload

from app.shared.database.models import Package, PackageState, PackageDetail, Product

class PackageRepository:

    def __init__(self, db: Session):
        self.db = db

    # ==================== BULTOS ====================

    def list_query(self, location: Optional[str] = None, state: Optional[str] = None):
        query = self.db.query(Package).options(joinedload(Package.state))
        if location:
            query = query.filter(Package.current_location.ilike(f"%{location}%"))
        if state:
            query = query.join(PackageState, Package.state_id == PackageState.id)\
                .filter(PackageState.name == state)
        return query.order_by(Package.id.desc())

    def get_all(self) -> List[Package]:
        return self.list_query().all()

    def get_by_id(self, package_id: int) -> Optional[Package]:
        return self.db.query(Package).options(
            joinedload(Package.state),
            joinedload(Package.details).joinedload(PackageDetail.product)
        ).filter(Package.id == package_id).first()

    def state_exists(self, state_id: int) -> bool:
        return self.db.query(PackageState.id).filter(PackageState.id == state_id).first() is not None

    def get_state_names(self) -> List[str]:
        return [name for (name,) in self.db.query(PackageState.name).order_by(PackageState.name).all()]

    def create(self, package_data: dict) -> Package:
        package = Package(**package_data)
        self.db.add(package)
        self.db.flush()
        return package

    # ==================== DETALLES ====================

    def detail_list_query(self, package: Optional[str] = None, product: Optional[str] = None,
                          lot: Optional[str] = None):
        query = self.db.query(PackageDetail)\
            .join(Package, PackageDetail.package_id == Package.id)\
            .join(Product, PackageDetail.product_id == Product.id)\
            .options(joinedload(PackageDetail.package), joinedload(PackageDetail.product))
        if package:
            query = query.filter(Package.description.ilike(f"%{package}%"))
        if product:
            query = query.filter(Product.name.ilike(f"%{product}%"))
        if lot:
            query = query.filter(PackageDetail.lot.ilike(f"%{lot}%"))
        return query.order_by(PackageDetail.package_id, PackageDetail.id)

    def get_all_details(self) -> List[PackageDetail]:
        return self.detail_list_query().all()

    def get_detail(self, detail_id: int) -> Optional[PackageDetail]:
        return self.db.query(PackageDetail).options(
            joinedload(PackageDetail.package),
            joinedload(PackageDetail.product)
        ).filter(PackageDetail.id == detail_id).first()
