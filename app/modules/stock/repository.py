# app/modules/stock/repository.py
import logging
from datetime import datetime
from typing import List, Optional, Type, Union
from sqlalchemy.orm import Session
from sqlalchemy import func, select

from app.shared.database.models import (
    Product, Package, PackageDetail, Entry, Exit, Movement, User
)
from .schemas import StockResult, StockErrorCode, StockMovementKind, PackageClassification

logger = logging.getLogger(__name__)

StockRecord = Union[Entry, Exit]

class StockRepository:
    """
    Acceso a datos del motor de stock.

    Ninguna operación hace commit: el servicio agrupa todas las lecturas y
    escrituras de una operación en una sola transacción.
    """

    def __init__(self, db: Session):
        self.db = db

    # ==================== LIBRO DE PRODUCTOS ====================

    def get_product(self, product_id: int) -> Optional[Product]:
        return self.db.query(Product).filter(Product.id == product_id).first()

    def get_products(self, product_ids: List[int]) -> List[Product]:
        if not product_ids:
            return []
        return self.db.query(Product).filter(Product.id.in_(product_ids)).all()

    def apply_delta(self, product_id: int, delta: int) -> StockResult:
        """Suma `delta` (positivo o negativo) al stock del producto.

        Rechaza cualquier cambio que deje el stock por debajo de cero.
        """
        product = self.get_product(product_id)
        if not product:
            logger.error(f"Ajuste de stock sobre producto inexistente {product_id}")
            return StockResult.fail(StockErrorCode.NOT_FOUND, "Producto no encontrado")

        new_quantity = product.quantity_on_hand + delta
        if new_quantity < 0:
            logger.warning(
                f"Stock insuficiente para producto {product_id}. "
                f"Disponible: {product.quantity_on_hand}, ajuste: {delta}"
            )
            return StockResult.fail(
                StockErrorCode.INSUFFICIENT_STOCK,
                f"No hay suficiente stock para el producto {product.name}."
            )

        product.quantity_on_hand = new_quantity
        self.db.flush()
        logger.info(f"Stock de producto {product_id}: {new_quantity - delta} -> {new_quantity}")
        return StockResult.ok("Stock actualizado", entity_id=product_id)

    # ==================== CONTENIDO DE BULTOS ====================

    def get_package(self, package_id: int) -> Optional[Package]:
        return self.db.query(Package).filter(Package.id == package_id).first()

    def get_user(self, user_id: int) -> Optional[User]:
        return self.db.query(User).filter(User.id == user_id).first()

    def list_details_by_package(self, package_id: int) -> List[PackageDetail]:
        return self.db.query(PackageDetail)\
            .filter(PackageDetail.package_id == package_id)\
            .order_by(PackageDetail.id)\
            .all()

    def get_detail(self, detail_id: int) -> Optional[PackageDetail]:
        return self.db.query(PackageDetail).filter(PackageDetail.id == detail_id).first()

    def add_detail(self, detail_data: dict) -> PackageDetail:
        detail = PackageDetail(**detail_data)
        self.db.add(detail)
        self.db.flush()
        return detail

    def delete_detail(self, detail: PackageDetail) -> None:
        self.db.delete(detail)
        self.db.flush()

    # ==================== CLASIFICADOR DE MOVIMIENTOS ====================

    @staticmethod
    def model_for(kind: StockMovementKind) -> Type[StockRecord]:
        return Entry if kind is StockMovementKind.ENTRY else Exit

    def get_record(self, kind: StockMovementKind, record_id: int) -> Optional[StockRecord]:
        model = self.model_for(kind)
        return self.db.query(model).filter(model.id == record_id).first()

    def has_record(self, kind: StockMovementKind, package_id: int,
                   exclude_id: Optional[int] = None) -> bool:
        model = self.model_for(kind)
        query = self.db.query(model.id).filter(model.package_id == package_id)
        if exclude_id is not None:
            query = query.filter(model.id != exclude_id)
        return query.first() is not None

    def classify_package(self, package_id: int) -> PackageClassification:
        return PackageClassification(
            package_id=package_id,
            has_entry=self.has_record(StockMovementKind.ENTRY, package_id),
            has_exit=self.has_record(StockMovementKind.EXIT, package_id)
        )

    def add_record(self, kind: StockMovementKind, package_id: int, user_id: int,
                   date: Optional[datetime] = None) -> StockRecord:
        model = self.model_for(kind)
        record = model(package_id=package_id, user_id=user_id, date=date or datetime.now())
        self.db.add(record)
        self.db.flush()
        return record

    def delete_record(self, record: StockRecord) -> None:
        self.db.delete(record)
        self.db.flush()

    # ==================== BORRADO EN CASCADA ====================

    def delete_package_tree(self, package: Package) -> None:
        """Elimina entradas, salidas, movimientos y detalles de un bulto, y el bulto"""
        for model in (Entry, Exit, Movement, PackageDetail):
            for record in self.db.query(model).filter(model.package_id == package.id).all():
                self.db.delete(record)
        self.db.flush()
        # Las colecciones del bulto se recargan vacías antes de borrarlo
        self.db.expire(package)
        self.db.delete(package)
        self.db.flush()

    # ==================== AUDITORÍA ====================

    def sum_quantity_for_product(self, kind: StockMovementKind, product_id: int) -> int:
        """Cantidad total del producto en bultos con entrada (o salida)"""
        model = self.model_for(kind)
        total = self.db.query(func.coalesce(func.sum(PackageDetail.quantity), 0))\
            .filter(
                PackageDetail.product_id == product_id,
                PackageDetail.package_id.in_(select(model.package_id))
            ).scalar()
        return int(total or 0)
