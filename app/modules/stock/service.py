# app/modules/stock/service.py
import logging
from datetime import date, datetime
from typing import Callable, Dict, List, Optional
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from app.shared.database.models import PackageDetail
from .repository import StockRepository
from .schemas import (
    StockResult, StockErrorCode, StockMovementKind, PackageClassification, StockAudit
)

logger = logging.getLogger(__name__)


class StockPlan:
    """
    Ajustes netos de stock por producto de una operación.

    Primero se simula el saldo final de cada producto afectado y solo si
    ninguno queda negativo se aplican los ajustes.
    """

    def __init__(self, repository: StockRepository):
        self.repository = repository
        self.deltas: Dict[int, int] = {}

    def add(self, product_id: int, delta: int) -> None:
        self.deltas[product_id] = self.deltas.get(product_id, 0) + delta

    def add_details(self, details: List[PackageDetail], sign: int) -> None:
        for detail in details:
            self.add(detail.product_id, sign * detail.quantity)

    def validate(self) -> Optional[StockResult]:
        """Devuelve el fallo de la simulación, o None si todos los saldos son válidos"""
        affected = [pid for pid, delta in self.deltas.items() if delta != 0]
        products = {p.id: p for p in self.repository.get_products(affected)}

        missing = [pid for pid in affected if pid not in products]
        if missing:
            return StockResult.fail(
                StockErrorCode.NOT_FOUND,
                f"Producto no encontrado: {', '.join(str(pid) for pid in missing)}"
            )

        shortages = []
        for product_id in affected:
            product = products[product_id]
            simulated = product.quantity_on_hand + self.deltas[product_id]
            if simulated < 0:
                shortages.append(
                    f"{product.name} (disponible: {product.quantity_on_hand}, "
                    f"requerido: {product.quantity_on_hand - simulated})"
                )

        if shortages:
            return StockResult.fail(
                StockErrorCode.INSUFFICIENT_STOCK,
                f"No hay suficiente stock para el producto {', '.join(shortages)}. Operación cancelada."
            )
        return None

    def apply(self) -> Optional[StockResult]:
        for product_id, delta in self.deltas.items():
            if delta == 0:
                continue
            result = self.repository.apply_delta(product_id, delta)
            if not result.success:
                return result
        return None


class StockService:
    """
    Motor de consistencia de stock.

    Mantiene `Product.quantity_on_hand` igual a lo que suman las líneas de
    los bultos con entrada menos las de los bultos con salida. Cada operación
    pública corre en una sola transacción: commit si tiene éxito, rollback si
    falla por regla de negocio o por error de base de datos.
    """

    def __init__(self, db: Session):
        self.db = db
        self.repository = StockRepository(db)

    # ==================== CONSULTAS ====================

    def classify_package(self, package_id: int) -> PackageClassification:
        return self.repository.classify_package(package_id)

    def audit_product(self, product_id: int) -> Optional[StockAudit]:
        """Compara el stock registrado con el que se deduce de entradas y salidas"""
        product = self.repository.get_product(product_id)
        if not product:
            return None

        entered = self.repository.sum_quantity_for_product(StockMovementKind.ENTRY, product_id)
        exited = self.repository.sum_quantity_for_product(StockMovementKind.EXIT, product_id)
        expected = entered - exited

        return StockAudit(
            product_id=product.id,
            product_name=product.name,
            quantity_on_hand=product.quantity_on_hand,
            expected_quantity=expected,
            entered_quantity=entered,
            exited_quantity=exited,
            consistent=product.quantity_on_hand == expected
        )

    # ==================== DETALLES DE BULTO ====================

    def create_detail(self, package_id: int, product_id: int, quantity: int,
                      lot: Optional[str] = None, expiry_date: Optional[date] = None) -> StockResult:
        return self._run(
            "guardar el detalle de bulto",
            lambda: self._create_detail(package_id, product_id, quantity, lot, expiry_date)
        )

    def update_detail(self, detail_id: int, product_id: int, quantity: int,
                      lot: Optional[str] = None, expiry_date: Optional[date] = None,
                      package_id: Optional[int] = None) -> StockResult:
        return self._run(
            "guardar el detalle de bulto",
            lambda: self._update_detail(detail_id, product_id, quantity, lot, expiry_date, package_id)
        )

    def delete_detail(self, detail_id: int) -> StockResult:
        return self._run("eliminar el detalle de bulto", lambda: self._delete_detail(detail_id))

    # ==================== ENTRADAS Y SALIDAS ====================

    def create_entry(self, package_id: int, user_id: int,
                     entry_date: Optional[datetime] = None) -> StockResult:
        return self._run(
            "guardar la entrada",
            lambda: self._create_record(StockMovementKind.ENTRY, package_id, user_id, entry_date)
        )

    def update_entry(self, entry_id: int, package_id: int, user_id: int,
                     entry_date: Optional[datetime] = None) -> StockResult:
        return self._run(
            "guardar la entrada",
            lambda: self._update_record(StockMovementKind.ENTRY, entry_id, package_id, user_id, entry_date)
        )

    def delete_entry(self, entry_id: int) -> StockResult:
        return self._run(
            "eliminar la entrada",
            lambda: self._delete_record(StockMovementKind.ENTRY, entry_id)
        )

    def create_exit(self, package_id: int, user_id: int,
                    exit_date: Optional[datetime] = None) -> StockResult:
        return self._run(
            "guardar la salida",
            lambda: self._create_record(StockMovementKind.EXIT, package_id, user_id, exit_date)
        )

    def update_exit(self, exit_id: int, package_id: int, user_id: int,
                    exit_date: Optional[datetime] = None) -> StockResult:
        return self._run(
            "guardar la salida",
            lambda: self._update_record(StockMovementKind.EXIT, exit_id, package_id, user_id, exit_date)
        )

    def delete_exit(self, exit_id: int) -> StockResult:
        return self._run(
            "eliminar la salida",
            lambda: self._delete_record(StockMovementKind.EXIT, exit_id)
        )

    # ==================== BULTOS ====================

    def delete_package(self, package_id: int) -> StockResult:
        return self._run("eliminar el bulto", lambda: self._delete_package(package_id))

    # ==================== IMPLEMENTACIÓN ====================

    def _run(self, action: str, operation: Callable[[], StockResult]) -> StockResult:
        """Ejecuta una operación como una transacción"""
        try:
            result = operation()
            if result.success:
                self.db.commit()
            else:
                self.db.rollback()
                logger.info(f"Operación rechazada al {action}: {result.message}")
            return result
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception(f"Error de base de datos al {action}")
            return StockResult.fail(
                StockErrorCode.PERSISTENCE_FAILURE,
                f"No se pudo {action}. Intente nuevamente."
            )

    def _validate_detail_input(self, package_id: int, product_id: int,
                               quantity: int) -> Optional[StockResult]:
        if quantity is None or quantity <= 0:
            return StockResult.fail(StockErrorCode.VALIDATION, "La cantidad debe ser mayor que cero.")
        if not self.repository.get_package(package_id):
            return StockResult.fail(StockErrorCode.NOT_FOUND, "Bulto no encontrado")
        if not self.repository.get_product(product_id):
            return StockResult.fail(StockErrorCode.NOT_FOUND, "Producto no encontrado")
        return None

    def _commit_plan(self, plan: StockPlan, write: Callable[[], None]) -> Optional[StockResult]:
        """Valida la simulación, hace la escritura y aplica los ajustes"""
        failure = plan.validate()
        if failure:
            return failure
        write()
        return plan.apply()

    def _create_detail(self, package_id: int, product_id: int, quantity: int,
                       lot: Optional[str], expiry_date: Optional[date]) -> StockResult:
        failure = self._validate_detail_input(package_id, product_id, quantity)
        if failure:
            return failure

        classification = self.repository.classify_package(package_id)
        plan = StockPlan(self.repository)
        plan.add(product_id, classification.sign * quantity)

        created = {}

        def write():
            created["detail"] = self.repository.add_detail({
                "package_id": package_id,
                "product_id": product_id,
                "quantity": quantity,
                "lot": lot,
                "expiry_date": expiry_date
            })

        failure = self._commit_plan(plan, write)
        if failure:
            return failure

        return StockResult.ok("Detalle de Bulto guardado correctamente.", entity_id=created["detail"].id)

    def _update_detail(self, detail_id: int, product_id: int, quantity: int,
                       lot: Optional[str], expiry_date: Optional[date],
                       package_id: Optional[int]) -> StockResult:
        detail = self.repository.get_detail(detail_id)
        if not detail:
            return StockResult.fail(StockErrorCode.NOT_FOUND, "Detalle de bulto no encontrado")

        new_package_id = package_id if package_id is not None else detail.package_id
        failure = self._validate_detail_input(new_package_id, product_id, quantity)
        if failure:
            return failure

        # Revertir la línea anterior y aplicar la nueva; la comprobación de
        # stock se hace contra el saldo ya revertido
        old_classification = self.repository.classify_package(detail.package_id)
        new_classification = self.repository.classify_package(new_package_id)

        plan = StockPlan(self.repository)
        plan.add(detail.product_id, -old_classification.sign * detail.quantity)
        plan.add(product_id, new_classification.sign * quantity)

        def write():
            detail.package_id = new_package_id
            detail.product_id = product_id
            detail.quantity = quantity
            detail.lot = lot
            detail.expiry_date = expiry_date
            self.db.flush()

        failure = self._commit_plan(plan, write)
        if failure:
            return failure

        return StockResult.ok("Detalle de Bulto guardado correctamente.", entity_id=detail.id)

    def _delete_detail(self, detail_id: int) -> StockResult:
        detail = self.repository.get_detail(detail_id)
        if not detail:
            return StockResult.fail(StockErrorCode.NOT_FOUND, "Detalle de bulto no encontrado")

        classification = self.repository.classify_package(detail.package_id)
        plan = StockPlan(self.repository)
        plan.add(detail.product_id, -classification.sign * detail.quantity)

        failure = self._commit_plan(plan, lambda: self.repository.delete_detail(detail))
        if failure:
            return failure

        return StockResult.ok("Detalle de Bulto eliminado correctamente.", entity_id=detail_id)

    def _create_record(self, kind: StockMovementKind, package_id: int, user_id: int,
                       record_date: Optional[datetime]) -> StockResult:
        label = kind.label
        if not self.repository.get_package(package_id):
            return StockResult.fail(StockErrorCode.NOT_FOUND, "Bulto no encontrado")
        if not self.repository.get_user(user_id):
            return StockResult.fail(StockErrorCode.NOT_FOUND, "Usuario no encontrado")

        if self.repository.has_record(kind, package_id):
            return StockResult.fail(
                StockErrorCode.DUPLICATE_MOVEMENT,
                f"Este bulto ya tiene una {label} registrada."
            )

        details = self.repository.list_details_by_package(package_id)
        if not details:
            return StockResult.fail(
                StockErrorCode.VALIDATION,
                f"No se puede crear una {label} sin detalles."
            )

        plan = StockPlan(self.repository)
        plan.add_details(details, kind.sign)

        created = {}

        def write():
            created["record"] = self.repository.add_record(kind, package_id, user_id, record_date)

        failure = self._commit_plan(plan, write)
        if failure:
            return failure

        record = created["record"]
        logger.info(f"{label.capitalize()} {record.id} registrada para bulto {package_id} ({len(details)} detalles)")
        return StockResult.ok(f"{label.capitalize()} guardada correctamente.", entity_id=record.id)

    def _update_record(self, kind: StockMovementKind, record_id: int, package_id: int,
                       user_id: int, record_date: Optional[datetime]) -> StockResult:
        label = kind.label
        record = self.repository.get_record(kind, record_id)
        if not record:
            return StockResult.fail(StockErrorCode.NOT_FOUND, f"{label.capitalize()} no encontrada")
        if not self.repository.get_package(package_id):
            return StockResult.fail(StockErrorCode.NOT_FOUND, "Bulto no encontrado")
        if not self.repository.get_user(user_id):
            return StockResult.fail(StockErrorCode.NOT_FOUND, "Usuario no encontrado")

        old_details = self.repository.list_details_by_package(record.package_id)
        if package_id == record.package_id:
            new_details = old_details
        else:
            if self.repository.has_record(kind, package_id, exclude_id=record.id):
                return StockResult.fail(
                    StockErrorCode.DUPLICATE_MOVEMENT,
                    f"Este bulto ya tiene una {label} registrada."
                )
            new_details = self.repository.list_details_by_package(package_id)
            if not new_details:
                return StockResult.fail(
                    StockErrorCode.VALIDATION,
                    f"No se puede crear una {label} sin detalles."
                )

        # Simulación: revertir las líneas del bulto anterior y aplicar las del nuevo
        plan = StockPlan(self.repository)
        plan.add_details(old_details, -kind.sign)
        plan.add_details(new_details, kind.sign)

        def write():
            record.package_id = package_id
            record.user_id = user_id
            if record_date is not None:
                record.date = record_date
            self.db.flush()

        failure = self._commit_plan(plan, write)
        if failure:
            return failure

        return StockResult.ok(f"{label.capitalize()} guardada correctamente.", entity_id=record.id)

    def _delete_record(self, kind: StockMovementKind, record_id: int) -> StockResult:
        label = kind.label
        record = self.repository.get_record(kind, record_id)
        if not record:
            return StockResult.fail(StockErrorCode.NOT_FOUND, f"{label.capitalize()} no encontrada")

        plan = StockPlan(self.repository)
        plan.add_details(self.repository.list_details_by_package(record.package_id), -kind.sign)

        failure = self._commit_plan(plan, lambda: self.repository.delete_record(record))
        if failure:
            return failure

        return StockResult.ok(f"{label.capitalize()} eliminada correctamente.", entity_id=record_id)

    def _delete_package(self, package_id: int) -> StockResult:
        package = self.repository.get_package(package_id)
        if not package:
            return StockResult.fail(StockErrorCode.NOT_FOUND, "Bulto no encontrado")

        classification = self.repository.classify_package(package_id)
        details = self.repository.list_details_by_package(package_id)

        # Revertir lo que aportaron la entrada y/o la salida del bulto
        plan = StockPlan(self.repository)
        plan.add_details(details, -classification.sign)

        failure = self._commit_plan(plan, lambda: self.repository.delete_package_tree(package))
        if failure:
            return failure

        logger.info(
            f"Bulto {package_id} eliminado (entrada: {classification.has_entry}, "
            f"salida: {classification.has_exit}, detalles: {len(details)})"
        )
        return StockResult.ok("Bulto eliminado correctamente.", entity_id=package_id)
