"""
Tests del motor de consistencia de stock sobre una sesión real.
"""
import pytest
from sqlalchemy.exc import SQLAlchemyError

from app.modules.stock import StockService, StockErrorCode
from app.shared.database.models import Entry, Exit, Movement, Package, PackageDetail, Product

@pytest.fixture
def service(db_session):
    return StockService(db_session)

def stock_of(db_session, product: Product) -> int:
    db_session.expire_all()
    return db_session.get(Product, product.id).quantity_on_hand

# --- Entradas y salidas ---

def test_entry_adds_every_line(service, db_session, make_product, make_package, operator_user):
    product = make_product()
    package = make_package([(product, 10)])

    result = service.create_entry(package.id, operator_user.id)

    assert result.success
    assert result.message == "Entrada guardada correctamente."
    assert stock_of(db_session, product) == 10

def test_exit_subtracts_every_line(service, db_session, make_product, make_package, operator_user):
    product = make_product()
    service.create_entry(make_package([(product, 10)]).id, operator_user.id)

    result = service.create_exit(make_package([(product, 5)]).id, operator_user.id)

    assert result.success
    assert stock_of(db_session, product) == 5

def test_exit_rejected_when_stock_is_insufficient(service, db_session, make_product, make_package, operator_user):
    product = make_product(quantity_on_hand=5)
    package = make_package([(product, 100)])

    result = service.create_exit(package.id, operator_user.id)

    assert not result.success
    assert result.error_code == StockErrorCode.INSUFFICIENT_STOCK
    assert "Operación cancelada" in result.message
    assert stock_of(db_session, product) == 5
    assert db_session.query(Exit).count() == 0

def test_entry_moved_to_other_package_swaps_quantities(service, db_session, make_product,
                                                        make_package, operator_user):
    product = make_product()
    first = make_package([(product, 10)])
    second = make_package([(product, 20)], description="Bulto grande")
    entry_id = service.create_entry(first.id, operator_user.id).entity_id

    result = service.update_entry(entry_id, second.id, operator_user.id)

    assert result.success
    assert stock_of(db_session, product) == 20

def test_delete_package_reverts_its_entry(service, db_session, make_product, make_package, operator_user):
    product = make_product()
    package = make_package([(product, 20)])
    service.create_entry(package.id, operator_user.id)
    db_session.add(Movement(package_id=package.id, user_id=operator_user.id,
                            origin_location="Muelle 1", destination_location="Pasillo 3"))
    db_session.commit()

    result = service.delete_package(package.id)

    assert result.success
    assert stock_of(db_session, product) == 0
    assert db_session.query(Package).count() == 0
    assert db_session.query(PackageDetail).count() == 0
    assert db_session.query(Entry).count() == 0
    assert db_session.query(Movement).count() == 0

def test_delete_package_reverts_its_exit(service, db_session, make_product, make_package, operator_user):
    product = make_product(quantity_on_hand=8)
    package = make_package([(product, 3)])
    service.create_exit(package.id, operator_user.id)
    assert stock_of(db_session, product) == 5

    assert service.delete_package(package.id).success
    assert stock_of(db_session, product) == 8

def test_entry_on_empty_package_rejected(service, db_session, make_product, make_package, operator_user):
    product = make_product(quantity_on_hand=3)
    package = make_package([])

    result = service.create_entry(package.id, operator_user.id)

    assert not result.success
    assert result.error_code == StockErrorCode.VALIDATION
    assert result.message == "No se puede crear una entrada sin detalles."
    assert stock_of(db_session, product) == 3
    assert db_session.query(Entry).count() == 0

def test_second_entry_on_same_package_rejected(service, db_session, make_product, make_package, operator_user):
    product = make_product()
    package = make_package([(product, 4)])
    service.create_entry(package.id, operator_user.id)

    result = service.create_entry(package.id, operator_user.id)

    assert result.error_code == StockErrorCode.DUPLICATE_MOVEMENT
    assert result.message == "Este bulto ya tiene una entrada registrada."
    assert stock_of(db_session, product) == 4

def test_second_exit_on_same_package_rejected(service, db_session, make_product, make_package, operator_user):
    product = make_product(quantity_on_hand=10)
    package = make_package([(product, 2)])
    service.create_exit(package.id, operator_user.id)

    result = service.create_exit(package.id, operator_user.id)

    assert result.error_code == StockErrorCode.DUPLICATE_MOVEMENT
    assert result.message == "Este bulto ya tiene una salida registrada."
    assert stock_of(db_session, product) == 8

def test_update_entry_on_same_package_leaves_stock_unchanged(service, db_session, make_product,
                                                             make_package, operator_user):
    product = make_product()
    package = make_package([(product, 7)])
    entry_id = service.create_entry(package.id, operator_user.id).entity_id

    result = service.update_entry(entry_id, package.id, operator_user.id)

    assert result.success
    assert stock_of(db_session, product) == 7

def test_update_entry_onto_package_with_entry_rejected(service, db_session, make_product,
                                                       make_package, operator_user):
    product = make_product()
    first = make_package([(product, 1)])
    second = make_package([(product, 2)])
    entry_id = service.create_entry(first.id, operator_user.id).entity_id
    service.create_entry(second.id, operator_user.id)

    result = service.update_entry(entry_id, second.id, operator_user.id)

    assert result.error_code == StockErrorCode.DUPLICATE_MOVEMENT
    assert stock_of(db_session, product) == 3

def test_update_exit_rejected_when_new_package_needs_more(service, db_session, make_product,
                                                          make_package, operator_user):
    product = make_product(quantity_on_hand=10)
    small = make_package([(product, 4)])
    big = make_package([(product, 50)])
    exit_id = service.create_exit(small.id, operator_user.id).entity_id

    result = service.update_exit(exit_id, big.id, operator_user.id)

    assert result.error_code == StockErrorCode.INSUFFICIENT_STOCK
    assert stock_of(db_session, product) == 6
    assert db_session.get(Exit, exit_id).package_id == small.id

def test_delete_entry_rejected_when_stock_already_left(service, db_session, make_product,
                                                       make_package, operator_user):
    product = make_product()
    entry_id = service.create_entry(make_package([(product, 10)]).id, operator_user.id).entity_id
    service.create_exit(make_package([(product, 10)]).id, operator_user.id)

    result = service.delete_entry(entry_id)

    assert result.error_code == StockErrorCode.INSUFFICIENT_STOCK
    assert stock_of(db_session, product) == 0
    assert db_session.query(Entry).count() == 1

def test_delete_exit_gives_stock_back(service, db_session, make_product, make_package, operator_user):
    product = make_product(quantity_on_hand=10)
    exit_id = service.create_exit(make_package([(product, 6)]).id, operator_user.id).entity_id

    result = service.delete_exit(exit_id)

    assert result.success
    assert result.message == "Salida eliminada correctamente."
    assert stock_of(db_session, product) == 10

def test_missing_entry_reported_as_not_found(service):
    result = service.delete_entry(999)

    assert result.is_not_found
    assert result.message == "Entrada no encontrada"

# --- Detalles de bulto ---

def test_detail_on_package_without_movements_does_not_touch_stock(service, db_session, make_product,
                                                                  make_package):
    product = make_product(quantity_on_hand=2)
    package = make_package([])

    result = service.create_detail(package.id, product.id, 5, lot="L-01")

    assert result.success
    assert result.message == "Detalle de Bulto guardado correctamente."
    assert stock_of(db_session, product) == 2

def test_detail_added_then_removed_on_entered_package_restores_stock(service, db_session, make_product,
                                                                      make_package, operator_user):
    product = make_product()
    extra = make_product("Tuercas", quantity_on_hand=1)
    package = make_package([(product, 3)])
    service.create_entry(package.id, operator_user.id)

    created = service.create_detail(package.id, extra.id, 10)
    assert created.success
    assert stock_of(db_session, extra) == 11

    assert service.delete_detail(created.entity_id).success
    assert stock_of(db_session, extra) == 1
    assert stock_of(db_session, product) == 3

def test_detail_on_exited_package_needs_stock(service, db_session, make_product, make_package, operator_user):
    product = make_product(quantity_on_hand=5)
    package = make_package([(product, 1)])
    service.create_exit(package.id, operator_user.id)

    result = service.create_detail(package.id, product.id, 10)

    assert result.error_code == StockErrorCode.INSUFFICIENT_STOCK
    assert stock_of(db_session, product) == 4
    assert db_session.query(PackageDetail).count() == 1

def test_update_detail_checks_against_reverted_balance(service, db_session, make_product,
                                                       make_package, operator_user):
    product = make_product(quantity_on_hand=10)
    package = make_package([(product, 4)])
    service.create_exit(package.id, operator_user.id)
    detail = db_session.query(PackageDetail).filter(PackageDetail.package_id == package.id).one()

    # 6 en stock + 4 revertidos = 10 disponibles
    result = service.update_detail(detail.id, product.id, 10)

    assert result.success
    assert stock_of(db_session, product) == 0

def test_update_detail_changing_product_moves_quantity(service, db_session, make_product,
                                                       make_package, operator_user):
    old_product = make_product("Tornillos")
    new_product = make_product("Arandelas")
    package = make_package([(old_product, 6)])
    service.create_entry(package.id, operator_user.id)
    detail = db_session.query(PackageDetail).filter(PackageDetail.package_id == package.id).one()

    result = service.update_detail(detail.id, new_product.id, 2)

    assert result.success
    assert stock_of(db_session, old_product) == 0
    assert stock_of(db_session, new_product) == 2

def test_move_detail_from_entered_to_exited_package_rejected_without_stock(
        service, db_session, make_product, make_package, operator_user):
    product = make_product()
    entered = make_package([(product, 10)], description="Con entrada")
    exited = make_package([(product, 2)], description="Con salida")
    service.create_entry(entered.id, operator_user.id)
    service.create_exit(exited.id, operator_user.id)
    detail = db_session.query(PackageDetail).filter(PackageDetail.package_id == entered.id).one()

    # Quitar 10 de la entrada y restar 3 en la salida deja -5
    result = service.update_detail(detail.id, product.id, 3, package_id=exited.id)

    assert result.error_code == StockErrorCode.INSUFFICIENT_STOCK
    assert stock_of(db_session, product) == 8
    assert db_session.get(PackageDetail, detail.id).package_id == entered.id
    assert service.audit_product(product.id).consistent

def test_move_detail_from_entered_to_exited_package(service, db_session, make_product,
                                                    make_package, operator_user):
    product = make_product()
    entered = make_package([(product, 10)], description="Con entrada")
    stocked = make_package([(product, 20)], description="Reserva")
    exited = make_package([(product, 2)], description="Con salida")
    service.create_entry(entered.id, operator_user.id)
    service.create_entry(stocked.id, operator_user.id)
    service.create_exit(exited.id, operator_user.id)
    detail = db_session.query(PackageDetail).filter(PackageDetail.package_id == entered.id).one()

    result = service.update_detail(detail.id, product.id, 3, package_id=exited.id)

    assert result.success
    # 28 en stock - 10 revertidos de la entrada - 3 de la salida
    assert stock_of(db_session, product) == 15
    audit = service.audit_product(product.id)
    assert audit.entered_quantity == 20
    assert audit.exited_quantity == 5
    assert audit.consistent

@pytest.mark.parametrize("quantity", [0, -3])
def test_detail_quantity_must_be_positive(service, make_product, make_package, quantity):
    product = make_product()
    package = make_package([])

    result = service.create_detail(package.id, product.id, quantity)

    assert result.error_code == StockErrorCode.VALIDATION
    assert result.message == "La cantidad debe ser mayor que cero."

def test_detail_for_missing_product_not_found(service, make_package):
    result = service.create_detail(make_package([]).id, 404, 1)

    assert result.is_not_found
    assert result.message == "Producto no encontrado"

# --- Fallos de persistencia y auditoría ---

def test_persistence_failure_rolls_back(service, db_session, make_product, make_package,
                                        operator_user, monkeypatch):
    product = make_product()
    package = make_package([(product, 5)])

    def failing_commit():
        raise SQLAlchemyError("disco lleno")

    monkeypatch.setattr(db_session, "commit", failing_commit)
    result = service.create_entry(package.id, operator_user.id)
    monkeypatch.undo()

    assert result.error_code == StockErrorCode.PERSISTENCE_FAILURE
    assert result.message == "No se pudo guardar la entrada. Intente nuevamente."
    assert stock_of(db_session, product) == 0
    assert db_session.query(Entry).count() == 0

def test_audit_matches_after_mixed_operations(service, make_product, make_package, operator_user):
    product = make_product()
    service.create_entry(make_package([(product, 12)]).id, operator_user.id)
    service.create_exit(make_package([(product, 5)]).id, operator_user.id)

    audit = service.audit_product(product.id)

    assert audit.entered_quantity == 12
    assert audit.exited_quantity == 5
    assert audit.quantity_on_hand == 7
    assert audit.consistent

def test_classification_reports_entry_and_exit(service, make_product, make_package, operator_user):
    product = make_product(quantity_on_hand=5)
    package = make_package([(product, 2)])
    service.create_entry(package.id, operator_user.id)
    service.create_exit(package.id, operator_user.id)

    classification = service.classify_package(package.id)

    assert classification.has_entry and classification.has_exit
    assert classification.sign == 0
