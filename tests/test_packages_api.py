"""
Tests de bultos y detalles de bulto a través de la API.
"""
from fastapi import status

from app.shared.database.models import Entry, Package, PackageDetail, PackageState, Product

API_PREFIX = "/api/v1"

def test_create_package_and_get_with_lines(client, db_session, make_product, auth_headers):
    state = PackageState(name="Cerrado")
    db_session.add(state)
    db_session.commit()
    product = make_product()

    created = client.post(
        f"{API_PREFIX}/packages/",
        json={"description": "Caja 1", "current_location": "Muelle 2", "state_id": state.id},
        headers=auth_headers
    ).json()
    assert created["message"] == "Bulto guardado correctamente."

    client.post(
        f"{API_PREFIX}/package-details/",
        json={"package_id": created["id"], "product_id": product.id, "quantity": 4, "lot": "L-7"},
        headers=auth_headers
    )

    data = client.get(f"{API_PREFIX}/packages/{created['id']}", headers=auth_headers).json()
    assert data["state_name"] == "Cerrado"
    assert data["has_entry"] is False and data["has_exit"] is False
    assert data["total_units"] == 4
    assert data["details"][0]["lot"] == "L-7"

def test_detail_on_entered_package_moves_stock(client, db_session, make_product, make_package,
                                               operator_user, auth_headers):
    product = make_product()
    package = make_package([(product, 2)])
    db_session.add(Entry(package_id=package.id, user_id=operator_user.id))
    product.quantity_on_hand = 2
    db_session.commit()

    response = client.post(
        f"{API_PREFIX}/package-details/",
        json={"package_id": package.id, "product_id": product.id, "quantity": 3},
        headers=auth_headers
    )

    assert response.json() == {
        "success": True,
        "message": "Detalle de Bulto guardado correctamente.",
        "id": response.json()["id"]
    }
    db_session.expire_all()
    assert db_session.get(Product, product.id).quantity_on_hand == 5

def test_invalid_quantity_returns_message(client, make_product, make_package, auth_headers):
    product = make_product()
    package = make_package([])

    response = client.post(
        f"{API_PREFIX}/package-details/",
        json={"package_id": package.id, "product_id": product.id, "quantity": 0},
        headers=auth_headers
    )

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["success"] is False
    assert response.json()["message"] == "La cantidad debe ser mayor que cero."

def test_detail_for_missing_package_not_found(client, make_product, auth_headers):
    response = client.post(
        f"{API_PREFIX}/package-details/",
        json={"package_id": 999, "product_id": make_product().id, "quantity": 1},
        headers=auth_headers
    )

    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json()["detail"] == "Bulto no encontrado"

def test_update_package_does_not_touch_lines(client, make_product, make_package, auth_headers):
    package = make_package([(make_product(), 3)])

    response = client.put(
        f"{API_PREFIX}/packages/{package.id}",
        json={"description": "Caja renombrada", "current_location": "Pasillo 4"},
        headers=auth_headers
    )

    assert response.json()["success"] is True
    data = client.get(f"{API_PREFIX}/packages/{package.id}", headers=auth_headers).json()
    assert data["description"] == "Caja renombrada"
    assert data["total_units"] == 3

def test_delete_package_cascades(client, db_session, make_product, make_package, auth_headers):
    package = make_package([(make_product(), 3)])

    response = client.delete(f"{API_PREFIX}/packages/{package.id}", headers=auth_headers)

    assert response.json()["message"] == "Bulto eliminado correctamente."
    assert db_session.query(Package).count() == 0
    assert db_session.query(PackageDetail).count() == 0

def test_delete_missing_package(client, auth_headers):
    response = client.delete(f"{API_PREFIX}/packages/999", headers=auth_headers)

    assert response.status_code == status.HTTP_404_NOT_FOUND

def test_list_details_filters_by_product(client, make_product, make_package, auth_headers):
    screws = make_product("Tornillos")
    nuts = make_product("Tuercas")
    make_package([(screws, 1), (nuts, 2)], description="Caja mixta")

    data = client.get(f"{API_PREFIX}/package-details/", params={"product": "tuer"}, headers=auth_headers).json()

    assert data["total"] == 1
    assert data["items"][0]["product_name"] == "Tuercas"
    assert data["items"][0]["package_description"] == "Caja mixta"

def test_list_details_filters_by_lot(client, db_session, make_product, make_package, auth_headers):
    product = make_product()
    package = make_package([])
    db_session.add_all([
        PackageDetail(package_id=package.id, product_id=product.id, quantity=1, lot="LT-2024-A"),
        PackageDetail(package_id=package.id, product_id=product.id, quantity=2, lot="LT-2025-B"),
        PackageDetail(package_id=package.id, product_id=product.id, quantity=3),
    ])
    db_session.commit()

    data = client.get(f"{API_PREFIX}/package-details/", params={"lot": "2025-b"}, headers=auth_headers).json()

    assert data["total"] == 1
    assert data["items"][0]["lot"] == "LT-2025-B"
    assert data["lot_filter"] == "2025-b"

def test_export_details_defaults(client, make_product, make_package, auth_headers):
    make_package([(make_product(), 1)])

    response = client.get(f"{API_PREFIX}/package-details/export", headers=auth_headers)

    assert response.status_code == status.HTTP_200_OK
    assert "DetallesBulto.xlsx" in response.headers["content-disposition"]

def test_stock_audit_endpoint(client, make_product, auth_headers):
    product = make_product(quantity_on_hand=3)

    data = client.get(f"{API_PREFIX}/stock/products/{product.id}/audit", headers=auth_headers).json()

    assert data["expected_quantity"] == 0
    assert data["consistent"] is False
