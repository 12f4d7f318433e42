"""
Tests de entradas y salidas a través de la API.
"""
from datetime import datetime

from fastapi import status

from app.shared.database.models import Entry, Exit, Product

API_PREFIX = "/api/v1"

def current_stock(db_session, product) -> int:
    db_session.expire_all()
    return db_session.get(Product, product.id).quantity_on_hand

def test_create_entry_uses_current_user(client, db_session, make_product, make_package,
                                        operator_user, auth_headers):
    product = make_product()
    package = make_package([(product, 10)])

    response = client.post(f"{API_PREFIX}/entries/", json={"package_id": package.id}, headers=auth_headers)

    assert response.json()["message"] == "Entrada guardada correctamente."
    entry = db_session.query(Entry).one()
    assert entry.user_id == operator_user.id
    assert current_stock(db_session, product) == 10

def test_duplicate_entry_returns_failure(client, make_product, make_package, auth_headers):
    package = make_package([(make_product(), 1)])
    client.post(f"{API_PREFIX}/entries/", json={"package_id": package.id}, headers=auth_headers)

    response = client.post(f"{API_PREFIX}/entries/", json={"package_id": package.id}, headers=auth_headers)

    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {
        "success": False,
        "message": "Este bulto ya tiene una entrada registrada.",
        "id": None
    }

def test_exit_without_stock_rejected(client, db_session, make_product, make_package, auth_headers):
    product = make_product(quantity_on_hand=5)
    package = make_package([(product, 100)])

    response = client.post(f"{API_PREFIX}/exits/", json={"package_id": package.id}, headers=auth_headers)

    assert response.json()["success"] is False
    assert "No hay suficiente stock" in response.json()["message"]
    assert db_session.query(Exit).count() == 0

def test_update_entry_keeps_date_when_not_sent(client, db_session, make_product, make_package,
                                               operator_user, auth_headers):
    product = make_product()
    package = make_package([(product, 2)])
    created = client.post(
        f"{API_PREFIX}/entries/",
        json={"package_id": package.id, "date": "2024-03-01T10:30:00"},
        headers=auth_headers
    ).json()

    client.put(f"{API_PREFIX}/entries/{created['id']}", json={"package_id": package.id}, headers=auth_headers)

    db_session.expire_all()
    assert db_session.get(Entry, created["id"]).date == datetime(2024, 3, 1, 10, 30)
    assert current_stock(db_session, product) == 2

def test_delete_exit_restores_stock(client, db_session, make_product, make_package, auth_headers):
    product = make_product(quantity_on_hand=9)
    package = make_package([(product, 4)])
    created = client.post(f"{API_PREFIX}/exits/", json={"package_id": package.id}, headers=auth_headers).json()

    response = client.delete(f"{API_PREFIX}/exits/{created['id']}", headers=auth_headers)

    assert response.json()["message"] == "Salida eliminada correctamente."
    assert current_stock(db_session, product) == 9

def test_delete_missing_entry_not_found(client, auth_headers):
    response = client.delete(f"{API_PREFIX}/entries/999", headers=auth_headers)

    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json()["detail"] == "Entrada no encontrada"

def test_eligible_packages_need_details_and_no_entry(client, make_product, make_package, auth_headers):
    product = make_product()
    empty = make_package([], description="Vacío")
    ready = make_package([(product, 1)], description="Listo")
    entered = make_package([(product, 1)], description="Con entrada")
    client.post(f"{API_PREFIX}/entries/", json={"package_id": entered.id}, headers=auth_headers)

    data = client.get(f"{API_PREFIX}/entries/eligible-packages", headers=auth_headers).json()
    assert [p["id"] for p in data] == [ready.id]

    data = client.get(
        f"{API_PREFIX}/entries/eligible-packages",
        params={"include_package_id": entered.id},
        headers=auth_headers
    ).json()
    assert {p["id"] for p in data} == {ready.id, entered.id}
    assert empty.id not in {p["id"] for p in data}

def test_list_entries_filters_by_package(client, make_product, make_package, auth_headers):
    product = make_product()
    for description in ("Palé norte", "Palé sur"):
        package = make_package([(product, 1)], description=description)
        client.post(f"{API_PREFIX}/entries/", json={"package_id": package.id}, headers=auth_headers)

    data = client.get(f"{API_PREFIX}/entries/", params={"package": "norte"}, headers=auth_headers).json()

    assert data["total"] == 1
    assert data["items"][0]["package_description"] == "Palé norte"
    assert data["items"][0]["username"] == "operario"

def test_export_exits(client, auth_headers):
    response = client.get(f"{API_PREFIX}/exits/export", headers=auth_headers)

    assert response.status_code == status.HTTP_200_OK
    assert "Salidas.xlsx" in response.headers["content-disposition"]
