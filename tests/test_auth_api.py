"""
Tests de autenticación: login con JWT y protección de endpoints.
"""
from fastapi import status

from app.core.auth.security import create_access_token, decode_access_token, get_password_hash, verify_password
from app.shared.database.models import User

API_PREFIX = "/api/v1"

def test_password_hash_roundtrip():
    hashed = get_password_hash("secreto")

    assert hashed != "secreto"
    assert verify_password("secreto", hashed)
    assert not verify_password("otro", hashed)

def test_token_subject_is_user_id():
    assert decode_access_token(create_access_token({"sub": "42"})) == 42
    assert decode_access_token("no-es-un-token") is None

def test_login_with_username(client, operator_user):
    response = client.post(
        f"{API_PREFIX}/auth/login",
        data={"username": "operario", "password": "operario123"}
    )

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["token_type"] == "bearer"
    assert decode_access_token(data["access_token"]) == operator_user.id

def test_login_with_email(client, operator_user):
    response = client.post(
        f"{API_PREFIX}/auth/login",
        data={"username": operator_user.email, "password": "operario123"}
    )

    assert response.status_code == status.HTTP_200_OK

def test_login_wrong_password(client, operator_user):
    response = client.post(
        f"{API_PREFIX}/auth/login",
        data={"username": "operario", "password": "incorrecta"}
    )

    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json()["detail"] == "Intento de inicio de sesión no válido."

def test_me_returns_current_user(client, auth_headers):
    response = client.get(f"{API_PREFIX}/auth/me", headers=auth_headers)

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["username"] == "operario"
    assert data["role_name"] == "operario"

def test_endpoints_require_token(client):
    response = client.get(f"{API_PREFIX}/products/")

    assert response.status_code == status.HTTP_401_UNAUTHORIZED

def test_inactive_user_rejected(client, db_session, operator_user, auth_headers):
    operator_user.is_active = False
    db_session.commit()

    response = client.get(f"{API_PREFIX}/auth/me", headers=auth_headers)

    assert response.status_code == status.HTTP_403_FORBIDDEN

def test_register_returns_token_for_new_user(client, db_session):
    response = client.post(
        f"{API_PREFIX}/auth/register",
        json={"email": "nueva@almacen.es", "password": "clave123", "confirm_password": "clave123"}
    )

    assert response.status_code == status.HTTP_201_CREATED
    user_id = decode_access_token(response.json()["access_token"])
    user = db_session.get(User, user_id)
    assert user.username == "nueva@almacen.es"
    assert user.role_id is None
    assert verify_password("clave123", user.password_hash)

    me = client.get(
        f"{API_PREFIX}/auth/me",
        headers={"Authorization": f"Bearer {response.json()['access_token']}"}
    )
    assert me.json()["email"] == "nueva@almacen.es"

def test_register_duplicate_email_conflict(client, operator_user):
    response = client.post(
        f"{API_PREFIX}/auth/register",
        json={
            "email": operator_user.email,
            "username": "otro",
            "password": "clave123",
            "confirm_password": "clave123"
        }
    )

    assert response.status_code == status.HTTP_409_CONFLICT
    assert response.json()["detail"] == "El correo ya está registrado"

def test_register_duplicate_username_conflict(client, operator_user):
    response = client.post(
        f"{API_PREFIX}/auth/register",
        json={
            "email": "distinto@almacen.es",
            "username": "operario",
            "password": "clave123",
            "confirm_password": "clave123"
        }
    )

    assert response.status_code == status.HTTP_409_CONFLICT

def test_register_passwords_must_match(client):
    response = client.post(
        f"{API_PREFIX}/auth/register",
        json={"email": "nueva@almacen.es", "password": "clave123", "confirm_password": "clave321"}
    )

    assert response.status_code == 422
