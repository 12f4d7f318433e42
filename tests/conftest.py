import os

# Settings se lee al importar la app
os.environ.setdefault("SECRET_KEY", "clave-de-pruebas")
os.environ.setdefault("DATABASE_URL", "sqlite://")

from typing import Generator, List, Tuple

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.main import app
from app.config.database import Base, get_db
from app.core.auth.security import get_password_hash, create_access_token
from app.shared.database.models import Role, User, Product, Package, PackageDetail

TEST_DATABASE_URL = "sqlite://"

# --- Base de datos ---

@pytest.fixture(scope="function")
def db_session() -> Generator[Session, None, None]:
    """Base de datos SQLite en memoria, nueva para cada test"""
    engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()

@pytest.fixture(scope="function")
def client(db_session: Session) -> Generator[TestClient, None, None]:
    """TestClient que usa la sesión de test en lugar de get_db"""
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.pop(get_db, None)

# --- Usuarios y autenticación ---

def _create_user(db: Session, username: str, password: str, role_name: str) -> User:
    role = db.query(Role).filter(Role.name == role_name).first()
    if not role:
        role = Role(name=role_name)
        db.add(role)
        db.flush()
    user = User(
        username=username,
        email=f"{username}@almacen.es",
        password_hash=get_password_hash(password),
        role_id=role.id,
        is_active=True
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user

@pytest.fixture
def operator_user(db_session: Session) -> User:
    return _create_user(db_session, "operario", "operario123", "operario")

@pytest.fixture
def admin_user(db_session: Session) -> User:
    return _create_user(db_session, "admin", "admin123", "administrador")

@pytest.fixture
def auth_headers(operator_user: User) -> dict:
    token = create_access_token({"sub": str(operator_user.id)})
    return {"Authorization": f"Bearer {token}"}

@pytest.fixture
def admin_headers(admin_user: User) -> dict:
    token = create_access_token({"sub": str(admin_user.id)})
    return {"Authorization": f"Bearer {token}"}

# --- Datos de almacén ---

@pytest.fixture
def make_product(db_session: Session):
    """Crea un producto con el stock indicado"""
    def _make(name: str = "Tornillos", quantity_on_hand: int = 0) -> Product:
        product = Product(name=name, price=1, quantity_on_hand=quantity_on_hand)
        db_session.add(product)
        db_session.commit()
        db_session.refresh(product)
        return product
    return _make

@pytest.fixture
def make_package(db_session: Session):
    """Crea un bulto con líneas [(producto, cantidad), ...] sin tocar el stock"""
    def _make(lines: List[Tuple[Product, int]] = (), description: str = "Bulto",
              location: str = "Muelle 1") -> Package:
        package = Package(description=description, current_location=location)
        db_session.add(package)
        db_session.flush()
        for product, quantity in lines:
            db_session.add(PackageDetail(package_id=package.id, product_id=product.id, quantity=quantity))
        db_session.commit()
        db_session.refresh(package)
        return package
    return _make
