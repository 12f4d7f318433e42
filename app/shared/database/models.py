from sqlalchemy import Column, Integer, String, Boolean, Date, DateTime, ForeignKey, Numeric
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.config.database import Base

class TimestampMixin:
    """Mixin para timestamps automáticos"""
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

# ===== USUARIOS Y ROLES =====

class Role(Base):
    """Rol de usuario (Rol)"""
    __tablename__ = "roles"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), unique=True, nullable=False)

    # Relationships
    users = relationship("User", back_populates="role")

class User(Base):
    """Usuario del almacén (Usuario)"""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(150), unique=True, nullable=False, index=True)
    email = Column(String(255), unique=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    role_id = Column(Integer, ForeignKey("roles.id"))
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, server_default=func.current_timestamp())

    # Relationships
    role = relationship("Role", back_populates="users")

    @property
    def role_name(self):
        return self.role.name if self.role else None

# ===== CATÁLOGOS =====

class Category(Base):
    """Categoría de producto (CategoriaProducto)"""
    __tablename__ = "product_categories"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), unique=True, nullable=False)

    products = relationship("Product", back_populates="category")

class SpecialStorage(Base):
    """Requisito de almacenamiento especial (AlmacenamientoEspecial)"""
    __tablename__ = "special_storages"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), unique=True, nullable=False)

    products = relationship("Product", back_populates="special_storage")

class PackageState(Base):
    """Estado de un bulto (EstadoBulto)"""
    __tablename__ = "package_states"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), unique=True, nullable=False)

    packages = relationship("Package", back_populates="state")

# ===== PRODUCTOS =====

class Product(Base, TimestampMixin):
    """Producto con su cantidad en stock (Producto)"""
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False, index=True)
    price = Column(Numeric(10, 2), default=0)
    # Solo el motor de stock modifica esta columna
    quantity_on_hand = Column(Integer, default=0, nullable=False)
    category_id = Column(Integer, ForeignKey("product_categories.id"))
    special_storage_id = Column(Integer, ForeignKey("special_storages.id"))

    # Relationships
    category = relationship("Category", back_populates="products")
    special_storage = relationship("SpecialStorage", back_populates="products")
    details = relationship("PackageDetail", back_populates="product")

# ===== BULTOS =====

class Package(Base, TimestampMixin):
    """Bulto físico que se mueve por el almacén (Bulto)"""
    __tablename__ = "packages"

    id = Column(Integer, primary_key=True, index=True)
    description = Column(String(255), nullable=False)
    current_location = Column(String(255))
    state_id = Column(Integer, ForeignKey("package_states.id"))

    # Relationships
    state = relationship("PackageState", back_populates="packages")
    details = relationship("PackageDetail", back_populates="package")
    entries = relationship("Entry", back_populates="package")
    exits = relationship("Exit", back_populates="package")
    movements = relationship("Movement", back_populates="package")

class PackageDetail(Base):
    """Línea de contenido de un bulto (DetalleBulto)"""
    __tablename__ = "package_details"

    id = Column(Integer, primary_key=True, index=True)
    package_id = Column(Integer, ForeignKey("packages.id"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False, index=True)
    quantity = Column(Integer, nullable=False)
    lot = Column(String(100))
    expiry_date = Column(Date)

    # Relationships
    package = relationship("Package", back_populates="details")
    product = relationship("Product", back_populates="details")

# ===== ENTRADAS, SALIDAS Y MOVIMIENTOS =====

class Entry(Base):
    """Entrada de un bulto al stock (Entrada)"""
    __tablename__ = "entries"

    id = Column(Integer, primary_key=True, index=True)
    # Sin UniqueConstraint: el motor de stock garantiza una entrada por bulto
    package_id = Column(Integer, ForeignKey("packages.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    date = Column(DateTime, server_default=func.current_timestamp(), nullable=False)

    # Relationships
    package = relationship("Package", back_populates="entries")
    user = relationship("User")

class Exit(Base):
    """Salida de un bulto del stock (Salida)"""
    __tablename__ = "exits"

    id = Column(Integer, primary_key=True, index=True)
    package_id = Column(Integer, ForeignKey("packages.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    date = Column(DateTime, server_default=func.current_timestamp(), nullable=False)

    # Relationships
    package = relationship("Package", back_populates="exits")
    user = relationship("User")

class Movement(Base):
    """Cambio de ubicación de un bulto, sin efecto en stock (Movimiento)"""
    __tablename__ = "movements"

    id = Column(Integer, primary_key=True, index=True)
    package_id = Column(Integer, ForeignKey("packages.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    date = Column(DateTime, server_default=func.current_timestamp(), nullable=False)
    origin_location = Column(String(255), nullable=False)
    destination_location = Column(String(255), nullable=False)

    # Relationships
    package = relationship("Package", back_populates="movements")
    user = relationship("User")
