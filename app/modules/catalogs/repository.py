# app/modules/catalogs/repository.py
from dataclasses import dataclass
from typing import Any, List, Optional, Type
from sqlalchemy.orm import Session

from app.shared.database.models import Category, SpecialStorage, PackageState, Product, Package

@dataclass(frozen=True)
class CatalogDefinition:
    """Tabla de catálogo (id + nombre) y la tabla que la referencia"""
    model: Type[Any]
    singular: str
    saved_message: str
    deleted_message: str
    not_found_message: str
    referenced_by: Type[Any]
    foreign_key: str
    in_use_message: str
    sheet_title: str
    filename: str

CATEGORIES = CatalogDefinition(
    model=Category,
    singular="Categoría",
    saved_message="Categoría guardada correctamente.",
    deleted_message="Categoría eliminada correctamente.",
    not_found_message="Categoría no encontrada",
    referenced_by=Product,
    foreign_key="category_id",
    in_use_message="No se puede eliminar la categoría porque tiene productos asociados.",
    sheet_title="Categorías",
    filename="Categorias.xlsx"
)

SPECIAL_STORAGES = CatalogDefinition(
    model=SpecialStorage,
    singular="Almacenamiento especial",
    saved_message="Almacenamiento especial guardado correctamente.",
    deleted_message="Almacenamiento especial eliminado correctamente.",
    not_found_message="Almacenamiento especial no encontrado",
    referenced_by=Product,
    foreign_key="special_storage_id",
    in_use_message="No se puede eliminar el almacenamiento especial porque tiene productos asociados.",
    sheet_title="Almacenamientos Especiales",
    filename="AlmacenamientosEspeciales.xlsx"
)

PACKAGE_STATES = CatalogDefinition(
    model=PackageState,
    singular="Estado de bulto",
    saved_message="Estado de bulto guardado correctamente.",
    deleted_message="Estado de bulto eliminado correctamente.",
    not_found_message="Estado de bulto no encontrado",
    referenced_by=Package,
    foreign_key="state_id",
    in_use_message="No se puede eliminar el estado porque hay bultos que lo usan.",
    sheet_title="Estados de Bulto",
    filename="EstadosBulto.xlsx"
)

class CatalogRepository:

    def __init__(self, db: Session, definition: CatalogDefinition):
        self.db = db
        self.definition = definition
        self.model = definition.model

    def list_query(self, name: Optional[str] = None):
        query = self.db.query(self.model)
        if name:
            query = query.filter(self.model.name.ilike(f"%{name}%"))
        return query.order_by(self.model.name)

    def get_all(self) -> List[Any]:
        return self.list_query().all()

    def get_by_id(self, item_id: int) -> Optional[Any]:
        return self.db.query(self.model).filter(self.model.id == item_id).first()

    def get_by_name(self, name: str) -> Optional[Any]:
        return self.db.query(self.model).filter(self.model.name == name).first()

    def create(self, name: str) -> Any:
        item = self.model(name=name)
        self.db.add(item)
        self.db.flush()
        return item

    def is_referenced(self, item_id: int) -> bool:
        referencing = self.definition.referenced_by
        column = getattr(referencing, self.definition.foreign_key)
        return self.db.query(referencing.id).filter(column == item_id).first() is not None

    def delete(self, item: Any) -> None:
        self.db.delete(item)
        self.db.flush()
