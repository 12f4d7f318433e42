# app/modules/products/service.py
import logging
from typing import Optional
from fastapi import HTTPException, Response, status
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from app.shared.database.models import Product
from app.shared.excel import excel_response
from app.shared.pagination import paginate, clamp_page_size
from .repository import ProductRepository
from .schemas import ProductCreate, ProductResponse, ProductPage, ProductOperationResponse

logger = logging.getLogger(__name__)

class ProductService:

    def __init__(self, db: Session):
        self.db = db
        self.repository = ProductRepository(db)

    def list_products(self, page: int, page_size: int, name: Optional[str] = None,
                      category: Optional[str] = None) -> ProductPage:
        records, total, total_pages = paginate(self.repository.list_query(name, category), page, page_size)
        return ProductPage(
            items=[self._build_response(p) for p in records],
            page=max(page, 1),
            page_size=clamp_page_size(page_size),
            total=total,
            total_pages=total_pages,
            name_filter=name,
            category_filter=category,
            categories=self.repository.get_category_names()
        )

    def get_product(self, product_id: int) -> ProductResponse:
        return self._build_response(self._get_or_404(product_id))

    def create_product(self, data: ProductCreate) -> ProductOperationResponse:
        self._validate_references(data)
        try:
            product = self.repository.create(data.model_dump())
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception("Error creando producto")
            return ProductOperationResponse(success=False, message="No se pudo guardar el producto. Intente nuevamente.")
        logger.info(f"Producto {product.id} creado: {product.name}")
        return ProductOperationResponse(success=True, message="Producto guardado correctamente.", id=product.id)

    def update_product(self, product_id: int, data: ProductCreate) -> ProductOperationResponse:
        product = self._get_or_404(product_id)
        self._validate_references(data)
        try:
            # quantity_on_hand queda fuera: solo la cambia el motor de stock
            product.name = data.name
            product.price = data.price
            product.category_id = data.category_id
            product.special_storage_id = data.special_storage_id
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception(f"Error actualizando producto {product_id}")
            return ProductOperationResponse(success=False, message="No se pudo guardar el producto. Intente nuevamente.")
        return ProductOperationResponse(success=True, message="Producto guardado correctamente.", id=product.id)

    def delete_product(self, product_id: int) -> ProductOperationResponse:
        product = self._get_or_404(product_id)
        if self.repository.has_details(product_id):
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="No se puede eliminar el producto porque aparece en detalles de bultos."
            )
        try:
            self.repository.delete(product)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception(f"Error eliminando producto {product_id}")
            return ProductOperationResponse(success=False, message="No se pudo eliminar el producto. Intente nuevamente.")
        return ProductOperationResponse(success=True, message="Producto eliminado correctamente.", id=product_id)

    def export_products(self) -> Response:
        rows = [
            (
                p.id,
                p.name,
                p.category.name if p.category else "Sin categoría",
                float(p.price or 0),
                p.quantity_on_hand,
                p.special_storage.name if p.special_storage else "N/A"
            )
            for p in self.repository.get_all()
        ]
        return excel_response(
            "Productos.xlsx",
            "Productos",
            ["ID", "Nombre", "Categoría", "Precio (€)", "Cantidad en Stock", "Almacenamiento Especial"],
            rows
        )

    # ==================== HELPERS ====================

    def _get_or_404(self, product_id: int) -> Product:
        product = self.repository.get_by_id(product_id)
        if not product:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Producto no encontrado")
        return product

    def _validate_references(self, data: ProductCreate) -> None:
        if data.category_id is not None and not self.repository.category_exists(data.category_id):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Categoría no encontrada")
        if data.special_storage_id is not None and not self.repository.special_storage_exists(data.special_storage_id):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Almacenamiento especial no encontrado")

    def _build_response(self, product: Product) -> ProductResponse:
        return ProductResponse(
            id=product.id,
            name=product.name,
            price=product.price or 0,
            quantity_on_hand=product.quantity_on_hand,
            category_id=product.category_id,
            category_name=product.category.name if product.category else None,
            special_storage_id=product.special_storage_id,
            special_storage_name=product.special_storage.name if product.special_storage else None
        )
