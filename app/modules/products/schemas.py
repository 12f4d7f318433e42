# app/modules/products/schemas.py
from decimal import Decimal
from typing import List, Optional
from pydantic import BaseModel, Field

class ProductCreate(BaseModel):
    """Crear o actualizar un producto.

    La cantidad en stock no se edita aquí: la mueven las entradas, las
    salidas y los detalles de bultos.
    """
    name: str = Field(..., min_length=1, max_length=255, description="Nombre del producto")
    price: Decimal = Field(default=Decimal("0"), ge=0, description="Precio unitario")
    category_id: Optional[int] = Field(None, description="ID de la categoría")
    special_storage_id: Optional[int] = Field(None, description="ID del almacenamiento especial")

class ProductResponse(BaseModel):
    id: int
    name: str
    price: Decimal
    quantity_on_hand: int
    category_id: Optional[int] = None
    category_name: Optional[str] = None
    special_storage_id: Optional[int] = None
    special_storage_name: Optional[str] = None

class ProductPage(BaseModel):
    items: List[ProductResponse]
    page: int
    page_size: int
    total: int
    total_pages: int
    name_filter: Optional[str] = None
    category_filter: Optional[str] = None
    categories: List[str] = []

class ProductOperationResponse(BaseModel):
    success: bool
    message: str
    id: Optional[int] = None
