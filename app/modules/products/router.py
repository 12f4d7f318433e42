# app/modules/products/router.py
from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.config.database import get_db
from app.core.auth.dependencies import get_current_user
from app.shared.database.models import User
from .service import ProductService
from .schemas import ProductCreate, ProductResponse, ProductPage, ProductOperationResponse

router = APIRouter(prefix="/products", tags=["Productos"])

@router.get("/", response_model=ProductPage)
async def list_products(
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100),
    name: Optional[str] = Query(None, description="Filtrar por nombre (contiene)"),
    category: Optional[str] = Query(None, description="Filtrar por nombre de categoría"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Listado paginado de productos

    **Filtros:**
    - name: coincidencia parcial, sin distinguir mayúsculas
    - category: nombre exacto de la categoría
    """
    return ProductService(db).list_products(page, page_size, name, category)

@router.get("/export")
async def export_products(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Exportar productos a Excel"""
    return ProductService(db).export_products()

@router.get("/{product_id}", response_model=ProductResponse)
async def get_product(
    product_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return ProductService(db).get_product(product_id)

@router.post("/", response_model=ProductOperationResponse)
async def create_product(
    data: ProductCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Crear producto con stock inicial 0"""
    return ProductService(db).create_product(data)

@router.put("/{product_id}", response_model=ProductOperationResponse)
async def update_product(
    product_id: int,
    data: ProductCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Actualizar nombre, precio, categoría y almacenamiento especial"""
    return ProductService(db).update_product(product_id, data)

@router.delete("/{product_id}", response_model=ProductOperationResponse)
async def delete_product(
    product_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Eliminar producto que no aparezca en ningún bulto"""
    return ProductService(db).delete_product(product_id)
