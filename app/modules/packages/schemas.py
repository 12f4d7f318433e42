# app/modules/packages/schemas.py
from datetime import date, datetime
from typing import List, Optional
from pydantic import BaseModel, Field

# ===== BULTOS =====

class PackageCreate(BaseModel):
    description: str = Field(..., min_length=1, max_length=255, description="Descripción del bulto")
    current_location: Optional[str] = Field(None, max_length=255, description="Ubicación actual")
    state_id: Optional[int] = Field(None, description="ID del estado del bulto")

class PackageDetailItem(BaseModel):
    """Línea de contenido tal como se muestra dentro de un bulto"""
    id: int
    product_id: int
    product_name: Optional[str] = None
    quantity: int
    lot: Optional[str] = None
    expiry_date: Optional[date] = None

class PackageResponse(BaseModel):
    id: int
    description: str
    current_location: Optional[str] = None
    state_id: Optional[int] = None
    state_name: Optional[str] = None
    created_at: Optional[datetime] = None

class PackageDetailResponse(PackageResponse):
    """Bulto con sus líneas y su clasificación"""
    details: List[PackageDetailItem] = []
    has_entry: bool = False
    has_exit: bool = False
    total_units: int = 0

class PackagePage(BaseModel):
    items: List[PackageResponse]
    page: int
    page_size: int
    total: int
    total_pages: int
    location_filter: Optional[str] = None
    state_filter: Optional[str] = None
    states: List[str] = []

# ===== DETALLES DE BULTO =====

class PackageLineCreate(BaseModel):
    """Crear o actualizar una línea de bulto.

    La cantidad se valida en el motor de stock para devolver su mensaje.
    """
    package_id: int = Field(..., description="ID del bulto")
    product_id: int = Field(..., description="ID del producto")
    quantity: int = Field(..., description="Unidades del producto en el bulto")
    lot: Optional[str] = Field(None, max_length=100, description="Lote")
    expiry_date: Optional[date] = Field(None, description="Fecha de caducidad")

class PackageLineResponse(BaseModel):
    id: int
    package_id: int
    package_description: Optional[str] = None
    product_id: int
    product_name: Optional[str] = None
    quantity: int
    lot: Optional[str] = None
    expiry_date: Optional[date] = None

class PackageLinePage(BaseModel):
    items: List[PackageLineResponse]
    page: int
    page_size: int
    total: int
    total_pages: int
    package_filter: Optional[str] = None
    product_filter: Optional[str] = None
    lot_filter: Optional[str] = None
