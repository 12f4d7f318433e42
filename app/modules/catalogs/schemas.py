# app/modules/catalogs/schemas.py
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field

class CatalogItemCreate(BaseModel):
    """Crear o renombrar un elemento de catálogo"""
    name: str = Field(..., min_length=1, max_length=255, description="Nombre")

class CatalogItemResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str

class CatalogPage(BaseModel):
    items: List[CatalogItemResponse]
    page: int
    page_size: int
    total: int
    total_pages: int
    name_filter: Optional[str] = None

class CatalogOperationResponse(BaseModel):
    success: bool
    message: str
    id: Optional[int] = None
