# app/modules/entries/schemas.py
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field

class StockRecordCreate(BaseModel):
    """Crear o actualizar una entrada o salida de bulto"""
    package_id: int = Field(..., description="ID del bulto")
    user_id: Optional[int] = Field(None, description="ID del usuario; por defecto el autenticado")
    date: Optional[datetime] = Field(None, description="Fecha; por defecto ahora")

class StockRecordResponse(BaseModel):
    id: int
    package_id: int
    package_description: Optional[str] = None
    user_id: int
    username: Optional[str] = None
    date: datetime

class StockRecordPage(BaseModel):
    items: List[StockRecordResponse]
    page: int
    page_size: int
    total: int
    total_pages: int
    user_filter: Optional[str] = None
    package_filter: Optional[str] = None

class EligiblePackage(BaseModel):
    """Bulto con detalles que todavía no tiene entrada (o salida)"""
    id: int
    description: str
    current_location: Optional[str] = None
