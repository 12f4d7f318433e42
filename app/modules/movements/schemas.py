# app/modules/movements/schemas.py
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field

class MovementCreate(BaseModel):
    package_id: int = Field(..., description="ID del bulto")
    user_id: Optional[int] = Field(None, description="ID del usuario; por defecto el autenticado")
    date: Optional[datetime] = Field(None, description="Fecha; por defecto ahora")
    origin_location: Optional[str] = Field(
        None, max_length=255, description="Ubicación de origen; por defecto la ubicación actual del bulto"
    )
    destination_location: str = Field(..., min_length=1, max_length=255, description="Ubicación de destino")

class MovementResponse(BaseModel):
    id: int
    package_id: int
    package_description: Optional[str] = None
    user_id: int
    username: Optional[str] = None
    date: datetime
    origin_location: str
    destination_location: str

class MovementPage(BaseModel):
    items: List[MovementResponse]
    page: int
    page_size: int
    total: int
    total_pages: int
    user_filter: Optional[str] = None
    package_filter: Optional[str] = None
    origin_filter: Optional[str] = None
    destination_filter: Optional[str] = None
    origin_locations: List[str] = []
    destination_locations: List[str] = []

class MovementOperationResponse(BaseModel):
    success: bool
    message: str
    id: Optional[int] = None
