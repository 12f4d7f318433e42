# app/modules/users/schemas.py
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, EmailStr, Field

# ===== USUARIOS =====

class UserCreate(BaseModel):
    username: str = Field(..., min_length=1, max_length=150, description="Nombre de usuario")
    email: EmailStr = Field(..., description="Correo electrónico")
    password: str = Field(..., min_length=6, description="Contraseña")
    role_id: Optional[int] = Field(None, description="ID del rol")
    is_active: bool = Field(default=True)

class UserUpdate(BaseModel):
    """La contraseña solo se cambia si se envía"""
    username: str = Field(..., min_length=1, max_length=150)
    email: EmailStr
    password: Optional[str] = Field(None, min_length=6)
    role_id: Optional[int] = None
    is_active: bool = True

class UserListItem(BaseModel):
    id: int
    username: str
    email: str
    role_id: Optional[int] = None
    role_name: Optional[str] = None
    is_active: bool
    created_at: Optional[datetime] = None

class UserPage(BaseModel):
    items: List[UserListItem]
    page: int
    page_size: int
    total: int
    total_pages: int
    username_filter: Optional[str] = None
    email_filter: Optional[str] = None

# ===== ROLES =====

class RoleCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100, description="Nombre del rol")

class RoleResponse(BaseModel):
    id: int
    name: str
    users_count: int = 0

class UserOperationResponse(BaseModel):
    success: bool
    message: str
    id: Optional[int] = None
