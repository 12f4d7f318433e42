from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, EmailStr, Field, model_validator

class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"

class UserResponse(BaseModel):
    """Usuario autenticado tal como lo ven los endpoints"""
    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    email: str
    role_id: Optional[int] = None
    role_name: Optional[str] = None
    is_active: bool = True
    created_at: Optional[datetime] = None

class RegisterRequest(BaseModel):
    """Alta de un usuario por sí mismo; el nombre de usuario es el correo si no se indica"""
    email: EmailStr
    username: Optional[str] = Field(None, min_length=1, max_length=150)
    password: str = Field(..., min_length=6)
    confirm_password: str

    @model_validator(mode="after")
    def passwords_match(self):
        if self.password != self.confirm_password:
            raise ValueError("Las contraseñas no coinciden.")
        return self
