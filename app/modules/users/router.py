# app/modules/users/router.py
from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.config.database import get_db
from app.core.auth.dependencies import get_current_user, require_roles
from app.shared.database.models import User
from .service import UserService, ADMIN_ROLE
from .schemas import (
    UserCreate, UserUpdate, UserListItem, UserPage, RoleCreate, RoleResponse, UserOperationResponse
)

router = APIRouter(prefix="/users", tags=["Usuarios"])
roles_router = APIRouter(prefix="/roles", tags=["Roles"])

# ===== USUARIOS =====

@router.get("/", response_model=UserPage)
async def list_users(
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100),
    username: Optional[str] = Query(None, description="Filtrar por nombre de usuario"),
    email: Optional[str] = Query(None, description="Filtrar por correo"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return UserService(db).list_users(page, page_size, username, email)

@router.get("/export")
async def export_users(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Exportar usuarios a Excel"""
    return UserService(db).export_users()

@router.get("/{user_id}", response_model=UserListItem)
async def get_user(
    user_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return UserService(db).get_user(user_id)

@router.post("/", response_model=UserOperationResponse)
async def create_user(
    data: UserCreate,
    current_user: User = Depends(require_roles([ADMIN_ROLE])),
    db: Session = Depends(get_db)
):
    """
    Crear usuario

    **Requiere rol:** administrador
    """
    return UserService(db).create_user(data, current_user.id)

@router.put("/{user_id}", response_model=UserOperationResponse)
async def update_user(
    user_id: int,
    data: UserUpdate,
    current_user: User = Depends(require_roles([ADMIN_ROLE])),
    db: Session = Depends(get_db)
):
    """
    Actualizar usuario; la contraseña solo cambia si se envía

    **Requiere rol:** administrador
    """
    return UserService(db).update_user(user_id, data, current_user.id)

@router.delete("/{user_id}", response_model=UserOperationResponse)
async def delete_user(
    user_id: int,
    current_user: User = Depends(require_roles([ADMIN_ROLE])),
    db: Session = Depends(get_db)
):
    return UserService(db).delete_user(user_id, current_user.id)

# ===== ROLES =====

@roles_router.get("/", response_model=List[RoleResponse])
async def list_roles(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Roles con el número de usuarios asignados"""
    return UserService(db).list_roles()

@roles_router.post("/", response_model=UserOperationResponse)
async def create_role(
    data: RoleCreate,
    current_user: User = Depends(require_roles([ADMIN_ROLE])),
    db: Session = Depends(get_db)
):
    return UserService(db).create_role(data)

@roles_router.put("/{role_id}", response_model=UserOperationResponse)
async def update_role(
    role_id: int,
    data: RoleCreate,
    current_user: User = Depends(require_roles([ADMIN_ROLE])),
    db: Session = Depends(get_db)
):
    return UserService(db).update_role(role_id, data)

@roles_router.delete("/{role_id}", response_model=UserOperationResponse)
async def delete_role(
    role_id: int,
    current_user: User = Depends(require_roles([ADMIN_ROLE])),
    db: Session = Depends(get_db)
):
    """Eliminar rol sin usuarios asignados"""
    return UserService(db).delete_role(role_id)
