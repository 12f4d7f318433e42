# app/modules/users/service.py
import logging
from typing import List, Optional
from fastapi import HTTPException, Response, status
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from app.core.auth.security import get_password_hash
from app.shared.database.models import User
from app.shared.excel import excel_response, format_datetime
from app.shared.pagination import paginate, clamp_page_size
from .repository import UserRepository
from .schemas import (
    UserCreate, UserUpdate, UserListItem, UserPage, RoleCreate, RoleResponse, UserOperationResponse
)

logger = logging.getLogger(__name__)

ADMIN_ROLE = "administrador"

class UserService:
    """Gestión de usuarios y roles"""

    def __init__(self, db: Session):
        self.db = db
        self.repository = UserRepository(db)

    # ==================== USUARIOS ====================

    def list_users(self, page: int, page_size: int, username: Optional[str] = None,
                   email: Optional[str] = None) -> UserPage:
        records, total, total_pages = paginate(self.repository.list_query(username, email), page, page_size)
        return UserPage(
            items=[self._build_user(u) for u in records],
            page=max(page, 1),
            page_size=clamp_page_size(page_size),
            total=total,
            total_pages=total_pages,
            username_filter=username,
            email_filter=email
        )

    def get_user(self, user_id: int) -> UserListItem:
        return self._build_user(self._get_user_or_404(user_id))

    def create_user(self, data: UserCreate, admin_id: int) -> UserOperationResponse:
        self._validate_user(data.username, data.email, data.role_id)
        try:
            user = self.repository.create_user({
                "username": data.username,
                "email": data.email,
                "password_hash": get_password_hash(data.password),
                "role_id": data.role_id,
                "is_active": data.is_active
            })
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception(f"Error creando usuario {data.username}")
            return UserOperationResponse(success=False, message="Error al crear el usuario.")

        logger.info(f"Usuario {user.id} creado por administrador {admin_id}")
        return UserOperationResponse(success=True, message="Usuario guardado correctamente.", id=user.id)

    def update_user(self, user_id: int, data: UserUpdate, admin_id: int) -> UserOperationResponse:
        user = self._get_user_or_404(user_id)
        self._validate_user(data.username, data.email, data.role_id, exclude_id=user_id)
        try:
            user.username = data.username
            user.email = data.email
            user.role_id = data.role_id
            user.is_active = data.is_active
            if data.password:
                user.password_hash = get_password_hash(data.password)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception(f"Error actualizando usuario {user_id}")
            return UserOperationResponse(success=False, message="Error al actualizar el usuario.")

        logger.info(f"Usuario {user_id} actualizado por administrador {admin_id}")
        return UserOperationResponse(success=True, message="Usuario guardado correctamente.", id=user.id)

    def delete_user(self, user_id: int, admin_id: int) -> UserOperationResponse:
        user = self._get_user_or_404(user_id)
        if user_id == admin_id:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="No puede eliminar su propio usuario"
            )
        if self.repository.has_activity(user_id):
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="No se puede eliminar el usuario porque tiene entradas, salidas o movimientos registrados."
            )
        try:
            self.repository.delete(user)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception(f"Error eliminando usuario {user_id}")
            return UserOperationResponse(success=False, message="Error al eliminar el usuario.")

        logger.info(f"Usuario {user_id} eliminado por administrador {admin_id}")
        return UserOperationResponse(success=True, message="Usuario eliminado correctamente.", id=user_id)

    def export_users(self) -> Response:
        rows = [
            (
                u.id,
                u.username,
                u.email,
                u.role_name or "N/A",
                "Sí" if u.is_active else "No",
                format_datetime(u.created_at)
            )
            for u in self.repository.get_all()
        ]
        return excel_response(
            "Usuarios.xlsx",
            "Usuarios",
            ["ID", "Usuario", "Email", "Rol", "Activo", "Fecha de Alta"],
            rows
        )

    # ==================== ROLES ====================

    def list_roles(self) -> List[RoleResponse]:
        return [
            RoleResponse(id=role.id, name=role.name, users_count=count)
            for role, count in self.repository.get_roles_with_counts()
        ]

    def create_role(self, data: RoleCreate) -> UserOperationResponse:
        self._ensure_role_name_free(data.name)
        try:
            role = self.repository.create_role(data.name)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception(f"Error creando rol {data.name}")
            return UserOperationResponse(success=False, message="Error al crear el rol.")
        return UserOperationResponse(success=True, message="Rol guardado correctamente.", id=role.id)

    def update_role(self, role_id: int, data: RoleCreate) -> UserOperationResponse:
        role = self._get_role_or_404(role_id)
        self._ensure_role_name_free(data.name, exclude_id=role_id)
        try:
            role.name = data.name
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception(f"Error actualizando rol {role_id}")
            return UserOperationResponse(success=False, message="Error al actualizar el rol.")
        return UserOperationResponse(success=True, message="Rol guardado correctamente.", id=role.id)

    def delete_role(self, role_id: int) -> UserOperationResponse:
        role = self._get_role_or_404(role_id)
        if self.repository.count_users_with_role(role_id):
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="No se puede eliminar el rol porque tiene usuarios asignados."
            )
        try:
            self.repository.delete(role)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception(f"Error eliminando rol {role_id}")
            return UserOperationResponse(success=False, message="Error al eliminar el rol.")
        return UserOperationResponse(success=True, message="Rol eliminado correctamente.", id=role_id)

    # ==================== HELPERS ====================

    def _get_user_or_404(self, user_id: int) -> User:
        user = self.repository.get_by_id(user_id)
        if not user:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Usuario no encontrado")
        return user

    def _get_role_or_404(self, role_id: int):
        role = self.repository.get_role(role_id)
        if not role:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Rol no encontrado")
        return role

    def _validate_user(self, username: str, email: str, role_id: Optional[int],
                       exclude_id: Optional[int] = None) -> None:
        if self.repository.username_taken(username, exclude_id):
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="El nombre de usuario ya existe")
        if self.repository.email_taken(email, exclude_id):
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="El correo ya está registrado")
        if role_id is not None and not self.repository.get_role(role_id):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Rol no encontrado")

    def _ensure_role_name_free(self, name: str, exclude_id: Optional[int] = None) -> None:
        if self.repository.role_name_taken(name, exclude_id):
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Ya existe un rol con ese nombre")

    def _build_user(self, user: User) -> UserListItem:
        return UserListItem(
            id=user.id,
            username=user.username,
            email=user.email,
            role_id=user.role_id,
            role_name=user.role_name,
            is_active=bool(user.is_active),
            created_at=user.created_at
        )
