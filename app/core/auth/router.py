import logging
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session
from sqlalchemy import or_

from app.config.database import get_db
from app.shared.database.models import User
from app.modules.users.repository import UserRepository
from .dependencies import get_current_user
from .schemas import Token, UserResponse, RegisterRequest
from .security import verify_password, get_password_hash, create_access_token

logger = logging.getLogger(__name__)

router = APIRouter()

@router.post("/login", response_model=Token)
async def login(
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: Session = Depends(get_db)
):
    """
    Iniciar sesión con nombre de usuario o correo y contraseña

    Devuelve un token JWT de tipo bearer.
    """
    user = db.query(User).filter(
        or_(User.username == form_data.username, User.email == form_data.username)
    ).first()

    if not user or not verify_password(form_data.password, user.password_hash):
        logger.warning(f"Intento de inicio de sesión fallido: {form_data.username}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Intento de inicio de sesión no válido.",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Usuario inactivo")

    logger.info(f"Inicio de sesión de usuario {user.id}")
    return Token(access_token=create_access_token({"sub": str(user.id)}))

@router.get("/me", response_model=UserResponse)
async def read_current_user(current_user: User = Depends(get_current_user)):
    """Datos del usuario autenticado"""
    return current_user

@router.post("/register", response_model=Token, status_code=status.HTTP_201_CREATED)
async def register(
    data: RegisterRequest,
    db: Session = Depends(get_db)
):
    """
    Registrar un usuario nuevo y devolver su token

    El usuario queda activo y sin rol; un administrador le asigna uno después.
    """
    repository = UserRepository(db)
    username = data.username or data.email

    if repository.username_taken(username):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="El nombre de usuario ya existe")
    if repository.email_taken(data.email):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="El correo ya está registrado")

    try:
        user = repository.create_user({
            "username": username,
            "email": data.email,
            "password_hash": get_password_hash(data.password),
            "role_id": None,
            "is_active": True
        })
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception(f"Error registrando usuario {username}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="No se pudo completar el registro. Intente nuevamente."
        )

    logger.info(f"Usuario {user.id} registrado")
    return Token(access_token=create_access_token({"sub": str(user.id)}))
