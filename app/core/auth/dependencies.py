import logging
from typing import List
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session, joinedload

from app.config.database import get_db
from app.shared.database.models import User
from .security import decode_access_token

logger = logging.getLogger(__name__)

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login")

CREDENTIALS_EXCEPTION = HTTPException(
    status_code=status.HTTP_401_UNAUTHORIZED,
    detail="No se pudieron validar las credenciales",
    headers={"WWW-Authenticate": "Bearer"},
)

def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: Session = Depends(get_db)
) -> User:
    """Usuario activo dueño del token"""
    user_id = decode_access_token(token)
    if user_id is None:
        raise CREDENTIALS_EXCEPTION

    user = db.query(User).options(joinedload(User.role)).filter(User.id == user_id).first()
    if not user:
        logger.warning(f"Token válido para usuario inexistente {user_id}")
        raise CREDENTIALS_EXCEPTION

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Usuario inactivo"
        )
    return user

def require_roles(allowed_roles: List[str]):
    """Dependencia que exige que el usuario tenga uno de los roles indicados"""
    def role_checker(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role_name not in allowed_roles:
            logger.warning(
                f"Acceso denegado a usuario {current_user.id} con rol {current_user.role_name}"
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Acceso denegado. Roles permitidos: {', '.join(allowed_roles)}"
            )
        return current_user
    return role_checker
