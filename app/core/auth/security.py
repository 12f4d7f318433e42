"""
Utilidades de seguridad: hash de contraseñas con bcrypt y tokens JWT.
"""
import bcrypt
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional
from jose import JWTError, jwt

from app.config.settings import settings

logger = logging.getLogger(__name__)

def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verifica una contraseña en claro contra su hash bcrypt"""
    try:
        return bcrypt.checkpw(plain_password.encode("utf-8"), hashed_password.encode("utf-8"))
    except ValueError as e:
        logger.error(f"Hash de contraseña inválido: {e}")
        return False

def get_password_hash(password: str) -> str:
    """Genera el hash bcrypt de una contraseña"""
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")

def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Crea un JWT con los datos dados y su expiración"""
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    )
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.algorithm)

def decode_access_token(token: str) -> Optional[int]:
    """Decodifica un JWT y devuelve el ID de usuario ('sub'), o None si no es válido"""
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except JWTError as e:
        logger.warning(f"Token JWT inválido: {e}")
        return None

    subject = payload.get("sub")
    if subject is None:
        logger.warning("Token JWT sin campo 'sub'")
        return None
    try:
        return int(subject)
    except ValueError:
        logger.warning(f"Campo 'sub' no numérico en token: '{subject}'")
        return None
