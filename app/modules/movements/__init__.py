"""
Módulo Movimientos - Traslados de bultos entre ubicaciones

Cada movimiento actualiza la ubicación actual del bulto. No afecta al stock.
"""

from .router import router as movements_router
from .service import MovementService
from .repository import MovementRepository

__all__ = [
    "movements_router",
    "MovementService",
    "MovementRepository"
]
