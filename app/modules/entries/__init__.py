"""
Módulo Entradas - Entrada de bultos al stock

Al registrar la entrada de un bulto se suma al stock la cantidad de cada
una de sus líneas; al editarla o eliminarla se revierte. El router se
construye con `build_record_router`, que también usa el módulo Salidas.
"""

from .router import router as entries_router, build_record_router
from .service import StockRecordService
from .repository import StockRecordRepository

__all__ = [
    "entries_router",
    "build_record_router",
    "StockRecordService",
    "StockRecordRepository"
]
