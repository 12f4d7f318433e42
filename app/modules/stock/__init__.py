"""
Módulo Stock - Motor de consistencia de stock

Mantiene la cantidad en stock de cada producto coherente con los bultos:

- Libro de productos: lectura y ajuste (delta) de la cantidad en stock
- Contenido de bultos: líneas (producto, cantidad, lote, caducidad) de cada bulto
- Clasificador: si un bulto tiene entrada (suma stock) y/o salida (resta stock)
- Motor: valida y aplica los cambios al crear, editar o eliminar detalles,
  entradas, salidas y bultos

Arquitectura:
- router.py: Endpoints de consulta y auditoría
- service.py: Motor de consistencia (StockService)
- repository.py: Acceso a datos
- schemas.py: Resultados tipados y modelos Pydantic
"""

from .router import router as stock_router, to_operation_response
from .service import StockService
from .repository import StockRepository
from .schemas import StockResult, StockErrorCode, StockMovementKind, PackageClassification

__all__ = [
    "stock_router",
    "to_operation_response",
    "StockService",
    "StockRepository",
    "StockResult",
    "StockErrorCode",
    "StockMovementKind",
    "PackageClassification"
]
