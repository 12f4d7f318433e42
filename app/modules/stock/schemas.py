# app/modules/stock/schemas.py
from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field

class StockErrorCode(str, Enum):
    """Tipos de fallo que el motor de stock reporta al llamador"""
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    INSUFFICIENT_STOCK = "insufficient_stock"
    DUPLICATE_MOVEMENT = "duplicate_movement"
    PERSISTENCE_FAILURE = "persistence_failure"

class StockMovementKind(str, Enum):
    """Eventos que afectan el stock de todo un bulto"""
    ENTRY = "entry"
    EXIT = "exit"

    @property
    def sign(self) -> int:
        # La entrada suma al stock, la salida resta
        return 1 if self is StockMovementKind.ENTRY else -1

    @property
    def label(self) -> str:
        return "entrada" if self is StockMovementKind.ENTRY else "salida"

class PackageClassification(BaseModel):
    """Resultado del clasificador: si el bulto tiene entrada y/o salida"""
    package_id: int
    has_entry: bool = False
    has_exit: bool = False

    @property
    def sign(self) -> int:
        """Signo neto con el que cuentan las líneas del bulto en el stock.

        Si el bulto tuviera entrada y salida a la vez se aplican ambos
        ajustes, que se anulan entre sí.
        """
        return (1 if self.has_entry else 0) - (1 if self.has_exit else 0)

class StockResult(BaseModel):
    """Resultado tipado de una operación del motor de stock"""
    success: bool
    message: str
    error_code: Optional[StockErrorCode] = None
    entity_id: Optional[int] = Field(None, description="ID del registro creado o modificado")

    @classmethod
    def ok(cls, message: str, entity_id: Optional[int] = None) -> "StockResult":
        return cls(success=True, message=message, entity_id=entity_id)

    @classmethod
    def fail(cls, error_code: StockErrorCode, message: str) -> "StockResult":
        return cls(success=False, message=message, error_code=error_code)

    @property
    def is_not_found(self) -> bool:
        return self.error_code == StockErrorCode.NOT_FOUND

class OperationResponse(BaseModel):
    """Envoltorio JSON que recibe la interfaz: {success, message}"""
    success: bool
    message: str
    id: Optional[int] = None

class StockAudit(BaseModel):
    """Comparación entre el stock registrado y el esperado por entradas/salidas"""
    product_id: int
    product_name: str
    quantity_on_hand: int
    expected_quantity: int
    entered_quantity: int
    exited_quantity: int
    consistent: bool
