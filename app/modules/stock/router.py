# app/modules/stock/router.py
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.config.database import get_db
from app.core.auth.dependencies import get_current_user
from app.shared.database.models import User
from .service import StockService
from .schemas import StockAudit, PackageClassification, StockResult, OperationResponse

router = APIRouter(prefix="/stock", tags=["Stock"])

@router.get("/products/{product_id}/audit", response_model=StockAudit)
async def audit_product_stock(
    product_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Auditar el stock de un producto

    Compara la cantidad registrada con la suma de sus detalles en bultos con
    entrada menos la de bultos con salida.
    """
    audit = StockService(db).audit_product(product_id)
    if not audit:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Producto no encontrado")
    return audit

@router.get("/packages/{package_id}/classification", response_model=PackageClassification)
async def classify_package(
    package_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Indica si el bulto tiene entrada y/o salida registrada"""
    service = StockService(db)
    if not service.repository.get_package(package_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Bulto no encontrado")
    return service.classify_package(package_id)

def to_operation_response(result: StockResult) -> OperationResponse:
    """Convierte el resultado del motor en la respuesta JSON {success, message}"""
    if result.is_not_found:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=result.message)
    return OperationResponse(success=result.success, message=result.message, id=result.entity_id)
