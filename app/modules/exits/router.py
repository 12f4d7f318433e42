# app/modules/exits/router.py
from app.modules.entries.router import build_record_router
from app.modules.stock.schemas import StockMovementKind

router = build_record_router(StockMovementKind.EXIT, "/exits", "Salidas")
