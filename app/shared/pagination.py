# app/shared/pagination.py
import math
from typing import Tuple
from sqlalchemy.orm import Query

from app.config.settings import settings

def clamp_page_size(page_size: int) -> int:
    if page_size <= 0:
        return settings.default_page_size
    return min(page_size, settings.max_page_size)

def paginate(query: Query, page: int, page_size: int) -> Tuple[list, int, int]:
    """Aplica offset/limit a la consulta y devuelve (registros, total, total_pages)"""
    page = max(page, 1)
    page_size = clamp_page_size(page_size)
    total = query.order_by(None).count()
    records = query.offset((page - 1) * page_size).limit(page_size).all()
    total_pages = math.ceil(total / page_size) if total else 0
    return records, total, total_pages
