# app/shared/excel.py
from io import BytesIO
from typing import Any, Iterable, List, Sequence
from fastapi import Response
from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill
from openpyxl.utils import get_column_letter

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

HEADER_FONT = Font(bold=True)
HEADER_FILL = PatternFill(fill_type="solid", start_color="ADD8E6", end_color="ADD8E6")  # LightBlue

DATETIME_FORMAT = "%d/%m/%Y %H:%M"
DATE_FORMAT = "%d/%m/%Y"

def format_datetime(value) -> str:
    return value.strftime(DATETIME_FORMAT) if value else "N/A"

def format_date(value, default: str = "Sin fecha") -> str:
    return value.strftime(DATE_FORMAT) if value else default

def build_workbook(sheet_title: str, headers: Sequence[str], rows: Iterable[Sequence[Any]]) -> bytes:
    """Genera un .xlsx con una hoja, cabecera en negrita sobre azul claro y columnas ajustadas"""
    workbook = Workbook()
    worksheet = workbook.active
    worksheet.title = sheet_title[:31]  # límite de Excel

    worksheet.append(list(headers))
    for cell in worksheet[1]:
        cell.font = HEADER_FONT
        cell.fill = HEADER_FILL

    widths: List[int] = [len(str(h)) for h in headers]
    for row in rows:
        values = list(row)
        worksheet.append(values)
        for index, value in enumerate(values):
            widths[index] = max(widths[index], len(str(value)) if value is not None else 0)

    for index, width in enumerate(widths, start=1):
        worksheet.column_dimensions[get_column_letter(index)].width = width + 2

    buffer = BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()

def excel_response(filename: str, sheet_title: str, headers: Sequence[str],
                   rows: Iterable[Sequence[Any]]) -> Response:
    """Respuesta HTTP de descarga con el libro generado"""
    content = build_workbook(sheet_title, headers, rows)
    return Response(
        content=content,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'}
    )
