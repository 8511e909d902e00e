"""
Sample template service.

Builds the downloadable two-column XLSX template users can fill in.
"""
import io
from typing import List, Tuple, Union

import structlog
from openpyxl import Workbook
from openpyxl.styles import Font

logger = structlog.get_logger(__name__)

TEMPLATE_SHEET_TITLE = "Финансовые данные"
TEMPLATE_FILENAME = "financial-template.xlsx"
XLSX_CONTENT_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

TEMPLATE_HEADER = ("Показатель", "Значение")

TEMPLATE_ROWS: List[Tuple[str, Union[int, float]]] = [
    ("Собственный капитал", 180000),
    ("Оборотные активы", 150000),
    ("Денежные средства", 45000),
    ("Краткосрочные инвестиции", 20000),
    ("Дебиторская задолженность", 50000),
    ("Запасы", 35000),
    ("Всего активов", 300000),
    ("Краткосрочные обязательства", 60000),
    ("Краткосрочный долг", 15000),
    ("Всего обязательств", 120000),
    ("Долгосрочный долг", 60000),
    ("Выручка", 500000),
    ("Валовая прибыль", 150000),
    ("Прибыль от продаж", 80000),
    ("Прибыль до налогообложения", 65000),
    ("Чистая прибыль", 45000),
]


def build_sample_template() -> bytes:
    """Return the sample template as XLSX bytes."""
    wb = Workbook()
    ws = wb.active
    ws.title = TEMPLATE_SHEET_TITLE

    ws.append(TEMPLATE_HEADER)
    for cell in ws[1]:
        cell.font = Font(bold=True)
    for label, value in TEMPLATE_ROWS:
        ws.append((label, value))

    ws.column_dimensions["A"].width = 36
    ws.column_dimensions["B"].width = 16

    buffer = io.BytesIO()
    wb.save(buffer)
    logger.debug("Sample template built", rows=len(TEMPLATE_ROWS))
    return buffer.getvalue()
