"""
Tests for the sample template service.
"""
import io
from decimal import Decimal

from openpyxl import load_workbook

from ratiolens.engine import SourceKind, analyze
from ratiolens.services.document_decoder import DocumentDecoder
from ratiolens.services.template_service import (
    TEMPLATE_HEADER,
    TEMPLATE_ROWS,
    TEMPLATE_SHEET_TITLE,
    XLSX_CONTENT_TYPE,
    build_sample_template,
)


class TestSampleTemplate:
    def test_workbook_layout(self):
        wb = load_workbook(io.BytesIO(build_sample_template()))
        ws = wb.active

        assert ws.title == TEMPLATE_SHEET_TITLE
        assert (ws["A1"].value, ws["B1"].value) == TEMPLATE_HEADER
        assert ws["A1"].font.bold
        assert ws.max_row == len(TEMPLATE_ROWS) + 1

    def test_template_is_a_valid_statement(self):
        decoded = DocumentDecoder().decode(build_sample_template(), XLSX_CONTENT_TYPE)

        analysis = analyze(decoded.source, SourceKind.SPREADSHEET)

        assert analysis.balance_check.is_balanced
        assert analysis.record.total_assets == Decimal("300000")
        assert analysis.record.total_liabilities == Decimal("120000")
        assert analysis.diagnostics
