"""
Tests for the document decoder service.
"""
import io
import zipfile

import pytest

from ratiolens.engine.models import SourceKind
from ratiolens.exceptions import DecodeError
from ratiolens.services.document_decoder import (
    FORMAT_CSV,
    FORMAT_DOCX,
    FORMAT_TXT,
    FORMAT_XLSX,
    DocumentDecoder,
    resolve_format,
)
from ratiolens.services.template_service import XLSX_CONTENT_TYPE, build_sample_template

DOCX_CONTENT_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"


def make_docx(paragraphs) -> bytes:
    """Build a minimal DOCX archive holding the given paragraphs."""
    body = "".join(f"<w:p><w:r><w:t>{text}</w:t></w:r></w:p>" for text in paragraphs)
    document = (
        '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>'
        '<w:document xmlns:w="http://schemas.openxmlformats.org/wordprocessingml/2006/main">'
        f"<w:body>{body}</w:body></w:document>"
    )
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as archive:
        archive.writestr("word/document.xml", document.encode("utf-8"))
    return buffer.getvalue()


class TestResolveFormat:
    def test_by_content_type(self):
        assert resolve_format(XLSX_CONTENT_TYPE) == FORMAT_XLSX
        assert resolve_format("text/csv; charset=utf-8") == FORMAT_CSV

    def test_by_extension(self):
        assert resolve_format("application/octet-stream", "Баланс.DOCX") == FORMAT_DOCX
        assert resolve_format(None, "report.txt") == FORMAT_TXT

    def test_unsupported(self):
        assert resolve_format("image/png", "scan.png") is None
        assert resolve_format(None, None) is None


class TestDocumentDecoder:
    @pytest.fixture
    def decoder(self) -> DocumentDecoder:
        return DocumentDecoder()

    def test_xlsx(self, decoder: DocumentDecoder):
        decoded = decoder.decode(build_sample_template(), XLSX_CONTENT_TYPE, "template.xlsx")

        assert decoded.source_kind is SourceKind.SPREADSHEET
        assert decoded.rows[0][:2] == ("Показатель", "Значение")
        assert ("Запасы", 35000) in [tuple(row[:2]) for row in decoded.rows]
        assert decoded.source is decoded.rows

    def test_csv_semicolon(self, decoder: DocumentDecoder):
        content = "Показатель;Значение\nЗапасы;35 000\n".encode("utf-8")

        decoded = decoder.decode(content, "text/csv")

        assert decoded.rows == [("Показатель", "Значение"), ("Запасы", "35 000")]

    def test_txt_cp1251(self, decoder: DocumentDecoder):
        content = "Запасы\r\n1210\r\n35000\r\n".encode("cp1251")

        decoded = decoder.decode(content, "text/plain")

        assert decoded.source_kind is SourceKind.DOCUMENT
        assert decoded.lines == ["Запасы", "1210", "35000"]

    def test_txt_utf8_bom(self, decoder: DocumentDecoder):
        content = "\ufeffЗапасы 1210 35000".encode("utf-8")
        assert decoder.decode(content, "text/plain").lines == ["Запасы 1210 35000"]

    def test_docx_paragraphs(self, decoder: DocumentDecoder):
        content = make_docx(["Денежные средства", "1250", "", "45 000"])

        decoded = decoder.decode(content, DOCX_CONTENT_TYPE)

        assert decoded.lines == ["Денежные средства", "1250", "45 000"]
        assert decoded.source is decoded.lines

    def test_unsupported_type(self, decoder: DocumentDecoder):
        with pytest.raises(DecodeError) as exc_info:
            decoder.decode(b"\x89PNG", "image/png", "scan.png")
        assert exc_info.value.error_code == "RL-101"

    def test_corrupt_container(self, decoder: DocumentDecoder):
        with pytest.raises(DecodeError) as exc_info:
            decoder.decode(b"not a zip archive", XLSX_CONTENT_TYPE)
        assert exc_info.value.message.startswith("Ошибка парсинга документа")

    def test_corrupt_docx(self, decoder: DocumentDecoder):
        with pytest.raises(DecodeError):
            decoder.decode(b"PK\x03\x04broken", DOCX_CONTENT_TYPE)
