"""
Document decoder service.

Turns an uploaded byte buffer into what the engine consumes:
- Spreadsheets (XLSX, XLS, CSV): rows of cell values from the first sheet
- Documents (DOCX, PDF, TXT): ordered text lines

PDFs are read from their text layer only; image-only scans are rejected
with guidance instead of being OCR'd.
"""
import csv
import io
import zipfile
from dataclasses import dataclass, field
from typing import Dict, List, Optional
from xml.etree import ElementTree

import pdfplumber
import structlog
import xlrd
from openpyxl import load_workbook

from ratiolens.engine.models import Row, SourceKind
from ratiolens.engine.tokenizer import split_lines
from ratiolens.exceptions import DecodeError, RatioLensError, UnsupportedDocumentError

logger = structlog.get_logger(__name__)

FORMAT_XLSX = "xlsx"
FORMAT_XLS = "xls"
FORMAT_CSV = "csv"
FORMAT_DOCX = "docx"
FORMAT_PDF = "pdf"
FORMAT_TXT = "txt"

CONTENT_TYPES: Dict[str, str] = {
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet": FORMAT_XLSX,
    "application/vnd.ms-excel": FORMAT_XLS,
    "text/csv": FORMAT_CSV,
    "application/csv": FORMAT_CSV,
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document": FORMAT_DOCX,
    "application/pdf": FORMAT_PDF,
    "text/plain": FORMAT_TXT,
}

EXTENSIONS: Dict[str, str] = {
    ".xlsx": FORMAT_XLSX,
    ".xls": FORMAT_XLS,
    ".csv": FORMAT_CSV,
    ".docx": FORMAT_DOCX,
    ".pdf": FORMAT_PDF,
    ".txt": FORMAT_TXT,
}

SPREADSHEET_FORMATS = (FORMAT_XLSX, FORMAT_XLS, FORMAT_CSV)

# Encodings tried for CSV and plain text, in order
TEXT_ENCODINGS = ("utf-8-sig", "cp1251")

_WORD_NS = "{http://schemas.openxmlformats.org/wordprocessingml/2006/main}"


@dataclass
class DecodedDocument:
    """Decoded upload, ready for the engine."""

    format: str
    source_kind: SourceKind
    lines: List[str] = field(default_factory=list)
    rows: List[Row] = field(default_factory=list)

    @property
    def source(self):
        """Input for the engine: rows for spreadsheets, lines for documents."""
        if self.source_kind is SourceKind.SPREADSHEET:
            return self.rows
        return self.lines

    @property
    def is_empty(self) -> bool:
        return not self.rows and not self.lines


def resolve_format(content_type: Optional[str], filename: Optional[str] = None) -> Optional[str]:
    """
    Map a declared content type (or, failing that, a file extension) to a format.

    Returns None when neither is supported.
    """
    if content_type:
        fmt = CONTENT_TYPES.get(content_type.split(";")[0].strip().lower())
        if fmt:
            return fmt
    if filename and "." in filename:
        extension = filename[filename.rindex("."):].lower()
        return EXTENSIONS.get(extension)
    return None


class DocumentDecoder:
    """
    Service for decoding uploaded statement files.

    Uses openpyxl for XLSX, xlrd for legacy XLS, pdfplumber for PDF text
    layers, and the OOXML paragraph stream for DOCX.
    """

    def decode(
        self,
        content: bytes,
        content_type: Optional[str],
        filename: Optional[str] = None,
    ) -> DecodedDocument:
        """
        Decode a byte buffer.

        Args:
            content: Raw file bytes.
            content_type: Declared MIME type.
            filename: Original filename, used when the MIME type is generic.

        Returns:
            DecodedDocument with rows or lines.

        Raises:
            DecodeError: The container could not be read.
            UnsupportedDocumentError: The file has no extractable text.
        """
        fmt = resolve_format(content_type, filename)
        if fmt is None:
            raise DecodeError("неподдерживаемый тип документа", content_type=content_type)

        logger.info("Decoding document", format=fmt, size=len(content))

        try:
            if fmt == FORMAT_XLSX:
                decoded = DecodedDocument(fmt, SourceKind.SPREADSHEET, rows=self._read_xlsx(content))
            elif fmt == FORMAT_XLS:
                decoded = DecodedDocument(fmt, SourceKind.SPREADSHEET, rows=self._read_xls(content))
            elif fmt == FORMAT_CSV:
                decoded = DecodedDocument(fmt, SourceKind.SPREADSHEET, rows=self._read_csv(content))
            elif fmt == FORMAT_DOCX:
                decoded = DecodedDocument(fmt, SourceKind.DOCUMENT, lines=self._read_docx(content))
            elif fmt == FORMAT_PDF:
                decoded = DecodedDocument(fmt, SourceKind.DOCUMENT, lines=self._read_pdf(content))
            else:
                decoded = DecodedDocument(fmt, SourceKind.DOCUMENT, lines=split_lines(self._decode_text(content)))
        except RatioLensError:
            raise
        except Exception as e:
            logger.warning("Document decoding failed", format=fmt, error=str(e))
            raise DecodeError(str(e) or type(e).__name__, content_type=content_type) from e

        logger.info(
            "Document decoded",
            format=fmt,
            source_kind=decoded.source_kind.value,
            lines=len(decoded.lines),
            rows=len(decoded.rows),
        )
        return decoded

    # -------------------------------------------------------------------------
    # Spreadsheets
    # -------------------------------------------------------------------------

    def _read_xlsx(self, content: bytes) -> List[Row]:
        wb = load_workbook(io.BytesIO(content), read_only=True, data_only=True)
        try:
            if not wb.worksheets:
                raise DecodeError("Excel файл не содержит листов", content_type=FORMAT_XLSX)
            ws = wb.worksheets[0]
            return [tuple(row) for row in ws.iter_rows(values_only=True)]
        finally:
            wb.close()

    def _read_xls(self, content: bytes) -> List[Row]:
        book = xlrd.open_workbook(file_contents=content)
        if book.nsheets == 0:
            raise DecodeError("Excel файл не содержит листов", content_type=FORMAT_XLS)
        sheet = book.sheet_by_index(0)
        return [tuple(sheet.row_values(i)) for i in range(sheet.nrows)]

    def _read_csv(self, content: bytes) -> List[Row]:
        text = self._decode_text(content)
        try:
            dialect = csv.Sniffer().sniff(text[:4096], delimiters=",;\t")
        except csv.Error:
            dialect = csv.excel
        return [tuple(row) for row in csv.reader(io.StringIO(text), dialect)]

    # -------------------------------------------------------------------------
    # Documents
    # -------------------------------------------------------------------------

    def _read_docx(self, content: bytes) -> List[str]:
        with zipfile.ZipFile(io.BytesIO(content)) as archive:
            xml = archive.read("word/document.xml")
        root = ElementTree.fromstring(xml)

        paragraphs: List[str] = []
        for paragraph in root.iter(f"{_WORD_NS}p"):
            parts: List[str] = []
            for node in paragraph.iter():
                if node.tag == f"{_WORD_NS}t" and node.text:
                    parts.append(node.text)
                elif node.tag == f"{_WORD_NS}tab":
                    parts.append(" ")
                elif node.tag in (f"{_WORD_NS}br", f"{_WORD_NS}cr"):
                    parts.append("\n")
            paragraphs.append("".join(parts))
        return split_lines("\n".join(paragraphs))

    def _read_pdf(self, content: bytes) -> List[str]:
        pages: List[str] = []
        with pdfplumber.open(io.BytesIO(content)) as pdf:
            for page in pdf.pages:
                pages.append(page.extract_text() or "")

        lines = split_lines("\n".join(pages))
        if not lines:
            logger.warning("PDF has no text layer", pages=len(pages))
            raise UnsupportedDocumentError(details={"pages": len(pages)})
        return lines

    def _decode_text(self, content: bytes) -> str:
        for encoding in TEXT_ENCODINGS:
            try:
                return content.decode(encoding)
            except UnicodeDecodeError:
                continue
        return content.decode("utf-8", errors="replace")


# Singleton instance
_decoder_instance: Optional[DocumentDecoder] = None


def get_document_decoder() -> DocumentDecoder:
    """Get singleton DocumentDecoder instance."""
    global _decoder_instance
    if _decoder_instance is None:
        _decoder_instance = DocumentDecoder()
    return _decoder_instance
