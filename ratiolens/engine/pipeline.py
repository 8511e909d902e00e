"""
Extraction and analysis pipeline.

lines/rows -> extraction strategies -> resolver (+ header metadata)
-> FinancialStatementRecord -> normalize -> ratios -> assessments
"""

from typing import Any, Dict, List, Optional, Sequence, Union

from pydantic import ValidationError as PydanticValidationError

from ratiolens.engine.extraction import RawFieldMap, extract_from_lines, extract_from_rows
from ratiolens.engine.metadata import HeaderMetadata, extract_metadata
from ratiolens.engine.models import (
    Diagnostics,
    ExtractionSource,
    FinancialStatementRecord,
    Row,
    SourceKind,
    StatementAnalysis,
)
from ratiolens.engine.ratios import assess, compute_ratios
from ratiolens.engine.resolver import resolve_fields
from ratiolens.engine.tokenizer import clean_lines, is_populated, row_to_line, split_lines
from ratiolens.engine.validation import BALANCE_TOLERANCE, check_balance, normalize
from ratiolens.exceptions import UnsupportedDocumentError, ValidationError

__all__ = [
    "analyze",
    "assess",
    "compute_ratios",
    "extract",
    "normalize",
]


def _document_lines(source: Union[str, Sequence[str]]) -> List[str]:
    if isinstance(source, str):
        return split_lines(source)
    return clean_lines(source)


def _spreadsheet_rows(source: Sequence[Row]) -> List[Row]:
    return [tuple(row) for row in source if row is not None and any(is_populated(c) for c in row)]


def _build_record(resolved: Dict[str, Any], metadata: HeaderMetadata) -> FinancialStatementRecord:
    try:
        return FinancialStatementRecord(
            okved=metadata.okved,
            company_name=metadata.company_name,
            **resolved,
        )
    except PydanticValidationError as e:
        errors = [
            {
                "field": ".".join(str(part) for part in error["loc"]),
                "message": error["msg"],
                "value": str(error.get("input")),
            }
            for error in e.errors()
        ]
        raise ValidationError("Некорректные финансовые данные", errors=errors) from e


def extract(
    source: ExtractionSource,
    source_kind: Union[SourceKind, str],
    diagnostics: Optional[Diagnostics] = None,
) -> FinancialStatementRecord:
    """
    Extract a financial statement record from decoded input.

    Args:
        source: Raw text or lines for documents, rows of cells for spreadsheets.
        source_kind: SourceKind.DOCUMENT or SourceKind.SPREADSHEET.
        diagnostics: Optional sink for extraction diagnostics.

    Returns:
        The resolved (not yet normalized) record.

    Raises:
        UnsupportedDocumentError: The input has no non-empty lines or rows.
        RequiredFieldMissingError: A required field matched nothing.
        ValidationError: Resolved values violate the record constraints.
    """
    kind = SourceKind(source_kind)

    raw: RawFieldMap
    if kind is SourceKind.SPREADSHEET:
        rows = _spreadsheet_rows(source)
        if not rows:
            raise UnsupportedDocumentError()
        raw = extract_from_rows(rows, diagnostics)
        header_lines = clean_lines(row_to_line(row) for row in rows)
    else:
        header_lines = _document_lines(source)
        if not header_lines:
            raise UnsupportedDocumentError()
        raw = extract_from_lines(header_lines, diagnostics)

    resolved = resolve_fields(raw, diagnostics=diagnostics)
    metadata = extract_metadata(header_lines)
    if diagnostics is not None:
        diagnostics.debug("header_metadata", okved=metadata.okved, company_name=metadata.company_name)

    return _build_record(resolved, metadata)


def analyze(
    source: ExtractionSource,
    source_kind: Union[SourceKind, str],
    diagnostics: Optional[Diagnostics] = None,
) -> StatementAnalysis:
    """Run the full pipeline: extract, normalize, compute ratios, assess."""
    sink = diagnostics if diagnostics is not None else Diagnostics()

    record = normalize(extract(source, source_kind, sink), sink)
    ratios = compute_ratios(record)

    return StatementAnalysis(
        record=record,
        ratios=ratios,
        assessments=assess(ratios),
        balance_check=check_balance(record, BALANCE_TOLERANCE),
        diagnostics=sink.entries,
    )
