"""
Analysis service.

Runs one upload end to end: decode, engine pipeline, industry enrichment,
credit report, store. Engine diagnostics are replayed to structlog.
"""
from typing import Optional

import structlog

from ratiolens.engine import Diagnostic, Diagnostics, analyze
from ratiolens.services.analysis_store import AnalysisStore, StoredAnalysis, get_analysis_store
from ratiolens.services.credit_report import CreditReportService, get_credit_report_service
from ratiolens.services.document_decoder import DocumentDecoder, get_document_decoder
from ratiolens.services.industry_service import IndustryService, get_industry_service

logger = structlog.get_logger(__name__)


def log_diagnostic(entry: Diagnostic) -> None:
    """Forward an engine diagnostic to structlog at its own level."""
    log = getattr(logger, entry.level, logger.info)
    log(entry.event, **entry.context)


class AnalysisService:
    """Orchestrates the services around the engine for one upload."""

    def __init__(
        self,
        decoder: Optional[DocumentDecoder] = None,
        industry: Optional[IndustryService] = None,
        reports: Optional[CreditReportService] = None,
        store: Optional[AnalysisStore] = None,
    ):
        self._decoder = decoder if decoder is not None else get_document_decoder()
        self._industry = industry if industry is not None else get_industry_service()
        self._reports = reports if reports is not None else get_credit_report_service()
        self._store = store if store is not None else get_analysis_store()

    def analyze_document(
        self,
        content: bytes,
        content_type: Optional[str],
        filename: Optional[str] = None,
    ) -> StoredAnalysis:
        """
        Analyze an uploaded file and store the result.

        Raises:
            DecodeError, UnsupportedDocumentError: The file could not be read.
            RequiredFieldMissingError, ValidationError: No usable statement.
        """
        logger.info("Analyzing document", filename=filename, content_type=content_type, size=len(content))

        decoded = self._decoder.decode(content, content_type, filename)
        diagnostics = Diagnostics(callback=log_diagnostic)
        analysis = analyze(decoded.source, decoded.source_kind, diagnostics)

        sector_description = self._industry.describe(analysis.record.okved)
        report = self._reports.generate(analysis, sector_description)

        stored = self._store.save(analysis, report, sector_description, filename=filename)
        logger.info(
            "Document analyzed",
            analysis_id=stored.id,
            balanced=analysis.balance_check.is_balanced,
            risk_level=report.risk_level.value,
            warnings=len(diagnostics.warnings),
        )
        return stored


# Singleton instance
_analysis_service: Optional[AnalysisService] = None


def get_analysis_service() -> AnalysisService:
    """Get singleton AnalysisService instance."""
    global _analysis_service
    if _analysis_service is None:
        _analysis_service = AnalysisService()
    return _analysis_service
