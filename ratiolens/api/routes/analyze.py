"""
Analysis API routes.

Provides endpoints for uploading a statement, fetching stored analyses and
downloading the sample template.
"""
from decimal import Decimal
from typing import Dict, Optional

import structlog
from fastapi import APIRouter, Depends, File, Response, UploadFile
from fastapi.concurrency import run_in_threadpool

from ratiolens.config import get_settings
from ratiolens.exceptions import FileTooLargeError, InvalidFileTypeError
from ratiolens.schemas.analysis import (
    AnalysisListResponse,
    AnalysisResponse,
    AnalysisSummary,
    BalanceCheckResponse,
    ErrorResponse,
    RatioResponse,
)
from ratiolens.services.analysis_service import AnalysisService, get_analysis_service
from ratiolens.services.analysis_store import AnalysisStore, StoredAnalysis, get_analysis_store
from ratiolens.services.document_decoder import EXTENSIONS, resolve_format
from ratiolens.services.template_service import TEMPLATE_FILENAME, XLSX_CONTENT_TYPE, build_sample_template

logger = structlog.get_logger(__name__)

router = APIRouter()

METADATA_FIELDS = {"okved", "company_name"}


def validate_upload(file: UploadFile) -> int:
    """
    Validate type and size of an uploaded file.

    Returns:
        File size in bytes.

    Raises:
        InvalidFileTypeError: Neither content type nor extension is supported.
        FileTooLargeError: File exceeds the configured limit.
    """
    if resolve_format(file.content_type, file.filename) is None:
        raise InvalidFileTypeError(file.content_type or "", sorted(EXTENSIONS))

    file.file.seek(0, 2)
    size = file.file.tell()
    file.file.seek(0)

    max_size = get_settings().max_upload_size_bytes
    if size > max_size:
        raise FileTooLargeError(size, max_size)
    return size


def _to_float(value: Optional[Decimal]) -> Optional[float]:
    return float(value) if value is not None else None


def to_analysis_response(stored: StoredAnalysis) -> AnalysisResponse:
    """Convert a stored analysis to its API representation."""
    analysis = stored.analysis
    record = analysis.record
    check = analysis.balance_check

    data: Dict[str, Optional[float]] = {
        name: _to_float(value)
        for name, value in record.model_dump(exclude=METADATA_FIELDS).items()
    }
    ratios = {
        key: RatioResponse(
            key=item.key,
            title=item.title,
            value=item.value,
            status=item.status,
            benchmark=item.benchmark,
            description=item.description,
            formula=item.formula,
        )
        for key, item in analysis.assessments.items()
    }

    return AnalysisResponse(
        id=stored.id,
        filename=stored.filename,
        created_at=stored.created_at,
        company_name=record.company_name,
        okved=record.okved,
        data=data,
        ratios=ratios,
        equity_maneuverability=analysis.ratios.equity_maneuverability,
        balance_check=BalanceCheckResponse(
            total_assets=float(check.total_assets),
            passive=float(check.passive),
            difference=float(check.difference),
            difference_percent=check.difference_percent,
            is_balanced=check.is_balanced,
        ),
        sector_description=stored.sector_description,
        report=stored.report,
        warnings=[
            {"event": entry.event, **entry.context}
            for entry in analysis.diagnostics
            if entry.level == "warning"
        ],
    )


@router.post(
    "/analyze",
    response_model=AnalysisResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid file or data"},
        413: {"model": ErrorResponse, "description": "File too large"},
        422: {"model": ErrorResponse, "description": "Document could not be analyzed"},
    },
    summary="Analyze a financial statement",
    description="Upload an Excel, CSV, Word, PDF or text statement and get ratios plus a credit report.",
)
async def analyze_statement(
    file: UploadFile = File(..., description="Statement file"),
    service: AnalysisService = Depends(get_analysis_service),
) -> AnalysisResponse:
    size = validate_upload(file)
    logger.info("File uploaded", filename=file.filename, content_type=file.content_type, size=size)

    content = await file.read()
    stored = await run_in_threadpool(service.analyze_document, content, file.content_type, file.filename)
    return to_analysis_response(stored)


@router.get(
    "/analyses/{analysis_id}",
    response_model=AnalysisResponse,
    responses={404: {"model": ErrorResponse, "description": "Analysis not found"}},
    summary="Get a stored analysis",
)
async def get_analysis(
    analysis_id: str,
    store: AnalysisStore = Depends(get_analysis_store),
) -> AnalysisResponse:
    return to_analysis_response(store.get(analysis_id))


@router.get(
    "/analyses",
    response_model=AnalysisListResponse,
    summary="List stored analyses",
)
async def list_analyses(store: AnalysisStore = Depends(get_analysis_store)) -> AnalysisListResponse:
    """List analyses of this process, oldest first."""
    results = [
        AnalysisSummary(
            id=stored.id,
            filename=stored.filename,
            created_at=stored.created_at,
            company_name=stored.analysis.record.company_name,
            risk_level=stored.report.risk_level,
        )
        for stored in store.list()
    ]
    return AnalysisListResponse(count=len(results), results=results)


@router.get(
    "/template",
    summary="Download the sample template",
    response_class=Response,
)
async def download_template() -> Response:
    return Response(
        content=build_sample_template(),
        media_type=XLSX_CONTENT_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{TEMPLATE_FILENAME}"'},
    )
