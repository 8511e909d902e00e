"""
Pydantic schemas for analysis API endpoints.

Defines response models for analyzing uploads and listing stored analyses.
"""
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from ratiolens.engine.models import RatioStatus
from ratiolens.schemas.report import CreditReport, RiskLevel


class RatioResponse(BaseModel):
    """A ratio with its classification."""

    key: str = Field(..., description="Ratio identifier")
    title: str = Field(..., description="Display title")
    value: float = Field(..., description="Computed value")
    status: RatioStatus = Field(..., description="excellent / good / warning / critical")
    benchmark: str = Field(..., description="Benchmark text")
    description: str = Field(..., description="What the ratio shows")
    formula: str = Field(..., description="Formula text")


class BalanceCheckResponse(BaseModel):
    """Outcome of the Assets = Equity + Liabilities check."""

    total_assets: float
    passive: float = Field(..., description="Equity + total liabilities")
    difference: float
    difference_percent: float
    is_balanced: bool


class AnalysisResponse(BaseModel):
    """Response model for one analysis."""

    id: str = Field(..., description="Analysis identifier")
    filename: Optional[str] = Field(None, description="Original filename")
    created_at: datetime = Field(..., description="Analysis timestamp")
    company_name: Optional[str] = Field(None, description="Entity name found in the header")
    okved: Optional[str] = Field(None, description="Industry code found in the header")
    data: Dict[str, Optional[float]] = Field(..., description="Normalized financial statement fields")
    ratios: Dict[str, RatioResponse] = Field(..., description="Assessed ratios, absent ones omitted")
    equity_maneuverability: Optional[float] = Field(None, description="Equity maneuverability, not assessed")
    balance_check: BalanceCheckResponse
    sector_description: str = Field(..., description="Industry description used by the report")
    report: CreditReport
    warnings: List[Dict[str, Any]] = Field(default_factory=list, description="Non-fatal diagnostics")


class AnalysisSummary(BaseModel):
    """Short form of a stored analysis."""

    id: str
    filename: Optional[str] = None
    created_at: datetime
    company_name: Optional[str] = None
    risk_level: RiskLevel


class AnalysisListResponse(BaseModel):
    """Response model for listing analyses."""

    count: int
    results: List[AnalysisSummary]


class HealthResponse(BaseModel):
    status: str
    version: str
    timestamp: datetime
    llm_configured: bool = Field(..., description="Whether an OpenAI API key is configured")


class ErrorResponse(BaseModel):
    """Response model for API errors."""

    error: bool = True
    error_code: str = Field(..., description="Error code, e.g. RL-201")
    message: str = Field(..., description="Error message")
    details: Optional[Dict[str, Any]] = Field(None, description="Additional error details")
