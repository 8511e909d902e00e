"""
Pydantic schemas for the credit report.
"""
from enum import Enum
from typing import List

from pydantic import BaseModel, Field


class RiskLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class ReportSource(str, Enum):
    LLM = "llm"
    RULES = "rules"


class IndustrySector(BaseModel):
    """Industry context of the borrower."""

    description: str = Field(..., description="Sector description")
    market_conditions: str = Field("", description="Market conditions, empty when unknown")


class SectionAnalysis(BaseModel):
    analysis: str
    conclusion: str


class FinancialCondition(BaseModel):
    """Analysis of the three ratio groups."""

    liquidity: SectionAnalysis
    stability: SectionAnalysis
    profitability: SectionAnalysis


class Recommendations(BaseModel):
    items: List[str] = Field(default_factory=list)
    credit_decision: str = Field(..., description="Approve / decline / approve with conditions")
    comment: str = Field(..., description="Overall creditworthiness comment")


class CreditReport(BaseModel):
    """Advisory narrative credit report."""

    industry_sector: IndustrySector
    financial_condition: FinancialCondition
    strengths: List[str] = Field(default_factory=list)
    weaknesses: List[str] = Field(default_factory=list)
    recommendations: Recommendations
    risk_level: RiskLevel
    source: ReportSource = Field(ReportSource.RULES, description="Which path produced the report")
