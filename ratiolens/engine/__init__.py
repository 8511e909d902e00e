"""
RatioLens Engine - financial statement extraction and ratio analysis.

Turns loosely formatted statement text (document lines or spreadsheet rows)
into a validated FinancialStatementRecord, then derives and classifies ratios.

Key Principles:
1. Most structured layout first, statutory codes as the floor
2. Exact synonym matches always beat partial ones
3. Correct and continue: an imbalance is reported, not rejected
4. No I/O and no process-wide logging; diagnostics go to an injected sink
"""

from ratiolens.engine.models import (
    BalanceCheck,
    Diagnostic,
    Diagnostics,
    FinancialStatementRecord,
    RatioAssessment,
    RatioSet,
    RatioStatus,
    SourceKind,
    StatementAnalysis,
)
from ratiolens.engine.pipeline import analyze, assess, compute_ratios, extract, normalize
from ratiolens.engine.statutory import STATUTORY_CODES, STATUTORY_TABLE_VERSION

__version__ = "1.0.0"
__all__ = [
    "analyze",
    "assess",
    "compute_ratios",
    "extract",
    "normalize",
    "BalanceCheck",
    "Diagnostic",
    "Diagnostics",
    "FinancialStatementRecord",
    "RatioAssessment",
    "RatioSet",
    "RatioStatus",
    "SourceKind",
    "StatementAnalysis",
    "STATUTORY_CODES",
    "STATUTORY_TABLE_VERSION",
]
