"""
Statement validator/normalizer.

Enforces the accounting identity Assets = Equity + Liabilities:
total_liabilities is always recomputed from its components, then the balance
is checked against a relative tolerance. An imbalance is reported, never
rejected.
"""

from decimal import Decimal
from typing import Optional

from ratiolens.engine.models import BalanceCheck, Diagnostics, FinancialStatementRecord

# Relative tolerance of the balance check (1% of total assets)
BALANCE_TOLERANCE = Decimal("0.01")


def recompute_total_liabilities(record: FinancialStatementRecord) -> Decimal:
    return record.long_term_debt + record.current_liabilities


def check_balance(
    record: FinancialStatementRecord,
    tolerance: Decimal = BALANCE_TOLERANCE,
) -> BalanceCheck:
    """Compare total assets with equity + total liabilities."""
    passive = record.equity + record.total_liabilities
    difference = abs(record.total_assets - passive)
    return BalanceCheck(
        total_assets=record.total_assets,
        passive=passive,
        difference=difference,
        tolerance=abs(record.total_assets) * tolerance,
    )


def normalize(
    record: FinancialStatementRecord,
    diagnostics: Optional[Diagnostics] = None,
    tolerance: Decimal = BALANCE_TOLERANCE,
) -> FinancialStatementRecord:
    """
    Return a copy of the record with total_liabilities recomputed.

    Args:
        record: Record as resolved from the source.
        diagnostics: Optional sink for the balance check outcome.
        tolerance: Relative tolerance of the balance check.

    Returns:
        The normalized record. The parsed total_liabilities is discarded.
    """
    total_liabilities = recompute_total_liabilities(record)
    normalized = record.model_copy(update={"total_liabilities": total_liabilities})

    if diagnostics is not None:
        if record.total_liabilities != total_liabilities:
            diagnostics.debug(
                "total_liabilities_recomputed",
                parsed=str(record.total_liabilities),
                recomputed=str(total_liabilities),
            )

        check = check_balance(normalized, tolerance)
        if check.is_balanced:
            diagnostics.debug("balance_check_passed", difference=str(check.difference))
        else:
            diagnostics.warning(
                "balance_mismatch",
                total_assets=str(check.total_assets),
                passive=str(check.passive),
                difference=str(check.difference),
                difference_percent=round(check.difference_percent, 2),
            )

    return normalized
