"""
Ratio engine.

Computes liquidity, stability and profitability ratios from a normalized
record and classifies each against tiered benchmarks.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, Optional, Tuple

from ratiolens.engine.models import (
    FinancialStatementRecord,
    RatioAssessment,
    RatioSet,
    RatioStatus,
)


@dataclass(frozen=True)
class Benchmark:
    """Thresholds and texts for one ratio."""
    key: str
    title: str
    excellent: float
    good: float
    warning: float
    benchmark: str
    description: str
    formula: str
    reverse: bool = False


BENCHMARKS: Tuple[Benchmark, ...] = (
    Benchmark(
        key="current_ratio",
        title="Коэффициент текущей ликвидности",
        excellent=2.5, good=2.0, warning=1.5,
        benchmark="≥ 2.0",
        description="Способность компании погашать краткосрочные обязательства оборотными активами",
        formula="Ктл = Оборотные активы / Краткосрочные обязательства",
    ),
    Benchmark(
        key="quick_ratio",
        title="Коэффициент быстрой ликвидности",
        excellent=1.5, good=1.0, warning=0.8,
        benchmark="≥ 1.0",
        description="Способность быстро погасить краткосрочные обязательства ликвидными активами",
        formula="Кбл = (Оборотные активы - Запасы) / Краткосрочные обязательства",
    ),
    Benchmark(
        key="cash_ratio",
        title="Коэффициент абсолютной ликвидности",
        excellent=0.5, good=0.2, warning=0.1,
        benchmark="≥ 0.2",
        description="Способность погасить обязательства только за счет денежных средств",
        formula="Кал = (Денежные средства + Краткосрочные финансовые вложения) / Краткосрочные обязательства",
    ),
    Benchmark(
        key="debt_to_equity_ratio",
        title="Соотношение долга к капиталу",
        excellent=0.5, good=1.0, warning=1.5, reverse=True,
        benchmark="< 1.0",
        description="Соотношение заемного капитала к собственному",
        formula="Кзс = Обязательства / Собственный капитал",
    ),
    Benchmark(
        key="equity_ratio",
        title="Коэффициент автономии",
        excellent=0.6, good=0.5, warning=0.4,
        benchmark="≥ 0.5",
        description="Доля собственного капитала в общей сумме активов",
        formula="Ка = Собственный капитал / Активы",
    ),
    Benchmark(
        key="debt_ratio",
        title="Коэффициент задолженности",
        excellent=0.3, good=0.5, warning=0.6, reverse=True,
        benchmark="< 0.5",
        description="Доля заемного капитала в общей сумме активов",
        formula="Кз = Обязательства / Активы",
    ),
    Benchmark(
        key="financial_leverage_ratio",
        title="Финансовый рычаг",
        excellent=1.5, good=2.0, warning=2.5, reverse=True,
        benchmark="1.0 - 2.0",
        description="Показывает эффективность использования заемного капитала",
        formula="ФР = Активы / Собственный капитал",
    ),
    Benchmark(
        key="roa",
        title="Рентабельность активов (ROA)",
        excellent=0.10, good=0.05, warning=0.01,
        benchmark="≥ 5%",
        description="Прибыль, которую компания получает на каждый рубль активов",
        formula="ROA = Чистая прибыль / Активы",
    ),
    Benchmark(
        key="roe",
        title="Рентабельность капитала (ROE)",
        excellent=0.20, good=0.15, warning=0.05,
        benchmark="≥ 15%",
        description="Доходность вложений собственников компании",
        formula="ROE = Чистая прибыль / Собственный капитал",
    ),
    Benchmark(
        key="ros",
        title="Рентабельность продаж (ROS)",
        excellent=0.15, good=0.10, warning=0.05,
        benchmark="≥ 10%",
        description="Доля прибыли от продаж в выручке",
        formula="ROS = Прибыль от продаж / Выручка",
    ),
    Benchmark(
        key="gross_profit_margin",
        title="Рентабельность по валовой прибыли",
        excellent=0.40, good=0.25, warning=0.15,
        benchmark="≥ 25%",
        description="Доля валовой прибыли в выручке",
        formula="Рвп = Валовая прибыль / Выручка",
    ),
    Benchmark(
        key="net_profit_margin",
        title="Рентабельность по чистой прибыли",
        excellent=0.10, good=0.05, warning=0.01,
        benchmark="≥ 5%",
        description="Доля чистой прибыли в выручке",
        formula="Рчп = Чистая прибыль / Выручка",
    ),
)

WORKING_CAPITAL = Benchmark(
    key="working_capital",
    title="Оборотный капитал",
    excellent=0.0, good=0.0, warning=0.0,
    benchmark="> 0",
    description="Разница между оборотными активами и краткосрочными обязательствами",
    formula="ОК = Оборотные активы - Краткосрочные обязательства",
)

BENCHMARKS_BY_KEY: Dict[str, Benchmark] = {b.key: b for b in BENCHMARKS + (WORKING_CAPITAL,)}


def safe_ratio(numerator: Decimal, denominator: Decimal) -> float:
    """numerator / denominator, or 0.0 when the denominator is zero."""
    if denominator == 0:
        return 0.0
    return float(numerator / denominator)


def _optional_ratio(numerator: Optional[Decimal], denominator: Optional[Decimal]) -> Optional[float]:
    if numerator is None or denominator is None:
        return None
    return safe_ratio(numerator, denominator)


def compute_ratios(record: FinancialStatementRecord) -> RatioSet:
    """Compute every ratio of a normalized record."""
    r = record
    return RatioSet(
        current_ratio=safe_ratio(r.current_assets, r.current_liabilities),
        quick_ratio=safe_ratio(r.current_assets - r.inventory, r.current_liabilities),
        cash_ratio=safe_ratio(r.cash_and_equivalents + r.short_term_investments, r.current_liabilities),
        equity_ratio=safe_ratio(r.equity, r.total_assets),
        debt_ratio=safe_ratio(r.total_liabilities, r.total_assets),
        debt_to_equity_ratio=safe_ratio(r.total_liabilities, r.equity),
        financial_leverage_ratio=safe_ratio(r.total_assets, r.equity),
        working_capital=float(r.current_assets - r.current_liabilities),
        roa=_optional_ratio(r.net_income, r.total_assets),
        roe=_optional_ratio(r.net_income, r.equity),
        ros=_optional_ratio(r.operating_income, r.revenue),
        gross_profit_margin=_optional_ratio(r.gross_profit, r.revenue),
        net_profit_margin=_optional_ratio(r.net_income, r.revenue),
        equity_maneuverability=safe_ratio(r.equity - (r.total_assets - r.current_assets), r.equity),
    )


def classify(value: float, benchmark: Benchmark) -> RatioStatus:
    """
    Map a value onto the four status tiers.

    Forward ratios compare with >=, reverse ratios (lower is better) with <=.
    Boundaries are inclusive.
    """
    tiers = (
        (benchmark.excellent, RatioStatus.EXCELLENT),
        (benchmark.good, RatioStatus.GOOD),
        (benchmark.warning, RatioStatus.WARNING),
    )
    for threshold, status in tiers:
        if benchmark.reverse:
            if value <= threshold:
                return status
        elif value >= threshold:
            return status
    return RatioStatus.CRITICAL


def classify_working_capital(value: float) -> RatioStatus:
    return RatioStatus.EXCELLENT if value > 0 else RatioStatus.CRITICAL


def _assessment(benchmark: Benchmark, value: float, status: RatioStatus) -> RatioAssessment:
    return RatioAssessment(
        key=benchmark.key,
        title=benchmark.title,
        value=value,
        status=status,
        benchmark=benchmark.benchmark,
        description=benchmark.description,
        formula=benchmark.formula,
    )


def assess(ratio_set: RatioSet) -> Dict[str, RatioAssessment]:
    """
    Classify every present ratio.

    Absent profitability ratios get no assessment. Order follows BENCHMARKS,
    with working capital after the stability ratios.
    """
    assessments: Dict[str, RatioAssessment] = {}
    for benchmark in BENCHMARKS:
        value = getattr(ratio_set, benchmark.key)
        if value is None:
            continue
        assessments[benchmark.key] = _assessment(benchmark, value, classify(value, benchmark))
        if benchmark.key == "financial_leverage_ratio":
            wc = ratio_set.working_capital
            assessments[WORKING_CAPITAL.key] = _assessment(WORKING_CAPITAL, wc, classify_working_capital(wc))
    return assessments
