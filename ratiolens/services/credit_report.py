"""
Credit report service.

Produces the advisory narrative report for an analysis. The rule-based
report is always available; the LLM report (OpenAI JSON mode) is used only
when configured, and any failure or unusable answer falls back to the rules.
"""
import json
from typing import Any, Dict, List, Optional

import structlog
from openai import OpenAI

from ratiolens.config import get_settings
from ratiolens.engine.models import RatioSet, StatementAnalysis
from ratiolens.exceptions import ExternalServiceError
from ratiolens.schemas.report import (
    CreditReport,
    FinancialCondition,
    IndustrySector,
    Recommendations,
    ReportSource,
    RiskLevel,
    SectionAnalysis,
)

logger = structlog.get_logger(__name__)

CREDIT_DECISIONS = {
    RiskLevel.LOW: "✅ Одобрить",
    RiskLevel.MEDIUM: "⚠️ Условно одобрить",
    RiskLevel.HIGH: "❌ Отклонить",
}


def _fmt(value: float) -> str:
    return f"{value:.2f}"


def _money(value: float) -> str:
    return f"{value:,.0f}".replace(",", " ")


def _percent(value: float) -> str:
    return f"{value * 100:.2f}%"


# =============================================================================
# Risk scoring
# =============================================================================

def risk_score(ratios: RatioSet) -> int:
    """Score liquidity, autonomy, debt load and working capital."""
    score = 0

    if ratios.current_ratio >= 2.0:
        score += 2
    elif ratios.current_ratio >= 1.5:
        score += 1
    elif ratios.current_ratio < 1.0:
        score -= 2

    if ratios.equity_ratio >= 0.6:
        score += 2
    elif ratios.equity_ratio >= 0.5:
        score += 1
    elif ratios.equity_ratio < 0.3:
        score -= 2

    if ratios.debt_ratio < 0.3:
        score += 1
    elif ratios.debt_ratio > 0.6:
        score -= 1

    if ratios.working_capital > 0:
        score += 1
    else:
        score -= 2

    return score


def determine_risk_level(ratios: RatioSet) -> RiskLevel:
    score = risk_score(ratios)
    if score >= 4:
        return RiskLevel.LOW
    if score <= 0:
        return RiskLevel.HIGH
    return RiskLevel.MEDIUM


# =============================================================================
# Rule-based report
# =============================================================================

def _profitability_metrics(ratios: RatioSet) -> List[str]:
    metrics = []
    if ratios.roa is not None:
        metrics.append(f"ROA {_percent(ratios.roa)}")
    if ratios.roe is not None:
        metrics.append(f"ROE {_percent(ratios.roe)}")
    if ratios.ros is not None:
        metrics.append(f"ROS {_percent(ratios.ros)}")
    return metrics


def _liquidity_section(r: RatioSet) -> SectionAnalysis:
    current_note = (
        "(выше нормы ≥2.0)" if r.current_ratio >= 2.0
        else "(ниже нормы, но приемлемо)" if r.current_ratio >= 1.0
        else "(значительно ниже нормы)"
    )
    quick_note = "(соответствует норме)" if r.quick_ratio >= 1.0 else "(ниже нормы ≥1.0)"
    cash_note = "(соответствует норме)" if r.cash_ratio >= 0.2 else "(ниже нормы ≥0.2)"
    if r.working_capital > 0:
        wc_note = (f"Положительный оборотный капитал {_money(r.working_capital)} "
                   "обеспечивает способность погашать текущие обязательства.")
    else:
        wc_note = "Отрицательный оборотный капитал свидетельствует о проблемах с краткосрочной платежеспособностью."

    analysis = (
        f"Коэффициент текущей ликвидности составляет {_fmt(r.current_ratio)} {current_note}, "
        f"быстрой ликвидности {_fmt(r.quick_ratio)} {quick_note}, "
        f"абсолютной ликвидности {_fmt(r.cash_ratio)} {cash_note}. {wc_note}"
    )
    if r.current_ratio >= 2.0 and r.quick_ratio >= 1.0:
        conclusion = "Ликвидность на высоком уровне, компания способна своевременно погашать обязательства"
    elif r.current_ratio >= 1.0:
        conclusion = "Ликвидность удовлетворительная, требуется мониторинг"
    else:
        conclusion = "Ликвидность низкая, существуют риски невыполнения обязательств"
    return SectionAnalysis(analysis=analysis, conclusion=conclusion)


def _stability_section(r: RatioSet) -> SectionAnalysis:
    equity_note = "(выше нормы ≥0.5)" if r.equity_ratio >= 0.5 else "(ниже нормативного значения)"
    de_note = "(в пределах нормы <1.0)" if r.debt_to_equity_ratio < 1.0 else "(превышает норму)"
    analysis = (
        f"Коэффициент автономии {_fmt(r.equity_ratio)} {equity_note}, "
        f"соотношение долга к капиталу {_fmt(r.debt_to_equity_ratio)} {de_note}, "
        f"финансовый рычаг {_fmt(r.financial_leverage_ratio)}. "
        f"Доля заемных средств составляет {r.debt_ratio * 100:.1f}% от общей суммы активов."
    )
    if r.equity_ratio >= 0.5:
        conclusion = "Финансовая устойчивость высокая, компания финансово независима"
    elif r.equity_ratio >= 0.3:
        conclusion = "Финансовая устойчивость средняя, умеренная зависимость от кредиторов"
    else:
        conclusion = "Финансовая устойчивость низкая, высокая зависимость от заемных средств"
    return SectionAnalysis(analysis=analysis, conclusion=conclusion)


def _profitability_section(r: RatioSet) -> SectionAnalysis:
    metrics = _profitability_metrics(r)
    if not metrics:
        return SectionAnalysis(
            analysis=(
                "Данные о финансовых результатах (выручка, прибыль) отсутствуют в предоставленной "
                "отчетности. Для полной оценки кредитоспособности необходим отчет о финансовых результатах."
            ),
            conclusion="Невозможно оценить без данных о прибыли и убытках",
        )

    profitable = r.roa is not None and r.roa > 0
    analysis = (
        f"Показатели рентабельности: {', '.join(metrics)}. "
        + ("Компания генерирует прибыль от использования активов." if profitable
           else "Рентабельность требует улучшения.")
    )
    if r.roa is not None and r.roa > 0.05:
        conclusion = "Рентабельность на приемлемом уровне"
    elif profitable:
        conclusion = "Рентабельность низкая, требуется оптимизация"
    else:
        conclusion = "Убыточная деятельность, высокие финансовые риски"
    return SectionAnalysis(analysis=analysis, conclusion=conclusion)


def _industry_sector(analysis: StatementAnalysis, sector_description: Optional[str]) -> IndustrySector:
    okved = analysis.record.okved
    if sector_description and okved:
        description = (
            f"{sector_description}. Для детальной оценки отраслевых рисков требуется "
            "дополнительная информация о рынке и конкурентах."
        )
    elif okved:
        description = (
            f"Компания осуществляет деятельность в соответствии с ОКВЭД {okved}. Для детальной оценки "
            "отраслевых рисков требуется дополнительная информация о рынке и конкурентах."
        )
    else:
        description = (
            "Информация об отрасли не указана в документах. Рекомендуется предоставить данные о виде "
            "экономической деятельности (ОКВЭД) для оценки отраслевых рисков."
        )
    return IndustrySector(description=description, market_conditions="")


def build_fallback_report(
    analysis: StatementAnalysis,
    sector_description: Optional[str] = None,
) -> CreditReport:
    """
    Build the rule-based credit report.

    Args:
        analysis: Pipeline output.
        sector_description: Sector text from the industry lookup (either path).

    Returns:
        CreditReport with source=rules.
    """
    r = analysis.ratios
    risk_level = determine_risk_level(r)

    strengths: List[str] = []
    weaknesses: List[str] = []
    recommendations: List[str] = []

    if r.current_ratio >= 2.0:
        strengths.append(f"Отличная текущая ликвидность (коэффициент {_fmt(r.current_ratio)}), "
                         "предприятие способно погашать краткосрочные обязательства")
    elif r.current_ratio >= 1.0:
        strengths.append(f"Удовлетворительная текущая ликвидность (коэффициент {_fmt(r.current_ratio)})")
    else:
        weaknesses.append(f"Низкая текущая ликвидность (коэффициент {_fmt(r.current_ratio)} ниже нормы)")
        recommendations.append("Увеличить оборотные активы или сократить краткосрочные обязательства "
                               "для улучшения ликвидности")

    if r.quick_ratio >= 1.0:
        strengths.append(f"Высокая быстрая ликвидность (коэффициент {_fmt(r.quick_ratio)}), достаточно "
                         "ликвидных активов для покрытия текущих обязательств")
    elif r.quick_ratio < 0.7:
        weaknesses.append(f"Недостаточная быстрая ликвидность (коэффициент {_fmt(r.quick_ratio)})")

    if r.equity_ratio >= 0.5:
        strengths.append(f"Высокая финансовая независимость (коэффициент автономии {_fmt(r.equity_ratio)}), "
                         "низкая зависимость от заемных средств")
    elif r.equity_ratio >= 0.3:
        strengths.append(f"Средняя финансовая устойчивость (коэффициент автономии {_fmt(r.equity_ratio)})")
    else:
        weaknesses.append(f"Низкий коэффициент автономии ({_fmt(r.equity_ratio)}), "
                          "высокая зависимость от заемных средств")
        recommendations.append("Укрепить капитальную базу компании для повышения финансовой устойчивости")

    if r.debt_to_equity_ratio < 1.0:
        strengths.append(f"Умеренная долговая нагрузка (соотношение долга к капиталу {_fmt(r.debt_to_equity_ratio)})")
    elif r.debt_to_equity_ratio >= 2.0:
        weaknesses.append(f"Высокая долговая нагрузка (соотношение долга к капиталу {_fmt(r.debt_to_equity_ratio)})")
        recommendations.append("Рассмотреть возможность снижения долговой нагрузки")

    if r.working_capital > 0:
        strengths.append(f"Положительный оборотный капитал ({_money(r.working_capital)}) "
                         "обеспечивает финансовую гибкость")
    else:
        weaknesses.append(f"Отрицательный оборотный капитал ({_money(r.working_capital)}) "
                          "указывает на дефицит оборотных средств")
        recommendations.append("Срочно пересмотреть структуру активов и обязательств")

    if r.roa is not None and r.roa > 0.05:
        strengths.append(f"Положительная рентабельность активов (ROA {_percent(r.roa)})")
    elif r.roa is not None and r.roa < 0:
        weaknesses.append(f"Отрицательная рентабельность активов (ROA {_percent(r.roa)})")

    if not recommendations:
        recommendations.append("Продолжать мониторинг финансовых показателей для поддержания стабильности")
    recommendations.append("Обеспечить своевременное предоставление финансовой отчетности")
    recommendations.append("Поддерживать коэффициент текущей ликвидности не ниже 1.5")

    if not strengths:
        strengths.append("Финансовая отчетность предоставлена в полном объеме")
    if not weaknesses:
        weaknesses.append("Требуется дополнительный анализ отраслевых рисков")

    if risk_level is RiskLevel.LOW:
        comment = (f"Компания демонстрирует устойчивое финансовое положение с коэффициентом текущей "
                   f"ликвидности {_fmt(r.current_ratio)} и коэффициентом автономии {_fmt(r.equity_ratio)}. "
                   "Кредитные риски оцениваются как низкие.")
    elif risk_level is RiskLevel.MEDIUM:
        comment = ("Финансовое состояние компании оценивается как удовлетворительное. Рекомендуется "
                   "кредитование с дополнительным обеспечением и регулярным мониторингом показателей "
                   "ликвидности и финансовой устойчивости.")
    else:
        comment = ("Финансовые показатели компании указывают на высокие кредитные риски. Коэффициенты "
                   "ликвидности и финансовой устойчивости ниже нормативных значений. Рекомендуется "
                   "отклонить кредитную заявку до улучшения финансового положения.")

    return CreditReport(
        industry_sector=_industry_sector(analysis, sector_description),
        financial_condition=FinancialCondition(
            liquidity=_liquidity_section(r),
            stability=_stability_section(r),
            profitability=_profitability_section(r),
        ),
        strengths=strengths,
        weaknesses=weaknesses,
        recommendations=Recommendations(
            items=recommendations,
            credit_decision=CREDIT_DECISIONS[risk_level],
            comment=comment,
        ),
        risk_level=risk_level,
        source=ReportSource.RULES,
    )


# =============================================================================
# LLM report
# =============================================================================

def _text(value: Any, default: str) -> str:
    return value if isinstance(value, str) and value.strip() else default


def _strings(value: Any, default: List[str]) -> List[str]:
    if not isinstance(value, list):
        return default
    items = [item for item in value if isinstance(item, str) and item.strip()]
    return items or default


def _section(data: Any, default: SectionAnalysis) -> SectionAnalysis:
    data = data if isinstance(data, dict) else {}
    return SectionAnalysis(
        analysis=_text(data.get("analysis"), default.analysis),
        conclusion=_text(data.get("conclusion"), default.conclusion),
    )


def merge_llm_report(data: Dict[str, Any], fallback: CreditReport) -> CreditReport:
    """
    Build a report from the LLM JSON answer.

    Every missing or mistyped part is taken from the rule-based report.
    """
    sector = data.get("industry_sector") if isinstance(data.get("industry_sector"), dict) else {}
    condition = data.get("financial_condition") if isinstance(data.get("financial_condition"), dict) else {}
    recs = data.get("recommendations") if isinstance(data.get("recommendations"), dict) else {}

    try:
        risk_level = RiskLevel(data.get("risk_level"))
    except ValueError:
        risk_level = fallback.risk_level

    return CreditReport(
        industry_sector=IndustrySector(
            description=_text(sector.get("description"), fallback.industry_sector.description),
            market_conditions=_text(sector.get("market_conditions"), ""),
        ),
        financial_condition=FinancialCondition(
            liquidity=_section(condition.get("liquidity"), fallback.financial_condition.liquidity),
            stability=_section(condition.get("stability"), fallback.financial_condition.stability),
            profitability=_section(condition.get("profitability"), fallback.financial_condition.profitability),
        ),
        strengths=_strings(data.get("strengths"), fallback.strengths),
        weaknesses=_strings(data.get("weaknesses"), fallback.weaknesses),
        recommendations=Recommendations(
            items=_strings(recs.get("items"), fallback.recommendations.items),
            credit_decision=_text(recs.get("credit_decision"), CREDIT_DECISIONS[risk_level]),
            comment=_text(recs.get("comment"), fallback.recommendations.comment),
        ),
        risk_level=risk_level,
        source=ReportSource.LLM,
    )


class CreditReportService:
    """
    Credit report generator.

    Uses OpenAI JSON mode when an API key is configured and LLM reports are
    enabled; otherwise, and on any failure, the rule-based report.
    """

    SYSTEM_PROMPT = (
        "Вы опытный финансовый аналитик, специализирующийся на оценке кредитоспособности "
        "юридических лиц. Отвечайте строго в формате JSON и только на русском языке."
    )
    MAX_TOKENS = 4096
    TEMPERATURE = 0.2

    RESPONSE_FORMAT = """{
  "industry_sector": {"description": "...", "market_conditions": "..."},
  "financial_condition": {
    "liquidity": {"analysis": "...", "conclusion": "..."},
    "stability": {"analysis": "...", "conclusion": "..."},
    "profitability": {"analysis": "...", "conclusion": "..."}
  },
  "strengths": ["..."],
  "weaknesses": ["..."],
  "recommendations": {"items": ["..."], "credit_decision": "...", "comment": "..."},
  "risk_level": "low|medium|high"
}"""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        timeout: Optional[float] = None,
        enabled: Optional[bool] = None,
        client: Optional[OpenAI] = None,
    ):
        settings = get_settings()
        self._model = model or settings.openai_model
        self._timeout = timeout if timeout is not None else settings.report_timeout_seconds
        enabled = settings.enable_llm_report if enabled is None else enabled

        self._client = client
        key = api_key or settings.openai_api_key
        if self._client is None and key:
            self._client = OpenAI(api_key=key, timeout=self._timeout, max_retries=0)
        if not enabled:
            self._client = None

    @property
    def llm_enabled(self) -> bool:
        return self._client is not None

    def _build_prompt(self, analysis: StatementAnalysis, sector_description: Optional[str]) -> str:
        record = analysis.record
        lines = ["Подготовьте банковский кредитный отчет о финансовом состоянии компании."]
        if record.company_name:
            lines.append(f"Компания: {record.company_name}")
        lines.append(f"Отрасль: {sector_description or 'не указана в документах'}")

        lines.append("")
        lines.append("ФИНАНСОВЫЕ ДАННЫЕ:")
        for name in (
            "current_assets", "cash_and_equivalents", "short_term_investments", "accounts_receivable",
            "inventory", "total_assets", "current_liabilities", "total_liabilities", "equity",
            "long_term_debt", "revenue", "net_income",
        ):
            value = getattr(record, name)
            if value is not None:
                lines.append(f"- {name}: {_money(float(value))}")

        lines.append("")
        lines.append("РАССЧИТАННЫЕ КОЭФФИЦИЕНТЫ:")
        for assessment in analysis.assessments.values():
            lines.append(
                f"- {assessment.title}: {_fmt(assessment.value)} "
                f"(норма {assessment.benchmark}, статус {assessment.status.value})"
            )

        lines.append("")
        lines.append("Ответ в формате JSON:")
        lines.append(self.RESPONSE_FORMAT)
        return "\n".join(lines)

    def generate(
        self,
        analysis: StatementAnalysis,
        sector_description: Optional[str] = None,
    ) -> CreditReport:
        """
        Generate the credit report.

        Args:
            analysis: Pipeline output.
            sector_description: Sector text from the industry lookup.

        Returns:
            CreditReport; never raises on LLM problems.
        """
        fallback = build_fallback_report(analysis, sector_description)
        if self._client is None:
            return fallback

        try:
            data = self._request_report(analysis, sector_description)
        except ExternalServiceError as e:
            logger.warning("LLM credit report failed, using rules", error=e.message)
            return fallback

        report = merge_llm_report(data, fallback)
        logger.info("LLM credit report generated", risk_level=report.risk_level.value)
        return report

    def _request_report(self, analysis: StatementAnalysis, sector_description: Optional[str]) -> Dict[str, Any]:
        """
        Request the report in JSON mode and decode the answer.

        Raises:
            ExternalServiceError: The call failed or the answer is not a JSON object.
        """
        try:
            response = self._client.chat.completions.create(
                model=self._model,
                messages=[
                    {"role": "system", "content": self.SYSTEM_PROMPT},
                    {"role": "user", "content": self._build_prompt(analysis, sector_description)},
                ],
                max_tokens=self.MAX_TOKENS,
                temperature=self.TEMPERATURE,
                response_format={"type": "json_object"},
                timeout=self._timeout,
            )
        except Exception as e:
            raise ExternalServiceError("openai", message=str(e)) from e

        content = response.choices[0].message.content if response.choices else None
        if not content:
            raise ExternalServiceError("openai", message="empty answer")

        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise ExternalServiceError("openai", message=f"invalid JSON: {e}") from e
        if not isinstance(data, dict):
            raise ExternalServiceError("openai", message="answer is not a JSON object")
        return data


# Singleton instance
_report_service: Optional[CreditReportService] = None


def get_credit_report_service() -> CreditReportService:
    """Get singleton CreditReportService instance."""
    global _report_service
    if _report_service is None:
        _report_service = CreditReportService()
    return _report_service
