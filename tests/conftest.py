"""
Pytest configuration and fixtures.
"""
from decimal import Decimal
from typing import Callable, Generator, List, Tuple

import pytest
from fastapi.testclient import TestClient

from ratiolens.config import get_settings
from ratiolens.engine.models import FinancialStatementRecord
from ratiolens.services.template_service import TEMPLATE_HEADER, TEMPLATE_ROWS


@pytest.fixture(autouse=True)
def offline_settings(monkeypatch) -> Generator[None, None, None]:
    """Run every test without an OpenAI key or Sentry DSN."""
    monkeypatch.setenv("OPENAI_API_KEY", "")
    monkeypatch.setenv("SENTRY_DSN", "")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def statement_lines() -> List[str]:
    """Balance sheet exported as label / code / value lines."""
    return [
        "Бухгалтерский баланс",
        'Организация: ООО "Ромашка"',
        "по ОКВЭД 2 47.11",
        "Наименование показателя",
        "Код",
        "Нематериальные активы",
        "1110",
        "5 000",
        "Итого по разделу I",
        "1100",
        "150 000",
        "Запасы",
        "1210",
        "35 000",
        "Дебиторская задолженность",
        "1230",
        "50 000",
        "Финансовые вложения (за исключением денежных эквивалентов)",
        "1240",
        "20 000",
        "Денежные средства и денежные эквиваленты",
        "1250",
        "45 000",
        "Итого по разделу II",
        "1200",
        "150 000",
        "БАЛАНС",
        "1600",
        "300 000",
        "Итого по разделу III",
        "1300",
        "180 000",
        "Итого по разделу IV",
        "1400",
        "60 000",
        "Заемные средства",
        "1510",
        "15 000",
        "Краткосрочные обязательства",
        "1500",
        "60 000",
        "БАЛАНС",
        "1700",
        "300 000",
    ]


@pytest.fixture
def single_line_statement() -> List[str]:
    """Balance sheet exported with label, code and periods on one line."""
    return [
        "Бухгалтерский баланс на 31 декабря 2023 г.",
        "Организация «Вектор Плюс»",
        "Итого по разделу II 1200 150000 140000",
        "Запасы 1210 35000",
        "Дебиторская задолженность 1230 50000 48000",
        "Краткосрочные финансовые вложения 1240 20000",
        "Денежные средства 1250 45000",
        "БАЛАНС 1600 300000",
        "Итого по разделу III 1300 180000",
        "Итого по разделу IV 1400 60000",
        "Заемные средства 1510 15000",
        "Краткосрочные обязательства 1500 60000",
    ]


@pytest.fixture
def statement_rows() -> List[Tuple]:
    """The sample template as spreadsheet rows."""
    return [TEMPLATE_HEADER] + list(TEMPLATE_ROWS)


@pytest.fixture
def make_record() -> Callable[..., FinancialStatementRecord]:
    """Factory for a balanced record; keyword arguments override fields."""

    def _make(**overrides) -> FinancialStatementRecord:
        values = {
            "current_assets": Decimal("150000"),
            "cash_and_equivalents": Decimal("45000"),
            "short_term_investments": Decimal("20000"),
            "accounts_receivable": Decimal("50000"),
            "inventory": Decimal("35000"),
            "total_assets": Decimal("300000"),
            "current_liabilities": Decimal("60000"),
            "short_term_debt": Decimal("15000"),
            "total_liabilities": Decimal("120000"),
            "equity": Decimal("180000"),
            "long_term_debt": Decimal("60000"),
        }
        values.update(overrides)
        return FinancialStatementRecord(**values)

    return _make


@pytest.fixture
def analysis_store():
    from ratiolens.services.analysis_store import AnalysisStore

    return AnalysisStore()


@pytest.fixture
def client(analysis_store) -> Generator[TestClient, None, None]:
    """Create a test client wired to offline services and a fresh store."""
    from ratiolens.main import app
    from ratiolens.services.analysis_service import AnalysisService, get_analysis_service
    from ratiolens.services.analysis_store import get_analysis_store
    from ratiolens.services.credit_report import CreditReportService
    from ratiolens.services.document_decoder import DocumentDecoder
    from ratiolens.services.industry_service import IndustryService

    service = AnalysisService(
        decoder=DocumentDecoder(),
        industry=IndustryService(),
        reports=CreditReportService(enabled=False),
        store=analysis_store,
    )
    app.dependency_overrides[get_analysis_service] = lambda: service
    app.dependency_overrides[get_analysis_store] = lambda: analysis_store

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
