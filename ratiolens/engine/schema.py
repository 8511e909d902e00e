"""
Canonical financial-statement schema.

Each FieldSpec lists the synonyms (in priority order) under which a field may
appear in a source document: current and historical Russian wording, statutory
section headers, English and abbreviated variants. Synonyms are written in
plain text and normalized at lookup time.
"""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Dict, Optional, Tuple


class Section(str, Enum):
    """Statement section a field belongs to."""
    NON_CURRENT_ASSETS = "I"
    CURRENT_ASSETS = "II"
    CAPITAL_AND_RESERVES = "III"
    LONG_TERM_LIABILITIES = "IV"
    CURRENT_LIABILITIES = "V"
    BALANCE = "balance"
    INCOME_STATEMENT = "income_statement"


@dataclass(frozen=True)
class FieldSpec:
    """Resolution rules for one canonical field."""
    name: str
    synonyms: Tuple[str, ...]
    section: Section
    required: bool = False
    code: Optional[str] = None
    default: Optional[Decimal] = Decimal("0")


def _required(name: str, section: Section, code: Optional[str], *synonyms: str) -> FieldSpec:
    return FieldSpec(name=name, synonyms=synonyms, section=section, required=True, code=code, default=None)


def _detail(name: str, section: Section, code: str, *synonyms: str) -> FieldSpec:
    return FieldSpec(name=name, synonyms=synonyms, section=section, code=code, default=Decimal("0"))


def _income(name: str, code: str, *synonyms: str) -> FieldSpec:
    return FieldSpec(name=name, synonyms=synonyms, section=Section.INCOME_STATEMENT, code=code, default=None)


FIELD_SPECS: Tuple[FieldSpec, ...] = (
    # Main balance sheet fields
    _required(
        "current_assets", Section.CURRENT_ASSETS, "1200",
        "итого по разделу ii",
        "ii оборотные активы",
        "оборотные активы",
        "оборотные активы всего",
        "current assets",
        "текущие активы",
    ),
    _required(
        "cash_and_equivalents", Section.CURRENT_ASSETS, "1250",
        "денежные средства и денежные эквиваленты",
        "денежные средства",
        "cash and equivalents",
        "денежные средства и эквиваленты",
        "cash",
        "деньги",
    ),
    _required(
        "short_term_investments", Section.CURRENT_ASSETS, "1240",
        "финансовые вложения за исключением денежных эквивалентов",
        "финансовые вложения исключая денежные эквиваленты",
        "краткосрочные финансовые вложения",
        "финансовые вложения",
        "краткосрочные инвестиции",
        "short term investments",
        "кфв",
    ),
    _required(
        "accounts_receivable", Section.CURRENT_ASSETS, "1230",
        "дебиторская задолженность",
        "accounts receivable",
        "дебиторы",
        "дебиторка",
    ),
    _required(
        "inventory", Section.CURRENT_ASSETS, "1210",
        "запасы",
        "inventory",
        "товарноматериальные запасы",
        "товарно материальные запасы",
        "тмз",
    ),
    _required(
        "total_assets", Section.BALANCE, "1600",
        "баланс",
        "активы баланс",
        "всего активов",
        "активы всего",
        "total assets",
        "активы",
        "итого активов",
    ),
    _required(
        "current_liabilities", Section.CURRENT_LIABILITIES, "1500",
        "итого по разделу v",
        "v краткосрочные обязательства",
        "краткосрочные обязательства",
        "краткосрочные обязательства всего",
        "current liabilities",
        "текущие обязательства",
    ),
    _required(
        "short_term_debt", Section.CURRENT_LIABILITIES, "1510",
        "заемные средства",
        "краткосрочные заемные средства",
        "краткосрочный долг",
        "краткосрочные займы",
        "short term debt",
        "краткосрочные кредиты",
        "займы и кредиты",
    ),
    _required(
        "total_liabilities", Section.BALANCE, None,
        "всего обязательств",
        "обязательства всего",
        "total liabilities",
        "обязательства",
        "пассивы",
        "итого обязательств",
    ),
    _required(
        "equity", Section.CAPITAL_AND_RESERVES, "1300",
        "итого по разделу iii",
        "iii капитал и резервы",
        "капитал и резервы",
        "собственный капитал",
        "equity",
        "капитал",
        "собственные средства",
    ),
    _required(
        "long_term_debt", Section.LONG_TERM_LIABILITIES, "1400",
        "итого по разделу iv",
        "iv долгосрочные обязательства",
        "долгосрочные обязательства",
        "долгосрочные заемные средства",
        "долгосрочный долг",
        "долгосрочные займы",
        "long term debt",
        "долгосрочные кредиты",
    ),
    # I. Non-current assets
    _detail("intangible_assets", Section.NON_CURRENT_ASSETS, "1110",
            "нематериальные активы", "intangible assets"),
    _detail("research_results", Section.NON_CURRENT_ASSETS, "1120",
            "результаты исследований и разработок", "research and development results"),
    _detail("fixed_assets", Section.NON_CURRENT_ASSETS, "1150",
            "основные средства", "fixed assets", "property plant and equipment"),
    _detail("long_term_investments", Section.NON_CURRENT_ASSETS, "1170",
            "долгосрочные финансовые вложения", "long term investments"),
    _detail("deferred_tax_assets", Section.NON_CURRENT_ASSETS, "1180",
            "отложенные налоговые активы", "deferred tax assets"),
    _detail("other_non_current_assets", Section.NON_CURRENT_ASSETS, "1190",
            "прочие внеоборотные активы", "other non current assets"),
    _detail("non_current_assets", Section.NON_CURRENT_ASSETS, "1100",
            "итого по разделу i", "i внеоборотные активы", "внеоборотные активы", "non current assets"),
    # II. Current assets
    _detail("vat_on_purchases", Section.CURRENT_ASSETS, "1220",
            "налог на добавленную стоимость по приобретенным ценностям",
            "ндс по приобретенным ценностям", "vat on purchased assets"),
    _detail("other_current_assets", Section.CURRENT_ASSETS, "1260",
            "прочие оборотные активы", "other current assets"),
    # III. Capital and reserves
    _detail("authorized_capital", Section.CAPITAL_AND_RESERVES, "1310",
            "уставный капитал складочный капитал уставный фонд вклады товарищей",
            "уставный капитал", "authorized capital", "share capital"),
    _detail("treasury_shares", Section.CAPITAL_AND_RESERVES, "1320",
            "собственные акции выкупленные у акционеров", "собственные акции", "treasury shares"),
    _detail("revaluation_reserve", Section.CAPITAL_AND_RESERVES, "1340",
            "переоценка внеоборотных активов", "revaluation reserve"),
    _detail("additional_capital", Section.CAPITAL_AND_RESERVES, "1350",
            "добавочный капитал без переоценки", "добавочный капитал", "additional paid in capital"),
    _detail("reserve_capital", Section.CAPITAL_AND_RESERVES, "1360",
            "резервный капитал", "reserve capital"),
    _detail("retained_earnings", Section.CAPITAL_AND_RESERVES, "1370",
            "нераспределенная прибыль непокрытый убыток", "нераспределенная прибыль", "retained earnings"),
    # IV. Long-term liabilities
    _detail("long_term_borrowings", Section.LONG_TERM_LIABILITIES, "1410",
            "долгосрочные заемные средства", "long term borrowings"),
    _detail("deferred_tax_liabilities", Section.LONG_TERM_LIABILITIES, "1420",
            "отложенные налоговые обязательства", "deferred tax liabilities"),
    _detail("long_term_provisions", Section.LONG_TERM_LIABILITIES, "1430",
            "долгосрочные оценочные обязательства", "long term provisions"),
    _detail("other_long_term_liabilities", Section.LONG_TERM_LIABILITIES, "1450",
            "прочие долгосрочные обязательства", "other long term liabilities"),
    # V. Current liabilities
    _detail("accounts_payable", Section.CURRENT_LIABILITIES, "1520",
            "кредиторская задолженность", "accounts payable", "кредиторы"),
    _detail("deferred_income", Section.CURRENT_LIABILITIES, "1530",
            "доходы будущих периодов", "deferred income"),
    _detail("short_term_provisions", Section.CURRENT_LIABILITIES, "1540",
            "краткосрочные оценочные обязательства", "short term provisions"),
    _detail("other_current_liabilities", Section.CURRENT_LIABILITIES, "1550",
            "прочие краткосрочные обязательства", "other current liabilities"),
    # Income statement (form 0710002)
    _income("revenue", "2110",
            "выручка", "revenue", "доход", "выручка от продаж"),
    _income("gross_profit", "2100",
            "валовая прибыль убыток", "валовая прибыль", "gross profit"),
    _income("operating_income", "2200",
            "прибыль убыток от продаж", "операционная прибыль", "operating income",
            "прибыль от продаж", "операционный доход"),
    _income("profit_before_tax", "2300",
            "прибыль убыток до налогообложения", "прибыль до налогообложения", "profit before tax"),
    _income("net_income", "2400",
            "чистая прибыль убыток", "чистая прибыль", "net income", "прибыль", "чп"),
)

FIELDS_BY_NAME: Dict[str, FieldSpec] = {spec.name: spec for spec in FIELD_SPECS}


def statutory_code(field_name: str) -> Optional[str]:
    """4-digit statutory code of a field, if it has one."""
    spec = FIELDS_BY_NAME.get(field_name)
    return spec.code if spec else None
