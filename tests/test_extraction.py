"""
Unit tests for the field extraction strategies.
"""
import time
from decimal import Decimal

from ratiolens.engine.extraction import (
    STRATEGY_MULTI_LINE,
    STRATEGY_SINGLE_LINE,
    STRATEGY_SPREADSHEET,
    RawFieldMap,
    apply_statutory_codes,
    cell_to_decimal,
    code_column_index,
    extract_from_lines,
    extract_from_rows,
    extract_multi_line,
    has_code_column,
    match_single_line,
)
from ratiolens.engine.models import Diagnostics
from ratiolens.engine.statutory import STATUTORY_CODES, STATUTORY_TABLE_VERSION, field_for_code


class TestRawFieldMap:
    def test_put_normalizes_and_overwrites(self):
        raw = RawFieldMap()
        raw.put("Запасы", Decimal("1"))
        raw.put("ЗАПАСЫ:", Decimal("2"))

        assert raw.get("запасы") == Decimal("2")
        assert len(raw) == 1
        assert raw.found_labels == ["Запасы", "ЗАПАСЫ:"]

    def test_put_rejects_empty_key(self):
        raw = RawFieldMap()
        assert raw.put("---", Decimal("1")) is False
        assert len(raw) == 0

    def test_put_if_absent_keeps_first_value(self):
        raw = RawFieldMap()
        assert raw.put_if_absent("inventory", Decimal("1")) is True
        assert raw.put_if_absent("inventory", Decimal("2")) is False
        assert raw.get("inventory") == Decimal("1")
        assert raw.statutory_keys == ["inventory"]


class TestMultiLineStrategy:
    """Strategy A: label / code / value triplets."""

    def test_triplet(self):
        raw = RawFieldMap()
        found = extract_multi_line(["Денежные средства", "1250", "45000"], raw)

        assert found == 1
        assert raw.get("денежные средства") == Decimal("45000")

    def test_requires_code_between_label_and_value(self):
        raw = RawFieldMap()
        assert extract_multi_line(["Денежные средства", "45000", "1250"], raw) == 0

    def test_skips_non_numeric_value(self):
        raw = RawFieldMap()
        assert extract_multi_line(["Запасы", "1210", "нет данных"], raw) == 0

    def test_emits_diagnostics(self):
        diagnostics = Diagnostics()
        extract_multi_line(["Запасы", "1210", "(1 500)"], RawFieldMap(), diagnostics)

        [entry] = diagnostics.by_event("field_found")
        assert entry.context["strategy"] == STRATEGY_MULTI_LINE
        assert entry.context["value"] == "-1500"


class TestSingleLineStrategy:
    """Strategy B: one item per line."""

    def test_label_code_value(self):
        assert match_single_line("Запасы 1210 35000") == ("Запасы", "1210", "35000")

    def test_takes_current_period(self):
        label, code, token = match_single_line("Дебиторская задолженность 1230 50000 48000 41000")
        assert (label, code, token) == ("Дебиторская задолженность", "1230", "50000")

    def test_label_value(self):
        assert match_single_line("Выручка 500 000") == ("Выручка", None, "500 000")

    def test_short_value_without_code_is_ignored(self):
        assert match_single_line("Примечание 12") is None

    def test_runs_only_when_multi_line_finds_nothing(self):
        lines = ["Запасы", "1210", "35000", "Денежные средства 1250 45000"]
        raw = extract_from_lines(lines)

        assert raw.strategy == STRATEGY_MULTI_LINE
        assert "денежные средства" not in raw

    def test_spaced_thousands_after_code_keep_first_group(self):
        assert match_single_line("Запасы 1210 35 000 30 000") == ("Запасы", "1210", "35")

    def test_digits_inside_label(self):
        label, code, token = match_single_line("Итого по разделу II 1200 150000 140000")
        assert (label, code, token) == ("Итого по разделу II", "1200", "150000")

    def test_long_numeric_line_is_linear(self):
        line = "Запасы " + "1234 " * 5000 + "x"

        started = time.perf_counter()
        assert match_single_line(line) is None
        assert match_single_line(line[:-1])[:2] == ("Запасы", "1234")
        assert time.perf_counter() - started < 1.0

    def test_fallback(self):
        diagnostics = Diagnostics()
        raw = extract_from_lines(["Запасы 1210 35000"], diagnostics)

        assert raw.strategy == STRATEGY_SINGLE_LINE
        assert raw.get("запасы") == Decimal("35000")
        assert diagnostics.by_event("strategy_fallback")


class TestStatutoryCodes:
    """Strategy C: canonical names from line codes."""

    def test_table_covers_balance_sheet_lines(self):
        assert STATUTORY_TABLE_VERSION
        assert all(1100 <= int(code) <= 1700 for code in STATUTORY_CODES)
        assert STATUTORY_CODES["1600"] == STATUTORY_CODES["1700"] == "total_assets"
        assert field_for_code(" 1250 ") == "cash_and_equivalents"
        assert field_for_code("0000") is None

    def test_unknown_label_resolved_by_code(self):
        raw = extract_from_lines(["Сырье и материалы", "1210", "35000"])

        assert raw.get("сырье и материалы") == Decimal("35000")
        assert raw.get("inventory") == Decimal("35000")
        assert "inventory" in raw.statutory_keys

    def test_single_line_codes_feed_statutory_pass(self):
        raw = extract_from_lines(["Сырье и материалы 1210 35000"])
        assert raw.get("inventory") == Decimal("35000")

    def test_never_overwrites_existing_key(self):
        raw = RawFieldMap()
        raw.put("Inventory", Decimal("1"))

        inserted = apply_statutory_codes(["1210", "500"], raw)

        assert inserted == 0
        assert raw.get("inventory") == Decimal("1")
        assert raw.statutory_keys == []

    def test_first_code_wins(self):
        raw = RawFieldMap()
        apply_statutory_codes(["1600", "300", "1700", "301"], raw)
        assert raw.get("total_assets") == Decimal("300")

    def test_unknown_code_ignored(self):
        raw = RawFieldMap()
        assert apply_statutory_codes(["9999", "100"], raw) == 0

    def test_extraction_summary(self, statement_lines):
        diagnostics = Diagnostics()
        raw = extract_from_lines(statement_lines, diagnostics)

        [summary] = diagnostics.by_event("fields_extracted")
        assert summary.context["strategy"] == STRATEGY_MULTI_LINE
        assert summary.context["labels"] == len(raw.found_labels)
        assert summary.context["sample"] == raw.found_labels[:30]


class TestSpreadsheetRows:
    def test_cell_to_decimal(self):
        assert cell_to_decimal(35000) == Decimal("35000")
        assert cell_to_decimal(1.5) == Decimal("1.5")
        assert cell_to_decimal("35 000") == Decimal("35000")
        assert cell_to_decimal(True) is None
        assert cell_to_decimal(float("nan")) is None
        assert cell_to_decimal(None) is None

    def test_label_and_first_value(self, statement_rows):
        raw = extract_from_rows(statement_rows)

        assert raw.strategy == STRATEGY_SPREADSHEET
        assert raw.get("запасы") == Decimal("35000")
        assert "показатель" not in raw

    def test_code_column(self):
        rows = [
            ("Наименование показателя", "Код", "На 31.12.2023", "На 31.12.2022"),
            ("Сырье и материалы", 1210, 35000, 30000),
            ("Денежные средства", "1250", "45 000", "40 000"),
        ]
        assert has_code_column(rows)

        raw = extract_from_rows(rows)

        assert raw.get("сырье и материалы") == Decimal("35000")
        assert raw.get("inventory") == Decimal("35000")
        assert raw.get("cash_and_equivalents") == Decimal("45000")

    def test_code_without_value_is_not_a_value(self):
        rows = [
            ("Наименование показателя", "Код", "На 31.12.2023"),
            ("Запасы", 1210, None),
            ("Денежные средства", 1250, 45000),
        ]
        raw = extract_from_rows(rows)

        assert "запасы" not in raw
        assert "inventory" not in raw
        assert raw.get("cash_and_equivalents") == Decimal("45000")

    def test_four_digit_value_in_value_column(self):
        rows = [
            ("Наименование показателя", "Код", "На 31.12.2023"),
            ("Прочие запасы", None, 1500),
        ]
        assert code_column_index(rows) == 1

        raw = extract_from_rows(rows)

        assert raw.get("прочие запасы") == Decimal("1500")
        assert raw.statutory_keys == []

    def test_four_digit_value_without_code_column(self):
        rows = [("Показатель", "2023", "2022"), ("Запасы", 1210, 1100)]
        raw = extract_from_rows(rows)

        assert raw.get("запасы") == Decimal("1210")
        assert "inventory" not in raw
