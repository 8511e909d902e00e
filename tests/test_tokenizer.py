"""
Unit tests for the line/cell tokenizer and key normalizer.
"""
import pytest

from ratiolens.engine.tokenizer import (
    clean_lines,
    is_populated,
    iter_rows,
    normalize_key,
    row_to_line,
    split_lines,
)


class TestNormalizeKey:
    """Tests for normalize_key."""

    def test_lowercases_and_drops_punctuation(self):
        assert normalize_key("Финансовые вложения (за исключением денежных эквивалентов)") == (
            "финансовые вложения за исключением денежных эквивалентов"
        )

    def test_collapses_whitespace(self):
        assert normalize_key("  Итого   по\tразделу  II ") == "итого по разделу ii"

    def test_drops_underscores_and_dashes(self):
        assert normalize_key("Товарно-материальные_запасы") == "товарноматериальныезапасы"

    def test_keeps_digits(self):
        assert normalize_key("Строка 1210:") == "строка 1210"

    def test_empty(self):
        assert normalize_key("") == ""
        assert normalize_key("...") == ""

    @pytest.mark.parametrize("text", [
        "БАЛАНС",
        "  Денежные средства и денежные эквиваленты ",
        "Прибыль (убыток) от продаж",
        "IV. ДОЛГОСРОЧНЫЕ ОБЯЗАТЕЛЬСТВА",
    ])
    def test_idempotent(self, text: str):
        once = normalize_key(text)
        assert normalize_key(once) == once


class TestLines:
    """Tests for line splitting."""

    def test_split_lines_trims_and_drops_empty(self):
        text = "Запасы\r\n\r\n  1210  \n35 000\n   \n"
        assert split_lines(text) == ["Запасы", "1210", "35 000"]

    def test_split_lines_empty(self):
        assert split_lines("") == []

    def test_clean_lines_skips_none(self):
        assert clean_lines(["a ", None, "", " b"]) == ["a", "b"]


class TestRows:
    """Tests for spreadsheet row handling."""

    def test_is_populated(self):
        assert is_populated(0)
        assert is_populated("x")
        assert not is_populated(None)
        assert not is_populated("  ")

    def test_iter_rows_requires_two_populated_cells(self):
        rows = [
            ("Запасы", 35000),
            ("Только подпись",),
            (None, "Денежные средства", None, 45000),
            None,
            ("", "  "),
        ]
        assert list(iter_rows(rows)) == [
            ("Запасы", [35000]),
            ("Денежные средства", [45000]),
        ]

    def test_row_to_line(self):
        assert row_to_line(("ОКВЭД", None, " 47.11 ")) == "ОКВЭД 47.11"
