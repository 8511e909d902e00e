"""
Unit tests for the header metadata extractor.
"""
import pytest

from ratiolens.engine.metadata import (
    HEADER_WINDOW,
    extract_metadata,
    find_labeled_name,
    find_okved,
    find_quoted_name,
)


class TestFindOkved:
    @pytest.mark.parametrize("line, expected", [
        ("по ОКВЭД 2 47.11", "47.11"),
        ("ОКВЭД: 62.01", "62.01"),
        ("Вид экономической деятельности по ОКВЭД 25.11", "25.11"),
        ("OKVED 01.13.1", "01.13.1"),
        ("оквэд №10", "10"),
    ])
    def test_codes(self, line: str, expected: str):
        assert find_okved(line) == expected

    def test_no_code(self):
        assert find_okved("ИНН 7701234567") is None


class TestFindName:
    def test_labeled_name_with_colon(self):
        assert find_labeled_name('Организация: ООО "Ромашка"') == 'ООО "Ромашка"'

    def test_labeled_name_strips_enclosing_quotes(self):
        assert find_labeled_name("Организация «Вектор Плюс»") == "Вектор Плюс"

    def test_two_word_label(self):
        assert find_labeled_name("Наименование организации: АО Север") == "АО Север"

    def test_english_label(self):
        assert find_labeled_name("Company name: Acme Ltd") == "Acme Ltd"

    def test_column_header_is_not_a_name(self):
        assert find_labeled_name("Наименование показателя") is None

    def test_quoted_name(self):
        assert find_quoted_name("Бухгалтерский баланс АО «Северсталь»") == "Северсталь"

    def test_quoted_name_length_bounds(self):
        assert find_quoted_name('Форма "А"') is None
        assert find_quoted_name("«" + "x" * 120 + "»") is None


class TestExtractMetadata:
    def test_statement_header(self, statement_lines):
        metadata = extract_metadata(statement_lines)

        assert metadata.okved == "47.11"
        assert metadata.company_name == 'ООО "Ромашка"'

    def test_labeled_beats_quoted(self):
        lines = ["Отчет АО «Старое название»", "Организация: АО Новое"]
        assert extract_metadata(lines).company_name == "АО Новое"

    def test_quoted_fallback(self):
        metadata = extract_metadata(["Бухгалтерский баланс ПАО «Газпром нефть»", "ОКВЭД 06.10"])

        assert metadata.company_name == "Газпром нефть"
        assert metadata.okved == "06.10"

    def test_only_header_window_is_scanned(self):
        lines = ["строка"] * HEADER_WINDOW + ["ОКВЭД 47.11"]
        assert extract_metadata(lines).okved is None

    def test_nothing_found(self):
        metadata = extract_metadata(["Запасы", "1210", "35000"])

        assert metadata.okved is None
        assert metadata.company_name is None
