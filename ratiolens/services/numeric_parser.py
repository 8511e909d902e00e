"""
Numeric parser service for financial value extraction.

Handles parsing of numeric tokens as they appear in exported statements:
- Thousands separators: 1 234 567, 1,234,567, non-breaking and narrow spaces
- Negative: (123), -123
- Decimal point: 1234.56

A comma is always a thousands separator and a period always the decimal point,
so "1 234,56" and "1.234" (as thousands) are not read the way a European locale
would read them.
"""
import re
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Optional


@dataclass
class ParsedNumber:
    """Result of parsing a numeric string."""

    value: Optional[Decimal]
    raw_value: str
    is_negative: bool = False

    @property
    def is_valid(self) -> bool:
        return self.value is not None


class NumericParser:
    """
    Parser for financial numeric tokens.

    Steps, in order:
    1. Trim surrounding whitespace.
    2. Parentheses around the token mark a negative value.
    3. Remove thousands separators (spaces, NBSP, narrow NBSP, commas).
    4. A leading minus marks a negative value.
    5. Strip everything that is not a digit or a decimal point.
    6. Parse the remainder; empty or malformed input yields no value.
    7. Negate once if either negative marker was seen.
    """

    THOUSANDS_SEPARATORS = re.compile(r"[\s,\u00a0\u202f]")
    NON_NUMERIC = re.compile(r"[^\d.]")

    def parse(self, value_str: Optional[str]) -> ParsedNumber:
        """
        Parse a string token into a numeric result.

        Args:
            value_str: The token to parse.

        Returns:
            ParsedNumber with the parsed value (None when not a number).
        """
        if value_str is None:
            return ParsedNumber(value=None, raw_value="")

        original = value_str
        cleaned = value_str.strip()

        # Parentheses notation
        in_parentheses = len(cleaned) >= 2 and cleaned.startswith("(") and cleaned.endswith(")")
        if in_parentheses:
            cleaned = cleaned[1:-1].strip()

        cleaned = self.THOUSANDS_SEPARATORS.sub("", cleaned)

        # Explicit minus sign
        has_minus = cleaned.startswith("-")
        if has_minus:
            cleaned = cleaned[1:]

        cleaned = self.NON_NUMERIC.sub("", cleaned)

        value = self._to_decimal(cleaned)
        is_negative = in_parentheses or has_minus

        if value is not None and is_negative and value != 0:
            value = -value

        return ParsedNumber(value=value, raw_value=original, is_negative=is_negative)

    def _to_decimal(self, cleaned: str) -> Optional[Decimal]:
        """Convert a digits-and-dots string to Decimal."""
        if not cleaned or cleaned == ".":
            return None

        try:
            value = Decimal(cleaned)
        except InvalidOperation:
            return None

        if not value.is_finite():
            return None
        return value


# Singleton instance
_parser_instance: Optional[NumericParser] = None


def get_numeric_parser() -> NumericParser:
    """Get singleton NumericParser instance."""
    global _parser_instance
    if _parser_instance is None:
        _parser_instance = NumericParser()
    return _parser_instance


def parse_numeric_value(value_str: Optional[str]) -> Optional[Decimal]:
    """Parse a token and return only its value (None when not a number)."""
    return get_numeric_parser().parse(value_str).value
