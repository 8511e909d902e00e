"""
Field extraction strategies.

Populates a raw label -> value map from tokenized input:

- Strategy A (multi-line): "<label>" / "<code>" / "<value>" on consecutive lines
- Strategy B (single-line): only when A found nothing; one line per item
- Strategy C (statutory codes): always; canonical names keyed by line code,
  inserted only when absent so A/B results are never overwritten
- Spreadsheet rows: label cell + first value cell

Per-line mismatches are skipped; nothing here raises on malformed content.
"""

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple

from ratiolens.engine.models import Diagnostics, Row
from ratiolens.engine.statutory import (
    CODE_PATTERN,
    MIN_UNCODED_VALUE_LENGTH,
    NUMERIC_TOKEN_PATTERN,
    TOKEN_PATTERN,
    field_for_code,
    is_code_line,
)
from ratiolens.engine.tokenizer import iter_indexed_rows, normalize_key
from ratiolens.services.numeric_parser import parse_numeric_value

STRATEGY_MULTI_LINE = "multi_line"
STRATEGY_SINGLE_LINE = "single_line"
STRATEGY_SPREADSHEET = "spreadsheet"


@dataclass
class RawFieldMap:
    """
    Ordered raw key -> value map built during one extraction.

    Keys are normalized labels, or canonical field names for statutory hits.
    found_labels keeps the original labels in discovery order.
    """
    values: Dict[str, Decimal] = field(default_factory=dict)
    found_labels: List[str] = field(default_factory=list)
    strategy: Optional[str] = None
    statutory_keys: List[str] = field(default_factory=list)

    def put(self, label: str, value: Decimal) -> bool:
        """Record a labeled value, overwriting an earlier one for the same key."""
        key = normalize_key(label)
        if not key:
            return False
        self.values[key] = value
        self.found_labels.append(label)
        return True

    def put_if_absent(self, key: str, value: Decimal) -> bool:
        """Record a value under a canonical key unless the key is already taken."""
        if key in self.values:
            return False
        self.values.setdefault(key, value)
        self.statutory_keys.append(key)
        return True

    def get(self, key: str) -> Optional[Decimal]:
        return self.values.get(key)

    def items(self) -> Iterator[Tuple[str, Decimal]]:
        return iter(self.values.items())

    def __contains__(self, key: str) -> bool:
        return key in self.values

    def __len__(self) -> int:
        return len(self.values)


# =============================================================================
# Document strategies
# =============================================================================

def extract_multi_line(
    lines: Sequence[str],
    raw: RawFieldMap,
    diagnostics: Optional[Diagnostics] = None,
) -> int:
    """Strategy A. Returns the number of labels recorded."""
    found = 0
    for i in range(len(lines) - 2):
        label = lines[i]
        if is_code_line(label) or not is_code_line(lines[i + 1]):
            continue
        value = parse_numeric_value(lines[i + 2])
        if value is None:
            continue
        if raw.put(label, value):
            found += 1
            if diagnostics is not None:
                diagnostics.debug("field_found", strategy=STRATEGY_MULTI_LINE,
                                  label=label, code=lines[i + 1], value=str(value))
    return found


def match_single_line(line: str) -> Optional[Tuple[str, Optional[str], str]]:
    """
    Match one line against the single-line layouts.

    Returns (label, code, value token) for the first matching layout, with
    code None for the label + value shape. Runs in linear time.
    """
    tokens = list(TOKEN_PATTERN.finditer(line))

    # start of the trailing run of numeric tokens
    tail = len(tokens)
    while tail > 0 and NUMERIC_TOKEN_PATTERN.fullmatch(tokens[tail - 1].group()):
        tail -= 1

    # "<label> <code> <value> ..."
    for i in range(max(tail - 1, 1), len(tokens) - 1):
        if CODE_PATTERN.fullmatch(tokens[i].group()):
            return line[:tokens[i].start()].strip(), tokens[i].group(), tokens[i + 1].group()

    # "<label> <value>"
    start = max(tail, 1)
    if start < len(tokens):
        value = line[tokens[start].start():tokens[-1].end()]
        if len(value) >= MIN_UNCODED_VALUE_LENGTH:
            return line[:tokens[start].start()].strip(), None, value
    return None


def extract_single_line(
    lines: Sequence[str],
    raw: RawFieldMap,
    diagnostics: Optional[Diagnostics] = None,
) -> List[Tuple[str, Decimal]]:
    """
    Strategy B.

    Returns the (code, value) pairs of lines that carried a statutory code so
    that the statutory pass can use them as well.
    """
    coded: List[Tuple[str, Decimal]] = []
    for line in lines:
        matched = match_single_line(line)
        if matched is None:
            continue
        label, code, token = matched
        value = parse_numeric_value(token)
        if value is None:
            continue
        if raw.put(label, value):
            if code is not None:
                coded.append((code, value))
            if diagnostics is not None:
                diagnostics.debug("field_found", strategy=STRATEGY_SINGLE_LINE,
                                  label=label, code=code, value=str(value))
    return coded


def apply_statutory_codes(
    lines: Sequence[str],
    raw: RawFieldMap,
    coded: Sequence[Tuple[str, Decimal]] = (),
    diagnostics: Optional[Diagnostics] = None,
) -> int:
    """
    Strategy C: map known statutory codes to canonical field names.

    Bare code lines followed by a numeric line are used first, then codes
    captured on single lines. First writer wins.
    """
    candidates: List[Tuple[str, Decimal]] = []
    for i in range(len(lines) - 1):
        if not is_code_line(lines[i]):
            continue
        value = parse_numeric_value(lines[i + 1])
        if value is not None:
            candidates.append((lines[i].strip(), value))
    candidates.extend(coded)

    inserted = 0
    for code, value in candidates:
        name = field_for_code(code)
        if name is None:
            continue
        if raw.put_if_absent(name, value):
            inserted += 1
            if diagnostics is not None:
                diagnostics.debug("statutory_field", code=code, field=name, value=str(value))
    return inserted


def extract_from_lines(
    lines: Sequence[str],
    diagnostics: Optional[Diagnostics] = None,
) -> RawFieldMap:
    """Run strategies A, B (if A found nothing) and C over document lines."""
    raw = RawFieldMap()
    coded: List[Tuple[str, Decimal]] = []

    if extract_multi_line(lines, raw, diagnostics):
        raw.strategy = STRATEGY_MULTI_LINE
    else:
        if diagnostics is not None:
            diagnostics.info("strategy_fallback", from_strategy=STRATEGY_MULTI_LINE,
                             to_strategy=STRATEGY_SINGLE_LINE)
        coded = extract_single_line(lines, raw, diagnostics)
        if raw.found_labels:
            raw.strategy = STRATEGY_SINGLE_LINE

    statutory = apply_statutory_codes(lines, raw, coded, diagnostics)

    if diagnostics is not None:
        diagnostics.info(
            "fields_extracted",
            strategy=raw.strategy,
            labels=len(raw.found_labels),
            statutory=statutory,
            sample=raw.found_labels[:30],
        )
    return raw


# =============================================================================
# Spreadsheet rows
# =============================================================================

def cell_to_decimal(cell: Any) -> Optional[Decimal]:
    """Numeric value of a spreadsheet cell, if it has one."""
    if isinstance(cell, bool):
        return None
    if isinstance(cell, Decimal):
        return cell if cell.is_finite() else None
    if isinstance(cell, (int, float)):
        try:
            value = Decimal(str(cell))
        except InvalidOperation:
            return None
        return value if value.is_finite() else None
    if isinstance(cell, str):
        return parse_numeric_value(cell)
    return None


def _is_code_cell(cell: Any) -> bool:
    if isinstance(cell, bool):
        return False
    if isinstance(cell, int):
        return 1000 <= cell <= 9999
    if isinstance(cell, float):
        return cell.is_integer() and 1000 <= cell <= 9999
    return isinstance(cell, str) and is_code_line(cell)


def _code_text(cell: Any) -> str:
    if isinstance(cell, str):
        return cell.strip()
    return str(int(cell))


CODE_COLUMN_HEADERS = frozenset({"код", "код строки", "код показателя", "code", "line code"})


def code_column_index(rows: Sequence[Row]) -> Optional[int]:
    """Column index of the first header cell naming a statutory code column."""
    for row in rows:
        for index, cell in enumerate(row or ()):
            if isinstance(cell, str) and normalize_key(cell) in CODE_COLUMN_HEADERS:
                return index
    return None


def has_code_column(rows: Sequence[Row]) -> bool:
    """Whether a header row names a statutory code column."""
    return code_column_index(rows) is not None


def extract_from_rows(
    rows: Sequence[Row],
    diagnostics: Optional[Diagnostics] = None,
) -> RawFieldMap:
    """
    Read label/value pairs from spreadsheet rows.

    The value is the first populated cell after the label. When a header row
    names a code column, a 4-digit code in that column feeds the statutory
    pass and is never taken as the value; a row with a code but no value
    cell records nothing.
    """
    raw = RawFieldMap(strategy=STRATEGY_SPREADSHEET)
    coded: List[Tuple[str, Decimal]] = []
    code_index = code_column_index(rows)

    for label, cells in iter_indexed_rows(rows):
        code = None
        value_cells = []
        for index, cell in cells:
            if index == code_index and _is_code_cell(cell):
                code = _code_text(cell)
            else:
                value_cells.append(cell)
        if not value_cells:
            continue

        value = cell_to_decimal(value_cells[0])
        if value is None:
            continue
        if raw.put(label, value):
            if code is not None:
                coded.append((code, value))
            if diagnostics is not None:
                diagnostics.debug("field_found", strategy=STRATEGY_SPREADSHEET,
                                  label=label, code=code, value=str(value))

    statutory = apply_statutory_codes((), raw, coded, diagnostics)

    if diagnostics is not None:
        diagnostics.info(
            "fields_extracted",
            strategy=raw.strategy,
            labels=len(raw.found_labels),
            statutory=statutory,
            sample=raw.found_labels[:30],
        )
    return raw
