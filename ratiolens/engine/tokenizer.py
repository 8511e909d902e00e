"""
Line/cell tokenizer and key normalizer.

Documents become an ordered list of non-empty, trimmed lines; spreadsheets
become (label, values) pairs for rows with at least two populated cells.
Every label is compared only through normalize_key().
"""

import re
from typing import Any, Iterable, Iterator, List, Sequence, Tuple

# Anything that is not a Unicode letter, digit or whitespace (\w also admits "_")
_PUNCTUATION = re.compile(r"[^\w\s]|_")
_WHITESPACE = re.compile(r"\s+")
_LINE_BREAK = re.compile(r"\r\n|[\r\n\u2028\u2029]")


def normalize_key(text: str) -> str:
    """
    Normalize a field label into the comparison key space.

    Lowercases, drops punctuation, collapses whitespace and trims.
    normalize_key(normalize_key(s)) == normalize_key(s).
    """
    if not text:
        return ""
    lowered = text.lower()
    stripped = _PUNCTUATION.sub("", lowered)
    return _WHITESPACE.sub(" ", stripped).strip()


def split_lines(text: str) -> List[str]:
    """Split raw text into trimmed, non-empty lines, preserving order."""
    if not text:
        return []
    return clean_lines(_LINE_BREAK.split(text))


def clean_lines(lines: Iterable[str]) -> List[str]:
    """Trim already-split lines and drop the empty ones."""
    cleaned = []
    for line in lines:
        if line is None:
            continue
        stripped = str(line).strip()
        if stripped:
            cleaned.append(stripped)
    return cleaned


def is_populated(cell: Any) -> bool:
    """Whether a spreadsheet cell carries a value."""
    if cell is None:
        return False
    if isinstance(cell, str):
        return bool(cell.strip())
    return True


def iter_indexed_rows(
    rows: Iterable[Sequence[Any]],
) -> Iterator[Tuple[str, List[Tuple[int, Any]]]]:
    """Like iter_rows, with every value paired with its column index."""
    for row in rows:
        if row is None:
            continue
        populated = [(index, cell) for index, cell in enumerate(row) if is_populated(cell)]
        if len(populated) < 2:
            continue
        label = str(populated[0][1]).strip()
        yield label, populated[1:]


def iter_rows(rows: Iterable[Sequence[Any]]) -> Iterator[Tuple[str, List[Any]]]:
    """
    Yield (label, values) for rows with at least two populated cells.

    The label is the first populated cell rendered as text; values are the
    remaining populated cells in column order.
    """
    for label, cells in iter_indexed_rows(rows):
        yield label, [cell for _, cell in cells]


def row_to_line(row: Sequence[Any]) -> str:
    """Render a spreadsheet row as a single text line (for header scanning)."""
    return " ".join(str(cell).strip() for cell in row if is_populated(cell))
