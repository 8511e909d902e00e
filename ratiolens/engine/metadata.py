"""
Header metadata extractor.

Scans the leading lines of a statement for the industry code (OKVED) and the
entity name.
"""

import re
from dataclasses import dataclass
from typing import Optional, Sequence

HEADER_WINDOW = 30

OKVED_PATTERN = re.compile(
    r"(?:ОКВЭД|OKVED)(?:\s*2)?[\s:№]*(?P<code>\d{2}(?:\.\d{1,2}){0,3})",
    re.IGNORECASE,
)

NAME_LABEL_PATTERN = re.compile(
    r"\b(?:организация|наименование|компания|предприятие|organization|company|enterprise|name)"
    r"(?:\s+(?:организации|компании|предприятия|name))?"
    r"(?:\s*:\s*|\s+)(?P<name>\S.*)",
    re.IGNORECASE,
)

QUOTED_PATTERN = re.compile(r"«(?P<a>[^»]+)»|\"(?P<b>[^\"]+)\"|“(?P<c>[^”]+)”")

MIN_QUOTED_LENGTH = 4
MAX_QUOTED_LENGTH = 99

# Column headers that start like a name label ("Наименование показателя")
_NOT_A_NAME = re.compile(r"^(?:показател|indicator|item)", re.IGNORECASE)


@dataclass(frozen=True)
class HeaderMetadata:
    okved: Optional[str] = None
    company_name: Optional[str] = None


def find_okved(line: str) -> Optional[str]:
    match = OKVED_PATTERN.search(line)
    return match.group("code") if match else None


def find_labeled_name(line: str) -> Optional[str]:
    match = NAME_LABEL_PATTERN.search(line)
    if match is None:
        return None
    name = match.group("name").strip()
    if not name or _NOT_A_NAME.match(name):
        return None
    quoted = QUOTED_PATTERN.fullmatch(name)
    if quoted:
        name = (quoted.group("a") or quoted.group("b") or quoted.group("c")).strip()
    return name


def find_quoted_name(line: str) -> Optional[str]:
    for match in QUOTED_PATTERN.finditer(line):
        quoted = (match.group("a") or match.group("b") or match.group("c") or "").strip()
        if MIN_QUOTED_LENGTH <= len(quoted) <= MAX_QUOTED_LENGTH:
            return quoted
    return None


def extract_metadata(lines: Sequence[str], window: int = HEADER_WINDOW) -> HeaderMetadata:
    """
    Find the industry code and entity name in the first `window` lines.

    A labeled name ("Организация: ...") takes precedence over a quoted one;
    scanning stops once both the code and a labeled name are found.
    """
    okved = None
    labeled = None
    quoted = None

    for line in lines[:window]:
        if okved is None:
            okved = find_okved(line)
        if labeled is None:
            labeled = find_labeled_name(line)
        if quoted is None:
            quoted = find_quoted_name(line)
        if okved is not None and labeled is not None:
            break

    return HeaderMetadata(okved=okved, company_name=labeled or quoted)
