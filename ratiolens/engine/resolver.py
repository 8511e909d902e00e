"""
Canonical field resolver.

Maps the raw label -> value map onto FIELD_SPECS. Per field, in order:

1. Exact: a normalized synonym is a raw key.
2. Statutory: the canonical name was recorded from a line code.
3. Partial: every word (> 2 chars) of a synonym is a substring of a raw key;
   the first raw key in discovery order wins.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Sequence

from ratiolens.engine.extraction import RawFieldMap
from ratiolens.engine.models import Diagnostics
from ratiolens.engine.schema import FIELD_SPECS, FieldSpec
from ratiolens.engine.tokenizer import normalize_key
from ratiolens.exceptions import RequiredFieldMissingError

MATCH_EXACT = "exact"
MATCH_STATUTORY = "statutory"
MATCH_PARTIAL = "partial"

# Bounds on the context carried by RequiredFieldMissingError
MAX_SUGGESTED_SYNONYMS = 3
MAX_REPORTED_LABELS = 15

MIN_WORD_LENGTH = 3


@dataclass(frozen=True)
class FieldMatch:
    """How a canonical field was resolved."""
    field: str
    value: Decimal
    kind: str
    raw_key: str
    synonym: Optional[str] = None


def significant_words(synonym: str) -> List[str]:
    """Words of a normalized synonym used for partial matching."""
    return [word for word in normalize_key(synonym).split(" ") if len(word) >= MIN_WORD_LENGTH]


def find_exact(raw: RawFieldMap, spec: FieldSpec) -> Optional[FieldMatch]:
    for synonym in spec.synonyms:
        key = normalize_key(synonym)
        if key in raw:
            return FieldMatch(spec.name, raw.values[key], MATCH_EXACT, key, synonym)
    return None


def find_statutory(raw: RawFieldMap, spec: FieldSpec) -> Optional[FieldMatch]:
    if spec.name in raw.statutory_keys:
        return FieldMatch(spec.name, raw.values[spec.name], MATCH_STATUTORY, spec.name)
    return None


def find_partial(raw: RawFieldMap, spec: FieldSpec) -> Optional[FieldMatch]:
    statutory = set(raw.statutory_keys)
    for synonym in spec.synonyms:
        words = significant_words(synonym)
        if not words:
            continue
        for key, value in raw.items():
            if key in statutory:
                continue
            if all(word in key for word in words):
                return FieldMatch(spec.name, value, MATCH_PARTIAL, key, synonym)
    return None


def match_field(raw: RawFieldMap, spec: FieldSpec) -> Optional[FieldMatch]:
    """Resolve one field against the raw map, or None if nothing matches."""
    return find_exact(raw, spec) or find_statutory(raw, spec) or find_partial(raw, spec)


def missing_field_error(spec: FieldSpec, found_labels: Sequence[str]) -> RequiredFieldMissingError:
    return RequiredFieldMissingError(
        field=spec.name,
        synonyms=list(spec.synonyms[:MAX_SUGGESTED_SYNONYMS]),
        found_labels=list(found_labels[:MAX_REPORTED_LABELS]),
        total_found=len(found_labels),
    )


def resolve_fields(
    raw: RawFieldMap,
    specs: Iterable[FieldSpec] = FIELD_SPECS,
    diagnostics: Optional[Diagnostics] = None,
) -> Dict[str, Optional[Decimal]]:
    """
    Resolve every canonical field.

    Returns canonical name -> value. Optional fields that match nothing take
    their default (0 for balance-sheet details, None for income items).

    Raises:
        RequiredFieldMissingError: for the first required field with no match.
    """
    resolved: Dict[str, Optional[Decimal]] = {}
    for spec in specs:
        match = match_field(raw, spec)
        if match is None:
            if spec.required:
                raise missing_field_error(spec, raw.found_labels)
            resolved[spec.name] = spec.default
            continue

        resolved[spec.name] = match.value
        if diagnostics is not None:
            diagnostics.debug(
                "field_resolved",
                field=spec.name,
                match=match.kind,
                raw_key=match.raw_key,
                synonym=match.synonym,
            )
    return resolved
