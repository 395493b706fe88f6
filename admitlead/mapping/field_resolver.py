"""
Field resolution - turn Tally's generic field list into lead columns.

A form's mapping is an ordered list of resolution strategies tried in turn:
    ByKey           explicit field.key -> column map, maintained per form
    ByLabelKeyword  column -> keywords matched against label/key (fallback)
New forms add or reorder strategies in their FieldMapping; nothing else changes.
"""
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Iterable, Optional, Sequence

from admitlead.schemas.webhook_payloads import TallyField

logger = logging.getLogger(__name__)

CHOICE_TYPES = frozenset({"MULTIPLE_CHOICE", "CHECKBOXES", "DROPDOWN", "RANKING"})


def resolve_choice_value(tally_field: TallyField) -> Optional[str]:
    """
    Display text of a field's value.

    Choice-type fields carry option ids; each id is replaced by its option
    text (unknown ids are kept verbatim). Multi-value answers are joined
    with ", ". Returns None for an absent or blank value.
    """
    value = tally_field.value
    if not value:
        return None

    if tally_field.type in CHOICE_TYPES and tally_field.options is not None:
        values = value if isinstance(value, list) else [value]
        texts = {opt.id: opt.text for opt in reversed(tally_field.options)}
        resolved = [texts.get(v) or v for v in values]
        resolved = [v for v in resolved if v]
        return ", ".join(resolved) if resolved else None

    text = ", ".join(value) if isinstance(value, list) else value
    return text.strip() or None


def _contains(haystack: str, keyword: str) -> bool:
    return keyword.lower() in haystack.lower()


def find_by_keyword(fields: Sequence[TallyField], keyword: str) -> Optional[TallyField]:
    """First field whose label or key contains the keyword (case-insensitive)."""
    for f in fields:
        if _contains(f.label, keyword) or _contains(f.key, keyword):
            return f
    return None


class ResolutionStrategy(ABC):
    """One way of locating the answer for a lead column."""

    @abstractmethod
    def resolve(self, fields: Sequence[TallyField], column: str) -> Optional[str]:
        ...


@dataclass(frozen=True)
class ByKey(ResolutionStrategy):
    """
    Explicit field.key -> column mapping.
    Pairs are tried in configuration order; several keys may map to one column.
    """
    key_map: tuple[tuple[str, str], ...] = ()

    @classmethod
    def from_dict(cls, mapping: dict[str, str]) -> "ByKey":
        return cls(tuple(mapping.items()))

    def resolve(self, fields: Sequence[TallyField], column: str) -> Optional[str]:
        by_key = {}
        for f in fields:
            by_key.setdefault(f.key, f)
        for field_key, mapped_column in self.key_map:
            if mapped_column != column:
                continue
            match = by_key.get(field_key)
            if match is None:
                continue
            value = resolve_choice_value(match)
            if value is not None:
                return value
        return None


@dataclass(frozen=True)
class ByLabelKeyword(ResolutionStrategy):
    """
    Column -> ordered keywords, matched as substrings of field label or key.
    For each keyword only the first matching field is considered.
    """
    keywords: tuple[tuple[str, tuple[str, ...]], ...] = ()

    @classmethod
    def from_dict(cls, mapping: dict[str, Iterable[str]]) -> "ByLabelKeyword":
        return cls(tuple((column, tuple(words)) for column, words in mapping.items()))

    def keywords_for(self, column: str) -> tuple[str, ...]:
        for mapped_column, words in self.keywords:
            if mapped_column == column:
                return words
        return ()

    def resolve(self, fields: Sequence[TallyField], column: str) -> Optional[str]:
        for keyword in self.keywords_for(column):
            match = find_by_keyword(fields, keyword)
            if match is None:
                continue
            value = resolve_choice_value(match)
            if value is not None:
                return value
        return None


@dataclass(frozen=True)
class FieldMapping:
    """Ordered resolution strategies for one Tally form."""
    strategies: tuple[ResolutionStrategy, ...] = field(default_factory=tuple)


class FieldResolver:
    """Resolves lead columns from a submission's fields using a FieldMapping."""

    def __init__(self, mapping: FieldMapping):
        self.mapping = mapping

    def resolve(self, fields: Sequence[TallyField], column: str) -> Optional[str]:
        """First non-empty value any strategy finds for the column, else None."""
        for strategy in self.mapping.strategies:
            value = strategy.resolve(fields, column)
            if value is not None:
                return value
        return None

    def resolve_many(self, fields: Sequence[TallyField], columns: Iterable[str]) -> dict[str, Optional[str]]:
        return {column: self.resolve(fields, column) for column in columns}


def extract_utm_params(
    fields: Sequence[TallyField],
    params: Iterable[str],
) -> dict[str, Optional[str]]:
    """
    Marketing attribution from hidden fields.
    Each parameter name is matched against field label/key; missing ones are None.
    """
    utm = {}
    for param in params:
        match = find_by_keyword(fields, param)
        utm[param] = resolve_choice_value(match) if match is not None else None
    return utm
