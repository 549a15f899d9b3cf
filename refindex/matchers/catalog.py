"""Matcher that recognises entities from a configured name catalog."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from ..config import CategoryConfig, RefIndexConfig
from .base import EntityMatcher, EntityMention, normalize_name
from .constants import DEFAULT_CATALOG


@dataclass(frozen=True)
class CatalogEntry:
    """One canonical entity name and the surface forms that denote it."""

    category: str
    canonical: str
    aliases: Tuple[str, ...] = ()
    ignore_case: bool = False

    def surface_forms(self) -> Tuple[str, ...]:
        return (self.canonical, *self.aliases)


class CatalogMatcher(EntityMatcher):
    """Finds whole-word occurrences of catalog names, longest form first."""

    name = "catalog"

    def __init__(self, entries: Iterable[CatalogEntry]) -> None:
        self.entries: List[CatalogEntry] = []
        self._exact: Dict[str, CatalogEntry] = {}
        self._folded: Dict[str, CatalogEntry] = {}
        exact_forms: List[str] = []
        folded_forms: List[str] = []

        for entry in entries:
            self.entries.append(entry)
            for form in entry.surface_forms():
                collapsed = " ".join(form.split())
                if not collapsed:
                    continue
                if entry.ignore_case:
                    key = normalize_name(collapsed)
                    if key not in self._folded:
                        self._folded[key] = entry
                        folded_forms.append(collapsed)
                elif collapsed not in self._exact:
                    self._exact[collapsed] = entry
                    exact_forms.append(collapsed)

        self._exact_pattern = _compile(exact_forms, flags=0)
        self._folded_pattern = _compile(folded_forms, flags=re.IGNORECASE)

    @classmethod
    def from_catalog(
        cls,
        catalog: Mapping[str, CategoryConfig],
    ) -> "CatalogMatcher":
        entries = [
            CatalogEntry(
                category=category,
                canonical=canonical,
                aliases=tuple(aliases),
                ignore_case=settings.ignore_case,
            )
            for category, settings in catalog.items()
            for canonical, aliases in settings.names.items()
        ]
        return cls(entries)

    @classmethod
    def from_config(cls, config: Optional[RefIndexConfig] = None) -> "CatalogMatcher":
        """Build from the default catalog merged with configured categories."""
        catalog: Dict[str, CategoryConfig] = {}
        if config is None or config.index.default_catalog:
            for category, (ignore_case, names) in DEFAULT_CATALOG.items():
                catalog[category] = CategoryConfig(
                    names={name: list(aliases) for name, aliases in names.items()},
                    ignore_case=ignore_case,
                )
        if config is not None:
            for category, settings in config.entities.items():
                existing = catalog.get(category)
                if existing is None:
                    catalog[category] = CategoryConfig(
                        names=dict(settings.names), ignore_case=settings.ignore_case
                    )
                    continue
                merged = dict(existing.names)
                merged.update(settings.names)
                catalog[category] = CategoryConfig(
                    names=merged, ignore_case=settings.ignore_case or existing.ignore_case
                )
        return cls.from_catalog(catalog)

    def match(self, text: str) -> Iterable[EntityMention]:
        candidates: List[EntityMention] = []
        for pattern, lookup, fold in (
            (self._exact_pattern, self._exact, False),
            (self._folded_pattern, self._folded, True),
        ):
            if pattern is None:
                continue
            for found in pattern.finditer(text):
                surface = " ".join(found.group(0).split())
                entry = lookup.get(normalize_name(surface) if fold else surface)
                if entry is None:
                    continue
                candidates.append(
                    EntityMention(
                        name=entry.canonical,
                        category=entry.category,
                        start=found.start(),
                        end=found.end(),
                    )
                )
        return _drop_overlaps(candidates)

    def aliases(self) -> Mapping[str, str]:
        forms: Dict[str, str] = {}
        for entry in self.entries:
            for alias in entry.aliases:
                forms.setdefault(alias, entry.canonical)
        return forms


def _compile(forms: Sequence[str], *, flags: int) -> Optional[re.Pattern[str]]:
    if not forms:
        return None
    ordered = sorted(forms, key=len, reverse=True)
    alternatives = "|".join(r"\s+".join(re.escape(part) for part in form.split()) for form in ordered)
    return re.compile(rf"(?<![\w-])(?:{alternatives})(?![\w-])", flags)


def _drop_overlaps(candidates: List[EntityMention]) -> List[EntityMention]:
    candidates.sort(key=lambda mention: (mention.start, -(mention.end - mention.start)))
    kept: List[EntityMention] = []
    cursor = -1
    for mention in candidates:
        if mention.start < cursor:
            continue
        kept.append(mention)
        cursor = mention.end
    return kept


__all__ = ["CatalogEntry", "CatalogMatcher"]
