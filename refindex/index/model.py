"""Immutable index produced by the builder and shared by queries."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Iterable, Mapping, Optional, Tuple

from ..matchers.base import normalize_name
from ..models import Document, Entity, ReferenceSite, Section, SectionRef


@dataclass(frozen=True)
class Index:
    """Derived lookup tables for one corpus snapshot.

    ``entities`` is keyed by normalized name and keeps first-seen order;
    ``sections`` is keyed by ``SectionRef``; ``references`` lists every
    Reference block in document, section and block order. ``aliases`` maps
    normalized alternate spellings to entity keys.
    """

    documents: Tuple[Document, ...]
    sections: Mapping[SectionRef, Section]
    entities: Mapping[str, Entity]
    references: Tuple[ReferenceSite, ...] = ()
    aliases: Mapping[str, str] = field(default_factory=dict)
    _by_slug: Mapping[str, Document] = field(init=False, repr=False, compare=False)
    _anchors: Mapping[Tuple[str, str], str] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "sections", MappingProxyType(dict(self.sections)))
        object.__setattr__(self, "entities", MappingProxyType(dict(self.entities)))
        object.__setattr__(self, "aliases", MappingProxyType(dict(self.aliases)))
        object.__setattr__(
            self, "_by_slug", MappingProxyType({doc.slug: doc for doc in self.documents})
        )
        anchors: Dict[Tuple[str, str], str] = {}
        for ref, section in self.sections.items():
            if section.anchor:
                anchors.setdefault((ref.document, section.anchor), ref.section)
        object.__setattr__(self, "_anchors", MappingProxyType(anchors))

    def entity(self, name: str) -> Optional[Entity]:
        """Find an entity by name or by a matcher alias, ignoring case."""
        key = normalize_name(name)
        entity = self.entities.get(key)
        if entity is None and key in self.aliases:
            entity = self.entities.get(self.aliases[key])
        return entity

    def document(self, slug: str) -> Optional[Document]:
        return self._by_slug.get(slug)

    def section(self, slug: str, section_id: str) -> Optional[Section]:
        return self.sections.get(SectionRef(slug, section_id))

    def locate(self, slug: str, target: str) -> Optional[SectionRef]:
        """Find a section by id, falling back to its heading anchor."""
        ref = SectionRef(slug, target)
        if ref in self.sections:
            return ref
        section_id = self._anchors.get((slug, target))
        return SectionRef(slug, section_id) if section_id is not None else None

    def iter_entities(self, category: Optional[str] = None) -> Iterable[Entity]:
        for entity in self.entities.values():
            if category is None or entity.category == category:
                yield entity


__all__ = ["Index"]
