"""Read-only queries over a built index."""

from __future__ import annotations

from typing import Optional, Tuple, Union

from .errors import UnknownEntity
from .index.model import Index
from .models import Entity, Section, SectionRef


class _NotFound:
    """Sentinel returned by lookups that find nothing."""

    _instance: Optional["_NotFound"] = None

    def __new__(cls) -> "_NotFound":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "NOT_FOUND"


NOT_FOUND = _NotFound()


class QueryEngine:
    """Answers entity and relationship queries.

    Every method is pure; one engine (or many) may share an index across
    threads without locking.
    """

    def __init__(self, index: Index) -> None:
        self.index = index

    def lookup_entity(self, name: str) -> Union[Entity, _NotFound]:
        entity = self.index.entity(name)
        return NOT_FOUND if entity is None else entity

    def sections_mentioning(self, name: str) -> Tuple[SectionRef, ...]:
        """Locations in corpus load order; empty when the entity is unknown."""
        entity = self.index.entity(name)
        return () if entity is None else entity.locations

    def relationships_of(self, name: str, relation: str) -> Tuple[str, ...]:
        """Targets of ``relation`` in the order the builder found them."""
        return self._require(name).targets(relation)

    def sources_of(self, name: str, relation: str) -> Tuple[str, ...]:
        """Entities that point at ``name`` through ``relation``."""
        target = self._require(name)
        return tuple(
            entity.name
            for entity in self.index.entities.values()
            if target.name in entity.targets(relation)
        )

    def entities(self, category: Optional[str] = None) -> Tuple[Entity, ...]:
        return tuple(self.index.iter_entities(category))

    def section(self, slug: str, section_id: str) -> Optional[Section]:
        return self.index.section(slug, section_id)

    def _require(self, name: str) -> Entity:
        entity = self.index.entity(name)
        if entity is None:
            raise UnknownEntity(name)
        return entity


__all__ = ["NOT_FOUND", "QueryEngine"]
