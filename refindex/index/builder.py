"""Index builder: extracts entities, relationships and reference sites."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple

from ..config import RefIndexConfig
from ..document import validate_document
from ..errors import MalformedStructure
from ..logging import get_logger
from ..matchers import EntityMatcher, EntityMention, RelationshipExtractor, discover_matchers
from ..matchers.base import normalize_name
from ..matchers.relationships import Edge
from ..models import (
    CodeExample,
    Document,
    Entity,
    Prose,
    Reference,
    ReferenceSite,
    Relationship,
    Section,
    SectionRef,
    Table,
)
from .model import Index


@dataclass
class PartialIndex:
    """Findings for a single document, merged later in corpus order."""

    slug: str
    sections: List[Tuple[SectionRef, Section]] = field(default_factory=list)
    mentions: List[Tuple[EntityMention, SectionRef]] = field(default_factory=list)
    edges: List[Edge] = field(default_factory=list)
    references: List[ReferenceSite] = field(default_factory=list)


@dataclass
class _EntityRecord:
    name: str
    category: str
    locations: List[SectionRef] = field(default_factory=list)
    relationships: List[Relationship] = field(default_factory=list)
    _seen_locations: Set[SectionRef] = field(default_factory=set)
    _seen_edges: Set[Tuple[str, str]] = field(default_factory=set)

    def add_location(self, ref: SectionRef) -> None:
        if ref not in self._seen_locations:
            self._seen_locations.add(ref)
            self.locations.append(ref)

    def add_relationship(self, relation: str, target: str) -> None:
        key = (relation, normalize_name(target))
        if key not in self._seen_edges:
            self._seen_edges.add(key)
            self.relationships.append(Relationship(relation=relation, target=target))

    def freeze(self) -> Entity:
        return Entity(
            name=self.name,
            category=self.category,
            locations=tuple(self.locations),
            relationships=tuple(self.relationships),
        )


class IndexBuilder:
    """Builds an :class:`Index` from an ordered corpus of documents."""

    def __init__(
        self,
        *,
        matchers: Sequence[EntityMatcher] | None = None,
        extractor: RelationshipExtractor | None = None,
        workers: int = 1,
        scan_code: bool = True,
        scan_headings: bool = True,
    ) -> None:
        self.matchers = list(matchers) if matchers is not None else discover_matchers()
        self.extractor = extractor or RelationshipExtractor.from_config()
        self.workers = max(1, workers)
        self.scan_code = scan_code
        self.scan_headings = scan_headings
        self.logger = get_logger("index")

    @classmethod
    def from_config(cls, config: RefIndexConfig) -> "IndexBuilder":
        return cls(
            matchers=discover_matchers(config=config),
            extractor=RelationshipExtractor.from_config(config),
            workers=config.index.workers,
            scan_code=config.index.scan_code,
            scan_headings=config.index.scan_headings,
        )

    def build(self, corpus: Iterable[Document]) -> Index:
        documents = tuple(corpus)
        seen_slugs: Set[str] = set()
        for document in documents:
            if document.slug in seen_slugs:
                raise MalformedStructure(
                    f"Document slug '{document.slug}' appears more than once in the corpus",
                    document=document.slug,
                )
            seen_slugs.add(document.slug)

        if self.workers > 1 and len(documents) > 1:
            with ThreadPoolExecutor(
                max_workers=self.workers, thread_name_prefix="refindex-build"
            ) as executor:
                partials = list(executor.map(self.scan_document, documents))
        else:
            partials = [self.scan_document(document) for document in documents]

        index = self._merge(documents, partials)
        self.logger.debug(
            "Indexed %d documents, %d sections, %d entities, %d references",
            len(documents),
            len(index.sections),
            len(index.entities),
            len(index.references),
        )
        return index

    # ------------------------------------------------------------------
    # Map: one document at a time

    def scan_document(self, document: Document) -> PartialIndex:
        validate_document(document)
        partial = PartialIndex(slug=document.slug)
        for section in document.sections:
            ref = SectionRef(document.slug, section.id)
            partial.sections.append((ref, section))
            if self.scan_headings:
                self._scan_text(section.heading, ref, partial)
            for position, block in enumerate(section.iter_blocks()):
                if isinstance(block, Prose):
                    self._scan_text(block.text, ref, partial)
                elif isinstance(block, CodeExample):
                    if self.scan_code:
                        self._scan_text(block.body, ref, partial)
                elif isinstance(block, Table):
                    self._scan_table(block, ref, partial)
                elif isinstance(block, Reference):
                    partial.references.append(
                        ReferenceSite(source=ref, block_index=position, reference=block)
                    )
                    self._scan_text(block.label, ref, partial)
        return partial

    def _scan_text(self, text: str, ref: SectionRef, partial: PartialIndex) -> None:
        if not text:
            return
        mentions = self.find_mentions(text)
        partial.mentions.extend((mention, ref) for mention in mentions)
        partial.edges.extend(self.extractor.from_text(text, mentions))

    def _scan_table(self, table: Table, ref: SectionRef, partial: PartialIndex) -> None:
        for header in table.headers:
            partial.mentions.extend((mention, ref) for mention in self.find_mentions(header))
        for row in table.rows:
            for cell in row:
                self._scan_text(cell, ref, partial)
        partial.edges.extend(self.extractor.from_table(table, self.find_mentions))

    def find_mentions(self, text: str) -> List[EntityMention]:
        """Combine matcher output; earlier matchers win overlapping spans."""
        candidates: List[Tuple[int, EntityMention]] = []
        for rank, matcher in enumerate(self.matchers):
            candidates.extend((rank, mention) for mention in matcher.match(text))
        candidates.sort(key=lambda item: (item[1].start, item[0], item[1].start - item[1].end))
        kept: List[EntityMention] = []
        cursor = -1
        for _, mention in candidates:
            if mention.start < cursor:
                continue
            kept.append(mention)
            cursor = mention.end
        return kept

    # ------------------------------------------------------------------
    # Reduce: single-threaded, corpus order

    def _merge(self, documents: Tuple[Document, ...], partials: Sequence[PartialIndex]) -> Index:
        sections: Dict[SectionRef, Section] = {}
        records: Dict[str, _EntityRecord] = {}
        references: List[ReferenceSite] = []

        for partial in partials:
            sections.update(partial.sections)
            for mention, ref in partial.mentions:
                key = normalize_name(mention.name)
                record = records.get(key)
                if record is None:
                    record = _EntityRecord(name=mention.name, category=mention.category)
                    records[key] = record
                record.add_location(ref)
            for edge in partial.edges:
                source = records.get(normalize_name(edge.source))
                target = records.get(normalize_name(edge.target))
                if source is None or target is None:
                    continue
                source.add_relationship(edge.relation, target.name)
            references.extend(partial.references)

        entities = {key: record.freeze() for key, record in records.items()}
        aliases: Dict[str, str] = {}
        for matcher in self.matchers:
            for alias, canonical in matcher.aliases().items():
                alias_key = normalize_name(alias)
                canonical_key = normalize_name(canonical)
                if canonical_key in entities and alias_key not in entities:
                    aliases.setdefault(alias_key, canonical_key)
        return Index(
            documents=documents,
            sections=sections,
            entities=entities,
            references=tuple(references),
            aliases=aliases,
        )


def build(corpus: Iterable[Document], *, config: Optional[RefIndexConfig] = None) -> Index:
    """Build an index with default matchers, or those described by ``config``."""
    builder = IndexBuilder.from_config(config) if config is not None else IndexBuilder()
    return builder.build(corpus)


__all__ = ["IndexBuilder", "PartialIndex", "build"]
