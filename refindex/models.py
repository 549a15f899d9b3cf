"""Core data models shared across refindex components."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, NamedTuple, Optional, Tuple, Union


@dataclass(frozen=True)
class Prose:
    """Narrative paragraph text."""

    text: str


@dataclass(frozen=True)
class CodeExample:
    """Annotated code excerpt with its language tag."""

    language: Optional[str]
    body: str


@dataclass(frozen=True)
class Table:
    """Reference table with a header row and body rows."""

    headers: Tuple[str, ...]
    rows: Tuple[Tuple[str, ...], ...]


@dataclass(frozen=True)
class Reference:
    """Cross-reference to another document, optionally to one of its sections."""

    target: str
    section: Optional[str] = None
    label: str = ""


Block = Union[Prose, CodeExample, Table, Reference]


class SectionRef(NamedTuple):
    """Location of a section: ``(document slug, section id)``."""

    document: str
    section: str

    def __str__(self) -> str:
        return f"{self.document}#{self.section}"


@dataclass(frozen=True)
class Section:
    """One node of a document's section tree.

    ``parent_id`` is a back-reference only; documents own their sections in a
    flat list and resolve parent/child links through identifiers.
    """

    id: str
    heading: str
    blocks: Tuple[Block, ...] = ()
    parent_id: Optional[str] = None
    anchor: Optional[str] = None

    def iter_blocks(self) -> Iterator[Block]:
        """Return a fresh iterator over the section's blocks."""
        return iter(self.blocks)


@dataclass(frozen=True)
class Document:
    """A guide: stable slug, title and sections in declared order."""

    slug: str
    title: str
    sections: Tuple[Section, ...] = ()
    _positions: Dict[str, int] = field(init=False, repr=False, compare=False)
    _children: Dict[Optional[str], Tuple[str, ...]] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        positions: Dict[str, int] = {}
        children: Dict[Optional[str], List[str]] = {}
        for position, section in enumerate(self.sections):
            positions.setdefault(section.id, position)
            children.setdefault(section.parent_id, []).append(section.id)
        object.__setattr__(self, "_positions", positions)
        object.__setattr__(
            self, "_children", {key: tuple(value) for key, value in children.items()}
        )

    def section(self, section_id: str) -> Optional[Section]:
        position = self._positions.get(section_id)
        return None if position is None else self.sections[position]

    def parent(self, section_id: str) -> Optional[Section]:
        current = self.section(section_id)
        if current is None or current.parent_id is None:
            return None
        return self.section(current.parent_id)

    def children(self, section_id: Optional[str]) -> Tuple[Section, ...]:
        """Return direct children of ``section_id`` (roots when ``None``)."""
        return tuple(self.sections[self._positions[child]] for child in self._children.get(section_id, ()))

    def walk(self) -> Iterator[Section]:
        """Yield sections depth-first, roots and siblings in declared order."""
        stack = list(reversed(self.children(None)))
        while stack:
            current = stack.pop()
            yield current
            stack.extend(reversed(self.children(current.id)))

    def iter_blocks(self, section_id: str) -> Iterator[Block]:
        current = self.section(section_id)
        if current is None:
            raise KeyError(section_id)
        return current.iter_blocks()


@dataclass(frozen=True)
class Relationship:
    """Typed edge from an entity to another entity, by canonical target name."""

    relation: str
    target: str


@dataclass(frozen=True)
class Entity:
    """Named concept extracted from document content."""

    name: str
    category: str
    locations: Tuple[SectionRef, ...] = ()
    relationships: Tuple[Relationship, ...] = ()

    def targets(self, relation: str) -> Tuple[str, ...]:
        return tuple(edge.target for edge in self.relationships if edge.relation == relation)


@dataclass(frozen=True)
class ReferenceSite:
    """A Reference block together with where it appears in the corpus."""

    source: SectionRef
    block_index: int
    reference: Reference


@dataclass(frozen=True)
class DanglingReference:
    """Diagnostic for a reference whose target could not be located."""

    source: SectionRef
    block_index: int
    target: str
    target_section: Optional[str]
    reason: str
    label: str = ""

    @property
    def target_ref(self) -> Tuple[str, Optional[str]]:
        return (self.target, self.target_section)


@dataclass(frozen=True)
class ResolutionReport:
    """Outcome of cross-reference resolution over one index."""

    resolved: int
    dangling: Tuple[DanglingReference, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.dangling


__all__ = [
    "Block",
    "CodeExample",
    "DanglingReference",
    "Document",
    "Entity",
    "Prose",
    "Reference",
    "ReferenceSite",
    "Relationship",
    "ResolutionReport",
    "Section",
    "SectionRef",
    "Table",
]
