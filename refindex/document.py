"""Construction and validation of document trees from raw structural input."""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Set, Tuple

from .errors import DuplicateSectionId, MalformedStructure
from .models import Block, CodeExample, Document, Prose, Reference, Section, Table


def build_document(raw: Mapping[str, Any]) -> Document:
    """Build a validated Document from a raw mapping.

    Expected shape::

        slug: guide-slug
        title: Guide title
        sections:
          - id: "1"
            heading: Overview
            parent: null
            blocks:
              - {type: prose, text: ...}
              - {type: code, language: swift, body: ...}
              - {type: table, headers: [...], rows: [[...]]}
              - {type: reference, target: other-doc, section: "2", label: ...}
    """

    if not isinstance(raw, Mapping):
        raise MalformedStructure("Document input must be a mapping")
    slug = _require_str(raw, "slug", context="document")
    title = raw.get("title")
    title = str(title) if title is not None else slug

    raw_sections = raw.get("sections") or []
    if not isinstance(raw_sections, Sequence) or isinstance(raw_sections, (str, bytes)):
        raise MalformedStructure("'sections' must be a list", document=slug)

    sections: List[Section] = []
    for position, item in enumerate(raw_sections):
        if not isinstance(item, Mapping):
            raise MalformedStructure(f"Section #{position} must be a mapping", document=slug)
        sections.append(_build_section(item, slug))

    document = Document(slug=slug, title=title, sections=tuple(sections))
    validate_document(document)
    return document


def validate_document(document: Document) -> None:
    """Check id uniqueness, parent existence and acyclic nesting."""

    seen: Set[str] = set()
    for section in document.sections:
        if section.id in seen:
            raise DuplicateSectionId(section.id, document=document.slug)
        seen.add(section.id)

    parents: Dict[str, Optional[str]] = {}
    for section in document.sections:
        if section.parent_id is not None and section.parent_id not in seen:
            raise MalformedStructure(
                f"Section '{section.id}' references missing parent '{section.parent_id}'",
                document=document.slug,
            )
        parents[section.id] = section.parent_id

    for section_id in parents:
        visited: Set[str] = set()
        current: Optional[str] = section_id
        while current is not None:
            if current in visited:
                raise MalformedStructure(
                    f"Section '{section_id}' is part of a parent cycle",
                    document=document.slug,
                )
            visited.add(current)
            current = parents[current]


def _build_section(item: Mapping[str, Any], slug: str) -> Section:
    section_id = _require_str(item, "id", context="section", document=slug)
    heading = item.get("heading")
    parent = item.get("parent")
    anchor = item.get("anchor")
    raw_blocks = item.get("blocks") or []
    if not isinstance(raw_blocks, Sequence) or isinstance(raw_blocks, (str, bytes)):
        raise MalformedStructure(f"Section '{section_id}' blocks must be a list", document=slug)
    blocks = tuple(_build_block(block, section_id, slug) for block in raw_blocks)
    return Section(
        id=section_id,
        heading=str(heading) if heading is not None else "",
        blocks=blocks,
        parent_id=str(parent) if parent is not None else None,
        anchor=str(anchor) if anchor is not None else None,
    )


def _build_block(item: Any, section_id: str, slug: str) -> Block:
    if isinstance(item, str):
        return Prose(text=item)
    if not isinstance(item, Mapping):
        raise MalformedStructure(f"Block in section '{section_id}' must be a mapping", document=slug)

    kind = str(item.get("type", "prose")).lower()
    if kind == "prose":
        return Prose(text=str(item.get("text", "")))
    if kind in {"code", "code_example"}:
        language = item.get("language")
        return CodeExample(
            language=str(language) if language else None,
            body=str(item.get("body", "")),
        )
    if kind == "table":
        headers = _as_row(item.get("headers"), section_id, slug)
        rows = tuple(_as_row(row, section_id, slug) for row in item.get("rows") or [])
        return Table(headers=headers, rows=rows)
    if kind == "reference":
        target = _require_str(item, "target", context="reference", document=slug)
        section = item.get("section")
        return Reference(
            target=target,
            section=str(section) if section is not None else None,
            label=str(item.get("label", "")),
        )
    raise MalformedStructure(
        f"Unknown block type '{kind}' in section '{section_id}'", document=slug
    )


def _as_row(value: Any, section_id: str, slug: str) -> Tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, (str, bytes)) or not isinstance(value, Iterable):
        raise MalformedStructure(f"Table rows in section '{section_id}' must be lists", document=slug)
    return tuple("" if cell is None else str(cell) for cell in value)


def _require_str(
    item: Mapping[str, Any], key: str, *, context: str, document: str | None = None
) -> str:
    value = item.get(key)
    if value is None or isinstance(value, (list, dict)) or not str(value).strip():
        raise MalformedStructure(f"Missing '{key}' for {context}", document=document)
    return str(value).strip()


__all__ = ["build_document", "validate_document"]
