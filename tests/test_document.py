"""Tests for document construction and traversal."""

from __future__ import annotations

import pytest

from refindex.document import build_document
from refindex.errors import DuplicateSectionId, MalformedStructure
from refindex.models import CodeExample, Prose, Reference, Table

from tests._fixtures.corpus_builder import make_document


def _sample():
    return make_document(
        "kernel",
        [
            {"id": "1", "heading": "Overview", "blocks": ["XNU is a hybrid kernel."]},
            {"id": "1.1", "heading": "Mach", "parent": "1"},
            {"id": "2", "heading": "BSD"},
            {"id": "1.2", "heading": "IPC", "parent": "1"},
            {"id": "1.1.1", "heading": "Ports", "parent": "1.1"},
        ],
    )


def test_build_document_parses_all_block_kinds() -> None:
    document = build_document(
        {
            "slug": "graphics",
            "title": "Graphics Stack",
            "sections": [
                {
                    "id": "3",
                    "heading": "Rendering",
                    "blocks": [
                        {"type": "prose", "text": "Metal talks to the GPU."},
                        {"type": "code", "language": "swift", "body": "import Metal"},
                        {"type": "table", "headers": ["Layer", "Built On"], "rows": [["Core Animation", "Metal"]]},
                        {"type": "reference", "target": "kernel", "section": "1", "label": "see kernel"},
                    ],
                }
            ],
        }
    )

    section = document.section("3")
    assert document.title == "Graphics Stack"
    assert section is not None
    assert section.blocks == (
        Prose("Metal talks to the GPU."),
        CodeExample("swift", "import Metal"),
        Table(("Layer", "Built On"), (("Core Animation", "Metal"),)),
        Reference("kernel", "1", "see kernel"),
    )


def test_duplicate_section_ids_raise() -> None:
    with pytest.raises(DuplicateSectionId) as excinfo:
        make_document("dup", [{"id": "1", "heading": "A"}, {"id": "1", "heading": "B"}])
    assert excinfo.value.section_id == "1"
    assert isinstance(excinfo.value, MalformedStructure)


def test_missing_parent_is_malformed() -> None:
    with pytest.raises(MalformedStructure, match="missing parent"):
        make_document("orphan", [{"id": "1.1", "heading": "Child", "parent": "1"}])


def test_parent_cycle_is_malformed() -> None:
    with pytest.raises(MalformedStructure, match="cycle"):
        make_document(
            "loop",
            [
                {"id": "a", "heading": "A", "parent": "b"},
                {"id": "b", "heading": "B", "parent": "a"},
            ],
        )


def test_unknown_block_type_is_malformed() -> None:
    with pytest.raises(MalformedStructure, match="Unknown block type"):
        make_document("odd", [{"id": "1", "heading": "A", "blocks": [{"type": "diagram"}]}])


def test_missing_slug_is_malformed() -> None:
    with pytest.raises(MalformedStructure):
        build_document({"title": "No slug", "sections": []})


def test_walk_is_depth_first_in_declared_order() -> None:
    document = _sample()
    assert [section.id for section in document.walk()] == ["1", "1.1", "1.1.1", "1.2", "2"]


def test_children_and_parent_links() -> None:
    document = _sample()
    assert [child.id for child in document.children("1")] == ["1.1", "1.2"]
    assert [root.id for root in document.children(None)] == ["1", "2"]
    parent = document.parent("1.1.1")
    assert parent is not None and parent.id == "1.1"
    assert document.parent("2") is None


def test_iter_blocks_is_restartable() -> None:
    document = _sample()
    first = list(document.iter_blocks("1"))
    second = list(document.iter_blocks("1"))
    assert first == second == [Prose("XNU is a hybrid kernel.")]
    with pytest.raises(KeyError):
        document.iter_blocks("9")
