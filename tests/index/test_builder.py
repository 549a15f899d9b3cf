"""Tests for the index builder."""

from __future__ import annotations

import pytest

from refindex.errors import DuplicateSectionId, MalformedStructure
from refindex.index import IndexBuilder, build
from refindex.models import Document, Relationship, Section, SectionRef

from tests._fixtures.corpus_builder import make_document


def _corpus() -> list[Document]:
    graphics = make_document(
        "graphics",
        [
            {"id": "1", "heading": "Rendering", "blocks": ["Metal drives the GPU directly."]},
            {
                "id": "1.1",
                "heading": "Compositing",
                "parent": "1",
                "blocks": [
                    "Core Animation is built on Metal.",
                    {"type": "code", "language": "swift", "body": "import SwiftUI"},
                ],
            },
        ],
    )
    games = make_document(
        "games",
        [
            {"id": "1", "heading": "Engines", "blocks": ["Metal is recommended for games."]},
            {
                "id": "2",
                "heading": "Matrix",
                "blocks": [
                    {
                        "type": "table",
                        "headers": ["App Type", "Recommended Framework"],
                        "rows": [["Utility apps", "SwiftUI"], ["Games", "SpriteKit"]],
                    },
                    {"type": "reference", "target": "graphics", "section": "1", "label": "Metal basics"},
                ],
            },
        ],
    )
    return [graphics, games]


def test_merge_accumulates_locations_across_documents() -> None:
    index = build(_corpus())
    metal = index.entity("metal")
    assert metal is not None
    assert metal.name == "Metal"
    assert metal.locations == (
        SectionRef("graphics", "1"),
        SectionRef("graphics", "1.1"),
        SectionRef("games", "1"),
        SectionRef("games", "2"),
    )


def test_entity_identity_ignores_case_and_whitespace() -> None:
    index = build(_corpus())
    assert index.entity("  CORE   animation ") is index.entity("Core Animation")


def test_relationships_are_recorded_in_insertion_order() -> None:
    index = build(_corpus())
    core_animation = index.entity("Core Animation")
    metal = index.entity("Metal")
    assert core_animation is not None and metal is not None
    assert core_animation.relationships == (Relationship("layerAbove", "Metal"),)
    assert metal.relationships == (Relationship("recommendedFor", "game"),)


def test_table_rows_produce_relationships() -> None:
    index = build(_corpus())
    swiftui = index.entity("SwiftUI")
    assert swiftui is not None
    assert swiftui.targets("recommendedFor") == ("utility app",)
    assert SectionRef("graphics", "1.1") in swiftui.locations


def test_code_scanning_can_be_disabled() -> None:
    index = IndexBuilder(scan_code=False).build(_corpus())
    swiftui = index.entity("SwiftUI")
    assert swiftui is not None
    assert SectionRef("graphics", "1.1") not in swiftui.locations


def test_reference_sites_keep_corpus_order() -> None:
    index = build(_corpus())
    assert [(site.source, site.block_index) for site in index.references] == [
        (SectionRef("games", "2"), 1)
    ]


def test_build_is_deterministic() -> None:
    corpus = _corpus()
    first = build(corpus)
    second = build(corpus)
    assert first == second
    assert list(first.entities) == list(second.entities)


def test_parallel_build_matches_sequential_build() -> None:
    corpus = _corpus()
    sequential = IndexBuilder(workers=1).build(corpus)
    parallel = IndexBuilder(workers=4).build(corpus)
    assert parallel == sequential
    assert list(parallel.entities) == list(sequential.entities)


def test_build_does_not_replace_documents() -> None:
    corpus = _corpus()
    index = build(corpus)
    assert index.documents == tuple(corpus)
    assert all(kept is original for kept, original in zip(index.documents, corpus))


def test_index_mappings_are_read_only() -> None:
    index = build(_corpus())
    with pytest.raises(TypeError):
        index.entities["metal"] = None  # type: ignore[index]


def test_duplicate_section_ids_in_one_document_fail_the_build() -> None:
    broken = Document(
        slug="broken",
        title="Broken",
        sections=(Section(id="1", heading="A"), Section(id="1", heading="B")),
    )
    with pytest.raises(DuplicateSectionId):
        build([broken])


def test_same_section_ids_in_different_documents_are_fine() -> None:
    index = build(_corpus())
    assert index.section("graphics", "1") is not None
    assert index.section("games", "1") is not None


def test_duplicate_document_slugs_are_rejected() -> None:
    document = make_document("dup", [{"id": "1", "heading": "A"}])
    with pytest.raises(MalformedStructure, match="more than once"):
        build([document, document])


def test_swiftui_mentioned_once_in_each_of_two_documents() -> None:
    first = make_document("a", [{"id": "1", "heading": "UI", "blocks": ["SwiftUI basics."]}])
    second = make_document("b", [{"id": "3", "heading": "UI", "blocks": ["Adopting SwiftUI."]}])
    index = build([first, second])
    swiftui = index.entity("SwiftUI")
    assert swiftui is not None
    assert swiftui.locations == (SectionRef("a", "1"), SectionRef("b", "3"))
