"""Tests for the markdown and structured loaders."""

from __future__ import annotations

from refindex.errors import DuplicateSectionId
from refindex.index import build
from refindex.loaders import MarkdownLoader, load_corpus, slugify
from refindex.models import CodeExample, Prose, Reference, SectionRef, Table
from refindex.resolver import resolve

GUIDE = """
# macOS Architecture

Intro mentioning Darwin.

## 1. Kernel

XNU combines Mach and BSD. See Appendix I for tools.

### 1.1 Mach Tasks

```c
task_t task;
## not a heading
```

## 2. Frameworks

| App Type | Recommended Framework |
|----------|-----------------------|
| Games    | Metal                 |

Read [graphics](graphics.md#pipeline) and [above](#1-kernel), or [Apple](https://developer.apple.com).

## Appendix I: Tools

## Notes

## Notes
"""


def test_slugify_matches_github_anchors() -> None:
    assert slugify("1. Kernel") == "1-kernel"
    assert slugify("Build & Test") == "build--test"


def test_markdown_headings_become_nested_sections(corpus_builder) -> None:
    (path,) = corpus_builder.write({"architecture.md": GUIDE})
    document = MarkdownLoader().load(path)

    assert document.slug == "architecture"
    assert document.title == "macOS Architecture"
    assert [(section.id, section.parent_id) for section in document.sections] == [
        ("0", None),
        ("1", None),
        ("1.1", "1"),
        ("2", None),
        ("appendix-i", None),
        ("notes", None),
        ("notes-1", None),
    ]
    kernel = document.section("1")
    assert kernel is not None and kernel.anchor == "1-kernel"


def test_markdown_blocks_and_references(corpus_builder) -> None:
    (path,) = corpus_builder.write({"architecture.md": GUIDE})
    document = MarkdownLoader().load(path)

    assert document.section("0").blocks == (Prose("Intro mentioning Darwin."),)
    assert document.section("1").blocks == (
        Prose("XNU combines Mach and BSD. See Appendix I for tools."),
        Reference("architecture", "appendix-i", "See Appendix I"),
    )
    assert document.section("1.1").blocks == (CodeExample("c", "task_t task;\n## not a heading"),)
    frameworks = document.section("2").blocks
    assert frameworks[0] == Table(("App Type", "Recommended Framework"), (("Games", "Metal"),))
    assert frameworks[2:] == (
        Reference("graphics", "pipeline", "graphics"),
        Reference("architecture", "1-kernel", "above"),
    )


def test_preamble_id_steps_around_numbered_zero_heading(corpus_builder) -> None:
    paths = corpus_builder.write({"guide.md": "# Guide\n\nIntro text.\n\n## 0. Preface\n\nHello.\n"})
    corpus = load_corpus(paths)

    assert corpus.failures == ()
    (document,) = corpus.documents
    assert [section.id for section in document.sections] == ["0-1", "0"]
    assert document.section("0").heading == "0. Preface"
    assert document.section("0-1").blocks == (Prose("Intro text."),)


def test_generated_ids_skip_ids_already_taken(corpus_builder) -> None:
    paths = corpus_builder.write({"notes.md": "# Notes\n\n## Notes 1\n\n## Notes\n\n## Notes\n"})
    corpus = load_corpus(paths)

    assert corpus.failures == ()
    (document,) = corpus.documents
    assert [section.id for section in document.sections] == ["notes-1", "notes", "notes-2"]


def test_generated_ids_do_not_claim_later_numbered_headings() -> None:
    parsed = MarkdownLoader().parse("## 2\n\n## 2. Frameworks\n", slug="guide")
    assert [section["id"] for section in parsed["sections"]] == ["2-1", "2"]


def test_fence_closes_only_on_its_own_marker(corpus_builder) -> None:
    guide = (
        "# Shell\n\n"
        "## 1. Setup\n\n"
        "```sh\n"
        "~~~\n"
        "# install the tools\n"
        "brew install swiftlint\n"
        "```\n\n"
        "After the fence.\n"
    )
    (path,) = corpus_builder.write({"shell.md": guide})
    document = MarkdownLoader().load(path)

    assert [section.id for section in document.sections] == ["1"]
    assert document.section("1").blocks == (
        CodeExample("sh", "~~~\n# install the tools\nbrew install swiftlint"),
        Prose("After the fence."),
    )


def test_loaded_guide_indexes_and_resolves(corpus_builder) -> None:
    (path,) = corpus_builder.write({"architecture.md": GUIDE})
    index = build(load_corpus([path]).documents)

    metal = index.entity("Metal")
    assert metal is not None and metal.targets("recommendedFor") == ("game",)
    mach = index.entity("Mach")
    assert mach is not None
    assert mach.locations == (SectionRef("architecture", "1"), SectionRef("architecture", "1.1"))

    report = resolve(index)
    assert report.resolved == 2
    assert [item.target_ref for item in report.dangling] == [("graphics", "pipeline")]


def test_broken_document_does_not_stop_the_corpus(corpus_builder) -> None:
    paths = corpus_builder.write(
        {
            "a-broken.md": "# Broken\n\n## 1. One\n\n## 1. Again\n",
            "b-fine.md": "# Fine\n\n## 1. Metal\n",
            "c-structured.yml": """
                title: Structured
                sections:
                  - id: "1"
                    heading: SwiftUI
                    blocks:
                      - SwiftUI is recommended for utility apps.
            """,
        }
    )

    corpus = load_corpus(paths)

    assert [document.slug for document in corpus.documents] == ["b-fine", "c-structured"]
    assert len(corpus.failures) == 1
    assert corpus.failures[0].path == paths[0]
    assert isinstance(corpus.failures[0].error, DuplicateSectionId)


def test_duplicate_slugs_fail_only_the_later_file(corpus_builder) -> None:
    paths = corpus_builder.write(
        {
            "guides/kernel.md": "# Kernel\n\n## Mach\n",
            "archive/kernel.md": "# Old Kernel\n\n## BSD\n",
        }
    )
    corpus = load_corpus(paths)
    assert [document.title for document in corpus.documents] == ["Kernel"]
    assert "already used" in corpus.failures[0].message


def test_load_directory_honours_config_globs(corpus_builder) -> None:
    corpus_builder.write(
        {
            ".refindex.yml": """
                sources:
                  include: ["**/*.md", "**/*.yaml"]
                  exclude: ["drafts/"]
            """,
            "guide.md": "# Guide\n\n## Intro\n",
            "drafts/wip.md": "# WIP\n",
            "data/extra.yaml": "slug: extra\nsections: []\n",
        }
    )

    corpus = corpus_builder.load()

    assert [document.slug for document in corpus.documents] == ["extra", "guide"]
    assert corpus.failures == ()
