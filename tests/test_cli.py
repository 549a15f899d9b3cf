"""CLI parser and command behaviour tests."""

from __future__ import annotations

import pytest

from refindex.cli import _build_parser, main

CORPUS = {
    "kernel.md": """
        # Kernel

        ## 1. Mach

        Mach sits above the hardware. See Section 3 for ports.

        ## 2. BSD

        BSD sits above Mach. Read [graphics](graphics.md).
    """,
    "frameworks.md": """
        # Frameworks

        ## 1. Choosing

        Metal is recommended for games.
    """,
}


def test_cli_accepts_verbose_before_command() -> None:
    parser = _build_parser()
    args = parser.parse_args(["--verbose", "check"])
    assert args.verbose is True
    assert args.command == "check"
    assert args.log_file is None


def test_cli_accepts_verbose_after_command() -> None:
    parser = _build_parser()
    args = parser.parse_args(["check", "--verbose"])
    assert args.verbose is True
    assert args.path == "."


def test_cli_relations_arguments() -> None:
    parser = _build_parser()
    args = parser.parse_args(["relations", "Metal", "recommendedFor", "docs", "--inverse"])
    assert (args.name, args.relation, args.path, args.inverse) == (
        "Metal",
        "recommendedFor",
        "docs",
        True,
    )


def test_check_reports_dangling_references(corpus_builder, capsys) -> None:
    corpus_builder.write(CORPUS)

    main(["check", str(corpus_builder.path())])

    output = capsys.readouterr().out
    assert "Cross-references: 0 resolved, 2 dangling" in output
    assert "kernel#1 [block 1] -> kernel#3 (missing-section)" in output
    assert "kernel#2 [block 1] -> graphics (missing-document)" in output


def test_check_strict_exits_non_zero(corpus_builder) -> None:
    corpus_builder.write(CORPUS)
    with pytest.raises(SystemExit) as excinfo:
        main(["check", "--strict", str(corpus_builder.path())])
    assert excinfo.value.code == 1


def test_relations_command_lists_targets(corpus_builder, capsys) -> None:
    corpus_builder.write(CORPUS)

    main(["relations", "BSD", "layerAbove", str(corpus_builder.path())])

    assert capsys.readouterr().out.splitlines() == ["Mach"]


def test_relations_inverse_lists_sources(corpus_builder, capsys) -> None:
    corpus_builder.write(CORPUS)

    main(["relations", "games", "recommendedFor", str(corpus_builder.path()), "--inverse"])

    assert capsys.readouterr().out.splitlines() == ["Metal"]


def test_entity_command_renders_summary(corpus_builder, capsys) -> None:
    corpus_builder.write(CORPUS)

    main(["entity", "mach", str(corpus_builder.path())])

    output = capsys.readouterr().out
    assert output.startswith("Mach (Layer)")
    assert "  - kernel#1" in output
    assert "  - kernel#2" in output


def test_unknown_entity_exits_with_message(corpus_builder, capsys) -> None:
    corpus_builder.write(CORPUS)
    with pytest.raises(SystemExit) as excinfo:
        main(["relations", "Vulkan", "recommendedFor", str(corpus_builder.path())])
    assert excinfo.value.code == 1
    assert "Unknown entity: Vulkan" in capsys.readouterr().err


def test_missing_corpus_path_exits(tmp_path) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main(["check", str(tmp_path / "absent")])
    assert excinfo.value.code == 1


def test_unknown_matcher_in_config_exits_with_message(corpus_builder, capsys) -> None:
    corpus_builder.write({**CORPUS, ".refindex.yml": "index:\n  matchers: [nope]\n"})
    with pytest.raises(SystemExit) as excinfo:
        main(["check", str(corpus_builder.path())])
    assert excinfo.value.code == 1
    assert "Unknown matchers requested: nope" in capsys.readouterr().err


def test_invalid_config_shape_exits_with_message(corpus_builder, capsys) -> None:
    corpus_builder.write({**CORPUS, ".refindex.yml": "index:\n  workers: many\n"})
    with pytest.raises(SystemExit) as excinfo:
        main(["check", str(corpus_builder.path())])
    assert excinfo.value.code == 1
    assert "index.workers" in capsys.readouterr().err


def test_log_file_option_after_command(corpus_builder, tmp_path) -> None:
    corpus_builder.write(CORPUS)
    log_file = tmp_path / "logs" / "refindex.log"

    main(["check", str(corpus_builder.path()), "-v", "--log-file", str(log_file)])

    text = log_file.read_text(encoding="utf-8")
    assert "refindex.index: Indexed 2 documents" in text
    assert "refindex.resolver: Resolved 0 references, 2 dangling" in text
