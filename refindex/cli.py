"""CLI entrypoints for refindex commands."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Tuple

from .config import load_config
from .errors import RefIndexError, UnknownEntity
from .index import Index, IndexBuilder
from .loaders import CorpusLoad, load_directory
from .logging import configure_logging, get_logger
from .query import QueryEngine
from .report import ReportRenderer
from .resolver import resolve


def _add_logging_options(parser: argparse.ArgumentParser, *, top_level: bool) -> None:
    # Subcommands repeat the options without defaults so a value given
    # before the command name is not reset after it.
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=False if top_level else argparse.SUPPRESS,
        help="Log corpus, index and resolution details at DEBUG level.",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None if top_level else argparse.SUPPRESS,
        help="Also write log records to this file.",
    )


def _add_path_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Path to the corpus root (defaults to current directory).",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="refindex",
        description="Index reference guides and check their cross-references.",
    )
    _add_logging_options(parser, top_level=True)
    subparsers = parser.add_subparsers(dest="command", required=True)

    check_parser = subparsers.add_parser(
        "check",
        help="Load the corpus, build the index and report dangling references.",
    )
    _add_logging_options(check_parser, top_level=False)
    _add_path_argument(check_parser)
    check_parser.add_argument(
        "--strict",
        action="store_true",
        help="Exit with status 1 when dangling references or load failures exist.",
    )

    entity_parser = subparsers.add_parser(
        "entity",
        help="Show where an entity is mentioned and how it relates to others.",
    )
    _add_logging_options(entity_parser, top_level=False)
    entity_parser.add_argument("name", help="Entity name (case-insensitive).")
    _add_path_argument(entity_parser)

    relations_parser = subparsers.add_parser(
        "relations",
        help="List targets of one relationship type for an entity.",
    )
    _add_logging_options(relations_parser, top_level=False)
    relations_parser.add_argument("name", help="Entity name (case-insensitive).")
    relations_parser.add_argument("relation", help="Relationship type, e.g. recommendedFor.")
    _add_path_argument(relations_parser)
    relations_parser.add_argument(
        "--inverse",
        action="store_true",
        help="List entities pointing at NAME instead of its targets.",
    )

    serve_parser = subparsers.add_parser(
        "serve",
        help="Serve read-only index queries over HTTP.",
    )
    _add_logging_options(serve_parser, top_level=False)
    _add_path_argument(serve_parser)
    serve_parser.add_argument("--host", default="127.0.0.1", help="Interface to bind.")
    serve_parser.add_argument("--port", type=int, default=8000, help="Port to bind.")

    return parser


def load_index(path: str) -> Tuple[CorpusLoad, Index]:
    """Load the corpus under ``path`` and build its index using ``.refindex.yml``."""
    root = Path(path).expanduser().resolve()
    config = load_config(root)
    corpus = load_directory(root, config)
    index = IndexBuilder.from_config(config).build(corpus.documents)
    return corpus, index


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for refindex commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose), log_file=args.log_file)
    logger = get_logger("cli")

    if args.command == "serve":
        from .service import run_service

        run_service(args.path, host=args.host, port=args.port)
        return

    try:
        corpus, index = load_index(args.path)
    except (FileNotFoundError, NotADirectoryError) as exc:
        parser.exit(1, f"{exc}\n")
    except RefIndexError as exc:
        parser.exit(1, f"refindex {args.command} failed: {exc}\nRun with --verbose for more details.\n")
    logger.debug("Index holds %d entities", len(index.entities))

    renderer = ReportRenderer()
    engine = QueryEngine(index)

    if args.command == "check":
        report = resolve(index)
        sys.stdout.write(renderer.resolution(report, corpus.failures))
        if bool(getattr(args, "strict", False)) and (report.dangling or corpus.failures):
            parser.exit(1)
    elif args.command == "entity":
        entity = engine.lookup_entity(args.name)
        if not entity:
            parser.exit(1, f"Entity not found: {args.name}\n")
        sys.stdout.write(renderer.entity(entity))
    elif args.command == "relations":
        try:
            if args.inverse:
                names = engine.sources_of(args.name, args.relation)
            else:
                names = engine.relationships_of(args.name, args.relation)
        except UnknownEntity as exc:
            parser.exit(1, f"{exc}\n")
        for name in names:
            print(name)
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


if __name__ == "__main__":
    main(sys.argv[1:])
