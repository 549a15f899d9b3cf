"""Document loaders that turn guide files into validated documents."""

from __future__ import annotations

from dataclasses import dataclass
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Iterable, List, Optional, Protocol, Sequence, Set, Tuple

from ..config import CONFIG_FILENAME, RefIndexConfig, load_config
from ..errors import MalformedStructure
from ..logging import get_logger
from ..models import Document
from .markdown import MarkdownLoader, document_slug, slugify
from .structured import StructuredLoader

_EXCLUDED_DIRS = {
    ".git",
    ".hg",
    ".svn",
    ".venv",
    "node_modules",
    "__pycache__",
    ".pytest_cache",
    ".refindex",
}

logger = get_logger("loaders")


class DocumentLoader(Protocol):
    suffixes: Tuple[str, ...]

    def load(self, path: Path) -> Document:
        """Read ``path`` and return a validated document."""


_LOADERS: Tuple[DocumentLoader, ...] = (MarkdownLoader(), StructuredLoader())


@dataclass(frozen=True)
class LoadFailure:
    """A document that could not be loaded, with the reason."""

    path: Path
    error: Exception

    @property
    def message(self) -> str:
        return str(self.error)


@dataclass(frozen=True)
class CorpusLoad:
    """Documents that loaded successfully plus per-file failures."""

    documents: Tuple[Document, ...]
    failures: Tuple[LoadFailure, ...] = ()


def load_document(path: Path) -> Document:
    suffix = path.suffix.lower()
    for loader in _LOADERS:
        if suffix in loader.suffixes:
            return loader.load(path)
    raise MalformedStructure(f"No loader registered for '{path.suffix}' files")


def load_corpus(paths: Iterable[Path]) -> CorpusLoad:
    """Load each path independently; a broken file never aborts the others."""
    documents: List[Document] = []
    failures: List[LoadFailure] = []
    slugs: Set[str] = set()

    for path in paths:
        try:
            document = load_document(path)
        except (MalformedStructure, OSError, UnicodeDecodeError) as exc:
            logger.warning("Skipping %s: %s", path, exc)
            failures.append(LoadFailure(path=path, error=exc))
            continue
        if document.slug in slugs:
            exc = MalformedStructure(
                f"Document slug '{document.slug}' is already used by another file",
                document=document.slug,
            )
            logger.warning("Skipping %s: %s", path, exc)
            failures.append(LoadFailure(path=path, error=exc))
            continue
        slugs.add(document.slug)
        documents.append(document)

    logger.debug("Loaded %d documents (%d failures)", len(documents), len(failures))
    return CorpusLoad(documents=tuple(documents), failures=tuple(failures))


def discover_sources(root: Path, config: Optional[RefIndexConfig] = None) -> List[Path]:
    """Return corpus files under ``root`` in sorted, reproducible order."""
    config = config or load_config(root)
    found: Set[Path] = set()
    for pattern in config.sources.include:
        for path in root.glob(pattern):
            if not path.is_file() or path.name == CONFIG_FILENAME:
                continue
            rel_path = path.relative_to(root).as_posix()
            if any(part in _EXCLUDED_DIRS for part in rel_path.split("/")[:-1]):
                continue
            if _excluded(rel_path, config.sources.exclude):
                continue
            found.add(path)
    return sorted(found, key=lambda path: path.relative_to(root).as_posix())


def load_directory(root: Path, config: Optional[RefIndexConfig] = None) -> CorpusLoad:
    root = root.expanduser().resolve()
    if not root.exists():
        raise FileNotFoundError(f"Corpus path not found: {root}")
    if not root.is_dir():
        raise NotADirectoryError(f"Corpus path is not a directory: {root}")
    return load_corpus(discover_sources(root, config))


def _excluded(rel_path: str, patterns: Sequence[str]) -> bool:
    for pattern in patterns:
        cleaned = pattern.rstrip("/")
        if fnmatchcase(rel_path, pattern) or rel_path.startswith(f"{cleaned}/"):
            return True
    return False


__all__ = [
    "CorpusLoad",
    "DocumentLoader",
    "LoadFailure",
    "MarkdownLoader",
    "StructuredLoader",
    "discover_sources",
    "document_slug",
    "load_corpus",
    "load_directory",
    "load_document",
    "slugify",
]
