"""Exception taxonomy shared across refindex components."""

from __future__ import annotations


class RefIndexError(Exception):
    """Base class for all refindex failures."""


class MalformedStructure(RefIndexError):
    """Raised when a document's section tree is invalid."""

    def __init__(self, message: str, *, document: str | None = None) -> None:
        super().__init__(message)
        self.document = document


class DuplicateSectionId(MalformedStructure):
    """Raised when two sections in one document share an identifier."""

    def __init__(self, section_id: str, *, document: str | None = None) -> None:
        where = f" in document '{document}'" if document else ""
        super().__init__(f"Duplicate section id '{section_id}'{where}", document=document)
        self.section_id = section_id


class UnknownEntity(RefIndexError, KeyError):
    """Raised by queries that require an entity the index does not contain."""

    def __init__(self, name: str) -> None:
        super().__init__(name)
        self.name = name

    def __str__(self) -> str:
        return f"Unknown entity: {self.name}"


class ConfigError(RefIndexError):
    """Raised when the configuration file cannot be parsed."""


__all__ = [
    "ConfigError",
    "DuplicateSectionId",
    "MalformedStructure",
    "RefIndexError",
    "UnknownEntity",
]
