"""Structured reference index over architecture guides."""

from .document import build_document, validate_document
from .errors import ConfigError, DuplicateSectionId, MalformedStructure, RefIndexError, UnknownEntity
from .index import Index, IndexBuilder, build
from .models import (
    CodeExample,
    DanglingReference,
    Document,
    Entity,
    Prose,
    Reference,
    Relationship,
    ResolutionReport,
    Section,
    SectionRef,
    Table,
)
from .query import NOT_FOUND, QueryEngine
from .resolver import CrossReferenceResolver, resolve

__all__ = [
    "CodeExample",
    "ConfigError",
    "CrossReferenceResolver",
    "DanglingReference",
    "Document",
    "DuplicateSectionId",
    "Entity",
    "Index",
    "IndexBuilder",
    "MalformedStructure",
    "NOT_FOUND",
    "Prose",
    "QueryEngine",
    "Reference",
    "RefIndexError",
    "Relationship",
    "ResolutionReport",
    "Section",
    "SectionRef",
    "Table",
    "UnknownEntity",
    "build",
    "build_document",
    "resolve",
    "validate_document",
]
