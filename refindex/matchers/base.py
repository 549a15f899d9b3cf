"""Base classes for entity matcher plugins."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Mapping


class EntityCategory(str, Enum):
    """Built-in entity categories. Configuration may introduce others by name."""

    FRAMEWORK = "Framework"
    APP_TYPE = "AppType"
    LAYER = "Layer"


@dataclass(frozen=True)
class EntityMention:
    """A recognised entity name at a character span of some block text."""

    name: str
    category: str
    start: int
    end: int


def normalize_name(name: str) -> str:
    """Identity key for entity names: case-insensitive, whitespace-collapsed."""
    return " ".join(name.split()).casefold()


class EntityMatcher(ABC):
    """Contract for matchers that recognise entity names in block text."""

    name: str = "matcher"

    @abstractmethod
    def match(self, text: str) -> Iterable[EntityMention]:
        """Yield mentions found in ``text`` ordered by position."""

    def aliases(self) -> Mapping[str, str]:
        """Alternate spellings this matcher folds into a canonical name.

        Keys are surface forms, values the canonical name. Queries use the
        map so an alias finds the same entity the builder recorded.
        """
        return {}
