"""Entity matcher implementations and plugin discovery utilities."""

from __future__ import annotations

from importlib import metadata
from typing import Callable, Iterable, List, Optional, Sequence, Set

from ..config import RefIndexConfig
from ..errors import ConfigError
from .base import EntityCategory, EntityMatcher, EntityMention, normalize_name
from .catalog import CatalogEntry, CatalogMatcher
from .relationships import Edge, PhraseRule, RelationshipExtractor, TableRule

_ENTRY_POINT_GROUP = "refindex.matchers"

_BUILTIN_FACTORIES: dict[str, Callable[[Optional[RefIndexConfig]], EntityMatcher]] = {
    "catalog": CatalogMatcher.from_config,
}


def discover_matchers(
    enabled: Sequence[str] | None = None,
    config: RefIndexConfig | None = None,
) -> List[EntityMatcher]:
    """Return instantiated matchers, honoring optional enabled names."""

    if enabled is None and config is not None:
        enabled = config.index.matchers

    enabled_set: Set[str] | None = None
    if enabled is not None:
        enabled_set = {name.lower() for name in enabled}

    matchers: List[EntityMatcher] = []
    seen: Set[str] = set()

    def _add(name: str, factory: Callable[[], EntityMatcher]) -> None:
        key = name.lower()
        if enabled_set is not None and key not in enabled_set:
            return
        if key in seen:
            return
        instance = factory()
        if not isinstance(instance, EntityMatcher):
            raise TypeError(f"Matcher factory for '{name}' did not return an EntityMatcher instance")
        matchers.append(instance)
        seen.add(key)
        if enabled_set is not None:
            enabled_set.discard(key)

    for name, builtin in _BUILTIN_FACTORIES.items():
        _add(name, lambda builtin=builtin: builtin(config))

    for entry in _iter_entry_points():
        name = entry.name
        try:
            loaded = entry.load()
        except Exception as exc:  # pragma: no cover - defensive guard
            raise RuntimeError(f"Failed to load matcher entry point '{name}': {exc}") from exc

        def _factory(obj: object = loaded) -> EntityMatcher:
            return _coerce_matcher(obj)

        _add(name, _factory)

    if enabled_set:
        missing = ", ".join(sorted(enabled_set))
        raise ConfigError(f"Unknown matchers requested: {missing}")

    return matchers


def _coerce_matcher(obj: object) -> EntityMatcher:
    if isinstance(obj, EntityMatcher):
        return obj
    if isinstance(obj, type) and issubclass(obj, EntityMatcher):
        return obj()
    if callable(obj):
        instance = obj()
        if isinstance(instance, EntityMatcher):
            return instance
    raise TypeError("Matcher entry point must be an EntityMatcher subclass or factory")


def _iter_entry_points() -> Iterable[metadata.EntryPoint]:
    return metadata.entry_points().select(group=_ENTRY_POINT_GROUP)


__all__ = [
    "CatalogEntry",
    "CatalogMatcher",
    "Edge",
    "EntityCategory",
    "EntityMatcher",
    "EntityMention",
    "PhraseRule",
    "RelationshipExtractor",
    "TableRule",
    "discover_matchers",
    "normalize_name",
]
