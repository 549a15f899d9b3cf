"""Configuration loading for refindex (.refindex.yml)."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from .errors import ConfigError

CONFIG_FILENAME = ".refindex.yml"


@dataclass
class SourcesConfig:
    """Which files under the corpus root are loaded as documents."""

    include: List[str] = field(default_factory=lambda: ["**/*.md"])
    exclude: List[str] = field(default_factory=list)


@dataclass
class IndexConfig:
    """Index builder settings."""

    workers: int = 1
    scan_code: bool = True
    scan_headings: bool = True
    matchers: Optional[List[str]] = None
    default_catalog: bool = True


@dataclass
class CategoryConfig:
    """Names recognised for one entity category, canonical name -> aliases."""

    names: Dict[str, List[str]] = field(default_factory=dict)
    ignore_case: bool = False


@dataclass
class TableRuleConfig:
    """Relationship read from two columns of a reference table."""

    relation: str
    source_column: str
    target_column: str


@dataclass
class PhraseRuleConfig:
    """Relationship read from a connector phrase between two mentions."""

    relation: str
    connector: str
    reverse: bool = False


@dataclass
class RefIndexConfig:
    """Represents the settings defined in .refindex.yml."""

    root: Path
    sources: SourcesConfig = field(default_factory=SourcesConfig)
    index: IndexConfig = field(default_factory=IndexConfig)
    entities: Dict[str, CategoryConfig] = field(default_factory=dict)
    table_rules: List[TableRuleConfig] = field(default_factory=list)
    phrase_rules: List[PhraseRuleConfig] = field(default_factory=list)


def load_config(config_path: Path) -> RefIndexConfig:
    """Load configuration from disk, returning defaults when the file is absent."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return RefIndexConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    sources = SourcesConfig()
    sources_data = _as_dict(data.get("sources"), "sources")
    if "include" in sources_data:
        sources.include = _as_str_list(sources_data.get("include"), "sources.include")
    sources.exclude = _as_str_list(sources_data.get("exclude"), "sources.exclude")

    index = IndexConfig()
    index_data = _as_dict(data.get("index"), "index")
    workers = _as_int(index_data.get("workers"), "index.workers")
    if workers is not None:
        if workers < 1:
            raise ConfigError("index.workers must be at least 1")
        index.workers = workers
    index.scan_code = _bool_or(index_data.get("scan_code"), index.scan_code, "index.scan_code")
    index.scan_headings = _bool_or(
        index_data.get("scan_headings"), index.scan_headings, "index.scan_headings"
    )
    index.default_catalog = _bool_or(
        index_data.get("default_catalog"), index.default_catalog, "index.default_catalog"
    )
    if "matchers" in index_data:
        index.matchers = _as_str_list(index_data.get("matchers"), "index.matchers")

    entities: Dict[str, CategoryConfig] = {}
    for category, category_data in _as_dict(data.get("entities"), "entities").items():
        entities[str(category)] = _parse_category(str(category), category_data)

    relationships = _as_dict(data.get("relationships"), "relationships")
    table_rules = [
        _parse_table_rule(item)
        for item in _as_list(relationships.get("tables"), "relationships.tables")
    ]
    phrase_rules = [
        _parse_phrase_rule(item)
        for item in _as_list(relationships.get("phrases"), "relationships.phrases")
    ]

    return RefIndexConfig(
        root=root,
        sources=sources,
        index=index,
        entities=entities,
        table_rules=table_rules,
        phrase_rules=phrase_rules,
    )


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    if config_path.name != CONFIG_FILENAME:
        return (config_path.parent / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded or {}


def _parse_category(category: str, value: Any) -> CategoryConfig:
    key = f"entities.{category}"
    # A bare list is shorthand for names without aliases.
    if isinstance(value, list):
        return CategoryConfig(names=_names_from_list(value, key))
    if not isinstance(value, dict) or not value:
        raise ConfigError(f"{key} must be a mapping or a list of names")
    raw_names = value.get("names")
    names: Dict[str, List[str]] = {}
    if isinstance(raw_names, list):
        names = _names_from_list(raw_names, f"{key}.names")
    else:
        for name, aliases in _as_dict(raw_names, f"{key}.names").items():
            names[str(name)] = _as_str_list(aliases, f"{key}.names.{name}")
    return CategoryConfig(
        names=names,
        ignore_case=_bool_or(value.get("ignore_case"), False, f"{key}.ignore_case"),
    )


def _names_from_list(values: List[Any], key: str) -> Dict[str, List[str]]:
    return {name: [] for name in _as_str_list(values, key)}


def _parse_table_rule(value: Any) -> TableRuleConfig:
    data = _as_dict(value, "relationships.tables[]")
    relation = _as_str(data.get("relation"))
    source = _as_str(data.get("source_column"))
    target = _as_str(data.get("target_column"))
    if not (relation and source and target):
        raise ConfigError("Table relationship rules need relation, source_column and target_column")
    return TableRuleConfig(relation=relation, source_column=source, target_column=target)


def _parse_phrase_rule(value: Any) -> PhraseRuleConfig:
    data = _as_dict(value, "relationships.phrases[]")
    relation = _as_str(data.get("relation"))
    connector = _as_str(data.get("connector"))
    if not (relation and connector):
        raise ConfigError("Phrase relationship rules need relation and connector")
    try:
        re.compile(connector)
    except re.error as exc:
        raise ConfigError(f"Invalid connector pattern for '{relation}': {exc}") from exc
    return PhraseRuleConfig(
        relation=relation,
        connector=connector,
        reverse=_bool_or(data.get("reverse"), False, f"relationships.phrases[{relation}].reverse"),
    )


# Absent keys fall back to defaults; present keys of the wrong shape are errors.


def _as_dict(value: Any, key: str) -> Dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ConfigError(f"{key} must be a mapping, got {type(value).__name__}")
    return value


def _as_list(value: Any, key: str) -> List[Any]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise ConfigError(f"{key} must be a list, got {type(value).__name__}")
    return value


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float, bool)) else None


def _as_int(value: Any, key: str) -> Optional[int]:
    if value is None:
        return None
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            pass
    raise ConfigError(f"{key} must be an integer, got {value!r}")


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None


def _bool_or(value: Any, default: bool, key: str) -> bool:
    if value is None:
        return default
    parsed = _as_bool(value)
    if parsed is None:
        raise ConfigError(f"{key} must be true or false, got {value!r}")
    return parsed


def _as_str_list(value: Any, key: str) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, list):
        items: List[str] = []
        for item in value:
            text = _as_str(item)
            if text is None:
                raise ConfigError(f"{key} must contain only strings, got {item!r}")
            items.append(text)
        return items
    raise ConfigError(f"{key} must be a string or a list of strings")


__all__ = [
    "CONFIG_FILENAME",
    "CategoryConfig",
    "IndexConfig",
    "PhraseRuleConfig",
    "RefIndexConfig",
    "SourcesConfig",
    "TableRuleConfig",
    "load_config",
]
