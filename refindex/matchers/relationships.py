"""Typed relationship extraction from tables and connector phrases."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional, Sequence, Tuple

from ..config import RefIndexConfig
from ..models import Table
from .base import EntityMention, normalize_name
from .constants import DEFAULT_PHRASE_RULES, DEFAULT_TABLE_RULES

MentionFinder = Callable[[str], Sequence[EntityMention]]


@dataclass(frozen=True)
class Edge:
    """Relationship discovered in one block, by canonical entity names."""

    source: str
    relation: str
    target: str


@dataclass(frozen=True)
class TableRule:
    """Relates entities in ``source_column`` to entities in ``target_column``."""

    relation: str
    source_column: str
    target_column: str


@dataclass(frozen=True)
class PhraseRule:
    """Relates two adjacent mentions whose gap fully matches ``connector``.

    With ``reverse`` set, the second mention is the edge source, as in
    "games should use Metal".
    """

    relation: str
    connector: re.Pattern[str]
    reverse: bool = False


class RelationshipExtractor:
    """Applies table and phrase rules to block content."""

    def __init__(
        self,
        table_rules: Iterable[TableRule] = (),
        phrase_rules: Iterable[PhraseRule] = (),
    ) -> None:
        self.table_rules: Tuple[TableRule, ...] = tuple(table_rules)
        self.phrase_rules: Tuple[PhraseRule, ...] = tuple(phrase_rules)

    @classmethod
    def from_config(cls, config: Optional[RefIndexConfig] = None) -> "RelationshipExtractor":
        table_rules: List[TableRule] = []
        phrase_rules: List[PhraseRule] = []
        if config is None or config.index.default_catalog:
            table_rules.extend(TableRule(*rule) for rule in DEFAULT_TABLE_RULES)
            phrase_rules.extend(
                PhraseRule(relation, re.compile(pattern, re.IGNORECASE), reverse)
                for relation, pattern, reverse in DEFAULT_PHRASE_RULES
            )
        if config is not None:
            table_rules.extend(
                TableRule(rule.relation, rule.source_column, rule.target_column)
                for rule in config.table_rules
            )
            phrase_rules.extend(
                PhraseRule(rule.relation, re.compile(rule.connector, re.IGNORECASE), rule.reverse)
                for rule in config.phrase_rules
            )
        return cls(table_rules, phrase_rules)

    def from_text(self, text: str, mentions: Sequence[EntityMention]) -> List[Edge]:
        """Return edges for adjacent mention pairs joined by a connector phrase."""
        edges: List[Edge] = []
        for left, right in zip(mentions, mentions[1:]):
            gap = text[left.end : right.start]
            for rule in self.phrase_rules:
                if not rule.connector.fullmatch(gap):
                    continue
                source, target = (right, left) if rule.reverse else (left, right)
                edges.append(Edge(source.name, rule.relation, target.name))
        return edges

    def from_table(self, table: Table, find_mentions: MentionFinder) -> List[Edge]:
        headers = [normalize_name(header) for header in table.headers]
        edges: List[Edge] = []
        for rule in self.table_rules:
            source_key = normalize_name(rule.source_column)
            target_key = normalize_name(rule.target_column)
            if source_key not in headers or target_key not in headers:
                continue
            source_index = headers.index(source_key)
            target_index = headers.index(target_key)
            for row in table.rows:
                if max(source_index, target_index) >= len(row):
                    continue
                sources = find_mentions(row[source_index])
                targets = find_mentions(row[target_index])
                for source in sources:
                    for target in targets:
                        edges.append(Edge(source.name, rule.relation, target.name))
        return edges


__all__ = ["Edge", "PhraseRule", "RelationshipExtractor", "TableRule"]
