"""Loader for documents already expressed as YAML or JSON structure."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import yaml

from ..document import build_document
from ..errors import MalformedStructure
from ..models import Document
from .markdown import document_slug


class StructuredLoader:
    """Reads the raw document mapping from a ``.yml``, ``.yaml`` or ``.json`` file."""

    suffixes = (".yml", ".yaml", ".json")

    def load(self, path: Path) -> Document:
        text = path.read_text(encoding="utf-8")
        try:
            data: Any = json.loads(text) if path.suffix.lower() == ".json" else yaml.safe_load(text)
        except (json.JSONDecodeError, yaml.YAMLError) as exc:
            raise MalformedStructure(f"Failed to parse {path.name}: {exc}") from exc
        if not isinstance(data, dict):
            raise MalformedStructure(f"{path.name} must contain a mapping at the root")
        data.setdefault("slug", document_slug(path))
        return build_document(data)


__all__ = ["StructuredLoader"]
