"""Markdown guide loader: headings become sections, fences and tables become blocks."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any, Dict, List, Optional, Set, Tuple

from ..document import build_document
from ..models import Document

_HEADING_PATTERN = re.compile(r"^(#{1,6})\s+(.*?)\s*#*\s*$")
_FENCE_PATTERN = re.compile(r"^(```|~~~)\s*([\w+#.-]*)")
_TABLE_SEPARATOR = re.compile(r"^\|?\s*:?-{3,}:?\s*(\|\s*:?-{3,}:?\s*)*\|?\s*$")
_LINK_PATTERN = re.compile(r"(?<!!)\[([^\]]+)\]\(([^)\s]+)(?:\s+\"[^\"]*\")?\)")
_SEE_PATTERN = re.compile(
    r"\bsee\s+(?:(?P<appendix>Appendix\s+[A-Z0-9]+)|(?:Section|§)\s*(?P<section>\d+(?:\.\d+)*))",
    re.IGNORECASE,
)
_NUMBERED_HEADING = re.compile(r"^(\d+(?:\.\d+)*)\.?\s+")
_APPENDIX_HEADING = re.compile(r"^Appendix\s+([A-Z0-9]+)\b", re.IGNORECASE)

PREAMBLE_SECTION_ID = "0"


def slugify(text: str) -> str:
    """GitHub-style anchor: lowercase, punctuation dropped, spaces to hyphens."""
    slug = text.strip().lower()
    slug = re.sub(r"[^\w\s-]", "", slug)
    slug = re.sub(r"\s", "-", slug)
    return slug


def document_slug(path: Path) -> str:
    return slugify(path.stem) or path.stem


class MarkdownLoader:
    """Turns one markdown guide into a validated :class:`Document`."""

    suffixes = (".md", ".markdown")

    def load(self, path: Path) -> Document:
        text = path.read_text(encoding="utf-8")
        return build_document(self.parse(text, slug=document_slug(path)))

    def parse(self, text: str, *, slug: str) -> Dict[str, Any]:
        """Return the raw structural mapping understood by ``build_document``."""
        title: Optional[str] = None
        headings: List[Dict[str, Any]] = []
        preamble: List[str] = []
        body: List[str] = preamble
        stack: List[Tuple[int, int]] = []
        anchor_counts: Dict[str, int] = {}
        fence: Optional[str] = None

        for line in text.splitlines():
            stripped = line.strip()
            opening = _FENCE_PATTERN.match(stripped)
            if fence is None and opening:
                fence = opening.group(1)
                body.append(line)
                continue
            if fence is not None:
                if stripped.startswith(fence):
                    fence = None
                body.append(line)
                continue
            match = _HEADING_PATTERN.match(stripped)
            if match is None:
                body.append(line)
                continue

            level = len(match.group(1))
            heading = match.group(2).strip()
            if level == 1 and title is None and not headings:
                title = heading
                continue

            while stack and stack[-1][0] >= level:
                stack.pop()
            body = []
            headings.append(
                {
                    "id": _explicit_id(heading),
                    "base": slugify(heading) or "section",
                    "heading": heading,
                    "parent": stack[-1][1] if stack else None,
                    "anchor": _dedupe(slugify(heading), anchor_counts),
                    "lines": body,
                }
            )
            stack.append((level, len(headings) - 1))

        # Ids written in headings are reserved first; generated ids take what is left.
        taken = {item["id"] for item in headings if item["id"] is not None}
        for item in headings:
            if item["id"] is None:
                item["id"] = _free_id(item["base"], taken)
                taken.add(item["id"])

        sections: List[Dict[str, Any]] = []
        preamble_blocks = _parse_blocks(preamble, slug)
        if preamble_blocks:
            sections.append(
                {
                    "id": _free_id(PREAMBLE_SECTION_ID, taken),
                    "heading": title or slug,
                    "parent": None,
                    "blocks": preamble_blocks,
                }
            )
        for item in headings:
            parent = item["parent"]
            sections.append(
                {
                    "id": item["id"],
                    "heading": item["heading"],
                    "parent": headings[parent]["id"] if parent is not None else None,
                    "anchor": item["anchor"],
                    "blocks": _parse_blocks(item["lines"], slug),
                }
            )

        return {"slug": slug, "title": title or slug, "sections": sections}


def _explicit_id(heading: str) -> Optional[str]:
    numbered = _NUMBERED_HEADING.match(heading)
    if numbered:
        return numbered.group(1)
    appendix = _APPENDIX_HEADING.match(heading)
    if appendix:
        return f"appendix-{appendix.group(1).lower()}"
    return None


def _free_id(base: str, taken: Set[str]) -> str:
    candidate = base
    suffix = 0
    while candidate in taken:
        suffix += 1
        candidate = f"{base}-{suffix}"
    return candidate


def _dedupe(base: str, counts: Dict[str, int]) -> str:
    seen = counts.get(base, 0)
    counts[base] = seen + 1
    return base if seen == 0 else f"{base}-{seen}"


def _parse_blocks(lines: List[str], slug: str) -> List[Dict[str, Any]]:
    blocks: List[Dict[str, Any]] = []
    paragraph: List[str] = []
    index = 0

    def _flush() -> None:
        if paragraph:
            text = "\n".join(paragraph).strip()
            paragraph.clear()
            if text:
                blocks.append({"type": "prose", "text": text})
                blocks.extend(_references(text, slug))

    while index < len(lines):
        line = lines[index]
        stripped = line.strip()
        fence = _FENCE_PATTERN.match(stripped)
        if fence:
            _flush()
            marker = fence.group(1)
            language = fence.group(2) or None
            code: List[str] = []
            index += 1
            while index < len(lines) and not lines[index].strip().startswith(marker):
                code.append(lines[index])
                index += 1
            index += 1
            blocks.append({"type": "code", "language": language, "body": "\n".join(code)})
            continue
        if (
            stripped.startswith("|")
            and index + 1 < len(lines)
            and _TABLE_SEPARATOR.match(lines[index + 1].strip())
        ):
            _flush()
            headers = _split_row(stripped)
            rows: List[List[str]] = []
            index += 2
            while index < len(lines) and lines[index].strip().startswith("|"):
                rows.append(_split_row(lines[index].strip()))
                index += 1
            blocks.append({"type": "table", "headers": headers, "rows": rows})
            continue
        if not stripped:
            _flush()
        else:
            paragraph.append(line)
        index += 1

    _flush()
    return blocks


def _split_row(line: str) -> List[str]:
    inner = line.strip()
    if inner.startswith("|"):
        inner = inner[1:]
    if inner.endswith("|"):
        inner = inner[:-1]
    return [cell.strip() for cell in inner.split("|")]


def _references(text: str, slug: str) -> List[Dict[str, Any]]:
    found: List[Tuple[int, Dict[str, Any]]] = []
    for match in _LINK_PATTERN.finditer(text):
        reference = _link_reference(match.group(2).strip(), slug)
        if reference is not None:
            reference["label"] = match.group(1).strip()
            found.append((match.start(), reference))
    for match in _SEE_PATTERN.finditer(text):
        appendix = match.group("appendix")
        if appendix:
            target = f"appendix-{appendix.split()[-1].lower()}"
        else:
            target = match.group("section")
        found.append(
            (
                match.start(),
                {"type": "reference", "target": slug, "section": target, "label": match.group(0)},
            )
        )
    found.sort(key=lambda item: item[0])
    return [reference for _, reference in found]


def _link_reference(target: str, slug: str) -> Optional[Dict[str, Any]]:
    if target.startswith(("http://", "https://", "mailto:")):
        return None
    if target.startswith("#"):
        anchor = target[1:]
        return {"type": "reference", "target": slug, "section": anchor or None}
    path_part, _, anchor = target.partition("#")
    path_part = path_part.split("?", 1)[0]
    if not path_part.lower().endswith(MarkdownLoader.suffixes):
        return None
    return {
        "type": "reference",
        "target": document_slug(Path(path_part)),
        "section": anchor or None,
    }


__all__ = ["MarkdownLoader", "PREAMBLE_SECTION_ID", "document_slug", "slugify"]
