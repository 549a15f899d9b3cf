"""Cross-reference resolution with dangling-reference diagnostics."""

from __future__ import annotations

from typing import List

from .index.model import Index
from .logging import get_logger
from .models import DanglingReference, ReferenceSite, ResolutionReport

MISSING_DOCUMENT = "missing-document"
MISSING_SECTION = "missing-section"


class CrossReferenceResolver:
    """Checks every Reference block of an index against its sections."""

    def __init__(self) -> None:
        self.logger = get_logger("resolver")

    def resolve(self, index: Index) -> ResolutionReport:
        resolved = 0
        dangling: List[DanglingReference] = []
        for site in index.references:
            reason = self._check(index, site)
            if reason is None:
                resolved += 1
                continue
            reference = site.reference
            dangling.append(
                DanglingReference(
                    source=site.source,
                    block_index=site.block_index,
                    target=reference.target,
                    target_section=reference.section,
                    reason=reason,
                    label=reference.label,
                )
            )
        self.logger.debug(
            "Resolved %d references, %d dangling", resolved, len(dangling)
        )
        return ResolutionReport(resolved=resolved, dangling=tuple(dangling))

    @staticmethod
    def _check(index: Index, site: ReferenceSite) -> str | None:
        reference = site.reference
        if index.document(reference.target) is None:
            return MISSING_DOCUMENT
        if reference.section is None:
            return None
        if index.locate(reference.target, reference.section) is None:
            return MISSING_SECTION
        return None


def resolve(index: Index) -> ResolutionReport:
    """Resolve all references in ``index``; dangling ones are reported, not raised."""
    return CrossReferenceResolver().resolve(index)


__all__ = ["CrossReferenceResolver", "MISSING_DOCUMENT", "MISSING_SECTION", "resolve"]
