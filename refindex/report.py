"""Plain-text rendering of resolution reports and entity summaries."""

from __future__ import annotations

from pathlib import Path
from typing import Sequence

from jinja2 import Environment, FileSystemLoader

from .loaders import LoadFailure
from .models import Entity, ResolutionReport

_TEMPLATES_DIR = Path(__file__).with_name("templates")


class ReportRenderer:
    """Renders diagnostics through jinja2 templates."""

    def __init__(self, templates_dir: Path | None = None) -> None:
        directories = []
        if templates_dir is not None:
            directories.append(str(templates_dir))
        directories.append(str(_TEMPLATES_DIR))
        self._env = Environment(
            loader=FileSystemLoader(directories),
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
        )

    def resolution(
        self, report: ResolutionReport, failures: Sequence[LoadFailure] = ()
    ) -> str:
        template = self._env.get_template("resolution.j2")
        return template.render(report=report, failures=list(failures)).rstrip() + "\n"

    def entity(self, entity: Entity) -> str:
        template = self._env.get_template("entity.j2")
        return template.render(entity=entity).rstrip() + "\n"


__all__ = ["ReportRenderer"]
