"""Renders the final artifact and re-validates it."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Sequence

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from ..config import BuildMode
from ..errors import LeakedRuntimeArtifactError, MissingRuntimeDefinitionError
from ..invariants import first_violation
from ..logging import get_logger
from ..models import ExportBinding
from .source_text import declared_names, strip_js_comments

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"

_SCRIPT_TEMPLATE = "script.gs.j2"
_PAGE_TEMPLATE = "page.html.j2"


class CodeAssembler:
    """Assemble namespace initializer, module code and export assignments."""

    def __init__(
        self,
        namespace: str,
        build_mode: BuildMode = BuildMode.GAS,
        *,
        templates_dir: Path | None = None,
        logger: logging.Logger | logging.LoggerAdapter | None = None,
    ) -> None:
        self.namespace = namespace
        self.build_mode = build_mode
        self.logger = logger or get_logger("assembler")
        self._env = Environment(
            loader=FileSystemLoader(str(templates_dir or TEMPLATES_DIR)),
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
            undefined=StrictUndefined,
        )

    def assemble(self, source: str, bindings: Sequence[ExportBinding]) -> str:
        """Return the artifact text for sanitized ``source``.

        Raises MissingRuntimeDefinitionError when a binding has no definition
        and LeakedRuntimeArtifactError when a forbidden pattern survives.
        """
        self.ensure_definitions(source, bindings)
        script = self.render_script(source, bindings)
        self.verify(script)
        return self.wrap(script)

    def artifact_name(self, entry_name: str) -> str:
        return f"{entry_name}{self.build_mode.extension}"

    def ensure_definitions(self, source: str, bindings: Sequence[ExportBinding]) -> None:
        declared = declared_names(source)
        missing: List[str] = []
        for binding in bindings:
            if binding.local_name not in declared and binding.local_name not in missing:
                missing.append(binding.local_name)
        if missing:
            raise MissingRuntimeDefinitionError(missing)

    def render_script(self, source: str, bindings: Sequence[ExportBinding]) -> str:
        template = self._env.get_template(_SCRIPT_TEMPLATE)
        return template.render(namespace=self.namespace, source=source, bindings=list(bindings))

    def verify(self, script: str) -> None:
        violation = first_violation(strip_js_comments(script))
        if violation is None:
            return
        error = LeakedRuntimeArtifactError(violation.pattern, self.namespace)
        self.logger.error("%s", error)
        raise error

    def wrap(self, script: str) -> str:
        if self.build_mode is BuildMode.UI:
            return self._env.get_template(_PAGE_TEMPLATE).render(script=script)
        return script


__all__ = ["CodeAssembler", "TEMPLATES_DIR"]
