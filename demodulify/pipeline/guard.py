"""Fail-fast checks for export-surface shapes that cannot be flattened.

Wildcard re-exports are detected twice: by scanning the source file on disk
and by the graph's "other exports provided" flag. Either detector firing is
fatal; synthetic modules have no file and rely on the flag alone.
"""

from __future__ import annotations

import logging
import re
from typing import Iterator, Tuple

from ..errors import UnsupportedAliasedReexportError, UnsupportedWildcardReexportError
from ..graph.base import ModuleGraphAdapter
from ..logging import get_logger
from ..models import Module, ResolvedEntrypoint
from .source_text import dialect_for, is_source_resource, safe_read, strip_js_comments

EXPORT_STAR_PATTERN = re.compile(r"export\s*\*\s*(?:as\s+[\w$]+\s*)?(?:from\s*['\"]|;)")
REEXPORT_LIST_PATTERN = re.compile(r"export\s*(type\s+)?\{([^}]*)\}\s*from\s*['\"]")
_SPECIFIER_PATTERN = re.compile(r"^(type\s+)?([\w$]+)(?:\s+as\s+([\w$]+))?$")


class InvariantGuard:
    """Reject wildcard and aliased re-exports before any emission work."""

    def __init__(self, logger: logging.Logger | logging.LoggerAdapter | None = None) -> None:
        self.logger = logger or get_logger("invariants")

    def check(self, graph: ModuleGraphAdapter, entry: ResolvedEntrypoint) -> None:
        for module in entry.reachable_modules:
            self._check_wildcard_source(graph, module)
            self._check_wildcard_metadata(graph, module)
        self._check_aliased_reexports(graph, entry.entry_module)
        self.logger.debug(
            "Export surface validated across %d reachable module(s)", len(entry.reachable_modules)
        )

    # ------------------------------------------------------------------
    # Wildcards

    def _check_wildcard_source(self, graph: ModuleGraphAdapter, module: Module) -> None:
        code = self._read_source_code(graph, module)
        if code and EXPORT_STAR_PATTERN.search(code):
            raise UnsupportedWildcardReexportError(f"Module: {graph.resource_of(module)}")

    def _check_wildcard_metadata(self, graph: ModuleGraphAdapter, module: Module) -> None:
        if graph.exports_of(module).other_exports_provided is True:
            raise UnsupportedWildcardReexportError(f"Module: {module.resource or '<synthetic>'}")

    # ------------------------------------------------------------------
    # Aliases (entry module only)

    def _check_aliased_reexports(self, graph: ModuleGraphAdapter, module: Module) -> None:
        code = self._read_source_code(graph, module)
        if not code:
            return
        alias = next(iter_aliased_reexports(code), None)
        if alias is not None:
            original, exported = alias
            raise UnsupportedAliasedReexportError(
                exported, original, details=f"Module: {graph.resource_of(module)}"
            )

    def _read_source_code(self, graph: ModuleGraphAdapter, module: Module) -> str:
        """Return the module's on-disk source with comments removed, or ''."""
        if not is_source_resource(module.resource):
            return ""
        path = graph.resource_of(module)
        if path is None or not path.is_file():
            self.logger.debug("Skipping static scan for %s (file not found)", module.resource)
            return ""
        text = safe_read(path)
        return strip_js_comments(text, dialect_for(module.resource)) if text else ""


def iter_aliased_reexports(source: str) -> Iterator[Tuple[str, str]]:
    """Yield ``(original, exported)`` pairs for value re-exports that rename."""
    for match in REEXPORT_LIST_PATTERN.finditer(source):
        if match.group(1):
            continue
        for raw in match.group(2).split(","):
            specifier = " ".join(raw.split())
            if not specifier:
                continue
            parsed = _SPECIFIER_PATTERN.match(specifier)
            if parsed is None or parsed.group(1):
                continue
            original, exported = parsed.group(2), parsed.group(3)
            if exported and exported != original:
                yield original, exported


__all__ = ["EXPORT_STAR_PATTERN", "InvariantGuard", "iter_aliased_reexports"]
