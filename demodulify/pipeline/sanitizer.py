"""Concatenates module source and neutralises bundler runtime lines."""

from __future__ import annotations

import logging
import re
from typing import List, Sequence

from ..graph.base import ModuleGraphAdapter
from ..invariants import FORBIDDEN_RUNTIME_PATTERNS
from ..logging import get_logger
from ..models import ContextToken, Module

DROPPED_LINE_PREFIX = "// [dropped-by-demodulify]: "

_LINE_SPLIT = re.compile(r"\r?\n")


class SourceSanitizer:
    """Comment out forbidden lines one-for-one so line numbers stay aligned."""

    def __init__(
        self,
        patterns: Sequence[re.Pattern[str]] = FORBIDDEN_RUNTIME_PATTERNS,
        logger: logging.Logger | logging.LoggerAdapter | None = None,
    ) -> None:
        self.patterns = tuple(patterns)
        self.logger = logger or get_logger("sanitizer")

    def concatenate(
        self, graph: ModuleGraphAdapter, modules: Sequence[Module], token: ContextToken
    ) -> str:
        """Join the generated source of ``modules`` in emission order."""
        parts: List[str] = []
        for module in modules:
            source = graph.source_of(module, token)
            if source and source.strip():
                parts.append(source)
            else:
                self.logger.debug("No generated source for %s", module.resource or module.identifier)
        return "\n".join(parts)

    def sanitize(self, source: str) -> str:
        if not source.strip():
            return source

        out: List[str] = []
        dropped = 0
        for line in _LINE_SPLIT.split(source):
            if any(pattern.search(line) for pattern in self.patterns):
                out.append(f"{DROPPED_LINE_PREFIX}{line.strip()}")
                dropped += 1
            else:
                out.append(line)

        self.logger.debug("Sanitizer dropped %d line(s)", dropped)
        return "\n".join(out)


__all__ = ["DROPPED_LINE_PREFIX", "SourceSanitizer"]
