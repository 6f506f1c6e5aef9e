"""Selects the single source-language entry module for an emission run."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional

from ..errors import EntrypointCardinalityError, NoEntrypointFoundError
from ..graph.base import ModuleGraphAdapter
from ..logging import get_logger
from ..models import Chunk, Module, ResolvedEntrypoint
from .source_text import SOURCE_EXTENSIONS, is_source_resource


@dataclass
class _Candidate:
    entry_name: str
    module: Module
    chunk: Chunk
    chunks: List[Chunk]


class EntrypointResolver:
    """Resolve exactly one entry point whose entry module is a source file."""

    def __init__(self, logger: logging.Logger | logging.LoggerAdapter | None = None) -> None:
        self.logger = logger or get_logger("entrypoints")

    def resolve(self, graph: ModuleGraphAdapter) -> ResolvedEntrypoint:
        self.logger.debug("Resolving source entrypoint")
        candidates: List[_Candidate] = []

        for entry_name, chunks in graph.entrypoints().items():
            self.logger.debug("Inspecting entrypoint '%s' (%d chunk(s))", entry_name, len(chunks))
            candidate = self._find_candidate(graph, entry_name, list(chunks))
            if candidate is not None:
                self.logger.debug(
                    "Found source entry module for '%s': %s", entry_name, candidate.module.resource
                )
                candidates.append(candidate)

        if not candidates:
            extensions = ", ".join(SOURCE_EXTENSIONS)
            raise NoEntrypointFoundError(
                f"No source entrypoint found: no entry point surfaces a module ending in {extensions}. "
                "Declare exactly one TypeScript entry in the bundler configuration."
            )

        if len(candidates) > 1:
            names = [candidate.entry_name for candidate in candidates]
            raise EntrypointCardinalityError(
                f"Exactly one source entrypoint is required, but found {len(candidates)}: "
                f"[{', '.join(names)}]. Split the build into one configuration per entry.",
                names,
            )

        chosen = candidates[0]
        reachable = self._reachable_modules(graph, chosen.chunks)
        self.logger.debug(
            "Resolved entrypoint '%s' with %d chunk(s) and %d reachable module(s)",
            chosen.entry_name,
            len(chosen.chunks),
            len(reachable),
        )
        return ResolvedEntrypoint(
            entry_name=chosen.entry_name,
            entry_module=chosen.module,
            context_token=chosen.chunk.runtime,
            chunks=chosen.chunks,
            reachable_modules=reachable,
        )

    # ------------------------------------------------------------------

    def _find_candidate(
        self, graph: ModuleGraphAdapter, entry_name: str, chunks: List[Chunk]
    ) -> Optional[_Candidate]:
        for chunk in chunks:
            for module in graph.entry_modules_of(chunk):
                if is_source_resource(module.resource):
                    return _Candidate(entry_name=entry_name, module=module, chunk=chunk, chunks=chunks)
        return None

    def _reachable_modules(self, graph: ModuleGraphAdapter, chunks: List[Chunk]) -> List[Module]:
        seen: dict[Module, None] = {}
        for chunk in chunks:
            for module in graph.modules_of(chunk):
                seen.setdefault(module, None)
        return list(seen)


__all__ = ["EntrypointResolver"]
