"""Read-only view over a host-supplied module graph."""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Iterable, List, Mapping, Optional

from ..models import Chunk, ContextToken, ExportsInfo, Module


class ModuleGraphAdapter(ABC):
    """Contract the pipeline relies on to read the host's module graph.

    Implementations wrap whatever the host exposes; the pipeline never
    mutates the graph and keeps no reference to it after a run.
    """

    @abstractmethod
    def entrypoints(self) -> Mapping[str, List[Chunk]]:
        """Return entry name -> chunks, in the host's declaration order."""

    def chunks_of(self, entry_name: str) -> List[Chunk]:
        return list(self.entrypoints().get(entry_name, []))

    @abstractmethod
    def modules_of(self, chunk: Chunk) -> Iterable[Module]:
        """Return every module reachable from ``chunk``."""

    @abstractmethod
    def entry_modules_of(self, chunk: Chunk) -> Iterable[Module]:
        """Return the chunk's own entry module(s)."""

    @abstractmethod
    def exports_of(self, module: Module) -> ExportsInfo:
        """Return ordered export metadata for ``module``."""

    @abstractmethod
    def source_of(self, module: Module, token: ContextToken) -> str:
        """Return generated source for ``module`` under ``token`` ('' when elided)."""

    def resource_of(self, module: Module) -> Optional[Path]:
        """Return the module's absolute on-disk path, if it has one."""
        if not module.resource:
            return None
        path = Path(module.resource)
        if path.is_absolute():
            return path
        return (self.context() / path).resolve()

    def context(self) -> Path:
        """Directory against which relative resource paths resolve."""
        return Path.cwd()
