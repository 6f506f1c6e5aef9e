"""Core data models shared across demodulify components."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import FrozenSet, Iterable, List, Optional, Union

ContextToken = Union[str, FrozenSet[str], None]


def normalize_context_token(value: object) -> ContextToken:
    """Coerce a runtime descriptor (string, iterable of strings, or None) into a token."""
    if value is None:
        return None
    if isinstance(value, str):
        return value
    if isinstance(value, Iterable):
        names = frozenset(str(item) for item in value)
        return names or None
    raise TypeError(f"Unsupported context token: {value!r}")


def token_members(token: ContextToken) -> FrozenSet[str]:
    """Return the set of runtime names a token covers."""
    if token is None:
        return frozenset()
    if isinstance(token, str):
        return frozenset({token})
    return frozenset(token)


def tokens_match(left: ContextToken, right: ContextToken) -> bool:
    """Compare tokens by membership only; ``"main"`` equals ``{"main"}``."""
    return token_members(left) == token_members(right)


@dataclass(frozen=True)
class Module:
    """Opaque module identity as reported by the host graph."""

    identifier: str
    resource: Optional[str] = None


@dataclass(frozen=True)
class Chunk:
    """Execution chunk; carries the context token its code was generated for."""

    identifier: str
    runtime: ContextToken = None


@dataclass(frozen=True)
class ExportTarget:
    """Re-export destination. ``export_name`` of None means the namespace object."""

    module: Module
    export_name: Optional[str]


@dataclass(frozen=True)
class ExportInfo:
    """Metadata for a single export name on a module."""

    name: str
    provided: Optional[bool] = True
    target: Optional[ExportTarget] = None


@dataclass
class ExportsInfo:
    """Ordered export metadata for a module."""

    ordered_exports: List[ExportInfo] = field(default_factory=list)
    other_exports_provided: bool = False

    def get(self, name: str) -> Optional[ExportInfo]:
        for info in self.ordered_exports:
            if info.name == name:
                return info
        return None

    def names(self) -> List[str]:
        return [info.name for info in self.ordered_exports]


@dataclass
class ResolvedEntrypoint:
    """The single entry selected for an emission run."""

    entry_name: str
    entry_module: Module
    context_token: ContextToken
    chunks: List[Chunk]
    reachable_modules: List[Module]


@dataclass(frozen=True)
class ExportBinding:
    """Binds a namespace-facing export name to a runtime identifier."""

    export_name: str
    local_name: str
    source_export_name: str


@dataclass(frozen=True)
class Artifact:
    """The single text file produced by a successful run."""

    name: str
    content: str
