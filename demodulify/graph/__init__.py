"""Module-graph adapters."""

from .base import ModuleGraphAdapter
from .snapshot import SnapshotGraph, load_snapshot

__all__ = ["ModuleGraphAdapter", "SnapshotGraph", "load_snapshot"]
