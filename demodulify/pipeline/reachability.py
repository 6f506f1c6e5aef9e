"""Determines which modules' source must be concatenated into the artifact."""

from __future__ import annotations

import logging
from typing import Dict, List, Sequence, Set, Tuple

from ..errors import DefiningModuleResolutionError
from ..graph.base import ModuleGraphAdapter
from ..logging import get_logger
from ..models import ExportBinding, Module, ResolvedEntrypoint


class ReachabilityCollector:
    """Collect the emission set: entry module, reachable modules, defining modules."""

    def __init__(self, logger: logging.Logger | logging.LoggerAdapter | None = None) -> None:
        self.logger = logger or get_logger("reachability")

    def collect(
        self,
        graph: ModuleGraphAdapter,
        entry: ResolvedEntrypoint,
        bindings: Sequence[ExportBinding],
    ) -> List[Module]:
        emission: Dict[Module, None] = {}

        # The entry module may hold side effects unrelated to any export.
        emission.setdefault(entry.entry_module, None)
        for module in entry.reachable_modules:
            emission.setdefault(module, None)

        for binding in bindings:
            defining = self.resolve_defining_module(graph, entry.entry_module, binding.source_export_name)
            if defining not in emission:
                self.logger.debug(
                    "Adding defining module %s for export '%s'",
                    defining.resource or defining.identifier,
                    binding.export_name,
                )
            emission.setdefault(defining, None)

        self.logger.debug("Emission set holds %d module(s)", len(emission))
        return list(emission)

    def resolve_defining_module(
        self, graph: ModuleGraphAdapter, entry_module: Module, export_name: str
    ) -> Module:
        """Follow re-export targets from the entry until a module provides the binding."""
        module = entry_module
        name = export_name
        visited: Set[Tuple[Module, str]] = set()

        while True:
            if (module, name) in visited:
                raise DefiningModuleResolutionError(
                    f"Re-export cycle while resolving '{export_name}' (revisited '{name}' in "
                    f"{_describe(module)}); the host graph metadata is inconsistent."
                )
            visited.add((module, name))

            info = graph.exports_of(module).get(name)
            if info is None:
                raise DefiningModuleResolutionError(
                    f"Export '{name}' is not listed on {_describe(module)} while resolving "
                    f"'{export_name}'; the host graph metadata is inconsistent."
                )

            target = info.target
            if target is None or (target.module == module and target.export_name in (None, name)):
                if info.provided is False:
                    raise DefiningModuleResolutionError(
                        f"Export '{name}' on {_describe(module)} has no re-export target and is "
                        "reported as not provided; cannot locate its defining module."
                    )
                return module

            if target.export_name is None:
                # namespace object re-export: the target module itself defines it
                return target.module
            module, name = target.module, target.export_name


def _describe(module: Module) -> str:
    return module.resource or module.identifier


__all__ = ["ReachabilityCollector"]
