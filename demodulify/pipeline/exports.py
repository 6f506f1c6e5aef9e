"""Maps the entry module's exports to namespace bindings."""

from __future__ import annotations

import logging
from typing import List, Optional

from ..errors import (
    NoExportedSymbolsError,
    UnsupportedAliasedReexportError,
    UnsupportedWildcardReexportError,
)
from ..graph.base import ModuleGraphAdapter
from ..logging import get_logger
from ..models import ExportBinding, ExportInfo, Module, ResolvedEntrypoint

DEFAULT_EXPORT = "default"
DEFAULT_EXPORT_LOCAL_NAME = "defaultExport"

# Interop flags injected by bundlers; never part of the authored surface.
SYNTHETIC_EXPORTS = frozenset({"__esModule"})


class ExportSurfaceResolver:
    """Resolve export bindings for the entry module.

    Aliased re-exports are rejected here as well as by the source scan in
    InvariantGuard: metadata catches entries whose source is not on disk.
    """

    def __init__(
        self,
        default_export_name: Optional[str] = None,
        logger: logging.Logger | logging.LoggerAdapter | None = None,
    ) -> None:
        self.default_export_name = default_export_name
        self.logger = logger or get_logger("exports")

    def resolve(self, graph: ModuleGraphAdapter, entry: ResolvedEntrypoint) -> List[ExportBinding]:
        bindings: List[ExportBinding] = []
        exports = graph.exports_of(entry.entry_module)

        for info in exports.ordered_exports:
            if info.name in SYNTHETIC_EXPORTS:
                continue
            if info.provided is False:
                self.logger.debug("Skipping export '%s' (not provided at runtime)", info.name)
                continue

            if info.name == DEFAULT_EXPORT:
                binding = ExportBinding(
                    export_name=self.default_export_name or DEFAULT_EXPORT_LOCAL_NAME,
                    local_name=DEFAULT_EXPORT_LOCAL_NAME,
                    source_export_name=DEFAULT_EXPORT,
                )
            else:
                self._reject_renamed_reexport(graph, entry.entry_module, info)
                binding = ExportBinding(
                    export_name=info.name,
                    local_name=info.name,
                    source_export_name=info.name,
                )

            self.logger.debug(
                "ExportBinding resolved: exportName=%s runtimeIdentifier=%s",
                binding.export_name,
                binding.local_name,
            )
            bindings.append(binding)

        if not bindings:
            raise NoExportedSymbolsError(
                f"No exported symbols found in source entrypoint '{entry.entry_name}'. "
                "Export at least one function, class or value (type-only exports are erased)."
            )
        return bindings

    def _reject_renamed_reexport(
        self, graph: ModuleGraphAdapter, entry_module: Module, info: ExportInfo
    ) -> None:
        target = info.target
        if target is None or target.module == entry_module:
            return
        if target.export_name is None:
            raise UnsupportedWildcardReexportError(
                f"Export '{info.name}' re-exports the whole namespace of {target.module.resource or target.module.identifier}"
            )
        if target.export_name != info.name:
            raise UnsupportedAliasedReexportError(info.name, target.export_name)
        if graph.exports_of(target.module).get(info.name) is None:
            raise UnsupportedAliasedReexportError(info.name)


__all__ = [
    "DEFAULT_EXPORT",
    "DEFAULT_EXPORT_LOCAL_NAME",
    "ExportSurfaceResolver",
    "SYNTHETIC_EXPORTS",
]
