"""Pipeline orchestration: one emission per host compilation pass."""

from __future__ import annotations

import logging
from typing import Any, Mapping, MutableMapping

from .config import DemodulifyOptions, resolve_options
from .graph.base import ModuleGraphAdapter
from .logging import bind_logger, resolve_log_level
from .models import Artifact
from .pipeline import (
    CodeAssembler,
    EntrypointResolver,
    ExportSurfaceResolver,
    InvariantGuard,
    ReachabilityCollector,
    SourceSanitizer,
)

# Sentinel filename bundler configs use for the transient bundle output.
OUTPUT_BUNDLE_FILENAME_TO_DELETE = "OUTPUT-BUNDLE-FILENAME-DERIVED-FROM-ENTRY-NAME"


class DemodulifyPlugin:
    """Flattens a module graph into a single namespaced artifact.

    Holds only write-once configuration and its logger; every call to
    :meth:`run` builds fresh pipeline state, so one instance can serve
    repeated rebuilds.
    """

    def __init__(
        self,
        options: DemodulifyOptions | Mapping[str, Any] | None = None,
        *,
        logger: logging.Logger | logging.LoggerAdapter | None = None,
    ) -> None:
        self.options = resolve_options(options)
        if logger is None:
            level = resolve_log_level(self.options.log_level.value)
            logger = bind_logger("plugin", level)
        self.logger = logger
        self.logger.info(
            "Initialized demodulify (namespaceRoot=%s, subsystem=%s, buildMode=%s)",
            self.options.namespace_root,
            self.options.subsystem,
            self.options.build_mode.value,
        )

    @property
    def namespace(self) -> str:
        return self.options.namespace

    def run(self, graph: ModuleGraphAdapter) -> Artifact:
        """Execute the pipeline once and return the artifact; raises on any violation."""
        self.logger.info("Beginning demodulification for namespace '%s'", self.namespace)

        entry = EntrypointResolver(logger=self.logger).resolve(graph)
        self.logger.info("Resolved source entrypoint '%s'", entry.entry_name)

        InvariantGuard(logger=self.logger).check(graph, entry)
        self.logger.info("Validated export surface (no wildcard or aliased re-exports)")

        bindings = ExportSurfaceResolver(
            default_export_name=self.options.default_export_name,
            logger=self.logger,
        ).resolve(graph, entry)
        self.logger.info("Discovered %d exported symbol(s)", len(bindings))

        modules = ReachabilityCollector(logger=self.logger).collect(graph, entry, bindings)

        sanitizer = SourceSanitizer(logger=self.logger)
        source = sanitizer.sanitize(sanitizer.concatenate(graph, modules, entry.context_token))
        self.logger.info("Sanitized transpiled source of %d module(s)", len(modules))

        assembler = CodeAssembler(self.namespace, self.options.build_mode, logger=self.logger)
        content = assembler.assemble(source, bindings)
        artifact = Artifact(name=assembler.artifact_name(entry.entry_name), content=content)
        self.logger.info("Assembled artifact '%s'", artifact.name)
        return artifact

    def process_assets(self, graph: ModuleGraphAdapter, assets: MutableMapping[str, str]) -> Artifact:
        """Run the pipeline and swap transient bundle assets for the artifact.

        ``assets`` is left untouched when the pipeline fails.
        """
        artifact = self.run(graph)

        removed = [
            name
            for name in list(assets)
            if name.endswith(".js") or name == OUTPUT_BUNDLE_FILENAME_TO_DELETE
        ]
        for name in removed:
            del assets[name]
        if removed:
            self.logger.info("Removed %d transient bundler asset(s)", len(removed))

        assets[artifact.name] = artifact.content
        self.logger.info("Emitted artifact '%s'", artifact.name)
        return artifact


__all__ = ["DemodulifyPlugin", "OUTPUT_BUNDLE_FILENAME_TO_DELETE"]
