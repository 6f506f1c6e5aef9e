"""Diagnostics raised by the demodulify pipeline.

Every error is fatal for the emission that raised it; nothing is retried and
no artifact is written.
"""

from __future__ import annotations

from typing import Sequence


class DemodulifyError(RuntimeError):
    """Base class for all demodulify diagnostics."""


class ConfigurationError(DemodulifyError):
    """Raised when options, config files or LOGLEVEL are invalid."""


class GraphSnapshotError(DemodulifyError):
    """Raised when a serialized module graph cannot be interpreted."""


class EntrypointCardinalityError(DemodulifyError):
    """Raised when the graph does not surface exactly one source entry module."""

    def __init__(self, message: str, entry_names: Sequence[str] = ()) -> None:
        super().__init__(message)
        self.entry_names = list(entry_names)


class NoEntrypointFoundError(EntrypointCardinalityError):
    """Raised when no entry point yields a source-language entry module."""


class UnsupportedExportSurfaceError(DemodulifyError):
    """Base class for export shapes that cannot be flattened."""


class UnsupportedWildcardReexportError(UnsupportedExportSurfaceError):
    """Raised for ``export *`` / ``export * as ns`` anywhere in the graph."""

    def __init__(self, details: str | None = None) -> None:
        super().__init__(
            "\n".join(
                [
                    "Unsupported wildcard re-export detected.",
                    "",
                    "This build uses a wildcard re-export (`export *` or `export * as ns`), which cannot be",
                    "flattened into a global namespace because its export surface is not statically known.",
                    "",
                    "Workaround:",
                    "Replace wildcard re-exports with explicit named re-exports:",
                    '  export { foo, bar } from "./module";',
                    "",
                    details or "",
                ]
            ).rstrip()
        )
        self.details = details


class UnsupportedAliasedReexportError(UnsupportedExportSurfaceError):
    """Raised for ``export { a as b } from "..."`` in the entry module."""

    def __init__(self, exported: str, original: str | None = None, details: str | None = None) -> None:
        source_name = original or "<original>"
        super().__init__(
            "\n".join(
                [
                    f"Unsupported aliased re-export detected for '{exported}'.",
                    "",
                    "This export is re-exported under a different name and does NOT",
                    "correspond to a real runtime identifier.",
                    "",
                    "Problematic pattern:",
                    f'  export {{ {source_name} as {exported} }} from "./module";',
                    "",
                    "Fix (recommended):",
                    f'  import {{ {source_name} }} from "./module";',
                    f"  export function {exported}() {{ return {source_name}(); }}",
                    "",
                    details or "",
                ]
            ).rstrip()
        )
        self.exported = exported
        self.original = original


class NoExportedSymbolsError(DemodulifyError):
    """Raised when the entry module has no bindable exports."""


class DefiningModuleResolutionError(DemodulifyError):
    """Raised when export metadata cannot be traced to a defining module."""


class MissingRuntimeDefinitionError(DemodulifyError):
    """Raised when a bound export has no definition in the emitted source."""

    def __init__(self, missing: Sequence[str]) -> None:
        names = ", ".join(missing)
        super().__init__(
            f"Exported symbol(s) without a runtime definition in emitted source: {names}.\n"
            "The defining module was not retained by the bundler. Anchor it with a side-effect "
            'import in the entry module (for example `import "./triggers";`) or define a local '
            "wrapper function that calls it."
        )
        self.missing = list(missing)


class LeakedRuntimeArtifactError(DemodulifyError):
    """Raised when a forbidden loader-runtime pattern survives into the artifact."""

    def __init__(self, pattern: str, context: str) -> None:
        super().__init__(
            f"Internal invariant violated: forbidden bundler artifact '{pattern}' detected in "
            f"emitted output ({context}). Please report this with the offending module source."
        )
        self.pattern = pattern


__all__ = [
    "ConfigurationError",
    "DefiningModuleResolutionError",
    "DemodulifyError",
    "EntrypointCardinalityError",
    "GraphSnapshotError",
    "LeakedRuntimeArtifactError",
    "MissingRuntimeDefinitionError",
    "NoEntrypointFoundError",
    "NoExportedSymbolsError",
    "UnsupportedAliasedReexportError",
    "UnsupportedExportSurfaceError",
    "UnsupportedWildcardReexportError",
]
