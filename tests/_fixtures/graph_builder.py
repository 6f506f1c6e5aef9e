"""Helper utilities for constructing module-graph snapshots in tests."""

from __future__ import annotations

import json
import textwrap
from pathlib import Path
from typing import Any, Dict, List, Mapping, Sequence

from demodulify.graph.snapshot import SnapshotGraph


def local(name: str, *, provided: bool | None = True) -> Dict[str, Any]:
    """Export metadata for a locally provided binding."""
    return {"name": name, "provided": provided}


def reexport(name: str, module: str, *, export: str | None = "") -> Dict[str, Any]:
    """Export metadata for a re-export; ``export=None`` targets the namespace object."""
    target: Dict[str, Any] = {"module": module}
    if export != "":
        target["export"] = export
    return {"name": name, "provided": True, "target": target}


class GraphBuilder:
    """Builds snapshot documents and writes their source files under a temp root."""

    def __init__(self, tmp_path: Path) -> None:
        self.root = tmp_path / "project"
        self.root.mkdir(parents=True)
        self._modules: Dict[str, Dict[str, Any]] = {}
        self._chunks: Dict[str, Dict[str, Any]] = {}
        self._entrypoints: Dict[str, List[str]] = {}
        self._assets: Dict[str, str] = {}

    def write(self, files: Mapping[str, str]) -> None:
        """Write `path -> contents` entries relative to the project root."""
        for relative, content in files.items():
            path = self.root / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(textwrap.dedent(content).lstrip("\n"), encoding="utf-8")

    def module(
        self,
        identifier: str,
        *,
        resource: str | None = None,
        exports: Sequence[Any] = (),
        source: str | None = None,
        sources: Sequence[Mapping[str, Any]] | None = None,
        other_exports_provided: bool = False,
    ) -> "GraphBuilder":
        payload: Dict[str, Any] = {
            "resource": resource,
            "exports": list(exports),
            "other_exports_provided": other_exports_provided,
        }
        if source is not None:
            payload["source"] = textwrap.dedent(source).strip("\n") + "\n"
        if sources is not None:
            payload["sources"] = [dict(item) for item in sources]
        self._modules[identifier] = payload
        return self

    def entry(
        self,
        name: str,
        modules: Sequence[str],
        *,
        entry_modules: Sequence[str] | None = None,
        runtime: Any = "main",
        chunk: str | None = None,
    ) -> "GraphBuilder":
        chunk_id = chunk or f"{name}-chunk"
        self._chunks[chunk_id] = {
            "runtime": runtime,
            "modules": list(modules),
            "entry_modules": list(entry_modules if entry_modules is not None else modules[:1]),
        }
        self._entrypoints.setdefault(name, []).append(chunk_id)
        return self

    def asset(self, name: str, content: str) -> "GraphBuilder":
        self._assets[name] = content
        return self

    def snapshot(self) -> Dict[str, Any]:
        return {
            "entrypoints": {name: list(chunks) for name, chunks in self._entrypoints.items()},
            "chunks": {key: dict(value) for key, value in self._chunks.items()},
            "modules": {key: dict(value) for key, value in self._modules.items()},
            "assets": dict(self._assets),
        }

    def build(self) -> SnapshotGraph:
        """Return an in-memory graph whose resources resolve under the project root."""
        return SnapshotGraph.from_mapping(self.snapshot(), base_dir=self.root)

    def dump(self, name: str = "graph.json") -> Path:
        """Write the snapshot as JSON next to the sources and return its path."""
        path = self.root / name
        path.write_text(json.dumps(self.snapshot(), indent=2), encoding="utf-8")
        return path

    def path(self) -> Path:
        return self.root


ENTRY = "./src/gas/index.ts"
TRIGGERS = "./src/gas/triggers.ts"

WEBPACK_ENTRY_PRELUDE = """
__webpack_require__.r(__webpack_exports__);
/* harmony export */ __webpack_require__.d(__webpack_exports__, { foo: () => (foo), onOpen: () => (_triggers__WEBPACK_IMPORTED_MODULE_0__.onOpen) });
/* harmony import */ var _triggers__WEBPACK_IMPORTED_MODULE_0__ = __webpack_require__(/*! ./triggers */ "./src/gas/triggers.ts");
"""


def add_gas_project(builder: GraphBuilder, *, anchored: bool = True) -> GraphBuilder:
    """Entry defining ``foo`` locally and re-exporting ``onOpen`` from triggers.

    When ``anchored`` is False the bundler elided the triggers module body,
    as it does when triggers is only re-exported and never imported for side
    effects.
    """
    side_effect = 'import "./triggers";\n' if anchored else ""
    builder.write(
        {
            "src/gas/index.ts": side_effect
            + 'export { onOpen } from "./triggers";\n'
            + "export function foo() { return 1; }\n",
            "src/gas/triggers.ts": 'export function onOpen() { Logger.log("open"); }\n',
        }
    )
    builder.module(
        ENTRY,
        resource="src/gas/index.ts",
        exports=[local("foo"), reexport("onOpen", TRIGGERS)],
        source=WEBPACK_ENTRY_PRELUDE + "function foo() { return 1; }\n",
    )
    builder.module(
        TRIGGERS,
        resource="src/gas/triggers.ts",
        exports=[local("onOpen")],
        source='function onOpen() { Logger.log("open"); }\n' if anchored else None,
    )
    modules = [ENTRY, TRIGGERS] if anchored else [ENTRY]
    builder.entry("gas", modules, entry_modules=[ENTRY])
    return builder


__all__ = ["ENTRY", "TRIGGERS", "GraphBuilder", "add_gas_project", "local", "reexport"]
