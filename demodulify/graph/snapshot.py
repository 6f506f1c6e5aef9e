"""Module-graph adapter backed by a serialized snapshot (JSON or YAML).

A snapshot is what a bundler integration dumps after code generation: the
entry points, their chunks, every module's export metadata and generated
source, and the assets the bundler would write.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional

import yaml

from ..errors import GraphSnapshotError
from ..models import (
    Chunk,
    ContextToken,
    ExportInfo,
    ExportsInfo,
    ExportTarget,
    Module,
    normalize_context_token,
    tokens_match,
)
from .base import ModuleGraphAdapter


@dataclass
class _SourceVariant:
    token: ContextToken
    code: str


@dataclass
class _ModuleRecord:
    module: Module
    exports: ExportsInfo
    variants: List[_SourceVariant] = field(default_factory=list)
    fallback_source: Optional[str] = None


class SnapshotGraph(ModuleGraphAdapter):
    """Immutable in-memory graph built from a snapshot mapping."""

    def __init__(
        self,
        *,
        entrypoints: Mapping[str, List[Chunk]],
        chunk_modules: Mapping[str, List[Module]],
        chunk_entry_modules: Mapping[str, List[Module]],
        records: Mapping[str, _ModuleRecord],
        context: Path,
        assets: Mapping[str, str] | None = None,
    ) -> None:
        self._entrypoints = {name: list(chunks) for name, chunks in entrypoints.items()}
        self._chunk_modules = {key: list(value) for key, value in chunk_modules.items()}
        self._chunk_entry_modules = {key: list(value) for key, value in chunk_entry_modules.items()}
        self._records = dict(records)
        self._context = context
        self._assets = dict(assets or {})

    # ------------------------------------------------------------------
    # ModuleGraphAdapter

    def entrypoints(self) -> Mapping[str, List[Chunk]]:
        return {name: list(chunks) for name, chunks in self._entrypoints.items()}

    def modules_of(self, chunk: Chunk) -> Iterable[Module]:
        return list(self._chunk_modules.get(chunk.identifier, []))

    def entry_modules_of(self, chunk: Chunk) -> Iterable[Module]:
        return list(self._chunk_entry_modules.get(chunk.identifier, []))

    def exports_of(self, module: Module) -> ExportsInfo:
        record = self._records.get(module.identifier)
        if record is None:
            return ExportsInfo()
        return record.exports

    def source_of(self, module: Module, token: ContextToken) -> str:
        record = self._records.get(module.identifier)
        if record is None:
            return ""
        for variant in record.variants:
            if tokens_match(variant.token, token):
                return variant.code
        return record.fallback_source or ""

    def context(self) -> Path:
        return self._context

    # ------------------------------------------------------------------
    # Snapshot-specific helpers

    def assets(self) -> Dict[str, str]:
        """Return a fresh copy of the bundler-emitted assets."""
        return dict(self._assets)

    def module(self, identifier: str) -> Module:
        try:
            return self._records[identifier].module
        except KeyError as exc:
            raise GraphSnapshotError(f"Unknown module '{identifier}'") from exc

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], *, base_dir: Path | None = None) -> "SnapshotGraph":
        """Build a graph from a decoded snapshot document."""
        if not isinstance(data, Mapping):
            raise GraphSnapshotError("Snapshot must contain a mapping at the root")

        base = (base_dir or Path.cwd()).resolve()
        context_value = _as_str(data.get("context"))
        context = base
        if context_value:
            context_path = Path(context_value).expanduser()
            context = context_path if context_path.is_absolute() else (base / context_path).resolve()

        modules_data = _as_dict(data.get("modules"), "modules")
        modules: Dict[str, Module] = {}
        for identifier, payload in modules_data.items():
            payload = _as_dict(payload, f"modules.{identifier}")
            modules[str(identifier)] = Module(
                identifier=str(identifier),
                resource=_as_str(payload.get("resource")),
            )

        records: Dict[str, _ModuleRecord] = {}
        for identifier, payload in modules_data.items():
            identifier = str(identifier)
            payload = _as_dict(payload, f"modules.{identifier}")
            records[identifier] = _ModuleRecord(
                module=modules[identifier],
                exports=_parse_exports(payload, modules, identifier),
                variants=_parse_variants(payload.get("sources"), identifier),
                fallback_source=_as_code(payload.get("source"), f"modules.{identifier}.source"),
            )

        chunks: Dict[str, Chunk] = {}
        chunk_modules: Dict[str, List[Module]] = {}
        chunk_entry_modules: Dict[str, List[Module]] = {}
        for identifier, payload in _as_dict(data.get("chunks"), "chunks").items():
            identifier = str(identifier)
            payload = _as_dict(payload, f"chunks.{identifier}")
            try:
                runtime = normalize_context_token(payload.get("runtime"))
            except TypeError as exc:
                raise GraphSnapshotError(f"chunks.{identifier}.runtime: {exc}") from exc
            chunks[identifier] = Chunk(identifier=identifier, runtime=runtime)
            chunk_modules[identifier] = _lookup_modules(
                payload.get("modules"), modules, f"chunks.{identifier}.modules"
            )
            chunk_entry_modules[identifier] = _lookup_modules(
                payload.get("entry_modules"), modules, f"chunks.{identifier}.entry_modules"
            )

        entrypoints: Dict[str, List[Chunk]] = {}
        for name, chunk_ids in _as_dict(data.get("entrypoints"), "entrypoints").items():
            resolved: List[Chunk] = []
            for chunk_id in _as_str_list(chunk_ids, f"entrypoints.{name}"):
                if chunk_id not in chunks:
                    raise GraphSnapshotError(f"entrypoints.{name} references unknown chunk '{chunk_id}'")
                resolved.append(chunks[chunk_id])
            entrypoints[str(name)] = resolved

        assets: Dict[str, str] = {}
        for name, content in _as_dict(data.get("assets"), "assets").items():
            assets[str(name)] = _as_code(content, f"assets.{name}") or ""

        return cls(
            entrypoints=entrypoints,
            chunk_modules=chunk_modules,
            chunk_entry_modules=chunk_entry_modules,
            records=records,
            context=context,
            assets=assets,
        )


def load_snapshot(path: Path) -> SnapshotGraph:
    """Read a ``.json``/``.yml``/``.yaml`` snapshot from disk."""
    path = path.expanduser().resolve()
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise GraphSnapshotError(f"Cannot read snapshot {path}: {exc}") from exc

    try:
        if path.suffix.lower() in {".yml", ".yaml"}:
            data = yaml.safe_load(text)
        else:
            data = json.loads(text)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise GraphSnapshotError(f"Failed to parse snapshot {path.name}: {exc}") from exc

    return SnapshotGraph.from_mapping(data or {}, base_dir=path.parent)


def _parse_exports(payload: Mapping[str, Any], modules: Mapping[str, Module], owner: str) -> ExportsInfo:
    raw = payload.get("exports") or []
    if not isinstance(raw, list):
        raise GraphSnapshotError(f"modules.{owner}.exports must be a list")

    ordered: List[ExportInfo] = []
    for index, item in enumerate(raw):
        where = f"modules.{owner}.exports[{index}]"
        if isinstance(item, str):
            ordered.append(ExportInfo(name=item))
            continue
        item = _as_dict(item, where)
        name = _as_str(item.get("name"))
        if not name:
            raise GraphSnapshotError(f"{where} is missing 'name'")
        provided = item.get("provided", True)
        if provided is not None and not isinstance(provided, bool):
            raise GraphSnapshotError(f"{where}.provided must be true, false or null")

        target: Optional[ExportTarget] = None
        target_data = item.get("target")
        if target_data is not None:
            target_data = _as_dict(target_data, f"{where}.target")
            target_id = _as_str(target_data.get("module"))
            if target_id not in modules:
                raise GraphSnapshotError(f"{where}.target references unknown module '{target_id}'")
            # an explicit null export re-exports the whole namespace object
            export_name = _as_str(target_data["export"]) if "export" in target_data else name
            target = ExportTarget(module=modules[target_id], export_name=export_name)
        ordered.append(ExportInfo(name=name, provided=provided, target=target))

    other = payload.get("other_exports_provided", False)
    if not isinstance(other, bool):
        raise GraphSnapshotError(f"modules.{owner}.other_exports_provided must be a boolean")
    return ExportsInfo(ordered_exports=ordered, other_exports_provided=other)


def _parse_variants(raw: Any, owner: str) -> List[_SourceVariant]:
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise GraphSnapshotError(f"modules.{owner}.sources must be a list")
    variants: List[_SourceVariant] = []
    for index, item in enumerate(raw):
        where = f"modules.{owner}.sources[{index}]"
        item = _as_dict(item, where)
        try:
            token = normalize_context_token(item.get("runtime"))
        except TypeError as exc:
            raise GraphSnapshotError(f"{where}.runtime: {exc}") from exc
        variants.append(_SourceVariant(token=token, code=_as_code(item.get("code"), where) or ""))
    return variants


def _lookup_modules(raw: Any, modules: Mapping[str, Module], where: str) -> List[Module]:
    found: List[Module] = []
    for identifier in _as_str_list(raw, where):
        if identifier not in modules:
            raise GraphSnapshotError(f"{where} references unknown module '{identifier}'")
        found.append(modules[identifier])
    return found


def _as_dict(value: Any, where: str) -> Dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise GraphSnapshotError(f"{where} must be a mapping")
    return value


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float)) and not isinstance(value, bool) else None


def _as_str_list(value: Any, where: str) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if not isinstance(value, list):
        raise GraphSnapshotError(f"{where} must be a list of identifiers")
    return [str(item) for item in value]


def _as_code(value: Any, where: str) -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, str):
        raise GraphSnapshotError(f"{where} must be a string")
    return value


__all__ = ["SnapshotGraph", "load_snapshot"]
