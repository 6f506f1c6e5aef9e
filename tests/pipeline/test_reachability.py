"""Tests for ReachabilityCollector."""

from __future__ import annotations

import pytest

from demodulify.errors import DefiningModuleResolutionError
from demodulify.models import ExportBinding
from demodulify.pipeline.entrypoints import EntrypointResolver
from demodulify.pipeline.reachability import ReachabilityCollector
from tests._fixtures.graph_builder import local, reexport


def _binding(name: str) -> ExportBinding:
    return ExportBinding(export_name=name, local_name=name, source_export_name=name)


def _collect(builder, names):
    graph = builder.build()
    entry = EntrypointResolver().resolve(graph)
    modules = ReachabilityCollector().collect(graph, entry, [_binding(name) for name in names])
    return [module.identifier for module in modules]


def test_emission_set_starts_with_entry_and_keeps_chunk_order(graph_builder) -> None:
    graph_builder.module("./a.ts", resource="a.ts")
    graph_builder.module("./index.ts", resource="index.ts", exports=[local("run")])
    graph_builder.module("./b.ts", resource="b.ts")
    graph_builder.entry("gas", ["./a.ts", "./index.ts", "./b.ts"], entry_modules=["./index.ts"])

    assert _collect(graph_builder, ["run"]) == ["./index.ts", "./a.ts", "./b.ts"]


def test_defining_module_outside_chunk_is_appended(graph_builder) -> None:
    graph_builder.module("./index.ts", resource="index.ts", exports=[reexport("onOpen", "./triggers.ts")])
    graph_builder.module("./triggers.ts", resource="triggers.ts", exports=[local("onOpen")])
    graph_builder.entry("gas", ["./index.ts"])

    assert _collect(graph_builder, ["onOpen"]) == ["./index.ts", "./triggers.ts"]


def test_reexport_chains_resolve_to_the_final_definition(graph_builder) -> None:
    graph_builder.module("./index.ts", resource="index.ts", exports=[reexport("run", "./barrel.ts")])
    graph_builder.module("./barrel.ts", resource="barrel.ts", exports=[reexport("run", "./impl.ts")])
    graph_builder.module("./impl.ts", resource="impl.ts", exports=[local("run")])
    graph_builder.entry("gas", ["./index.ts"])

    assert _collect(graph_builder, ["run"]) == ["./index.ts", "./impl.ts"]


def test_defining_module_is_not_duplicated(graph_builder) -> None:
    graph_builder.module("./index.ts", resource="index.ts", exports=[reexport("a", "./lib.ts"), reexport("b", "./lib.ts")])
    graph_builder.module("./lib.ts", resource="lib.ts", exports=[local("a"), local("b")])
    graph_builder.entry("gas", ["./index.ts", "./lib.ts"], entry_modules=["./index.ts"])

    assert _collect(graph_builder, ["a", "b"]) == ["./index.ts", "./lib.ts"]


def test_cycle_in_metadata_fails(graph_builder) -> None:
    graph_builder.module("./index.ts", resource="index.ts", exports=[reexport("run", "./a.ts")])
    graph_builder.module("./a.ts", resource="a.ts", exports=[reexport("run", "./b.ts")])
    graph_builder.module("./b.ts", resource="b.ts", exports=[reexport("run", "./a.ts")])
    graph_builder.entry("gas", ["./index.ts"])

    with pytest.raises(DefiningModuleResolutionError, match="cycle"):
        _collect(graph_builder, ["run"])


def test_target_without_listed_export_fails(graph_builder) -> None:
    graph_builder.module("./index.ts", resource="index.ts", exports=[reexport("run", "./lib.ts")])
    graph_builder.module("./lib.ts", resource="lib.ts", exports=[])
    graph_builder.entry("gas", ["./index.ts"])

    with pytest.raises(DefiningModuleResolutionError, match="not listed"):
        _collect(graph_builder, ["run"])


def test_unprovided_terminal_export_fails(graph_builder) -> None:
    graph_builder.module("./index.ts", resource="index.ts", exports=[reexport("run", "./lib.ts")])
    graph_builder.module("./lib.ts", resource="lib.ts", exports=[local("run", provided=False)])
    graph_builder.entry("gas", ["./index.ts"])

    with pytest.raises(DefiningModuleResolutionError, match="reported as not provided"):
        _collect(graph_builder, ["run"])


def test_unknown_provided_status_without_target_is_local(graph_builder) -> None:
    graph_builder.module("./index.ts", resource="index.ts", exports=[local("run", provided=None)])
    graph_builder.entry("gas", ["./index.ts"])

    assert _collect(graph_builder, ["run"]) == ["./index.ts"]


def test_resolve_defining_module_for_default_export(graph_builder) -> None:
    graph_builder.module("./index.ts", resource="index.ts", exports=[local("default")])
    graph_builder.entry("gas", ["./index.ts"])
    graph = graph_builder.build()

    defining = ReachabilityCollector().resolve_defining_module(graph, graph.module("./index.ts"), "default")

    assert defining.identifier == "./index.ts"
