"""Tests for CodeAssembler."""

from __future__ import annotations

import pytest

from demodulify.config import BuildMode
from demodulify.errors import LeakedRuntimeArtifactError, MissingRuntimeDefinitionError
from demodulify.models import ExportBinding
from demodulify.pipeline.assembler import CodeAssembler

BINDINGS = [
    ExportBinding(export_name="foo", local_name="foo", source_export_name="foo"),
    ExportBinding(export_name="main", local_name="defaultExport", source_export_name="default"),
]
SOURCE = "function foo() { return 1; }\nconst defaultExport = () => 2;"


def test_layout_is_initializer_then_code_then_assignments() -> None:
    content = CodeAssembler("APP.GAS").assemble(SOURCE, BINDINGS)

    init = content.index('})("APP.GAS");')
    code = content.index("function foo()")
    first_assignment = content.index("globalThis.APP.GAS.foo = foo;")
    second_assignment = content.index("globalThis.APP.GAS.main = defaultExport;")
    assert init < code < first_assignment < second_assignment


def test_namespace_initializer_preserves_existing_objects() -> None:
    content = CodeAssembler("A.B.C").assemble(SOURCE, BINDINGS)

    assert "o[p] = o[p] || {};" in content
    assert '("A.B.C")' in content


def test_assembly_is_deterministic() -> None:
    assembler = CodeAssembler("APP.GAS")

    assert assembler.assemble(SOURCE, BINDINGS) == assembler.assemble(SOURCE, BINDINGS)


def test_missing_definitions_are_reported_together() -> None:
    bindings = [
        ExportBinding(export_name=name, local_name=name, source_export_name=name)
        for name in ("foo", "onOpen", "onEdit")
    ]

    with pytest.raises(MissingRuntimeDefinitionError) as excinfo:
        CodeAssembler("APP.GAS").assemble("function foo() {}", bindings)

    assert excinfo.value.missing == ["onOpen", "onEdit"]


def test_definition_only_inside_comment_does_not_count() -> None:
    binding = ExportBinding(export_name="foo", local_name="foo", source_export_name="foo")

    with pytest.raises(MissingRuntimeDefinitionError):
        CodeAssembler("APP.GAS").assemble("// function foo() {}", [binding])


def test_verify_rejects_leaked_pattern_in_code() -> None:
    with pytest.raises(LeakedRuntimeArtifactError) as excinfo:
        CodeAssembler("APP.GAS").verify("var a = 1;\nexports.a = a;")

    assert "exports" in excinfo.value.pattern


def test_verify_ignores_comments() -> None:
    CodeAssembler("APP.GAS").verify("// [dropped-by-demodulify]: exports.a = a;\nvar a = 1;")


def test_ui_mode_wraps_in_script_tag() -> None:
    assembler = CodeAssembler("APP.UI", BuildMode.UI)

    content = assembler.assemble(SOURCE, BINDINGS)

    assert content.startswith("<script>\n")
    assert content.endswith("</script>\n")
    assert assembler.artifact_name("sidebar") == "sidebar.html"


def test_artifact_name_for_server_modes() -> None:
    assert CodeAssembler("A.B", BuildMode.GAS).artifact_name("gas") == "gas.gs"
    assert CodeAssembler("A.B", BuildMode.COMMON).artifact_name("lib") == "lib.gs"


def test_custom_templates_dir(tmp_path) -> None:
    (tmp_path / "script.gs.j2").write_text(
        "// {{ namespace }}\n{{ source }}\n{% for b in bindings %}{{ b.export_name }};{% endfor %}\n",
        encoding="utf-8",
    )

    content = CodeAssembler("X.Y", templates_dir=tmp_path).assemble(SOURCE, BINDINGS)

    assert content.startswith("// X.Y\nfunction foo()")
    assert content.rstrip().endswith("foo;main;")
