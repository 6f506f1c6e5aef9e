"""Text helpers shared by the scanning and assembly stages.

Comment removal and declaration lookup go through tree-sitter parse trees, so
string, template and regex literals are never mistaken for comments.
"""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Iterator, List, Set

import tree_sitter_javascript
import tree_sitter_typescript
from tree_sitter import Language, Node, Parser

SOURCE_EXTENSIONS = (".ts", ".tsx")

_LANGUAGE_LOADERS = {
    "javascript": tree_sitter_javascript.language,
    "typescript": tree_sitter_typescript.language_typescript,
    "tsx": tree_sitter_typescript.language_tsx,
}

_DECLARATION_TYPES = {
    "function_declaration",
    "generator_function_declaration",
    "class_declaration",
}
_VARIABLE_DECLARATION_TYPES = {"lexical_declaration", "variable_declaration"}
_PATTERN_NAME_TYPES = {"identifier", "shorthand_property_identifier_pattern"}

_parsers: Dict[str, Parser] = {}


def is_source_resource(resource: str | None) -> bool:
    """Return True when ``resource`` names a source-language file."""
    return isinstance(resource, str) and resource.endswith(SOURCE_EXTENSIONS)


def dialect_for(resource: str | None) -> str:
    """Return the grammar key used to parse ``resource``."""
    if isinstance(resource, str):
        lower = resource.lower()
        if lower.endswith(".tsx"):
            return "tsx"
        if lower.endswith(".ts"):
            return "typescript"
    return "javascript"


def safe_read(path: Path) -> str:
    """Read a text file, returning '' when it is absent or unreadable."""
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError):
        return ""


def get_parser(dialect: str = "javascript") -> Parser:
    parser = _parsers.get(dialect)
    if parser is not None:
        return parser
    try:
        loader = _LANGUAGE_LOADERS[dialect]
    except KeyError as exc:
        raise ValueError(f"Unsupported source dialect '{dialect}'") from exc
    parser = Parser(Language(loader()))
    _parsers[dialect] = parser
    return parser


def strip_js_comments(text: str, dialect: str = "javascript") -> str:
    """Remove every comment node, keeping their newlines so line numbers do not shift."""
    source_bytes = text.encode("utf-8")
    tree = get_parser(dialect).parse(source_bytes)

    out: List[bytes] = []
    cursor = 0
    for comment in _iter_nodes(tree.root_node, "comment"):
        out.append(source_bytes[cursor : comment.start_byte])
        body = source_bytes[comment.start_byte : comment.end_byte]
        out.append(b"\n" * body.count(b"\n"))
        cursor = comment.end_byte
    out.append(source_bytes[cursor:])
    return b"".join(out).decode("utf-8", errors="replace")


def declared_names(source: str, dialect: str = "javascript") -> Set[str]:
    """Return names bound by top-level function, class and variable declarations."""
    source_bytes = source.encode("utf-8")
    tree = get_parser(dialect).parse(source_bytes)

    names: Set[str] = set()
    for child in tree.root_node.named_children:
        if child.type in _DECLARATION_TYPES:
            name_node = child.child_by_field_name("name")
            if name_node is not None:
                names.add(_node_text(name_node, source_bytes))
        elif child.type in _VARIABLE_DECLARATION_TYPES:
            for declarator in child.named_children:
                if declarator.type != "variable_declarator":
                    continue
                name_node = declarator.child_by_field_name("name")
                if name_node is not None:
                    names.update(_pattern_names(name_node, source_bytes))
    return names


def has_definition(source: str, name: str) -> bool:
    """Return True when ``source`` declares a top-level binding for ``name``."""
    return name in declared_names(source)


def _iter_nodes(root: Node, node_type: str) -> Iterator[Node]:
    """Yield nodes of ``node_type`` in document order."""
    stack = [root]
    while stack:
        node = stack.pop()
        if node.type == node_type:
            yield node
            continue
        stack.extend(reversed(node.children))


def _pattern_names(node: Node, source_bytes: bytes) -> Iterator[str]:
    if node.type in _PATTERN_NAME_TYPES:
        yield _node_text(node, source_bytes)
        return
    for child in node.named_children:
        # default values and computed keys are expressions, not bindings
        if child.type in {"assignment_pattern", "object_assignment_pattern"}:
            left = child.child_by_field_name("left")
            if left is not None:
                yield from _pattern_names(left, source_bytes)
            continue
        if child.type == "pair_pattern":
            value = child.child_by_field_name("value")
            if value is not None:
                yield from _pattern_names(value, source_bytes)
            continue
        yield from _pattern_names(child, source_bytes)


def _node_text(node: Node, source_bytes: bytes) -> str:
    return source_bytes[node.start_byte : node.end_byte].decode("utf-8", errors="ignore")


__all__ = [
    "SOURCE_EXTENSIONS",
    "declared_names",
    "dialect_for",
    "get_parser",
    "has_definition",
    "is_source_resource",
    "safe_read",
    "strip_js_comments",
]
