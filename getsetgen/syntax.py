"""Tree-sitter helpers shared by the parser, package lookup and formatter."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Optional

import tree_sitter_go
from tree_sitter import Language, Node, Parser, Tree

_GO_LANGUAGE = Language(tree_sitter_go.language())
_PARSER: Optional[Parser] = None


@dataclass
class SyntaxProblem:
    """Location (1-based) of the first problem that makes source unparseable."""

    line: int
    column: int
    description: str


def get_parser() -> Parser:
    global _PARSER
    if _PARSER is None:
        _PARSER = Parser(_GO_LANGUAGE)
    return _PARSER


def parse_go(source_bytes: bytes) -> Tree:
    return get_parser().parse(source_bytes)


def node_text(node: Node, source_bytes: bytes) -> str:
    return source_bytes[node.start_byte : node.end_byte].decode("utf-8")


def node_position(node: Node) -> tuple[int, int]:
    """Return the 1-based ``(line, column)`` where ``node`` starts."""
    row, column = node.start_point
    return row + 1, column + 1


def iter_named_children(node: Node) -> Iterator[Node]:
    """Yield named children, skipping comments."""
    for child in node.named_children:
        if child.type != "comment":
            yield child


def find_invalid_utf8(source_bytes: bytes) -> Optional[SyntaxProblem]:
    """Return the position of the first byte that is not valid UTF-8, if any."""
    try:
        source_bytes.decode("utf-8")
    except UnicodeDecodeError as exc:
        prefix = source_bytes[: exc.start]
        line = prefix.count(b"\n") + 1
        column = exc.start - (prefix.rfind(b"\n") + 1) + 1
        return SyntaxProblem(line, column, f"invalid UTF-8 encoding ({exc.reason})")
    return None


def find_syntax_problem(tree: Tree, source_bytes: bytes) -> Optional[SyntaxProblem]:
    """Return the first syntax error in ``tree`` or ``None`` when it parsed cleanly."""
    root = tree.root_node
    if not root.has_error:
        return None
    bad = _first_bad_node(root)
    if bad is None:
        line, column = node_position(root)
        return SyntaxProblem(line, column, "syntax error")
    line, column = node_position(bad)
    if bad.is_missing:
        return SyntaxProblem(line, column, f"syntax error: missing {bad.type!r}")
    snippet = node_text(bad, source_bytes).splitlines()
    near = snippet[0].strip() if snippet else ""
    if near:
        return SyntaxProblem(line, column, f"syntax error near {near!r}")
    return SyntaxProblem(line, column, "syntax error")


def _first_bad_node(node: Node) -> Optional[Node]:
    if node.type == "ERROR" or node.is_missing:
        return node
    for child in node.children:
        if child.has_error or child.is_missing:
            found = _first_bad_node(child)
            if found is not None:
                return found
    return None


__all__ = [
    "SyntaxProblem",
    "find_invalid_utf8",
    "find_syntax_problem",
    "get_parser",
    "iter_named_children",
    "node_position",
    "node_text",
    "parse_go",
]
