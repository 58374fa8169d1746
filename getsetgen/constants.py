"""Shared constants for parsing and emitting Go source."""

from __future__ import annotations

GO_KEYWORDS = frozenset(
    {
        "break",
        "case",
        "chan",
        "const",
        "continue",
        "default",
        "defer",
        "else",
        "fallthrough",
        "for",
        "func",
        "go",
        "goto",
        "if",
        "import",
        "interface",
        "map",
        "package",
        "range",
        "return",
        "select",
        "struct",
        "switch",
        "type",
        "var",
    }
)

GENERATED_HEADER = "// Code generated by getsetgen. DO NOT EDIT."

DEFAULT_SUFFIX = "_getter_setter"

CONFIG_FILENAME = ".getsetgen.yml"

BLANK_IDENTIFIER = "_"
DOT_IMPORT = "."

EMPTY_INTERFACE = "interface{}"
EMPTY_STRUCT = "struct{}"

SETTER_PARAM = "val"
