"""Language-agnostic model of Go struct declarations and their field types."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Mapping, MutableSet, Set, Tuple, Union


class ChanDir(Enum):
    """Direction of a channel type."""

    BOTH = 0
    RECV = 1
    SEND = 2


@dataclass(frozen=True)
class ArrayType:
    """An array (``length >= 0``) or slice (``length == -1``)."""

    length: int
    element: "TypeExpr"

    def render(self, package_map: Mapping[str, str], current_package: str) -> str:
        return render_type(self, package_map, current_package)

    def add_imports(self, into: MutableSet[str]) -> None:
        collect_imports(self, into)


@dataclass(frozen=True)
class ChanType:
    direction: ChanDir
    element: "TypeExpr"

    def render(self, package_map: Mapping[str, str], current_package: str) -> str:
        return render_type(self, package_map, current_package)

    def add_imports(self, into: MutableSet[str]) -> None:
        collect_imports(self, into)


@dataclass(frozen=True)
class MapType:
    key: "TypeExpr"
    value: "TypeExpr"

    def render(self, package_map: Mapping[str, str], current_package: str) -> str:
        return render_type(self, package_map, current_package)

    def add_imports(self, into: MutableSet[str]) -> None:
        collect_imports(self, into)


@dataclass(frozen=True)
class NamedType:
    """An exported type; an empty ``import_path`` means the current package."""

    import_path: str
    identifier: str

    def render(self, package_map: Mapping[str, str], current_package: str) -> str:
        return render_type(self, package_map, current_package)

    def add_imports(self, into: MutableSet[str]) -> None:
        collect_imports(self, into)


@dataclass(frozen=True)
class PointerType:
    referent: "TypeExpr"

    def render(self, package_map: Mapping[str, str], current_package: str) -> str:
        return render_type(self, package_map, current_package)

    def add_imports(self, into: MutableSet[str]) -> None:
        collect_imports(self, into)


@dataclass(frozen=True)
class PredeclaredType:
    """A builtin such as ``int``, or the empty ``interface{}``/``struct{}``."""

    literal: str

    def render(self, package_map: Mapping[str, str], current_package: str) -> str:
        return render_type(self, package_map, current_package)

    def add_imports(self, into: MutableSet[str]) -> None:
        collect_imports(self, into)


TypeExpr = Union[ArrayType, ChanType, MapType, NamedType, PointerType, PredeclaredType]


def render_type(expr: TypeExpr, package_map: Mapping[str, str], current_package: str) -> str:
    """Render ``expr`` as Go source, qualifying names through ``package_map``.

    ``package_map`` maps import paths to the local alias used in the emitted
    file. Named types from ``current_package`` are never qualified.
    """
    if isinstance(expr, ArrayType):
        prefix = "[]" if expr.length < 0 else f"[{expr.length}]"
        return prefix + render_type(expr.element, package_map, current_package)
    if isinstance(expr, ChanType):
        inner = render_type(expr.element, package_map, current_package)
        if (
            expr.direction is ChanDir.BOTH
            and isinstance(expr.element, ChanType)
            and expr.element.direction is ChanDir.RECV
        ):
            # "chan <-chan T" would parse as "chan<- (chan T)".
            inner = f"({inner})"
        if expr.direction is ChanDir.RECV:
            return "<-chan " + inner
        if expr.direction is ChanDir.SEND:
            return "chan<- " + inner
        return "chan " + inner
    if isinstance(expr, MapType):
        key = render_type(expr.key, package_map, current_package)
        value = render_type(expr.value, package_map, current_package)
        return f"map[{key}]{value}"
    if isinstance(expr, NamedType):
        if expr.import_path == current_package:
            return expr.identifier
        alias = package_map.get(expr.import_path)
        if alias:
            return f"{alias}.{expr.identifier}"
        return expr.identifier
    if isinstance(expr, PointerType):
        return "*" + render_type(expr.referent, package_map, current_package)
    if isinstance(expr, PredeclaredType):
        return expr.literal
    raise TypeError(f"unknown type expression {expr!r}")


def collect_imports(expr: TypeExpr, into: MutableSet[str]) -> None:
    """Add every import path referenced by ``expr`` to ``into``."""
    if isinstance(expr, (ArrayType, ChanType)):
        collect_imports(expr.element, into)
    elif isinstance(expr, MapType):
        collect_imports(expr.key, into)
        collect_imports(expr.value, into)
    elif isinstance(expr, NamedType):
        if expr.import_path:
            into.add(expr.import_path)
    elif isinstance(expr, PointerType):
        collect_imports(expr.referent, into)
    elif isinstance(expr, PredeclaredType):
        return
    else:
        raise TypeError(f"unknown type expression {expr!r}")


@dataclass(frozen=True)
class FieldModel:
    name: str
    type: TypeExpr

    def add_imports(self, into: MutableSet[str]) -> None:
        collect_imports(self.type, into)


@dataclass(frozen=True)
class StructModel:
    """A named struct declaration and its fields in declaration order."""

    name: str
    fields: Tuple[FieldModel, ...] = field(default_factory=tuple)

    def add_imports(self, into: MutableSet[str]) -> None:
        for struct_field in self.fields:
            struct_field.add_imports(into)


@dataclass(frozen=True)
class FileModel:
    """Every struct declared in one Go source file."""

    import_path: str
    package_name: str
    name: str
    structs: Tuple[StructModel, ...] = field(default_factory=tuple)
    dot_imports: Tuple[str, ...] = field(default_factory=tuple)

    def imports(self) -> Set[str]:
        """Return the import paths needed by the file's field types."""
        found: Set[str] = set()
        for struct in self.structs:
            struct.add_imports(found)
        return found


__all__ = [
    "ArrayType",
    "ChanDir",
    "ChanType",
    "FieldModel",
    "FileModel",
    "MapType",
    "NamedType",
    "PointerType",
    "PredeclaredType",
    "StructModel",
    "TypeExpr",
    "collect_imports",
    "render_type",
]
