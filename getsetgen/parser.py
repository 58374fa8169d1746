"""Build a :class:`FileModel` from the syntax tree of one Go source file."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, List, Optional

from tree_sitter import Node

from .config import GeneratorConfig
from .constants import BLANK_IDENTIFIER, EMPTY_INTERFACE, EMPTY_STRUCT
from .errors import (
    SourceUnreadableError,
    UnresolvedPackageError,
    UnsupportedTypeShapeError,
)
from .imports import ImportSpec, ImportTable, resolve_imports
from .logging import get_logger
from .models import (
    ArrayType,
    ChanDir,
    ChanType,
    FieldModel,
    FileModel,
    MapType,
    NamedType,
    PointerType,
    PredeclaredType,
    StructModel,
    TypeExpr,
)
from .packages import PackageLocator
from .syntax import (
    find_invalid_utf8,
    find_syntax_problem,
    iter_named_children,
    node_position,
    node_text,
    parse_go,
)

logger = get_logger("parser")

# Wrapper nodes emitted by some grammar versions around interface members.
_MEMBER_LISTS = {"method_spec_list", "field_declaration_list"}


@dataclass
class StructDeclaration:
    name: str
    node: Node


def build_file_model(
    source: Path | str,
    *,
    config: GeneratorConfig | None = None,
    locator: PackageLocator | None = None,
) -> FileModel:
    """Parse ``source`` and return the model of every struct it declares."""
    config = config or GeneratorConfig()
    locator = locator or PackageLocator()
    path = Path(source)

    try:
        source_bytes = path.read_bytes()
    except OSError as exc:
        raise SourceUnreadableError(f"failed reading source file: {exc}", path=path) from exc

    tree = parse_go(source_bytes)
    problem = find_invalid_utf8(source_bytes) or find_syntax_problem(tree, source_bytes)
    if problem is not None:
        raise SourceUnreadableError(
            f"failed parsing source file: {problem.description}",
            path=path,
            line=problem.line,
            column=problem.column,
        )

    root = tree.root_node
    package_name = _package_name(root, source_bytes)
    if package_name is None:
        raise SourceUnreadableError("source file has no package clause", path=path)

    src_dir = path.resolve().parent
    if config.import_path is not None:
        import_path = config.import_path
    else:
        import_path = locator.import_path_for(src_dir)
    logger.debug("Parsing %s (package %s, import path %r)", path, package_name, import_path)

    table = resolve_imports(
        iter_import_specs(root, source_bytes),
        lookup=lambda dependency: locator.package_name(dependency, src_dir),
        overrides=config.imports,
        source=str(path),
    )

    parser = FileParser(
        path=path,
        source_bytes=source_bytes,
        import_path=import_path,
        imports=table,
    )
    structs: List[StructModel] = []
    for declaration in iter_struct_declarations(root, source_bytes, path=path):
        structs.append(parser.parse_struct(declaration))

    return FileModel(
        import_path=import_path,
        package_name=package_name,
        name=path.name,
        structs=tuple(structs),
        dot_imports=tuple(table.dot_imports),
    )


def _package_name(root: Node, source_bytes: bytes) -> Optional[str]:
    for child in iter_named_children(root):
        if child.type != "package_clause":
            continue
        for part in iter_named_children(child):
            if part.type == "package_identifier":
                return node_text(part, source_bytes)
    return None


def iter_import_specs(root: Node, source_bytes: bytes) -> Iterator[ImportSpec]:
    """Yield every import declared at the top of the file, in source order."""
    for declaration in iter_named_children(root):
        if declaration.type != "import_declaration":
            continue
        for child in iter_named_children(declaration):
            specs = [child] if child.type == "import_spec" else list(iter_named_children(child))
            for spec in specs:
                if spec.type != "import_spec":
                    continue
                path_node = spec.child_by_field_name("path")
                if path_node is None:
                    continue
                name_node = spec.child_by_field_name("name")
                line, column = node_position(spec)
                yield ImportSpec(
                    path=node_text(path_node, source_bytes)[1:-1],
                    name=node_text(name_node, source_bytes) if name_node is not None else None,
                    line=line,
                    column=column,
                )


def iter_struct_declarations(
    root: Node, source_bytes: bytes, *, path: Path | None = None
) -> Iterator[StructDeclaration]:
    """Yield top-level struct type declarations in declaration order.

    Aliases (``type A = B``) and non-struct definitions are skipped, both for
    single declarations and grouped ``type ( ... )`` blocks.
    """
    for declaration in iter_named_children(root):
        if declaration.type != "type_declaration":
            continue
        for spec in iter_named_children(declaration):
            if spec.type != "type_spec":
                continue
            type_node = spec.child_by_field_name("type")
            name_node = spec.child_by_field_name("name")
            if type_node is None or name_node is None or type_node.type != "struct_type":
                continue
            name = node_text(name_node, source_bytes)
            if spec.child_by_field_name("type_parameters") is not None:
                line, column = node_position(spec)
                raise UnsupportedTypeShapeError(
                    f"can't handle generic struct type {name}",
                    path=path,
                    line=line,
                    column=column,
                )
            yield StructDeclaration(name=name, node=type_node)


class FileParser:
    """Translates the struct declarations of one file into model objects."""

    def __init__(
        self,
        *,
        path: Path,
        source_bytes: bytes,
        import_path: str,
        imports: ImportTable,
    ) -> None:
        self.path = path
        self.source_bytes = source_bytes
        self.import_path = import_path
        self.imports = imports

    def parse_struct(self, declaration: StructDeclaration) -> StructModel:
        fields: List[FieldModel] = []
        for field_node in _struct_members(declaration.node):
            if field_node.type != "field_declaration":
                continue
            fields.extend(self._parse_field(field_node))
        logger.debug("Struct %s: %d field(s)", declaration.name, len(fields))
        return StructModel(name=declaration.name, fields=tuple(fields))

    def _parse_field(self, node: Node) -> List[FieldModel]:
        type_node = node.child_by_field_name("type")
        if type_node is None:
            raise self._unsupported(node, "field declaration without a type")
        field_type = self.parse_type(type_node)

        names = [self._text(name) for name in node.children_by_field_name("name")]
        if not names:
            # Embedded field: Go names it after the embedded type.
            if type_node.type == "qualified_type":
                name_node = type_node.child_by_field_name("name")
                names = [self._text(name_node)] if name_node is not None else []
            else:
                names = [self._text(type_node)]
            if any(child.type == "*" for child in node.children):
                field_type = PointerType(field_type)

        fields: List[FieldModel] = []
        for name in names:
            if name == BLANK_IDENTIFIER:
                logger.debug("Skipping blank field in %s", self.path)
                continue
            fields.append(FieldModel(name=name, type=field_type))
        return fields

    def parse_type(self, node: Node) -> TypeExpr:
        """Translate a type expression node into a :data:`TypeExpr`."""
        kind = node.type
        if kind == "parenthesized_type":
            return self.parse_type(self._only_child(node))
        if kind == "slice_type":
            return ArrayType(-1, self.parse_type(self._field(node, "element")))
        if kind == "array_type":
            length_node = self._field(node, "length")
            if length_node.type != "int_literal":
                raise self._unsupported(
                    length_node,
                    f"array length must be an integer literal, got {self._text(length_node)!r}",
                )
            try:
                length = int(self._text(length_node), 10)
            except ValueError as exc:
                raise self._unsupported(length_node, f"bad array size: {exc}") from exc
            return ArrayType(length, self.parse_type(self._field(node, "element")))
        if kind == "channel_type":
            tokens = [child.type for child in node.children if not child.is_named]
            if tokens and tokens[0] == "<-":
                direction = ChanDir.RECV
            elif "<-" in tokens:
                direction = ChanDir.SEND
            else:
                direction = ChanDir.BOTH
            return ChanType(direction, self.parse_type(self._field(node, "value")))
        if kind == "variadic_parameter_declaration":
            return self.parse_type(self._field(node, "type"))
        if kind == "type_identifier":
            name = self._text(node)
            if name[:1].isupper():
                return NamedType(self.import_path, name)
            return PredeclaredType(name)
        if kind == "interface_type":
            if _struct_members(node):
                raise self._unsupported(node, "can't handle non-empty unnamed interface types")
            return PredeclaredType(EMPTY_INTERFACE)
        if kind == "map_type":
            key = self.parse_type(self._field(node, "key"))
            value = self.parse_type(self._field(node, "value"))
            return MapType(key, value)
        if kind == "qualified_type":
            package = self._text(self._field(node, "package"))
            identifier = self._text(self._field(node, "name"))
            import_path = self.imports.names.get(package)
            if import_path is None:
                line, column = node_position(node)
                raise UnresolvedPackageError(
                    f"unknown package {package!r} in {package}.{identifier}",
                    path=self.path,
                    line=line,
                    column=column,
                )
            return NamedType(import_path, identifier)
        if kind == "pointer_type":
            return PointerType(self.parse_type(self._only_child(node)))
        if kind == "struct_type":
            if _struct_members(node):
                raise self._unsupported(node, "can't handle non-empty unnamed struct types")
            return PredeclaredType(EMPTY_STRUCT)
        raise self._unsupported(node, f"don't know how to parse type {kind} ({self._text(node)!r})")

    # ------------------------------------------------------------------
    # Helpers

    def _text(self, node: Node) -> str:
        return node_text(node, self.source_bytes)

    def _field(self, node: Node, name: str) -> Node:
        child = node.child_by_field_name(name)
        if child is None:
            raise self._unsupported(node, f"{node.type} without {name}")
        return child

    def _only_child(self, node: Node) -> Node:
        children = list(iter_named_children(node))
        if not children:
            raise self._unsupported(node, f"empty {node.type}")
        return children[0]

    def _unsupported(self, node: Node, message: str) -> UnsupportedTypeShapeError:
        line, column = node_position(node)
        return UnsupportedTypeShapeError(message, path=self.path, line=line, column=column)


def _struct_members(node: Node) -> List[Node]:
    """Return the members of a struct or interface type body."""
    members: List[Node] = []
    for child in iter_named_children(node):
        if child.type in _MEMBER_LISTS:
            members.extend(iter_named_children(child))
        else:
            members.append(child)
    return members


__all__ = [
    "FileParser",
    "StructDeclaration",
    "build_file_model",
    "iter_import_specs",
    "iter_struct_declarations",
]
