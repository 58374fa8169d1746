"""Map the short package names used in a Go file to full import paths."""

from __future__ import annotations

import posixpath
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Mapping, Optional

from .constants import BLANK_IDENTIFIER, DOT_IMPORT
from .errors import AmbiguousImportError, ConfigError
from .logging import get_logger

logger = get_logger("imports")

PackageNameLookup = Callable[[str], Optional[str]]


@dataclass(frozen=True)
class ImportSpec:
    """One import declaration: ``name`` is the explicit alias, if any."""

    path: str
    name: Optional[str] = None
    line: Optional[int] = None
    column: Optional[int] = None


@dataclass
class ImportTable:
    names: Dict[str, str] = field(default_factory=dict)
    dot_imports: List[str] = field(default_factory=list)


def guess_package_name(import_path: str) -> str:
    """Best-effort package name: the last path segment up to its first dot."""
    last = posixpath.basename(import_path)
    return last.split(".", 1)[0]


def resolve_imports(
    specs: Iterable[ImportSpec],
    *,
    lookup: PackageNameLookup | None = None,
    overrides: Mapping[str, str] | None = None,
    source: str | None = None,
) -> ImportTable:
    """Resolve ``specs`` into a short-name table plus the list of dot imports.

    Explicit aliases always win. Unaliased imports use the package name found
    by ``lookup`` and fall back to :func:`guess_package_name`. ``overrides``
    are applied last and replace any binding for the same short name.
    """
    table = ImportTable()
    for spec in specs:
        if spec.name == BLANK_IDENTIFIER:
            continue
        if spec.name == DOT_IMPORT:
            table.dot_imports.append(spec.path)
            continue
        if spec.name:
            short_name = spec.name
        else:
            short_name = lookup(spec.path) if lookup is not None else None
            if short_name:
                logger.debug("Resolved %s to package %s", spec.path, short_name)
            else:
                short_name = guess_package_name(spec.path)
                logger.debug(
                    "Package %s not found locally; assuming name %s", spec.path, short_name
                )
        previous = table.names.get(short_name)
        if previous is not None:
            raise AmbiguousImportError(
                f"imported package collision: {short_name!r} imported twice "
                f"({previous!r} and {spec.path!r})",
                path=source,
                line=spec.line,
                column=spec.column,
            )
        table.names[short_name] = spec.path

    for short_name, import_path in (overrides or {}).items():
        if table.names.get(short_name) not in (None, import_path):
            logger.info(
                "Override %s=%s replaces import %s", short_name, import_path, table.names[short_name]
            )
        table.names[short_name] = import_path
    return table


def parse_import_overrides(raw: str | None) -> Dict[str, str]:
    """Parse ``"name=path,other=path"`` into a mapping."""
    overrides: Dict[str, str] = {}
    if not raw:
        return overrides
    for pair in raw.split(","):
        pair = pair.strip()
        if not pair:
            continue
        name, sep, path = pair.partition("=")
        name = name.strip()
        path = path.strip()
        if not sep or not name or not path:
            raise ConfigError(f"Invalid import override {pair!r}; expected name=import/path")
        overrides[name] = path
    return overrides


__all__ = [
    "ImportSpec",
    "ImportTable",
    "PackageNameLookup",
    "guess_package_name",
    "parse_import_overrides",
    "resolve_imports",
]
