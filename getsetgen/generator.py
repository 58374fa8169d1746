"""Emit getter and setter functions for every field of a :class:`FileModel`."""

from __future__ import annotations

from typing import Dict, Iterable, List

from .config import GeneratorConfig
from .constants import GENERATED_HEADER, GO_KEYWORDS, SETTER_PARAM
from .formatting import Runner, format_source
from .logging import get_logger
from .models import FileModel, StructModel, render_type

logger = get_logger("generator")


def sanitize(name: str) -> str:
    """Turn an import path segment into a valid Go identifier."""
    result = []
    for char in name:
        if not result:
            ok = char.isalpha() or char == "_"
        else:
            ok = char.isalnum() or char == "_"
        result.append(char if ok else "_")
    identifier = "".join(result)
    if not identifier.strip("_"):
        return "x"
    return identifier


def _base(import_path: str) -> str:
    trimmed = import_path.rstrip("/")
    if not trimmed:
        return "."
    return trimmed.rsplit("/", 1)[-1]


def assign_aliases(import_paths: Iterable[str]) -> Dict[str, str]:
    """Map each import path to a unique, non-keyword local alias.

    Paths are processed in sorted order so the result depends only on the set
    of paths. Collisions get ``0``, ``1``, ... appended to the base name.
    """
    aliases: Dict[str, str] = {}
    taken = set()
    for import_path in sorted(set(import_paths)):
        base = sanitize(_base(import_path))
        alias = base
        index = 0
        while alias in taken or alias in GO_KEYWORDS:
            alias = f"{base}{index}"
            index += 1
        aliases[import_path] = alias
        taken.add(alias)
    return aliases


class Generator:
    """Renders accessor source for one model; instances are single-use."""

    def __init__(self, config: GeneratorConfig | None = None, *, runner: Runner | None = None) -> None:
        self.config = config or GeneratorConfig()
        self._runner = runner
        self._lines: List[str] = []
        self._indent = ""
        self.package_map: Dict[str, str] = {}

    def p(self, line: str = "") -> None:
        self._lines.append(self._indent + line if line else "")

    def in_(self) -> None:
        self._indent += "\t"

    def out(self) -> None:
        self._indent = self._indent[:-1]

    def generate(self, model: FileModel) -> str:
        """Return the unformatted accessor source for ``model``."""
        self._lines = []
        self._indent = ""
        self.p(GENERATED_HEADER)
        self.p(f"// Source: {model.name}")
        self.p()

        self.package_map = assign_aliases(model.imports())
        logger.debug("Import aliases: %s", self.package_map)

        self.p(f"package {model.package_name}")
        self.p()

        entries = [
            (import_path, f'{alias} "{import_path}"')
            for import_path, alias in self.package_map.items()
            if import_path != model.import_path
        ]
        entries.extend((import_path, f'. "{import_path}"') for import_path in model.dot_imports)
        self.p("import (")
        self.in_()
        for _, entry in sorted(entries):
            self.p(entry)
        self.out()
        self.p(")")

        for struct in model.structs:
            self._generate_accessors(struct, model.import_path)

        return "\n".join(self._lines) + "\n"

    def render(self, model: FileModel) -> bytes:
        """Return formatted accessor source for ``model``."""
        text = self.generate(model)
        return format_source(text, gofmt=self.config.gofmt, runner=self._runner)

    def _generate_accessors(self, struct: StructModel, current_package: str) -> None:
        name = struct.name
        # The receiver is named after the struct; the parameter must not shadow it.
        param = SETTER_PARAM
        while param == name:
            param += "_"
        self.p()
        self.p(f"// {name} getters and setters")
        for field in struct.fields:
            type_text = render_type(field.type, self.package_map, current_package)
            self.p(f"func ({name} *{name}) Get{field.name}() {type_text} {{")
            self.in_()
            self.p(f"return {name}.{field.name}")
            self.out()
            self.p("}")
            self.p()
            self.p(f"func ({name} *{name}) Set{field.name}({param} {type_text}) {{")
            self.in_()
            self.p(f"{name}.{field.name} = {param}")
            self.out()
            self.p("}")
            self.p()


def render(model: FileModel, config: GeneratorConfig | None = None) -> bytes:
    """Render ``model`` with a fresh :class:`Generator`."""
    return Generator(config).render(model)


__all__ = ["Generator", "assign_aliases", "render", "sanitize"]
