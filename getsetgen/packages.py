"""Locate Go packages on disk from go.mod, vendor, GOPATH and GOROOT."""

from __future__ import annotations

import os
import re
import shutil
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from .logging import get_logger
from .syntax import find_invalid_utf8, iter_named_children, node_text, parse_go

logger = get_logger("packages")

_IGNORE_CONSTRAINT = re.compile(r"^//\s*(go:build|\+build)\s+ignore\b", re.MULTILINE)

Runner = Callable[[Sequence[str]], str]


@dataclass
class ModuleInfo:
    """The parts of a go.mod file needed to map import paths to directories."""

    root: Path
    path: str
    requires: Dict[str, str] = field(default_factory=dict)
    replaces: Dict[str, str] = field(default_factory=dict)

    def owns(self, import_path: str) -> bool:
        return _has_path_prefix(import_path, self.path)


def parse_go_mod(go_mod: Path) -> ModuleInfo:
    """Parse the ``module``, ``require`` and ``replace`` directives of a go.mod file."""
    module_path = ""
    requires: Dict[str, str] = {}
    replaces: Dict[str, str] = {}
    block: Optional[str] = None

    for raw in go_mod.read_text(encoding="utf-8").splitlines():
        line = raw.split("//", 1)[0].strip()
        if not line:
            continue
        if block is not None:
            if line == ")":
                block = None
                continue
            _apply_directive(block, line, requires, replaces)
            continue
        keyword, _, rest = line.partition(" ")
        rest = rest.strip()
        if keyword == "module":
            module_path = _unquote(rest)
        elif keyword in {"require", "replace"}:
            if rest == "(":
                block = keyword
            else:
                _apply_directive(keyword, rest, requires, replaces)

    return ModuleInfo(root=go_mod.parent, path=module_path, requires=requires, replaces=replaces)


def _apply_directive(
    keyword: str, body: str, requires: Dict[str, str], replaces: Dict[str, str]
) -> None:
    if keyword == "require":
        parts = body.split()
        if len(parts) >= 2:
            requires[_unquote(parts[0])] = parts[1]
        return
    old, sep, new = body.partition("=>")
    if not sep:
        return
    old_parts = old.split()
    new_parts = new.split()
    if old_parts and new_parts:
        replaces[_unquote(old_parts[0])] = _unquote(new_parts[0])


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in {'"', "`"}:
        return value[1:-1]
    return value


def _has_path_prefix(import_path: str, prefix: str) -> bool:
    if not prefix:
        return False
    return import_path == prefix or import_path.startswith(prefix + "/")


def _relative_to_prefix(import_path: str, prefix: str) -> str:
    return import_path[len(prefix) :].lstrip("/")


def escape_module_path(value: str) -> str:
    """Apply the module cache's case encoding: ``A`` becomes ``!a``."""
    return "".join(f"!{char.lower()}" if char.isupper() else char for char in value)


def read_package_clause(path: Path) -> Optional[str]:
    """Return the package name declared by the Go file at ``path``."""
    try:
        source_bytes = path.read_bytes()
    except OSError:
        return None
    if find_invalid_utf8(source_bytes) is not None:
        return None
    tree = parse_go(source_bytes)
    for child in iter_named_children(tree.root_node):
        if child.type != "package_clause":
            continue
        for part in iter_named_children(child):
            if part.type == "package_identifier":
                return node_text(part, source_bytes)
    return None


class PackageLocator:
    """Resolves import paths to directories and package names.

    Stands in for the Go toolchain's package loader: the nearest go.mod decides
    the module, and dependencies are searched in local replacements, vendor/,
    the module cache, GOPATH and GOROOT, in that order. When ``GOROOT`` is not
    set, ``go env GOROOT`` is asked once through ``runner``.
    """

    def __init__(
        self,
        environ: Mapping[str, str] | None = None,
        *,
        runner: Runner | None = None,
        which: Callable[[str], Optional[str]] | None = None,
    ) -> None:
        self._environ = dict(os.environ if environ is None else environ)
        self._runner = runner or _default_runner
        self._which = which or shutil.which
        self._goroot: Optional[Path] = None
        self._goroot_checked = False
        self._modules: Dict[Path, Optional[ModuleInfo]] = {}
        self._names: Dict[Tuple[str, Path], Optional[str]] = {}

    # ------------------------------------------------------------------
    # Environment

    def gopaths(self) -> List[Path]:
        raw = self._environ.get("GOPATH", "")
        entries = [Path(entry).expanduser() for entry in raw.split(os.pathsep) if entry]
        if not entries:
            home = self._environ.get("HOME")
            entries = [Path(home) / "go"] if home else [Path.home() / "go"]
        return entries

    def module_cache(self) -> Path:
        raw = self._environ.get("GOMODCACHE")
        if raw:
            return Path(raw).expanduser()
        return self.gopaths()[0] / "pkg" / "mod"

    def goroot(self) -> Optional[Path]:
        raw = self._environ.get("GOROOT")
        if raw:
            return Path(raw).expanduser()
        if not self._goroot_checked:
            self._goroot_checked = True
            self._goroot = self._query_goroot()
        return self._goroot

    def _query_goroot(self) -> Optional[Path]:
        binary = self._which("go")
        if binary is None:
            logger.debug("GOROOT is unset and go is not on PATH; standard library unavailable")
            return None
        try:
            output = self._runner([binary, "env", "GOROOT"]).strip()
        except (OSError, subprocess.CalledProcessError) as exc:
            logger.warning("Could not determine GOROOT with %s env: %s", binary, exc)
            return None
        if not output:
            return None
        logger.debug("Using GOROOT %s reported by %s", output, binary)
        return Path(output)

    # ------------------------------------------------------------------
    # Lookups

    def find_module(self, directory: Path) -> Optional[ModuleInfo]:
        """Return the module containing ``directory`` (nearest go.mod upwards)."""
        directory = directory.resolve()
        if directory in self._modules:
            return self._modules[directory]
        module: Optional[ModuleInfo] = None
        for candidate in (directory, *directory.parents):
            go_mod = candidate / "go.mod"
            if go_mod.is_file():
                module = parse_go_mod(go_mod)
                break
        self._modules[directory] = module
        return module

    def import_path_for(self, directory: Path) -> str:
        """Return the import path of the package stored in ``directory``."""
        directory = directory.resolve()
        module = self.find_module(directory)
        if module is not None and module.path:
            relative = directory.relative_to(module.root.resolve()).as_posix()
            return module.path if relative == "." else f"{module.path}/{relative}"
        for gopath in self.gopaths():
            src = (gopath / "src").resolve()
            try:
                relative = directory.relative_to(src).as_posix()
            except ValueError:
                continue
            if relative != ".":
                return relative
        logger.warning(
            "Could not determine the import path of %s (no go.mod or GOPATH match)", directory
        )
        return ""

    def locate(self, import_path: str, src_dir: Path) -> Optional[Path]:
        """Return the directory holding ``import_path`` as seen from ``src_dir``."""
        for candidate in self._candidates(import_path, src_dir):
            if candidate.is_dir() and any(candidate.glob("*.go")):
                logger.debug("Located %s at %s", import_path, candidate)
                return candidate
        return None

    def package_name(self, import_path: str, src_dir: Path) -> Optional[str]:
        """Return the declared package name of ``import_path`` or ``None`` if unavailable."""
        key = (import_path, src_dir.resolve())
        if key in self._names:
            return self._names[key]
        directory = self.locate(import_path, src_dir)
        name = package_name_in(directory) if directory is not None else None
        self._names[key] = name
        return name

    def _candidates(self, import_path: str, src_dir: Path) -> List[Path]:
        candidates: List[Path] = []
        module = self.find_module(src_dir)
        if module is not None:
            if module.owns(import_path):
                candidates.append(module.root / _relative_to_prefix(import_path, module.path))
            for old, new in module.replaces.items():
                if _has_path_prefix(import_path, old) and new.startswith((".", "/")):
                    target = (module.root / new).resolve()
                    candidates.append(target / _relative_to_prefix(import_path, old))
            candidates.append(module.root / "vendor" / import_path)
            required = _longest_prefix(import_path, module.requires)
            if required is not None:
                version = module.requires[required]
                cached = f"{escape_module_path(required)}@{escape_module_path(version)}"
                candidates.append(
                    self.module_cache() / cached / _relative_to_prefix(import_path, required)
                )
        for gopath in self.gopaths():
            candidates.append(gopath / "src" / import_path)
        goroot = self.goroot()
        if goroot is not None:
            candidates.append(goroot / "src" / import_path)
        return candidates


def package_name_in(directory: Path) -> Optional[str]:
    """Return the package clause shared by the non-test Go files in ``directory``."""
    for path in sorted(directory.glob("*.go")):
        if path.name.endswith("_test.go"):
            continue
        try:
            head = path.read_text(encoding="utf-8", errors="ignore")[:2048]
        except OSError:
            continue
        if _IGNORE_CONSTRAINT.search(head):
            continue
        name = read_package_clause(path)
        if name:
            return name
    return None


def _longest_prefix(import_path: str, modules: Mapping[str, str]) -> Optional[str]:
    matches = [module for module in modules if _has_path_prefix(import_path, module)]
    if not matches:
        return None
    return max(matches, key=len)


def _default_runner(args: Sequence[str]) -> str:
    completed = subprocess.run(list(args), check=True, text=True, capture_output=True)
    return completed.stdout


__all__ = [
    "ModuleInfo",
    "PackageLocator",
    "Runner",
    "escape_module_path",
    "package_name_in",
    "parse_go_mod",
    "read_package_clause",
]
