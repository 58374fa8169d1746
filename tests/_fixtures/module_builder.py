"""Helper utilities for constructing temporary Go modules in tests."""

from __future__ import annotations

import textwrap
from pathlib import Path
from typing import Mapping, Optional

from getsetgen.packages import PackageLocator, Runner


class ModuleBuilder:
    """Writes files into a throwaway Go module rooted under ``tmp_path``."""

    def __init__(self, tmp_path: Path) -> None:
        self.tmp_path = tmp_path
        self.root = tmp_path / "mod"
        self.root.mkdir()

    def go_mod(self, module_path: str, extra: str = "") -> Path:
        """Write a go.mod declaring ``module_path`` plus any ``extra`` directives."""
        body = f"module {module_path}\n\ngo 1.21\n"
        if extra:
            body += "\n" + textwrap.dedent(extra).lstrip("\n")
        path = self.root / "go.mod"
        path.write_text(body, encoding="utf-8")
        return path

    def write(self, files: Mapping[str, str], *, base: Path | None = None) -> None:
        """Write ``path -> contents`` entries relative to the module root (or ``base``)."""
        root = base if base is not None else self.root
        for relative, content in files.items():
            path = root / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            normalised = textwrap.dedent(content).lstrip("\n")
            path.write_text(normalised, encoding="utf-8")

    def path(self, relative: str = "") -> Path:
        return self.root / relative if relative else self.root

    def locator(self, *, runner: Optional[Runner] = None, **environ: str) -> PackageLocator:
        """Return a locator isolated from the real GOPATH/GOROOT.

        Without a ``runner`` the go binary is reported missing.
        """
        env = {"HOME": str(self.tmp_path / "home")}
        env.update(environ)
        if runner is None:
            return PackageLocator(environ=env, which=lambda name: None)
        return PackageLocator(environ=env, runner=runner, which=lambda name: f"/usr/bin/{name}")


__all__ = ["ModuleBuilder"]
