"""Canonical formatting of generated Go source."""

from __future__ import annotations

import re
import shutil
import subprocess
from typing import Callable, List, Optional, Sequence

from .errors import OutputFormatError
from .logging import get_logger
from .syntax import find_syntax_problem, parse_go

logger = get_logger("formatting")

Runner = Callable[[Sequence[str], str], str]

_EMPTY_IMPORT_BLOCK = re.compile(r"^import \(\n\)$", re.MULTILINE)


def format_source(
    text: str,
    *,
    gofmt: bool = True,
    runner: Runner | None = None,
    which: Callable[[str], Optional[str]] | None = None,
) -> bytes:
    """Validate ``text`` as Go and return it in canonical form.

    ``gofmt`` is used when enabled and installed; otherwise the text is
    normalized in-process. Invalid syntax raises :class:`OutputFormatError`
    carrying the raw text.
    """
    source_bytes = text.encode("utf-8")
    problem = find_syntax_problem(parse_go(source_bytes), source_bytes)
    if problem is not None:
        raise OutputFormatError(
            f"failed to format generated source code: {problem.line}:{problem.column}: "
            f"{problem.description}",
            text,
        )

    if gofmt:
        binary = (which or shutil.which)("gofmt")
        if binary is not None:
            logger.debug("Formatting generated source with %s", binary)
            try:
                formatted = (runner or _default_runner)([binary], text)
            except subprocess.CalledProcessError as exc:
                detail = (exc.stderr or "").strip() or f"gofmt exited with status {exc.returncode}"
                raise OutputFormatError(
                    f"failed to format generated source code: {detail}", text
                ) from exc
            return formatted.encode("utf-8")
        logger.debug("gofmt not found on PATH; using built-in normalization")

    return normalize_source(text).encode("utf-8")


def normalize_source(text: str) -> str:
    """Apply the subset of gofmt rules that generated code can violate."""
    normalized = text.replace("\r\n", "\n").replace("\r", "\n")
    cleaned: List[str] = []
    previous_blank = False

    for line in normalized.split("\n"):
        stripped = line.rstrip()
        if not stripped:
            if previous_blank or not cleaned:
                continue
            previous_blank = True
            cleaned.append("")
            continue
        cleaned.append(stripped)
        previous_blank = False

    while cleaned and cleaned[-1] == "":
        cleaned.pop()

    return _EMPTY_IMPORT_BLOCK.sub("import ()", "\n".join(cleaned)) + "\n"


def _default_runner(args: Sequence[str], text: str) -> str:
    completed = subprocess.run(
        list(args),
        input=text,
        check=True,
        text=True,
        capture_output=True,
    )
    return completed.stdout


__all__ = ["Runner", "format_source", "normalize_source"]
