"""Error types raised while parsing Go sources and generating accessors."""

from __future__ import annotations

from pathlib import Path


class GetSetGenError(RuntimeError):
    """Base class for unrecoverable generation failures.

    Carries an optional source position so the CLI can report
    ``path:line:column: message`` the way compilers do.
    """

    def __init__(
        self,
        message: str,
        *,
        path: Path | str | None = None,
        line: int | None = None,
        column: int | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.path = str(path) if path is not None else None
        self.line = line
        self.column = column

    def __str__(self) -> str:
        location = self.location()
        if location:
            return f"{location}: {self.message}"
        return self.message

    def location(self) -> str:
        if self.path is None:
            return ""
        parts = [self.path]
        if self.line is not None:
            parts.append(str(self.line))
            if self.column is not None:
                parts.append(str(self.column))
        return ":".join(parts)


class SourceUnreadableError(GetSetGenError):
    """The input file is missing, unreadable, or not valid Go syntax."""


class UnsupportedTypeShapeError(GetSetGenError):
    """A field type cannot be expressed in generated code."""


class UnresolvedPackageError(GetSetGenError):
    """A qualified identifier refers to a package that was never imported."""


class AmbiguousImportError(GetSetGenError):
    """Two imports resolve to the same local identifier."""


class OutputFormatError(GetSetGenError):
    """Generated text is not valid Go; ``source`` holds the raw text."""

    def __init__(self, message: str, source: str) -> None:
        super().__init__(message)
        self.source = source

    def __str__(self) -> str:
        return f"{self.message}\n{self.source}"


class ConfigError(RuntimeError):
    """Raised when configuration or command-line overrides cannot be parsed."""


__all__ = [
    "AmbiguousImportError",
    "ConfigError",
    "GetSetGenError",
    "OutputFormatError",
    "SourceUnreadableError",
    "UnresolvedPackageError",
    "UnsupportedTypeShapeError",
]
