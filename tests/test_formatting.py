"""Tests for canonical formatting of generated source."""

from __future__ import annotations

import subprocess

import pytest

from getsetgen.errors import OutputFormatError
from getsetgen.formatting import format_source, normalize_source


def test_normalize_source_applies_gofmt_basics() -> None:
    text = "package geo   \n\n\n\nimport (\n)\n\n\nfunc f() {\n\treturn\t\n}\n\n\n"

    assert normalize_source(text) == "package geo\n\nimport ()\n\nfunc f() {\n\treturn\n}\n"


def test_format_source_without_gofmt_normalizes() -> None:
    output = format_source("package geo\n\n\n", gofmt=False, which=lambda name: "/bin/gofmt")

    assert output == b"package geo\n"


def test_format_source_falls_back_when_gofmt_missing() -> None:
    def runner(args, text):
        raise AssertionError("runner must not be called without gofmt")

    output = format_source("package geo\n", runner=runner, which=lambda name: None)

    assert output == b"package geo\n"


def test_format_source_runs_gofmt() -> None:
    calls = []

    def runner(args, text):
        calls.append(list(args))
        return text.replace("  ", "\t")

    output = format_source(
        "package geo\n\nfunc f() {\n  return\n}\n",
        runner=runner,
        which=lambda name: "/opt/go/bin/gofmt",
    )

    assert calls == [["/opt/go/bin/gofmt"]]
    assert output == b"package geo\n\nfunc f() {\n\treturn\n}\n"


def test_format_source_reports_gofmt_failures() -> None:
    def runner(args, text):
        raise subprocess.CalledProcessError(2, list(args), stderr="<standard input>:3:1: oops\n")

    with pytest.raises(OutputFormatError) as excinfo:
        format_source("package geo\n", runner=runner, which=lambda name: "gofmt")

    assert "oops" in excinfo.value.message
    assert excinfo.value.source == "package geo\n"


def test_format_source_rejects_invalid_syntax() -> None:
    raw = "package geo\n\nfunc (A B C) {\n"

    with pytest.raises(OutputFormatError) as excinfo:
        format_source(raw, gofmt=False)

    assert excinfo.value.source == raw
    assert str(excinfo.value).endswith(raw)
