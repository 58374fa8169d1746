"""Tests for on-disk Go package lookup."""

from __future__ import annotations

import subprocess
from pathlib import Path

from getsetgen.packages import (
    PackageLocator,
    escape_module_path,
    package_name_in,
    parse_go_mod,
    read_package_clause,
)
from tests._fixtures.module_builder import ModuleBuilder


def test_parse_go_mod_reads_requires_and_replaces(module_builder: ModuleBuilder) -> None:
    go_mod = module_builder.go_mod(
        "example.com/app",
        extra="""
            require github.com/single/dep v1.2.3

            require (
                github.com/Org/Lib v0.4.0 // indirect
                gopkg.in/yaml.v3 v3.0.1
            )

            replace example.com/local => ../local
            replace (
                example.com/fork v1.0.0 => example.com/upstream v1.1.0
            )
        """,
    )

    module = parse_go_mod(go_mod)

    assert module.path == "example.com/app"
    assert module.root == go_mod.parent
    assert module.requires == {
        "github.com/single/dep": "v1.2.3",
        "github.com/Org/Lib": "v0.4.0",
        "gopkg.in/yaml.v3": "v3.0.1",
    }
    assert module.replaces == {
        "example.com/local": "../local",
        "example.com/fork": "example.com/upstream",
    }
    assert module.owns("example.com/app/internal/x")
    assert not module.owns("example.com/application")


def test_escape_module_path() -> None:
    assert escape_module_path("github.com/BurntSushi/toml") == "github.com/!burnt!sushi/toml"
    assert escape_module_path("v1.0.0") == "v1.0.0"


def test_import_path_for_module_directories(module_builder: ModuleBuilder) -> None:
    module_builder.go_mod("example.com/app")
    nested = module_builder.path("internal/geo")
    nested.mkdir(parents=True)
    locator = module_builder.locator()

    assert locator.import_path_for(module_builder.path()) == "example.com/app"
    assert locator.import_path_for(nested) == "example.com/app/internal/geo"


def test_import_path_for_gopath_directories(tmp_path: Path) -> None:
    gopath = tmp_path / "gopath"
    package_dir = gopath / "src" / "github.com" / "user" / "project"
    package_dir.mkdir(parents=True)
    locator = PackageLocator(environ={"GOPATH": str(gopath)})

    assert locator.import_path_for(package_dir) == "github.com/user/project"


def test_import_path_for_unknown_directory_is_empty(tmp_path: Path) -> None:
    loose = tmp_path / "loose"
    loose.mkdir()
    locator = PackageLocator(environ={"GOPATH": str(tmp_path / "gopath")})

    assert locator.import_path_for(loose) == ""


def test_package_name_reads_module_local_package(module_builder: ModuleBuilder) -> None:
    module_builder.go_mod("example.com/app")
    module_builder.write(
        {
            "internal/widgets/widget.go": """
                package widget

                type Widget struct{}
            """,
            "internal/widgets/widget_test.go": """
                package widget_test
            """,
        }
    )
    locator = module_builder.locator()

    assert locator.package_name("example.com/app/internal/widgets", module_builder.path()) == "widget"
    assert locator.package_name("example.com/app/missing", module_builder.path()) is None


def test_locate_searches_vendor_and_replacements(module_builder: ModuleBuilder, tmp_path: Path) -> None:
    module_builder.go_mod(
        "example.com/app",
        extra="""
            replace example.com/local => ../local
        """,
    )
    module_builder.write({"vendor/example.com/vendored/v.go": "package vend\n"})
    module_builder.write({"pkg/p.go": "package localpkg\n"}, base=tmp_path / "local")
    locator = module_builder.locator()

    assert locator.package_name("example.com/vendored", module_builder.path()) == "vend"
    assert locator.package_name("example.com/local/pkg", module_builder.path()) == "localpkg"


def test_locate_searches_module_cache(module_builder: ModuleBuilder, tmp_path: Path) -> None:
    module_builder.go_mod(
        "example.com/app",
        extra="""
            require github.com/BurntSushi/toml v1.3.2
        """,
    )
    cache = tmp_path / "modcache"
    module_builder.write(
        {"github.com/!burnt!sushi/toml@v1.3.2/internal/tz.go": "package tz\n"},
        base=cache,
    )
    locator = module_builder.locator(GOMODCACHE=str(cache))

    located = locator.locate("github.com/BurntSushi/toml/internal", module_builder.path())

    assert located == cache / "github.com/!burnt!sushi/toml@v1.3.2/internal"
    assert locator.package_name("github.com/BurntSushi/toml/internal", module_builder.path()) == "tz"


def test_locate_falls_back_to_goroot(module_builder: ModuleBuilder, tmp_path: Path) -> None:
    module_builder.go_mod("example.com/app")
    goroot = tmp_path / "goroot"
    module_builder.write({"src/net/http/server.go": "package http\n"}, base=goroot)
    locator = module_builder.locator(GOROOT=str(goroot))

    assert locator.package_name("net/http", module_builder.path()) == "http"


def test_package_name_in_skips_ignored_files(tmp_path: Path) -> None:
    (tmp_path / "a_gen.go").write_text("//go:build ignore\n\npackage main\n", encoding="utf-8")
    (tmp_path / "b.go").write_text("// Package real does things.\npackage real\n", encoding="utf-8")

    assert package_name_in(tmp_path) == "real"


def test_read_package_clause_missing_file(tmp_path: Path) -> None:
    assert read_package_clause(tmp_path / "absent.go") is None


def test_goroot_comes_from_go_env_when_unset(module_builder: ModuleBuilder, tmp_path: Path) -> None:
    module_builder.go_mod("example.com/app")
    goroot = tmp_path / "toolchain"
    module_builder.write({"src/math/rand/v2/rand.go": "package rand\n"}, base=goroot)
    calls = []

    def runner(args):
        calls.append(list(args))
        return f"{goroot}\n"

    locator = module_builder.locator(runner=runner)

    assert locator.package_name("math/rand/v2", module_builder.path()) == "rand"
    assert locator.goroot() == goroot
    assert calls == [["/usr/bin/go", "env", "GOROOT"]]


def test_goroot_environment_wins_over_go_env(module_builder: ModuleBuilder, tmp_path: Path) -> None:
    def runner(args):
        raise AssertionError("go env should not run when GOROOT is set")

    locator = module_builder.locator(runner=runner, GOROOT=str(tmp_path / "pinned"))

    assert locator.goroot() == tmp_path / "pinned"


def test_goroot_is_none_when_go_env_fails(module_builder: ModuleBuilder) -> None:
    def runner(args):
        raise subprocess.CalledProcessError(1, list(args), stderr="go: broken")

    locator = module_builder.locator(runner=runner)

    assert locator.goroot() is None
    assert module_builder.locator().goroot() is None


def test_read_package_clause_rejects_invalid_utf8(tmp_path: Path) -> None:
    source = tmp_path / "bad.go"
    source.write_bytes(b"package r\xe9al\n")

    assert read_package_clause(source) is None
