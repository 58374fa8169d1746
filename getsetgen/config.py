"""Configuration loading for getsetgen (.getsetgen.yml plus CLI overrides)."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from .constants import CONFIG_FILENAME, DEFAULT_SUFFIX
from .errors import ConfigError
from .imports import parse_import_overrides


@dataclass(frozen=True)
class GeneratorConfig:
    """Settings for one generation run, built once at start-up."""

    imports: Dict[str, str] = field(default_factory=dict)
    import_path: Optional[str] = None
    suffix: str = DEFAULT_SUFFIX
    output_dir: Optional[Path] = None
    gofmt: bool = True


def load_config(config_path: Path, *, required: bool = False) -> GeneratorConfig:
    """Load configuration from ``config_path`` (a file or a directory holding one).

    A missing file yields the defaults unless ``required`` is set, as it is for
    a file named explicitly on the command line.
    """
    config_file = _resolve_config_path(config_path)
    if not config_file.exists():
        if required:
            raise ConfigError(f"configuration file {config_file} does not exist")
        return GeneratorConfig()

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{config_file.name} must contain a mapping at the root")

    imports = data.get("imports") or {}
    if isinstance(imports, str):
        imports = parse_import_overrides(imports)
    elif not isinstance(imports, dict):
        raise ConfigError("'imports' must be a mapping of package name to import path")
    imports = {str(name): str(path) for name, path in imports.items()}

    import_path = _as_str(data.get("import_path"))
    suffix = _as_str(data.get("suffix")) or DEFAULT_SUFFIX
    output_dir_str = _as_str(data.get("output_dir"))
    output_dir = config_file.parent / output_dir_str if output_dir_str else None
    gofmt = data.get("gofmt", True)
    if not isinstance(gofmt, bool):
        raise ConfigError("'gofmt' must be true or false")

    return GeneratorConfig(
        imports=imports,
        import_path=import_path,
        suffix=suffix,
        output_dir=output_dir,
        gofmt=gofmt,
    )


def merge_cli_overrides(config: GeneratorConfig, overrides: Mapping[str, Any]) -> GeneratorConfig:
    """Return ``config`` with every non-``None`` command-line value applied."""
    changes: Dict[str, Any] = {}
    imports = overrides.get("imports")
    if imports:
        merged = dict(config.imports)
        merged.update(imports)
        changes["imports"] = merged
    for key in ("import_path", "suffix", "output_dir", "gofmt"):
        value = overrides.get(key)
        if value is not None:
            changes[key] = value
    return replace(config, **changes) if changes else config


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded or {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float)) and not isinstance(value, bool) else None


__all__ = ["GeneratorConfig", "load_config", "merge_cli_overrides"]
