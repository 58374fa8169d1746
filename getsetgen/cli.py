"""CLI entrypoint for generating Go getters and setters."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .config import GeneratorConfig, load_config, merge_cli_overrides
from .errors import ConfigError, GetSetGenError
from .generator import Generator
from .imports import parse_import_overrides
from .logging import configure_logging, get_logger
from .parser import build_file_model

logger = get_logger("cli")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="getsetgen",
        description="Generate getter and setter functions for the structs in a Go source file.",
    )
    parser.add_argument("source", help="Input Go source file.")
    parser.add_argument(
        "--imports",
        default=None,
        help="Comma-separated name=import/path pairs used when imports cannot be resolved.",
    )
    parser.add_argument(
        "--import-path",
        default=None,
        help="Import path of the source file's own package (skips go.mod/GOPATH lookup).",
    )
    parser.add_argument(
        "-o",
        "--output",
        default=None,
        help="Write generated code to this file instead of <source><suffix>.go.",
    )
    parser.add_argument(
        "--suffix",
        default=None,
        help="Suffix appended to the source file name for the generated file.",
    )
    parser.add_argument(
        "--no-gofmt",
        dest="gofmt",
        action="store_const",
        const=False,
        default=None,
        help="Do not run gofmt even when it is installed.",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to a .getsetgen.yml file (defaults to the source directory).",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=False,
        help="Increase log verbosity for troubleshooting.",
    )
    parser.add_argument(
        "--log-file",
        default=None,
        help="Also write logs to this file.",
    )
    return parser


def output_path_for(source: Path, config: GeneratorConfig) -> Path:
    """Return ``<stem><suffix><ext>`` in the configured output directory."""
    directory = config.output_dir if config.output_dir is not None else source.parent
    return directory / f"{source.stem}{config.suffix}{source.suffix}"


def _load_config(args: argparse.Namespace, source: Path) -> GeneratorConfig:
    if args.config:
        config = load_config(Path(args.config), required=True)
    else:
        config = load_config(source.resolve().parent)
    return merge_cli_overrides(
        config,
        {
            "imports": parse_import_overrides(args.imports),
            "import_path": args.import_path,
            "suffix": args.suffix,
            "gofmt": args.gofmt,
        },
    )


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for getsetgen."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(
        verbose=bool(args.verbose),
        log_file=Path(args.log_file) if args.log_file else None,
    )

    source = Path(args.source)
    try:
        config = _load_config(args, source)
        model = build_file_model(source, config=config)
        output = Generator(config).render(model)
    except ConfigError as exc:
        parser.exit(1, f"getsetgen: invalid configuration: {exc}\n")
    except GetSetGenError as exc:
        parser.exit(1, f"getsetgen: {exc}\n")

    destination = Path(args.output) if args.output else output_path_for(source, config)
    try:
        destination.parent.mkdir(parents=True, exist_ok=True)
        destination.write_bytes(output)
    except OSError as exc:
        parser.exit(1, f"getsetgen: failed writing to destination: {exc}\n")

    field_count = sum(len(struct.fields) for struct in model.structs)
    logger.info(
        "Wrote %d accessor(s) for %d struct(s) to %s",
        field_count * 2,
        len(model.structs),
        _relativize(destination),
    )


def _relativize(path: Path) -> str:
    try:
        return str(path.resolve().relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
