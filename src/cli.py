"""Command-line interface for pyrethrum."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Any

import orjson
from rich.console import Console
from rich.logging import RichHandler

from checker.diagnostics import has_errors, render_json, render_text, to_diagnostics
from checker.exhaustiveness import check_input
from contract.errors import InputError
from contract.wire import encode_analysis_input, load_document
from plugins.python.source import dump_file
from plugins.registry import parse_input
from rules.config import ConfigError, load_config
from rules.ignore import filter_ignored

logger = logging.getLogger(__name__)

PYTHON_SUFFIXES = frozenset({".py", ".pyi"})


def configure_logging(verbosity: int = 0) -> None:
    """Configure application logging with Rich handler on stderr."""
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[
            RichHandler(
                console=Console(stderr=True), rich_tracebacks=True, show_path=False
            )
        ],
    )


def _add_verbosity(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase log verbosity (-v info, -vv debug)",
    )


def _add_out(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--out",
        default=None,
        help="Write the document to this path (default: stdout)",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pyrethrum",
        description="Static analyzer for exhaustive exception handling",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    check_parser = subparsers.add_parser(
        "check", help="Check a document for exhaustiveness errors"
    )
    check_parser.add_argument(
        "file",
        nargs="?",
        default=None,
        help="Input JSON document, or a Python source file",
    )
    check_parser.add_argument(
        "--stdin", action="store_true", help="Read the JSON document from stdin"
    )
    check_parser.add_argument(
        "-f",
        "--format",
        type=str.lower,
        choices=("text", "json"),
        default=None,
        help="Output format (default: config format, else text)",
    )
    check_parser.add_argument(
        "--strict", action="store_true", help="Treat warnings as errors"
    )
    check_parser.add_argument(
        "--config-root",
        default=".",
        help="Directory holding pyrethrum.toml (default: .)",
    )
    _add_verbosity(check_parser)

    dump_parser = subparsers.add_parser(
        "dump", help="Dump a Python source file as a raw tree document"
    )
    dump_parser.add_argument("file", help="Python source file")
    _add_out(dump_parser)
    _add_verbosity(dump_parser)

    extract_parser = subparsers.add_parser(
        "extract", help="Write the pre-extracted analysis input for a document"
    )
    extract_parser.add_argument(
        "file", help="Input JSON document, or a Python source file"
    )
    _add_out(extract_parser)
    _add_verbosity(extract_parser)

    return parser


def _read_document(path: Path) -> dict[str, Any]:
    if path.suffix in PYTHON_SUFFIXES:
        return dump_file(path)
    try:
        raw = path.read_bytes()
    except OSError as exc:
        msg = f"Cannot read {path}: {exc}"
        raise InputError(msg) from exc
    return load_document(raw)


def _write_output(payload: bytes, out: str | None) -> None:
    if out is None:
        sys.stdout.write(payload.decode("utf-8") + "\n")
        return
    out_path = Path(out).expanduser()
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_bytes(payload + b"\n")
    logger.info("Wrote %s", out_path)


def _handle_check(
    file: str | None,
    *,
    use_stdin: bool,
    output_format: str | None,
    strict: bool,
    config_root: Path,
) -> int:
    try:
        config = load_config(config_root)
    except ConfigError as exc:
        sys.stderr.write(f"error: {exc}\n")
        return 2

    try:
        if use_stdin:
            document = load_document(sys.stdin.buffer.read())
        elif file is not None:
            document = _read_document(Path(file))
        else:
            sys.stderr.write("error: either --stdin or a file path is required\n")
            return 2
        analysis = parse_input(document)
    except InputError as exc:
        sys.stderr.write(f"error: {exc}\n")
        return 2

    errors = check_input(analysis)
    diagnostics = filter_ignored(
        to_diagnostics(errors, analysis.language), config.ignore
    )
    logger.info(
        "%d findings, %d reported after ignore rules", len(errors), len(diagnostics)
    )

    fmt = output_format or config.format
    if fmt == "json":
        sys.stdout.write(render_json(diagnostics) + "\n")
    else:
        sys.stdout.write(render_text(diagnostics) + "\n")

    if has_errors(diagnostics):
        return 1
    if (strict or config.strict) and diagnostics:
        return 1
    return 0


def _handle_dump(file: str, out: str | None) -> int:
    try:
        document = dump_file(Path(file))
    except InputError as exc:
        sys.stderr.write(f"error: {exc}\n")
        return 2
    _write_output(orjson.dumps(document, option=orjson.OPT_INDENT_2), out)
    return 0


def _handle_extract(file: str, out: str | None) -> int:
    try:
        analysis = parse_input(_read_document(Path(file)))
    except InputError as exc:
        sys.stderr.write(f"error: {exc}\n")
        return 2
    _write_output(encode_analysis_input(analysis), out)
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(args.verbose)

    if args.command == "check":
        return _handle_check(
            args.file,
            use_stdin=args.stdin,
            output_format=args.format,
            strict=args.strict,
            config_root=Path(args.config_root).expanduser().resolve(),
        )

    if args.command == "dump":
        return _handle_dump(args.file, args.out)

    if args.command == "extract":
        return _handle_extract(args.file, args.out)

    raise AssertionError


if __name__ == "__main__":
    raise SystemExit(main())
