"""Command-line interface for exprtemplate."""

from __future__ import annotations

import argparse
import logging
import sys
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from exprtemplate.errors import EvaluationError, TemplateParseError

DEFAULT_PREFIX = "${"
DEFAULT_SUFFIX = "}"


@dataclass(frozen=True, slots=True)
class CliOptions:
    """Parsed CLI options."""

    input_file: Path
    output_file: Path | None
    prefix: str
    suffix: str
    variables: dict[str, Any]
    check: bool
    debug: bool
    verbose: bool


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser (separate function for testability)."""
    p = argparse.ArgumentParser(
        prog="exprtemplate",
        description="Render templates with embedded Python expressions",
    )
    p.add_argument("input", help="Input template file")
    p.add_argument("-o", "--output", help="Output file (default: stdout)")
    p.add_argument("-p", "--prefix", default=None, help="Expression prefix (default: ${)")
    p.add_argument("-s", "--suffix", default=None, help="Expression suffix (default: })")
    p.add_argument(
        "-e",
        "--var",
        action="append",
        default=[],
        metavar="NAME=VALUE",
        help="Set a template variable (repeatable)",
    )
    p.add_argument(
        "--config",
        metavar="FILE",
        help="Config file (default: auto-discover exprtemplate.toml)",
    )
    p.add_argument("--check", action="store_true", help="Only check the template for errors")
    p.add_argument("--debug", action="store_true", help="Dump segments to stderr")
    p.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return p


def parse_var_arg(s: str) -> tuple[str, str]:
    """Parse a NAME=VALUE string into (name, value)."""
    if "=" not in s:
        raise argparse.ArgumentTypeError(f"invalid variable format (expected NAME=VALUE): {s}")
    name, _, value = s.partition("=")
    return name, value


def load_config(config_path: Path | None, input_dir: Path) -> dict[str, Any]:
    """Load a TOML config file, returning an empty dict on missing/absent file."""
    path = config_path if config_path is not None else input_dir / "exprtemplate.toml"

    if not path.is_file():
        return {}

    with open(path, "rb") as f:
        return tomllib.load(f)


def resolve_options(args: argparse.Namespace) -> CliOptions:
    """Merge config file and CLI args into CliOptions.

    Precedence: defaults < config file < CLI flags.
    """
    input_file = Path(args.input)
    input_dir = input_file.parent
    if not input_dir.parts:
        input_dir = Path(".")

    config_path = Path(args.config) if args.config else None
    config = load_config(config_path, input_dir)

    # Delimiters: defaults < config < CLI
    prefix, suffix = DEFAULT_PREFIX, DEFAULT_SUFFIX
    cfg_delims = config.get("delimiters")
    if isinstance(cfg_delims, dict):
        prefix = str(cfg_delims.get("prefix", prefix))
        suffix = str(cfg_delims.get("suffix", suffix))
    if args.prefix is not None:
        prefix = args.prefix
    if args.suffix is not None:
        suffix = args.suffix
    if not prefix or not suffix:
        raise argparse.ArgumentTypeError("expression prefix and suffix must be non-empty")

    # Variables: config < CLI
    variables: dict[str, Any] = {}
    cfg_vars = config.get("vars")
    if isinstance(cfg_vars, dict):
        for k, v in cfg_vars.items():
            variables[str(k)] = v
    for raw in args.var:
        name, value = parse_var_arg(raw)
        variables[name] = value

    output_file = Path(args.output) if args.output else None

    return CliOptions(
        input_file=input_file,
        output_file=output_file,
        prefix=prefix,
        suffix=suffix,
        variables=variables,
        check=args.check,
        debug=args.debug,
        verbose=args.verbose,
    )


def render_file(options: CliOptions) -> str:
    """Read, parse, and (unless checking) evaluate a template file."""
    from exprtemplate.context import ParserContext
    from exprtemplate.debug import dump_segments
    from exprtemplate.parser import TemplateParser, assemble
    from exprtemplate.pyexpr import python_sub_parser

    source = options.input_file.read_text(encoding="utf-8")
    context = ParserContext(options.prefix, options.suffix)
    parser = TemplateParser(python_sub_parser)

    segments = parser.segment(source, context) if source else []
    if options.debug:
        dump_segments(segments)

    expression = assemble(source, segments)
    if options.check:
        return ""
    return expression.get_value_string(options.variables)


def main(argv: list[str] | None = None) -> int:
    """CLI entry point. Returns exit code (0/1/2). Does not call sys.exit()."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        options = resolve_options(args)
    except argparse.ArgumentTypeError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    try:
        output = render_file(options)
    except TemplateParseError as exc:
        print(exc.format(str(options.input_file)), file=sys.stderr)
        return 1
    except EvaluationError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    if options.check:
        return 0

    if options.output_file:
        options.output_file.write_text(output, encoding="utf-8")
    else:
        sys.stdout.write(output)

    return 0
