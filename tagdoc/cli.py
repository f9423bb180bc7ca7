"""CLI entrypoints for tagdoc commands."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from .config import ConfigError
from .logging import configure_logging
from .orchestrator import Orchestrator
from .rules.interpreter import RuleDependencyError


def _add_logging_options(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    default: object = argparse.SUPPRESS if suppress_default else False
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=default,
        help="Increase log verbosity for troubleshooting.",
    )
    parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        default=default,
        help="Only report warnings and errors.",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tagdoc",
        description="Interpret documentation comments and resolve symbol relationships.",
    )
    _add_logging_options(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    resolve_parser = subparsers.add_parser(
        "resolve",
        help="Build and resolve records from a JSON array of walked symbols.",
    )
    _add_logging_options(resolve_parser, suppress_default=True)
    resolve_parser.add_argument("input", help="Path to the JSON symbol list.")
    resolve_parser.add_argument(
        "-o",
        "--output",
        help="Write the resolved records here instead of stdout.",
    )
    resolve_parser.add_argument(
        "--config",
        help="Path to .tagdoc.yml or its directory (defaults to the input's directory).",
    )
    resolve_parser.add_argument(
        "--log-file",
        help="Also write debug logs to this file.",
    )

    tokenize_parser = subparsers.add_parser(
        "tokenize",
        help="Print the tags of one documentation comment as JSON.",
    )
    _add_logging_options(tokenize_parser, suppress_default=True)
    tokenize_parser.add_argument(
        "path",
        nargs="?",
        default="-",
        help="File holding the comment text (defaults to stdin).",
    )

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for tagdoc commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    log_file = getattr(args, "log_file", None)
    configure_logging(
        verbose=bool(args.verbose),
        quiet=bool(args.quiet),
        log_file=Path(log_file) if log_file else None,
    )

    orchestrator = Orchestrator()

    if args.command == "resolve":
        try:
            outcome = orchestrator.run_resolve(
                args.input,
                output_path=args.output,
                config_path=args.config,
            )
        except (ConfigError, RuleDependencyError) as exc:
            parser.exit(1, f"tagdoc resolve failed: {exc}\n")
        except (OSError, ValueError) as exc:
            parser.exit(1, f"tagdoc resolve failed: {exc}\nRun with --verbose for more details.\n")
        if args.output is None:
            sys.stdout.write(Orchestrator.dumps(outcome))
        else:
            print(f"Resolved {len(outcome.store)} of {outcome.created} records into {_relativize(Path(args.output))}")
    elif args.command == "tokenize":
        try:
            if args.path == "-":
                text = sys.stdin.read()
            else:
                text = Path(args.path).read_text(encoding="utf-8")
        except OSError as exc:
            parser.exit(1, f"tagdoc tokenize failed: {exc}\n")
        print(json.dumps(Orchestrator.tokenize(text), indent=2))
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


def _relativize(path: Path) -> str:
    try:
        return str(path.resolve().relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
