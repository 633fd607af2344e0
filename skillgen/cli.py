"""CLI entrypoints for skillgen commands."""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path

from .errors import StackBuildError
from .logging import configure_logging
from .models import RunResult
from .orchestrator import Orchestrator


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    if suppress_default:
        kwargs["default"] = argparse.SUPPRESS
    else:
        kwargs["default"] = False
    parser.add_argument(
        "-v",
        "--verbose",
        **kwargs,
    )


def _add_log_file_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    parser.add_argument(
        "--log-file",
        type=Path,
        default=argparse.SUPPRESS if suppress_default else None,
        help="Also write timestamped log records to this file.",
    )


def _add_path_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Path to the workspace root (defaults to current directory).",
    )


def _positive_float(value: str) -> float:
    try:
        parsed = float(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid number: {value!r}") from exc
    if parsed <= 0:
        raise argparse.ArgumentTypeError("timeout must be greater than zero")
    return parsed


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="skillgen",
        description="Generate best-practice skill documents from workspace analysis.",
    )
    _add_verbose_option(parser)
    _add_log_file_option(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    generate_parser = subparsers.add_parser(
        "generate",
        help="Detect the tech stack, run all analyzers and write SKILL.md files.",
    )
    _add_verbose_option(generate_parser, suppress_default=True)
    _add_log_file_option(generate_parser, suppress_default=True)
    _add_path_argument(generate_parser)
    generate_parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Directory to write skills into (defaults to <path>/.claude/skills).",
    )
    generate_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Run the analysis without writing any files.",
    )
    generate_parser.add_argument(
        "--json",
        action="store_true",
        help="Print the analysis report as JSON.",
    )
    generate_parser.add_argument(
        "--analyzers",
        default=None,
        help="Comma-separated analyzer names to run (defaults to all).",
    )
    generate_parser.add_argument(
        "--timeout",
        type=_positive_float,
        default=None,
        help="Per-analyzer timeout in seconds.",
    )

    detect_parser = subparsers.add_parser(
        "detect",
        help="Print the detected tech stack as JSON.",
    )
    _add_verbose_option(detect_parser, suppress_default=True)
    _add_log_file_option(detect_parser, suppress_default=True)
    _add_path_argument(detect_parser)

    serve_parser = subparsers.add_parser(
        "serve",
        help="Run the HTTP service.",
    )
    _add_verbose_option(serve_parser, suppress_default=True)
    _add_log_file_option(serve_parser, suppress_default=True)
    serve_parser.add_argument("--host", default="127.0.0.1", help="Interface to bind.")
    serve_parser.add_argument("--port", type=int, default=8000, help="Port to listen on.")

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for skillgen commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose), log_file=args.log_file)

    if args.command == "generate":
        enabled = _split_names(args.analyzers)
        orchestrator = Orchestrator(enabled=enabled, timeout=args.timeout)
        try:
            result = orchestrator.run_sync(
                args.path,
                output_dir=args.output,
                dry_run=bool(args.dry_run),
            )
        except StackBuildError as exc:
            parser.exit(1, f"skillgen generate failed: {exc}\n")
        except ValueError as exc:
            parser.exit(1, f"{exc}\n")
        _print_result(result, as_json=bool(args.json), dry_run=bool(args.dry_run))
    elif args.command == "detect":
        orchestrator = Orchestrator()
        try:
            stack = asyncio.run(orchestrator.detect(args.path))
        except StackBuildError as exc:
            parser.exit(1, f"skillgen detect failed: {exc}\n")
        print(json.dumps(stack.to_dict(), indent=2))
    elif args.command == "serve":
        from .service.app import run_service

        run_service(host=args.host, port=args.port)
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


def _split_names(raw: str | None) -> list[str] | None:
    if raw is None:
        return None
    names = [name.strip() for name in raw.split(",") if name.strip()]
    return names or None


def _print_result(result: RunResult, *, as_json: bool, dry_run: bool) -> None:
    if as_json:
        payload = result.report.to_dict()
        payload["persisted"] = [entry.to_dict() for entry in result.persisted]
        payload["dry_run"] = dry_run
        print(json.dumps(payload, indent=2))
        return

    report = result.report
    suffix = " (dry-run)" if dry_run else ""
    print(f"Generated {report.total_skills_generated} skill(s){suffix}")
    for entry in report.analyzers:
        line = f"  {entry.name}: {entry.status.value} ({entry.skills_generated})"
        if entry.error:
            line += f" - {entry.error}"
        print(line)
    for persisted in result.persisted:
        if persisted.success and persisted.path is not None:
            print(f"  wrote {_relativize(persisted.path)}")
        else:
            print(f"  failed to write {persisted.category}/{persisted.skill_name}: {persisted.error}")


def _relativize(path: Path) -> str:
    try:
        return str(path.relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
