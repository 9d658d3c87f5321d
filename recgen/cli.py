"""CLI entrypoints for recgen commands."""

from __future__ import annotations

import argparse
from dataclasses import asdict
import json
import sys
from pathlib import Path

from .errors import RecgenError
from .logging import configure_logging
from .orchestrator import Orchestrator, RoundResult


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


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="recgen",
        description="Generate immutable counterpart types from a type manifest.",
    )
    _add_verbose_option(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    generate_parser = subparsers.add_parser(
        "generate",
        help="Generate sources for every request in a manifest.",
    )
    _add_verbose_option(generate_parser, suppress_default=True)
    generate_parser.add_argument("manifest", help="Path to the YAML or JSON type manifest.")
    generate_parser.add_argument(
        "--out",
        type=Path,
        default=None,
        help="Output directory (defaults to output.directory or ./generated).",
    )
    generate_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Render sources and print them without writing files.",
    )
    generate_parser.add_argument(
        "--bundle",
        action="store_true",
        help="Write every generated type into a single module.",
    )

    inspect_parser = subparsers.add_parser(
        "inspect",
        help="Print the generated type models of a manifest as JSON.",
    )
    _add_verbose_option(inspect_parser, suppress_default=True)
    inspect_parser.add_argument("manifest", help="Path to the YAML or JSON type manifest.")

    serve_parser = subparsers.add_parser(
        "serve",
        help="Run the HTTP service.",
    )
    _add_verbose_option(serve_parser, suppress_default=True)
    serve_parser.add_argument("--host", default="127.0.0.1", help="Interface to bind.")
    serve_parser.add_argument("--port", type=int, default=8000, help="Port to listen on.")

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for recgen commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose), quiet=args.command == "inspect")

    orchestrator = Orchestrator()

    if args.command == "generate":
        try:
            result = orchestrator.run_manifest(
                args.manifest,
                dry_run=bool(args.dry_run),
                output_dir=args.out.resolve() if args.out else None,
                layout="bundle" if args.bundle else None,
            )
        except (RecgenError, OSError) as exc:
            parser.exit(1, f"recgen generate failed: {exc}\nRun with --verbose for more details.\n")
        _print_result(result, dry_run=bool(args.dry_run))
        if result.report.failed:
            parser.exit(1)
    elif args.command == "inspect":
        try:
            plan = orchestrator.inspect_manifest(args.manifest)
        except RecgenError as exc:
            parser.exit(1, f"recgen inspect failed: {exc}\n")
        payload = {
            "models": [asdict(model) for model in plan.models],
            "failed": [
                {"name": item.target, "reason": item.error.reason, "detail": str(item.error)}
                for item in plan.targets
                if item.error is not None
            ],
            "invalid_usage": [asdict(group) for group in plan.diagnostics],
        }
        print(json.dumps(payload, indent=2, default=str))
    elif args.command == "serve":
        from .service.app import run_service

        run_service(host=args.host, port=args.port)
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


def _print_result(result: RoundResult, *, dry_run: bool) -> None:
    if dry_run:
        for source in result.sources:
            print(f"# --- {source.path}")
            print(source.text, end="")
    report = result.report
    for name in report.emitted:
        print(f"emitted  {name}")
    for name in report.skipped:
        print(f"skipped  {name}")
    for item in report.failed:
        print(f"failed   {item.name} ({item.reason})")
    for group in result.diagnostics:
        print(f"invalid  {group.message()}")


if __name__ == "__main__":
    main(sys.argv[1:])
