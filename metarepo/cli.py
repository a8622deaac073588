from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Sequence

from .branches import new_build_id
from .manifest import MANIFEST_FILENAME, MetaRepoError, load_manifest
from .plan import build_plan
from .reporting import describe_sources, summarize_plan, write_markdown_report
from .script import render_script


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="meta-repo",
        description=(
            "Assemble a meta-repository from upstream sources. "
            "Without a sub-command the build script is printed, as with 'plan'."
        ),
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging.")
    _add_plan_arguments(parser)

    subparsers = parser.add_subparsers(dest="command")
    parser.set_defaults(command="plan")

    # Sub-command options default to SUPPRESS so values given before the
    # sub-command survive.
    plan_parser = subparsers.add_parser("plan", help="Print the build script for the manifest.")
    _add_plan_arguments(plan_parser, default=argparse.SUPPRESS)

    sources_parser = subparsers.add_parser("sources", help="List the manifest sources.")
    _add_manifest_argument(sources_parser, default=argparse.SUPPRESS)

    return parser


def _add_manifest_argument(parser: argparse.ArgumentParser, *, default: object = None) -> None:
    parser.add_argument(
        "--manifest",
        type=Path,
        default=Path(MANIFEST_FILENAME) if default is None else default,
        help=f"Manifest file to read (default: ./{MANIFEST_FILENAME}).",
    )


def _add_plan_arguments(parser: argparse.ArgumentParser, *, default: object = None) -> None:
    _add_manifest_argument(parser, default=default)
    parser.add_argument(
        "--build-id",
        type=str,
        default=default,
        help="Reuse an explicit build id instead of a random one.",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=default,
        help="Write the script to this file instead of standard output.",
    )
    parser.add_argument(
        "--report",
        type=Path,
        default=default,
        help="Also write a Markdown report describing the build.",
    )


def configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s", stream=sys.stderr)


def run(args: argparse.Namespace) -> int:
    configure_logging(args.verbose)
    logging.debug("Arguments: %s", args)

    if args.command == "plan":
        _run_plan_flow(args)
        return 0
    if args.command == "sources":
        _run_sources_flow(args)
        return 0
    raise MetaRepoError(f"Unknown command: {args.command}")


def _run_plan_flow(args: argparse.Namespace) -> None:
    manifest = load_manifest(args.manifest)
    build_id = args.build_id or new_build_id()
    logging.info("Build id: %s", build_id)

    plan = build_plan(manifest.sources, build_id)
    logging.debug("\n%s", summarize_plan(plan))

    script = render_script(plan, _display_origin(args.manifest))
    if args.output:
        try:
            args.output.write_text(script)
        except OSError as exc:
            raise MetaRepoError(f"Cannot write build script to {args.output}: {exc}") from exc
        logging.info("Wrote build script to %s", args.output)
    else:
        sys.stdout.write(script)

    if args.report:
        try:
            write_markdown_report(args.report, plan, manifest.sources)
        except OSError as exc:
            raise MetaRepoError(f"Cannot write report to {args.report}: {exc}") from exc


def _run_sources_flow(args: argparse.Namespace) -> None:
    manifest = load_manifest(args.manifest)
    if not manifest.sources:
        print("No sources declared.")
        return
    for line in describe_sources(manifest.sources):
        print(line)


def _display_origin(path: Path) -> str:
    if path.is_absolute():
        return str(path)
    return f"./{path.as_posix()}"


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        return run(args)
    except MetaRepoError as exc:
        logging.error("%s", exc)
        return 2
    except KeyboardInterrupt:
        logging.error("Interrupted")
        return 130


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
