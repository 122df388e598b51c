"""
Simple CLI for the journey map renderer.

Renders a journey map to Mermaid, or lists the options it references.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from journeymap.actions.diagram_generation import write_mermaid_artifact
from journeymap.engine.errors import JourneyMapError
from journeymap.engine.loader import JourneyMapLoader
from journeymap.engine.options import collect_options
from journeymap.graphs.render_graph import run_render
from journeymap.state.render_state import RuntimeOptions, StateClasses


def _print_events(events: list[dict[str, Any]]) -> None:
    for evt in events:
        kind = evt.get("kind", "event")
        parts = [f"kind={kind}"]
        parts.extend(f"{key}={value}" for key, value in evt.items() if key != "kind")
        print("[TRACE] " + " ".join(parts), file=sys.stderr)


def _options_from_args(args: argparse.Namespace) -> RuntimeOptions:
    return RuntimeOptions(
        disabled_cris=tuple(args.disabled_cri),
        feature_flags=tuple(args.flag),
        include_errors=args.include_errors,
        include_failures=args.include_failures,
        expand_nested_journeys=args.expand_nested_journeys,
        only_orphan_states=args.only_orphan_states,
    )


def _run_render(args: argparse.Namespace, loader: JourneyMapLoader) -> int:
    journey_map = loader.load_journey_map(args.journey_map)
    nested_journeys = loader.load_nested_journeys(args.nested_journeys) if args.nested_journeys else {}

    result = run_render(
        journey_map,
        nested_journeys,
        _options_from_args(args),
        StateClasses.from_env(),
    )

    if args.watch:
        _print_events(result.get("events", []))

    if args.output:
        write_mermaid_artifact(str(args.output), result["diagram"])
    else:
        sys.stdout.write(result["diagram"])
    return 0


def _run_options(args: argparse.Namespace, loader: JourneyMapLoader) -> int:
    journey_map = loader.load_journey_map(args.journey_map)
    print(json.dumps(collect_options(journey_map), indent=2))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="journeymap",
        description="Render an identity journey map state machine as a Mermaid diagram.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--verbose", action="store_true", help="Enable debug logging.")

    render_parser = subparsers.add_parser(
        "render", parents=[common], help="Render the journey map to Mermaid."
    )
    render_parser.add_argument("journey_map", type=Path, help="Journey map document (JSON or YAML).")
    render_parser.add_argument(
        "--nested-journeys",
        type=Path,
        default=None,
        help="Nested journey registry document, or a directory of nested journey documents.",
    )
    render_parser.add_argument(
        "--disabled-cri",
        action="append",
        default=[],
        help="Treat this CRI as disabled (repeatable).",
    )
    render_parser.add_argument(
        "--flag",
        action="append",
        default=[],
        help="Treat this feature flag as enabled (repeatable).",
    )
    render_parser.add_argument("--include-errors", action="store_true", help="Show error states.")
    render_parser.add_argument("--include-failures", action="store_true", help="Show failure states.")
    render_parser.add_argument(
        "--expand-nested-journeys",
        action="store_true",
        help="Inline nested journeys into the host journey.",
    )
    render_parser.add_argument(
        "--only-orphan-states",
        action="store_true",
        help="Show only states that nothing can transition to.",
    )
    render_parser.add_argument("--output", type=Path, default=None, help="Write the diagram to this file.")
    render_parser.add_argument(
        "--watch",
        action="store_true",
        help="Print pipeline trace events to stderr.",
    )

    options_parser = subparsers.add_parser(
        "options", parents=[common], help="List disabled-CRI and feature flag options."
    )
    options_parser.add_argument("journey_map", type=Path, help="Journey map document (JSON or YAML).")

    return parser


def main(argv: list[str] | None = None) -> int:
    load_dotenv()

    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    loader = JourneyMapLoader()
    try:
        if args.command == "options":
            return _run_options(args, loader)
        return _run_render(args, loader)
    except JourneyMapError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
