"""
EventFinder CLI entrypoint.

This CLI is intended for quick local demos and debugging without a mobile shell.
It drives the same controller the HTTP API uses and prints the list view.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from typing import Any

from pydantic import ValidationError

from eventfinder.app.controller import EventFinderController
from eventfinder.config.settings import Settings, get_settings
from eventfinder.core.geo import distance_miles, format_distance
from eventfinder.core.logging import configure_logging
from eventfinder.domain.models import Category, Coordinate
from eventfinder.events.query import search_events
from eventfinder.location.platform import StaticLocationPlatform
from eventfinder.location.provider import LocationProvider
from eventfinder.views.render import category_color, event_list, one_line_summary

EXIT_DOMAIN_ERROR = 2


def _with_delay(settings: Settings, delay: float | None) -> Settings:
    if delay is None:
        return settings
    events = settings.events.model_copy(update={"simulated_delay_seconds": max(0.0, float(delay))})
    return settings.model_copy(update={"events": events})


def _explicit_location(args: argparse.Namespace) -> Coordinate | None:
    if args.lat is None:
        return None
    return Coordinate(latitude=float(args.lat), longitude=float(args.lon))


def _build_provider(here: Coordinate | None, settings: Settings) -> LocationProvider:
    if here is not None:
        return LocationProvider(StaticLocationPlatform(here), settings=settings)
    return LocationProvider.from_settings(settings)


def _describe_validation(e: ValidationError) -> str:
    return "; ".join(f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors())


async def _run_events(
    args: argparse.Namespace, here: Coordinate | None, settings: Settings
) -> EventFinderController:
    extra: dict[str, Any] = {}
    if args.search:
        text = str(args.search)

        async def _search(location, filters, **kwargs):
            return await search_events(location, text, filters, **kwargs)

        extra["query"] = _search

    controller = EventFinderController(_build_provider(here, settings), settings=settings, **extra)
    if args.category:
        await controller.set_filters(args.category)
    await controller.start()
    return controller


def _cmd_events(args: argparse.Namespace) -> int:
    """Handle the `events` subcommand."""
    if (args.lat is None) != (args.lon is None):
        print("--lat and --lon must be given together", file=sys.stderr)
        return EXIT_DOMAIN_ERROR
    try:
        here = _explicit_location(args)
    except ValidationError as e:
        print(f"Invalid location: {_describe_validation(e)}", file=sys.stderr)
        return EXIT_DOMAIN_ERROR

    settings = _with_delay(get_settings(), args.delay)
    controller = asyncio.run(_run_events(args, here, settings))
    state = controller.state

    if state.error:
        print(state.error, file=sys.stderr)
        return EXIT_DOMAIN_ERROR

    view = event_list(state, settings)
    if args.json:
        payload = {
            "location": state.current_location.model_dump(mode="json") if state.current_location else None,
            "filters": sorted(c.value for c in state.filters),
            "list": view.model_dump(mode="json"),
        }
        print(json.dumps(payload, ensure_ascii=False, indent=2))
        return 0

    here = state.current_location
    if here is not None:
        print(f"Location: {here.latitude:.4f}, {here.longitude:.4f}")
    print(view.header)
    if view.empty_text:
        print(f"  {view.empty_text}")
    for i, item in enumerate(view.items, start=1):
        print(f"{i:>2}. {one_line_summary(item)}")
    return 0


def _cmd_distance(args: argparse.Namespace) -> int:
    miles = distance_miles(args.lat1, args.lon1, args.lat2, args.lon2)
    print(format_distance(miles))
    return 0


def _cmd_categories(_: argparse.Namespace) -> int:
    settings = get_settings()
    for c in Category:
        print(f"{c.value:<8} {category_color(c, settings)}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the EventFinder CLI."""
    parser = argparse.ArgumentParser(prog="eventfinder")
    parser.add_argument("--log-level", default=None, help="Override app.log_level for this run (e.g. DEBUG)")
    sub = parser.add_subparsers(dest="command", required=True)

    ev = sub.add_parser("events", help="Find events near the current (or given) location.")
    ev.add_argument("--lat", type=float, default=None, help="Skip location lookup and use this latitude")
    ev.add_argument("--lon", type=float, default=None, help="Skip location lookup and use this longitude")
    ev.add_argument(
        "--category",
        action="append",
        default=[],
        type=Category.parse,
        help="Repeatable. Omit to use the configured default filters.",
    )
    ev.add_argument("--search", type=str, default=None, help="Keep events whose text contains every term")
    ev.add_argument("--delay", type=float, default=None, help="Override the simulated network delay (seconds)")
    ev.add_argument("--json", action="store_true", help="Output machine-readable JSON")
    ev.set_defaults(func=_cmd_events)

    dist = sub.add_parser("distance", help="Great-circle distance in miles between two points.")
    dist.add_argument("lat1", type=float)
    dist.add_argument("lon1", type=float)
    dist.add_argument("lat2", type=float)
    dist.add_argument("lon2", type=float)
    dist.set_defaults(func=_cmd_distance)

    cats = sub.add_parser("categories", help="List event categories and their colors.")
    cats.set_defaults(func=_cmd_categories)
    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint callable used by `python -m eventfinder.cli`."""
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level)
    func: Any = getattr(args, "func")
    return int(func(args))


if __name__ == "__main__":
    raise SystemExit(main())
