"""
GruenFinder CLI entrypoint.

Quick local exploration without a map front end. Every command builds an `ExplorerSession`,
loads the catalog (falling back to the bundled sample when no data file is configured) and
prints either a short text listing or JSON.
"""

from __future__ import annotations

import argparse
import asyncio
import json
from typing import Any

from pydantic import ValidationError

from gruenfinder.config.settings import get_settings
from gruenfinder.core.logging import configure_logging
from gruenfinder.domain.models import FilterSpec, GeoPoint
from gruenfinder.search.explain import filter_summary, nearest_summary, one_line
from gruenfinder.session import ExplorerSession


def _location(args: argparse.Namespace) -> GeoPoint | None:
    if args.lat is None and args.lng is None:
        return None
    if args.lat is None or args.lng is None:
        raise ValueError("--lat and --lng must be given together")
    return GeoPoint(lat=float(args.lat), lng=float(args.lng))


def _input_error(exc: ValueError) -> str:
    if isinstance(exc, ValidationError):
        return "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or 'input'}: {err['msg']}" for err in exc.errors()
        )
    return str(exc)


def _print_json(payload: Any) -> None:
    print(json.dumps(payload, ensure_ascii=False, indent=2))


async def _cmd_search(args: argparse.Namespace) -> int:
    """Handle the `search` subcommand."""
    try:
        location = _location(args)
        spec = FilterSpec(
            search_text=args.query or "",
            max_distance_m=args.max_distance,
            size_categories=args.size or [],
            required_facilities=args.facility or [],
            required_accessibility=args.accessibility or [],
        )
    except ValueError as exc:
        args.parser.error(_input_error(exc))

    session = ExplorerSession(settings=get_settings())
    await session.load()
    session.set_user_location(location)
    result = await session.apply_filters(spec)

    if args.json:
        _print_json(result.model_dump(mode="json"))
        return 0

    print(filter_summary(result))
    for i, poi in enumerate(result.items, start=1):
        print(f"{i:>2}. {one_line(poi, distance_m=result.distances_to_search.get(str(poi.id)))}")
    return 0


async def _cmd_nearest(args: argparse.Namespace) -> int:
    session = ExplorerSession(settings=get_settings())
    await session.load()
    result = session.find_nearest(GeoPoint(lat=args.lat, lng=args.lng), mode=args.mode)

    if args.json:
        _print_json(result.model_dump(mode="json") if result else None)
        return 0 if result else 1

    print(nearest_summary(result))
    if result is None:
        return 1
    print(f"    {one_line(result.poi, distance_m=result.distance_m)}")
    return 0


async def _cmd_show(args: argparse.Namespace) -> int:
    try:
        location = _location(args)
    except ValueError as exc:
        args.parser.error(str(exc))

    session = ExplorerSession(settings=get_settings())
    await session.load()
    session.set_user_location(location)
    details = await session.details(args.id)
    if details is None:
        print(f"Unknown green space '{args.id}'")
        return 1

    if args.json:
        _print_json(details.model_dump(mode="json"))
        return 0

    poi = details.poi
    print(f"{poi.name} ({details.category_name})")
    print(f"  Size: {details.size_label}")
    if poi.opening_hours:
        print(f"  Opening hours: {poi.opening_hours}")
    print(f"  Weather: {details.weather.temperature_c}°C, {details.weather.condition}")
    if details.travel_time is not None:
        print(f"  Walking: {details.travel_time.label}")
        print(f"  Directions: {details.directions_url}")
    print("  Facilities: " + (", ".join(f["label"] for f in details.facilities) or "No information available"))
    print("  Accessibility: " + (", ".join(a["label"] for a in details.accessibility) or "No information available"))
    if poi.description:
        print(f"  {poi.description}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the GruenFinder CLI."""
    parser = argparse.ArgumentParser(prog="gruenfinder")
    parser.add_argument("--log-level", default=None, help="Override the configured log level (e.g. DEBUG)")
    sub = parser.add_subparsers(dest="command", required=True)

    s = sub.add_parser("search", help="Filter green spaces; an address query ranks results by distance.")
    s.add_argument("query", nargs="?", default="", help="Address or place to rank results by")
    s.add_argument("--lat", type=float, default=None, help="Your latitude (enables --max-distance)")
    s.add_argument("--lng", type=float, default=None, help="Your longitude (enables --max-distance)")
    s.add_argument("--max-distance", type=float, default=None, help="Meters from your location")
    s.add_argument("--size", action="append", default=[], choices=["small", "medium", "large"])
    s.add_argument("--facility", action="append", default=[], help="Repeatable; all must be present")
    s.add_argument("--accessibility", action="append", default=[], help="Repeatable; all must be present")
    s.add_argument("--json", action="store_true", help="Output machine-readable JSON")
    s.set_defaults(func=_cmd_search, parser=s)

    n = sub.add_parser("nearest", help="Find the green space closest to a coordinate.")
    n.add_argument("--lat", required=True, type=float)
    n.add_argument("--lng", required=True, type=float)
    n.add_argument("--mode", default=None, help="walking, cycling, public_transport or driving")
    n.add_argument("--json", action="store_true")
    n.set_defaults(func=_cmd_nearest)

    d = sub.add_parser("show", help="Show details (weather, walking time, directions) for one green space.")
    d.add_argument("id")
    d.add_argument("--lat", type=float, default=None)
    d.add_argument("--lng", type=float, default=None)
    d.add_argument("--json", action="store_true")
    d.set_defaults(func=_cmd_show, parser=d)
    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint callable used by `python -m gruenfinder.cli`."""
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level)
    func: Any = getattr(args, "func")
    return int(asyncio.run(func(args)))


if __name__ == "__main__":
    raise SystemExit(main())
