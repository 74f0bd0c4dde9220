"""Find nearby essentials for a coordinate and print them.

Usage:
    python scripts/find_essentials.py --lat 40.7128 --lon -74.0060 --map-out data/map.png

Reads provider keys and endpoints from the environment (or backend/.env).
Exit code is 0 on success and 2 when the location could not be determined.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# Load environment variables from backend/.env (optional) before other imports that read env
load_dotenv(ROOT / ".env")

from services.essentials_list import render_debug_panel, render_essentials_list
from services.finder import EssentialsFinder
from services.geocoding import format_coordinates
from services.geolocation import CachingLocationSource, GeolocationOptions, StaticLocationSource
from services.map_canvas import render_essentials_map
from settings import Settings

LOG = logging.getLogger("find_essentials")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Find hospitals, ATMs, groceries, pharmacies and gas stations nearby.")
    parser.add_argument("--lat", type=float, required=True, help="Latitude of the origin.")
    parser.add_argument("--lon", type=float, required=True, help="Longitude of the origin.")
    parser.add_argument("--accuracy", type=float, default=0.0, help="Position accuracy in meters (display only).")
    parser.add_argument("--radius", type=int, default=None, help="Search radius in meters (default: SEARCH_RADIUS_M).")
    parser.add_argument("--map-out", default=None, help="Write the map as a PNG to this path.")
    parser.add_argument("--map-size", default="800x600", help="Map size as WIDTHxHEIGHT.")
    parser.add_argument("--timeout", type=float, default=15.0, help="Geolocation timeout in seconds.")
    parser.add_argument("--debug", action="store_true", help="Print the debug panel.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose logging.")
    return parser


def _parse_size(value: str) -> tuple:
    try:
        w, h = value.lower().split("x", 1)
        return int(w), int(h)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid map size {value!r}, expected WIDTHxHEIGHT")


def main(argv: Optional[list[str]] = None, cfg: Optional[Settings] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    cfg = cfg or Settings()
    if args.radius:
        cfg.SEARCH_RADIUS_M = args.radius

    source = CachingLocationSource(StaticLocationSource(args.lat, args.lon, args.accuracy))
    finder = EssentialsFinder(source, cfg=cfg, options=GeolocationOptions(timeout_s=args.timeout))
    state = finder.refresh()

    if state.error:
        print(f"❌ {state.error}", file=sys.stderr)
        return 2

    location = state.location
    print("Location found")
    if state.address:
        print(state.address)
    print(format_coordinates(location.latitude, location.longitude, location.accuracy_m))
    print()
    print(render_essentials_list(state.places))

    if args.debug:
        print()
        print(render_debug_panel(location, state.places))

    if args.map_out:
        try:
            width, height = _parse_size(args.map_size)
        except argparse.ArgumentTypeError as exc:
            parser.error(str(exc))
        out = render_essentials_map(location, state.places, args.map_out, width=width, height=height)
        if out:
            print(f"\nWrote map to {out}")
        else:
            LOG.warning("Map rendering failed; see log for details")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
