import argparse
import logging
import sys

import requests

from course_profile import course
from course_profile.charts import render_profile_png
from course_profile.config import DEFAULTS, build_geometry, load_config
from course_profile.loader import fetch_and_build
from course_profile.profile import elevation_at_distance
from course_profile.service import DEFAULT_DISTANCE_TOLERANCE


def build_parser(config: dict | None = None) -> argparse.ArgumentParser:
    """Build argument parser with defaults from config file."""
    if config is None:
        config = {}

    def get_default(key: str):
        return config.get(key, DEFAULTS[key])

    parser = argparse.ArgumentParser(
        description="Summarize a GPX course and map course-path pixels to miles and elevation."
    )
    parser.add_argument(
        "source",
        nargs="?",
        default=get_default("route_source"),
        help=f"Path or http(s) URL of the GPX file (default: {DEFAULTS['route_source']})",
    )
    parser.add_argument(
        "--width",
        type=float,
        default=get_default("path_pixel_width"),
        help=f"Course path width in pixels (default: {DEFAULTS['path_pixel_width']})",
    )
    parser.add_argument(
        "--height",
        type=float,
        default=get_default("path_pixel_height"),
        help=f"Course path height in pixels (default: {DEFAULTS['path_pixel_height']})",
    )
    parser.add_argument(
        "--distance",
        type=float,
        default=get_default("expected_total_distance"),
        help=f"Expected course distance in miles (default: {DEFAULTS['expected_total_distance']})",
    )
    parser.add_argument(
        "--at-mile",
        type=float,
        action="append",
        default=[],
        help="Report elevation and pixel offset at this distance in miles (repeatable)",
    )
    parser.add_argument(
        "--at-pixel",
        type=float,
        action="append",
        default=[],
        help="Report distance and elevation at this pixel offset (repeatable)",
    )
    parser.add_argument(
        "--chart",
        type=str,
        default=None,
        help="Write the course elevation strip to this PNG file",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    config = load_config()
    parser = build_parser(config)
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        geometry = build_geometry({
            "path_pixel_width": args.width,
            "path_pixel_height": args.height,
            "expected_total_distance": args.distance,
        })
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    try:
        profile = fetch_and_build(args.source)
    except FileNotFoundError:
        print(f"Error: File not found: {args.source}", file=sys.stderr)
        sys.exit(1)
    except requests.RequestException as e:
        print(f"Error downloading GPX file: {e}", file=sys.stderr)
        sys.exit(1)
    except Exception as e:
        print(f"Error parsing GPX file: {e}", file=sys.stderr)
        sys.exit(1)

    if profile.is_empty:
        print("Error: GPX file contains no track points.", file=sys.stderr)
        sys.exit(1)

    actual = profile.total_distance
    tolerance = float(config.get("distance_tolerance", DEFAULT_DISTANCE_TOLERANCE))

    print("=== Course Profile ===")
    print(f"Source:         {args.source}")
    print(f"Points:         {len(profile.points)}")
    print(f"Distance:       {actual:.2f} mi ({actual * 1.609344:.2f} km)")
    print(f"Expected:       {args.distance:.2f} mi")
    print(f"Elevation Gain: {profile.elevation_gain:.0f} ft ({profile.elevation_gain / 3.28084:.0f} m)")
    print(f"Min Elevation:  {profile.min_elevation:.0f} ft")
    print(f"Max Elevation:  {profile.max_elevation:.0f} ft")
    if abs(actual - args.distance) > args.distance * tolerance:
        print(f"Warning: parsed distance differs from expected by more than {tolerance:.0%}")

    for miles in args.at_mile:
        pixel = course.distance_to_pixel(geometry, miles, actual)
        elevation = elevation_at_distance(profile, miles)
        print(f"@ {course.format_mile_marker(miles)}: {elevation:.0f} ft, x={pixel:.1f}px")

    for pixel in args.at_pixel:
        miles = course.pixel_to_distance(geometry, pixel, actual)
        elevation = elevation_at_distance(profile, miles)
        print(f"@ x={pixel:.1f}px: {course.format_mile_marker(miles)}, {elevation:.0f} ft")

    if args.chart:
        with open(args.chart, "wb") as f:
            f.write(render_profile_png(profile, geometry))
        print(f"Chart:          {args.chart}")
