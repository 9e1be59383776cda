"""Configuration loading for course-profile."""

import json
import os
from pathlib import Path

from course_profile.course import CourseGeometry

CONFIG_DIR = Path.home() / ".config" / "course-profile"
CONFIG_PATH = CONFIG_DIR / "course-profile.json"
LOCAL_CONFIG_PATH = Path("course-profile.json")

DEFAULTS = {
    "route_source": "route.gpx",
    "path_pixel_width": 3072.0,
    "path_pixel_height": 384.0,
    "expected_total_distance": 108.21,
    "distance_tolerance": 0.05,
}

# Environment variable -> (config key, type)
ENV_OVERRIDES = {
    "COURSE_PROFILE_SOURCE": ("route_source", str),
    "COURSE_PROFILE_WIDTH": ("path_pixel_width", float),
    "COURSE_PROFILE_DISTANCE": ("expected_total_distance", float),
}


def load_config() -> dict:
    """Load configuration from config files and the environment.

    Merges, in increasing precedence:
    1. DEFAULTS
    2. ~/.config/course-profile/course-profile.json (global)
    3. ./course-profile.json (local)
    4. COURSE_PROFILE_* environment variables

    Unreadable or malformed files and non-numeric environment values are
    skipped.
    """
    config = dict(DEFAULTS)
    for config_path in [CONFIG_PATH, LOCAL_CONFIG_PATH]:
        if config_path.exists():
            try:
                with config_path.open() as f:
                    config.update(json.load(f))
            except (json.JSONDecodeError, OSError):
                continue

    for env_var, (key, cast) in ENV_OVERRIDES.items():
        value = os.environ.get(env_var)
        if value:
            try:
                config[key] = cast(value)
            except ValueError:
                continue
    return config


def build_geometry(config: dict) -> CourseGeometry:
    """Build course path constants from a config dict."""
    return CourseGeometry(
        path_pixel_width=float(config.get("path_pixel_width", DEFAULTS["path_pixel_width"])),
        path_pixel_height=float(config.get("path_pixel_height", DEFAULTS["path_pixel_height"])),
        expected_total_distance=float(
            config.get("expected_total_distance", DEFAULTS["expected_total_distance"])
        ),
    )
