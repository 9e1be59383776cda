"""Conversions between pixel, progress and route-distance coordinates.

The course is drawn as a fixed-width path (pixel space). A pixel offset
becomes a progress ratio in [0, 1], and the ratio becomes a distance in
miles along the route. When a parsed profile is available its real length
replaces the expected length so the mapping follows the actual track.
"""

import math
from dataclasses import dataclass


@dataclass(frozen=True)
class CourseGeometry:
    path_pixel_width: float = 3072.0  # px, width of the rendered course path
    path_pixel_height: float = 384.0  # px
    expected_total_distance: float = 108.21  # miles

    def __post_init__(self):
        if self.path_pixel_width <= 0:
            raise ValueError(f"path_pixel_width must be positive, got {self.path_pixel_width}")
        if self.path_pixel_height <= 0:
            raise ValueError(f"path_pixel_height must be positive, got {self.path_pixel_height}")
        if self.expected_total_distance <= 0:
            raise ValueError(
                f"expected_total_distance must be positive, got {self.expected_total_distance}"
            )


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def _scale(geometry: CourseGeometry, actual_total_distance: float | None) -> float:
    """Ratio of actual to expected route length, 1.0 without a parsed profile."""
    if not actual_total_distance or actual_total_distance <= 0:
        return 1.0
    return actual_total_distance / geometry.expected_total_distance


def progress_ratio(geometry: CourseGeometry, pixel_x: float) -> float:
    return _clamp(pixel_x / geometry.path_pixel_width, 0.0, 1.0)


def pixel_to_distance(
    geometry: CourseGeometry, pixel_x: float, actual_total_distance: float | None = None
) -> float:
    """Convert a horizontal pixel offset to miles along the route.

    Args:
        geometry: Course path constants
        pixel_x: Offset along the path in pixels (clamped to the path)
        actual_total_distance: Parsed route length in miles, if loaded

    Returns:
        Distance in miles
    """
    distance = progress_ratio(geometry, pixel_x) * geometry.expected_total_distance
    return distance * _scale(geometry, actual_total_distance)


def distance_to_pixel(
    geometry: CourseGeometry, distance: float, actual_total_distance: float | None = None
) -> float:
    """Convert miles along the route to a pixel offset on the path.

    Inverse of pixel_to_distance. The result is clamped to
    [0, path_pixel_width].
    """
    expected_distance = distance / _scale(geometry, actual_total_distance)
    ratio = expected_distance / geometry.expected_total_distance
    return _clamp(ratio * geometry.path_pixel_width, 0.0, geometry.path_pixel_width)


def distance_to_index(distance: float, total_points: int, total_distance: float) -> int:
    """Convert a distance to an index into an evenly spaced point array."""
    if total_points <= 0 or total_distance <= 0:
        return 0
    ratio = distance / total_distance
    return math.floor(_clamp(ratio * total_points, 0, total_points - 1))


def index_to_distance(index: int, total_points: int, total_distance: float) -> float:
    """Convert an index into an evenly spaced point array to a distance.

    Raises:
        ValueError: If total_points < 2 (the spacing is undefined).
    """
    if total_points < 2:
        raise ValueError(f"index_to_distance needs at least 2 points, got {total_points}")
    ratio = index / (total_points - 1)
    return ratio * total_distance


def page_x(pointer_x: float, scroll_x: float) -> float:
    """Position on the course path under the pointer, including scroll offset."""
    return pointer_x + scroll_x


def scroll_offset(geometry: CourseGeometry, scroll_progress: float, viewport_width: float) -> float:
    """Map vertical scroll progress (0-1) to the horizontal course offset."""
    max_offset = max(0.0, geometry.path_pixel_width - viewport_width)
    return _clamp(scroll_progress, 0.0, 1.0) * max_offset


def elevation_to_path_y(
    elevation: float, min_elevation: float, max_elevation: float, path_height: float
) -> float:
    """SVG y coordinate of an elevation on the course strip (0 = top)."""
    elev_range = max_elevation - min_elevation
    if elev_range <= 0:
        return path_height
    fraction = _clamp((elevation - min_elevation) / elev_range, 0.0, 1.0)
    return path_height * (1.0 - fraction)


def format_mile_marker(distance: float) -> str:
    return f"{distance:.1f} MI"
