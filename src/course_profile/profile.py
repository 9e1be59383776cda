"""Route profile building and elevation lookups."""

from bisect import bisect_left
from collections.abc import Iterable

from course_profile.distance import haversine_distance, meters_to_feet
from course_profile.models import ChartDataPoint, ElevationProfile, RawSample, TrackPoint

DEFAULT_FILL_COLOR = "rgba(59, 130, 246, 0.1)"
DEFAULT_BORDER_COLOR = "rgba(59, 130, 246, 1)"
DEFAULT_BORDER_WIDTH = 2


def build_profile(samples: Iterable[RawSample]) -> ElevationProfile:
    """Build a cumulative-distance elevation profile in a single pass.

    Elevations are converted from meters to feet (a missing elevation counts
    as 0 m) and distances are accumulated in miles with the haversine
    formula. Elevation gain only counts climbs; flat and descending
    segments add nothing.

    Returns:
        ElevationProfile. An empty input gives ElevationProfile.empty().
    """
    points: list[TrackPoint] = []
    cumulative = 0.0
    min_elev = float("inf")
    max_elev = float("-inf")
    gain = 0.0
    prev: TrackPoint | None = None

    for sample in samples:
        elevation_ft = meters_to_feet(sample.elevation or 0.0)

        if prev is not None:
            cumulative += haversine_distance(prev.lat, prev.lon, sample.lat, sample.lon)
            if elevation_ft > prev.elevation:
                gain += elevation_ft - prev.elevation

        min_elev = min(min_elev, elevation_ft)
        max_elev = max(max_elev, elevation_ft)

        prev = TrackPoint(
            lat=sample.lat,
            lon=sample.lon,
            elevation=elevation_ft,
            distance=cumulative,
        )
        points.append(prev)

    if not points:
        return ElevationProfile.empty()

    return ElevationProfile(
        points=tuple(points),
        total_distance=cumulative,
        min_elevation=min_elev,
        max_elevation=max_elev,
        elevation_gain=gain,
    )


def elevation_at_distance(profile: ElevationProfile, distance: float) -> float:
    """Get linearly interpolated elevation (feet) at a distance (miles).

    Distances outside the route clamp to the first/last elevation. A
    zero-length bracketing segment yields the earlier point's elevation.
    """
    points = profile.points
    if not points:
        return 0.0
    if distance <= 0:
        return points[0].elevation
    if distance >= profile.total_distance:
        return points[-1].elevation

    # First point at or beyond the target; a point exactly at it wins
    i = bisect_left(points, distance, key=lambda p: p.distance)
    if i <= 0:
        return points[0].elevation
    if i >= len(points):
        return points[-1].elevation
    if points[i].distance == distance:
        return points[i].elevation

    p1 = points[i - 1]
    p2 = points[i]
    segment = p2.distance - p1.distance
    if segment <= 0:
        return p1.elevation

    ratio = (distance - p1.distance) / segment
    return p1.elevation + ratio * (p2.elevation - p1.elevation)


def elevation_at_index(profile: ElevationProfile, index: int) -> float:
    """Get the elevation of a point by index, 0 when out of range."""
    if index < 0 or index >= len(profile.points):
        return 0.0
    return profile.points[index].elevation


def to_chart_data(profile: ElevationProfile) -> list[ChartDataPoint]:
    """Convert a profile into (distance, elevation) chart records."""
    return [
        ChartDataPoint(
            x=pt.distance,
            y=pt.elevation,
            coordinates=(pt.lon, pt.lat),
            index=i,
        )
        for i, pt in enumerate(profile.points)
    ]


def chart_dataset(
    profile: ElevationProfile,
    fill_color: str = DEFAULT_FILL_COLOR,
    border_color: str = DEFAULT_BORDER_COLOR,
    border_width: int = DEFAULT_BORDER_WIDTH,
) -> dict:
    """Build the elevation line dataset consumed by the front-end chart."""
    return {
        "label": "Elevation",
        "data": [p.to_dict() for p in to_chart_data(profile)],
        "fill": "start",
        "backgroundColor": fill_color,
        "borderColor": border_color,
        "borderWidth": border_width,
        "pointRadius": 0,
        "pointHoverRadius": 0,
        "tension": 0.4,
        "cubicInterpolationMode": "monotone",
    }


def profile_summary(profile: ElevationProfile) -> dict:
    """Summary statistics for JSON and CLI output."""
    return {
        "points": len(profile.points),
        "total_distance": profile.total_distance,
        "min_elevation": profile.min_elevation,
        "max_elevation": profile.max_elevation,
        "elevation_gain": profile.elevation_gain,
    }
