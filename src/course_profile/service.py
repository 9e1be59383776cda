"""Course profile service consumed by the presentation layer."""

import logging
from concurrent.futures import Future
from threading import Lock

from course_profile import course, profile as profile_ops
from course_profile.course import CourseGeometry
from course_profile.loader import LoadStatus, ProfileLoader
from course_profile.models import ChartDataPoint, ElevationProfile

logger = logging.getLogger(__name__)

DEFAULT_DISTANCE_TOLERANCE = 0.05  # fraction of the expected distance


class CourseProfileService:
    """Answers position and elevation queries against the loaded route.

    Every query is safe before the profile has loaded: it answers as if
    there were no elevation data (zeros, empty chart).
    """

    def __init__(
        self,
        loader: ProfileLoader,
        geometry: CourseGeometry,
        distance_tolerance: float = DEFAULT_DISTANCE_TOLERANCE,
    ):
        self.loader = loader
        self.geometry = geometry
        self.distance_tolerance = distance_tolerance
        self._lock = Lock()
        self._validated_profile: ElevationProfile | None = None
        self._watched_future: Future | None = None

    def ensure_loaded(self) -> "Future[ElevationProfile]":
        future = self.loader.ensure_loaded()
        with self._lock:
            watch = future is not self._watched_future
            if watch:
                self._watched_future = future
        # Outside the lock: a finished future runs the callback immediately
        if watch:
            future.add_done_callback(lambda _: self.validate_distance_constants())
        return future

    @property
    def status(self) -> LoadStatus:
        return self.loader.status

    @property
    def profile(self) -> ElevationProfile | None:
        return self.loader.profile

    @property
    def actual_total_distance(self) -> float:
        profile = self.profile
        return profile.total_distance if profile else 0.0

    def pixel_to_distance(self, pixel_x: float) -> float:
        return course.pixel_to_distance(self.geometry, pixel_x, self.actual_total_distance)

    def distance_to_pixel(self, distance: float) -> float:
        return course.distance_to_pixel(self.geometry, distance, self.actual_total_distance)

    def distance_to_index(self, distance: float) -> int:
        profile = self.profile
        if not profile:
            return 0
        return course.distance_to_index(distance, len(profile.points), profile.total_distance)

    def index_to_distance(self, index: int) -> float:
        profile = self.profile
        if not profile or len(profile.points) < 2:
            return 0.0
        return course.index_to_distance(index, len(profile.points), profile.total_distance)

    def elevation_at_distance(self, distance: float) -> float:
        profile = self.profile
        if not profile:
            return 0.0
        return profile_ops.elevation_at_distance(profile, distance)

    def elevation_at_index(self, index: int) -> float:
        profile = self.profile
        if not profile:
            return 0.0
        return profile_ops.elevation_at_index(profile, index)

    def elevation_at_pixel(self, pixel_x: float) -> float:
        return self.elevation_at_distance(self.pixel_to_distance(pixel_x))

    def position_at_pixel(self, pixel_x: float) -> dict:
        """Everything the cursor indicator needs for one pixel offset."""
        distance = self.pixel_to_distance(pixel_x)
        elevation = self.elevation_at_distance(distance)
        profile = self.profile
        if profile and not profile.is_empty:
            path_y = course.elevation_to_path_y(
                elevation, profile.min_elevation, profile.max_elevation,
                self.geometry.path_pixel_height,
            )
        else:
            path_y = self.geometry.path_pixel_height
        return {
            "pixel_x": pixel_x,
            "ratio": course.progress_ratio(self.geometry, pixel_x),
            "distance": distance,
            "elevation": elevation,
            "index": self.distance_to_index(distance),
            "mile_marker": course.format_mile_marker(distance),
            "path_y": path_y,
        }

    def chart_data(self) -> list[ChartDataPoint]:
        profile = self.profile
        if not profile:
            return []
        return profile_ops.to_chart_data(profile)

    def chart_dataset(self, **options) -> dict | None:
        profile = self.profile
        if not profile:
            return None
        return profile_ops.chart_dataset(profile, **options)

    def validate_distance_constants(self) -> bool | None:
        """Compare the parsed route length with the expected course length.

        Runs once per loaded profile. Returns None when there is nothing to
        validate yet, otherwise whether the lengths agree within tolerance.
        """
        profile = self.profile
        if profile is None or profile.is_empty:
            return None

        expected = self.geometry.expected_total_distance
        actual = profile.total_distance
        difference = abs(actual - expected)
        passed = difference <= expected * self.distance_tolerance

        with self._lock:
            first_check = profile is not self._validated_profile
            self._validated_profile = profile

        if first_check:
            if passed:
                logger.info(
                    "Course distance validation passed: expected %.2f mi, actual GPX %.2f mi",
                    expected, actual,
                )
            else:
                logger.warning(
                    "Course distance mismatch: expected %.2f mi, actual GPX %.2f mi, "
                    "difference %.2f mi (%.1f%%)",
                    expected, actual, difference, difference / expected * 100,
                )
        return passed
