import os

import pytest

from course_profile.course import CourseGeometry
from course_profile.distance import haversine_distance
from course_profile.loader import ProfileLoader
from course_profile.models import RawSample
from course_profile.service import CourseProfileService

SAMPLE_GPX_PATH = os.path.join(
    os.path.dirname(__file__), "functional", "data", "sample_route.gpx"
)

# One degree of longitude along the equator, in miles
EQUATOR_DEGREE_MI = haversine_distance(0.0, 0.0, 0.0, 1.0)


def make_gpx(points: list[tuple[float, float, float | None]]) -> str:
    """Build GPX text from (lat, lon, elevation_m) tuples; None omits <ele>."""
    trkpts = []
    for lat, lon, ele in points:
        ele_tag = f"<ele>{ele}</ele>" if ele is not None else ""
        trkpts.append(f'<trkpt lat="{lat}" lon="{lon}">{ele_tag}</trkpt>')
    return (
        '<?xml version="1.0"?>'
        '<gpx version="1.1" xmlns="http://www.topografix.com/GPX/1/1">'
        "<trk><trkseg>" + "".join(trkpts) + "</trkseg></trk></gpx>"
    )


@pytest.fixture
def equator_samples():
    """Two samples one degree of longitude apart on the equator, 0 m -> 10 m."""
    return [
        RawSample(lat=0.0, lon=0.0, elevation=0.0),
        RawSample(lat=0.0, lon=1.0, elevation=10.0),
    ]


@pytest.fixture
def hilly_samples():
    """Samples along the equator with a climb, a descent and a flat stretch."""
    elevations = [100.0, 150.0, 120.0, 120.0, 200.0, 180.0]
    return [
        RawSample(lat=0.0, lon=i * 0.1, elevation=ele)
        for i, ele in enumerate(elevations)
    ]


@pytest.fixture
def equator_gpx():
    """GPX text for ten equal steps along one degree of the equator."""
    return make_gpx([(0.0, i * 0.1, float(i * 10)) for i in range(11)])


@pytest.fixture
def equator_geometry():
    """Course geometry whose expected distance matches the equator track."""
    return CourseGeometry(
        path_pixel_width=1000.0,
        path_pixel_height=200.0,
        expected_total_distance=EQUATOR_DEGREE_MI,
    )


@pytest.fixture
def loaded_service(equator_gpx, equator_geometry):
    """Service whose profile has finished loading from in-memory GPX."""
    loader = ProfileLoader("memory://equator", fetch=lambda source: equator_gpx)
    service = CourseProfileService(loader, equator_geometry)
    service.ensure_loaded().result(timeout=5)
    yield service
    loader.close()


@pytest.fixture
def gpx_text():
    """Factory fixture building GPX text from (lat, lon, elevation_m) tuples."""
    return make_gpx


@pytest.fixture
def equator_degree_mi():
    return EQUATOR_DEGREE_MI
