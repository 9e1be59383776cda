import pytest

from course_profile.distance import haversine_distance
from course_profile.models import ElevationProfile, RawSample
from course_profile.profile import (
    build_profile,
    chart_dataset,
    elevation_at_distance,
    elevation_at_index,
    profile_summary,
    to_chart_data,
)


class TestBuildProfile:
    def test_equator_example(self, equator_samples, equator_degree_mi):
        profile = build_profile(equator_samples)
        assert profile.total_distance == pytest.approx(equator_degree_mi)
        assert [p.elevation for p in profile.points] == pytest.approx([0.0, 32.8084])
        assert profile.points[0].distance == 0.0
        assert profile.points[-1].distance == profile.total_distance

    def test_total_is_sum_of_segments(self, hilly_samples):
        profile = build_profile(hilly_samples)
        expected = sum(
            haversine_distance(a.lat, a.lon, b.lat, b.lon)
            for a, b in zip(hilly_samples, hilly_samples[1:])
        )
        assert profile.total_distance == pytest.approx(expected)

    def test_distances_non_decreasing(self, hilly_samples):
        profile = build_profile(hilly_samples)
        distances = [p.distance for p in profile.points]
        assert distances[0] == 0.0
        assert all(b >= a for a, b in zip(distances, distances[1:]))

    def test_min_max_bound_every_point(self, hilly_samples):
        profile = build_profile(hilly_samples)
        assert profile.min_elevation == pytest.approx(100.0 * 3.28084)
        assert profile.max_elevation == pytest.approx(200.0 * 3.28084)
        for p in profile.points:
            assert profile.min_elevation <= p.elevation <= profile.max_elevation

    def test_elevation_gain_counts_only_climbs(self, hilly_samples):
        profile = build_profile(hilly_samples)
        # 100 -> 150 (+50), 150 -> 120, 120 -> 120, 120 -> 200 (+80), 200 -> 180
        assert profile.elevation_gain == pytest.approx(130.0 * 3.28084)

    def test_descending_route_has_no_gain(self):
        samples = [RawSample(lat=0.0, lon=i * 0.01, elevation=100.0 - i * 10) for i in range(5)]
        profile = build_profile(samples)
        assert profile.elevation_gain == 0.0

    def test_flat_route_has_no_gain(self):
        samples = [RawSample(lat=0.0, lon=i * 0.01, elevation=50.0) for i in range(5)]
        assert build_profile(samples).elevation_gain == 0.0

    def test_missing_elevation_treated_as_zero(self):
        samples = [
            RawSample(lat=0.0, lon=0.0, elevation=None),
            RawSample(lat=0.0, lon=0.01, elevation=10.0),
        ]
        profile = build_profile(samples)
        assert profile.points[0].elevation == 0.0
        assert profile.min_elevation == 0.0
        assert profile.elevation_gain == pytest.approx(32.8084)

    def test_empty_input(self):
        profile = build_profile([])
        assert profile == ElevationProfile.empty()

    def test_single_point(self):
        profile = build_profile([RawSample(lat=10.0, lon=20.0, elevation=100.0)])
        assert len(profile.points) == 1
        assert profile.total_distance == 0.0
        assert profile.min_elevation == profile.max_elevation == pytest.approx(328.084)
        assert profile.elevation_gain == 0.0

    def test_accepts_iterator(self, hilly_samples):
        profile = build_profile(iter(hilly_samples))
        assert len(profile.points) == len(hilly_samples)

    def test_points_keep_coordinates(self, hilly_samples):
        profile = build_profile(hilly_samples)
        assert [(p.lat, p.lon) for p in profile.points] == [(s.lat, s.lon) for s in hilly_samples]


class TestElevationAtDistance:
    def test_equator_midpoint(self, equator_samples, equator_degree_mi):
        profile = build_profile(equator_samples)
        assert elevation_at_distance(profile, equator_degree_mi / 2) == pytest.approx(16.4042)

    def test_start_and_end(self, hilly_samples):
        profile = build_profile(hilly_samples)
        assert elevation_at_distance(profile, 0) == profile.points[0].elevation
        assert elevation_at_distance(profile, profile.total_distance) == profile.points[-1].elevation

    def test_clamps_outside_route(self, hilly_samples):
        profile = build_profile(hilly_samples)
        assert elevation_at_distance(profile, -5.0) == profile.points[0].elevation
        assert elevation_at_distance(profile, profile.total_distance + 100) == profile.points[-1].elevation

    def test_midpoint_within_range(self, hilly_samples):
        profile = build_profile(hilly_samples)
        mid = elevation_at_distance(profile, profile.total_distance / 2)
        assert profile.min_elevation <= mid <= profile.max_elevation

    def test_exact_point_distance(self, hilly_samples):
        profile = build_profile(hilly_samples)
        pt = profile.points[2]
        assert elevation_at_distance(profile, pt.distance) == pytest.approx(pt.elevation)

    def test_duplicate_distance_points(self):
        samples = [
            RawSample(lat=0.0, lon=0.0, elevation=0.0),
            RawSample(lat=0.0, lon=0.1, elevation=10.0),
            RawSample(lat=0.0, lon=0.1, elevation=20.0),
            RawSample(lat=0.0, lon=0.2, elevation=30.0),
        ]
        profile = build_profile(samples)
        assert profile.points[1].distance == profile.points[2].distance
        # At a shared distance the first sample recorded there wins
        at_dup = elevation_at_distance(profile, profile.points[1].distance)
        assert at_dup == pytest.approx(10.0 * 3.28084)
        assert at_dup == pytest.approx(profile.points[1].elevation)
        # Just beyond the duplicate, interpolation starts from the later sample
        beyond = elevation_at_distance(profile, profile.points[1].distance + 1e-9)
        assert beyond == pytest.approx(20.0 * 3.28084, abs=1e-3)

    def test_empty_profile(self):
        assert elevation_at_distance(ElevationProfile.empty(), 10.0) == 0.0
        assert elevation_at_distance(ElevationProfile.empty(), 0.0) == 0.0

    def test_single_point_profile(self):
        profile = build_profile([RawSample(lat=0.0, lon=0.0, elevation=100.0)])
        assert elevation_at_distance(profile, 5.0) == pytest.approx(328.084)


class TestElevationAtIndex:
    def test_in_range(self, hilly_samples):
        profile = build_profile(hilly_samples)
        assert elevation_at_index(profile, 1) == profile.points[1].elevation

    def test_out_of_range(self, hilly_samples):
        profile = build_profile(hilly_samples)
        assert elevation_at_index(profile, -1) == 0.0
        assert elevation_at_index(profile, len(hilly_samples)) == 0.0


class TestChartData:
    def test_mirrors_points(self, hilly_samples):
        profile = build_profile(hilly_samples)
        data = to_chart_data(profile)
        assert len(data) == len(profile.points)
        for i, (record, pt) in enumerate(zip(data, profile.points)):
            assert record.index == i
            assert record.x == pt.distance
            assert record.y == pt.elevation
            assert record.coordinates == (pt.lon, pt.lat)

    def test_dataset_defaults(self, hilly_samples):
        dataset = chart_dataset(build_profile(hilly_samples))
        assert dataset["label"] == "Elevation"
        assert dataset["fill"] == "start"
        assert dataset["borderWidth"] == 2
        assert dataset["pointRadius"] == 0
        assert dataset["cubicInterpolationMode"] == "monotone"
        assert len(dataset["data"]) == len(hilly_samples)

    def test_dataset_options(self, hilly_samples):
        dataset = chart_dataset(
            build_profile(hilly_samples), fill_color="red", border_color="blue", border_width=4
        )
        assert dataset["backgroundColor"] == "red"
        assert dataset["borderColor"] == "blue"
        assert dataset["borderWidth"] == 4

    def test_empty_profile_dataset(self):
        assert chart_dataset(ElevationProfile.empty())["data"] == []


class TestProfileSummary:
    def test_keys(self, hilly_samples):
        profile = build_profile(hilly_samples)
        summary = profile_summary(profile)
        assert summary["points"] == 6
        assert summary["total_distance"] == profile.total_distance
        assert summary["elevation_gain"] == profile.elevation_gain
        assert summary["min_elevation"] == profile.min_elevation
        assert summary["max_elevation"] == profile.max_elevation
