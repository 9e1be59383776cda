import gpxpy
import gpxpy.gpx

from course_profile.models import RawSample


def _collect_samples(gpx: gpxpy.gpx.GPX) -> list[RawSample]:
    samples: list[RawSample] = []
    for track in gpx.tracks:
        for segment in track.segments:
            for pt in segment.points:
                samples.append(
                    RawSample(
                        lat=pt.latitude,
                        lon=pt.longitude,
                        elevation=pt.elevation,
                    )
                )
    return samples


def parse_gpx_string(content: str) -> list[RawSample]:
    """Parse GPX text and return its track points in file order."""
    return _collect_samples(gpxpy.parse(content))


def parse_gpx(filepath: str) -> list[RawSample]:
    """Parse a GPX file and return its track points in file order."""
    with open(filepath, "r") as f:
        gpx = gpxpy.parse(f)
    return _collect_samples(gpx)
