from dataclasses import dataclass


@dataclass
class RawSample:
    lat: float
    lon: float
    elevation: float | None  # meters


@dataclass(frozen=True)
class TrackPoint:
    lat: float
    lon: float
    elevation: float  # feet
    distance: float  # miles from route start


@dataclass(frozen=True)
class ChartDataPoint:
    x: float  # distance (miles)
    y: float  # elevation (feet)
    coordinates: tuple[float, float]  # (lon, lat)
    index: int

    def to_dict(self) -> dict:
        return {
            "x": self.x,
            "y": self.y,
            "coordinates": list(self.coordinates),
            "index": self.index,
        }


@dataclass(frozen=True)
class ElevationProfile:
    points: tuple[TrackPoint, ...]
    total_distance: float  # miles
    min_elevation: float  # feet
    max_elevation: float  # feet
    elevation_gain: float  # feet

    @classmethod
    def empty(cls) -> "ElevationProfile":
        """Profile used when there is no elevation data."""
        return cls(
            points=(),
            total_distance=0.0,
            min_elevation=0.0,
            max_elevation=0.0,
            elevation_gain=0.0,
        )

    @property
    def is_empty(self) -> bool:
        return not self.points
