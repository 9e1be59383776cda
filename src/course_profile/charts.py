"""Course elevation strip rendering."""

import io

import matplotlib
matplotlib.use('Agg')  # Non-interactive backend for server
import matplotlib.pyplot as plt
from matplotlib.collections import PolyCollection
import numpy as np

from course_profile.course import CourseGeometry
from course_profile.models import ElevationProfile

FEET_PER_MILE = 5280

# Grade bins (%) and fills, flat to steep
GRADE_BINS = [2, 4, 6, 8, 10]
GRADE_COLORS = ['#cccccc', '#ffb399', '#ff9966', '#ff7f33', '#ff6600', '#e55a00']
DESCENT_COLOR = '#9adaf6'

# Rendered strip height in inches; width follows the course path aspect ratio
FIG_HEIGHT = 2
DPI = 100


def grade_to_color(g: float) -> str:
    """Map a segment grade (percent) to a fill color."""
    if g < -GRADE_BINS[0]:
        return DESCENT_COLOR
    for i, threshold in enumerate(GRADE_BINS):
        if g < threshold:
            return GRADE_COLORS[i]
    return GRADE_COLORS[-1]


def resample_profile(profile: ElevationProfile, max_points: int) -> tuple[np.ndarray, np.ndarray]:
    """Resample a profile onto at most max_points evenly spaced distances.

    Returns (distances_mi, elevations_ft).
    """
    distances = np.array([p.distance for p in profile.points], dtype=float)
    elevations = np.array([p.elevation for p in profile.points], dtype=float)
    if len(distances) <= max_points or profile.total_distance <= 0:
        return distances, elevations

    sample_distances = np.linspace(0.0, profile.total_distance, max_points)
    return sample_distances, np.interp(sample_distances, distances, elevations)


def segment_grades(distances: np.ndarray, elevations: np.ndarray) -> np.ndarray:
    """Grade in percent for each consecutive segment; zero-length segments are flat."""
    run_ft = np.diff(distances) * FEET_PER_MILE
    rise_ft = np.diff(elevations)
    grades = np.zeros_like(run_ft)
    np.divide(rise_ft, run_ft, out=grades, where=run_ft > 0)
    return grades * 100


def _placeholder(ax) -> None:
    ax.text(0.5, 0.5, 'No elevation data', ha='center', va='center',
            fontsize=12, color='#999999', transform=ax.transAxes)
    ax.set_xticks([])
    ax.set_yticks([])


def render_profile_png(
    profile: ElevationProfile,
    geometry: CourseGeometry,
    marker_distance: float | None = None,
) -> bytes:
    """Render the course elevation strip as a PNG.

    Args:
        profile: Route elevation profile (feet over miles)
        geometry: Course path constants; sets the aspect ratio and the
            maximum number of columns drawn
        marker_distance: Optional distance in miles to mark with a vertical line

    Returns PNG image as bytes.
    """
    aspect_ratio = geometry.path_pixel_width / geometry.path_pixel_height
    fig_width = FIG_HEIGHT * aspect_ratio
    fig, ax = plt.subplots(figsize=(fig_width, FIG_HEIGHT), facecolor='white')

    if profile.is_empty:
        _placeholder(ax)
    else:
        distances, elevations = resample_profile(profile, int(geometry.path_pixel_width))
        grades = segment_grades(distances, elevations)
        floor = profile.min_elevation

        polygons = []
        colors = []
        for i in range(len(grades)):
            d0, d1 = distances[i], distances[i + 1]
            e0, e1 = elevations[i], elevations[i + 1]
            polygons.append([(d0, floor), (d1, floor), (d1, e1), (d0, e0)])
            colors.append(grade_to_color(grades[i]))

        coll = PolyCollection(polygons, facecolors=colors, edgecolors='none', linewidths=0)
        ax.add_collection(coll)
        ax.plot(distances, elevations, color='#333333', linewidth=0.5)

        top = profile.max_elevation + max(1.0, (profile.max_elevation - floor) * 0.1)
        if marker_distance is not None:
            marker = min(max(marker_distance, 0.0), profile.total_distance)
            ax.axvline(marker, color='#e91e63', linewidth=1, linestyle='--')

        ax.set_xlim(0, max(profile.total_distance, 1e-9))
        ax.set_ylim(floor, top)
        ax.set_xlabel('Distance (mi)', fontsize=8)
        ax.set_ylabel('Elevation (ft)', fontsize=8)
        ax.grid(axis='y', alpha=0.3, linestyle='-', linewidth=0.5)

    ax.spines['top'].set_visible(False)
    ax.spines['right'].set_visible(False)

    buf = io.BytesIO()
    fig.savefig(buf, format='png', dpi=DPI, facecolor='white', edgecolor='none')
    plt.close(fig)
    buf.seek(0)
    return buf.getvalue()
