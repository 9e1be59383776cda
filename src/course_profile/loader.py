"""Route track loading with a one-shot, memoized background load."""

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from enum import Enum
from pathlib import Path
from threading import Lock
from typing import Callable

import gpxpy.gpx
import requests

from course_profile.models import ElevationProfile
from course_profile.parser import parse_gpx_string
from course_profile.profile import build_profile

logger = logging.getLogger(__name__)

LOAD_ERRORS = (OSError, requests.RequestException, gpxpy.gpx.GPXException, ValueError)


class LoadStatus(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    LOADED = "loaded"
    FAILED = "failed"


def is_url(source: str) -> bool:
    return source.startswith(("http://", "https://"))


def fetch_track(source: str, timeout: float | None = None) -> str:
    """Read GPX text from a local path or an http(s) URL.

    Raises:
        FileNotFoundError: If a local source does not exist.
        requests.RequestException: If the download fails.
    """
    if is_url(source):
        response = requests.get(source, timeout=timeout)
        response.raise_for_status()
        return response.text
    return Path(source).read_text()


def fetch_and_build(source: str, fetch: Callable[[str], str] = fetch_track) -> ElevationProfile:
    """Fetch, parse and build a profile, propagating any failure."""
    content = fetch(source)
    return build_profile(parse_gpx_string(content))


def log_load_error(source: str, error: Exception) -> None:
    logger.error("Error loading GPX file %s: %s", source, error)


def load_route_profile(source: str, fetch: Callable[[str], str] = fetch_track) -> ElevationProfile:
    """Load a route profile, returning the empty profile on any load error."""
    try:
        return fetch_and_build(source, fetch)
    except LOAD_ERRORS as e:
        log_load_error(source, e)
        return ElevationProfile.empty()


class ProfileLoader:
    """Owns the route profile for one source.

    The first ensure_loaded() call starts a background load; every caller
    gets the same Future until reload(). A failed load resolves the Future
    with the empty profile and leaves status FAILED.
    """

    def __init__(self, source: str, fetch: Callable[[str], str] | None = None):
        self.source = source
        self._fetch = fetch or fetch_track
        self._lock = Lock()
        self._executor: ThreadPoolExecutor | None = None
        self._future: Future | None = None
        self._generation = 0
        self._status = LoadStatus.IDLE
        self._profile: ElevationProfile | None = None
        self._error: str | None = None

    @property
    def status(self) -> LoadStatus:
        with self._lock:
            return self._status

    @property
    def profile(self) -> ElevationProfile | None:
        """The loaded profile, or None while idle or loading."""
        with self._lock:
            return self._profile

    @property
    def error(self) -> str | None:
        with self._lock:
            return self._error

    def ensure_loaded(self) -> "Future[ElevationProfile]":
        """Start the load if it has not started and return its Future."""
        with self._lock:
            if self._future is None:
                if self._executor is None:
                    self._executor = ThreadPoolExecutor(
                        max_workers=1, thread_name_prefix="course-profile-loader"
                    )
                self._status = LoadStatus.LOADING
                self._error = None
                logger.debug("Loading route profile from %s", self.source)
                self._future = self._executor.submit(self._load, self._generation)
            return self._future

    def reload(self) -> "Future[ElevationProfile]":
        """Discard the cached profile and start a fresh load."""
        with self._lock:
            self._generation += 1
            self._future = None
            self._profile = None
            self._error = None
            self._status = LoadStatus.IDLE
        return self.ensure_loaded()

    def close(self) -> None:
        with self._lock:
            executor = self._executor
            self._executor = None
        if executor is not None:
            executor.shutdown(wait=True)

    def _load(self, generation: int) -> ElevationProfile:
        try:
            profile = fetch_and_build(self.source, self._fetch)
        except LOAD_ERRORS as e:
            log_load_error(self.source, e)
            profile = ElevationProfile.empty()
            status = LoadStatus.FAILED
            error = str(e) or e.__class__.__name__
        else:
            status = LoadStatus.LOADED
            error = None
            logger.info(
                "Loaded route profile: %d points, %.2f mi", len(profile.points), profile.total_distance
            )

        with self._lock:
            # A reload() while this load was in flight supersedes it
            if generation == self._generation:
                self._profile = profile
                self._status = status
                self._error = error
        return profile
