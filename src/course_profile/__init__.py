"""Course profile - GPX elevation profile and course-path position mapping."""

__version__ = "0.1.0"
