"""Flask service for the course landing page."""

import io
import logging
import math
import re

from flask import Flask, g, jsonify, request, send_file

from course_profile import course
from course_profile.charts import render_profile_png
from course_profile.config import build_geometry, load_config
from course_profile.loader import ProfileLoader
from course_profile.profile import profile_summary
from course_profile.service import DEFAULT_DISTANCE_TOLERANCE, CourseProfileService

logger = logging.getLogger(__name__)

MOBILE_USER_AGENT_PATTERN = re.compile(
    r"Android|webOS|iPhone|iPad|iPod|BlackBerry|IEMobile|Opera Mini", re.IGNORECASE
)
MOBILE_PLATFORM_PATTERN = re.compile(r"Android|iOS", re.IGNORECASE)


def is_mobile_request(user_agent: str, platform: str = "") -> bool:
    """Detect a mobile client from the User-Agent and sec-ch-ua-platform headers."""
    return bool(MOBILE_USER_AGENT_PATTERN.search(user_agent) or MOBILE_PLATFORM_PATTERN.search(platform))


def _parse_float(name: str, default: float | None = None) -> float | None:
    """Read a finite float query parameter.

    Raises:
        ValueError: If the value is not a number, or is nan/inf.
    """
    raw = request.args.get(name)
    if raw is None or raw == "":
        return default
    value = float(raw)
    if not math.isfinite(value):
        raise ValueError(f"{name} must be finite, got {raw}")
    return value


def create_app(service: CourseProfileService) -> Flask:
    """Create the Flask app serving one course profile service."""
    app = Flask(__name__)
    app.extensions["course_profile"] = service

    def loading_response():
        return jsonify({"status": service.status.value}), 202

    @app.before_request
    def detect_device():
        user_agent = request.headers.get("User-Agent", "")
        platform = request.headers.get("sec-ch-ua-platform", "")
        g.is_mobile = is_mobile_request(user_agent, platform)
        logger.debug("isMobile=%s User-Agent=%s", g.is_mobile, user_agent)

    @app.route("/api/device")
    def device():
        return jsonify({"is_mobile": g.is_mobile})

    @app.route("/api/profile")
    def profile_data():
        """Return summary statistics and the chart dataset."""
        service.ensure_loaded()
        profile = service.profile
        if profile is None:
            return loading_response()
        return jsonify({
            "status": service.status.value,
            "error": service.loader.error,
            "summary": profile_summary(profile),
            "dataset": service.chart_dataset(),
        })

    @app.route("/api/position")
    def position():
        """Return distance, elevation and mile marker under a pixel offset.

        The course offset comes from either `scroll` (pixels) or
        `progress` (page scroll progress 0-1) with `viewport` (pixels).
        """
        try:
            pixel_x = _parse_float("x")
            scroll_x = _parse_float("scroll", 0.0)
            progress = _parse_float("progress")
            viewport_width = _parse_float("viewport", 0.0)
        except ValueError:
            return jsonify({"error": "Invalid number"}), 400
        if pixel_x is None:
            return jsonify({"error": "Missing x"}), 400
        if progress is not None:
            scroll_x = course.scroll_offset(service.geometry, progress, viewport_width)

        service.ensure_loaded()
        if service.profile is None:
            return loading_response()
        return jsonify(service.position_at_pixel(course.page_x(pixel_x, scroll_x)))

    @app.route("/api/elevation")
    def elevation():
        try:
            distance = _parse_float("distance")
        except ValueError:
            return jsonify({"error": "Invalid number"}), 400
        if distance is None:
            return jsonify({"error": "Missing distance"}), 400

        service.ensure_loaded()
        if service.profile is None:
            return loading_response()
        return jsonify({
            "distance": distance,
            "elevation": service.elevation_at_distance(distance),
            "pixel_x": service.distance_to_pixel(distance),
        })

    @app.route("/elevation-profile.png")
    def elevation_profile_image():
        try:
            marker = _parse_float("distance")
        except ValueError:
            return jsonify({"error": "Invalid number"}), 400

        service.ensure_loaded()
        profile = service.profile
        if profile is None:
            return loading_response()
        img_bytes = render_profile_png(profile, service.geometry, marker_distance=marker)
        return send_file(io.BytesIO(img_bytes), mimetype="image/png")

    return app


def build_service(config: dict) -> CourseProfileService:
    loader = ProfileLoader(config["route_source"])
    return CourseProfileService(
        loader,
        build_geometry(config),
        distance_tolerance=float(config.get("distance_tolerance", DEFAULT_DISTANCE_TOLERANCE)),
    )


def main():
    """Run the web server."""
    import os
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    config = load_config()
    service = build_service(config)
    service.ensure_loaded()
    app = create_app(service)
    port = int(os.environ.get("PORT", 5050))
    logger.info("Serving course profile for %s on http://localhost:%d", config["route_source"], port)
    try:
        app.run(host="0.0.0.0", port=port)
    finally:
        service.loader.close()


if __name__ == "__main__":
    main()
