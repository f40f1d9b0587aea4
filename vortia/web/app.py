"""Flask application factory for the vortia API."""

import logging
import time
import traceback
from datetime import datetime, timezone
from pathlib import Path

from flask import Flask, g, jsonify, request
from werkzeug.exceptions import HTTPException

from vortia.config import get_settings
from vortia.core.accounts import ConnectedAccountStore
from vortia.core.avatar import AvatarPipeline, build_video_service
from vortia.core.dispatcher import Dispatcher, LivePublisher
from vortia.core.faceless import FacelessVideoService
from vortia.core.publisher import Publisher
from vortia.core.registry import JobRegistry
from vortia.services.heygen_service import VideoGenerationService
from vortia.web.api import api_bp, v1_bp

logger = logging.getLogger(__name__)


def create_app(
    settings=None,
    video_service: VideoGenerationService | None = None,
    live_publisher: LivePublisher | None = None,
) -> Flask:
    """Create and configure the Flask app.

    Stores and registries are built here, once per app, and shared by
    every request through ``app.config``.

    Args:
        settings: Optional Settings override (used in tests).
        video_service: Optional avatar-video provider (defaults to HeyGen).
        live_publisher: Optional real platform integration for live mode.
    """
    app = Flask(__name__)

    if settings is None:
        settings = get_settings()

    app.config["settings"] = settings

    logs_dir = settings.logs_dir
    Path(logs_dir).mkdir(parents=True, exist_ok=True)

    if video_service is None:
        video_service = build_video_service(settings)

    accounts = ConnectedAccountStore()
    publication_registry = JobRegistry(name="publications")
    video_registry = JobRegistry(name="videos")

    app.config["accounts"] = accounts
    app.config["publication_registry"] = publication_registry
    app.config["video_registry"] = video_registry
    app.config["publisher"] = Publisher(
        settings,
        publication_registry,
        accounts,
        dispatcher=Dispatcher(accounts, live_publisher=live_publisher),
    )
    app.config["faceless"] = FacelessVideoService(settings, video_registry, video_service)
    app.config["avatar"] = AvatarPipeline(settings, video_service=video_service)

    if not settings.vortia_api_key:
        logger.warning("VORTIA_API_KEY not configured; /api/v1 requests will be rejected")

    app.register_blueprint(api_bp, url_prefix="/api")
    app.register_blueprint(v1_bp, url_prefix="/api/v1")

    @app.errorhandler(Exception)
    def handle_exception(e):
        """Global exception handler for unhandled errors."""
        if isinstance(e, HTTPException):
            return jsonify({"error": e.description}), e.code

        error_log = Path(logs_dir) / "web_errors.log"
        try:
            ts = datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S")
            with open(error_log, "a", encoding="utf-8") as f:
                f.write(f"\n{'='*80}\n")
                f.write(f"Timestamp: {ts}\n")
                f.write(f"Method: {request.method}\n")
                f.write(f"Path: {request.path}\n")
                f.write(f"Error: {str(e)}\n")
                f.write("Traceback:\n")
                f.write(traceback.format_exc())
                f.write(f"{'='*80}\n")
        except OSError:
            pass

        logger.exception("Unhandled exception in request")

        return jsonify({
            "error": "Internal server error",
            "details": str(e)
        }), 500

    @app.before_request
    def _start_timer():
        g.start_time = time.monotonic()

    @app.after_request
    def _log_request(response):
        duration_ms = (time.monotonic() - getattr(g, "start_time", time.monotonic())) * 1000
        logger.info(
            "%s %s %s %.0fms",
            request.method,
            request.path,
            response.status_code,
            duration_ms,
        )
        try:
            web_log = Path(logs_dir) / "web.log"
            ts = datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S")
            with open(web_log, "a", encoding="utf-8") as f:
                f.write(f"{ts} {request.method} {request.path} {response.status_code} {duration_ms:.0f}ms\n")
        except OSError:
            pass
        return response

    return app
