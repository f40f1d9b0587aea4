"""API blueprints: health check and the /api/v1 handlers."""

import hmac
import logging
from datetime import UTC, datetime

from flask import Blueprint, current_app, jsonify, request

from vortia import __version__
from vortia.core.dispatcher import DispatchOptions
from vortia.core.faceless import VideoNotFoundError
from vortia.core.generator import DEFAULT_AUDIENCE, DEFAULT_REGION, generate_content
from vortia.models.publish_job import Platform, PublicationContent
from vortia.services.errors import ConfigurationError, UpstreamError

logger = logging.getLogger(__name__)

api_bp = Blueprint("api", __name__)
v1_bp = Blueprint("v1", __name__)

SUPPORTED_PLATFORMS = [p.value for p in Platform]
AUTOMATION_ACTIONS = ("publish_now", "publish_multi", "schedule", "connect", "status", "list")


# ---------------------------------------------------------------------------
# Health check
# ---------------------------------------------------------------------------


@api_bp.route("/health")
def health():
    """Health check for monitoring and proxy verification."""
    return jsonify(
        {
            "status": "ok",
            "time": datetime.now(UTC).isoformat(),
            "version": __version__,
        }
    )


def _get_settings():
    return current_app.config["settings"]


def _get_publisher():
    return current_app.config["publisher"]


def _get_faceless():
    return current_app.config["faceless"]


def _get_avatar():
    return current_app.config["avatar"]


# ---------------------------------------------------------------------------
# API key check + error mapping
# ---------------------------------------------------------------------------


@v1_bp.before_request
def _check_api_key():
    expected = _get_settings().vortia_api_key
    if not expected:
        logger.warning("VORTIA_API_KEY not configured")
        return jsonify({"error": "Unauthorized - Invalid API key"}), 401
    provided = request.headers.get("x-api-key", "")
    if not hmac.compare_digest(provided.encode(), expected.encode()):
        return jsonify({"error": "Unauthorized - Invalid API key"}), 401
    return None


@v1_bp.errorhandler(ValueError)
def _handle_bad_request(e):
    return jsonify({"error": str(e)}), 400


@v1_bp.errorhandler(VideoNotFoundError)
def _handle_video_not_found(e):
    return jsonify({"error": "Video not found"}), 404


@v1_bp.errorhandler(ConfigurationError)
@v1_bp.errorhandler(UpstreamError)
def _handle_upstream_error(e):
    logger.error("%s %s failed: %s", request.method, request.path, e)
    return jsonify({"error": str(e)}), 500


def _body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


# ---------------------------------------------------------------------------
# Automation (publish dispatch + job tracking)
# ---------------------------------------------------------------------------


@v1_bp.route("/automation", methods=["POST"])
def automation():
    body = _body()
    action = body.get("action")
    options = body.get("options") or {}
    if not isinstance(options, dict):
        return jsonify({"error": "options must be an object"}), 400
    content = PublicationContent.from_dict(body.get("content"))
    media_url = options.get("mediaUrl") or options.get("media_url")
    if media_url is not None and not isinstance(media_url, str):
        return jsonify({"error": "options.mediaUrl must be a string"}), 400
    publisher = _get_publisher()

    if action == "publish_now":
        result, job = publisher.publish_now(
            body.get("platform"),
            content,
            media_url=media_url,
            options=DispatchOptions.from_dict(options),
        )
        return jsonify(
            {
                "success": result.success,
                "mode": result.mode.value,
                "message": result.message,
                "publication": job.to_dict(),
            }
        )

    if action == "publish_multi":
        report = publisher.publish_multi(
            body.get("platforms"),
            content,
            media_url=media_url,
            options=DispatchOptions.from_dict(options),
        )
        return jsonify(
            {
                "success": True,
                "action": "publish_multi",
                "totalPlatforms": len(report.platforms),
                "results": {name: o.to_dict() for name, o in report.outcomes.items()},
                "publications": [j.to_dict() for j in report.publications],
            }
        )

    if action == "schedule":
        schedule_time = options.get("schedule_time")
        platforms = body.get("platforms") or ([body["platform"]] if body.get("platform") else [])
        jobs = publisher.schedule(platforms, content, schedule_time, media_url=media_url)
        return jsonify(
            {
                "success": True,
                "action": "schedule",
                "scheduledFor": schedule_time,
                "publications": [j.to_dict() for j in jobs],
                "message": f"Scheduled for {schedule_time}",
            }
        )

    if action == "connect":
        platform = body.get("platform")
        account = publisher.connect(platform, credential=DispatchOptions.from_dict(options).credential)
        return jsonify(
            {
                "success": True,
                "action": "connect",
                "platform": platform,
                "account": account.to_dict(),
                "message": f"To connect {platform} for real, configure OAuth.",
                "oauthUrls": publisher.oauth_urls(),
            }
        )

    if action == "status":
        snapshot = publisher.status()
        return jsonify(
            {
                "success": True,
                "action": "status",
                "mode": "native",
                "note": "No external automation dependency. Configure OAuth for real publishing.",
                **snapshot,
            }
        )

    if action == "list":
        jobs, total = publisher.list_publications()
        return jsonify(
            {
                "success": True,
                "publications": [j.to_dict() for j in jobs],
                "total": total,
            }
        )

    return jsonify(
        {"error": f"Invalid action. Use: {', '.join(AUTOMATION_ACTIONS)}"}
    ), 400


@v1_bp.route("/automation", methods=["GET"])
def automation_docs():
    return jsonify(
        {
            "status": "ok",
            "endpoint": "/api/v1/automation",
            "version": __version__,
            "description": "Multi-platform publishing with simulated mode when no credential is set",
            "actions": {
                "publish_now": {
                    "description": "Publish immediately on one platform",
                    "params": {
                        "platform": " | ".join(SUPPORTED_PLATFORMS),
                        "content": "{ text: string, title?: string }",
                        "options": "{ mediaUrl?: string, pageId?: string, accessToken?: string }",
                    },
                },
                "publish_multi": {
                    "description": "Publish on several platforms",
                    "params": {
                        "platforms": "['youtube', 'instagram', ...] (optional, default: all)",
                        "content": "{ text: string, title?: string }",
                        "options": "{ mediaUrl?: string }",
                    },
                },
                "schedule": {
                    "description": "Schedule a publication (recorded only, never executed)",
                    "params": {
                        "platform": "string or platforms: ['...']",
                        "content": "{ text: string }",
                        "options": "{ schedule_time: 'ISO date string', mediaUrl?: string }",
                    },
                },
                "connect": {
                    "description": "Connect a social account (simulated OAuth)",
                    "params": {"platform": "string", "options": "{ accessToken?: string }"},
                },
                "status": "Connection status and recent publications",
                "list": "List publications",
            },
            "supportedPlatforms": SUPPORTED_PLATFORMS,
        }
    )


# ---------------------------------------------------------------------------
# Content generation
# ---------------------------------------------------------------------------


@v1_bp.route("/generate", methods=["POST"])
def generate():
    body = _body()
    topic = body.get("topic")
    if not topic:
        return jsonify({"error": "Topic is required"}), 400

    content = generate_content(
        topic,
        _get_settings(),
        audience_type=body.get("audience_type"),
        region=body.get("region"),
    )
    return jsonify({"success": True, "data": content.to_dict()})


@v1_bp.route("/generate", methods=["GET"])
def generate_docs():
    return jsonify(
        {
            "status": "ok",
            "endpoint": "/api/v1/generate",
            "method": "POST",
            "params": {
                "topic": "string (required)",
                "audience_type": f"creador | empresa (optional, default: {DEFAULT_AUDIENCE})",
                "region": f"LATAM | España | MIXTO (optional, default: {DEFAULT_REGION})",
            },
        }
    )


# ---------------------------------------------------------------------------
# Avatar video (HeyGen)
# ---------------------------------------------------------------------------


@v1_bp.route("/heygen", methods=["POST"])
def heygen():
    body = _body()
    action = body.get("action")
    avatar = _get_avatar()

    if action == "check_status":
        video_id = body.get("video_id")
        if not video_id:
            return jsonify({"error": "video_id is required"}), 400
        status = avatar.check_status(video_id)
        return jsonify({"success": True, "video": status.to_dict()})

    if action == "full_pipeline" or not action:
        if not body.get("topic"):
            return jsonify({"error": "topic is required"}), 400
        result = avatar.full_pipeline(
            body["topic"],
            audience_type=body.get("audience_type"),
            background_url=body.get("background_url"),
            background_type=body.get("background_type"),
            avatar_id=body.get("avatar_id"),
            voice_id=body.get("voice_id"),
        )
        return jsonify(
            {
                "success": True,
                "topic": result.topic,
                "script": result.script,
                "video": result.video.to_dict(),
                "background": result.background.to_dict(),
                "message": "Video processing. Use action='check_status' with the video_id.",
            }
        )

    if action == "create_video":
        if not body.get("script"):
            return jsonify({"error": "script is required"}), 400
        result = avatar.create_video(
            body["script"],
            background_url=body.get("background_url"),
            background_type=body.get("background_type"),
            avatar_id=body.get("avatar_id"),
            voice_id=body.get("voice_id"),
        )
        return jsonify(
            {
                "success": True,
                "video": result.video.to_dict(),
                "background": result.background.to_dict(),
            }
        )

    return jsonify(
        {"error": "Invalid action. Use: full_pipeline, create_video, or check_status"}
    ), 400


@v1_bp.route("/heygen", methods=["GET"])
def heygen_docs():
    return jsonify(
        {
            "status": "ok",
            "endpoint": "/api/v1/heygen",
            "actions": ["full_pipeline", "create_video", "check_status"],
            "default_background": _get_settings().default_background_url,
        }
    )


# ---------------------------------------------------------------------------
# Video lookup
# ---------------------------------------------------------------------------


def _video_lookup(video_id: str, with_message: bool):
    status = _get_avatar().check_status(video_id)
    data = {
        "success": True,
        "video": status.to_dict(),
        "ready_to_publish": status.ready_to_publish,
    }
    if with_message:
        data["message"] = (
            "Video ready. Use video_url to publish."
            if status.ready_to_publish
            else f"Video status: {status.status}. Wait and check again."
        )
    return jsonify(data)


@v1_bp.route("/get-video", methods=["POST"])
def get_video():
    video_id = _body().get("video_id")
    if not video_id:
        return jsonify({"error": "video_id is required"}), 400
    return _video_lookup(video_id, with_message=True)


@v1_bp.route("/get-video", methods=["GET"])
def get_video_query():
    video_id = request.args.get("video_id")
    if video_id:
        return _video_lookup(video_id, with_message=False)
    return jsonify(
        {
            "status": "ok",
            "endpoint": "/api/v1/get-video",
            "version": __version__,
            "description": "Status and URL of a HeyGen video",
            "usage": {
                "POST": {"body": {"video_id": "string (required) - HeyGen video id"}},
                "GET": {"query": "?video_id=YOUR_VIDEO_ID"},
            },
            "response": {
                "video": {
                    "video_id": "string",
                    "status": "pending | processing | completed | failed",
                    "video_url": "string (when completed)",
                    "thumbnail_url": "string",
                    "duration": "number (seconds)",
                },
                "ready_to_publish": "boolean",
            },
        }
    )


# ---------------------------------------------------------------------------
# Faceless video
# ---------------------------------------------------------------------------


@v1_bp.route("/video-faceless", methods=["POST"])
def video_faceless():
    body = _body()
    action = body.get("action")
    faceless = _get_faceless()

    if action == "create" or not action:
        if not body.get("script"):
            return jsonify({"error": "script is required"}), 400
        try:
            job, provider_video_id = faceless.create(
                body["script"],
                voice_id=body.get("voice_id"),
                style=body.get("style"),
                background_url=body.get("background_url"),
                background_type=body.get("background_type"),
            )
        except (ConfigurationError, UpstreamError) as e:
            logger.warning("Faceless video creation failed: %s", e)
            return jsonify(
                {
                    "success": False,
                    "error": str(e),
                    "note": "Configure HEYGEN_API_KEY to create videos with a background",
                }
            ), 500
        return jsonify(
            {
                "success": True,
                "video_id": job.id,
                "heygen_video_id": provider_video_id,
                "provider": "heygen",
                "status": job.status.value,
                "background": {"url": job.background_url, "type": job.background_type},
                "message": "Faceless video processing. Use action='status' to check it.",
            }
        )

    if action == "status":
        video = faceless.status(body.get("video_id"))
        return jsonify({"success": True, "video": video.to_dict()})

    if action == "list":
        jobs, total = faceless.list()
        return jsonify(
            {"success": True, "videos": [j.to_dict() for j in jobs], "total": total}
        )

    return jsonify({"error": "Invalid action. Use: create, status, list"}), 400


@v1_bp.route("/video-faceless", methods=["GET"])
def video_faceless_docs():
    settings = _get_settings()
    return jsonify(
        {
            "status": "ok",
            "endpoint": "/api/v1/video-faceless",
            "version": __version__,
            "description": "Faceless AI videos, always rendered over a background",
            "default_background": settings.default_background_url,
            "actions": {
                "create": {
                    "description": "Create a faceless video with a background",
                    "params": {
                        "script": "string (required)",
                        "voice_id": f"string (optional, default: {settings.heygen_voice_id})",
                        "style": "string (optional)",
                        "background_url": "string (optional, has a default)",
                        "background_type": "'video' | 'image' (optional, auto-detected)",
                    },
                },
                "status": {
                    "description": "Check video status",
                    "params": {"video_id": "string (required)"},
                },
                "list": "List recent videos",
            },
        }
    )
