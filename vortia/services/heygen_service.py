"""HeyGen avatar-video REST service: generation, status, backgrounds."""

import logging
from dataclasses import dataclass
from typing import Protocol

import requests

from vortia.services.errors import ConfigurationError, UpstreamError

logger = logging.getLogger(__name__)

VIDEO_EXTENSIONS = (".mp4", ".webm", ".mov", ".avi", ".mkv")
IMAGE_EXTENSIONS = (".jpg", ".jpeg", ".png", ".webp", ".gif")

# Shrunk and moved off-frame so only the background and voice remain
FACELESS_AVATAR_SCALE = 0.001
FACELESS_AVATAR_OFFSET = {"x": -1000, "y": -1000}

TERMINAL_STATUSES = ("completed", "failed")


# ---------------------------------------------------------------------------
# Data contracts
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Background:
    type: str  # "video" or "image"
    url: str

    def to_dict(self) -> dict:
        return {"type": self.type, "url": self.url}


@dataclass
class VideoRequest:
    """Request for one avatar video render."""

    script: str
    avatar_id: str
    voice_id: str
    background: Background
    faceless: bool = False
    width: int = 1080
    height: int = 1920
    aspect_ratio: str = "9:16"


@dataclass
class VideoCreateResponse:
    video_id: str
    background: Background
    status: str = "processing"

    def to_dict(self) -> dict:
        return {"video_id": self.video_id, "status": self.status}


@dataclass
class VideoStatusResponse:
    video_id: str
    status: str  # pending | processing | completed | failed
    raw_status: str | None = None
    video_url: str | None = None
    thumbnail_url: str | None = None
    duration: float | None = None
    created_at: int | str | None = None

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    @property
    def ready_to_publish(self) -> bool:
        return self.status == "completed" and bool(self.video_url)

    def to_dict(self) -> dict:
        return {
            "video_id": self.video_id,
            "status": self.status,
            "video_url": self.video_url,
            "thumbnail_url": self.thumbnail_url,
            "duration": self.duration,
            "created_at": self.created_at,
        }


class VideoGenerationService(Protocol):
    """Protocol for avatar-video providers."""

    def create_video(self, request: VideoRequest) -> VideoCreateResponse: ...

    def get_status(self, video_id: str) -> VideoStatusResponse: ...


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def detect_background_type(url: str) -> str | None:
    """Infer ``video`` / ``image`` from the URL's file extension, if any."""
    path = url.lower().split("?", 1)[0].split("#", 1)[0]
    if path.endswith(VIDEO_EXTENSIONS):
        return "video"
    if path.endswith(IMAGE_EXTENSIONS):
        return "image"
    return None


def resolve_background(
    url: str | None,
    background_type: str | None,
    default_url: str,
) -> Background:
    """Explicit type wins, then the URL extension, then ``video``.

    A background is always produced; a missing URL falls back to
    ``default_url``. Color backgrounds are never used.
    """
    if url is not None and not isinstance(url, str):
        raise ValueError("background_url must be a string")
    bg_url = url or default_url
    bg_type = background_type.lower() if isinstance(background_type, str) else ""
    if bg_type not in ("video", "image"):
        bg_type = detect_background_type(bg_url) or "video"
    return Background(type=bg_type, url=bg_url)


def normalize_status(raw_status: str | None) -> str:
    if raw_status in ("completed", "failed", "pending"):
        return raw_status
    return "processing"


def build_video_payload(request: VideoRequest) -> dict:
    """Build the ``/v2/video/generate`` request body."""
    character = {
        "type": "avatar",
        "avatar_id": request.avatar_id,
        "avatar_style": "normal",
    }
    if request.faceless:
        character["scale"] = FACELESS_AVATAR_SCALE
        character["offset"] = dict(FACELESS_AVATAR_OFFSET)

    return {
        "video_inputs": [
            {
                "character": character,
                "voice": {
                    "type": "text",
                    "input_text": request.script,
                    "voice_id": request.voice_id,
                },
                "background": request.background.to_dict(),
            }
        ],
        "dimension": {"width": request.width, "height": request.height},
        "aspect_ratio": request.aspect_ratio,
        "test": False,
    }


def _error_message(response: requests.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        return response.reason or f"HTTP {response.status_code}"
    if isinstance(data, dict):
        error = data.get("error")
        if isinstance(error, dict):
            error = error.get("message")
        return data.get("message") or error or response.reason or f"HTTP {response.status_code}"
    return response.reason or f"HTTP {response.status_code}"


def _response_data(response: requests.Response) -> dict:
    """Return the ``data`` object of a successful HeyGen response."""
    try:
        body = response.json()
    except ValueError as exc:
        raise UpstreamError("HeyGen error: invalid response body") from exc
    if not isinstance(body, dict):
        raise UpstreamError("HeyGen error: invalid response body")
    data = body.get("data") or {}
    if not isinstance(data, dict):
        raise UpstreamError("HeyGen error: invalid response body")
    return data


# ---------------------------------------------------------------------------
# HeyGen implementation
# ---------------------------------------------------------------------------


class HeyGenService:
    """HeyGen video service using the REST API."""

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.heygen.com",
        timeout: float = 60.0,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def create_video(self, request: VideoRequest) -> VideoCreateResponse:
        """Submit a render. The video is processed asynchronously by HeyGen.

        Raises:
            ConfigurationError: No API key configured.
            UpstreamError: HeyGen rejected the request or was unreachable.
        """
        payload = build_video_payload(request)
        logger.info(
            "HeyGen generate: avatar=%s voice=%s background=%s (%s) faceless=%s",
            request.avatar_id,
            request.voice_id,
            request.background.type,
            request.background.url,
            request.faceless,
        )
        response = self._request("POST", "/v2/video/generate", json=payload)
        data = _response_data(response)
        video_id = data.get("video_id")
        if not video_id:
            raise UpstreamError("HeyGen error: response did not include a video_id")
        return VideoCreateResponse(video_id=video_id, background=request.background)

    def get_status(self, video_id: str) -> VideoStatusResponse:
        """Fetch render status for a HeyGen video id."""
        response = self._request(
            "GET", "/v1/video_status.get", params={"video_id": video_id}
        )
        data = _response_data(response)
        raw_status = data.get("status")
        return VideoStatusResponse(
            video_id=video_id,
            status=normalize_status(raw_status),
            raw_status=raw_status,
            video_url=data.get("video_url"),
            thumbnail_url=data.get("thumbnail_url"),
            duration=data.get("duration"),
            created_at=data.get("created_at"),
        )

    def _request(self, method: str, path: str, **kwargs) -> requests.Response:
        if not self.api_key:
            raise ConfigurationError("HeyGen API key not configured")

        headers = {"X-Api-Key": self.api_key, "Accept": "application/json"}
        if method == "POST":
            headers["Content-Type"] = "application/json"
        url = f"{self.base_url}{path}"

        try:
            response = requests.request(
                method, url, headers=headers, timeout=self.timeout, **kwargs
            )
        except requests.RequestException as exc:
            raise UpstreamError(f"HeyGen request failed: {exc}") from exc

        if not response.ok:
            message = _error_message(response)
            logger.warning("HeyGen %s %s -> %d: %s", method, path, response.status_code, message)
            raise UpstreamError(f"HeyGen error: {message}", status_code=response.status_code)
        return response
