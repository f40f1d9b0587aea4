"""Avatar video pipeline: topic -> spoken script -> HeyGen render, plus status lookups."""

import logging
from dataclasses import dataclass

from vortia.config import Settings
from vortia.prompts import avatar_script
from vortia.services.heygen_service import (
    Background,
    HeyGenService,
    VideoCreateResponse,
    VideoGenerationService,
    VideoRequest,
    VideoStatusResponse,
    resolve_background,
)
from vortia.services.llm_service import call_llm

logger = logging.getLogger(__name__)

DEFAULT_AUDIENCE = "empresa"


@dataclass
class AvatarVideoResult:
    video: VideoCreateResponse
    script: str
    topic: str | None = None

    @property
    def background(self) -> Background:
        return self.video.background


def build_video_service(settings: Settings) -> HeyGenService:
    return HeyGenService(
        api_key=settings.heygen_api_key,
        base_url=settings.heygen_api_base,
        timeout=settings.request_timeout_seconds,
    )


def generate_script(topic: str, settings: Settings, audience_type: str | None = None) -> str:
    """Write a spoken-only avatar script for ``topic``."""
    response = call_llm(
        avatar_script.build_system_prompt(audience_type or DEFAULT_AUDIENCE),
        avatar_script.build_user_prompt(topic),
        settings,
        temperature=settings.script_temperature,
    )
    script = response.text.strip()
    logger.info("Avatar script for '%s': %d words", topic[:60], len(script.split()))
    return script


class AvatarPipeline:
    def __init__(self, settings: Settings, video_service: VideoGenerationService | None = None):
        self.settings = settings
        self.video_service = video_service or build_video_service(settings)

    def full_pipeline(
        self,
        topic: str,
        audience_type: str | None = None,
        background_url: str | None = None,
        background_type: str | None = None,
        avatar_id: str | None = None,
        voice_id: str | None = None,
    ) -> AvatarVideoResult:
        """Generate a script for ``topic`` and submit it as an avatar video."""
        if not isinstance(topic, str) or not topic.strip():
            raise ValueError("topic is required")
        script = generate_script(topic, self.settings, audience_type)
        result = self.create_video(
            script,
            background_url=background_url,
            background_type=background_type,
            avatar_id=avatar_id,
            voice_id=voice_id,
        )
        result.topic = topic
        return result

    def create_video(
        self,
        script: str,
        background_url: str | None = None,
        background_type: str | None = None,
        avatar_id: str | None = None,
        voice_id: str | None = None,
    ) -> AvatarVideoResult:
        if not isinstance(script, str) or not script.strip():
            raise ValueError("script is required")
        request = VideoRequest(
            script=script,
            avatar_id=avatar_id or self.settings.heygen_avatar_id,
            voice_id=voice_id or self.settings.heygen_voice_id,
            background=resolve_background(
                background_url, background_type, self.settings.default_background_url
            ),
            width=self.settings.video_width,
            height=self.settings.video_height,
            aspect_ratio=self.settings.video_aspect_ratio,
        )
        video = self.video_service.create_video(request)
        logger.info("Avatar video submitted: %s", video.video_id)
        return AvatarVideoResult(video=video, script=script)

    def check_status(self, video_id: str) -> VideoStatusResponse:
        if not isinstance(video_id, str) or not video_id:
            raise ValueError("video_id is required")
        return self.video_service.get_status(video_id)
