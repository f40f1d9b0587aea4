"""Faceless video jobs: voice-over on a full-frame background, no visible avatar.

Every job gets a background (video or image); there is no color fallback.
Jobs are recorded only after the provider accepted the render.
"""

import logging

from vortia.config import Settings
from vortia.core.registry import InvalidTransitionError, JobRegistry
from vortia.models.video_job import VideoJob, VideoJobStatus, new_video_id
from vortia.services.heygen_service import (
    VideoGenerationService,
    VideoRequest,
    VideoStatusResponse,
    resolve_background,
)

logger = logging.getLogger(__name__)

INTERNAL_ID_PREFIX = "vid_"


class VideoNotFoundError(LookupError):
    """Internal video id is not in the registry."""


class FacelessVideoService:
    def __init__(
        self,
        settings: Settings,
        registry: JobRegistry[VideoJob],
        video_service: VideoGenerationService,
    ):
        self.settings = settings
        self.registry = registry
        self.video_service = video_service

    def create(
        self,
        script: str | None,
        voice_id: str | None = None,
        style: str | None = None,
        background_url: str | None = None,
        background_type: str | None = None,
    ) -> tuple[VideoJob, str]:
        """Submit a faceless render and record it as ``processing``.

        Returns:
            The recorded job and the provider's video id.

        Raises:
            ValueError: Missing script.
            ConfigurationError / UpstreamError: Provider unavailable; nothing
                is recorded.
        """
        if not isinstance(script, str) or not script.strip():
            raise ValueError("script is required")

        background = resolve_background(
            background_url, background_type, self.settings.default_background_url
        )
        voice = voice_id or self.settings.heygen_voice_id
        request = VideoRequest(
            script=script,
            avatar_id=self.settings.heygen_avatar_id,
            voice_id=voice,
            background=background,
            faceless=True,
            width=self.settings.video_width,
            height=self.settings.video_height,
            aspect_ratio=self.settings.video_aspect_ratio,
        )
        created = self.video_service.create_video(request)

        job = VideoJob(
            id=new_video_id(),
            script=script,
            voice_id=voice,
            style=style or self.settings.default_faceless_style,
            background_url=background.url,
            background_type=background.type,
            provider_video_id=created.video_id,
            status=VideoJobStatus.PROCESSING,
        )
        self.registry.append(job)
        logger.info(
            "Faceless video %s submitted (provider id %s, %s background)",
            job.id,
            created.video_id,
            background.type,
        )
        return job, created.video_id

    def status(self, video_id: str | None) -> VideoJob | VideoStatusResponse:
        """Status for an internal ``vid_`` id (refreshed) or a provider id."""
        if not isinstance(video_id, str) or not video_id:
            raise ValueError("video_id is required")

        if not video_id.startswith(INTERNAL_ID_PREFIX):
            return self.video_service.get_status(video_id)

        job = self.registry.get(video_id)
        if job is None:
            raise VideoNotFoundError(video_id)
        if job.is_terminal or not job.provider_video_id:
            return job
        return self._refresh(job)

    def list(self) -> tuple[list[VideoJob], int]:
        return self.registry.list(self.settings.videos_list_limit), self.registry.total()

    def _refresh(self, job: VideoJob) -> VideoJob:
        remote = self.video_service.get_status(job.provider_video_id)
        try:
            if remote.status == "completed":
                return self.registry.complete(
                    job.id, media_url=remote.video_url, thumbnail_url=remote.thumbnail_url
                )
            if remote.status == "failed":
                return self.registry.fail(job.id, f"Render failed at provider ({remote.raw_status})")
        except InvalidTransitionError:
            # Another request applied the transition first
            return self.registry.get(job.id)
        return job
