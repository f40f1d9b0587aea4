"""VideoJob record for faceless video generation requests."""

import enum
import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime


def _utcnow() -> datetime:
    return datetime.now(UTC)


class VideoJobStatus(str, enum.Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class VideoJob:
    """Track one video render submitted to the avatar-video provider."""

    id: str
    script: str
    voice_id: str
    style: str
    background_url: str
    background_type: str = "video"
    provider_video_id: str | None = None
    status: VideoJobStatus = VideoJobStatus.PROCESSING
    media_url: str | None = None
    thumbnail_url: str | None = None
    created_at: datetime = field(default_factory=_utcnow)
    completed_at: datetime | None = None
    error: str | None = None

    @property
    def is_terminal(self) -> bool:
        return self.status in (VideoJobStatus.COMPLETED, VideoJobStatus.FAILED)

    def mark_succeeded(
        self, media_url: str | None = None, thumbnail_url: str | None = None
    ) -> None:
        self.status = VideoJobStatus.COMPLETED
        self.media_url = media_url
        self.thumbnail_url = thumbnail_url
        self.completed_at = _utcnow()

    def mark_failed(self, error: str) -> None:
        self.status = VideoJobStatus.FAILED
        self.error = error
        self.completed_at = _utcnow()

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "status": self.status.value,
            "script": self.script,
            "voiceId": self.voice_id,
            "style": self.style,
            "backgroundUrl": self.background_url,
            "backgroundType": self.background_type,
            "providerVideoId": self.provider_video_id,
            "mediaUrl": self.media_url,
            "thumbnailUrl": self.thumbnail_url,
            "createdAt": self.created_at.isoformat(),
            "completedAt": self.completed_at.isoformat() if self.completed_at else None,
            "error": self.error,
        }


def new_video_id() -> str:
    return f"vid_{uuid.uuid4().hex[:12]}"
