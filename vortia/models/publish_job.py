"""Publication job record and the platform enumeration."""

import enum
import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _isoformat(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


class Platform(str, enum.Enum):
    YOUTUBE = "youtube"
    INSTAGRAM = "instagram"
    TIKTOK = "tiktok"
    FACEBOOK = "facebook"
    LINKEDIN = "linkedin"
    TWITTER = "twitter"

    @classmethod
    def parse(cls, value: str | None) -> "Platform | None":
        """Case-insensitive lookup; ``x`` is accepted for Twitter/X."""
        if not isinstance(value, str) or not value:
            return None
        key = value.strip().lower()
        if key == "x":
            return cls.TWITTER
        try:
            return cls(key)
        except ValueError:
            return None


class PublishJobStatus(str, enum.Enum):
    PENDING = "pending"
    SCHEDULED = "scheduled"
    PUBLISHED = "published"
    FAILED = "failed"


@dataclass(frozen=True)
class PublicationContent:
    text: str
    title: str | None = None

    @classmethod
    def from_dict(cls, data: dict | None) -> "PublicationContent | None":
        if not isinstance(data, dict) or not data.get("text"):
            return None
        return cls(text=str(data["text"]), title=data.get("title"))

    def to_dict(self) -> dict:
        data = {"text": self.text}
        if self.title is not None:
            data["title"] = self.title
        return data


@dataclass
class PublicationJob:
    """Lifecycle record for one publish (or scheduled publish) on one platform."""

    id: str
    platform: Platform
    content: PublicationContent
    media_url: str | None = None
    status: PublishJobStatus = PublishJobStatus.PENDING
    scheduled_for: str | None = None
    created_at: datetime = field(default_factory=_utcnow)
    published_at: datetime | None = None
    error: str | None = None

    @classmethod
    def create(
        cls,
        platform: Platform,
        content: PublicationContent,
        media_url: str | None = None,
    ) -> "PublicationJob":
        return cls(
            id=new_publication_id(),
            platform=platform,
            content=content,
            media_url=media_url or None,
        )

    @classmethod
    def create_scheduled(
        cls,
        platform: Platform,
        content: PublicationContent,
        scheduled_for: str,
        media_url: str | None = None,
    ) -> "PublicationJob":
        return cls(
            id=new_publication_id(),
            platform=platform,
            content=content,
            media_url=media_url or None,
            status=PublishJobStatus.SCHEDULED,
            scheduled_for=scheduled_for,
        )

    @property
    def is_terminal(self) -> bool:
        return self.status in (PublishJobStatus.PUBLISHED, PublishJobStatus.FAILED)

    def mark_succeeded(self) -> None:
        self.status = PublishJobStatus.PUBLISHED
        self.published_at = _utcnow()
        self.error = None
        self.scheduled_for = None

    def mark_failed(self, error: str) -> None:
        self.status = PublishJobStatus.FAILED
        self.error = error
        self.published_at = None
        self.scheduled_for = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "platform": self.platform.value,
            "content": self.content.to_dict(),
            "mediaUrl": self.media_url,
            "status": self.status.value,
            "scheduledFor": self.scheduled_for,
            "createdAt": _isoformat(self.created_at),
            "publishedAt": _isoformat(self.published_at),
            "error": self.error,
        }

    def __repr__(self) -> str:
        return (
            f"<PublicationJob(id='{self.id}', platform='{self.platform.value}', "
            f"status='{self.status.value}')>"
        )


def new_publication_id() -> str:
    return f"pub_{uuid.uuid4().hex[:12]}"
