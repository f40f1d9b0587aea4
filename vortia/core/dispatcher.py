"""Publish dispatch: route one publish request to its platform handler.

Credential presence decides the mode. Without a credential the publish is
simulated and always reports success; with one it runs in live mode. An
unsupported platform is reported as an ``error`` result, never raised.
The dispatcher does not record anything; callers own the job registry.
"""

import enum
import logging
from dataclasses import dataclass
from typing import Protocol

from vortia.core.accounts import ConnectedAccountStore
from vortia.models.publish_job import Platform, PublicationContent

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Data contracts
# ---------------------------------------------------------------------------


class PublishMode(str, enum.Enum):
    SIMULATION = "simulation"
    LIVE = "live"
    ERROR = "error"


@dataclass
class PublishResult:
    """Uniform outcome envelope for one platform."""

    success: bool
    mode: PublishMode
    message: str
    platform: str

    def to_dict(self) -> dict:
        return {
            "success": self.success,
            "mode": self.mode.value,
            "message": self.message,
            "platform": self.platform,
        }


@dataclass(frozen=True)
class DispatchOptions:
    page_id: str | None = None
    credential: str | None = None

    @classmethod
    def from_dict(cls, data: dict | None) -> "DispatchOptions":
        data = data or {}
        return cls(
            page_id=data.get("pageId") or data.get("page_id"),
            credential=(
                data.get("accessToken")
                or data.get("access_token")
                or data.get("credential")
            ),
        )


@dataclass(frozen=True)
class LiveCapability:
    credential: str


@dataclass(frozen=True)
class SimulatedCapability:
    reason: str


Capability = LiveCapability | SimulatedCapability


@dataclass(frozen=True)
class PlatformProfile:
    label: str
    api_name: str


# One entry per Platform member; tests assert the table is complete.
PLATFORM_PROFILES: dict[Platform, PlatformProfile] = {
    Platform.YOUTUBE: PlatformProfile("YouTube", "YouTube Data API v3 OAuth"),
    Platform.INSTAGRAM: PlatformProfile("Instagram", "Facebook Graph API"),
    Platform.TIKTOK: PlatformProfile("TikTok", "TikTok Content Posting API"),
    Platform.FACEBOOK: PlatformProfile("Facebook", "Facebook Graph API"),
    Platform.LINKEDIN: PlatformProfile("LinkedIn", "LinkedIn API"),
    Platform.TWITTER: PlatformProfile("Twitter/X", "Twitter API v2"),
}


class PlatformPublishError(Exception):
    """Live publish rejected by the platform."""


class LivePublisher(Protocol):
    """Real platform integration, called only when a credential resolves."""

    def publish(
        self,
        platform: Platform,
        content: PublicationContent,
        media_url: str,
        credential: str,
        page_id: str | None = None,
    ) -> str: ...


# ---------------------------------------------------------------------------
# Dispatcher
# ---------------------------------------------------------------------------


class Dispatcher:
    def __init__(
        self,
        accounts: ConnectedAccountStore,
        live_publisher: LivePublisher | None = None,
    ):
        self.accounts = accounts
        self.live_publisher = live_publisher

    def resolve_capability(self, platform: Platform, options: DispatchOptions) -> Capability:
        """Call option first, then the connected account, then nothing."""
        if options.credential:
            return LiveCapability(credential=options.credential)
        stored = self.accounts.credential_for(platform)
        if stored:
            return LiveCapability(credential=stored)
        profile = PLATFORM_PROFILES[platform]
        return SimulatedCapability(reason=f"configure {profile.api_name} to publish for real")

    def dispatch(
        self,
        platform: str,
        content: PublicationContent,
        media_url: str = "",
        options: DispatchOptions | None = None,
    ) -> PublishResult:
        options = options or DispatchOptions()
        target = Platform.parse(platform)
        if target is None:
            logger.warning("Dispatch to unsupported platform: %r", platform)
            return PublishResult(
                success=False,
                mode=PublishMode.ERROR,
                message=f"Unsupported platform: {platform}",
                platform=platform,
            )

        capability = self.resolve_capability(target, options)
        if isinstance(capability, SimulatedCapability):
            return self._simulate(target, capability)
        return self._publish_live(target, content, media_url, options, capability)

    def _simulate(self, platform: Platform, capability: SimulatedCapability) -> PublishResult:
        profile = PLATFORM_PROFILES[platform]
        logger.info("[SIMULATION] %s publish (%s)", profile.label, capability.reason)
        return PublishResult(
            success=True,
            mode=PublishMode.SIMULATION,
            message=f"{profile.label}: simulated publish ({capability.reason})",
            platform=platform.value,
        )

    def _publish_live(
        self,
        platform: Platform,
        content: PublicationContent,
        media_url: str,
        options: DispatchOptions,
        capability: LiveCapability,
    ) -> PublishResult:
        profile = PLATFORM_PROFILES[platform]
        if self.live_publisher is None:
            message = f"Published to {profile.label}"
            if platform is Platform.FACEBOOK and options.page_id:
                message += f" (page {options.page_id})"
            logger.info("[LIVE] %s", message)
            return PublishResult(
                success=True,
                mode=PublishMode.LIVE,
                message=message,
                platform=platform.value,
            )

        try:
            message = self.live_publisher.publish(
                platform,
                content,
                media_url,
                capability.credential,
                page_id=options.page_id,
            )
        except PlatformPublishError as exc:
            logger.warning("%s live publish failed: %s", profile.label, exc)
            return PublishResult(
                success=False,
                mode=PublishMode.LIVE,
                message=f"{profile.label}: {exc}",
                platform=platform.value,
            )
        return PublishResult(
            success=True,
            mode=PublishMode.LIVE,
            message=message or f"Published to {profile.label}",
            platform=platform.value,
        )
