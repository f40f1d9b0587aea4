"""Automation actions: publish now, fan-out, schedule, connect, status, list."""

import logging
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from dataclasses import dataclass, field

from vortia.config import Settings
from vortia.core.accounts import OAUTH_CONSOLE_URLS, ConnectedAccountStore
from vortia.core.dispatcher import (
    DispatchOptions,
    Dispatcher,
    PublishMode,
    PublishResult,
)
from vortia.core.registry import JobRegistry
from vortia.models.account import ConnectedAccount
from vortia.models.publish_job import Platform, PublicationContent, PublicationJob

logger = logging.getLogger(__name__)


class InvalidRequestError(ValueError):
    """Caller-correctable input problem. Nothing was recorded."""


# ---------------------------------------------------------------------------
# Data contracts
# ---------------------------------------------------------------------------


@dataclass
class PlatformOutcome:
    """One entry of a fan-out: the dispatch result and its job, if any."""

    result: PublishResult
    job: PublicationJob | None = None

    def to_dict(self) -> dict:
        return {
            "success": self.result.success,
            "mode": self.result.mode.value,
            "message": self.result.message,
            "publicationId": self.job.id if self.job else None,
        }


@dataclass
class MultiPublishReport:
    platforms: list[str]
    outcomes: dict[str, PlatformOutcome] = field(default_factory=dict)

    @property
    def publications(self) -> list[PublicationJob]:
        # Preserve the caller's platform order
        jobs = []
        for name in self.platforms:
            outcome = self.outcomes.get(name)
            if outcome and outcome.job:
                jobs.append(outcome.job)
        return jobs


def _require_content(content: PublicationContent | None) -> PublicationContent:
    if content is None or not content.text:
        raise InvalidRequestError("content.text is required")
    return content


def _require_platform_names(platforms) -> list[str]:
    if not isinstance(platforms, list) or not all(isinstance(p, str) for p in platforms):
        raise InvalidRequestError("platforms must be a list of strings")
    return platforms


def _unique_platform_names(names: list[str]) -> list[str]:
    """Drop names that resolve to an already listed platform; the first spelling wins."""
    seen = {}
    for name in names:
        seen.setdefault(Platform.parse(name) or name, name)
    return list(seen.values())


def _require_platform(platform: str | None) -> Platform:
    if not platform:
        raise InvalidRequestError("platform is required")
    target = Platform.parse(platform)
    if target is None:
        raise InvalidRequestError(f"Unsupported platform: {platform}")
    return target


# ---------------------------------------------------------------------------
# Publisher
# ---------------------------------------------------------------------------


class Publisher:
    """Composes the dispatcher, the publication registry and the account store."""

    def __init__(
        self,
        settings: Settings,
        registry: JobRegistry[PublicationJob],
        accounts: ConnectedAccountStore,
        dispatcher: Dispatcher | None = None,
    ):
        self.settings = settings
        self.registry = registry
        self.accounts = accounts
        self.dispatcher = dispatcher or Dispatcher(accounts)

    def publish_now(
        self,
        platform: str | None,
        content: PublicationContent | None,
        media_url: str | None = None,
        options: DispatchOptions | None = None,
    ) -> tuple[PublishResult, PublicationJob]:
        """Dispatch to one platform and record the outcome."""
        target = _require_platform(platform)
        content = _require_content(content)
        outcome = self._publish_one(platform, content, media_url, options)
        logger.info(
            "publish_now %s -> %s (%s)",
            target.value,
            outcome.job.status.value,
            outcome.result.mode.value,
        )
        return outcome.result, outcome.job

    def publish_multi(
        self,
        platforms: list[str] | None,
        content: PublicationContent | None,
        media_url: str | None = None,
        options: DispatchOptions | None = None,
    ) -> MultiPublishReport:
        """Dispatch independently to every platform; outcomes keyed by platform.

        Unsupported, failing or timed-out platforms get their own error entry
        and do not affect the others.
        """
        content = _require_content(content)
        if platforms is None or platforms == []:
            targets = [p.value for p in Platform]
        else:
            targets = _unique_platform_names(_require_platform_names(platforms))
        report = MultiPublishReport(platforms=targets)

        workers = max(1, min(self.settings.publish_max_workers, len(targets)))
        pool = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="vortia-publish")
        try:
            futures = {
                name: pool.submit(self._publish_one, name, content, media_url, options)
                for name in targets
            }
            for name, future in futures.items():
                try:
                    report.outcomes[name] = future.result(
                        timeout=self.settings.publish_timeout_seconds
                    )
                except FutureTimeoutError:
                    logger.warning("publish_multi: %s timed out", name)
                    report.outcomes[name] = PlatformOutcome(
                        result=PublishResult(
                            success=False,
                            mode=PublishMode.ERROR,
                            message=f"Timed out after {self.settings.publish_timeout_seconds}s",
                            platform=name,
                        )
                    )
                except Exception as exc:
                    logger.exception("publish_multi: %s raised", name)
                    report.outcomes[name] = PlatformOutcome(
                        result=PublishResult(
                            success=False,
                            mode=PublishMode.ERROR,
                            message=str(exc),
                            platform=name,
                        )
                    )
        finally:
            # Do not wait on timed-out platforms
            pool.shutdown(wait=False, cancel_futures=True)

        succeeded = sum(1 for o in report.outcomes.values() if o.result.success)
        logger.info("publish_multi: %d/%d platforms succeeded", succeeded, len(report.outcomes))
        return report

    def schedule(
        self,
        platforms: list[str] | None,
        content: PublicationContent | None,
        schedule_time: str | None,
        media_url: str | None = None,
    ) -> list[PublicationJob]:
        """Record one ``scheduled`` job per platform. Nothing is dispatched."""
        if not schedule_time:
            raise InvalidRequestError("options.schedule_time is required")
        if not platforms:
            raise InvalidRequestError("platform or platforms is required")
        names = _unique_platform_names(_require_platform_names(platforms))
        content = _require_content(content)
        # Validate everything first so a bad entry records nothing
        targets = [_require_platform(name) for name in names]

        jobs = []
        for target in targets:
            job = PublicationJob.create_scheduled(target, content, schedule_time, media_url)
            self.registry.append(job)
            jobs.append(job)
        logger.info(
            "Scheduled %d publication(s) for %s: %s",
            len(jobs),
            schedule_time,
            ", ".join(t.value for t in targets),
        )
        return jobs

    def connect(self, platform: str | None, credential: str | None = None) -> ConnectedAccount:
        target = _require_platform(platform)
        return self.accounts.connect(target, credential=credential)

    def status(self) -> dict:
        """Per-platform mode, connected accounts and the recent publications."""
        platforms = {}
        for platform in Platform:
            live = bool(self.accounts.credential_for(platform))
            platforms[platform.value] = {
                "status": PublishMode.LIVE.value if live else PublishMode.SIMULATION.value,
                "needsOAuth": not live,
            }
        return {
            "platforms": platforms,
            "connectedAccounts": [a.to_dict() for a in self.accounts.list()],
            "recentPublications": [
                j.to_dict() for j in self.registry.list(self.settings.recent_publications_limit)
            ],
        }

    def list_publications(self) -> tuple[list[PublicationJob], int]:
        return self.registry.list(self.settings.publications_list_limit), self.registry.total()

    @staticmethod
    def oauth_urls() -> dict[str, str]:
        return {p.value: url for p, url in OAUTH_CONSOLE_URLS.items()}

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _publish_one(
        self,
        platform: str,
        content: PublicationContent,
        media_url: str | None,
        options: DispatchOptions | None,
    ) -> PlatformOutcome:
        target = Platform.parse(platform)
        if target is None:
            # Reported by the dispatcher as an error result; nothing is recorded
            return PlatformOutcome(
                result=self.dispatcher.dispatch(platform, content, media_url or "", options)
            )

        job = PublicationJob.create(target, content, media_url)
        self.registry.append(job)
        try:
            result = self.dispatcher.dispatch(platform, content, media_url or "", options)
        except Exception as exc:
            logger.exception("Dispatch to %s raised", target.value)
            result = PublishResult(
                success=False,
                mode=PublishMode.ERROR,
                message=str(exc),
                platform=target.value,
            )

        if result.success:
            job = self.registry.complete(job.id)
        else:
            job = self.registry.fail(job.id, result.message)
        return PlatformOutcome(result=result, job=job)
