"""Tests for the automation publisher: publish now, fan-out, schedule, status."""

import threading
import time
from unittest.mock import MagicMock

import pytest

from vortia.config import Settings
from vortia.core.accounts import ConnectedAccountStore
from vortia.core.dispatcher import (
    DispatchOptions,
    Dispatcher,
    PlatformPublishError,
    PublishMode,
)
from vortia.core.publisher import InvalidRequestError, Publisher
from vortia.core.registry import JobRegistry
from vortia.models.publish_job import Platform, PublicationContent, PublishJobStatus

CONTENT = PublicationContent(text="Automatiza tu contenido con IA")
MEDIA = "https://cdn.example.com/video.mp4"


@pytest.fixture
def settings(tmp_path):
    return Settings(
        openai_api_key="",
        anthropic_api_key="",
        publish_timeout_seconds=2.0,
        logs_dir=str(tmp_path / "logs"),
    )


@pytest.fixture
def registry():
    return JobRegistry(name="publications")


@pytest.fixture
def accounts():
    return ConnectedAccountStore()


@pytest.fixture
def publisher(settings, registry, accounts):
    return Publisher(settings, registry, accounts)


# ---------------------------------------------------------------------------
# publish_now
# ---------------------------------------------------------------------------


class TestPublishNow:
    def test_simulated_publish_records_published_job(self, publisher, registry):
        result, job = publisher.publish_now("youtube", CONTENT, media_url=MEDIA)

        assert result.success is True
        assert result.mode == PublishMode.SIMULATION
        assert job.status == PublishJobStatus.PUBLISHED
        assert job.platform == Platform.YOUTUBE
        assert job.media_url == MEDIA
        assert job.published_at is not None
        assert registry.get(job.id) is job

    def test_live_rejection_records_failed_job(self, settings, registry, accounts):
        live = MagicMock()
        live.publish.side_effect = PlatformPublishError("quota exceeded")
        publisher = Publisher(
            settings, registry, accounts, dispatcher=Dispatcher(accounts, live_publisher=live)
        )

        result, job = publisher.publish_now(
            "tiktok", CONTENT, options=DispatchOptions(credential="tt")
        )

        assert result.success is False
        assert result.mode == PublishMode.LIVE
        assert job.status == PublishJobStatus.FAILED
        assert "quota exceeded" in job.error
        assert job.published_at is None

    def test_unsupported_platform_raises_and_records_nothing(self, publisher, registry):
        with pytest.raises(InvalidRequestError, match="Unsupported platform: myspace"):
            publisher.publish_now("myspace", CONTENT)
        assert registry.total() == 0

    def test_missing_content_rejected(self, publisher, registry):
        with pytest.raises(InvalidRequestError, match="content.text"):
            publisher.publish_now("youtube", None)
        assert registry.total() == 0

    def test_missing_platform_rejected(self, publisher):
        with pytest.raises(InvalidRequestError, match="platform is required"):
            publisher.publish_now(None, CONTENT)

    def test_non_string_platform_rejected(self, publisher, registry):
        with pytest.raises(InvalidRequestError, match="Unsupported platform: 5"):
            publisher.publish_now(5, CONTENT)
        assert registry.total() == 0

    def test_x_alias_records_twitter(self, publisher):
        _, job = publisher.publish_now("x", CONTENT)
        assert job.platform == Platform.TWITTER


# ---------------------------------------------------------------------------
# publish_multi
# ---------------------------------------------------------------------------


class TestPublishMulti:
    def test_mixed_platforms(self, publisher, registry):
        report = publisher.publish_multi(["youtube", "myspace", "tiktok"], CONTENT, MEDIA)

        assert set(report.outcomes) == {"youtube", "myspace", "tiktok"}
        assert report.outcomes["youtube"].result.success is True
        assert report.outcomes["tiktok"].result.success is True
        bad = report.outcomes["myspace"]
        assert bad.result.success is False
        assert bad.result.mode == PublishMode.ERROR
        assert bad.job is None
        assert bad.to_dict()["publicationId"] is None

        assert registry.total() == 2
        assert [j.platform for j in report.publications] == [Platform.YOUTUBE, Platform.TIKTOK]

    def test_defaults_to_every_platform(self, publisher, registry):
        report = publisher.publish_multi(None, CONTENT)

        assert report.platforms == [p.value for p in Platform]
        assert all(o.result.success for o in report.outcomes.values())
        assert registry.total() == len(Platform)

    def test_duplicates_collapsed(self, publisher, registry):
        report = publisher.publish_multi(["youtube", "youtube"], CONTENT)
        assert report.platforms == ["youtube"]
        assert registry.total() == 1

    @pytest.mark.parametrize(
        "platforms, expected",
        [
            (["YouTube", "youtube"], ["YouTube"]),
            (["x", "twitter", "X"], ["x"]),
            (["myspace", "MySpace"], ["myspace", "MySpace"]),
        ],
    )
    def test_aliases_collapsed_first_spelling_wins(self, publisher, platforms, expected):
        report = publisher.publish_multi(platforms, CONTENT)
        assert report.platforms == expected
        assert len(report.publications) == sum(
            1 for name in expected if Platform.parse(name) is not None
        )

    @pytest.mark.parametrize("platforms", ["youtube", {"youtube": True}, ["youtube", 5]])
    def test_platforms_must_be_list_of_strings(self, publisher, registry, platforms):
        with pytest.raises(InvalidRequestError, match="platforms must be a list of strings"):
            publisher.publish_multi(platforms, CONTENT)
        assert registry.total() == 0

    def test_one_failure_does_not_affect_others(self, settings, registry, accounts):
        live = MagicMock()

        def publish(platform, *args, **kwargs):
            if platform is Platform.FACEBOOK:
                raise PlatformPublishError("page not found")
            return f"ok {platform.value}"

        live.publish.side_effect = publish
        publisher = Publisher(
            settings, registry, accounts, dispatcher=Dispatcher(accounts, live_publisher=live)
        )

        report = publisher.publish_multi(
            ["facebook", "linkedin"], CONTENT, options=DispatchOptions(credential="tok")
        )

        assert report.outcomes["facebook"].job.status == PublishJobStatus.FAILED
        assert report.outcomes["linkedin"].job.status == PublishJobStatus.PUBLISHED

    def test_unexpected_exception_isolated(self, settings, registry, accounts):
        live = MagicMock()
        live.publish.side_effect = RuntimeError("connection reset")
        publisher = Publisher(
            settings, registry, accounts, dispatcher=Dispatcher(accounts, live_publisher=live)
        )
        accounts.connect(Platform.YOUTUBE, credential="yt")

        report = publisher.publish_multi(["youtube", "instagram"], CONTENT)

        yt = report.outcomes["youtube"]
        assert yt.result.success is False
        assert yt.result.mode == PublishMode.ERROR
        assert "connection reset" in yt.result.message
        assert yt.job.status == PublishJobStatus.FAILED
        assert yt.job.error == "connection reset"
        assert report.outcomes["instagram"].result.success is True

    def test_slow_platform_times_out_without_blocking(self, settings, registry, accounts):
        settings.publish_timeout_seconds = 0.2
        release = threading.Event()
        live = MagicMock()

        def publish(platform, *args, **kwargs):
            if platform is Platform.YOUTUBE:
                release.wait(5)
            return "ok"

        live.publish.side_effect = publish
        publisher = Publisher(
            settings, registry, accounts, dispatcher=Dispatcher(accounts, live_publisher=live)
        )

        started = time.monotonic()
        try:
            report = publisher.publish_multi(
                ["youtube", "linkedin"], CONTENT, options=DispatchOptions(credential="tok")
            )
        finally:
            release.set()

        assert time.monotonic() - started < 3
        assert report.outcomes["youtube"].result.mode == PublishMode.ERROR
        assert "Timed out" in report.outcomes["youtube"].result.message
        assert report.outcomes["linkedin"].result.success is True

    def test_requires_content(self, publisher):
        with pytest.raises(InvalidRequestError):
            publisher.publish_multi(["youtube"], PublicationContent(text=""))


# ---------------------------------------------------------------------------
# schedule
# ---------------------------------------------------------------------------


class TestSchedule:
    def test_records_scheduled_jobs_without_dispatch(self, settings, registry, accounts):
        dispatcher = MagicMock()
        publisher = Publisher(settings, registry, accounts, dispatcher=dispatcher)

        jobs = publisher.schedule(["instagram", "x"], CONTENT, "2030-05-01T09:00:00Z", MEDIA)

        assert [j.platform for j in jobs] == [Platform.INSTAGRAM, Platform.TWITTER]
        assert all(j.status == PublishJobStatus.SCHEDULED for j in jobs)
        assert all(j.scheduled_for == "2030-05-01T09:00:00Z" for j in jobs)
        assert registry.total() == 2
        dispatcher.dispatch.assert_not_called()

    def test_requires_schedule_time(self, publisher, registry):
        with pytest.raises(InvalidRequestError, match="schedule_time"):
            publisher.schedule(["youtube"], CONTENT, None)
        assert registry.total() == 0

    def test_unsupported_platform_records_nothing(self, publisher, registry):
        with pytest.raises(InvalidRequestError, match="Unsupported platform"):
            publisher.schedule(["youtube", "myspace"], CONTENT, "2030-05-01T09:00:00Z")
        assert registry.total() == 0

    def test_requires_platforms(self, publisher):
        with pytest.raises(InvalidRequestError):
            publisher.schedule([], CONTENT, "2030-05-01T09:00:00Z")

    def test_platforms_string_rejected(self, publisher, registry):
        with pytest.raises(InvalidRequestError, match="platforms must be a list of strings"):
            publisher.schedule("youtube", CONTENT, "2030-05-01T09:00:00Z")
        assert registry.total() == 0

    def test_aliases_scheduled_once(self, publisher, registry):
        jobs = publisher.schedule(["x", "twitter"], CONTENT, "2030-05-01T09:00:00Z")
        assert [j.platform for j in jobs] == [Platform.TWITTER]
        assert registry.total() == 1


# ---------------------------------------------------------------------------
# connect / status / list
# ---------------------------------------------------------------------------


class TestStatusAndList:
    def test_status_reports_modes(self, publisher):
        publisher.connect("youtube", credential="yt-token")
        publisher.connect("tiktok")

        snapshot = publisher.status()

        assert snapshot["platforms"]["youtube"] == {"status": "live", "needsOAuth": False}
        assert snapshot["platforms"]["tiktok"] == {"status": "simulation", "needsOAuth": True}
        assert set(snapshot["platforms"]) == {p.value for p in Platform}
        assert len(snapshot["connectedAccounts"]) == 2

    def test_status_recent_publications_window(self, publisher, settings):
        for _ in range(settings.recent_publications_limit + 3):
            publisher.publish_now("linkedin", CONTENT)
        assert len(publisher.status()["recentPublications"]) == settings.recent_publications_limit

    def test_connect_unsupported_platform(self, publisher):
        with pytest.raises(InvalidRequestError):
            publisher.connect("myspace")

    def test_list_publications_window_and_total(self, settings, registry, accounts):
        settings.publications_list_limit = 3
        publisher = Publisher(settings, registry, accounts)
        for _ in range(5):
            publisher.publish_now("facebook", CONTENT)

        jobs, total = publisher.list_publications()

        assert len(jobs) == 3
        assert total == 5

    def test_oauth_urls_cover_every_platform(self):
        assert set(Publisher.oauth_urls()) == {p.value for p in Platform}
