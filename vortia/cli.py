import json
import logging
import sys
from pathlib import Path

import click

from vortia.config import get_settings

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)


@click.group()
@click.pass_context
def cli(ctx: click.Context) -> None:
    """vortia - content generation, avatar video and multi-platform publishing"""
    ctx.ensure_object(dict)

    if ctx.resilient_parsing:
        return

    # Allow tests to inject settings via ctx.obj
    if "settings" not in ctx.obj:
        ctx.obj["settings"] = get_settings()


def _build_publisher(settings):
    from vortia.core.accounts import ConnectedAccountStore
    from vortia.core.publisher import Publisher
    from vortia.core.registry import JobRegistry

    return Publisher(settings, JobRegistry(name="publications"), ConnectedAccountStore())


def _content(text: str, title: str | None):
    from vortia.models.publish_job import PublicationContent

    return PublicationContent(text=text, title=title)


@cli.command()
@click.option("--platform", "-p", required=True, help="Target platform (x is accepted for twitter).")
@click.option("--text", required=True, help="Publication text.")
@click.option("--title", default=None, help="Optional title.")
@click.option("--media-url", default=None, help="Media to attach.")
@click.option("--access-token", default=None, help="Platform credential; enables live mode.")
@click.pass_context
def publish(
    ctx: click.Context,
    platform: str,
    text: str,
    title: str | None,
    media_url: str | None,
    access_token: str | None,
) -> None:
    """Publish one piece of content to a single platform."""
    from vortia.core.dispatcher import DispatchOptions

    publisher = _build_publisher(ctx.obj["settings"])
    try:
        result, job = publisher.publish_now(
            platform,
            _content(text, title),
            media_url=media_url,
            options=DispatchOptions(credential=access_token),
        )
    except ValueError as e:
        raise click.UsageError(str(e)) from e

    label = "OK" if result.success else "FAIL"
    click.echo(f"[{label}] {job.platform.value} ({result.mode.value}): {result.message}")
    click.echo(f"  publication: {job.id} -> {job.status.value}")
    if not result.success:
        sys.exit(1)


@cli.command(name="publish-multi")
@click.option(
    "--platform",
    "-p",
    "platforms",
    multiple=True,
    help="Target platform (repeatable). Defaults to every supported platform.",
)
@click.option("--text", required=True, help="Publication text.")
@click.option("--title", default=None, help="Optional title.")
@click.option("--media-url", default=None, help="Media to attach.")
@click.option("--json", "as_json", is_flag=True, default=False, help="Print the report as JSON.")
@click.pass_context
def publish_multi(
    ctx: click.Context,
    platforms: tuple[str, ...],
    text: str,
    title: str | None,
    media_url: str | None,
    as_json: bool,
) -> None:
    """Publish the same content to several platforms at once."""
    publisher = _build_publisher(ctx.obj["settings"])
    try:
        report = publisher.publish_multi(list(platforms), _content(text, title), media_url=media_url)
    except ValueError as e:
        raise click.UsageError(str(e)) from e

    if as_json:
        payload = {name: outcome.to_dict() for name, outcome in report.outcomes.items()}
        click.echo(json.dumps(payload, indent=2, ensure_ascii=False))
        return

    for name in report.platforms:
        outcome = report.outcomes[name]
        label = "OK" if outcome.result.success else "FAIL"
        click.echo(f"[{label}] {name} ({outcome.result.mode.value}): {outcome.result.message}")
    succeeded = sum(1 for o in report.outcomes.values() if o.result.success)
    click.echo(f"\n{succeeded}/{len(report.platforms)} platforms succeeded")


@cli.command(name="video-status")
@click.argument("video_id")
@click.pass_context
def video_status(ctx: click.Context, video_id: str) -> None:
    """Show the render status of a HeyGen video."""
    from vortia.core.avatar import AvatarPipeline
    from vortia.services.errors import ConfigurationError, UpstreamError

    pipeline = AvatarPipeline(ctx.obj["settings"])
    try:
        status = pipeline.check_status(video_id)
    except (ConfigurationError, UpstreamError) as e:
        click.echo(f"[FAIL] {e}", err=True)
        sys.exit(1)

    click.echo(f"Video:    {status.video_id}")
    click.echo(f"Status:   {status.status}")
    if status.video_url:
        click.echo(f"URL:      {status.video_url}")
    if status.duration is not None:
        click.echo(f"Duration: {status.duration}s")
    click.echo(f"Ready to publish: {'yes' if status.ready_to_publish else 'no'}")


@cli.command()
@click.option("--host", default="127.0.0.1", help="Bind address (use 0.0.0.0 for LAN).")
@click.option("--port", default=5000, type=int, help="Port number.")
@click.option("--production", is_flag=True, default=False, help="Print gunicorn command instead.")
def web(host: str, port: int, production: bool) -> None:
    """Start the API server."""
    if production:
        venv = Path(sys.executable).parent
        # Jobs and accounts live in process memory: a single worker keeps them consistent
        cmd = (
            f'{venv / "gunicorn"} -w 1 --threads 8 -b {host}:{port} --timeout 120 '
            f'"vortia.web.app:create_app()"'
        )
        click.echo("Run this command for production:\n")
        click.echo(f"  {cmd}")
        return

    from vortia.web.app import create_app

    app = create_app()
    click.echo(f"Starting API on http://{host}:{port}")
    app.run(host=host, port=port, debug=False)


if __name__ == "__main__":
    cli()
