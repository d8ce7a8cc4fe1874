"""Monitor command."""

import signal

import rich_click as click

from ..auth import get_secret
from ..errors import ListCuratorError
from ._console import console
from ._helpers import _normalize_list_id, load_settings, screenshot_dir


@click.command()
@click.argument("list_id_or_url", required=False)
@click.option("--keyword", "-k", "keywords", multiple=True, help="Only notify on posts containing this keyword")
@click.option("--all", "send_all", is_flag=True, help="Notify on every new post")
@click.option("--interval", type=float, default=None, help="Seconds between checks")
@click.option("--max-checks", type=int, default=None, help="Stop after N checks")
def track(
    list_id_or_url: str | None,
    keywords: tuple[str, ...],
    send_all: bool,
    interval: float | None,
    max_checks: int | None,
):
    """Watch one list and push new posts to a Discord webhook.

    The list defaults to MONITOR_LIST_ID and the webhook to DISCORD_WEBHOOK_URL.
    """
    from ..tracker import ListTracker

    settings = load_settings()
    list_id = _normalize_list_id(list_id_or_url) if list_id_or_url else get_secret("MONITOR_LIST_ID")
    if not list_id:
        raise click.UsageError("Pass a list id or set MONITOR_LIST_ID")
    webhook = get_secret("DISCORD_WEBHOOK_URL")
    if not webhook and settings.discord.enabled:
        raise click.ClickException("DISCORD_WEBHOOK_URL not set")

    if keywords:
        settings.tracker.keywords = list(keywords)
    if send_all:
        settings.tracker.send_all = True
    if interval is not None:
        settings.tracker.check_interval_seconds = interval

    tracker = ListTracker(settings, list_id, webhook_url=webhook, screenshot_dir=screenshot_dir())

    def _shutdown(signum, _frame):
        console.print(f"\nReceived {signal.Signals(signum).name}, shutting down...")
        tracker.stop()

    signal.signal(signal.SIGINT, _shutdown)
    signal.signal(signal.SIGTERM, _shutdown)

    try:
        tracker.run(max_checks=max_checks)
    except ListCuratorError as e:
        raise click.ClickException(str(e)) from e
    console.print(f"Stopped after {tracker.checks} checks, {tracker.notified} notification(s) sent")
