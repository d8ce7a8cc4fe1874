"""Pipeline commands: one-off run and the randomized schedule."""

import rich_click as click
from rich.table import Table

from ..errors import ListCuratorError
from ._console import console
from ._helpers import build_publisher, load_settings, screenshot_dir, select_folders


def _build_curator(announce: bool | None, no_login: bool):
    from ..pipeline import Curator
    from ..summarizer import Summarizer

    settings = load_settings()
    if announce is not None:
        settings.pipeline.announce = announce
    if no_login:
        settings.pipeline.require_login = False

    return settings, Curator(
        settings,
        summarizer=Summarizer(settings.llm),
        publisher=build_publisher(settings),
        screenshot_dir=screenshot_dir(),
    )


@click.command()
@click.option("--folder", "-f", "folders", multiple=True, help="Only run these folders (repeatable)")
@click.option("--announce/--no-announce", default=None, help="Post an announcement for each published file")
@click.option("--no-login", is_flag=True, help="Skip the credential login (use an already logged-in browser)")
def run(folders: tuple[str, ...], announce: bool | None, no_login: bool):
    """Run the pipeline once over every configured folder."""
    settings, curator = _build_curator(announce, no_login)
    selected = select_folders(settings, folders)
    console.print(f"Running pipeline for {len(selected)} folder(s)...")

    try:
        results = curator.run_all(selected)
    except ListCuratorError as e:
        raise click.ClickException(str(e)) from e

    if not results:
        console.print("[yellow]Nothing new published[/yellow]")
        return

    table = Table(title="Published")
    table.add_column("Folder")
    table.add_column("List")
    table.add_column("Items", justify="right")
    table.add_column("URL")
    for result in results:
        table.add_row(result.folder, result.list_id, str(result.item_count), result.publish.url)
    console.print(table)


@click.command()
@click.option("--no-initial", is_flag=True, help="Wait for the first scheduled slot instead of running now")
@click.option("--announce/--no-announce", default=None, help="Post an announcement for each published file")
@click.option("--no-login", is_flag=True, help="Skip the credential login")
def schedule(no_initial: bool, announce: bool | None, no_login: bool):
    """Run the pipeline forever on a random 1-16 hour cadence."""
    from ..scheduler import RandomIntervalScheduler

    settings, curator = _build_curator(announce, no_login)
    scheduler = RandomIntervalScheduler(
        curator.run_all,
        min_hours=settings.pipeline.schedule_min_hours,
        max_hours=settings.pipeline.schedule_max_hours,
    )
    console.print("Starting scheduler (Ctrl+C to stop)...")
    try:
        scheduler.start(run_initial=not no_initial)
    except (KeyboardInterrupt, SystemExit):
        scheduler.shutdown()
        console.print("Scheduler stopped")
