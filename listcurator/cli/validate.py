"""Validate command."""

import rich_click as click
from rich.table import Table

from ..errors import ListCuratorError
from ._console import console
from ._helpers import load_settings, select_folders


@click.command()
@click.option("--folder", "-f", "folders", multiple=True, help="Only validate these folders (repeatable)")
@click.option("--pause", type=float, default=3.0, help="Seconds between list checks")
def validate(folders: tuple[str, ...], pause: float):
    """Check that every configured list id still loads."""
    from ..browser import open_browser
    from ..validator import validate_all

    settings = load_settings()
    selected = select_folders(settings, folders)

    try:
        with open_browser(settings.browser) as handle:
            summary = validate_all(handle.page, selected, pause_seconds=pause)
    except ListCuratorError as e:
        raise click.ClickException(str(e)) from e

    console.print(f"\n{summary.valid}/{summary.total} lists valid ({summary.valid_percentage}%)")
    if summary.invalid:
        table = Table(title="Invalid lists")
        table.add_column("Folder")
        table.add_column("List")
        table.add_column("Reason")
        for item in summary.invalid:
            table.add_row(item.folder, item.list_id, item.reason)
        console.print(table)
        raise SystemExit(1)
