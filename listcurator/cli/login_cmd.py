"""Login command."""

import rich_click as click

from ..errors import ListCuratorError
from ._console import console, status_icon
from ._helpers import load_settings, screenshot_dir


@click.command("login")
@click.option("--headed", is_flag=True, help="Show the browser window")
def login_cmd(headed: bool):
    """Log in to X and save the browser state for later runs."""
    from ..auth import get_x_credentials
    from ..browser import login, open_browser
    from ..config import get_storage_state_path

    settings = load_settings()
    if headed:
        settings.browser.headless = False
    state_path = get_storage_state_path()

    try:
        credentials = get_x_credentials()
        with open_browser(settings.browser) as handle:
            login(
                handle.page,
                credentials,
                settings.browser,
                screenshot_dir=screenshot_dir(),
                storage_state_path=state_path,
            )
    except ListCuratorError as e:
        raise click.ClickException(str(e)) from e

    console.print(f"{status_icon(True)} Logged in, state saved to {state_path}")
