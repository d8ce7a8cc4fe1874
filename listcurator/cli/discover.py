"""Discover command: run the discovery engine against one list and print what it found."""

import json

import rich_click as click
from rich.table import Table

from ..errors import ListCuratorError
from ..models.feed import FeedItem
from ._console import console
from ._helpers import _normalize_list_id, load_settings, screenshot_dir


def _print_table(items: list[FeedItem]) -> None:
    table = Table(title=f"{len(items)} item(s)")
    table.add_column("ID", style="dim")
    table.add_column("Author")
    table.add_column("Posts", justify="right")
    table.add_column("Words", justify="right")
    table.add_column("Media", justify="right")
    table.add_column("Links", justify="right")
    table.add_column("Text")
    for item in items:
        preview = item.aggregate_text.replace("\n", " ")
        if len(preview) > 80:
            preview = preview[:77] + "..."
        table.add_row(
            item.id,
            f"@{item.author}" if item.author else "",
            str(len(item.segments)),
            str(item.word_count),
            str(len(item.images) + len(item.videos)),
            str(len(item.links)),
            preview,
        )
    console.print(table)


@click.command()
@click.argument("list_id_or_url")
@click.option("--count", "-n", type=int, default=None, help="Target number of items")
@click.option("--max-scrolls", type=int, default=None, help="Scroll attempts before giving up")
@click.option("--min-words", type=int, default=None, help="Minimum words for text-only items")
@click.option("--json", "as_json", is_flag=True, help="Print items as JSON")
@click.option("--login/--no-login", "do_login", default=True, help="Log in before scraping")
def discover(
    list_id_or_url: str,
    count: int | None,
    max_scrolls: int | None,
    min_words: int | None,
    as_json: bool,
    do_login: bool,
):
    """Scrape one list and print the new items without publishing anything."""
    from ..auth import get_x_credentials
    from ..browser import login, open_browser
    from ..discovery import DedupLedger, ThreadExtractor, fetch_feed
    from ..pipeline import list_url

    settings = load_settings()
    dc = settings.discovery
    options = dc.options()
    if count is not None:
        options.target_count = count
    if max_scrolls is not None:
        options.max_scroll_attempts = max_scrolls
    if min_words is not None:
        options.min_acceptance_signal = min_words

    list_id = _normalize_list_id(list_id_or_url)
    try:
        with open_browser(settings.browser) as handle:
            if do_login:
                login(handle.page, get_x_credentials(), settings.browser, screenshot_dir=screenshot_dir())
            extractor = ThreadExtractor(
                handle.session,
                settings.selectors,
                retry_attempts=dc.extract_retry_attempts,
                retry_delay=dc.extract_retry_delay,
                max_thread_length=dc.max_thread_length,
            )
            items = fetch_feed(
                handle.session,
                list_url(list_id),
                options,
                DedupLedger(dc.ledger_ceiling),
                extractor=extractor,
            )
    except ListCuratorError as e:
        raise click.ClickException(str(e)) from e

    if as_json:
        click.echo(json.dumps([item.to_dict() for item in items], indent=2, ensure_ascii=False))
    else:
        _print_table(items)
