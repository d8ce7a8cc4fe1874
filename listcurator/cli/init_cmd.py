"""Init and doctor commands."""

import sys
from pathlib import Path

import rich_click as click
from rich.panel import Panel

from ..auth import get_secret
from ..config import (
    get_config_path,
    get_data_dir,
    get_screenshot_dir,
    get_storage_state_path,
    load_config,
    save_config,
)
from ._console import console, status_icon


@click.command()
@click.option("--force", is_flag=True, help="Overwrite existing config file")
def init(force: bool):
    """Initialize listcurator data directories and configuration.

    Creates:
    - Data directory (~/.local/share/listcurator/ or LISTCURATOR_DATA_DIR)
    - Screenshot directory
    - Config file (~/.config/listcurator/config.json)
    """
    data_dir = get_data_dir()
    config_path = get_config_path()
    shots_dir = get_screenshot_dir()

    console.print("Initializing listcurator...")
    console.print(f"  Data directory: {data_dir}")
    console.print(f"  Config file: {config_path}")

    data_dir.mkdir(parents=True, exist_ok=True)
    console.print(f"  {status_icon(True)} Data directory created")

    shots_dir.mkdir(parents=True, exist_ok=True)
    console.print(f"  {status_icon(True)} Screenshot directory created")

    if config_path.exists() and not force:
        console.print("  [yellow]SKIP[/yellow] Config already exists (use --force to overwrite)")
    else:
        config_path.parent.mkdir(parents=True, exist_ok=True)
        save_config(load_config())
        console.print(f"  {status_icon(True)} Config file created")

    console.print("")
    console.print("Initialization complete! Next steps:")
    console.print("  1. Install the browser: playwright install chromium")
    console.print("  2. Set X credentials: export X_USERNAME=... X_PASSWORD=... (X_EMAIL=... if asked)")
    console.print("  3. Set publishing: export GITHUB_TOKEN=... GITHUB_REPO=owner/name GEMINI_API_KEY=...")
    console.print("  4. Run: listcurator doctor")
    console.print("  5. Try one list: listcurator discover <list id>")


def _check_secret(name: str, issues: list[str], warnings: list[str], required: bool = True, hint: str = "") -> None:
    value = get_secret(name)
    if value:
        console.print(f"  {status_icon(True)} {name} set")
    elif required:
        console.print(f"  {status_icon(False)} {name} not set")
        issues.append(f"Set {name}{hint}")
    else:
        console.print(f"  [yellow]WARN[/yellow] {name} not set{hint}")
        warnings.append(f"Set {name}{hint}")


@click.command()
def doctor():
    """Check listcurator dependencies and configuration.

    Verifies:
    - Required directories exist
    - Config file is valid
    - Playwright Chromium is installed
    - Credentials are set
    """
    from pydantic import ValidationError

    from ..models.config import CuratorConfig

    issues: list[str] = []
    warnings: list[str] = []
    settings = None

    console.print("Checking listcurator configuration...\n")

    # 1. Data directory
    data_dir = get_data_dir()
    console.print(f"Data directory: {data_dir}")
    if data_dir.exists():
        console.print(f"  {status_icon(True)} Directory exists")
    else:
        console.print(f"  {status_icon(False)} Directory does not exist")
        issues.append("Run 'listcurator init' to create data directory")

    # 2. Config file
    config_path = get_config_path()
    console.print(f"\nConfig file: {config_path}")
    try:
        settings = CuratorConfig.from_dict(load_config())
        if config_path.exists():
            console.print(f"  {status_icon(True)} Config file valid ({len(settings.folders)} folders)")
        else:
            console.print("  [yellow]WARN[/yellow] Config file not found (using defaults)")
            warnings.append("Run 'listcurator init' to create config file")
    except (ValueError, ValidationError) as e:
        console.print(f"  {status_icon(False)} Config file invalid: {e}")
        issues.append("Fix or delete config file")

    # 3. Browser
    console.print("\nBrowser:")
    if settings and settings.browser.cdp_url:
        console.print(f"  [dim]INFO[/dim] Attaching to Chrome at {settings.browser.cdp_url}")
    else:
        from playwright.sync_api import Error as PlaywrightError
        from playwright.sync_api import sync_playwright

        try:
            with sync_playwright() as p:
                executable = p.chromium.executable_path
            if Path(executable).exists():
                console.print(f"  {status_icon(True)} Chromium found at {executable}")
            else:
                console.print(f"  {status_icon(False)} Chromium not installed")
                issues.append("Run: playwright install chromium")
        except PlaywrightError as e:
            console.print(f"  {status_icon(False)} Playwright unavailable: {e}")
            issues.append("Run: playwright install chromium")

    state_path = get_storage_state_path()
    if state_path.exists():
        console.print(f"  {status_icon(True)} Saved login state at {state_path}")
    else:
        console.print("  [dim]INFO[/dim] No saved login state (run 'listcurator login')")

    # 4. X credentials
    console.print("\nX account:")
    _check_secret("X_USERNAME", issues, warnings)
    _check_secret("X_PASSWORD", issues, warnings)
    _check_secret("X_EMAIL", issues, warnings, required=False, hint=" (needed when X asks for verification)")

    # 5. LLM
    provider = settings.llm.provider if settings else "gemini"
    console.print(f"\nLLM ({provider}):")
    key_name = "ANTHROPIC_API_KEY" if provider == "anthropic" else "GEMINI_API_KEY"
    _check_secret(key_name, issues, warnings)

    # 6. GitHub
    console.print("\nGitHub publishing:")
    _check_secret("GITHUB_TOKEN", issues, warnings)
    _check_secret("GITHUB_REPO", issues, warnings, hint=" (owner/name)")

    # 7. Discord (optional)
    console.print("\nDiscord notifications:")
    if get_secret("DISCORD_WEBHOOK_URL"):
        console.print(f"  {status_icon(True)} Webhook configured")
    else:
        console.print("  [dim]INFO[/dim] Discord not configured (only needed for 'listcurator track')")

    console.print("\n" + "=" * 50)

    if issues:
        console.print(
            Panel(
                "\n".join(f"  - {issue}" for issue in issues),
                title=f"{len(issues)} issue(s) found",
                border_style="red",
            )
        )
        sys.exit(1)
    elif warnings:
        console.print(
            Panel(
                "\n".join(f"  - {w}" for w in warnings),
                title=f"All checks passed with {len(warnings)} warning(s)",
                border_style="yellow",
            )
        )
    else:
        console.print("\n[green]All checks passed![/green]")
