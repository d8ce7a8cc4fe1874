"""CLI entry point for listcurator."""

import rich_click as click

from .. import __version__

# Import command modules; avoid shadowing module names with command objects
# so that `import listcurator.cli.<module>` still resolves to the module.
from . import config_cmd as _config_mod
from . import discover as _discover_mod
from . import init_cmd as _init_mod
from . import login_cmd as _login_mod
from . import run as _run_mod
from . import track as _track_mod
from . import validate as _validate_mod
from ._console import setup_logging


@click.group()
@click.version_option(version=__version__)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def cli(verbose: bool):
    """Curate posts from X lists into published markdown collections."""
    setup_logging(verbose)


# Register commands
cli.add_command(_init_mod.init)
cli.add_command(_init_mod.doctor)
cli.add_command(_run_mod.run)
cli.add_command(_run_mod.schedule)
cli.add_command(_track_mod.track)
cli.add_command(_discover_mod.discover)
cli.add_command(_validate_mod.validate)
cli.add_command(_login_mod.login_cmd)
cli.add_command(_config_mod.config)


if __name__ == "__main__":
    cli()
