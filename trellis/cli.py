"""
CLI for Trellis using .trellis/ folder-based storage.

Uses TrellisCore and managers exclusively.
"""
from pathlib import Path

import click

from trellis.commands.config import config
from trellis.commands.items import items
from trellis.commands.release import release
from trellis.commands.view import view
from trellis.constants import (
    DEFAULT_LOG_LEVEL,
    DEFAULT_TRELLIS_DIR,
    get_config_manager,
    get_log_level,
)
from trellis.exceptions import ConfigurationError
from trellis.log import setup_logging


@click.group()
@click.option(
    "-d", "--dir", "trellis_dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=DEFAULT_TRELLIS_DIR,
    envvar="TRELLIS_DIR",
    show_default=True,
    help="Directory holding releases, settings and the log.",
)
@click.pass_context
def cli(ctx, trellis_dir: Path):
    """A command-line interface for planning release work items (epics, features, user stories, bugs)."""
    ctx.ensure_object(dict)
    ctx.obj["trellis_dir"] = trellis_dir
    get_config_manager(reset=True, trellis_dir=trellis_dir)
    try:
        level = get_log_level()
    except ConfigurationError as e:
        # config commands report it through StorageManager.load_config
        if ctx.invoked_subcommand != "config":
            raise click.ClickException(str(e))
        level = DEFAULT_LOG_LEVEL
    setup_logging(trellis_dir, level)


cli.add_command(release)
cli.add_command(items)
cli.add_command(view)
cli.add_command(config)


if __name__ == '__main__':
    cli()
