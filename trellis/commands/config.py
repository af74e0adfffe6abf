"""
Config command group for Trellis.

Commands for viewing and editing project configuration.
"""
import json

import click
from pydantic import ValidationError as PydanticValidationError

from trellis.exceptions import TrellisError
from trellis.managers.storage_manager import StorageManager
from trellis.models.files import ConfigFile
from trellis.utils import format_validation_error

READ_ONLY_KEYS = {"schema_version"}


@click.group()
def config():
    """View and edit project configuration.

    Configuration is stored in .trellis/config.json.
    """
    pass


def _load(ctx: click.Context) -> tuple:
    storage = StorageManager(ctx.obj["trellis_dir"])
    try:
        return storage, storage.load_config()
    except TrellisError as e:
        raise click.ClickException(str(e))


@config.command(name="show")
@click.option("-j", "--json", "json_output", is_flag=True, help="Output in JSON format.")
@click.pass_context
def show_config(ctx, json_output: bool):
    """Show current configuration."""
    _, current = _load(ctx)
    values = current.model_dump(mode="json")
    if json_output:
        click.echo(json.dumps(values, indent=2))
        return
    for key, value in values.items():
        click.echo(f"{key} = {value}")


@config.command(name="get")
@click.argument("key")
@click.pass_context
def get_config(ctx, key: str):
    """Get a configuration value."""
    _, current = _load(ctx)
    if key not in ConfigFile.model_fields:
        raise click.ClickException(f"Unknown config key: '{key}'.")
    click.echo(getattr(current, key))


@config.command(name="set")
@click.argument("key")
@click.argument("value")
@click.pass_context
def set_config(ctx, key: str, value: str):
    """Set a configuration value."""
    storage, current = _load(ctx)
    if key not in ConfigFile.model_fields:
        raise click.ClickException(f"Unknown config key: '{key}'.")
    if key in READ_ONLY_KEYS:
        raise click.ClickException(f"'{key}' cannot be changed.")

    try:
        updated = ConfigFile.model_validate({**current.model_dump(), key: value})
    except PydanticValidationError as e:
        raise click.ClickException(f"Validation Error: {format_validation_error(e)}")

    try:
        storage.save_config(updated)
    except TrellisError as e:
        raise click.ClickException(str(e))
    click.echo(f"Set {key} = {getattr(updated, key)}")
