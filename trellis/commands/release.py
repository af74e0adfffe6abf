"""
Release commands for Trellis.

A release owns one flat list of work items; these commands only create
and list releases.
"""
import json
from typing import Optional

import click

from trellis.exceptions import TrellisError, ValidationError
from trellis.managers.storage_manager import StorageManager
from trellis.utils import format_timestamp


@click.group()
def release():
    """Create and list releases."""
    pass


@release.command(name="create")
@click.option("-n", "--title", required=True, help="Release title.")
@click.option("-d", "--description", default="", help="Release description.")
@click.option("-v", "--version", "version", help="Semantic version, e.g. 1.2.0.")
@click.pass_context
def create(ctx, title: str, description: str, version: Optional[str]):
    """Create an empty release and print its id."""
    storage = StorageManager(ctx.obj["trellis_dir"])
    try:
        created = storage.create_release(title, description=description, version=version)
    except ValidationError as e:
        raise click.ClickException(f"Validation Error: {e}")
    except TrellisError as e:
        raise click.ClickException(str(e))
    click.echo(f"Release '{created.title}' created successfully ({created.id}).")


@release.command(name="list")
@click.option("-j", "--json", "json_output", is_flag=True, help="Output in JSON format.")
@click.pass_context
def list_releases(ctx, json_output: bool):
    """List all releases, oldest first."""
    storage = StorageManager(ctx.obj["trellis_dir"])
    try:
        releases = storage.list_releases()
    except TrellisError as e:
        raise click.ClickException(str(e))

    if json_output:
        payload = [
            {
                "id": r.id,
                "title": r.title,
                "version": r.version,
                "status": r.status.value,
                "workItems": len(r.work_items),
                "createdAt": r.created_at.isoformat() if r.created_at else None,
            }
            for r in releases
        ]
        click.echo(json.dumps(payload, indent=2))
        return

    if not releases:
        click.echo("No releases found.")
        return

    for r in releases:
        version = f" v{r.version}" if r.version else ""
        click.echo(
            f"{r.id}  {r.title}{version} [{r.status.value}] "
            f"{len(r.work_items)} item(s), created {format_timestamp(r.created_at)}"
        )
