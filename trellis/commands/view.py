"""
Collapse/expand commands for the work-item table.

Collapse state is stored per release in .trellis/view.json and never
touches the release documents.
"""
import click

from trellis.core import TrellisCore
from trellis.exceptions import TrellisError


@click.group()
def view():
    """Collapse and expand rows of the work-item table."""
    pass


def _open_core(ctx: click.Context, release_id: str) -> TrellisCore:
    try:
        return TrellisCore(release_id, trellis_dir=ctx.obj["trellis_dir"])
    except TrellisError as e:
        raise click.ClickException(str(e))


def _require_parent_item(core: TrellisCore, item_id: str) -> None:
    item = core.get_item(item_id)
    if item is None:
        raise click.ClickException(f"Work item '{item_id}' not found.")
    if not core.get_children(item_id):
        raise click.ClickException(f"'{item.title}' has no child items to collapse.")


@view.command(name="toggle")
@click.argument("release_id")
@click.argument("item_id")
@click.pass_context
def toggle(ctx, release_id: str, item_id: str):
    """Flip the collapse state of one item."""
    core = _open_core(ctx, release_id)
    _require_parent_item(core, item_id)
    collapsed = core.toggle_collapse(item_id)
    click.echo(f"{'Collapsed' if collapsed else 'Expanded'} '{core.get_item(item_id).title}'.")


@view.command(name="collapse")
@click.argument("release_id")
@click.argument("item_id", required=False)
@click.pass_context
def collapse(ctx, release_id: str, item_id):
    """Collapse one item, or every item with children when ITEM_ID is omitted."""
    core = _open_core(ctx, release_id)
    if item_id is None:
        core.collapse_all()
        click.echo("Collapsed all items.")
        return
    _require_parent_item(core, item_id)
    core.set_collapsed(item_id, True)
    click.echo(f"Collapsed '{core.get_item(item_id).title}'.")


@view.command(name="expand")
@click.argument("release_id")
@click.argument("item_id", required=False)
@click.pass_context
def expand(ctx, release_id: str, item_id):
    """Expand one item, or every item when ITEM_ID is omitted."""
    core = _open_core(ctx, release_id)
    if item_id is None:
        core.expand_all()
        click.echo("Expanded all items.")
        return
    _require_parent_item(core, item_id)
    core.set_collapsed(item_id, False)
    click.echo(f"Expanded '{core.get_item(item_id).title}'.")


@view.command(name="toggle-all")
@click.argument("release_id")
@click.pass_context
def toggle_all(ctx, release_id: str):
    """Collapse everything, or expand everything if all is already collapsed."""
    core = _open_core(ctx, release_id)
    if core.toggle_all():
        click.echo("Collapsed all items.")
    else:
        click.echo("Expanded all items.")
