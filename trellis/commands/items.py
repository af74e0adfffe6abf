"""
Work-item commands for Trellis using TrellisCore.

Every command takes the release id as its first argument. Items are
addressed by id.
"""
import json
from typing import List, Optional

import click
from pydantic import ValidationError as PydanticValidationError

from trellis.core import TrellisCore
from trellis.exceptions import (
    InvalidOperationError,
    NotFoundError,
    PersistenceError,
    TrellisError,
    ValidationError,
)
from trellis.managers.table_manager import TableRow
from trellis.models.base import WorkItem, WorkItemType
from trellis.models.forms import WorkItemFormData
from trellis.utils import format_timestamp, format_validation_error

TYPE_CHOICES = [item_type.value for item_type in WorkItemType]


@click.group()
def items():
    """Manage the work items of a release (epics, features, user stories, bugs)."""
    pass


def _open_core(ctx: click.Context, release_id: str) -> TrellisCore:
    """Load a release or fail with a readable CLI error."""
    try:
        return TrellisCore(release_id, trellis_dir=ctx.obj["trellis_dir"])
    except TrellisError as e:
        raise click.ClickException(str(e))


def _raise_cli_error(error: TrellisError) -> None:
    """Translate a Trellis error into a click error with a category prefix."""
    if isinstance(error, ValidationError):
        raise click.ClickException(f"Validation Error: {error}")
    if isinstance(error, InvalidOperationError):
        raise click.ClickException(f"Operation Error: {error}")
    if isinstance(error, PersistenceError):
        raise click.ClickException(f"Save failed, nothing was changed: {error}")
    raise click.ClickException(str(error))


def _build_form(**fields) -> WorkItemFormData:
    try:
        return WorkItemFormData(**fields)
    except PydanticValidationError as e:
        raise click.ClickException(f"Validation Error: {format_validation_error(e)}")


def _serialize_item(item: WorkItem) -> dict:
    """Serialize a work item to a dict for JSON output."""
    return item.model_dump(mode="json", by_alias=True)


def _format_row(row: TableRow) -> str:
    if not row.has_children:
        marker = " "
    elif row.collapsed:
        marker = "+"
    else:
        marker = "-"
    return (
        f"{' ' * row.indent}{marker} [{row.item.type.label}] "
        f"{row.item.title} ({row.item.id})"
    )


@items.command(name="tree")
@click.argument("release_id")
@click.option("-a", "--all", "show_all", is_flag=True, help="Include rows hidden under collapsed items.")
@click.option("-j", "--json", "json_output", is_flag=True, help="Output in JSON format.")
@click.pass_context
def tree(ctx, release_id: str, show_all: bool, json_output: bool):
    """Show the work-item table of a release in hierarchy order.

    Rows marked '-' can be collapsed, rows marked '+' are collapsed.
    """
    core = _open_core(ctx, release_id)
    rows = core.table_rows(include_hidden=show_all)

    if json_output:
        payload = [
            {
                **_serialize_item(row.item),
                "depth": row.depth,
                "indent": row.indent,
                "hasChildren": row.has_children,
                "collapsed": row.collapsed,
                "visible": row.visible,
            }
            for row in rows
        ]
        click.echo(json.dumps(payload, indent=2))
        return

    release = core.release
    click.echo(f"{release.title} ({len(release.work_items)} work items)")
    if not rows:
        click.echo("\nNo work items.")
        return
    click.echo("")
    for row in rows:
        click.echo(_format_row(row))


@items.command(name="show")
@click.argument("release_id")
@click.argument("item_id")
@click.option("-j", "--json", "json_output", is_flag=True, help="Output in JSON format.")
@click.pass_context
def show(ctx, release_id: str, item_id: str, json_output: bool):
    """Show one work item with its parent and children."""
    core = _open_core(ctx, release_id)
    item = core.get_item(item_id)
    if item is None:
        raise click.ClickException(f"Work item '{item_id}' not found.")

    parent = core.get_parent(item)
    children = core.get_children(item.id)

    if json_output:
        item_dict = _serialize_item(item)
        item_dict["parent"] = _serialize_item(parent) if parent else None
        item_dict["children"] = [_serialize_item(child) for child in children]
        click.echo(json.dumps(item_dict, indent=2))
        return

    click.echo(f"Title: {item.title}")
    click.echo(f"Type: {item.type.label}")
    click.echo(f"ID: {item.id}")
    if parent:
        click.echo(f"Parent: {parent.title} ({parent.id})")
    elif item.parent_id:
        click.echo(f"Parent: {item.parent_id} (missing)")
    click.echo(f"Flag Name: {item.flag_name or ''}")
    click.echo(f"Hyperlink: {item.hyperlink or ''}")
    click.echo(f"Remarks: {item.remarks or ''}")
    if item.actual_hours is not None:
        click.echo(f"Actual Hours: {item.actual_hours:g}")
    click.echo(f"Created: {format_timestamp(item.created_at)}")
    click.echo(f"Updated: {format_timestamp(item.updated_at)}")

    if children:
        click.echo(f"\nChild Items ({len(children)}):")
        for i, child in enumerate(children, 1):
            click.echo(f"  {i}. [{child.type.label}] {child.title} ({child.id})")
    else:
        click.echo("\nNo child items.")


@items.command(name="add")
@click.argument("release_id")
@click.option("-t", "--type", "item_type", type=click.Choice(TYPE_CHOICES, case_sensitive=False),
              help="Work item type. Inferred from the parent when --under is used.")
@click.option("-n", "--title", required=True, help="Work item title.")
@click.option("-i", "--id", "item_id", help="Work item id (generated if omitted).")
@click.option("-p", "--parent", "parent_id", help="Parent work item id.")
@click.option("-u", "--under", "under_id", help="Add as child of this item; the type follows the parent.")
@click.option("-f", "--flag", "flag_name", help="Feature flag name.")
@click.option("-r", "--remarks", help="Remarks.")
@click.option("-l", "--link", "hyperlink", help="Hyperlink (http:// or https://).")
@click.option("-h", "--hours", "actual_hours", type=float, help="Actual hours spent.")
@click.pass_context
def add(ctx, release_id: str, item_type: Optional[str], title: str, item_id: Optional[str],
        parent_id: Optional[str], under_id: Optional[str], flag_name: Optional[str],
        remarks: Optional[str], hyperlink: Optional[str], actual_hours: Optional[float]):
    """Add a work item to a release.

    Parent rules:
    - EPIC: no parent
    - FEATURE: parent must be an EPIC
    - USER_STORY: parent must be a FEATURE
    - BUG: parent must be a USER_STORY
    """
    core = _open_core(ctx, release_id)

    if under_id:
        if parent_id and parent_id != under_id:
            raise click.ClickException("Use either -p/--parent or -u/--under, not both.")
        child_type = core.child_type_for(under_id)
        if core.get_item(under_id) is None:
            raise click.ClickException(f"Work item '{under_id}' not found.")
        if child_type is None:
            raise click.ClickException("Bugs cannot have child items.")
        if item_type and item_type.upper() != child_type.value:
            raise click.ClickException(
                f"Items added under this parent must be of type {child_type.value}."
            )
        item_type = child_type.value
        parent_id = under_id

    if not item_type:
        raise click.ClickException("Please specify -t/--type or -u/--under.")

    form = _build_form(
        type=item_type.upper(),
        id=item_id,
        title=title,
        parent_id=parent_id,
        flag_name=flag_name,
        remarks=remarks,
        hyperlink=hyperlink,
        actual_hours=actual_hours,
    )
    try:
        item = core.add_item(form)
    except TrellisError as e:
        _raise_cli_error(e)
    click.echo(f"{item.type.label.title()} '{item.title}' created successfully ({item.id}).")


@items.command(name="edit")
@click.argument("release_id")
@click.argument("item_id")
@click.option("-n", "--title", help="New title.")
@click.option("-p", "--parent", "parent_id", help="New parent work item id.")
@click.option("--no-parent", is_flag=True, help="Detach the item from its parent.")
@click.option("-f", "--flag", "flag_name", help="New feature flag name.")
@click.option("-r", "--remarks", help="New remarks.")
@click.option("-l", "--link", "hyperlink", help="New hyperlink.")
@click.option("-h", "--hours", "actual_hours", type=float, help="New actual hours.")
@click.pass_context
def edit(ctx, release_id: str, item_id: str, title: Optional[str], parent_id: Optional[str],
         no_parent: bool, flag_name: Optional[str], remarks: Optional[str],
         hyperlink: Optional[str], actual_hours: Optional[float]):
    """Edit an existing work item.

    Only specified fields are updated. The type of an item cannot change.
    """
    core = _open_core(ctx, release_id)
    item = core.get_item(item_id)
    if item is None:
        raise click.ClickException(f"Work item '{item_id}' not found.")

    if not any(
        value is not None
        for value in (title, parent_id, flag_name, remarks, hyperlink, actual_hours)
    ) and not no_parent:
        raise click.ClickException(
            "No update parameters provided. "
            "Specify at least one of: -n/--title, -p/--parent, --no-parent, "
            "-f/--flag, -r/--remarks, -l/--link, -h/--hours."
        )
    if parent_id and no_parent:
        raise click.ClickException("Use either -p/--parent or --no-parent, not both.")

    form = _build_form(
        type=item.type,
        title=title if title is not None else item.title,
        parent_id=None if no_parent else (parent_id if parent_id is not None else item.parent_id),
        flag_name=flag_name if flag_name is not None else item.flag_name,
        remarks=remarks if remarks is not None else item.remarks,
        hyperlink=hyperlink if hyperlink is not None else item.hyperlink,
        actual_hours=actual_hours if actual_hours is not None else item.actual_hours,
    )
    try:
        updated = core.update_item(item_id, form)
    except TrellisError as e:
        _raise_cli_error(e)
    click.echo(f"Work item '{updated.title}' updated successfully.")


@items.command(name="delete")
@click.argument("release_id")
@click.argument("item_ids", nargs=-1, required=True)
@click.option("-y", "--yes", is_flag=True, help="Delete without asking for confirmation.")
@click.pass_context
def delete(ctx, release_id: str, item_ids: List[str], yes: bool):
    """Delete work items and everything beneath them.

    WARNING: Child items are deleted as well. This cannot be undone.
    """
    core = _open_core(ctx, release_id)
    try:
        plan = core.preview_deletion(item_ids)
    except NotFoundError as e:
        raise click.ClickException(str(e))

    targets = [item for item in core.release.work_items if item.id in plan.target_ids]
    for target in targets:
        click.echo(f"Delete [{target.type.label}] {target.title} ({target.id})")
    if plan.descendant_count:
        click.echo(f"This will also delete {plan.descendant_count} child item(s):")
        for item in plan.descendants:
            click.echo(f"  - [{item.type.label}] {item.title}")

    if not yes:
        click.confirm("Are you sure you want to continue?", abort=True)

    try:
        core.delete_items(item_ids)
    except TrellisError as e:
        _raise_cli_error(e)
    click.echo(f"Deleted {len(plan.removed)} work item(s).")


@items.command(name="parents")
@click.argument("release_id")
@click.argument("item_type", type=click.Choice(TYPE_CHOICES, case_sensitive=False))
@click.pass_context
def parents(ctx, release_id: str, item_type: str):
    """List the items that can be the parent of an ITEM_TYPE item."""
    core = _open_core(ctx, release_id)
    target_type = WorkItemType(item_type.upper())
    candidates = core.valid_parents(target_type)

    if target_type == WorkItemType.EPIC:
        click.echo("Epics cannot have a parent.")
        return
    if not candidates:
        click.echo(f"No possible parents for {target_type.label}.")
        return
    for candidate in candidates:
        click.echo(f"{candidate.id}  {candidate.title}")


@items.command(name="check")
@click.argument("release_id")
@click.pass_context
def check(ctx, release_id: str):
    """Report dangling parents, cycles and misplaced items."""
    core = _open_core(ctx, release_id)
    issues = core.check()
    if not issues:
        click.echo("No hierarchy issues found.")
        return

    click.echo(f"Found {len(issues)} hierarchy issue(s):")
    for issue in issues:
        click.echo(f"  [{issue.kind}] {issue.message}")
    ctx.exit(1)
