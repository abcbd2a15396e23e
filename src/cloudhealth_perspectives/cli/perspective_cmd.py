"""Perspective CLI commands against the API and the local state store."""

import json
from contextlib import contextmanager
from pathlib import Path

import click

from cloudhealth_perspectives.definitions.loader import load_perspective
from cloudhealth_perspectives.errors import PerspectiveError
from cloudhealth_perspectives.lifecycle.service import PerspectiveService
from cloudhealth_perspectives.state import StateStore, state_path_from_env, stored_document
from cloudhealth_perspectives.transport.client import PerspectiveClient
from cloudhealth_perspectives.transport.config import ApiConfig

_state_option = click.option(
    "--state",
    "state_path",
    default=None,
    type=click.Path(dir_okay=False, path_type=Path),
    help="State database path (default: $PERSPECTIVES_STATE_PATH or .perspectives/state.db).",
)


def _fail(message: str) -> None:
    click.echo(click.style(f"Error: {message}", fg="red"), err=True)
    raise SystemExit(1)


@contextmanager
def _open_store(state_path: Path | None):
    with StateStore(state_path or state_path_from_env()) as store:
        yield store


@contextmanager
def _open_service(state_path: Path | None, offline: bool = False):
    """Yield a service; ``offline`` skips API configuration for store-only commands."""
    try:
        config = ApiConfig(api_key="") if offline else ApiConfig.from_env()
    except ValueError as e:
        _fail(str(e))
    client = PerspectiveClient(config)
    try:
        with _open_store(state_path) as store:
            yield PerspectiveService(client, store)
    finally:
        client.close()


@click.group()
def perspective():
    """Server-side perspective commands."""
    pass


@perspective.command()
@click.argument("definition", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--id", "perspective_id", default=None, help="Id of the existing perspective.")
@_state_option
def plan(definition: Path, perspective_id: str | None, state_path: Path | None):
    """Show what applying DEFINITION would change (uses stored state only)."""
    try:
        intent = load_perspective(definition)
        with _open_service(state_path, offline=True) as service:
            changes = service.plan(intent, perspective_id)
    except (PerspectiveError, ValueError) as e:
        _fail(str(e))

    if not changes:
        click.echo("No changes detected.")
        return

    click.echo(f"Detected {len(changes)} change(s):\n")
    for change in changes:
        prefix = "!" if change.destructive else "+"
        click.echo(f"  {prefix} {change.describe()}")


@perspective.command()
@click.argument("definition", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--id", "perspective_id", default=None, help="Update this perspective instead of creating one.")
@_state_option
def apply(definition: Path, perspective_id: str | None, state_path: Path | None):
    """Create or update a perspective from DEFINITION."""
    try:
        intent = load_perspective(definition)
        with _open_service(state_path) as service:
            if perspective_id is None:
                perspective_id, result = service.create(intent)
                verb = "Created"
            else:
                result = service.update(perspective_id, intent)
                verb = "Updated"
    except (PerspectiveError, ValueError) as e:
        _fail(str(e))

    click.echo(
        click.style(f"{verb} perspective '{result.name}' ({perspective_id})", fg="green", bold=True)
    )


@perspective.command()
@click.argument("perspective_id")
@_state_option
def show(perspective_id: str, state_path: Path | None):
    """Fetch a perspective and print its document, dynamic groups included."""
    try:
        with _open_service(state_path) as service:
            result = service.read(perspective_id)
    except (PerspectiveError, ValueError) as e:
        _fail(str(e))
    click.echo(json.dumps(stored_document(result), indent=2))


@perspective.command("import")
@click.argument("perspective_id")
@_state_option
def import_cmd(perspective_id: str, state_path: Path | None):
    """Start tracking an existing perspective."""
    try:
        with _open_service(state_path) as service:
            result = service.import_(perspective_id)
    except (PerspectiveError, ValueError) as e:
        _fail(str(e))
    click.echo(f"Imported perspective '{result.name}' ({perspective_id}, {len(result.groups)} groups)")


@perspective.command()
@click.argument("perspective_id")
@click.confirmation_option(prompt="Delete this perspective on the server?")
@_state_option
def delete(perspective_id: str, state_path: Path | None):
    """Delete a perspective on the server and forget its state."""
    try:
        with _open_service(state_path) as service:
            service.delete(perspective_id)
    except (PerspectiveError, ValueError) as e:
        _fail(str(e))
    click.echo(f"Deleted perspective {perspective_id}")


@perspective.command("list")
@_state_option
def list_cmd(state_path: Path | None):
    """List tracked perspectives."""
    with _open_store(state_path) as store:
        entries = store.list_ids()
    if not entries:
        click.echo("No perspectives tracked.")
        return
    for perspective_id, name in entries:
        click.echo(f"  {perspective_id}  {name}")
