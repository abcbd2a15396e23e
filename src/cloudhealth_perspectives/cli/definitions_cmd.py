"""Definition CLI commands: validate and encode."""

from pathlib import Path

import click

from cloudhealth_perspectives.codec import encode
from cloudhealth_perspectives.definitions.loader import PerspectiveLoader, load_perspective
from cloudhealth_perspectives.definitions.validator import (
    validate_definition_file,
    validate_definitions_dir,
)
from cloudhealth_perspectives.errors import DefinitionError, MalformedConfig


@click.group()
def definitions():
    """Definition file commands."""
    pass


@definitions.command()
@click.argument("target_path", type=click.Path(exists=True, path_type=Path))
def validate(target_path: Path):
    """Validate perspective YAML files against the JSON Schema."""
    # ── Schema (JSON Schema) validation ─────────────────────────────────────
    if target_path.is_dir():
        issues = validate_definitions_dir(target_path)
    else:
        issues = validate_definition_file(target_path)

    for issue in issues:
        colour = "red" if issue.severity == "error" else "yellow"
        click.echo(click.style(str(issue), fg=colour))

    errors = [i for i in issues if i.severity == "error"]
    if errors:
        click.echo(click.style(f"\n{len(errors)} schema error(s) found", fg="red", bold=True))
        raise SystemExit(1)

    # ── Semantic (loader) validation ─────────────────────────────────────────
    try:
        loader = PerspectiveLoader(target_path)
        loader.load_all()
    except DefinitionError as e:
        click.echo(click.style(f"\nSemantic validation failed: {e}", fg="red"), err=True)
        raise SystemExit(1)

    names = loader.list_perspectives()
    click.echo(f"\nLoaded {len(names)} perspective(s):")
    for name in sorted(names):
        p = loader.get(name)
        group_count = len(p.groups) if p else 0
        click.echo(f"  ✓ {name} ({group_count} groups)")

    click.echo(click.style("\nAll definitions are valid.", fg="green", bold=True))


@definitions.command("encode")
@click.argument("target_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def encode_cmd(target_path: Path):
    """Print the JSON document a definition would send (no ids are persisted)."""
    try:
        perspective = load_perspective(target_path)
        body = encode(perspective)
    except (DefinitionError, MalformedConfig) as e:
        click.echo(click.style(f"Error: {e}", fg="red"), err=True)
        raise SystemExit(1)
    click.echo(body.decode("utf-8"))
