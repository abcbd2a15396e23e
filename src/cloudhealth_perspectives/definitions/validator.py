"""
definitions/validator.py: JSON Schema validation for perspective YAML files.

Checks the structure of a definition only: required keys, value types, and
that categorize groups carry no rules. Whether an asset type or tag exists is
left to the server.

Usage:
    from cloudhealth_perspectives.definitions.validator import validate_definitions_dir

    issues = validate_definitions_dir(Path("perspectives"))
    for issue in issues:
        print(issue)
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml
from jsonschema import Draft202012Validator
from jsonschema.exceptions import ValidationError
from referencing import Registry, Resource
from referencing.jsonschema import DRAFT202012

logger = logging.getLogger(__name__)

_SCHEMAS_DIR = Path(__file__).parent / "schemas"

PERSPECTIVE_SCHEMA = "perspective.schema.json"
_SCHEMA_NAMES = ("_defs.schema.json", PERSPECTIVE_SCHEMA)


@dataclass
class ValidationIssue:
    """A single validation finding for a definition file."""

    file: Path
    message: str
    path: str = ""          # location within the document, e.g. "groups[0]/rules[1]"
    severity: str = "error" # "error" | "warning"

    def __str__(self) -> str:
        loc = f" at {self.path}" if self.path else ""
        return f"[{self.severity.upper()}] {self.file}{loc}: {self.message}"


def _load_schema(name: str) -> dict[str, Any]:
    with (_SCHEMAS_DIR / name).open() as fh:
        return json.load(fh)


def _load_registry() -> Registry:
    """Build a jsonschema Registry containing the definition schemas."""
    resources = []
    for name in _SCHEMA_NAMES:
        schema = _load_schema(name)
        resources.append(
            (schema["$id"], Resource(contents=schema, specification=DRAFT202012))
        )
    return Registry().with_resources(resources)


def _json_path(error: ValidationError) -> str:
    parts = []
    for p in error.absolute_path:
        if isinstance(p, int):
            parts.append(f"[{p}]")
        else:
            parts.append(str(p))
    return "/".join(parts).replace("/[", "[")


def validate_document(
    doc: Any,
    file: Path,
    *,
    registry: Registry | None = None,
) -> list[ValidationIssue]:
    """Validate an already-parsed definition document."""
    if registry is None:
        registry = _load_registry()
    validator = Draft202012Validator(_load_schema(PERSPECTIVE_SCHEMA), registry=registry)
    return [
        ValidationIssue(file=file, message=error.message, path=_json_path(error))
        for error in sorted(validator.iter_errors(doc), key=_json_path)
    ]


def validate_definition_file(
    yaml_path: Path,
    *,
    registry: Registry | None = None,
) -> list[ValidationIssue]:
    """
    Validate a single perspective YAML file.

    Returns:
        A list of :class:`ValidationIssue` objects (empty on success).
    """
    try:
        with yaml_path.open() as fh:
            raw = yaml.safe_load(fh)
    except yaml.YAMLError as exc:
        return [ValidationIssue(file=yaml_path, message=f"YAML parse error: {exc}")]

    if raw is None:
        return [
            ValidationIssue(file=yaml_path, message="File is empty or contains only whitespace")
        ]

    return validate_document(raw, yaml_path, registry=registry)


def validate_definitions_dir(definitions_dir: Path) -> list[ValidationIssue]:
    """
    Validate every ``*.yaml`` file directly under *definitions_dir*.

    Returns:
        A flat list of issues across all files. Empty means all files are valid.
    """
    if not definitions_dir.is_dir():
        return [
            ValidationIssue(
                file=definitions_dir,
                message=f"Definitions directory does not exist: {definitions_dir}",
            )
        ]

    # Build registry once, shared across all files
    registry = _load_registry()

    all_issues: list[ValidationIssue] = []
    files = sorted(definitions_dir.glob("*.yaml"))
    if not files:
        logger.warning("No perspective definitions found in %s", definitions_dir)
    for yaml_file in files:
        all_issues.extend(validate_definition_file(yaml_file, registry=registry))
    return all_issues
