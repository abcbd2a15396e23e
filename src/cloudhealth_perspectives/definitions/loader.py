"""Load perspective definitions from YAML files.

A definition file looks like::

    perspective: Cost by Team
    includeInReports: true
    groups:
      - name: Team
        type: filter
        rules:
          - asset: AwsInstance
            conditions:
              - tagField: [team]
                op: "="
                val: infra
      - name: Environment
        type: categorize
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from cloudhealth_perspectives.definitions.validator import _load_registry, validate_document
from cloudhealth_perspectives.errors import DefinitionError
from cloudhealth_perspectives.model.types import (
    DEFAULT_OP,
    FILTER,
    Condition,
    Group,
    Perspective,
    Rule,
    make_group,
)


class PerspectiveLoader:
    """Loads perspective definitions from a single file or a directory of files."""

    def __init__(self, path: Path):
        self.path = path
        self.perspectives: dict[str, Perspective] = {}
        self.sources: dict[str, Path] = {}

    def load_all(self) -> None:
        """Load every definition.

        Raises:
            DefinitionError: On unreadable YAML, schema violations, or two
                files defining the same perspective name.
        """
        if self.path.is_dir():
            files = sorted(self.path.glob("*.yaml"))
        elif self.path.exists():
            files = [self.path]
        else:
            raise DefinitionError(f"Definition path does not exist: {self.path}")

        registry = _load_registry()
        for yaml_file in files:
            with open(yaml_file) as f:
                try:
                    data = yaml.safe_load(f)
                except yaml.YAMLError as exc:
                    raise DefinitionError(f"{yaml_file}: YAML parse error: {exc}") from exc
            if data is None:
                continue

            issues = validate_document(data, yaml_file, registry=registry)
            if issues:
                raise DefinitionError(
                    f"{yaml_file}: {len(issues)} schema error(s)", issues=issues
                )

            perspective = self._resolve_perspective(data)
            if perspective.name in self.perspectives:
                raise DefinitionError(
                    f"Duplicate perspective '{perspective.name}' defined in both "
                    f"'{self.sources[perspective.name]}' and '{yaml_file}'"
                )
            self.perspectives[perspective.name] = perspective
            self.sources[perspective.name] = yaml_file

    def _resolve_perspective(self, data: dict) -> Perspective:
        groups = [self._resolve_group(g) for g in data.get("groups", [])]
        return Perspective(
            name=data["perspective"],
            include_in_reports=data["includeInReports"],
            groups=groups,
        )

    def _resolve_group(self, data: dict) -> Group:
        return make_group(
            data.get("type", FILTER),
            name=data["name"],
            ref_id=data.get("refId"),
            rules=[self._resolve_rule(r) for r in data.get("rules", [])],
        )

    def _resolve_rule(self, data: dict) -> Rule:
        return Rule(
            asset=data["asset"],
            tag_fields=list(data.get("tagField", [])),
            fields=list(data.get("field", [])),
            combine_with=data.get("combineWith"),
            conditions=[self._resolve_condition(c) for c in data.get("conditions", [])],
        )

    def _resolve_condition(self, data: dict) -> Condition:
        return Condition(
            tag_fields=list(data.get("tagField", [])),
            fields=list(data.get("field", [])),
            op=data.get("op", DEFAULT_OP),
            val=_to_text(data.get("val")),
        )

    def get(self, name: str) -> Perspective | None:
        """Get a loaded perspective by name."""
        return self.perspectives.get(name)

    def list_perspectives(self) -> list[str]:
        return list(self.perspectives.keys())


def _to_text(value: Any) -> str | None:
    """YAML turns ``val: 5`` and ``val: yes`` into non-strings; the API wants text."""
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def load_perspective(path: Path) -> Perspective:
    """Load a file that must contain exactly one perspective."""
    loader = PerspectiveLoader(path)
    loader.load_all()
    names = loader.list_perspectives()
    if len(names) != 1:
        raise DefinitionError(f"Expected exactly one perspective in {path}, found {len(names)}")
    return loader.perspectives[names[0]]
