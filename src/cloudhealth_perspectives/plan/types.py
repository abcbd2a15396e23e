"""Change types produced when comparing two versions of a perspective.

Each change knows how to describe itself for display.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class Change:
    """Base class for plan changes."""

    destructive: bool = False

    def describe(self) -> str:
        raise NotImplementedError


@dataclass
class CreatePerspective(Change):
    """The perspective does not exist on the server yet."""

    name: str = ""
    group_count: int = 0

    def describe(self) -> str:
        return f"Create perspective '{self.name}' ({self.group_count} groups)"


@dataclass
class RenamePerspective(Change):
    old_name: str = ""
    new_name: str = ""

    def describe(self) -> str:
        return f"Rename perspective '{self.old_name}' -> '{self.new_name}'"


@dataclass
class SetIncludeInReports(Change):
    value: bool = False

    def describe(self) -> str:
        return f"{'Include' if self.value else 'Exclude'} perspective in reports"


@dataclass
class AddGroup(Change):
    name: str = ""
    group_type: str = ""
    position: int = 0

    def describe(self) -> str:
        return f"Add {self.group_type} group '{self.name}' at position {self.position}"


@dataclass
class RemoveGroup(Change):
    name: str = ""
    ref_id: str = ""
    destructive: bool = True

    def describe(self) -> str:
        return f"Remove group '{self.name}' (ref_id {self.ref_id})"


@dataclass
class ChangeGroup(Change):
    """A matched group whose authored content differs."""

    ref_id: str = ""
    name: str = ""
    old_name: str | None = None
    old_type: str | None = None
    new_type: str | None = None
    rules_changed: bool = False

    def __post_init__(self) -> None:
        # Switching type discards the server's dynamic groups or the user's rules.
        if self.old_type is not None:
            self.destructive = True

    def describe(self) -> str:
        parts = []
        if self.old_name is not None:
            parts.append(f"rename from '{self.old_name}'")
        if self.old_type is not None:
            parts.append(f"type {self.old_type} -> {self.new_type}")
        if self.rules_changed:
            parts.append("rules changed")
        return f"Change group '{self.name}': {', '.join(parts)}"


@dataclass
class ReorderGroups(Change):
    order: list[str] | None = None

    def describe(self) -> str:
        return f"Reorder groups: {', '.join(self.order or [])}"
