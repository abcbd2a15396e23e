"""In-memory configuration model for perspectives.

A perspective is an ordered list of groups. Groups come in two shapes that
share one envelope (``name`` and ``ref_id``):

- ``FilterGroup`` owns an ordered list of rules authored by the user.
- ``CategorizeGroup`` owns dynamic groups that the server computes, one per
  distinct value observed for the categorization field.

``other_groups`` is the server's catch-all bucket. It is carried as opaque
data and never interpreted here.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Union

FILTER = "filter"
CATEGORIZE = "categorize"
GROUP_TYPES = (FILTER, CATEGORIZE)

DEFAULT_OP = "="


@dataclass
class Condition:
    """A leaf predicate inside a rule."""

    tag_fields: list[str] = field(default_factory=list)
    fields: list[str] = field(default_factory=list)
    op: str = DEFAULT_OP
    val: str | None = None


@dataclass
class Rule:
    """One inclusion condition-set within a filter group."""

    asset: str
    tag_fields: list[str] = field(default_factory=list)
    fields: list[str] = field(default_factory=list)
    combine_with: str | None = None
    conditions: list[Condition] = field(default_factory=list)


@dataclass
class DynamicGroup:
    """Server-computed leaf under a categorize group. Round-tripped opaquely."""

    ref_id: str | None = None
    name: str | None = None
    val: str | None = None


# Wire keys of an other-group entry, in the order the server emits them.
OTHER_GROUP_KEYS = ("constant_type", "ref_id", "blk_id", "name", "val", "is_other")


@dataclass
class OtherGroupEntry:
    """Server-maintained catch-all entry.

    ``present`` records which wire keys the server actually sent so that a
    read-then-write cycle reproduces the entry exactly, including absent keys.
    """

    constant_type: Any = None
    ref_id: Any = None
    blk_id: Any = None
    name: Any = None
    val: Any = None
    is_other: Any = None
    present: tuple[str, ...] = OTHER_GROUP_KEYS

    def to_dict(self) -> dict[str, Any]:
        return {key: getattr(self, key) for key in OTHER_GROUP_KEYS if key in self.present}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> OtherGroupEntry:
        present = tuple(key for key in OTHER_GROUP_KEYS if key in data)
        return cls(**{key: data[key] for key in present}, present=present)


@dataclass
class FilterGroup:
    """A group whose members are selected by user-authored rules."""

    name: str
    ref_id: str | None = None
    rules: list[Rule] = field(default_factory=list)

    type = FILTER

    @property
    def dynamic_groups(self) -> list[DynamicGroup]:
        return []


@dataclass
class CategorizeGroup:
    """A group the server splits into one dynamic group per observed value."""

    name: str
    ref_id: str | None = None
    dynamic_groups: list[DynamicGroup] = field(default_factory=list)

    type = CATEGORIZE

    @property
    def rules(self) -> list[Rule]:
        return []


Group = Union[FilterGroup, CategorizeGroup]


@dataclass
class Perspective:
    """Root of the configuration model."""

    name: str
    include_in_reports: bool = False
    groups: list[Group] = field(default_factory=list)
    other_groups: list[OtherGroupEntry] = field(default_factory=list)
    # Ids used by earlier versions of this perspective; never sent to the server.
    reserved_ref_ids: list[str] = field(default_factory=list)

    def group_index(self) -> dict[str, Group]:
        """Build a ``ref_id`` -> group lookup table for groups that have one."""
        return {g.ref_id: g for g in self.groups if g.ref_id}

    def get_group(self, name: str) -> Group | None:
        for group in self.groups:
            if group.name == name:
                return group
        return None

    def all_ref_ids(self) -> set[str]:
        """Every identifier appearing anywhere in the document."""
        ids: set[str] = set()
        for group in self.groups:
            if group.ref_id:
                ids.add(group.ref_id)
            for dynamic in group.dynamic_groups:
                if dynamic.ref_id:
                    ids.add(str(dynamic.ref_id))
        for entry in self.other_groups:
            for value in (entry.ref_id, entry.blk_id):
                if value is not None and value != "":
                    ids.add(str(value))
        return ids


def make_group(
    type_: str,
    name: str,
    ref_id: str | None = None,
    rules: list[Rule] | None = None,
    dynamic_groups: list[DynamicGroup] | None = None,
) -> Group:
    """Build the group variant selected by ``type_``.

    Raises:
        ValueError: For an unknown group type.
    """
    if type_ == FILTER:
        return FilterGroup(name=name, ref_id=ref_id, rules=list(rules or []))
    if type_ == CATEGORIZE:
        return CategorizeGroup(
            name=name, ref_id=ref_id, dynamic_groups=list(dynamic_groups or [])
        )
    raise ValueError(f"Unknown group type '{type_}', expected one of {', '.join(GROUP_TYPES)}")
