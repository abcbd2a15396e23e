"""Plan engine.

Compares the stored copy of a perspective with the desired definition and
produces the list of changes an update would make. Only user-authored content
is compared; ids, dynamic groups and other-group entries are server owned.
"""

from __future__ import annotations

from cloudhealth_perspectives.model.types import FilterGroup, Group, Perspective
from cloudhealth_perspectives.plan.types import (
    AddGroup,
    Change,
    ChangeGroup,
    CreatePerspective,
    RemoveGroup,
    RenamePerspective,
    ReorderGroups,
    SetIncludeInReports,
)


def compute_plan(current: Perspective | None, desired: Perspective) -> list[Change]:
    """Compute the ordered list of changes to go from current to desired.

    Args:
        current: Last-known server copy, or None if the perspective is new.
        desired: Perspective built from the definition file.

    Returns:
        Ordered list of changes; empty when nothing would change.
    """
    if current is None:
        return [CreatePerspective(name=desired.name, group_count=len(desired.groups))]

    changes: list[Change] = []

    # 1. Top-level attributes
    if current.name != desired.name:
        changes.append(RenamePerspective(old_name=current.name, new_name=desired.name))
    if current.include_in_reports != desired.include_in_reports:
        changes.append(SetIncludeInReports(value=desired.include_in_reports))

    # 2. Match groups: explicit ref_id first, then name
    matches = _match_groups(current, desired)
    matched_current = {id(c) for c in matches.values()}

    for position, group in enumerate(desired.groups):
        old = matches.get(id(group))
        if old is None:
            changes.append(AddGroup(name=group.name, group_type=group.type, position=position))
            continue
        change = _compare_group(old, group)
        if change is not None:
            changes.append(change)

    # 3. Removed groups
    for group in current.groups:
        if id(group) not in matched_current:
            changes.append(RemoveGroup(name=group.name, ref_id=group.ref_id or ""))

    # 4. Order of groups present in both versions
    current_order = [id(g) for g in current.groups if id(g) in matched_current]
    desired_order = [id(matches[id(g)]) for g in desired.groups if id(g) in matches]
    if current_order != desired_order:
        changes.append(ReorderGroups(order=[g.name for g in desired.groups]))

    return changes


def _match_groups(current: Perspective, desired: Perspective) -> dict[int, Group]:
    """Map ``id(desired_group)`` to the current group it is a version of."""
    by_ref = current.group_index()
    claimed: set[int] = set()
    matches: dict[int, Group] = {}

    for group in desired.groups:
        if group.ref_id and group.ref_id in by_ref:
            matches[id(group)] = by_ref[group.ref_id]
            claimed.add(id(by_ref[group.ref_id]))

    for group in desired.groups:
        if id(group) in matches or group.ref_id:
            continue
        for candidate in current.groups:
            if id(candidate) not in claimed and candidate.name == group.name:
                matches[id(group)] = candidate
                claimed.add(id(candidate))
                break
    return matches


def _compare_group(old: Group, new: Group) -> ChangeGroup | None:
    renamed = old.name != new.name
    retyped = old.type != new.type
    rules_changed = (
        isinstance(old, FilterGroup) and isinstance(new, FilterGroup) and old.rules != new.rules
    )
    if not (renamed or retyped or rules_changed):
        return None
    return ChangeGroup(
        ref_id=old.ref_id or "",
        name=new.name,
        old_name=old.name if renamed else None,
        old_type=old.type if retyped else None,
        new_type=new.type if retyped else None,
        rules_changed=rules_changed,
    )
