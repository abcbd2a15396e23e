"""Merge freshly loaded user intent with server-computed fields.

A definition file only holds what the user authored. Before it is sent back
to the server it picks up, from the last stored copy of the same perspective:

- the ``ref_id`` of each group it matches (same name and type),
- the dynamic groups of matched categorize groups,
- the other-group entries whose ``blk_id`` still points at a group,
- every id the stored copy used, so retired ids are never reallocated.
"""

from __future__ import annotations

import copy
import logging

from cloudhealth_perspectives.model.types import CategorizeGroup, Group, Perspective

logger = logging.getLogger(__name__)


def merge_computed(intent: Perspective, stored: Perspective | None) -> Perspective:
    """Return a copy of ``intent`` enriched with computed fields from ``stored``.

    Neither argument is modified.
    """
    merged = copy.deepcopy(intent)
    if stored is None:
        return merged

    taken = {g.ref_id for g in merged.groups if g.ref_id}
    stored_groups = [g for g in stored.groups if g.ref_id]

    for group in merged.groups:
        match = _find_match(group, stored_groups, taken)
        if match is None:
            continue
        if not group.ref_id:
            group.ref_id = match.ref_id
            taken.add(match.ref_id)
            logger.debug("Group '%s' keeps ref_id %s", group.name, match.ref_id)
        if isinstance(group, CategorizeGroup) and isinstance(match, CategorizeGroup):
            group.dynamic_groups = copy.deepcopy(match.dynamic_groups)

    ref_ids = {g.ref_id for g in merged.groups if g.ref_id}
    other_groups = []
    for entry in stored.other_groups:
        if entry.blk_id not in (None, "") and str(entry.blk_id) not in ref_ids:
            logger.warning(
                "Dropping other-group entry %s: group %s no longer exists",
                entry.ref_id,
                entry.blk_id,
            )
            continue
        other_groups.append(copy.deepcopy(entry))
    merged.other_groups = other_groups

    reserved = set(stored.reserved_ref_ids) | stored.all_ref_ids() | set(intent.reserved_ref_ids)
    merged.reserved_ref_ids = sorted(reserved)
    return merged


def _find_match(group: Group, candidates: list[Group], taken: set[str]) -> Group | None:
    """Find the stored group that ``group`` is a later version of.

    A group that already carries a ``ref_id`` matches the stored group with
    that id; otherwise the first unclaimed stored group with the same name and
    type matches.
    """
    if group.ref_id:
        for candidate in candidates:
            if candidate.ref_id == group.ref_id and candidate.type == group.type:
                return candidate
        return None
    for candidate in candidates:
        if candidate.ref_id in taken:
            continue
        if candidate.name == group.name and candidate.type == group.type:
            return candidate
    return None
