"""Reference-identifier allocation for new groups.

Ids are decimal sequence numbers, zero-padded to five digits: 00001, 00002...
Allocation starts one past the highest numeric id already reserved, so ids
never go backwards and an id retired by an earlier version of a perspective
is not handed to a different group.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from cloudhealth_perspectives.errors import MalformedConfig
from cloudhealth_perspectives.model.types import Perspective

logger = logging.getLogger(__name__)

REF_ID_WIDTH = 5


class RefIdAllocator:
    """Hands out identifiers that collide with nothing already reserved."""

    def __init__(self, reserved: Iterable[str] = ()):
        self._reserved: set[str] = {str(r) for r in reserved if r not in (None, "")}
        numeric = [int(r) for r in self._reserved if r.isascii() and r.isdigit()]
        self._next_value = max(numeric, default=0) + 1

    def next_id(self) -> str:
        """Allocate and reserve the next identifier."""
        candidate = f"{self._next_value:0{REF_ID_WIDTH}d}"
        self._next_value += 1
        if candidate in self._reserved:
            # Only reachable if reserved bookkeeping is broken.
            raise MalformedConfig("Allocated ref_id collides with an existing id", value=candidate)
        self._reserved.add(candidate)
        return candidate


def assign_ref_ids(perspective: Perspective) -> list[str]:
    """Give every group without a ``ref_id`` a fresh one, in group order.

    Existing ids are left untouched. The perspective is modified in place so
    the caller can persist the assigned ids.

    Returns:
        The newly assigned ids, in assignment order.

    Raises:
        MalformedConfig: If two groups already share a ``ref_id``.
    """
    seen: dict[str, int] = {}
    for index, group in enumerate(perspective.groups):
        if not group.ref_id:
            continue
        if group.ref_id in seen:
            raise MalformedConfig(
                f"Duplicate ref_id shared with group[{seen[group.ref_id]}]",
                path=f"group[{index}].ref_id",
                value=group.ref_id,
            )
        seen[group.ref_id] = index

    allocator = RefIdAllocator(perspective.all_ref_ids() | set(perspective.reserved_ref_ids))
    assigned: list[str] = []
    for group in perspective.groups:
        if group.ref_id:
            continue
        group.ref_id = allocator.next_id()
        assigned.append(group.ref_id)
        logger.debug("Assigned ref_id %s to group '%s'", group.ref_id, group.name)
    return assigned
