"""Compare a stored perspective with its definition and list the changes."""

from cloudhealth_perspectives.plan.diff import compute_plan
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

__all__ = [
    "AddGroup",
    "Change",
    "ChangeGroup",
    "CreatePerspective",
    "RemoveGroup",
    "RenamePerspective",
    "ReorderGroups",
    "SetIncludeInReports",
    "compute_plan",
]
