"""Configuration model for perspectives: groups, rules, conditions."""

from cloudhealth_perspectives.model.merge import merge_computed
from cloudhealth_perspectives.model.types import (
    CATEGORIZE,
    DEFAULT_OP,
    FILTER,
    GROUP_TYPES,
    CategorizeGroup,
    Condition,
    DynamicGroup,
    FilterGroup,
    Group,
    OtherGroupEntry,
    Perspective,
    Rule,
    make_group,
)

__all__ = [
    "CATEGORIZE",
    "DEFAULT_OP",
    "FILTER",
    "GROUP_TYPES",
    "CategorizeGroup",
    "Condition",
    "DynamicGroup",
    "FilterGroup",
    "Group",
    "OtherGroupEntry",
    "Perspective",
    "Rule",
    "make_group",
    "merge_computed",
]
