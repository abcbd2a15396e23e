"""Build the outbound perspective JSON document from the configuration model."""

from __future__ import annotations

import json
from typing import Any

from cloudhealth_perspectives.codec.refs import assign_ref_ids
from cloudhealth_perspectives.errors import MalformedConfig
from cloudhealth_perspectives.model.types import (
    CategorizeGroup,
    Condition,
    FilterGroup,
    Group,
    Perspective,
    Rule,
)


def encode(perspective: Perspective) -> bytes:
    """Serialize a perspective to the server's JSON shape.

    Groups without a ``ref_id`` are assigned one, in place, so the caller can
    persist it. Nothing is modified when validation fails.

    Raises:
        MalformedConfig: If the model violates a structural invariant.
    """
    _check(perspective)
    assign_ref_ids(perspective)
    doc = to_wire(perspective)
    return json.dumps(doc, ensure_ascii=False).encode("utf-8")


def to_wire(perspective: Perspective) -> dict[str, Any]:
    """Build the wire document as a plain dict. Groups must already have ids."""
    return {
        "name": perspective.name,
        "include_in_reports": perspective.include_in_reports,
        "group": [_group_to_wire(g) for g in perspective.groups],
        "other_group": [entry.to_dict() for entry in perspective.other_groups],
    }


def _group_to_wire(group: Group) -> dict[str, Any]:
    d: dict[str, Any] = {
        "name": group.name,
        "ref_id": group.ref_id,
        "type": group.type,
    }
    # Dynamic groups are server computed and categorize groups carry no rules.
    if isinstance(group, FilterGroup) and group.rules:
        d["rule"] = [_rule_to_wire(r) for r in group.rules]
    return d


def _rule_to_wire(rule: Rule) -> dict[str, Any]:
    d: dict[str, Any] = {"asset": rule.asset}
    if rule.tag_fields:
        d["tag_field"] = list(rule.tag_fields)
    if rule.fields:
        d["field"] = list(rule.fields)
    if rule.combine_with:
        d["combine_with"] = rule.combine_with
    if rule.conditions:
        d["condition"] = [_condition_to_wire(c) for c in rule.conditions]
    return d


def _condition_to_wire(condition: Condition) -> dict[str, Any]:
    d: dict[str, Any] = {}
    if condition.tag_fields:
        d["tag_field"] = list(condition.tag_fields)
    if condition.fields:
        d["field"] = list(condition.fields)
    d["op"] = condition.op
    if condition.val is not None:
        d["val"] = condition.val
    return d


def _check(perspective: Perspective) -> None:
    """Validate everything encode relies on before touching the model."""
    if not perspective.name:
        raise MalformedConfig("Perspective name is required", path="name")

    ref_ids: dict[str, int] = {}
    for index, group in enumerate(perspective.groups):
        path = f"group[{index}]"
        if not isinstance(group, (FilterGroup, CategorizeGroup)):
            raise MalformedConfig("Not a filter or categorize group", path=path, value=group)
        if not group.name:
            raise MalformedConfig("Group name is required", path=f"{path}.name")
        if group.ref_id:
            if group.ref_id in ref_ids:
                raise MalformedConfig(
                    f"Duplicate ref_id shared with group[{ref_ids[group.ref_id]}]",
                    path=f"{path}.ref_id",
                    value=group.ref_id,
                )
            ref_ids[group.ref_id] = index
        if isinstance(group, FilterGroup):
            for rule_index, rule in enumerate(group.rules):
                if not rule.asset:
                    raise MalformedConfig(
                        "Rule asset is required",
                        path=f"{path}.rule[{rule_index}].asset",
                        value=rule.asset,
                    )

    for index, entry in enumerate(perspective.other_groups):
        if entry.blk_id in (None, ""):
            continue
        if str(entry.blk_id) not in ref_ids:
            raise MalformedConfig(
                "blk_id does not reference any group",
                path=f"other_group[{index}].blk_id",
                value=entry.blk_id,
            )
