"""Parse the server's perspective JSON back into the configuration model."""

from __future__ import annotations

import json
import logging
from typing import Any

from cloudhealth_perspectives.errors import UnparseableResponse
from cloudhealth_perspectives.model.types import (
    CATEGORIZE,
    DEFAULT_OP,
    FILTER,
    CategorizeGroup,
    Condition,
    DynamicGroup,
    FilterGroup,
    Group,
    OtherGroupEntry,
    Perspective,
    Rule,
)

logger = logging.getLogger(__name__)


def decode(data: bytes | str) -> Perspective:
    """Parse a server document into a ``Perspective``.

    Order of groups, rules, and conditions is kept exactly as received.

    Raises:
        UnparseableResponse: If the payload is not a well-formed perspective.
    """
    try:
        doc = json.loads(data)
    except (TypeError, ValueError) as exc:
        raise UnparseableResponse(f"Response is not valid JSON: {exc}") from exc
    return from_wire(doc)


def from_wire(doc: Any) -> Perspective:
    """Build a ``Perspective`` from an already-parsed wire document."""
    if not isinstance(doc, dict):
        raise UnparseableResponse("Expected a JSON object", value=type(doc).__name__)

    name = doc.get("name")
    if not isinstance(name, str) or not name:
        raise UnparseableResponse("Missing required key", path="name", value=name)

    raw_groups = doc["group"] if "group" in doc else doc.get("groups")
    groups = [
        _parse_group(g, f"group[{i}]") for i, g in enumerate(_list(raw_groups, "group"))
    ]

    ref_ids: set[str] = set()
    for index, group in enumerate(groups):
        if not group.ref_id:
            continue
        if group.ref_id in ref_ids:
            raise UnparseableResponse(
                "Duplicate ref_id", path=f"group[{index}].ref_id", value=group.ref_id
            )
        ref_ids.add(group.ref_id)

    other_groups: list[OtherGroupEntry] = []
    for index, raw in enumerate(_list(doc.get("other_group"), "other_group")):
        path = f"other_group[{index}]"
        _require_object(raw, path)
        for key, value in raw.items():
            if isinstance(value, (dict, list)):
                raise UnparseableResponse("Expected a scalar", path=f"{path}.{key}", value=value)
        entry = OtherGroupEntry.from_dict(raw)
        if entry.blk_id not in (None, "") and str(entry.blk_id) not in ref_ids:
            raise UnparseableResponse(
                "blk_id does not reference any group", path=f"{path}.blk_id", value=entry.blk_id
            )
        other_groups.append(entry)

    return Perspective(
        name=name,
        include_in_reports=_parse_bool(doc.get("include_in_reports", False), "include_in_reports"),
        groups=groups,
        other_groups=other_groups,
    )


def _parse_group(raw: Any, path: str) -> Group:
    _require_object(raw, path)
    name = _str(raw.get("name"), f"{path}.name")
    if name is None:
        raise UnparseableResponse("Missing required key", path=f"{path}.name")
    ref_id = _str(raw.get("ref_id"), f"{path}.ref_id")
    group_type = raw.get("type") or FILTER

    if group_type == FILTER:
        rules = [
            _parse_rule(r, f"{path}.rule[{i}]")
            for i, r in enumerate(_list(raw.get("rule"), f"{path}.rule"))
        ]
        return FilterGroup(name=name, ref_id=ref_id, rules=rules)

    if group_type == CATEGORIZE:
        if raw.get("rule"):
            logger.warning("Ignoring rules on categorize group '%s'", name)
        dynamic_groups = []
        for i, d in enumerate(_list(raw.get("dynamic_group"), f"{path}.dynamic_group")):
            dyn_path = f"{path}.dynamic_group[{i}]"
            _require_object(d, dyn_path)
            dynamic_groups.append(
                DynamicGroup(
                    ref_id=_str(d.get("ref_id"), f"{dyn_path}.ref_id"),
                    name=_str(d.get("name"), f"{dyn_path}.name"),
                    val=_str(d.get("val"), f"{dyn_path}.val"),
                )
            )
        return CategorizeGroup(name=name, ref_id=ref_id, dynamic_groups=dynamic_groups)

    raise UnparseableResponse("Unknown group type", path=f"{path}.type", value=group_type)


def _parse_rule(raw: Any, path: str) -> Rule:
    _require_object(raw, path)
    asset = raw.get("asset")
    if not isinstance(asset, str) or not asset:
        raise UnparseableResponse("Rule is missing asset", path=f"{path}.asset", value=asset)
    conditions = [
        _parse_condition(c, f"{path}.condition[{i}]")
        for i, c in enumerate(_list(raw.get("condition"), f"{path}.condition"))
    ]
    return Rule(
        asset=asset,
        tag_fields=_str_list(raw.get("tag_field"), f"{path}.tag_field"),
        fields=_str_list(raw.get("field"), f"{path}.field"),
        combine_with=_str(raw.get("combine_with"), f"{path}.combine_with") or None,
        conditions=conditions,
    )


def _parse_condition(raw: Any, path: str) -> Condition:
    _require_object(raw, path)
    return Condition(
        tag_fields=_str_list(raw.get("tag_field"), f"{path}.tag_field"),
        fields=_str_list(raw.get("field"), f"{path}.field"),
        op=_str(raw.get("op"), f"{path}.op") or DEFAULT_OP,
        val=_str(raw.get("val"), f"{path}.val"),
    )


# ---------------------------------------------------------------------------
# Type coercion helpers
# ---------------------------------------------------------------------------


def _require_object(value: Any, path: str) -> None:
    if not isinstance(value, dict):
        raise UnparseableResponse("Expected a JSON object", path=path, value=value)


def _list(value: Any, path: str) -> list:
    """Absent and null are both an empty list."""
    if value is None:
        return []
    if not isinstance(value, list):
        raise UnparseableResponse("Expected a JSON array", path=path, value=value)
    return value


def _str(value: Any, path: str) -> str | None:
    """Accept strings and numbers; the API is loose about numeric ids."""
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (str, int, float)):
        raise UnparseableResponse("Expected a string", path=path, value=value)
    return str(value)


def _str_list(value: Any, path: str) -> list[str]:
    items = _list(value, path)
    result = []
    for index, item in enumerate(items):
        if not isinstance(item, str):
            raise UnparseableResponse("Expected a string", path=f"{path}[{index}]", value=item)
        result.append(item)
    return result


def _parse_bool(value: Any, path: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.lower() in ("true", "false"):
        return value.lower() == "true"
    raise UnparseableResponse("Expected a boolean", path=path, value=value)
