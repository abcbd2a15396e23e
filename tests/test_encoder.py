"""Tests for encoding the configuration model to the server JSON shape."""

import json

import pytest

from cloudhealth_perspectives.codec import encode, to_wire
from cloudhealth_perspectives.errors import MalformedConfig
from cloudhealth_perspectives.model import (
    CategorizeGroup,
    Condition,
    DynamicGroup,
    FilterGroup,
    OtherGroupEntry,
    Perspective,
    Rule,
)


def _team_perspective() -> Perspective:
    return Perspective(
        name="Cost by Team",
        include_in_reports=True,
        groups=[
            FilterGroup(
                name="Team",
                rules=[
                    Rule(
                        asset="Instance",
                        conditions=[Condition(fields=["tag", "Team"], op="=", val="infra")],
                    )
                ],
            )
        ],
    )


class TestNewPerspective:
    def test_assigns_ref_id_and_empty_other_group(self):
        doc = json.loads(encode(_team_perspective()))
        assert doc["name"] == "Cost by Team"
        assert doc["include_in_reports"] is True
        assert doc["other_group"] == []
        [group] = doc["group"]
        assert group["name"] == "Team"
        assert group["type"] == "filter"
        assert group["ref_id"] == "00001"

    def test_rule_and_condition_shape(self):
        doc = json.loads(encode(_team_perspective()))
        assert doc["group"][0]["rule"] == [
            {
                "asset": "Instance",
                "condition": [{"field": ["tag", "Team"], "op": "=", "val": "infra"}],
            }
        ]

    def test_assigned_ids_written_back_to_model(self):
        perspective = _team_perspective()
        encode(perspective)
        assert perspective.groups[0].ref_id == "00001"

    def test_returns_bytes(self):
        assert isinstance(encode(_team_perspective()), bytes)


class TestRefIdStability:
    def test_existing_ids_preserved(self):
        perspective = Perspective(
            name="P",
            groups=[
                FilterGroup(name="A", ref_id="00007"),
                FilterGroup(name="B"),
                FilterGroup(name="C", ref_id="00003"),
            ],
        )
        doc = json.loads(encode(perspective))
        assert [g["ref_id"] for g in doc["group"]] == ["00007", "00008", "00003"]

    def test_new_ids_skip_other_group_ids(self):
        perspective = Perspective(
            name="P",
            groups=[FilterGroup(name="A", ref_id="00002"), FilterGroup(name="B")],
            other_groups=[OtherGroupEntry.from_dict({"ref_id": "00005", "blk_id": "00002"})],
        )
        encode(perspective)
        assert perspective.groups[1].ref_id == "00006"

    def test_reserved_ids_never_reallocated(self):
        perspective = Perspective(
            name="P",
            groups=[FilterGroup(name="New")],
            reserved_ref_ids=["00001", "00002"],
        )
        encode(perspective)
        assert perspective.groups[0].ref_id == "00003"

    def test_server_numeric_ids_continue_sequence(self):
        perspective = Perspective(
            name="P",
            groups=[FilterGroup(name="A", ref_id="2267742314003"), FilterGroup(name="B")],
        )
        encode(perspective)
        assert perspective.groups[1].ref_id == "2267742314004"

    def test_re_encode_is_byte_identical(self):
        perspective = _team_perspective()
        first = encode(perspective)
        second = encode(perspective)
        assert first == second


class TestTypeExclusivity:
    def test_categorize_group_emits_no_rules_or_dynamic_groups(self):
        perspective = Perspective(
            name="P",
            groups=[
                CategorizeGroup(
                    name="Env",
                    ref_id="00001",
                    dynamic_groups=[DynamicGroup(ref_id="00009", name="prod", val="prod")],
                )
            ],
        )
        group = json.loads(encode(perspective))["group"][0]
        assert group == {"name": "Env", "ref_id": "00001", "type": "categorize"}

    def test_filter_group_emits_no_dynamic_groups(self):
        group = json.loads(encode(_team_perspective()))["group"][0]
        assert "dynamic_group" not in group


class TestOmission:
    def test_empty_sequences_omitted(self):
        perspective = Perspective(
            name="P",
            groups=[FilterGroup(name="Empty", ref_id="00001"), FilterGroup(name="Bare", rules=[Rule(asset="AwsAsset")])],
        )
        doc = to_wire(perspective)
        assert "rule" not in doc["group"][0]
        assert doc["group"][1]["rule"] == [{"asset": "AwsAsset"}]

    def test_condition_default_op_is_emitted(self):
        rule = Rule(asset="AwsInstance", combine_with="OR", tag_fields=["team"], conditions=[Condition(tag_fields=["team"])])
        perspective = Perspective(name="P", groups=[FilterGroup(name="G", ref_id="1", rules=[rule])])
        [wire_rule] = to_wire(perspective)["group"][0]["rule"]
        assert wire_rule == {
            "asset": "AwsInstance",
            "tag_field": ["team"],
            "combine_with": "OR",
            "condition": [{"tag_field": ["team"], "op": "="}],
        }


class TestOtherGroupPassthrough:
    def test_entries_reproduced_unchanged(self):
        raw = {"constant_type": "Static Group", "ref_id": "9", "blk_id": "1", "name": "Other", "is_other": "true"}
        perspective = Perspective(
            name="P",
            groups=[FilterGroup(name="A", ref_id="1")],
            other_groups=[OtherGroupEntry.from_dict(raw)],
        )
        doc = json.loads(encode(perspective))
        assert doc["other_group"] == [raw]


class TestMalformedConfig:
    def test_rule_without_asset(self):
        perspective = Perspective(
            name="P",
            groups=[FilterGroup(name="A"), FilterGroup(name="B", rules=[Rule(asset="X"), Rule(asset="")])],
        )
        with pytest.raises(MalformedConfig) as exc_info:
            encode(perspective)
        assert exc_info.value.path == "group[1].rule[1].asset"

    def test_failed_encode_leaves_model_untouched(self):
        perspective = Perspective(name="P", groups=[FilterGroup(name="A", rules=[Rule(asset="")])])
        with pytest.raises(MalformedConfig):
            encode(perspective)
        assert perspective.groups[0].ref_id is None

    def test_duplicate_ref_ids(self):
        perspective = Perspective(
            name="P",
            groups=[FilterGroup(name="A", ref_id="5"), FilterGroup(name="B", ref_id="5")],
        )
        with pytest.raises(MalformedConfig, match="Duplicate ref_id"):
            encode(perspective)

    def test_unresolvable_blk_id(self):
        perspective = Perspective(
            name="P",
            groups=[FilterGroup(name="A", ref_id="1")],
            other_groups=[OtherGroupEntry.from_dict({"ref_id": "9", "blk_id": "2"})],
        )
        with pytest.raises(MalformedConfig) as exc_info:
            encode(perspective)
        assert exc_info.value.path == "other_group[0].blk_id"
        assert exc_info.value.value == "2"

    def test_missing_group_name(self):
        with pytest.raises(MalformedConfig, match="Group name"):
            encode(Perspective(name="P", groups=[FilterGroup(name="")]))

    def test_missing_perspective_name(self):
        with pytest.raises(MalformedConfig):
            encode(Perspective(name=""))
