"""Tests for the plan engine."""

from cloudhealth_perspectives.model import (
    CategorizeGroup,
    Condition,
    FilterGroup,
    Perspective,
    Rule,
)
from cloudhealth_perspectives.plan import compute_plan
from cloudhealth_perspectives.plan.types import (
    AddGroup,
    ChangeGroup,
    CreatePerspective,
    RemoveGroup,
    RenamePerspective,
    ReorderGroups,
    SetIncludeInReports,
)


def _rule(val: str = "infra") -> Rule:
    return Rule(asset="AwsInstance", conditions=[Condition(tag_fields=["team"], val=val)])


def _current() -> Perspective:
    return Perspective(
        name="Cost by Team",
        groups=[
            FilterGroup(name="Infra", ref_id="00001", rules=[_rule()]),
            CategorizeGroup(name="Env", ref_id="00002"),
        ],
    )


class TestNoChanges:
    def test_identical_perspectives(self):
        assert compute_plan(_current(), _current()) == []

    def test_missing_ref_ids_match_by_name(self):
        desired = _current()
        for group in desired.groups:
            group.ref_id = None
        assert compute_plan(_current(), desired) == []


class TestCreate:
    def test_no_current_copy(self):
        [change] = compute_plan(None, _current())
        assert isinstance(change, CreatePerspective)
        assert change.group_count == 2
        assert change.describe() == "Create perspective 'Cost by Team' (2 groups)"


class TestTopLevel:
    def test_rename_and_reports_flag(self):
        desired = _current()
        desired.name = "Team costs"
        desired.include_in_reports = True
        changes = compute_plan(_current(), desired)
        assert changes == [
            RenamePerspective(old_name="Cost by Team", new_name="Team costs"),
            SetIncludeInReports(value=True),
        ]


class TestGroups:
    def test_add_group(self):
        desired = _current()
        desired.groups.append(FilterGroup(name="Data"))
        assert compute_plan(_current(), desired) == [
            AddGroup(name="Data", group_type="filter", position=2)
        ]

    def test_remove_group_is_destructive(self):
        desired = _current()
        desired.groups.pop()
        [change] = compute_plan(_current(), desired)
        assert isinstance(change, RemoveGroup)
        assert change.ref_id == "00002"
        assert change.destructive

    def test_rules_changed(self):
        desired = _current()
        desired.groups[0].rules = [_rule("platform")]
        [change] = compute_plan(_current(), desired)
        assert isinstance(change, ChangeGroup)
        assert change.rules_changed
        assert not change.destructive
        assert change.describe() == "Change group 'Infra': rules changed"

    def test_rename_matched_by_ref_id(self):
        desired = _current()
        desired.groups[0].name = "Infrastructure"
        [change] = compute_plan(_current(), desired)
        assert change.old_name == "Infra"
        assert change.ref_id == "00001"

    def test_type_change_is_destructive(self):
        desired = _current()
        desired.groups[1] = FilterGroup(name="Env", ref_id="00002")
        [change] = compute_plan(_current(), desired)
        assert isinstance(change, ChangeGroup)
        assert change.destructive
        assert "type categorize -> filter" in change.describe()

    def test_reorder(self):
        desired = _current()
        desired.groups.reverse()
        assert compute_plan(_current(), desired) == [ReorderGroups(order=["Env", "Infra"])]

    def test_same_name_twice_matches_once(self):
        current = Perspective(name="P", groups=[FilterGroup(name="A", ref_id="00001")])
        desired = Perspective(name="P", groups=[FilterGroup(name="A"), FilterGroup(name="A")])
        changes = compute_plan(current, desired)
        assert changes == [AddGroup(name="A", group_type="filter", position=1)]
