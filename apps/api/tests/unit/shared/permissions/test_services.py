"""
Tests for the pure permission checks in portal/shared/permissions/services.py
"""

import pytest
from pydantic import ValidationError

from portal.shared.permissions import (
    ALL_PERMISSIONS,
    EMPTY_PERMISSION_STATE,
    PermissionState,
    RoleSummary,
    build_permission_state,
    can,
    can_all,
    can_any,
    cannot,
    effective_permissions,
)


@pytest.fixture
def member_viewer_state() -> PermissionState:
    """Non-owner holding only member:view."""
    return PermissionState(member_id="m1", permissions=frozenset({"member:view"}))


@pytest.fixture
def owner_state() -> PermissionState:
    return PermissionState(member_id="m0", is_owner=True)


class TestCan:
    def test_held_permission(self, member_viewer_state: PermissionState):
        assert can(member_viewer_state, "member:view") is True

    def test_missing_permission(self, member_viewer_state: PermissionState):
        assert can(member_viewer_state, "role:view") is False
        assert cannot(member_viewer_state, "role:view") is True

    @pytest.mark.parametrize("permission", ALL_PERMISSIONS + ["anything:at-all", ""])
    def test_owner_passes_every_check(
        self, owner_state: PermissionState, permission: str
    ):
        assert can(owner_state, permission) is True
        assert cannot(owner_state, permission) is False

    def test_empty_state_holds_nothing(self):
        assert can(EMPTY_PERMISSION_STATE, "ticket:view") is False

    def test_matching_is_exact(self, member_viewer_state: PermissionState):
        assert can(member_viewer_state, "MEMBER:VIEW") is False
        assert can(member_viewer_state, "member") is False


class TestCanAny:
    def test_one_of_many(self, member_viewer_state: PermissionState):
        assert can_any(member_viewer_state, ["member:view", "role:view"]) is True

    def test_none_held(self, member_viewer_state: PermissionState):
        assert can_any(member_viewer_state, ["role:view", "role:edit"]) is False

    def test_empty_list_is_false(self, member_viewer_state: PermissionState):
        assert can_any(member_viewer_state, []) is False

    def test_none_is_treated_as_empty(self, member_viewer_state: PermissionState):
        assert can_any(member_viewer_state, None) is False

    def test_owner_with_empty_list(self, owner_state: PermissionState):
        assert can_any(owner_state, []) is True


class TestCanAll:
    def test_all_held(self):
        state = PermissionState(permissions=frozenset({"ticket:view", "ticket:edit"}))

        assert can_all(state, ["ticket:view", "ticket:edit"]) is True

    def test_one_missing(self, member_viewer_state: PermissionState):
        assert can_all(member_viewer_state, ["member:view", "role:view"]) is False

    def test_empty_list_is_vacuously_true(self, member_viewer_state: PermissionState):
        assert can_all(member_viewer_state, []) is True
        assert can_all(EMPTY_PERMISSION_STATE, []) is True

    def test_none_is_treated_as_empty(self, member_viewer_state: PermissionState):
        assert can_all(member_viewer_state, None) is True

    def test_owner(self, owner_state: PermissionState):
        assert can_all(owner_state, ["role:delete", "organisation:billing"]) is True

    def test_accepts_any_iterable(self, member_viewer_state: PermissionState):
        assert can_all(member_viewer_state, (p for p in ["member:view"])) is True


class TestPermissionScenario:
    """A member holding only member:view."""

    def test_scenario(self, member_viewer_state: PermissionState):
        assert can(member_viewer_state, "member:view") is True
        assert can(member_viewer_state, "role:view") is False
        assert can_any(member_viewer_state, ["member:view", "role:view"]) is True
        assert can_all(member_viewer_state, ["member:view", "role:view"]) is False


class TestBuildPermissionState:
    def test_union_of_role_and_extra_permissions(self):
        assert effective_permissions(["ticket:view"], ["report:export"]) == frozenset(
            {"ticket:view", "report:export"}
        )

    def test_overlap_is_deduplicated(self):
        assert effective_permissions(["a:b", "c:d"], ["a:b"]) == frozenset(
            {"a:b", "c:d"}
        )

    def test_missing_sources(self):
        assert effective_permissions(None, None) == frozenset()

    def test_builds_state(self):
        role = RoleSummary(id="r1", name="Agent", slug="agent")

        state = build_permission_state(
            member_id="m1",
            is_owner=False,
            role=role,
            role_permissions=["ticket:view"],
            extra_permissions=["report:export"],
        )

        assert state.member_id == "m1"
        assert state.is_owner is False
        assert state.role == role
        assert can(state, "ticket:view")
        assert can(state, "report:export")
        assert not can(state, "ticket:delete")

    def test_state_is_immutable(self):
        state = build_permission_state("m1", False, None)

        with pytest.raises(ValidationError):
            state.is_owner = True
