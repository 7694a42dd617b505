"""Tests for the role hierarchy permission checks."""

import pytest
from hypothesis import given
from hypothesis import strategies as st

from src.taskrelay.models import ProjectRole
from src.taskrelay.services import role_policy

pytestmark = pytest.mark.unit

OWNER = ProjectRole.OWNER
ADMIN = ProjectRole.ADMIN
MEMBER = ProjectRole.MEMBER
VIEWER = ProjectRole.VIEWER

roles = st.sampled_from(list(ProjectRole))
non_managers = st.sampled_from([MEMBER, VIEWER])


class TestRoleOrdering:
    def test_rank_order(self):
        assert OWNER.rank > ADMIN.rank > MEMBER.rank > VIEWER.rank

    def test_outranks_and_at_least(self):
        assert OWNER.outranks(ADMIN)
        assert not ADMIN.outranks(ADMIN)
        assert ADMIN.at_least(ADMIN)
        assert not VIEWER.at_least(MEMBER)

    def test_persisted_by_name(self):
        assert ProjectRole("ADMIN") is ADMIN
        assert OWNER.value == "OWNER"


class TestCanChangeRole:
    @pytest.mark.parametrize(
        ("actor", "target", "actor_is_target", "expected"),
        [
            (OWNER, ADMIN, False, True),
            (OWNER, MEMBER, False, True),
            (OWNER, VIEWER, False, True),
            (OWNER, OWNER, True, True),
            (ADMIN, MEMBER, False, True),
            (ADMIN, VIEWER, False, True),
            (ADMIN, ADMIN, False, False),
            (ADMIN, ADMIN, True, True),
            (ADMIN, OWNER, False, False),
            (MEMBER, VIEWER, False, False),
            (MEMBER, MEMBER, True, False),
            (VIEWER, VIEWER, True, False),
        ],
    )
    def test_matrix(self, actor, target, actor_is_target, expected):
        assert role_policy.can_change_role(actor, target, actor_is_target) is expected

    @given(actor=non_managers, target=roles, actor_is_target=st.booleans())
    def test_non_managers_never_change_roles(self, actor, target, actor_is_target):
        assert role_policy.can_change_role(actor, target, actor_is_target) is False

    @given(actor=roles)
    def test_nobody_changes_someone_elses_owner_role(self, actor):
        assert role_policy.can_change_role(actor, OWNER, actor_is_target=False) is False

    @given(actor=roles, target=roles)
    def test_managers_act_only_on_lower_ranks(self, actor, target):
        expected = actor.at_least(ADMIN) and actor.rank > target.rank
        assert role_policy.can_change_role(actor, target, actor_is_target=False) is expected


class TestAvailableTargetRoles:
    def test_owner_can_assign_everything_but_current(self):
        assert role_policy.available_target_roles(OWNER, MEMBER) == {OWNER, ADMIN, VIEWER}

    def test_admin_cannot_hand_out_owner(self):
        assert role_policy.available_target_roles(ADMIN, MEMBER) == {ADMIN, VIEWER}
        assert role_policy.available_target_roles(ADMIN, ADMIN) == {MEMBER, VIEWER}

    @given(actor=roles, current=roles)
    def test_never_offers_current_role(self, actor, current):
        assert current not in role_policy.available_target_roles(actor, current)

    @given(actor=non_managers, current=roles)
    def test_empty_for_non_managers(self, actor, current):
        assert role_policy.available_target_roles(actor, current) == frozenset()

    @given(current=roles)
    def test_admin_options_are_subset_of_owner_options(self, current):
        admin_options = role_policy.available_target_roles(ADMIN, current)
        owner_options = role_policy.available_target_roles(OWNER, current)
        assert admin_options <= owner_options
        assert OWNER not in admin_options


class TestCanRemove:
    @given(actor=roles, actor_is_target=st.booleans())
    def test_owner_is_never_removable(self, actor, actor_is_target):
        assert role_policy.can_remove(actor, OWNER, actor_is_target) is False

    @given(role=st.sampled_from([ADMIN, MEMBER, VIEWER]))
    def test_anyone_but_owner_can_leave(self, role):
        assert role_policy.can_remove(role, role, actor_is_target=True) is True

    @pytest.mark.parametrize(
        ("actor", "target", "expected"),
        [
            (OWNER, ADMIN, True),
            (OWNER, MEMBER, True),
            (OWNER, VIEWER, True),
            (ADMIN, ADMIN, False),
            (ADMIN, MEMBER, True),
            (ADMIN, VIEWER, True),
            (MEMBER, VIEWER, False),
            (VIEWER, MEMBER, False),
        ],
    )
    def test_removing_others(self, actor, target, expected):
        assert role_policy.can_remove(actor, target, actor_is_target=False) is expected

    @given(target=roles)
    def test_whatever_admin_may_remove_owner_may_too(self, target):
        if role_policy.can_remove(ADMIN, target, actor_is_target=False):
            assert role_policy.can_remove(OWNER, target, actor_is_target=False)


class TestCanInviteWithRole:
    @given(actor=roles)
    def test_only_owner_invites_owners(self, actor):
        assert role_policy.can_invite_with_role(actor, OWNER) is (actor is OWNER)

    @given(actor=non_managers, role=roles)
    def test_non_managers_cannot_invite(self, actor, role):
        assert role_policy.can_invite_with_role(actor, role) is False

    @pytest.mark.parametrize("role", [ADMIN, MEMBER, VIEWER])
    def test_admin_invites_below_owner(self, role):
        assert role_policy.can_invite_with_role(ADMIN, role) is True

    @given(actor=roles)
    def test_managers_are_owner_and_admin(self, actor):
        assert role_policy.can_manage_members(actor) is actor.at_least(ADMIN)
