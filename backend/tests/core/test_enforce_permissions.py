"""Permission Enforcement - pure tests for authorize and friends.

Tests cover:
    - The generic-action matrix for every role and resource kind
    - Ownership-scoped actions: owner, third party, missing ids, wrong projection
    - Fail-closed behaviour for unknown roles, kinds, actions and None subjects
    - authorize_owner_or_any and granted_actions
"""

import pytest

from marketplace.core.domain_types import Action, ResourceKind, Role
from marketplace.core.enforce_permissions import (
    authorize, authorize_owner_or_any, granted_actions,
)
from marketplace.core.policy_rules import ALLOW, owner_check
from marketplace.core.policy_table import build_policy_table
from marketplace.core.principals import CategoryOwnership, ItemOwnership, Subject

ADMIN = Subject(id="admin-1", role=Role.ADMIN)
ALICE = Subject(id="alice", role=Role.USER)
BOB = Subject(id="bob", role=Role.USER)
BLOCKED = Subject(id="blocked-1", role=Role.BLOCKED)

ITEM, CATEGORY = ResourceKind.ITEM, ResourceKind.CATEGORY
GENERIC = (Action.VIEW, Action.CREATE, Action.UPDATE, Action.DELETE)


# --- Generic action matrix ------------------------------------------------------

@pytest.mark.parametrize("subject,kind,allowed", [
    (ADMIN, ITEM, {Action.VIEW, Action.CREATE, Action.UPDATE, Action.DELETE}),
    (ADMIN, CATEGORY, {Action.VIEW, Action.CREATE, Action.UPDATE, Action.DELETE}),
    (ALICE, ITEM, {Action.VIEW, Action.CREATE}),
    (ALICE, CATEGORY, {Action.VIEW}),
    (BLOCKED, ITEM, set()),
    (BLOCKED, CATEGORY, set()),
])
def test_generic_actions_follow_role_matrix(subject, kind, allowed):
    for action in GENERIC:
        assert authorize(subject, kind, action) is (action in allowed), action


def test_user_cannot_create_category():
    assert authorize(ALICE, CATEGORY, Action.CREATE) is False


def test_generic_action_ignores_instance():
    assert authorize(ALICE, ITEM, Action.VIEW, ItemOwnership(owner_id="bob"))
    assert not authorize(ALICE, ITEM, Action.UPDATE, ItemOwnership(owner_id="alice"))


@pytest.mark.parametrize("instance", [
    None,
    CategoryOwnership(owner_id="someone-else"),
    ItemOwnership(owner_id="z"),
])
def test_admin_category_delete_allowed_whatever_the_instance(instance):
    assert authorize(ADMIN, CATEGORY, Action.DELETE, instance) is True
    assert authorize(ADMIN, CATEGORY, "DELETE", instance) is True


# --- Ownership-scoped actions ---------------------------------------------------

@pytest.mark.parametrize("action", [Action.VIEW_OWN, Action.UPDATE_OWN, Action.DELETE_OWN])
def test_user_owner_allowed_third_party_denied(action):
    lamp = ItemOwnership(owner_id="alice")
    assert authorize(ALICE, ITEM, action, lamp)
    assert not authorize(BOB, ITEM, action, lamp)


def test_third_party_denied_on_instances_of_two_owners():
    carol = Subject(id="u3", role=Role.USER)
    for instance in (ItemOwnership(owner_id="u1"), ItemOwnership(owner_id="u2")):
        assert not authorize(carol, ITEM, Action.UPDATE_OWN, instance)
        assert not authorize_owner_or_any(carol, ITEM, Action.UPDATE_OWN, instance)


def test_own_action_without_instance_denied():
    assert not authorize(ALICE, ITEM, Action.UPDATE_OWN)


def test_own_action_with_unowned_instance_denied():
    assert not authorize(ALICE, ITEM, Action.UPDATE_OWN, ItemOwnership(owner_id=None))


def test_subject_without_id_never_owns():
    anonymous = Subject(id=None, role=Role.USER)
    assert not authorize(anonymous, ITEM, Action.DELETE_OWN, ItemOwnership(owner_id=None))
    empty = Subject(id="", role=Role.USER)
    assert not authorize(empty, ITEM, Action.DELETE_OWN, ItemOwnership(owner_id=""))


def test_wrong_projection_kind_denied():
    assert not authorize(ALICE, ITEM, Action.UPDATE_OWN, CategoryOwnership(owner_id="alice"))


def test_admin_category_own_actions():
    shelf = CategoryOwnership(owner_id="admin-1")
    assert authorize(ADMIN, CATEGORY, Action.UPDATE_OWN, shelf)
    assert not authorize(ADMIN, CATEGORY, Action.UPDATE_OWN, CategoryOwnership(owner_id="x"))


def test_user_has_no_category_own_actions():
    mine = CategoryOwnership(owner_id="alice")
    assert not authorize(ALICE, CATEGORY, Action.UPDATE_OWN, mine)


def test_blocked_owner_denied():
    own = ItemOwnership(owner_id="blocked-1")
    for action in (Action.VIEW_OWN, Action.UPDATE_OWN, Action.DELETE_OWN):
        assert not authorize(BLOCKED, ITEM, action, own)


# --- Fail closed ----------------------------------------------------------------

def test_none_subject_denied():
    assert authorize(None, ITEM, Action.VIEW) is False


@pytest.mark.parametrize("role", ["SUPERUSER", "admin", "", None, 42])
def test_unrecognised_role_denied(role):
    subject = Subject(id="x", role=role)
    for action in Action:
        assert authorize(subject, ITEM, action, ItemOwnership(owner_id="x")) is False


def test_unknown_kind_and_action_denied():
    assert authorize(ADMIN, "ORDER", Action.VIEW) is False
    assert authorize(ADMIN, ITEM, "PUBLISH") is False
    assert authorize(ADMIN, ITEM, None) is False


def test_raw_string_inputs_accepted():
    assert authorize(Subject(id="a", role="USER"), "ITEM", "CREATE") is True
    assert authorize(Subject(id="a", role="ADMIN"), "CATEGORY", "DELETE") is True
    assert authorize(
        Subject(id="a", role="USER"), "ITEM", "UPDATE:OWN", ItemOwnership(owner_id="a"),
    ) is True


def test_decisions_are_repeatable():
    lamp = ItemOwnership(owner_id="alice")
    first = [authorize(ALICE, ITEM, a, lamp) for a in Action]
    second = [authorize(ALICE, ITEM, a, lamp) for a in Action]
    assert first == second


def test_custom_table_replaces_default():
    table = build_policy_table({Role.USER: {ITEM: {
        Action.VIEW: ALLOW, Action.DELETE_OWN: owner_check(ITEM),
    }}})
    assert authorize(ALICE, ITEM, Action.VIEW, table=table)
    assert not authorize(ALICE, ITEM, Action.CREATE, table=table)
    assert not authorize(ADMIN, ITEM, Action.VIEW, table=table)


# --- authorize_owner_or_any ------------------------------------------------------

def test_owner_or_any_owner_path():
    assert authorize_owner_or_any(ALICE, ITEM, Action.UPDATE_OWN, ItemOwnership(owner_id="alice"))


def test_owner_or_any_non_owner_user_denied():
    assert not authorize_owner_or_any(BOB, ITEM, Action.UPDATE_OWN, ItemOwnership(owner_id="alice"))


def test_owner_or_any_admin_falls_back_to_generic():
    assert authorize_owner_or_any(ADMIN, ITEM, Action.DELETE_OWN, ItemOwnership(owner_id="alice"))


def test_owner_or_any_blocked_owner_denied():
    assert not authorize_owner_or_any(
        BLOCKED, ITEM, Action.DELETE_OWN, ItemOwnership(owner_id="blocked-1"),
    )


def test_owner_or_any_requires_own_action():
    assert not authorize_owner_or_any(ADMIN, ITEM, Action.UPDATE, ItemOwnership(owner_id="x"))
    assert not authorize_owner_or_any(ADMIN, ITEM, "BOGUS", None)


# --- granted_actions ------------------------------------------------------------

def test_granted_actions_for_user():
    assert granted_actions(Role.USER, ITEM) == {
        Action.VIEW, Action.CREATE,
        Action.VIEW_OWN, Action.UPDATE_OWN, Action.DELETE_OWN,
    }
    assert granted_actions("USER", "CATEGORY") == {Action.VIEW}


def test_granted_actions_for_admin_covers_everything():
    assert granted_actions(Role.ADMIN, CATEGORY) == set(Action)


def test_granted_actions_empty_for_blocked_and_unknown():
    assert granted_actions(Role.BLOCKED, ITEM) == frozenset()
    assert granted_actions("GUEST", ITEM) == frozenset()
    assert granted_actions(None, ITEM) == frozenset()
