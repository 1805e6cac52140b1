"""Domain Types - verifies the closed access-control enums and their wording.

Tests:
    - Role / ResourceKind / Action have exactly the expected members
    - Every ':OWN' action maps to its generic counterpart
"""

from marketplace.core.domain_types import (
    Action, ItemCondition, ResourceKind, Role,
)


def test_role_has_three_members():
    assert {r.value for r in Role} == {"USER", "ADMIN", "BLOCKED"}


def test_resource_kinds():
    assert {k.value for k in ResourceKind} == {"ITEM", "CATEGORY"}
    assert ResourceKind.ITEM.noun == "item"
    assert ResourceKind.CATEGORY.noun == "item categories"


def test_action_values_match_wire_format():
    assert {a.value for a in Action} == {
        "VIEW", "CREATE", "UPDATE", "DELETE",
        "VIEW:OWN", "UPDATE:OWN", "DELETE:OWN",
    }


def test_enums_compare_equal_to_raw_strings():
    assert Role.ADMIN == "ADMIN"
    assert Action.UPDATE_OWN == "UPDATE:OWN"


def test_own_actions_are_ownership_scoped():
    scoped = {a for a in Action if a.is_ownership_scoped}
    assert scoped == {Action.VIEW_OWN, Action.UPDATE_OWN, Action.DELETE_OWN}


def test_generic_counterparts():
    assert Action.VIEW_OWN.generic is Action.VIEW
    assert Action.UPDATE_OWN.generic is Action.UPDATE
    assert Action.DELETE_OWN.generic is Action.DELETE
    assert Action.CREATE.generic is Action.CREATE


def test_verb_drops_ownership_suffix():
    assert Action.DELETE_OWN.verb == "delete"
    assert Action.CREATE.verb == "create"


def test_item_condition_members():
    assert ItemCondition("REFURBISHED") is ItemCondition.REFURBISHED
    assert len(ItemCondition) == 4
