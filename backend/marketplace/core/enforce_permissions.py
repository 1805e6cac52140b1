"""Permission Enforcement - decides whether a subject may perform an action.

Invariants:
    - All functions are PURE: no IO, no async, no DB, no logging, no side effects
    - Total over their inputs: unknown roles, kinds, actions and missing
      projections return False, never raise
    - Denial is a regular False; turning it into a 403 is the caller's job
    - Reads the process-wide POLICY_TABLE unless a table is passed explicitly

Design Decisions:
    - Accepts enum members or their raw string values: roles come from the
      database as plain strings and are recognised here, not upstream
    - authorize_owner_or_any captures the update/delete pattern: the owner may
      act on their own record, a role with the generic action on any record
"""

from enum import Enum
from typing import TypeVar

from marketplace.core.domain_types import Action, ResourceKind, Role
from marketplace.core.policy_rules import DENY, Deny, evaluate_rule
from marketplace.core.policy_table import POLICY_TABLE, PolicyTable
from marketplace.core.principals import OwnedResource, Subject

_E = TypeVar("_E", bound=Enum)


def authorize(
    subject: Subject | None,
    resource_kind: ResourceKind | str,
    action: Action | str,
    instance: OwnedResource | None = None,
    *,
    table: PolicyTable = POLICY_TABLE,
) -> bool:
    """Return True when `subject` may perform `action` on `resource_kind`.

    `instance` is only consulted for ownership-scoped actions.
    """
    if subject is None:
        return False
    role = _coerce(Role, getattr(subject, "role", None))
    kind = _coerce(ResourceKind, resource_kind)
    act = _coerce(Action, action)
    if role is None or kind is None or act is None:
        return False

    kinds = table.get(role)
    if not kinds:
        return False
    actions = kinds.get(kind)
    if not actions:
        return False
    rule = actions.get(act, DENY)
    return evaluate_rule(rule, subject, instance)


def authorize_owner_or_any(
    subject: Subject | None,
    resource_kind: ResourceKind | str,
    own_action: Action | str,
    instance: OwnedResource | None,
    *,
    table: PolicyTable = POLICY_TABLE,
) -> bool:
    """Allow the ':OWN' action on `instance`, or else its generic counterpart."""
    act = _coerce(Action, own_action)
    if act is None or not act.is_ownership_scoped:
        return False
    if authorize(subject, resource_kind, act, instance, table=table):
        return True
    return authorize(subject, resource_kind, act.generic, table=table)


def granted_actions(
    role: Role | str | None,
    resource_kind: ResourceKind | str,
    *,
    table: PolicyTable = POLICY_TABLE,
) -> frozenset[Action]:
    """Actions carrying a non-Deny rule for (role, kind). Ownership rules count."""
    known_role = _coerce(Role, role)
    kind = _coerce(ResourceKind, resource_kind)
    if known_role is None or kind is None:
        return frozenset()
    actions = table.get(known_role, {}).get(kind, {})
    return frozenset(
        a for a, rule in actions.items() if not isinstance(rule, Deny)
    )


def _coerce(enum_cls: type[_E], value) -> _E | None:
    """Map a member or raw value onto `enum_cls`; None when unrecognised."""
    if value is None:
        return None
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except (ValueError, TypeError):
        return None
