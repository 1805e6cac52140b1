"""Policy Table - the Role -> ResourceKind -> Action -> Rule matrix.

Invariants:
    - POLICY_TABLE is built once at import and is read-only afterwards
      (nested MappingProxyType, no mutation API)
    - Any (role, kind, action) missing from the table is a deny
    - BLOCKED has no entries
    - OwnerCheck only under ':OWN' actions; Allow never under ':OWN' actions
    - A malformed table raises PolicyConfigurationError at build time

Design Decisions:
    - DEFAULT_POLICY is plain data; build_policy_table validates then freezes it,
      so tests can build alternative tables without touching the process-wide one
    - USER category mutations are listed as explicit Deny to document the decision
"""

from types import MappingProxyType
from typing import Mapping

from marketplace.core.domain_types import Action, ResourceKind, Role
from marketplace.core.errors import PolicyConfigurationError
from marketplace.core.principals import OWNERSHIP_PROJECTIONS
from marketplace.core.policy_rules import (
    ALLOW, DENY, Allow, Deny, OwnerCheck, Rule, owner_check,
)


PolicyTable = Mapping[Role, Mapping[ResourceKind, Mapping[Action, Rule]]]

_OWN_ITEM = owner_check(ResourceKind.ITEM)
_OWN_CATEGORY = owner_check(ResourceKind.CATEGORY)


DEFAULT_POLICY: dict = {
    Role.USER: {
        ResourceKind.ITEM: {
            Action.VIEW: ALLOW,
            Action.CREATE: ALLOW,
            Action.VIEW_OWN: _OWN_ITEM,
            Action.UPDATE_OWN: _OWN_ITEM,
            Action.DELETE_OWN: _OWN_ITEM,
        },
        ResourceKind.CATEGORY: {
            Action.VIEW: ALLOW,
            Action.CREATE: DENY,
            Action.UPDATE: DENY,
            Action.DELETE: DENY,
        },
    },
    Role.ADMIN: {
        ResourceKind.ITEM: {
            Action.VIEW: ALLOW,
            Action.CREATE: ALLOW,
            Action.UPDATE: ALLOW,
            Action.DELETE: ALLOW,
            Action.VIEW_OWN: _OWN_ITEM,
            Action.UPDATE_OWN: _OWN_ITEM,
            Action.DELETE_OWN: _OWN_ITEM,
        },
        ResourceKind.CATEGORY: {
            Action.VIEW: ALLOW,
            Action.CREATE: ALLOW,
            Action.UPDATE: ALLOW,
            Action.DELETE: ALLOW,
            Action.VIEW_OWN: _OWN_CATEGORY,
            Action.UPDATE_OWN: _OWN_CATEGORY,
            Action.DELETE_OWN: _OWN_CATEGORY,
        },
    },
    Role.BLOCKED: {},
}


def validate_policy_table(raw: Mapping) -> None:
    """Raise PolicyConfigurationError listing every defect in `raw`."""
    problems: list[str] = []
    for role, kinds in raw.items():
        if not isinstance(role, Role):
            problems.append(f"unknown role {role!r}")
            continue
        if not isinstance(kinds, Mapping):
            problems.append(f"{role.value}: expected a mapping of resource kinds")
            continue
        for kind, actions in kinds.items():
            if not isinstance(kind, ResourceKind):
                problems.append(f"{role.value}: unknown resource kind {kind!r}")
                continue
            if not isinstance(actions, Mapping):
                problems.append(f"{role.value}.{kind.value}: expected a mapping of actions")
                continue
            for action, rule in actions.items():
                where = f"{role.value}.{kind.value}.{getattr(action, 'value', action)}"
                problems.extend(_rule_problems(where, kind, action, rule))
    if problems:
        raise PolicyConfigurationError(problems)


def _rule_problems(where: str, kind: ResourceKind, action, rule) -> list[str]:
    if not isinstance(action, Action):
        return [f"{where}: unknown action"]
    if not isinstance(rule, (Allow, Deny, OwnerCheck)):
        return [f"{where}: {type(rule).__name__} is not a Rule"]
    if isinstance(rule, OwnerCheck):
        if not action.is_ownership_scoped:
            return [f"{where}: ownership rule on a generic action"]
        if rule.projection is not OWNERSHIP_PROJECTIONS[kind]:
            return [f"{where}: ownership rule expects {rule.projection.__name__}"]
    if isinstance(rule, Allow) and action.is_ownership_scoped:
        return [f"{where}: unconditional allow on an ownership-scoped action"]
    return []


def build_policy_table(raw: Mapping = DEFAULT_POLICY) -> PolicyTable:
    """Validate `raw` and return a read-only copy of it."""
    validate_policy_table(raw)
    return MappingProxyType({
        role: MappingProxyType({
            kind: MappingProxyType(dict(actions))
            for kind, actions in kinds.items()
        })
        for role, kinds in raw.items()
    })


POLICY_TABLE: PolicyTable = build_policy_table()
