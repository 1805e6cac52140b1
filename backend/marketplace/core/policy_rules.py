"""Policy Rules - the tagged variant stored in every policy table cell.

Invariants:
    - A Rule is exactly one of Allow, Deny, OwnerCheck
    - evaluate_rule never raises for a well-formed Rule; anything else is a deny
    - Ownership requires non-empty identifiers on BOTH sides and value equality

Design Decisions:
    - Frozen dataclasses + match/case instead of mixing booleans and callables
      in one mapping
    - OwnerCheck records the projection type it accepts, so an item projection
      can never satisfy a category rule
"""

from dataclasses import dataclass
from typing import Callable

from marketplace.core.principals import (
    OWNERSHIP_PROJECTIONS,
    OwnedResource,
    Subject,
)
from marketplace.core.domain_types import ResourceKind


OwnershipPredicate = Callable[[Subject, OwnedResource], bool]


@dataclass(frozen=True, slots=True)
class Allow:
    """Always allow for this role/kind/action."""


@dataclass(frozen=True, slots=True)
class Deny:
    """Always deny for this role/kind/action."""


@dataclass(frozen=True, slots=True)
class OwnerCheck:
    """Allow only when the predicate holds for (subject, projection)."""
    predicate: OwnershipPredicate
    projection: type


Rule = Allow | Deny | OwnerCheck

ALLOW = Allow()
DENY = Deny()


def is_owner(subject: Subject, resource: OwnedResource) -> bool:
    """True when subject.id and resource.owner_id are both set and equal."""
    if subject is None or resource is None:
        return False
    owner_id = getattr(resource, "owner_id", None)
    subject_id = getattr(subject, "id", None)
    if not owner_id or not subject_id:
        return False
    return subject_id == owner_id


def owner_check(kind: ResourceKind) -> OwnerCheck:
    """Ownership rule bound to the projection type of `kind`."""
    return OwnerCheck(predicate=is_owner, projection=OWNERSHIP_PROJECTIONS[kind])


def evaluate_rule(
    rule: Rule, subject: Subject, instance: OwnedResource | None = None,
) -> bool:
    """Resolve a single rule. The instance is only consulted by OwnerCheck."""
    match rule:
        case Allow():
            return True
        case OwnerCheck(predicate=predicate, projection=projection):
            if instance is None or not isinstance(instance, projection):
                return False
            return bool(predicate(subject, instance))
        case _:
            return False
