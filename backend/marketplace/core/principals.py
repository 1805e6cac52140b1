"""Principals and Ownership Projections - the inputs the permission engine consumes.

Invariants:
    - Subject and projections are frozen: evaluation can never mutate its inputs
    - Subject.role is kept as supplied (Role, raw str or None); the engine
      decides whether it is a recognised role
    - Exactly one projection type per ResourceKind (OWNERSHIP_PROJECTIONS)

Design Decisions:
    - Projections carry only what ownership needs (owner_id); callers build them
      from persisted records explicitly instead of handing ORM rows to the core
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Protocol

from marketplace.core.domain_types import ResourceKind, Role


@dataclass(frozen=True, slots=True)
class Subject:
    """Authenticated principal evaluated for access."""
    id: str | None
    role: Role | str | None


class OwnedResource(Protocol):
    """Structural contract shared by every ownership projection."""
    @property
    def owner_id(self) -> str | None: ...


@dataclass(frozen=True, slots=True)
class ItemOwnership:
    """Ownership projection of a persisted item."""
    owner_id: str | None


@dataclass(frozen=True, slots=True)
class CategoryOwnership:
    """Ownership projection of a persisted category."""
    owner_id: str | None


OWNERSHIP_PROJECTIONS: Mapping[ResourceKind, type] = MappingProxyType({
    ResourceKind.ITEM: ItemOwnership,
    ResourceKind.CATEGORY: CategoryOwnership,
})
