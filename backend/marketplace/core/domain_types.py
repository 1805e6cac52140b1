"""Domain Types - rich types that replace bare primitives across the codebase.

Invariants:
    - Role, ResourceKind and Action are closed enumerations
    - Every ownership-scoped Action ("...:OWN") has exactly one generic counterpart

Design Decisions:
    - str Enums: serialize to JSON and compare equal to their raw values
    - ResourceKind.noun and Action.verb hold the wording of permission messages
"""

from enum import Enum


# ─── Access Control ──────────────────────────────────────────────

class Role(str, Enum):
    """Subject roles. Anything outside this set has no access."""
    USER = "USER"
    ADMIN = "ADMIN"
    BLOCKED = "BLOCKED"


class ResourceKind(str, Enum):
    """Protected resource categories."""
    ITEM = "ITEM"
    CATEGORY = "CATEGORY"

    @property
    def noun(self) -> str:
        """User-facing noun: "item" or "item categories"."""
        return _NOUNS[self]


class Action(str, Enum):
    """Operations on a resource. ':OWN' variants need a resource projection."""
    VIEW = "VIEW"
    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    VIEW_OWN = "VIEW:OWN"
    UPDATE_OWN = "UPDATE:OWN"
    DELETE_OWN = "DELETE:OWN"

    @property
    def is_ownership_scoped(self) -> bool:
        return self.value.endswith(":OWN")

    @property
    def generic(self) -> "Action":
        """UPDATE:OWN -> UPDATE. Generic actions map to themselves."""
        return Action(self.value.split(":", 1)[0])

    @property
    def verb(self) -> str:
        return self.generic.value.lower()


_NOUNS = {
    ResourceKind.ITEM: "item",
    ResourceKind.CATEGORY: "item categories",
}


# ─── Catalog ─────────────────────────────────────────────────────

class ItemCondition(str, Enum):
    """Physical condition of a listed item."""
    NEW = "NEW"
    USED = "USED"
    REFURBISHED = "REFURBISHED"
    DAMAGED = "DAMAGED"
