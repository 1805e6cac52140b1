"""Access Guard - turns permission-engine denials into PermissionDeniedError.

Invariants:
    - Called BEFORE any write; a raised denial leaves the DB untouched
    - Every denial is logged once, at INFO, with user/role/resource/action extras
    - The engine decides; this module only reports
"""

import logging

from marketplace.core.domain_types import Action, ResourceKind
from marketplace.core.enforce_permissions import authorize, authorize_owner_or_any
from marketplace.core.errors import ErrorContext, PermissionDeniedError
from marketplace.core.principals import OwnedResource, Subject

logger = logging.getLogger(__name__)


def require_permission(
    subject: Subject | None,
    kind: ResourceKind,
    action: Action,
    instance: OwnedResource | None = None,
    resource_id: str | None = None,
) -> None:
    """Raise PermissionDeniedError unless `action` is granted."""
    if authorize(subject, kind, action, instance):
        return
    raise _denied(subject, kind, action, resource_id)


def require_owner_or_permission(
    subject: Subject | None,
    kind: ResourceKind,
    own_action: Action,
    instance: OwnedResource,
    resource_id: str | None = None,
) -> None:
    """Raise unless the subject owns `instance` or holds the generic action."""
    if authorize_owner_or_any(subject, kind, own_action, instance):
        return
    raise _denied(subject, kind, own_action.generic, resource_id)


def _denied(
    subject: Subject | None,
    kind: ResourceKind,
    action: Action,
    resource_id: str | None,
) -> PermissionDeniedError:
    user_id = subject.id if subject else None
    role = getattr(subject.role, "value", subject.role) if subject else None
    logger.info(
        f"Permission denied: {action.value} on {kind.value}",
        extra={
            "user_id": user_id,
            "role": role,
            "resource_kind": kind.value,
            "action": action.value,
            "resource_id": resource_id,
        },
    )
    return PermissionDeniedError(
        kind, action,
        ErrorContext(user_id=user_id, resource_id=resource_id),
    )
