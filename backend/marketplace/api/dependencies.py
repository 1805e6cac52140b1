"""Request Dependencies - resolves the calling Subject from a session token.

Invariants:
    - Token read from "Authorization: Bearer <token>" first, then the session cookie
    - Only unexpired auth_sessions rows resolve to a Subject
    - The stored role string is passed through unvalidated; the permission engine
      treats unknown roles as no access
    - get_current_subject raises AuthenticationRequiredError (401), never 403

Design Decisions:
    - Session issuance (login) lives elsewhere; this module only looks sessions up
"""

import logging
from datetime import datetime, timezone

from fastapi import Depends, Request
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.config import get_settings
from marketplace.core.errors import AuthenticationRequiredError
from marketplace.core.principals import Subject
from marketplace.infrastructure.database import get_db
from marketplace.models.auth_session import AuthSession
from marketplace.models.user import User

logger = logging.getLogger(__name__)


def extract_session_token(request: Request) -> str | None:
    """Bearer token if present, else the session cookie."""
    auth = request.headers.get("authorization")
    if auth and auth.lower().startswith("bearer "):
        token = auth.split(" ", 1)[1].strip()
        if token:
            return token
    return request.cookies.get(get_settings().session_cookie_name) or None


async def load_subject(db: AsyncSession, token: str) -> Subject | None:
    """Subject for an unexpired session token, None otherwise."""
    result = await db.execute(
        select(User.id, User.role)
        .join(AuthSession, AuthSession.user_id == User.id)
        .where(AuthSession.session_token == token)
        .where(AuthSession.expires_at > datetime.now(timezone.utc)),
    )
    row = result.first()
    if row is None:
        return None
    return Subject(id=str(row.id), role=row.role)


async def get_optional_subject(
    request: Request, db: AsyncSession = Depends(get_db),
) -> Subject | None:
    """Subject for the request, or None when there is no valid session."""
    token = extract_session_token(request)
    if not token:
        return None
    subject = await load_subject(db, token)
    if subject is None:
        logger.info(
            "Session token rejected", extra={"path": request.url.path},
        )
    return subject


async def get_current_subject(
    subject: Subject | None = Depends(get_optional_subject),
) -> Subject:
    """Subject for the request; 401 when unauthenticated."""
    if subject is None:
        raise AuthenticationRequiredError()
    return subject
