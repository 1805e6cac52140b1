"""Marketplace API - FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map MarketplaceError -> structured JSON responses
    - CORS configured from settings (not hardcoded)
    - Database initialized on startup via lifespan context manager
    - The policy table is built when core.policy_table is imported; a malformed
      table aborts startup with PolicyConfigurationError
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from marketplace.api.error_handlers import register_error_handlers
from marketplace.api.routes import categories, health, items
from marketplace.config import get_settings
from marketplace.core.domain_types import ResourceKind, Role
from marketplace.core.enforce_permissions import granted_actions
from marketplace.infrastructure.database import close_db, init_db
from marketplace.infrastructure.observability import setup_logging

logger = logging.getLogger(__name__)


def _log_policy_summary() -> None:
    for role in Role:
        for kind in ResourceKind:
            actions = sorted(a.value for a in granted_actions(role, kind))
            logger.info(
                f"Policy {role.value}.{kind.value}: {', '.join(actions) or 'none'}",
                extra={"role": role.value, "resource_kind": kind.value},
            )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    init_db(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    _log_policy_summary()
    logger.info("Marketplace API started")
    yield
    logger.info("Marketplace API shutting down")
    await close_db()


app = FastAPI(
    title="Marketplace API", version="1.0.0", lifespan=lifespan,
)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(items.router)
app.include_router(categories.router)

register_error_handlers(app)
