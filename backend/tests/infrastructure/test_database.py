"""Database Session Manager - error mapping and rollback pass-through."""

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError

from marketplace.core.errors import ConflictError, DatabaseError
from marketplace.infrastructure.database import (
    DatabaseSessionManager, to_database_error,
)


def test_integrity_error_maps_to_commit_failure():
    err = to_database_error(IntegrityError("INSERT", {}, Exception("dup")))
    assert err.operation == "commit"
    assert err.http_status == 503


def test_operational_error_maps_to_execute_failure():
    err = to_database_error(OperationalError("SELECT", {}, Exception("down")))
    assert err.operation == "execute"


def test_generic_sqlalchemy_error_maps_to_unknown():
    assert to_database_error(SQLAlchemyError("boom")).operation == "unknown"


async def test_domain_errors_pass_through_session():
    manager = DatabaseSessionManager("sqlite+aiosqlite:///:memory:")
    with pytest.raises(ConflictError):
        async with manager.session():
            raise ConflictError("Item with this slug already exists")
    await manager.dispose()


async def test_sqlalchemy_errors_become_database_error():
    manager = DatabaseSessionManager("sqlite+aiosqlite:///:memory:")
    with pytest.raises(DatabaseError) as exc_info:
        async with manager.session():
            raise OperationalError("SELECT 1", {}, Exception("locked"))
    assert "locked" not in exc_info.value.message
    await manager.dispose()


async def test_health_check_on_sqlite():
    manager = DatabaseSessionManager("sqlite+aiosqlite:///:memory:")
    assert await manager.health_check() is True
    await manager.dispose()
