from __future__ import annotations

import datetime as dt
from uuid import uuid4

import pytest  # type: ignore[import-not-found]
from sqlalchemy.dialects import postgresql  # type: ignore[import-not-found]

from taskhub.password_reset.repository import PasswordResetRepository

pytestmark = pytest.mark.anyio

NOW = dt.datetime(2026, 1, 5, 9, 0, tzinfo=dt.UTC)


def _sql(stmt) -> tuple[str, dict]:  # type: ignore[no-untyped-def]
    compiled = stmt.compile(dialect=postgresql.dialect())
    return " ".join(str(compiled).split()), compiled.params


async def test_mark_used_is_a_compare_and_set(executor) -> None:  # type: ignore[no-untyped-def]
    repo = PasswordResetRepository(executor=executor)
    request_id = uuid4()

    assert await repo.mark_used(None, request_id=request_id, now=NOW) is True

    sql, params = _sql(executor.statements[-1])
    assert sql.startswith("UPDATE password_resets SET used_at=")
    assert "password_resets.id = " in sql
    assert "password_resets.used_at IS NULL" in sql
    assert request_id in params.values()
    assert NOW in params.values()


async def test_mark_used_reports_lost_race(executor) -> None:  # type: ignore[no-untyped-def]
    executor.rowcount = 0
    repo = PasswordResetRepository(executor=executor)
    assert await repo.mark_used(None, request_id=uuid4(), now=NOW) is False


async def test_find_usable_picks_newest_unexpired_unused_code(executor) -> None:  # type: ignore[no-untyped-def]
    repo = PasswordResetRepository(executor=executor)
    user_id = uuid4()

    assert await repo.find_usable(None, user_id=user_id, code="123456", now=NOW) is None

    sql, params = _sql(executor.statements[-1])
    assert "FROM password_resets" in sql
    assert "password_resets.user_id = " in sql
    assert "password_resets.token = " in sql
    assert "password_resets.used_at IS NULL" in sql
    assert "password_resets.expires_at > " in sql
    assert "ORDER BY password_resets.created_at DESC LIMIT " in sql
    assert user_id in params.values()
    assert "123456" in params.values()
    assert NOW in params.values()
    assert 1 in params.values()
