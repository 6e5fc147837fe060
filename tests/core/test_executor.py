from __future__ import annotations

import pytest  # type: ignore[import-not-found]
from sqlalchemy import exc as sa_exc  # type: ignore[import-not-found]

from taskhub.core.executor import QueryExecutor, TransientStoreFailure, is_transient

pytestmark = pytest.mark.anyio


def _too_many_clients() -> sa_exc.OperationalError:
    return sa_exc.OperationalError(
        "SELECT 1", {}, Exception("FATAL: sorry, too many clients already")
    )


class _Sleeps:
    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


async def test_retries_then_gives_up_with_transient_failure() -> None:
    sleeps = _Sleeps()
    executor = QueryExecutor(retries=2, base_delay_s=1.0, sleep=sleeps)
    calls = 0

    async def op() -> None:
        nonlocal calls
        calls += 1
        raise _too_many_clients()

    with pytest.raises(TransientStoreFailure) as excinfo:
        await executor.run(op)

    assert calls == 3
    assert sleeps.delays == [1.0, 2.0]
    assert isinstance(excinfo.value.__cause__, sa_exc.OperationalError)


async def test_recovers_after_one_transient_failure() -> None:
    sleeps = _Sleeps()
    executor = QueryExecutor(sleep=sleeps)
    calls = 0

    async def op() -> str:
        nonlocal calls
        calls += 1
        if calls == 1:
            raise sa_exc.TimeoutError("QueuePool limit reached")
        return "rows"

    assert await executor.run(op) == "rows"
    assert calls == 2
    assert sleeps.delays == [1.0]


async def test_non_transient_error_propagates_immediately() -> None:
    sleeps = _Sleeps()
    executor = QueryExecutor(sleep=sleeps)
    calls = 0

    async def op() -> None:
        nonlocal calls
        calls += 1
        raise sa_exc.IntegrityError("INSERT", {}, Exception("duplicate key"))

    with pytest.raises(sa_exc.IntegrityError):
        await executor.run(op)
    assert calls == 1
    assert sleeps.delays == []


async def test_zero_retries_fails_on_first_transient_error() -> None:
    sleeps = _Sleeps()
    executor = QueryExecutor(retries=0, sleep=sleeps)

    async def op() -> None:
        raise ConnectionRefusedError()

    with pytest.raises(TransientStoreFailure):
        await executor.run(op)
    assert sleeps.delays == []


async def test_execute_passes_statement_through() -> None:
    class _Session:
        def __init__(self) -> None:
            self.seen: list[object] = []

        async def execute(self, stmt: object) -> str:
            self.seen.append(stmt)
            return "result"

    session = _Session()
    executor = QueryExecutor(sleep=_Sleeps())
    assert await executor.execute(session, "stmt") == "result"  # type: ignore[arg-type]
    assert session.seen == ["stmt"]


@pytest.mark.parametrize(
    "exc,expected",
    [
        (_too_many_clients(), True),
        (
            sa_exc.OperationalError(
                "SELECT 1", {}, Exception("remaining connection slots are reserved")
            ),
            True,
        ),
        (
            sa_exc.OperationalError(
                "SELECT 1", {}, Exception("could not connect to server: Connection refused")
            ),
            True,
        ),
        (sa_exc.OperationalError("SELECT 1", {}, ConnectionRefusedError()), True),
        (sa_exc.TimeoutError("pool"), True),
        (ConnectionRefusedError(), True),
        (
            sa_exc.OperationalError(
                "SELECT 1", {}, Exception("division by zero"), connection_invalidated=True
            ),
            True,
        ),
        (sa_exc.OperationalError("SELECT 1", {}, Exception("deadlock detected")), False),
        (sa_exc.IntegrityError("INSERT", {}, Exception("duplicate key")), False),
        (sa_exc.ProgrammingError("SELECT", {}, Exception("syntax error")), False),
        (sa_exc.DataError("SELECT", {}, Exception("invalid input")), False),
        (ValueError("nope"), False),
    ],
)
def test_is_transient(exc: BaseException, expected: bool) -> None:
    assert is_transient(exc) is expected


async def test_flush_is_not_retried() -> None:
    sleeps = _Sleeps()
    executor = QueryExecutor(sleep=sleeps)

    class _Session:
        calls = 0

        async def flush(self) -> None:
            self.calls += 1
            raise _too_many_clients()

    session = _Session()
    with pytest.raises(TransientStoreFailure):
        await executor.flush(session)  # type: ignore[arg-type]
    assert session.calls == 1
    assert sleeps.delays == []
