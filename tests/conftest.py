"""
Global pytest fixtures.

No test touches a real Postgres instance: services are exercised against
in-memory repositories that honour the same contracts (exact-match email,
expiry filtering, compare-and-set on reset codes, unique email).
"""

import os

# Settings are read at import time; provide DB parts before importing taskhub.
os.environ.setdefault("TASKHUB_DB_HOST", "localhost")
os.environ.setdefault("TASKHUB_DB_PORT", "5432")
os.environ.setdefault("TASKHUB_DB_NAME", "taskhub_test")
os.environ.setdefault("TASKHUB_DB_USER", "taskhub")
os.environ.setdefault("TASKHUB_DB_PASSWORD", "taskhub")
# Keep PBKDF2 cheap in tests.
os.environ.setdefault("AUTH_PASSWORD_ITERATIONS", "1000")
os.environ.setdefault("RESEND_API_KEY", "")

import datetime as dt  # noqa: E402
from uuid import UUID  # noqa: E402

import httpx  # noqa: E402
import pytest  # type: ignore[import-not-found]  # noqa: E402
from fastapi import FastAPI  # noqa: E402
from fastapi.testclient import TestClient  # type: ignore[import-not-found]  # noqa: E402
from sqlalchemy import exc as sa_exc  # type: ignore[import-not-found]  # noqa: E402

from taskhub.api.main import build_app  # noqa: E402
from taskhub.auth.depends import get_auth_service  # noqa: E402
from taskhub.auth.models import User, UserSession  # noqa: E402
from taskhub.auth.service import AuthService  # noqa: E402
from taskhub.commons.depends import database_session  # noqa: E402
from taskhub.password_reset.api import get_password_reset_service  # noqa: E402
from taskhub.password_reset.models import PasswordResetRequest  # noqa: E402
from taskhub.password_reset.service import PasswordResetService  # noqa: E402
from taskhub.permissions.depends import get_permission_resolver  # noqa: E402
from taskhub.permissions.models import Project, ResourceKind  # noqa: E402
from taskhub.permissions.service import PermissionResolver  # noqa: E402


class FakeClock:
    def __init__(self) -> None:
        self.now = dt.datetime(2026, 1, 5, 9, 0, tzinfo=dt.UTC)

    def __call__(self) -> dt.datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now = self.now + dt.timedelta(**kwargs)


class FakeSession:
    """Stands in for AsyncSession; services only commit / roll back."""

    def __init__(self) -> None:
        self.commits = 0
        self.rollbacks = 0

    async def commit(self) -> None:
        self.commits += 1

    async def rollback(self) -> None:
        self.rollbacks += 1


def _duplicate_key(table: str) -> sa_exc.IntegrityError:
    return sa_exc.IntegrityError(
        f"INSERT INTO {table}", {}, Exception("duplicate key value violates unique constraint")
    )


class InMemoryAuthRepository:
    def __init__(self, clock: FakeClock) -> None:
        self.clock = clock
        self.users: dict[UUID, User] = {}
        self.sessions: dict[str, UserSession] = {}

    async def get_user_by_email(self, session, *, email):  # type: ignore[no-untyped-def]
        return next((u for u in self.users.values() if u.email == email), None)

    async def get_user_by_id(self, session, *, user_id):  # type: ignore[no-untyped-def]
        return self.users.get(user_id)

    async def insert_user(  # type: ignore[no-untyped-def]
        self, session, *, user_id, email, name, avatar_url, password_hash
    ):
        if any(u.email == email for u in self.users.values()):
            raise _duplicate_key("users")
        now = self.clock()
        user = User(
            id=user_id,
            email=email,
            name=name,
            avatar_url=avatar_url,
            password_hash=password_hash,
            created_at=now,
            updated_at=now,
        )
        self.users[user_id] = user
        return user

    async def merge_profile(self, session, *, user, name, avatar_url):  # type: ignore[no-untyped-def]
        if name is not None:
            user.name = name
        if avatar_url is not None:
            user.avatar_url = avatar_url
        user.updated_at = self.clock()
        return user

    async def set_password_hash(self, session, *, user_id, password_hash):  # type: ignore[no-untyped-def]
        self.users[user_id].password_hash = password_hash

    async def insert_session(  # type: ignore[no-untyped-def]
        self, session, *, session_id, user_id, token_hash, expires_at
    ):
        if token_hash in self.sessions:
            raise _duplicate_key("user_sessions")
        s = UserSession(
            id=session_id, user_id=user_id, session_token=token_hash, expires_at=expires_at
        )
        self.sessions[token_hash] = s
        return s

    async def get_active_session_by_token_hash(self, session, *, token_hash, now):  # type: ignore[no-untyped-def]
        s = self.sessions.get(token_hash)
        if s is None or s.expires_at <= now:
            return None
        return s

    async def delete_session(self, session, *, token_hash):  # type: ignore[no-untyped-def]
        return 1 if self.sessions.pop(token_hash, None) is not None else 0


class InMemoryPasswordResetRepository:
    def __init__(self) -> None:
        self.rows: list[PasswordResetRequest] = []

    async def insert_request(  # type: ignore[no-untyped-def]
        self, session, *, request_id, user_id, code, expires_at, created_at
    ):
        row = PasswordResetRequest(
            id=request_id,
            user_id=user_id,
            code=code,
            expires_at=expires_at,
            created_at=created_at,
            used_at=None,
        )
        self.rows.append(row)
        return row

    async def find_usable(self, session, *, user_id, code, now):  # type: ignore[no-untyped-def]
        matches = [
            r
            for r in self.rows
            if r.user_id == user_id
            and r.code == code
            and r.used_at is None
            and r.expires_at > now
        ]
        matches.sort(key=lambda r: r.created_at, reverse=True)
        return matches[0] if matches else None

    async def mark_used(self, session, *, request_id, now):  # type: ignore[no-untyped-def]
        for r in self.rows:
            if r.id == request_id and r.used_at is None:
                r.used_at = now
                return True
        return False


class InMemoryPermissionsRepository:
    def __init__(self) -> None:
        self.resources: dict[tuple[ResourceKind, UUID], object] = {}
        self.memberships: dict[tuple[ResourceKind, UUID, UUID], str] = {}

    def add(self, resource):  # type: ignore[no-untyped-def]
        self.resources[(resource.kind, resource.id)] = resource
        return resource

    async def get_resource(self, session, *, kind, resource_id):  # type: ignore[no-untyped-def]
        resource = self.resources.get((kind, resource_id))
        if isinstance(resource, Project) and resource.deleted_at is not None:
            return None
        return resource

    async def get_membership_role(self, session, *, kind, resource_id, user_id):  # type: ignore[no-untyped-def]
        return self.memberships.get((kind, resource_id, user_id))

    async def upsert_membership(self, session, *, kind, resource_id, user_id, role):  # type: ignore[no-untyped-def]
        self.memberships[(kind, resource_id, user_id)] = role


class _Result:
    def __init__(self, rowcount: int) -> None:
        self.rowcount = rowcount

    def scalar_one_or_none(self) -> None:
        return None


class RecordingExecutor:
    """QueryExecutor stand-in that keeps every statement it is handed."""

    def __init__(self, rowcount: int = 1) -> None:
        self.statements: list = []
        self.flushes = 0
        self.rowcount = rowcount

    async def execute(self, session, stmt):  # type: ignore[no-untyped-def]
        self.statements.append(stmt)
        return _Result(self.rowcount)

    async def flush(self, session) -> None:  # type: ignore[no-untyped-def]
        self.flushes += 1


class FakeNotifier:
    def __init__(self, *, configured: bool = True, succeed: bool = True) -> None:
        self.configured = configured
        self.succeed = succeed
        self.sent: list[tuple[str, str]] = []

    @property
    def is_configured(self) -> bool:
        return self.configured

    async def send_reset_code(self, *, email: str, code: str) -> bool:
        if not self.configured or not self.succeed:
            return False
        self.sent.append((email, code))
        return True

    @property
    def last_code(self) -> str:
        return self.sent[-1][1]


@pytest.fixture(scope="session")
def anyio_backend() -> str:
    """Default AnyIO backend for async tests."""
    return "asyncio"


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def db() -> FakeSession:
    return FakeSession()


@pytest.fixture()
def auth_repo(clock: FakeClock) -> InMemoryAuthRepository:
    return InMemoryAuthRepository(clock)


@pytest.fixture()
def auth_service(auth_repo: InMemoryAuthRepository, clock: FakeClock) -> AuthService:
    return AuthService(repo=auth_repo, clock=clock)  # type: ignore[arg-type]


@pytest.fixture()
def notifier() -> FakeNotifier:
    return FakeNotifier()


@pytest.fixture()
def reset_repo() -> InMemoryPasswordResetRepository:
    return InMemoryPasswordResetRepository()


@pytest.fixture()
def reset_service(
    reset_repo: InMemoryPasswordResetRepository,
    auth_repo: InMemoryAuthRepository,
    notifier: FakeNotifier,
    clock: FakeClock,
) -> PasswordResetService:
    return PasswordResetService(
        repo=reset_repo,  # type: ignore[arg-type]
        users=auth_repo,  # type: ignore[arg-type]
        notifier=notifier,
        clock=clock,
    )


@pytest.fixture()
def permissions_repo() -> InMemoryPermissionsRepository:
    return InMemoryPermissionsRepository()


@pytest.fixture()
def resolver(
    permissions_repo: InMemoryPermissionsRepository, auth_repo: InMemoryAuthRepository
) -> PermissionResolver:
    return PermissionResolver(repo=permissions_repo, users=auth_repo)  # type: ignore[arg-type]


@pytest.fixture()
def app(
    db: FakeSession,
    auth_service: AuthService,
    reset_service: PasswordResetService,
    resolver: PermissionResolver,
) -> FastAPI:
    """App wired to the in-memory services (no lifespan, no DB)."""
    app = build_app()

    async def _fake_db_session():  # type: ignore[no-untyped-def]
        yield db

    app.dependency_overrides[database_session] = _fake_db_session
    app.dependency_overrides[get_auth_service] = lambda: auth_service
    app.dependency_overrides[get_password_reset_service] = lambda: reset_service
    app.dependency_overrides[get_permission_resolver] = lambda: resolver
    return app


@pytest.fixture()
async def api_client(app: FastAPI):  # type: ignore[no-untyped-def]
    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client


@pytest.fixture()
def client(app: FastAPI) -> TestClient:
    return TestClient(app)


@pytest.fixture()
def executor() -> RecordingExecutor:
    return RecordingExecutor()
