# backend/tests/conftest.py
"""
Shared fixtures for the Scheduler API test suite.

Every test gets its own in-memory SQLite database with the full schema and
foreign-key enforcement. Route tests run the real application through
FastAPI's TestClient; the caller is attached to ``request.state`` by a
test-only middleware driven by ``X-Test-*`` headers, standing in for the
upstream authentication layer.
"""

import os
from typing import Callable, Dict, Generator

os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")

from fastapi import Request
from fastapi.testclient import TestClient
import pytest
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from app.api.dependencies.database import get_db
from app.core.enums import AccountRole
from app.database import Base
from app.database.engines import build_engine
from app.main import create_app

# Import models so Base.metadata is populated for create_all.
from app.models import Organization, User
from app.principal import CurrentUser

TEST_USER_HEADER = "X-Test-User-Id"
TEST_ORG_HEADER = "X-Test-Org-Id"
TEST_ROLE_HEADER = "X-Test-Role"


@pytest.fixture
def engine() -> Generator[Engine, None, None]:
    engine = build_engine("sqlite+pysqlite:///:memory:")
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@pytest.fixture
def db(session_factory: sessionmaker) -> Generator[Session, None, None]:
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def organization(db: Session) -> Organization:
    org = Organization(name="Riverside Academy")
    db.add(org)
    db.commit()
    return org


@pytest.fixture
def make_user(db: Session, organization: Organization) -> Callable[..., User]:
    def _make_user(role: AccountRole, first_name: str, org: Organization | None = None) -> User:
        user = User(
            org_id=(org or organization).id,
            role=role.value,
            first_name=first_name,
            last_name="Tester",
            email=f"{first_name.lower()}@example.com",
        )
        db.add(user)
        db.commit()
        return user

    return _make_user


@pytest.fixture
def admin_user(make_user: Callable[..., User]) -> User:
    return make_user(AccountRole.ADMIN, "Ada")


@pytest.fixture
def tutor_user(make_user: Callable[..., User]) -> User:
    return make_user(AccountRole.TUTOR, "Theo")


@pytest.fixture
def student_user(make_user: Callable[..., User]) -> User:
    return make_user(AccountRole.STUDENT, "Sam")


@pytest.fixture
def principal_for() -> Callable[[User], CurrentUser]:
    def _principal_for(user: User) -> CurrentUser:
        return CurrentUser(user_id=user.id, org_id=user.org_id, role=AccountRole(user.role))

    return _principal_for


@pytest.fixture
def auth_headers() -> Callable[[User], Dict[str, str]]:
    def _auth_headers(user: User) -> Dict[str, str]:
        return {
            TEST_USER_HEADER: user.id,
            TEST_ORG_HEADER: user.org_id,
            TEST_ROLE_HEADER: user.role,
        }

    return _auth_headers


@pytest.fixture
def client(session_factory: sessionmaker) -> Generator[TestClient, None, None]:
    app = create_app()

    @app.middleware("http")
    async def attach_test_principal(request: Request, call_next):  # type: ignore[no-untyped-def]
        user_id = request.headers.get(TEST_USER_HEADER)
        if user_id:
            request.state.current_user = CurrentUser(
                user_id=user_id,
                org_id=request.headers.get(TEST_ORG_HEADER, ""),
                role=AccountRole(request.headers.get(TEST_ROLE_HEADER, AccountRole.STUDENT.value)),
            )
        return await call_next(request)

    def _override_get_db() -> Generator[Session, None, None]:
        session = session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    app.dependency_overrides[get_db] = _override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
