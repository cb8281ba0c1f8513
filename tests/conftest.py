"""
Pytest fixtures for project catalog tests.

Each test gets its own file-backed SQLite database (aiosqlite), so bus
workers and the test body use separate connections exactly as they would
against PostgreSQL.
"""

import asyncio
from typing import Any, AsyncGenerator, Callable, List, Optional

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from catalog.database import create_engine_for, create_session_factory, init_db
from catalog.kernel.identity.jwt import JWTManager
from catalog.kernel.models.user import User, UserRole
from catalog.main import create_app
from catalog.notifications.hub import NotificationHub


class FakeChannel:
    """Stands in for a WebSocket: records what it is sent, or fails on demand."""

    def __init__(self, fail: bool = False, delay: float = 0.0):
        self.fail = fail
        self.delay = delay
        self.messages: List[Any] = []

    async def send_json(self, data: Any) -> None:
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.fail:
            raise ConnectionResetError("socket closed")
        self.messages.append(data)


@pytest.fixture
def make_channel() -> Callable[..., FakeChannel]:
    return FakeChannel


@pytest_asyncio.fixture
async def db_engine(tmp_path) -> AsyncGenerator[AsyncEngine, None]:
    """Create a test database engine with all tables."""
    engine = create_engine_for(f"sqlite+aiosqlite:///{tmp_path / 'catalog_test.db'}")
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return create_session_factory(db_engine)


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest_asyncio.fixture
async def hub(session_factory) -> AsyncGenerator[NotificationHub, None]:
    """A started notification pipeline bound to the test database."""
    hub = NotificationHub(
        session_factory,
        bus_workers=2,
        handler_timeout=5.0,
        delivery_timeout=0.5,
    )
    await hub.start()
    yield hub
    await hub.stop()


async def _create_user(session: AsyncSession, email: str, full_name: str, role: UserRole) -> User:
    user = User(email=email, full_name=full_name, role=role.value)
    session.add(user)
    await session.commit()
    return user


@pytest_asyncio.fixture
async def owner(db_session: AsyncSession) -> User:
    """A regular user who owns projects."""
    return await _create_user(db_session, "alice@example.com", "Alice Owner", UserRole.USER)


@pytest_asyncio.fixture
async def supervisor(db_session: AsyncSession) -> User:
    return await _create_user(db_session, "bob@example.com", "Bob Supervisor", UserRole.SUPERVISOR)


@pytest_asyncio.fixture
async def other_user(db_session: AsyncSession) -> User:
    """A regular user with no role on anyone else's project."""
    return await _create_user(db_session, "carol@example.com", "Carol Student", UserRole.USER)


@pytest_asyncio.fixture
async def commenter(db_session: AsyncSession) -> User:
    return await _create_user(db_session, "dave@example.com", "Dave Reader", UserRole.USER)


@pytest_asyncio.fixture
async def admin(db_session: AsyncSession) -> User:
    return await _create_user(db_session, "admin@example.com", "Ada Admin", UserRole.ADMIN)


@pytest.fixture
def jwt_manager() -> JWTManager:
    """JWT manager using the application's configured secret."""
    return JWTManager()


@pytest.fixture
def auth_headers_for(jwt_manager: JWTManager) -> Callable[[User], dict]:
    """Build bearer headers for any user."""

    def _headers(user: User) -> dict:
        token, _, _ = jwt_manager.create_access_token(
            user_id=user.id,
            email=user.email,
            role=user.role_value.value,
        )
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest_asyncio.fixture
async def app(session_factory):
    """Application bound to the test database, with its hub started."""
    application = create_app(session_factory=session_factory)
    await application.state.hub.start()
    yield application
    await application.state.hub.stop()


@pytest_asyncio.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client calling the app in-process."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture
def settle() -> Callable:
    """Commit the test session, then wait until the hub's bus is idle."""

    async def _settle(hub: NotificationHub, session: Optional[AsyncSession] = None) -> None:
        if session is not None:
            await session.commit()
        await hub.bus.join()

    return _settle
