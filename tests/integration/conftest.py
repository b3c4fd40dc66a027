import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

import src.domain  # noqa: F401
from src.depends import get_session, get_notification_dispatcher
from src.domain.admin_settings import AdminSettings


class RecordingDispatcher:
    """Dispatcher double that keeps notifications instead of sending them"""

    def __init__(self):
        self.notifications = []
        self.telegram_settings = []

    def dispatch(self, notification, telegram):
        self.notifications.append(notification)
        self.telegram_settings.append(telegram)


@pytest_asyncio.fixture(scope="function")
async def engine():
    """Create an in-memory SQLite engine shared by every session of one test"""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(engine):
    """Create a new database session for each test"""
    Session = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)
    async with Session() as session:
        yield session


@pytest_asyncio.fixture
async def admin_settings(db_session):
    """Admin settings with both providers configured and no IP allow-lists"""
    settings = AdminSettings(
        digiflazz_username="user",
        digiflazz_api_key="key",
        tokovoucher_member_code="M1",
        tokovoucher_key="K1",
        telegram_bot_token="123:abc",
        telegram_chat_ids="-100",
    )
    db_session.add(settings)
    await db_session.commit()
    return settings


@pytest_asyncio.fixture
def dispatcher():
    return RecordingDispatcher()


@pytest_asyncio.fixture
async def client(db_session, dispatcher):
    """Create test client with database session and dispatcher overrides"""
    from src.api.app import create_app
    from config import ApplicationConfig

    app = create_app(ApplicationConfig)

    # Override the session dependency to use test session
    async def override_get_session():
        yield db_session

    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_notification_dispatcher] = lambda: dispatcher

    # Use ASGITransport for httpx AsyncClient
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
