from functools import partial
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession
from config import ApplicationConfig
from src.adapter.services.notification_dispatcher import AsyncioNotificationDispatcher
from src.adapter.services.notification_service import create_notification_service
from src.app.services.notification_dispatcher import NotificationDispatcher
import src.domain  # noqa: F401  registers tables on SQLModel.metadata

engine = create_async_engine(ApplicationConfig.DB_URI, echo=False, future=True)

AsyncSessionLocal = sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
)


async def init_db():
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)


async def get_session() -> AsyncSession:
    async with AsyncSessionLocal() as session:
        yield session


def get_notification_dispatcher() -> NotificationDispatcher:
    """Dispatcher whose sinks are built from the Telegram settings passed per delivery"""
    return AsyncioNotificationDispatcher(
        partial(
            create_notification_service,
            api_base_url=ApplicationConfig.TELEGRAM_API_BASE_URL,
            timeout=float(ApplicationConfig.NOTIFICATION_TIMEOUT_SECONDS),
            tz_name=ApplicationConfig.NOTIFICATION_TIMEZONE,
        )
    )
