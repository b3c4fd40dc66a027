from .unit_of_work import SqlAlchemyUnitOfWork
from .notification_service import (
    LoggingNotificationService,
    TelegramNotificationService,
    CompositeNotificationService,
    create_notification_service,
)
from .notification_dispatcher import AsyncioNotificationDispatcher

__all__ = [
    "SqlAlchemyUnitOfWork",
    "LoggingNotificationService",
    "TelegramNotificationService",
    "CompositeNotificationService",
    "create_notification_service",
    "AsyncioNotificationDispatcher",
]
