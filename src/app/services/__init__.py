from .unit_of_work import UnitOfWork
from .notification_service import NotificationService
from .notification_dispatcher import NotificationDispatcher

__all__ = [
    "UnitOfWork",
    "NotificationService",
    "NotificationDispatcher",
]
