"""Notification Dispatcher Interface

Fire-and-forget hand-off between the request path and a NotificationService.
"""

from abc import ABC, abstractmethod
from src.app.use_cases.webhook.dtos import TransactionNotificationDTO
from src.domain.admin_settings import TelegramSettings


class NotificationDispatcher(ABC):

    @abstractmethod
    def dispatch(self, notification: TransactionNotificationDTO, telegram: TelegramSettings) -> None:
        """
        Schedule delivery of a notification and return immediately

        Args:
            notification: Notification record to deliver
            telegram: Telegram settings read for this delivery

        The caller never observes completion or failure of the delivery.
        Must not raise.
        """
        pass
