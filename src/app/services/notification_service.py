"""Notification Service Interface

Defines the contract for delivering transaction update notifications.
"""

from abc import ABC, abstractmethod
from src.app.use_cases.webhook.dtos import TransactionNotificationDTO


class NotificationService(ABC):
    """
    Abstract notification sink for transaction updates

    Implementations can deliver via:
    - Logging
    - Telegram Bot API
    - Several sinks at once (composite)

    Implementations must never raise; delivery problems are reported through
    the return value and logs only.
    """

    @abstractmethod
    async def send_transaction_update(self, notification: TransactionNotificationDTO) -> bool:
        """
        Deliver a transaction update

        Args:
            notification: Notification record to deliver

        Returns:
            True if delivered to at least one destination, False otherwise
        """
        pass
