"""Notification Dispatcher Implementation

Schedules notification delivery as a detached asyncio task so the webhook
response never waits on the notification sink.
"""

import asyncio
import logging
from typing import Callable, Optional
from src.app.services.notification_dispatcher import NotificationDispatcher
from src.app.services.notification_service import NotificationService
from src.app.use_cases.webhook.dtos import TransactionNotificationDTO
from src.domain.admin_settings import TelegramSettings

logger = logging.getLogger(__name__)


class AsyncioNotificationDispatcher(NotificationDispatcher):
    """
    Fire-and-forget dispatcher backed by asyncio tasks

    Deliveries are unordered, never retried, and their failures are only
    logged. The sink is built inside the task from the settings passed to
    dispatch. Pending tasks are referenced at class level so they survive the
    request that created them.
    """

    _pending: set[asyncio.Task] = set()

    def __init__(self, service_factory: Callable[[TelegramSettings], NotificationService]):
        self.service_factory = service_factory

    def dispatch(self, notification: TransactionNotificationDTO, telegram: TelegramSettings) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.error(f"No running event loop, dropping notification for {notification.ref_id}")
            return

        task = loop.create_task(self._deliver(notification, telegram))
        AsyncioNotificationDispatcher._pending.add(task)
        task.add_done_callback(AsyncioNotificationDispatcher._pending.discard)

    async def _deliver(self, notification: TransactionNotificationDTO, telegram: TelegramSettings) -> None:
        try:
            service = self.service_factory(telegram)
            delivered = await service.send_transaction_update(notification)
        except Exception as e:
            logger.error(f"Notification delivery failed for {notification.ref_id}: {e}")
            return

        if not delivered:
            logger.warning(f"Notification for {notification.ref_id} was not delivered to any destination")

    @classmethod
    async def drain(cls, timeout: Optional[float] = None) -> None:
        """Wait for in-flight deliveries, e.g. on application shutdown"""
        if not cls._pending:
            return
        pending = list(cls._pending)
        _, not_done = await asyncio.wait(pending, timeout=timeout)
        if not_done:
            logger.warning(f"{len(not_done)} notification deliveries still pending at shutdown")
