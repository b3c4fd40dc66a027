"""Notification Service Implementations

Provides concrete implementations for delivering transaction updates.
"""

import logging
from typing import Optional
import httpx
from src.app.services.notification_service import NotificationService
from src.app.use_cases.webhook.dtos import TransactionNotificationDTO
from src.domain.admin_settings import TelegramSettings
from .telegram_formatter import format_transaction_message, unique_chat_ids

logger = logging.getLogger(__name__)


class LoggingNotificationService(NotificationService):
    """
    Notification service that logs transaction updates

    Useful for development and testing, or as a fallback.
    """

    async def send_transaction_update(self, notification: TransactionNotificationDTO) -> bool:
        logger.info(
            f"[TRANSACTION UPDATE] Ref ID: {notification.ref_id}, "
            f"Status: {notification.status.value}, "
            f"Provider: {notification.provider}, "
            f"Product: {notification.product_name}, "
            f"By: {notification.transacted_by}"
        )
        return True


class TelegramNotificationService(NotificationService):
    """
    Notification service that sends MarkdownV2 messages via the Telegram Bot API

    Each update goes to every configured admin chat plus the personal chat of
    the user who placed the order, when known.
    """

    def __init__(
        self,
        bot_token: str,
        chat_ids: list[str],
        api_base_url: str = "https://api.telegram.org",
        timeout: float = 10.0,
        tz_name: str = "Asia/Jakarta",
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize Telegram notification service

        Args:
            bot_token: Telegram bot token
            chat_ids: Admin chat ids that receive every update
            api_base_url: Telegram Bot API base URL
            timeout: Request timeout in seconds
            tz_name: Timezone used to render timestamps
            transport: Optional httpx transport (tests use httpx.MockTransport)
        """
        self.bot_token = bot_token
        self.chat_ids = chat_ids
        self.api_base_url = api_base_url.rstrip("/")
        self.timeout = timeout
        self.tz_name = tz_name
        self.transport = transport

    @property
    def send_message_url(self) -> str:
        return f"{self.api_base_url}/bot{self.bot_token}/sendMessage"

    async def send_transaction_update(self, notification: TransactionNotificationDTO) -> bool:
        """
        Send transaction update to all target chats

        Returns:
            True if at least one chat received the message, False otherwise
        """
        recipients = unique_chat_ids(self.chat_ids, notification.recipient_chat_id)
        if not recipients:
            logger.debug(f"No Telegram chat ids configured. Skipping notification for {notification.ref_id}")
            return False

        try:
            message = format_transaction_message(notification, self.tz_name)
        except Exception as e:
            logger.error(f"Failed to format Telegram notification for {notification.ref_id}: {e}")
            return False

        success = False
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            for chat_id in recipients:
                if await self._send(client, chat_id, message, notification):
                    success = True
        return success

    async def _send(
        self,
        client: httpx.AsyncClient,
        chat_id: str,
        message: str,
        notification: TransactionNotificationDTO,
    ) -> bool:
        payload = {
            "chat_id": chat_id,
            "text": message,
            "parse_mode": "MarkdownV2",
        }
        who = notification.transacted_by or notification.ref_id

        try:
            response = await client.post(
                self.send_message_url,
                json=payload,
                headers={"Content-Type": "application/json"},
            )
            body = response.json()
        except httpx.HTTPError as e:
            logger.warning(f"Failed to send Telegram notification to chat {chat_id} for {who}: {e}")
            return False
        except Exception as e:
            logger.error(f"Unexpected error sending Telegram notification to chat {chat_id} for {who}: {e}")
            return False

        if not body.get("ok"):
            description = body.get("description") or response.reason_phrase
            logger.warning(
                f"Failed to send Telegram notification to chat {chat_id} for {who}: "
                f"Telegram API error: {description}"
            )
            return False

        logger.info(f"Telegram notification sent to chat {chat_id} for {who}")
        return True


class CompositeNotificationService(NotificationService):
    """
    Notification service that delegates to multiple services

    Useful for sending to multiple channels (e.g., log + Telegram).
    """

    def __init__(self, services: list[NotificationService]):
        self.services = services

    async def send_transaction_update(self, notification: TransactionNotificationDTO) -> bool:
        """
        Send transaction update to all configured services

        Returns:
            True if at least one service succeeded, False otherwise
        """
        success = False
        for service in self.services:
            try:
                if await service.send_transaction_update(notification):
                    success = True
            except Exception as e:
                logger.error(f"Notification service {type(service).__name__} failed: {e}")
        return success


def create_notification_service(
    telegram: Optional[TelegramSettings] = None,
    api_base_url: str = "https://api.telegram.org",
    timeout: float = 10.0,
    tz_name: str = "Asia/Jakarta",
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> NotificationService:
    """
    Factory function to create appropriate notification service

    Args:
        telegram: Telegram settings. If a bot token is configured, creates a
                  composite service with logging + Telegram. Otherwise, just logging.
        transport: Optional httpx transport handed to the Telegram service

    Returns:
        Configured NotificationService
    """
    services: list[NotificationService] = [LoggingNotificationService()]

    if telegram and telegram.bot_token:
        services.append(
            TelegramNotificationService(
                bot_token=telegram.bot_token,
                chat_ids=telegram.chat_ids,
                api_base_url=api_base_url,
                timeout=timeout,
                tz_name=tz_name,
                transport=transport,
            )
        )

    if len(services) == 1:
        return services[0]

    return CompositeNotificationService(services)
