"""NotifyTransactionUpdate Use Case

Builds the transaction update notification and hands it to the dispatcher.
Best effort: nothing in here may fail the webhook.
"""

import logging
from datetime import datetime
from decimal import Decimal
from typing import Optional
from src.app.repositories.transaction_repository import TransactionRepository
from src.app.repositories.settings_repository import SettingsRepository
from src.app.repositories.user_repository import UserRepository
from src.app.services.notification_dispatcher import NotificationDispatcher
from src.domain.admin_settings import TelegramSettings
from src.domain.base import utc_now
from src.domain.provider import ProviderName
from src.domain.transaction import Transaction, TransactionStatus
from .dtos import NotifyCommandDTO, TransactionNotificationDTO

logger = logging.getLogger(__name__)

WEBHOOK_UPDATE_TAG = "Webhook Update"


def build_transaction_notification(
    transaction: Transaction,
    command: NotifyCommandDTO,
    processed_at: datetime,
    recipient_chat_id: Optional[str] = None,
) -> TransactionNotificationDTO:
    """
    Assemble the notification record for an updated transaction

    The cost price reported by the webhook wins over the stored one; profit is
    only computed for successful transactions.
    """
    envelope = command.envelope

    cost_price: Optional[Decimal] = envelope.cost_price
    if cost_price is None:
        cost_price = envelope.billed_amount
    if cost_price is None:
        cost_price = transaction.cost_price

    profit = None
    if command.status == TransactionStatus.SUKSES and transaction.selling_price is not None:
        profit = transaction.selling_price - cost_price

    failure_reason = None
    if command.status == TransactionStatus.GAGAL:
        failure_reason = command.failure_reason or transaction.failure_reason

    return TransactionNotificationDTO(
        ref_id=transaction.ref_id,
        product_name=transaction.product_name,
        customer_detail=transaction.details,
        status=command.status,
        provider=ProviderName(envelope.provider).display_name,
        cost_price=cost_price,
        selling_price=transaction.selling_price,
        profit=profit,
        serial_number=envelope.serial_number or None,
        failure_reason=failure_reason,
        additional_info=WEBHOOK_UPDATE_TAG,
        timestamp=processed_at,
        transacted_by=transaction.transacted_by,
        provider_transaction_id=envelope.provider_transaction_id or transaction.provider_transaction_id,
        recipient_chat_id=recipient_chat_id,
    )


class NotifyTransactionUpdate:
    """
    Use Case: Notify about a reconciled transaction

    Business Rules:
    1. Re-reads the transaction after the update; if it vanished, skip with a log
    2. The initiating user's personal chat is looked up best effort
    3. Telegram settings are read fresh for every delivery, best effort
    4. Dispatch is fire-and-forget; the caller never waits for delivery
    5. Never raises
    """

    def __init__(
        self,
        transaction_repo: TransactionRepository,
        user_repo: UserRepository,
        settings_repo: SettingsRepository,
        dispatcher: NotificationDispatcher,
    ):
        self.transaction_repo = transaction_repo
        self.user_repo = user_repo
        self.settings_repo = settings_repo
        self.dispatcher = dispatcher

    async def execute(self, command: NotifyCommandDTO) -> bool:
        """
        Execute notification dispatch

        Returns:
            True if a notification was handed to the dispatcher
        """
        ref_id = command.envelope.ref_id
        try:
            transaction = await self.transaction_repo.get_by_ref_id(ref_id)
            if not transaction:
                logger.warning(f"Could not send notification: transaction {ref_id} not found after update.")
                return False

            recipient_chat_id = await self._get_recipient_chat_id(transaction.transacted_by)
            telegram = await self._get_telegram_settings()

            notification = build_transaction_notification(
                transaction,
                command,
                processed_at=utc_now(),
                recipient_chat_id=recipient_chat_id,
            )
            self.dispatcher.dispatch(notification, telegram)
            return True

        except Exception as e:
            logger.error(f"Failed to dispatch notification for transaction {ref_id}: {e}")
            return False

    async def _get_recipient_chat_id(self, username: Optional[str]) -> Optional[str]:
        if not username:
            return None
        try:
            user = await self.user_repo.get_by_username(username)
        except Exception as e:
            logger.warning(f"Could not look up Telegram chat for user {username}: {e}")
            return None
        return user.telegram_chat_id if user else None

    async def _get_telegram_settings(self) -> TelegramSettings:
        try:
            return await self.settings_repo.get_telegram_settings()
        except Exception as e:
            logger.warning(f"Could not read Telegram settings, notifying via log only: {e}")
            return TelegramSettings()
