"""ReconcileTransaction Use Case

Applies a provider's asynchronous status callback to the stored transaction.
"""

import logging
from typing import Any
from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.repositories.transaction_repository import TransactionRepository
from src.app.repositories.price_setting_repository import PriceSettingRepository
from src.domain.base import utc_now
from src.domain.price_setting import calculate_selling_price
from src.domain.transaction import TransactionStatus
from .dtos import (
    ReconcileCommandDTO,
    ReconciliationOutcome,
    ReconciliationResultDTO,
    WebhookErrorCode,
)

logger = logging.getLogger(__name__)


class ReconcileTransaction:
    """
    Use Case: Reconcile a transaction with a webhook status

    Business Rules:
    1. Unknown ref_id is a no-op (UNKNOWN_REFERENCE), never an error
    2. With the terminal-state guard on, a settled transaction never moves to
       a different status (TERMINAL_CONFLICT); re-asserting the same status is
       an ordinary idempotent update
    3. Only fields supplied by the webhook are merged
    4. A corrected cost price re-derives the selling price
    5. settled_at is stamped only on the Pending -> terminal transition

    Flow:
    1. Get transaction with lock (SELECT FOR UPDATE)
    2. Apply the terminal-state guard
    3. Build the change set
    4. Update and commit
    """

    def __init__(
        self,
        uow: UnitOfWork,
        transaction_repo: TransactionRepository,
        price_setting_repo: PriceSettingRepository,
        terminal_state_guard: bool = True,
    ):
        self.uow = uow
        self.transaction_repo = transaction_repo
        self.price_setting_repo = price_setting_repo
        self.terminal_state_guard = terminal_state_guard

    async def execute(self, command: ReconcileCommandDTO) -> Result[ReconciliationResultDTO]:
        """
        Execute reconciliation

        Args:
            command: ReconcileCommandDTO with the mapped status and webhook fields

        Returns:
            Result[ReconciliationResultDTO]: outcome of the reconciliation, or
            PERSISTENCE_FAILURE
        """
        try:
            # Step 1: Get transaction with pessimistic lock
            transaction = await self.transaction_repo.get_by_ref_id(command.ref_id, for_update=True)

            if not transaction:
                logger.warning(f"Webhook received for unknown ref_id: {command.ref_id}. Ignoring.")
                return Return.ok(
                    ReconciliationResultDTO(
                        outcome=ReconciliationOutcome.UNKNOWN_REFERENCE,
                        ref_id=command.ref_id,
                    )
                )

            previous_status = TransactionStatus(transaction.status)

            # Step 2: Terminal-state guard
            if (
                self.terminal_state_guard
                and previous_status.is_terminal
                and command.status != previous_status
            ):
                await self.uow.rollback()
                logger.warning(
                    f"Ignoring webhook for settled transaction {command.ref_id}: "
                    f"stored status {previous_status.value}, webhook status {command.status.value}"
                )
                return Return.ok(
                    ReconciliationResultDTO(
                        outcome=ReconciliationOutcome.TERMINAL_CONFLICT,
                        ref_id=command.ref_id,
                        previous_status=previous_status,
                        status=previous_status,
                    )
                )

            # Step 3: Build change set
            changes: dict[str, Any] = {"status": command.status}

            if command.serial_number:
                changes["serial_number"] = command.serial_number
            if command.status == TransactionStatus.GAGAL and command.failure_reason:
                changes["failure_reason"] = command.failure_reason
            if command.provider_transaction_id:
                changes["provider_transaction_id"] = command.provider_transaction_id

            if command.cost_price is not None and command.cost_price > 0:
                changes["cost_price"] = command.cost_price
                if command.cost_price != transaction.cost_price:
                    custom_price = await self.price_setting_repo.get_custom_price(
                        transaction.buyer_sku_code, transaction.provider
                    )
                    changes["selling_price"] = calculate_selling_price(command.cost_price, custom_price)

            if previous_status == TransactionStatus.PENDING and command.status.is_terminal:
                changes["settled_at"] = utc_now()

            # Step 4: Update and commit
            await self.transaction_repo.update(command.ref_id, changes)
            await self.uow.commit()

            logger.info(
                f"Transaction {command.ref_id} updated via webhook: "
                f"{previous_status.value} -> {command.status.value}"
            )

            return Return.ok(
                ReconciliationResultDTO(
                    outcome=ReconciliationOutcome.UPDATED,
                    ref_id=command.ref_id,
                    previous_status=previous_status,
                    status=command.status,
                )
            )

        except Exception as e:
            await self.uow.rollback()
            logger.error(f"Failed to update transaction {command.ref_id}: {e}")
            return Return.err(
                Error(
                    code=WebhookErrorCode.PERSISTENCE_FAILURE.value,
                    message=f"Failed to update transaction {command.ref_id}",
                    reason=str(e),
                )
            )
