"""ProcessWebhook Use Case

The provider independent webhook pipeline:
Receiver -> Authenticity Verifier -> Status Reconciler -> Notifier.
"""

import json
import logging
from typing import Mapping, Optional
from pydantic import ValidationError
from libs.result import Result, Return, Error
from src.app.repositories.settings_repository import SettingsRepository
from .dtos import (
    NotifyCommandDTO,
    ReconcileCommandDTO,
    ReconciliationOutcome,
    WebhookEnvelope,
    WebhookErrorCode,
    WebhookOutcomeDTO,
    WebhookOutcomeStatus,
)
from .notify_transaction_update import NotifyTransactionUpdate
from .providers import WebhookAdapter
from .reconcile_transaction import ReconcileTransaction
from .verify_authenticity import VerifyWebhookAuthenticity, resolve_client_ip, LOOPBACK_IP

logger = logging.getLogger(__name__)


class ProcessWebhook:
    """
    Use Case: Process one webhook delivery from an upstream provider

    Business Rules:
    1. Empty body is a benign ping: acknowledged and ignored
    2. Unparseable JSON -> MALFORMED_BODY; schema failure -> SCHEMA_INVALID
    3. Authenticity is verified before anything is written
    4. Unknown ref_id, conflicts with settled transactions and persistence
       failures after authentication are acknowledged so the provider does not
       retry endlessly
    5. Notification is fire-and-forget and cannot change the outcome

    Flow:
    1. Receive: parse and validate the body into an envelope
    2. Verify: credentials, IP allow-list, signature
    3. Map the provider status
    4. Reconcile the stored transaction
    5. Notify
    """

    def __init__(
        self,
        adapter: WebhookAdapter,
        settings_repo: SettingsRepository,
        reconcile_transaction: ReconcileTransaction,
        notify_transaction_update: NotifyTransactionUpdate,
        default_client_ip: str = LOOPBACK_IP,
    ):
        self.adapter = adapter
        self.settings_repo = settings_repo
        self.reconcile_transaction = reconcile_transaction
        self.notify_transaction_update = notify_transaction_update
        self.default_client_ip = default_client_ip
        self.verifier = VerifyWebhookAuthenticity(adapter)

    async def execute(
        self,
        raw_body: str,
        headers: Mapping[str, str],
        peer_ip: Optional[str] = None,
    ) -> Result[WebhookOutcomeDTO]:
        """
        Execute the webhook pipeline

        Args:
            raw_body: Request body as received, not yet decoded
            headers: Request headers
            peer_ip: Address of the direct TCP peer, when known

        Returns:
            Result[WebhookOutcomeDTO]: acknowledged outcome, or an error whose
            code tells the caller which HTTP status to answer with
        """
        provider = self.adapter.provider.display_name
        headers = {name.lower(): value for name, value in headers.items()}

        try:
            # Step 1: Receive
            if not raw_body or not raw_body.strip():
                logger.warning(f"Received empty body in {provider} webhook. Ignoring.")
                return Return.ok(
                    WebhookOutcomeDTO(
                        status=WebhookOutcomeStatus.IGNORED,
                        message="Webhook with empty body received and ignored.",
                    )
                )

            received = self._receive(raw_body, headers)
            if received.is_err():
                return received
            envelope: WebhookEnvelope = received.value
            logger.info(
                f"Received {provider} webhook for ref_id {envelope.ref_id} with status {envelope.status}"
            )

            # Step 2: Verify
            credentials = await self.settings_repo.get_provider_credentials(self.adapter.provider)
            client_ip = resolve_client_ip(headers, peer_ip, default=self.default_client_ip)
            verified = self.verifier.execute(envelope, credentials, client_ip)
            if verified.is_err():
                return verified

            # Step 3: Map status
            status = self.adapter.map_status(envelope)
            failure_reason = self.adapter.failure_reason(envelope)

            # Step 4: Reconcile
            reconciled = await self.reconcile_transaction.execute(
                ReconcileCommandDTO(
                    ref_id=envelope.ref_id,
                    status=status,
                    serial_number=envelope.serial_number,
                    failure_reason=failure_reason,
                    provider_transaction_id=envelope.provider_transaction_id,
                    cost_price=envelope.cost_price,
                )
            )

            if reconciled.is_err():
                logger.error(
                    f"{provider} webhook for ref_id {envelope.ref_id} acknowledged "
                    f"despite internal error: {reconciled.error.reason}"
                )
                return Return.ok(
                    WebhookOutcomeDTO(
                        status=WebhookOutcomeStatus.FAILED_INTERNAL,
                        message="Webhook received, internal processing error.",
                        ref_id=envelope.ref_id,
                    )
                )

            outcome = reconciled.value.outcome
            if outcome == ReconciliationOutcome.UNKNOWN_REFERENCE:
                return Return.ok(
                    WebhookOutcomeDTO(
                        status=WebhookOutcomeStatus.IGNORED,
                        message="Webhook for unknown ref_id ignored.",
                        ref_id=envelope.ref_id,
                    )
                )
            if outcome == ReconciliationOutcome.TERMINAL_CONFLICT:
                return Return.ok(
                    WebhookOutcomeDTO(
                        status=WebhookOutcomeStatus.IGNORED,
                        message="Webhook conflicts with a settled transaction and was ignored.",
                        ref_id=envelope.ref_id,
                        transaction_status=reconciled.value.status,
                    )
                )

            # Step 5: Notify
            notified = await self.notify_transaction_update.execute(
                NotifyCommandDTO(envelope=envelope, status=status, failure_reason=failure_reason)
            )

            return Return.ok(
                WebhookOutcomeDTO(
                    status=WebhookOutcomeStatus.SUCCESS,
                    message="Webhook processed",
                    ref_id=envelope.ref_id,
                    transaction_status=status,
                    notified=notified,
                )
            )

        except Exception as e:
            logger.exception(f"Error processing {provider} webhook. Raw body: {raw_body}")
            return Return.err(
                Error(
                    code=WebhookErrorCode.INTERNAL_ERROR.value,
                    message="Webhook processing error",
                    reason=str(e),
                )
            )

    def _receive(self, raw_body: str, headers: Mapping[str, str]) -> Result[WebhookEnvelope]:
        provider = self.adapter.provider.display_name

        try:
            payload = json.loads(raw_body)
        except json.JSONDecodeError as e:
            logger.error(f"Error processing {provider} webhook: failed to parse JSON. Raw body: {raw_body}")
            return Return.err(
                Error(
                    code=WebhookErrorCode.MALFORMED_BODY.value,
                    message="Webhook processing error: Invalid JSON body.",
                    reason=str(e),
                )
            )

        try:
            envelope = self.adapter.parse(payload, headers)
        except ValidationError as e:
            details = json.loads(e.json(include_url=False))
            logger.error(f"Invalid {provider} webhook payload structure: {details}. Raw body: {raw_body}")
            return Return.err(
                Error(
                    code=WebhookErrorCode.SCHEMA_INVALID.value,
                    message="Invalid payload structure.",
                    details=details,
                )
            )

        return Return.ok(envelope)
