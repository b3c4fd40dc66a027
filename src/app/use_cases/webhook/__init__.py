"""Webhook ingestion and transaction reconciliation use cases"""
from .dtos import (
    DigiflazzWebhookPayload,
    TokoVoucherWebhookPayload,
    WebhookEnvelope,
    ReconcileCommandDTO,
    NotifyCommandDTO,
    ReconciliationOutcome,
    ReconciliationResultDTO,
    TransactionNotificationDTO,
    WebhookErrorCode,
    WebhookOutcomeStatus,
    WebhookOutcomeDTO,
)
from .providers import (
    WebhookAdapter,
    DigiflazzWebhookAdapter,
    TokoVoucherWebhookAdapter,
    get_webhook_adapter,
)
from .verify_authenticity import VerifyWebhookAuthenticity, resolve_client_ip
from .reconcile_transaction import ReconcileTransaction
from .notify_transaction_update import NotifyTransactionUpdate, build_transaction_notification
from .process_webhook import ProcessWebhook

__all__ = [
    "DigiflazzWebhookPayload",
    "TokoVoucherWebhookPayload",
    "WebhookEnvelope",
    "ReconcileCommandDTO",
    "NotifyCommandDTO",
    "ReconciliationOutcome",
    "ReconciliationResultDTO",
    "TransactionNotificationDTO",
    "WebhookErrorCode",
    "WebhookOutcomeStatus",
    "WebhookOutcomeDTO",
    "WebhookAdapter",
    "DigiflazzWebhookAdapter",
    "TokoVoucherWebhookAdapter",
    "get_webhook_adapter",
    "VerifyWebhookAuthenticity",
    "resolve_client_ip",
    "ReconcileTransaction",
    "NotifyTransactionUpdate",
    "build_transaction_notification",
    "ProcessWebhook",
]
