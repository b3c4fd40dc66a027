"""Data Transfer Objects for Webhook Use Cases

Provider wire schemas, the normalized webhook envelope, and the command,
result and notification models passed between pipeline stages.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional, Dict, Any
from pydantic import BaseModel, Field
from src.domain.provider import ProviderName
from src.domain.transaction import TransactionStatus


# ---------------------------------------------------------------------------
# Wire schemas
# ---------------------------------------------------------------------------


class DigiflazzWebhookData(BaseModel):
    """The `data` object of a Digiflazz callback"""

    ref_id: str
    status: str
    buyer_sku_code: str
    customer_no: str
    message: str
    sn: Optional[str] = None
    price: Optional[Decimal] = None
    balance_cut: Optional[Decimal] = None
    rc: Optional[str] = None
    buyer_last_saldo: Optional[Decimal] = None


class DigiflazzWebhookPayload(BaseModel):
    """
    Digiflazz callback body

    The signature travels in the body as `sign`.
    """

    data: DigiflazzWebhookData
    sign: Optional[str] = None

    class Config:
        json_schema_extra = {
            "example": {
                "data": {
                    "ref_id": "T1",
                    "status": "Sukses",
                    "buyer_sku_code": "xld10",
                    "customer_no": "08123",
                    "message": "Transaksi Sukses",
                    "sn": "ABC123",
                    "price": 10150,
                    "rc": "00"
                },
                "sign": "5d41402abc4b2a76b9719d911017c592"
            }
        }


class TokoVoucherWebhookPayload(BaseModel):
    """
    TokoVoucher callback body

    The signature travels in the X-TokoVoucher-Authorization header.
    """

    ref_id: str = Field(..., min_length=1)
    status: str = Field(..., min_length=1)
    trx_id: Optional[str] = None
    code: Optional[str] = None
    target: Optional[str] = None
    price: Optional[Decimal] = None
    sn: Optional[str] = None
    message: Optional[str] = None
    balance: Optional[Decimal] = None


# ---------------------------------------------------------------------------
# Pipeline models
# ---------------------------------------------------------------------------


class WebhookEnvelope(BaseModel):
    """
    Provider independent view of one webhook delivery

    Lives only for the duration of a request.
    """

    provider: ProviderName
    ref_id: str
    status: str = Field(..., description="Raw provider status string")
    response_code: Optional[str] = None
    serial_number: Optional[str] = None
    cost_price: Optional[Decimal] = None
    billed_amount: Optional[Decimal] = Field(
        default=None,
        description="Amount actually deducted from the deposit, when reported"
    )
    provider_transaction_id: Optional[str] = None
    message: Optional[str] = None
    signature: Optional[str] = Field(
        default=None,
        description="Signature supplied by the caller"
    )
    extras: Dict[str, Any] = Field(default_factory=dict)


class ReconcileCommandDTO(BaseModel):
    """Command DTO for applying a mapped webhook status to a transaction"""

    ref_id: str
    status: TransactionStatus
    serial_number: Optional[str] = None
    failure_reason: Optional[str] = None
    provider_transaction_id: Optional[str] = None
    cost_price: Optional[Decimal] = None


class NotifyCommandDTO(BaseModel):
    """Command DTO for notifying about a reconciled webhook delivery"""

    envelope: WebhookEnvelope
    status: TransactionStatus
    failure_reason: Optional[str] = None


class ReconciliationOutcome(str, Enum):
    UPDATED = "updated"
    UNKNOWN_REFERENCE = "unknown_reference"
    TERMINAL_CONFLICT = "terminal_conflict"


class ReconciliationResultDTO(BaseModel):
    outcome: ReconciliationOutcome
    ref_id: str
    previous_status: Optional[TransactionStatus] = None
    status: Optional[TransactionStatus] = None


class TransactionNotificationDTO(BaseModel):
    """
    Human readable summary of a transaction update

    Sent to notification sinks after a successful reconciliation.
    """

    ref_id: str
    product_name: str
    customer_detail: str
    status: TransactionStatus
    provider: str = Field(..., description="Provider display name")
    cost_price: Optional[Decimal] = None
    selling_price: Optional[Decimal] = None
    profit: Optional[Decimal] = Field(
        default=None,
        description="Selling minus cost price, only for successful transactions"
    )
    serial_number: Optional[str] = None
    failure_reason: Optional[str] = None
    additional_info: str = "Webhook Update"
    timestamp: datetime
    transacted_by: Optional[str] = None
    provider_transaction_id: Optional[str] = None
    recipient_chat_id: Optional[str] = Field(
        default=None,
        description="Personal Telegram chat of the user who placed the order"
    )


class WebhookErrorCode(str, Enum):
    MALFORMED_BODY = "MALFORMED_BODY"
    SCHEMA_INVALID = "SCHEMA_INVALID"
    IP_NOT_ALLOWED = "IP_NOT_ALLOWED"
    SIGNATURE_MISMATCH = "SIGNATURE_MISMATCH"
    CONFIGURATION_MISSING = "CONFIGURATION_MISSING"
    PERSISTENCE_FAILURE = "PERSISTENCE_FAILURE"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class WebhookOutcomeStatus(str, Enum):
    SUCCESS = "success"
    IGNORED = "ignored"
    FAILED_INTERNAL = "failed_internal"


class WebhookOutcomeDTO(BaseModel):
    """
    Response DTO for an acknowledged webhook delivery

    Every outcome here is acknowledged to the provider so it stops retrying.
    """

    status: WebhookOutcomeStatus
    message: str
    ref_id: Optional[str] = None
    transaction_status: Optional[TransactionStatus] = None
    notified: bool = False
