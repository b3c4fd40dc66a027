"""Webhook Provider Adapters

One adapter per upstream provider. Each knows its wire schema, where the
caller's signature travels, how the expected signature is derived from the
provider secrets, and how the provider's status vocabulary maps onto
TransactionStatus. Everything else in the pipeline is provider independent.
"""

import hashlib
from abc import ABC, abstractmethod
from typing import Any, Mapping, Optional, Type
from pydantic import BaseModel
from src.domain.admin_settings import ProviderCredentials
from src.domain.provider import ProviderName
from src.domain.transaction import TransactionStatus
from .dtos import DigiflazzWebhookPayload, TokoVoucherWebhookPayload, WebhookEnvelope

SUCCESS_STATUSES = frozenset({"sukses", "success"})
PENDING_STATUSES = frozenset({"pending"})


def md5_hex(text: str) -> str:
    return hashlib.md5(text.encode("utf-8")).hexdigest()


class WebhookAdapter(ABC):
    """
    Provider specific part of the webhook pipeline

    Implementations are stateless; signature formulas are fixed per provider.
    """

    provider: ProviderName
    payload_schema: Type[BaseModel]

    def parse(self, payload: Any, headers: Mapping[str, str]) -> WebhookEnvelope:
        """
        Validate a decoded JSON body and normalize it into an envelope

        Args:
            payload: Decoded JSON body
            headers: Request headers with lower-cased names

        Returns:
            WebhookEnvelope for the delivery

        Raises:
            pydantic.ValidationError: If the body does not match the provider schema
        """
        validated = self.payload_schema.model_validate(payload)
        return self._to_envelope(validated, headers)

    @abstractmethod
    def _to_envelope(self, payload: Any, headers: Mapping[str, str]) -> WebhookEnvelope:
        pass

    @abstractmethod
    def compute_expected_signature(self, credentials: ProviderCredentials, ref_id: str) -> str:
        pass

    @abstractmethod
    def map_status(self, envelope: WebhookEnvelope) -> TransactionStatus:
        """Map the provider status onto Pending, Sukses or Gagal. Never fails."""
        pass

    def failure_reason(self, envelope: WebhookEnvelope) -> Optional[str]:
        """Reason to record when the delivery maps to Gagal"""
        return envelope.message


class DigiflazzWebhookAdapter(WebhookAdapter):
    """
    Digiflazz callbacks

    Signature: MD5(username + api_key + ref_id), sent as body field `sign`.
    Response code is a secondary status signal.
    """

    provider = ProviderName.DIGIFLAZZ
    payload_schema = DigiflazzWebhookPayload

    SUCCESS_RESPONSE_CODES = frozenset({"00"})
    PENDING_RESPONSE_CODES = frozenset({"04", "13"})

    def _to_envelope(self, payload: DigiflazzWebhookPayload, headers: Mapping[str, str]) -> WebhookEnvelope:
        data = payload.data
        return WebhookEnvelope(
            provider=self.provider,
            ref_id=data.ref_id,
            status=data.status,
            response_code=data.rc,
            serial_number=data.sn or None,
            cost_price=data.price,
            billed_amount=data.balance_cut,
            message=data.message,
            signature=payload.sign,
            extras={
                "buyer_sku_code": data.buyer_sku_code,
                "customer_no": data.customer_no,
                "buyer_last_saldo": data.buyer_last_saldo,
            },
        )

    def compute_expected_signature(self, credentials: ProviderCredentials, ref_id: str) -> str:
        username, api_key = credentials.secrets
        return md5_hex(f"{username}{api_key}{ref_id}")

    def map_status(self, envelope: WebhookEnvelope) -> TransactionStatus:
        status = envelope.status.strip().lower()
        if status in SUCCESS_STATUSES or envelope.response_code in self.SUCCESS_RESPONSE_CODES:
            return TransactionStatus.SUKSES
        if status in PENDING_STATUSES or envelope.response_code in self.PENDING_RESPONSE_CODES:
            return TransactionStatus.PENDING
        return TransactionStatus.GAGAL


class TokoVoucherWebhookAdapter(WebhookAdapter):
    """
    TokoVoucher callbacks

    Signature: MD5(member_code + ":" + key + ":" + ref_id), sent in the
    X-TokoVoucher-Authorization header. Failed deliveries carry the reason in
    `sn` more often than in `message`.
    """

    provider = ProviderName.TOKOVOUCHER
    payload_schema = TokoVoucherWebhookPayload

    SIGNATURE_HEADER = "x-tokovoucher-authorization"

    def _to_envelope(self, payload: TokoVoucherWebhookPayload, headers: Mapping[str, str]) -> WebhookEnvelope:
        return WebhookEnvelope(
            provider=self.provider,
            ref_id=payload.ref_id,
            status=payload.status,
            serial_number=payload.sn or None,
            # A zero price means "not reported"
            cost_price=payload.price or None,
            provider_transaction_id=payload.trx_id or None,
            message=payload.message,
            signature=headers.get(self.SIGNATURE_HEADER),
            extras={
                "code": payload.code,
                "target": payload.target,
                "balance": payload.balance,
            },
        )

    def compute_expected_signature(self, credentials: ProviderCredentials, ref_id: str) -> str:
        member_code, key = credentials.secrets
        return md5_hex(f"{member_code}:{key}:{ref_id}")

    def map_status(self, envelope: WebhookEnvelope) -> TransactionStatus:
        status = envelope.status.strip().lower()
        if status in SUCCESS_STATUSES:
            return TransactionStatus.SUKSES
        if status in PENDING_STATUSES:
            return TransactionStatus.PENDING
        return TransactionStatus.GAGAL

    def failure_reason(self, envelope: WebhookEnvelope) -> Optional[str]:
        return envelope.serial_number or envelope.message


_ADAPTERS: dict[ProviderName, WebhookAdapter] = {
    ProviderName.DIGIFLAZZ: DigiflazzWebhookAdapter(),
    ProviderName.TOKOVOUCHER: TokoVoucherWebhookAdapter(),
}


def get_webhook_adapter(provider: ProviderName) -> WebhookAdapter:
    return _ADAPTERS[provider]
