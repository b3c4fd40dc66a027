"""VerifyWebhookAuthenticity Use Case

Confirms a webhook genuinely comes from the provider it claims to be from.
Pure: no I/O and no side effects, so it always runs before any mutation.
"""

import hmac
import logging
from typing import Mapping, Optional
from libs.result import Result, Return, Error
from src.domain.admin_settings import ProviderCredentials
from .dtos import WebhookEnvelope, WebhookErrorCode
from .providers import WebhookAdapter

logger = logging.getLogger(__name__)

LOOPBACK_IP = "127.0.0.1"


def resolve_client_ip(
    headers: Mapping[str, str],
    peer_ip: Optional[str] = None,
    default: str = LOOPBACK_IP,
) -> str:
    """
    Resolve the originating client IP of a request

    Order: first X-Forwarded-For entry, X-Real-IP, transport peer, default.

    Args:
        headers: Request headers with lower-cased names
        peer_ip: Address of the direct TCP peer, when known
        default: Address used when nothing else is available
    """
    forwarded_for = headers.get("x-forwarded-for")
    if forwarded_for:
        first = forwarded_for.split(",")[0].strip()
        if first:
            return first

    real_ip = headers.get("x-real-ip")
    if real_ip and real_ip.strip():
        return real_ip.strip()

    return peer_ip or default


class VerifyWebhookAuthenticity:
    """
    Use Case: Verify webhook authenticity

    Business Rules:
    1. Unconfigured provider credentials are our fault, not the caller's
       (CONFIGURATION_MISSING)
    2. A non-empty IP allow-list must contain the client IP (IP_NOT_ALLOWED);
       an empty list disables the check
    3. The supplied signature must equal the provider formula applied to the
       secrets and ref_id, byte for byte (SIGNATURE_MISMATCH)
    """

    def __init__(self, adapter: WebhookAdapter):
        self.adapter = adapter

    def execute(
        self,
        envelope: WebhookEnvelope,
        credentials: ProviderCredentials,
        client_ip: str,
    ) -> Result[None]:
        provider = self.adapter.provider.display_name

        if not credentials.is_configured:
            logger.error(f"{provider} webhook credentials are not configured in admin settings")
            return Return.err(
                Error(
                    code=WebhookErrorCode.CONFIGURATION_MISSING.value,
                    message=f"{provider} integration not configured",
                )
            )

        if credentials.ip_allow_list and client_ip not in credentials.ip_allow_list:
            logger.warning(
                f"{provider} webhook: denied IP {client_ip}. "
                f"Allowed: {', '.join(credentials.ip_allow_list)}"
            )
            return Return.err(
                Error(
                    code=WebhookErrorCode.IP_NOT_ALLOWED.value,
                    message="IP not allowed",
                    reason=f"Client IP {client_ip} is not in the allow-list",
                )
            )

        expected = self.adapter.compute_expected_signature(credentials, envelope.ref_id)
        received = envelope.signature or ""

        if not hmac.compare_digest(expected.encode("utf-8"), received.encode("utf-8")):
            logger.warning(
                f"{provider} webhook signature mismatch for ref_id {envelope.ref_id}. "
                f"Received: {envelope.signature}"
            )
            return Return.err(
                Error(
                    code=WebhookErrorCode.SIGNATURE_MISMATCH.value,
                    message="Invalid webhook signature",
                )
            )

        logger.info(f"{provider} webhook verified for ref_id {envelope.ref_id} from {client_ip}")
        return Return.ok(None)
