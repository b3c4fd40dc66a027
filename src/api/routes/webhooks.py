"""Webhook API Routes

Inbound status callbacks from the upstream PPOB providers. These endpoints
carry no user authentication; deliveries are authenticated by signature and
source IP inside the pipeline.
"""

from fastapi import APIRouter, Depends, Request, status
from sqlmodel.ext.asyncio.session import AsyncSession

from config import ApplicationConfig
from src.api.error import ClientError
from src.api.schemas.webhook_response import WebhookAckResponseSchema
from src.app.services.notification_dispatcher import NotificationDispatcher
from src.app.use_cases.webhook.dtos import WebhookErrorCode
from src.app.use_cases.webhook.notify_transaction_update import NotifyTransactionUpdate
from src.app.use_cases.webhook.process_webhook import ProcessWebhook
from src.app.use_cases.webhook.providers import get_webhook_adapter
from src.app.use_cases.webhook.reconcile_transaction import ReconcileTransaction
from src.adapter.repositories.price_setting_repository import SqlAlchemyPriceSettingRepository
from src.adapter.repositories.settings_repository import SqlAlchemySettingsRepository
from src.adapter.repositories.transaction_repository import SqlAlchemyTransactionRepository
from src.adapter.repositories.user_repository import SqlAlchemyUserRepository
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.depends import get_session, get_notification_dispatcher
from src.domain.provider import ProviderName

router = APIRouter(prefix="/webhook", tags=["Webhooks"])

ERROR_STATUS_CODES = {
    WebhookErrorCode.MALFORMED_BODY.value: status.HTTP_400_BAD_REQUEST,
    WebhookErrorCode.SCHEMA_INVALID.value: status.HTTP_400_BAD_REQUEST,
    WebhookErrorCode.IP_NOT_ALLOWED.value: status.HTTP_403_FORBIDDEN,
    WebhookErrorCode.SIGNATURE_MISMATCH.value: status.HTTP_403_FORBIDDEN,
    WebhookErrorCode.CONFIGURATION_MISSING.value: status.HTTP_500_INTERNAL_SERVER_ERROR,
    WebhookErrorCode.INTERNAL_ERROR.value: status.HTTP_500_INTERNAL_SERVER_ERROR,
}

WEBHOOK_RESPONSES = {
    400: {
        "description": "Malformed body or invalid payload structure",
        "content": {
            "application/json": {
                "example": {
                    "error": {
                        "code": "MALFORMED_BODY",
                        "message": "Webhook processing error: Invalid JSON body."
                    }
                }
            }
        }
    },
    403: {
        "description": "Signature or source IP rejected",
        "content": {
            "application/json": {
                "example": {
                    "error": {
                        "code": "SIGNATURE_MISMATCH",
                        "message": "Invalid webhook signature"
                    }
                }
            }
        }
    },
    500: {
        "description": "Provider integration not configured or unexpected fault",
        "content": {
            "application/json": {
                "example": {
                    "error": {
                        "code": "CONFIGURATION_MISSING",
                        "message": "TokoVoucher integration not configured"
                    }
                }
            }
        }
    }
}


async def _process_webhook(
    provider: ProviderName,
    request: Request,
    session: AsyncSession,
    dispatcher: NotificationDispatcher,
) -> WebhookAckResponseSchema:
    # Read as text so malformed JSON is ours to report
    raw_body = (await request.body()).decode("utf-8", errors="replace")

    # Create UnitOfWork and repositories
    uow = SqlAlchemyUnitOfWork(session)
    transaction_repo = SqlAlchemyTransactionRepository(session)
    settings_repo = SqlAlchemySettingsRepository(session)

    use_case = ProcessWebhook(
        adapter=get_webhook_adapter(provider),
        settings_repo=settings_repo,
        reconcile_transaction=ReconcileTransaction(
            uow,
            transaction_repo,
            SqlAlchemyPriceSettingRepository(session),
            terminal_state_guard=ApplicationConfig.WEBHOOK_TERMINAL_STATE_GUARD,
        ),
        notify_transaction_update=NotifyTransactionUpdate(
            transaction_repo,
            SqlAlchemyUserRepository(session),
            settings_repo,
            dispatcher,
        ),
        default_client_ip=ApplicationConfig.WEBHOOK_DEFAULT_CLIENT_IP,
    )

    peer_ip = request.client.host if request.client else None
    result = await use_case.execute(raw_body, request.headers, peer_ip=peer_ip)

    # Handle errors
    if result.is_err():
        raise ClientError(
            result.error,
            status_code=ERROR_STATUS_CODES.get(result.error.code, status.HTTP_500_INTERNAL_SERVER_ERROR),
        )

    return WebhookAckResponseSchema(data=result.value)


@router.post(
    "/digiflazz",
    response_model=WebhookAckResponseSchema,
    status_code=status.HTTP_200_OK,
    responses=WEBHOOK_RESPONSES,
)
async def digiflazz_webhook(
    request: Request,
    session: AsyncSession = Depends(get_session),
    dispatcher: NotificationDispatcher = Depends(get_notification_dispatcher),
):
    """
    Receive a Digiflazz transaction status callback.

    **Request body:**
    ```json
    {
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
      "sign": "md5(username + api_key + ref_id)"
    }
    ```

    **Returns:**
    - 200: Delivery acknowledged (processed, ignored, or failed internally)
    - 400: Malformed JSON or invalid payload structure
    - 403: Signature or source IP rejected
    - 500: Digiflazz credentials not configured
    """
    return await _process_webhook(ProviderName.DIGIFLAZZ, request, session, dispatcher)


@router.post(
    "/tokovoucher",
    response_model=WebhookAckResponseSchema,
    status_code=status.HTTP_200_OK,
    responses=WEBHOOK_RESPONSES,
)
async def tokovoucher_webhook(
    request: Request,
    session: AsyncSession = Depends(get_session),
    dispatcher: NotificationDispatcher = Depends(get_notification_dispatcher),
):
    """
    Receive a TokoVoucher transaction status callback.

    **Headers:**
    - `X-TokoVoucher-Authorization`: md5(member_code + ":" + key + ":" + ref_id)

    **Request body:**
    ```json
    {
      "ref_id": "T2",
      "trx_id": "TV123",
      "status": "sukses",
      "price": 5000,
      "sn": "SN-001"
    }
    ```

    **Returns:**
    - 200: Delivery acknowledged (processed, ignored, or failed internally)
    - 400: Malformed JSON or invalid payload structure
    - 403: Signature or source IP rejected
    - 500: TokoVoucher credentials not configured
    """
    return await _process_webhook(ProviderName.TOKOVOUCHER, request, session, dispatcher)
