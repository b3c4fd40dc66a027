"""Integration tests for Webhook API endpoints"""

import hashlib
import json
from functools import partial

import httpx
import pytest
import pytest_asyncio
from datetime import datetime, timezone
from decimal import Decimal
from httpx import ASGITransport, AsyncClient

from config import ApplicationConfig
from src.adapter.services.notification_dispatcher import AsyncioNotificationDispatcher
from src.adapter.services.notification_service import create_notification_service
from src.depends import get_session, get_notification_dispatcher
from src.domain.price_setting import PriceSetting
from src.domain.provider import ProviderName
from src.domain.transaction import Transaction, TransactionStatus
from src.domain.user import User

DIGIFLAZZ_URL = f"{ApplicationConfig.API_PREFIX}/webhook/digiflazz"
TOKOVOUCHER_URL = f"{ApplicationConfig.API_PREFIX}/webhook/tokovoucher"


def md5(text):
    return hashlib.md5(text.encode("utf-8")).hexdigest()


def digiflazz_payload(ref_id="T1", status="Sukses", rc="00", sign=None, **data_overrides):
    data = {
        "ref_id": ref_id,
        "status": status,
        "rc": rc,
        "sn": "ABC123",
        "buyer_sku_code": "X",
        "customer_no": "08123",
        "message": "ok",
    }
    data.update(data_overrides)
    return {"data": data, "sign": sign if sign is not None else md5(f"userkey{ref_id}")}


async def add_transaction(db_session, ref_id, provider=ProviderName.DIGIFLAZZ,
                          status=TransactionStatus.PENDING, cost_price="10150", buyer_sku_code="X"):
    transaction = Transaction(
        ref_id=ref_id,
        provider=provider,
        buyer_sku_code=buyer_sku_code,
        product_name="XL 10.000",
        details="08123",
        cost_price=Decimal(cost_price),
        selling_price=Decimal(cost_price) + Decimal("1000"),
        status=status,
        transacted_by="admin",
        created_at=datetime.now(timezone.utc),
    )
    db_session.add(transaction)
    await db_session.commit()
    return transaction


async def reload(db_session, transaction):
    await db_session.refresh(transaction)
    return transaction


class TestDigiflazzWebhookAPI:
    """Digiflazz callback endpoint"""

    @pytest.mark.asyncio
    async def test_success_settles_transaction(self, client: AsyncClient, db_session, admin_settings, dispatcher):
        """Scenario A: correctly signed Sukses callback settles a Pending transaction"""
        # Arrange
        transaction = await add_transaction(db_session, "T1")
        db_session.add(User(username="admin", telegram_chat_id="555"))
        await db_session.commit()

        # Act
        response = await client.post(DIGIFLAZZ_URL, json=digiflazz_payload())

        # Assert
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["status"] == "success"
        assert data["message"] == "Webhook processed"
        assert data["ref_id"] == "T1"
        assert data["transaction_status"] == "Sukses"
        assert data["notified"] is True

        transaction = await reload(db_session, transaction)
        assert transaction.status == TransactionStatus.SUKSES
        assert transaction.serial_number == "ABC123"
        assert transaction.settled_at is not None

        assert len(dispatcher.notifications) == 1
        notification = dispatcher.notifications[0]
        assert notification.ref_id == "T1"
        assert notification.provider == "Digiflazz"
        assert notification.recipient_chat_id == "555"

    @pytest.mark.asyncio
    async def test_bad_signature_is_forbidden(self, client: AsyncClient, db_session, admin_settings, dispatcher):
        """Scenario B: any other signature is rejected and nothing changes"""
        transaction = await add_transaction(db_session, "T1")

        response = await client.post(DIGIFLAZZ_URL, json=digiflazz_payload(sign="0" * 32))

        assert response.status_code == 403
        assert response.json()["error"]["code"] == "SIGNATURE_MISMATCH"
        transaction = await reload(db_session, transaction)
        assert transaction.status == TransactionStatus.PENDING
        assert transaction.serial_number is None
        assert dispatcher.notifications == []

    @pytest.mark.asyncio
    async def test_unknown_ref_id_is_ignored(self, client: AsyncClient, db_session, admin_settings, dispatcher):
        """Scenario E: unknown reference is acknowledged without side effects"""
        response = await client.post(DIGIFLAZZ_URL, json=digiflazz_payload(ref_id="MISSING"))

        assert response.status_code == 200
        assert response.json()["data"]["status"] == "ignored"
        assert await db_session.get(Transaction, "MISSING") is None
        assert dispatcher.notifications == []

    @pytest.mark.asyncio
    async def test_failed_callback_records_reason(self, client: AsyncClient, db_session, admin_settings):
        transaction = await add_transaction(db_session, "T1")

        response = await client.post(
            DIGIFLAZZ_URL,
            json=digiflazz_payload(status="Gagal", rc="02", sn="", message="Nomor tujuan salah"),
        )

        assert response.status_code == 200
        transaction = await reload(db_session, transaction)
        assert transaction.status == TransactionStatus.GAGAL
        assert transaction.failure_reason == "Nomor tujuan salah"
        assert transaction.serial_number is None

    @pytest.mark.asyncio
    async def test_settled_transaction_is_not_reverted(self, client: AsyncClient, db_session, admin_settings, dispatcher):
        transaction = await add_transaction(db_session, "T1", status=TransactionStatus.SUKSES)

        response = await client.post(DIGIFLAZZ_URL, json=digiflazz_payload(status="Gagal", rc="02"))

        assert response.status_code == 200
        assert response.json()["data"]["status"] == "ignored"
        transaction = await reload(db_session, transaction)
        assert transaction.status == TransactionStatus.SUKSES
        assert dispatcher.notifications == []

    @pytest.mark.asyncio
    async def test_replayed_callback_is_idempotent(self, client: AsyncClient, db_session, admin_settings):
        transaction = await add_transaction(db_session, "T1")

        first = await client.post(DIGIFLAZZ_URL, json=digiflazz_payload())
        transaction = await reload(db_session, transaction)
        settled_at = transaction.settled_at
        second = await client.post(DIGIFLAZZ_URL, json=digiflazz_payload())

        assert first.status_code == 200
        assert second.status_code == 200
        transaction = await reload(db_session, transaction)
        assert transaction.status == TransactionStatus.SUKSES
        assert transaction.serial_number == "ABC123"
        assert transaction.settled_at == settled_at

    @pytest.mark.asyncio
    async def test_malformed_json(self, client: AsyncClient, admin_settings):
        response = await client.post(
            DIGIFLAZZ_URL, content="{not json", headers={"Content-Type": "application/json"}
        )

        assert response.status_code == 400
        error = response.json()["error"]
        assert error["code"] == "MALFORMED_BODY"
        assert error["message"] == "Webhook processing error: Invalid JSON body."

    @pytest.mark.asyncio
    async def test_empty_body_is_ignored(self, client: AsyncClient):
        response = await client.post(DIGIFLAZZ_URL, content="")

        assert response.status_code == 200
        assert response.json()["data"]["status"] == "ignored"

    @pytest.mark.asyncio
    async def test_schema_invalid(self, client: AsyncClient, admin_settings):
        response = await client.post(DIGIFLAZZ_URL, json={"data": {"ref_id": "T1"}, "sign": "x"})

        assert response.status_code == 400
        error = response.json()["error"]
        assert error["code"] == "SCHEMA_INVALID"
        assert error["details"]

    @pytest.mark.asyncio
    async def test_missing_settings_is_configuration_error(self, client: AsyncClient, db_session):
        await add_transaction(db_session, "T1")

        response = await client.post(DIGIFLAZZ_URL, json=digiflazz_payload())

        assert response.status_code == 500
        assert response.json()["error"] == {
            "code": "CONFIGURATION_MISSING",
            "message": "Digiflazz integration not configured",
        }


class TestTokoVoucherWebhookAPI:
    """TokoVoucher callback endpoint"""

    @pytest.mark.asyncio
    async def test_pending_updates_cost_price(self, client: AsyncClient, db_session, admin_settings):
        """Scenario C: pending callback from an allowed IP updates the cost price"""
        # Arrange
        admin_settings.tokovoucher_allowed_ips = "52.1.1.1, 52.1.1.2"
        db_session.add(admin_settings)
        await db_session.commit()
        transaction = await add_transaction(
            db_session, "T2", provider=ProviderName.TOKOVOUCHER, cost_price="4800"
        )

        # Act
        response = await client.post(
            TOKOVOUCHER_URL,
            json={"ref_id": "T2", "status": "pending", "price": 5000},
            headers={
                "X-TokoVoucher-Authorization": md5("M1:K1:T2"),
                "X-Forwarded-For": "52.1.1.2",
            },
        )

        # Assert
        assert response.status_code == 200
        assert response.json()["data"]["transaction_status"] == "Pending"
        transaction = await reload(db_session, transaction)
        assert transaction.status == TransactionStatus.PENDING
        assert transaction.cost_price == Decimal("5000")
        assert transaction.selling_price == Decimal("6000")
        assert transaction.settled_at is None

    @pytest.mark.asyncio
    async def test_ip_not_allowed(self, client: AsyncClient, db_session, admin_settings, dispatcher):
        """Scenario D: a disallowed IP is rejected even with a valid signature"""
        admin_settings.tokovoucher_allowed_ips = "52.1.1.1"
        db_session.add(admin_settings)
        await db_session.commit()
        transaction = await add_transaction(db_session, "T2", provider=ProviderName.TOKOVOUCHER)

        response = await client.post(
            TOKOVOUCHER_URL,
            json={"ref_id": "T2", "status": "sukses"},
            headers={"X-TokoVoucher-Authorization": md5("M1:K1:T2"), "X-Real-IP": "8.8.8.8"},
        )

        assert response.status_code == 403
        assert response.json()["error"]["code"] == "IP_NOT_ALLOWED"
        transaction = await reload(db_session, transaction)
        assert transaction.status == TransactionStatus.PENDING
        assert dispatcher.notifications == []

    @pytest.mark.asyncio
    async def test_success_with_custom_price(self, client: AsyncClient, db_session, admin_settings, dispatcher):
        db_session.add(
            PriceSetting(product_code="TSEL5", provider=ProviderName.TOKOVOUCHER, price=Decimal("7000"))
        )
        await db_session.commit()
        transaction = await add_transaction(
            db_session, "T3", provider=ProviderName.TOKOVOUCHER, cost_price="5000", buyer_sku_code="TSEL5"
        )

        response = await client.post(
            TOKOVOUCHER_URL,
            json={"ref_id": "T3", "trx_id": "TV123", "status": "sukses", "price": 5100, "sn": "SN-001"},
            headers={"X-TokoVoucher-Authorization": md5("M1:K1:T3")},
        )

        assert response.status_code == 200
        transaction = await reload(db_session, transaction)
        assert transaction.status == TransactionStatus.SUKSES
        assert transaction.provider_transaction_id == "TV123"
        assert transaction.serial_number == "SN-001"
        assert transaction.cost_price == Decimal("5100")
        assert transaction.selling_price == Decimal("7000")

        notification = dispatcher.notifications[0]
        assert notification.provider == "TokoVoucher"
        assert notification.profit == Decimal("1900")

    @pytest.mark.asyncio
    async def test_missing_signature_header(self, client: AsyncClient, db_session, admin_settings):
        await add_transaction(db_session, "T2", provider=ProviderName.TOKOVOUCHER)

        response = await client.post(TOKOVOUCHER_URL, content=json.dumps({"ref_id": "T2", "status": "sukses"}))

        assert response.status_code == 403
        assert response.json()["error"]["code"] == "SIGNATURE_MISMATCH"


class TestHealthAPI:

    @pytest.mark.asyncio
    async def test_health(self, client: AsyncClient):
        response = await client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "ok"}


class TestNotificationIsolation:

    @pytest.mark.asyncio
    async def test_dispatch_failure_keeps_response(self, client: AsyncClient, db_session, admin_settings, dispatcher):
        transaction = await add_transaction(db_session, "T1")

        def broken_dispatch(notification, telegram):
            raise RuntimeError("event loop closed")

        dispatcher.dispatch = broken_dispatch

        response = await client.post(DIGIFLAZZ_URL, json=digiflazz_payload())

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["status"] == "success"
        assert data["notified"] is False
        transaction = await reload(db_session, transaction)
        assert transaction.status == TransactionStatus.SUKSES

    @pytest.mark.asyncio
    async def test_notifier_receives_stored_telegram_settings(
        self, client: AsyncClient, db_session, admin_settings, dispatcher
    ):
        await add_transaction(db_session, "T1")

        response = await client.post(DIGIFLAZZ_URL, json=digiflazz_payload())

        assert response.status_code == 200
        telegram = dispatcher.telegram_settings[0]
        assert telegram.bot_token == "123:abc"
        assert telegram.chat_ids == ["-100"]


class TestStoredTimestamps:

    @pytest.mark.asyncio
    async def test_default_created_at_row_settles(self, client: AsyncClient, db_session, admin_settings):
        """A Pending row persisted with its default creation time reaches Sukses"""
        # Arrange
        transaction = Transaction(
            ref_id="T9",
            provider=ProviderName.DIGIFLAZZ,
            buyer_sku_code="X",
            product_name="XL 10.000",
            details="08123",
            cost_price=Decimal("10150"),
            selling_price=Decimal("11150"),
            transacted_by="admin",
        )
        assert transaction.created_at.tzinfo is not None
        db_session.add(transaction)
        await db_session.commit()

        # Act
        response = await client.post(DIGIFLAZZ_URL, json=digiflazz_payload(ref_id="T9"))

        # Assert
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["status"] == "success"
        assert data["transaction_status"] == "Sukses"
        transaction = await reload(db_session, transaction)
        assert transaction.status == TransactionStatus.SUKSES
        assert transaction.serial_number == "ABC123"
        assert transaction.settled_at is not None
        assert transaction.created_at is not None


@pytest.fixture
def telegram_requests():
    return []


@pytest_asyncio.fixture
async def failing_telegram_client(db_session, telegram_requests):
    """Client wired to the real dispatcher with a Telegram API that rejects every message"""
    from src.api.app import create_app

    def handler(request: httpx.Request) -> httpx.Response:
        telegram_requests.append(request)
        return httpx.Response(400, json={"ok": False, "description": "Bad Request: chat not found"})

    app = create_app(ApplicationConfig)

    async def override_get_session():
        yield db_session

    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_notification_dispatcher] = lambda: AsyncioNotificationDispatcher(
        partial(create_notification_service, transport=httpx.MockTransport(handler))
    )

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


class TestTelegramSinkFailure:

    @pytest.mark.asyncio
    async def test_rejected_telegram_message_keeps_response(
        self, failing_telegram_client: AsyncClient, db_session, admin_settings, telegram_requests
    ):
        # Arrange
        transaction = await add_transaction(db_session, "T1")

        # Act
        response = await failing_telegram_client.post(DIGIFLAZZ_URL, json=digiflazz_payload())
        await AsyncioNotificationDispatcher.drain(timeout=1)

        # Assert
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["status"] == "success"
        assert data["notified"] is True
        transaction = await reload(db_session, transaction)
        assert transaction.status == TransactionStatus.SUKSES

        assert len(telegram_requests) == 1
        assert telegram_requests[0].url.path == "/bot123:abc/sendMessage"
        assert json.loads(telegram_requests[0].content)["chat_id"] == "-100"
