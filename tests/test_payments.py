"""MoMo 결제 테스트 — 결제 생성, IPN 정산.

MoMo payment tests — Payment creation against a mocked gateway call and
IPN reconciliation with real HMAC signatures.
"""

from decimal import Decimal
from unittest.mock import AsyncMock, patch
from uuid import UUID

import pytest_asyncio
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from tawatch.config import settings
from tawatch.models.order import Order
from tawatch.services.payment_service import to_momo_amount
from tawatch.utils import momo
from tests.conftest import IPN, MOMO_OK, auth_header, create_payment, place_order, signed_ipn

ORDERS = "/api/v1/shop/orders"


@pytest_asyncio.fixture
async def momo_order(client: AsyncClient, customer_token, product) -> dict:
    """MoMo 결제 주문 — total 330,000 VND."""
    return await place_order(client, customer_token, product, payment_method="momo")


class TestCreateMomoPayment:
    """MoMo 결제 생성 테스트."""

    async def test_create_payment(self, client: AsyncClient, customer_token, momo_order):
        res, mock = await create_payment(client, customer_token, momo_order["id"])
        assert res.status_code == 201, res.text
        data = res.json()
        assert data["pay_url"] == MOMO_OK["payUrl"]
        assert data["order_id"] == momo_order["id"]

        body = mock.await_args.args[0]
        assert body["amount"] == 330000
        assert body["partnerCode"] == settings.MOMO_PARTNER_CODE
        assert "accessKey" not in body
        assert body["orderId"].startswith(momo_order["code"])
        assert len(body["signature"]) == 64

    async def test_each_attempt_gets_new_ids(self, client: AsyncClient, customer_token, momo_order):
        _, first = await create_payment(client, customer_token, momo_order["id"])
        _, second = await create_payment(client, customer_token, momo_order["id"])
        assert first.await_args.args[0]["orderId"] != second.await_args.args[0]["orderId"]

        res = await client.get(f"{ORDERS}/{momo_order['id']}/payments", headers=auth_header(customer_token))
        assert len(res.json()) == 2

    async def test_cod_order_rejected(self, client: AsyncClient, customer_token, product):
        order = await place_order(client, customer_token, product)
        res, mock = await create_payment(client, customer_token, order["id"])
        assert res.status_code == 400
        mock.assert_not_awaited()

    async def test_other_users_order(self, client: AsyncClient, other_token, momo_order):
        res, _ = await create_payment(client, other_token, momo_order["id"])
        assert res.status_code == 404

    async def test_gateway_rejects(self, client: AsyncClient, customer_token, momo_order):
        """resultCode != 0 → 400, 실패 시도 기록."""
        res, _ = await create_payment(
            client, customer_token, momo_order["id"],
            gateway_result={"resultCode": 22, "message": "Invalid amount"},
        )
        assert res.status_code == 400
        assert "Invalid amount" in res.json()["detail"]

        payments = (await client.get(
            f"{ORDERS}/{momo_order['id']}/payments", headers=auth_header(customer_token),
        )).json()
        assert payments[0]["status"] == "failed"
        assert payments[0]["result_code"] == 22

    async def test_gateway_unreachable(self, client: AsyncClient, customer_token, momo_order):
        mock = AsyncMock(side_effect=momo.MomoError("connect timeout"))
        with patch("tawatch.utils.momo.create_payment", mock):
            res = await client.post(
                f"{ORDERS}/{momo_order['id']}/payments/momo", headers=auth_header(customer_token),
            )
        assert res.status_code == 502

        payments = (await client.get(
            f"{ORDERS}/{momo_order['id']}/payments", headers=auth_header(customer_token),
        )).json()
        assert len(payments) == 1
        assert payments[0]["status"] == "failed"


class TestMomoIpn:
    """MoMo IPN 정산 테스트."""

    async def _pending_attempt(self, client: AsyncClient, token: str, order: dict) -> dict:
        await create_payment(client, token, order["id"])
        payments = (await client.get(f"{ORDERS}/{order['id']}/payments", headers=auth_header(token))).json()
        return payments[0]

    async def test_successful_ipn(self, client: AsyncClient, customer_token, momo_order):
        attempt = await self._pending_attempt(client, customer_token, momo_order)

        res = await client.post(IPN, json=signed_ipn(attempt["provider_order_id"], 330000))
        assert res.status_code == 204, res.text

        order = (await client.get(f"{ORDERS}/{momo_order['id']}", headers=auth_header(customer_token))).json()
        assert order["payment_status"] == "paid"
        assert order["status"] == "confirmed"
        assert order["payments"][0]["status"] == "success"
        assert order["payments"][0]["transaction_id"] == "4088878653"

    async def test_repeated_ipn_is_idempotent(self, client: AsyncClient, customer_token, momo_order):
        attempt = await self._pending_attempt(client, customer_token, momo_order)
        payload = signed_ipn(attempt["provider_order_id"], 330000)

        assert (await client.post(IPN, json=payload)).status_code == 204
        assert (await client.post(IPN, json=payload)).status_code == 204

        order = (await client.get(f"{ORDERS}/{momo_order['id']}", headers=auth_header(customer_token))).json()
        assert [h["to_status"] for h in order["history"]] == ["pending", "confirmed"]

    async def test_bad_signature(self, client: AsyncClient, customer_token, momo_order):
        attempt = await self._pending_attempt(client, customer_token, momo_order)
        payload = signed_ipn(attempt["provider_order_id"], 330000)
        payload["amount"] = 1000

        res = await client.post(IPN, json=payload)
        assert res.status_code == 400

    async def test_amount_mismatch(self, client: AsyncClient, customer_token, momo_order):
        attempt = await self._pending_attempt(client, customer_token, momo_order)
        res = await client.post(IPN, json=signed_ipn(attempt["provider_order_id"], 1000))
        assert res.status_code == 400

    async def test_unknown_order_id(self, client: AsyncClient):
        res = await client.post(IPN, json=signed_ipn("TW-UNKNOWN-1234", 330000))
        assert res.status_code == 404

    async def test_failed_payment(self, client: AsyncClient, customer_token, momo_order):
        attempt = await self._pending_attempt(client, customer_token, momo_order)
        res = await client.post(IPN, json=signed_ipn(attempt["provider_order_id"], 330000, result_code=1006))
        assert res.status_code == 204

        order = (await client.get(f"{ORDERS}/{momo_order['id']}", headers=auth_header(customer_token))).json()
        assert order["payment_status"] == "unpaid"
        assert order["status"] == "pending"
        assert order["payments"][0]["status"] == "failed"

    async def test_paid_order_cannot_be_paid_again(self, client: AsyncClient, customer_token, momo_order):
        attempt = await self._pending_attempt(client, customer_token, momo_order)
        await client.post(IPN, json=signed_ipn(attempt["provider_order_id"], 330000))

        res, mock = await create_payment(client, customer_token, momo_order["id"])
        assert res.status_code == 400
        mock.assert_not_awaited()

    async def test_ipn_after_cancel_owes_refund(
        self, client: AsyncClient, customer_token, staff_token, momo_order,
    ):
        """취소 후 도착한 결제 완료 IPN — order stays cancelled, refund owed."""
        attempt = await self._pending_attempt(client, customer_token, momo_order)
        res = await client.post(f"{ORDERS}/{momo_order['id']}/cancel", json={}, headers=auth_header(customer_token))
        assert res.status_code == 200

        res = await client.post(IPN, json=signed_ipn(attempt["provider_order_id"], 330000))
        assert res.status_code == 204

        order = (await client.get(f"{ORDERS}/{momo_order['id']}", headers=auth_header(customer_token))).json()
        assert order["status"] == "cancelled"
        assert order["payment_status"] == "refunded"
        assert order["payments"][0]["status"] == "success"

        res = await client.get(
            "/api/v1/admin/dashboard/summary",
            params={"date_from": "2000-01-01T00:00:00", "date_to": "2100-01-01T00:00:00"},
            headers=auth_header(staff_token),
        )
        assert Decimal(res.json()["revenue"]) == Decimal("0")


class TestMomoAmount:
    """VND 금액 반올림 테스트."""

    async def test_fractional_total_rounds_half_up(
        self, client: AsyncClient, db: AsyncSession, customer_token, momo_order,
    ):
        order = await db.get(Order, UUID(momo_order["id"]))
        order.total_amount = Decimal("330456.70")
        await db.flush()

        res, mock = await create_payment(client, customer_token, momo_order["id"])
        assert res.status_code == 201, res.text
        assert mock.await_args.args[0]["amount"] == 330457
        assert Decimal(res.json()["amount"]) == Decimal("330457")

        payments = (await client.get(f"{ORDERS}/{momo_order['id']}/payments", headers=auth_header(customer_token))).json()
        res = await client.post(IPN, json=signed_ipn(payments[0]["provider_order_id"], 330457))
        assert res.status_code == 204

    def test_to_momo_amount(self):
        assert to_momo_amount(Decimal("1000.49")) == Decimal("1000")
        assert to_momo_amount(Decimal("1000.50")) == Decimal("1001")
        assert to_momo_amount(Decimal("330000.00")) == Decimal("330000")
