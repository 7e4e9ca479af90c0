"""주문 API 테스트 — 체크아웃, 내 주문, 취소, 관리자 상태 변경.

Order API tests — Checkout totals and stock reservation, customer reads and
cancellation, and the back-office status workflow.
"""

from decimal import Decimal

import pytest_asyncio
from httpx import AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from tawatch.models.coupon import Coupon
from tawatch.models.inventory import InventoryTransaction
from tests.conftest import (
    IPN,
    SHIPPING_ADDRESS,
    auth_header,
    create_payment,
    deliver_order,
    place_order,
    set_order_status,
    signed_ipn,
)

ORDERS = "/api/v1/shop/orders"
ADMIN_ORDERS = "/api/v1/admin/orders"


@pytest_asyncio.fixture
async def coupon(db: AsyncSession):
    """정액 50,000 VND 쿠폰, 전체 한도 10회."""
    c = Coupon(
        code="GIAM50K",
        discount_type="fixed",
        discount_value=Decimal("50000"),
        min_order_amount=Decimal("0"),
        usage_limit=10,
        per_user_limit=1,
    )
    db.add(c)
    await db.flush()
    await db.refresh(c)
    return c


class TestCheckout:
    """체크아웃 테스트."""

    async def test_checkout_totals(self, client: AsyncClient, db: AsyncSession, customer_token, product):
        """300,000 × 1 + 배송비 30,000."""
        order = await place_order(client, customer_token, product)

        assert order["status"] == "pending"
        assert order["payment_status"] == "unpaid"
        assert order["payment_method"] == "cod"
        assert order["code"]
        assert Decimal(order["subtotal"]) == Decimal("300000")
        assert Decimal(order["shipping_fee"]) == Decimal("30000")
        assert Decimal(order["total_amount"]) == Decimal("330000")
        assert order["items"][0]["sku"] == "SKU-001"
        assert order["items"][0]["quantity"] == 1
        assert order["history"][0]["to_status"] == "pending"
        assert order["city"] == SHIPPING_ADDRESS["city"]

    async def test_free_shipping_over_threshold(self, client: AsyncClient, customer_token, expensive_product):
        """할인가 1,500,000 — 무료 배송."""
        order = await place_order(client, customer_token, expensive_product)
        assert Decimal(order["subtotal"]) == Decimal("1500000")
        assert Decimal(order["shipping_fee"]) == Decimal("0")
        assert Decimal(order["total_amount"]) == Decimal("1500000")

    async def test_stock_reserved_and_cart_cleared(
        self, client: AsyncClient, db: AsyncSession, customer_token, product,
    ):
        await place_order(client, customer_token, product, quantity=3)

        await db.refresh(product)
        assert product.stock_quantity == 7
        assert product.sold_count == 3

        ledger = (await db.execute(
            select(InventoryTransaction).where(
                InventoryTransaction.product_id == product.id,
                InventoryTransaction.reason == "order_placed",
            )
        )).scalars().all()
        assert len(ledger) == 1
        assert ledger[0].change == -3

        cart = (await client.get("/api/v1/shop/cart/", headers=auth_header(customer_token))).json()
        assert cart["items"] == []

    async def test_empty_cart(self, client: AsyncClient, customer_token):
        res = await client.post(
            f"{ORDERS}/", json={"shipping_address": SHIPPING_ADDRESS}, headers=auth_header(customer_token),
        )
        assert res.status_code == 400
        assert res.json()["detail"] == "Cart is empty"

    async def test_address_required(self, client: AsyncClient, customer_token, product):
        await client.post(
            "/api/v1/shop/cart/items",
            json={"product_id": str(product.id), "quantity": 1},
            headers=auth_header(customer_token),
        )
        res = await client.post(f"{ORDERS}/", json={}, headers=auth_header(customer_token))
        assert res.status_code == 400

    async def test_saved_address(self, client: AsyncClient, customer_token, product):
        res = await client.post("/api/v1/shop/addresses", json={
            "recipient_name": "Trần Thị B",
            "phone": "0912345678",
            "line1": "45 Nguyễn Huệ",
            "city": "Hồ Chí Minh",
        }, headers=auth_header(customer_token))
        address_id = res.json()["id"]

        order = await place_order(client, customer_token, product, address_id=address_id)
        assert order["recipient_name"] == "Trần Thị B"
        assert order["address_line"] == "45 Nguyễn Huệ"

    async def test_coupon_applied(self, client: AsyncClient, db: AsyncSession, customer_token, product, coupon):
        order = await place_order(client, customer_token, product, coupon_code="giam50k")
        assert order["coupon_code"] == "GIAM50K"
        assert Decimal(order["discount_amount"]) == Decimal("50000")
        # 배송비는 할인 전 소계 기준
        assert Decimal(order["total_amount"]) == Decimal("280000")

        await db.refresh(coupon)
        assert coupon.used_count == 1

    async def test_coupon_per_user_limit(
        self, client: AsyncClient, customer_token, product, expensive_product, coupon,
    ):
        await place_order(client, customer_token, product, coupon_code="GIAM50K")
        await client.post(
            "/api/v1/shop/cart/items",
            json={"product_id": str(expensive_product.id), "quantity": 1},
            headers=auth_header(customer_token),
        )
        res = await client.post(f"{ORDERS}/", json={
            "shipping_address": SHIPPING_ADDRESS,
            "coupon_code": "GIAM50K",
        }, headers=auth_header(customer_token))
        assert res.status_code == 400

    async def test_stock_changed_since_added(self, client: AsyncClient, db: AsyncSession, customer_token, product):
        """장바구니 담은 뒤 재고가 줄면 체크아웃 실패."""
        await client.post(
            "/api/v1/shop/cart/items",
            json={"product_id": str(product.id), "quantity": 5},
            headers=auth_header(customer_token),
        )
        product.stock_quantity = 2
        await db.flush()

        res = await client.post(
            f"{ORDERS}/", json={"shipping_address": SHIPPING_ADDRESS}, headers=auth_header(customer_token),
        )
        assert res.status_code == 400


class TestMyOrders:
    """내 주문 조회/취소 테스트."""

    async def test_list_and_get(self, client: AsyncClient, customer_token, product):
        order = await place_order(client, customer_token, product)

        res = await client.get(f"{ORDERS}/", headers=auth_header(customer_token))
        assert res.status_code == 200
        data = res.json()
        assert data["total"] == 1
        assert data["items"][0]["code"] == order["code"]
        assert data["items"][0]["item_count"] == 1

        res = await client.get(f"{ORDERS}/{order['id']}", headers=auth_header(customer_token))
        assert res.status_code == 200

    async def test_other_users_order_hidden(self, client: AsyncClient, customer_token, other_token, product):
        order = await place_order(client, customer_token, product)
        res = await client.get(f"{ORDERS}/{order['id']}", headers=auth_header(other_token))
        assert res.status_code == 404

        res = await client.get(f"{ORDERS}/", headers=auth_header(other_token))
        assert res.json()["total"] == 0

    async def test_cancel_restocks_and_releases_coupon(
        self, client: AsyncClient, db: AsyncSession, customer_token, product, coupon,
    ):
        order = await place_order(client, customer_token, product, quantity=2, coupon_code="GIAM50K")

        res = await client.post(
            f"{ORDERS}/{order['id']}/cancel",
            json={"reason": "Đổi ý"},
            headers=auth_header(customer_token),
        )
        assert res.status_code == 200, res.text
        data = res.json()
        assert data["status"] == "cancelled"
        assert data["cancel_reason"] == "Đổi ý"
        assert data["cancelled_at"] is not None

        await db.refresh(product)
        await db.refresh(coupon)
        assert product.stock_quantity == 10
        assert product.sold_count == 0
        assert coupon.used_count == 0

    async def test_cannot_cancel_confirmed(self, client: AsyncClient, customer_token, staff_token, product):
        order = await place_order(client, customer_token, product)
        await set_order_status(client, staff_token, order["id"], "confirmed")

        res = await client.post(f"{ORDERS}/{order['id']}/cancel", json={}, headers=auth_header(customer_token))
        assert res.status_code == 400


class TestAdminOrders:
    """관리자 주문 상태 변경 테스트."""

    async def test_customer_forbidden(self, client: AsyncClient, customer_token):
        res = await client.get(f"{ADMIN_ORDERS}/", headers=auth_header(customer_token))
        assert res.status_code == 403

    async def test_list_with_status_filter(self, client: AsyncClient, customer_token, staff_token, product):
        order = await place_order(client, customer_token, product)
        res = await client.get(f"{ADMIN_ORDERS}/", params={"status": "pending"}, headers=auth_header(staff_token))
        assert res.json()["total"] == 1
        assert res.json()["items"][0]["id"] == order["id"]

        res = await client.get(f"{ADMIN_ORDERS}/", params={"status": "shipping"}, headers=auth_header(staff_token))
        assert res.json()["total"] == 0

    async def test_cod_delivery_marks_paid(self, client: AsyncClient, customer_token, staff_token, product):
        order = await place_order(client, customer_token, product)
        data = await deliver_order(client, staff_token, order["id"])

        assert data["status"] == "delivered"
        assert data["payment_status"] == "paid"
        assert data["delivered_at"] is not None
        assert [h["to_status"] for h in data["history"]] == ["pending", "confirmed", "shipping", "delivered"]
        assert len(data["payments"]) == 1
        assert data["payments"][0]["provider"] == "cod"
        assert data["payments"][0]["status"] == "success"

    async def test_illegal_transition(self, client: AsyncClient, customer_token, staff_token, product):
        order = await place_order(client, customer_token, product)
        res = await set_order_status(client, staff_token, order["id"], "delivered")
        assert res.status_code == 400

    async def test_cannot_cancel_shipping(self, client: AsyncClient, customer_token, staff_token, product):
        order = await place_order(client, customer_token, product)
        await set_order_status(client, staff_token, order["id"], "confirmed")
        await set_order_status(client, staff_token, order["id"], "shipping")
        res = await set_order_status(client, staff_token, order["id"], "cancelled")
        assert res.status_code == 400

    async def test_staff_cancel_confirmed_restocks(
        self, client: AsyncClient, db: AsyncSession, customer_token, staff_token, product,
    ):
        order = await place_order(client, customer_token, product, quantity=4)
        await set_order_status(client, staff_token, order["id"], "confirmed")
        res = await set_order_status(client, staff_token, order["id"], "cancelled")
        assert res.status_code == 200
        assert res.json()["status"] == "cancelled"

        await db.refresh(product)
        assert product.stock_quantity == 10

    async def test_unknown_order(self, client: AsyncClient, staff_token):
        res = await client.get(
            f"{ADMIN_ORDERS}/00000000-0000-0000-0000-000000000000", headers=auth_header(staff_token),
        )
        assert res.status_code == 404

    async def test_staff_cancel_paid_order_refunds(
        self, client: AsyncClient, db: AsyncSession, customer_token, staff_token, product,
    ):
        order = await place_order(client, customer_token, product, quantity=2, payment_method="momo")
        await create_payment(client, customer_token, order["id"])
        attempt = (await client.get(f"{ORDERS}/{order['id']}/payments", headers=auth_header(customer_token))).json()[0]
        res = await client.post(IPN, json=signed_ipn(attempt["provider_order_id"], int(Decimal(order["total_amount"]))))
        assert res.status_code == 204

        res = await set_order_status(client, staff_token, order["id"], "cancelled")
        assert res.status_code == 200, res.text
        data = res.json()
        assert data["status"] == "cancelled"
        assert data["payment_status"] == "refunded"
        assert [h["to_status"] for h in data["history"]] == ["pending", "confirmed", "cancelled"]

        await db.refresh(product)
        assert product.stock_quantity == 10
