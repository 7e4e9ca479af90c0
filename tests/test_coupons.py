"""쿠폰 테스트 — 규칙 평가 유닛 테스트 + 쿠폰 API.

Coupon tests — Unit tests for the pure evaluate() rule function, then the
storefront validate endpoint and back-office CRUD.
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest_asyncio
from httpx import AsyncClient
from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from tawatch.models.coupon import Coupon
from tawatch.services.coupon_service import evaluate
from tests.conftest import SHIPPING_ADDRESS, auth_header, place_order

NOW = datetime(2026, 9, 1, 12, 0, tzinfo=timezone.utc)
ADMIN_COUPONS = "/api/v1/admin/coupons"
VALIDATE = "/api/v1/shop/coupons/validate"


def make_coupon(**overrides) -> Coupon:
    """평가용 인메모리 쿠폰 (column defaults are not applied before insert)."""
    values = {
        "code": "WATCH10",
        "discount_type": "percentage",
        "discount_value": Decimal("10"),
        "max_discount_amount": None,
        "min_order_amount": Decimal("0"),
        "usage_limit": None,
        "used_count": 0,
        "per_user_limit": 1,
        "starts_at": None,
        "expires_at": None,
        "is_active": True,
    }
    values.update(overrides)
    return Coupon(**values)


# ---------------------------------------------------------------------------
# evaluate() 유닛 테스트
# ---------------------------------------------------------------------------

class TestEvaluate:
    """쿠폰 규칙 평가 검증."""

    def test_percentage_discount(self):
        result = evaluate(make_coupon(), Decimal("500000"), 0, NOW)
        assert result.valid
        assert result.discount == Decimal("50000.00")

    def test_percentage_capped(self):
        coupon = make_coupon(max_discount_amount=Decimal("30000"))
        result = evaluate(coupon, Decimal("500000"), 0, NOW)
        assert result.discount == Decimal("30000.00")

    def test_fixed_discount_never_exceeds_subtotal(self):
        coupon = make_coupon(discount_type="fixed", discount_value=Decimal("200000"))
        result = evaluate(coupon, Decimal("150000"), 0, NOW)
        assert result.valid
        assert result.discount == Decimal("150000.00")

    def test_rounding_half_up(self):
        coupon = make_coupon(discount_value=Decimal("12.5"))
        result = evaluate(coupon, Decimal("100.10"), 0, NOW)
        # 12.5% × 100.10 = 12.5125 → 12.51
        assert result.discount == Decimal("12.51")

    def test_inactive(self):
        result = evaluate(make_coupon(is_active=False), Decimal("500000"), 0, NOW)
        assert not result.valid
        assert result.discount == Decimal("0")

    def test_not_started(self):
        result = evaluate(make_coupon(starts_at=NOW + timedelta(days=1)), Decimal("500000"), 0, NOW)
        assert result.reason == "Coupon is not yet valid"

    def test_expiry_is_exclusive(self):
        """만료 시각과 같으면 이미 만료."""
        result = evaluate(make_coupon(expires_at=NOW), Decimal("500000"), 0, NOW)
        assert result.reason == "Coupon has expired"

    def test_naive_datetimes_treated_as_utc(self):
        coupon = make_coupon(expires_at=(NOW + timedelta(hours=1)).replace(tzinfo=None))
        assert evaluate(coupon, Decimal("500000"), 0, NOW).valid

    def test_global_limit(self):
        result = evaluate(make_coupon(usage_limit=5, used_count=5), Decimal("500000"), 0, NOW)
        assert result.reason == "Coupon usage limit reached"

    def test_per_user_limit(self):
        result = evaluate(make_coupon(per_user_limit=2), Decimal("500000"), 2, NOW)
        assert not result.valid

    def test_unlimited_per_user(self):
        result = evaluate(make_coupon(per_user_limit=None), Decimal("500000"), 10, NOW)
        assert result.valid

    def test_min_order_amount(self):
        result = evaluate(make_coupon(min_order_amount=Decimal("1000000")), Decimal("999999"), 0, NOW)
        assert not result.valid
        assert "at least" in result.reason


# ---------------------------------------------------------------------------
# API 테스트
# ---------------------------------------------------------------------------

@pytest_asyncio.fixture
async def coupon(db: AsyncSession):
    """10% 할인, 최대 50,000 VND 쿠폰."""
    c = Coupon(
        code="WATCH10",
        discount_type="percentage",
        discount_value=Decimal("10"),
        max_discount_amount=Decimal("50000"),
        min_order_amount=Decimal("200000"),
        per_user_limit=1,
    )
    db.add(c)
    await db.flush()
    await db.refresh(c)
    return c


class TestValidateCoupon:
    """장바구니 기준 쿠폰 확인 테스트."""

    async def test_validate_against_cart(self, client: AsyncClient, customer_token, product, coupon):
        await client.post(
            "/api/v1/shop/cart/items",
            json={"product_id": str(product.id), "quantity": 2},
            headers=auth_header(customer_token),
        )
        res = await client.post(VALIDATE, json={"code": "watch10"}, headers=auth_header(customer_token))
        assert res.status_code == 200, res.text
        data = res.json()
        assert Decimal(data["subtotal"]) == Decimal("600000")
        assert Decimal(data["discount_amount"]) == Decimal("50000")
        assert Decimal(data["total_after_discount"]) == Decimal("550000")

    async def test_validate_below_minimum(self, client: AsyncClient, customer_token, coupon):
        """빈 장바구니 — 최소 주문 금액 미달 → 400."""
        res = await client.post(VALIDATE, json={"code": "WATCH10"}, headers=auth_header(customer_token))
        assert res.status_code == 400

    async def test_validate_unknown_code(self, client: AsyncClient, customer_token):
        res = await client.post(VALIDATE, json={"code": "NOPE"}, headers=auth_header(customer_token))
        assert res.status_code == 404


class TestAdminCoupons:
    """관리자 쿠폰 관리 테스트 (admin only)."""

    async def test_create_coupon_uppercases_code(self, client: AsyncClient, admin_token):
        res = await client.post(f"{ADMIN_COUPONS}/", json={
            "code": "summer25",
            "discount_type": "fixed",
            "discount_value": "25000",
        }, headers=auth_header(admin_token))
        assert res.status_code == 201, res.text
        assert res.json()["code"] == "SUMMER25"

    async def test_percentage_above_100(self, client: AsyncClient, admin_token):
        res = await client.post(f"{ADMIN_COUPONS}/", json={
            "code": "TOOMUCH",
            "discount_type": "percentage",
            "discount_value": "150",
        }, headers=auth_header(admin_token))
        assert res.status_code == 400

    async def test_expiry_before_start(self, client: AsyncClient, admin_token):
        res = await client.post(f"{ADMIN_COUPONS}/", json={
            "code": "BACKWARDS",
            "discount_type": "fixed",
            "discount_value": "1000",
            "starts_at": "2026-10-01T00:00:00Z",
            "expires_at": "2026-09-01T00:00:00Z",
        }, headers=auth_header(admin_token))
        assert res.status_code == 400

    async def test_duplicate_code(self, client: AsyncClient, admin_token, coupon):
        res = await client.post(f"{ADMIN_COUPONS}/", json={
            "code": "watch10",
            "discount_type": "fixed",
            "discount_value": "1000",
        }, headers=auth_header(admin_token))
        assert res.status_code == 409

    async def test_staff_forbidden(self, client: AsyncClient, staff_token):
        res = await client.get(f"{ADMIN_COUPONS}/", headers=auth_header(staff_token))
        assert res.status_code == 403

    async def test_update_and_delete_unused(self, client: AsyncClient, admin_token, coupon):
        res = await client.put(
            f"{ADMIN_COUPONS}/{coupon.id}",
            json={"usage_limit": 100},
            headers=auth_header(admin_token),
        )
        assert res.status_code == 200
        assert res.json()["usage_limit"] == 100

        res = await client.delete(f"{ADMIN_COUPONS}/{coupon.id}", headers=auth_header(admin_token))
        assert res.status_code == 204
        res = await client.get(f"{ADMIN_COUPONS}/{coupon.id}", headers=auth_header(admin_token))
        assert res.status_code == 404

    async def test_delete_used_coupon_deactivates(
        self, client: AsyncClient, db: AsyncSession, admin_token, customer_token, product, coupon,
    ):
        await place_order(client, customer_token, product, coupon_code="WATCH10")

        res = await client.delete(f"{ADMIN_COUPONS}/{coupon.id}", headers=auth_header(admin_token))
        assert res.status_code == 204

        res = await client.get(f"{ADMIN_COUPONS}/{coupon.id}", headers=auth_header(admin_token))
        assert res.status_code == 200
        assert res.json()["is_active"] is False
        assert res.json()["used_count"] == 1


class TestApplyAtCheckout:
    """체크아웃 시 쿠폰 사용 한도 테스트."""

    async def test_global_limit_reached_meanwhile(
        self, client: AsyncClient, db: AsyncSession, customer_token, product,
    ):
        """평가 이후 다른 주문이 마지막 사용분을 가져간 경우 — conditional increment fails."""
        c = Coupon(
            code="LAST1",
            discount_type="fixed",
            discount_value=Decimal("20000"),
            min_order_amount=Decimal("0"),
            usage_limit=1,
        )
        db.add(c)
        await db.flush()
        await db.refresh(c)

        # 세션의 쿠폰 객체는 used_count=0 그대로 — another checkout used it in the database
        await db.execute(
            update(Coupon)
            .where(Coupon.id == c.id)
            .values(used_count=1)
            .execution_options(synchronize_session=False)
        )
        await db.commit()
        assert c.used_count == 0

        await client.post(
            "/api/v1/shop/cart/items",
            json={"product_id": str(product.id), "quantity": 1},
            headers=auth_header(customer_token),
        )
        res = await client.post(
            "/api/v1/shop/orders/",
            json={"shipping_address": SHIPPING_ADDRESS, "coupon_code": "LAST1"},
            headers=auth_header(customer_token),
        )
        assert res.status_code == 400
        assert res.json()["detail"] == "Coupon usage limit reached"
