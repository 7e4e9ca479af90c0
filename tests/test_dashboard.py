"""대시보드 API 테스트 — 요약 집계, Excel 내보내기.

Dashboard API tests — Summary aggregation and the orders Excel export.
"""

from decimal import Decimal
from io import BytesIO

from httpx import AsyncClient
from openpyxl import load_workbook

from tests.conftest import auth_header, deliver_order, place_order, set_order_status

DASHBOARD = "/api/v1/admin/dashboard"
WIDE_RANGE: dict = {"date_from": "2000-01-01T00:00:00", "date_to": "2100-01-01T00:00:00"}


class TestSummary:
    """대시보드 요약 테스트."""

    async def test_summary(
        self, client: AsyncClient, customer_token, other_token, staff_token, product, expensive_product,
    ):
        delivered = await place_order(client, customer_token, product, quantity=2)
        await deliver_order(client, staff_token, delivered["id"])
        await place_order(client, other_token, expensive_product)
        cancelled = await place_order(client, other_token, product, quantity=5)
        await set_order_status(client, staff_token, cancelled["id"], "cancelled")

        res = await client.get(f"{DASHBOARD}/summary", params=WIDE_RANGE, headers=auth_header(staff_token))
        assert res.status_code == 200, res.text
        data = res.json()

        # 결제 완료 주문만 매출 — 600,000 + 30,000 배송비
        assert Decimal(data["revenue"]) == Decimal("630000")
        assert data["order_count"] == 3
        assert data["orders_by_status"] == {"delivered": 1, "pending": 1, "cancelled": 1}
        assert data["new_customers"] == 2

        top = {p["sku"]: p["quantity"] for p in data["top_products"]}
        assert top == {"SKU-001": 2, "SKU-002": 1}

        # SKU-002: 재고 3 → 2, 기준 5 이하
        low = {p["sku"]: p["stock_quantity"] for p in data["low_stock"]}
        assert low == {"SKU-002": 2}

    async def test_invalid_range(self, client: AsyncClient, staff_token):
        res = await client.get(
            f"{DASHBOARD}/summary",
            params={"date_from": "2026-02-01T00:00:00", "date_to": "2026-01-01T00:00:00"},
            headers=auth_header(staff_token),
        )
        assert res.status_code == 400

    async def test_customer_forbidden(self, client: AsyncClient, customer_token):
        res = await client.get(f"{DASHBOARD}/summary", headers=auth_header(customer_token))
        assert res.status_code == 403


class TestExport:
    """주문 Excel 내보내기 테스트."""

    async def test_export_orders(self, client: AsyncClient, customer_token, staff_token, product, expensive_product):
        order = await place_order(client, customer_token, product, quantity=2)
        await place_order(client, customer_token, expensive_product)

        res = await client.get(f"{DASHBOARD}/export", params=WIDE_RANGE, headers=auth_header(staff_token))
        assert res.status_code == 200
        assert "spreadsheetml" in res.headers["content-type"]

        wb = load_workbook(BytesIO(res.content))
        assert wb.sheetnames == ["Orders", "Order Items"]

        orders_ws = wb["Orders"]
        codes = [row[0] for row in orders_ws.iter_rows(min_row=2, values_only=True)]
        assert order["code"] in codes
        assert len(codes) == 2

        items_ws = wb["Order Items"]
        assert items_ws.max_row == 3  # 헤더 + 2줄
