"""대시보드 Pydantic 스키마 정의.

Dashboard Pydantic schema definitions.
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel


class TopProduct(BaseModel):
    """판매량 상위 상품."""

    product_id: str | None
    product_name: str
    sku: str
    quantity: int
    revenue: Decimal


class LowStockProduct(BaseModel):
    """재고 부족 상품."""

    id: str
    sku: str
    name: str
    stock_quantity: int


class DashboardSummary(BaseModel):
    """대시보드 요약 응답.

    Attributes:
        date_from: 집계 시작 (Range start, inclusive)
        date_to: 집계 종료 (Range end, exclusive)
        revenue: 매출 — 결제 완료 주문 합계 (Sum of paid, non-refunded orders)
        order_count: 주문 수 (Orders created in range)
        orders_by_status: 상태별 주문 수 (Order count per status)
        new_customers: 신규 고객 수 (Customers registered in range)
        top_products: 판매량 상위 5개 (Top 5 products by quantity)
        low_stock: 재고 부족 상품 (Active products at/below the threshold)
    """

    date_from: datetime
    date_to: datetime
    revenue: Decimal
    order_count: int
    orders_by_status: dict[str, int]
    new_customers: int
    top_products: list[TopProduct]
    low_stock: list[LowStockProduct]
