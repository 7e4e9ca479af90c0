"""대시보드 서비스 — 매출/주문 집계 및 Excel 내보내기.

Dashboard Service — Sales and order aggregates for the back office, and the
orders Excel export (openpyxl).
"""

from datetime import datetime, timedelta
from decimal import Decimal
from io import BytesIO
from typing import Sequence

from openpyxl import Workbook
from openpyxl.styles import Alignment, Font, PatternFill
from sqlalchemy import desc, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from tawatch.config import settings
from tawatch.models.catalog import Product
from tawatch.models.order import PAYMENT_PAID, STATUS_CANCELLED, Order, OrderItem
from tawatch.models.user import Role, User
from tawatch.repositories.catalog_repository import product_repository
from tawatch.repositories.order_repository import order_repository
from tawatch.schemas.dashboard import DashboardSummary, LowStockProduct, TopProduct
from tawatch.utils.clock import as_utc, utcnow
from tawatch.utils.exceptions import BadRequestError

# 기본 집계 기간 — Default range when none is given
DEFAULT_RANGE_DAYS: int = 30
TOP_PRODUCT_LIMIT: int = 5


def resolve_range(
    date_from: datetime | None,
    date_to: datetime | None,
) -> tuple[datetime, datetime]:
    """집계 기간 결정 — 기본값은 최근 30일.

    Raises:
        BadRequestError: 시작이 종료보다 늦을 때 (date_from after date_to)
    """
    date_to = as_utc(date_to) if date_to is not None else utcnow()
    if date_from is None:
        date_from = date_to - timedelta(days=DEFAULT_RANGE_DAYS)
    date_from = as_utc(date_from)
    if date_from > date_to:
        raise BadRequestError("date_from must be before date_to")
    return date_from, date_to


class DashboardService:
    """대시보드 서비스.

    Dashboard aggregation service for the back office.
    """

    async def get_summary(
        self,
        db: AsyncSession,
        date_from: datetime | None = None,
        date_to: datetime | None = None,
    ) -> DashboardSummary:
        """대시보드 요약 집계.

        Revenue counts orders with payment_status "paid" (refunded orders
        are excluded). Top products exclude cancelled orders.
        """
        date_from, date_to = resolve_range(date_from, date_to)
        in_range = (Order.created_at >= date_from, Order.created_at < date_to)

        revenue: Decimal = (
            await db.execute(
                select(func.coalesce(func.sum(Order.total_amount), 0)).where(
                    *in_range, Order.payment_status == PAYMENT_PAID
                )
            )
        ).scalar() or Decimal("0")

        status_rows = (
            await db.execute(
                select(Order.status, func.count(Order.id)).where(*in_range).group_by(Order.status)
            )
        ).all()
        orders_by_status: dict[str, int] = {status: count for status, count in status_rows}

        new_customers: int = (
            await db.execute(
                select(func.count(User.id))
                .join(Role, Role.id == User.role_id)
                .where(
                    Role.name == "customer",
                    User.created_at >= date_from,
                    User.created_at < date_to,
                )
            )
        ).scalar() or 0

        quantity = func.sum(OrderItem.quantity).label("quantity")
        top_rows = (
            await db.execute(
                select(
                    OrderItem.product_id,
                    OrderItem.product_name,
                    OrderItem.sku,
                    quantity,
                    func.sum(OrderItem.line_total).label("revenue"),
                )
                .join(Order, Order.id == OrderItem.order_id)
                .where(*in_range, Order.status != STATUS_CANCELLED)
                .group_by(OrderItem.product_id, OrderItem.product_name, OrderItem.sku)
                .order_by(desc("quantity"), OrderItem.product_name)
                .limit(TOP_PRODUCT_LIMIT)
            )
        ).all()

        low_stock: Sequence[Product] = await product_repository.low_stock(db, settings.LOW_STOCK_THRESHOLD)

        return DashboardSummary(
            date_from=date_from,
            date_to=date_to,
            revenue=Decimal(revenue),
            order_count=sum(orders_by_status.values()),
            orders_by_status=orders_by_status,
            new_customers=new_customers,
            top_products=[
                TopProduct(
                    product_id=str(row.product_id) if row.product_id else None,
                    product_name=row.product_name,
                    sku=row.sku,
                    quantity=int(row.quantity or 0),
                    revenue=Decimal(row.revenue or 0),
                )
                for row in top_rows
            ],
            low_stock=[
                LowStockProduct(id=str(p.id), sku=p.sku, name=p.name, stock_quantity=p.stock_quantity)
                for p in low_stock
            ],
        )

    async def export_orders(
        self,
        db: AsyncSession,
        date_from: datetime | None = None,
        date_to: datetime | None = None,
    ) -> bytes:
        """기간 내 주문을 Excel 파일로 내보내기.

        Two sheets: "Orders" (one row per order) and "Order Items" (one row
        per line, keyed by order code).
        """
        date_from, date_to = resolve_range(date_from, date_to)
        orders: Sequence[Order] = await order_repository.list_in_range(db, date_from, date_to)

        wb = Workbook()
        header_font = Font(bold=True, color="FFFFFF", size=11)
        header_fill = PatternFill(start_color="2D3436", end_color="2D3436", fill_type="solid")

        def style_headers(ws, headers: list[str]) -> None:
            for col_idx, h in enumerate(headers, 1):
                cell = ws.cell(row=1, column=col_idx, value=h)
                cell.font = header_font
                cell.fill = header_fill
                cell.alignment = Alignment(horizontal="center")

        def set_widths(ws, widths: list[int]) -> None:
            for i, w in enumerate(widths, 1):
                ws.column_dimensions[ws.cell(row=1, column=i).column_letter].width = w

        # --- Sheet 1: Orders ---
        ws1 = wb.active
        ws1.title = "Orders"
        style_headers(ws1, [
            "Code", "Created At", "Status", "Payment Method", "Payment Status",
            "Recipient", "Phone", "City", "Subtotal", "Discount", "Shipping", "Total", "Coupon",
        ])
        for order in orders:
            ws1.append([
                order.code,
                order.created_at.strftime("%Y-%m-%d %H:%M"),
                order.status,
                order.payment_method,
                order.payment_status,
                order.recipient_name,
                order.phone,
                order.city,
                float(order.subtotal),
                float(order.discount_amount),
                float(order.shipping_fee),
                float(order.total_amount),
                order.coupon_code or "",
            ])
        set_widths(ws1, [18, 18, 12, 15, 15, 22, 14, 16, 14, 12, 12, 14, 14])

        # --- Sheet 2: Order Items ---
        ws2 = wb.create_sheet("Order Items")
        style_headers(ws2, ["Order Code", "SKU", "Product", "Unit Price", "Quantity", "Line Total"])
        for order in orders:
            for item in order.items:
                ws2.append([
                    order.code,
                    item.sku,
                    item.product_name,
                    float(item.unit_price),
                    item.quantity,
                    float(item.line_total),
                ])
        set_widths(ws2, [18, 16, 36, 14, 10, 14])

        buffer = BytesIO()
        wb.save(buffer)
        return buffer.getvalue()


# 싱글턴 인스턴스 — Singleton instance
dashboard_service: DashboardService = DashboardService()
