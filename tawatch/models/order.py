"""주문 관련 SQLAlchemy ORM 모델 정의.

Order-related SQLAlchemy ORM model definitions.

Tables:
    - orders: 주문 헤더 (Order header with totals and shipping snapshot)
    - order_items: 주문 항목 (Line snapshot: name, sku, unit price at purchase)
    - order_status_history: 상태 변경 이력 (Status transition audit trail)
"""

import random
import string
import uuid
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from tawatch.database import Base

# 주문 상태 — Order lifecycle states
STATUS_PENDING: str = "pending"
STATUS_CONFIRMED: str = "confirmed"
STATUS_SHIPPING: str = "shipping"
STATUS_DELIVERED: str = "delivered"
STATUS_CANCELLED: str = "cancelled"

# 결제 상태 — Payment states on the order
PAYMENT_UNPAID: str = "unpaid"
PAYMENT_PAID: str = "paid"
PAYMENT_REFUNDED: str = "refunded"

# 결제 수단 — Payment methods
METHOD_COD: str = "cod"
METHOD_MOMO: str = "momo"


def generate_order_code() -> str:
    """주문 코드 생성 — "TW" + yymmdd + 6자리 영숫자.

    Generate a human-readable order code, e.g. "TW260214K3F9QZ".
    """
    chars = string.ascii_uppercase + string.digits
    date_part = datetime.now(timezone.utc).strftime("%y%m%d")
    return f"TW{date_part}" + "".join(random.choices(chars, k=6))


class Order(Base):
    """주문 모델.

    Order model — Header row for a checkout.
    Money columns are fixed at checkout time; the shipping address is
    copied so later address edits do not change past orders.

    Relationships:
        items: 주문 항목 (cascade delete)
        history: 상태 이력 (cascade delete, oldest first)
        payments: 결제 시도 목록 (Payment attempts)
    """

    __tablename__ = "orders"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    code: Mapped[str] = mapped_column(String(20), unique=True, nullable=False, default=generate_order_code)
    # 주문자 — 사용자 삭제 시 주문 이력은 유지 (order kept when user deleted)
    user_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    status: Mapped[str] = mapped_column(String(20), default=STATUS_PENDING, nullable=False)
    payment_method: Mapped[str] = mapped_column(String(20), nullable=False)
    payment_status: Mapped[str] = mapped_column(String(20), default=PAYMENT_UNPAID, nullable=False)

    subtotal: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    discount_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=Decimal("0"), nullable=False)
    shipping_fee: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=Decimal("0"), nullable=False)
    total_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)

    coupon_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("coupons.id", ondelete="SET NULL"), nullable=True)
    coupon_code: Mapped[str | None] = mapped_column(String(50), nullable=True)

    # 배송지 스냅샷 — Shipping address snapshot
    recipient_name: Mapped[str] = mapped_column(String(255), nullable=False)
    phone: Mapped[str] = mapped_column(String(20), nullable=False)
    address_line: Mapped[str] = mapped_column(String(255), nullable=False)
    ward: Mapped[str | None] = mapped_column(String(100), nullable=True)
    district: Mapped[str | None] = mapped_column(String(100), nullable=True)
    city: Mapped[str] = mapped_column(String(100), nullable=False)
    note: Mapped[str | None] = mapped_column(Text, nullable=True)
    cancel_reason: Mapped[str | None] = mapped_column(Text, nullable=True)

    confirmed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    shipped_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    delivered_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    cancelled_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), index=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        CheckConstraint(
            "status IN ('pending', 'confirmed', 'shipping', 'delivered', 'cancelled')",
            name="ck_order_status",
        ),
        CheckConstraint("payment_method IN ('cod', 'momo')", name="ck_order_payment_method"),
        CheckConstraint("payment_status IN ('unpaid', 'paid', 'refunded')", name="ck_order_payment_status"),
        CheckConstraint("subtotal >= 0 AND discount_amount >= 0 AND shipping_fee >= 0", name="ck_order_amounts_non_negative"),
        CheckConstraint("total_amount >= 0", name="ck_order_total_non_negative"),
    )

    user = relationship("User")
    items = relationship("OrderItem", back_populates="order", cascade="all, delete-orphan")
    history = relationship(
        "OrderStatusHistory",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderStatusHistory.created_at",
    )
    payments = relationship(
        "Payment",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="Payment.created_at",
    )


class OrderItem(Base):
    """주문 항목 — 구매 시점 상품 스냅샷.

    Order line snapshot. product_id becomes NULL if the product is deleted;
    name/sku/price stay as purchased.
    """

    __tablename__ = "order_items"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    order_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("products.id", ondelete="SET NULL"), nullable=True, index=True)
    product_name: Mapped[str] = mapped_column(String(255), nullable=False)
    sku: Mapped[str] = mapped_column(String(64), nullable=False)
    image_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    unit_price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    line_total: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)

    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_order_item_quantity_positive"),
        CheckConstraint("unit_price >= 0", name="ck_order_item_price_non_negative"),
    )

    order = relationship("Order", back_populates="items")


class OrderStatusHistory(Base):
    """주문 상태 변경 이력."""

    __tablename__ = "order_status_history"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    order_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    from_status: Mapped[str | None] = mapped_column(String(20), nullable=True)
    to_status: Mapped[str] = mapped_column(String(20), nullable=False)
    note: Mapped[str | None] = mapped_column(Text, nullable=True)
    changed_by: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    order = relationship("Order", back_populates="history")
