"""쿠폰 모델 정의.

Coupon models — Discount codes with global and per-user usage limits.

Tables:
    - coupons: 쿠폰 정의 (Coupon definition, used_count guarded by CHECK)
    - coupon_usages: 쿠폰 사용 이력 (One row per order that used a coupon)
"""

import uuid
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column

from tawatch.database import Base

DISCOUNT_PERCENTAGE: str = "percentage"
DISCOUNT_FIXED: str = "fixed"


class Coupon(Base):
    """쿠폰 모델.

    Coupon model.

    Attributes:
        code: 쿠폰 코드 (Upper-case, unique)
        discount_type: percentage|fixed
        discount_value: 할인율(%) 또는 할인 금액 (Percent or absolute amount)
        max_discount_amount: 정률 할인 상한 (Cap for percentage discounts)
        min_order_amount: 최소 주문 금액 (Minimum subtotal)
        usage_limit: 전체 사용 한도, None=무제한 (Global limit, None = unlimited)
        used_count: 사용 횟수 (Times used, incremented by conditional UPDATE)
        per_user_limit: 사용자별 한도, None=무제한 (Per-user limit)
    """

    __tablename__ = "coupons"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    code: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    discount_type: Mapped[str] = mapped_column(String(20), nullable=False)
    discount_value: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    max_discount_amount: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)
    min_order_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=Decimal("0"), nullable=False)
    usage_limit: Mapped[int | None] = mapped_column(Integer, nullable=True)
    used_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    per_user_limit: Mapped[int | None] = mapped_column(Integer, default=1, nullable=True)
    starts_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    expires_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        CheckConstraint("discount_type IN ('percentage', 'fixed')", name="ck_coupon_discount_type"),
        CheckConstraint("discount_value > 0", name="ck_coupon_discount_value_positive"),
        CheckConstraint("used_count >= 0", name="ck_coupon_used_count_non_negative"),
        CheckConstraint("usage_limit IS NULL OR used_count <= usage_limit", name="ck_coupon_usage_within_limit"),
    )


class CouponUsage(Base):
    """쿠폰 사용 기록 — 주문당 1건 (one per order)."""

    __tablename__ = "coupon_usages"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    coupon_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("coupons.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    order_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("orders.id", ondelete="CASCADE"), unique=True, nullable=False)
    discount_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
