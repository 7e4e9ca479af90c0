"""결제 모델 — 결제 게이트웨이 거래 기록.

Payment model — One row per payment attempt against an order.
MoMo requires a fresh orderId/requestId for every create request, so an
order may accumulate several attempts; at most one ends in "success".
"""

import uuid
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import JSON, DateTime, ForeignKey, Integer, Numeric, String, Text, Uuid
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from tawatch.database import Base

PAYMENT_PENDING: str = "pending"
PAYMENT_SUCCESS: str = "success"
PAYMENT_FAILED: str = "failed"

PROVIDER_MOMO: str = "momo"
PROVIDER_COD: str = "cod"


class Payment(Base):
    """결제 시도 기록.

    Attributes:
        request_id: 게이트웨이 요청 ID (Gateway requestId, unique)
        provider_order_id: 게이트웨이에 전달한 주문 ID (orderId sent to MoMo, unique)
        transaction_id: 게이트웨이 거래 ID (MoMo transId)
        result_code: 게이트웨이 결과 코드 (MoMo resultCode, 0 = success)
        raw_payload: 마지막 콜백/응답 원문 (Last callback or create response)
    """

    __tablename__ = "payments"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    order_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    provider: Mapped[str] = mapped_column(String(20), nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    status: Mapped[str] = mapped_column(String(20), default=PAYMENT_PENDING, nullable=False)
    request_id: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    provider_order_id: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    transaction_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    pay_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    result_code: Mapped[int | None] = mapped_column(Integer, nullable=True)
    message: Mapped[str | None] = mapped_column(Text, nullable=True)
    raw_payload: Mapped[dict | None] = mapped_column(JSON().with_variant(JSONB(), "postgresql"), nullable=True)
    paid_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    order = relationship("Order", back_populates="payments")
