"""재고 변동 이력 모델.

Inventory transaction model — Append-only ledger of stock movements.
Every change to products.stock_quantity writes one row here.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from tawatch.database import Base

# 재고 변동 사유 — Stock movement reasons
REASON_RESTOCK: str = "restock"
REASON_ADJUSTMENT: str = "adjustment"
REASON_ORDER_PLACED: str = "order_placed"
REASON_ORDER_CANCELLED: str = "order_cancelled"


class InventoryTransaction(Base):
    """재고 변동 기록.

    Attributes:
        change: 변동 수량, 음수는 출고 (Signed quantity delta)
        quantity_after: 변동 후 재고 (Stock level after the change)
        reason: 사유 — restock|adjustment|order_placed|order_cancelled
        reference_id: 관련 주문 ID (Related order id, if any)
        created_by: 처리한 사용자 (Acting user, SET NULL on delete)
    """

    __tablename__ = "inventory_transactions"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    product_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True)
    change: Mapped[int] = mapped_column(Integer, nullable=False)
    quantity_after: Mapped[int] = mapped_column(Integer, nullable=False)
    reason: Mapped[str] = mapped_column(String(30), nullable=False)
    reference_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True)
    note: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_by: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
