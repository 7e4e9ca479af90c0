"""결제 레포지토리.

Payment Repository — Payment attempts and gateway lookups.
"""

from typing import Sequence
from uuid import UUID

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from tawatch.models.payment import Payment
from tawatch.repositories.base import BaseRepository


class PaymentRepository(BaseRepository[Payment]):
    """결제 레포지토리."""

    def __init__(self) -> None:
        super().__init__(Payment)

    async def get_by_provider_order_id(
        self,
        db: AsyncSession,
        provider_order_id: str,
        for_update: bool = False,
    ) -> Payment | None:
        """게이트웨이 주문 ID로 결제를 조회합니다.

        Look up a payment by the orderId sent to the gateway. With
        for_update the row is locked so concurrent IPN deliveries are
        reconciled one at a time.
        """
        query: Select = select(Payment).where(Payment.provider_order_id == provider_order_id)
        if for_update:
            query = query.with_for_update().execution_options(populate_existing=True)
        result = await db.execute(query)
        return result.scalar_one_or_none()

    async def list_for_order(
        self,
        db: AsyncSession,
        order_id: UUID,
    ) -> Sequence[Payment]:
        """주문의 결제 시도 목록 — oldest first."""
        query: Select = select(Payment).where(Payment.order_id == order_id).order_by(Payment.created_at)
        result = await db.execute(query)
        return result.scalars().all()


# 싱글턴 인스턴스 — Singleton instance
payment_repository: PaymentRepository = PaymentRepository()
