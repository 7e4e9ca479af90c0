"""주문 레포지토리 — 주문 목록/상세, 상태 이력, 구매 이력 조회.

Order Repository — Order listing and detail, status history rows and
purchase checks used by reviews.
"""

from datetime import datetime
from typing import Sequence
from uuid import UUID

from sqlalchemy import Select, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from tawatch.models.order import STATUS_DELIVERED, Order, OrderItem, OrderStatusHistory
from tawatch.repositories.base import BaseRepository


class OrderRepository(BaseRepository[Order]):
    """주문 레포지토리."""

    def __init__(self) -> None:
        super().__init__(Order)

    async def get_detail(
        self,
        db: AsyncSession,
        order_id: UUID,
        user_id: UUID | None = None,
        for_update: bool = False,
    ) -> Order | None:
        """주문 상세를 항목/이력/결제와 함께 조회합니다.

        Retrieve an order with items, history and payments eagerly loaded.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            order_id: 주문 ID (Order UUID)
            user_id: 소유자 제한 — 지정 시 다른 사용자 주문은 None
                     (Restrict to this owner; other users' orders return None)
            for_update: 주문 행 잠금 여부 (Lock the order row)
        """
        query: Select = (
            select(Order)
            .options(
                selectinload(Order.items),
                selectinload(Order.history),
                selectinload(Order.payments),
            )
            .where(Order.id == order_id)
            .execution_options(populate_existing=True)
        )
        if user_id is not None:
            query = query.where(Order.user_id == user_id)
        if for_update:
            query = query.with_for_update(of=Order)
        result = await db.execute(query)
        return result.scalar_one_or_none()

    async def list_orders(
        self,
        db: AsyncSession,
        page: int,
        per_page: int,
        user_id: UUID | None = None,
        status: str | None = None,
        payment_status: str | None = None,
        keyword: str | None = None,
        date_from: datetime | None = None,
        date_to: datetime | None = None,
    ) -> tuple[Sequence[Order], int]:
        """주문 목록을 필터 조건으로 조회합니다 — newest first.

        keyword matches the order code, recipient name or phone.
        date_to is exclusive.
        """
        query: Select = select(Order).options(selectinload(Order.items))
        if user_id is not None:
            query = query.where(Order.user_id == user_id)
        if status is not None:
            query = query.where(Order.status == status)
        if payment_status is not None:
            query = query.where(Order.payment_status == payment_status)
        if keyword:
            pattern: str = f"%{keyword.strip()}%"
            query = query.where(
                or_(
                    Order.code.ilike(pattern),
                    Order.recipient_name.ilike(pattern),
                    Order.phone.ilike(pattern),
                )
            )
        if date_from is not None:
            query = query.where(Order.created_at >= date_from)
        if date_to is not None:
            query = query.where(Order.created_at < date_to)

        query = query.order_by(Order.created_at.desc(), Order.id)
        return await self.get_paginated(db, query, page, per_page)

    async def list_in_range(
        self,
        db: AsyncSession,
        date_from: datetime,
        date_to: datetime,
    ) -> Sequence[Order]:
        """기간 내 주문 전체 (항목 포함) — used by the Excel export."""
        query: Select = (
            select(Order)
            .options(selectinload(Order.items))
            .where(Order.created_at >= date_from, Order.created_at < date_to)
            .order_by(Order.created_at)
        )
        result = await db.execute(query)
        return result.scalars().all()

    async def add_history(
        self,
        db: AsyncSession,
        order_id: UUID,
        from_status: str | None,
        to_status: str,
        note: str | None = None,
        changed_by: UUID | None = None,
    ) -> OrderStatusHistory:
        """상태 이력 1건을 추가합니다."""
        entry: OrderStatusHistory = OrderStatusHistory(
            order_id=order_id,
            from_status=from_status,
            to_status=to_status,
            note=note,
            changed_by=changed_by,
        )
        db.add(entry)
        await db.flush()
        return entry

    async def has_delivered_purchase(
        self,
        db: AsyncSession,
        user_id: UUID,
        product_id: UUID,
    ) -> bool:
        """사용자가 해당 상품을 배송 완료 주문으로 구매했는지 확인합니다.

        True when a delivered order of this user contains the product.
        """
        query = (
            select(func.count())
            .select_from(OrderItem)
            .join(Order, Order.id == OrderItem.order_id)
            .where(
                Order.user_id == user_id,
                Order.status == STATUS_DELIVERED,
                OrderItem.product_id == product_id,
            )
        )
        return ((await db.execute(query)).scalar() or 0) > 0


# 싱글턴 인스턴스 — Singleton instance
order_repository: OrderRepository = OrderRepository()
