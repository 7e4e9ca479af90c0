"""쿠폰 레포지토리 — 쿠폰 조회, 사용 횟수 증감, 사용 이력.

Coupon Repository — Lookups, atomic usage counters and usage history.
"""

from typing import Sequence
from uuid import UUID

from sqlalchemy import Select, delete, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from tawatch.models.coupon import Coupon, CouponUsage
from tawatch.repositories.base import BaseRepository


class CouponRepository(BaseRepository[Coupon]):
    """쿠폰 레포지토리."""

    def __init__(self) -> None:
        super().__init__(Coupon)

    async def get_by_code(
        self,
        db: AsyncSession,
        code: str,
    ) -> Coupon | None:
        """쿠폰 코드로 조회 (대소문자 무시) — Codes are stored upper-case."""
        result = await db.execute(select(Coupon).where(Coupon.code == code.strip().upper()))
        return result.scalar_one_or_none()

    async def list_coupons(
        self,
        db: AsyncSession,
        page: int,
        per_page: int,
        is_active: bool | None = None,
        keyword: str | None = None,
    ) -> tuple[Sequence[Coupon], int]:
        """쿠폰 목록 — newest first."""
        query: Select = select(Coupon)
        if is_active is not None:
            query = query.where(Coupon.is_active == is_active)
        if keyword:
            pattern: str = f"%{keyword.strip()}%"
            query = query.where(or_(Coupon.code.ilike(pattern), Coupon.description.ilike(pattern)))
        query = query.order_by(Coupon.created_at.desc())
        return await self.get_paginated(db, query, page, per_page)

    async def try_increment_usage(
        self,
        db: AsyncSession,
        coupon_id: UUID,
    ) -> bool:
        """사용 횟수를 조건부로 1 증가시킵니다.

        Atomically increment used_count unless the usage limit is reached:
        UPDATE coupons SET used_count = used_count + 1
        WHERE id = :id AND (usage_limit IS NULL OR used_count < usage_limit)

        Returns:
            bool: 증가 성공 여부 (False when the limit was already reached)
        """
        result = await db.execute(
            update(Coupon)
            .where(
                Coupon.id == coupon_id,
                or_(Coupon.usage_limit.is_(None), Coupon.used_count < Coupon.usage_limit),
            )
            .values(used_count=Coupon.used_count + 1)
            .execution_options(synchronize_session=False)
        )
        await db.flush()
        return (result.rowcount or 0) == 1

    async def decrement_usage(
        self,
        db: AsyncSession,
        coupon_id: UUID,
    ) -> None:
        """사용 횟수를 1 감소 (0 미만 불가) — Never drops below zero."""
        await db.execute(
            update(Coupon)
            .where(Coupon.id == coupon_id, Coupon.used_count > 0)
            .values(used_count=Coupon.used_count - 1)
            .execution_options(synchronize_session=False)
        )
        await db.flush()

    async def count_user_usages(
        self,
        db: AsyncSession,
        coupon_id: UUID,
        user_id: UUID,
    ) -> int:
        """사용자의 쿠폰 사용 횟수."""
        query = (
            select(func.count())
            .select_from(CouponUsage)
            .where(CouponUsage.coupon_id == coupon_id, CouponUsage.user_id == user_id)
        )
        return (await db.execute(query)).scalar() or 0

    async def has_usages(self, db: AsyncSession, coupon_id: UUID) -> bool:
        query = select(func.count()).select_from(CouponUsage).where(CouponUsage.coupon_id == coupon_id)
        return ((await db.execute(query)).scalar() or 0) > 0

    async def create_usage(
        self,
        db: AsyncSession,
        coupon_id: UUID,
        user_id: UUID,
        order_id: UUID,
        discount_amount,
    ) -> CouponUsage:
        usage: CouponUsage = CouponUsage(
            coupon_id=coupon_id,
            user_id=user_id,
            order_id=order_id,
            discount_amount=discount_amount,
        )
        db.add(usage)
        await db.flush()
        return usage

    async def delete_usage_for_order(
        self,
        db: AsyncSession,
        order_id: UUID,
    ) -> bool:
        """주문의 쿠폰 사용 기록 삭제 — True if a usage row existed."""
        result = await db.execute(delete(CouponUsage).where(CouponUsage.order_id == order_id))
        await db.flush()
        return (result.rowcount or 0) > 0


# 싱글턴 인스턴스 — Singleton instance
coupon_repository: CouponRepository = CouponRepository()
