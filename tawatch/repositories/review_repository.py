"""리뷰 레포지토리.

Review Repository — Product reviews and rating aggregates.
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Sequence
from uuid import UUID

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from tawatch.models.review import Review
from tawatch.repositories.base import BaseRepository


class ReviewRepository(BaseRepository[Review]):
    """리뷰 레포지토리."""

    def __init__(self) -> None:
        super().__init__(Review)

    async def get_detail(self, db: AsyncSession, review_id: UUID) -> Review | None:
        """리뷰를 작성자와 함께 조회합니다."""
        query: Select = (
            select(Review)
            .options(selectinload(Review.user))
            .where(Review.id == review_id)
            .execution_options(populate_existing=True)
        )
        result = await db.execute(query)
        return result.scalar_one_or_none()

    async def list_reviews(
        self,
        db: AsyncSession,
        page: int,
        per_page: int,
        product_id: UUID | None = None,
        is_visible: bool | None = None,
    ) -> tuple[Sequence[Review], int]:
        """리뷰 목록 — newest first, with the author loaded."""
        query: Select = select(Review).options(selectinload(Review.user))
        if product_id is not None:
            query = query.where(Review.product_id == product_id)
        if is_visible is not None:
            query = query.where(Review.is_visible == is_visible)
        query = query.order_by(Review.created_at.desc(), Review.id)
        return await self.get_paginated(db, query, page, per_page)

    async def visible_aggregate(
        self,
        db: AsyncSession,
        product_id: UUID,
    ) -> tuple[Decimal, int]:
        """노출 리뷰의 평균 평점과 개수를 계산합니다.

        Average rating (rounded to 2 places) and count of visible reviews.

        Returns:
            tuple[Decimal, int]: (평균 평점, 리뷰 수) — (0, 0) without reviews
        """
        query = select(func.avg(Review.rating), func.count(Review.id)).where(
            Review.product_id == product_id,
            Review.is_visible == True,  # noqa: E712
        )
        average, count = (await db.execute(query)).one()
        if not count:
            return Decimal("0"), 0
        return Decimal(str(average)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP), int(count)


# 싱글턴 인스턴스 — Singleton instance
review_repository: ReviewRepository = ReviewRepository()
