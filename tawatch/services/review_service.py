"""리뷰 서비스 — 상품 리뷰 작성/수정/삭제, 관리자 노출 관리.

Review Service — Customer reviews (delivered purchase required), moderation,
and recomputation of the product rating aggregate after every change.
"""

from decimal import Decimal
from typing import Sequence
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from tawatch.models.catalog import Product
from tawatch.models.review import Review
from tawatch.models.user import User
from tawatch.repositories.catalog_repository import product_repository
from tawatch.repositories.order_repository import order_repository
from tawatch.repositories.review_repository import review_repository
from tawatch.schemas.review import ReviewCreate, ReviewResponse, ReviewUpdate, ReviewVisibilityUpdate
from tawatch.utils.exceptions import DuplicateError, ForbiddenError, NotFoundError
from tawatch.utils.pagination import Page


class ReviewService:
    """리뷰 관련 비즈니스 로직을 처리하는 서비스."""

    def _to_response(self, review: Review) -> ReviewResponse:
        """리뷰 응답 변환 — user must be loaded."""
        return ReviewResponse(
            id=str(review.id),
            product_id=str(review.product_id),
            user_id=str(review.user_id),
            author_name=review.user.full_name if review.user else "",
            rating=review.rating,
            title=review.title,
            comment=review.comment,
            is_visible=review.is_visible,
            created_at=review.created_at,
            updated_at=review.updated_at,
        )

    async def _refresh_rating(self, db: AsyncSession, product_id: UUID) -> None:
        """노출 리뷰 기준으로 상품 평점 집계를 다시 계산합니다."""
        average: Decimal
        average, count = await review_repository.visible_aggregate(db, product_id)
        await product_repository.set_rating(db, product_id, average, count)

    async def _get_owned(self, db: AsyncSession, review_id: UUID, user_id: UUID) -> Review:
        review: Review | None = await review_repository.get_detail(db, review_id)
        if review is None or review.user_id != user_id:
            raise NotFoundError("Review not found")
        return review

    async def list_product_reviews(
        self,
        db: AsyncSession,
        product_id: UUID,
        page: int,
        per_page: int,
    ) -> Page[ReviewResponse]:
        """상품의 노출 리뷰 목록 (스토어프론트)."""
        product: Product | None = await product_repository.get_by_id(db, product_id)
        if product is None or not product.is_active:
            raise NotFoundError("Product not found")
        reviews: Sequence[Review]
        reviews, total = await review_repository.list_reviews(
            db, page, per_page, product_id=product_id, is_visible=True
        )
        return Page[ReviewResponse].build([self._to_response(r) for r in reviews], total, page, per_page)

    async def create_review(
        self,
        db: AsyncSession,
        user: User,
        product_id: UUID,
        data: ReviewCreate,
    ) -> ReviewResponse:
        """리뷰를 작성합니다.

        Write a review for a product the user has received.

        Raises:
            NotFoundError: 상품을 찾을 수 없을 때 (Product not found)
            ForbiddenError: 배송 완료된 구매 이력 없음 (No delivered purchase)
            DuplicateError: 이미 리뷰를 작성한 경우 (One review per product)
        """
        product: Product | None = await product_repository.get_by_id(db, product_id)
        if product is None:
            raise NotFoundError("Product not found")
        if not await order_repository.has_delivered_purchase(db, user.id, product_id):
            raise ForbiddenError("Only customers who received this product can review it")
        if await review_repository.exists(db, {"product_id": product_id, "user_id": user.id}):
            raise DuplicateError("You have already reviewed this product")

        review: Review = await review_repository.create(
            db,
            {
                "product_id": product_id,
                "user_id": user.id,
                "rating": data.rating,
                "title": data.title,
                "comment": data.comment,
            },
        )
        await self._refresh_rating(db, product_id)
        reloaded: Review | None = await review_repository.get_detail(db, review.id)
        if reloaded is None:
            raise NotFoundError("Review not found")
        return self._to_response(reloaded)

    async def update_review(
        self,
        db: AsyncSession,
        user: User,
        review_id: UUID,
        data: ReviewUpdate,
    ) -> ReviewResponse:
        """내 리뷰를 수정합니다 — 다른 사용자의 리뷰는 404."""
        review: Review = await self._get_owned(db, review_id, user.id)
        update_data: dict = data.model_dump(exclude_unset=True)
        # 평점은 null로 지울 수 없음 (rating cannot be cleared)
        if update_data.get("rating") is None:
            update_data.pop("rating", None)
        await review_repository.update(db, review.id, update_data)
        await self._refresh_rating(db, review.product_id)

        reloaded: Review | None = await review_repository.get_detail(db, review.id)
        if reloaded is None:
            raise NotFoundError("Review not found")
        return self._to_response(reloaded)

    async def delete_review(self, db: AsyncSession, user: User, review_id: UUID) -> None:
        """내 리뷰를 삭제합니다 — 다른 사용자의 리뷰는 404."""
        review: Review = await self._get_owned(db, review_id, user.id)
        product_id: UUID = review.product_id
        await review_repository.delete(db, review.id)
        await self._refresh_rating(db, product_id)

    # --- 관리자 (Back office) ---

    async def list_reviews(
        self,
        db: AsyncSession,
        page: int,
        per_page: int,
        product_id: UUID | None = None,
        is_visible: bool | None = None,
    ) -> Page[ReviewResponse]:
        reviews: Sequence[Review]
        reviews, total = await review_repository.list_reviews(
            db, page, per_page, product_id=product_id, is_visible=is_visible
        )
        return Page[ReviewResponse].build([self._to_response(r) for r in reviews], total, page, per_page)

    async def set_visibility(
        self,
        db: AsyncSession,
        review_id: UUID,
        data: ReviewVisibilityUpdate,
    ) -> ReviewResponse:
        """리뷰 노출 여부 변경 — 평점 집계 재계산 포함."""
        review: Review | None = await review_repository.get_detail(db, review_id)
        if review is None:
            raise NotFoundError("Review not found")
        review.is_visible = data.is_visible
        await db.flush()
        await self._refresh_rating(db, review.product_id)

        reloaded: Review | None = await review_repository.get_detail(db, review.id)
        if reloaded is None:
            raise NotFoundError("Review not found")
        return self._to_response(reloaded)

    async def admin_delete_review(self, db: AsyncSession, review_id: UUID) -> None:
        review: Review | None = await review_repository.get_by_id(db, review_id)
        if review is None:
            raise NotFoundError("Review not found")
        product_id: UUID = review.product_id
        await review_repository.delete(db, review_id)
        await self._refresh_rating(db, product_id)


# 싱글턴 인스턴스 — Singleton instance
review_service: ReviewService = ReviewService()
