"""관리자 리뷰 라우터 — 리뷰 조회, 노출 관리, 삭제.

Admin Review Router — Review moderation. Staff+.
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from tawatch.api.deps import require_staff
from tawatch.database import get_db
from tawatch.models.user import User
from tawatch.schemas.review import ReviewResponse, ReviewVisibilityUpdate
from tawatch.services.review_service import review_service
from tawatch.utils.pagination import MAX_PER_PAGE, Page

router: APIRouter = APIRouter()


@router.get("/", response_model=Page[ReviewResponse])
async def list_reviews(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_staff)],
    page: Annotated[int, Query(ge=1)] = 1,
    per_page: Annotated[int, Query(ge=1, le=MAX_PER_PAGE)] = 20,
    product_id: Annotated[UUID | None, Query()] = None,
    is_visible: Annotated[bool | None, Query()] = None,
) -> Page[ReviewResponse]:
    """리뷰 목록 — 숨김 리뷰 포함."""
    return await review_service.list_reviews(db, page, per_page, product_id=product_id, is_visible=is_visible)


@router.patch("/{review_id}/visibility", response_model=ReviewResponse)
async def set_visibility(
    review_id: UUID,
    data: ReviewVisibilityUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_staff)],
) -> ReviewResponse:
    """리뷰 노출/숨김 — 상품 평점 재계산."""
    result: ReviewResponse = await review_service.set_visibility(db, review_id, data)
    await db.commit()
    return result


@router.delete("/{review_id}", status_code=204)
async def delete_review(
    review_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_staff)],
) -> None:
    """리뷰 삭제."""
    await review_service.admin_delete_review(db, review_id)
    await db.commit()
