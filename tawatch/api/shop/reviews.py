"""리뷰 작성 라우터 — 내 리뷰 작성/수정/삭제.

Shop Review Router — Write, edit and delete my reviews. Listing a
product's reviews lives in the catalog router.
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from tawatch.api.deps import get_current_user
from tawatch.database import get_db
from tawatch.models.user import User
from tawatch.schemas.review import ReviewCreate, ReviewResponse, ReviewUpdate
from tawatch.services.review_service import review_service

router: APIRouter = APIRouter()


@router.post("/products/{product_id}/reviews", response_model=ReviewResponse, status_code=201)
async def create_review(
    product_id: UUID,
    data: ReviewCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> ReviewResponse:
    """리뷰 작성 — 배송 완료된 구매가 있어야 함.

    Review a product. Requires a delivered order containing it (403),
    one review per product (409).
    """
    result: ReviewResponse = await review_service.create_review(db, current_user, product_id, data)
    await db.commit()
    return result


@router.put("/reviews/{review_id}", response_model=ReviewResponse)
async def update_review(
    review_id: UUID,
    data: ReviewUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> ReviewResponse:
    """내 리뷰 수정."""
    result: ReviewResponse = await review_service.update_review(db, current_user, review_id, data)
    await db.commit()
    return result


@router.delete("/reviews/{review_id}", status_code=204)
async def delete_review(
    review_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> None:
    """내 리뷰 삭제."""
    await review_service.delete_review(db, current_user, review_id)
    await db.commit()
