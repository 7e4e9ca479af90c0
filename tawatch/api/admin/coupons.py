"""관리자 쿠폰 라우터 — 쿠폰 CRUD.

Admin Coupon Router — Coupon management. Admin only.
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from tawatch.api.deps import require_admin
from tawatch.database import get_db
from tawatch.models.user import User
from tawatch.schemas.coupon import CouponCreate, CouponResponse, CouponUpdate
from tawatch.services.coupon_service import coupon_service
from tawatch.utils.pagination import MAX_PER_PAGE, Page

router: APIRouter = APIRouter()


@router.get("/", response_model=Page[CouponResponse])
async def list_coupons(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
    page: Annotated[int, Query(ge=1)] = 1,
    per_page: Annotated[int, Query(ge=1, le=MAX_PER_PAGE)] = 20,
    is_active: Annotated[bool | None, Query()] = None,
    keyword: Annotated[str | None, Query(max_length=50, description="코드 검색")] = None,
) -> Page[CouponResponse]:
    """쿠폰 목록 조회."""
    return await coupon_service.list_coupons(db, page, per_page, is_active=is_active, keyword=keyword)


@router.get("/{coupon_id}", response_model=CouponResponse)
async def get_coupon(
    coupon_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
) -> CouponResponse:
    """쿠폰 상세 조회."""
    return await coupon_service.get_coupon(db, coupon_id)


@router.post("/", response_model=CouponResponse, status_code=201)
async def create_coupon(
    data: CouponCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
) -> CouponResponse:
    """쿠폰 생성 — 코드는 대문자로 저장."""
    result: CouponResponse = await coupon_service.create_coupon(db, data)
    await db.commit()
    return result


@router.put("/{coupon_id}", response_model=CouponResponse)
async def update_coupon(
    coupon_id: UUID,
    data: CouponUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
) -> CouponResponse:
    """쿠폰 수정."""
    result: CouponResponse = await coupon_service.update_coupon(db, coupon_id, data)
    await db.commit()
    return result


@router.delete("/{coupon_id}", status_code=204)
async def delete_coupon(
    coupon_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
) -> None:
    """쿠폰 삭제 — 사용 이력이 있으면 비활성화만 됨."""
    await coupon_service.delete_coupon(db, coupon_id)
    await db.commit()
