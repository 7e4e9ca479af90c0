"""관리자 브랜드 라우터 — 브랜드 CRUD 엔드포인트.

Admin Brand Router — CRUD endpoints for watch brands. Staff+.
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from tawatch.api.deps import require_staff
from tawatch.database import get_db
from tawatch.models.user import User
from tawatch.schemas.catalog import BrandCreate, BrandResponse, BrandUpdate
from tawatch.services.brand_service import brand_service

router: APIRouter = APIRouter()


@router.get("/", response_model=list[BrandResponse])
async def list_brands(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_staff)],
    active_only: Annotated[bool, Query()] = False,
) -> list[BrandResponse]:
    """브랜드 목록을 조회합니다."""
    return await brand_service.list_brands(db, active_only=active_only)


@router.post("/", response_model=BrandResponse, status_code=201)
async def create_brand(
    data: BrandCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_staff)],
) -> BrandResponse:
    """새 브랜드를 생성합니다.

    Create a new brand. Name and slug must be unique.
    """
    result: BrandResponse = await brand_service.create_brand(db, data)
    await db.commit()
    return result


@router.put("/{brand_id}", response_model=BrandResponse)
async def update_brand(
    brand_id: UUID,
    data: BrandUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_staff)],
) -> BrandResponse:
    """브랜드 정보를 수정합니다."""
    result: BrandResponse = await brand_service.update_brand(db, brand_id, data)
    await db.commit()
    return result


@router.delete("/{brand_id}", status_code=204)
async def delete_brand(
    brand_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_staff)],
) -> None:
    """브랜드를 삭제합니다 — 상품이 남아 있으면 400."""
    await brand_service.delete_brand(db, brand_id)
    await db.commit()
