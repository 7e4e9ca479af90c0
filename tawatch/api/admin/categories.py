"""관리자 카테고리 라우터 — 카테고리 CRUD.

Admin Category Router — CRUD endpoints for the category tree. Staff+.
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from tawatch.api.deps import require_staff
from tawatch.database import get_db
from tawatch.models.user import User
from tawatch.schemas.catalog import CategoryCreate, CategoryResponse, CategoryUpdate
from tawatch.services.category_service import category_service

router: APIRouter = APIRouter()


@router.get("/", response_model=list[CategoryResponse])
async def list_categories(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_staff)],
    active_only: Annotated[bool, Query(description="활성 카테고리만")] = False,
) -> list[CategoryResponse]:
    """카테고리 트리 조회 — 비활성 포함."""
    return await category_service.list_tree(db, active_only=active_only)


@router.post("/", response_model=CategoryResponse, status_code=201)
async def create_category(
    data: CategoryCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_staff)],
) -> CategoryResponse:
    """새 카테고리를 생성합니다 — 슬러그 미지정 시 이름에서 생성."""
    result: CategoryResponse = await category_service.create_category(db, data)
    await db.commit()
    return result


@router.put("/{category_id}", response_model=CategoryResponse)
async def update_category(
    category_id: UUID,
    data: CategoryUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_staff)],
) -> CategoryResponse:
    """카테고리를 수정합니다 — 자기 하위로 이동 불가."""
    result: CategoryResponse = await category_service.update_category(db, category_id, data)
    await db.commit()
    return result


@router.delete("/{category_id}", status_code=204)
async def delete_category(
    category_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_staff)],
) -> None:
    """카테고리를 삭제합니다 — 하위 카테고리나 상품이 있으면 400."""
    await category_service.delete_category(db, category_id)
    await db.commit()
