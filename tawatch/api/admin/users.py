"""관리자 사용자 라우터 — 사용자 조회, 역할/활성 상태 변경.

Admin User Router — User listing with filters, detail, role change and
activation toggle. Admin only. Users are never deleted; deactivate them.
"""

from typing import Annotated, Literal
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from tawatch.api.deps import require_admin
from tawatch.database import get_db
from tawatch.models.user import User
from tawatch.schemas.user import UserAdminUpdate, UserResponse
from tawatch.services.user_service import user_service
from tawatch.utils.pagination import MAX_PER_PAGE, Page

router: APIRouter = APIRouter()


@router.get("/", response_model=Page[UserResponse])
async def list_users(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
    page: Annotated[int, Query(ge=1)] = 1,
    per_page: Annotated[int, Query(ge=1, le=MAX_PER_PAGE)] = 20,
    role: Annotated[Literal["admin", "staff", "customer"] | None, Query(description="역할 필터")] = None,
    is_active: Annotated[bool | None, Query(description="활성 상태 필터")] = None,
    keyword: Annotated[str | None, Query(max_length=100, description="이메일/이름/전화번호")] = None,
) -> Page[UserResponse]:
    """사용자 목록을 필터 조건으로 조회합니다.

    List users with optional role/active/keyword filters, newest first.
    """
    return await user_service.list_users(db, page, per_page, role_name=role, is_active=is_active, keyword=keyword)


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
) -> UserResponse:
    """사용자 상세 정보를 조회합니다."""
    return await user_service.get_user(db, user_id)


@router.patch("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: UUID,
    data: UserAdminUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
) -> UserResponse:
    """사용자 역할/활성 상태/이름 변경.

    Change a user's role, active flag or name. Admins cannot demote or
    deactivate themselves; deactivation revokes the user's refresh tokens.
    """
    result: UserResponse = await user_service.update_user(db, user_id, data, current_user)
    await db.commit()
    return result
