"""관리자 인증 라우터 — 관리자/직원 로그인.

Admin Auth Router — Back-office login. Customer accounts (level 3) are
rejected. Common endpoints (refresh, logout, me) are in tawatch.api.auth.
"""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from tawatch.database import get_db
from tawatch.schemas.auth import LoginRequest, TokenResponse
from tawatch.services.auth_service import auth_service

router: APIRouter = APIRouter()


@router.post("/login", response_model=TokenResponse)
async def admin_login(
    data: LoginRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> TokenResponse:
    """관리자 로그인 — 고객 계정 접근 불가 (403).

    Admin login endpoint. Only admin and staff accounts are accepted.
    """
    result: TokenResponse = await auth_service.admin_login(db, data)
    await db.commit()
    return result
