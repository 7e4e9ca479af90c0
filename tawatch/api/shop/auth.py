"""스토어 인증 라우터 — 고객 회원가입, 로그인.

Shop Auth Router — Customer registration and login.
"""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from tawatch.database import get_db
from tawatch.schemas.auth import LoginRequest, RegisterRequest, TokenResponse
from tawatch.services.auth_service import auth_service

router: APIRouter = APIRouter()


@router.post("/register", response_model=TokenResponse, status_code=201)
async def register(
    data: RegisterRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> TokenResponse:
    """고객 회원가입 — 가입 즉시 토큰 쌍 발급.

    Register a customer account and return a token pair.
    """
    result: TokenResponse = await auth_service.register(db, data)
    await db.commit()
    return result


@router.post("/login", response_model=TokenResponse)
async def login(
    data: LoginRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> TokenResponse:
    """스토어 로그인 — 모든 활성 계정 허용."""
    result: TokenResponse = await auth_service.shop_login(db, data)
    await db.commit()
    return result
