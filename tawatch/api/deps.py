"""FastAPI 의존성 주입 모듈 — 인증 및 권한 검사.

FastAPI dependency injection module — Authentication and authorization.
Provides reusable dependencies for extracting the current user from JWT
and enforcing level-based access control on API endpoints.

Authentication Flow:
    1. 클라이언트가 Authorization: Bearer <token> 헤더를 전송
       (Client sends Authorization: Bearer <token> header)
    2. HTTPBearer가 토큰을 추출 — 헤더가 없으면 401
       (HTTPBearer extracts the token; a missing header is a 401)
    3. decode_token()이 JWT를 검증하고 페이로드를 반환
       (decode_token verifies JWT and returns payload)
    4. 페이로드의 "sub" 필드로 DB에서 사용자를 조회, 활성 상태 확인
       (User is fetched by "sub" and must be active)

Authorization Flow (require_level):
    역할 레벨이 max_level 이하인지 확인, 아니면 403
    (Role level must be <= max_level, otherwise 403)
"""

from typing import Annotated, Awaitable, Callable
from uuid import UUID

import jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from tawatch.database import get_db
from tawatch.models.user import ROLE_ADMIN, ROLE_LEVELS, ROLE_STAFF, User
from tawatch.repositories.user_repository import user_repository
from tawatch.utils.exceptions import ForbiddenError, UnauthorizedError
from tawatch.utils.jwt import TOKEN_TYPE_ACCESS, decode_token

# HTTP Bearer 토큰 추출기 — auto_error=False: 누락 시 403 대신 401을 직접 발생
# (Missing credentials are turned into a 401 below instead of HTTPBearer's default)
security: HTTPBearer = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> User:
    """JWT 토큰에서 현재 인증된 사용자를 추출합니다.

    Decode JWT from the Authorization header and return the authenticated user.
    Validates token signature, expiration, token type, and user existence/active status.

    Args:
        credentials: HTTP Bearer 토큰 자격 증명 (Bearer token credentials from header)
        db: 비동기 DB 세션 (Async database session)

    Returns:
        User: 인증된 사용자, 역할 로드됨 (Authenticated user with role loaded)

    Raises:
        UnauthorizedError: 토큰 누락/무효/만료, 사용자 없음/비활성
                           (Missing/invalid/expired token, unknown or inactive user)
    """
    if credentials is None:
        raise UnauthorizedError("Not authenticated")

    try:
        payload: dict = decode_token(credentials.credentials)
    except jwt.InvalidTokenError:
        raise UnauthorizedError("Invalid or expired token")

    # 토큰 타입 검증 — Reject refresh tokens used as access tokens
    if payload.get("type") != TOKEN_TYPE_ACCESS:
        raise UnauthorizedError("Invalid token type")

    try:
        user_id: UUID = UUID(str(payload.get("sub")))
    except ValueError:
        raise UnauthorizedError("Invalid token")

    user: User | None = await user_repository.get_detail(db, user_id)
    if user is None or not user.is_active:
        raise UnauthorizedError("User not found or inactive")

    return user


def require_level(max_level: int) -> Callable[..., Awaitable[User]]:
    """역할 레벨 기반 권한 검사 의존성 팩토리.

    Dependency factory that creates a FastAPI dependency enforcing
    a maximum role level. Lower level = higher authority.

    Level hierarchy:
        1 = admin (최고 권한, highest authority)
        2 = staff
        3 = customer

    Args:
        max_level: 허용되는 최대 역할 레벨 (Maximum allowed role level, inclusive)
    """
    async def _check(
        current_user: Annotated[User, Depends(get_current_user)],
    ) -> User:
        # role은 get_current_user에서 selectinload로 이미 로드됨
        role = current_user.role
        if role is None or role.level > max_level:
            raise ForbiddenError("Insufficient permissions")
        return current_user
    return _check


# 편의 의존성 — Pre-configured level dependencies
require_admin = require_level(ROLE_LEVELS[ROLE_ADMIN])  # Admin만 허용 (level 1)
require_staff = require_level(ROLE_LEVELS[ROLE_STAFF])  # Admin + Staff 허용 (level <= 2)
