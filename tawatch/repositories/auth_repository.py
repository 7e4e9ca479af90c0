"""인증 레포지토리 — 로그인 사용자 조회, 리프레시 토큰 저장/회전/폐기.

Auth Repository — Credential lookups and the refresh token store. Callers
pass raw tokens; only their SHA-256 digest is written or queried.
"""

import hashlib
from datetime import datetime
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from tawatch.models.token import RefreshToken
from tawatch.models.user import User


def hash_token(token: str) -> str:
    """리프레시 토큰 다이제스트 (hex)."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


class AuthRepository:
    """인증 관련 쿼리."""

    async def get_user_by_email(self, db: AsyncSession, email: str) -> User | None:
        """이메일(소문자)로 사용자와 역할을 조회합니다."""
        result = await db.execute(
            select(User).options(selectinload(User.role)).where(User.email == email.lower())
        )
        return result.scalar_one_or_none()

    async def create_refresh_token(
        self,
        db: AsyncSession,
        user_id: UUID,
        token: str,
        expires_at: datetime,
    ) -> RefreshToken:
        """발급한 리프레시 토큰의 다이제스트를 저장합니다."""
        row: RefreshToken = RefreshToken(user_id=user_id, token_hash=hash_token(token), expires_at=expires_at)
        db.add(row)
        await db.flush()
        return row

    async def get_refresh_token(self, db: AsyncSession, token: str) -> RefreshToken | None:
        result = await db.execute(select(RefreshToken).where(RefreshToken.token_hash == hash_token(token)))
        return result.scalar_one_or_none()

    async def delete_refresh_token(self, db: AsyncSession, token: str) -> bool:
        """리프레시 토큰 폐기.

        Returns:
            bool: 저장된 토큰이었는지 여부 (False for an unknown token)
        """
        result = await db.execute(delete(RefreshToken).where(RefreshToken.token_hash == hash_token(token)))
        await db.flush()
        return (result.rowcount or 0) > 0

    async def delete_user_refresh_tokens(self, db: AsyncSession, user_id: UUID) -> None:
        """사용자의 모든 리프레시 토큰 폐기 — sign out everywhere."""
        await db.execute(delete(RefreshToken).where(RefreshToken.user_id == user_id))
        await db.flush()


# 싱글턴 인스턴스 — Singleton instance
auth_repository: AuthRepository = AuthRepository()
