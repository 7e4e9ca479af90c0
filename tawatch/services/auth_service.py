"""인증 서비스 — 로그인, 회원가입, 토큰 갱신 비즈니스 로직.

Auth Service — Business logic for registration, login and token refresh.
Handles storefront/back-office login separation and the refresh token
lifecycle (persisted, rotated on refresh, revoked on logout).
"""

from datetime import datetime, timedelta, timezone
from uuid import UUID

import jwt
from sqlalchemy.ext.asyncio import AsyncSession

from tawatch.config import settings
from tawatch.models.user import ROLE_CUSTOMER, ROLE_LEVELS, ROLE_STAFF, Role, User
from tawatch.repositories.auth_repository import auth_repository
from tawatch.repositories.user_repository import user_repository
from tawatch.schemas.auth import (
    LoginRequest,
    RefreshRequest,
    RegisterRequest,
    TokenResponse,
    UserMeResponse,
)
from tawatch.utils.clock import as_utc
from tawatch.utils.exceptions import (
    BadRequestError,
    DuplicateError,
    ForbiddenError,
    UnauthorizedError,
)
from tawatch.utils.jwt import TOKEN_TYPE_REFRESH, create_access_token, create_refresh_token, decode_token
from tawatch.utils.password import hash_password, verify_password


class AuthService:
    """인증 관련 비즈니스 로직을 처리하는 서비스.

    Service handling authentication business logic.
    Manages storefront/admin login flows, registration, token refresh, and logout.
    """

    def _build_jwt_payload(self, user: User, role: Role) -> dict[str, str | int]:
        """JWT 토큰 페이로드를 생성합니다.

        Build the JWT token payload from user and role data.
        """
        return {
            "sub": str(user.id),
            "role": role.name,
            "level": role.level,
        }

    async def _generate_tokens(
        self,
        db: AsyncSession,
        user: User,
        role: Role,
    ) -> TokenResponse:
        """액세스 토큰과 리프레시 토큰을 생성합니다.

        Generate an access/refresh token pair. Previously issued refresh
        tokens of the user are deleted first.
        """
        payload: dict[str, str | int] = self._build_jwt_payload(user, role)
        access_token: str = create_access_token(payload)
        refresh_token: str = create_refresh_token(payload)

        # 기존 리프레시 토큰 정리 — Clean up old refresh tokens to prevent accumulation
        await auth_repository.delete_user_refresh_tokens(db, user.id)

        # 리프레시 토큰을 DB에 저장 — Persist refresh token to database
        expires_at: datetime = datetime.now(timezone.utc) + timedelta(
            days=settings.JWT_REFRESH_TOKEN_EXPIRE_DAYS
        )
        await auth_repository.create_refresh_token(
            db, user_id=user.id, token=refresh_token, expires_at=expires_at
        )

        return TokenResponse(access_token=access_token, refresh_token=refresh_token)

    async def _authenticate(self, db: AsyncSession, data: LoginRequest) -> User:
        """이메일/비밀번호 검증 — 실패 사유는 구분하지 않음 (one message for both)."""
        user: User | None = await auth_repository.get_user_by_email(db, data.email)
        if user is None or not verify_password(data.password, user.password_hash):
            raise UnauthorizedError("Invalid email or password")

        if not user.is_active:
            raise UnauthorizedError("Account is deactivated")
        return user

    async def register(
        self,
        db: AsyncSession,
        data: RegisterRequest,
    ) -> TokenResponse:
        """고객 회원가입을 처리합니다.

        Process customer registration. Creates a customer-level (level 3) user
        and signs them in.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            data: 회원가입 요청 데이터 (Registration request data)

        Returns:
            TokenResponse: 토큰 응답 (Token response)

        Raises:
            DuplicateError: 같은 이메일이 이미 존재할 때 (Email already registered)
            BadRequestError: 고객 역할이 없을 때 (Customer role not seeded)
        """
        existing: User | None = await auth_repository.get_user_by_email(db, data.email)
        if existing is not None:
            raise DuplicateError("Email already registered")

        customer_role: Role | None = await user_repository.get_role_by_name(db, ROLE_CUSTOMER)
        if customer_role is None:
            raise BadRequestError("Customer role not configured")

        user: User = User(
            role_id=customer_role.id,
            email=data.email,
            full_name=data.full_name.strip(),
            phone=data.phone,
            password_hash=hash_password(data.password),
        )
        db.add(user)
        await db.flush()

        return await self._generate_tokens(db, user, customer_role)

    async def shop_login(
        self,
        db: AsyncSession,
        data: LoginRequest,
    ) -> TokenResponse:
        """쇼핑몰 로그인을 처리합니다 — 모든 역할 허용.

        Process storefront login. Any active account may sign in.

        Raises:
            UnauthorizedError: 잘못된 인증 정보 또는 비활성 계정
                               (Invalid credentials or deactivated account)
        """
        user: User = await self._authenticate(db, data)
        return await self._generate_tokens(db, user, user.role)

    async def admin_login(
        self,
        db: AsyncSession,
        data: LoginRequest,
    ) -> TokenResponse:
        """관리자 로그인을 처리합니다.

        Process back-office login. Rejects customer accounts (level 3).

        Raises:
            UnauthorizedError: 잘못된 인증 정보일 때 (Invalid credentials)
            ForbiddenError: 고객 계정이 관리자 로그인을 시도할 때
                            (Customer account attempting admin login)
        """
        user: User = await self._authenticate(db, data)
        role: Role = user.role
        if role.level > ROLE_LEVELS[ROLE_STAFF]:
            raise ForbiddenError("Back-office access requires a staff or admin account")
        return await self._generate_tokens(db, user, role)

    async def refresh_tokens(
        self,
        db: AsyncSession,
        data: RefreshRequest,
    ) -> TokenResponse:
        """리프레시 토큰으로 새 토큰 쌍을 발급합니다.

        Issue a new token pair using a refresh token. The presented token is
        deleted (rotation).

        Raises:
            UnauthorizedError: 유효하지 않거나 만료된 리프레시 토큰일 때
                               (Invalid or expired refresh token)
        """
        # DB에서 리프레시 토큰 확인 — Verify refresh token in database
        db_token = await auth_repository.get_refresh_token(db, data.refresh_token)
        if db_token is None:
            raise UnauthorizedError("Invalid refresh token")

        # 만료 확인 — Check expiration
        if as_utc(db_token.expires_at) < datetime.now(timezone.utc):
            await auth_repository.delete_refresh_token(db, data.refresh_token)
            raise UnauthorizedError("Refresh token has expired")

        # JWT 디코딩으로 사용자 정보 추출 — Extract user info from JWT
        try:
            payload: dict = decode_token(data.refresh_token)
        except jwt.InvalidTokenError:
            await auth_repository.delete_refresh_token(db, data.refresh_token)
            raise UnauthorizedError("Invalid refresh token")

        user_id: str | None = payload.get("sub")
        if user_id is None or payload.get("type") != TOKEN_TYPE_REFRESH:
            raise UnauthorizedError("Invalid refresh token payload")

        user: User | None = await user_repository.get_detail(db, UUID(user_id))
        if user is None or not user.is_active:
            raise UnauthorizedError("User not found or inactive")

        # 기존 리프레시 토큰 삭제 후 새 토큰 발급 — Delete old token and issue new pair
        await auth_repository.delete_refresh_token(db, data.refresh_token)
        return await self._generate_tokens(db, user, user.role)

    async def logout(
        self,
        db: AsyncSession,
        refresh_token: str,
    ) -> None:
        """로그아웃 처리 — 리프레시 토큰을 삭제합니다 (unknown tokens are ignored)."""
        await auth_repository.delete_refresh_token(db, refresh_token)

    def get_me(self, user: User) -> UserMeResponse:
        """현재 로그인한 사용자 프로필을 반환합니다.

        Return the profile of the authenticated user. The role is loaded by
        the auth dependency.
        """
        return UserMeResponse(
            id=str(user.id),
            email=user.email,
            full_name=user.full_name,
            phone=user.phone,
            role_name=user.role.name,
            role_level=user.role.level,
            is_active=user.is_active,
            email_verified=user.email_verified,
        )


# 싱글턴 인스턴스 — Singleton instance
auth_service: AuthService = AuthService()
