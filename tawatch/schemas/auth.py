"""인증 관련 Pydantic 요청/응답 스키마 정의.

Authentication-related Pydantic request/response schema definitions.
Covers customer registration, storefront/back-office login, token
issuance/refresh and current user info.
"""

import re

from pydantic import BaseModel, Field, field_validator

# 간단한 이메일 형식 검사 — local@domain.tld
EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def normalize_email(value: str) -> str:
    """이메일 정규화 — strip + lower-case, then a shape check."""
    value = value.strip().lower()
    if not EMAIL_PATTERN.match(value):
        raise ValueError("Invalid email address")
    return value


class LoginRequest(BaseModel):
    """로그인 요청 스키마 (쇼핑몰/관리자 공용).

    Login request schema shared by the storefront and back office.
    Admin login additionally requires level <= 2 (admin, staff).

    Attributes:
        email: 로그인 이메일 (Login email, case-insensitive)
        password: 비밀번호 (Plain text password, verified against bcrypt hash)
    """

    email: str  # 로그인 이메일 (Login email)
    password: str  # 비밀번호 — 평문, 서버에서 bcrypt 해시와 비교 (Plain text, compared to bcrypt hash)

    @field_validator("email")
    @classmethod
    def _normalize_email(cls, value: str) -> str:
        return value.strip().lower()


class RegisterRequest(BaseModel):
    """고객 회원가입 요청 스키마.

    Customer self-registration request schema.
    Creates a new user with the customer role (level 3).

    Attributes:
        email: 이메일 (Login email, stored lower-case, unique)
        password: 비밀번호 (Plain text, at least 8 characters, bcrypt-hashed on server)
        full_name: 실명 (Full display name)
        phone: 전화번호 (Phone number, optional)
    """

    email: str
    password: str = Field(..., min_length=8, max_length=128)
    full_name: str = Field(..., min_length=1, max_length=255)
    phone: str | None = Field(default=None, max_length=20)

    @field_validator("email")
    @classmethod
    def _normalize_email(cls, value: str) -> str:
        return normalize_email(value)


class TokenResponse(BaseModel):
    """JWT 토큰 발급 응답 스키마.

    JWT token issuance response schema.
    Returned after successful registration, login or token refresh.

    Attributes:
        access_token: JWT 액세스 토큰 (Short-lived access token)
        refresh_token: JWT 리프레시 토큰 (Long-lived refresh token)
        token_type: 토큰 유형 (Always "bearer" for Authorization header)
    """

    access_token: str  # JWT 액세스 토큰 — 만료: 30분 기본 (Access token, default TTL: 30min)
    refresh_token: str  # JWT 리프레시 토큰 — 만료: 7일 기본 (Refresh token, default TTL: 7 days)
    token_type: str = "bearer"  # 토큰 유형 — 항상 "bearer"


class RefreshRequest(BaseModel):
    """토큰 갱신/로그아웃 요청 스키마.

    Token refresh (and logout) request schema.

    Attributes:
        refresh_token: 기존 리프레시 토큰 (Existing refresh token)
    """

    refresh_token: str  # 기존 리프레시 토큰 (Current refresh token)


class UserMeResponse(BaseModel):
    """현재 사용자 정보 응답 스키마 (GET /me).

    Current user info response schema for the /me endpoints.

    Attributes:
        id: 사용자 UUID (User unique identifier)
        email: 로그인 이메일 (Login email)
        full_name: 실명 (Full display name)
        phone: 전화번호 (Phone, nullable)
        role_name: 역할 이름 (admin|staff|customer)
        role_level: 역할 레벨 (1=admin, 2=staff, 3=customer)
        is_active: 활성 상태 (Account active status)
        email_verified: 이메일 인증 여부 (Email verified flag)
    """

    id: str
    email: str
    full_name: str
    phone: str | None
    role_name: str
    role_level: int  # 역할 레벨 — 낮을수록 높은 권한 (lower = more authority)
    is_active: bool
    email_verified: bool
