"""사용자, 프로필, 배송지 Pydantic 스키마 정의.

User, profile and shipping address Pydantic schema definitions.
"""

from datetime import datetime

from pydantic import BaseModel, Field


# === 프로필 (Profile) 스키마 ===

class ProfileUpdate(BaseModel):
    """프로필 수정 요청 스키마 (부분 업데이트).

    Profile update request schema (partial update).
    """

    full_name: str | None = Field(default=None, min_length=1, max_length=255)
    phone: str | None = Field(default=None, max_length=20)


class PasswordChangeRequest(BaseModel):
    """비밀번호 변경 요청 스키마.

    Attributes:
        current_password: 현재 비밀번호 (Current password, verified first)
        new_password: 새 비밀번호 (New password, at least 8 characters)
    """

    current_password: str
    new_password: str = Field(..., min_length=8, max_length=128)


# === 배송지 (Address) 스키마 ===

class AddressCreate(BaseModel):
    """배송지 생성 요청 스키마.

    Shipping address creation request schema.
    The first address of a user always becomes the default.

    Attributes:
        recipient_name: 수령인 이름 (Recipient name)
        phone: 수령인 전화번호 (Recipient phone)
        line1: 번지/도로명 (Street line)
        ward: 동 (Ward, optional)
        district: 구 (District, optional)
        city: 시/성 (City or province)
        is_default: 기본 배송지 여부 (Default flag)
    """

    recipient_name: str = Field(..., min_length=1, max_length=255)
    phone: str = Field(..., min_length=1, max_length=20)
    line1: str = Field(..., min_length=1, max_length=255)
    ward: str | None = Field(default=None, max_length=100)
    district: str | None = Field(default=None, max_length=100)
    city: str = Field(..., min_length=1, max_length=100)
    is_default: bool = False


class AddressUpdate(BaseModel):
    """배송지 수정 요청 스키마 (부분 업데이트)."""

    recipient_name: str | None = Field(default=None, min_length=1, max_length=255)
    phone: str | None = Field(default=None, min_length=1, max_length=20)
    line1: str | None = Field(default=None, min_length=1, max_length=255)
    ward: str | None = Field(default=None, max_length=100)
    district: str | None = Field(default=None, max_length=100)
    city: str | None = Field(default=None, min_length=1, max_length=100)
    is_default: bool | None = None


class AddressResponse(BaseModel):
    """배송지 응답 스키마."""

    id: str
    recipient_name: str
    phone: str
    line1: str
    ward: str | None
    district: str | None
    city: str
    is_default: bool
    created_at: datetime


# === 관리자용 사용자 (Admin user management) 스키마 ===

class UserResponse(BaseModel):
    """사용자 응답 스키마 (관리자 목록/상세).

    User response schema for the back office.

    Attributes:
        id: 사용자 UUID (User unique identifier)
        email: 로그인 이메일 (Login email)
        full_name: 실명 (Full display name)
        phone: 전화번호 (Phone, nullable)
        role_name: 역할 이름 (Role name)
        role_level: 역할 레벨 (Role level)
        is_active: 활성 상태 (Active flag)
        created_at: 가입 일시 (Registration timestamp)
    """

    id: str
    email: str
    full_name: str
    phone: str | None
    role_name: str
    role_level: int
    is_active: bool
    email_verified: bool
    created_at: datetime


class UserAdminUpdate(BaseModel):
    """관리자 사용자 수정 요청 스키마 (부분 업데이트).

    Admin user update request. role_name must be an existing role.
    """

    role_name: str | None = None  # 변경할 역할 이름 (admin|staff|customer)
    is_active: bool | None = None  # 활성/비활성 (Activate or deactivate)
    full_name: str | None = Field(default=None, min_length=1, max_length=255)
