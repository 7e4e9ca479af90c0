"""사용자, 역할, 배송지 관련 SQLAlchemy ORM 모델 정의.

User, Role and Address SQLAlchemy ORM model definitions.
Implements level-based access control shared by the storefront and back office.

Tables:
    - roles: 역할 (admin=1, staff=2, customer=3; lower level = more authority)
    - users: 사용자 계정 (User accounts, email unique)
    - addresses: 배송지 (Customer shipping addresses)
"""

import uuid
from datetime import datetime, timezone
from sqlalchemy import String, Boolean, DateTime, Integer, ForeignKey, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from tawatch.database import Base

# 기본 역할 — Built-in role names and levels
ROLE_ADMIN: str = "admin"
ROLE_STAFF: str = "staff"
ROLE_CUSTOMER: str = "customer"
ROLE_LEVELS: dict[str, int] = {ROLE_ADMIN: 1, ROLE_STAFF: 2, ROLE_CUSTOMER: 3}


class Role(Base):
    """역할 모델 — 권한 수준을 정의.

    Role model — Defines permission levels.
    Lower level numbers indicate higher authority:
        1 = admin, 2 = staff, 3 = customer
    """

    __tablename__ = "roles"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    # 역할 이름 — Role name (unique)
    name: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    # 권한 레벨 — Permission level (unique, 1=admin 최고 권한)
    level: Mapped[int] = mapped_column(Integer, unique=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    users = relationship("User", back_populates="role")


class User(Base):
    """사용자 모델 — 고객 및 관리자 계정 정보.

    User model — Customer and back-office account information.
    Email is globally unique and stored lower-cased.

    Relationships:
        role: 사용자 역할 (Assigned role)
        refresh_tokens: 리프레시 토큰 목록 (cascade delete)
        addresses: 배송지 목록 (cascade delete)
    """

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    # 역할 FK — 역할 삭제 시 제한됨 (role deletion is restricted)
    role_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("roles.id"), nullable=False)
    # 로그인 이메일 — Login email (lower-case, unique)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    full_name: Mapped[str] = mapped_column(String(255), nullable=False)
    phone: Mapped[str | None] = mapped_column(String(20), nullable=True)
    # 비밀번호 해시 — bcrypt hashed password (평문 저장 금지, never store plaintext)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    email_verified: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    role = relationship("Role", back_populates="users")
    refresh_tokens = relationship("RefreshToken", back_populates="user", cascade="all, delete-orphan")
    addresses = relationship("Address", back_populates="user", cascade="all, delete-orphan")


class Address(Base):
    """배송지 모델 — 고객별 배송 주소.

    Shipping address model. At most one address per user is the default;
    the service layer keeps that invariant.
    """

    __tablename__ = "addresses"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    recipient_name: Mapped[str] = mapped_column(String(255), nullable=False)
    phone: Mapped[str] = mapped_column(String(20), nullable=False)
    # 주소 — 번지/도로 (street line), 동(ward), 구(district), 시(city)
    line1: Mapped[str] = mapped_column(String(255), nullable=False)
    ward: Mapped[str | None] = mapped_column(String(100), nullable=True)
    district: Mapped[str | None] = mapped_column(String(100), nullable=True)
    city: Mapped[str] = mapped_column(String(100), nullable=False)
    is_default: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    user = relationship("User", back_populates="addresses")
