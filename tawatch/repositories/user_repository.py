"""사용자 레포지토리 — 사용자, 역할, 배송지 쿼리.

User Repository — Queries for users, roles and shipping addresses.
"""

from typing import Sequence
from uuid import UUID

from sqlalchemy import Select, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from tawatch.models.user import Address, Role, User
from tawatch.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """사용자 테이블에 대한 데이터베이스 쿼리를 담당하는 레포지토리.

    Repository handling database queries for the users table.
    """

    def __init__(self) -> None:
        super().__init__(User)

    async def get_detail(
        self,
        db: AsyncSession,
        user_id: UUID,
    ) -> User | None:
        """사용자 상세 정보를 역할과 함께 조회합니다.

        Retrieve a user with the role eagerly loaded.
        """
        query: Select = (
            select(User)
            .options(selectinload(User.role))
            .where(User.id == user_id)
            .execution_options(populate_existing=True)
        )
        result = await db.execute(query)
        return result.scalar_one_or_none()

    async def list_users(
        self,
        db: AsyncSession,
        page: int,
        per_page: int,
        role_name: str | None = None,
        is_active: bool | None = None,
        keyword: str | None = None,
    ) -> tuple[Sequence[User], int]:
        """사용자 목록을 필터 조건으로 페이지 조회합니다.

        List users with optional role/active/keyword filters, newest first.
        keyword matches email, full name or phone (case-insensitive).
        """
        query: Select = select(User).options(selectinload(User.role))

        if role_name is not None:
            query = query.join(Role, Role.id == User.role_id).where(Role.name == role_name)
        if is_active is not None:
            query = query.where(User.is_active == is_active)
        if keyword:
            pattern: str = f"%{keyword.strip()}%"
            query = query.where(
                or_(
                    User.email.ilike(pattern),
                    User.full_name.ilike(pattern),
                    User.phone.ilike(pattern),
                )
            )

        query = query.order_by(User.created_at.desc())
        return await self.get_paginated(db, query, page, per_page)

    async def get_role_by_name(
        self,
        db: AsyncSession,
        name: str,
    ) -> Role | None:
        """이름으로 역할을 조회합니다 — Look up a role by name."""
        result = await db.execute(select(Role).where(Role.name == name))
        return result.scalar_one_or_none()


class AddressRepository(BaseRepository[Address]):
    """배송지 레포지토리.

    Repository for customer shipping addresses.
    """

    def __init__(self) -> None:
        super().__init__(Address)

    async def list_for_user(
        self,
        db: AsyncSession,
        user_id: UUID,
    ) -> list[Address]:
        """사용자의 배송지 목록 — 기본 배송지 우선 (default first)."""
        query: Select = (
            select(Address)
            .where(Address.user_id == user_id)
            .order_by(Address.is_default.desc(), Address.created_at)
        )
        result = await db.execute(query)
        return list(result.scalars().all())

    async def get_for_user(
        self,
        db: AsyncSession,
        address_id: UUID,
        user_id: UUID,
    ) -> Address | None:
        """사용자 소유 배송지 조회 — None if missing or owned by someone else."""
        result = await db.execute(
            select(Address).where(Address.id == address_id, Address.user_id == user_id)
        )
        return result.scalar_one_or_none()

    async def clear_default(
        self,
        db: AsyncSession,
        user_id: UUID,
        except_id: UUID | None = None,
    ) -> None:
        """사용자의 기본 배송지 플래그를 해제합니다.

        Unset is_default on all of a user's addresses except one.
        """
        stmt = update(Address).where(Address.user_id == user_id, Address.is_default == True)  # noqa: E712
        if except_id is not None:
            stmt = stmt.where(Address.id != except_id)
        await db.execute(stmt.values(is_default=False).execution_options(synchronize_session="fetch"))
        await db.flush()


# 싱글턴 인스턴스 — Singleton instances
user_repository: UserRepository = UserRepository()
address_repository: AddressRepository = AddressRepository()
