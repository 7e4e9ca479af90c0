"""사용자 서비스 — 프로필, 배송지, 관리자 사용자 관리.

User Service — Customer profile and address book, plus back-office user
management (role changes, activation).
"""

from typing import Sequence
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from tawatch.models.user import Address, Role, User
from tawatch.repositories.auth_repository import auth_repository
from tawatch.repositories.user_repository import address_repository, user_repository
from tawatch.schemas.user import (
    AddressCreate,
    AddressResponse,
    AddressUpdate,
    PasswordChangeRequest,
    ProfileUpdate,
    UserAdminUpdate,
    UserResponse,
)
from tawatch.utils.exceptions import BadRequestError, NotFoundError
from tawatch.utils.pagination import Page
from tawatch.utils.password import hash_password, verify_password


class UserService:
    """사용자 관련 비즈니스 로직을 처리하는 서비스.

    Service handling user, profile and address business logic.
    """

    def _to_response(self, user: User) -> UserResponse:
        """사용자 모델을 응답 스키마로 변환합니다 (역할이 로드되어 있어야 함)."""
        return UserResponse(
            id=str(user.id),
            email=user.email,
            full_name=user.full_name,
            phone=user.phone,
            role_name=user.role.name,
            role_level=user.role.level,
            is_active=user.is_active,
            email_verified=user.email_verified,
            created_at=user.created_at,
        )

    def _address_response(self, address: Address) -> AddressResponse:
        return AddressResponse(
            id=str(address.id),
            recipient_name=address.recipient_name,
            phone=address.phone,
            line1=address.line1,
            ward=address.ward,
            district=address.district,
            city=address.city,
            is_default=address.is_default,
            created_at=address.created_at,
        )

    # --- 프로필 (Profile) ---

    async def update_profile(
        self,
        db: AsyncSession,
        user: User,
        data: ProfileUpdate,
    ) -> User:
        """내 프로필을 수정합니다.

        Update the caller's name/phone and return the reloaded user.
        """
        update_data: dict = data.model_dump(exclude_unset=True)
        if update_data.get("full_name") is None:
            update_data.pop("full_name", None)
        await user_repository.update(db, user.id, update_data)
        reloaded: User | None = await user_repository.get_detail(db, user.id)
        if reloaded is None:
            raise NotFoundError("User not found")
        return reloaded

    async def change_password(
        self,
        db: AsyncSession,
        user: User,
        data: PasswordChangeRequest,
    ) -> None:
        """비밀번호를 변경하고 모든 리프레시 토큰을 폐기합니다.

        Change the password and revoke every refresh token of the user.

        Raises:
            BadRequestError: 현재 비밀번호 불일치 (Current password is wrong)
        """
        if not verify_password(data.current_password, user.password_hash):
            raise BadRequestError("Current password is incorrect")

        await user_repository.update(db, user.id, {"password_hash": hash_password(data.new_password)})
        await auth_repository.delete_user_refresh_tokens(db, user.id)

    # --- 배송지 (Addresses) ---

    async def list_addresses(self, db: AsyncSession, user_id: UUID) -> list[AddressResponse]:
        """내 배송지 목록 — default first."""
        addresses: list[Address] = await address_repository.list_for_user(db, user_id)
        return [self._address_response(a) for a in addresses]

    async def get_owned_address(
        self,
        db: AsyncSession,
        address_id: UUID,
        user_id: UUID,
    ) -> Address:
        """소유 배송지 조회 — 다른 사용자 배송지는 404 (other users' addresses are 404)."""
        address: Address | None = await address_repository.get_for_user(db, address_id, user_id)
        if address is None:
            raise NotFoundError("Address not found")
        return address

    async def create_address(
        self,
        db: AsyncSession,
        user_id: UUID,
        data: AddressCreate,
    ) -> AddressResponse:
        """배송지를 추가합니다.

        Add an address. The first address always becomes the default; a new
        default clears the flag on the others.
        """
        existing: list[Address] = await address_repository.list_for_user(db, user_id)
        is_default: bool = data.is_default or not existing

        address: Address = await address_repository.create(
            db,
            {**data.model_dump(), "user_id": user_id, "is_default": is_default},
        )
        if is_default:
            await address_repository.clear_default(db, user_id, except_id=address.id)
        return self._address_response(address)

    async def update_address(
        self,
        db: AsyncSession,
        address_id: UUID,
        user_id: UUID,
        data: AddressUpdate,
    ) -> AddressResponse:
        """배송지를 수정합니다.

        Update an address. Unsetting is_default on the current default is
        ignored so the user keeps exactly one default.
        """
        address: Address = await self.get_owned_address(db, address_id, user_id)
        update_data: dict = data.model_dump(exclude_unset=True)

        # 필수 컬럼은 None으로 덮어쓰지 않음 — Required columns are never nulled
        for field in ("recipient_name", "phone", "line1", "city", "is_default"):
            if field in update_data and update_data[field] is None:
                update_data.pop(field)
        if update_data.get("is_default") is False and address.is_default:
            update_data.pop("is_default")

        updated: Address | None = await address_repository.update(db, address.id, update_data)
        if updated is None:
            raise NotFoundError("Address not found")
        if update_data.get("is_default"):
            await address_repository.clear_default(db, user_id, except_id=updated.id)
        return self._address_response(updated)

    async def delete_address(
        self,
        db: AsyncSession,
        address_id: UUID,
        user_id: UUID,
    ) -> None:
        """배송지를 삭제합니다 — 기본 배송지 삭제 시 가장 오래된 배송지가 기본이 됨.

        Delete an address. When the default is deleted the oldest remaining
        address becomes the default.
        """
        address: Address = await self.get_owned_address(db, address_id, user_id)
        was_default: bool = address.is_default
        await address_repository.delete(db, address.id)

        if was_default:
            remaining: list[Address] = await address_repository.list_for_user(db, user_id)
            if remaining:
                oldest: Address = min(remaining, key=lambda a: a.created_at)
                oldest.is_default = True
                await db.flush()

    # --- 관리자 (Back office) ---

    async def list_users(
        self,
        db: AsyncSession,
        page: int,
        per_page: int,
        role_name: str | None = None,
        is_active: bool | None = None,
        keyword: str | None = None,
    ) -> Page[UserResponse]:
        """사용자 목록을 조회합니다."""
        users: Sequence[User]
        users, total = await user_repository.list_users(
            db, page, per_page, role_name=role_name, is_active=is_active, keyword=keyword
        )
        return Page[UserResponse].build([self._to_response(u) for u in users], total, page, per_page)

    async def get_user(self, db: AsyncSession, user_id: UUID) -> UserResponse:
        """사용자 상세를 조회합니다.

        Raises:
            NotFoundError: 사용자를 찾을 수 없을 때 (User not found)
        """
        user: User | None = await user_repository.get_detail(db, user_id)
        if user is None:
            raise NotFoundError("User not found")
        return self._to_response(user)

    async def update_user(
        self,
        db: AsyncSession,
        user_id: UUID,
        data: UserAdminUpdate,
        acting_user: User,
    ) -> UserResponse:
        """관리자가 사용자 역할/활성 상태/이름을 수정합니다.

        Update a user's role, active flag or name from the back office.
        Deactivating a user also revokes their refresh tokens.

        Raises:
            NotFoundError: 사용자 또는 역할을 찾을 수 없을 때 (Unknown user or role)
            BadRequestError: 자기 자신을 비활성화/강등하려 할 때
                             (Admins cannot deactivate or demote themselves)
        """
        user: User | None = await user_repository.get_detail(db, user_id)
        if user is None:
            raise NotFoundError("User not found")

        update_data: dict = {}
        if data.role_name is not None and data.role_name != user.role.name:
            role: Role | None = await user_repository.get_role_by_name(db, data.role_name)
            if role is None:
                raise NotFoundError("Role not found")
            if user.id == acting_user.id:
                raise BadRequestError("You cannot change your own role")
            update_data["role_id"] = role.id

        if data.is_active is not None and data.is_active != user.is_active:
            if user.id == acting_user.id and not data.is_active:
                raise BadRequestError("You cannot deactivate your own account")
            update_data["is_active"] = data.is_active

        if data.full_name is not None:
            update_data["full_name"] = data.full_name.strip()

        if update_data:
            await user_repository.update(db, user.id, update_data)
            if update_data.get("is_active") is False:
                await auth_repository.delete_user_refresh_tokens(db, user.id)

        reloaded: User | None = await user_repository.get_detail(db, user.id)
        if reloaded is None:
            raise NotFoundError("User not found")
        return self._to_response(reloaded)


# 싱글턴 인스턴스 — Singleton instance
user_service: UserService = UserService()
