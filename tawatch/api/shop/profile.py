"""내 프로필 라우터 — 프로필 수정, 비밀번호 변경, 배송지 관리.

Profile Router — My profile, password change and address book.
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from tawatch.api.deps import get_current_user
from tawatch.database import get_db
from tawatch.models.user import User
from tawatch.schemas.auth import UserMeResponse
from tawatch.schemas.common import MessageResponse
from tawatch.schemas.user import (
    AddressCreate,
    AddressResponse,
    AddressUpdate,
    PasswordChangeRequest,
    ProfileUpdate,
)
from tawatch.services.auth_service import auth_service
from tawatch.services.user_service import user_service

router: APIRouter = APIRouter()


@router.get("/profile", response_model=UserMeResponse)
async def get_profile(
    current_user: Annotated[User, Depends(get_current_user)],
) -> UserMeResponse:
    """내 프로필 조회."""
    return auth_service.get_me(current_user)


@router.put("/profile", response_model=UserMeResponse)
async def update_profile(
    data: ProfileUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> UserMeResponse:
    """내 프로필 수정 — 이름, 전화번호.

    Update my name and phone number.
    """
    user: User = await user_service.update_profile(db, current_user, data)
    await db.commit()
    return auth_service.get_me(user)


@router.put("/profile/password", response_model=MessageResponse)
async def change_password(
    data: PasswordChangeRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> MessageResponse:
    """비밀번호 변경 — 모든 기기에서 로그아웃됨.

    Change my password. All refresh tokens are revoked.
    """
    await user_service.change_password(db, current_user, data)
    await db.commit()
    return MessageResponse(message="Password changed")


@router.get("/addresses", response_model=list[AddressResponse])
async def list_addresses(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> list[AddressResponse]:
    """내 배송지 목록 — 기본 배송지 우선."""
    return await user_service.list_addresses(db, current_user.id)


@router.post("/addresses", response_model=AddressResponse, status_code=201)
async def create_address(
    data: AddressCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> AddressResponse:
    """배송지 추가 — 첫 배송지는 자동으로 기본 배송지."""
    result: AddressResponse = await user_service.create_address(db, current_user.id, data)
    await db.commit()
    return result


@router.put("/addresses/{address_id}", response_model=AddressResponse)
async def update_address(
    address_id: UUID,
    data: AddressUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> AddressResponse:
    """배송지 수정."""
    result: AddressResponse = await user_service.update_address(db, address_id, current_user.id, data)
    await db.commit()
    return result


@router.delete("/addresses/{address_id}", status_code=204)
async def delete_address(
    address_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> None:
    """배송지 삭제 — 기본 배송지 삭제 시 가장 오래된 배송지가 기본이 됨."""
    await user_service.delete_address(db, address_id, current_user.id)
    await db.commit()
