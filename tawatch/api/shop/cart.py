"""장바구니 라우터.

Cart Router — The caller's cart. Every mutation returns the updated cart.
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from tawatch.api.deps import get_current_user
from tawatch.database import get_db
from tawatch.models.user import User
from tawatch.schemas.cart import CartItemAdd, CartItemUpdate, CartResponse
from tawatch.services.cart_service import cart_service

router: APIRouter = APIRouter()


@router.get("/", response_model=CartResponse)
async def get_cart(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> CartResponse:
    """내 장바구니 조회 — 처음 조회 시 생성됨 (created on first read)."""
    result: CartResponse = await cart_service.get_cart(db, current_user.id)
    await db.commit()
    return result


@router.post("/items", response_model=CartResponse, status_code=201)
async def add_item(
    data: CartItemAdd,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> CartResponse:
    """장바구니에 상품 추가 — 같은 상품은 수량 합산.

    Add a product; an existing line for the same product is merged.
    """
    result: CartResponse = await cart_service.add_item(db, current_user.id, data)
    await db.commit()
    return result


@router.put("/items/{item_id}", response_model=CartResponse)
async def update_item(
    item_id: UUID,
    data: CartItemUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> CartResponse:
    """장바구니 항목 수량 변경."""
    result: CartResponse = await cart_service.update_item(db, current_user.id, item_id, data)
    await db.commit()
    return result


@router.delete("/items/{item_id}", response_model=CartResponse)
async def remove_item(
    item_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> CartResponse:
    """장바구니 항목 삭제."""
    result: CartResponse = await cart_service.remove_item(db, current_user.id, item_id)
    await db.commit()
    return result


@router.delete("/", status_code=204)
async def clear_cart(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> None:
    """장바구니 비우기."""
    await cart_service.clear(db, current_user.id)
    await db.commit()
