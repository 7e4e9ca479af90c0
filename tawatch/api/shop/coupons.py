"""쿠폰 확인 라우터 — 현재 장바구니 기준 할인 미리보기.

Coupon Router — Preview a coupon against the caller's current cart.
"""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from tawatch.api.deps import get_current_user
from tawatch.database import get_db
from tawatch.models.user import User
from tawatch.schemas.cart import CartResponse
from tawatch.schemas.coupon import CouponValidateRequest, CouponValidateResponse
from tawatch.services.cart_service import cart_service
from tawatch.services.coupon_service import coupon_service

router: APIRouter = APIRouter()


@router.post("/validate", response_model=CouponValidateResponse)
async def validate_coupon(
    data: CouponValidateRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> CouponValidateResponse:
    """쿠폰 적용 가능 여부와 할인 금액 확인.

    Unknown code → 404; a rule failure → 400 with the reason.
    """
    cart: CartResponse = await cart_service.get_cart(db, current_user.id)
    return await coupon_service.validate(db, data.code, current_user.id, cart.subtotal)
