"""내 주문 라우터 — 체크아웃, 주문 조회/취소, MoMo 결제.

Shop Order Router — Checkout, my orders, cancellation and MoMo payment
creation.
"""

from typing import Annotated, Literal
from uuid import UUID

from fastapi import APIRouter, BackgroundTasks, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from tawatch.api.deps import get_current_user
from tawatch.database import get_db
from tawatch.models.user import User
from tawatch.schemas.order import CancelOrderRequest, CheckoutRequest, OrderDetailResponse, OrderSummary
from tawatch.schemas.payment import MomoPaymentResponse, PaymentResponse
from tawatch.services.notification_service import notification_service
from tawatch.services.order_service import order_service
from tawatch.services.payment_service import payment_service
from tawatch.utils.exceptions import BadRequestError, PaymentGatewayError
from tawatch.utils.pagination import MAX_PER_PAGE, Page

router: APIRouter = APIRouter()

OrderStatus = Literal["pending", "confirmed", "shipping", "delivered", "cancelled"]


@router.post("/", response_model=OrderDetailResponse, status_code=201)
async def checkout(
    data: CheckoutRequest,
    background_tasks: BackgroundTasks,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> OrderDetailResponse:
    """장바구니로 주문 생성 — 단일 트랜잭션.

    Place an order from my cart. Stock, coupon usage, order rows and cart
    clearing are committed together. The confirmation e-mail is sent
    after the commit.
    """
    result: OrderDetailResponse = await order_service.checkout(db, current_user, data)
    await db.commit()
    background_tasks.add_task(notification_service.send_order_confirmation, current_user.email, result)
    return result


@router.get("/", response_model=Page[OrderSummary])
async def list_my_orders(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
    page: Annotated[int, Query(ge=1)] = 1,
    per_page: Annotated[int, Query(ge=1, le=MAX_PER_PAGE)] = 20,
    status: Annotated[OrderStatus | None, Query(description="주문 상태 필터")] = None,
) -> Page[OrderSummary]:
    """내 주문 목록 — 최신순."""
    return await order_service.list_my_orders(db, current_user.id, page, per_page, status)


@router.get("/{order_id}", response_model=OrderDetailResponse)
async def get_my_order(
    order_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> OrderDetailResponse:
    """내 주문 상세 — 다른 사용자의 주문은 404."""
    return await order_service.get_my_order(db, current_user.id, order_id)


@router.post("/{order_id}/cancel", response_model=OrderDetailResponse)
async def cancel_my_order(
    order_id: UUID,
    data: CancelOrderRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> OrderDetailResponse:
    """내 주문 취소 — 결제 전 대기 주문만 가능.

    Cancel a pending, unpaid order. Stock and coupon usage are released.
    """
    result: OrderDetailResponse = await order_service.cancel_my_order(db, current_user, order_id, data.reason)
    await db.commit()
    return result


@router.post("/{order_id}/payments/momo", response_model=MomoPaymentResponse, status_code=201)
async def create_momo_payment(
    order_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> MomoPaymentResponse:
    """MoMo 결제 생성 — 결제 페이지 URL 반환.

    Create a MoMo payment attempt and return the pay URL. A rejected or
    unreachable gateway still leaves a "failed" attempt on record.
    """
    try:
        result: MomoPaymentResponse = await payment_service.create_momo_payment(db, current_user, order_id)
    except (BadRequestError, PaymentGatewayError):
        # 실패한 결제 시도도 기록 — keep the failed attempt
        await db.commit()
        raise
    await db.commit()
    return result


@router.get("/{order_id}/payments", response_model=list[PaymentResponse])
async def list_my_order_payments(
    order_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> list[PaymentResponse]:
    """내 주문의 결제 시도 목록."""
    return await payment_service.list_order_payments(db, order_id, user_id=current_user.id)
