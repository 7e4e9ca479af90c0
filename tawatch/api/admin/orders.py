"""관리자 주문 라우터 — 주문 조회, 상태 변경, 결제 내역.

Admin Order Router — Order listing with filters, detail, status changes
through the state machine, and payment attempts. Staff+.
"""

from datetime import datetime
from typing import Annotated, Literal
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from tawatch.api.deps import require_staff
from tawatch.database import get_db
from tawatch.models.user import User
from tawatch.schemas.order import OrderDetailResponse, OrderStatusUpdate, OrderSummary
from tawatch.schemas.payment import PaymentResponse
from tawatch.services.order_service import order_service
from tawatch.services.payment_service import payment_service
from tawatch.utils.pagination import MAX_PER_PAGE, Page

router: APIRouter = APIRouter()


@router.get("/", response_model=Page[OrderSummary])
async def list_orders(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_staff)],
    page: Annotated[int, Query(ge=1)] = 1,
    per_page: Annotated[int, Query(ge=1, le=MAX_PER_PAGE)] = 20,
    status: Annotated[
        Literal["pending", "confirmed", "shipping", "delivered", "cancelled"] | None, Query()
    ] = None,
    payment_status: Annotated[Literal["unpaid", "paid", "refunded"] | None, Query()] = None,
    keyword: Annotated[str | None, Query(max_length=100, description="주문 코드/수령인/전화번호")] = None,
    date_from: Annotated[datetime | None, Query(description="생성 시작 (포함)")] = None,
    date_to: Annotated[datetime | None, Query(description="생성 종료 (미포함)")] = None,
) -> Page[OrderSummary]:
    """주문 목록을 필터 조건으로 조회합니다 — 최신순."""
    return await order_service.list_orders(
        db,
        page,
        per_page,
        status=status,
        payment_status=payment_status,
        keyword=keyword,
        date_from=date_from,
        date_to=date_to,
    )


@router.get("/{order_id}", response_model=OrderDetailResponse)
async def get_order(
    order_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_staff)],
) -> OrderDetailResponse:
    """주문 상세 조회 — 항목, 상태 이력, 결제 포함."""
    return await order_service.get_order(db, order_id)


@router.patch("/{order_id}/status", response_model=OrderDetailResponse)
async def update_order_status(
    order_id: UUID,
    data: OrderStatusUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_staff)],
) -> OrderDetailResponse:
    """주문 상태 변경.

    Move the order through pending → confirmed → shipping → delivered, or
    cancel it from pending/confirmed. Illegal transitions return 400.
    """
    result: OrderDetailResponse = await order_service.update_status(db, order_id, data, current_user)
    await db.commit()
    return result


@router.get("/{order_id}/payments", response_model=list[PaymentResponse])
async def list_order_payments(
    order_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_staff)],
) -> list[PaymentResponse]:
    """주문의 결제 시도 목록."""
    return await payment_service.list_order_payments(db, order_id)
