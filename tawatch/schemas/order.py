"""주문 Pydantic 스키마 정의.

Order Pydantic schema definitions — checkout, order views and status
updates.
"""

from datetime import datetime
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, Field

from tawatch.schemas.payment import PaymentResponse


class ShippingAddressInput(BaseModel):
    """주문서 직접 입력 배송지 (Inline shipping address at checkout)."""

    recipient_name: str = Field(..., min_length=1, max_length=255)
    phone: str = Field(..., min_length=1, max_length=20)
    address_line: str = Field(..., min_length=1, max_length=255)
    ward: str | None = Field(default=None, max_length=100)
    district: str | None = Field(default=None, max_length=100)
    city: str = Field(..., min_length=1, max_length=100)


class CheckoutRequest(BaseModel):
    """주문 생성 요청 스키마.

    Checkout request schema. Either address_id (saved address) or
    shipping_address (inline) must be given; address_id wins when both are.

    Attributes:
        address_id: 저장된 배송지 UUID (Saved address)
        shipping_address: 직접 입력 배송지 (Inline address)
        payment_method: cod|momo
        coupon_code: 쿠폰 코드 (optional)
        note: 배송 메모 (Delivery note)
    """

    address_id: str | None = None
    shipping_address: ShippingAddressInput | None = None
    payment_method: Literal["cod", "momo"] = "cod"
    coupon_code: str | None = Field(default=None, max_length=50)
    note: str | None = Field(default=None, max_length=1000)


class CancelOrderRequest(BaseModel):
    """주문 취소 요청."""

    reason: str | None = Field(default=None, max_length=1000)


class OrderStatusUpdate(BaseModel):
    """주문 상태 변경 요청 (관리자).

    Status must be a legal transition from the current status.
    """

    status: Literal["pending", "confirmed", "shipping", "delivered", "cancelled"]
    note: str | None = Field(default=None, max_length=1000)


class OrderItemResponse(BaseModel):
    """주문 항목 응답 — 구매 시점 스냅샷 (Snapshot at purchase time)."""

    id: str
    product_id: str | None
    product_name: str
    sku: str
    image_url: str | None
    unit_price: Decimal
    quantity: int
    line_total: Decimal


class OrderHistoryResponse(BaseModel):
    """주문 상태 이력 응답."""

    from_status: str | None
    to_status: str
    note: str | None
    changed_by: str | None
    created_at: datetime


class OrderSummary(BaseModel):
    """주문 목록 항목 스키마."""

    id: str
    code: str
    user_id: str | None
    status: str
    payment_method: str
    payment_status: str
    total_amount: Decimal
    item_count: int  # 총 수량 (Sum of line quantities)
    recipient_name: str
    created_at: datetime


class OrderDetailResponse(BaseModel):
    """주문 상세 응답 스키마.

    Attributes:
        subtotal: 상품 합계 (Sum of line totals)
        discount_amount: 쿠폰 할인 (Coupon discount)
        shipping_fee: 배송비 (Shipping fee)
        total_amount: 결제 금액 (subtotal - discount + shipping)
        items: 주문 항목 (Line snapshots)
        history: 상태 이력 (Status history, oldest first)
        payments: 결제 시도 (Payment attempts)
    """

    id: str
    code: str
    user_id: str | None
    status: str
    payment_method: str
    payment_status: str
    subtotal: Decimal
    discount_amount: Decimal
    shipping_fee: Decimal
    total_amount: Decimal
    coupon_code: str | None
    recipient_name: str
    phone: str
    address_line: str
    ward: str | None
    district: str | None
    city: str
    note: str | None
    cancel_reason: str | None
    confirmed_at: datetime | None
    shipped_at: datetime | None
    delivered_at: datetime | None
    cancelled_at: datetime | None
    created_at: datetime
    updated_at: datetime
    items: list[OrderItemResponse]
    history: list[OrderHistoryResponse]
    payments: list[PaymentResponse]
