"""장바구니 Pydantic 스키마 정의.

Cart Pydantic schema definitions.
"""

from decimal import Decimal

from pydantic import BaseModel, Field


class CartItemAdd(BaseModel):
    """장바구니 담기 요청 — 같은 상품이 있으면 수량 합산 (merged with an existing line)."""

    product_id: str
    quantity: int = Field(default=1, ge=1)


class CartItemUpdate(BaseModel):
    """장바구니 수량 변경 요청."""

    quantity: int = Field(..., ge=1)


class CartItemResponse(BaseModel):
    """장바구니 항목 응답 스키마.

    Attributes:
        id: 항목 UUID (Line identifier)
        product_id: 상품 UUID
        product_name: 상품명 (Current product name)
        product_slug: 상품 슬러그
        image_url: 대표 이미지 (Primary image URL)
        unit_price: 현재 실제 판매가 (Current effective price)
        quantity: 수량
        line_total: 합계 (unit_price × quantity)
        stock_quantity: 현재 재고 (Current stock)
        is_available: 구매 가능 여부 (Active and enough stock)
    """

    id: str
    product_id: str
    product_name: str
    product_slug: str
    sku: str
    image_url: str | None
    unit_price: Decimal
    quantity: int
    line_total: Decimal
    stock_quantity: int
    is_available: bool


class CartResponse(BaseModel):
    """장바구니 응답 스키마."""

    id: str
    items: list[CartItemResponse]
    item_count: int  # 총 수량 (Sum of quantities)
    subtotal: Decimal
