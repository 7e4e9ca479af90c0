"""쿠폰 Pydantic 스키마 정의.

Coupon Pydantic schema definitions.
"""

from datetime import datetime
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, Field, field_validator


def _upper_code(value: str | None) -> str | None:
    return value.strip().upper() if value is not None else None


class CouponCreate(BaseModel):
    """쿠폰 생성 요청 스키마.

    Coupon creation request schema. The code is stored upper-case.
    Percentage values above 100 are rejected by the service.

    Attributes:
        code: 쿠폰 코드 (Unique code)
        discount_type: percentage|fixed
        discount_value: 할인율 또는 금액 (Percent or VND amount, > 0)
        max_discount_amount: 정률 할인 상한 (Cap for percentage discounts)
        min_order_amount: 최소 주문 금액 (Minimum subtotal)
        usage_limit: 전체 사용 한도 (None = unlimited)
        per_user_limit: 사용자별 한도 (None = unlimited)
        starts_at: 시작 일시 (Valid from, optional)
        expires_at: 만료 일시 (Valid until, exclusive, optional)
    """

    code: str = Field(..., min_length=3, max_length=50)
    description: str | None = None
    discount_type: Literal["percentage", "fixed"]
    discount_value: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2)
    max_discount_amount: Decimal | None = Field(default=None, gt=0, max_digits=12, decimal_places=2)
    min_order_amount: Decimal = Field(default=Decimal("0"), ge=0, max_digits=12, decimal_places=2)
    usage_limit: int | None = Field(default=None, ge=1)
    per_user_limit: int | None = Field(default=1, ge=1)
    starts_at: datetime | None = None
    expires_at: datetime | None = None
    is_active: bool = True

    @field_validator("code")
    @classmethod
    def _normalize_code(cls, value: str | None) -> str | None:
        return _upper_code(value)


class CouponUpdate(BaseModel):
    """쿠폰 수정 요청 스키마 (부분 업데이트)."""

    code: str | None = Field(default=None, min_length=3, max_length=50)
    description: str | None = None
    discount_type: Literal["percentage", "fixed"] | None = None
    discount_value: Decimal | None = Field(default=None, gt=0, max_digits=12, decimal_places=2)
    max_discount_amount: Decimal | None = Field(default=None, gt=0, max_digits=12, decimal_places=2)
    min_order_amount: Decimal | None = Field(default=None, ge=0, max_digits=12, decimal_places=2)
    usage_limit: int | None = Field(default=None, ge=1)
    per_user_limit: int | None = Field(default=None, ge=1)
    starts_at: datetime | None = None
    expires_at: datetime | None = None
    is_active: bool | None = None

    @field_validator("code")
    @classmethod
    def _normalize_code(cls, value: str | None) -> str | None:
        return _upper_code(value)


class CouponResponse(BaseModel):
    """쿠폰 응답 스키마."""

    id: str
    code: str
    description: str | None
    discount_type: str
    discount_value: Decimal
    max_discount_amount: Decimal | None
    min_order_amount: Decimal
    usage_limit: int | None
    used_count: int
    per_user_limit: int | None
    starts_at: datetime | None
    expires_at: datetime | None
    is_active: bool
    created_at: datetime


class CouponValidateRequest(BaseModel):
    """쿠폰 확인 요청 — 현재 장바구니 기준 (previewed against the current cart)."""

    code: str = Field(..., min_length=1, max_length=50)


class CouponValidateResponse(BaseModel):
    """쿠폰 확인 결과.

    Attributes:
        code: 쿠폰 코드
        subtotal: 장바구니 소계 (Cart subtotal)
        discount_amount: 할인 금액 (Discount that checkout would apply)
        total_after_discount: 할인 후 금액 (Subtotal minus discount, before shipping)
    """

    code: str
    discount_type: str
    discount_value: Decimal
    subtotal: Decimal
    discount_amount: Decimal
    total_after_discount: Decimal
