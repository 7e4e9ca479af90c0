"""쿠폰 서비스 — 쿠폰 규칙 평가, 적용/해제, 관리자 CRUD.

Coupon Service — Coupon rule evaluation, usage accounting at checkout
and cancellation, and back-office CRUD.

Rules (evaluate):
    - 비활성, 시작 전, 만료 (at/after expires_at) → 사용 불가
    - 전체 한도 도달, 사용자별 한도 도달 → 사용 불가
    - 최소 주문 금액 미달 → 사용 불가
    - 정률: subtotal × value / 100, max_discount_amount로 상한
    - 정액: value
    - 할인 금액은 항상 subtotal 이하, 소수 둘째 자리 반올림 (ROUND_HALF_UP)
"""

from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Sequence
from uuid import UUID

from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from tawatch.models.coupon import DISCOUNT_PERCENTAGE, Coupon
from tawatch.models.order import Order
from tawatch.repositories.coupon_repository import coupon_repository
from tawatch.schemas.coupon import (
    CouponCreate,
    CouponResponse,
    CouponUpdate,
    CouponValidateResponse,
)
from tawatch.utils.clock import as_utc, utcnow
from tawatch.utils.exceptions import BadRequestError, DuplicateError, NotFoundError
from tawatch.utils.pagination import Page

_CENT: Decimal = Decimal("0.01")


class CouponEvaluation(BaseModel):
    """쿠폰 평가 결과.

    Attributes:
        valid: 사용 가능 여부 (Whether the coupon applies)
        discount: 할인 금액, 사용 불가 시 0 (Discount amount, 0 when invalid)
        reason: 사용 불가 사유 (Why the coupon does not apply)
    """

    valid: bool
    discount: Decimal = Decimal("0")
    reason: str | None = None


def evaluate(
    coupon: Coupon,
    subtotal: Decimal,
    user_usage_count: int,
    now: datetime,
) -> CouponEvaluation:
    """쿠폰을 주문 소계에 대해 평가합니다 (DB 접근 없음).

    Evaluate a coupon against an order subtotal. Pure function; the caller
    supplies the user's usage count and the current time.
    """
    if not coupon.is_active:
        return CouponEvaluation(valid=False, reason="Coupon is not active")
    if coupon.starts_at is not None and as_utc(now) < as_utc(coupon.starts_at):
        return CouponEvaluation(valid=False, reason="Coupon is not yet valid")
    if coupon.expires_at is not None and as_utc(now) >= as_utc(coupon.expires_at):
        return CouponEvaluation(valid=False, reason="Coupon has expired")
    if coupon.usage_limit is not None and coupon.used_count >= coupon.usage_limit:
        return CouponEvaluation(valid=False, reason="Coupon usage limit reached")
    if coupon.per_user_limit is not None and user_usage_count >= coupon.per_user_limit:
        return CouponEvaluation(valid=False, reason="You have already used this coupon")
    if subtotal < coupon.min_order_amount:
        return CouponEvaluation(
            valid=False,
            reason=f"Order subtotal must be at least {coupon.min_order_amount}",
        )

    if coupon.discount_type == DISCOUNT_PERCENTAGE:
        discount: Decimal = subtotal * coupon.discount_value / Decimal("100")
        if coupon.max_discount_amount is not None:
            discount = min(discount, coupon.max_discount_amount)
    else:
        discount = coupon.discount_value

    discount = min(discount, subtotal).quantize(_CENT, rounding=ROUND_HALF_UP)
    return CouponEvaluation(valid=True, discount=discount)


class CouponService:
    """쿠폰 관련 비즈니스 로직을 처리하는 서비스."""

    def _to_response(self, coupon: Coupon) -> CouponResponse:
        return CouponResponse(
            id=str(coupon.id),
            code=coupon.code,
            description=coupon.description,
            discount_type=coupon.discount_type,
            discount_value=coupon.discount_value,
            max_discount_amount=coupon.max_discount_amount,
            min_order_amount=coupon.min_order_amount,
            usage_limit=coupon.usage_limit,
            used_count=coupon.used_count,
            per_user_limit=coupon.per_user_limit,
            starts_at=coupon.starts_at,
            expires_at=coupon.expires_at,
            is_active=coupon.is_active,
            created_at=coupon.created_at,
        )

    async def get_by_code(self, db: AsyncSession, code: str) -> Coupon:
        """코드로 쿠폰 조회 — 404 when unknown."""
        coupon: Coupon | None = await coupon_repository.get_by_code(db, code)
        if coupon is None:
            raise NotFoundError("Coupon not found")
        return coupon

    async def evaluate_for_user(
        self,
        db: AsyncSession,
        coupon: Coupon,
        user_id: UUID,
        subtotal: Decimal,
    ) -> Decimal:
        """사용자/소계 기준으로 쿠폰을 평가하고 할인 금액을 반환합니다.

        Raises:
            BadRequestError: 쿠폰 규칙 위반 (Rule failure, with the reason)
        """
        usage_count: int = await coupon_repository.count_user_usages(db, coupon.id, user_id)
        result: CouponEvaluation = evaluate(coupon, subtotal, usage_count, utcnow())
        if not result.valid:
            raise BadRequestError(result.reason or "Coupon cannot be applied")
        return result.discount

    async def validate(
        self,
        db: AsyncSession,
        code: str,
        user_id: UUID,
        subtotal: Decimal,
    ) -> CouponValidateResponse:
        """쿠폰 적용 미리보기 — 현재 장바구니 소계 기준.

        Preview the discount a coupon would give on the current cart.
        """
        coupon: Coupon = await self.get_by_code(db, code)
        discount: Decimal = await self.evaluate_for_user(db, coupon, user_id, subtotal)
        return CouponValidateResponse(
            code=coupon.code,
            discount_type=coupon.discount_type,
            discount_value=coupon.discount_value,
            subtotal=subtotal,
            discount_amount=discount,
            total_after_discount=subtotal - discount,
        )

    async def apply(
        self,
        db: AsyncSession,
        coupon: Coupon,
        user_id: UUID,
        order_id: UUID,
        discount: Decimal,
    ) -> None:
        """체크아웃 시 쿠폰 사용을 기록합니다.

        Record a coupon use: conditional increment of used_count, then a
        usage row for the order.

        Raises:
            BadRequestError: 동시 주문으로 한도에 도달한 경우 (Limit reached meanwhile)
        """
        if not await coupon_repository.try_increment_usage(db, coupon.id):
            raise BadRequestError("Coupon usage limit reached")
        await coupon_repository.create_usage(db, coupon.id, user_id, order_id, discount)

    async def release(self, db: AsyncSession, order: Order) -> None:
        """주문 취소 시 쿠폰 사용을 되돌립니다.

        Undo the coupon use of a cancelled order: delete the usage row and
        decrement used_count.
        """
        if order.coupon_id is None:
            return
        if await coupon_repository.delete_usage_for_order(db, order.id):
            await coupon_repository.decrement_usage(db, order.coupon_id)

    # --- 관리자 (Back office) ---

    def _check_values(
        self,
        discount_type: str,
        discount_value: Decimal,
        starts_at: datetime | None,
        expires_at: datetime | None,
    ) -> None:
        if discount_type == DISCOUNT_PERCENTAGE and discount_value > 100:
            raise BadRequestError("Percentage discount cannot exceed 100")
        if starts_at is not None and expires_at is not None and as_utc(expires_at) <= as_utc(starts_at):
            raise BadRequestError("expires_at must be after starts_at")

    async def list_coupons(
        self,
        db: AsyncSession,
        page: int,
        per_page: int,
        is_active: bool | None = None,
        keyword: str | None = None,
    ) -> Page[CouponResponse]:
        coupons: Sequence[Coupon]
        coupons, total = await coupon_repository.list_coupons(db, page, per_page, is_active, keyword)
        return Page[CouponResponse].build([self._to_response(c) for c in coupons], total, page, per_page)

    async def get_coupon(self, db: AsyncSession, coupon_id: UUID) -> CouponResponse:
        coupon: Coupon | None = await coupon_repository.get_by_id(db, coupon_id)
        if coupon is None:
            raise NotFoundError("Coupon not found")
        return self._to_response(coupon)

    async def create_coupon(self, db: AsyncSession, data: CouponCreate) -> CouponResponse:
        """쿠폰을 생성합니다.

        Raises:
            DuplicateError: 코드 중복 (Code already exists)
            BadRequestError: 정률 100 초과, 만료일이 시작일 이전
                             (Percentage above 100, or expiry before start)
        """
        self._check_values(data.discount_type, data.discount_value, data.starts_at, data.expires_at)
        if await coupon_repository.exists(db, {"code": data.code}):
            raise DuplicateError("A coupon with this code already exists")

        coupon: Coupon = await coupon_repository.create(db, data.model_dump())
        return self._to_response(coupon)

    async def update_coupon(
        self,
        db: AsyncSession,
        coupon_id: UUID,
        data: CouponUpdate,
    ) -> CouponResponse:
        """쿠폰을 수정합니다.

        A usage limit below the current used_count is rejected.
        """
        coupon: Coupon | None = await coupon_repository.get_by_id(db, coupon_id)
        if coupon is None:
            raise NotFoundError("Coupon not found")

        update_data: dict = data.model_dump(exclude_unset=True)
        for field in ("code", "discount_type", "discount_value", "min_order_amount", "is_active"):
            if field in update_data and update_data[field] is None:
                update_data.pop(field)

        self._check_values(
            update_data.get("discount_type", coupon.discount_type),
            update_data.get("discount_value", coupon.discount_value),
            update_data.get("starts_at", coupon.starts_at),
            update_data.get("expires_at", coupon.expires_at),
        )
        if "code" in update_data and await coupon_repository.exists(
            db, {"code": update_data["code"]}, exclude_id=coupon_id
        ):
            raise DuplicateError("A coupon with this code already exists")
        usage_limit = update_data.get("usage_limit", coupon.usage_limit)
        if usage_limit is not None and usage_limit < coupon.used_count:
            raise BadRequestError("usage_limit cannot be below the current used_count")

        updated: Coupon | None = await coupon_repository.update(db, coupon_id, update_data)
        if updated is None:
            raise NotFoundError("Coupon not found")
        return self._to_response(updated)

    async def delete_coupon(self, db: AsyncSession, coupon_id: UUID) -> None:
        """쿠폰을 삭제합니다 — 사용 이력이 있으면 비활성화만.

        Delete a coupon; a coupon that has been used is deactivated instead
        so past orders keep their reference.
        """
        coupon: Coupon | None = await coupon_repository.get_by_id(db, coupon_id)
        if coupon is None:
            raise NotFoundError("Coupon not found")
        if await coupon_repository.has_usages(db, coupon_id):
            coupon.is_active = False
            await db.flush()
            return
        await coupon_repository.delete(db, coupon_id)


# 싱글턴 인스턴스 — Singleton instance
coupon_service: CouponService = CouponService()
