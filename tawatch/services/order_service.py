"""주문 서비스 — 체크아웃, 주문 조회, 상태 전이, 취소.

Order Service — Checkout transaction, order reads, the status state
machine and cancellation.

State machine:
    pending   → confirmed | cancelled
    confirmed → shipping | cancelled
    shipping  → delivered
    delivered, cancelled — 종료 상태 (terminal)

Checkout runs in one transaction (the router commits once at the end):
stock reservation, coupon usage, order rows and cart clearing either all
land or none do.
"""

from datetime import datetime
from decimal import Decimal
from typing import Sequence
from uuid import UUID, uuid4

from sqlalchemy.ext.asyncio import AsyncSession

from tawatch.config import settings
from tawatch.models.cart import Cart
from tawatch.models.catalog import Product
from tawatch.models.coupon import Coupon
from tawatch.models.order import (
    METHOD_COD,
    PAYMENT_PAID,
    PAYMENT_REFUNDED,
    PAYMENT_UNPAID,
    STATUS_CANCELLED,
    STATUS_CONFIRMED,
    STATUS_DELIVERED,
    STATUS_PENDING,
    STATUS_SHIPPING,
    Order,
    OrderItem,
)
from tawatch.models.payment import PAYMENT_FAILED, PAYMENT_PENDING, PAYMENT_SUCCESS, PROVIDER_COD, Payment
from tawatch.models.user import Address, User
from tawatch.repositories.cart_repository import cart_repository
from tawatch.repositories.order_repository import order_repository
from tawatch.repositories.payment_repository import payment_repository
from tawatch.schemas.order import (
    CheckoutRequest,
    OrderDetailResponse,
    OrderHistoryResponse,
    OrderItemResponse,
    OrderStatusUpdate,
    OrderSummary,
)
from tawatch.schemas.payment import PaymentResponse
from tawatch.services.coupon_service import coupon_service
from tawatch.services.inventory_service import inventory_service
from tawatch.services.product_service import primary_image_url
from tawatch.services.user_service import user_service
from tawatch.utils.clock import utcnow
from tawatch.utils.exceptions import BadRequestError, NotFoundError
from tawatch.utils.ids import parse_uuid
from tawatch.utils.pagination import Page

# 허용 상태 전이 — Allowed status transitions
ALLOWED_TRANSITIONS: dict[str, frozenset[str]] = {
    STATUS_PENDING: frozenset({STATUS_CONFIRMED, STATUS_CANCELLED}),
    STATUS_CONFIRMED: frozenset({STATUS_SHIPPING, STATUS_CANCELLED}),
    STATUS_SHIPPING: frozenset({STATUS_DELIVERED}),
    STATUS_DELIVERED: frozenset(),
    STATUS_CANCELLED: frozenset(),
}

# 상태별 타임스탬프 컬럼 — Timestamp column set on entering a status
_STATUS_TIMESTAMPS: dict[str, str] = {
    STATUS_CONFIRMED: "confirmed_at",
    STATUS_SHIPPING: "shipped_at",
    STATUS_DELIVERED: "delivered_at",
    STATUS_CANCELLED: "cancelled_at",
}


def can_transition(from_status: str, to_status: str) -> bool:
    """상태 전이 가능 여부 — Whether the state machine allows the move."""
    return to_status in ALLOWED_TRANSITIONS.get(from_status, frozenset())


def calculate_shipping_fee(subtotal: Decimal) -> Decimal:
    """배송비 계산 — 할인 전 소계 기준 (based on the pre-discount subtotal)."""
    if subtotal >= settings.FREE_SHIPPING_THRESHOLD:
        return Decimal("0")
    return settings.SHIPPING_FEE


def payment_response(payment: Payment) -> PaymentResponse:
    """결제 모델을 응답 스키마로 변환합니다."""
    return PaymentResponse(
        id=str(payment.id),
        order_id=str(payment.order_id),
        provider=payment.provider,
        amount=payment.amount,
        status=payment.status,
        provider_order_id=payment.provider_order_id,
        transaction_id=payment.transaction_id,
        result_code=payment.result_code,
        message=payment.message,
        pay_url=payment.pay_url,
        paid_at=payment.paid_at,
        created_at=payment.created_at,
    )


class OrderService:
    """주문 관련 비즈니스 로직을 처리하는 서비스."""

    def _summary(self, order: Order) -> OrderSummary:
        """주문 목록 항목으로 변환 — items must be loaded."""
        return OrderSummary(
            id=str(order.id),
            code=order.code,
            user_id=str(order.user_id) if order.user_id else None,
            status=order.status,
            payment_method=order.payment_method,
            payment_status=order.payment_status,
            total_amount=order.total_amount,
            item_count=sum(i.quantity for i in order.items),
            recipient_name=order.recipient_name,
            created_at=order.created_at,
        )

    def _detail(self, order: Order) -> OrderDetailResponse:
        """주문 상세 응답으로 변환 — items, history and payments must be loaded."""
        return OrderDetailResponse(
            id=str(order.id),
            code=order.code,
            user_id=str(order.user_id) if order.user_id else None,
            status=order.status,
            payment_method=order.payment_method,
            payment_status=order.payment_status,
            subtotal=order.subtotal,
            discount_amount=order.discount_amount,
            shipping_fee=order.shipping_fee,
            total_amount=order.total_amount,
            coupon_code=order.coupon_code,
            recipient_name=order.recipient_name,
            phone=order.phone,
            address_line=order.address_line,
            ward=order.ward,
            district=order.district,
            city=order.city,
            note=order.note,
            cancel_reason=order.cancel_reason,
            confirmed_at=order.confirmed_at,
            shipped_at=order.shipped_at,
            delivered_at=order.delivered_at,
            cancelled_at=order.cancelled_at,
            created_at=order.created_at,
            updated_at=order.updated_at,
            items=[
                OrderItemResponse(
                    id=str(i.id),
                    product_id=str(i.product_id) if i.product_id else None,
                    product_name=i.product_name,
                    sku=i.sku,
                    image_url=i.image_url,
                    unit_price=i.unit_price,
                    quantity=i.quantity,
                    line_total=i.line_total,
                )
                for i in order.items
            ],
            history=[
                OrderHistoryResponse(
                    from_status=h.from_status,
                    to_status=h.to_status,
                    note=h.note,
                    changed_by=str(h.changed_by) if h.changed_by else None,
                    created_at=h.created_at,
                )
                for h in order.history
            ],
            payments=[payment_response(p) for p in order.payments],
        )

    async def _load_detail(self, db: AsyncSession, order_id: UUID) -> OrderDetailResponse:
        order: Order | None = await order_repository.get_detail(db, order_id)
        if order is None:
            raise NotFoundError("Order not found")
        return self._detail(order)

    # --- 체크아웃 (Checkout) ---

    async def _resolve_shipping(self, db: AsyncSession, user: User, data: CheckoutRequest) -> dict:
        """배송지 결정 — 저장된 배송지 우선, 없으면 직접 입력.

        Raises:
            NotFoundError: 다른 사용자의 배송지 (Address not owned by the user)
            BadRequestError: 배송지 미지정 (Neither address given)
        """
        if data.address_id is not None:
            address: Address = await user_service.get_owned_address(
                db, parse_uuid(data.address_id, "address_id"), user.id
            )
            return {
                "recipient_name": address.recipient_name,
                "phone": address.phone,
                "address_line": address.line1,
                "ward": address.ward,
                "district": address.district,
                "city": address.city,
            }
        if data.shipping_address is not None:
            return data.shipping_address.model_dump()
        raise BadRequestError("A shipping address is required")

    async def checkout(
        self,
        db: AsyncSession,
        user: User,
        data: CheckoutRequest,
    ) -> OrderDetailResponse:
        """장바구니로 주문을 생성합니다.

        Place an order from the caller's cart.

        Steps:
            1. 장바구니 확인 — cart must not be empty
            2. 배송지 결정 — saved or inline address
            3. 재고 예약 — lock products in id order, decrement stock
            4. 금액 계산 — subtotal from effective prices, coupon, shipping
            5. 주문/항목/이력 저장, 쿠폰 사용 기록, 장바구니 비우기

        Raises:
            BadRequestError: 빈 장바구니, 배송지 없음, 재고 부족, 쿠폰 규칙 위반
            NotFoundError: 배송지 또는 쿠폰을 찾을 수 없을 때
        """
        cart: Cart | None = await cart_repository.get_for_user(db, user.id)
        if cart is None or not cart.items:
            raise BadRequestError("Cart is empty")

        shipping: dict = await self._resolve_shipping(db, user, data)

        lines: dict[UUID, int] = {}
        for cart_item in cart.items:
            lines[cart_item.product_id] = lines.get(cart_item.product_id, 0) + cart_item.quantity

        order_id: UUID = uuid4()
        products: dict[UUID, Product] = await inventory_service.reserve(db, lines, order_id, user.id)

        items: list[OrderItem] = []
        subtotal: Decimal = Decimal("0")
        for product_id in sorted(lines):
            product: Product = products[product_id]
            quantity: int = lines[product_id]
            unit_price: Decimal = product.effective_price
            line_total: Decimal = unit_price * quantity
            subtotal += line_total
            items.append(
                OrderItem(
                    product_id=product.id,
                    product_name=product.name,
                    sku=product.sku,
                    image_url=primary_image_url(product),
                    unit_price=unit_price,
                    quantity=quantity,
                    line_total=line_total,
                )
            )

        coupon: Coupon | None = None
        discount: Decimal = Decimal("0")
        if data.coupon_code:
            coupon = await coupon_service.get_by_code(db, data.coupon_code)
            discount = await coupon_service.evaluate_for_user(db, coupon, user.id, subtotal)

        shipping_fee: Decimal = calculate_shipping_fee(subtotal)
        order: Order = Order(
            id=order_id,
            user_id=user.id,
            status=STATUS_PENDING,
            payment_method=data.payment_method,
            payment_status=PAYMENT_UNPAID,
            subtotal=subtotal,
            discount_amount=discount,
            shipping_fee=shipping_fee,
            total_amount=subtotal - discount + shipping_fee,
            coupon_id=coupon.id if coupon else None,
            coupon_code=coupon.code if coupon else None,
            note=data.note,
            items=items,
            **shipping,
        )
        db.add(order)
        await db.flush()

        if coupon is not None:
            await coupon_service.apply(db, coupon, user.id, order_id, discount)
        await order_repository.add_history(db, order_id, None, STATUS_PENDING, "Order placed", user.id)
        await cart_repository.clear(db, cart.id)

        return await self._load_detail(db, order_id)

    # --- 고객 조회/취소 (Customer reads and cancellation) ---

    async def list_my_orders(
        self,
        db: AsyncSession,
        user_id: UUID,
        page: int,
        per_page: int,
        status: str | None = None,
    ) -> Page[OrderSummary]:
        orders: Sequence[Order]
        orders, total = await order_repository.list_orders(db, page, per_page, user_id=user_id, status=status)
        return Page[OrderSummary].build([self._summary(o) for o in orders], total, page, per_page)

    async def get_my_order(self, db: AsyncSession, user_id: UUID, order_id: UUID) -> OrderDetailResponse:
        """내 주문 상세 — 다른 사용자의 주문은 404."""
        order: Order | None = await order_repository.get_detail(db, order_id, user_id=user_id)
        if order is None:
            raise NotFoundError("Order not found")
        return self._detail(order)

    async def cancel_my_order(
        self,
        db: AsyncSession,
        user: User,
        order_id: UUID,
        reason: str | None,
    ) -> OrderDetailResponse:
        """내 주문을 취소합니다 — 결제 전 대기 주문만.

        Cancel one of the caller's orders. Only pending, unpaid orders can be
        cancelled by the customer.

        Raises:
            NotFoundError: 주문을 찾을 수 없을 때 (Order not found)
            BadRequestError: 취소 불가 상태 (Not pending, or already paid)
        """
        order: Order | None = await order_repository.get_detail(db, order_id, user_id=user.id, for_update=True)
        if order is None:
            raise NotFoundError("Order not found")
        if order.status != STATUS_PENDING:
            raise BadRequestError("Only pending orders can be cancelled")
        if order.payment_status == PAYMENT_PAID:
            raise BadRequestError("Paid orders must be cancelled by the shop")

        await self._transition(db, order, STATUS_CANCELLED, reason or "Cancelled by customer", user.id)
        return await self._load_detail(db, order.id)

    # --- 관리자 (Back office) ---

    async def list_orders(
        self,
        db: AsyncSession,
        page: int,
        per_page: int,
        status: str | None = None,
        payment_status: str | None = None,
        keyword: str | None = None,
        date_from: datetime | None = None,
        date_to: datetime | None = None,
    ) -> Page[OrderSummary]:
        orders: Sequence[Order]
        orders, total = await order_repository.list_orders(
            db,
            page,
            per_page,
            status=status,
            payment_status=payment_status,
            keyword=keyword,
            date_from=date_from,
            date_to=date_to,
        )
        return Page[OrderSummary].build([self._summary(o) for o in orders], total, page, per_page)

    async def get_order(self, db: AsyncSession, order_id: UUID) -> OrderDetailResponse:
        order: Order | None = await order_repository.get_detail(db, order_id)
        if order is None:
            raise NotFoundError("Order not found")
        return self._detail(order)

    async def update_status(
        self,
        db: AsyncSession,
        order_id: UUID,
        data: OrderStatusUpdate,
        acting_user: User,
    ) -> OrderDetailResponse:
        """주문 상태를 변경합니다 (관리자).

        Move an order through the state machine.

        Raises:
            NotFoundError: 주문을 찾을 수 없을 때 (Order not found)
            BadRequestError: 허용되지 않는 전이 (Illegal transition)
        """
        order: Order | None = await order_repository.get_detail(db, order_id, for_update=True)
        if order is None:
            raise NotFoundError("Order not found")
        if not can_transition(order.status, data.status):
            raise BadRequestError(f"Cannot change order status from {order.status} to {data.status}")

        await self._transition(db, order, data.status, data.note, acting_user.id)
        return await self._load_detail(db, order.id)

    async def _transition(
        self,
        db: AsyncSession,
        order: Order,
        to_status: str,
        note: str | None,
        acting_user_id: UUID | None,
    ) -> None:
        """상태 전이를 적용합니다 — order must be loaded with items and payments.

        Side effects:
            cancelled: 재고 복원, 쿠폰 반환, 결제 완료 주문은 refunded,
                       대기 중 결제 시도는 failed
            delivered: COD 주문은 paid 처리 및 결제 기록 생성
        """
        from_status: str = order.status
        now: datetime = utcnow()

        order.status = to_status
        setattr(order, _STATUS_TIMESTAMPS[to_status], now)

        if to_status == STATUS_CANCELLED:
            order.cancel_reason = note
            await inventory_service.release(db, order, acting_user_id)
            await coupon_service.release(db, order)
            if order.payment_status == PAYMENT_PAID:
                order.payment_status = PAYMENT_REFUNDED
            for payment in order.payments:
                if payment.status == PAYMENT_PENDING:
                    payment.status = PAYMENT_FAILED
                    payment.message = "Order cancelled"

        if to_status == STATUS_DELIVERED and order.payment_method == METHOD_COD:
            order.payment_status = PAYMENT_PAID
            await payment_repository.create(
                db,
                {
                    "order_id": order.id,
                    "provider": PROVIDER_COD,
                    "amount": order.total_amount,
                    "status": PAYMENT_SUCCESS,
                    "request_id": uuid4().hex,
                    "provider_order_id": f"COD-{order.code}",
                    "message": "Collected on delivery",
                    "paid_at": now,
                },
            )

        await db.flush()
        await order_repository.add_history(db, order.id, from_status, to_status, note, acting_user_id)


# 싱글턴 인스턴스 — Singleton instance
order_service: OrderService = OrderService()
