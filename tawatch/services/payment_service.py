"""결제 서비스 — MoMo 결제 생성, IPN 정산, 결제 내역 조회.

Payment Service — Creates MoMo payment requests, reconciles MoMo IPN
callbacks against payments and orders, and lists payment attempts.

IPN reconciliation is idempotent: the payment row is locked, and a
payment already in "success" is acknowledged without further changes.
"""

import base64
import json
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Sequence
from uuid import UUID, uuid4

from sqlalchemy.ext.asyncio import AsyncSession

from tawatch.config import settings
from tawatch.models.order import (
    METHOD_MOMO,
    PAYMENT_PAID,
    PAYMENT_REFUNDED,
    STATUS_CANCELLED,
    STATUS_CONFIRMED,
    STATUS_PENDING,
    Order,
)
from tawatch.models.payment import PAYMENT_FAILED, PAYMENT_PENDING, PAYMENT_SUCCESS, PROVIDER_MOMO, Payment
from tawatch.models.user import User
from tawatch.repositories.order_repository import order_repository
from tawatch.repositories.payment_repository import payment_repository
from tawatch.schemas.payment import MomoIpnPayload, MomoPaymentResponse, PaymentResponse
from tawatch.services.order_service import payment_response
from tawatch.utils import momo
from tawatch.utils.clock import utcnow
from tawatch.utils.exceptions import BadRequestError, NotFoundError, PaymentGatewayError

# MoMo 결제 금액 범위 (VND) — Amount range accepted by MoMo captureWallet
MOMO_MIN_AMOUNT: int = 1_000
MOMO_MAX_AMOUNT: int = 50_000_000


def to_momo_amount(total: Decimal) -> Decimal:
    """MoMo 청구 금액 — VND has no minor unit, so totals round half up to whole dong."""
    return total.quantize(Decimal("1"), rounding=ROUND_HALF_UP)


class PaymentService:
    """결제 관련 비즈니스 로직을 처리하는 서비스."""

    async def create_momo_payment(
        self,
        db: AsyncSession,
        user: User,
        order_id: UUID,
    ) -> MomoPaymentResponse:
        """내 주문에 대한 MoMo 결제를 생성합니다.

        Create a MoMo payment attempt for one of the caller's orders and
        return the pay URL. A failed attempt is flushed as "failed" before
        the error is raised; the router commits it so the attempt is kept.

        Raises:
            NotFoundError: 주문을 찾을 수 없을 때 (Order not found or not owned)
            BadRequestError: MoMo 주문 아님, 결제 완료, 취소됨, 금액 범위 밖,
                             MoMo resultCode != 0
            PaymentGatewayError: MoMo 통신 실패 (Transport error)
        """
        order: Order | None = await order_repository.get_detail(db, order_id, user_id=user.id, for_update=True)
        if order is None:
            raise NotFoundError("Order not found")
        if order.payment_method != METHOD_MOMO:
            raise BadRequestError("Order is not paid with MoMo")
        if order.payment_status == PAYMENT_PAID:
            raise BadRequestError("Order is already paid")
        if order.status == STATUS_CANCELLED:
            raise BadRequestError("Order is cancelled")

        charge: Decimal = to_momo_amount(order.total_amount)
        amount: int = int(charge)
        if amount < MOMO_MIN_AMOUNT or amount > MOMO_MAX_AMOUNT:
            raise BadRequestError("Order amount is outside the MoMo payment range")

        # 시도마다 새 orderId/requestId — MoMo rejects reused ids
        request_id: str = uuid4().hex
        provider_order_id: str = f"{order.code}-{uuid4().hex[:8].upper()}"
        extra_data: str = base64.b64encode(json.dumps({"order_code": order.code}).encode("utf-8")).decode("ascii")

        payment: Payment = await payment_repository.create(
            db,
            {
                "order_id": order.id,
                "provider": PROVIDER_MOMO,
                "amount": charge,
                "status": PAYMENT_PENDING,
                "request_id": request_id,
                "provider_order_id": provider_order_id,
            },
        )

        body: dict[str, Any] = momo.build_create_request(
            order_id=provider_order_id,
            request_id=request_id,
            amount=amount,
            order_info=f"Thanh toan don hang {order.code}",
            extra_data=extra_data,
        )
        try:
            result: dict[str, Any] = await momo.create_payment(body)
        except momo.MomoError as exc:
            payment.status = PAYMENT_FAILED
            payment.message = str(exc)[:500]
            await db.flush()
            raise PaymentGatewayError("MoMo is unavailable, please try again later") from exc

        payment.raw_payload = result
        payment.result_code = result.get("resultCode")
        payment.message = result.get("message")
        if result.get("resultCode") != 0 or not result.get("payUrl"):
            payment.status = PAYMENT_FAILED
            await db.flush()
            raise BadRequestError(f"MoMo rejected the payment: {result.get('message') or 'unknown error'}")

        payment.pay_url = result["payUrl"]
        await db.flush()
        return MomoPaymentResponse(
            payment_id=str(payment.id),
            order_id=str(order.id),
            amount=payment.amount,
            pay_url=result["payUrl"],
            deeplink=result.get("deeplink"),
            qr_code_url=result.get("qrCodeUrl"),
        )

    async def handle_momo_ipn(
        self,
        db: AsyncSession,
        payload: MomoIpnPayload,
    ) -> None:
        """MoMo IPN 콜백을 정산합니다.

        Reconcile a MoMo IPN callback.

        Flow:
            1. 서명 검증 — verify the HMAC signature
            2. 결제 잠금 조회 — lock the payment by orderId
            3. 이미 success면 무시 — already reconciled, acknowledge
            4. 금액 확인 — amount must match the attempt
            5. resultCode 0 → payment success, order paid,
               pending order → confirmed (history row)
               그 외 → payment failed, order untouched

        An IPN for a cancelled order still records the payment; the order
        stays cancelled and its payment_status becomes "refunded" (refund
        owed), so it never counts as revenue.

        Raises:
            BadRequestError: 서명 불일치, 파트너 코드 불일치, 금액 불일치
            NotFoundError: 알 수 없는 orderId (Unknown payment)
        """
        raw: dict[str, Any] = payload.model_dump()
        if not momo.verify_ipn_signature(raw):
            raise BadRequestError("Invalid signature")
        if payload.partnerCode != settings.MOMO_PARTNER_CODE:
            raise BadRequestError("Unknown partner code")

        payment: Payment | None = await payment_repository.get_by_provider_order_id(
            db, payload.orderId, for_update=True
        )
        if payment is None:
            raise NotFoundError("Payment not found")
        if payment.status == PAYMENT_SUCCESS:
            return
        if int(payment.amount) != payload.amount:
            raise BadRequestError("Amount mismatch")

        payment.raw_payload = raw
        payment.result_code = payload.resultCode
        payment.message = payload.message
        payment.transaction_id = str(payload.transId)

        if payload.resultCode != 0:
            payment.status = PAYMENT_FAILED
            await db.flush()
            return

        payment.status = PAYMENT_SUCCESS
        payment.paid_at = utcnow()
        await db.flush()

        order: Order | None = await order_repository.get_detail(db, payment.order_id, for_update=True)
        if order is None:
            raise NotFoundError("Order not found")
        if order.status == STATUS_CANCELLED:
            order.payment_status = PAYMENT_REFUNDED
            await db.flush()
            return
        order.payment_status = PAYMENT_PAID
        if order.status == STATUS_PENDING:
            order.status = STATUS_CONFIRMED
            order.confirmed_at = payment.paid_at
            await db.flush()
            await order_repository.add_history(
                db, order.id, STATUS_PENDING, STATUS_CONFIRMED, "MoMo payment received", None
            )
        await db.flush()

    async def list_order_payments(
        self,
        db: AsyncSession,
        order_id: UUID,
        user_id: UUID | None = None,
    ) -> list[PaymentResponse]:
        """주문의 결제 시도 목록.

        Args:
            user_id: 지정 시 본인 주문만 (Restrict to the caller's own order; None for staff)

        Raises:
            NotFoundError: 주문을 찾을 수 없을 때 (Order not found or not owned)
        """
        order: Order | None = await order_repository.get_detail(db, order_id, user_id=user_id)
        if order is None:
            raise NotFoundError("Order not found")
        payments: Sequence[Payment] = await payment_repository.list_for_order(db, order_id)
        return [payment_response(p) for p in payments]


# 싱글턴 인스턴스 — Singleton instance
payment_service: PaymentService = PaymentService()
