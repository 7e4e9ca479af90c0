"""결제 Pydantic 스키마 정의.

Payment Pydantic schema definitions, including the MoMo IPN payload.
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict


class PaymentResponse(BaseModel):
    """결제 시도 응답 스키마."""

    id: str
    order_id: str
    provider: str
    amount: Decimal
    status: str
    provider_order_id: str
    transaction_id: str | None
    result_code: int | None
    message: str | None
    pay_url: str | None
    paid_at: datetime | None
    created_at: datetime


class MomoPaymentResponse(BaseModel):
    """MoMo 결제 생성 응답.

    Attributes:
        payment_id: 결제 시도 UUID
        pay_url: MoMo 결제 페이지 URL (Redirect the customer here)
        deeplink: MoMo 앱 딥링크 (App deeplink, if returned)
        qr_code_url: QR 코드 (QR payload, if returned)
    """

    payment_id: str
    order_id: str
    amount: Decimal
    pay_url: str
    deeplink: str | None = None
    qr_code_url: str | None = None


class MomoIpnPayload(BaseModel):
    """MoMo IPN 콜백 본문.

    MoMo IPN callback body. Field names follow MoMo's camelCase wire
    format; unknown fields are kept for the raw payload record.
    """

    model_config = ConfigDict(extra="allow")

    partnerCode: str
    orderId: str
    requestId: str
    amount: int
    orderInfo: str = ""
    orderType: str = ""
    transId: int | str
    resultCode: int
    message: str = ""
    payType: str = ""
    responseTime: int | str
    extraData: str = ""
    signature: str
