"""결제 게이트웨이 콜백 라우터 — MoMo IPN.

Payment Callback Router — Server-to-server notifications from MoMo. Public;
authenticity is checked with the HMAC signature.
"""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from tawatch.database import get_db
from tawatch.schemas.payment import MomoIpnPayload
from tawatch.services.payment_service import payment_service

router: APIRouter = APIRouter()


@router.post("/momo/ipn", status_code=204)
async def momo_ipn(
    payload: MomoIpnPayload,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> None:
    """MoMo IPN 수신 — 처리 후 204 응답 (MoMo expects 204 No Content).

    Reconcile the payment. Repeated deliveries of the same successful IPN
    are acknowledged without changes.
    """
    await payment_service.handle_momo_ipn(db, payload)
    await db.commit()
