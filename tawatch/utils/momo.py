"""MoMo 결제 게이트웨이 클라이언트 — 서명 생성/검증 및 결제 생성 요청.

MoMo e-wallet gateway helpers (API v2). Requests and IPN callbacks are
signed with HMAC-SHA256 over a canonical "key=value&..." string whose keys
are in alphabetical order, using MOMO_SECRET_KEY.
"""

import hashlib
import hmac
from typing import Any

import httpx

from tawatch.config import settings

# 결제 생성 서명 키 순서 — Keys of the create-request signature (alphabetical)
CREATE_SIGNATURE_KEYS: tuple[str, ...] = (
    "accessKey",
    "amount",
    "extraData",
    "ipnUrl",
    "orderId",
    "orderInfo",
    "partnerCode",
    "redirectUrl",
    "requestId",
    "requestType",
)

# IPN 서명 키 순서 — Keys of the IPN signature (alphabetical)
IPN_SIGNATURE_KEYS: tuple[str, ...] = (
    "accessKey",
    "amount",
    "extraData",
    "message",
    "orderId",
    "orderInfo",
    "orderType",
    "partnerCode",
    "payType",
    "requestId",
    "responseTime",
    "resultCode",
    "transId",
)


class MomoError(Exception):
    """MoMo 통신 실패 — transport error or unreadable response."""


def build_raw_signature(values: dict[str, Any], keys: tuple[str, ...]) -> str:
    """서명 원문 생성 — "accessKey=...&amount=...&..." in the given key order."""
    return "&".join(f"{key}={values.get(key, '')}" for key in keys)


def sign(raw: str) -> str:
    """HMAC-SHA256 서명 (hex) — Sign with MOMO_SECRET_KEY."""
    return hmac.new(
        settings.MOMO_SECRET_KEY.encode("utf-8"),
        raw.encode("utf-8"),
        hashlib.sha256,
    ).hexdigest()


def verify_ipn_signature(payload: dict[str, Any]) -> bool:
    """IPN 서명 검증.

    Recompute the IPN signature from the callback fields (accessKey comes
    from settings) and compare it in constant time.
    """
    values: dict[str, Any] = {**payload, "accessKey": settings.MOMO_ACCESS_KEY}
    expected: str = sign(build_raw_signature(values, IPN_SIGNATURE_KEYS))
    return hmac.compare_digest(expected, str(payload.get("signature", "")))


def build_create_request(
    order_id: str,
    request_id: str,
    amount: int,
    order_info: str,
    extra_data: str = "",
) -> dict[str, Any]:
    """결제 생성 요청 본문을 만들고 서명합니다.

    Args:
        order_id: 게이트웨이 orderId (unique per attempt)
        request_id: 게이트웨이 requestId (unique per attempt)
        amount: 결제 금액 VND 정수 (Integer VND amount)
        order_info: 결제 설명 (Shown to the customer in the MoMo app)
        extra_data: base64 부가 데이터 (Echoed back in the IPN)

    Returns:
        dict[str, Any]: 서명이 포함된 요청 본문 (Signed request body)
    """
    body: dict[str, Any] = {
        "partnerCode": settings.MOMO_PARTNER_CODE,
        "accessKey": settings.MOMO_ACCESS_KEY,
        "requestId": request_id,
        "amount": amount,
        "orderId": order_id,
        "orderInfo": order_info,
        "redirectUrl": settings.MOMO_REDIRECT_URL,
        "ipnUrl": settings.MOMO_IPN_URL,
        "extraData": extra_data,
        "requestType": settings.MOMO_REQUEST_TYPE,
    }
    body["signature"] = sign(build_raw_signature(body, CREATE_SIGNATURE_KEYS))
    # accessKey는 서명에만 사용 (only part of the signature, not the body)
    del body["accessKey"]
    body["lang"] = settings.MOMO_LANG
    return body


async def create_payment(body: dict[str, Any]) -> dict[str, Any]:
    """MoMo에 결제 생성 요청을 전송합니다.

    POST the signed body to MOMO_ENDPOINT and return the decoded JSON.

    Raises:
        MomoError: 연결 실패, HTTP 오류, JSON 아님 (Transport failure or bad response)
    """
    try:
        async with httpx.AsyncClient(timeout=settings.MOMO_TIMEOUT_SECONDS) as client:
            response = await client.post(settings.MOMO_ENDPOINT, json=body)
            # MoMo는 업무 오류도 4xx로 응답 — business errors come back as 4xx with a JSON body
            if response.status_code >= 500:
                response.raise_for_status()
            data = response.json()
    except (httpx.HTTPError, ValueError) as exc:
        raise MomoError(str(exc)) from exc

    if not isinstance(data, dict):
        raise MomoError("Unexpected MoMo response")
    return data
