"""커스텀 HTTP 예외 클래스 및 에러 응답 핸들러.

Custom HTTP exception classes and the error envelope handlers.
Services raise these directly; the handlers registered in main.py turn
every error into the same JSON envelope:

    {"success": false, "status": 404, "error": "Not Found",
     "detail": "Product not found", "path": "/api/v1/shop/products/..."}

Usage:
    from tawatch.utils.exceptions import NotFoundError, DuplicateError
    raise NotFoundError("Product not found")
"""

from http import HTTPStatus
from typing import Any

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException


class NotFoundError(HTTPException):
    """404 Not Found 예외 — 요청한 리소스를 찾을 수 없을 때 사용.

    Raised when a requested resource (product, order, address, etc.) does not exist
    or is not visible to the caller.
    """

    def __init__(self, detail: str = "Resource not found") -> None:
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class DuplicateError(HTTPException):
    """409 Conflict 예외 — 고유 제약 위반 시 사용.

    Raised when creating a resource would violate a uniqueness rule
    (duplicate email, SKU, slug, coupon code, review).
    """

    def __init__(self, detail: str = "Resource already exists") -> None:
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)


class ForbiddenError(HTTPException):
    """403 Forbidden 예외 — 권한 부족 시 사용."""

    def __init__(self, detail: str = "Insufficient permissions") -> None:
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


class UnauthorizedError(HTTPException):
    """401 Unauthorized 예외 — 인증 실패 시 사용.

    Raised when authentication is missing, invalid, or expired.
    """

    def __init__(self, detail: str = "Authentication required") -> None:
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )


class BadRequestError(HTTPException):
    """400 Bad Request 예외 — 비즈니스 규칙 위반 시 사용.

    Raised when the request is well-formed but breaks a business rule
    (out of stock, invalid status transition, coupon expired, ...).
    """

    def __init__(self, detail: str = "Bad request") -> None:
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class PaymentGatewayError(HTTPException):
    """502 Bad Gateway 예외 — 결제 게이트웨이 통신 실패 시 사용.

    Raised when the payment provider cannot be reached or returns garbage.
    """

    def __init__(self, detail: str = "Payment gateway unavailable") -> None:
        super().__init__(status_code=status.HTTP_502_BAD_GATEWAY, detail=detail)


def _error_body(request: Request, status_code: int, detail: Any) -> dict[str, Any]:
    """에러 응답 본문 생성 — Build the error envelope."""
    try:
        reason: str = HTTPStatus(status_code).phrase
    except ValueError:
        reason = "Error"
    return {
        "success": False,
        "status": status_code,
        "error": reason,
        "detail": detail,
        "path": request.url.path,
    }


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """HTTPException → 에러 봉투 (Error envelope for HTTP exceptions)."""
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(request, exc.status_code, exc.detail),
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """요청 검증 실패 → 422 에러 봉투 (Validation errors keep FastAPI's error list)."""
    return JSONResponse(
        status_code=422,
        content=_error_body(
            request,
            422,
            jsonable_encoder(exc.errors()),
        ),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """앱에 에러 핸들러 등록 — Register the envelope handlers on the app."""
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
