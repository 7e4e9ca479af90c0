"""리뷰 Pydantic 스키마 정의.

Review Pydantic schema definitions.
"""

from datetime import datetime

from pydantic import BaseModel, Field


class ReviewCreate(BaseModel):
    """리뷰 작성 요청 — 배송 완료된 구매가 있어야 함 (requires a delivered purchase)."""

    rating: int = Field(..., ge=1, le=5)
    title: str | None = Field(default=None, max_length=255)
    comment: str | None = Field(default=None, max_length=5000)


class ReviewUpdate(BaseModel):
    """리뷰 수정 요청 (부분 업데이트)."""

    rating: int | None = Field(default=None, ge=1, le=5)
    title: str | None = Field(default=None, max_length=255)
    comment: str | None = Field(default=None, max_length=5000)


class ReviewVisibilityUpdate(BaseModel):
    """리뷰 노출 상태 변경 (관리자)."""

    is_visible: bool


class ReviewResponse(BaseModel):
    """리뷰 응답 스키마."""

    id: str
    product_id: str
    user_id: str
    author_name: str
    rating: int
    title: str | None
    comment: str | None
    is_visible: bool
    created_at: datetime
    updated_at: datetime
