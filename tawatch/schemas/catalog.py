"""카탈로그 Pydantic 요청/응답 스키마 정의.

Catalog Pydantic request/response schema definitions.
Covers categories (tree), brands, products, product images and stock
adjustments.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any, Literal

from pydantic import BaseModel, Field


# === 카테고리 (Category) 스키마 ===

class CategoryCreate(BaseModel):
    """카테고리 생성 요청 스키마.

    Category creation request schema.
    The slug is generated from the name when omitted.

    Attributes:
        name: 카테고리 이름 (Display name)
        slug: URL 슬러그 (URL slug, optional)
        parent_id: 상위 카테고리 UUID (Parent category, optional)
        description: 설명 (Description, optional)
        is_active: 노출 여부 (Visible on the storefront)
        sort_order: 정렬 순서 (Display order)
    """

    name: str = Field(..., min_length=1, max_length=255)
    slug: str | None = Field(default=None, max_length=255)
    parent_id: str | None = None
    description: str | None = None
    is_active: bool = True
    sort_order: int = 0


class CategoryUpdate(BaseModel):
    """카테고리 수정 요청 스키마 (부분 업데이트)."""

    name: str | None = Field(default=None, min_length=1, max_length=255)
    slug: str | None = Field(default=None, max_length=255)
    parent_id: str | None = None
    description: str | None = None
    is_active: bool | None = None
    sort_order: int | None = None


class CategoryResponse(BaseModel):
    """카테고리 응답 스키마 — children은 트리 조회에서만 채워짐.

    Category response. children is only filled by the tree endpoint.
    """

    id: str
    parent_id: str | None
    name: str
    slug: str
    description: str | None
    is_active: bool
    sort_order: int
    children: list["CategoryResponse"] = []


# === 브랜드 (Brand) 스키마 ===

class BrandCreate(BaseModel):
    """브랜드 생성 요청 스키마."""

    name: str = Field(..., min_length=1, max_length=255)
    slug: str | None = Field(default=None, max_length=255)
    country: str | None = Field(default=None, max_length=100)
    logo_url: str | None = None
    description: str | None = None
    is_active: bool = True


class BrandUpdate(BaseModel):
    """브랜드 수정 요청 스키마 (부분 업데이트)."""

    name: str | None = Field(default=None, min_length=1, max_length=255)
    slug: str | None = Field(default=None, max_length=255)
    country: str | None = Field(default=None, max_length=100)
    logo_url: str | None = None
    description: str | None = None
    is_active: bool | None = None


class BrandResponse(BaseModel):
    """브랜드 응답 스키마."""

    id: str
    name: str
    slug: str
    country: str | None
    logo_url: str | None
    description: str | None
    is_active: bool


# === 상품 이미지 (Product image) 스키마 ===

class ProductImageCreate(BaseModel):
    """상품 이미지 추가 요청 스키마.

    Attributes:
        url: 이미지 URL — 업로드 후 받은 공개 URL (Public URL from the upload step)
        alt_text: 대체 텍스트 (Alt text, optional)
        sort_order: 정렬 순서, 생략 시 마지막 (Appended last when omitted)
        is_primary: 대표 이미지 여부 (Primary flag; first image is always primary)
    """

    url: str = Field(..., min_length=1)
    alt_text: str | None = Field(default=None, max_length=255)
    sort_order: int | None = None
    is_primary: bool = False


class ProductImageResponse(BaseModel):
    """상품 이미지 응답 스키마."""

    id: str
    url: str
    alt_text: str | None
    sort_order: int
    is_primary: bool


# === 상품 (Product) 스키마 ===

class ProductCreate(BaseModel):
    """상품 생성 요청 스키마.

    Product creation request schema.

    Attributes:
        sku: 재고 관리 코드 (Stock keeping unit, unique)
        name: 상품명 (Product name)
        slug: URL 슬러그 (Generated from name when omitted)
        category_id: 카테고리 UUID (optional)
        brand_id: 브랜드 UUID (optional)
        price: 정가 (List price, VND)
        sale_price: 할인가 (Sale price, must not exceed price)
        stock_quantity: 초기 재고 (Initial stock, written to the inventory ledger)
        attributes: 시계 사양 (Watch specs, free-form JSON object)
    """

    sku: str = Field(..., min_length=1, max_length=64)
    name: str = Field(..., min_length=1, max_length=255)
    slug: str | None = Field(default=None, max_length=255)
    category_id: str | None = None
    brand_id: str | None = None
    short_description: str | None = Field(default=None, max_length=500)
    description: str | None = None
    price: Decimal = Field(..., ge=0, max_digits=12, decimal_places=2)
    sale_price: Decimal | None = Field(default=None, ge=0, max_digits=12, decimal_places=2)
    stock_quantity: int = Field(default=0, ge=0)
    attributes: dict[str, Any] | None = None
    is_active: bool = True
    is_featured: bool = False


class ProductUpdate(BaseModel):
    """상품 수정 요청 스키마 (부분 업데이트).

    Stock is not editable here; use the stock adjustment endpoint so every
    change lands in the inventory ledger.
    """

    sku: str | None = Field(default=None, min_length=1, max_length=64)
    name: str | None = Field(default=None, min_length=1, max_length=255)
    slug: str | None = Field(default=None, max_length=255)
    category_id: str | None = None
    brand_id: str | None = None
    short_description: str | None = Field(default=None, max_length=500)
    description: str | None = None
    price: Decimal | None = Field(default=None, ge=0, max_digits=12, decimal_places=2)
    sale_price: Decimal | None = Field(default=None, ge=0, max_digits=12, decimal_places=2)
    attributes: dict[str, Any] | None = None
    is_active: bool | None = None
    is_featured: bool | None = None


class ProductSummary(BaseModel):
    """상품 목록 항목 스키마.

    Product list item — enough for a product card.
    """

    id: str
    sku: str
    name: str
    slug: str
    price: Decimal
    sale_price: Decimal | None
    effective_price: Decimal
    stock_quantity: int
    sold_count: int
    is_active: bool
    is_featured: bool
    rating_average: Decimal
    rating_count: int
    brand_name: str | None
    primary_image_url: str | None
    created_at: datetime


class ProductDetailResponse(ProductSummary):
    """상품 상세 응답 스키마."""

    category_id: str | None
    category_name: str | None
    brand_id: str | None
    short_description: str | None
    description: str | None
    attributes: dict[str, Any] | None
    images: list[ProductImageResponse]
    updated_at: datetime


# === 재고 (Inventory) 스키마 ===

class StockAdjustRequest(BaseModel):
    """재고 조정 요청 스키마.

    Attributes:
        change: 변동 수량, 음수는 차감 (Signed delta, non-zero)
        reason: restock|adjustment
        note: 메모 (Free-text note)
    """

    change: int
    reason: Literal["restock", "adjustment"] = "adjustment"
    note: str | None = None


class InventoryTransactionResponse(BaseModel):
    """재고 변동 기록 응답 스키마."""

    id: str
    product_id: str
    change: int
    quantity_after: int
    reason: str
    reference_id: str | None
    note: str | None
    created_by: str | None
    created_at: datetime


# === 업로드 (Upload) 스키마 ===

class UploadUrlRequest(BaseModel):
    """이미지 업로드 URL 발급 요청."""

    filename: str = Field(..., min_length=1, max_length=255)
    content_type: str = "image/jpeg"


class UploadUrlResponse(BaseModel):
    """Presigned 업로드 URL 응답.

    Attributes:
        upload_url: PUT 대상 URL (S3 presigned URL or local upload endpoint)
        file_url: 업로드 후 공개 URL (Public URL to store on the image row)
        key: 저장소 키 (Object key)
    """

    upload_url: str
    file_url: str
    key: str
