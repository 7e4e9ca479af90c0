"""스토어 카탈로그 라우터 — 카테고리, 브랜드, 상품 조회 및 검색.

Shop Catalog Router — Public (unauthenticated) catalog reads: category
tree, brands, product search, product detail and visible reviews.
Inactive categories, brands and products are hidden.
"""

from decimal import Decimal
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from tawatch.database import get_db
from tawatch.schemas.catalog import BrandResponse, CategoryResponse, ProductDetailResponse, ProductSummary
from tawatch.schemas.review import ReviewResponse
from tawatch.services.brand_service import brand_service
from tawatch.services.category_service import category_service
from tawatch.services.product_service import product_service
from tawatch.services.review_service import review_service
from tawatch.utils.pagination import MAX_PER_PAGE, Page

router: APIRouter = APIRouter()


@router.get("/categories", response_model=list[CategoryResponse])
async def list_categories(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> list[CategoryResponse]:
    """카테고리 트리 조회 — 활성 카테고리만."""
    return await category_service.list_tree(db, active_only=True)


@router.get("/categories/{slug}", response_model=CategoryResponse)
async def get_category(
    slug: str,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> CategoryResponse:
    """슬러그로 카테고리 조회 (하위 카테고리 포함)."""
    return await category_service.get_by_slug(db, slug)


@router.get("/brands", response_model=list[BrandResponse])
async def list_brands(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> list[BrandResponse]:
    """브랜드 목록 — 활성 브랜드만."""
    return await brand_service.list_brands(db, active_only=True)


@router.get("/brands/{slug}", response_model=BrandResponse)
async def get_brand(
    slug: str,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> BrandResponse:
    """슬러그로 브랜드 조회."""
    return await brand_service.get_by_slug(db, slug)


@router.get("/products", response_model=Page[ProductSummary])
async def search_products(
    db: Annotated[AsyncSession, Depends(get_db)],
    page: Annotated[int, Query(ge=1)] = 1,
    per_page: Annotated[int, Query(ge=1, le=MAX_PER_PAGE)] = 20,
    keyword: Annotated[str | None, Query(max_length=100, description="이름/SKU 검색어")] = None,
    category_id: Annotated[UUID | None, Query(description="카테고리 (하위 포함)")] = None,
    brand_id: Annotated[UUID | None, Query()] = None,
    min_price: Annotated[Decimal | None, Query(ge=0)] = None,
    max_price: Annotated[Decimal | None, Query(ge=0)] = None,
    in_stock: Annotated[bool | None, Query()] = None,
    featured: Annotated[bool | None, Query()] = None,
    sort_by: Annotated[str, Query(description="created_at|price|name|sold_count|rating_average")] = "created_at",
    sort_dir: Annotated[str, Query(description="asc|desc")] = "desc",
) -> Page[ProductSummary]:
    """상품 검색 — 필터, 정렬, 페이지네이션.

    Search active products. Price filters and price sorting use the
    effective price (sale price when set).
    """
    return await product_service.search_products(
        db,
        page,
        per_page,
        keyword=keyword,
        category_id=category_id,
        brand_id=brand_id,
        min_price=min_price,
        max_price=max_price,
        in_stock=in_stock,
        featured=featured,
        sort_by=sort_by,
        sort_dir=sort_dir,
    )


@router.get("/products/slug/{slug}", response_model=ProductDetailResponse)
async def get_product_by_slug(
    slug: str,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> ProductDetailResponse:
    """슬러그로 상품 상세 조회."""
    return await product_service.get_product_by_slug(db, slug)


@router.get("/products/{product_id}", response_model=ProductDetailResponse)
async def get_product(
    product_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> ProductDetailResponse:
    """상품 상세 조회 — 비활성 상품은 404."""
    return await product_service.get_product(db, product_id)


@router.get("/products/{product_id}/reviews", response_model=Page[ReviewResponse])
async def list_product_reviews(
    product_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    page: Annotated[int, Query(ge=1)] = 1,
    per_page: Annotated[int, Query(ge=1, le=MAX_PER_PAGE)] = 20,
) -> Page[ReviewResponse]:
    """상품 리뷰 목록 — 노출 리뷰만."""
    return await review_service.list_product_reviews(db, product_id, page, per_page)
