"""관리자 상품 라우터 — 상품 CRUD, 이미지, 재고 조정 및 이력.

Admin Product Router — Product CRUD (inactive products included), images,
stock adjustments and the inventory ledger. Staff+.
"""

from decimal import Decimal
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from tawatch.api.deps import require_staff
from tawatch.database import get_db
from tawatch.models.user import User
from tawatch.schemas.catalog import (
    InventoryTransactionResponse,
    ProductCreate,
    ProductDetailResponse,
    ProductImageCreate,
    ProductSummary,
    ProductUpdate,
    StockAdjustRequest,
)
from tawatch.services.inventory_service import inventory_service
from tawatch.services.product_service import product_service
from tawatch.utils.pagination import MAX_PER_PAGE, Page

router: APIRouter = APIRouter()


@router.get("/", response_model=Page[ProductSummary])
async def list_products(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_staff)],
    page: Annotated[int, Query(ge=1)] = 1,
    per_page: Annotated[int, Query(ge=1, le=MAX_PER_PAGE)] = 20,
    keyword: Annotated[str | None, Query(max_length=100)] = None,
    category_id: Annotated[UUID | None, Query()] = None,
    brand_id: Annotated[UUID | None, Query()] = None,
    min_price: Annotated[Decimal | None, Query(ge=0)] = None,
    max_price: Annotated[Decimal | None, Query(ge=0)] = None,
    in_stock: Annotated[bool | None, Query()] = None,
    featured: Annotated[bool | None, Query()] = None,
    sort_by: Annotated[str, Query()] = "created_at",
    sort_dir: Annotated[str, Query()] = "desc",
) -> Page[ProductSummary]:
    """상품 목록 — 비활성 상품 포함."""
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
        include_inactive=True,
    )


@router.get("/{product_id}", response_model=ProductDetailResponse)
async def get_product(
    product_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_staff)],
) -> ProductDetailResponse:
    """상품 상세 조회 — 비활성 상품 포함."""
    return await product_service.get_product(db, product_id, include_inactive=True)


@router.post("/", response_model=ProductDetailResponse, status_code=201)
async def create_product(
    data: ProductCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_staff)],
) -> ProductDetailResponse:
    """새 상품을 생성합니다.

    Create a product. The initial stock is written to the inventory ledger.
    """
    result: ProductDetailResponse = await product_service.create_product(db, data, current_user.id)
    await db.commit()
    return result


@router.put("/{product_id}", response_model=ProductDetailResponse)
async def update_product(
    product_id: UUID,
    data: ProductUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_staff)],
) -> ProductDetailResponse:
    """상품 정보를 수정합니다 — 재고는 /stock 엔드포인트로만 변경."""
    result: ProductDetailResponse = await product_service.update_product(db, product_id, data)
    await db.commit()
    return result


@router.delete("/{product_id}", status_code=204)
async def delete_product(
    product_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_staff)],
) -> None:
    """상품을 삭제합니다 — 과거 주문 항목은 스냅샷으로 유지."""
    await product_service.delete_product(db, product_id)
    await db.commit()


# --- 이미지 (Images) ---


@router.post("/{product_id}/images", response_model=ProductDetailResponse, status_code=201)
async def add_image(
    product_id: UUID,
    data: ProductImageCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_staff)],
) -> ProductDetailResponse:
    """상품 이미지 추가 — 업로드된 temp 파일은 최종 위치로 이동."""
    result: ProductDetailResponse = await product_service.add_image(db, product_id, data)
    await db.commit()
    return result


@router.put("/{product_id}/images/{image_id}/primary", response_model=ProductDetailResponse)
async def set_primary_image(
    product_id: UUID,
    image_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_staff)],
) -> ProductDetailResponse:
    """대표 이미지 지정."""
    result: ProductDetailResponse = await product_service.set_primary_image(db, product_id, image_id)
    await db.commit()
    return result


@router.delete("/{product_id}/images/{image_id}", status_code=204)
async def delete_image(
    product_id: UUID,
    image_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_staff)],
) -> None:
    """상품 이미지 삭제 — 대표 이미지였다면 다음 이미지가 대표가 됨."""
    await product_service.delete_image(db, product_id, image_id)
    await db.commit()


# --- 재고 (Inventory) ---


@router.post("/{product_id}/stock", response_model=InventoryTransactionResponse, status_code=201)
async def adjust_stock(
    product_id: UUID,
    data: StockAdjustRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_staff)],
) -> InventoryTransactionResponse:
    """재고 조정 — 입고(restock) 또는 조정(adjustment).

    Apply a signed stock change. Stock can never go below zero (400).
    """
    result: InventoryTransactionResponse = await inventory_service.adjust_stock(
        db, product_id, data, current_user.id
    )
    await db.commit()
    return result


@router.get("/{product_id}/inventory", response_model=Page[InventoryTransactionResponse])
async def list_inventory(
    product_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_staff)],
    page: Annotated[int, Query(ge=1)] = 1,
    per_page: Annotated[int, Query(ge=1, le=MAX_PER_PAGE)] = 20,
) -> Page[InventoryTransactionResponse]:
    """재고 변동 이력 — 최신순."""
    return await inventory_service.list_transactions(db, product_id, page, per_page)
