"""카탈로그 레포지토리 — 카테고리, 브랜드, 상품, 상품 이미지 쿼리.

Catalog Repository — Queries for categories, brands, products and images.
Product search supports keyword/category/brand/price/stock filters and a
whitelisted sort column.
"""

from decimal import Decimal
from typing import Sequence
from uuid import UUID

from sqlalchemy import Select, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from tawatch.models.catalog import Brand, Category, Product, ProductImage
from tawatch.repositories.base import BaseRepository

# 정렬 허용 컬럼 — Sortable columns exposed to the API
PRODUCT_SORT_FIELDS: tuple[str, ...] = ("created_at", "price", "name", "sold_count", "rating_average")


def _effective_price_expr():
    """실제 판매가 SQL 식 — COALESCE(sale_price, price)."""
    return func.coalesce(Product.sale_price, Product.price)


class CategoryRepository(BaseRepository[Category]):
    """카테고리 레포지토리 — Category tree queries."""

    def __init__(self) -> None:
        super().__init__(Category)

    async def list_ordered(
        self,
        db: AsyncSession,
        active_only: bool = False,
    ) -> Sequence[Category]:
        """정렬 순서대로 전체 카테고리를 조회합니다.

        All categories ordered by sort_order then name; the caller builds the tree.
        """
        query: Select = select(Category)
        if active_only:
            query = query.where(Category.is_active == True)  # noqa: E712
        query = query.order_by(Category.sort_order, Category.name)
        result = await db.execute(query)
        return result.scalars().all()

    async def get_descendant_ids(
        self,
        db: AsyncSession,
        category_id: UUID,
    ) -> list[UUID]:
        """카테고리 자신과 모든 하위 카테고리 ID를 반환합니다.

        Return the category id plus all descendant ids (breadth-first walk
        over the parent map; the tree is small).
        """
        result = await db.execute(select(Category.id, Category.parent_id))
        children: dict[UUID, list[UUID]] = {}
        for cid, parent_id in result.all():
            if parent_id is not None:
                children.setdefault(parent_id, []).append(cid)

        found: list[UUID] = [category_id]
        queue: list[UUID] = [category_id]
        while queue:
            current: UUID = queue.pop(0)
            for child_id in children.get(current, []):
                if child_id not in found:
                    found.append(child_id)
                    queue.append(child_id)
        return found

    async def has_children(self, db: AsyncSession, category_id: UUID) -> bool:
        """하위 카테고리 존재 여부."""
        return await self.exists(db, {"parent_id": category_id})


class BrandRepository(BaseRepository[Brand]):
    """브랜드 레포지토리 — Brand queries."""

    def __init__(self) -> None:
        super().__init__(Brand)


class ProductRepository(BaseRepository[Product]):
    """상품 레포지토리.

    Repository for products, including storefront search and the
    row-locking read used by checkout and cancellation.
    """

    def __init__(self) -> None:
        super().__init__(Product)

    def _detail_query(self) -> Select:
        return select(Product).options(
            selectinload(Product.images),
            selectinload(Product.brand),
            selectinload(Product.category),
        )

    async def get_detail(
        self,
        db: AsyncSession,
        product_id: UUID,
    ) -> Product | None:
        """상품 상세를 이미지/브랜드/카테고리와 함께 조회합니다.

        Retrieve a product with images, brand and category eagerly loaded.
        """
        query: Select = (
            self._detail_query()
            .where(Product.id == product_id)
            .execution_options(populate_existing=True)
        )
        result = await db.execute(query)
        return result.scalar_one_or_none()

    async def get_detail_by_slug(
        self,
        db: AsyncSession,
        slug: str,
    ) -> Product | None:
        """슬러그로 상품 상세를 조회합니다."""
        result = await db.execute(self._detail_query().where(Product.slug == slug))
        return result.scalar_one_or_none()

    async def search(
        self,
        db: AsyncSession,
        page: int,
        per_page: int,
        keyword: str | None = None,
        category_ids: list[UUID] | None = None,
        brand_id: UUID | None = None,
        min_price: Decimal | None = None,
        max_price: Decimal | None = None,
        in_stock: bool | None = None,
        featured: bool | None = None,
        is_active: bool | None = True,
        sort_by: str = "created_at",
        sort_dir: str = "desc",
    ) -> tuple[Sequence[Product], int]:
        """상품 검색 — 필터 및 정렬 적용.

        Search products with filters. Price filters compare against the
        effective price. sort_by must be one of PRODUCT_SORT_FIELDS (checked
        by the service).

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            page: 페이지 번호 (1-based page number)
            per_page: 페이지 크기 (Page size)
            keyword: 이름/SKU 검색어 (Matches name or SKU, case-insensitive)
            category_ids: 카테고리 ID 목록 — 하위 포함 (Category ids incl. descendants)
            brand_id: 브랜드 필터 (Brand filter)
            min_price: 최소 가격 (Minimum effective price)
            max_price: 최대 가격 (Maximum effective price)
            in_stock: 재고 있음 필터 (Only products with stock > 0 when True)
            featured: 추천 상품 필터 (Featured flag filter)
            is_active: 활성 필터, None이면 전체 (None = include inactive)
            sort_by: 정렬 컬럼 (Sort column)
            sort_dir: asc|desc

        Returns:
            tuple[Sequence[Product], int]: (상품 목록, 전체 개수)
        """
        query: Select = select(Product).options(
            selectinload(Product.images),
            selectinload(Product.brand),
        )

        if is_active is not None:
            query = query.where(Product.is_active == is_active)
        if keyword:
            pattern: str = f"%{keyword.strip()}%"
            query = query.where(or_(Product.name.ilike(pattern), Product.sku.ilike(pattern)))
        if category_ids:
            query = query.where(Product.category_id.in_(category_ids))
        if brand_id is not None:
            query = query.where(Product.brand_id == brand_id)
        if min_price is not None:
            query = query.where(_effective_price_expr() >= min_price)
        if max_price is not None:
            query = query.where(_effective_price_expr() <= max_price)
        if in_stock is True:
            query = query.where(Product.stock_quantity > 0)
        elif in_stock is False:
            query = query.where(Product.stock_quantity == 0)
        if featured is not None:
            query = query.where(Product.is_featured == featured)

        sort_column = _effective_price_expr() if sort_by == "price" else getattr(Product, sort_by)
        ordering = sort_column.asc() if sort_dir == "asc" else sort_column.desc()
        # id를 보조 정렬 키로 사용 — stable ordering across pages
        query = query.order_by(ordering, Product.id)

        return await self.get_paginated(db, query, page, per_page)

    async def lock_many(
        self,
        db: AsyncSession,
        product_ids: list[UUID],
    ) -> dict[UUID, Product]:
        """상품 행을 ID 순서로 잠그고 조회합니다 (SELECT ... FOR UPDATE).

        Lock product rows in id order so concurrent checkouts acquire locks
        in the same sequence.

        Returns:
            dict[UUID, Product]: 상품 ID → 상품 (missing ids are absent)
        """
        if not product_ids:
            return {}
        query: Select = (
            select(Product)
            .options(selectinload(Product.images))
            .where(Product.id.in_(product_ids))
            .order_by(Product.id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        result = await db.execute(query)
        return {p.id: p for p in result.scalars().all()}

    async def count_by(
        self,
        db: AsyncSession,
        column_name: str,
        value: UUID,
    ) -> int:
        """특정 FK 값을 가진 상품 수 — e.g. products in a category or brand."""
        query = select(func.count()).select_from(Product).where(getattr(Product, column_name) == value)
        return (await db.execute(query)).scalar() or 0

    async def low_stock(
        self,
        db: AsyncSession,
        threshold: int,
        limit: int = 20,
    ) -> Sequence[Product]:
        """재고 부족 활성 상품 — Active products at or below the threshold."""
        query: Select = (
            select(Product)
            .where(Product.is_active == True, Product.stock_quantity <= threshold)  # noqa: E712
            .order_by(Product.stock_quantity, Product.name)
            .limit(limit)
        )
        result = await db.execute(query)
        return result.scalars().all()

    async def set_rating(
        self,
        db: AsyncSession,
        product_id: UUID,
        average: Decimal,
        count: int,
    ) -> None:
        """평점 집계값을 저장합니다 — Store the review aggregate on the product."""
        await db.execute(
            update(Product)
            .where(Product.id == product_id)
            .values(rating_average=average, rating_count=count)
            .execution_options(synchronize_session="fetch")
        )
        await db.flush()


class ProductImageRepository(BaseRepository[ProductImage]):
    """상품 이미지 레포지토리."""

    def __init__(self) -> None:
        super().__init__(ProductImage)

    async def list_for_product(self, db: AsyncSession, product_id: UUID) -> Sequence[ProductImage]:
        query: Select = (
            select(ProductImage)
            .where(ProductImage.product_id == product_id)
            .order_by(ProductImage.sort_order, ProductImage.created_at)
        )
        result = await db.execute(query)
        return result.scalars().all()

    async def next_sort_order(self, db: AsyncSession, product_id: UUID) -> int:
        """다음 정렬 순서 — max(sort_order) + 1, or 0 for the first image."""
        query = select(func.max(ProductImage.sort_order)).where(ProductImage.product_id == product_id)
        current: int | None = (await db.execute(query)).scalar()
        return 0 if current is None else current + 1

    async def set_primary(
        self,
        db: AsyncSession,
        product_id: UUID,
        image_id: UUID | None,
    ) -> None:
        """대표 이미지를 지정합니다 — 나머지는 해제.

        Mark one image primary and clear the flag on the others. Passing
        None clears the flag everywhere.
        """
        for image in await self.list_for_product(db, product_id):
            image.is_primary = image.id == image_id
        await db.flush()


# 싱글턴 인스턴스 — Singleton instances
category_repository: CategoryRepository = CategoryRepository()
brand_repository: BrandRepository = BrandRepository()
product_repository: ProductRepository = ProductRepository()
product_image_repository: ProductImageRepository = ProductImageRepository()
