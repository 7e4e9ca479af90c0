"""상품 서비스 — 상품 검색, 상세, 관리 및 상품 이미지.

Product Service — Storefront search and detail, back-office product CRUD
and product image management.
"""

from decimal import Decimal
from typing import Sequence
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from tawatch.models.catalog import Product, ProductImage
from tawatch.models.inventory import REASON_RESTOCK
from tawatch.repositories.catalog_repository import (
    PRODUCT_SORT_FIELDS,
    brand_repository,
    category_repository,
    product_image_repository,
    product_repository,
)
from tawatch.repositories.inventory_repository import inventory_repository
from tawatch.schemas.catalog import (
    ProductCreate,
    ProductDetailResponse,
    ProductImageCreate,
    ProductImageResponse,
    ProductSummary,
    ProductUpdate,
)
from tawatch.services.storage_service import storage_service
from tawatch.utils.exceptions import BadRequestError, DuplicateError, NotFoundError
from tawatch.utils.ids import parse_optional_uuid
from tawatch.utils.pagination import Page
from tawatch.utils.slug import slugify


def primary_image_url(product: Product) -> str | None:
    """대표 이미지 URL — primary flag first, else the first image (images must be loaded)."""
    images = list(product.images)
    for image in images:
        if image.is_primary:
            return image.url
    return images[0].url if images else None


class ProductService:
    """상품 관련 비즈니스 로직을 처리하는 서비스.

    Service handling product business logic.
    """

    def _summary(self, product: Product) -> ProductSummary:
        """상품 목록 항목으로 변환 — images and brand must be loaded."""
        return ProductSummary(
            id=str(product.id),
            sku=product.sku,
            name=product.name,
            slug=product.slug,
            price=product.price,
            sale_price=product.sale_price,
            effective_price=product.effective_price,
            stock_quantity=product.stock_quantity,
            sold_count=product.sold_count,
            is_active=product.is_active,
            is_featured=product.is_featured,
            rating_average=product.rating_average,
            rating_count=product.rating_count,
            brand_name=product.brand.name if product.brand else None,
            primary_image_url=primary_image_url(product),
            created_at=product.created_at,
        )

    def _image_response(self, image: ProductImage) -> ProductImageResponse:
        return ProductImageResponse(
            id=str(image.id),
            url=image.url,
            alt_text=image.alt_text,
            sort_order=image.sort_order,
            is_primary=image.is_primary,
        )

    def _detail(self, product: Product) -> ProductDetailResponse:
        """상품 상세 응답으로 변환 — images, brand and category must be loaded."""
        summary: ProductSummary = self._summary(product)
        return ProductDetailResponse(
            **summary.model_dump(),
            category_id=str(product.category_id) if product.category_id else None,
            category_name=product.category.name if product.category else None,
            brand_id=str(product.brand_id) if product.brand_id else None,
            short_description=product.short_description,
            description=product.description,
            attributes=product.attributes,
            images=[self._image_response(i) for i in product.images],
            updated_at=product.updated_at,
        )

    # --- 조회 (Reads) ---

    async def search_products(
        self,
        db: AsyncSession,
        page: int,
        per_page: int,
        keyword: str | None = None,
        category_id: UUID | None = None,
        brand_id: UUID | None = None,
        min_price: Decimal | None = None,
        max_price: Decimal | None = None,
        in_stock: bool | None = None,
        featured: bool | None = None,
        sort_by: str = "created_at",
        sort_dir: str = "desc",
        include_inactive: bool = False,
    ) -> Page[ProductSummary]:
        """상품을 검색합니다.

        Search products. The category filter includes descendant categories.
        The storefront only sees active products; the back office passes
        include_inactive.

        Raises:
            BadRequestError: 허용되지 않은 정렬 기준 (Unknown sort field or direction)
        """
        if sort_by not in PRODUCT_SORT_FIELDS:
            raise BadRequestError(
                f"Invalid sort_by '{sort_by}'. Allowed: {', '.join(PRODUCT_SORT_FIELDS)}"
            )
        if sort_dir not in ("asc", "desc"):
            raise BadRequestError("Invalid sort_dir. Allowed: asc, desc")
        if min_price is not None and max_price is not None and min_price > max_price:
            raise BadRequestError("min_price cannot exceed max_price")

        category_ids: list[UUID] | None = None
        if category_id is not None:
            category_ids = await category_repository.get_descendant_ids(db, category_id)

        products: Sequence[Product]
        products, total = await product_repository.search(
            db,
            page,
            per_page,
            keyword=keyword,
            category_ids=category_ids,
            brand_id=brand_id,
            min_price=min_price,
            max_price=max_price,
            in_stock=in_stock,
            featured=featured,
            is_active=None if include_inactive else True,
            sort_by=sort_by,
            sort_dir=sort_dir,
        )
        return Page[ProductSummary].build([self._summary(p) for p in products], total, page, per_page)

    async def get_product(
        self,
        db: AsyncSession,
        product_id: UUID,
        include_inactive: bool = False,
    ) -> ProductDetailResponse:
        """상품 상세를 조회합니다 — 쇼핑몰에서는 비활성 상품이 404.

        Raises:
            NotFoundError: 상품을 찾을 수 없을 때 (Product not found or inactive)
        """
        product: Product | None = await product_repository.get_detail(db, product_id)
        if product is None or (not include_inactive and not product.is_active):
            raise NotFoundError("Product not found")
        return self._detail(product)

    async def get_product_by_slug(self, db: AsyncSession, slug: str) -> ProductDetailResponse:
        """슬러그로 활성 상품 상세를 조회합니다."""
        product: Product | None = await product_repository.get_detail_by_slug(db, slug)
        if product is None or not product.is_active:
            raise NotFoundError("Product not found")
        return self._detail(product)

    # --- 관리 (Back office) ---

    async def _check_references(
        self,
        db: AsyncSession,
        category_id: UUID | None,
        brand_id: UUID | None,
    ) -> None:
        if category_id is not None and await category_repository.get_by_id(db, category_id) is None:
            raise NotFoundError("Category not found")
        if brand_id is not None and await brand_repository.get_by_id(db, brand_id) is None:
            raise NotFoundError("Brand not found")

    async def _resolve_slug(
        self,
        db: AsyncSession,
        name: str,
        sku: str,
        slug: str | None,
        exclude_id: UUID | None = None,
    ) -> str:
        """상품 슬러그 결정.

        An explicit slug must be free. A generated slug falls back to
        name + SKU when the plain name is taken.
        """
        if slug:
            resolved: str = slugify(slug)
            if not resolved:
                raise BadRequestError("Slug cannot be empty")
            if await product_repository.exists(db, {"slug": resolved}, exclude_id=exclude_id):
                raise DuplicateError("A product with this slug already exists")
            return resolved

        for candidate in (slugify(name), slugify(f"{name} {sku}")):
            if candidate and not await product_repository.exists(db, {"slug": candidate}, exclude_id=exclude_id):
                return candidate
        raise DuplicateError("A product with this slug already exists")

    async def create_product(
        self,
        db: AsyncSession,
        data: ProductCreate,
        acting_user_id: UUID,
    ) -> ProductDetailResponse:
        """새 상품을 생성합니다.

        Create a product. Initial stock is written to the inventory ledger
        as a restock.

        Raises:
            DuplicateError: SKU 또는 슬러그 중복 (Duplicate SKU or slug)
            BadRequestError: 할인가가 정가보다 클 때 (sale_price above price)
            NotFoundError: 카테고리/브랜드가 없을 때 (Unknown category or brand)
        """
        sku: str = data.sku.strip().upper()
        if await product_repository.exists(db, {"sku": sku}):
            raise DuplicateError("A product with this SKU already exists")
        if data.sale_price is not None and data.sale_price > data.price:
            raise BadRequestError("sale_price cannot exceed price")

        category_id: UUID | None = parse_optional_uuid(data.category_id, "category_id")
        brand_id: UUID | None = parse_optional_uuid(data.brand_id, "brand_id")
        await self._check_references(db, category_id, brand_id)

        name: str = data.name.strip()
        product: Product = await product_repository.create(
            db,
            {
                "sku": sku,
                "name": name,
                "slug": await self._resolve_slug(db, name, sku, data.slug),
                "category_id": category_id,
                "brand_id": brand_id,
                "short_description": data.short_description,
                "description": data.description,
                "price": data.price,
                "sale_price": data.sale_price,
                "stock_quantity": data.stock_quantity,
                "attributes": data.attributes,
                "is_active": data.is_active,
                "is_featured": data.is_featured,
            },
        )

        if data.stock_quantity > 0:
            await inventory_repository.record(
                db,
                product_id=product.id,
                change=data.stock_quantity,
                quantity_after=data.stock_quantity,
                reason=REASON_RESTOCK,
                note="Initial stock",
                created_by=acting_user_id,
            )

        return await self.get_product(db, product.id, include_inactive=True)

    async def update_product(
        self,
        db: AsyncSession,
        product_id: UUID,
        data: ProductUpdate,
    ) -> ProductDetailResponse:
        """상품을 수정합니다.

        Partially update a product. sale_price is validated against the
        resulting price; sending sale_price=null removes the sale.

        Raises:
            NotFoundError: 상품/카테고리/브랜드를 찾을 수 없을 때
            DuplicateError: SKU 또는 슬러그 중복 (Duplicate SKU or slug)
            BadRequestError: 할인가가 정가보다 클 때 (sale_price above price)
        """
        product: Product | None = await product_repository.get_by_id(db, product_id)
        if product is None:
            raise NotFoundError("Product not found")

        update_data: dict = data.model_dump(exclude_unset=True)
        for field in ("sku", "name", "price", "is_active", "is_featured"):
            if field in update_data and update_data[field] is None:
                update_data.pop(field)

        if "sku" in update_data:
            update_data["sku"] = update_data["sku"].strip().upper()
            if await product_repository.exists(db, {"sku": update_data["sku"]}, exclude_id=product_id):
                raise DuplicateError("A product with this SKU already exists")
        if "name" in update_data:
            update_data["name"] = update_data["name"].strip()
        if update_data.get("slug"):
            update_data["slug"] = await self._resolve_slug(
                db,
                update_data.get("name", product.name),
                update_data.get("sku", product.sku),
                update_data["slug"],
                exclude_id=product_id,
            )
        else:
            update_data.pop("slug", None)

        if "category_id" in update_data:
            update_data["category_id"] = parse_optional_uuid(update_data["category_id"], "category_id")
        if "brand_id" in update_data:
            update_data["brand_id"] = parse_optional_uuid(update_data["brand_id"], "brand_id")
        await self._check_references(db, update_data.get("category_id"), update_data.get("brand_id"))

        price: Decimal = update_data.get("price", product.price)
        sale_price: Decimal | None = update_data.get("sale_price", product.sale_price)
        if sale_price is not None and sale_price > price:
            raise BadRequestError("sale_price cannot exceed price")

        await product_repository.update(db, product_id, update_data)
        return await self.get_product(db, product_id, include_inactive=True)

    async def delete_product(self, db: AsyncSession, product_id: UUID) -> None:
        """상품을 삭제합니다.

        Hard delete. Images, cart lines, reviews and ledger rows go with it;
        order lines keep their snapshot with product_id set to NULL.

        Raises:
            NotFoundError: 상품을 찾을 수 없을 때 (Product not found)
        """
        deleted: bool = await product_repository.delete(db, product_id)
        if not deleted:
            raise NotFoundError("Product not found")

    # --- 이미지 (Images) ---

    async def add_image(
        self,
        db: AsyncSession,
        product_id: UUID,
        data: ProductImageCreate,
    ) -> ProductDetailResponse:
        """상품 이미지를 추가합니다.

        Add an image. Temporary uploads are moved to their final key. The
        first image of a product is always primary.
        """
        if await product_repository.get_by_id(db, product_id) is None:
            raise NotFoundError("Product not found")

        existing: Sequence[ProductImage] = await product_image_repository.list_for_product(db, product_id)
        sort_order: int = (
            data.sort_order
            if data.sort_order is not None
            else await product_image_repository.next_sort_order(db, product_id)
        )
        image: ProductImage = await product_image_repository.create(
            db,
            {
                "product_id": product_id,
                "url": storage_service.finalize_upload(data.url),
                "alt_text": data.alt_text,
                "sort_order": sort_order,
                "is_primary": False,
            },
        )
        if data.is_primary or not existing:
            await product_image_repository.set_primary(db, product_id, image.id)

        return await self.get_product(db, product_id, include_inactive=True)

    async def set_primary_image(
        self,
        db: AsyncSession,
        product_id: UUID,
        image_id: UUID,
    ) -> ProductDetailResponse:
        """대표 이미지를 변경합니다."""
        image: ProductImage | None = await product_image_repository.get_by_id(db, image_id)
        if image is None or image.product_id != product_id:
            raise NotFoundError("Image not found")
        await product_image_repository.set_primary(db, product_id, image_id)
        return await self.get_product(db, product_id, include_inactive=True)

    async def delete_image(
        self,
        db: AsyncSession,
        product_id: UUID,
        image_id: UUID,
    ) -> None:
        """상품 이미지를 삭제합니다 — 대표 이미지였다면 다음 이미지가 대표가 됨.

        Delete an image. When the primary image is removed the next image
        in sort order becomes primary.
        """
        image: ProductImage | None = await product_image_repository.get_by_id(db, image_id)
        if image is None or image.product_id != product_id:
            raise NotFoundError("Image not found")

        was_primary: bool = image.is_primary
        await product_image_repository.delete(db, image_id)

        if was_primary:
            remaining: Sequence[ProductImage] = await product_image_repository.list_for_product(db, product_id)
            if remaining:
                await product_image_repository.set_primary(db, product_id, remaining[0].id)


# 싱글턴 인스턴스 — Singleton instance
product_service: ProductService = ProductService()
