"""브랜드 서비스 — 시계 브랜드 CRUD 비즈니스 로직.

Brand Service — Business logic for watch brand CRUD operations.
"""

from typing import Sequence
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from tawatch.models.catalog import Brand
from tawatch.repositories.catalog_repository import brand_repository, product_repository
from tawatch.schemas.catalog import BrandCreate, BrandResponse, BrandUpdate
from tawatch.utils.exceptions import BadRequestError, DuplicateError, NotFoundError
from tawatch.utils.slug import slugify


class BrandService:
    """브랜드 관련 비즈니스 로직을 처리하는 서비스.

    Service handling brand business logic.
    """

    def _to_response(self, brand: Brand) -> BrandResponse:
        """브랜드 모델을 응답 스키마로 변환합니다.

        Convert a Brand model instance to a BrandResponse schema.
        """
        return BrandResponse(
            id=str(brand.id),
            name=brand.name,
            slug=brand.slug,
            country=brand.country,
            logo_url=brand.logo_url,
            description=brand.description,
            is_active=brand.is_active,
        )

    async def list_brands(
        self,
        db: AsyncSession,
        active_only: bool = True,
    ) -> list[BrandResponse]:
        """브랜드 목록을 이름순으로 조회합니다.

        List brands ordered by name.
        """
        brands: Sequence[Brand] = await brand_repository.get_all(
            db,
            filters={"is_active": True} if active_only else None,
            order_by=Brand.name,
        )
        return [self._to_response(b) for b in brands]

    async def get_by_slug(
        self,
        db: AsyncSession,
        slug: str,
        active_only: bool = True,
    ) -> BrandResponse:
        """슬러그로 브랜드를 조회합니다.

        Raises:
            NotFoundError: 브랜드를 찾을 수 없을 때 (Brand not found)
        """
        brand: Brand | None = await brand_repository.get_one_by(db, {"slug": slug})
        if brand is None or (active_only and not brand.is_active):
            raise NotFoundError("Brand not found")
        return self._to_response(brand)

    async def _check_unique(
        self,
        db: AsyncSession,
        name: str | None,
        slug: str | None,
        exclude_id: UUID | None = None,
    ) -> None:
        if name is not None and await brand_repository.exists(db, {"name": name}, exclude_id=exclude_id):
            raise DuplicateError("A brand with this name already exists")
        if slug is not None and await brand_repository.exists(db, {"slug": slug}, exclude_id=exclude_id):
            raise DuplicateError("A brand with this slug already exists")

    async def create_brand(
        self,
        db: AsyncSession,
        data: BrandCreate,
    ) -> BrandResponse:
        """새 브랜드를 생성합니다.

        Create a new brand. The slug defaults to the slugified name.

        Raises:
            DuplicateError: 같은 이름/슬러그의 브랜드가 이미 존재할 때
                            (When a brand with the same name or slug exists)
        """
        name: str = data.name.strip()
        slug: str = slugify(data.slug or name)
        if not slug:
            raise BadRequestError("Slug cannot be empty")
        await self._check_unique(db, name, slug)

        brand: Brand = await brand_repository.create(
            db,
            {
                "name": name,
                "slug": slug,
                "country": data.country,
                "logo_url": data.logo_url,
                "description": data.description,
                "is_active": data.is_active,
            },
        )
        return self._to_response(brand)

    async def update_brand(
        self,
        db: AsyncSession,
        brand_id: UUID,
        data: BrandUpdate,
    ) -> BrandResponse:
        """브랜드 정보를 수정합니다.

        Raises:
            NotFoundError: 브랜드를 찾을 수 없을 때 (Brand not found)
            DuplicateError: 같은 이름/슬러그의 브랜드가 이미 존재할 때
        """
        update_data: dict = data.model_dump(exclude_unset=True)
        for field in ("name", "slug", "is_active"):
            if field in update_data and update_data[field] is None:
                update_data.pop(field)
        if "name" in update_data:
            update_data["name"] = update_data["name"].strip()
        if "slug" in update_data:
            update_data["slug"] = slugify(update_data["slug"])
            if not update_data["slug"]:
                raise BadRequestError("Slug cannot be empty")

        if await brand_repository.get_by_id(db, brand_id) is None:
            raise NotFoundError("Brand not found")
        await self._check_unique(db, update_data.get("name"), update_data.get("slug"), exclude_id=brand_id)

        brand: Brand | None = await brand_repository.update(db, brand_id, update_data)
        if brand is None:
            raise NotFoundError("Brand not found")
        return self._to_response(brand)

    async def delete_brand(
        self,
        db: AsyncSession,
        brand_id: UUID,
    ) -> None:
        """브랜드를 삭제합니다.

        Raises:
            NotFoundError: 브랜드를 찾을 수 없을 때 (Brand not found)
            BadRequestError: 브랜드에 상품이 있을 때 (Brand still has products)
        """
        if await brand_repository.get_by_id(db, brand_id) is None:
            raise NotFoundError("Brand not found")
        if await product_repository.count_by(db, "brand_id", brand_id) > 0:
            raise BadRequestError("Brand still has products")
        await brand_repository.delete(db, brand_id)


# 싱글턴 인스턴스 — Singleton instance
brand_service: BrandService = BrandService()
