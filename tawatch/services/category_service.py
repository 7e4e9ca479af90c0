"""카테고리 서비스 — 카테고리 트리 조회 및 관리.

Category Service — Category tree reads for the storefront and CRUD for
the back office.
"""

from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from tawatch.models.catalog import Category
from tawatch.repositories.catalog_repository import category_repository, product_repository
from tawatch.schemas.catalog import CategoryCreate, CategoryResponse, CategoryUpdate
from tawatch.utils.exceptions import BadRequestError, DuplicateError, NotFoundError
from tawatch.utils.ids import parse_optional_uuid
from tawatch.utils.slug import slugify


class CategoryService:
    """카테고리 관련 비즈니스 로직을 처리하는 서비스.

    Service handling category business logic.
    """

    def _to_response(self, category: Category) -> CategoryResponse:
        return CategoryResponse(
            id=str(category.id),
            parent_id=str(category.parent_id) if category.parent_id else None,
            name=category.name,
            slug=category.slug,
            description=category.description,
            is_active=category.is_active,
            sort_order=category.sort_order,
        )

    async def list_tree(
        self,
        db: AsyncSession,
        active_only: bool = True,
    ) -> list[CategoryResponse]:
        """카테고리 트리를 조회합니다.

        Return the category tree, children nested under their parent and
        ordered by sort_order then name. Children of an excluded (inactive)
        parent are excluded as well.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            active_only: 활성 카테고리만 (Storefront passes True)

        Returns:
            list[CategoryResponse]: 최상위 카테고리 목록 (Root nodes)
        """
        categories = await category_repository.list_ordered(db, active_only=active_only)
        nodes: dict[UUID, CategoryResponse] = {c.id: self._to_response(c) for c in categories}

        roots: list[CategoryResponse] = []
        for category in categories:
            node: CategoryResponse = nodes[category.id]
            if category.parent_id is None:
                roots.append(node)
            elif category.parent_id in nodes:
                nodes[category.parent_id].children.append(node)
        return roots

    async def get_by_slug(
        self,
        db: AsyncSession,
        slug: str,
        active_only: bool = True,
    ) -> CategoryResponse:
        """슬러그로 카테고리를 조회합니다.

        Raises:
            NotFoundError: 카테고리를 찾을 수 없을 때 (Category not found)
        """
        category: Category | None = await category_repository.get_one_by(db, {"slug": slug})
        if category is None or (active_only and not category.is_active):
            raise NotFoundError("Category not found")
        return self._to_response(category)

    async def get_category(self, db: AsyncSession, category_id: UUID) -> Category:
        """ID로 카테고리 조회 — 404 when missing."""
        category: Category | None = await category_repository.get_by_id(db, category_id)
        if category is None:
            raise NotFoundError("Category not found")
        return category

    async def _resolve_slug(
        self,
        db: AsyncSession,
        name: str,
        slug: str | None,
        exclude_id: UUID | None = None,
    ) -> str:
        resolved: str = slugify(slug or name)
        if not resolved:
            raise BadRequestError("Slug cannot be empty")
        if await category_repository.exists(db, {"slug": resolved}, exclude_id=exclude_id):
            raise DuplicateError("A category with this slug already exists")
        return resolved

    async def create_category(
        self,
        db: AsyncSession,
        data: CategoryCreate,
    ) -> CategoryResponse:
        """새 카테고리를 생성합니다.

        Raises:
            NotFoundError: 상위 카테고리가 없을 때 (Unknown parent)
            DuplicateError: 슬러그 중복 (Slug already used)
        """
        parent_id: UUID | None = parse_optional_uuid(data.parent_id, "parent_id")
        if parent_id is not None:
            await self.get_category(db, parent_id)

        slug: str = await self._resolve_slug(db, data.name, data.slug)
        category: Category = await category_repository.create(
            db,
            {
                "parent_id": parent_id,
                "name": data.name.strip(),
                "slug": slug,
                "description": data.description,
                "is_active": data.is_active,
                "sort_order": data.sort_order,
            },
        )
        return self._to_response(category)

    async def update_category(
        self,
        db: AsyncSession,
        category_id: UUID,
        data: CategoryUpdate,
    ) -> CategoryResponse:
        """카테고리를 수정합니다.

        A category cannot be moved under itself or one of its descendants.

        Raises:
            NotFoundError: 카테고리 또는 상위 카테고리를 찾을 수 없을 때
            BadRequestError: 순환 구조가 될 때 (Would create a cycle)
            DuplicateError: 슬러그 중복 (Slug already used)
        """
        category: Category = await self.get_category(db, category_id)
        update_data: dict = data.model_dump(exclude_unset=True)

        if "parent_id" in update_data:
            parent_id: UUID | None = parse_optional_uuid(update_data["parent_id"], "parent_id")
            if parent_id is not None:
                await self.get_category(db, parent_id)
                descendants: list[UUID] = await category_repository.get_descendant_ids(db, category_id)
                if parent_id in descendants:
                    raise BadRequestError("A category cannot be its own ancestor")
            update_data["parent_id"] = parent_id

        if update_data.get("name") is not None:
            update_data["name"] = update_data["name"].strip()
        else:
            update_data.pop("name", None)

        if update_data.get("slug"):
            update_data["slug"] = await self._resolve_slug(
                db, category.name, update_data["slug"], exclude_id=category_id
            )
        else:
            update_data.pop("slug", None)

        for field in ("is_active", "sort_order"):
            if field in update_data and update_data[field] is None:
                update_data.pop(field)

        updated: Category | None = await category_repository.update(db, category_id, update_data)
        if updated is None:
            raise NotFoundError("Category not found")
        return self._to_response(updated)

    async def delete_category(
        self,
        db: AsyncSession,
        category_id: UUID,
    ) -> None:
        """카테고리를 삭제합니다.

        Raises:
            NotFoundError: 카테고리를 찾을 수 없을 때
            BadRequestError: 하위 카테고리나 상품이 있을 때
                             (Category still has children or products)
        """
        await self.get_category(db, category_id)
        if await category_repository.has_children(db, category_id):
            raise BadRequestError("Category has child categories")
        if await product_repository.count_by(db, "category_id", category_id) > 0:
            raise BadRequestError("Category still has products")
        await category_repository.delete(db, category_id)


# 싱글턴 인스턴스 — Singleton instance
category_service: CategoryService = CategoryService()
