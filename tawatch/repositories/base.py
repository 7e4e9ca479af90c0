"""공통 레포지토리 — 단일 모델 CRUD.

Base Repository — CRUD shared by every single-model repository. Domain
repositories subclass it and add their own queries:

    class BrandRepository(BaseRepository[Brand]):
        def __init__(self) -> None:
            super().__init__(Brand)

Writes only flush; the router owns the commit.
"""

from typing import Any, Generic, Sequence, TypeVar
from uuid import UUID

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from tawatch.database import Base
from tawatch.utils.pagination import paginate

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """모델 하나에 대한 CRUD.

    Attributes:
        model: 대상 SQLAlchemy 모델 (Mapped class this repository serves)
    """

    def __init__(self, model: type[ModelType]) -> None:
        self.model: type[ModelType] = model

    def _where_equal(self, query: Select, filters: dict[str, Any], skip_none: bool = False) -> Select:
        """컬럼 = 값 조건 추가 — unknown column names are ignored."""
        for column_name, value in filters.items():
            if skip_none and value is None:
                continue
            if hasattr(self.model, column_name):
                query = query.where(getattr(self.model, column_name) == value)
        return query

    async def get_by_id(self, db: AsyncSession, record_id: UUID) -> ModelType | None:
        result = await db.execute(select(self.model).where(self.model.id == record_id))
        return result.scalar_one_or_none()

    async def get_one_by(self, db: AsyncSession, filters: dict[str, Any]) -> ModelType | None:
        """조건에 맞는 첫 레코드 — e.g. {"slug": "seiko"}."""
        result = await db.execute(self._where_equal(select(self.model), filters).limit(1))
        return result.scalar_one_or_none()

    async def get_all(
        self,
        db: AsyncSession,
        filters: dict[str, Any] | None = None,
        order_by: Any | None = None,
    ) -> Sequence[ModelType]:
        """조건에 맞는 전체 레코드.

        Filter values of None are skipped, so optional query parameters can
        be passed straight through.
        """
        query: Select = self._where_equal(select(self.model), filters or {}, skip_none=True)
        if order_by is not None:
            query = query.order_by(order_by)
        result = await db.execute(query)
        return result.scalars().all()

    async def get_paginated(
        self,
        db: AsyncSession,
        query: Select,
        page: int = 1,
        per_page: int = 20,
    ) -> tuple[Sequence[ModelType], int]:
        """(현재 페이지 레코드, 전체 개수)."""
        return await paginate(db, query, page, per_page)

    async def create(self, db: AsyncSession, obj_data: dict[str, Any]) -> ModelType:
        """레코드 생성 — refreshed so server-side defaults are loaded."""
        obj: ModelType = self.model(**obj_data)
        db.add(obj)
        await db.flush()
        await db.refresh(obj)
        return obj

    async def update(
        self,
        db: AsyncSession,
        record_id: UUID,
        update_data: dict[str, Any],
    ) -> ModelType | None:
        """부분 업데이트.

        Args:
            update_data: 변경할 필드 (usually model_dump(exclude_unset=True);
                         None values are written as NULL)

        Returns:
            ModelType | None: 수정된 레코드, 없으면 None
        """
        obj: ModelType | None = await self.get_by_id(db, record_id)
        if obj is None:
            return None
        for field, value in update_data.items():
            if hasattr(obj, field):
                setattr(obj, field, value)
        await db.flush()
        await db.refresh(obj)
        return obj

    async def delete(self, db: AsyncSession, record_id: UUID) -> bool:
        """레코드 삭제 — False when nothing matched."""
        obj: ModelType | None = await self.get_by_id(db, record_id)
        if obj is None:
            return False
        await db.delete(obj)
        await db.flush()
        return True

    async def exists(
        self,
        db: AsyncSession,
        filters: dict[str, Any],
        exclude_id: UUID | None = None,
    ) -> bool:
        """조건에 맞는 레코드 존재 여부.

        exclude_id skips one row, used for uniqueness checks on update.
        """
        query: Select = self._where_equal(select(func.count()).select_from(self.model), filters)
        if exclude_id is not None:
            query = query.where(self.model.id != exclude_id)
        return ((await db.execute(query)).scalar() or 0) > 0
