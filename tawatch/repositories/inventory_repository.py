"""재고 변동 이력 레포지토리.

Inventory Repository — Append-only stock movement ledger.
"""

from typing import Sequence
from uuid import UUID

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from tawatch.models.inventory import InventoryTransaction
from tawatch.repositories.base import BaseRepository


class InventoryRepository(BaseRepository[InventoryTransaction]):
    """재고 변동 기록 레포지토리."""

    def __init__(self) -> None:
        super().__init__(InventoryTransaction)

    async def record(
        self,
        db: AsyncSession,
        product_id: UUID,
        change: int,
        quantity_after: int,
        reason: str,
        reference_id: UUID | None = None,
        note: str | None = None,
        created_by: UUID | None = None,
    ) -> InventoryTransaction:
        """재고 변동 1건을 기록합니다.

        Append one ledger row. Flushed together with the stock update so
        both land in the same transaction.
        """
        entry: InventoryTransaction = InventoryTransaction(
            product_id=product_id,
            change=change,
            quantity_after=quantity_after,
            reason=reason,
            reference_id=reference_id,
            note=note,
            created_by=created_by,
        )
        db.add(entry)
        await db.flush()
        return entry

    async def list_for_product(
        self,
        db: AsyncSession,
        product_id: UUID,
        page: int,
        per_page: int,
    ) -> tuple[Sequence[InventoryTransaction], int]:
        """상품별 재고 변동 이력 — newest first."""
        query: Select = (
            select(InventoryTransaction)
            .where(InventoryTransaction.product_id == product_id)
            .order_by(InventoryTransaction.created_at.desc(), InventoryTransaction.id)
        )
        return await self.get_paginated(db, query, page, per_page)


# 싱글턴 인스턴스 — Singleton instance
inventory_repository: InventoryRepository = InventoryRepository()
