"""재고 서비스 — 재고 조정, 주문 예약/해제, 변동 이력.

Inventory Service — Manual stock adjustments, stock reservation at
checkout and release on cancellation. Every stock change writes one
inventory ledger row in the same transaction.
"""

from typing import Sequence
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from tawatch.models.catalog import Product
from tawatch.models.inventory import (
    REASON_ORDER_CANCELLED,
    REASON_ORDER_PLACED,
    InventoryTransaction,
)
from tawatch.models.order import Order
from tawatch.repositories.catalog_repository import product_repository
from tawatch.repositories.inventory_repository import inventory_repository
from tawatch.schemas.catalog import InventoryTransactionResponse, StockAdjustRequest
from tawatch.utils.exceptions import BadRequestError, NotFoundError
from tawatch.utils.pagination import Page


class InventoryService:
    """재고 관련 비즈니스 로직을 처리하는 서비스.

    Service handling stock levels and the inventory ledger.
    """

    def _to_response(self, entry: InventoryTransaction) -> InventoryTransactionResponse:
        return InventoryTransactionResponse(
            id=str(entry.id),
            product_id=str(entry.product_id),
            change=entry.change,
            quantity_after=entry.quantity_after,
            reason=entry.reason,
            reference_id=str(entry.reference_id) if entry.reference_id else None,
            note=entry.note,
            created_by=str(entry.created_by) if entry.created_by else None,
            created_at=entry.created_at,
        )

    async def adjust_stock(
        self,
        db: AsyncSession,
        product_id: UUID,
        data: StockAdjustRequest,
        acting_user_id: UUID,
    ) -> InventoryTransactionResponse:
        """재고를 수동 조정합니다 (입고/조정).

        Apply a manual stock change (restock or adjustment).

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            product_id: 상품 ID (Product UUID)
            data: 조정 요청 (Signed change, reason, note)
            acting_user_id: 처리자 ID (Acting staff user)

        Returns:
            InventoryTransactionResponse: 기록된 재고 변동 (Ledger row written)

        Raises:
            NotFoundError: 상품을 찾을 수 없을 때 (Product not found)
            BadRequestError: 변동량이 0이거나 재고가 음수가 될 때
                             (Zero change, or resulting stock below zero)
        """
        if data.change == 0:
            raise BadRequestError("Stock change must not be zero")

        locked: dict[UUID, Product] = await product_repository.lock_many(db, [product_id])
        product: Product | None = locked.get(product_id)
        if product is None:
            raise NotFoundError("Product not found")

        new_quantity: int = product.stock_quantity + data.change
        if new_quantity < 0:
            raise BadRequestError(
                f"Insufficient stock: {product.stock_quantity} available, change {data.change}"
            )

        product.stock_quantity = new_quantity
        entry: InventoryTransaction = await inventory_repository.record(
            db,
            product_id=product.id,
            change=data.change,
            quantity_after=new_quantity,
            reason=data.reason,
            note=data.note,
            created_by=acting_user_id,
        )
        return self._to_response(entry)

    async def list_transactions(
        self,
        db: AsyncSession,
        product_id: UUID,
        page: int,
        per_page: int,
    ) -> Page[InventoryTransactionResponse]:
        """상품별 재고 변동 이력을 조회합니다.

        Raises:
            NotFoundError: 상품을 찾을 수 없을 때 (Product not found)
        """
        if await product_repository.get_by_id(db, product_id) is None:
            raise NotFoundError("Product not found")
        entries: Sequence[InventoryTransaction]
        entries, total = await inventory_repository.list_for_product(db, product_id, page, per_page)
        return Page[InventoryTransactionResponse].build(
            [self._to_response(e) for e in entries], total, page, per_page
        )

    async def reserve(
        self,
        db: AsyncSession,
        lines: dict[UUID, int],
        order_id: UUID,
        acting_user_id: UUID | None,
    ) -> dict[UUID, Product]:
        """주문 수량만큼 재고를 차감합니다 (체크아웃).

        Reserve stock for an order: lock the product rows in id order, then
        decrement stock, bump sold_count and write order_placed ledger rows.
        Any failure raises before commit, so the whole checkout rolls back.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            lines: 상품 ID → 수량 (Product id to quantity)
            order_id: 주문 ID — 이력의 reference_id (Order id for the ledger)
            acting_user_id: 주문자 ID (Customer placing the order)

        Returns:
            dict[UUID, Product]: 잠긴 상품 (Locked products, with images loaded)

        Raises:
            BadRequestError: 상품이 없거나 비활성, 재고 부족
                             (Missing or inactive product, insufficient stock)
        """
        products: dict[UUID, Product] = await product_repository.lock_many(db, sorted(lines))

        for product_id in sorted(lines):
            quantity: int = lines[product_id]
            product: Product | None = products.get(product_id)
            if product is None or not product.is_active:
                raise BadRequestError("A product in your cart is no longer available")
            if product.stock_quantity < quantity:
                raise BadRequestError(
                    f"Insufficient stock for {product.name}: {product.stock_quantity} left"
                )

        for product_id in sorted(lines):
            quantity = lines[product_id]
            product = products[product_id]
            product.stock_quantity -= quantity
            product.sold_count += quantity
            await inventory_repository.record(
                db,
                product_id=product.id,
                change=-quantity,
                quantity_after=product.stock_quantity,
                reason=REASON_ORDER_PLACED,
                reference_id=order_id,
                created_by=acting_user_id,
            )
        return products

    async def release(
        self,
        db: AsyncSession,
        order: Order,
        acting_user_id: UUID | None,
    ) -> None:
        """취소된 주문의 재고를 복원합니다.

        Restock the quantities of a cancelled order and reverse sold_count.
        Lines whose product has since been deleted are skipped. The order's
        items must be loaded.
        """
        lines: dict[UUID, int] = {}
        for item in order.items:
            if item.product_id is not None:
                lines[item.product_id] = lines.get(item.product_id, 0) + item.quantity

        products: dict[UUID, Product] = await product_repository.lock_many(db, sorted(lines))
        for product_id in sorted(lines):
            product: Product | None = products.get(product_id)
            if product is None:
                continue
            quantity: int = lines[product_id]
            product.stock_quantity += quantity
            product.sold_count = max(product.sold_count - quantity, 0)
            await inventory_repository.record(
                db,
                product_id=product.id,
                change=quantity,
                quantity_after=product.stock_quantity,
                reason=REASON_ORDER_CANCELLED,
                reference_id=order.id,
                created_by=acting_user_id,
            )


# 싱글턴 인스턴스 — Singleton instance
inventory_service: InventoryService = InventoryService()
