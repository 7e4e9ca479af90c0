"""장바구니 레포지토리.

Cart Repository — Per-user cart and cart line queries.
"""

from uuid import UUID

from sqlalchemy import Select, delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from tawatch.models.cart import Cart, CartItem
from tawatch.models.catalog import Product
from tawatch.repositories.base import BaseRepository


class CartRepository(BaseRepository[Cart]):
    """장바구니 레포지토리."""

    def __init__(self) -> None:
        super().__init__(Cart)

    async def get_for_user(
        self,
        db: AsyncSession,
        user_id: UUID,
    ) -> Cart | None:
        """사용자 장바구니를 항목/상품/이미지와 함께 조회합니다.

        Retrieve the user's cart with items, products and product images.
        populate_existing reloads the collection after item changes in the
        same session.
        """
        query: Select = (
            select(Cart)
            .options(
                selectinload(Cart.items)
                .selectinload(CartItem.product)
                .selectinload(Product.images)
            )
            .where(Cart.user_id == user_id)
            .execution_options(populate_existing=True)
        )
        result = await db.execute(query)
        return result.scalar_one_or_none()

    async def get_or_create(
        self,
        db: AsyncSession,
        user_id: UUID,
    ) -> Cart:
        """장바구니 조회, 없으면 생성 — Carts are created lazily."""
        cart: Cart | None = await self.get_for_user(db, user_id)
        if cart is not None:
            return cart
        cart = Cart(user_id=user_id, items=[])
        db.add(cart)
        await db.flush()
        return cart

    async def get_item(
        self,
        db: AsyncSession,
        cart_id: UUID,
        item_id: UUID | None = None,
        product_id: UUID | None = None,
    ) -> CartItem | None:
        """장바구니 항목을 ID 또는 상품 ID로 조회합니다.

        Look up a line of this cart by line id or by product id.
        """
        query: Select = select(CartItem).where(CartItem.cart_id == cart_id)
        if item_id is not None:
            query = query.where(CartItem.id == item_id)
        if product_id is not None:
            query = query.where(CartItem.product_id == product_id)
        result = await db.execute(query)
        return result.scalar_one_or_none()

    async def add_item(
        self,
        db: AsyncSession,
        cart_id: UUID,
        product_id: UUID,
        quantity: int,
    ) -> CartItem:
        item: CartItem = CartItem(cart_id=cart_id, product_id=product_id, quantity=quantity)
        db.add(item)
        await db.flush()
        return item

    async def delete_item(self, db: AsyncSession, item: CartItem) -> None:
        await db.delete(item)
        await db.flush()

    async def clear(self, db: AsyncSession, cart_id: UUID) -> None:
        """장바구니 비우기 — Remove every line of the cart."""
        await db.execute(delete(CartItem).where(CartItem.cart_id == cart_id))
        await db.flush()


# 싱글턴 인스턴스 — Singleton instance
cart_repository: CartRepository = CartRepository()
