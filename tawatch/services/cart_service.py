"""장바구니 서비스 — 장바구니 조회 및 항목 관리.

Cart Service — Per-customer cart reads and line management. Quantities
are checked against current stock on every change and again at checkout.
"""

from decimal import Decimal
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from tawatch.models.cart import Cart, CartItem
from tawatch.models.catalog import Product
from tawatch.repositories.cart_repository import cart_repository
from tawatch.repositories.catalog_repository import product_repository
from tawatch.schemas.cart import CartItemAdd, CartItemResponse, CartItemUpdate, CartResponse
from tawatch.services.product_service import primary_image_url
from tawatch.utils.exceptions import BadRequestError, NotFoundError
from tawatch.utils.ids import parse_uuid


class CartService:
    """장바구니 관련 비즈니스 로직을 처리하는 서비스."""

    def _item_response(self, item: CartItem) -> CartItemResponse:
        product: Product = item.product
        unit_price: Decimal = product.effective_price
        return CartItemResponse(
            id=str(item.id),
            product_id=str(product.id),
            product_name=product.name,
            product_slug=product.slug,
            sku=product.sku,
            image_url=primary_image_url(product),
            unit_price=unit_price,
            quantity=item.quantity,
            line_total=unit_price * item.quantity,
            stock_quantity=product.stock_quantity,
            is_available=product.is_active and product.stock_quantity >= item.quantity,
        )

    def _to_response(self, cart: Cart) -> CartResponse:
        items: list[CartItemResponse] = [self._item_response(i) for i in cart.items]
        return CartResponse(
            id=str(cart.id),
            items=items,
            item_count=sum(i.quantity for i in items),
            subtotal=sum((i.line_total for i in items), Decimal("0")),
        )

    async def get_cart(self, db: AsyncSession, user_id: UUID) -> CartResponse:
        """내 장바구니를 조회합니다 — 없으면 생성 (created lazily)."""
        cart: Cart = await cart_repository.get_or_create(db, user_id)
        return self._to_response(cart)

    async def _get_active_product(self, db: AsyncSession, product_id: UUID) -> Product:
        product: Product | None = await product_repository.get_by_id(db, product_id)
        if product is None:
            raise NotFoundError("Product not found")
        if not product.is_active:
            raise BadRequestError("Product is not available")
        return product

    async def add_item(
        self,
        db: AsyncSession,
        user_id: UUID,
        data: CartItemAdd,
    ) -> CartResponse:
        """장바구니에 상품을 담습니다.

        Add a product. An existing line for the same product is merged by
        adding the quantities.

        Raises:
            NotFoundError: 상품을 찾을 수 없을 때 (Product not found)
            BadRequestError: 비활성 상품 또는 재고 초과
                             (Inactive product, or quantity above stock)
        """
        product_id: UUID = parse_uuid(data.product_id, "product_id")
        product: Product = await self._get_active_product(db, product_id)
        cart: Cart = await cart_repository.get_or_create(db, user_id)

        item: CartItem | None = await cart_repository.get_item(db, cart.id, product_id=product_id)
        new_quantity: int = data.quantity + (item.quantity if item is not None else 0)
        if new_quantity > product.stock_quantity:
            raise BadRequestError(f"Only {product.stock_quantity} left in stock")

        if item is None:
            await cart_repository.add_item(db, cart.id, product_id, new_quantity)
        else:
            item.quantity = new_quantity
            await db.flush()

        return await self.get_cart(db, user_id)

    async def _get_owned_item(self, db: AsyncSession, user_id: UUID, item_id: UUID) -> CartItem:
        cart: Cart = await cart_repository.get_or_create(db, user_id)
        item: CartItem | None = await cart_repository.get_item(db, cart.id, item_id=item_id)
        if item is None:
            raise NotFoundError("Cart item not found")
        return item

    async def update_item(
        self,
        db: AsyncSession,
        user_id: UUID,
        item_id: UUID,
        data: CartItemUpdate,
    ) -> CartResponse:
        """장바구니 항목 수량을 변경합니다.

        Raises:
            NotFoundError: 내 장바구니 항목이 아닐 때 (Not a line of my cart)
            BadRequestError: 재고 초과 또는 비활성 상품 (Above stock or inactive)
        """
        item: CartItem = await self._get_owned_item(db, user_id, item_id)
        product: Product = await self._get_active_product(db, item.product_id)
        if data.quantity > product.stock_quantity:
            raise BadRequestError(f"Only {product.stock_quantity} left in stock")

        item.quantity = data.quantity
        await db.flush()
        return await self.get_cart(db, user_id)

    async def remove_item(self, db: AsyncSession, user_id: UUID, item_id: UUID) -> CartResponse:
        """장바구니 항목을 삭제합니다."""
        item: CartItem = await self._get_owned_item(db, user_id, item_id)
        await cart_repository.delete_item(db, item)
        return await self.get_cart(db, user_id)

    async def clear(self, db: AsyncSession, user_id: UUID) -> None:
        """장바구니를 비웁니다."""
        cart: Cart = await cart_repository.get_or_create(db, user_id)
        await cart_repository.clear(db, cart.id)


# 싱글턴 인스턴스 — Singleton instance
cart_service: CartService = CartService()
