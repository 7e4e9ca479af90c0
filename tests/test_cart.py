"""장바구니 API 테스트.

Cart API tests — Lazy cart creation, adding and merging lines, quantity
changes against stock, removal and clearing.
"""

import uuid
from decimal import Decimal

from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from tests.conftest import auth_header, make_product

CART = "/api/v1/shop/cart"


class TestCart:
    """장바구니 기본 동작 테스트."""

    async def test_empty_cart_created_lazily(self, client: AsyncClient, customer_token):
        res = await client.get(f"{CART}/", headers=auth_header(customer_token))
        assert res.status_code == 200
        data = res.json()
        assert data["items"] == []
        assert data["item_count"] == 0
        assert Decimal(data["subtotal"]) == Decimal("0")

    async def test_cart_requires_login(self, client: AsyncClient):
        res = await client.get(f"{CART}/")
        assert res.status_code == 401

    async def test_add_item(self, client: AsyncClient, customer_token, product):
        res = await client.post(
            f"{CART}/items",
            json={"product_id": str(product.id), "quantity": 2},
            headers=auth_header(customer_token),
        )
        assert res.status_code == 201, res.text
        data = res.json()
        assert data["item_count"] == 2
        assert Decimal(data["subtotal"]) == Decimal("600000")
        assert data["items"][0]["is_available"] is True

    async def test_add_same_product_merges(self, client: AsyncClient, customer_token, product):
        """같은 상품을 다시 담으면 수량 합산."""
        for _ in range(2):
            await client.post(
                f"{CART}/items",
                json={"product_id": str(product.id), "quantity": 3},
                headers=auth_header(customer_token),
            )
        data = (await client.get(f"{CART}/", headers=auth_header(customer_token))).json()
        assert len(data["items"]) == 1
        assert data["items"][0]["quantity"] == 6

    async def test_sale_price_is_used(self, client: AsyncClient, customer_token, expensive_product):
        res = await client.post(
            f"{CART}/items",
            json={"product_id": str(expensive_product.id), "quantity": 1},
            headers=auth_header(customer_token),
        )
        assert Decimal(res.json()["items"][0]["unit_price"]) == Decimal("1500000")

    async def test_add_more_than_stock(self, client: AsyncClient, customer_token, product):
        res = await client.post(
            f"{CART}/items",
            json={"product_id": str(product.id), "quantity": 11},
            headers=auth_header(customer_token),
        )
        assert res.status_code == 400
        assert "10 left" in res.json()["detail"]

    async def test_merge_beyond_stock(self, client: AsyncClient, customer_token, product):
        await client.post(
            f"{CART}/items",
            json={"product_id": str(product.id), "quantity": 8},
            headers=auth_header(customer_token),
        )
        res = await client.post(
            f"{CART}/items",
            json={"product_id": str(product.id), "quantity": 3},
            headers=auth_header(customer_token),
        )
        assert res.status_code == 400

    async def test_add_inactive_product(self, client: AsyncClient, db: AsyncSession, customer_token):
        hidden = await make_product(db, "OFF-1", "100000", is_active=False)
        res = await client.post(
            f"{CART}/items",
            json={"product_id": str(hidden.id), "quantity": 1},
            headers=auth_header(customer_token),
        )
        assert res.status_code == 400

    async def test_add_unknown_product(self, client: AsyncClient, customer_token):
        res = await client.post(
            f"{CART}/items",
            json={"product_id": str(uuid.uuid4()), "quantity": 1},
            headers=auth_header(customer_token),
        )
        assert res.status_code == 404

    async def test_zero_quantity_rejected(self, client: AsyncClient, customer_token, product):
        res = await client.post(
            f"{CART}/items",
            json={"product_id": str(product.id), "quantity": 0},
            headers=auth_header(customer_token),
        )
        assert res.status_code == 422


class TestCartItemChanges:
    """장바구니 항목 수정/삭제 테스트."""

    async def _add(self, client: AsyncClient, token: str, product, quantity: int = 1) -> dict:
        res = await client.post(
            f"{CART}/items",
            json={"product_id": str(product.id), "quantity": quantity},
            headers=auth_header(token),
        )
        return res.json()

    async def test_update_quantity(self, client: AsyncClient, customer_token, product):
        cart = await self._add(client, customer_token, product)
        item_id = cart["items"][0]["id"]

        res = await client.put(f"{CART}/items/{item_id}", json={"quantity": 4}, headers=auth_header(customer_token))
        assert res.status_code == 200
        assert res.json()["items"][0]["quantity"] == 4

    async def test_update_above_stock(self, client: AsyncClient, customer_token, product):
        cart = await self._add(client, customer_token, product)
        item_id = cart["items"][0]["id"]
        res = await client.put(f"{CART}/items/{item_id}", json={"quantity": 50}, headers=auth_header(customer_token))
        assert res.status_code == 400

    async def test_remove_item(self, client: AsyncClient, customer_token, product, expensive_product):
        await self._add(client, customer_token, product)
        cart = await self._add(client, customer_token, expensive_product)
        item_id = [i["id"] for i in cart["items"] if i["product_id"] == str(product.id)][0]

        res = await client.delete(f"{CART}/items/{item_id}", headers=auth_header(customer_token))
        assert res.status_code == 200
        assert [i["product_id"] for i in res.json()["items"]] == [str(expensive_product.id)]

    async def test_cannot_touch_other_users_item(self, client: AsyncClient, customer_token, other_token, product):
        """다른 사용자의 장바구니 항목 → 404."""
        cart = await self._add(client, customer_token, product)
        item_id = cart["items"][0]["id"]
        res = await client.delete(f"{CART}/items/{item_id}", headers=auth_header(other_token))
        assert res.status_code == 404

    async def test_clear_cart(self, client: AsyncClient, customer_token, product):
        await self._add(client, customer_token, product, 2)
        res = await client.delete(f"{CART}/", headers=auth_header(customer_token))
        assert res.status_code == 204
        data = (await client.get(f"{CART}/", headers=auth_header(customer_token))).json()
        assert data["items"] == []
