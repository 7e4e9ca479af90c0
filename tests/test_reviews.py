"""리뷰 API 테스트.

Review API tests — Purchase-gated writing, one review per product, rating
aggregates and back-office moderation.
"""

from decimal import Decimal

from httpx import AsyncClient

from tests.conftest import auth_header, deliver_order, place_order

SHOP = "/api/v1/shop"
ADMIN_REVIEWS = "/api/v1/admin/reviews"


async def write_review(client: AsyncClient, token: str, product, rating: int = 5, **extra):
    return await client.post(
        f"{SHOP}/products/{product.id}/reviews",
        json={"rating": rating, **extra},
        headers=auth_header(token),
    )


async def buy_and_receive(client: AsyncClient, customer_token: str, staff_token: str, product) -> None:
    order = await place_order(client, customer_token, product)
    await deliver_order(client, staff_token, order["id"])


class TestWriteReview:
    """리뷰 작성 테스트."""

    async def test_requires_delivered_purchase(self, client: AsyncClient, customer_token, product):
        res = await write_review(client, customer_token, product)
        assert res.status_code == 403

    async def test_pending_order_not_enough(self, client: AsyncClient, customer_token, product):
        await place_order(client, customer_token, product)
        res = await write_review(client, customer_token, product)
        assert res.status_code == 403

    async def test_review_after_delivery(self, client: AsyncClient, customer_token, staff_token, product):
        await buy_and_receive(client, customer_token, staff_token, product)

        res = await write_review(client, customer_token, product, rating=4, title="Đẹp", comment="Giao nhanh")
        assert res.status_code == 201, res.text
        data = res.json()
        assert data["rating"] == 4
        assert data["author_name"]
        assert data["is_visible"] is True

        detail = (await client.get(f"{SHOP}/products/{product.id}")).json()
        assert Decimal(detail["rating_average"]) == Decimal("4.00")
        assert detail["rating_count"] == 1

    async def test_one_review_per_product(self, client: AsyncClient, customer_token, staff_token, product):
        await buy_and_receive(client, customer_token, staff_token, product)
        await write_review(client, customer_token, product)
        res = await write_review(client, customer_token, product, rating=1)
        assert res.status_code == 409

    async def test_rating_range(self, client: AsyncClient, customer_token, product):
        res = await write_review(client, customer_token, product, rating=6)
        assert res.status_code == 422

    async def test_average_of_two_reviews(
        self, client: AsyncClient, customer_token, other_token, staff_token, product,
    ):
        await buy_and_receive(client, customer_token, staff_token, product)
        await buy_and_receive(client, other_token, staff_token, product)
        await write_review(client, customer_token, product, rating=5)
        await write_review(client, other_token, product, rating=4)

        detail = (await client.get(f"{SHOP}/products/{product.id}")).json()
        assert Decimal(detail["rating_average"]) == Decimal("4.50")
        assert detail["rating_count"] == 2

        res = await client.get(f"{SHOP}/products/{product.id}/reviews")
        assert res.json()["total"] == 2


class TestOwnReview:
    """내 리뷰 수정/삭제 테스트."""

    async def test_update_and_delete(self, client: AsyncClient, customer_token, staff_token, product):
        await buy_and_receive(client, customer_token, staff_token, product)
        review = (await write_review(client, customer_token, product, rating=2)).json()

        res = await client.put(
            f"{SHOP}/reviews/{review['id']}", json={"rating": 5}, headers=auth_header(customer_token),
        )
        assert res.status_code == 200
        assert res.json()["rating"] == 5

        res = await client.delete(f"{SHOP}/reviews/{review['id']}", headers=auth_header(customer_token))
        assert res.status_code == 204

        detail = (await client.get(f"{SHOP}/products/{product.id}")).json()
        assert detail["rating_count"] == 0

    async def test_cannot_edit_others_review(
        self, client: AsyncClient, customer_token, other_token, staff_token, product,
    ):
        await buy_and_receive(client, customer_token, staff_token, product)
        review = (await write_review(client, customer_token, product)).json()

        res = await client.put(f"{SHOP}/reviews/{review['id']}", json={"rating": 1}, headers=auth_header(other_token))
        assert res.status_code == 404


class TestModeration:
    """관리자 리뷰 관리 테스트."""

    async def test_hide_review(self, client: AsyncClient, customer_token, staff_token, product):
        await buy_and_receive(client, customer_token, staff_token, product)
        review = (await write_review(client, customer_token, product, rating=1)).json()

        res = await client.patch(
            f"{ADMIN_REVIEWS}/{review['id']}/visibility",
            json={"is_visible": False},
            headers=auth_header(staff_token),
        )
        assert res.status_code == 200
        assert res.json()["is_visible"] is False

        public = (await client.get(f"{SHOP}/products/{product.id}/reviews")).json()
        assert public["total"] == 0
        detail = (await client.get(f"{SHOP}/products/{product.id}")).json()
        assert detail["rating_count"] == 0

        # 관리자 목록에는 숨김 리뷰도 포함
        res = await client.get(f"{ADMIN_REVIEWS}/", headers=auth_header(staff_token))
        assert res.json()["total"] == 1

    async def test_admin_delete(self, client: AsyncClient, customer_token, staff_token, product):
        await buy_and_receive(client, customer_token, staff_token, product)
        review = (await write_review(client, customer_token, product)).json()

        res = await client.delete(f"{ADMIN_REVIEWS}/{review['id']}", headers=auth_header(staff_token))
        assert res.status_code == 204
        res = await client.delete(f"{ADMIN_REVIEWS}/{review['id']}", headers=auth_header(staff_token))
        assert res.status_code == 404

    async def test_customer_forbidden(self, client: AsyncClient, customer_token):
        res = await client.get(f"{ADMIN_REVIEWS}/", headers=auth_header(customer_token))
        assert res.status_code == 403
