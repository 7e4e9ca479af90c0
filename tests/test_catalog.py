"""카탈로그 API 테스트 — 카테고리, 브랜드, 상품, 이미지, 재고.

Catalog API tests — Storefront browsing (tree, search, filters, sorting)
and back-office CRUD for categories, brands, products, images and stock.
"""

import uuid
from decimal import Decimal

import pytest_asyncio
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from tests.conftest import auth_header, make_product

SHOP = "/api/v1/shop"
ADMIN = "/api/v1/admin"


# ===== Storefront =====

class TestCategoryTree:
    """카테고리 트리 조회 테스트."""

    @pytest_asyncio.fixture
    async def tree(self, db: AsyncSession, category):
        """상위 1개 + 하위 2개 (1개 비활성)."""
        from tawatch.models.catalog import Category
        automatic = Category(name="Automatic", slug="automatic", parent_id=category.id, sort_order=1)
        quartz = Category(name="Quartz", slug="quartz", parent_id=category.id, sort_order=0, is_active=False)
        db.add_all([automatic, quartz])
        await db.flush()
        return {"root": category, "automatic": automatic, "quartz": quartz}

    async def test_list_tree_active_only(self, client: AsyncClient, tree):
        res = await client.get(f"{SHOP}/categories")
        assert res.status_code == 200
        roots = res.json()
        assert [c["slug"] for c in roots] == ["dong-ho-nam"]
        assert [c["slug"] for c in roots[0]["children"]] == ["automatic"]

    async def test_get_by_slug(self, client: AsyncClient, tree):
        res = await client.get(f"{SHOP}/categories/dong-ho-nam")
        assert res.status_code == 200
        assert res.json()["name"] == "Đồng hồ nam"

    async def test_unknown_slug(self, client: AsyncClient, tree):
        res = await client.get(f"{SHOP}/categories/missing")
        assert res.status_code == 404

    async def test_search_includes_descendants(self, client: AsyncClient, db: AsyncSession, tree):
        """상위 카테고리 필터는 하위 카테고리 상품도 포함."""
        await make_product(db, "AUTO-1", "500000", category=tree["automatic"])
        await make_product(db, "ROOT-1", "400000", category=tree["root"])
        await make_product(db, "NONE-1", "400000")

        res = await client.get(f"{SHOP}/products", params={"category_id": str(tree["root"].id)})
        assert res.status_code == 200
        skus = sorted(p["sku"] for p in res.json()["items"])
        assert skus == ["AUTO-1", "ROOT-1"]


class TestProductSearch:
    """상품 검색/필터/정렬 테스트."""

    @pytest_asyncio.fixture
    async def products(self, db: AsyncSession, brand):
        return [
            await make_product(db, "CASIO-1", "900000", stock=5),
            await make_product(db, "SEIKO-1", "3000000", stock=0, sale_price="2500000", brand=brand),
            await make_product(db, "SEIKO-2", "1200000", stock=2, brand=brand),
            await make_product(db, "HIDDEN-1", "100000", is_active=False),
        ]

    async def test_inactive_products_hidden(self, client: AsyncClient, products):
        res = await client.get(f"{SHOP}/products")
        data = res.json()
        assert data["total"] == 3
        assert "HIDDEN-1" not in [p["sku"] for p in data["items"]]

    async def test_keyword_matches_sku(self, client: AsyncClient, products):
        res = await client.get(f"{SHOP}/products", params={"keyword": "seiko"})
        assert sorted(p["sku"] for p in res.json()["items"]) == ["SEIKO-1", "SEIKO-2"]

    async def test_price_filter_uses_effective_price(self, client: AsyncClient, products):
        """할인가 2,500,000 상품은 max 2,600,000 필터에 포함."""
        res = await client.get(f"{SHOP}/products", params={"min_price": "2000000", "max_price": "2600000"})
        items = res.json()["items"]
        assert [p["sku"] for p in items] == ["SEIKO-1"]
        assert Decimal(items[0]["effective_price"]) == Decimal("2500000")

    async def test_sort_by_price_asc(self, client: AsyncClient, products):
        res = await client.get(f"{SHOP}/products", params={"sort_by": "price", "sort_dir": "asc"})
        assert [p["sku"] for p in res.json()["items"]] == ["CASIO-1", "SEIKO-2", "SEIKO-1"]

    async def test_in_stock_filter(self, client: AsyncClient, products):
        res = await client.get(f"{SHOP}/products", params={"in_stock": "true"})
        assert sorted(p["sku"] for p in res.json()["items"]) == ["CASIO-1", "SEIKO-2"]

    async def test_brand_filter(self, client: AsyncClient, products, brand):
        res = await client.get(f"{SHOP}/products", params={"brand_id": str(brand.id)})
        data = res.json()
        assert data["total"] == 2
        assert all(p["brand_name"] == "Seiko" for p in data["items"])

    async def test_invalid_sort_field(self, client: AsyncClient, products):
        res = await client.get(f"{SHOP}/products", params={"sort_by": "password_hash"})
        assert res.status_code == 400

    async def test_min_above_max_price(self, client: AsyncClient, products):
        res = await client.get(f"{SHOP}/products", params={"min_price": "5", "max_price": "1"})
        assert res.status_code == 400

    async def test_pagination(self, client: AsyncClient, products):
        res = await client.get(f"{SHOP}/products", params={"per_page": 2, "page": 2})
        data = res.json()
        assert data["total"] == 3
        assert len(data["items"]) == 1

    async def test_inactive_product_detail_is_404(self, client: AsyncClient, products):
        res = await client.get(f"{SHOP}/products/{products[3].id}")
        assert res.status_code == 404

    async def test_product_by_slug(self, client: AsyncClient, products):
        res = await client.get(f"{SHOP}/products/slug/casio-1")
        assert res.status_code == 200
        assert res.json()["sku"] == "CASIO-1"


# ===== Back office: categories & brands =====

class TestAdminCategories:
    """관리자 카테고리 CRUD 테스트."""

    async def test_create_category_generates_slug(self, client: AsyncClient, staff_token):
        res = await client.post(f"{ADMIN}/categories/", json={"name": "Đồng hồ nữ"}, headers=auth_header(staff_token))
        assert res.status_code == 201, res.text
        assert res.json()["slug"] == "dong-ho-nu"

    async def test_duplicate_slug(self, client: AsyncClient, staff_token, category):
        res = await client.post(
            f"{ADMIN}/categories/",
            json={"name": "Other", "slug": "dong-ho-nam"},
            headers=auth_header(staff_token),
        )
        assert res.status_code == 409

    async def test_cannot_move_under_own_child(self, client: AsyncClient, staff_token, category):
        child = (await client.post(
            f"{ADMIN}/categories/",
            json={"name": "Child", "parent_id": str(category.id)},
            headers=auth_header(staff_token),
        )).json()
        res = await client.put(
            f"{ADMIN}/categories/{category.id}",
            json={"parent_id": child["id"]},
            headers=auth_header(staff_token),
        )
        assert res.status_code == 400

    async def test_delete_category_with_products(self, client: AsyncClient, staff_token, product, category):
        res = await client.delete(f"{ADMIN}/categories/{category.id}", headers=auth_header(staff_token))
        assert res.status_code == 400

    async def test_customer_forbidden(self, client: AsyncClient, customer_token):
        res = await client.post(f"{ADMIN}/categories/", json={"name": "X"}, headers=auth_header(customer_token))
        assert res.status_code == 403


class TestAdminBrands:
    """관리자 브랜드 CRUD 테스트."""

    async def test_create_and_list(self, client: AsyncClient, staff_token):
        res = await client.post(
            f"{ADMIN}/brands/",
            json={"name": "Orient", "country": "Japan"},
            headers=auth_header(staff_token),
        )
        assert res.status_code == 201
        assert res.json()["slug"] == "orient"

        res = await client.get(f"{SHOP}/brands")
        assert [b["name"] for b in res.json()] == ["Orient"]

    async def test_duplicate_name(self, client: AsyncClient, staff_token, brand):
        res = await client.post(f"{ADMIN}/brands/", json={"name": "Seiko"}, headers=auth_header(staff_token))
        assert res.status_code == 409

    async def test_delete_unused_brand(self, client: AsyncClient, staff_token, brand):
        res = await client.delete(f"{ADMIN}/brands/{brand.id}", headers=auth_header(staff_token))
        assert res.status_code == 204
        res = await client.get(f"{SHOP}/brands/seiko")
        assert res.status_code == 404


# ===== Back office: products =====

class TestAdminProducts:
    """관리자 상품 관리 테스트."""

    async def test_create_product_records_initial_stock(self, client: AsyncClient, staff_token, category, brand):
        res = await client.post(f"{ADMIN}/products/", json={
            "sku": "tw-100",
            "name": "Seiko 5 Sports",
            "category_id": str(category.id),
            "brand_id": str(brand.id),
            "price": "7500000",
            "sale_price": "6900000",
            "stock_quantity": 4,
            "attributes": {"movement": "automatic", "case_size_mm": 42},
        }, headers=auth_header(staff_token))
        assert res.status_code == 201, res.text
        data = res.json()
        assert data["sku"] == "TW-100"
        assert data["slug"] == "seiko-5-sports"
        assert data["category_name"] == "Đồng hồ nam"
        assert data["attributes"]["movement"] == "automatic"

        ledger = await client.get(f"{ADMIN}/products/{data['id']}/inventory", headers=auth_header(staff_token))
        entries = ledger.json()["items"]
        assert len(entries) == 1
        assert entries[0]["change"] == 4
        assert entries[0]["reason"] == "restock"

    async def test_sale_price_above_price(self, client: AsyncClient, staff_token):
        res = await client.post(f"{ADMIN}/products/", json={
            "sku": "BAD-1",
            "name": "Bad",
            "price": "100000",
            "sale_price": "200000",
        }, headers=auth_header(staff_token))
        assert res.status_code == 400

    async def test_duplicate_sku(self, client: AsyncClient, staff_token, product):
        res = await client.post(f"{ADMIN}/products/", json={
            "sku": "sku-001",
            "name": "Copy",
            "price": "100000",
        }, headers=auth_header(staff_token))
        assert res.status_code == 409

    async def test_admin_list_includes_inactive(self, client: AsyncClient, db: AsyncSession, staff_token):
        await make_product(db, "OFF-1", "100000", is_active=False)
        res = await client.get(f"{ADMIN}/products/", headers=auth_header(staff_token))
        assert res.json()["total"] == 1

    async def test_update_product(self, client: AsyncClient, staff_token, product):
        res = await client.put(
            f"{ADMIN}/products/{product.id}",
            json={"sale_price": "250000", "is_featured": True},
            headers=auth_header(staff_token),
        )
        assert res.status_code == 200
        data = res.json()
        assert Decimal(data["effective_price"]) == Decimal("250000")
        assert data["is_featured"] is True

    async def test_images_first_is_primary(self, client: AsyncClient, staff_token, product):
        """첫 이미지는 대표 이미지, 대표 변경 시 하나만 유지."""
        url = f"{ADMIN}/products/{product.id}/images"
        first = await client.post(url, json={"url": "https://cdn.test/a.jpg"}, headers=auth_header(staff_token))
        assert first.status_code == 201
        await client.post(url, json={"url": "https://cdn.test/b.jpg"}, headers=auth_header(staff_token))

        detail = (await client.get(f"{ADMIN}/products/{product.id}", headers=auth_header(staff_token))).json()
        assert detail["primary_image_url"] == "https://cdn.test/a.jpg"
        second_id = [i["id"] for i in detail["images"] if i["url"].endswith("b.jpg")][0]

        res = await client.put(f"{url}/{second_id}/primary", headers=auth_header(staff_token))
        assert res.status_code == 200
        images = res.json()["images"]
        assert [i["is_primary"] for i in images].count(True) == 1
        assert res.json()["primary_image_url"] == "https://cdn.test/b.jpg"

    async def test_stock_adjustment(self, client: AsyncClient, staff_token, product):
        res = await client.post(
            f"{ADMIN}/products/{product.id}/stock",
            json={"change": 5, "reason": "restock", "note": "New shipment"},
            headers=auth_header(staff_token),
        )
        assert res.status_code == 201
        assert res.json()["quantity_after"] == 15

    async def test_stock_cannot_go_negative(self, client: AsyncClient, staff_token, product):
        res = await client.post(
            f"{ADMIN}/products/{product.id}/stock",
            json={"change": -11},
            headers=auth_header(staff_token),
        )
        assert res.status_code == 400

    async def test_delete_product(self, client: AsyncClient, staff_token, product):
        res = await client.delete(f"{ADMIN}/products/{product.id}", headers=auth_header(staff_token))
        assert res.status_code == 204
        res = await client.get(f"{ADMIN}/products/{product.id}", headers=auth_header(staff_token))
        assert res.status_code == 404

    async def test_unknown_product(self, client: AsyncClient, staff_token):
        res = await client.get(f"{ADMIN}/products/{uuid.uuid4()}", headers=auth_header(staff_token))
        assert res.status_code == 404
