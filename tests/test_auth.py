"""인증 API 테스트 — 회원가입, 로그인, 토큰 갱신, 로그아웃, /me 엔드포인트.

Auth API tests — Registration, storefront and back-office login, refresh
token rotation, logout and /me.
"""

from httpx import AsyncClient

from tests.conftest import auth_header

SHOP_AUTH = "/api/v1/shop/auth"
ADMIN_AUTH = "/api/v1/admin/auth"


# ===== Register =====

class TestRegister:
    """고객 회원가입 테스트."""

    async def test_register_success(self, client: AsyncClient, roles):
        """회원가입 성공 — 토큰 쌍 발급, 고객 역할."""
        res = await client.post(f"{SHOP_AUTH}/register", json={
            "email": "New.User@Example.com",
            "password": "password123",
            "full_name": "New User",
        })
        assert res.status_code == 201, res.text
        tokens = res.json()
        assert tokens["token_type"] == "bearer"

        me = await client.get(f"{SHOP_AUTH}/me", headers=auth_header(tokens["access_token"]))
        assert me.status_code == 200
        data = me.json()
        assert data["email"] == "new.user@example.com"
        assert data["role_name"] == "customer"
        assert data["role_level"] == 3

    async def test_register_duplicate_email(self, client: AsyncClient, customer_user):
        """이미 가입된 이메일 (대소문자 무시) → 409."""
        res = await client.post(f"{SHOP_AUTH}/register", json={
            "email": "CUSTOMER@test.com",
            "password": "password123",
            "full_name": "Dup",
        })
        assert res.status_code == 409
        body = res.json()
        assert body["success"] is False
        assert body["detail"] == "Email already registered"

    async def test_register_short_password(self, client: AsyncClient, roles):
        """8자 미만 비밀번호 → 422."""
        res = await client.post(f"{SHOP_AUTH}/register", json={
            "email": "short@example.com",
            "password": "short",
            "full_name": "Short",
        })
        assert res.status_code == 422

    async def test_register_invalid_email(self, client: AsyncClient, roles):
        res = await client.post(f"{SHOP_AUTH}/register", json={
            "email": "not-an-email",
            "password": "password123",
            "full_name": "Bad Email",
        })
        assert res.status_code == 422


# ===== Shop Login =====

class TestShopLogin:
    """쇼핑몰 로그인 테스트."""

    async def test_login_success(self, client: AsyncClient, customer_user):
        res = await client.post(f"{SHOP_AUTH}/login", json={
            "email": "customer@test.com",
            "password": "customer123!",
        })
        assert res.status_code == 200
        data = res.json()
        assert "access_token" in data
        assert "refresh_token" in data

    async def test_login_wrong_password(self, client: AsyncClient, customer_user):
        res = await client.post(f"{SHOP_AUTH}/login", json={
            "email": "customer@test.com",
            "password": "wrong-password",
        })
        assert res.status_code == 401

    async def test_login_unknown_email(self, client: AsyncClient, roles):
        res = await client.post(f"{SHOP_AUTH}/login", json={
            "email": "nobody@test.com",
            "password": "whatever1",
        })
        assert res.status_code == 401

    async def test_login_inactive_user(self, client: AsyncClient, db, customer_user):
        """비활성 계정 로그인 실패."""
        customer_user.is_active = False
        await db.flush()

        res = await client.post(f"{SHOP_AUTH}/login", json={
            "email": "customer@test.com",
            "password": "customer123!",
        })
        assert res.status_code == 401


# ===== Admin Login =====

class TestAdminLogin:
    """관리자 로그인 테스트."""

    async def test_admin_login_success(self, client: AsyncClient, admin_user):
        res = await client.post(f"{ADMIN_AUTH}/login", json={
            "email": "admin@test.com",
            "password": "admin123!",
        })
        assert res.status_code == 200

    async def test_staff_login_allowed(self, client: AsyncClient, staff_user):
        res = await client.post(f"{ADMIN_AUTH}/login", json={
            "email": "staff@test.com",
            "password": "staff123!",
        })
        assert res.status_code == 200

    async def test_customer_login_rejected(self, client: AsyncClient, customer_user):
        """고객 계정으로 관리자 로그인 시 403."""
        res = await client.post(f"{ADMIN_AUTH}/login", json={
            "email": "customer@test.com",
            "password": "customer123!",
        })
        assert res.status_code == 403


# ===== Refresh / Logout =====

class TestRefreshAndLogout:
    """토큰 갱신 및 로그아웃 테스트."""

    async def _login(self, client: AsyncClient) -> dict:
        res = await client.post(f"{SHOP_AUTH}/login", json={
            "email": "customer@test.com",
            "password": "customer123!",
        })
        return res.json()

    async def test_refresh_rotates_token(self, client: AsyncClient, customer_user):
        """갱신 후 기존 리프레시 토큰은 재사용 불가."""
        tokens = await self._login(client)

        res = await client.post(f"{SHOP_AUTH}/refresh", json={"refresh_token": tokens["refresh_token"]})
        assert res.status_code == 200
        new_tokens = res.json()
        assert new_tokens["refresh_token"] != tokens["refresh_token"]

        reused = await client.post(f"{SHOP_AUTH}/refresh", json={"refresh_token": tokens["refresh_token"]})
        assert reused.status_code == 401

    async def test_refresh_invalid_token(self, client: AsyncClient, roles):
        res = await client.post(f"{SHOP_AUTH}/refresh", json={"refresh_token": "garbage"})
        assert res.status_code == 401

    async def test_logout_revokes_refresh_token(self, client: AsyncClient, customer_user):
        tokens = await self._login(client)

        res = await client.post(f"{SHOP_AUTH}/logout", json={"refresh_token": tokens["refresh_token"]})
        assert res.status_code == 204

        res = await client.post(f"{SHOP_AUTH}/refresh", json={"refresh_token": tokens["refresh_token"]})
        assert res.status_code == 401


# ===== /me =====

class TestMe:
    """현재 사용자 조회 테스트."""

    async def test_me_without_token(self, client: AsyncClient):
        res = await client.get(f"{SHOP_AUTH}/me")
        assert res.status_code == 401

    async def test_me_with_refresh_token_rejected(self, client: AsyncClient, customer_user):
        """리프레시 토큰으로는 API 접근 불가."""
        login = await client.post(f"{SHOP_AUTH}/login", json={
            "email": "customer@test.com",
            "password": "customer123!",
        })
        res = await client.get(f"{SHOP_AUTH}/me", headers=auth_header(login.json()["refresh_token"]))
        assert res.status_code == 401

    async def test_admin_me(self, client: AsyncClient, admin_token):
        res = await client.get(f"{ADMIN_AUTH}/me", headers=auth_header(admin_token))
        assert res.status_code == 200
        assert res.json()["role_name"] == "admin"
