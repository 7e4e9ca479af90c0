"""테스트 인프라 — 인메모리 SQLite DB, 세션, httpx 클라이언트 픽스처.

Test infrastructure — In-memory SQLite (aiosqlite) database, session, and
httpx client fixtures. Every test gets a fresh schema; the app's get_db
dependency is overridden to share the test session.
"""

import os

# tawatch 설정은 임포트 시점에 읽히므로 먼저 환경 변수를 지정
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ.setdefault("MOMO_PARTNER_CODE", "MOMOTEST")
os.environ.setdefault("MOMO_ACCESS_KEY", "test-access-key")
os.environ.setdefault("MOMO_SECRET_KEY", "test-secret")
os.environ.setdefault("AXIOM_API_TOKEN", "")
os.environ.setdefault("SMTP_USER", "")
os.environ.setdefault("AWS_ACCESS_KEY_ID", "")

from collections.abc import AsyncGenerator
from decimal import Decimal
from unittest.mock import AsyncMock, patch

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from tawatch.config import settings
from tawatch.database import Base, get_db
from tawatch.main import app
from tawatch.models import *  # noqa: F401,F403 — register all models with metadata
from tawatch.utils import momo
from tawatch.utils.jwt import create_access_token
from tawatch.utils.password import hash_password

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


def _enable_foreign_keys(dbapi_connection, connection_record) -> None:
    """SQLite 외래 키 제약 활성화 (off by default)."""
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


# ---------------------------------------------------------------------------
# Function-scoped: 엔진, 세션, 클라이언트
# ---------------------------------------------------------------------------
@pytest_asyncio.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """테스트용 async 엔진 — 테스트마다 새 스키마."""
    eng = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    event.listen(eng.sync_engine, "connect", _enable_foreign_keys)

    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield eng
    await eng.dispose()


@pytest_asyncio.fixture
async def db(engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """각 테스트에 격리된 DB 세션을 제공합니다."""
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(db: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """FastAPI 테스트 클라이언트 — DB 세션을 오버라이드합니다."""
    async def _override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db

    app.dependency_overrides[get_db] = _override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# 헬퍼 픽스처: 테스트용 데이터 생성
# ---------------------------------------------------------------------------
@pytest_asyncio.fixture
async def roles(db: AsyncSession):
    """기본 3개 역할을 생성합니다."""
    from tawatch.models.user import Role
    result = {}
    for name, level in [("admin", 1), ("staff", 2), ("customer", 3)]:
        role = Role(name=name, level=level)
        db.add(role)
        await db.flush()
        await db.refresh(role)
        result[name] = role
    return result


async def _make_user(db: AsyncSession, role, email: str, full_name: str, password: str):
    from tawatch.models.user import User
    user = User(
        role_id=role.id,
        email=email,
        full_name=full_name,
        password_hash=hash_password(password),
    )
    db.add(user)
    await db.flush()
    await db.refresh(user)
    return user


@pytest_asyncio.fixture
async def admin_user(db: AsyncSession, roles):
    """관리자 사용자를 생성합니다."""
    return await _make_user(db, roles["admin"], "admin@test.com", "Test Admin", "admin123!")


@pytest_asyncio.fixture
async def staff_user(db: AsyncSession, roles):
    """직원 사용자를 생성합니다."""
    return await _make_user(db, roles["staff"], "staff@test.com", "Test Staff", "staff123!")


@pytest_asyncio.fixture
async def customer_user(db: AsyncSession, roles):
    """고객 사용자를 생성합니다."""
    return await _make_user(db, roles["customer"], "customer@test.com", "Test Customer", "customer123!")


@pytest_asyncio.fixture
async def other_customer(db: AsyncSession, roles):
    """두 번째 고객 — 소유권 검사용 (ownership checks)."""
    return await _make_user(db, roles["customer"], "other@test.com", "Other Customer", "other123!")


def make_token(user, role_name: str, role_level: int) -> str:
    """테스트용 JWT 액세스 토큰을 생성합니다."""
    return create_access_token({
        "sub": str(user.id),
        "role": role_name,
        "level": role_level,
    })


@pytest.fixture
def admin_token(admin_user) -> str:
    return make_token(admin_user, "admin", 1)


@pytest.fixture
def staff_token(staff_user) -> str:
    return make_token(staff_user, "staff", 2)


@pytest.fixture
def customer_token(customer_user) -> str:
    return make_token(customer_user, "customer", 3)


@pytest.fixture
def other_token(other_customer) -> str:
    return make_token(other_customer, "customer", 3)


def auth_header(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


# ---------------------------------------------------------------------------
# 카탈로그 픽스처
# ---------------------------------------------------------------------------
@pytest_asyncio.fixture
async def category(db: AsyncSession):
    """테스트 카테고리를 생성합니다."""
    from tawatch.models.catalog import Category
    c = Category(name="Đồng hồ nam", slug="dong-ho-nam")
    db.add(c)
    await db.flush()
    await db.refresh(c)
    return c


@pytest_asyncio.fixture
async def brand(db: AsyncSession):
    """테스트 브랜드를 생성합니다."""
    from tawatch.models.catalog import Brand
    b = Brand(name="Seiko", slug="seiko", country="Japan")
    db.add(b)
    await db.flush()
    await db.refresh(b)
    return b


async def make_product(
    db: AsyncSession,
    sku: str,
    price: str,
    stock: int = 10,
    sale_price: str | None = None,
    category=None,
    brand=None,
    is_active: bool = True,
):
    """상품을 DB에 직접 생성합니다."""
    from tawatch.models.catalog import Product
    p = Product(
        sku=sku,
        name=f"Watch {sku}",
        slug=sku.lower(),
        price=Decimal(price),
        sale_price=Decimal(sale_price) if sale_price is not None else None,
        stock_quantity=stock,
        category_id=category.id if category is not None else None,
        brand_id=brand.id if brand is not None else None,
        is_active=is_active,
    )
    db.add(p)
    await db.flush()
    await db.refresh(p)
    return p


@pytest_asyncio.fixture
async def product(db: AsyncSession, category, brand):
    """재고 10개, 정가 300,000 VND 상품."""
    return await make_product(db, "SKU-001", "300000", stock=10, category=category, brand=brand)


@pytest_asyncio.fixture
async def expensive_product(db: AsyncSession, category, brand):
    """무료 배송 기준 이상 상품 — 정가 2,000,000, 할인가 1,500,000."""
    return await make_product(
        db, "SKU-002", "2000000", stock=3, sale_price="1500000", category=category, brand=brand,
    )


# ---------------------------------------------------------------------------
# 주문 헬퍼 (Order helpers)
# ---------------------------------------------------------------------------
SHIPPING_ADDRESS: dict = {
    "recipient_name": "Nguyễn Văn A",
    "phone": "0901234567",
    "address_line": "12 Lê Lợi",
    "ward": "Bến Nghé",
    "district": "Quận 1",
    "city": "Hồ Chí Minh",
}


async def place_order(
    client: AsyncClient,
    token: str,
    product,
    quantity: int = 1,
    **checkout,
) -> dict:
    """장바구니에 담고 체크아웃 — returns the order detail JSON."""
    res = await client.post(
        "/api/v1/shop/cart/items",
        json={"product_id": str(product.id), "quantity": quantity},
        headers=auth_header(token),
    )
    assert res.status_code == 201, res.text
    body: dict = {"shipping_address": SHIPPING_ADDRESS, **checkout}
    res = await client.post("/api/v1/shop/orders/", json=body, headers=auth_header(token))
    assert res.status_code == 201, res.text
    return res.json()


async def set_order_status(client: AsyncClient, token: str, order_id: str, status: str):
    """관리자 주문 상태 변경 — returns the raw response."""
    return await client.patch(
        f"/api/v1/admin/orders/{order_id}/status",
        json={"status": status},
        headers=auth_header(token),
    )


async def deliver_order(client: AsyncClient, token: str, order_id: str) -> dict:
    """pending → confirmed → shipping → delivered."""
    for status in ("confirmed", "shipping", "delivered"):
        res = await set_order_status(client, token, order_id, status)
        assert res.status_code == 200, res.text
    return res.json()


# ---------------------------------------------------------------------------
# MoMo 헬퍼
# ---------------------------------------------------------------------------

IPN = "/api/v1/payments/momo/ipn"

MOMO_OK: dict = {
    "partnerCode": "MOMOTEST",
    "resultCode": 0,
    "message": "Thành công.",
    "payUrl": "https://test-payment.momo.vn/v2/gateway/pay?t=abc",
    "deeplink": "momo://app?action=payWithApp&t=abc",
    "qrCodeUrl": "https://test-payment.momo.vn/qr/abc",
}


def signed_ipn(order_id: str, amount: int, result_code: int = 0, **overrides) -> dict:
    """서명된 IPN 본문 생성 — Build an IPN body signed like MoMo does."""
    values: dict = {
        "partnerCode": settings.MOMO_PARTNER_CODE,
        "orderId": order_id,
        "requestId": "ipn-request-1",
        "amount": amount,
        "orderInfo": "Thanh toan don hang",
        "orderType": "momo_wallet",
        "transId": 4088878653,
        "resultCode": result_code,
        "message": "Successful." if result_code == 0 else "Transaction denied by user.",
        "payType": "qr",
        "responseTime": 1721720663942,
        "extraData": "",
    }
    values.update(overrides)
    raw: str = momo.build_raw_signature({**values, "accessKey": settings.MOMO_ACCESS_KEY}, momo.IPN_SIGNATURE_KEYS)
    values["signature"] = momo.sign(raw)
    return values


async def create_payment(client: AsyncClient, token: str, order_id: str, gateway_result=None):
    """MoMo 결제 생성 — gateway call mocked, returns (response, mock)."""
    mock = AsyncMock(return_value=gateway_result or MOMO_OK)
    with patch("tawatch.utils.momo.create_payment", mock):
        res = await client.post(f"/api/v1/shop/orders/{order_id}/payments/momo", headers=auth_header(token))
    return res, mock
