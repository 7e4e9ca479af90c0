"""스토어 API 라우터 패키지 — 모든 스토어프론트/고객 엔드포인트 통합.

Shop API Router package — Aggregates all storefront and customer-facing
endpoints into a single router for inclusion in the FastAPI application.

Included routers:
    - auth: 고객 회원가입/로그인 + 공통 토큰 엔드포인트 (Register, login, refresh, logout, me)
    - profile: 내 프로필, 비밀번호, 배송지 (Profile, password, addresses)
    - catalog: 카테고리/브랜드/상품 조회 (Public catalog reads)
    - cart: 내 장바구니 (My cart)
    - coupons: 쿠폰 확인 (Coupon preview)
    - orders: 체크아웃, 내 주문, MoMo 결제 (Checkout, my orders, MoMo)
    - reviews: 내 리뷰 (My reviews)
"""

from fastapi import APIRouter

from tawatch.api.auth import router as common_auth_router
from tawatch.api.shop.auth import router as auth_router
from tawatch.api.shop.cart import router as cart_router
from tawatch.api.shop.catalog import router as catalog_router
from tawatch.api.shop.coupons import router as coupons_router
from tawatch.api.shop.orders import router as orders_router
from tawatch.api.shop.profile import router as profile_router
from tawatch.api.shop.reviews import router as reviews_router

shop_router: APIRouter = APIRouter()

# 인증: /auth 하위 (register, login, refresh, logout, me)
shop_router.include_router(auth_router, prefix="/auth", tags=["Shop Auth"])
shop_router.include_router(common_auth_router, prefix="/auth", tags=["Shop Auth"])
# 프로필/배송지: /profile, /addresses
shop_router.include_router(profile_router, tags=["Shop Profile"])
# 카탈로그: /categories, /brands, /products (인증 불필요)
shop_router.include_router(catalog_router, tags=["Shop Catalog"])
shop_router.include_router(cart_router, prefix="/cart", tags=["Shop Cart"])
shop_router.include_router(coupons_router, prefix="/coupons", tags=["Shop Coupons"])
shop_router.include_router(orders_router, prefix="/orders", tags=["Shop Orders"])
# 리뷰: /products/{id}/reviews (작성), /reviews/{id} (수정/삭제)
shop_router.include_router(reviews_router, tags=["Shop Reviews"])
