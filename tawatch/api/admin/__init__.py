"""관리자 API 라우터 패키지 — 모든 관리자 엔드포인트 통합.

Admin API Router package — Aggregates all back-office endpoints into a
single router for inclusion in the FastAPI application.

Included routers:
    - auth: 관리자 로그인 + 공통 토큰 엔드포인트 (Admin login, refresh, logout, me)
    - users: 사용자 관리 (User management, admin only)
    - categories / brands / products: 카탈로그 관리 (Catalog management)
    - storage: 이미지 업로드 URL (Image upload URLs)
    - coupons: 쿠폰 관리 (Coupon management, admin only)
    - orders: 주문 관리 (Order management)
    - reviews: 리뷰 관리 (Review moderation)
    - dashboard: 대시보드 집계/내보내기 (Dashboard and export)
"""

from fastapi import APIRouter

from tawatch.api.admin.auth import router as auth_router
from tawatch.api.admin.brands import router as brands_router
from tawatch.api.admin.categories import router as categories_router
from tawatch.api.admin.coupons import router as coupons_router
from tawatch.api.admin.dashboard import router as dashboard_router
from tawatch.api.admin.orders import router as orders_router
from tawatch.api.admin.products import router as products_router
from tawatch.api.admin.reviews import router as reviews_router
from tawatch.api.admin.storage import router as storage_router
from tawatch.api.admin.users import router as users_router
from tawatch.api.auth import router as common_auth_router

admin_router: APIRouter = APIRouter()

admin_router.include_router(auth_router, prefix="/auth", tags=["Admin Auth"])
admin_router.include_router(common_auth_router, prefix="/auth", tags=["Admin Auth"])
admin_router.include_router(users_router, prefix="/users", tags=["Users"])

# 카탈로그 — Catalog
admin_router.include_router(categories_router, prefix="/categories", tags=["Categories"])
admin_router.include_router(brands_router, prefix="/brands", tags=["Brands"])
admin_router.include_router(products_router, prefix="/products", tags=["Products"])
admin_router.include_router(storage_router, prefix="/storage", tags=["Storage"])

# 판매 — Sales
admin_router.include_router(coupons_router, prefix="/coupons", tags=["Coupons"])
admin_router.include_router(orders_router, prefix="/orders", tags=["Orders"])
admin_router.include_router(reviews_router, prefix="/reviews", tags=["Reviews"])
admin_router.include_router(dashboard_router, prefix="/dashboard", tags=["Dashboard"])
