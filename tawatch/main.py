"""FastAPI 애플리케이션 엔트리포인트 — 미들웨어 및 라우터 등록.

FastAPI application entry point — Middleware, error envelope handlers and
router registration.

Run:
    uvicorn tawatch.main:app --reload
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from tawatch.config import settings
from tawatch.middleware.axiom_logging import AxiomLoggingMiddleware
from tawatch.services.storage_service import UPLOADS_DIR
from tawatch.utils.exceptions import register_exception_handlers

app: FastAPI = FastAPI(
    title=settings.APP_NAME,
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

# Axiom API 로깅 미들웨어 — Axiom API request/response logging
# CORS보다 먼저 등록하여 모든 요청을 캡처 (Registered before CORS to capture all requests)
app.add_middleware(AxiomLoggingMiddleware)

# CORS 미들웨어 — 스토어프론트/관리자 출처만 허용 (Storefront and admin origins)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# 에러 봉투 핸들러 — {"success": false, "status", "error", "detail", "path"}
register_exception_handlers(app)


@app.get("/health")
async def health_check() -> dict[str, str]:
    """서버 상태 확인 엔드포인트.

    Health check endpoint for load balancers and monitoring.
    """
    return {"status": "ok"}


# ---------------------------------------------------------------------------
# 라우터 등록 — Router registration
# ---------------------------------------------------------------------------
# shop_router: 스토어프론트/고객 (Storefront and customer endpoints)
# admin_router: 백오피스 (Back office, staff and admin)
# payments_router: 결제 게이트웨이 콜백 (Gateway callbacks)
from tawatch.api.admin import admin_router  # noqa: E402
from tawatch.api.payments import router as payments_router  # noqa: E402
from tawatch.api.shop import shop_router  # noqa: E402

app.include_router(shop_router, prefix="/api/v1/shop")
app.include_router(admin_router, prefix="/api/v1/admin")
app.include_router(payments_router, prefix="/api/v1/payments", tags=["Payments"])

# 로컬 업로드 파일 서빙 — Local-mode product images (S3 serves them otherwise)
app.mount("/uploads", StaticFiles(directory=UPLOADS_DIR, check_dir=False), name="uploads")
