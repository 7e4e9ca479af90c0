"""관리자 대시보드 라우터 — 매출/주문 집계 및 Excel 내보내기.

Admin Dashboard Router — Summary aggregates and the orders Excel export.

Permission: Staff+
"""

from datetime import datetime
from io import BytesIO
from typing import Annotated

from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse
from sqlalchemy.ext.asyncio import AsyncSession

from tawatch.api.deps import require_staff
from tawatch.database import get_db
from tawatch.models.user import User
from tawatch.schemas.dashboard import DashboardSummary
from tawatch.services.dashboard_service import dashboard_service

router: APIRouter = APIRouter()


@router.get("/summary", response_model=DashboardSummary)
async def get_summary(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_staff)],
    date_from: Annotated[datetime | None, Query()] = None,
    date_to: Annotated[datetime | None, Query()] = None,
) -> DashboardSummary:
    """대시보드 요약 — 기본 최근 30일."""
    return await dashboard_service.get_summary(db, date_from, date_to)


@router.get("/export")
async def export_orders(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_staff)],
    date_from: Annotated[datetime | None, Query()] = None,
    date_to: Annotated[datetime | None, Query()] = None,
) -> StreamingResponse:
    """기간 내 주문을 Excel 파일로 내보냅니다."""
    excel_bytes: bytes = await dashboard_service.export_orders(db, date_from, date_to)
    return StreamingResponse(
        BytesIO(excel_bytes),
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers={"Content-Disposition": "attachment; filename=orders_export.xlsx"},
    )
