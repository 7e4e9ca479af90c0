"""관리자 스토리지 라우터 — presigned URL 생성 + 로컬 업로드 API.

Admin Storage Router — Generates upload URLs for product images (S3
presigned PUT, or the local PUT endpoint below when S3 is not configured).
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from tawatch.api.deps import require_staff
from tawatch.models.user import User
from tawatch.schemas.catalog import UploadUrlRequest, UploadUrlResponse
from tawatch.schemas.common import MessageResponse
from tawatch.services.storage_service import storage_service

router: APIRouter = APIRouter()


@router.post("/presigned-url", response_model=UploadUrlResponse)
async def create_presigned_url(
    data: UploadUrlRequest,
    current_user: Annotated[User, Depends(require_staff)],
) -> UploadUrlResponse:
    """presigned upload URL을 생성합니다 (S3 또는 로컬)."""
    result: dict[str, str] = storage_service.generate_presigned_upload_url(
        filename=data.filename,
        content_type=data.content_type,
    )
    return UploadUrlResponse(**result)


@router.put("/upload/{key:path}", response_model=MessageResponse)
async def upload_local(
    key: str,
    request: Request,
) -> MessageResponse:
    """로컬 모드 전용 — 파일을 서버에 직접 저장합니다.

    Local mode only. The admin UI PUTs the file here instead of S3. No
    auth header (the URL was issued to an authenticated user); only image
    keys under temp/ and bodies up to MAX_UPLOAD_BYTES are accepted.
    """
    body: bytes = await request.body()
    storage_service.save_local(key, body)
    return MessageResponse(message="Uploaded")
