"""스토리지 서비스 — 상품 이미지 S3 또는 로컬 파일 저장.

Storage Service — S3 presigned URLs or local file storage for product
images. Switches to local mode automatically when AWS keys are empty.
Uploads land under temp/ first; finalize_upload() moves them to their
final key once the image row is saved.
"""

import shutil
import uuid
from datetime import datetime, timezone
from pathlib import Path, PurePosixPath

from tawatch.config import settings
from tawatch.utils.exceptions import BadRequestError

# 로컬 업로드 디렉토리 — .env의 LOCAL_UPLOADS_DIR 또는 <project>/uploads/
_PROJECT_ROOT: Path = Path(__file__).resolve().parent.parent.parent
UPLOADS_DIR: Path = Path(settings.LOCAL_UPLOADS_DIR) if settings.LOCAL_UPLOADS_DIR else _PROJECT_ROOT / "uploads"

# 허용 이미지 확장자 — Accepted image extensions
ALLOWED_EXTENSIONS: frozenset[str] = frozenset({"jpg", "jpeg", "png", "webp", "gif"})


class StorageService:
    """파일 업로드 서비스 — S3 또는 로컬 모드 자동 선택."""

    def __init__(self) -> None:
        self._client = None

    @property
    def is_local(self) -> bool:
        return not settings.AWS_ACCESS_KEY_ID or not settings.AWS_S3_BUCKET

    @property
    def client(self):
        if self.is_local:
            return None
        if self._client is None:
            import boto3
            from botocore.config import Config as BotoConfig

            self._client = boto3.client(
                "s3",
                region_name=settings.AWS_S3_REGION,
                aws_access_key_id=settings.AWS_ACCESS_KEY_ID,
                aws_secret_access_key=settings.AWS_SECRET_ACCESS_KEY,
                config=BotoConfig(signature_version="s3v4"),
            )
        return self._client

    @property
    def _public_prefix(self) -> str:
        """공개 파일 URL 접두사 — Public URL prefix for stored keys."""
        if self.is_local:
            return f"{settings.PUBLIC_BASE_URL.rstrip('/')}/uploads/"
        return f"https://{settings.AWS_S3_BUCKET}.s3.{settings.AWS_S3_REGION}.amazonaws.com/"

    def _generate_key(self, filename: str, folder: str) -> str:
        ext = filename.rsplit(".", 1)[-1].lower() if "." in filename else ""
        if ext not in ALLOWED_EXTENSIONS:
            raise BadRequestError(f"Unsupported image type: .{ext or '?'}")
        date_prefix = datetime.now(timezone.utc).strftime("%Y/%m/%d")
        return f"temp/{folder}/{date_prefix}/{uuid.uuid4().hex}.{ext}"

    def generate_presigned_upload_url(
        self,
        filename: str,
        content_type: str,
        folder: str = "products",
        expires: int = 3600,
    ) -> dict[str, str]:
        """presigned PUT URL과 temp file URL을 반환합니다.

        Return a PUT URL and the temporary public URL of the object.
        In local mode the PUT URL points at the local upload endpoint.
        """
        if not content_type.startswith("image/"):
            raise BadRequestError("Only image uploads are allowed")
        key = self._generate_key(filename, folder)
        file_url = f"{self._public_prefix}{key}"

        if self.is_local:
            upload_url = f"{settings.PUBLIC_BASE_URL.rstrip('/')}/api/v1/admin/storage/upload/{key}"
            return {"upload_url": upload_url, "file_url": file_url, "key": key}

        upload_url = self.client.generate_presigned_url(
            "put_object",
            Params={
                "Bucket": settings.AWS_S3_BUCKET,
                "Key": key,
                "ContentType": content_type,
            },
            ExpiresIn=expires,
        )
        return {"upload_url": upload_url, "file_url": file_url, "key": key}

    @staticmethod
    def _is_temp_key(key: str) -> bool:
        """temp/ 하위의 상위 경로(..) 없는 키인지 확인."""
        parts = PurePosixPath(key).parts
        return bool(parts) and parts[0] == "temp" and ".." not in parts

    def save_local(self, key: str, data: bytes) -> str:
        """로컬 파일 저장 — temp/ 하위 이미지 키만 허용. 경로를 반환합니다.

        Store an upload in local mode. Only image keys under temp/ without
        parent-directory segments are accepted, up to MAX_UPLOAD_BYTES.
        """
        if not self.is_local or not self._is_temp_key(key):
            raise BadRequestError("Invalid upload key")
        if PurePosixPath(key).suffix.lower().lstrip(".") not in ALLOWED_EXTENSIONS:
            raise BadRequestError("Only image uploads are allowed")
        if len(data) > settings.MAX_UPLOAD_BYTES:
            raise BadRequestError("File is too large")
        path = UPLOADS_DIR / key
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        return str(path)

    def _extract_key(self, file_url: str) -> str | None:
        """file URL에서 storage key를 추출합니다."""
        prefix = self._public_prefix
        if file_url.startswith(prefix):
            return file_url[len(prefix):]
        return None

    def finalize_upload(self, file_url: str) -> str:
        """temp 파일을 최종 위치로 이동합니다. 최종 file_url을 반환합니다.

        URLs outside this storage or not under temp/ are returned unchanged,
        as are local temp files that were never uploaded.
        """
        key = self._extract_key(file_url)
        if not key or not key.startswith("temp/"):
            return file_url
        if not self._is_temp_key(key):
            raise BadRequestError("Invalid image URL")

        final_key = key[len("temp/"):]

        if self.is_local:
            src = UPLOADS_DIR / key
            if not src.exists():
                return file_url
            dst = UPLOADS_DIR / final_key
            dst.parent.mkdir(parents=True, exist_ok=True)
            shutil.move(str(src), str(dst))
            return f"{self._public_prefix}{final_key}"

        self.client.copy_object(
            Bucket=settings.AWS_S3_BUCKET,
            Key=final_key,
            CopySource={"Bucket": settings.AWS_S3_BUCKET, "Key": key},
        )
        self.client.delete_object(Bucket=settings.AWS_S3_BUCKET, Key=key)
        return f"{self._public_prefix}{final_key}"


storage_service: StorageService = StorageService()
