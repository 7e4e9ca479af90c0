"""리프레시 토큰 모델.

Refresh tokens are stored as SHA-256 digests; the raw JWT only ever lives
on the client. A row is deleted when its token is rotated or revoked.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, ForeignKey, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from tawatch.database import Base


class RefreshToken(Base):
    """발급된 리프레시 토큰.

    Attributes:
        token_hash: 토큰 SHA-256 hex (Digest of the issued JWT)
        expires_at: 만료 일시, JWT exp와 동일 (Same instant as the JWT exp claim)
    """

    __tablename__ = "refresh_tokens"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    token_hash: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    user = relationship("User", back_populates="refresh_tokens")
