"""공통 Pydantic 스키마 정의.

Common Pydantic schema definitions shared across API domains.
"""

from pydantic import BaseModel


class MessageResponse(BaseModel):
    """일반 메시지 응답 스키마.

    Generic message response schema.

    Attributes:
        message: 응답 메시지 (Response message text)
    """

    message: str  # 응답 메시지 (Response message)
