"""메일 발송 — aiosmtplib (STARTTLS).

Outgoing mail is configured with the SMTP_* settings and stays off until
both SMTP_USER and SMTP_FROM_EMAIL are set.
"""

from email.message import EmailMessage

import aiosmtplib

from tawatch.config import settings


def is_email_enabled() -> bool:
    """SMTP 설정 여부."""
    return bool(settings.SMTP_USER and settings.SMTP_FROM_EMAIL)


def build_message(to: str, subject: str, html: str, text: str | None = None) -> EmailMessage:
    """메일 메시지 생성 — plain text part first, HTML as the alternative."""
    message = EmailMessage()
    message["Subject"] = subject
    message["From"] = f"{settings.SMTP_FROM_NAME} <{settings.SMTP_FROM_EMAIL}>"
    message["To"] = to
    message.set_content(text or subject)
    message.add_alternative(html, subtype="html")
    return message


async def send_email(to: str, subject: str, html: str, text: str | None = None) -> None:
    """메일 한 통 발송.

    Raises:
        aiosmtplib.SMTPException: 서버 연결/인증/전송 실패
    """
    await aiosmtplib.send(
        build_message(to, subject, html, text),
        hostname=settings.SMTP_HOST,
        port=settings.SMTP_PORT,
        username=settings.SMTP_USER,
        password=settings.SMTP_PASSWORD,
        start_tls=True,
    )
