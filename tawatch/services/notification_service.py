"""알림 서비스 — 주문 확인 이메일.

Notification Service — Order confirmation e-mails. Runs as a FastAPI
background task after the checkout transaction has committed, so it only
receives plain response data, never ORM objects.
"""

from decimal import Decimal
from html import escape

from tawatch.config import settings
from tawatch.schemas.order import OrderDetailResponse
from tawatch.utils.email import is_email_enabled, send_email


def format_money(amount: Decimal) -> str:
    """금액 표시 — 1234567.00 -> "1,234,567 VND"."""
    return f"{amount:,.0f} {settings.CURRENCY}"


class NotificationService:
    """알림 서비스."""

    def render_order_confirmation(self, order: OrderDetailResponse) -> tuple[str, str, str]:
        """주문 확인 메일 제목/HTML/텍스트 본문을 생성합니다.

        Returns:
            tuple[str, str, str]: (subject, html, text)
        """
        subject: str = f"[{settings.SMTP_FROM_NAME}] Order {order.code} received"

        rows: str = "".join(
            "<tr>"
            f"<td>{escape(item.product_name)}</td>"
            f"<td>{item.quantity}</td>"
            f"<td style=\"text-align:right\">{format_money(item.line_total)}</td>"
            "</tr>"
            for item in order.items
        )
        address: str = ", ".join(
            part for part in (order.address_line, order.ward, order.district, order.city) if part
        )
        html: str = (
            f"<h2>Thank you for your order, {escape(order.recipient_name)}!</h2>"
            f"<p>Order code: <strong>{escape(order.code)}</strong></p>"
            "<table cellpadding=\"6\" border=\"1\" style=\"border-collapse:collapse\">"
            "<tr><th>Product</th><th>Qty</th><th>Total</th></tr>"
            f"{rows}</table>"
            f"<p>Subtotal: {format_money(order.subtotal)}<br>"
            f"Discount: -{format_money(order.discount_amount)}<br>"
            f"Shipping: {format_money(order.shipping_fee)}<br>"
            f"<strong>Total: {format_money(order.total_amount)}</strong></p>"
            f"<p>Payment method: {order.payment_method.upper()}</p>"
            f"<p>Ship to: {escape(address)} ({escape(order.phone)})</p>"
        )

        lines: list[str] = [f"Order {order.code}"]
        lines += [f"- {i.product_name} x{i.quantity}: {format_money(i.line_total)}" for i in order.items]
        lines.append(f"Total: {format_money(order.total_amount)}")
        return subject, html, "\n".join(lines)

    async def send_order_confirmation(self, to: str, order: OrderDetailResponse) -> None:
        """주문 확인 메일을 발송합니다 — SMTP 미설정 시 생략.

        Send the order confirmation; skipped when SMTP is not configured.
        """
        if not is_email_enabled():
            return
        subject, html, text = self.render_order_confirmation(order)
        await send_email(to, subject, html, text)


# 싱글턴 인스턴스 — Singleton instance
notification_service: NotificationService = NotificationService()
