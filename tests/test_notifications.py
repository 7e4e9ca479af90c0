"""주문 확인 메일 테스트.

Order confirmation e-mail tests — rendering and the SMTP on/off switch.
"""

from datetime import datetime, timezone
from decimal import Decimal
from unittest.mock import AsyncMock, patch

from tawatch.schemas.order import OrderDetailResponse, OrderItemResponse
from tawatch.services.notification_service import format_money, notification_service

NOW = datetime(2026, 9, 1, 9, 30, tzinfo=timezone.utc)


def make_order() -> OrderDetailResponse:
    return OrderDetailResponse(
        id="6f1c2a4e-0000-0000-0000-000000000001",
        code="TW260901ABCD",
        user_id=None,
        status="pending",
        payment_method="cod",
        payment_status="unpaid",
        subtotal=Decimal("1200000"),
        discount_amount=Decimal("100000"),
        shipping_fee=Decimal("0"),
        total_amount=Decimal("1100000"),
        coupon_code="GIAM100K",
        recipient_name="Lê <Minh>",
        phone="0901234567",
        address_line="12 Lê Lợi",
        ward=None,
        district="Quận 1",
        city="Hồ Chí Minh",
        note=None,
        cancel_reason=None,
        confirmed_at=None,
        shipped_at=None,
        delivered_at=None,
        cancelled_at=None,
        created_at=NOW,
        updated_at=NOW,
        items=[
            OrderItemResponse(
                id="6f1c2a4e-0000-0000-0000-000000000002",
                product_id=None,
                product_name="Seiko 5 Sports",
                sku="SRPD55",
                image_url=None,
                unit_price=Decimal("600000"),
                quantity=2,
                line_total=Decimal("1200000"),
            ),
        ],
        history=[],
        payments=[],
    )


class TestRenderOrderConfirmation:
    """메일 본문 생성 테스트."""

    def test_format_money(self):
        assert format_money(Decimal("1234567.00")) == "1,234,567 VND"

    def test_render(self):
        subject, html, text = notification_service.render_order_confirmation(make_order())

        assert "TW260901ABCD" in subject
        assert "Seiko 5 Sports" in html
        assert "1,100,000 VND" in html
        assert "12 Lê Lợi, Quận 1, Hồ Chí Minh" in html
        assert "Seiko 5 Sports x2: 1,200,000 VND" in text

    def test_html_is_escaped(self):
        _, html, _ = notification_service.render_order_confirmation(make_order())
        assert "<Minh>" not in html
        assert "Lê &lt;Minh&gt;" in html


class TestSendOrderConfirmation:
    """SMTP 설정 여부에 따른 발송 테스트."""

    async def test_skipped_without_smtp(self):
        mock = AsyncMock()
        with patch("tawatch.services.notification_service.is_email_enabled", return_value=False), \
                patch("tawatch.services.notification_service.send_email", mock):
            await notification_service.send_order_confirmation("customer@test.com", make_order())
        mock.assert_not_awaited()

    async def test_sent_when_enabled(self):
        mock = AsyncMock()
        with patch("tawatch.services.notification_service.is_email_enabled", return_value=True), \
                patch("tawatch.services.notification_service.send_email", mock):
            await notification_service.send_order_confirmation("customer@test.com", make_order())
        mock.assert_awaited_once()
        assert mock.await_args.args[0] == "customer@test.com"
