"""Tests for the SMTP mail sink."""

from unittest.mock import MagicMock, patch

import pytest

from src.config.settings import MailSettings
from src.core.entities.inventory import LowStockItem
from src.infrastructure.mail import SMTPMailSink, render_low_stock_body


@pytest.fixture
def items() -> list[LowStockItem]:
    return [
        LowStockItem(
            product_name="Steel Bolt M8", sku="SKU-001", available=3, reorder_level=10, unit="pcs"
        )
    ]


def test_render_body(items):
    body = render_low_stock_body(items, "Main Warehouse")

    assert body.startswith("Low Stock Alert for Main Warehouse")
    assert "1 items are currently below their reorder level" in body
    assert "- Steel Bolt M8 (SKU-001): 3 pcs remaining (Reorder level: 10)" in body


def test_build_message(items):
    sink = SMTPMailSink(MailSettings(enabled=True, sender="stock@example.com"))

    message = sink.build_low_stock_message(["a@example.com", "b@example.com"], items, "Main")

    assert message["Subject"] == "Low Stock Alert - 1 Items Below Reorder Level"
    assert message["From"] == "stock@example.com"
    assert message["To"] == "a@example.com, b@example.com"


async def test_disabled_sink_sends_nothing(items):
    sink = SMTPMailSink(MailSettings(enabled=False))
    with patch.object(sink, "_send_sync") as send:
        assert await sink.send_low_stock_alert(["a@example.com"], items, "Main") is False
    send.assert_not_called()


async def test_no_recipients(items):
    sink = SMTPMailSink(MailSettings(enabled=True))
    with patch.object(sink, "_send_sync") as send:
        assert await sink.send_low_stock_alert([], items, "Main") is False
    send.assert_not_called()


async def test_send(items):
    sink = SMTPMailSink(MailSettings(enabled=True))
    with patch.object(sink, "_send_sync") as send:
        assert await sink.send_low_stock_alert(["a@example.com"], items, "Main") is True
    message = send.call_args.args[0]
    assert message["To"] == "a@example.com"


async def test_smtp_errors_propagate(items):
    sink = SMTPMailSink(MailSettings(enabled=True))
    with patch.object(sink, "_send_sync", side_effect=OSError("connection refused")):
        with pytest.raises(OSError):
            await sink.send_low_stock_alert(["a@example.com"], items, "Main")


def test_send_sync_uses_tls_and_login(items):
    settings = MailSettings(enabled=True, host="smtp.example.com", username="u", password="p")
    sink = SMTPMailSink(settings)
    message = sink.build_low_stock_message(["a@example.com"], items, "Main")

    with patch("src.infrastructure.mail.smtp_sink.smtplib.SMTP") as smtp_class:
        smtp = MagicMock()
        smtp_class.return_value.__enter__.return_value = smtp
        sink._send_sync(message)

    smtp_class.assert_called_once_with("smtp.example.com", 587, timeout=10.0)
    smtp.starttls.assert_called_once()
    smtp.login.assert_called_once_with("u", "p")
    smtp.send_message.assert_called_once_with(message)
