"""Outbound mail."""

from src.infrastructure.mail.smtp_sink import (
    SMTPMailSink,
    get_mail_sink,
    render_low_stock_body,
)

__all__ = ["SMTPMailSink", "get_mail_sink", "render_low_stock_body"]
