"""
SMTP mail sink.

Sends low-stock notifications as plain-text mail. smtplib is blocking, so
delivery runs in the default thread pool.
"""

import asyncio
import smtplib
from email.message import EmailMessage

from src.config import get_logger, get_settings
from src.config.settings import MailSettings
from src.core.entities.inventory import LowStockItem
from src.core.interfaces.notifications import IMailSink

logger = get_logger(__name__)


def render_low_stock_body(items: list[LowStockItem], warehouse_name: str) -> str:
    """Plain-text body listing each item below its reorder level."""
    lines = [
        f"Low Stock Alert for {warehouse_name}",
        "",
        f"{len(items)} items are currently below their reorder level:",
        "",
    ]
    for item in items:
        lines.append(
            f"- {item.product_name} ({item.sku}): {item.available} {item.unit or 'units'} "
            f"remaining (Reorder level: {item.reorder_level})"
        )
    lines += [
        "",
        "Please review and create purchase orders as needed.",
        "",
        "Inventory Management System",
    ]
    return "\n".join(lines)


class SMTPMailSink(IMailSink):
    """Delivers operator mail through a single SMTP relay."""

    def __init__(self, settings: MailSettings | None = None):
        self.settings = settings or get_settings().mail

    def build_low_stock_message(
        self,
        recipients: list[str],
        items: list[LowStockItem],
        warehouse_name: str,
    ) -> EmailMessage:
        message = EmailMessage()
        message["Subject"] = f"Low Stock Alert - {len(items)} Items Below Reorder Level"
        message["From"] = self.settings.sender
        message["To"] = ", ".join(recipients)
        message.set_content(render_low_stock_body(items, warehouse_name))
        return message

    async def send_low_stock_alert(
        self,
        recipients: list[str],
        items: list[LowStockItem],
        warehouse_name: str,
    ) -> bool:
        if not self.settings.enabled:
            logger.info(
                "mail_disabled",
                recipients=len(recipients),
                items=len(items),
                warehouse=warehouse_name,
            )
            return False
        if not recipients or not items:
            return False

        message = self.build_low_stock_message(recipients, items, warehouse_name)
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, self._send_sync, message)

        logger.info(
            "low_stock_mail_sent",
            recipients=len(recipients),
            items=len(items),
            warehouse=warehouse_name,
        )
        return True

    def _send_sync(self, message: EmailMessage) -> None:
        s = self.settings
        with smtplib.SMTP(s.host, s.port, timeout=s.timeout) as smtp:
            if s.use_tls:
                smtp.starttls()
            if s.username and s.password:
                smtp.login(s.username, s.password)
            smtp.send_message(message)


# Singleton instance
_mail_sink: SMTPMailSink | None = None


def get_mail_sink() -> SMTPMailSink:
    """Get singleton mail sink instance."""
    global _mail_sink
    if _mail_sink is None:
        _mail_sink = SMTPMailSink()
    return _mail_sink
