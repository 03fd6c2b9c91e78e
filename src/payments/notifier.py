import html
import logging

import httpx

from src.dto.order import OrderCreate
from src.utils.config import settings

logger = logging.getLogger(__name__)


def render_confirmation(order: OrderCreate, order_id: int | None = None) -> str:
    """Minimal HTML body: the order number, one row per purchased line, then the total"""
    rows = "".join(
        f"<li>{html.escape(line.description)} × {line.quantity}: {line.amount_total:.2f} €</li>"
        for line in order.lines
    )
    greeting = f"Hello {html.escape(order.name)}," if order.name else "Hello,"
    heading = f"Thank you for your order n°{order_id}." if order_id is not None else "Thank you for your order."
    heading += " Here is your summary:"
    return (
        f"<p>{greeting}</p>"
        f"<p>{heading}</p>"
        f"<ul>{rows}</ul>"
        f"<p><strong>Total: {order.price_total:.2f} €</strong></p>"
    )


class ConfirmationNotifier:
    """Sends order confirmations through a Resend-compatible HTTP API."""

    def __init__(
        self,
        api_key: str | None = None,
        api_url: str | None = None,
        sender: str | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        self.api_key = settings.RESEND_API_KEY if api_key is None else api_key
        self.api_url = (api_url or settings.RESEND_API_URL).rstrip("/")
        self.sender = sender or settings.EMAIL_FROM
        self.client = client

    async def send_confirmation(self, email: str, order: OrderCreate, order_id: int | None = None) -> bool:
        if not self.api_key:
            logger.info(f"E-mail delivery disabled, no confirmation sent for {order.stripe_session_id}")
            return False

        payload = {
            "from": self.sender,
            "to": [email],
            "subject": f"Your order confirmation n°{order_id}" if order_id is not None else "Your order confirmation",
            "html": render_confirmation(order, order_id),
        }
        headers = {"Authorization": f"Bearer {self.api_key}"}
        try:
            if self.client is None:
                async with httpx.AsyncClient(timeout=10.0) as client:
                    response = await client.post(f"{self.api_url}/emails", json=payload, headers=headers)
            else:
                response = await self.client.post(f"{self.api_url}/emails", json=payload, headers=headers)
            response.raise_for_status()
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.error(f"Failed to send confirmation for {order.stripe_session_id}: {e}")
            return False

        logger.info(f"Confirmation e-mail sent for {order.stripe_session_id}")
        return True
