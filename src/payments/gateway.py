"""Payment provider boundary.

The rest of the storefront only sees the plain records defined here; the
Stripe adapter converts SDK objects at the edge.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

import stripe

from src.dto.checkout import PurchaseIntent
from src.exceptions import WebhookSignatureError
from src.utils.config import settings

logger = logging.getLogger(__name__)

CHECKOUT_COMPLETED = "checkout.session.completed"


class PaymentProviderError(Exception):
    """Raised when the payment provider cannot be reached or refuses a call."""


@dataclass(frozen=True)
class HostedSession:
    id: str
    url: str


@dataclass(frozen=True)
class PurchasedLine:
    description: str
    quantity: int
    amount_total: int
    amount_subtotal: int
    offer_id: str | None = None


@dataclass(frozen=True)
class CompletedSession:
    id: str
    amount_total: int | None = None
    customer_email: str | None = None
    customer_id: str | None = None
    customer_name: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class WebhookEvent:
    id: str
    type: str
    session: CompletedSession | None = None


class PaymentGateway(ABC):
    """Interface for a hosted-checkout payment provider."""

    @abstractmethod
    async def create_session(
        self,
        intents: list[PurchaseIntent],
        success_url: str,
        cancel_url: str,
        metadata: dict[str, str] | None = None,
    ) -> HostedSession:
        ...

    @abstractmethod
    def construct_event(self, payload: bytes, signature: str) -> WebhookEvent:
        """Verify the signature and parse the event.

        Raises:
            WebhookSignatureError: If the signature or the payload is invalid.
        """
        ...

    @abstractmethod
    async def list_line_items(self, session_id: str) -> list[PurchasedLine]:
        ...

    @abstractmethod
    async def customer_email(self, customer_id: str) -> str | None:
        ...


def _as_dict(obj: Any) -> dict[str, Any]:
    if obj is None:
        return {}
    for converter in ("to_dict", "to_dict_recursive"):
        if hasattr(obj, converter):
            return dict(getattr(obj, converter)())
    return dict(obj)


def _attr(obj: Any, *path: str) -> Any:
    for name in path:
        if obj is None:
            return None
        obj = getattr(obj, name, None)
    return obj


class StripeGateway(PaymentGateway):
    def __init__(
        self,
        api_key: str | None = None,
        webhook_secret: str | None = None,
        currency: str | None = None,
    ):
        self.webhook_secret = webhook_secret or settings.STRIPE_WEBHOOK_SECRET
        self.currency = currency or settings.CURRENCY
        stripe.api_key = api_key or settings.STRIPE_SECRET_KEY

    def _line_item(self, intent: PurchaseIntent) -> dict[str, Any]:
        return {
            "price_data": {
                "currency": self.currency,
                "product_data": {
                    "name": intent.display_name,
                    "metadata": {"offer_id": intent.offer_id},
                },
                "unit_amount": intent.unit_price_minor_units,
            },
            "quantity": intent.quantity,
        }

    async def create_session(
        self,
        intents: list[PurchaseIntent],
        success_url: str,
        cancel_url: str,
        metadata: dict[str, str] | None = None,
    ) -> HostedSession:
        try:
            session = await asyncio.to_thread(
                stripe.checkout.Session.create,
                mode="payment",
                line_items=[self._line_item(intent) for intent in intents],
                success_url=success_url,
                cancel_url=cancel_url,
                customer_creation="always",
                metadata=metadata or {},
            )
        except stripe.StripeError as e:
            logger.error(f"Stripe checkout session creation failed: {e}")
            raise PaymentProviderError(str(e)) from e
        return HostedSession(id=session.id, url=session.url)

    def construct_event(self, payload: bytes, signature: str) -> WebhookEvent:
        try:
            event = stripe.Webhook.construct_event(payload, signature, self.webhook_secret)
        except stripe.SignatureVerificationError as e:
            logger.warning(f"Invalid Stripe webhook signature: {e}")
            raise WebhookSignatureError(f"Webhook Error: {e}")
        except ValueError as e:
            logger.warning(f"Unparsable Stripe webhook payload: {e}")
            raise WebhookSignatureError(f"Webhook Error: {e}")

        session = None
        if event.type == CHECKOUT_COMPLETED:
            obj = _attr(event, "data", "object")
            session = CompletedSession(
                id=obj.id,
                amount_total=_attr(obj, "amount_total"),
                customer_email=_attr(obj, "customer_email") or _attr(obj, "customer_details", "email"),
                customer_id=_attr(obj, "customer"),
                customer_name=_attr(obj, "customer_details", "name"),
                metadata=_as_dict(_attr(obj, "metadata")),
            )
        return WebhookEvent(id=event.id, type=event.type, session=session)

    async def list_line_items(self, session_id: str) -> list[PurchasedLine]:
        def fetch() -> list[PurchasedLine]:
            items = stripe.checkout.Session.list_line_items(
                session_id, limit=100, expand=["data.price.product"]
            )
            lines = []
            for item in items.auto_paging_iter():
                product_metadata = _as_dict(_attr(item, "price", "product", "metadata"))
                lines.append(
                    PurchasedLine(
                        description=_attr(item, "description") or "",
                        quantity=_attr(item, "quantity") or 1,
                        amount_total=_attr(item, "amount_total") or 0,
                        amount_subtotal=_attr(item, "amount_subtotal") or 0,
                        offer_id=product_metadata.get("offer_id"),
                    )
                )
            return lines

        try:
            return await asyncio.to_thread(fetch)
        except stripe.StripeError as e:
            logger.error(f"Failed to list line items for session {session_id}: {e}")
            raise PaymentProviderError(str(e)) from e

    async def customer_email(self, customer_id: str) -> str | None:
        try:
            customer = await asyncio.to_thread(stripe.Customer.retrieve, customer_id)
        except stripe.StripeError as e:
            logger.error(f"Failed to retrieve customer {customer_id}: {e}")
            raise PaymentProviderError(str(e)) from e
        if _attr(customer, "deleted"):
            return None
        return _attr(customer, "email")
