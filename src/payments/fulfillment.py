"""Payment webhook: turns a completed payment session into stock and an order.

The live offer table is the source of truth. A delivery walks through

    received -> signature-verified -> session-type-filtered
    -> stock-decremented -> order-recorded
    -> (newsletter-recorded) -> (confirmation-sent) -> acknowledged

The decrement and the order insert share one transaction, and the unique
session id on orders makes redeliveries collide instead of double counting.
Everything after the commit is best effort.
"""

import logging
import re
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any

from sqlalchemy.exc import SQLAlchemyError

from src.dto.order import OrderCreate, OrderLine
from src.exceptions import DuplicateOrderError, WebhookSignatureError
from src.payments.gateway import (
    CHECKOUT_COMPLETED,
    CompletedSession,
    PaymentGateway,
    PaymentProviderError,
    PurchasedLine,
)
from src.payments.notifier import ConfirmationNotifier
from src.repositories import newsletter_repository, offer_repository, order_repository
from src.utils.database import db_session_context
from src.utils.observablity import WEBHOOK_EVENTS

logger = logging.getLogger(__name__)

# trailing "[ID:...]" token of a line description
OFFER_TOKEN = re.compile(r"\[ID:([^\[\]]+)\]\s*$")
DESCRIPTION_SEPARATOR = "–"


class FulfillmentState(str, Enum):
    RECEIVED = "received"
    SIGNATURE_VERIFIED = "signature-verified"
    SESSION_TYPE_FILTERED = "session-type-filtered"
    STOCK_DECREMENTED = "stock-decremented"
    ORDER_RECORDED = "order-recorded"
    NEWSLETTER_RECORDED = "newsletter-recorded"
    CONFIRMATION_SENT = "confirmation-sent"
    ACKNOWLEDGED = "acknowledged"


class WebhookOutcome(str, Enum):
    PROCESSED = "processed"
    DUPLICATE = "duplicate"
    IGNORED = "ignored"


@dataclass
class WebhookResult:
    outcome: WebhookOutcome
    session_id: str | None = None
    order_id: int | None = None
    states: list[FulfillmentState] = field(default_factory=list)


def offer_id_for(line: PurchasedLine) -> str | None:
    """Structured product metadata first, the description token as a fallback"""
    if line.offer_id:
        return line.offer_id
    match = OFFER_TOKEN.search(line.description or "")
    if match:
        logger.warning(f"Offer id recovered from description '{line.description}'")
        return match.group(1).strip()
    return None


def split_description(description: str) -> tuple[str, str]:
    """'{event} – {category} [ID:x]' -> (event, category)"""
    text = OFFER_TOKEN.sub("", description or "").strip()
    if DESCRIPTION_SEPARATOR not in text:
        return text, ""
    event_name, category = text.rsplit(DESCRIPTION_SEPARATOR, 1)
    return event_name.strip(), category.strip()


def to_order_line(line: PurchasedLine) -> OrderLine:
    event_name, category = split_description(line.description)
    quantity = line.quantity or 1
    return OrderLine(
        description=line.description,
        event_name=event_name,
        category=category,
        quantity=quantity,
        unit_price=round(line.amount_subtotal / quantity / 100, 2),
        amount_total=round(line.amount_total / 100, 2),
        offer_id=offer_id_for(line),
    )


def _metadata_date(metadata: dict[str, Any]) -> date | None:
    value = metadata.get("event_date")
    if not value:
        return None
    try:
        return date.fromisoformat(str(value))
    except ValueError:
        logger.warning(f"Ignoring malformed event_date metadata '{value}'")
        return None


def build_order(session: CompletedSession, lines: list[PurchasedLine], email: str | None) -> OrderCreate:
    order_lines = [to_order_line(line) for line in lines]
    if session.amount_total is not None:
        price_total = session.amount_total / 100
    else:
        price_total = sum(line.amount_total for line in order_lines)
    return OrderCreate(
        stripe_session_id=session.id,
        email=email,
        name=session.customer_name,
        lines=order_lines,
        quantity_total=sum(line.quantity for line in order_lines),
        price_total=round(price_total, 2),
        event_name=order_lines[0].event_name if order_lines else None,
        event_date=_metadata_date(session.metadata),
        offer_ids=list(dict.fromkeys(line.offer_id for line in order_lines if line.offer_id)),
    )


def decrements(order: OrderCreate) -> dict[str, int]:
    """Quantity to take off each offer; repeated offers are summed"""
    totals: dict[str, int] = {}
    for line in order.lines:
        if line.offer_id:
            totals[line.offer_id] = totals.get(line.offer_id, 0) + line.quantity
        else:
            logger.warning(f"No offer id for purchased line '{line.description}', stock left untouched")
    return totals


class FulfillmentWebhook:
    def __init__(
        self,
        gateway: PaymentGateway,
        notifier: ConfirmationNotifier | None = None,
        offers=offer_repository,
        orders=order_repository,
        newsletters=newsletter_repository,
    ):
        self.gateway = gateway
        self.notifier = notifier or ConfirmationNotifier()
        self.offers = offers
        self.orders = orders
        self.newsletters = newsletters

    async def handle(self, payload: bytes, signature: str | None) -> WebhookResult:
        """Process one delivery.

        Raises:
            WebhookSignatureError: Missing or invalid signature, nothing was touched.
            PaymentProviderError: Line items could not be fetched, nothing was committed.
            SQLAlchemyError: The core transaction failed and was rolled back.
        """
        states = [FulfillmentState.RECEIVED]
        try:
            if not signature:
                raise WebhookSignatureError("Missing signature header")
            event = self.gateway.construct_event(payload, signature)
        except WebhookSignatureError:
            WEBHOOK_EVENTS.labels(outcome="rejected").inc()
            raise
        states.append(FulfillmentState.SIGNATURE_VERIFIED)

        if event.type != CHECKOUT_COMPLETED or event.session is None:
            logger.info(f"Ignoring webhook event {event.id} of type {event.type}")
            return self._acknowledge(WebhookResult(WebhookOutcome.IGNORED, states=states))
        states.append(FulfillmentState.SESSION_TYPE_FILTERED)

        session = event.session
        if await self.orders.get_by_session(session.id):
            logger.info(f"Order for session {session.id} already recorded, skipping")
            return self._acknowledge(WebhookResult(WebhookOutcome.DUPLICATE, session.id, states=states))

        try:
            lines = await self.gateway.list_line_items(session.id)
            email = await self._customer_email(session)
            order_in = build_order(session, lines, email)
            order = self._record(order_in, states)
        except DuplicateOrderError:
            logger.info(f"Concurrent delivery already recorded session {session.id}")
            return self._acknowledge(WebhookResult(WebhookOutcome.DUPLICATE, session.id, states=states))
        except (PaymentProviderError, SQLAlchemyError) as e:
            logger.error(f"Fulfillment failed for session {session.id}, awaiting redelivery: {e}")
            WEBHOOK_EVENTS.labels(outcome="failed").inc()
            raise

        logger.info(f"Order {order.id} recorded for session {session.id}")
        try:
            self.offers.invalidate_event_pages(order_in.offer_ids)
        except Exception:
            logger.exception(f"Failed to invalidate event pages for session {session.id}")

        if email:
            await self._after_order(email, order_in, order.id, states)
        else:
            logger.warning(f"No customer e-mail for session {session.id}, skipping confirmation")

        return self._acknowledge(WebhookResult(WebhookOutcome.PROCESSED, session.id, order.id, states))

    async def _customer_email(self, session: CompletedSession) -> str | None:
        if session.customer_email or not session.customer_id:
            return session.customer_email
        try:
            return await self.gateway.customer_email(session.customer_id)
        except PaymentProviderError as e:
            logger.warning(f"Customer e-mail lookup failed for session {session.id}: {e}")
            return None

    def _record(self, order_in: OrderCreate, states: list[FulfillmentState]):
        db = db_session_context.get()
        try:
            for offer_id, quantity in decrements(order_in).items():
                if not self.offers.decrement_quantity(offer_id, quantity):
                    logger.warning(f"Offer {offer_id} not found, stock left untouched")
            states.append(FulfillmentState.STOCK_DECREMENTED)
            order = self.orders.add(order_in)
            db.commit()
        except (DuplicateOrderError, SQLAlchemyError):
            db.rollback()
            raise
        states.append(FulfillmentState.ORDER_RECORDED)
        return order

    async def _after_order(
        self, email: str, order_in: OrderCreate, order_id: int, states: list[FulfillmentState]
    ) -> None:
        """Follow-ups of a committed order, each one failing on its own"""
        try:
            await self.newsletters.subscribe(email)
            states.append(FulfillmentState.NEWSLETTER_RECORDED)
        except Exception:
            db_session_context.get().rollback()
            logger.exception(f"Failed to record newsletter subscription for {order_in.stripe_session_id}")

        try:
            if await self.notifier.send_confirmation(email, order_in, order_id=order_id):
                states.append(FulfillmentState.CONFIRMATION_SENT)
        except Exception:
            logger.exception(f"Failed to send confirmation for {order_in.stripe_session_id}")

    def _acknowledge(self, result: WebhookResult) -> WebhookResult:
        result.states.append(FulfillmentState.ACKNOWLEDGED)
        WEBHOOK_EVENTS.labels(outcome=result.outcome.value).inc()
        return result
