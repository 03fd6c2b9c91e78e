import logging
from decimal import ROUND_HALF_UP, Decimal

from src.cart.rules import check_addition, notice_message
from src.dto.cart import CartLine
from src.dto.checkout import PurchaseIntent
from src.dto.offer import TicketOffer
from src.exceptions import CheckoutError, ErrorCode
from src.payments.gateway import PaymentGateway, PaymentProviderError

logger = logging.getLogger(__name__)


def display_name(event_name: str, category: str, offer_id: str) -> str:
    return f"{event_name} – {category} [ID:{offer_id}]"


def to_minor_units(price: float) -> int:
    # half-up on the decimal text, 19.99 * 100 must not become 1998
    return int((Decimal(str(price)) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def to_purchase_intent(line: CartLine) -> PurchaseIntent:
    return PurchaseIntent(
        display_name=display_name(line.event_name, line.category, line.offer_id),
        unit_price_minor_units=to_minor_units(line.price),
        quantity=line.quantity,
        offer_id=line.offer_id,
    )


class CheckoutBridge:
    """Turns cart lines into a hosted payment session and hands back its URL.

    Nothing local is mutated here; the cart is only cleared by the success flow.
    """

    def __init__(self, gateway: PaymentGateway):
        self.gateway = gateway

    async def start(self, lines: list[CartLine], origin: str) -> str:
        if not lines:
            raise CheckoutError("Your cart is empty.", code=ErrorCode.EMPTY_CART)

        intents = [to_purchase_intent(line) for line in lines]
        metadata = {}
        event_dates = {line.event_date for line in lines if line.event_date}
        if len(event_dates) == 1:
            metadata["event_date"] = event_dates.pop().isoformat()

        origin = origin.rstrip("/")
        try:
            session = await self.gateway.create_session(
                intents,
                success_url=f"{origin}/success",
                cancel_url=f"{origin}/cancel",
                metadata=metadata,
            )
        except PaymentProviderError as e:
            logger.error(f"Checkout failed for {len(intents)} line(s): {e}")
            raise CheckoutError()

        logger.info(f"Checkout session {session.id} created for {len(intents)} line(s)")
        return session.url

    async def buy_now(self, offer: TicketOffer, quantity: int, origin: str) -> str:
        """Single-line checkout, held to the same stock rules as the cart"""
        check = check_addition(offer.quantity, 0, quantity)
        if not check.accepted or check.to_add != quantity:
            message, _ = notice_message(check, quantity)
            if check.accepted:
                message = f"Only {check.max_addable} tickets left for this offer."
            raise CheckoutError(message, code=ErrorCode.INVALID_QUANTITY)
        return await self.start([CartLine.from_offer(offer, quantity)], origin)
