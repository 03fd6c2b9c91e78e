from datetime import date
from enum import Enum

from src.dto import BaseSchema
from src.dto.offer import TicketOffer


class AddOutcome(str, Enum):
    ADDED = "added"
    STOCK_EXCEEDED = "stock_exceeded"
    SINGLE_SEAT_STRANDED = "single_seat_stranded"
    INVALID_QUANTITY = "invalid_quantity"


class CartLine(BaseSchema):
    offer_id: str
    quantity: int
    event_name: str
    event_date: date | None = None
    category: str
    price: float
    zone_id: str | None = None
    city: str | None = None
    country: str | None = None
    artist_logo: str | None = None

    @classmethod
    def from_offer(cls, offer: TicketOffer, quantity: int) -> "CartLine":
        return cls(
            offer_id=offer.id,
            quantity=quantity,
            event_name=offer.event_name,
            event_date=offer.event_date,
            category=offer.category,
            price=offer.price,
            zone_id=offer.zone_id,
            city=offer.city,
            country=offer.country,
            artist_logo=offer.artist_logo,
        )


class CartNotice(BaseSchema):
    outcome: AddOutcome
    message: str
    # seconds before the client hides the message
    dismiss_after: float = 4.0

    @property
    def accepted(self) -> bool:
        return self.outcome == AddOutcome.ADDED


class AddLineRequest(BaseSchema):
    offer_id: str
    quantity: int = 1


class CartGroup(BaseSchema):
    event_name: str
    event_date: date | None = None
    city: str | None = None
    country: str | None = None
    artist_logo: str | None = None
    lines: list[CartLine] = []


class CartView(BaseSchema):
    lines: list[CartLine] = []
    groups: list[CartGroup] = []
    quantity_total: int = 0
    total: float = 0.0


class AddLineResponse(BaseSchema):
    notice: CartNotice
    cart: CartView
