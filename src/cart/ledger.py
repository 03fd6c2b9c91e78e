import logging

from pydantic import TypeAdapter, ValidationError

from src.cart.rules import check_addition, notice_message, valid_quantities
from src.cart.storage import CART_STORAGE_KEY, CartStorage
from src.dto.cart import CartGroup, CartLine, CartNotice, CartView
from src.dto.offer import TicketOffer

logger = logging.getLogger(__name__)

_lines_adapter = TypeAdapter(list[CartLine])


class CartLedger:
    """Stock-aware cart persisted through a pluggable storage.

    The ledger is advisory: quantities are checked against the offer data the
    client was given, the webhook re-validates against live stock at payment time.
    """

    def __init__(self, storage: CartStorage, key: str = CART_STORAGE_KEY):
        self._storage = storage
        self._key = key
        self._lines: list[CartLine] = self._load()

    def _load(self) -> list[CartLine]:
        payload = self._storage.load(self._key)
        if not payload:
            return []
        try:
            return _lines_adapter.validate_json(payload)
        except ValidationError as e:
            logger.warning(f"Discarding unreadable cart payload under '{self._key}': {e}")
            return []

    def _persist(self) -> None:
        self._storage.save(self._key, _lines_adapter.dump_json(self._lines).decode("utf-8"))

    @property
    def lines(self) -> list[CartLine]:
        return list(self._lines)

    def _index_of(self, offer_id: str) -> int | None:
        for idx, line in enumerate(self._lines):
            if line.offer_id == offer_id:
                return idx
        return None

    def quantity_of(self, offer_id: str) -> int:
        idx = self._index_of(offer_id)
        return self._lines[idx].quantity if idx is not None else 0

    def valid_quantities(self, offer: TicketOffer) -> list[int]:
        return valid_quantities(offer.quantity, self.quantity_of(offer.id))

    def add_line(self, offer: TicketOffer, requested_qty: int) -> CartNotice:
        already_held = self.quantity_of(offer.id)
        check = check_addition(offer.quantity, already_held, requested_qty)
        message, dismiss_after = notice_message(check, requested_qty)
        notice = CartNotice(outcome=check.outcome, message=message, dismiss_after=dismiss_after)

        if not check.accepted:
            logger.info(f"Refused {requested_qty} x {offer.id} ({check.outcome.value}), holding {already_held}")
            return notice

        # replace, never grow in place
        line = CartLine.from_offer(offer, check.resulting_quantity)
        idx = self._index_of(offer.id)
        if idx is None:
            self._lines.append(line)
        else:
            self._lines[idx] = line
        self._persist()
        logger.info(f"Cart now holds {line.quantity} x {offer.id}")
        return notice

    def remove_line(self, offer_id: str) -> None:
        self._lines = [line for line in self._lines if line.offer_id != offer_id]
        self._persist()

    def clear(self) -> None:
        self._lines = []
        self._storage.remove(self._key)

    def total(self) -> float:
        return round(sum(line.price * line.quantity for line in self._lines), 2)

    def quantity_total(self) -> int:
        return sum(line.quantity for line in self._lines)

    def groups(self) -> list[CartGroup]:
        """Lines grouped by event and date, in the order the events were first added"""
        groups: dict[tuple, CartGroup] = {}
        for line in self._lines:
            key = (line.event_name, line.event_date)
            if key not in groups:
                groups[key] = CartGroup(
                    event_name=line.event_name,
                    event_date=line.event_date,
                    city=line.city,
                    country=line.country,
                    artist_logo=line.artist_logo,
                    lines=[],
                )
            groups[key].lines.append(line)
        return list(groups.values())

    def view(self) -> CartView:
        return CartView(
            lines=self.lines,
            groups=self.groups(),
            quantity_total=self.quantity_total(),
            total=self.total(),
        )
