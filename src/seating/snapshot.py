from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Protocol


class _StockedOffer(Protocol):
    zone_id: str
    quantity: int


@dataclass(frozen=True)
class StockSnapshot:
    """Zone id -> units still on sale across every offer of that zone, for one event date.

    Quantities are those read when the snapshot was taken; they drive the map
    only and are re-checked at fulfillment.
    """

    stock: Mapping[str, int] = field(default_factory=dict)

    @classmethod
    def from_offers(cls, offers: Iterable[_StockedOffer]) -> "StockSnapshot":
        stock: dict[str, int] = {}
        for offer in offers:
            if not offer.zone_id:
                continue
            stock[offer.zone_id] = stock.get(offer.zone_id, 0) + max(offer.quantity, 0)
        return cls(stock=stock)

    def __contains__(self, zone_id: str) -> bool:
        return zone_id in self.stock

    def __iter__(self):
        return iter(self.stock)

    def __len__(self) -> int:
        return len(self.stock)

    def get(self, zone_id: str, default: int = 0) -> int:
        return self.stock.get(zone_id, default)

    def is_available(self, zone_id: str) -> bool:
        return self.get(zone_id) > 0

    def to_dict(self) -> dict[str, int]:
        return dict(self.stock)
