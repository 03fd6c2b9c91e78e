import re
from collections.abc import Iterable

from src.cart.rules import valid_quantities
from src.dto.offer import EventDatePage, TicketOffer
from src.seating.snapshot import StockSnapshot
from src.utils.config import settings

CATEGORY_ORDER = [
    "Catégorie 3",
    "Catégorie 2",
    "Catégorie 1",
    "Carré Or",
    "Pelouse",
    "Fosse",
]

_NUMBERED_CATEGORY = re.compile(r"Catégorie\s\d")


def extract_category(label: str) -> str:
    """Normalize a free-form category label to its display name"""
    lowered = label.lower()
    if "carré or" in lowered:
        return "Carré Or"
    if "fosse" in lowered:
        return "Fosse"
    if "pelouse" in lowered:
        return "Pelouse"
    match = _NUMBERED_CATEGORY.search(label)
    return match.group(0) if match else label


def sort_categories(categories: Iterable[str]) -> list[str]:
    # unknown labels sort first, as index() misses would
    def rank(category: str) -> int:
        return CATEGORY_ORDER.index(category) if category in CATEGORY_ORDER else -1

    return sorted(set(categories), key=lambda c: (rank(c), c))


def filter_offers(
    offers: Iterable[TicketOffer],
    zone_id: str | None = None,
    category: str | None = None,
    quantity: int | None = None,
) -> list[TicketOffer]:
    result = list(offers)
    if zone_id:
        result = [o for o in result if o.zone_id == zone_id]
    if category:
        result = [o for o in result if extract_category(o.category) == category]
    if quantity:
        result = [o for o in result if quantity in valid_quantities(o.quantity)]
    return result


def _asset_url(base: str, name: str | None) -> str | None:
    if not name:
        return None
    return f"{base.rstrip('/')}/{name}"


def build_event_page(offers: list[TicketOffer]) -> EventDatePage:
    """Everything an event-date page needs, computed once per revalidation window"""
    first = offers[0]
    return EventDatePage(
        event_slug=first.event_slug,
        event_date=first.event_date,
        event_name=first.event_name,
        location_label=f"{first.city or ''} – {first.country or ''}".strip(" –"),
        png_src=_asset_url(settings.MAP_ASSET_BASE_URL, first.map_png),
        svg_src=_asset_url(settings.MAP_ASSET_BASE_URL, first.map_svg),
        artist_logo=_asset_url(settings.ARTIST_ASSET_BASE_URL, first.artist_logo),
        offers=offers,
        stock_per_zone=StockSnapshot.from_offers(offers).to_dict(),
        categories=sort_categories(extract_category(o.category) for o in offers),
        max_quantity=max([o.quantity for o in offers] + [1]),
    )
