from datetime import date
from src.dto import BaseSchema


class TicketOffer(BaseSchema):
    id: str
    event_slug: str
    event_date: date
    event_name: str
    category: str
    price: float
    quantity: int
    available: bool = True
    city: str | None = None
    country: str | None = None
    zone_id: str
    map_png: str | None = None
    map_svg: str | None = None
    artist_logo: str | None = None

class TicketOfferCreate(BaseSchema):
    id: str
    event_slug: str
    event_date: date
    event_name: str
    category: str
    price: float
    quantity: int
    available: bool = True
    city: str | None = None
    country: str | None = None
    zone_id: str
    map_png: str | None = None
    map_svg: str | None = None
    artist_logo: str | None = None

class EventDatePage(BaseSchema):
    event_slug: str
    event_date: date
    event_name: str
    location_label: str
    png_src: str | None = None
    svg_src: str | None = None
    artist_logo: str | None = None
    offers: list[TicketOffer] = []
    stock_per_zone: dict[str, int] = {}
    categories: list[str] = []
    max_quantity: int = 1
