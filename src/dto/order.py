from datetime import date, datetime
from src.dto import BaseSchema


class OrderLine(BaseSchema):
    description: str
    event_name: str
    category: str
    quantity: int
    unit_price: float
    amount_total: float
    offer_id: str | None = None

class OrderCreate(BaseSchema):
    stripe_session_id: str
    email: str | None = None
    name: str | None = None
    lines: list[OrderLine] = []
    quantity_total: int
    price_total: float
    event_name: str | None = None
    event_date: date | None = None
    offer_ids: list[str] = []

class Order(OrderCreate):
    id: int
    created_at: datetime
