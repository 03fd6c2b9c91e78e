from sqlalchemy import JSON, Column, Date, Float, Integer, String
from src.utils.database import Base
from src.entities import TimestampMixin


class Order(Base, TimestampMixin):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, autoincrement=True)
    # one order per completed payment session; redeliveries collide here
    stripe_session_id = Column(String(255), nullable=False, unique=True)
    email = Column(String(255))
    name = Column(String(255))
    lines = Column(JSON, nullable=False, default=list)
    quantity_total = Column(Integer, nullable=False)
    price_total = Column(Float, nullable=False)
    event_name = Column(String(255))
    event_date = Column(Date)
    offer_ids = Column(JSON, nullable=False, default=list)

    def __repr__(self):
        return f"<Order(id={self.id}, stripe_session_id='{self.stripe_session_id}')>"
