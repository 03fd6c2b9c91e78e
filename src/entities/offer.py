from sqlalchemy import Boolean, Column, Date, Float, Integer, String
from src.utils.database import Base
from src.entities import TimestampMixin


class TicketOffer(Base, TimestampMixin):
    __tablename__ = "offers"

    id = Column(String(50), primary_key=True)
    event_slug = Column(String(255), nullable=False, index=True)
    event_date = Column(Date, nullable=False, index=True)
    event_name = Column(String(255), nullable=False)
    category = Column(String(255), nullable=False)
    price = Column(Float, nullable=False)
    quantity = Column(Integer, nullable=False, default=0)
    available = Column(Boolean, nullable=False, default=True)
    city = Column(String(255))
    country = Column(String(255))
    zone_id = Column(String(100), nullable=False)
    map_png = Column(String(255))
    map_svg = Column(String(255))
    artist_logo = Column(String(255))

    def __repr__(self):
        return f"<TicketOffer(id='{self.id}', zone_id='{self.zone_id}', quantity={self.quantity})>"
