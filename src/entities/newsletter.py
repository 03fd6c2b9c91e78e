from sqlalchemy import Column, Integer, String
from src.utils.database import Base
from src.entities import TimestampMixin


class NewsletterSubscription(Base, TimestampMixin):
    __tablename__ = "newsletters"

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(255), nullable=False, index=True)
    source = Column(String(50), nullable=False, default="order")

    def __repr__(self):
        return f"<NewsletterSubscription(email='{self.email}', source='{self.source}')>"
