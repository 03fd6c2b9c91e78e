from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import TIMESTAMP, func
from datetime import datetime



class TimestampMixin:
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        default=func.now(),
        nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        default=func.now(),
        onupdate=func.now(),
        nullable=False
    )


# registered on Base once the mixin exists, whichever module is imported first
from src.entities.offer import TicketOffer  # noqa: E402
from src.entities.order import Order  # noqa: E402
from src.entities.newsletter import NewsletterSubscription  # noqa: E402
