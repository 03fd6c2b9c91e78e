from datetime import date

from sqlalchemy import case, update
from src.entities.offer import TicketOffer
from src.dto.offer import EventDatePage, TicketOffer as TicketOfferSchema, TicketOfferCreate
from src.exceptions import EventDateNotFoundError, OfferNotFoundError
from src.repositories.base import BaseRepository
from src.seating.offers import build_event_page
from src.utils.cache import cache_data, invalidate_cache
from src.utils.config import settings
from src.utils.database import db_session_context
import logging

logger = logging.getLogger(__name__)

EVENT_PAGE_PREFIX = "event-page"


class OfferRepository(BaseRepository[TicketOffer, TicketOfferCreate]):
    def __init__(self):
        super().__init__(TicketOffer)

    async def list_for_event_date(self, slug: str, event_date: date) -> list[TicketOffer]:
        db = db_session_context.get()
        return (
            db.query(self.model)
            .filter(
                self.model.event_slug == slug,
                self.model.event_date == event_date,
                self.model.available.is_(True),
            )
            .order_by(self.model.price)
            .all()
        )

    @cache_data(EVENT_PAGE_PREFIX, EventDatePage, expire_time=settings.SNAPSHOT_TTL)
    async def get_event_date_page(self, slug: str, event_date: date) -> EventDatePage | None:
        """Offers of one event date together with the stock snapshot of its zones"""
        offers = await self.list_for_event_date(slug, event_date)
        if not offers:
            return None
        return build_event_page([TicketOfferSchema.model_validate(o) for o in offers])

    async def require_event_date_page(self, slug: str, event_date: date) -> EventDatePage:
        page = await self.get_event_date_page(slug, event_date)
        if page is None:
            raise EventDateNotFoundError(slug, event_date)
        return page

    async def get_offer(self, offer_id: str) -> TicketOfferSchema:
        """An offer still on sale, as shown to the client"""
        offer = await self.get(offer_id)
        if offer is None or not offer.available:
            raise OfferNotFoundError(offer_id)
        return TicketOfferSchema.model_validate(offer)

    def decrement_quantity(self, offer_id: str, quantity: int) -> bool:
        """Atomically take `quantity` units off an offer, never going below zero.

        Runs inside the caller's transaction; returns False when the offer does not exist.
        """
        db = db_session_context.get()
        result = db.execute(
            update(self.model)
            .where(self.model.id == offer_id)
            .values(
                quantity=case(
                    (self.model.quantity >= quantity, self.model.quantity - quantity),
                    else_=0,
                )
            )
            .execution_options(synchronize_session=False)
        )
        return result.rowcount > 0

    def invalidate_event_pages(self, offer_ids: list[str]) -> None:
        if not offer_ids:
            return
        db = db_session_context.get()
        rows = (
            db.query(self.model.event_slug, self.model.event_date)
            .filter(self.model.id.in_(offer_ids))
            .distinct()
            .all()
        )
        for slug, event_date in rows:
            invalidate_cache(f"{EVENT_PAGE_PREFIX}:{slug}:{event_date}")

offer_repository = OfferRepository()
