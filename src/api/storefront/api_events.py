from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
from src.utils.database import get_db, db_session_context
from src.exceptions import EventDateNotFoundError
from src.repositories.offer_repository import offer_repository
from src.seating.offers import filter_offers
from src.dto import offer as offer_schemas
import logging

router = APIRouter(prefix="/events", tags=["events"])

logger = logging.getLogger(__name__)


async def load_event_page(slug: str, event_date: date) -> offer_schemas.EventDatePage:
    try:
        return await offer_repository.require_event_date_page(slug, event_date)
    except EventDateNotFoundError as e:
        logger.error(f"No offers for {slug} on {event_date}")
        raise HTTPException(status_code=404, detail=e.message)


@router.get("/{slug}/{event_date}", response_model=offer_schemas.EventDatePage)
async def read_event_date(slug: str, event_date: date, db: Session = Depends(get_db)):
    db_session_context.set(db)
    return await load_event_page(slug, event_date)


@router.get("/{slug}/{event_date}/offers", response_model=list[offer_schemas.TicketOffer])
async def read_offers(
    slug: str,
    event_date: date,
    zone: str | None = None,
    category: str | None = None,
    quantity: int | None = Query(default=None, ge=1),
    db: Session = Depends(get_db),
):
    db_session_context.set(db)
    page = await load_event_page(slug, event_date)
    return filter_offers(page.offers, zone_id=zone, category=category, quantity=quantity)
