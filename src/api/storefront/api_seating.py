from datetime import date

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from src.utils.database import get_db, db_session_context
from src.api.storefront.api_events import load_event_page
from src.seating.seating_map import SeatingMap
from src.dto import seating as seating_schemas
import logging

router = APIRouter(prefix="/events", tags=["seating"])

logger = logging.getLogger(__name__)


@router.get("/{slug}/{event_date}/map", response_model=seating_schemas.SeatingMapView)
async def read_seating_map(
    slug: str,
    event_date: date,
    hover: str | None = None,
    width: float = Query(default=800, gt=0),
    height: float = Query(default=600, gt=0),
    db: Session = Depends(get_db),
):
    """Render the zone overlay for an event date, optionally with one zone hovered"""
    db_session_context.set(db)
    page = await load_event_page(slug, event_date)
    seating_map = await SeatingMap.load(page, width=width, height=height)
    if hover and not seating_map.hover(hover):
        logger.info(f"Ignoring hover on inert or unknown zone {hover}")
    return seating_map.view()
