import asyncio
from datetime import date

from src.utils.database import Base, SessionLocal, engine, db_session_context
from src.dto.offer import TicketOfferCreate
from src.repositories.offer_repository import offer_repository
from src.utils.logging_config import setup_logging

logger = setup_logging("init_db")

SAMPLE_OFFERS = [
    TicketOfferCreate(
        id="demo-fosse", event_slug="demo-tour", event_date=date(2026, 6, 12), event_name="Demo Tour",
        category="Fosse", price=59.0, quantity=40, city="Paris", country="France", zone_id="fosse",
        map_png="stade.png", map_svg="stade.svg", artist_logo="demo.png",
    ),
    TicketOfferCreate(
        id="demo-cat1", event_slug="demo-tour", event_date=date(2026, 6, 12), event_name="Demo Tour",
        category="Catégorie 1 - Tribune Est", price=89.0, quantity=12, city="Paris", country="France",
        zone_id="tribune-est", map_png="stade.png", map_svg="stade.svg", artist_logo="demo.png",
    ),
]


def init_database(with_samples: bool = False):
    """Initialize the database by creating all tables."""
    try:
        logger.info("Starting database initialization...")

        # Create all tables defined in the models
        Base.metadata.create_all(bind=engine)

        logger.info("Database tables created successfully!")

    except Exception as e:
        logger.error(f"Failed to initialize database: {e}")
        raise

    if with_samples:
        asyncio.run(seed_offers(SAMPLE_OFFERS))


async def seed_offers(offers: list[TicketOfferCreate]) -> int:
    """Insert the offers that are not stored yet, returns how many were added"""
    db = SessionLocal()
    db_session_context.set(db)
    added = 0
    try:
        for offer in offers:
            if await offer_repository.get(offer.id) is None:
                await offer_repository.create(offer)
                added += 1
        logger.info(f"Seeded {added} sample offers")
        return added
    finally:
        db.close()


if __name__ == "__main__":
    import sys
    init_database(with_samples="--samples" in sys.argv)
