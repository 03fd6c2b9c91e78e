import pytest

from init_db import SAMPLE_OFFERS, seed_offers
from src.entities.offer import TicketOffer


@pytest.mark.integration
class TestSeedOffers:
    @pytest.mark.asyncio
    async def test_seeding_is_repeatable(self, db):
        assert await seed_offers(SAMPLE_OFFERS) == len(SAMPLE_OFFERS)
        assert await seed_offers(SAMPLE_OFFERS) == 0

        assert db.query(TicketOffer).count() == len(SAMPLE_OFFERS)
