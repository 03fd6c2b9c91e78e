from datetime import date

import pytest

from src.dto.offer import EventDatePage
from src.dto.order import OrderCreate
from src.entities.offer import TicketOffer
from src.exceptions import DuplicateOrderError, EventDateNotFoundError, OfferNotFoundError
from src.repositories import newsletter_repository, offer_repository, order_repository
from src.seating.offers import build_event_page


EVENT_DATE = date(2026, 6, 12)


@pytest.mark.integration
class TestOfferRepository:
    @pytest.mark.asyncio
    async def test_lists_available_offers_by_price(self, db, seed_offer):
        seed_offer(id='b', price=80.0)
        seed_offer(id='a', price=40.0)
        seed_offer(id='hidden', price=10.0, available=False)
        seed_offer(id='other-date', event_date=date(2026, 7, 1))

        offers = await offer_repository.list_for_event_date('demo-tour', EVENT_DATE)

        assert [o.id for o in offers] == ['a', 'b']

    @pytest.mark.asyncio
    async def test_event_page_is_computed_and_cached(self, db, seed_offer, fake_redis):
        seed_offer(id='a', zone_id='fosse', quantity=6)

        page = await offer_repository.get_event_date_page('demo-tour', EVENT_DATE)

        assert isinstance(page, EventDatePage)
        assert page.stock_per_zone == {'fosse': 6}
        key, ttl, payload = fake_redis.setex.call_args.args
        assert key == 'event-page:demo-tour:2026-06-12'
        assert EventDatePage.model_validate_json(payload) == page

    @pytest.mark.asyncio
    async def test_cached_page_is_served_without_querying(self, db, fake_redis, make_offer):
        cached = build_event_page([make_offer(id='from-cache')])
        fake_redis.get.return_value = cached.model_dump_json()

        page = await offer_repository.get_event_date_page('demo-tour', EVENT_DATE)

        assert [o.id for o in page.offers] == ['from-cache']

    @pytest.mark.asyncio
    async def test_unknown_date_has_no_page(self, db):
        assert await offer_repository.get_event_date_page('demo-tour', EVENT_DATE) is None

    @pytest.mark.asyncio
    async def test_require_page_for_unknown_date(self, db):
        with pytest.raises(EventDateNotFoundError):
            await offer_repository.require_event_date_page('demo-tour', EVENT_DATE)

    @pytest.mark.asyncio
    async def test_get_offer(self, db, seed_offer):
        seed_offer(id='a', quantity=4)
        seed_offer(id='withdrawn', available=False)

        offer = await offer_repository.get_offer('a')

        assert offer.quantity == 4
        with pytest.raises(OfferNotFoundError):
            await offer_repository.get_offer('withdrawn')
        with pytest.raises(OfferNotFoundError):
            await offer_repository.get_offer('missing')

    def test_decrement_is_floored_at_zero(self, db, seed_offer):
        seed_offer(id='a', quantity=5)
        seed_offer(id='b', quantity=1)

        assert offer_repository.decrement_quantity('a', 2)
        assert offer_repository.decrement_quantity('b', 3)
        db.commit()
        db.expire_all()

        assert db.get(TicketOffer, 'a').quantity == 3
        assert db.get(TicketOffer, 'b').quantity == 0

    def test_decrement_unknown_offer(self, db):
        assert not offer_repository.decrement_quantity('missing', 1)


@pytest.mark.integration
class TestOrderRepository:
    @pytest.mark.asyncio
    async def test_add_then_find_by_session(self, db):
        order_repository.add(
            OrderCreate(stripe_session_id='cs_1', quantity_total=2, price_total=100.0, event_date=EVENT_DATE)
        )
        db.commit()

        order = await order_repository.get_by_session('cs_1')

        assert order.quantity_total == 2
        assert order.event_date == EVENT_DATE

    def test_same_session_twice_is_a_duplicate(self, db):
        order_repository.add(OrderCreate(stripe_session_id='cs_1', quantity_total=1, price_total=1.0))
        db.commit()

        with pytest.raises(DuplicateOrderError):
            order_repository.add(OrderCreate(stripe_session_id='cs_1', quantity_total=1, price_total=1.0))
        db.rollback()


@pytest.mark.integration
class TestNewsletterRepository:
    @pytest.mark.asyncio
    async def test_subscribe(self, db):
        subscription = await newsletter_repository.subscribe('fan@example.test')

        assert subscription.id is not None
        assert subscription.source == 'order'
