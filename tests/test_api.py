from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from main import app
from src.api.dependencies import get_cart_storage_factory, get_gateway, get_notifier
from src.cart.storage import MemoryCartStorage
from src.entities.offer import TicketOffer
from src.entities.order import Order
from src.payments.gateway import CompletedSession, PurchasedLine
from src.seating.renderer import build_overlay
from src.utils.database import get_db


VALID_SIGNATURE = 't=1,v1=valid'
EVENT_URL = '/events/demo-tour/2026-06-12'

OVERLAY = """<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 400 300">
  <g id="fosse"><rect width="100" height="50"/></g>
  <g id="tribune"><rect x="200" width="100" height="50"/></g>
</svg>"""


@pytest.fixture
def notifier():
    notifier = MagicMock()
    notifier.send_confirmation = AsyncMock(return_value=True)
    return notifier


@pytest.fixture
def carts():
    return {}


@pytest.fixture
def client(db, fake_gateway, notifier, carts):
    def storage_factory(cart_id: str) -> MemoryCartStorage:
        return carts.setdefault(cart_id, MemoryCartStorage())

    app.dependency_overrides[get_db] = lambda: db
    app.dependency_overrides[get_cart_storage_factory] = lambda: storage_factory
    app.dependency_overrides[get_gateway] = lambda: fake_gateway
    app.dependency_overrides[get_notifier] = lambda: notifier
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def offers(seed_offer):
    seed_offer(id='abc', zone_id='fosse', category='Fosse', quantity=5, price=59.0)
    seed_offer(id='def', zone_id='tribune', category='Catégorie 1 - Est', quantity=3, price=80.0)
    seed_offer(id='gone', zone_id='tribune', category='Catégorie 2 - Est', quantity=0, price=60.0)


@pytest.mark.integration
class TestEventsApi:
    def test_event_date_page(self, client, offers):
        response = client.get(EVENT_URL)

        assert response.status_code == 200
        page = response.json()
        assert page['location_label'] == 'Paris – France'
        assert page['stock_per_zone'] == {'fosse': 5, 'tribune': 3}
        assert page['categories'] == ['Catégorie 2', 'Catégorie 1', 'Fosse']

    def test_unknown_date(self, client, offers):
        response = client.get('/events/demo-tour/2030-01-01')

        assert response.status_code == 404

    def test_offers_filtered_by_zone_and_quantity(self, client, offers):
        response = client.get(f'{EVENT_URL}/offers', params={'zone': 'tribune', 'quantity': 3})

        assert response.status_code == 200
        assert [o['id'] for o in response.json()] == ['def']

    def test_offers_filtered_by_category(self, client, offers):
        response = client.get(f'{EVENT_URL}/offers', params={'category': 'Fosse'})

        assert [o['id'] for o in response.json()] == ['abc']


@pytest.mark.integration
class TestSeatingApi:
    def test_map_with_overlay(self, client, offers, monkeypatch):
        async def load_overlay(svg_src, snapshot, client=None):
            return build_overlay(OVERLAY, snapshot, crop_offset=0)

        monkeypatch.setattr('src.seating.seating_map.load_overlay', load_overlay)

        response = client.get(f'{EVENT_URL}/map', params={'hover': 'fosse'})

        assert response.status_code == 200
        view = response.json()
        assert {z['zone_id']: z['state'] for z in view['zones']} == {'fosse': 'available', 'tribune': 'available'}
        assert view['view_box'] == [0, 0, 400, 300]
        assert 'rgba(110,207,141,0.8)' in view['svg']

    def test_map_without_overlay_falls_back_to_raster(self, client, seed_offer):
        seed_offer(id='abc', map_svg=None)

        response = client.get(f'{EVENT_URL}/map')

        assert response.status_code == 200
        view = response.json()
        assert view['zones'] == []
        assert view['svg'] == ''
        assert view['png_src'] == 'https://assets.test/maps/stade.png'


@pytest.mark.integration
class TestCartApi:
    def test_add_line(self, client, offers):
        response = client.post('/cart/c1/lines', json={'offer_id': 'abc', 'quantity': 2})

        assert response.status_code == 200
        body = response.json()
        assert body['notice']['outcome'] == 'added'
        assert body['cart']['quantity_total'] == 2
        assert body['cart']['total'] == 118.0

    def test_stranding_a_seat_is_refused(self, client, offers):
        response = client.post('/cart/c1/lines', json={'offer_id': 'def', 'quantity': 2})

        body = response.json()
        assert body['notice']['outcome'] == 'single_seat_stranded'
        assert body['notice']['dismiss_after'] == 5.5
        assert body['cart']['lines'] == []

    def test_unknown_offer(self, client, offers):
        response = client.post('/cart/c1/lines', json={'offer_id': 'nope', 'quantity': 1})

        assert response.status_code == 404

    def test_carts_are_separate(self, client, offers):
        client.post('/cart/c1/lines', json={'offer_id': 'abc', 'quantity': 2})

        assert client.get('/cart/c2').json()['lines'] == []
        assert client.get('/cart/c1').json()['quantity_total'] == 2

    def test_remove_line_and_clear(self, client, offers):
        client.post('/cart/c1/lines', json={'offer_id': 'abc', 'quantity': 2})
        client.post('/cart/c1/lines', json={'offer_id': 'def', 'quantity': 3})

        after_remove = client.delete('/cart/c1/lines/abc').json()
        assert [line['offer_id'] for line in after_remove['lines']] == ['def']

        after_clear = client.delete('/cart/c1').json()
        assert after_clear['lines'] == []


@pytest.mark.integration
class TestCheckoutApi:
    def test_cart_checkout(self, client, offers, fake_gateway):
        client.post('/cart/c1/lines', json={'offer_id': 'abc', 'quantity': 2})

        response = client.post('/checkout', json={'cart_id': 'c1'}, headers={'origin': 'https://shop.test'})

        assert response.status_code == 200
        assert response.json() == {'url': 'https://pay.test/cs_test_1'}
        assert fake_gateway.created[0]['success_url'] == 'https://shop.test/success'
        # the cart survives until the success flow
        assert client.get('/cart/c1').json()['quantity_total'] == 2

    def test_empty_cart(self, client, offers):
        response = client.post('/checkout', json={'cart_id': 'c1'})

        assert response.status_code == 400

    def test_provider_failure(self, client, offers, fake_gateway):
        client.post('/cart/c1/lines', json={'offer_id': 'abc', 'quantity': 2})
        fake_gateway.fail_create = True

        response = client.post('/checkout', json={'cart_id': 'c1'})

        assert response.status_code == 502
        assert response.json()['detail'] == 'Unable to start the payment.'

    def test_buy_now(self, client, offers, fake_gateway):
        response = client.post('/checkout/buy-now', json={'offer_id': 'def', 'quantity': 3})

        assert response.status_code == 200
        (intent,) = fake_gateway.created[0]['intents']
        assert intent.display_name == 'Demo Tour – Catégorie 1 - Est [ID:def]'

    def test_buy_now_keeps_the_stock_rules(self, client, offers, fake_gateway):
        response = client.post('/checkout/buy-now', json={'offer_id': 'def', 'quantity': 2})

        assert response.status_code == 400
        assert fake_gateway.created == []

    def test_success_clears_the_cart(self, client, offers):
        client.post('/cart/c1/lines', json={'offer_id': 'abc', 'quantity': 2})

        response = client.post('/checkout/success', json={'cart_id': 'c1'})

        assert response.status_code == 200
        assert client.get('/cart/c1').json()['lines'] == []


@pytest.mark.integration
class TestWebhookApi:
    @pytest.fixture
    def completed(self, fake_gateway):
        fake_gateway.complete(
            CompletedSession(id='cs_1', amount_total=11800, customer_email='fan@example.test'),
            [PurchasedLine('Demo Tour – Fosse [ID:abc]', 2, 11800, 11800, offer_id='abc')],
        )

    def test_completed_payment(self, client, db, offers, completed):
        response = client.post('/webhook', content=b'{}', headers={'stripe-signature': VALID_SIGNATURE})

        assert response.status_code == 200
        assert response.json() == {'received': True}
        db.expire_all()
        assert db.get(TicketOffer, 'abc').quantity == 3
        assert db.query(Order).count() == 1

    def test_redelivery(self, client, db, offers, completed):
        for _ in range(2):
            response = client.post('/webhook', content=b'{}', headers={'stripe-signature': VALID_SIGNATURE})
            assert response.status_code == 200

        db.expire_all()
        assert db.get(TicketOffer, 'abc').quantity == 3
        assert db.query(Order).count() == 1

    @pytest.mark.parametrize('headers', [{}, {'stripe-signature': 't=1,v1=forged'}])
    def test_bad_signature(self, client, db, offers, completed, headers):
        response = client.post('/webhook', content=b'{}', headers=headers)

        assert response.status_code == 400
        assert db.query(Order).count() == 0

    def test_provider_outage_asks_for_redelivery(self, client, db, offers, completed, fake_gateway):
        fake_gateway.fail_line_items = True

        response = client.post('/webhook', content=b'{}', headers={'stripe-signature': VALID_SIGNATURE})

        assert response.status_code == 500
        assert db.query(Order).count() == 0
