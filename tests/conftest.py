import os

# Point every setting at local, side-effect free backends before any src import
os.environ['DATABASE_URL'] = 'sqlite://'
os.environ['LOKI_URL'] = ''
os.environ['OTLP_ENDPOINT'] = ''
os.environ['RESEND_API_KEY'] = ''
os.environ['STRIPE_SECRET_KEY'] = 'sk_test_dummy'
os.environ['STRIPE_WEBHOOK_SECRET'] = 'whsec_test'
os.environ['MAP_ASSET_BASE_URL'] = 'https://assets.test/maps'
os.environ['ARTIST_ASSET_BASE_URL'] = 'https://assets.test/artists'

from datetime import date  # noqa: E402
from unittest.mock import MagicMock  # noqa: E402

import pytest  # noqa: E402

from src.dto.offer import TicketOffer as TicketOfferSchema  # noqa: E402
from src.entities.offer import TicketOffer  # noqa: E402
from src.exceptions import WebhookSignatureError  # noqa: E402
from src.payments.gateway import (  # noqa: E402
    CHECKOUT_COMPLETED,
    CompletedSession,
    HostedSession,
    PaymentGateway,
    PaymentProviderError,
    WebhookEvent,
)
from src.utils.database import Base, SessionLocal, db_session_context, engine  # noqa: E402


EVENT_SLUG = 'demo-tour'
EVENT_DATE = date(2026, 6, 12)
VALID_SIGNATURE = 't=1,v1=valid'


def offer_fields(**overrides) -> dict:
    fields = {
        'id': 'offer-1',
        'event_slug': EVENT_SLUG,
        'event_date': EVENT_DATE,
        'event_name': 'Demo Tour',
        'category': 'Catégorie 1',
        'price': 50.0,
        'quantity': 10,
        'available': True,
        'city': 'Paris',
        'country': 'France',
        'zone_id': 'zone-a',
        'map_png': 'stade.png',
        'map_svg': 'stade.svg',
        'artist_logo': 'demo.png',
    }
    fields.update(overrides)
    return fields


@pytest.fixture
def make_offer():
    """Build an offer schema, as the client receives it"""

    def _make(**overrides) -> TicketOfferSchema:
        return TicketOfferSchema(**offer_fields(**overrides))

    return _make


@pytest.fixture(autouse=True)
def fake_redis(monkeypatch):
    client = MagicMock()
    client.get.return_value = None
    client.scan.return_value = (0, [])
    monkeypatch.setattr('src.utils.cache.redis_client', client)
    return client


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    token = db_session_context.set(session)
    yield session
    db_session_context.reset(token)
    session.close()
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def seed_offer(db):
    """Insert an offer row and return it"""

    def _seed(**overrides) -> TicketOffer:
        row = TicketOffer(**offer_fields(**overrides))
        db.add(row)
        db.commit()
        return row

    return _seed


class FakeGateway(PaymentGateway):
    """In-memory payment provider: records sessions, replays a scripted webhook event"""

    def __init__(self):
        self.created: list[dict] = []
        self.line_items: dict[str, list] = {}
        self.customers: dict[str, str] = {}
        self.event: WebhookEvent | None = None
        self.fail_create = False
        self.fail_line_items = False

    def complete(self, session: CompletedSession, lines: list) -> None:
        self.event = WebhookEvent(id=f'evt_{session.id}', type=CHECKOUT_COMPLETED, session=session)
        self.line_items[session.id] = lines

    async def create_session(self, intents, success_url, cancel_url, metadata=None) -> HostedSession:
        if self.fail_create:
            raise PaymentProviderError('provider unreachable')
        session_id = f'cs_test_{len(self.created) + 1}'
        self.created.append(
            {
                'id': session_id,
                'intents': intents,
                'success_url': success_url,
                'cancel_url': cancel_url,
                'metadata': metadata or {},
            }
        )
        return HostedSession(id=session_id, url=f'https://pay.test/{session_id}')

    def construct_event(self, payload: bytes, signature: str) -> WebhookEvent:
        if signature != VALID_SIGNATURE:
            raise WebhookSignatureError('Webhook Error: signature mismatch')
        return self.event

    async def list_line_items(self, session_id: str) -> list:
        if self.fail_line_items:
            raise PaymentProviderError('provider unreachable')
        return self.line_items.get(session_id, [])

    async def customer_email(self, customer_id: str) -> str | None:
        return self.customers.get(customer_id)


@pytest.fixture
def fake_gateway():
    return FakeGateway()
