from .base import BaseRepository
from .offer_repository import offer_repository
from .order_repository import order_repository
from .newsletter_repository import newsletter_repository
