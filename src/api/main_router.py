from fastapi import APIRouter
from src.api.storefront import api_events, api_seating, api_cart, api_checkout, api_webhook

router = APIRouter()

router.include_router(api_events.router)
router.include_router(api_seating.router)
router.include_router(api_cart.router)
router.include_router(api_checkout.router)
router.include_router(api_webhook.router)
