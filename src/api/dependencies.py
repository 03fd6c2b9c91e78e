from typing import Callable

from fastapi import Depends, Request

from src.cart.ledger import CartLedger
from src.cart.storage import CartStorage, RedisCartStorage
from src.payments.checkout import CheckoutBridge
from src.payments.fulfillment import FulfillmentWebhook
from src.payments.gateway import PaymentGateway, StripeGateway
from src.payments.notifier import ConfirmationNotifier


CartStorageFactory = Callable[[str], CartStorage]


def get_cart_storage_factory() -> CartStorageFactory:
    return RedisCartStorage


def get_cart_storage(cart_id: str, factory: CartStorageFactory = Depends(get_cart_storage_factory)) -> CartStorage:
    return factory(cart_id)


def get_cart_ledger(storage: CartStorage = Depends(get_cart_storage)) -> CartLedger:
    return CartLedger(storage)


def get_gateway() -> PaymentGateway:
    return StripeGateway()


def get_notifier() -> ConfirmationNotifier:
    return ConfirmationNotifier()


def get_checkout_bridge(gateway: PaymentGateway = Depends(get_gateway)) -> CheckoutBridge:
    return CheckoutBridge(gateway)


def get_fulfillment_webhook(
    gateway: PaymentGateway = Depends(get_gateway),
    notifier: ConfirmationNotifier = Depends(get_notifier),
) -> FulfillmentWebhook:
    return FulfillmentWebhook(gateway, notifier)


def request_origin(request: Request) -> str:
    """Origin the hosted checkout should send the customer back to"""
    origin = request.headers.get("origin")
    if origin:
        return origin
    return str(request.base_url).rstrip("/")
