from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from src.utils.database import get_db, db_session_context
from src.api.dependencies import CartStorageFactory, get_cart_storage_factory, get_checkout_bridge, request_origin
from src.api.storefront.api_cart import load_offer
from src.cart.ledger import CartLedger
from src.exceptions import CheckoutError, ErrorCode
from src.payments.checkout import CheckoutBridge
from src.dto import cart as cart_schemas
from src.dto import checkout as checkout_schemas
import logging

router = APIRouter(prefix="/checkout", tags=["checkout"])

logger = logging.getLogger(__name__)

# refusals caused by the request itself, anything else is the provider's fault
CLIENT_ERRORS = {ErrorCode.EMPTY_CART, ErrorCode.INVALID_QUANTITY}


def checkout_failure(e: CheckoutError) -> HTTPException:
    status_code = 400 if e.code in CLIENT_ERRORS else 502
    logger.error(f"Checkout refused with {status_code}: {e}")
    return HTTPException(status_code=status_code, detail=e.message)


@router.post("", response_model=checkout_schemas.CheckoutResponse)
async def start_checkout(
    checkout: checkout_schemas.CheckoutRequest,
    origin: str = Depends(request_origin),
    bridge: CheckoutBridge = Depends(get_checkout_bridge),
    storage_factory: CartStorageFactory = Depends(get_cart_storage_factory),
):
    ledger = CartLedger(storage_factory(checkout.cart_id))
    try:
        url = await bridge.start(ledger.lines, origin)
    except CheckoutError as e:
        raise checkout_failure(e)
    return checkout_schemas.CheckoutResponse(url=url)


@router.post("/buy-now", response_model=checkout_schemas.CheckoutResponse)
async def buy_now(
    purchase: checkout_schemas.BuyNowRequest,
    origin: str = Depends(request_origin),
    bridge: CheckoutBridge = Depends(get_checkout_bridge),
    db: Session = Depends(get_db),
):
    db_session_context.set(db)
    offer = await load_offer(purchase.offer_id)
    try:
        url = await bridge.buy_now(offer, purchase.quantity, origin)
    except CheckoutError as e:
        raise checkout_failure(e)
    return checkout_schemas.CheckoutResponse(url=url)


@router.post("/success", response_model=cart_schemas.CartView)
async def checkout_success(
    checkout: checkout_schemas.CheckoutRequest,
    storage_factory: CartStorageFactory = Depends(get_cart_storage_factory),
):
    """The customer is back from a completed payment: the cart is done"""
    ledger = CartLedger(storage_factory(checkout.cart_id))
    ledger.clear()
    logger.info(f"Cart {checkout.cart_id} cleared after payment")
    return ledger.view()
