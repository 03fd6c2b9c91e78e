from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from src.utils.database import get_db, db_session_context
from src.api.dependencies import get_cart_ledger
from src.cart.ledger import CartLedger
from src.exceptions import OfferNotFoundError
from src.repositories.offer_repository import offer_repository
from src.dto import cart as cart_schemas
from src.dto.offer import TicketOffer
import logging

router = APIRouter(prefix="/cart", tags=["cart"])

logger = logging.getLogger(__name__)


async def load_offer(offer_id: str) -> TicketOffer:
    try:
        return await offer_repository.get_offer(offer_id)
    except OfferNotFoundError as e:
        logger.error(f"Offer {offer_id} not found")
        raise HTTPException(status_code=404, detail=e.message)


@router.get("/{cart_id}", response_model=cart_schemas.CartView)
async def read_cart(ledger: CartLedger = Depends(get_cart_ledger)):
    return ledger.view()


@router.post("/{cart_id}/lines", response_model=cart_schemas.AddLineResponse)
async def add_line(
    line: cart_schemas.AddLineRequest,
    ledger: CartLedger = Depends(get_cart_ledger),
    db: Session = Depends(get_db),
):
    db_session_context.set(db)
    offer = await load_offer(line.offer_id)
    notice = ledger.add_line(offer, line.quantity)
    return cart_schemas.AddLineResponse(notice=notice, cart=ledger.view())


@router.delete("/{cart_id}/lines/{offer_id}", response_model=cart_schemas.CartView)
async def remove_line(offer_id: str, ledger: CartLedger = Depends(get_cart_ledger)):
    ledger.remove_line(offer_id)
    return ledger.view()


@router.delete("/{cart_id}", response_model=cart_schemas.CartView)
async def clear_cart(ledger: CartLedger = Depends(get_cart_ledger)):
    ledger.clear()
    return ledger.view()
