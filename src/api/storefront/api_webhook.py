from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from src.utils.database import get_db, db_session_context
from src.api.dependencies import get_fulfillment_webhook
from src.exceptions import WebhookSignatureError
from src.payments.fulfillment import FulfillmentWebhook
from src.payments.gateway import PaymentProviderError
import logging

router = APIRouter(tags=["webhook"])

logger = logging.getLogger(__name__)


@router.post("/webhook")
async def payment_webhook(
    request: Request,
    webhook: FulfillmentWebhook = Depends(get_fulfillment_webhook),
    db: Session = Depends(get_db),
):
    db_session_context.set(db)
    payload = await request.body()
    try:
        result = await webhook.handle(payload, request.headers.get("stripe-signature"))
    except WebhookSignatureError as e:
        raise HTTPException(status_code=400, detail=e.message)
    except (PaymentProviderError, SQLAlchemyError) as e:
        # nothing committed, the provider redelivers
        logger.error(f"Webhook processing failed: {e}")
        raise HTTPException(status_code=500, detail="Webhook processing failed")
    logger.info(f"Webhook acknowledged ({result.outcome.value})")
    return {"received": True}
