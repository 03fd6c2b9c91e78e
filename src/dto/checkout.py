from src.dto import BaseSchema


class PurchaseIntent(BaseSchema):
    display_name: str
    unit_price_minor_units: int
    quantity: int
    offer_id: str

class CheckoutRequest(BaseSchema):
    cart_id: str

class BuyNowRequest(BaseSchema):
    offer_id: str
    quantity: int = 1

class CheckoutResponse(BaseSchema):
    url: str
