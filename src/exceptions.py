"""Domain error codes for the storefront."""

from enum import Enum


class ErrorCode(Enum):
    """Domain error codes."""

    OFFER_NOT_FOUND = "OFFER_NOT_FOUND"
    EVENT_DATE_NOT_FOUND = "EVENT_DATE_NOT_FOUND"
    EMPTY_CART = "EMPTY_CART"
    INVALID_QUANTITY = "INVALID_QUANTITY"
    CHECKOUT_FAILED = "CHECKOUT_FAILED"
    WEBHOOK_SIGNATURE_INVALID = "WEBHOOK_SIGNATURE_INVALID"
    OVERLAY_UNAVAILABLE = "OVERLAY_UNAVAILABLE"
    DUPLICATE_ORDER = "DUPLICATE_ORDER"


class DomainError(Exception):
    """Base domain error with code and user-safe message."""

    def __init__(self, code: ErrorCode, message: str) -> None:
        super().__init__(message)
        self.code = code
        self.message = message

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class OfferNotFoundError(DomainError):
    """Raised when an offer id does not match any stored offer."""

    def __init__(self, offer_id: str) -> None:
        super().__init__(ErrorCode.OFFER_NOT_FOUND, "Offer not found")
        self.offer_id = offer_id


class EventDateNotFoundError(DomainError):
    def __init__(self, slug: str, event_date) -> None:
        super().__init__(ErrorCode.EVENT_DATE_NOT_FOUND, "No tickets available for this date")
        self.slug = slug
        self.event_date = event_date


class CheckoutError(DomainError):
    """Raised when a hosted payment session cannot be started."""

    def __init__(self, message: str = "Unable to start the payment.", code: ErrorCode = ErrorCode.CHECKOUT_FAILED) -> None:
        super().__init__(code, message)


class WebhookSignatureError(DomainError):
    """Raised for unsigned, badly signed or unparsable webhook requests."""

    def __init__(self, message: str = "Invalid webhook signature") -> None:
        super().__init__(ErrorCode.WEBHOOK_SIGNATURE_INVALID, message)


class OverlayUnavailableError(DomainError):
    """Raised internally when a vector overlay cannot be fetched or parsed."""

    def __init__(self, reason: str) -> None:
        super().__init__(ErrorCode.OVERLAY_UNAVAILABLE, reason)


class DuplicateOrderError(DomainError):
    """Raised when an order already exists for a payment session."""

    def __init__(self, session_id: str) -> None:
        super().__init__(ErrorCode.DUPLICATE_ORDER, "Order already recorded for this session")
        self.session_id = session_id
