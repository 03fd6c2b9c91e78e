"""Stock rules shared by the cart, the quantity picker and the buy-now path.

An addition is clamped to what is left of the offer, then refused when it
would leave exactly one unit unsold: a lone seat is practically unsellable.
"""

from dataclasses import dataclass

from src.dto.cart import AddOutcome

STRANDED_SEAT_MESSAGE = (
    "Please select at least 2 tickets so that a single seat is not left on its own."
)
STRANDED_DISMISS_AFTER = 5.5
DEFAULT_DISMISS_AFTER = 4.0


@dataclass(frozen=True)
class AdditionCheck:
    outcome: AddOutcome
    to_add: int
    already_held: int
    max_addable: int

    @property
    def accepted(self) -> bool:
        return self.outcome == AddOutcome.ADDED

    @property
    def resulting_quantity(self) -> int:
        return self.already_held + self.to_add if self.accepted else self.already_held


def check_addition(available: int, already_held: int, requested: int) -> AdditionCheck:
    max_addable = available - already_held
    if requested < 1:
        return AdditionCheck(AddOutcome.INVALID_QUANTITY, 0, already_held, max_addable)

    to_add = min(requested, max_addable)
    if to_add <= 0:
        return AdditionCheck(AddOutcome.STOCK_EXCEEDED, 0, already_held, max_addable)

    if available - (already_held + to_add) == 1:
        return AdditionCheck(AddOutcome.SINGLE_SEAT_STRANDED, 0, already_held, max_addable)

    return AdditionCheck(AddOutcome.ADDED, to_add, already_held, max_addable)


def valid_quantities(available: int, already_held: int = 0) -> list[int]:
    """Quantities a picker may offer without tripping any stock rule."""
    return [
        n for n in range(1, available - already_held + 1)
        if available - (already_held + n) != 1
    ]


def _plural(count: int, word: str) -> str:
    return f"{count} {word}{'s' if count > 1 else ''}"


def notice_message(check: AdditionCheck, requested: int) -> tuple[str, float]:
    """User-facing text and auto-dismiss delay for the outcome of an addition."""
    if check.outcome == AddOutcome.SINGLE_SEAT_STRANDED:
        return STRANDED_SEAT_MESSAGE, STRANDED_DISMISS_AFTER
    if check.outcome == AddOutcome.INVALID_QUANTITY:
        return "Please select at least one ticket.", DEFAULT_DISMISS_AFTER
    if check.outcome == AddOutcome.STOCK_EXCEEDED:
        remaining = max(check.max_addable, 0)
        left = f"only {_plural(remaining, 'seat')} left" if remaining else "no seats left"
        return (
            f"Unable to add {_plural(requested, 'ticket')}: you already hold "
            f"{_plural(check.already_held, 'ticket')} and there are {left}.",
            DEFAULT_DISMISS_AFTER,
        )
    added = check.to_add
    return f"{_plural(added, 'ticket')} added to your cart", DEFAULT_DISMISS_AFTER
