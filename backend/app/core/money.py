"""
Fixed-precision money value used for every ledger amount.
"""
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from functools import total_ordering
from typing import Annotated, Any, List, Union
from pydantic import BeforeValidator, PlainSerializer

CENT = Decimal("0.01")
HALF_CENT = Decimal("0.005")

Number = Union[int, float, str, Decimal]


def to_decimal(value: Any) -> Decimal:
    """Convert a number to Decimal without importing binary float noise."""
    if isinstance(value, Money):
        return value.amount
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        value = repr(value)
    try:
        return Decimal(value)
    except (InvalidOperation, TypeError) as e:
        raise ValueError(f"Invalid monetary amount: {value!r}") from e


def round_cents(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


@total_ordering
class Money:
    """
    Immutable decimal amount.

    Arithmetic keeps full decimal precision; call rounded() to quantize to
    the cent. Comparisons against an epsilon (is_negligible, exceeds,
    is_close) absorb residue left by proportional splitting.
    """

    __slots__ = ("_amount",)

    def __init__(self, amount: Number = 0):
        self._amount = to_decimal(amount)

    @classmethod
    def zero(cls) -> "Money":
        return cls(0)

    @property
    def amount(self) -> Decimal:
        return self._amount

    def rounded(self) -> "Money":
        """Round half-up to two fraction digits."""
        return Money(round_cents(self._amount))

    def is_negligible(self, epsilon: Decimal = CENT) -> bool:
        return abs(self._amount) <= epsilon

    def exceeds(self, epsilon: Decimal = CENT) -> bool:
        return self._amount > epsilon

    def is_close(self, other: "Money", epsilon: Decimal = CENT) -> bool:
        return (self - other).is_negligible(epsilon)

    def distribute(self, parts: int) -> List["Money"]:
        """
        Split into `parts` cent-exact shares whose sum equals the rounded
        amount. Leftover cents go to the first shares.
        """
        if parts <= 0:
            raise ValueError("parts must be a positive integer")
        total_cents = int(round_cents(self._amount) / CENT)
        base, remainder = divmod(total_cents, parts)
        return [
            Money(Decimal(base + (1 if i < remainder else 0)) * CENT)
            for i in range(parts)
        ]

    def __add__(self, other: Any) -> "Money":
        if isinstance(other, Money):
            return Money(self._amount + other._amount)
        if isinstance(other, int) and other == 0:
            return self
        return NotImplemented

    __radd__ = __add__

    def __sub__(self, other: Any) -> "Money":
        if isinstance(other, Money):
            return Money(self._amount - other._amount)
        return NotImplemented

    def __mul__(self, factor: Any) -> "Money":
        if isinstance(factor, Money):
            return NotImplemented
        return Money(self._amount * to_decimal(factor))

    __rmul__ = __mul__

    def __neg__(self) -> "Money":
        return Money(-self._amount)

    def __abs__(self) -> "Money":
        return Money(abs(self._amount))

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, Money):
            return self._amount == other._amount
        return NotImplemented

    def __lt__(self, other: Any) -> bool:
        if isinstance(other, Money):
            return self._amount < other._amount
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._amount)

    def __float__(self) -> float:
        return float(round_cents(self._amount))

    def __repr__(self) -> str:
        return f"Money('{self._amount}')"

    def __str__(self) -> str:
        return f"{round_cents(self._amount):.2f}"


def _coerce_amount(value: Any) -> Any:
    if isinstance(value, Money):
        return value.amount
    return value


def _serialize_amount(value: Decimal) -> float:
    return float(round_cents(value))


# Schema field type: accepts Money or a number, emits a JSON number with
# at most two fraction digits.
MoneyAmount = Annotated[
    Decimal,
    BeforeValidator(_coerce_amount),
    PlainSerializer(_serialize_amount, return_type=float),
]
