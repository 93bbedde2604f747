"""Generic engine behind the typed Kubernetes resource quantities.

Every quantity type stores a whole, non-negative number of its canonical unit
(millicores, bytes). Text parsing, validation and display are driven by a small
``QuantityKind`` descriptor so each concrete type only declares its units.
"""

from __future__ import annotations

import math
import re
from collections.abc import Mapping
from dataclasses import dataclass
from decimal import ROUND_FLOOR, Decimal, Overflow, localcontext
from typing import ClassVar, Self

from kquant.domain.errors import (
    FractionalUnitError,
    InvalidFactorError,
    InvalidFormatError,
    InvalidUnitError,
    NegativeQuantityError,
    NonFiniteQuantityError,
)

Number = int | float | Decimal

_QUANTITY_RE = re.compile(r"(?P<number>[0-9]+(?:\.[0-9]+)?)(?P<unit>[a-zA-Z]*)")


@dataclass(frozen=True)
class QuantityKind:
    """Unit table and display rules for one quantity type."""

    name: str
    canonical_unit: str
    units: Mapping[str, int]
    # Largest first; the first threshold met picks the display unit.
    thresholds: tuple[tuple[str, int], ...]
    fallback_suffix: str
    example: str = ""

    def unit_names(self) -> str:
        """Return the accepted non-empty suffixes for error messages."""
        return ", ".join(f"'{unit}'" for unit in self.units if unit)


def _to_decimal(value: Number) -> Decimal:
    if isinstance(value, bool):
        raise TypeError("quantity amounts must be numbers, not bool")
    if isinstance(value, Decimal):
        return value
    if isinstance(value, int):
        return Decimal(value)
    if isinstance(value, float):
        # repr keeps the shortest decimal that round-trips, so 1.1 stays 1.1.
        return Decimal(repr(value))
    raise TypeError(
        f"quantity amounts must be int, float or Decimal, not {type(value).__name__}"
    )


def _multiply(left: Decimal, right: Decimal) -> Decimal:
    if not (left.is_finite() and right.is_finite()):
        return left * right
    with localcontext() as ctx:
        ctx.prec = len(left.as_tuple().digits) + len(right.as_tuple().digits) + 1
        try:
            return left * right
        except Overflow as exc:
            raise NonFiniteQuantityError("Quantity is too large to represent") from exc


def _plain_text(value: Decimal) -> str:
    return format(value, "f")


def _plain_quotient(value: int, divisor: int) -> str:
    amount = Decimal(value)
    with localcontext() as ctx:
        # 1000 and powers of 1024 always divide to a terminating decimal.
        ctx.prec = max(amount.adjusted(), 0) + 41
        quotient = (amount / Decimal(divisor)).normalize()
    return _plain_text(quotient)


def validate_canonical(value: Number, kind: QuantityKind) -> int:
    """Return value as int, or raise if it is not a valid canonical amount."""
    amount = _to_decimal(value)
    if not amount.is_finite():
        raise NonFiniteQuantityError(f"{kind.name} resources must be finite numbers")
    if amount < 0:
        raise NegativeQuantityError(f"{kind.name} resources cannot be negative")
    if amount != amount.to_integral_value(rounding=ROUND_FLOOR):
        raise FractionalUnitError(
            f"{kind.name} resources must be whole numbers of {kind.canonical_unit}"
        )
    return int(amount)


def parse_canonical(text: str, kind: QuantityKind) -> int:
    """Parse quantity text into a validated canonical amount."""
    if text.startswith("-"):
        raise NegativeQuantityError(f"{kind.name} resources cannot be negative")

    match = _QUANTITY_RE.fullmatch(text)
    if match is None:
        raise InvalidFormatError(
            f"Invalid {kind.name} resource format {text!r}. Must be a number "
            f"followed by an optional unit (e.g., {kind.example})"
        )

    unit = match["unit"]
    if unit not in kind.units:
        raise InvalidUnitError(
            f"Invalid {kind.name} unit {unit!r}. Must be one of: {kind.unit_names()}"
        )

    amount = _multiply(Decimal(match["number"]), Decimal(kind.units[unit]))
    return validate_canonical(amount, kind)


def format_canonical(value: int, kind: QuantityKind) -> str:
    """Render a canonical amount in the largest display unit it reaches."""
    for suffix, threshold in kind.thresholds:
        if value >= threshold:
            return f"{_plain_quotient(value, threshold)}{suffix}"
    return f"{_plain_text(Decimal(value))}{kind.fallback_suffix}"


@dataclass(frozen=True, order=True)
class Quantity:
    """Immutable amount of a resource, stored in its canonical unit.

    Concrete subclasses set ``kind``. Instances of different subclasses never
    compare equal and refuse to be combined.
    """

    value: int
    kind: ClassVar[QuantityKind]

    def __post_init__(self) -> None:
        object.__setattr__(self, "value", validate_canonical(self.value, self.kind))

    @classmethod
    def parse(cls, text: str) -> Self:
        """Build a quantity from its text form, e.g. ``"250m"`` or ``"1Gi"``."""
        return cls(parse_canonical(text, cls.kind))

    @classmethod
    def zero(cls) -> Self:
        """Return the empty quantity."""
        return cls(0)

    @classmethod
    def from_units(cls, amount: Number, unit: str) -> Self:
        """Build a quantity from an amount of one of the kind's units."""
        multiplier = cls.kind.units[unit]
        return cls(_multiply(_to_decimal(amount), Decimal(multiplier)))  # type: ignore[arg-type]

    def _check_same_kind(self, other: object) -> None:
        if type(other) is not type(self):
            raise TypeError(
                f"cannot combine {type(self).__name__} with {type(other).__name__}"
            )

    def add(self, other: Self) -> Self:
        """Return the sum of two quantities of the same type."""
        self._check_same_kind(other)
        return type(self)(self.value + other.value)

    def subtract(self, other: Self) -> Self:
        """Return the difference; raises if it would be negative."""
        self._check_same_kind(other)
        return type(self)(self.value - other.value)

    def scale(self, factor: Number) -> Self:
        """Multiply by factor, flooring to a whole canonical unit."""
        multiplier = _to_decimal(factor)
        if not multiplier.is_finite():
            raise InvalidFactorError("Multiplication factor must be a finite number")
        return type(self)(math.floor(_multiply(Decimal(self.value), multiplier)))

    def equals(self, other: Self) -> bool:
        self._check_same_kind(other)
        return self.value == other.value

    def less_than(self, other: Self) -> bool:
        self._check_same_kind(other)
        return self.value < other.value

    def greater_than(self, other: Self) -> bool:
        self._check_same_kind(other)
        return self.value > other.value

    def to_number(self) -> int:
        """Return the canonical amount."""
        return self.value

    def to_text(self) -> str:
        """Return the display form in the most compact unit."""
        return format_canonical(self.value, self.kind)

    def __str__(self) -> str:
        return self.to_text()

    def __int__(self) -> int:
        return self.value
