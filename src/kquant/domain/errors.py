"""Error taxonomy for quantity parsing and arithmetic."""


class QuantityError(ValueError):
    """Base class for every quantity validation failure."""

    kind = "quantity"


class InvalidFormatError(QuantityError):
    """Raised when text is not a number followed by an optional unit."""

    kind = "invalid_format"


class InvalidUnitError(QuantityError):
    """Raised when a unit suffix is not known for the quantity type."""

    kind = "invalid_unit"


class NegativeQuantityError(QuantityError):
    """Raised when a canonical value would drop below zero."""

    kind = "negative"


class NonFiniteQuantityError(QuantityError):
    """Raised for NaN or infinite canonical values."""

    kind = "not_finite"


class FractionalUnitError(QuantityError):
    """Raised when a value is not a whole number of the canonical unit."""

    kind = "fractional_unit"


class InvalidFactorError(QuantityError):
    """Raised when a scale factor is NaN or infinite."""

    kind = "invalid_factor"
