"""Typed, validated arithmetic over Kubernetes CPU and memory quantities."""

from kquant.domain.cpu import CPUQuantity
from kquant.domain.errors import (
    FractionalUnitError,
    InvalidFactorError,
    InvalidFormatError,
    InvalidUnitError,
    NegativeQuantityError,
    NonFiniteQuantityError,
    QuantityError,
)
from kquant.domain.memory import MemoryQuantity

__all__ = [
    "CPUQuantity",
    "MemoryQuantity",
    "QuantityError",
    "InvalidFormatError",
    "InvalidUnitError",
    "NegativeQuantityError",
    "NonFiniteQuantityError",
    "FractionalUnitError",
    "InvalidFactorError",
]
