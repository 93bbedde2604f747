"""CPU quantities measured in whole millicores."""

from __future__ import annotations

from typing import Self

from kquant.domain.quantity import Number, Quantity, QuantityKind

MILLICORES_PER_CORE = 1000

CPU_KIND = QuantityKind(
    name="CPU",
    canonical_unit="millicores",
    units={"": MILLICORES_PER_CORE, "m": 1},
    thresholds=(("", MILLICORES_PER_CORE),),
    fallback_suffix="m",
    example="'100m' or '0.5'",
)


class CPUQuantity(Quantity):
    """CPU amount; ``"1"`` is one core, ``"100m"`` is a tenth of a core.

    Anything finer than one millicore is rejected, never rounded.
    """

    kind = CPU_KIND

    @property
    def millicores(self) -> int:
        return self.value

    @classmethod
    def from_millicores(cls, millicores: Number) -> Self:
        return cls.from_units(millicores, "m")

    @classmethod
    def from_cores(cls, cores: Number) -> Self:
        return cls.from_units(cores, "")
