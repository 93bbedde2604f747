"""Memory quantities measured in whole bytes."""

from __future__ import annotations

from typing import Self

from kquant.domain.quantity import Number, Quantity, QuantityKind

KIB = 1024
MIB = 1024**2
GIB = 1024**3
TIB = 1024**4

MEMORY_KIND = QuantityKind(
    name="Memory",
    canonical_unit="bytes",
    units={"": 1, "B": 1, "Ki": KIB, "Mi": MIB, "Gi": GIB, "Ti": TIB},
    # Ti is accepted on input but never chosen for display.
    thresholds=(("Gi", GIB), ("Mi", MIB), ("Ki", KIB)),
    fallback_suffix="B",
    example="'128Mi' or '1Gi'",
)


class MemoryQuantity(Quantity):
    """Memory amount using binary IEC suffixes (Ki, Mi, Gi, Ti)."""

    kind = MEMORY_KIND

    @property
    def bytes(self) -> int:
        return self.value

    @classmethod
    def from_bytes(cls, amount: Number) -> Self:
        return cls.from_units(amount, "B")

    @classmethod
    def from_kib(cls, kib: Number) -> Self:
        return cls.from_units(kib, "Ki")

    @classmethod
    def from_mib(cls, mib: Number) -> Self:
        return cls.from_units(mib, "Mi")

    @classmethod
    def from_gib(cls, gib: Number) -> Self:
        return cls.from_units(gib, "Gi")

    @classmethod
    def from_tib(cls, tib: Number) -> Self:
        return cls.from_units(tib, "Ti")
