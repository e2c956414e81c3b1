from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal

from alchemy.components.raw_effect import RawEffect
from alchemy.constants import MAGNITUDE_PLACES


def format_form_id(form_id: int) -> str:
    return f"{form_id:08X}"


def quantize_magnitude(value: float | Decimal | str) -> Decimal:
    # Rounds the binary float itself, so no decimal context precision applies.
    return Decimal(f"{float(value):.{MAGNITUDE_PLACES}f}")


@dataclass(frozen=True, slots=True)
class EffectRecord:
    """Immutable snapshot of one effect occurrence.

    Two records are duplicates when they reference the same effect definition,
    whatever their magnitude, area or duration.
    """

    effect_id: str
    display_name: str
    magnitude: Decimal
    area: int
    duration: int
    source: RawEffect | None = field(default=None, compare=False, repr=False)

    @classmethod
    def from_occurrence(cls, raw: RawEffect) -> "EffectRecord":
        return cls(
            effect_id=format_form_id(raw.effect_form_id),
            display_name=raw.effect_name,
            magnitude=quantize_magnitude(raw.magnitude),
            area=max(0, int(raw.area)),
            duration=max(0, int(raw.duration)),
            source=raw,
        )

    def is_duplicate(self, other: "EffectRecord") -> bool:
        return self.effect_id == other.effect_id

    def describe(self) -> str:
        return f"{self.display_name} (M: {self.magnitude}, A: {self.area}, D: {self.duration})"
