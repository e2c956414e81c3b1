from dataclasses import dataclass, field

from alchemy.components.raw_effect import RawEffect


@dataclass(slots=True)
class EffectGroup:
    """Ordered effect list of an ingredient record."""

    effects: list[RawEffect] = field(default_factory=list)
