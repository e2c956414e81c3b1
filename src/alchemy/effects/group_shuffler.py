from __future__ import annotations

import random
from typing import List, Sequence

from alchemy.components.raw_effect import RawEffect
from alchemy.errors import PoolExhaustionError


class GroupShuffler:
    """Hands out whole effect groups in a shuffled, non-repeating order."""

    def __init__(self, groups: Sequence[Sequence[RawEffect]], *, rng: random.Random | None = None) -> None:
        self._rng: random.Random = rng or random.Random()
        self._groups: List[tuple[RawEffect, ...]] = [tuple(group) for group in groups]
        self._rng.shuffle(self._groups)
        self._index = 0

    def __len__(self) -> int:
        return len(self._groups)

    @property
    def remaining(self) -> int:
        return len(self._groups) - self._index

    def next_group(self) -> tuple[RawEffect, ...]:
        if self._index >= len(self._groups):
            raise PoolExhaustionError(
                f"All {len(self._groups)} effect groups have already been assigned"
            )
        group = self._groups[self._index]
        self._index += 1
        return group
