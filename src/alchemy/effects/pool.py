"""Shared pool of effect occurrences drawn from during a patching run."""
from __future__ import annotations

import random
from collections import deque
from typing import Dict, Iterable, List, NamedTuple, Sequence

from alchemy.components.raw_effect import RawEffect
from alchemy.effects.effect_record import EffectRecord
from alchemy.errors import PoolExhaustionError


class PoolDraw(NamedTuple):
    index: int
    record: EffectRecord


class EffectPool:
    """Multiset of effect occurrences with per-identity counts.

    ``entries`` keeps the draw order given at construction. ``unique_counts``
    mirrors how many occurrences of each identity remain in ``entries`` and is
    ordered by first observation, which also fixes the order of the
    unconsumed-unique queue and the tie-break of :meth:`most_frequent`.
    """

    def __init__(self, occurrences: Iterable[RawEffect], *, rng: random.Random | None = None) -> None:
        self._rng: random.Random = rng or random.Random()
        self.entries: List[EffectRecord] = [EffectRecord.from_occurrence(raw) for raw in occurrences]
        self.unique_counts: Dict[str, int] = {}
        for record in self.entries:
            self.unique_counts[record.effect_id] = self.unique_counts.get(record.effect_id, 0) + 1
        self._unconsumed: deque[str] = deque(self.unique_counts)

    def __len__(self) -> int:
        return len(self.entries)

    def identities(self) -> Sequence[str]:
        """Identities that still have at least one occurrence in the pool."""
        return tuple(effect_id for effect_id, count in self.unique_counts.items() if count > 0)

    def distinct_count(self) -> int:
        return len(self.identities())

    def _ensure_not_empty(self, operation: str) -> None:
        if not self.entries:
            raise PoolExhaustionError(f"Cannot {operation} from an empty effect pool")

    def find(self, effect_id: str) -> PoolDraw | None:
        for index, record in enumerate(self.entries):
            if record.effect_id == effect_id:
                return PoolDraw(index, record)
        return None

    def most_frequent(self) -> PoolDraw:
        """Return the first occurrence of the identity with the highest count."""
        self._ensure_not_empty("take the most frequent effect")
        best_id: str | None = None
        best_count = 0
        for effect_id, count in self.unique_counts.items():
            if best_id is None or count > best_count:
                best_id, best_count = effect_id, count
        draw = self.find(best_id) if best_id is not None else None
        if draw is None:
            raise PoolExhaustionError("Effect counts are out of sync with pool entries")
        return draw

    def next_unconsumed_unique(self) -> PoolDraw | None:
        """Hand out each identity once; ``None`` once every identity was offered.

        The popped identity is resolved against the current entries, so the
        result is also ``None`` when it has been removed in the meantime.
        """
        if not self._unconsumed:
            return None
        effect_id = self._unconsumed.popleft()
        return self.find(effect_id)

    def random_weighted(self) -> PoolDraw:
        """Uniform over occurrences, so frequent effects are proportionally likelier."""
        self._ensure_not_empty("draw a weighted effect")
        index = self._rng.randrange(len(self.entries))
        return PoolDraw(index, self.entries[index])

    def random_unweighted(self) -> PoolDraw:
        """Uniform over identities, regardless of how often each occurs."""
        self._ensure_not_empty("draw an unweighted effect")
        effect_id = self._rng.choice(self.identities())
        matches = [index for index, record in enumerate(self.entries) if record.effect_id == effect_id]
        index = self._rng.choice(matches)
        return PoolDraw(index, self.entries[index])

    def remove(self, index: int) -> EffectRecord:
        self._ensure_not_empty("remove an effect")
        record = self.entries[index]
        self.unique_counts[record.effect_id] -= 1
        del self.entries[index]
        return record
