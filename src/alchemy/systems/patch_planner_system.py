from __future__ import annotations

import logging
import random
from typing import Callable, List

from esper import World

from alchemy.constants import EFFECT_SLOTS, ESL_FLAG, INGREDIENT_KIND
from alchemy.effects.effect_record import EffectRecord
from alchemy.effects.group_shuffler import GroupShuffler
from alchemy.effects.pool import EffectPool, PoolDraw
from alchemy.errors import PoolInsufficientError
from alchemy.events.bus import (
    EVENT_EFFECT_DRAW_REJECTED,
    EVENT_PATCH_FINALIZED,
    EVENT_PATCH_INITIALIZED,
    EVENT_RECORD_PATCHED,
    EVENT_TARGETS_SELECTED,
    EventBus,
)
from alchemy.settings import PatcherSettings, RandomizationType
from alchemy.systems.record_store import RecordStore

logger = logging.getLogger(__name__)


class PatchPlannerSystem:
    """Redistributes ingredient effects into a freshly created patch plugin.

    A run goes through :meth:`initialize`, :meth:`select_targets`, one
    :meth:`patch_one` per target and :meth:`finalize`. The pool (or the
    shuffled group list) built by ``initialize`` is shared by every target.
    """

    def __init__(
        self,
        world: World,
        event_bus: EventBus,
        settings: PatcherSettings,
        *,
        store: RecordStore | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self.world = world
        self.event_bus = event_bus
        self.settings = settings
        candidate_rng = rng or getattr(world, "random", None)
        self._rng: random.Random = candidate_rng or random.Random(settings.seed)
        ignored = list(settings.ignored_files) + [settings.patch_file_name]
        self.store = store or RecordStore(world)
        self.store.ignore(ignored)
        self.pool: EffectPool | None = None
        self.groups: GroupShuffler | None = None
        self.winning_records: List[int] = []
        self.patch_plugin: int | None = None
        self.patched: List[int] = []
        self._mode: RandomizationType | None = None

    @property
    def rand_type(self) -> RandomizationType:
        if self._mode is not None:
            return self._mode
        return RandomizationType.parse(self.settings.rand_type)

    # ------------------------------------------------------------------
    # Run phases
    # ------------------------------------------------------------------

    def initialize(self) -> None:
        rand_type = RandomizationType.parse(self.settings.rand_type)
        records = self.store.load_records(INGREDIENT_KIND)
        logger.info(self.settings.summary())
        winning = [self.store.resolve_winning_override(record) for record in records]

        if rand_type is RandomizationType.GROUPS:
            groups = [self.store.get_effect_entries(record) for record in winning]
            self.groups = GroupShuffler(groups, rng=self._rng)
            pool_size = len(self.groups)
        else:
            effects = [effect for record in winning for effect in self.store.get_effect_entries(record)]
            self._rng.shuffle(effects)
            self.pool = EffectPool(effects, rng=self._rng)
            pool_size = len(self.pool)
            self._check_distinct_effects()

        self._mode = rand_type
        self.winning_records = winning
        self.patch_plugin = self.store.find_plugin(self.settings.patch_file_name)
        if self.patch_plugin is None:
            self.patch_plugin = self.store.create_plugin(self.settings.patch_file_name)
        self.event_bus.emit(
            EVENT_PATCH_INITIALIZED,
            settings=self.settings,
            source_count=len(winning),
            pool_size=pool_size,
        )

    def select_targets(self) -> List[int]:
        targets = list(self.winning_records)
        self._rng.shuffle(targets)
        self.event_bus.emit(EVENT_TARGETS_SELECTED, records=list(targets))
        return targets

    def patch_one(self, record: int) -> int:
        """Patch one target record and return the override entity written."""
        if self.patch_plugin is None:
            raise RuntimeError("initialize() must run before patch_one()")
        record_id = self.store.display_id(record)
        logger.info("Patching %s...", record_id)
        target = self.store.copy_to_plugin(record, self.patch_plugin)

        if self.rand_type is RandomizationType.GROUPS:
            if self.groups is None:
                raise RuntimeError("No effect groups; initialize() with the groups randomization type first")
            self.store.set_effect_group(target, self.groups.next_group())
            self.patched.append(target)
            self.event_bus.emit(
                EVENT_RECORD_PATCHED,
                record=target,
                source_record=record,
                effects=None,
                mode=self.rand_type,
            )
            return target

        plan = self.plan_effects(record_id, record=target)
        for slot, effect in enumerate(plan):
            self.store.set_effect_entry(target, slot, effect.source)
        entries = self.store.get_effect_entries(target)
        if len(entries) > EFFECT_SLOTS:
            self.store.set_effect_group(target, entries[:EFFECT_SLOTS])
        self.patched.append(target)
        self.event_bus.emit(
            EVENT_RECORD_PATCHED,
            record=target,
            source_record=record,
            effects=list(plan),
            mode=self.rand_type,
        )
        return target

    def finalize(self) -> None:
        if self.patch_plugin is None:
            raise RuntimeError("initialize() must run before finalize()")
        logger.info("Setting ESL flag to %s...", str(self.settings.set_esl).lower())
        self.store.set_plugin_flag(self.patch_plugin, ESL_FLAG, self.settings.set_esl)
        self.event_bus.emit(
            EVENT_PATCH_FINALIZED,
            plugin_entity=self.patch_plugin,
            settings=self.settings,
        )

    # ------------------------------------------------------------------
    # Effect selection
    # ------------------------------------------------------------------

    def plan_effects(self, record_id: str = "", *, record: int | None = None) -> List[EffectRecord]:
        """Draw ``EFFECT_SLOTS`` pairwise distinct effects from the pool."""
        pool = self._require_pool()
        accepted: List[EffectRecord] = []
        attempts = 0
        while len(accepted) < EFFECT_SLOTS:
            slot = len(accepted)
            self._ensure_fillable(accepted, record_id)
            if attempts >= self.settings.max_draw_attempts:
                raise PoolInsufficientError(
                    f"Gave up filling {record_id or 'record'} after {attempts} draws",
                    record_id=record_id,
                    attempts=attempts,
                )
            attempts += 1
            index, effect = self._draw(slot)
            if any(effect.is_duplicate(existing) for existing in accepted):
                logger.debug("Rejected duplicate %s for slot %d of %s", effect.effect_id, slot, record_id)
                self.event_bus.emit(
                    EVENT_EFFECT_DRAW_REJECTED,
                    record=record,
                    slot=slot,
                    effect_id=effect.effect_id,
                    attempts=attempts,
                )
                continue
            accepted.append(effect)
            if self.rand_type is RandomizationType.DISTRIBUTION:
                pool.remove(index)
        return accepted

    def _require_pool(self) -> EffectPool:
        if self.pool is None:
            raise RuntimeError("No effect pool; initialize() with a pool-based randomization type first")
        return self.pool

    def _draw(self, slot: int) -> PoolDraw:
        pool = self._require_pool()
        if slot == 0 and self.rand_type is RandomizationType.DISTRIBUTION:
            return pool.most_frequent()
        if slot == 0 and self.rand_type is RandomizationType.INCLUSION:
            draw = pool.next_unconsumed_unique()
            if draw is not None:
                return draw
        return self._random_draw()()

    def _random_draw(self) -> Callable[[], PoolDraw]:
        pool = self._require_pool()
        if self.rand_type is RandomizationType.DISTRIBUTION or not self.settings.ignore_dist:
            return pool.random_weighted
        return pool.random_unweighted

    def _ensure_fillable(self, accepted: List[EffectRecord], record_id: str) -> None:
        taken = {effect.effect_id for effect in accepted}
        available = [effect_id for effect_id in self._require_pool().identities() if effect_id not in taken]
        if not available:
            raise PoolInsufficientError(
                f"Effect pool has no effect left that {record_id or 'the record'} does not already have "
                f"({len(accepted)} of {EFFECT_SLOTS} slots filled)",
                record_id=record_id,
            )

    def _check_distinct_effects(self) -> None:
        distinct = self._require_pool().distinct_count()
        if distinct < EFFECT_SLOTS:
            raise PoolInsufficientError(
                f"Only {distinct} distinct effects available; {EFFECT_SLOTS} are needed per ingredient"
            )
