"""Access to plugins and ingredient records stored in the world."""
from __future__ import annotations

import logging
from typing import Iterable, List, Sequence

from esper import World

from alchemy.components.effect_group import EffectGroup
from alchemy.components.ingredient_record import IngredientRecord
from alchemy.components.plugin import Plugin
from alchemy.components.raw_effect import RawEffect
from alchemy.constants import INGREDIENT_KIND
from alchemy.effects.effect_record import format_form_id
from alchemy.errors import DataUnavailableError

logger = logging.getLogger(__name__)


class RecordStore:
    """Host-side view over the plugin/record entities of a world.

    Each plugin is an entity carrying :class:`Plugin`; each version of an
    ingredient record is an entity carrying :class:`IngredientRecord` and
    :class:`EffectGroup`. Versions sharing a form id are ordered by the load
    order of their plugin.
    """

    def __init__(self, world: World, *, ignored_files: Iterable[str] = ()) -> None:
        self.world = world
        self._ignored = {name.lower() for name in ignored_files}

    # ------------------------------------------------------------------
    # Plugins
    # ------------------------------------------------------------------

    def create_plugin(self, name: str, *, flags: Iterable[str] = (), load_order: int | None = None) -> int:
        if load_order is None:
            load_order = max((plugin.load_order for _, plugin in self.world.get_component(Plugin)), default=-1) + 1
        return self.world.create_entity(Plugin(name=name, load_order=load_order, flags=set(flags)))

    def plugin(self, plugin_entity: int) -> Plugin:
        return self.world.component_for_entity(plugin_entity, Plugin)

    def plugins(self) -> List[int]:
        entries = sorted(self.world.get_component(Plugin), key=lambda item: item[1].load_order)
        return [entity for entity, _ in entries]

    def find_plugin(self, name: str) -> int | None:
        for entity, plugin in self.world.get_component(Plugin):
            if plugin.name.lower() == name.lower():
                return entity
        return None

    def set_plugin_flag(self, plugin_entity: int, flag: str, enabled: bool) -> None:
        flags = self.plugin(plugin_entity).flags
        if enabled:
            flags.add(flag)
        else:
            flags.discard(flag)

    def ignore(self, names: Iterable[str]) -> None:
        self._ignored.update(name.lower() for name in names)

    def is_ignored(self, plugin_entity: int) -> bool:
        return self.plugin(plugin_entity).name.lower() in self._ignored

    # ------------------------------------------------------------------
    # Records
    # ------------------------------------------------------------------

    def add_record(self, plugin_entity: int, form_id: int, name: str, effects: Sequence[RawEffect]) -> int:
        return self.world.create_entity(
            IngredientRecord(form_id=form_id, name=name, plugin_entity=plugin_entity),
            EffectGroup(effects=list(effects)),
        )

    def _record(self, record: int) -> IngredientRecord:
        return self.world.component_for_entity(record, IngredientRecord)

    def _load_order(self, record: int) -> int:
        return self.plugin(self._record(record).plugin_entity).load_order

    def _versions(self, form_id: int) -> List[int]:
        versions = [
            entity
            for entity, rec in self.world.get_component(IngredientRecord)
            if rec.form_id == form_id
        ]
        versions.sort(key=self._load_order)
        return versions

    def load_records(self, kind: str = INGREDIENT_KIND) -> List[int]:
        """Return one entity per distinct form id, skipping ignored plugins.

        The returned entity is the earliest non-ignored version of the record,
        in ascending form id order.
        """
        if kind != INGREDIENT_KIND:
            raise DataUnavailableError(f"Unsupported record kind '{kind}'")
        seen: dict[int, int] = {}
        for entity, rec in self.world.get_component(IngredientRecord):
            if self.is_ignored(rec.plugin_entity):
                continue
            current = seen.get(rec.form_id)
            if current is None or self._load_order(entity) < self._load_order(current):
                seen[rec.form_id] = entity
        if not seen:
            raise DataUnavailableError(f"Failed to load {kind} records!")
        logger.info("Loaded %d %s records", len(seen), kind)
        return [seen[form_id] for form_id in sorted(seen)]

    def resolve_winning_override(self, record: int) -> int:
        versions = [
            entity for entity in self._versions(self._record(record).form_id)
            if not self.is_ignored(self._record(entity).plugin_entity)
        ]
        return versions[-1] if versions else record

    def get_master_version(self, record: int) -> int:
        versions = self._versions(self._record(record).form_id)
        return versions[0] if versions else record

    def records_in_plugin(self, plugin_entity: int, kind: str = INGREDIENT_KIND) -> List[int]:
        if kind != INGREDIENT_KIND:
            return []
        return [
            entity
            for entity, rec in self.world.get_component(IngredientRecord)
            if rec.plugin_entity == plugin_entity
        ]

    def copy_to_plugin(self, record: int, plugin_entity: int) -> int:
        """Create (or reuse) the override of ``record`` inside ``plugin_entity``."""
        rec = self._record(record)
        for entity in self.records_in_plugin(plugin_entity):
            if self._record(entity).form_id == rec.form_id:
                return entity
        return self.add_record(plugin_entity, rec.form_id, rec.name, self.get_effect_entries(record))

    def get_effect_group(self, record: int) -> EffectGroup:
        return self.world.component_for_entity(record, EffectGroup)

    def get_effect_entries(self, record: int) -> List[RawEffect]:
        return list(self.get_effect_group(record).effects)

    def set_effect_group(self, record: int, effects: Sequence[RawEffect]) -> None:
        self.get_effect_group(record).effects = list(effects)

    def set_effect_entry(self, record: int, slot_index: int, occurrence: RawEffect) -> None:
        effects = self.get_effect_group(record).effects
        if slot_index < len(effects):
            effects[slot_index] = occurrence
        elif slot_index == len(effects):
            effects.append(occurrence)
        else:
            raise IndexError(f"Effect slot {slot_index} is past the end of a {len(effects)}-entry group")

    # ------------------------------------------------------------------
    # Identity helpers
    # ------------------------------------------------------------------

    def identity(self, record: int) -> int:
        return self._record(record).form_id

    def display_id(self, record: int) -> str:
        return format_form_id(self.identity(record))

    def display_name(self, record: int) -> str:
        return self._record(record).name
