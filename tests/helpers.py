from __future__ import annotations

import random
from typing import Iterable, Sequence

from esper import World

from alchemy.components.raw_effect import RawEffect
from alchemy.systems.record_store import RecordStore
from alchemy.world import create_world


def make_effect(form_id: int, name: str | None = None, magnitude: float = 1.0, area: int = 0, duration: int = 0) -> RawEffect:
    """Build an effect occurrence; the name defaults to one derived from the id."""
    return RawEffect(
        effect_form_id=form_id,
        effect_name=name if name is not None else f"Effect {form_id:X}",
        magnitude=magnitude,
        area=area,
        duration=duration,
    )


def add_ingredient(store: RecordStore, plugin: int, form_id: int, effect_ids: Iterable[int], name: str | None = None) -> int:
    effects = [make_effect(effect_id) for effect_id in effect_ids]
    return store.add_record(plugin, form_id, name or f"Ingredient {form_id:X}", effects)


def build_store(
    ingredients: Sequence[Sequence[int]],
    *,
    seed: int = 1234,
    plugin_name: str = "Skyrim.esm",
    first_form_id: int = 0x100,
) -> tuple[World, RecordStore, int, list[int]]:
    """Create a world with one plugin holding an ingredient per effect id list."""
    world = create_world(rng=random.Random(seed))
    store = RecordStore(world)
    plugin = store.create_plugin(plugin_name)
    records = [
        add_ingredient(store, plugin, first_form_id + offset, effect_ids)
        for offset, effect_ids in enumerate(ingredients)
    ]
    return world, store, plugin, records
