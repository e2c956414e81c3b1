"""JSON persistence for plugins and their ingredient records.

Layout::

    {"plugins": [
        {"name": "Skyrim.esm", "flags": [],
         "ingredients": [
             {"form_id": "0x0006BC00", "name": "Bear Claws",
              "effects": [{"effect_id": "0x0003EB01", "name": "Restore Stamina",
                           "magnitude": 1.0, "area": 0, "duration": 0}]}]}]}

Plugins load in list order. Ids may be given as ints or hex strings.
"""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Mapping

from esper import World

from alchemy.components.raw_effect import RawEffect
from alchemy.effects.effect_record import format_form_id
from alchemy.errors import DataUnavailableError
from alchemy.systems.record_store import RecordStore

logger = logging.getLogger(__name__)


def parse_form_id(value: Any) -> int:
    if isinstance(value, int):
        return value
    text = str(value).strip()
    try:
        return int(text, 16)
    except ValueError as exc:
        raise DataUnavailableError(f"Invalid form id '{value}'") from exc


def _effect_from_json(payload: Mapping[str, Any]) -> RawEffect:
    return RawEffect(
        effect_form_id=parse_form_id(payload["effect_id"]),
        effect_name=str(payload.get("name", "")),
        magnitude=float(payload.get("magnitude", 0.0)),
        area=int(payload.get("area", 0)),
        duration=int(payload.get("duration", 0)),
    )


def _effect_to_json(effect: RawEffect) -> dict[str, Any]:
    return {
        "effect_id": f"0x{format_form_id(effect.effect_form_id)}",
        "name": effect.effect_name,
        "magnitude": effect.magnitude,
        "area": effect.area,
        "duration": effect.duration,
    }


def load_database(world: World, path: Path) -> RecordStore:
    """Populate ``world`` with the plugins stored at ``path``."""
    try:
        with Path(path).open("r", encoding="utf-8") as handle:
            payload = json.load(handle)
    except FileNotFoundError as exc:
        raise DataUnavailableError(f"Record database '{path}' does not exist") from exc
    except json.JSONDecodeError as exc:
        raise DataUnavailableError(f"Record database '{path}' is not valid JSON: {exc}") from exc
    store = RecordStore(world)
    populate(store, payload)
    return store


def populate(store: RecordStore, payload: Mapping[str, Any]) -> None:
    plugins = payload.get("plugins") if isinstance(payload, Mapping) else None
    if not isinstance(plugins, list):
        raise DataUnavailableError("Record database must contain a 'plugins' list")
    for plugin_data in plugins:
        plugin = store.create_plugin(str(plugin_data["name"]), flags=plugin_data.get("flags", ()))
        for ingredient in plugin_data.get("ingredients", []):
            try:
                effects = [_effect_from_json(effect) for effect in ingredient.get("effects", [])]
                store.add_record(plugin, parse_form_id(ingredient["form_id"]), str(ingredient.get("name", "")), effects)
            except (KeyError, TypeError, ValueError) as exc:
                raise DataUnavailableError(
                    f"Malformed ingredient in plugin '{plugin_data['name']}': {exc}"
                ) from exc
    logger.debug("Loaded %d plugins", len(plugins))


def plugin_to_json(store: RecordStore, plugin_entity: int) -> dict[str, Any]:
    plugin = store.plugin(plugin_entity)
    records = sorted(store.records_in_plugin(plugin_entity), key=store.identity)
    return {
        "name": plugin.name,
        "flags": sorted(plugin.flags),
        "ingredients": [
            {
                "form_id": f"0x{store.display_id(record)}",
                "name": store.display_name(record),
                "effects": [_effect_to_json(effect) for effect in store.get_effect_entries(record)],
            }
            for record in records
        ],
    }


def save_plugin(store: RecordStore, plugin_entity: int, path: Path) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as handle:
        json.dump({"plugins": [plugin_to_json(store, plugin_entity)]}, handle, indent=2)
    return path
