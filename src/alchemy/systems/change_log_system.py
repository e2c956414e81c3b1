from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Callable, List

from esper import World

from alchemy.constants import LOG_RECORD_SEPARATOR
from alchemy.effects.effect_record import EffectRecord
from alchemy.events.bus import (
    EVENT_CHANGE_LOG_OPEN,
    EVENT_CHANGE_LOG_WRITTEN,
    EVENT_PATCH_FINALIZED,
    EVENT_PATCH_INITIALIZED,
    EventBus,
)
from alchemy.systems.record_store import RecordStore

logger = logging.getLogger(__name__)


class ChangeLogSystem:
    """Collects the before/after effects of every patched ingredient.

    Lines are only ever appended. The header is written when the run is
    initialized; the per-record diff is rendered on finalize, sorted by form
    id so the log does not depend on the (shuffled) patch order.
    """

    def __init__(
        self,
        world: World,
        event_bus: EventBus,
        *,
        store: RecordStore | None = None,
        log_path: Path | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.world = world
        self.event_bus = event_bus
        self.store = store or RecordStore(world)
        self._log_path = Path(log_path) if log_path is not None else None
        self._clock = clock
        self.lines: List[str] = []
        self.event_bus.subscribe(EVENT_PATCH_INITIALIZED, self._on_patch_initialized)
        self.event_bus.subscribe(EVENT_PATCH_FINALIZED, self._on_patch_finalized)

    @property
    def text(self) -> str:
        return "\n".join(self.lines)

    def append_header(self, settings_summary: str) -> None:
        self.lines.append(self._clock().strftime("%a %b %d %Y %H:%M:%S"))
        self.lines.append("")
        self.lines.append(settings_summary)

    def append_record(self, name: str, record_id: str, original: List[EffectRecord], current: List[EffectRecord]) -> None:
        self.lines.append(LOG_RECORD_SEPARATOR)
        self.lines.append(f"INGR: {name} [{record_id}]")
        self.lines.append("Original effects:")
        self.lines.extend(f"- {effect.describe()}" for effect in original)
        self.lines.append("New effects:")
        self.lines.extend(f"- {effect.describe()}" for effect in current)

    def log_plugin_changes(self, plugin_entity: int) -> None:
        logger.info("Logging INGR changes...")
        records = sorted(self.store.records_in_plugin(plugin_entity), key=self.store.identity)
        for record in records:
            master = self.store.get_master_version(record)
            original = [EffectRecord.from_occurrence(raw) for raw in self.store.get_effect_entries(master)]
            current = [EffectRecord.from_occurrence(raw) for raw in self.store.get_effect_entries(record)]
            self.append_record(self.store.display_name(record), self.store.display_id(record), original, current)

    def write(self, path: Path) -> Path:
        path = Path(path)
        logger.info("Saving log file to %s...", path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.text, encoding="utf-8")
        self.event_bus.emit(EVENT_CHANGE_LOG_WRITTEN, path=path, lines=list(self.lines))
        return path

    # Event handlers -----------------------------------------------------

    def _on_patch_initialized(self, sender, **payload) -> None:
        settings = payload.get("settings")
        if settings is None:
            return
        self.append_header(settings.summary())

    def _on_patch_finalized(self, sender, **payload) -> None:
        plugin_entity = payload.get("plugin_entity")
        if plugin_entity is None:
            return
        self.log_plugin_changes(plugin_entity)
        settings = payload.get("settings")
        path = self._log_path or getattr(settings, "log_path", None)
        if path is None:
            return
        written = self.write(path)
        if settings is not None and settings.show_log:
            logger.info("Opening log file...")
            self.event_bus.emit(EVENT_CHANGE_LOG_OPEN, path=written, text=self.text)
