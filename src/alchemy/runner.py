"""Wires the systems together and drives one patching run."""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import List

from esper import World

from alchemy.events.bus import EventBus
from alchemy.settings import PatcherSettings
from alchemy.systems.change_log_system import ChangeLogSystem
from alchemy.systems.patch_planner_system import PatchPlannerSystem
from alchemy.systems.record_store import RecordStore


@dataclass(slots=True)
class PatchResult:
    plugin_entity: int
    patched_records: List[int]
    log_path: Path
    log_lines: List[str]


def run_patch(
    world: World,
    event_bus: EventBus,
    settings: PatcherSettings,
    *,
    store: RecordStore | None = None,
) -> PatchResult:
    """Run initialize, select targets, patch each one and finalize."""
    planner = PatchPlannerSystem(world, event_bus, settings, store=store)
    change_log = ChangeLogSystem(world, event_bus, store=planner.store, log_path=settings.log_path)
    planner.initialize()
    for record in planner.select_targets():
        planner.patch_one(record)
    planner.finalize()
    if planner.patch_plugin is None:
        raise RuntimeError("Patch run finished without a patch plugin")
    return PatchResult(
        plugin_entity=planner.patch_plugin,
        patched_records=list(planner.patched),
        log_path=settings.log_path,
        log_lines=list(change_log.lines),
    )
