from blinker import Signal
from typing import Dict

class EventBus:
    """Simple event bus leveraging blinker Signal objects."""
    def __init__(self):
        self._signals: Dict[str, Signal] = {}

    def subscribe(self, name: str, fn):
        sig = self._signals.setdefault(name, Signal(name))
        # Use weak=False so lambdas and unbound handlers stay connected.
        sig.connect(fn, weak=False)

    def emit(self, name: str, **payload):
        sig = self._signals.get(name)
        if sig:
            sig.send(self, **payload)


# ============================================================================
# RUN LIFECYCLE
# ============================================================================
EVENT_PATCH_INITIALIZED = "patch_initialized"      # payload: settings=PatcherSettings, source_count=int, pool_size=int
EVENT_TARGETS_SELECTED = "targets_selected"        # payload: records=list[int]
EVENT_PATCH_FINALIZED = "patch_finalized"          # payload: plugin_entity=int, settings=PatcherSettings


# ============================================================================
# PER-RECORD PATCHING
# ============================================================================
EVENT_EFFECT_DRAW_REJECTED = "effect_draw_rejected"  # payload: record=int, slot=int, effect_id=str, attempts=int
EVENT_RECORD_PATCHED = "record_patched"              # payload: record=int, source_record=int, effects=list[EffectRecord]|None, mode=RandomizationType


# ============================================================================
# CHANGE LOG
# ============================================================================
EVENT_CHANGE_LOG_WRITTEN = "change_log_written"    # payload: path=Path, lines=list[str]
EVENT_CHANGE_LOG_OPEN = "change_log_open"          # payload: path=Path, text=str
