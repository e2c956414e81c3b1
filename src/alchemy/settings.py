"""Patcher settings and their validation."""
from __future__ import annotations

import json
from dataclasses import dataclass, field, fields, replace
from enum import Enum
from pathlib import Path
from typing import Any, Mapping

from alchemy.constants import (
    DEFAULT_LOG_FILE_NAME,
    DEFAULT_MAX_DRAW_ATTEMPTS,
    DEFAULT_PATCH_FILE_NAME,
)
from alchemy.errors import ConfigurationError


class RandomizationType(Enum):
    """How effects are redistributed between ingredients."""
    GROUPS = "groups"
    DISTRIBUTION = "distribution"
    INCLUSION = "inclusion"
    NO_INCLUSION = "noInclusion"

    @classmethod
    def parse(cls, value: Any) -> "RandomizationType":
        if isinstance(value, cls):
            return value
        for member in cls:
            if member.value == value or member.name.lower() == str(value).lower():
                return member
        raise ConfigurationError("Invalid randomization type selected!")


# Settings file keys (camelCase, as written by the settings page)
# mapped onto field names. Both spellings of renamed options are accepted.
_KEY_ALIASES = {
    "randType": "rand_type",
    "ignoreDist": "ignore_dist",
    "setEsl": "set_esl",
    "setFlagX": "set_esl",
    "showLog": "show_log",
    "logVisible": "show_log",
    "patchFileName": "patch_file_name",
    "outputFileName": "patch_file_name",
    "ignoredFiles": "ignored_files",
    "excludedSources": "ignored_files",
    "logPath": "log_path",
    "maxDrawAttempts": "max_draw_attempts",
}

_BOOL_FIELDS = ("ignore_dist", "set_esl", "show_log")


@dataclass(slots=True)
class PatcherSettings:
    rand_type: RandomizationType = RandomizationType.GROUPS
    ignore_dist: bool = False
    set_esl: bool = True
    show_log: bool = False
    patch_file_name: str = DEFAULT_PATCH_FILE_NAME
    ignored_files: list[str] = field(default_factory=list)
    log_path: Path = Path(DEFAULT_LOG_FILE_NAME)
    seed: int | None = None
    max_draw_attempts: int = DEFAULT_MAX_DRAW_ATTEMPTS

    def __post_init__(self) -> None:
        self.rand_type = RandomizationType.parse(self.rand_type)
        self.log_path = Path(self.log_path)
        self.ignored_files = [str(name) for name in (self.ignored_files or [])]
        for name in _BOOL_FIELDS:
            value = getattr(self, name)
            if not isinstance(value, bool):
                raise ConfigurationError(f"{name} must be true or false, got {value!r}")
        try:
            self.max_draw_attempts = int(self.max_draw_attempts)
        except (TypeError, ValueError) as exc:
            raise ConfigurationError(f"max_draw_attempts must be an integer, got {self.max_draw_attempts!r}") from exc
        if self.max_draw_attempts <= 0:
            raise ConfigurationError("max_draw_attempts must be positive")
        if not self.patch_file_name:
            raise ConfigurationError("patch_file_name must not be empty")

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "PatcherSettings":
        known = {f.name for f in fields(cls)}
        kwargs: dict[str, Any] = {}
        for key, value in data.items():
            name = _KEY_ALIASES.get(key, key)
            if name not in known:
                raise ConfigurationError(f"Unknown setting '{key}'")
            kwargs[name] = value
        if "rand_type" in kwargs and kwargs["rand_type"] in (None, ""):
            raise ConfigurationError("Invalid randomization type selected!")
        return cls(**kwargs)

    @classmethod
    def load(cls, path: Path) -> "PatcherSettings":
        try:
            with Path(path).open("r", encoding="utf-8") as handle:
                payload = json.load(handle)
        except FileNotFoundError as exc:
            raise ConfigurationError(f"Settings file '{path}' does not exist") from exc
        except json.JSONDecodeError as exc:
            raise ConfigurationError(f"Settings file '{path}' is not valid JSON: {exc}") from exc
        if not isinstance(payload, dict):
            raise ConfigurationError(f"Settings file '{path}' must contain a JSON object")
        return cls.from_mapping(payload)

    def with_overrides(self, **overrides: Any) -> "PatcherSettings":
        """Return a copy with every non-None override applied."""
        changes = {key: value for key, value in overrides.items() if value is not None}
        return replace(self, **changes)

    def summary(self) -> str:
        return "\n".join([
            "PATCHER SETTINGS:",
            f"Ignored files: {', '.join(self.ignored_files)}",
            f"Randomization type: {self.rand_type.value}",
            f"ignoreDist: {str(self.ignore_dist).lower()}",
            f"setEsl: {str(self.set_esl).lower()}",
            f"patchFileName: {self.patch_file_name}",
        ])
