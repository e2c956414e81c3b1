from dataclasses import dataclass, field
from typing import Set


@dataclass(slots=True)
class Plugin:
    """A loaded plugin file; higher load_order wins when records overlap."""

    name: str
    load_order: int
    flags: Set[str] = field(default_factory=set)
