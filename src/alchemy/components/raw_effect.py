from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class RawEffect:
    """One effect occurrence as stored on an ingredient record.

    effect_form_id: form id of the referenced magic effect definition.
    magnitude/area/duration: instance parameters of this occurrence.
    Frozen so the same occurrence can be referenced by several records.
    """

    effect_form_id: int
    effect_name: str = ""
    magnitude: float = 0.0
    area: int = 0
    duration: int = 0
