from dataclasses import dataclass


@dataclass(slots=True)
class IngredientRecord:
    """Identity of an ingredient record inside a plugin.

    Several entities may share a form_id; each is the version of that record
    defined by the plugin referenced through plugin_entity.
    """

    form_id: int
    name: str
    plugin_entity: int
