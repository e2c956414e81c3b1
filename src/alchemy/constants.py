# Number of effect slots every patched ingredient ends up with.
EFFECT_SLOTS = 4

# Fractional digits kept when rendering or comparing magnitudes.
MAGNITUDE_PLACES = 6

# Upper bound of draws spent on a single record before giving up.
DEFAULT_MAX_DRAW_ATTEMPTS = 1000

# Record kind handled by the patcher (ingredient records).
INGREDIENT_KIND = "INGR"

# Header flag toggled on the generated patch plugin.
ESL_FLAG = "ESL"

DEFAULT_PATCH_FILE_NAME = "RandomAlchemyPatch.esp"
DEFAULT_LOG_FILE_NAME = "RandomizeAlchemyLog.txt"

# Separator written between records in the change log.
LOG_RECORD_SEPARATOR = "=============================="
