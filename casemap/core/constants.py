from typing import Final

# ======================================================
# Serialization vocabulary
# ======================================================
CASEMAP_EXTENSION: Final[str] = ".casemap"
CASEMAP_FILE_VERSION: Final[str] = "1.0"
CASEMAP_HEADER: Final[str] = "__casemap__"
CASEMAP_STATE_TARGET: Final[str] = "target"
