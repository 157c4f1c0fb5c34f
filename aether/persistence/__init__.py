"""
Persistence - Save codes for exporting and importing a game.
"""

from .transport import SaveCodeError, encode, decode
from .codec import (
    SAVE_VERSION,
    SaveState,
    SavedCardInstance,
    export_save,
    import_save,
    decode_save,
)

__all__ = [
    "SaveCodeError",
    "encode",
    "decode",
    "SAVE_VERSION",
    "SaveState",
    "SavedCardInstance",
    "export_save",
    "import_save",
    "decode_save",
]
