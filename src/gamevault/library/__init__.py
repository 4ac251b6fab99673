"""Manual edits and rematching."""

from gamevault.library.editor import (
    EntryUpdate,
    LibraryEditor,
    RematchError,
    RematchPreview,
    parse_steam_input,
)

__all__ = [
    "EntryUpdate",
    "LibraryEditor",
    "RematchError",
    "RematchPreview",
    "parse_steam_input",
]
