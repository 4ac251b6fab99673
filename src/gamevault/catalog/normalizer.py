"""
Folder name normalization.

Turns a raw game folder name (as produced by release groups, repackers
and portable builds) into a clean candidate title, and decides whether
the folder looks like a game at all.
"""

import re
from typing import NamedTuple

# Removal rules, applied in order to derive the clean title.
CLEANUP_PATTERNS: tuple[re.Pattern[str], ...] = tuple(
    re.compile(p)
    for p in (
        r"(?i)\[FitGirl.*?\]",
        r"(?i)\[DODI.*?\]",
        r"(?i)\[[^\]]*?Repack[^\]]*?\]",
        r"(?i)\[[^\]]*?Monkey[^\]]*?\]",
        r"(?i)\[BluRay\]",
        r"(?i)\[(?:720|1080|2160)p\]",
        r"(?i)\[YTS.*?\]",
        r"(?i)\[YIFY\]",
        r"Portable\s+by\s+\w+",
        r"\bby\s+\w+$",
        r"\s*\bv\d+(?:\.\d+)*\w*",
        r"\s*-\s*(?:HRTP|EE|NG|MCE|CGC)$",
        r"\s*NG\s*-\s*HRTP$",
        r"\s*-\s*Dilogy$",
        r"\s*\(.*?\)",
        r"\s+$",
        r"^\s+",
    )
)

# Rules matched against the raw name; any hit marks non-game content.
EXCLUSION_PATTERNS: tuple[re.Pattern[str], ...] = tuple(
    re.compile(p, re.IGNORECASE)
    for p in (
        r"\[BluRay\]",
        r"\[720p\]",
        r"\[1080p\]",
        r"\[2160p\]",
        r"\[4K\]",
        r"\[YTS",
        r"\[YIFY",
        r"\[RARBG\]",
        r"\[WEB-?DL\]",
        r"\[HDRip\]",
        r"\[BRRip\]",
        r"\[DVDRip\]",
        r"\.mkv$",
        r"\.avi$",
        r"\.mp4$",
        r"S\d{2}E\d{2}",
    )
)

RESERVED_FOLDER_NAMES: frozenset[str] = frozenset({"game-library-app", "GameVault", "Adult"})
ARCHIVE_SUFFIXES: tuple[str, ...] = (".rar", ".zip", ".7z")

_WHITESPACE = re.compile(r"\s+")
_TRAILING_DASH = re.compile(r"\s*-\s*$")


class NormalizedTitle(NamedTuple):
    """Outcome of normalizing one folder name."""

    clean_title: str
    included: bool


def _clean_once(title: str) -> str:
    for pattern in CLEANUP_PATTERNS:
        title = pattern.sub("", title)
    title = _WHITESPACE.sub(" ", title)
    title = _TRAILING_DASH.sub("", title)
    return title.strip()


def clean_title(raw_name: str) -> str:
    """
    Strip release tags, version suffixes and notes from a folder name.

    Rules are re-applied until the title stops changing, which makes
    the function idempotent: ``clean_title(clean_title(x)) == clean_title(x)``.

    Args:
        raw_name: Folder name as found on disk

    Returns:
        str: Clean title, possibly empty
    """
    # Anchored suffix rules strip one suffix per pass; a pass never
    # lengthens the title, so this reaches a fixpoint.
    title = raw_name
    while True:
        cleaned = _clean_once(title)
        if cleaned == title:
            return title
        title = cleaned


def exclusion_reason(raw_name: str) -> str | None:
    """
    Explain why a folder name is not a game, or return None.

    Args:
        raw_name: Folder name as found on disk

    Returns:
        str | None: Short reason for exclusion
    """
    if raw_name.startswith("."):
        return "hidden folder"
    if raw_name in RESERVED_FOLDER_NAMES:
        return "reserved folder name"
    if raw_name.lower().endswith(ARCHIVE_SUFFIXES):
        return "archive file name"
    for pattern in EXCLUSION_PATTERNS:
        if pattern.search(raw_name):
            return f"non-game content ({pattern.pattern})"
    return None


def normalize(raw_name: str) -> NormalizedTitle:
    """
    Normalize a folder name into a candidate title and a verdict.

    Exclusion rules look at the raw name, so a clean-looking title
    never rescues a folder that matched one. An empty clean title is
    excluded as well.

    Args:
        raw_name: Folder name as found on disk

    Returns:
        NormalizedTitle: ``(clean_title, included)``

    Example:
        >>> normalize("Cyberpunk 2077 [FitGirl Repack]")
        NormalizedTitle(clean_title='Cyberpunk 2077', included=True)
    """
    title = clean_title(raw_name)
    included = exclusion_reason(raw_name) is None and bool(title)
    return NormalizedTitle(clean_title=title, included=included)
