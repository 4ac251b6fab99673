"""
Game folder discovery.

Folder name normalization and the library scan pass.
"""

from gamevault.catalog.normalizer import (
    NormalizedTitle,
    clean_title,
    exclusion_reason,
    normalize,
)
from gamevault.catalog.scanner import LibraryScanner, ScannedFolder, ScanSummary

__all__ = [
    "LibraryScanner",
    "NormalizedTitle",
    "ScanSummary",
    "ScannedFolder",
    "clean_title",
    "exclusion_reason",
    "normalize",
]
