"""
GameVault.

Catalogs locally stored game folders, enriches them with Steam
metadata and keeps a JSON sidecar in every folder in sync with
the library database.
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
