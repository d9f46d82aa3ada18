"""
pallet_api package

Pallet recommendation and multi-item pallet allocation for furniture
shipments, with a FastAPI wrapper around the pure-Python core.

This initializer exposes a small, stable surface:
- __version__: package version string
- get_version(): helper to retrieve the version

The computational modules (`fitting`, `packer`, `pricing`, `optimizer`,
`packing`) are imported explicitly by callers. Keep this file minimal to avoid
import-time side-effects.
"""

from typing import Final

__all__ = ["__version__", "get_version"]

__version__: Final[str] = "0.2.0"


def get_version() -> str:
    """
    Return the package version.
    """
    return __version__
