"""
tsbundle - single-file bundler for compiled TypeScript module graphs.

Orders a project's modules for safe instantiation and packs them, together
with a small loader runtime, into one self-executing JS file.
"""

from __future__ import annotations

from ._version import get_version
from .core.errors import BundleError, ConfigError, StoreError, TsBundleError

__version__ = get_version()

__all__ = [
    "__version__",
    "TsBundleError",
    "ConfigError",
    "StoreError",
    "BundleError",
]
