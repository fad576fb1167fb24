"""
Bundle bootstrap runtime.

The loader source is shipped as package data and embedded at the start of
every wrapped bundle, where it is immediately invoked with the module
definitions, the launch parameters and the code evaluation function.
"""

from functools import cache
from pathlib import Path


def _loader_path() -> Path:
    return Path(__file__).parent / "loader.js"


@cache
def get_loader_code() -> str:
    """Return the loader source: a single anonymous function expression."""
    return _loader_path().read_text(encoding="utf-8")
