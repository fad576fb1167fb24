"""
Error types for tsbundle configuration, module storage and bundle assembly.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional


class TsBundleError(Exception):
    """Base exception for all tsbundle errors."""

    def __init__(self, message: str, context: Optional["ErrorContext"] = None):
        self.message = message
        self.context = context
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format error message with context if available."""
        if self.context:
            return f"{self.context.format()}: {self.message}"
        return self.message


class ConfigError(TsBundleError):
    """
    Raised when project configuration cannot be loaded.

    Examples:
    - Missing tsbundle.toml
    - Invalid TOML
    - Required key absent
    - Unknown profile
    """

    pass


class StoreError(TsBundleError):
    """
    Raised when the module store cannot be read or persisted.

    Examples:
    - Snapshot file missing or unreadable
    - Malformed module record in snapshot
    """

    pass


class UnknownModuleError(StoreError):
    """Raised when a module name is not present in the store."""

    pass


class BundleError(TsBundleError):
    """
    Raised when a bundle cannot be assembled.

    A partially assembled bundle is never written, so every one of these
    aborts the whole build.

    Examples:
    - Module in bundle order has no compiled code
    - Entry module is unknown
    - Shared runtime helper directory missing
    - Module name rejected by blacklist/whitelist
    """

    pass


class MinificationError(BundleError):
    """Raised when the minifier is unavailable or fails on some input."""

    pass


@dataclass
class ErrorContext:
    """
    Context information for an error.

    Attributes:
        file: Optional path to the file involved
        module: Optional canonical module name involved
    """

    file: Path | None = None
    module: str | None = None

    def format(self) -> str:
        """
        Format error context as a human-readable string.

        Returns:
            Formatted string like: "build/app/main.js (module /app/main)"
        """
        if self.file and self.module:
            return f"{self.file} (module {self.module})"
        if self.file:
            return str(self.file)
        return f"module {self.module}"


def make_bundle_error(
    message: str,
    file: Path | None = None,
    module: str | None = None,
) -> BundleError:
    """
    Helper to create a BundleError with optional context.

    Args:
        message: Error description
        file: Optional file path
        module: Optional module name

    Returns:
        BundleError with context if any location provided
    """
    if file or module:
        return BundleError(message, ErrorContext(file=file, module=module))
    return BundleError(message)
