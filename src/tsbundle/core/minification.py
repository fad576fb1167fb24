"""
Code minification.

The bundler treats minification as a pure function of (code, target, label).
The default implementation shells out to the terser CLI.
"""

from __future__ import annotations

import logging
import re
import shutil
import subprocess
from collections.abc import Mapping
from typing import Any, Protocol

from .errors import MinificationError

logger = logging.getLogger(__name__)

_ES_YEAR = re.compile(r"^ES(\d{4})$")


class Minifier(Protocol):
    """Minification function: (code, target version, label for messages) -> code."""

    def __call__(self, code: str, target: str, label: str) -> str: ...


def ecma_version(target: str) -> int:
    """
    Convert a script target name ("ES5", "ES2017", "ESNext") to terser's --ecma value.
    """
    name = target.upper()
    if name in ("ES3", "ES5"):
        return 5
    if name == "ES6":
        return 2015
    if match := _ES_YEAR.match(name):
        return min(int(match.group(1)), 2020)
    return 2020


def _compress_args(options: Mapping[str, Any]) -> list[str]:
    """Render compress options as terser's "key=value,..." argument."""
    if not options:
        return []
    parts = []
    for key, value in sorted(options.items()):
        if isinstance(value, bool):
            value = "true" if value else "false"
        parts.append(f"{key}={value}")
    return [",".join(parts)]


class TerserMinifier:
    """Minifies JS code with the terser command line tool."""

    def __init__(
        self,
        binary: str | None = None,
        timeout: float = 120.0,
        compress_options: Mapping[str, Any] | None = None,
    ):
        self.binary = binary
        self.timeout = timeout
        self.compress_options = dict(compress_options or {})

    def _find_binary(self) -> str:
        binary = self.binary or shutil.which("terser")
        if binary is None:
            raise MinificationError(
                "Cannot minify: terser CLI not available. Install it with: npm install -g terser"
            )
        return binary

    def __call__(self, code: str, target: str, label: str) -> str:
        cmd = [
            self._find_binary(),
            "--compress",
            *_compress_args(self.compress_options),
            "--mangle",
            "--ecma",
            str(ecma_version(target)),
        ]
        logger.debug("Minifying %s: %s", label, " ".join(cmd))
        try:
            proc = subprocess.run(
                cmd,
                input=code,
                capture_output=True,
                text=True,
                timeout=self.timeout,
                check=False,
            )
        except (OSError, subprocess.TimeoutExpired) as e:
            raise MinificationError(f"Failed to minify {label}: {e}") from e

        if proc.returncode != 0:
            raise MinificationError(f"Failed to minify {label}: {proc.stderr.strip()}")
        return proc.stdout
