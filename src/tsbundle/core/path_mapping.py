"""
Path mapping resolution for tsbundle.

Implements the `compilerOptions.paths` style rewrite rules: exact rules map a
specifier to one file, wildcard rules (trailing "*") map a specifier prefix to
an ordered list of candidate root directories.

Only non-relative specifiers are handled here; relative ones are resolved
against the importing file by the caller.
"""

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path

from .source_paths import is_path_absolute, join_module_path, source_file_exists, strip_source_ext

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PathMappings:
    """
    Parsed path mapping table.

    Attributes:
        fixed: Exact specifier -> extension-stripped absolute file path
        wildcard: Specifier prefix (without "*") -> target prefixes (absolute, without "*"), in order
    """

    fixed: dict[str, Path] = field(default_factory=dict)
    wildcard: dict[str, list[str]] = field(default_factory=dict)


def resolve_base_url(base_url: str | None, config_dir: Path) -> Path:
    """Resolve a configured base URL; relative values are taken from the config file location."""
    base = base_url or "."
    if is_path_absolute(base):
        return Path(base)
    return (config_dir / base).resolve()


def _target_prefix(base_url: Path, stem: str) -> str:
    # "*" is substituted textually, so a trailing separator must survive normalization
    prefix = str((base_url / stem).resolve())
    if stem in ("", ".") or stem.endswith(("/", "\\")):
        prefix += "/"
    return prefix


def parse_path_mappings(base_url: Path, paths: Mapping[str, Sequence[str]]) -> PathMappings:
    """
    Convert the configured rules into a PathMappings table.

    Exact rules keep only their first existing target; wildcard rules keep all
    candidate roots, existence is checked at resolve time.
    """
    fixed: dict[str, Path] = {}
    wildcard: dict[str, list[str]] = {}

    for key, targets in paths.items():
        if key.endswith("*"):
            non_wild = [t for t in targets if not t.endswith("*")]
            if non_wild:
                logger.warning(
                    'Path mapping "%s" is a wildcard, but target(s) "%s" are not. '
                    "Will treat them as wildcarded.",
                    key,
                    '", "'.join(non_wild),
                )
            roots = [_target_prefix(base_url, t.removesuffix("*")) for t in targets]
            wildcard[key.removesuffix("*")] = roots
            continue

        wild = [t for t in targets if t.endswith("*")]
        if wild:
            logger.warning(
                'Path mapping "%s" is not a wildcard, but target(s) "%s" are. '
                "Ignoring these targets.",
                key,
                '", "'.join(wild),
            )
        candidates = [(base_url / t).resolve() for t in targets if not t.endswith("*")]
        existing = [c for c in candidates if source_file_exists(c)]
        if not existing:
            logger.warning(
                'Found none of the targets of path mapping "%s": tried "%s".',
                key,
                '", "'.join(str(c) for c in candidates),
            )
            continue
        # Several targets act as fallbacks, first existing one wins
        fixed[key] = Path(strip_source_ext(str(existing[0])))

    return PathMappings(fixed=fixed, wildcard=wildcard)


class PathMappingResolver:
    """
    Resolves non-relative module specifiers through path mapping rules.

    Returns None whenever the specifier cannot be tied to exactly one file;
    such specifiers are expected to be loaded by the environment at runtime.
    """

    def __init__(self, base_url: Path, paths: Mapping[str, Sequence[str]] | None = None):
        self.base_url = base_url
        self.mappings = parse_path_mappings(base_url, paths or {})

    def resolve(self, specifier: str) -> Path | None:
        """
        Resolve specifier to an extension-stripped absolute file path.

        Args:
            specifier: Non-relative module specifier, e.g. "lib/button"

        Returns:
            Path of the single matching file, or None if unresolved or ambiguous
        """
        fixed = self.mappings.fixed.get(specifier)
        if fixed is not None:
            return fixed

        matched_prefixes: list[str] = []
        matched_files: list[Path] = []

        def try_prefix(prefix: str, roots: list[str]) -> None:
            if not specifier.startswith(prefix):
                return
            matched_prefixes.append(prefix)
            remainder = specifier[len(prefix) :]
            for root in roots:
                candidate = join_module_path(root, remainder)
                if source_file_exists(candidate):
                    found = Path(strip_source_ext(str(candidate)))
                    if found not in matched_files:
                        matched_files.append(found)
                    break

        # If any configured prefix matches, only its roots are searched;
        # otherwise behave as if "*": ["./*"] was configured.
        for prefix, roots in self.mappings.wildcard.items():
            try_prefix(prefix, roots)
        if not matched_prefixes:
            try_prefix("", [_target_prefix(self.base_url, "./")])

        if len(matched_files) == 1:
            return matched_files[0]

        if len(matched_files) > 1:
            logger.warning(
                'Module specifier "%s" matches path mapping prefixes "%s" and multiple files '
                'are found within them: "%s". Will pick neither of them.',
                specifier,
                '", "'.join(matched_prefixes),
                '", "'.join(str(f) for f in matched_files),
            )
        # Matched prefixes without files are normal for external packages
        return None
