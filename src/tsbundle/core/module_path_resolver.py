"""
Module specifier canonicalization for tsbundle.

Turns any import specifier seen in a source file into the name the module is
known by in the bundle: project files get a canonical "/dir/name" identity,
everything else (ambient modules, external libraries, unknown specifiers)
passes through verbatim and is left for the runtime to provide.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from .path_mapping import PathMappingResolver
from .source_paths import SOURCE_EXTENSIONS, strip_source_ext

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolvedSpecifier:
    """Outcome of resolving a specifier from some origin file."""

    resolved_file_name: Path
    is_external_library_import: bool = False


class SpecifierResolver(Protocol):
    """Specifier resolution primitive, normally supplied by the compiler front end."""

    def resolve(self, specifier: str, origin_file: Path) -> ResolvedSpecifier | None: ...


class FileSystemSpecifierResolver:
    """
    Resolves specifiers by looking at the file system.

    Relative specifiers are taken from the importing file's directory, bare
    ones go through path mappings and then node_modules.
    """

    def __init__(self, path_mapping: PathMappingResolver, project_dir: Path):
        self.path_mapping = path_mapping
        self.project_dir = project_dir

    def resolve(self, specifier: str, origin_file: Path) -> ResolvedSpecifier | None:
        if _is_relative(specifier):
            found = _find_source_file((Path(origin_file).parent / specifier).resolve())
            return ResolvedSpecifier(found) if found else None

        mapped = self.path_mapping.resolve(specifier)
        if mapped is not None:
            found = _find_source_file(mapped)
            if found:
                return ResolvedSpecifier(found)

        package_dir = self.project_dir / "node_modules" / _package_name(specifier)
        if package_dir.is_dir():
            return ResolvedSpecifier(package_dir, is_external_library_import=True)

        return None


class ModulePathResolver:
    """Finds the canonical module name an import specifier refers to."""

    def __init__(
        self,
        module_root: Path,
        specifier_resolver: SpecifierResolver,
        ambient_modules: set[str] | None = None,
    ):
        self.module_root = module_root
        self.specifier_resolver = specifier_resolver
        self.ambient_modules = set(ambient_modules or ())

    def resolve_specifier(self, specifier: str, origin_file: Path) -> str:
        """
        Get the canonical module name if specifier points to a project file.

        Any other specifier is returned as is.
        """
        if specifier in self.ambient_modules:
            return specifier

        resolved = self.specifier_resolver.resolve(specifier, origin_file)
        if resolved is None:
            logger.debug("Specifier %r from %s is not resolved, keeping as is", specifier, origin_file)
            return specifier
        if resolved.is_external_library_import:
            return specifier
        return self.canonical_module_name(resolved.resolved_file_name)

    def canonical_module_name(self, path: Path | str) -> str:
        """Convert a project module file path to its canonical module name."""
        relative = os.path.relpath(path, self.module_root).replace("\\", "/")
        return "/" + strip_source_ext(relative)


def _is_relative(specifier: str) -> bool:
    return specifier in (".", "..") or specifier.startswith(("./", "../"))


def _package_name(specifier: str) -> str:
    parts = specifier.split("/")
    if specifier.startswith("@") and len(parts) > 1:
        return "/".join(parts[:2])
    return parts[0]


def _find_source_file(path: Path) -> Path | None:
    if path.is_file():
        return path
    for ext in SOURCE_EXTENSIONS:
        candidate = Path(str(path) + ext)
        if candidate.is_file():
            return candidate
    for ext in SOURCE_EXTENSIONS:
        candidate = path / f"index{ext}"
        if candidate.is_file():
            return candidate
    return None
