"""
Project loading utilities.

Provides convenient functions for the common load → resolve → assemble pipeline.
"""

from pathlib import Path

from .bundler import BundleAssembler, WrapperParameters
from .manifest import MANIFEST_FILE_NAME, BundleConfig, load_manifest
from .minification import Minifier
from .module_path_resolver import FileSystemSpecifierResolver, ModulePathResolver
from .module_store import SNAPSHOT_FILE_NAME, ModuleStore, load_store
from .path_mapping import PathMappingResolver


def create_path_resolver(config: BundleConfig) -> ModulePathResolver:
    """Build the module path resolver described by the configuration."""
    compiler = config.compiler
    path_mapping = PathMappingResolver(compiler.base_url, compiler.paths)
    return ModulePathResolver(
        module_root=compiler.root_dir,
        specifier_resolver=FileSystemSpecifierResolver(path_mapping, config.project_dir),
        ambient_modules=set(compiler.ambient_modules),
    )


def create_assembler(
    config: BundleConfig,
    store: ModuleStore,
    minifier: Minifier | None = None,
) -> BundleAssembler:
    """Build a BundleAssembler wired with the configured path resolution."""
    return BundleAssembler(config, store, create_path_resolver(config), minifier=minifier)


def load_project(
    project_dir: Path | str,
    manifest_path: Path | str | None = None,
    profile: str | None = None,
) -> tuple[BundleConfig, ModuleStore]:
    """
    Load a project's configuration and module store snapshot.

    Args:
        project_dir: Path to the project root directory
        manifest_path: Optional explicit path to tsbundle.toml.
                      If not provided, looks for tsbundle.toml in project_dir.
        profile: Optional configuration profile

    Returns:
        Tuple of (BundleConfig, ModuleStore)

    Raises:
        ConfigError: If the manifest is missing or invalid
        StoreError: If the module snapshot is missing or invalid
    """
    project_dir = Path(project_dir).resolve()

    if manifest_path is None:
        manifest_path = project_dir / MANIFEST_FILE_NAME
    else:
        manifest_path = Path(manifest_path).resolve()

    config = load_manifest(manifest_path, profile)
    store = load_store(config.compiler.out_dir / SNAPSHOT_FILE_NAME)
    return config, store


async def build_bundle(
    project_dir: Path | str,
    manifest_path: Path | str | None = None,
    profile: str | None = None,
    minifier: Minifier | None = None,
    params: WrapperParameters | None = None,
) -> str:
    """
    Load a project and write its bundle to the configured out_file.

    Example:
        >>> import asyncio
        >>> from tsbundle.core import build_bundle
        >>> code = asyncio.run(build_bundle("./my-project", profile="release"))
    """
    config, store = load_project(project_dir, manifest_path, profile)
    return await create_assembler(config, store, minifier).produce_bundle(params)
