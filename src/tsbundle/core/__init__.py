"""Core tsbundle functionality: path resolution, module ordering, bundle assembly."""

from .bundle_entry import BundleEntry, BundleEntryMeta
from .bundler import BundleAssembler, WrapperParameters
from .errors import (
    BundleError,
    ConfigError,
    ErrorContext,
    MinificationError,
    StoreError,
    TsBundleError,
    UnknownModuleError,
)
from .manifest import BundleConfig, CompilerOptions, load_manifest
from .minification import Minifier, TerserMinifier
from .module_orderer import ModuleOrderer, ModuleOrderResult
from .module_path_resolver import (
    FileSystemSpecifierResolver,
    ModulePathResolver,
    ResolvedSpecifier,
    SpecifierResolver,
)
from .module_store import ModuleRecord, ModuleStore, load_store, save_store
from .path_mapping import PathMappingResolver, PathMappings
from .project import build_bundle, create_assembler, create_path_resolver, load_project

__all__ = [
    "TsBundleError",
    "ConfigError",
    "StoreError",
    "UnknownModuleError",
    "BundleError",
    "MinificationError",
    "ErrorContext",
    "BundleConfig",
    "CompilerOptions",
    "load_manifest",
    "PathMappingResolver",
    "PathMappings",
    "ModulePathResolver",
    "SpecifierResolver",
    "ResolvedSpecifier",
    "FileSystemSpecifierResolver",
    "ModuleRecord",
    "ModuleStore",
    "load_store",
    "save_store",
    "ModuleOrderer",
    "ModuleOrderResult",
    "BundleEntry",
    "BundleEntryMeta",
    "BundleAssembler",
    "WrapperParameters",
    "Minifier",
    "TerserMinifier",
    "load_project",
    "create_path_resolver",
    "create_assembler",
    "build_bundle",
]
