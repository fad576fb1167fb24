"""
Project configuration loaded from tsbundle.toml.

Example:

    [project]
    entry_module = "src/main.ts"
    entry_function = "main"
    out_file = "dist/bundle.js"

    [compiler]
    root_dir = "src"
    out_dir = "build"
    paths = { "lib/*" = ["./vendor/*"] }

    [bundle]
    embed_tslib = true

    [profiles.release]
    minify = true
    target = "ES2017"
    minify_options = { passes = 2, drop_console = true }

Any [project] or [bundle] key, and the compiler target, can be overridden by
a profile. Other profile keys are ignored with a warning.
"""

import logging
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .errors import ConfigError
from .path_mapping import resolve_base_url

logger = logging.getLogger(__name__)

MANIFEST_FILE_NAME = "tsbundle.toml"
DEFAULT_REQUIRE_NAME = "require"

_REQUIRED_PROJECT_KEYS = ("entry_module", "entry_function", "out_file")
_PROFILE_COMPILER_KEYS = ("target",)
_BUNDLE_KEYS = (
    "amd_require_name",
    "commonjs_require_name",
    "prefer_commonjs",
    "minify",
    "minify_options",
    "embed_tslib",
    "no_loader_code",
    "error_handler_name",
    "eval_capability",
    "module_blacklist",
    "module_whitelist",
)


@dataclass
class CompilerOptions:
    """Compiler settings the bundler depends on. All paths are absolute."""

    base_url: Path
    root_dir: Path
    out_dir: Path
    target: str = "ES5"
    paths: dict[str, list[str]] = field(default_factory=dict)
    ambient_modules: list[str] = field(default_factory=list)


@dataclass
class BundleConfig:
    """
    Complete bundling configuration of one project (and profile).

    Attributes:
        project_dir: Directory holding tsbundle.toml
        entry_module: Entry module path, relative to project_dir
        entry_function: Function exported by the entry module to call on start
        out_file: Where the bundle is written
        compiler: Compiler settings
        amd_require_name: Name of the AMD require function for external modules
        commonjs_require_name: Name of the CommonJS require function
        prefer_commonjs: Load initial external modules with CommonJS rather than AMD
        minify: Minify module code and the loader
        embed_tslib: Put tslib into the bundle if some module needs it
        no_loader_code: Emit only the bare array of module definitions
        error_handler_name: Expression of a launch error handler
        eval_capability: Expression the loader uses to evaluate module code
        module_blacklist: Regexps; bundling a module matching any of them fails
        module_whitelist: Regexps; if set, every bundled module must match one
        minify_options: terser compress options overriding the defaults
    """

    project_dir: Path
    entry_module: str
    entry_function: str
    out_file: Path
    compiler: CompilerOptions
    amd_require_name: str = DEFAULT_REQUIRE_NAME
    commonjs_require_name: str = DEFAULT_REQUIRE_NAME
    prefer_commonjs: bool = False
    minify: bool = False
    embed_tslib: bool = True
    no_loader_code: bool = False
    error_handler_name: str | None = None
    eval_capability: str = "eval"
    module_blacklist: list[str] = field(default_factory=list)
    module_whitelist: list[str] = field(default_factory=list)
    minify_options: dict[str, Any] = field(default_factory=dict)


def _read_toml(path: Path) -> dict[str, Any]:
    try:
        return tomllib.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        raise ConfigError(f"Manifest not found: {path}") from None
    except OSError as e:
        raise ConfigError(f"Failed to read manifest {path}: {e}") from e
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML in {path}: {e}") from e


def _resolve(project_dir: Path, value: str) -> Path:
    return (project_dir / value).resolve()


def load_manifest(path: Path, profile: str | None = None) -> BundleConfig:
    """
    Load configuration from a tsbundle.toml file.

    Args:
        path: Path to the manifest
        profile: Optional profile name whose settings override the base ones

    Returns:
        BundleConfig with all paths made absolute

    Raises:
        ConfigError: If the manifest is missing, invalid or incomplete
    """
    path = path.resolve()
    data = _read_toml(path)
    project_dir = path.parent

    project = dict(data.get("project", {}))
    compiler = dict(data.get("compiler", {}))
    bundle = dict(data.get("bundle", {}))

    if profile:
        profiles = data.get("profiles", {})
        if profile not in profiles:
            raise ConfigError(
                f"Profile '{profile}' is not defined in {path}. "
                f"Available profiles: {sorted(profiles)}"
            )
        overrides = profiles[profile]
        logger.debug("Applying profile %s: %s", profile, sorted(overrides))
        for key, value in overrides.items():
            if key in _REQUIRED_PROJECT_KEYS:
                project[key] = value
            elif key in _PROFILE_COMPILER_KEYS:
                compiler[key] = value
            elif key in _BUNDLE_KEYS:
                bundle[key] = value
            else:
                logger.warning("Ignoring unknown key '%s' in profile '%s' of %s", key, profile, path)

    missing = [key for key in _REQUIRED_PROJECT_KEYS if not project.get(key)]
    if missing:
        raise ConfigError(f"Required key(s) missing from [project] in {path}: {', '.join(missing)}")

    compiler_options = CompilerOptions(
        base_url=resolve_base_url(compiler.get("base_url"), project_dir),
        root_dir=_resolve(project_dir, compiler.get("root_dir", ".")),
        out_dir=_resolve(project_dir, compiler.get("out_dir", "build")),
        target=compiler.get("target", "ES5"),
        paths={key: list(value) for key, value in compiler.get("paths", {}).items()},
        ambient_modules=list(compiler.get("ambient_modules", [])),
    )

    return BundleConfig(
        project_dir=project_dir,
        entry_module=project["entry_module"],
        entry_function=project["entry_function"],
        out_file=_resolve(project_dir, project["out_file"]),
        compiler=compiler_options,
        amd_require_name=bundle.get("amd_require_name", DEFAULT_REQUIRE_NAME),
        commonjs_require_name=bundle.get("commonjs_require_name", DEFAULT_REQUIRE_NAME),
        prefer_commonjs=bundle.get("prefer_commonjs", False),
        minify=bundle.get("minify", False),
        embed_tslib=bundle.get("embed_tslib", True),
        no_loader_code=bundle.get("no_loader_code", False),
        error_handler_name=bundle.get("error_handler_name") or None,
        eval_capability=bundle.get("eval_capability", "eval"),
        module_blacklist=list(bundle.get("module_blacklist", [])),
        module_whitelist=list(bundle.get("module_whitelist", [])),
        minify_options=dict(bundle.get("minify_options", {})),
    )
