"""Tests for tsbundle.toml loading."""

import logging
from pathlib import Path

import pytest

from tsbundle.core.errors import ConfigError
from tsbundle.core.manifest import load_manifest

MANIFEST = """
[project]
entry_module = "src/main.ts"
entry_function = "main"
out_file = "dist/bundle.js"

[compiler]
base_url = "."
root_dir = "src"
target = "ES2017"
paths = { "lib/*" = ["./vendor/*"] }
ambient_modules = ["virtual:env"]

[bundle]
embed_tslib = false
module_blacklist = ["^/debug/"]

[profiles.release]
minify = true
out_file = "dist/bundle.min.js"
error_handler_name = "window.onBundleError"
target = "ES2020"
minify_options = { passes = 2, drop_console = true }

[profiles.watch]
watch = true
"""


@pytest.fixture
def manifest_path(tmp_path: Path) -> Path:
    path = tmp_path.resolve() / "tsbundle.toml"
    path.write_text(MANIFEST)
    return path


class TestLoadManifest:
    """Manifest parsing."""

    def test_paths_are_resolved_against_manifest_dir(self, manifest_path: Path) -> None:
        config = load_manifest(manifest_path)
        root = manifest_path.parent

        assert config.project_dir == root
        assert config.out_file == root / "dist" / "bundle.js"
        assert config.compiler.base_url == root
        assert config.compiler.root_dir == root / "src"
        assert config.compiler.out_dir == root / "build"

    def test_values_and_defaults(self, manifest_path: Path) -> None:
        config = load_manifest(manifest_path)

        assert config.entry_module == "src/main.ts"
        assert config.entry_function == "main"
        assert config.compiler.target == "ES2017"
        assert config.compiler.paths == {"lib/*": ["./vendor/*"]}
        assert config.compiler.ambient_modules == ["virtual:env"]
        assert config.embed_tslib is False
        assert config.module_blacklist == ["^/debug/"]
        assert config.minify is False
        assert config.amd_require_name == "require"
        assert config.eval_capability == "eval"
        assert config.error_handler_name is None
        assert config.minify_options == {}

    def test_profile_overrides(self, manifest_path: Path) -> None:
        config = load_manifest(manifest_path, profile="release")

        assert config.minify is True
        assert config.out_file == manifest_path.parent / "dist" / "bundle.min.js"
        assert config.error_handler_name == "window.onBundleError"
        assert config.compiler.target == "ES2020"
        assert config.minify_options == {"passes": 2, "drop_console": True}
        assert config.embed_tslib is False

    def test_unknown_profile(self, manifest_path: Path) -> None:
        with pytest.raises(ConfigError, match="release"):
            load_manifest(manifest_path, profile="debug")

    def test_unknown_profile_key_is_ignored_with_warning(self, manifest_path: Path, caplog) -> None:
        with caplog.at_level(logging.WARNING):
            config = load_manifest(manifest_path, profile="watch")

        assert "Ignoring unknown key 'watch'" in caplog.text
        assert config.compiler.target == "ES2017"
        assert config.minify is False


class TestManifestErrors:
    """Invalid manifests."""

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="not found"):
            load_manifest(tmp_path / "tsbundle.toml")

    def test_invalid_toml(self, tmp_path: Path) -> None:
        path = tmp_path / "tsbundle.toml"
        path.write_text("[project\n")

        with pytest.raises(ConfigError, match="Invalid TOML"):
            load_manifest(path)

    def test_missing_required_keys(self, tmp_path: Path) -> None:
        path = tmp_path / "tsbundle.toml"
        path.write_text('[project]\nentry_module = "src/main.ts"\n')

        with pytest.raises(ConfigError, match="entry_function, out_file"):
            load_manifest(path)
