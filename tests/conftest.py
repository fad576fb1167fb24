"""Shared pytest fixtures for tsbundle tests."""

from pathlib import Path

import pytest

from tests.helpers import write_file
from tsbundle.core.manifest import BundleConfig, CompilerOptions


@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    """Return a project directory with an entry module source file."""
    root = tmp_path.resolve() / "project"
    write_file(root / "src" / "main.ts", "export function main(){}")
    return root


@pytest.fixture
def bundle_config(project_dir: Path) -> BundleConfig:
    """Return a configuration for project_dir with module root at src/."""
    return BundleConfig(
        project_dir=project_dir,
        entry_module="src/main.ts",
        entry_function="main",
        out_file=project_dir / "dist" / "bundle.js",
        compiler=CompilerOptions(
            base_url=project_dir,
            root_dir=project_dir / "src",
            out_dir=project_dir / "build",
        ),
        embed_tslib=False,
    )
