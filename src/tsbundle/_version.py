"""Version lookup for tsbundle."""

import tomllib
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as _metadata_version
from pathlib import Path

DISTRIBUTION_NAME = "tsbundle"


def _source_tree_version(pyproject: Path) -> str | None:
    """Version declared by the pyproject.toml of a source checkout, if it is ours."""
    try:
        project = tomllib.loads(pyproject.read_text(encoding="utf-8")).get("project", {})
    except (OSError, tomllib.TOMLDecodeError):
        return None
    if project.get("name") != DISTRIBUTION_NAME:
        return None
    return project.get("version")


def get_version() -> str:
    """Version of a source checkout (editable install), else of the installed distribution."""
    version = _source_tree_version(Path(__file__).parents[2] / "pyproject.toml")
    if version:
        return version
    try:
        return _metadata_version(DISTRIBUTION_NAME)
    except PackageNotFoundError:
        return "0.0.0"
