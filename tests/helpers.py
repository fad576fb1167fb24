"""Helpers for building module graphs in tests."""

from pathlib import Path

from tsbundle.core.module_store import ModuleRecord, ModuleStore


def make_record(
    name: str,
    dependencies: list[str] | None = None,
    code: str | None = "function(){}",
    **fields,
) -> ModuleRecord:
    """Build a module record with compiled code."""
    return ModuleRecord(name=name, dependencies=dependencies or [], compiled_code=code, **fields)


def make_store(graph: dict[str, list[str]]) -> ModuleStore:
    """Build a store from {name: dependencies}."""
    return ModuleStore([make_record(name, deps) for name, deps in graph.items()])


def write_file(path: Path, content: str = "") -> Path:
    """Create a file together with its parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path
