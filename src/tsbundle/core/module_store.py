"""
Module records and the store holding them.

The store is owned by the surrounding compiler session. Bundling only reads
it, except for filling in `compiled_code` of records whose code is not cached.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError, field_serializer

from .errors import StoreError, UnknownModuleError

logger = logging.getLogger(__name__)

SNAPSHOT_FILE_NAME = ".tsbundle-modules.json"
SNAPSHOT_VERSION = 1


class ModuleRecord(BaseModel):
    """
    Everything known about one project-owned module.

    Attributes:
        name: Canonical, extension-stripped, root-relative name ("/app/main")
        dependencies: Module names in the order of the module function's arguments
        exports: Exported identifier names
        export_module_references: Modules re-exported wholesale (export * from "...")
        has_omnious_export: Module has "export =", its value may not be an object
        alt_name: Secondary name the module is also available by
        has_import_or_export: Whether the file is a module at all
        compiled_code: Compiled JS, or None if it must be loaded from the output dir
    """

    name: str
    dependencies: list[str] = Field(default_factory=list)
    exports: set[str] = Field(default_factory=set)
    export_module_references: list[str] = Field(default_factory=list)
    has_omnious_export: bool = False
    alt_name: str | None = None
    has_import_or_export: bool = True
    compiled_code: str | None = None

    @field_serializer("exports")
    def _serialize_exports(self, exports: set[str]) -> list[str]:
        return sorted(exports)


class ModuleStore:
    """In-memory module registry keyed by canonical module name."""

    def __init__(self, records: list[ModuleRecord] | None = None):
        self._records: dict[str, ModuleRecord] = {}
        for record in records or []:
            self.set(record)

    def set(self, record: ModuleRecord) -> None:
        self._records[record.name] = record

    def get(self, name: str) -> ModuleRecord:
        try:
            return self._records[name]
        except KeyError:
            raise UnknownModuleError(f"Module '{name}' is not known") from None

    def has(self, name: str) -> bool:
        return name in self._records

    def delete(self, name: str) -> None:
        self._records.pop(name, None)

    def names(self) -> list[str]:
        return sorted(self._records)

    def __contains__(self, name: object) -> bool:
        return name in self._records

    def __len__(self) -> int:
        return len(self._records)


def save_store(store: ModuleStore, path: Path) -> None:
    """
    Write a JSON snapshot of the store.

    Compiled code is not part of the snapshot; it is reloaded from the
    compiler output directory at bundling time.
    """
    data: dict[str, Any] = {
        "version": SNAPSHOT_VERSION,
        "modules": [
            store.get(name).model_dump(mode="json", exclude={"compiled_code"})
            for name in store.names()
        ],
    }
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
    except OSError as e:
        raise StoreError(f"Failed to write module snapshot {path}: {e}") from e
    logger.debug("Saved %d module record(s) to %s", len(store), path)


def load_store(path: Path) -> ModuleStore:
    """
    Load a store from a JSON snapshot written by save_store().

    Raises:
        StoreError: If the file is missing, unreadable or malformed
    """
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        raise StoreError(f"Module snapshot not found: {path}") from None
    except (OSError, json.JSONDecodeError) as e:
        raise StoreError(f"Failed to read module snapshot {path}: {e}") from e

    if not isinstance(data, dict) or data.get("version") != SNAPSHOT_VERSION:
        raise StoreError(f"Unsupported module snapshot format in {path}")

    try:
        records = [ModuleRecord.model_validate(item) for item in data.get("modules", [])]
    except ValidationError as e:
        raise StoreError(f"Malformed module record in {path}: {e}") from e

    store = ModuleStore(records)
    logger.debug("Loaded %d module record(s) from %s", len(store), path)
    return store
