"""Tests for the module store and its snapshots."""

import json
from pathlib import Path

import pytest

from tests.helpers import make_record
from tsbundle.core.errors import StoreError, UnknownModuleError
from tsbundle.core.module_store import ModuleStore, load_store, save_store


class TestModuleStore:
    """Store operations."""

    def test_set_get_delete(self) -> None:
        store = ModuleStore()
        record = make_record("/a")

        store.set(record)
        assert store.get("/a") is record
        assert "/a" in store
        assert len(store) == 1

        store.delete("/a")
        assert not store.has("/a")

    def test_set_replaces_record_with_same_name(self) -> None:
        store = ModuleStore([make_record("/a", code="old")])
        store.set(make_record("/a", code="new"))

        assert store.get("/a").compiled_code == "new"
        assert len(store) == 1

    def test_unknown_module_raises(self) -> None:
        with pytest.raises(UnknownModuleError, match="/missing"):
            ModuleStore().get("/missing")

    def test_names_are_sorted(self) -> None:
        store = ModuleStore([make_record("/b"), make_record("/a")])

        assert store.names() == ["/a", "/b"]


class TestSnapshot:
    """Saving and loading snapshots."""

    def test_snapshot_keeps_metadata_and_drops_code(self, tmp_path: Path) -> None:
        path = tmp_path / "build" / "modules.json"
        store = ModuleStore(
            [
                make_record(
                    "/a",
                    ["exports", "/b"],
                    exports={"y", "x"},
                    export_module_references=["/b"],
                    alt_name="legacy",
                ),
                make_record("/b", has_omnious_export=True),
            ]
        )

        save_store(store, path)
        loaded = load_store(path)

        assert loaded.names() == ["/a", "/b"]
        record = loaded.get("/a")
        assert record.dependencies == ["exports", "/b"]
        assert record.exports == {"x", "y"}
        assert record.export_module_references == ["/b"]
        assert record.alt_name == "legacy"
        assert record.compiled_code is None
        assert loaded.get("/b").has_omnious_export is True

    def test_exports_are_written_sorted(self, tmp_path: Path) -> None:
        path = tmp_path / "modules.json"
        save_store(ModuleStore([make_record("/a", exports={"c", "a", "b"})]), path)

        data = json.loads(path.read_text())

        assert data["modules"][0]["exports"] == ["a", "b", "c"]

    def test_missing_snapshot(self, tmp_path: Path) -> None:
        with pytest.raises(StoreError, match="not found"):
            load_store(tmp_path / "nope.json")

    def test_invalid_json(self, tmp_path: Path) -> None:
        path = tmp_path / "modules.json"
        path.write_text("{not json")

        with pytest.raises(StoreError, match="Failed to read"):
            load_store(path)

    def test_unsupported_version(self, tmp_path: Path) -> None:
        path = tmp_path / "modules.json"
        path.write_text(json.dumps({"version": 99, "modules": []}))

        with pytest.raises(StoreError, match="Unsupported"):
            load_store(path)

    def test_malformed_record(self, tmp_path: Path) -> None:
        path = tmp_path / "modules.json"
        path.write_text(json.dumps({"version": 1, "modules": [{"dependencies": []}]}))

        with pytest.raises(StoreError, match="Malformed"):
            load_store(path)
