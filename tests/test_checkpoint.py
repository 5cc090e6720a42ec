"""Tests for checkpoint storage backends."""

import os

import pytest

from rangescan.errors import PersistenceError
from rangescan.modules.checkpoint import (
    FileCheckpointStore,
    MemoryCheckpointStore,
    create_checkpoint_store,
)


class TestMemoryCheckpointStore:
    def test_empty_load(self):
        assert MemoryCheckpointStore().load() is None

    def test_save_and_load(self):
        store = MemoryCheckpointStore()
        store.save("192.168.1.1")
        assert store.value == "192.168.1.1"
        assert store.load() == "192.168.1.1"

    def test_overwrite_keeps_single_value(self):
        store = MemoryCheckpointStore("10.0.0.1")
        for address in ("10.0.0.2", "10.0.0.3", "10.0.0.9"):
            store.save(address)
        assert store.load() == "10.0.0.9"
        assert vars(store) == {"value": "10.0.0.9"}

    def test_clear(self):
        store = MemoryCheckpointStore("10.0.0.1")
        store.clear()
        assert store.load() is None


class TestFileCheckpointStore:
    def test_missing_file_is_not_an_error(self, temp_dir):
        assert FileCheckpointStore(temp_dir / "checkpoint.txt").load() is None

    def test_save_and_load(self, temp_dir):
        path = temp_dir / "checkpoint.txt"
        store = FileCheckpointStore(path)
        store.save("10.1.2.3")
        assert path.read_text() == "10.1.2.3\n"
        assert FileCheckpointStore(path).load() == "10.1.2.3"

    def test_save_is_idempotent_overwrite(self, temp_dir):
        store = FileCheckpointStore(temp_dir / "checkpoint.txt")
        store.save("10.0.0.1")
        store.save("10.0.0.1")
        store.save("10.0.0.2")
        assert store.load() == "10.0.0.2"
        assert not (temp_dir / "checkpoint.txt.tmp").exists()

    def test_empty_file(self, temp_dir):
        path = temp_dir / "checkpoint.txt"
        path.write_text("")
        assert FileCheckpointStore(path).load() is None

    def test_corrupt_file(self, temp_dir):
        path = temp_dir / "checkpoint.txt"
        path.write_text("garbage\n")
        with pytest.raises(PersistenceError, match="Corrupt checkpoint"):
            FileCheckpointStore(path).load()

    def test_unwritable_location(self, temp_dir):
        store = FileCheckpointStore(temp_dir / "missing" / "checkpoint.txt")
        with pytest.raises(PersistenceError, match="Failed to save checkpoint"):
            store.save("10.0.0.1")

    def test_failed_replace_removes_temp_file(self, temp_dir, monkeypatch):
        path = temp_dir / "checkpoint.txt"
        path.write_text("10.0.0.1\n")

        def fail_replace(src, dst):
            raise OSError("rename failed")

        monkeypatch.setattr("rangescan.modules.checkpoint.os.replace", fail_replace)
        with pytest.raises(PersistenceError, match="Failed to save checkpoint"):
            FileCheckpointStore(path).save("10.0.0.2")

        assert not (temp_dir / "checkpoint.txt.tmp").exists()
        assert path.read_text() == "10.0.0.1\n"

    def test_unreadable_path(self, temp_dir):
        path = temp_dir / "checkpoint.txt"
        path.mkdir()
        with pytest.raises(PersistenceError, match="Failed to load checkpoint"):
            FileCheckpointStore(path).load()

    @pytest.mark.skipif(os.geteuid() == 0, reason="root ignores file permissions")
    def test_permission_denied(self, temp_dir):
        path = temp_dir / "checkpoint.txt"
        path.write_text("10.0.0.1\n")
        path.chmod(0)
        try:
            with pytest.raises(PersistenceError):
                FileCheckpointStore(path).load()
        finally:
            path.chmod(0o644)

    def test_clear(self, temp_dir):
        path = temp_dir / "checkpoint.txt"
        store = FileCheckpointStore(path)
        store.save("10.0.0.1")
        store.clear()
        assert not path.exists()
        store.clear()


class TestCreateCheckpointStore:
    def test_memory(self):
        assert isinstance(create_checkpoint_store("memory"), MemoryCheckpointStore)

    def test_file(self, temp_dir):
        store = create_checkpoint_store(" FILE ", temp_dir / "cp.txt")
        assert isinstance(store, FileCheckpointStore)

    def test_file_requires_path(self):
        with pytest.raises(ValueError, match="requires a path"):
            create_checkpoint_store("file")

    def test_unknown_backend(self):
        with pytest.raises(ValueError, match="Unknown checkpoint backend"):
            create_checkpoint_store("redis")
