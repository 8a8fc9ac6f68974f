"""
Unit tests for the key-value storage backends.
"""

import pytest
import json
import tempfile
from pathlib import Path
from unittest.mock import patch

import sys
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from infrastructure.key_value_storage import (
    AttendanceStoreError, InMemoryStorage, JsonFileStorage, StorageError
)


class TestInMemoryStorage:
    """Tests for InMemoryStorage."""

    def test_set_get_remove(self):
        """Test basic item operations."""
        storage = InMemoryStorage()

        assert storage.get_item("@a") is None
        storage.set_item("@a", "1")
        assert storage.get_item("@a") == "1"
        assert storage.keys() == ["@a"]

        storage.remove_item("@a")
        assert storage.get_item("@a") is None

    def test_remove_missing_key(self):
        """Test removing an absent key is a no-op."""
        storage = InMemoryStorage()
        storage.remove_item("@missing")
        assert storage.keys() == []

    def test_rejects_non_string_values(self):
        """Test values must already be encoded."""
        storage = InMemoryStorage()
        with pytest.raises(StorageError):
            storage.set_item("@a", 1)

    def test_transaction_rolls_back_on_error(self):
        """Test writes inside a failing transaction are discarded."""
        storage = InMemoryStorage({"@a": "old"})

        with pytest.raises(RuntimeError):
            with storage.transaction():
                storage.set_item("@a", "new")
                storage.set_item("@b", "x")
                raise RuntimeError("boom")

        assert storage.get_item("@a") == "old"
        assert storage.get_item("@b") is None

    def test_nested_transactions_commit_once(self):
        """Test nested transactions join the outer one."""
        storage = InMemoryStorage()

        with patch.object(storage, "_persist", wraps=storage._persist) as persist:
            with storage.transaction():
                storage.set_item("@a", "1")
                with storage.transaction():
                    storage.set_item("@b", "2")
            assert persist.call_count == 1

        assert storage.get_item("@a") == "1"
        assert storage.get_item("@b") == "2"


class TestJsonFileStorage:
    """Tests for JsonFileStorage."""

    def test_missing_file_is_empty(self):
        """Test a missing file reads as an empty namespace."""
        with tempfile.TemporaryDirectory() as tmpdir:
            storage = JsonFileStorage(Path(tmpdir) / "data.json")
            assert storage.get_item("@a") is None
            assert storage.keys() == []

    def test_persists_across_instances(self):
        """Test values are written to disk as a JSON object of strings."""
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "nested" / "data.json"
            JsonFileStorage(path).set_item("@a", '[{"id": "1"}]')

            assert JsonFileStorage(path).get_item("@a") == '[{"id": "1"}]'
            with open(path, 'r', encoding='utf-8') as f:
                assert json.load(f) == {"@a": '[{"id": "1"}]'}

    def test_corrupt_file_raises_storage_error(self):
        """Test unreadable JSON surfaces as StorageError."""
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "data.json"
            path.write_text("{not json", encoding='utf-8')

            with pytest.raises(StorageError):
                JsonFileStorage(path).get_item("@a")

    def test_non_object_file_raises_storage_error(self):
        """Test a JSON array file is rejected."""
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "data.json"
            path.write_text("[]", encoding='utf-8')

            with pytest.raises(AttendanceStoreError):
                JsonFileStorage(path).keys()

    def test_failed_write_keeps_previous_file(self):
        """Test a failing replace leaves the old content in place."""
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "data.json"
            storage = JsonFileStorage(path)
            storage.set_item("@a", "old")

            with patch("infrastructure.key_value_storage.os.replace", side_effect=OSError("disk full")):
                with pytest.raises(StorageError):
                    storage.set_item("@a", "new")

            assert JsonFileStorage(path).get_item("@a") == "old"
            assert storage.get_item("@a") == "old"
            assert list(Path(tmpdir).glob("*.tmp")) == []


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
