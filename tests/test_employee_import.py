"""
Unit tests for employee matching and the employee import service.
"""

import pytest
from pathlib import Path

import sys
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from application.attendance_store import AttendanceStore
from application.employee_import import EmployeeImportService, ImportMode
from domain.employee_matching import (
    filter_new_employees, find_duplicates, group_by_department, has_identity, is_duplicate
)
from domain.entities import Employee
from infrastructure.key_value_storage import InMemoryStorage


@pytest.fixture
def store():
    return AttendanceStore(InMemoryStorage())


@pytest.fixture
def service(store):
    return EmployeeImportService(store)


class TestEmployeeMatching:
    """Tests for duplicate detection and grouping."""

    def test_duplicate_by_id_with_different_phone(self):
        """Test an id match is a duplicate even if the phone differs."""
        existing = [Employee(id="7", phone_number="555")]
        assert is_duplicate(Employee(id="7", phone_number="999"), existing) is True

    def test_duplicate_by_phone(self):
        """Test a phone match is a duplicate even if the id differs."""
        existing = [Employee(id="7", phone_number="555")]
        assert is_duplicate(Employee(id="8", phone_number="555"), existing) is True

    def test_empty_keys_never_match(self):
        """Test blank ids and phones are not compared."""
        existing = [Employee(id="", phone_number="555")]
        assert is_duplicate(Employee(id="", phone_number="999"), existing) is False

    def test_find_and_filter(self):
        """Test splitting a batch into duplicates and new employees."""
        existing = [Employee(id="1")]
        batch = [Employee(id="1"), Employee(id="2")]

        assert find_duplicates(batch, existing) == [Employee(id="1")]
        assert filter_new_employees(batch, existing) == [Employee(id="2")]

    def test_has_identity(self):
        """Test id or phone is required."""
        assert has_identity(Employee(id="1")) is True
        assert has_identity(Employee(phone_number="09")) is True
        assert has_identity(Employee(full_name="No Key")) is False

    def test_group_by_department(self):
        """Test grouping is sorted by department with an unknown bucket."""
        employees = [
            Employee(id="1", department="IT"),
            Employee(id="2", department=""),
            Employee(id="3", department="Finance"),
            Employee(id="4", department="IT"),
        ]

        grouped = group_by_department(employees)

        assert list(grouped) == ["Finance", "IT", "Unknown"]
        assert [e.id for e in grouped["IT"]] == ["1", "4"]


class TestEmployeeImportService:
    """Tests for EmployeeImportService."""

    def test_import_without_duplicates(self, service, store):
        """Test a clean batch is stored as one upload."""
        result = service.import_employees(
            [Employee(id="1"), Employee(id="2")], "staff.xlsx"
        )

        assert result.success is True
        assert result.added_count == 2
        assert result.upload.file_name == "staff.xlsx"
        assert [e.id for e in store.get_all_employees()] == ["1", "2"]

    def test_invalid_records_dropped(self, service):
        """Test records without id and phone are dropped."""
        result = service.import_employees(
            [Employee(id="1"), Employee(full_name="Nobody")], "staff.xlsx"
        )

        assert result.added_count == 1
        assert result.invalid_count == 1

    def test_no_valid_records(self, service, store):
        """Test a batch with nothing usable fails."""
        result = service.import_employees([Employee(full_name="Nobody")], "staff.xlsx")

        assert result.success is False
        assert store.get_all_uploads() == []

    def test_skip_duplicates(self, service, store):
        """Test only new employees are added."""
        store.add_upload([Employee(id="7", phone_number="555")], "first.xlsx")

        result = service.import_employees(
            [Employee(id="7", phone_number="999"), Employee(id="8")],
            "second.xlsx",
            ImportMode.SKIP_DUPLICATES
        )

        assert result.duplicate_count == 1
        assert result.added_count == 1
        assert [e.id for e in store.get_all_employees()] == ["7", "8"]

    def test_all_duplicates_adds_nothing(self, service, store):
        """Test nothing is stored when every record is a duplicate."""
        store.add_upload([Employee(id="7")], "first.xlsx")

        result = service.import_employees([Employee(id="7")], "again.xlsx")

        assert result.success is True
        assert result.upload is None
        assert len(store.get_all_uploads()) == 1

    def test_replace_all(self, service, store):
        """Test replacing drops previous uploads."""
        store.add_upload([Employee(id="7")], "first.xlsx")

        result = service.import_employees(
            [Employee(id="7"), Employee(id="9")], "fresh.xlsx", ImportMode.REPLACE_ALL
        )

        assert result.added_count == 2
        assert [u.file_name for u in store.get_all_uploads()] == ["fresh.xlsx"]
        assert [e.id for e in store.get_all_employees()] == ["7", "9"]


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
