"""
Employee Import Module

Application service that stores an already-parsed batch of employees as an
upload, applying the duplicate handling the management screen offers.
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import List, Optional

from application.attendance_store import AttendanceStore
from domain.employee_matching import filter_new_employees, find_duplicates, has_identity
from domain.entities import Employee, Upload
from infrastructure.logger import get_logger

logger = get_logger("EmployeeImport")


class ImportMode(Enum):
    """How to treat employees that already exist in the directory."""
    ADD_ALL = auto()          # Store the batch as is
    SKIP_DUPLICATES = auto()  # Store only employees not yet in the directory
    REPLACE_ALL = auto()      # Drop every upload, then store the batch


@dataclass
class ImportResult:
    """Result of an employee import."""
    success: bool
    upload: Optional[Upload] = None
    added_count: int = 0
    duplicate_count: int = 0
    invalid_count: int = 0
    duplicates: List[Employee] = field(default_factory=list)
    message: str = ""


class EmployeeImportService:
    """
    Stores employee batches through the record store.

    Records without an id and without a phone number are dropped before
    anything else happens.
    """

    def __init__(self, store: AttendanceStore):
        self.store = store

    def check_duplicates(self, employees: List[Employee]) -> List[Employee]:
        """List the employees of a batch that already exist."""
        return find_duplicates(employees, self.store.get_all_employees())

    def import_employees(
        self,
        employees: List[Employee],
        file_name: str,
        mode: ImportMode = ImportMode.SKIP_DUPLICATES
    ) -> ImportResult:
        """
        Import a batch of employees.

        Args:
            employees: Parsed employees in file order
            file_name: Source file name recorded on the upload
            mode: Duplicate handling

        Returns:
            ImportResult describing what was stored
        """
        valid = [emp for emp in employees if has_identity(emp)]
        invalid_count = len(employees) - len(valid)

        if not valid:
            return ImportResult(
                success=False,
                invalid_count=invalid_count,
                message="No valid data found"
            )

        duplicates = self.check_duplicates(valid)

        to_store = valid
        if mode == ImportMode.SKIP_DUPLICATES:
            to_store = filter_new_employees(valid, self.store.get_all_employees())
            if not to_store:
                logger.info(f"{file_name}: all {len(valid)} records were duplicates")
                return ImportResult(
                    success=True,
                    duplicate_count=len(duplicates),
                    invalid_count=invalid_count,
                    duplicates=duplicates,
                    message="All records were duplicates. Nothing added."
                )

        if mode == ImportMode.REPLACE_ALL:
            upload = self.store.replace_all_uploads(to_store, file_name)
        else:
            upload = self.store.add_upload(to_store, file_name)

        if upload is None:
            return ImportResult(
                success=False,
                duplicate_count=len(duplicates),
                invalid_count=invalid_count,
                duplicates=duplicates,
                message="Failed to store upload"
            )

        logger.info(
            f"{file_name}: stored {len(to_store)} employees, "
            f"{len(duplicates)} duplicates, {invalid_count} invalid"
        )
        return ImportResult(
            success=True,
            upload=upload,
            added_count=len(to_store),
            duplicate_count=len(duplicates),
            invalid_count=invalid_count,
            duplicates=duplicates,
            message=f"{len(to_store)} employees imported"
        )
