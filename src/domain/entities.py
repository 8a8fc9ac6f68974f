"""
Domain Entities Module

Core domain entities using dataclasses for the attendance tracker.
Each persisted entity maps to and from the camelCase JSON shape stored
under the record store keys.
"""

import uuid
from dataclasses import dataclass, field
from typing import List, Optional


def new_entry_id() -> str:
    """Generate a stable identifier for an attendance entry."""
    return uuid.uuid4().hex


@dataclass
class EthiopianDate:
    """
    An Ethiopian calendar date. Derived, never persisted.

    Attributes:
        year: Ethiopian year
        month: Month index, 0 (Meskerem) to 12 (Pagumen)
        day: Day of month, 1-based
        month_name: Amharic month name
    """
    year: int
    month: int
    day: int
    month_name: str


@dataclass
class IdEntry:
    """Attendance taken by scanning or typing an employee ID."""
    id: str
    timestamp: str
    entry_id: str = field(default_factory=new_entry_id)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "timestamp": self.timestamp,
            "entryId": self.entry_id
        }

    @classmethod
    def from_dict(cls, data: dict, fallback_id: Optional[str] = None) -> "IdEntry":
        return cls(
            id=data["id"],
            timestamp=data["timestamp"],
            entry_id=data.get("entryId") or fallback_id or new_entry_id()
        )


@dataclass
class ForgotIdEntry:
    """
    Attendance for someone without their ID card.

    Any of the descriptive fields may be empty, but callers must not
    record an entry where all three are empty.
    """
    full_name: str
    department: str
    phone_number: str
    timestamp: str
    entry_id: str = field(default_factory=new_entry_id)

    def to_dict(self) -> dict:
        return {
            "fullName": self.full_name,
            "department": self.department,
            "phoneNumber": self.phone_number,
            "timestamp": self.timestamp,
            "entryId": self.entry_id
        }

    @classmethod
    def from_dict(cls, data: dict, fallback_id: Optional[str] = None) -> "ForgotIdEntry":
        return cls(
            full_name=data.get("fullName", ""),
            department=data.get("department", ""),
            phone_number=data.get("phoneNumber", ""),
            timestamp=data["timestamp"],
            entry_id=data.get("entryId") or fallback_id or new_entry_id()
        )


@dataclass
class Session:
    """
    One attendance-taking event.

    Attributes:
        id: Unique, time-based identifier
        date: Nominal session date (ISO-8601 instant, Gregorian)
        created_at: Creation instant
        completed: Whether the session was closed
        completed_at: Completion instant, set iff completed
        id_attendance: ID entries in insertion order
        forgot_id_attendance: Forgot-ID entries in insertion order
    """
    id: str
    date: str
    created_at: str
    completed: bool = False
    completed_at: Optional[str] = None
    id_attendance: List[IdEntry] = field(default_factory=list)
    forgot_id_attendance: List[ForgotIdEntry] = field(default_factory=list)

    @property
    def total_count(self) -> int:
        """Number of entries across both lists."""
        return len(self.id_attendance) + len(self.forgot_id_attendance)

    def to_dict(self) -> dict:
        data = {
            "id": self.id,
            "date": self.date,
            "createdAt": self.created_at,
            "idAttendance": [entry.to_dict() for entry in self.id_attendance],
            "forgotIdAttendance": [entry.to_dict() for entry in self.forgot_id_attendance],
            "completed": self.completed
        }
        if self.completed_at is not None:
            data["completedAt"] = self.completed_at
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "Session":
        # Entries stored before entryId existed get ids derived from their position
        session_id = data["id"]
        return cls(
            id=session_id,
            date=data["date"],
            created_at=data.get("createdAt", data["date"]),
            completed=bool(data.get("completed", False)),
            completed_at=data.get("completedAt"),
            id_attendance=[
                IdEntry.from_dict(e, f"{session_id}-id-{i}")
                for i, e in enumerate(data.get("idAttendance", []))
            ],
            forgot_id_attendance=[
                ForgotIdEntry.from_dict(e, f"{session_id}-forgot-{i}")
                for i, e in enumerate(data.get("forgotIdAttendance", []))
            ]
        )


@dataclass
class Employee:
    """
    A directory entry imported from an upload batch.

    A non-empty id or phone number identifies the employee.
    """
    id: str = ""
    name_amharic: str = ""
    full_name: str = ""
    phone_number: str = ""
    department: str = ""

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "nameAmharic": self.name_amharic,
            "fullName": self.full_name,
            "phoneNumber": self.phone_number,
            "department": self.department
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Employee":
        return cls(
            id=data.get("id", ""),
            name_amharic=data.get("nameAmharic", ""),
            full_name=data.get("fullName", ""),
            phone_number=data.get("phoneNumber", ""),
            department=data.get("department", "")
        )


@dataclass
class Upload:
    """
    One batch import of employees.

    Attributes:
        id: Time-based identifier
        file_name: Name of the imported file
        upload_date: Import instant
        employee_count: Number of employees in the batch
        employees: Employees in file order
    """
    id: str
    file_name: str
    upload_date: str
    employee_count: int = 0
    employees: List[Employee] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "fileName": self.file_name,
            "uploadDate": self.upload_date,
            "employeeCount": self.employee_count,
            "employees": [emp.to_dict() for emp in self.employees]
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Upload":
        employees = [Employee.from_dict(e) for e in data.get("employees", [])]
        return cls(
            id=data["id"],
            file_name=data.get("fileName", ""),
            upload_date=data.get("uploadDate", ""),
            employee_count=data.get("employeeCount", len(employees)),
            employees=employees
        )
