"""
Attendance Store Module

Application layer record store for sessions, the active session, the
employee directory and upload batches.

Every public operation is one storage transaction: read the collection,
mutate it in memory, write it back. Failures are logged and reported as
False / None / an empty list; nothing raises past an operation.
"""

import json
from datetime import datetime
from typing import Callable, List, Optional

from domain.entities import Employee, ForgotIdEntry, IdEntry, Session, Upload
from domain.ethiopian_calendar import Instant, to_iso_instant
from infrastructure.key_value_storage import KeyValueStorage, StorageError
from infrastructure.logger import get_logger

logger = get_logger("AttendanceStore")


# Persisted key names, shared with existing app data
SESSIONS_KEY = "@attendance_sessions"
ACTIVE_SESSION_KEY = "@active_session"
EMPLOYEES_KEY = "@employees"
UPLOADS_KEY = "@employee_uploads"

# Storage failures and corrupt records (bad JSON, missing fields)
_STORE_ERRORS = (StorageError, ValueError, KeyError, TypeError, AttributeError)


class AttendanceStore:
    """
    Durable CRUD over sessions, employees and uploads.

    The active session is the working copy being edited. It is persisted
    under its own key and every entry mutation is written through to the
    matching session in the full list within the same transaction.
    """

    def __init__(
        self,
        storage: KeyValueStorage,
        clock: Optional[Callable[[], datetime]] = None
    ):
        """
        Initialize the store.

        Args:
            storage: Key-value backend
            clock: Returns the current time; defaults to datetime.now
        """
        self._storage = storage
        self._clock = clock or datetime.now

    # --------------------------------------------------------------------------
    # Internal helpers
    # --------------------------------------------------------------------------
    def _now_iso(self) -> str:
        return to_iso_instant(self._clock())

    def _new_id(self, taken: List[str]) -> str:
        """Millisecond timestamp id, bumped until unused."""
        candidate = int(self._clock().timestamp() * 1000)
        while str(candidate) in taken:
            candidate += 1
        return str(candidate)

    def _read_json(self, key: str, default):
        raw = self._storage.get_item(key)
        if raw is None:
            return default
        return json.loads(raw)

    def _write_json(self, key: str, value) -> None:
        self._storage.set_item(key, json.dumps(value, ensure_ascii=False))

    def _load_sessions(self) -> List[Session]:
        return [Session.from_dict(d) for d in self._read_json(SESSIONS_KEY, [])]

    def _save_sessions(self, sessions: List[Session]) -> None:
        self._write_json(SESSIONS_KEY, [s.to_dict() for s in sessions])

    def _load_active(self) -> Optional[Session]:
        data = self._read_json(ACTIVE_SESSION_KEY, None)
        return Session.from_dict(data) if data else None

    def _load_uploads(self) -> List[Upload]:
        return [Upload.from_dict(d) for d in self._read_json(UPLOADS_KEY, [])]

    def _save_uploads(self, uploads: List[Upload]) -> None:
        """Write uploads and mirror their employees into the flat directory."""
        self._write_json(UPLOADS_KEY, [u.to_dict() for u in uploads])
        employees = [emp for upload in uploads for emp in upload.employees]
        self._write_json(EMPLOYEES_KEY, [emp.to_dict() for emp in employees])

    def _append_upload(
        self,
        uploads: List[Upload],
        employees: List[Employee],
        file_name: str
    ) -> Upload:
        upload = Upload(
            id=self._new_id([u.id for u in uploads]),
            file_name=file_name,
            upload_date=self._now_iso(),
            employee_count=len(employees),
            employees=list(employees)
        )
        uploads.append(upload)
        self._save_uploads(uploads)
        return upload

    def _write_through(self, active: Session) -> None:
        """Persist the active copy and replace its twin in the session list."""
        self._write_json(ACTIVE_SESSION_KEY, active.to_dict())
        sessions = self._load_sessions()
        for i, session in enumerate(sessions):
            if session.id == active.id:
                sessions[i] = active
                self._save_sessions(sessions)
                return
        logger.warning(f"Active session {active.id} is not in the session list")

    def _mutate_active(self, action: str, mutate: Callable[[Session], bool]) -> bool:
        """
        Apply mutate to the active session and write it through.

        mutate returns False to reject the change (e.g. a bad index); the
        transaction then writes nothing.
        """
        try:
            with self._storage.transaction():
                active = self._load_active()
                if active is None:
                    logger.warning(f"{action}: no active session")
                    return False
                if not mutate(active):
                    logger.warning(f"{action}: entry not found in session {active.id}")
                    return False
                self._write_through(active)
            logger.debug(f"{action}: session {active.id} updated")
            return True
        except _STORE_ERRORS as e:
            logger.error(f"Error {action}: {e}")
            return False

    # --------------------------------------------------------------------------
    # Sessions
    # --------------------------------------------------------------------------
    def get_all_sessions(self) -> List[Session]:
        """Get all sessions in insertion order."""
        try:
            return self._load_sessions()
        except _STORE_ERRORS as e:
            logger.error(f"Error getting sessions: {e}")
            return []

    def get_session_by_id(self, session_id: str) -> Optional[Session]:
        """Find a session by id."""
        for session in self.get_all_sessions():
            if session.id == session_id:
                return session
        return None

    def create_session(self, date_instant: Instant) -> Optional[Session]:
        """
        Create and append a new, empty session.

        Args:
            date_instant: Nominal session date (ISO string, date or datetime)

        Returns:
            The created Session, or None if it could not be stored
        """
        try:
            with self._storage.transaction():
                sessions = self._load_sessions()
                session = Session(
                    id=self._new_id([s.id for s in sessions]),
                    date=to_iso_instant(date_instant),
                    created_at=self._now_iso()
                )
                sessions.append(session)
                self._save_sessions(sessions)
            logger.info(f"Created session {session.id} for {session.date}")
            return session
        except _STORE_ERRORS as e:
            logger.error(f"Error creating session: {e}")
            return None

    def delete_session(self, session_id: str) -> bool:
        """
        Remove a session in any state.

        Clears the active session as well when it refers to the deleted one.
        """
        try:
            with self._storage.transaction():
                sessions = self._load_sessions()
                self._save_sessions([s for s in sessions if s.id != session_id])
                active = self._load_active()
                if active is not None and active.id == session_id:
                    self._storage.remove_item(ACTIVE_SESSION_KEY)
                    logger.info(f"Cleared active session {session_id} on delete")
            logger.info(f"Deleted session {session_id}")
            return True
        except _STORE_ERRORS as e:
            logger.error(f"Error deleting session: {e}")
            return False

    def clear_all_data(self) -> bool:
        """Remove all sessions and the active session."""
        try:
            with self._storage.transaction():
                self._storage.remove_item(SESSIONS_KEY)
                self._storage.remove_item(ACTIVE_SESSION_KEY)
            return True
        except _STORE_ERRORS as e:
            logger.error(f"Error clearing all data: {e}")
            return False

    # --------------------------------------------------------------------------
    # Active session
    # --------------------------------------------------------------------------
    def get_active_session(self) -> Optional[Session]:
        """Get the session currently open for data entry."""
        try:
            return self._load_active()
        except _STORE_ERRORS as e:
            logger.error(f"Error getting active session: {e}")
            return None

    def set_active_session(self, session: Session) -> bool:
        """Make a copy of session the active working copy."""
        try:
            self._write_json(ACTIVE_SESSION_KEY, session.to_dict())
            return True
        except _STORE_ERRORS as e:
            logger.error(f"Error setting active session: {e}")
            return False

    def clear_active_session(self) -> bool:
        """Drop the active working copy."""
        try:
            self._storage.remove_item(ACTIVE_SESSION_KEY)
            return True
        except _STORE_ERRORS as e:
            logger.error(f"Error clearing active session: {e}")
            return False

    def complete_session(self) -> bool:
        """Mark the active session completed and clear the pointer."""
        try:
            with self._storage.transaction():
                active = self._load_active()
                if active is None:
                    logger.warning("completing session: no active session")
                    return False
                active.completed = True
                active.completed_at = self._now_iso()
                self._write_through(active)
                self._storage.remove_item(ACTIVE_SESSION_KEY)
            logger.info(f"Session {active.id} completed")
            return True
        except _STORE_ERRORS as e:
            logger.error(f"Error completing session: {e}")
            return False

    # --------------------------------------------------------------------------
    # Attendance entries (write-through to the session list)
    # --------------------------------------------------------------------------
    def add_id_attendance(self, employee_id: str) -> bool:
        """Append an ID entry to the active session."""
        entry = IdEntry(id=employee_id, timestamp=self._now_iso())

        def append(active: Session) -> bool:
            active.id_attendance.append(entry)
            return True

        return self._mutate_active("adding ID attendance", append)

    def add_forgot_id_attendance(
        self,
        full_name: str = "",
        department: str = "",
        phone_number: str = ""
    ) -> bool:
        """Append a forgot-ID entry to the active session."""
        entry = ForgotIdEntry(
            full_name=full_name or "",
            department=department or "",
            phone_number=phone_number or "",
            timestamp=self._now_iso()
        )

        def append(active: Session) -> bool:
            active.forgot_id_attendance.append(entry)
            return True

        return self._mutate_active("adding forgot ID attendance", append)

    def delete_id_attendance(self, index: int) -> bool:
        """Remove the ID entry at a 0-based position."""
        return self._mutate_active(
            "deleting ID attendance",
            lambda active: _pop_at(active.id_attendance, index)
        )

    def delete_forgot_id_attendance(self, index: int) -> bool:
        """Remove the forgot-ID entry at a 0-based position."""
        return self._mutate_active(
            "deleting forgot ID attendance",
            lambda active: _pop_at(active.forgot_id_attendance, index)
        )

    def update_id_attendance(self, index: int, new_id: str) -> bool:
        """Replace the employee id of the ID entry at a position."""
        return self._mutate_active(
            "updating ID attendance",
            lambda active: _set_id(active.id_attendance, index, new_id)
        )

    def update_forgot_id_attendance(
        self,
        index: int,
        full_name: str = "",
        department: str = "",
        phone_number: str = ""
    ) -> bool:
        """Replace the details of the forgot-ID entry at a position, keeping its timestamp."""
        return self._mutate_active(
            "updating forgot ID attendance",
            lambda active: _set_details(
                active.forgot_id_attendance, index, full_name, department, phone_number
            )
        )

    # Stable addressing by entry id

    def delete_id_attendance_entry(self, entry_id: str) -> bool:
        """Remove an ID entry by its entry id."""
        return self._mutate_active(
            "deleting ID attendance",
            lambda active: _pop_at(active.id_attendance, _index_of(active.id_attendance, entry_id))
        )

    def delete_forgot_id_attendance_entry(self, entry_id: str) -> bool:
        """Remove a forgot-ID entry by its entry id."""
        return self._mutate_active(
            "deleting forgot ID attendance",
            lambda active: _pop_at(
                active.forgot_id_attendance,
                _index_of(active.forgot_id_attendance, entry_id)
            )
        )

    def update_id_attendance_entry(self, entry_id: str, new_id: str) -> bool:
        """Replace the employee id of an ID entry addressed by entry id."""
        return self._mutate_active(
            "updating ID attendance",
            lambda active: _set_id(
                active.id_attendance, _index_of(active.id_attendance, entry_id), new_id
            )
        )

    def update_forgot_id_attendance_entry(
        self,
        entry_id: str,
        full_name: str = "",
        department: str = "",
        phone_number: str = ""
    ) -> bool:
        """Replace the details of a forgot-ID entry addressed by entry id."""
        return self._mutate_active(
            "updating forgot ID attendance",
            lambda active: _set_details(
                active.forgot_id_attendance,
                _index_of(active.forgot_id_attendance, entry_id),
                full_name, department, phone_number
            )
        )

    # --------------------------------------------------------------------------
    # Employee directory
    # --------------------------------------------------------------------------
    def get_all_employees(self) -> List[Employee]:
        """Get the flat employee directory."""
        try:
            return [Employee.from_dict(d) for d in self._read_json(EMPLOYEES_KEY, [])]
        except _STORE_ERRORS as e:
            logger.error(f"Error getting employees: {e}")
            return []

    def get_employee_by_id(self, employee_id: str) -> Optional[Employee]:
        """First employee with this id, or None."""
        if not employee_id:
            return None
        for emp in self.get_all_employees():
            if emp.id == employee_id:
                return emp
        return None

    def get_employee_by_phone(self, phone_number: str) -> Optional[Employee]:
        """First employee with this phone number, or None."""
        if not phone_number:
            return None
        for emp in self.get_all_employees():
            if emp.phone_number == phone_number:
                return emp
        return None

    def save_employees(self, employees: List[Employee]) -> bool:
        """Overwrite the flat employee directory."""
        try:
            self._write_json(EMPLOYEES_KEY, [emp.to_dict() for emp in employees])
            return True
        except _STORE_ERRORS as e:
            logger.error(f"Error saving employees: {e}")
            return False

    # --------------------------------------------------------------------------
    # Upload batches
    # --------------------------------------------------------------------------
    def get_all_uploads(self) -> List[Upload]:
        """Get all uploads in upload order."""
        try:
            return self._load_uploads()
        except _STORE_ERRORS as e:
            logger.error(f"Error getting uploads: {e}")
            return []

    def add_upload(self, employees: List[Employee], file_name: str) -> Optional[Upload]:
        """
        Append an upload batch and rebuild the flat directory.

        Returns:
            The stored Upload, or None on failure
        """
        try:
            with self._storage.transaction():
                uploads = self._load_uploads()
                upload = self._append_upload(uploads, employees, file_name)
            logger.info(f"Added upload {upload.id} ({file_name}) with {len(employees)} employees")
            return upload
        except _STORE_ERRORS as e:
            logger.error(f"Error adding upload: {e}")
            return None

    def delete_upload(self, upload_id: str) -> bool:
        """Remove an upload batch and rebuild the flat directory."""
        try:
            with self._storage.transaction():
                uploads = self._load_uploads()
                self._save_uploads([u for u in uploads if u.id != upload_id])
            logger.info(f"Deleted upload {upload_id}")
            return True
        except _STORE_ERRORS as e:
            logger.error(f"Error deleting upload: {e}")
            return False

    def clear_all_uploads(self) -> bool:
        """Remove every upload and empty the flat directory."""
        try:
            with self._storage.transaction():
                self._save_uploads([])
            logger.info("Cleared all uploads")
            return True
        except _STORE_ERRORS as e:
            logger.error(f"Error clearing uploads: {e}")
            return False

    def replace_all_uploads(self, employees: List[Employee], file_name: str) -> Optional[Upload]:
        """Clear every upload and store employees as the only batch."""
        try:
            with self._storage.transaction():
                upload = self._append_upload([], employees, file_name)
            logger.info(f"Replaced all uploads with {upload.id} ({file_name})")
            return upload
        except _STORE_ERRORS as e:
            logger.error(f"Error replacing uploads: {e}")
            return None


def _in_range(entries: list, index: Optional[int]) -> bool:
    return index is not None and 0 <= index < len(entries)


def _pop_at(entries: list, index: Optional[int]) -> bool:
    if not _in_range(entries, index):
        return False
    entries.pop(index)
    return True


def _set_id(entries: List[IdEntry], index: Optional[int], new_id: str) -> bool:
    if not _in_range(entries, index):
        return False
    entries[index].id = new_id
    return True


def _set_details(
    entries: List[ForgotIdEntry],
    index: Optional[int],
    full_name: str,
    department: str,
    phone_number: str
) -> bool:
    if not _in_range(entries, index):
        return False
    entry = entries[index]
    entry.full_name = full_name or ""
    entry.department = department or ""
    entry.phone_number = phone_number or ""
    return True


def _index_of(entries: list, entry_id: str) -> Optional[int]:
    for i, entry in enumerate(entries):
        if entry.entry_id == entry_id:
            return i
    return None
