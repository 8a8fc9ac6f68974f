"""
Validators Module

Input checks the entry screens apply before calling the record store.
The store itself accepts whatever it is given.
"""

from typing import Tuple


class EntryValidationError(ValueError):
    """Raised when attendance input is not acceptable."""
    pass


def validate_employee_id(value: str) -> str:
    """
    Validate a typed or scanned employee ID.

    Returns:
        The stripped ID

    Raises:
        EntryValidationError: If the ID is blank
    """
    cleaned = (value or "").strip()
    if not cleaned:
        raise EntryValidationError("Please enter an ID")
    return cleaned


def validate_forgot_id_details(
    full_name: str,
    department: str,
    phone_number: str
) -> Tuple[str, str, str]:
    """
    Validate forgot-ID details; at least one field must be filled.

    Returns:
        Tuple of stripped (full_name, department, phone_number)
    """
    cleaned = (
        (full_name or "").strip(),
        (department or "").strip(),
        (phone_number or "").strip()
    )
    if not any(cleaned):
        raise EntryValidationError("Please fill at least one field")
    return cleaned
