"""
Employee Matching Module

Duplicate detection and department grouping for the employee directory.
An employee is identified by a non-empty id or a non-empty phone number;
either one matching an existing record makes it a duplicate.
"""

from typing import Dict, List

from .entities import Employee


def has_identity(employee: Employee) -> bool:
    """Check that an employee carries an id or a phone number."""
    return bool(employee.id or employee.phone_number)


def is_duplicate(candidate: Employee, existing: List[Employee]) -> bool:
    """
    Check whether a candidate matches any existing employee.

    Args:
        candidate: Employee being imported
        existing: Current directory

    Returns:
        True if the id or the phone number is already present
    """
    for emp in existing:
        if candidate.id and emp.id == candidate.id:
            return True
        if candidate.phone_number and emp.phone_number == candidate.phone_number:
            return True
    return False


def find_duplicates(new_employees: List[Employee], existing: List[Employee]) -> List[Employee]:
    """Return the new employees that already exist in the directory."""
    return [emp for emp in new_employees if is_duplicate(emp, existing)]


def filter_new_employees(new_employees: List[Employee], existing: List[Employee]) -> List[Employee]:
    """Return the new employees that are not in the directory yet."""
    return [emp for emp in new_employees if not is_duplicate(emp, existing)]


def group_by_department(
    employees: List[Employee],
    unknown_label: str = "Unknown"
) -> Dict[str, List[Employee]]:
    """
    Group employees by department, ordered by department name.

    Employees without a department go under unknown_label.
    """
    grouped: Dict[str, List[Employee]] = {}
    for emp in employees:
        grouped.setdefault(emp.department or unknown_label, []).append(emp)
    return {dept: grouped[dept] for dept in sorted(grouped)}
