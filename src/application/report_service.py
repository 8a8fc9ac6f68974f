"""
Report Service Module

Application layer service that filters sessions by Ethiopian date and
builds per-department attendance counts for sessions and months.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from domain.entities import Employee, EthiopianDate, Session
from domain.ethiopian_calendar import gregorian_to_ethiopian
from infrastructure.logger import get_logger

logger = get_logger("ReportService")


@dataclass
class DepartmentCount:
    """Attendance count for one department."""
    department: str
    count: int
    percentage: float


@dataclass
class DepartmentReport:
    """
    Attendance broken down by department.

    Attributes:
        rows: Departments sorted by count, highest first
        total: Total number of entries counted
        session_count: Number of sessions included
        year: Ethiopian year of a monthly report (None for one session)
        month: Ethiopian month index of a monthly report
    """
    rows: List[DepartmentCount] = field(default_factory=list)
    total: int = 0
    session_count: int = 0
    year: Optional[int] = None
    month: Optional[int] = None


class AttendanceReportService:
    """
    Read-only reporting over sessions and the employee directory.

    ID entries are attributed to the department of the first directory
    employee with that id; forgot-ID entries carry their own department.
    Anything unresolved is counted under the unknown label.
    """

    def __init__(self, unknown_department: str = "Unknown"):
        self.unknown_department = unknown_department

    # --------------------------------------------------------------------------
    # Filtering
    # --------------------------------------------------------------------------
    @staticmethod
    def filter_sessions(
        sessions: List[Session],
        year: int,
        month: int,
        day: Optional[int] = None
    ) -> List[Session]:
        """
        Keep sessions whose date falls on the given Ethiopian year/month/day.

        Args:
            sessions: Sessions to filter
            year: Ethiopian year
            month: Ethiopian month index
            day: Optional day; None matches the whole month
        """
        result = []
        for session in sessions:
            eth_date = gregorian_to_ethiopian(session.date)
            if eth_date.year != year or eth_date.month != month:
                continue
            if day is not None and eth_date.day != day:
                continue
            result.append(session)
        return result

    @staticmethod
    def available_years(sessions: List[Session]) -> List[int]:
        """Distinct Ethiopian years that have sessions, most recent first."""
        years = {gregorian_to_ethiopian(s.date).year for s in sessions}
        return sorted(years, reverse=True)

    @staticmethod
    def most_recent_ethiopian_date(sessions: List[Session]) -> Optional[EthiopianDate]:
        """Ethiopian date of the most recently created session, used as the default filter."""
        if not sessions:
            return None
        return gregorian_to_ethiopian(sessions[-1].date)

    # --------------------------------------------------------------------------
    # Department counts
    # --------------------------------------------------------------------------
    def session_department_stats(
        self,
        session: Session,
        employees: List[Employee]
    ) -> DepartmentReport:
        """Department breakdown of a single session."""
        counts = self._count_departments([session], self._department_index(employees))
        return self._build_report(counts, session_count=1)

    def monthly_department_report(
        self,
        sessions: List[Session],
        employees: List[Employee],
        year: int,
        month: int
    ) -> DepartmentReport:
        """
        Department breakdown of the completed sessions in an Ethiopian month.

        Args:
            sessions: All sessions
            employees: Flat employee directory
            year: Ethiopian year
            month: Ethiopian month index
        """
        selected = [
            s for s in self.filter_sessions(sessions, year, month) if s.completed
        ]
        counts = self._count_departments(selected, self._department_index(employees))
        report = self._build_report(counts, session_count=len(selected))
        report.year = year
        report.month = month
        logger.info(
            f"Monthly report {year}/{month}: {len(selected)} sessions, {report.total} entries"
        )
        return report

    def _department_index(self, employees: List[Employee]) -> Dict[str, str]:
        index: Dict[str, str] = {}
        for emp in employees:
            if emp.id and emp.id not in index:
                index[emp.id] = emp.department
        return index

    def _count_departments(
        self,
        sessions: List[Session],
        department_by_id: Dict[str, str]
    ) -> Dict[str, int]:
        counts: Dict[str, int] = {}
        for session in sessions:
            for entry in session.id_attendance:
                dept = department_by_id.get(entry.id) or self.unknown_department
                counts[dept] = counts.get(dept, 0) + 1
            for entry in session.forgot_id_attendance:
                dept = entry.department or self.unknown_department
                counts[dept] = counts.get(dept, 0) + 1
        return counts

    def _build_report(self, counts: Dict[str, int], session_count: int) -> DepartmentReport:
        total = sum(counts.values())
        rows = [
            DepartmentCount(
                department=dept,
                count=count,
                percentage=round(count / total * 100, 1) if total else 0.0
            )
            for dept, count in counts.items()
        ]
        rows.sort(key=lambda row: -row.count)
        return DepartmentReport(rows=rows, total=total, session_count=session_count)
