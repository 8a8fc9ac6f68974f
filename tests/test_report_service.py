"""
Unit tests for AttendanceReportService filtering and department counts.
"""

import pytest
from pathlib import Path

import sys
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from application.report_service import AttendanceReportService
from domain.entities import Employee, ForgotIdEntry, IdEntry, Session
from domain.ethiopian_calendar import ethiopian_to_gregorian, to_iso_instant


STAMP = "2024-01-15T08:00:00.000Z"


def make_session(session_id, year, month, day, ids=(), guests=(), completed=True):
    return Session(
        id=session_id,
        date=to_iso_instant(ethiopian_to_gregorian(year, month, day)),
        created_at=STAMP,
        completed=completed,
        completed_at=STAMP if completed else None,
        id_attendance=[IdEntry(id=i, timestamp=STAMP) for i in ids],
        forgot_id_attendance=[
            ForgotIdEntry(full_name="Guest", department=d, phone_number="", timestamp=STAMP)
            for d in guests
        ]
    )


EMPLOYEES = [
    Employee(id="1", department="Finance"),
    Employee(id="2", department="IT"),
    Employee(id="3", department="IT"),
    Employee(id="1", department="Ignored"),
]


@pytest.fixture
def service():
    return AttendanceReportService()


class TestFiltering:
    """Tests for Ethiopian-date filtering helpers."""

    def test_filter_by_month_and_day(self, service):
        """Test year/month filter with an optional day."""
        sessions = [
            make_session("a", 2016, 4, 6),
            make_session("b", 2016, 4, 20),
            make_session("c", 2016, 5, 6),
            make_session("d", 2015, 4, 6),
        ]

        assert [s.id for s in service.filter_sessions(sessions, 2016, 4)] == ["a", "b"]
        assert [s.id for s in service.filter_sessions(sessions, 2016, 4, 20)] == ["b"]
        assert service.filter_sessions(sessions, 2014, 0) == []

    def test_available_years(self, service):
        """Test distinct years, most recent first."""
        sessions = [
            make_session("a", 2015, 1, 1),
            make_session("b", 2016, 1, 1),
            make_session("c", 2015, 3, 1),
        ]
        assert service.available_years(sessions) == [2016, 2015]

    def test_most_recent_date(self, service):
        """Test the last created session supplies the default filter."""
        sessions = [make_session("a", 2015, 1, 1), make_session("b", 2016, 7, 9)]

        recent = service.most_recent_ethiopian_date(sessions)

        assert (recent.year, recent.month, recent.day) == (2016, 7, 9)
        assert service.most_recent_ethiopian_date([]) is None


class TestDepartmentCounts:
    """Tests for department breakdowns."""

    def test_session_stats(self, service):
        """Test ID entries use the directory and guests their own department."""
        session = make_session("a", 2016, 4, 6, ids=["1", "2", "3", "42"], guests=["IT", ""])

        report = service.session_department_stats(session, EMPLOYEES)

        assert report.total == 6
        assert [(r.department, r.count) for r in report.rows] == [
            ("IT", 3), ("Unknown", 2), ("Finance", 1)
        ]
        assert report.rows[0].percentage == 50.0
        assert report.rows[2].percentage == 16.7

    def test_monthly_report_only_completed(self, service):
        """Test in-progress sessions and other months are left out."""
        sessions = [
            make_session("a", 2016, 4, 6, ids=["1"]),
            make_session("b", 2016, 4, 7, ids=["2"], completed=False),
            make_session("c", 2016, 5, 1, ids=["3"]),
        ]

        report = service.monthly_department_report(sessions, EMPLOYEES, 2016, 4)

        assert report.session_count == 1
        assert report.total == 1
        assert [(r.department, r.count) for r in report.rows] == [("Finance", 1)]
        assert (report.year, report.month) == (2016, 4)

    def test_empty_report(self, service):
        """Test a month without sessions."""
        report = service.monthly_department_report([], EMPLOYEES, 2016, 4)

        assert report.total == 0
        assert report.rows == []

    def test_custom_unknown_label(self):
        """Test the unknown label is configurable."""
        service = AttendanceReportService(unknown_department="ያልታወቀ")
        session = make_session("a", 2016, 4, 6, ids=["404"])

        report = service.session_department_stats(session, [])

        assert report.rows[0].department == "ያልታወቀ"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
