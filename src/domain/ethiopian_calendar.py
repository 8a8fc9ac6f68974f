"""
Ethiopian Calendar Module

Converts between Gregorian instants and Ethiopian calendar dates using a
fixed New Year offset model: Meskerem 1 falls on September 11, or on
September 12 when that Gregorian year is a leap year. Each of the first
twelve months has 30 days and the remaining days form Pagumen.
"""

from datetime import date, datetime, timedelta, timezone
from typing import List, Optional, Union

from .entities import EthiopianDate


ETHIOPIAN_MONTHS = [
    'መስከረም', 'ጥቅምት', 'ህዳር', 'ታህሳስ', 'ጥር', 'የካቲት',
    'መጋቢት', 'ሚያዝያ', 'ግንቦት', 'ሰኔ', 'ሐምሌ', 'ነሐሴ', 'ጳጉሜን'
]

PAGUMEN = 12
DAYS_PER_MONTH = 30

# Ethiopian year = Gregorian year - 7 on/after New Year, - 8 before it
_YEAR_OFFSET_AFTER_NEW_YEAR = 7
_YEAR_OFFSET_BEFORE_NEW_YEAR = 8

Instant = Union[str, date, datetime]


def is_gregorian_leap_year(year: int) -> bool:
    """Check the Gregorian leap-year rule."""
    return (year % 4 == 0 and year % 100 != 0) or year % 400 == 0


def ethiopian_new_year(gregorian_year: int) -> date:
    """
    Get the Gregorian date of Meskerem 1 inside a Gregorian year.

    Args:
        gregorian_year: Gregorian year containing the New Year

    Returns:
        September 11, or September 12 for Gregorian leap years
    """
    day = 12 if is_gregorian_leap_year(gregorian_year) else 11
    return date(gregorian_year, 9, day)


def parse_instant(value: Instant) -> datetime:
    """
    Normalize an instant to a naive local datetime.

    Accepts ISO-8601 strings (including a trailing 'Z'), dates and
    datetimes. Aware values are converted to local time; naive values
    are taken as local time already.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    else:
        text = value.strip()
        if text.endswith('Z'):
            text = text[:-1] + '+00:00'
        parsed = datetime.fromisoformat(text)

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


def to_iso_instant(value: Instant) -> str:
    """
    Serialize an instant as UTC ISO-8601 with milliseconds and a 'Z' suffix.

    Naive values are interpreted as local time.
    """
    if isinstance(value, str):
        value = parse_instant(value)
    elif not isinstance(value, datetime):
        value = datetime(value.year, value.month, value.day)

    utc_value = value.astimezone(timezone.utc)
    return utc_value.isoformat(timespec='milliseconds').replace('+00:00', 'Z')


def gregorian_to_ethiopian(instant: Instant) -> EthiopianDate:
    """
    Convert a Gregorian instant to an Ethiopian date.

    Args:
        instant: ISO string, date or datetime

    Returns:
        EthiopianDate with year, month (0-12), day and Amharic month name
    """
    day_value = parse_instant(instant).date()
    new_year = ethiopian_new_year(day_value.year)

    if day_value >= new_year:
        eth_year = day_value.year - _YEAR_OFFSET_AFTER_NEW_YEAR
        reference = new_year
    else:
        eth_year = day_value.year - _YEAR_OFFSET_BEFORE_NEW_YEAR
        reference = ethiopian_new_year(day_value.year - 1)

    days_elapsed = (day_value - reference).days
    eth_month = days_elapsed // DAYS_PER_MONTH
    eth_day = (days_elapsed % DAYS_PER_MONTH) + 1

    if eth_month >= PAGUMEN:
        # Pagumen keeps every day past the twelfth month
        eth_month = PAGUMEN
        eth_day = days_elapsed - PAGUMEN * DAYS_PER_MONTH + 1

    return EthiopianDate(
        year=eth_year,
        month=eth_month,
        day=eth_day,
        month_name=ETHIOPIAN_MONTHS[eth_month]
    )


def ethiopian_to_gregorian(year: int, month: int, day: int) -> datetime:
    """
    Convert an Ethiopian (year, month, day) to a Gregorian datetime.

    Args:
        year: Ethiopian year
        month: Ethiopian month index (0 = Meskerem, 12 = Pagumen)
        day: Day of month, 1-based

    Returns:
        Naive local datetime at midnight of the matching Gregorian day
    """
    new_year = ethiopian_new_year(year + _YEAR_OFFSET_AFTER_NEW_YEAR)
    result = new_year + timedelta(days=month * DAYS_PER_MONTH + (day - 1))
    return datetime(result.year, result.month, result.day)


def get_days_in_ethiopian_month(month: int, year: Optional[int] = None) -> List[int]:
    """
    List the selectable days of an Ethiopian month.

    Months 0-11 always have 30 days. Pagumen has 6 days when no year is
    given. With a year it lists every day left before the next Meskerem 1,
    so each listed day converts back to the same Ethiopian date.
    """
    if month < PAGUMEN:
        return list(range(1, DAYS_PER_MONTH + 1))
    if year is None:
        return list(range(1, 7))
    return list(range(1, pagumen_length(year) + 1))


def pagumen_length(year: int) -> int:
    """Days between the end of the twelfth month and the next New Year."""
    start = ethiopian_new_year(year + _YEAR_OFFSET_AFTER_NEW_YEAR)
    next_start = ethiopian_new_year(year + _YEAR_OFFSET_AFTER_NEW_YEAR + 1)
    return (next_start - start).days - PAGUMEN * DAYS_PER_MONTH


def get_current_ethiopian_date(now: Optional[Instant] = None) -> EthiopianDate:
    """Get today's Ethiopian date."""
    return gregorian_to_ethiopian(now if now is not None else datetime.now())


def get_ethiopian_years(count: int = 10, today: Optional[Instant] = None) -> List[int]:
    """
    Get consecutive Ethiopian years ending at the current one, descending.

    Args:
        count: Number of years to return
        today: Optional reference instant (defaults to now)
    """
    current_year = get_current_ethiopian_date(today).year
    return [current_year - i for i in range(count)]


def format_ethiopian_date(eth_date: EthiopianDate) -> str:
    """Format as '{day} {monthName} {year}'."""
    return f"{eth_date.day} {eth_date.month_name} {eth_date.year}"
