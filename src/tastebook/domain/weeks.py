"""
Tastebook - Week arithmetic for the meal planner.

Plans are keyed by the Monday that starts their week, formatted YYYY-MM-DD.
"""

from datetime import date, datetime, timedelta

DAY_KEYS = ["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]
DAY_LABELS = ["Lunes", "Martes", "Miércoles", "Jueves", "Viernes", "Sábado", "Domingo"]

MONTH_NAMES = [
    "enero", "febrero", "marzo", "abril", "mayo", "junio",
    "julio", "agosto", "septiembre", "octubre", "noviembre", "diciembre",
]

DateLike = date | datetime | str


def to_date(value: DateLike) -> date:
    """Coerce a date, datetime or ISO string to a date."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(value[:10])


def get_monday(value: DateLike) -> date:
    """Monday of the week containing `value` (Sunday belongs to the week before)."""
    d = to_date(value)
    return d - timedelta(days=d.weekday())


def format_week_start(value: DateLike) -> str:
    """Week key for `value`: its Monday as YYYY-MM-DD."""
    return get_monday(value).isoformat()


def get_week_range(week_start: DateLike) -> tuple[date, date]:
    """First and last day (Monday..Sunday) of the week starting at `week_start`."""
    start = to_date(week_start)
    return start, start + timedelta(days=6)


def week_dates(week_start: DateLike) -> dict[str, date]:
    """Calendar date of each day key in the week."""
    start = to_date(week_start)
    return {key: start + timedelta(days=i) for i, key in enumerate(DAY_KEYS)}


def shift_week(week_start: DateLike, weeks: int) -> str:
    """Week key `weeks` weeks away (negative for earlier)."""
    return format_week_start(get_monday(week_start) + timedelta(weeks=weeks))


def iso_week_number(value: DateLike) -> int:
    return to_date(value).isocalendar()[1]


def format_date_range(start: DateLike, end: DateLike) -> str:
    """
    Human label for a week, in Spanish.

    Examples:
        "3 - 9 noviembre 2026"
        "29 diciembre - 4 enero 2027"
    """
    s, e = to_date(start), to_date(end)
    start_month = MONTH_NAMES[s.month - 1]
    end_month = MONTH_NAMES[e.month - 1]

    if start_month == end_month:
        return f"{s.day} - {e.day} {start_month} {s.year}"
    return f"{s.day} {start_month} - {e.day} {end_month} {e.year}"
