"""
Week Bucketer

Maps a check-in instant to the label of the Saturday-anchored week it falls in,
computed on the reference time zone's calendar (America/Los_Angeles by default).
Labels look like Week_Sat_16th_Nov_2025 and are used as the search key for the
weekly arrival/departure thread.
"""

from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo

MONTH_ABBREVIATIONS = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)

SATURDAY = 5  # date.weekday()


def ordinal_suffix(day: int) -> str:
    """Ordinal suffix for a day of month (1st, 2nd, 3rd, 4th ... 11th ... 21st)"""
    if 3 < day < 21:
        return "th"
    return {1: "st", 2: "nd", 3: "rd"}.get(day % 10, "th")


def week_saturday(local_date: date) -> date:
    """Saturday on or before the given calendar date"""
    days_since_saturday = (local_date.weekday() - SATURDAY) % 7
    return local_date - timedelta(days=days_since_saturday)


def week_label(check_in: datetime, timezone: str = "America/Los_Angeles") -> str:
    """
    Canonical week label for a check-in instant.

    Args:
        check_in: Timezone-aware check-in instant (naive values are taken as UTC)
        timezone: IANA name of the reference time zone

    Returns:
        Label of the form Week_Sat_<day><suffix>_<Mon>_<year>
    """
    if check_in.tzinfo is None:
        check_in = check_in.replace(tzinfo=ZoneInfo("UTC"))

    local_date = check_in.astimezone(ZoneInfo(timezone)).date()
    saturday = week_saturday(local_date)

    return (
        f"Week_Sat_{saturday.day}{ordinal_suffix(saturday.day)}"
        f"_{MONTH_ABBREVIATIONS[saturday.month - 1]}_{saturday.year}"
    )
