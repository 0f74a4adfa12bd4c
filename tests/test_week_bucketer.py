"""Tests for Saturday-anchored week labels."""

from datetime import date, datetime, timedelta, timezone

import pytest

from routing.week_bucketer import ordinal_suffix, week_label, week_saturday

PST = timezone(timedelta(hours=-8))


class TestOrdinalSuffix:
    @pytest.mark.parametrize("day,suffix", [
        (1, "st"), (2, "nd"), (3, "rd"), (4, "th"),
        (11, "th"), (12, "th"), (13, "th"), (20, "th"),
        (21, "st"), (22, "nd"), (23, "rd"), (24, "th"),
        (30, "th"), (31, "st"),
    ])
    def test_suffix(self, day, suffix):
        assert ordinal_suffix(day) == suffix


class TestWeekLabel:
    def test_saturday_check_in_uses_same_day(self):
        assert week_label(datetime(2025, 11, 15, 16, 0, tzinfo=PST)) == "Week_Sat_15th_Nov_2025"

    def test_midweek_check_in_goes_back_to_saturday(self):
        assert week_label(datetime(2025, 11, 21, 10, 0, tzinfo=PST)) == "Week_Sat_15th_Nov_2025"

    def test_uses_reference_timezone_calendar_date(self):
        # Sunday 03:00 UTC is still Saturday evening in Los Angeles
        assert week_label(datetime(2025, 11, 16, 3, 0, tzinfo=timezone.utc)) == "Week_Sat_15th_Nov_2025"

    def test_boundary_at_local_midnight(self):
        assert week_label(datetime(2025, 11, 22, 7, 59, tzinfo=timezone.utc)) == "Week_Sat_15th_Nov_2025"
        assert week_label(datetime(2025, 11, 22, 8, 0, tzinfo=timezone.utc)) == "Week_Sat_22nd_Nov_2025"

    def test_crosses_year_boundary(self):
        assert week_label(datetime(2026, 1, 2, 15, 0, tzinfo=PST)) == "Week_Sat_27th_Dec_2025"

    def test_ordinal_forms_in_label(self):
        assert week_label(datetime(2025, 11, 1, 12, 0, tzinfo=PST)) == "Week_Sat_1st_Nov_2025"
        assert week_label(datetime(2025, 8, 23, 12, 0, tzinfo=PST)) == "Week_Sat_23rd_Aug_2025"

    def test_label_is_stable(self):
        check_in = datetime(2025, 11, 19, 16, 0, tzinfo=PST)
        assert week_label(check_in) == week_label(check_in)

    def test_other_reference_timezone(self):
        # Saturday 23:00 in LA is already Sunday in London
        check_in = datetime(2025, 11, 15, 23, 0, tzinfo=PST)
        assert week_label(check_in, "Europe/London") == "Week_Sat_15th_Nov_2025"
        assert week_label(datetime(2025, 11, 14, 23, 0, tzinfo=PST), "Europe/London") == "Week_Sat_15th_Nov_2025"


class TestWeekSaturday:
    def test_saturday_within_six_days_before(self):
        start = date(2025, 10, 1)
        for offset in range(21):
            local_date = start + timedelta(days=offset)
            saturday = week_saturday(local_date)
            assert saturday.weekday() == 5
            assert saturday <= local_date
            assert (local_date - saturday).days <= 6
