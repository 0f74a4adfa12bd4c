"""Tests for action item Block Kit rendering."""

import json
from datetime import datetime, timedelta, timezone

from interfaces.slack.formatters.action_item_blocks import (
    MAX_BUTTON_VALUE_LENGTH,
    build_action_item_message,
    build_arrival_departure_message,
    build_week_thread_header,
    format_with_offset,
)
from routing.models import ReservationData


class TestFormatWithOffset:
    def test_keeps_original_offset(self):
        value = datetime(2025, 11, 16, 16, 0, tzinfo=timezone(timedelta(hours=-8)))
        assert format_with_offset(value) == "Nov 16, 2025, 4:00 PM (UTC-08:00)"

    def test_midnight_and_positive_offset(self):
        value = datetime(2025, 3, 5, 0, 5, tzinfo=timezone(timedelta(hours=5, minutes=30)))
        assert format_with_offset(value) == "Mar 5, 2025, 12:05 AM (UTC+05:30)"

    def test_noon(self):
        value = datetime(2025, 7, 1, 12, 30, tzinfo=timezone.utc)
        assert format_with_offset(value) == "Jul 1, 2025, 12:30 PM (UTC+00:00)"

    def test_naive_value_has_no_offset_suffix(self):
        assert format_with_offset(datetime(2025, 7, 1, 9, 0)) == "Jul 1, 2025, 9:00 AM"

    def test_english_month_names(self):
        rendered = [format_with_offset(datetime(2025, month, 1, 9, 0)).split()[0] for month in range(1, 13)]
        assert rendered == ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]

    def test_missing_value(self):
        assert format_with_offset(None) == "N/A"

    def test_parsed_reservation_is_not_converted(self):
        reservation = ReservationData.model_validate({"check_in": "2025-11-19T16:00:00-08:00"})
        assert format_with_offset(reservation.check_in) == "Nov 19, 2025, 4:00 PM (UTC-08:00)"


class TestDefaultAlert:
    def test_renders_item_and_stay(self, make_item, reservation):
        message = build_action_item_message(make_item(item="Line one\nLine two"), reservation)

        text = message["blocks"][0]["text"]["text"]
        assert message["text"] == "New action item for Jamie Rivera"
        assert "Line one Line two" in text
        assert "Nov 19, 2025, 4:00 PM (UTC-08:00) ---> Nov 23, 2025, 11:00 AM (UTC-08:00)" in text
        assert "<https://my.hospitable.com/inbox/thread/conv-789|View in Hospitable>" in text

    def test_missing_fields_render_na(self, make_item):
        message = build_action_item_message(make_item(guest_name=None, category=None, item=None), None)

        text = message["blocks"][0]["text"]["text"]
        assert message["text"] == "New action item for N/A"
        assert "Category:* N/A" in text
        assert "Stay:" not in text

    def test_resolve_button_payload(self, make_item):
        message = build_action_item_message(make_item(), None)

        button = message["blocks"][1]["elements"][0]
        assert button["action_id"] == "resolve_action_item"
        assert json.loads(button["value"]) == {
            "item_id": 42,
            "property_name": "A044 - Eileen Aria",
            "guest_name": "Jamie Rivera",
            "reservation_id": "R-1001",
            "item": "Guest asked about late checkout",
            "category": "GUEST REQUESTS",
        }

    def test_long_description_fits_button_limit(self, make_item):
        message = build_action_item_message(make_item(item="é\"" * 3000), None)

        value = message["blocks"][1]["elements"][0]["value"]
        assert len(value) <= MAX_BUTTON_VALUE_LENGTH
        assert json.loads(value)["item"].endswith("…")


class TestOtherMessages:
    def test_arrival_departure_tags_reviewers(self, make_item):
        message = build_arrival_departure_message(make_item(), None, ["U1", "U2"])

        assert message["text"].startswith("Hi <@U1> <@U2>")
        assert len(message["blocks"]) == 1

    def test_week_thread_header(self):
        header = build_week_thread_header("Week_Sat_15th_Nov_2025")

        assert header["blocks"][0]["type"] == "header"
        assert header["blocks"][0]["text"]["text"] == "📅 Week_Sat_15th_Nov_2025"
