"""
Action Item Block Builders

Renders the Slack messages sent by the action item router. Every builder
returns a dict with a plain-text `text` fallback and Block Kit `blocks`,
ready to be splatted into SlackChannelClient calls.
"""

import json
from datetime import datetime
from typing import Any, Dict, List, Optional

from routing.models import ActionItem, ReservationData, ResolvePayload
from routing.week_bucketer import MONTH_ABBREVIATIONS

RESOLVE_ACTION_ID = "resolve_action_item"
HOSPITABLE_THREAD_URL = "https://my.hospitable.com/inbox/thread/{conversation_id}"
MAX_BUTTON_VALUE_LENGTH = 2000

# Negative-sentiment reminder variants
SCHEDULED = "scheduled"
IMMEDIATE = "immediate"
LIMIT_EXCEEDED = "limit_exceeded"

REVIEW_AUTOMATION_NOTE = "The automation that gives review to the guest. Turn that off. Not the message."


def format_with_offset(value: Optional[datetime]) -> str:
    """Render a stay instant in its own UTC offset, e.g. 'Nov 16, 2025, 4:00 PM (UTC-08:00)'"""
    if value is None:
        return "N/A"

    hour = value.hour % 12 or 12
    meridiem = "AM" if value.hour < 12 else "PM"
    rendered = f"{MONTH_ABBREVIATIONS[value.month - 1]} {value.day}, {value.year}, {hour}:{value.minute:02d} {meridiem}"

    offset = value.utcoffset()
    if offset is None:
        return rendered
    total_minutes = int(offset.total_seconds() // 60)
    sign = "+" if total_minutes >= 0 else "-"
    hours, minutes = divmod(abs(total_minutes), 60)
    return f"{rendered} (UTC{sign}{hours:02d}:{minutes:02d})"


def stay_info(reservation: ReservationData) -> str:
    return f"{format_with_offset(reservation.check_in)} ---> {format_with_offset(reservation.check_out)}"


def hospitable_url(reservation: Optional[ReservationData]) -> Optional[str]:
    if reservation and reservation.conversation_id:
        return HOSPITABLE_THREAD_URL.format(conversation_id=reservation.conversation_id)
    return None


def _flatten(text: Optional[str]) -> str:
    return (text or "N/A").replace("\n", " ")


def _section(text: str) -> Dict[str, Any]:
    return {"type": "section", "text": {"type": "mrkdwn", "text": text}}


def _mentions(user_ids: List[str]) -> str:
    return " ".join(f"<@{user_id}>" for user_id in user_ids)


def _item_details(action_item: ActionItem, reservation: Optional[ReservationData]) -> str:
    """Property / guest / stay / description / category lines shared by item alerts"""
    date_info = ""
    link = ""
    if reservation:
        date_info = f"\n*:date: Stay:* {stay_info(reservation)}"
        url = hospitable_url(reservation)
        if url:
            link = f"\n<{url}|View in Hospitable>"

    return (
        f"*🏠 Property:* {action_item.property_name or 'N/A'}"
        f"\n*👤 Guest:* {action_item.guest_name or 'N/A'}"
        f"{date_info}"
        f"\n*📝 Description:* {_flatten(action_item.item)}"
        f"\n*🏷️ Category:* {action_item.category or 'N/A'}"
        f"{link}"
    )


def resolve_button_value(action_item: ActionItem) -> str:
    """JSON value for the resolve button, trimmed to Slack's 2000 character limit"""
    payload = ResolvePayload.from_action_item(action_item).model_dump()
    value = json.dumps(payload)
    if len(value) <= MAX_BUTTON_VALUE_LENGTH or not payload.get("item"):
        return value

    # Longest description prefix whose encoded payload still fits
    description = payload["item"]
    low, high = 0, len(description)
    while low < high:
        middle = (low + high + 1) // 2
        payload["item"] = description[:middle] + "…"
        if len(json.dumps(payload)) <= MAX_BUTTON_VALUE_LENGTH:
            low = middle
        else:
            high = middle - 1
    payload["item"] = description[:low] + "…"
    return json.dumps(payload)


def build_action_item_message(action_item: ActionItem, reservation: Optional[ReservationData]) -> Dict[str, Any]:
    """Default alert: item details plus a Resolved button"""
    return {
        "text": f"New action item for {action_item.guest_name or 'N/A'}",
        "blocks": [
            _section(_item_details(action_item, reservation)),
            {
                "type": "actions",
                "elements": [
                    {
                        "type": "button",
                        "text": {"type": "plain_text", "text": "Resolved", "emoji": True},
                        "style": "primary",
                        "action_id": RESOLVE_ACTION_ID,
                        "value": resolve_button_value(action_item),
                    }
                ],
            },
        ],
    }


def build_arrival_departure_message(action_item: ActionItem, reservation: Optional[ReservationData],
                                    reviewer_ids: List[str]) -> Dict[str, Any]:
    """Arrival/departure alert for the review channel, no resolve control"""
    mentions = _mentions(reviewer_ids)
    return {
        "text": f"Hi {mentions}  - New arrival/departure action item for {action_item.guest_name or 'N/A'}",
        "blocks": [_section(f"Hi {mentions}\n\n{_item_details(action_item, reservation)}")],
    }


def build_week_thread_header(label: str) -> Dict[str, Any]:
    return {
        "text": f"📅 {label}",
        "blocks": [{"type": "header", "text": {"type": "plain_text", "text": f"📅 {label}", "emoji": True}}],
    }


def build_address_request_alert(property_code: str) -> Dict[str, Any]:
    return {
        "text": "🚨 Please do not share the unit number before check-in",
        "blocks": [
            _section(f"🚨 *ALERT: Address Request for {property_code}*\n\n"
                     "Please do not share the unit number before check-in.")
        ],
    }


def build_negative_sentiment_reminder(action_item: ActionItem, reservation: ReservationData, variant: str,
                                      on_call_user_id: Optional[str] = None,
                                      horizon_days: int = 120) -> Dict[str, Any]:
    """
    Reminder to switch off the guest review automation.

    Variants share the stay and property/guest fields:
    - scheduled: delivered by Slack after checkout
    - immediate: checkout already passed or scheduling was refused
    - limit_exceeded: checkout beyond the scheduling horizon, tags the on-call user
    """
    url = hospitable_url(reservation) or "N/A"
    details = (
        f"*🏠 Property:* {action_item.property_name or 'N/A'}"
        f"\n*👤 Guest:* {action_item.guest_name or 'N/A'}"
        f"\n*:date: Stay:* {stay_info(reservation)}"
        f"\n\n<{url}|View in Hospitable>"
    )

    if variant == IMMEDIATE:
        text = "💥 Turn off reviewing the guest (IMMEDIATE)"
        body = ("💥 *Turn off reviewing the guest NOW*\n\n"
                "⚠️ Checkout has already passed or is imminent.\n\n"
                f"{REVIEW_AUTOMATION_NOTE}\n\n{details}")
    elif variant == LIMIT_EXCEEDED:
        mention = f"<@{on_call_user_id}> " if on_call_user_id else ""
        text = "⚠️ Cannot schedule reminder - checkout too far in future"
        body = (f"⚠️ {mention}*Cannot schedule reminder - checkout is more than {horizon_days} days away*\n\n"
                "💥 Remember to turn off reviewing this guest closer to checkout.\n\n"
                f"{REVIEW_AUTOMATION_NOTE}\n\n{details}")
    else:
        text = "💥 Turn off reviewing the guest"
        body = f"💥 *Turn off reviewing the guest*\n\n{REVIEW_AUTOMATION_NOTE}\n\n{details}"

    return {"text": text, "blocks": [_section(body)]}


def build_negative_sentiment_failsafe(action_item: ActionItem, on_call_user_id: str) -> Dict[str, Any]:
    return {
        "text": "⚠️ Negative sentiment detected but reservation data unavailable",
        "blocks": [
            _section(
                f"⚠️ <@{on_call_user_id}> *Negative sentiment detected but reservation data unavailable*\n\n"
                f"*🏠 Property:* {action_item.property_name or 'N/A'}"
                f"\n*👤 Guest:* {action_item.guest_name or 'N/A'}"
                f"\n*📝 Description:* {_flatten(action_item.item)}"
                "\n\nCould not fetch reservation data from Hospitable API. "
                "Please manually check and schedule review reminder."
            )
        ],
    }


def build_resolution_message(payload: ResolvePayload, user_name: str) -> Dict[str, Any]:
    return {
        "text": f"Action item resolved by {user_name}",
        "blocks": [
            _section(
                f"✅ *Action Item Resolved by {user_name}*\n\n"
                f"*Property:* {payload.property_name or 'N/A'}"
                f"\n*Guest:* {payload.guest_name or 'N/A'}"
                f"\n*Description:* {payload.item or 'N/A'}"
                f"\n*Category:* {payload.category or 'N/A'}"
                f"\n*Item ID:* {payload.item_id}"
            )
        ],
    }


def build_resolution_confirmation(user_name: str, resolved_channel: str) -> str:
    where = f"<#{resolved_channel}>" if resolved_channel else "the resolved items channel"
    return (
        f"An action item was marked as resolved by {user_name}. The action item you just resolved "
        f"is logged in {where} so you can check there when necessary.\n"
        "If you accidentally resolved something, that's a great place to bring it back."
    )
