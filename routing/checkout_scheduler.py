"""
Checkout Scheduler

Schedules the "turn off reviewing the guest" reminder a few hours after a
guest's checkout. The send time is checkout plus a random offset (6-8 hours by
default). Targets that are already past, or beyond the scheduling horizon,
or that Slack refuses to schedule, fall back to an immediate message.
"""

import logging
import random
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Callable, Optional

from interfaces.slack.formatters.action_item_blocks import (
    IMMEDIATE,
    LIMIT_EXCEEDED,
    SCHEDULED,
    build_negative_sentiment_reminder,
)
from interfaces.slack.services.channel_client import ChannelClientError, ScheduleRejection
from routing.models import ActionItem, ReservationData

logger = logging.getLogger(__name__)


class ScheduleOutcome(Enum):
    SCHEDULED = "scheduled"
    IMMEDIATE = "immediate"
    LIMIT_EXCEEDED = "limit_exceeded"
    SKIPPED = "skipped"


def uniform_offset(min_minutes: int = 360, max_minutes: int = 480) -> Callable[[], timedelta]:
    """Offset source drawing whole minutes uniformly from [min_minutes, max_minutes]"""
    def draw() -> timedelta:
        return timedelta(minutes=random.randint(min_minutes, max_minutes))
    return draw


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class CheckoutScheduler:
    """Checkout-relative reminder scheduling with immediate fallbacks"""

    def __init__(self, channel_client, channel: str, on_call_user_id: str, platform: str = "airbnb",
                 horizon_days: int = 120, offset_source: Optional[Callable[[], timedelta]] = None,
                 clock: Callable[[], datetime] = utc_now):
        self.channel_client = channel_client
        self.channel = channel
        self.on_call_user_id = on_call_user_id
        self.platform = platform.lower()
        self.horizon = timedelta(days=horizon_days)
        self.offset_source = offset_source or uniform_offset()
        self.clock = clock

    def target_time(self, check_out: datetime) -> datetime:
        if check_out.tzinfo is None:
            check_out = check_out.replace(tzinfo=timezone.utc)
        offset = self.offset_source()
        minutes = int(offset.total_seconds() // 60)
        logger.info(f"Scheduling reminder {minutes // 60} hours and {minutes % 60} minutes after checkout")
        return check_out + offset

    async def schedule(self, action_item: ActionItem, reservation: ReservationData) -> ScheduleOutcome:
        """Schedule the reminder for this stay, or send the matching fallback"""
        platform = (reservation.platform or "").lower()
        if platform != self.platform:
            logger.info(f"Platform is {reservation.platform or 'unknown'}, not {self.platform}. "
                        "Skipping scheduled reminder.")
            return ScheduleOutcome.SKIPPED

        target = self.target_time(reservation.check_out)
        now = self.clock()

        if target <= now:
            logger.info("Checkout date is in the past, sending message immediately instead of scheduling")
            return await self._send_fallback(action_item, reservation, IMMEDIATE)

        if target > now + self.horizon:
            logger.info(f"Checkout date is more than {self.horizon.days} days in the future, cannot schedule. "
                        "Notifying via immediate message.")
            return await self._send_fallback(action_item, reservation, LIMIT_EXCEEDED)

        message = build_negative_sentiment_reminder(action_item, reservation, SCHEDULED)
        result = await self.channel_client.schedule_message(
            self.channel, message["text"], message["blocks"], int(target.timestamp())
        )
        if result.ok:
            return ScheduleOutcome.SCHEDULED

        if result.rejection in (ScheduleRejection.TIME_IN_PAST, ScheduleRejection.TIME_TOO_FAR):
            logger.info("Slack scheduling error, sending immediate notification instead")
        elif result.rejection == ScheduleRejection.RATE_LIMITED:
            logger.info("Rate limit exceeded for scheduled messages, sending immediate notification instead")
        else:
            logger.warning(f"Scheduling rejected ({result.error}), sending immediate notification instead")
        return await self._send_fallback(action_item, reservation, IMMEDIATE)

    async def _send_fallback(self, action_item: ActionItem, reservation: ReservationData,
                             variant: str) -> ScheduleOutcome:
        message = build_negative_sentiment_reminder(
            action_item,
            reservation,
            variant,
            on_call_user_id=self.on_call_user_id,
            horizon_days=self.horizon.days,
        )
        try:
            await self.channel_client.post_message(self.channel, message["text"], message["blocks"])
        except ChannelClientError as e:
            logger.error(f"Error sending {variant} negative sentiment reminder: {e}")
        return ScheduleOutcome(variant)
