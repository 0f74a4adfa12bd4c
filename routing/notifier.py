"""
Action item notification dispatches.

Each coroutine sends one kind of alert for a single action item. They are
wired to predicates in routing.rules and invoked by the NotificationRouter.
"""

import logging
from typing import Optional

from interfaces.slack.formatters.action_item_blocks import (
    build_action_item_message,
    build_address_request_alert,
    build_arrival_departure_message,
    build_negative_sentiment_failsafe,
)
from interfaces.slack.services.channel_client import ChannelClientError
from routing.models import ActionItem, ReservationData
from runtime.config import RoutingConfig

logger = logging.getLogger(__name__)


class ActionItemNotifier:
    """Sends the Slack alerts an action item can trigger"""

    def __init__(self, channel_client, thread_locator, checkout_scheduler, config: RoutingConfig):
        self.channel_client = channel_client
        self.thread_locator = thread_locator
        self.checkout_scheduler = checkout_scheduler
        self.config = config

    async def send_default_alert(self, action_item: ActionItem, reservation: Optional[ReservationData]) -> str:
        """General alert with a resolve button. Raises ChannelClientError on failure"""
        message = build_action_item_message(action_item, reservation)
        logger.info(f"Sending action item {action_item.item_id} to {self.config.default_channel}")
        return await self.channel_client.post_message(
            self.config.default_channel, message["text"], message["blocks"]
        )

    async def send_arrival_departure_alert(self, action_item: ActionItem,
                                           reservation: Optional[ReservationData]) -> Optional[str]:
        """Post to the review channel, inside the week thread when one can be found"""
        thread_ts = None
        if reservation and reservation.check_in:
            try:
                thread_ts = await self.thread_locator.find_or_create(reservation.check_in)
            except Exception as e:
                logger.error(f"Error finding/creating thread, posting to main channel: {e}")

        message = build_arrival_departure_message(action_item, reservation, self.config.reviewer_ids)
        logger.info(f"Sending ARRIVAL-DEPARTURE {self.config.arrival_departure_code} message "
                    f"for item {action_item.item_id} (thread={thread_ts})")
        try:
            return await self.channel_client.post_message(
                self.config.review_channel, message["text"], message["blocks"], thread_ts=thread_ts
            )
        except ChannelClientError as e:
            logger.error(f"Error sending ARRIVAL-DEPARTURE {self.config.arrival_departure_code} message: {e}")
            return None

    async def send_address_request_alert(self, action_item: ActionItem,
                                         reservation: Optional[ReservationData]) -> None:
        message = build_address_request_alert(self.config.arrival_departure_code)
        try:
            await self.channel_client.post_message(self.config.operations_channel, message["text"], message["blocks"])
        except ChannelClientError as e:
            logger.error(f"Error sending address request alert: {e}")

    async def handle_negative_sentiment(self, action_item: ActionItem,
                                        reservation: Optional[ReservationData]) -> None:
        """Schedule the checkout reminder, or raise the failsafe when checkout is unknown"""
        if reservation and reservation.check_out:
            await self.checkout_scheduler.schedule(action_item, reservation)
        else:
            await self.send_negative_sentiment_failsafe(action_item)

    async def send_negative_sentiment_failsafe(self, action_item: ActionItem) -> None:
        message = build_negative_sentiment_failsafe(action_item, self.config.on_call_user_id)
        logger.info(f"Sending negative sentiment failsafe for item {action_item.item_id}")
        try:
            await self.channel_client.post_message(self.config.operations_channel, message["text"], message["blocks"])
        except ChannelClientError as e:
            logger.error(f"Error sending failsafe message: {e}")
