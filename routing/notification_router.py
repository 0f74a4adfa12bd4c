"""
Notification Router

Routes a batch of action items to their Slack notifications, strictly in order:
- resolve reservation data when the item references a reservation
- run every matching rule (fan-out, no short-circuit)
- isolate failures per rule and per item
- pause after each routed item except the last to stay under Slack rate limits
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional

from routing.models import ActionItem, ReservationData
from routing.rules import Rule

logger = logging.getLogger(__name__)


@dataclass
class RoutingSummary:
    """What happened during one routing pass"""
    processed: int = 0
    skipped: int = 0
    failed: int = 0
    dispatched: Dict[str, int] = field(default_factory=dict)

    def record(self, rule_name: str) -> None:
        self.dispatched[rule_name] = self.dispatched.get(rule_name, 0) + 1


class NotificationRouter:
    """Sequential rule fan-out over a batch of action items"""

    def __init__(self, rules: List[Rule], reservation_client, pacing_seconds: float = 1.0,
                 item_filter: Optional[Callable[[ActionItem], bool]] = None,
                 sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep):
        self.rules = rules
        self.reservation_client = reservation_client
        self.pacing_seconds = pacing_seconds
        self.item_filter = item_filter
        self.sleep = sleep

    async def route_batch(self, raw_items: List[Any]) -> RoutingSummary:
        summary = RoutingSummary()

        for index, raw_item in enumerate(raw_items):
            try:
                fired = await self.route_item(raw_item)
                if fired is None:
                    # Filtered out before any network call, nothing to pace
                    summary.skipped += 1
                    continue
                summary.processed += 1
                for rule_name in fired:
                    summary.record(rule_name)
            except Exception as e:
                summary.failed += 1
                item_id = raw_item.get("id") if isinstance(raw_item, dict) else None
                logger.error(f"Error processing action item {item_id}: {e}")

            # Delay between messages to avoid rate limiting
            if index < len(raw_items) - 1:
                await self.sleep(self.pacing_seconds)

        logger.info(f"Routed {len(raw_items)} action items: processed={summary.processed} "
                    f"skipped={summary.skipped} failed={summary.failed} dispatched={summary.dispatched}")
        return summary

    async def route_item(self, raw_item: Any) -> Optional[List[str]]:
        """
        Route one action item.

        Returns the names of the rules that dispatched successfully, or None
        when the item was filtered out before any lookup.
        """
        action_item = raw_item if isinstance(raw_item, ActionItem) else ActionItem.model_validate(raw_item)
        logger.info(f"Processing action item: {action_item.item_id} ({action_item.category})")

        if self.item_filter is not None and not self.item_filter(action_item):
            return None

        reservation = await self.lookup_reservation(action_item)

        fired = []
        for rule in self.rules:
            if not rule.matches(action_item, reservation):
                continue
            try:
                await rule.action(action_item, reservation)
                fired.append(rule.name)
            except Exception as e:
                logger.error(f"Rule {rule.name} failed for action item {action_item.item_id}: {e}")
        return fired

    async def lookup_reservation(self, action_item: ActionItem) -> Optional[ReservationData]:
        if not action_item.hospitable_reservation_id:
            return None
        try:
            reservation = await self.reservation_client.get(action_item.hospitable_reservation_id)
        except Exception as e:
            logger.error(f"Error fetching reservation data: {e}")
            return None
        if reservation is None:
            logger.info(f"Reservation {action_item.hospitable_reservation_id} unavailable, "
                        "continuing without stay details")
        return reservation
