"""
Week Thread Locator

Finds the weekly arrival/departure thread for a check-in, or creates it.
Threads are not stored anywhere: the channel history is searched for the
week label each time, and the first parent message found is the thread root.
"""

import asyncio
import logging
from collections import defaultdict
from datetime import datetime
from typing import Dict, List

from interfaces.slack.formatters.action_item_blocks import build_week_thread_header
from interfaces.slack.services.channel_client import ChannelClientError, SearchMatch
from routing.week_bucketer import week_label

logger = logging.getLogger(__name__)


def parent_messages(matches: List[SearchMatch]) -> List[SearchMatch]:
    """Drop thread replies, keeping search order"""
    return [match for match in matches if not match.is_thread_reply]


class WeekThreadLocator:
    """Search-then-create locator for Saturday-anchored week threads"""

    def __init__(self, channel_client, channel: str, channel_name: str,
                 timezone: str = "America/Los_Angeles", search_count: int = 20):
        self.channel_client = channel_client
        self.channel = channel
        self.channel_name = channel_name
        self.timezone = timezone
        self.search_count = search_count
        # One lock per label while in use; only guards callers inside this process
        self._locks: Dict[str, asyncio.Lock] = {}
        self._lock_users: Dict[str, int] = defaultdict(int)

    def search_query(self, label: str) -> str:
        return f'in:#{self.channel_name} "{label}"'

    async def find_or_create(self, check_in: datetime) -> str:
        """Return the ts of the week thread for check_in, creating the header if needed"""
        label = week_label(check_in, self.timezone)
        logger.info(f"Looking for week thread: {label}")

        lock = self._locks.setdefault(label, asyncio.Lock())
        self._lock_users[label] += 1
        try:
            async with lock:
                matches = await self.channel_client.search_messages(self.search_query(label),
                                                                    count=self.search_count)
                parents = parent_messages(matches)
                if parents:
                    logger.info(f"Found existing thread: {parents[0].handle}")
                    return parents[0].handle

                logger.info(f"Creating new thread for week: {label}")
                return await self._create_thread(label)
        finally:
            self._lock_users[label] -= 1
            if not self._lock_users[label]:
                del self._lock_users[label]
                del self._locks[label]

    async def _create_thread(self, label: str) -> str:
        header = build_week_thread_header(label)
        ts = await self.channel_client.post_message(self.channel, header["text"], header["blocks"])
        if not ts:
            raise ChannelClientError("Failed to create week thread")
        logger.info(f"Created new thread with ts: {ts}")
        return ts
