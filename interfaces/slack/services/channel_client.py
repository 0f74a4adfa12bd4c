"""
Slack Channel Client

Thin wrapper over the Slack Web API used by the action item router:
- chat.postMessage / chat.scheduleMessage / chat.delete / chat.postEphemeral
- chat.scheduledMessages.list
- search.messages (requires a user token)

Slack-side rejections are translated into ChannelClientError for posts and
searches, and into a ScheduleResult for scheduling requests so callers can
pick a fallback per rejection reason.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional
from urllib.parse import parse_qs, urlparse

from slack_sdk.errors import SlackApiError
from slack_sdk.web.async_client import AsyncWebClient

logger = logging.getLogger(__name__)


class ChannelClientError(Exception):
    """Raised when a Slack API call is rejected or cannot be made"""

    def __init__(self, message: str, error: Optional[str] = None, status_code: Optional[int] = None):
        super().__init__(message)
        self.error = error
        self.status_code = status_code


class ScheduleRejection(Enum):
    TIME_IN_PAST = "time_in_past"
    TIME_TOO_FAR = "time_too_far"
    RATE_LIMITED = "rate_limited"
    OTHER = "other"


# Slack error codes -> rejection reason
SCHEDULE_ERROR_REASONS = {
    "time_in_past": ScheduleRejection.TIME_IN_PAST,
    "time_too_far": ScheduleRejection.TIME_TOO_FAR,
    "restricted_too_many": ScheduleRejection.RATE_LIMITED,
    "ratelimited": ScheduleRejection.RATE_LIMITED,
}


@dataclass
class ScheduleResult:
    """Outcome of a chat.scheduleMessage request"""
    scheduled_message_id: Optional[str] = None
    post_at: Optional[int] = None
    rejection: Optional[ScheduleRejection] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.rejection is None


@dataclass
class SearchMatch:
    """A single search.messages hit"""
    handle: str
    parent_handle: Optional[str] = None
    text: str = ""

    @property
    def is_thread_reply(self) -> bool:
        return bool(self.parent_handle) and self.parent_handle != self.handle

    @classmethod
    def from_slack(cls, match: Dict[str, Any]) -> "SearchMatch":
        parent = match.get("thread_ts")
        if not parent and match.get("permalink"):
            # Replies carry their parent in the permalink query string
            query = parse_qs(urlparse(match["permalink"]).query)
            parent = (query.get("thread_ts") or [None])[0]
        return cls(handle=match.get("ts", ""), parent_handle=parent, text=match.get("text", ""))


def _error_code(error: SlackApiError) -> Optional[str]:
    try:
        return error.response.get("error")
    except Exception:
        return None


class SlackChannelClient:
    """Slack Web API operations for action item notifications"""

    def __init__(self, bot_client: AsyncWebClient, user_client: Optional[AsyncWebClient] = None):
        self.bot_client = bot_client
        self.user_client = user_client

    async def post_message(self, channel: str, text: str, blocks: Optional[List[Dict[str, Any]]] = None,
                           thread_ts: Optional[str] = None) -> str:
        """Post a message now and return its ts"""
        kwargs = {"channel": channel, "text": text}
        if blocks:
            kwargs["blocks"] = blocks
        if thread_ts:
            kwargs["thread_ts"] = thread_ts

        try:
            response = await self.bot_client.chat_postMessage(**kwargs)
        except SlackApiError as e:
            code = _error_code(e)
            logger.error(f"Slack API error posting to {channel}: {e.response.status_code} - {code}")
            raise ChannelClientError(f"Slack API error: {code}", error=code,
                                     status_code=e.response.status_code) from e
        except Exception as e:
            logger.error(f"Error posting Slack message to {channel}: {e}")
            raise ChannelClientError(f"Request failed: {str(e)}") from e

        return response["ts"]

    async def schedule_message(self, channel: str, text: str, blocks: Optional[List[Dict[str, Any]]],
                               post_at: int) -> ScheduleResult:
        """Ask Slack to deliver a message at post_at (epoch seconds)"""
        try:
            response = await self.bot_client.chat_scheduleMessage(
                channel=channel,
                text=text,
                blocks=blocks,
                post_at=post_at,
            )
        except SlackApiError as e:
            code = _error_code(e)
            reason = SCHEDULE_ERROR_REASONS.get(code, ScheduleRejection.OTHER)
            if e.response.status_code == 429:
                reason = ScheduleRejection.RATE_LIMITED
            logger.error(f"Error scheduling message: {e.response.status_code} - {code}")
            return ScheduleResult(post_at=post_at, rejection=reason, error=code)
        except Exception as e:
            logger.error(f"Error scheduling message: {e}")
            return ScheduleResult(post_at=post_at, rejection=ScheduleRejection.OTHER, error=str(e))

        logger.info(f"Scheduled message result: {response.get('scheduled_message_id')} at {response.get('post_at')}")
        return ScheduleResult(
            scheduled_message_id=response.get("scheduled_message_id"),
            post_at=response.get("post_at", post_at),
        )

    async def search_messages(self, query: str, count: int = 20) -> List[SearchMatch]:
        """Run search.messages with the user token"""
        if not self.user_client:
            raise ChannelClientError("Slack user token not configured - cannot search")

        try:
            response = await self.user_client.search_messages(query=query, count=count)
        except SlackApiError as e:
            code = _error_code(e)
            logger.error(f"Search API error: {e.response.status_code} - {code}")
            raise ChannelClientError(f"Search failed: {code}", error=code,
                                     status_code=e.response.status_code) from e
        except Exception as e:
            logger.error(f"Search request failed: {e}")
            raise ChannelClientError(f"Search failed: {str(e)}") from e

        matches = (response.get("messages") or {}).get("matches") or []
        return [SearchMatch.from_slack(match) for match in matches]

    async def search_raw(self, query: str, count: int = 10) -> Dict[str, Any]:
        """Run search.messages and return the untouched response body"""
        if not self.user_client:
            raise ChannelClientError("Slack user token not configured - cannot search")
        try:
            response = await self.user_client.search_messages(query=query, count=count)
        except SlackApiError as e:
            return e.response.data
        return response.data

    async def delete_message(self, channel: str, ts: str) -> bool:
        """Delete a message. Logs failures and never raises"""
        try:
            await self.bot_client.chat_delete(channel=channel, ts=ts)
            return True
        except SlackApiError as e:
            logger.error(f"Error deleting Slack message: {e.response.status_code} - {_error_code(e)}")
        except Exception as e:
            logger.error(f"Error deleting Slack message: {e}")
        return False

    async def post_ephemeral(self, channel: str, user: str, text: str) -> bool:
        """Post an ephemeral message to a user. Best effort"""
        try:
            await self.bot_client.chat_postEphemeral(channel=channel, user=user, text=text)
            return True
        except SlackApiError as e:
            logger.error(f"Error posting ephemeral message: {e.response.status_code} - {_error_code(e)}")
        except Exception as e:
            logger.error(f"Error posting ephemeral message: {e}")
        return False

    async def list_scheduled_messages(self, channel: str) -> List[Dict[str, Any]]:
        """List messages scheduled in a channel"""
        try:
            response = await self.bot_client.chat_scheduledMessages_list(channel=channel)
        except SlackApiError as e:
            code = _error_code(e)
            raise ChannelClientError(f"Slack API error: {code}", error=code,
                                     status_code=e.response.status_code) from e
        return response.get("scheduled_messages") or []
