"""
Action Item Resolution Service

Handles the Resolved button of a default alert. Three independent best-effort
effects, each attempted regardless of the others:
- delete the original alert
- post a resolution summary to the resolved items channel
- confirm to the resolving user with an ephemeral message
"""

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict

from pydantic import ValidationError

from interfaces.slack.formatters.action_item_blocks import build_resolution_confirmation, build_resolution_message
from routing.models import ResolvePayload

logger = logging.getLogger(__name__)


@dataclass
class ResolutionResult:
    deleted: bool = False
    logged: bool = False
    confirmed: bool = False


class ResolutionService:
    """Applies the side effects of resolving an action item"""

    def __init__(self, channel_client, resolved_channel: str):
        self.channel_client = channel_client
        self.resolved_channel = resolved_channel

    @staticmethod
    def parse_action_body(body: Dict[str, Any]) -> Dict[str, Any]:
        """Extract the resolve payload and message coordinates from a block_actions body"""
        action = body["actions"][0]
        user = body.get("user", {})
        return {
            "payload": ResolvePayload.model_validate(json.loads(action["value"])),
            "user_id": user.get("id"),
            "user_name": user.get("name") or user.get("username") or user.get("id"),
            "channel_id": (body.get("channel") or {}).get("id") or (body.get("container") or {}).get("channel_id"),
            "message_ts": (body.get("message") or {}).get("ts") or (body.get("container") or {}).get("message_ts"),
        }

    async def resolve_from_body(self, body: Dict[str, Any]) -> ResolutionResult:
        try:
            parsed = self.parse_action_body(body)
        except (KeyError, IndexError, TypeError, ValueError, ValidationError) as e:
            logger.error(f"Invalid resolve action payload: {e}")
            return ResolutionResult()
        return await self.resolve(**parsed)

    async def resolve(self, payload: ResolvePayload, user_id: str, user_name: str,
                      channel_id: str, message_ts: str) -> ResolutionResult:
        result = ResolutionResult()
        logger.info(f"Action item {payload.item_id} resolved by {user_name}")

        try:
            result.deleted = await self.channel_client.delete_message(channel_id, message_ts)
        except Exception as e:
            logger.error(f"Error deleting resolved action item message: {e}")

        try:
            message = build_resolution_message(payload, user_name)
            await self.channel_client.post_message(self.resolved_channel, message["text"], message["blocks"])
            result.logged = True
        except Exception as e:
            logger.error(f"Error posting resolution message: {e}")

        try:
            text = build_resolution_confirmation(user_name, self.resolved_channel)
            result.confirmed = await self.channel_client.post_ephemeral(channel_id, user_id, text)
        except Exception as e:
            logger.error(f"Error sending ephemeral confirmation: {e}")

        return result
