import logging
from typing import Optional

from slack_bolt.async_app import AsyncApp
from slack_bolt.adapter.fastapi.async_handler import AsyncSlackRequestHandler
from slack_sdk.web.async_client import AsyncWebClient

from runtime.config import RoutingConfig, get_config

from .formatters.action_item_blocks import RESOLVE_ACTION_ID
from .services.channel_client import SlackChannelClient
from .services.resolution_service import ResolutionService

logger = logging.getLogger(__name__)


class SlackInterface:
    """
    Slack side of the action item worker: Web API clients and the
    interactivity listener for the Resolved button
    """

    def __init__(self, config: Optional[RoutingConfig] = None):
        self.config = config or get_config()

        # Initialize Slack app
        self.app = AsyncApp(
            token=self.config.slack_bot_token,
            signing_secret=self.config.slack_signing_secret,
        )

        # search.messages only accepts user tokens
        user_client = AsyncWebClient(token=self.config.user_oauth_token) if self.config.user_oauth_token else None
        if user_client is None:
            logger.warning("USER_OAUTH_TOKEN not set - week thread search disabled")

        self.channel_client = SlackChannelClient(self.app.client, user_client)
        self.resolution_service = ResolutionService(self.channel_client, self.config.resolved_channel)

        # Setup handlers
        self._setup_handlers()

        # Create FastAPI handler
        self.handler = AsyncSlackRequestHandler(self.app)

    def _setup_handlers(self):
        """Setup Slack interactivity handlers"""

        @self.app.action(RESOLVE_ACTION_ID)
        async def handle_resolve_action_item(ack, body):
            # Ack first; Slack expects a response within 3s
            await ack()
            user_id = body.get("user", {}).get("id")
            logger.info(f"Acknowledged resolve_action_item click from user {user_id}")
            await self.resolution_service.resolve_from_body(body)

    def get_fastapi_handler(self):
        """Get FastAPI handler for webhook integration"""
        return self.handler
