"""
Routing Configuration

Loads the business configuration for action item routing:
- Slack channels and mentions used by each alert
- Property codes the rules match on
- Checkout scheduling window and horizon
- Inter-item pacing intervals

Values come from config/routing.yaml, secrets and deployment-specific
channel ids from the environment (.env.local / .env via python-dotenv).
"""

import os
import logging
from dataclasses import dataclass, field
from typing import List, Optional

import yaml
from dotenv import load_dotenv

load_dotenv('.env.local')
load_dotenv()

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = os.path.join(os.path.dirname(__file__), '..', 'config', 'routing.yaml')


@dataclass
class RoutingConfig:
    """Configuration for action item routing"""
    # Slack channels
    default_channel: str = ""
    resolved_channel: str = ""
    review_channel: str = "C07U1GHS1R9"
    review_channel_name: str = "a044-eileena-aria"
    operations_channel: str = "C04SDEC0UHZ"

    # Mentions
    reviewer_ids: List[str] = field(default_factory=lambda: ["U081UEASH37", "U07UY3M1TF0", "U08U4NPLXN0"])
    on_call_user_id: str = "U03S5GQ2CDP"

    # Property codes matched against the action item's property label
    arrival_departure_code: str = "A044"
    negative_sentiment_code: str = "A008"

    # Checkout-relative scheduling
    scheduling_platform: str = "airbnb"
    offset_minutes_min: int = 360
    offset_minutes_max: int = 480
    horizon_days: int = 120

    # Week threads
    week_timezone: str = "America/Los_Angeles"
    search_count: int = 20

    # Pause between items of a batch (seconds)
    webhook_pacing_seconds: float = 1.0
    negative_sentiment_pacing_seconds: float = 0.5

    # Credentials
    slack_bot_token: Optional[str] = None
    slack_signing_secret: Optional[str] = None
    user_oauth_token: Optional[str] = None
    hospitable_api_token: Optional[str] = None


def _apply_environment(config: RoutingConfig) -> RoutingConfig:
    config.default_channel = os.getenv('SLACK_CHANNEL_ID', config.default_channel)
    config.resolved_channel = os.getenv('SLACK_RESOLVED_CHANNEL_ID', config.resolved_channel)
    config.slack_bot_token = os.getenv('SLACK_BOT_TOKEN')
    config.slack_signing_secret = os.getenv('SLACK_SIGNING_SECRET')
    config.user_oauth_token = os.getenv('USER_OAUTH_TOKEN')
    config.hospitable_api_token = os.getenv('HOSPITABLE_API_TOKEN')
    return config


def load_config_from_yaml(config_path: Optional[str] = None) -> RoutingConfig:
    """Load routing configuration from YAML file, then overlay the environment"""
    config_path = config_path or os.getenv('ROUTING_CONFIG_PATH', DEFAULT_CONFIG_PATH)
    defaults = RoutingConfig()

    try:
        with open(config_path, 'r') as f:
            yaml_config = yaml.safe_load(f) or {}

        channels = yaml_config.get('channels', {})
        mentions = yaml_config.get('mentions', {})
        properties = yaml_config.get('properties', {})
        scheduling = yaml_config.get('scheduling', {})
        week_threads = yaml_config.get('week_threads', {})
        pacing = yaml_config.get('pacing', {})

        config = RoutingConfig(
            review_channel=channels.get('review', defaults.review_channel),
            review_channel_name=channels.get('review_name', defaults.review_channel_name),
            operations_channel=channels.get('operations', defaults.operations_channel),
            reviewer_ids=list(mentions.get('reviewers', defaults.reviewer_ids)),
            on_call_user_id=mentions.get('on_call', defaults.on_call_user_id),
            arrival_departure_code=properties.get('arrival_departure_code', defaults.arrival_departure_code),
            negative_sentiment_code=properties.get('negative_sentiment_code', defaults.negative_sentiment_code),
            scheduling_platform=scheduling.get('platform', defaults.scheduling_platform),
            offset_minutes_min=int(scheduling.get('offset_minutes_min', defaults.offset_minutes_min)),
            offset_minutes_max=int(scheduling.get('offset_minutes_max', defaults.offset_minutes_max)),
            horizon_days=int(scheduling.get('horizon_days', defaults.horizon_days)),
            week_timezone=week_threads.get('timezone', defaults.week_timezone),
            search_count=int(week_threads.get('search_count', defaults.search_count)),
            webhook_pacing_seconds=float(pacing.get('webhook_seconds', defaults.webhook_pacing_seconds)),
            negative_sentiment_pacing_seconds=float(
                pacing.get('negative_sentiment_seconds', defaults.negative_sentiment_pacing_seconds)
            ),
        )
    except Exception as e:
        logger.warning(f"Failed to load routing config from YAML: {e}. Using defaults.")
        config = defaults

    return _apply_environment(config)


# Global configuration instance
_global_config = None


def get_config() -> RoutingConfig:
    """Get or create the global routing configuration"""
    global _global_config
    if _global_config is None:
        _global_config = load_config_from_yaml()
    return _global_config
