"""
Slack Business Logic Services

Core services for Slack functionality:
- Web API operations used by the router
- Action item resolution side effects
"""

from .channel_client import ChannelClientError, ScheduleRejection, ScheduleResult, SearchMatch, SlackChannelClient
from .resolution_service import ResolutionService

__all__ = [
    'ChannelClientError', 'ScheduleRejection', 'ScheduleResult', 'SearchMatch',
    'SlackChannelClient', 'ResolutionService',
]
