"""
Slack Integration Module

Slack side of the action item worker:
- Web API client for posting, scheduling, searching and deleting messages
- Block Kit rendering of action item alerts
- Resolved button handling
"""

from .core_slack_orchestration import SlackInterface

__all__ = ['SlackInterface']
