"""
Slack Content Formatters

Block Kit rendering for action item notifications:
- Default, arrival/departure and address request alerts
- Negative sentiment reminders and failsafe
- Resolution summaries
"""

from .action_item_blocks import build_action_item_message, format_with_offset

__all__ = ['build_action_item_message', 'format_with_offset']
