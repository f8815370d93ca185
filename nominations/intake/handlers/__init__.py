"""
Dispatch Handlers

Downstream channels a nomination fans out to.

Available Handlers:
- SlackNotifier: Slack incoming webhook (mandatory)
- CloudKitClient: CloudKit public database write (best-effort)
"""

from .base import BaseHandler, ChannelResult, DispatchError
from .slack import SlackNotifier, NotificationError
from .cloudkit import CloudKitClient, CloudKitError, normalize_private_key

__all__ = [
    "BaseHandler",
    "ChannelResult",
    "DispatchError",
    "SlackNotifier",
    "NotificationError",
    "CloudKitClient",
    "CloudKitError",
    "normalize_private_key",
]
