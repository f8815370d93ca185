"""
Base Handler

Abstract base class for downstream dispatch channels, plus the shared result
and error types the orchestrator uses to classify their outcomes.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, Dict, Any


class DispatchError(Exception):
    """A downstream channel rejected or failed a request."""

    def __init__(self, message: str, status_code: Optional[int] = None, body: str = ""):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


@dataclass
class ChannelResult:
    """
    Outcome of one dispatch.

    skipped means the channel was not configured and no call was made.
    """
    channel: str
    ok: bool
    skipped: bool = False
    error: Optional[str] = None
    status_code: Optional[int] = None
    detail: Optional[str] = None  # e.g. created record name

    @classmethod
    def success(cls, channel: str, detail: Optional[str] = None) -> "ChannelResult":
        return cls(channel=channel, ok=True, detail=detail)

    @classmethod
    def not_configured(cls, channel: str) -> "ChannelResult":
        return cls(channel=channel, ok=False, skipped=True, error=f"{channel} not configured")

    @classmethod
    def from_exception(cls, channel: str, exc: BaseException) -> "ChannelResult":
        status_code = getattr(exc, "status_code", None)
        return cls(channel=channel, ok=False, error=str(exc) or type(exc).__name__, status_code=status_code)


class BaseHandler(ABC):
    """
    Abstract base class for dispatch channels.

    Each handler must implement:
    - is_configured: whether all required settings are present
    - config_status: presence flags for diagnostics (never secret values)
    """

    def __init__(self, channel_name: str):
        """
        Initialize handler.

        Args:
            channel_name: Name of the channel (e.g., "slack", "cloudkit")
        """
        self.channel_name = channel_name

    @property
    @abstractmethod
    def is_configured(self) -> bool:
        pass

    @abstractmethod
    def config_status(self) -> Dict[str, Any]:
        """
        Report configuration presence.

        Returns:
            Dict of booleans and truncated, non-secret previews
        """
        pass


def preview(value: str, keep: int = 8) -> Optional[str]:
    """Truncated preview of a non-secret identifier, or None if unset"""
    if not value:
        return None
    if len(value) <= keep:
        return value[:2] + "…"
    return value[:keep] + "…"
