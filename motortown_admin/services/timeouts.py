from __future__ import annotations

from enum import Enum
from typing import Optional

DEFAULT_TIMEOUT_SECONDS = 3
BAN_LIST_DEFAULT_TIMEOUT_SECONDS = 10
# The ban list endpoint answers noticeably slower than the others.
BAN_LIST_EXTRA_SECONDS = 5


class EndpointKind(str, Enum):
    PLAYER_LIST = "player_list"
    PLAYER_COUNT = "player_count"
    CHAT = "chat"
    KICK = "kick"
    BAN = "ban"
    UNBAN = "unban"
    BAN_LIST = "ban_list"
    VERSION = "version"
    HOUSING_LIST = "housing_list"


def timeout_for(poll_rate_seconds: Optional[int], endpoint: EndpointKind) -> float:
    """Request timeout in seconds, derived from the configured poll rate."""
    configured = poll_rate_seconds if poll_rate_seconds and poll_rate_seconds > 0 else None
    if endpoint is EndpointKind.BAN_LIST:
        if configured is None:
            return float(BAN_LIST_DEFAULT_TIMEOUT_SECONDS)
        return float(configured + BAN_LIST_EXTRA_SECONDS)
    if configured is None:
        return float(DEFAULT_TIMEOUT_SECONDS)
    return float(configured)
