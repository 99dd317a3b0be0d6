"""richpresence: publish rich presence to a local IPC peer."""

from richpresence.client import ConnectionState, PresenceClient
from richpresence.config import PresenceConfig
from richpresence.presence import ActivityType, Presence, StatusDisplayType

__version__ = "0.1.0"

__all__ = [
    "ActivityType",
    "ConnectionState",
    "Presence",
    "PresenceClient",
    "PresenceConfig",
    "StatusDisplayType",
]
