"""Domain layer — pure Python, no framework dependencies."""

from src.domain.errors import (
    DashboardError,
    NotFound,
    PersistenceFailed,
    RemoteOperationFailed,
    ServiceUnavailable,
    ValidationError,
)
from src.domain.gateway import MessageGateway
from src.domain.models import (
    BotStatus,
    ChannelInfo,
    GuildChannels,
    MessageRecord,
    OutgoingPayload,
)

__all__ = [
    "DashboardError",
    "NotFound",
    "PersistenceFailed",
    "RemoteOperationFailed",
    "ServiceUnavailable",
    "ValidationError",
    "MessageGateway",
    "BotStatus",
    "ChannelInfo",
    "GuildChannels",
    "MessageRecord",
    "OutgoingPayload",
]
