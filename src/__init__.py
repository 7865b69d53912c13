"""Discord staff dashboard package."""

from src.config import AppConfig, DiscordConfig, SessionConfig, StaffConfig
from src.domain import MessageGateway, MessageRecord
from src.adapters.storage.json_store import JsonRecordStore
from src.adapters.discord.session import DiscordSession

__all__ = [
    "AppConfig",
    "DiscordConfig",
    "SessionConfig",
    "StaffConfig",
    "MessageGateway",
    "MessageRecord",
    "JsonRecordStore",
    "DiscordSession",
]
