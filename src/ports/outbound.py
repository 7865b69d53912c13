"""Outbound ports — interfaces for external system adapters."""

from typing import List, Optional, Protocol, runtime_checkable

from src.domain.models import ChannelInfo, GuildChannels, MessageRecord, OutgoingPayload


@runtime_checkable
class ChatSessionPort(Protocol):
    """Interface for the live chat-platform session (the Discord bot)."""

    @property
    def is_ready_for_requests(self) -> bool: ...

    @property
    def identity(self) -> Optional[str]: ...

    def resolve_channel(self, channel_id: str) -> Optional[ChannelInfo]: ...

    def list_guilds(self) -> List[GuildChannels]: ...

    async def send(self, channel_id: str, payload: OutgoingPayload) -> str: ...

    async def fetch(self, channel_id: str, message_id: str) -> bool: ...

    async def edit(self, channel_id: str, message_id: str, payload: OutgoingPayload) -> None: ...


@runtime_checkable
class RecordStorePort(Protocol):
    """Interface for whole-collection message record persistence."""

    def load_all(self) -> List[MessageRecord]: ...
    def save_all(self, records: List[MessageRecord]) -> None: ...
