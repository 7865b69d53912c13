"""Shared fixtures: an in-memory chat session double and a temp-file store."""

import itertools
from typing import Dict, List, Optional, Tuple

import pytest

from src.adapters.storage.json_store import JsonRecordStore
from src.domain.errors import RemoteOperationFailed
from src.domain.gateway import MessageGateway
from src.domain.models import ChannelInfo, GuildChannels, OutgoingPayload


class FakeChatSession:
    """Records every remote call; hands out ids M1, M2, ..."""

    def __init__(self, ready: bool = True, identity: str = "DashBot#0001"):
        self.ready = ready
        self._identity = identity
        self.channels: Dict[str, ChannelInfo] = {
            "C1": ChannelInfo("C1", "general", "G1", "Test Guild"),
            "C2": ChannelInfo("C2", "announcements", "G1", "Test Guild"),
        }
        self.remote: Dict[str, OutgoingPayload] = {}
        self.sent: List[Tuple[str, OutgoingPayload]] = []
        self.edits: List[Tuple[str, str, OutgoingPayload]] = []
        self.fetches: List[Tuple[str, str]] = []
        self.deletes: List[str] = []
        self.fail_send: Optional[str] = None
        self.fail_edit: Optional[str] = None
        self._ids = itertools.count(1)

    @property
    def is_ready_for_requests(self) -> bool:
        return self.ready

    @property
    def identity(self) -> Optional[str]:
        return self._identity if self.ready else None

    def resolve_channel(self, channel_id: str) -> Optional[ChannelInfo]:
        return self.channels.get(channel_id)

    def list_guilds(self) -> List[GuildChannels]:
        return [
            GuildChannels(
                "G1",
                "Test Guild",
                tuple((c.channel_id, c.channel_name) for c in self.channels.values()),
            )
        ]

    async def send(self, channel_id: str, payload: OutgoingPayload) -> str:
        if self.fail_send:
            raise RemoteOperationFailed(self.fail_send)
        message_id = f"M{next(self._ids)}"
        self.sent.append((channel_id, payload))
        self.remote[message_id] = payload
        return message_id

    async def fetch(self, channel_id: str, message_id: str) -> bool:
        self.fetches.append((channel_id, message_id))
        return message_id in self.remote

    async def edit(self, channel_id: str, message_id: str, payload: OutgoingPayload) -> None:
        if self.fail_edit:
            raise RemoteOperationFailed(self.fail_edit)
        self.edits.append((channel_id, message_id, payload))
        self.remote[message_id] = payload

    async def delete(self, channel_id: str, message_id: str) -> None:
        # Never expected to be called; present so tests can prove that.
        self.deletes.append(message_id)


@pytest.fixture
def fake_session():
    return FakeChatSession()


@pytest.fixture
def store(tmp_path):
    return JsonRecordStore(str(tmp_path / "messages.json"))


@pytest.fixture
def gateway(fake_session, store):
    return MessageGateway(fake_session, store)
