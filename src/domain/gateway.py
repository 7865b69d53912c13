"""Message gateway — keeps the record store in step with Discord.

The gateway is the only component that talks to the chat session. Every
store mutation runs under a single asyncio.Lock so two concurrent requests
cannot interleave their read-modify-write of the record file.
"""

import asyncio
import sys
from typing import List, Optional

from src.domain.errors import NotFound, PersistenceFailed, ServiceUnavailable, ValidationError
from src.domain.models import (
    BotStatus,
    GuildChannels,
    MessageRecord,
    OutgoingPayload,
    utc_now,
)
from src.ports.outbound import ChatSessionPort, RecordStorePort


def _log(msg: str):
    print(msg, file=sys.stderr)


def _clean(value: Optional[str]) -> str:
    return (value or "").strip()


class MessageGateway:
    def __init__(self, session: ChatSessionPort, store: RecordStorePort):
        self._session = session
        self._store = store
        self._write_lock = asyncio.Lock()

    # ── queries ─────────────────────────────────────────────

    def health(self) -> BotStatus:
        if not self._session.is_ready_for_requests:
            return BotStatus(ready=False)
        return BotStatus(ready=True, identity=self._session.identity)

    def list_channels(self) -> List[GuildChannels]:
        if not self._session.is_ready_for_requests:
            raise ServiceUnavailable("Bot not ready")
        return list(self._session.list_guilds())

    def list_messages(self) -> List[MessageRecord]:
        return list(self._store.load_all())

    # ── mutations ───────────────────────────────────────────

    async def send(
        self,
        channel_id: Optional[str],
        content: Optional[str],
        use_embed: bool = False,
        title: Optional[str] = None,
        color: Optional[str] = None,
    ) -> MessageRecord:
        """Post a new message and record it.

        No deduplication: two identical calls create two Discord messages
        and two records.
        """
        channel_id = _clean(channel_id)
        content = _clean(content)
        if not channel_id or not content:
            raise ValidationError("Channel ID and content are required")

        channel = self._session.resolve_channel(channel_id)
        if channel is None:
            raise NotFound("Channel not found")

        title = _clean(title) or None
        color = _clean(color) or None
        if use_embed:
            payload = OutgoingPayload.embed(content, title=title, color=color)
        else:
            payload = OutgoingPayload.plain(content)

        remote_id = await self._session.send(channel.channel_id, payload)

        record = MessageRecord(
            id=remote_id,
            channel_id=channel.channel_id,
            channel_name=channel.channel_name,
            guild_id=channel.guild_id,
            guild_name=channel.guild_name,
            content=content,
            title=title if use_embed else None,
            color=color if use_embed else None,
            timestamp=utc_now(),
            is_embed=bool(use_embed),
        )
        async with self._write_lock:
            try:
                records = self._store.load_all()
            except PersistenceFailed as e:
                _log_divergence("send", record.id, e)
                raise
            records.append(record)
            self._persist_after_remote(records, record.id, "send")
        _log(f"Sent message {record.id} to #{record.channel_name} ({record.guild_name})")
        return record

    async def edit(
        self,
        message_id: str,
        content: Optional[str],
        title: Optional[str] = None,
        color: Optional[str] = None,
    ) -> MessageRecord:
        """Edit a previously sent message on Discord and in the store.

        Empty title/color fall back to the stored values. The message becomes
        (or stays) an embed once it was one or a title/color is supplied.
        """
        content = _clean(content)
        if not content:
            raise ValidationError("Content is required")
        title = _clean(title) or None
        color = _clean(color) or None

        async with self._write_lock:
            records = self._store.load_all()
            index = _index_of(records, message_id)
            if index is None:
                raise NotFound("Message not found in storage")
            stored = records[index]

            channel = self._session.resolve_channel(stored.channel_id)
            if channel is None:
                raise NotFound("Channel not found")
            if not await self._session.fetch(channel.channel_id, stored.id):
                raise NotFound("Discord message not found")

            new_title = title or stored.title
            new_color = color or stored.color
            as_embed = bool(stored.is_embed or title or color)
            if as_embed:
                payload = OutgoingPayload.embed(content, title=new_title, color=new_color)
            else:
                payload = OutgoingPayload.plain(content)

            await self._session.edit(channel.channel_id, stored.id, payload)

            updated = stored.edited(
                content=content,
                title=new_title,
                color=new_color,
                is_embed=bool(stored.is_embed or new_title or new_color),
                at=utc_now(),
            )
            records[index] = updated
            self._persist_after_remote(records, updated.id, "edit")
        _log(f"Edited message {updated.id}")
        return updated

    async def delete(self, message_id: str) -> None:
        """Forget a record locally. The Discord message itself is left in place."""
        async with self._write_lock:
            records = self._store.load_all()
            remaining = [r for r in records if r.id != message_id]
            if len(remaining) == len(records):
                raise NotFound("Message not found")
            self._store.save_all(remaining)
        _log(f"Removed message {message_id} from history")

    def _persist_after_remote(self, records: List[MessageRecord], message_id: str, action: str):
        # Discord already reflects the change; a failed write leaves the two apart.
        try:
            self._store.save_all(records)
        except PersistenceFailed as e:
            _log_divergence(action, message_id, e)
            raise


def _log_divergence(action: str, message_id: str, error: PersistenceFailed):
    _log(
        f"Store out of sync: {action} of message {message_id} succeeded on Discord "
        f"but was not saved locally: {error.message}"
    )


def _index_of(records: List[MessageRecord], message_id: str) -> Optional[int]:
    for i, record in enumerate(records):
        if record.id == message_id:
            return i
    return None
