"""Domain data models — pure Python dataclasses."""

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def format_instant(value: datetime) -> str:
    """Serialize as ISO-8601 UTC with millisecond precision and a ``Z`` suffix."""
    value = value.astimezone(timezone.utc)
    return value.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_instant(value: str) -> datetime:
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass(frozen=True)
class MessageRecord:
    """Locally persisted metadata mirroring one message the bot has sent.

    ``id`` is the Discord message id captured from the send response; it is
    never generated locally. Channel/guild fields and ``timestamp`` never
    change after creation.
    """

    id: str
    channel_id: str
    channel_name: str
    guild_id: str
    guild_name: str
    content: str
    timestamp: datetime
    title: Optional[str] = None
    color: Optional[str] = None
    last_edited: Optional[datetime] = None
    is_embed: bool = False

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "id": self.id,
            "channelId": self.channel_id,
            "channelName": self.channel_name,
            "guildId": self.guild_id,
            "guildName": self.guild_name,
            "content": self.content,
            "title": self.title,
            "color": self.color,
            "timestamp": format_instant(self.timestamp),
            "isEmbed": self.is_embed,
        }
        # lastEdited stays absent until the first successful edit
        if self.last_edited is not None:
            data["lastEdited"] = format_instant(self.last_edited)
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MessageRecord":
        """Build a record from its stored JSON form.

        Raises KeyError/ValueError/TypeError on malformed input.
        """
        last_edited = data.get("lastEdited")
        return cls(
            id=str(data["id"]),
            channel_id=str(data["channelId"]),
            channel_name=str(data.get("channelName") or ""),
            guild_id=str(data.get("guildId") or ""),
            guild_name=str(data.get("guildName") or ""),
            content=str(data["content"]),
            timestamp=parse_instant(data["timestamp"]),
            title=data.get("title") or None,
            color=data.get("color") or None,
            last_edited=parse_instant(last_edited) if last_edited else None,
            is_embed=bool(data.get("isEmbed", False)),
        )

    def edited(
        self,
        content: str,
        title: Optional[str],
        color: Optional[str],
        is_embed: bool,
        at: datetime,
    ) -> "MessageRecord":
        return replace(
            self,
            content=content,
            title=title,
            color=color,
            is_embed=is_embed,
            last_edited=at,
        )


@dataclass(frozen=True)
class OutgoingPayload:
    """What gets posted to (or edited on) Discord.

    Embed payloads carry ``content`` as the embed description.
    """

    content: str
    is_embed: bool = False
    title: Optional[str] = None
    color: Optional[str] = None

    @classmethod
    def plain(cls, content: str) -> "OutgoingPayload":
        return cls(content=content)

    @classmethod
    def embed(
        cls,
        content: str,
        title: Optional[str] = None,
        color: Optional[str] = None,
    ) -> "OutgoingPayload":
        return cls(content=content, is_embed=True, title=title or None, color=color or None)


@dataclass(frozen=True)
class ChannelInfo:
    """A text channel as resolved from the bot's cache."""

    channel_id: str
    channel_name: str
    guild_id: str
    guild_name: str


@dataclass(frozen=True)
class GuildChannels:
    guild_id: str
    guild_name: str
    channels: Tuple[Tuple[str, str], ...] = field(default_factory=tuple)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.guild_id,
            "name": self.guild_name,
            "channels": [{"id": cid, "name": name} for cid, name in self.channels],
        }


@dataclass(frozen=True)
class BotStatus:
    ready: bool
    identity: Optional[str] = None


def records_to_json(records: List[MessageRecord]) -> List[Dict[str, Any]]:
    return [r.to_dict() for r in records]
