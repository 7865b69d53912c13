"""Discord session adapter — implements ChatSessionPort on discord.Client.

The dashboard never reacts to gateway events beyond logging; it only needs
the cache (guilds, channels, bot user) plus REST calls for send/fetch/edit.
"""

import asyncio
import re
import sys
from typing import List, Optional

import aiohttp
import discord

from src.domain.errors import RemoteOperationFailed, ValidationError
from src.domain.models import ChannelInfo, GuildChannels, OutgoingPayload

_BARE_HEX = re.compile(r"^[0-9a-fA-F]{6}$")

_NETWORK_ERRORS = (aiohttp.ClientError, asyncio.TimeoutError, OSError)


def _log(msg: str):
    print(msg, file=sys.stderr)


def parse_colour(value: Optional[str]) -> Optional[discord.Colour]:
    """Parse ``#RRGGBB`` / ``0xRRGGBB`` / ``RRGGBB`` / ``rgb(r, g, b)``."""
    if not value:
        return None
    value = value.strip()
    if _BARE_HEX.match(value):
        value = f"#{value}"
    try:
        return discord.Colour.from_str(value)
    except ValueError:
        raise ValidationError(f"Invalid color: {value}")


def build_embed(payload: OutgoingPayload) -> discord.Embed:
    embed = discord.Embed(description=payload.content)
    if payload.title:
        embed.title = payload.title
    colour = parse_colour(payload.color)
    if colour is not None:
        embed.colour = colour
    return embed


def _is_text_channel(channel) -> bool:
    return isinstance(channel, discord.TextChannel) and channel.type == discord.ChannelType.text


class DiscordSession(discord.Client):
    """Bot connection used by the dashboard.

    Only the guild and guild-message intents are requested; the bot does not
    read message content.
    """

    def __init__(self, **discord_kwargs):
        intents = discord.Intents.none()
        intents.guilds = True
        intents.guild_messages = True
        super().__init__(intents=intents, **discord_kwargs)

    async def on_ready(self):
        _log(f"Discord bot logged in as {self.user}")

    # ── ChatSessionPort ─────────────────────────────────────

    @property
    def is_ready_for_requests(self) -> bool:
        return self.user is not None

    @property
    def identity(self) -> Optional[str]:
        return str(self.user) if self.user else None

    def _text_channel(self, channel_id: str):
        try:
            channel = self.get_channel(int(channel_id))
        except (TypeError, ValueError):
            return None
        return channel if _is_text_channel(channel) else None

    def resolve_channel(self, channel_id: str) -> Optional[ChannelInfo]:
        channel = self._text_channel(channel_id)
        if channel is None:
            return None
        return ChannelInfo(
            channel_id=str(channel.id),
            channel_name=channel.name,
            guild_id=str(channel.guild.id),
            guild_name=channel.guild.name,
        )

    def list_guilds(self) -> List[GuildChannels]:
        result = []
        for guild in self.guilds:
            channels = tuple(
                (str(ch.id), ch.name) for ch in guild.channels if _is_text_channel(ch)
            )
            result.append(GuildChannels(guild_id=str(guild.id), guild_name=guild.name, channels=channels))
        return result

    async def send(self, channel_id: str, payload: OutgoingPayload) -> str:
        channel = self._text_channel(channel_id)
        if channel is None:
            raise RemoteOperationFailed(f"Channel {channel_id} is not available")
        try:
            if payload.is_embed:
                message = await channel.send(embed=build_embed(payload))
            else:
                message = await channel.send(payload.content)
        except discord.HTTPException as e:
            _log(f"Discord send to {channel_id} failed: {e}")
            raise RemoteOperationFailed(f"Failed to send message: {e.text or e}") from e
        except _NETWORK_ERRORS as e:
            _log(f"Discord send to {channel_id} failed: {e}")
            raise RemoteOperationFailed("Failed to send message") from e
        return str(message.id)

    async def fetch(self, channel_id: str, message_id: str) -> bool:
        channel = self._text_channel(channel_id)
        if channel is None:
            return False
        try:
            await channel.fetch_message(int(message_id))
        except ValueError:
            return False
        except discord.NotFound:
            return False
        except discord.HTTPException as e:
            _log(f"Discord fetch of {message_id} failed: {e}")
            raise RemoteOperationFailed(f"Failed to fetch message: {e.text or e}") from e
        except _NETWORK_ERRORS as e:
            _log(f"Discord fetch of {message_id} failed: {e}")
            raise RemoteOperationFailed("Failed to fetch message") from e
        return True

    async def edit(self, channel_id: str, message_id: str, payload: OutgoingPayload) -> None:
        channel = self._text_channel(channel_id)
        if channel is None:
            raise RemoteOperationFailed(f"Channel {channel_id} is not available")
        message = channel.get_partial_message(int(message_id))
        try:
            if payload.is_embed:
                # Embed replaces any plain text the message had before
                await message.edit(content=None, embed=build_embed(payload))
            else:
                await message.edit(content=payload.content)
        except discord.HTTPException as e:
            _log(f"Discord edit of {message_id} failed: {e}")
            raise RemoteOperationFailed(f"Failed to edit message: {e.text or e}") from e
        except _NETWORK_ERRORS as e:
            _log(f"Discord edit of {message_id} failed: {e}")
            raise RemoteOperationFailed("Failed to edit message") from e
