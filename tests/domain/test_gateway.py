"""Tests for MessageGateway — record lifecycle against a fake Discord session."""

import asyncio
import json
from unittest.mock import patch

import pytest

from src.domain.errors import (
    NotFound,
    PersistenceFailed,
    RemoteOperationFailed,
    ServiceUnavailable,
    ValidationError,
)
from src.domain.gateway import MessageGateway


# ---------------------------------------------------------------------------
# send
# ---------------------------------------------------------------------------

class TestSend:
    @pytest.mark.asyncio
    async def test_plain_send_creates_one_record(self, gateway, fake_session):
        record = await gateway.send("C1", "hello", use_embed=False)

        assert record.id == "M1"
        stored = gateway.list_messages()
        assert [r.id for r in stored] == ["M1"]
        assert stored[0].content == "hello"
        assert stored[0].is_embed is False
        assert stored[0].last_edited is None
        assert stored[0].to_dict().get("lastEdited") is None
        assert fake_session.sent[0][1].is_embed is False

    @pytest.mark.asyncio
    async def test_record_carries_channel_and_guild(self, gateway):
        record = await gateway.send("C2", "news")
        assert record.channel_id == "C2"
        assert record.channel_name == "announcements"
        assert record.guild_id == "G1"
        assert record.guild_name == "Test Guild"

    @pytest.mark.asyncio
    async def test_embed_send(self, gateway, fake_session):
        record = await gateway.send("C1", "body", use_embed=True, title="Title", color="#5865F2")

        payload = fake_session.sent[0][1]
        assert payload.is_embed is True
        assert payload.content == "body"
        assert payload.title == "Title"
        assert payload.color == "#5865F2"
        assert record.is_embed is True
        assert record.title == "Title"
        assert record.color == "#5865F2"

    @pytest.mark.asyncio
    async def test_title_ignored_without_embed(self, gateway, fake_session):
        record = await gateway.send("C1", "body", use_embed=False, title="T", color="#fff000")
        assert fake_session.sent[0][1].is_embed is False
        assert record.title is None
        assert record.color is None

    @pytest.mark.asyncio
    async def test_content_is_trimmed(self, gateway):
        record = await gateway.send("C1", "  hello  ")
        assert record.content == "hello"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("channel_id,content", [("", "hi"), ("C1", ""), ("C1", "   "), (None, None)])
    async def test_missing_input(self, gateway, fake_session, channel_id, content):
        with pytest.raises(ValidationError):
            await gateway.send(channel_id, content)
        assert fake_session.sent == []

    @pytest.mark.asyncio
    async def test_unknown_channel(self, gateway, fake_session):
        with pytest.raises(NotFound):
            await gateway.send("nope", "hi")
        assert fake_session.sent == []
        assert gateway.list_messages() == []

    @pytest.mark.asyncio
    async def test_remote_failure_creates_no_record(self, gateway, fake_session):
        fake_session.fail_send = "Missing Permissions"
        with pytest.raises(RemoteOperationFailed):
            await gateway.send("C1", "hi")
        assert gateway.list_messages() == []

    @pytest.mark.asyncio
    async def test_identical_sends_are_not_deduplicated(self, gateway):
        first = await gateway.send("C1", "same")
        second = await gateway.send("C1", "same")

        assert first.id != second.id
        assert len(gateway.list_messages()) == 2

    @pytest.mark.asyncio
    async def test_send_keeps_good_rows_next_to_a_malformed_one(self, gateway, store):
        await gateway.send("C1", "first")
        await gateway.send("C1", "second")
        rows = json.loads(store.path.read_text(encoding="utf-8"))
        rows.insert(1, dict(rows[0], id="222", timestamp="yesterday"))
        store.path.write_text(json.dumps(rows), encoding="utf-8")

        await gateway.send("C1", "new")

        on_disk = [row["id"] for row in json.loads(store.path.read_text(encoding="utf-8"))]
        assert on_disk == ["M1", "M2", "M3"]

    @pytest.mark.asyncio
    async def test_unreadable_store_blocks_send_persist(self, gateway, store):
        await gateway.send("C1", "first")
        with patch("pathlib.Path.read_text", side_effect=PermissionError("denied")):
            with pytest.raises(PersistenceFailed):
                await gateway.send("C1", "second")
        assert [r.id for r in gateway.list_messages()] == ["M1"]

    @pytest.mark.asyncio
    async def test_concurrent_sends_keep_every_record(self, gateway):
        await asyncio.gather(*(gateway.send("C1", f"msg {i}") for i in range(10)))
        assert len(gateway.list_messages()) == 10


# ---------------------------------------------------------------------------
# edit
# ---------------------------------------------------------------------------

class TestEdit:
    @pytest.mark.asyncio
    async def test_plain_edit_scenario(self, gateway, fake_session):
        sent = await gateway.send("C1", "hello")

        updated = await gateway.edit("M1", "hello v2", title=None, color=None)

        assert updated.content == "hello v2"
        assert updated.is_embed is False
        assert updated.last_edited is not None
        assert updated.last_edited >= sent.timestamp
        assert updated.timestamp == sent.timestamp
        assert gateway.list_messages() == [updated]
        assert fake_session.edits[0][2].is_embed is False

    @pytest.mark.asyncio
    async def test_stored_content_is_trimmed(self, gateway):
        await gateway.send("C1", "hello")
        await gateway.edit("M1", "  spaced  ")
        assert gateway.list_messages()[0].content == "spaced"

    @pytest.mark.asyncio
    async def test_empty_title_and_color_keep_previous(self, gateway, fake_session):
        await gateway.send("C1", "body", use_embed=True, title="Title", color="#00ff00")

        updated = await gateway.edit("M1", "body v2", title="", color="")

        assert updated.title == "Title"
        assert updated.color == "#00ff00"
        assert updated.is_embed is True
        payload = fake_session.edits[0][2]
        assert payload.is_embed is True
        assert payload.title == "Title"
        assert payload.color == "#00ff00"

    @pytest.mark.asyncio
    async def test_new_title_replaces_previous(self, gateway):
        await gateway.send("C1", "body", use_embed=True, title="Old")
        updated = await gateway.edit("M1", "body", title="New")
        assert updated.title == "New"

    @pytest.mark.asyncio
    async def test_title_promotes_plain_message_to_embed(self, gateway, fake_session):
        await gateway.send("C1", "hello")

        updated = await gateway.edit("M1", "hello", title="Now fancy")

        assert updated.is_embed is True
        assert fake_session.edits[0][2].is_embed is True

    @pytest.mark.asyncio
    async def test_color_promotes_plain_message_to_embed(self, gateway):
        await gateway.send("C1", "hello")
        updated = await gateway.edit("M1", "hello", color="#123456")
        assert updated.is_embed is True
        assert updated.color == "#123456"

    @pytest.mark.asyncio
    async def test_embed_stays_embed_without_title(self, gateway, fake_session):
        await gateway.send("C1", "body", use_embed=True)
        updated = await gateway.edit("M1", "body v2")
        assert updated.is_embed is True
        assert fake_session.edits[0][2].is_embed is True

    @pytest.mark.asyncio
    async def test_empty_content_rejected(self, gateway, fake_session):
        await gateway.send("C1", "hello")
        with pytest.raises(ValidationError):
            await gateway.edit("M1", "   ")
        assert fake_session.edits == []

    @pytest.mark.asyncio
    async def test_unknown_record(self, gateway):
        with pytest.raises(NotFound, match="storage"):
            await gateway.edit("M404", "hi")

    @pytest.mark.asyncio
    async def test_message_deleted_on_discord(self, gateway, fake_session):
        await gateway.send("C1", "hello")
        del fake_session.remote["M1"]

        with pytest.raises(NotFound, match="Discord message"):
            await gateway.edit("M1", "hello v2")
        assert gateway.list_messages()[0].content == "hello"

    @pytest.mark.asyncio
    async def test_channel_gone(self, gateway, fake_session):
        await gateway.send("C1", "hello")
        del fake_session.channels["C1"]
        with pytest.raises(NotFound, match="Channel"):
            await gateway.edit("M1", "hello v2")

    @pytest.mark.asyncio
    async def test_remote_edit_failure_leaves_store_untouched(self, gateway, fake_session):
        await gateway.send("C1", "hello")
        fake_session.fail_edit = "Forbidden"

        with pytest.raises(RemoteOperationFailed):
            await gateway.edit("M1", "hello v2")

        stored = gateway.list_messages()[0]
        assert stored.content == "hello"
        assert stored.last_edited is None

    @pytest.mark.asyncio
    async def test_persist_failure_after_remote_edit_is_surfaced(self, gateway, store, fake_session):
        await gateway.send("C1", "hello")

        with patch.object(store, "save_all", side_effect=PersistenceFailed("disk full")):
            with pytest.raises(PersistenceFailed):
                await gateway.edit("M1", "hello v2")

        # Discord got the edit; local history did not
        assert fake_session.remote["M1"].content == "hello v2"
        assert gateway.list_messages()[0].content == "hello"


# ---------------------------------------------------------------------------
# delete
# ---------------------------------------------------------------------------

class TestDelete:
    @pytest.mark.asyncio
    async def test_delete_is_local_only(self, gateway, fake_session):
        await gateway.send("C1", "hello")

        await gateway.delete("M1")

        assert gateway.list_messages() == []
        assert fake_session.deletes == []
        assert "M1" in fake_session.remote

    @pytest.mark.asyncio
    async def test_delete_keeps_other_records(self, gateway):
        await gateway.send("C1", "one")
        await gateway.send("C1", "two")
        await gateway.delete("M1")
        assert [r.id for r in gateway.list_messages()] == ["M2"]

    @pytest.mark.asyncio
    async def test_unknown_record(self, gateway):
        with pytest.raises(NotFound):
            await gateway.delete("M404")


# ---------------------------------------------------------------------------
# health / channels
# ---------------------------------------------------------------------------

class TestStatus:
    def test_health_ready(self, gateway):
        status = gateway.health()
        assert status.ready is True
        assert status.identity == "DashBot#0001"

    def test_health_not_ready(self, fake_session, store):
        fake_session.ready = False
        status = MessageGateway(fake_session, store).health()
        assert status.ready is False
        assert status.identity is None

    def test_list_channels(self, gateway):
        guilds = gateway.list_channels()
        assert len(guilds) == 1
        assert guilds[0].to_dict() == {
            "id": "G1",
            "name": "Test Guild",
            "channels": [
                {"id": "C1", "name": "general"},
                {"id": "C2", "name": "announcements"},
            ],
        }

    def test_list_channels_not_ready(self, fake_session, store):
        fake_session.ready = False
        with pytest.raises(ServiceUnavailable):
            MessageGateway(fake_session, store).list_channels()
