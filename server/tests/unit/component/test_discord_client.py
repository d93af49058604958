import httpx
import pytest

from app.component.discord_client import DiscordChannel, DiscordDirectoryClient, DiscordPermission
from app.exception.exception import RemoteNotFound, RemoteRejected, RemoteUnavailable
from tests.conftest import GUILD_ID, SEND, VIEW


@pytest.mark.unit
class TestDiscordDirectoryClient:
    @pytest.mark.anyio
    async def test_sets_bot_authorization_header(self):
        observed = {}

        def handler(request: httpx.Request) -> httpx.Response:
            observed["authorization"] = request.headers.get("Authorization")
            observed["path"] = request.url.path
            return httpx.Response(200, json={"id": GUILD_ID, "name": "WhaleBuddy"})

        async with DiscordDirectoryClient(
            bot_token="abc123",
            guild_id=GUILD_ID,
            base_url="https://discord.test/api/v10",
            transport=httpx.MockTransport(handler),
        ) as client:
            guild = await client.get_guild()

        assert guild.id == GUILD_ID
        assert guild.name == "WhaleBuddy"
        assert observed["authorization"] == "Bot abc123"
        assert observed["path"] == f"/api/v10/guilds/{GUILD_ID}"

    @pytest.mark.anyio
    async def test_get_guild_returns_none_when_bot_not_member(self, discord_client, fake_discord):
        fake_discord.guild = None

        assert await discord_client.get_guild() is None

    @pytest.mark.anyio
    async def test_get_guild_treats_missing_access_as_absent(self, discord_client, fake_discord):
        fake_discord.fail_paths[f"/guilds/{GUILD_ID}"] = httpx.Response(
            403, json={"message": "Missing Access", "code": 50001}
        )

        assert await discord_client.get_guild() is None

    @pytest.mark.anyio
    async def test_list_channels_keeps_only_text_channels(self, discord_client, fake_discord):
        fake_discord.add_channel("A", "general", type=0)
        fake_discord.add_channel("B", "voice-lounge", type=2)

        channels = await discord_client.list_channels()

        assert [(c.id, c.name) for c in channels] == [("A", "general")]
        assert channels[0].guild_id == GUILD_ID

    @pytest.mark.anyio
    async def test_list_channels_sorted_by_name_and_skips_categories(self, discord_client, fake_discord):
        fake_discord.add_channel("1", "Zebra")
        fake_discord.add_channel("2", "alerts")
        fake_discord.add_channel("3", "Bots", type=4)
        fake_discord.add_channel("4", "news", type=5)

        channels = await discord_client.list_channels()

        assert [c.name for c in channels] == ["alerts", "Zebra"]

    @pytest.mark.anyio
    async def test_list_channels_empty_when_bot_absent(self, discord_client, fake_discord):
        fake_discord.guild = None
        fake_discord.add_channel("A", "general")

        assert await discord_client.list_channels() == []
        assert fake_discord.requests == [("GET", f"/guilds/{GUILD_ID}")]

    @pytest.mark.anyio
    async def test_list_channels_empty_guild(self, discord_client):
        assert await discord_client.list_channels() == []

    @pytest.mark.anyio
    async def test_get_channel(self, discord_client, fake_discord):
        fake_discord.add_channel("A", "general")

        channel = await discord_client.get_channel("A")

        assert channel == DiscordChannel(id="A", name="general", type=0, guild_id=GUILD_ID)
        assert channel.is_text

    @pytest.mark.anyio
    async def test_get_channel_unknown_raises_not_found(self, discord_client):
        with pytest.raises(RemoteNotFound) as exc_info:
            await discord_client.get_channel("missing")

        assert exc_info.value.status == 404

    @pytest.mark.anyio
    async def test_server_error_raises_unavailable_without_retry(self, discord_client, fake_discord):
        fake_discord.add_channel("A", "general")
        fake_discord.fail_paths["/channels/A"] = httpx.Response(503, text="upstream down")

        with pytest.raises(RemoteUnavailable) as exc_info:
            await discord_client.get_channel("A")

        assert exc_info.value.status == 503
        assert exc_info.value.body == "upstream down"
        assert fake_discord.requests == [("GET", "/channels/A")]

    @pytest.mark.anyio
    async def test_network_error_raises_unavailable(self, discord_client, fake_discord):
        fake_discord.network_error = True

        with pytest.raises(RemoteUnavailable):
            await discord_client.get_guild()

    @pytest.mark.anyio
    async def test_non_json_success_raises_unavailable(self, discord_client, fake_discord):
        fake_discord.fail_paths["/channels/A"] = httpx.Response(200, text="<html>")

        with pytest.raises(RemoteUnavailable):
            await discord_client.get_channel("A")

    @pytest.mark.anyio
    async def test_get_channel_permissions(self, discord_client, fake_discord):
        fake_discord.add_channel("A", "general", permissions=VIEW | SEND)

        permissions = await discord_client.get_channel_permissions("A")

        assert DiscordPermission.VIEW_CHANNEL in permissions
        assert DiscordPermission.SEND_MESSAGES in permissions
        assert DiscordPermission.MANAGE_CHANNELS not in permissions

    @pytest.mark.anyio
    async def test_get_channel_permissions_keeps_high_bits(self, discord_client, fake_discord):
        fake_discord.add_channel("A", "general", permissions=(1 << 63) | VIEW)

        permissions = await discord_client.get_channel_permissions("A")

        assert int(permissions) == (1 << 63) | VIEW

    @pytest.mark.anyio
    @pytest.mark.parametrize("raw", ["not-a-number", "-1", str(1 << 64), None])
    async def test_malformed_permissions_raise_unavailable(self, discord_client, fake_discord, raw):
        fake_discord.add_channel("A", "general")
        fake_discord.permissions["A"] = raw

        with pytest.raises(RemoteUnavailable):
            await discord_client.get_channel_permissions("A")

    @pytest.mark.anyio
    async def test_post_message(self, discord_client, fake_discord):
        fake_discord.add_channel("A", "general")

        await discord_client.post_message("A", "hello")

        assert fake_discord.messages == [("A", {"content": "hello"})]

    @pytest.mark.anyio
    async def test_post_message_rejected_carries_status_and_body(self, discord_client, fake_discord):
        fake_discord.add_channel("A", "general")
        fake_discord.reject_messages = httpx.Response(403, text='{"message": "Missing Permissions", "code": 50013}')

        with pytest.raises(RemoteRejected) as exc_info:
            await discord_client.post_message("A", "hello")

        assert exc_info.value.status == 403
        assert "Missing Permissions" in exc_info.value.body
        assert fake_discord.messages == []
