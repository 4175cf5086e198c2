import pytest
from unittest.mock import AsyncMock, MagicMock

from slack_sdk.errors import SlackApiError

from services.notifier import DiscordNotifier, SlackNotifier
from utils.message_utils import split_message


@pytest.fixture
def slack_client():
    client = MagicMock()
    client.chat_postMessage = AsyncMock()
    client.chat_postEphemeral = AsyncMock()
    client.users_info = AsyncMock(return_value={
        "ok": True,
        "user": {"real_name": "Ada Lovelace", "name": "ada", "profile": {"email": "ada@example.com"}},
    })
    return client


@pytest.mark.asyncio
async def test_slack_post_and_ephemeral(slack_client):
    notifier = SlackNotifier(client=slack_client)

    await notifier.post("C1", "hello")
    await notifier.post_ephemeral("C1", "U1", "psst")

    slack_client.chat_postMessage.assert_awaited_once_with(channel="C1", text="hello")
    slack_client.chat_postEphemeral.assert_awaited_once_with(channel="C1", user="U1", text="psst")


@pytest.mark.asyncio
async def test_slack_profile_lookup(slack_client):
    notifier = SlackNotifier(client=slack_client)

    profile = await notifier.lookup_profile("U1")

    slack_client.users_info.assert_awaited_once_with(user="U1")
    assert profile.name == "Ada Lovelace"
    assert profile.email == "ada@example.com"


@pytest.mark.asyncio
async def test_slack_profile_lookup_failure_gives_empty_profile(slack_client):
    slack_client.users_info = AsyncMock(side_effect=SlackApiError("user_not_found", {"ok": False}))
    notifier = SlackNotifier(client=slack_client)

    profile = await notifier.lookup_profile("U1")

    assert profile.name is None
    assert profile.email is None


@pytest.mark.asyncio
async def test_discord_post_uses_cached_channel():
    bot = MagicMock()
    channel = MagicMock()
    channel.send = AsyncMock()
    bot.get_channel.return_value = channel
    notifier = DiscordNotifier(bot)

    await notifier.post("456", "hello")

    bot.get_channel.assert_called_once_with(456)
    channel.send.assert_awaited_once_with("hello")


@pytest.mark.asyncio
async def test_discord_ephemeral_is_a_direct_message():
    bot = MagicMock()
    user = MagicMock()
    user.send = AsyncMock()
    bot.get_user.return_value = None
    bot.fetch_user = AsyncMock(return_value=user)
    notifier = DiscordNotifier(bot)

    await notifier.post_ephemeral("456", "123", "psst")

    bot.fetch_user.assert_awaited_once_with(123)
    user.send.assert_awaited_once_with("psst")


@pytest.mark.asyncio
async def test_discord_profile_has_no_email():
    bot = MagicMock()
    bot.get_user.return_value.display_name = "ada"
    notifier = DiscordNotifier(bot)

    profile = await notifier.lookup_profile("123")

    assert profile.name == "ada"
    assert profile.email is None


def test_split_message_short_text():
    assert split_message("hello") == ["hello"]


def test_split_message_prefers_newlines():
    text = "a" * 10 + "\n" + "b" * 10

    assert split_message(text, max_length=15) == ["a" * 10, "b" * 10]


def test_split_message_hard_split():
    assert split_message("x" * 25, max_length=10) == ["x" * 10, "x" * 10, "x" * 5]
