"""
Channel Notifier
Outbound side of the chat transport: posts status messages and resolves user profiles
"""

import logging
from typing import Optional

import discord
from discord.ext import commands
from slack_sdk.errors import SlackApiError
from slack_sdk.web.async_client import AsyncWebClient

from models.focus_session import UserProfile
from utils.message_utils import send_message

logger = logging.getLogger("deepwork-tracker")


class ChannelNotifier:
    """Interface the session services use to talk to the chat platform"""

    async def post(self, channel_id: str, text: str):
        """Post a message visible to everyone in the channel"""
        raise NotImplementedError

    async def post_ephemeral(self, channel_id: str, user_id: str, text: str):
        """Post a message visible only to one user"""
        raise NotImplementedError

    async def lookup_profile(self, user_id: str) -> UserProfile:
        """Resolve the display name and email of a user"""
        raise NotImplementedError

    async def close(self):
        """Release platform resources"""


class SlackNotifier(ChannelNotifier):
    """Slack Web API implementation"""

    def __init__(self, token: str = None, client: Optional[AsyncWebClient] = None):
        self.client = client or AsyncWebClient(token=token)

    async def post(self, channel_id: str, text: str):
        await self.client.chat_postMessage(channel=channel_id, text=text)

    async def post_ephemeral(self, channel_id: str, user_id: str, text: str):
        await self.client.chat_postEphemeral(channel=channel_id, user=user_id, text=text)

    async def lookup_profile(self, user_id: str) -> UserProfile:
        try:
            response = await self.client.users_info(user=user_id)
        except SlackApiError as e:
            logger.warning(f"Could not resolve Slack profile for {user_id}: {e}")
            return UserProfile()

        user = response["user"]
        return UserProfile(
            name=user.get("real_name") or user.get("name"),
            email=user.get("profile", {}).get("email"),
        )

    async def close(self):
        session = getattr(self.client, "session", None)
        if session is not None and not session.closed:
            await session.close()


class DiscordNotifier(ChannelNotifier):
    """Discord bot implementation; ephemeral messages go to the user's DMs"""

    def __init__(self, bot: commands.Bot):
        self.bot = bot

    async def _resolve_channel(self, channel_id: str):
        channel = self.bot.get_channel(int(channel_id))
        if channel is None:
            channel = await self.bot.fetch_channel(int(channel_id))
        return channel

    async def _resolve_user(self, user_id: str):
        user = self.bot.get_user(int(user_id))
        if user is None:
            user = await self.bot.fetch_user(int(user_id))
        return user

    async def post(self, channel_id: str, text: str):
        channel = await self._resolve_channel(channel_id)
        if not await send_message(channel, text):
            raise discord.DiscordException(f"Failed to post to channel {channel_id}")

    async def post_ephemeral(self, channel_id: str, user_id: str, text: str):
        user = await self._resolve_user(user_id)
        if not await send_message(user, text):
            raise discord.DiscordException(f"Failed to message user {user_id}")

    async def lookup_profile(self, user_id: str) -> UserProfile:
        try:
            user = await self._resolve_user(user_id)
        except discord.DiscordException as e:
            logger.warning(f"Could not resolve Discord user {user_id}: {e}")
            return UserProfile()
        # Discord does not expose email addresses to bots
        return UserProfile(name=user.display_name, email=None)

    async def close(self):
        if not self.bot.is_closed():
            await self.bot.close()
