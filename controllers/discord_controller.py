"""
Discord Controller
Registers the deep work command and mention greeting on a Discord bot
"""

import logging

import discord
from discord.ext import commands

from controllers.command_controller import CommandController, CommandInvocation
from services.notifier import ChannelNotifier

logger = logging.getLogger("deepwork-tracker")


class DiscordController:
    """Controller for Discord commands and events"""

    GREETING = "Hi there! Use `!deepwork <description>` to start a deep work session."
    ACK_EMOJI = "\N{EYES}"

    def __init__(self, bot: commands.Bot, command_controller: CommandController, notifier: ChannelNotifier):
        """
        Initialize the Discord controller.

        Args:
            bot: Discord bot instance
            command_controller: Handles the deep work command
            notifier: Discord notifier used for profile lookups
        """
        self.bot = bot
        self.command_controller = command_controller
        self.notifier = notifier

        self._register_commands()

    def _register_commands(self):
        """Register all bot commands and events"""
        @self.bot.command(name="deepwork")
        async def deepwork(ctx, *, text: str = ""):
            await self.deepwork(ctx, text)

        @self.bot.event
        async def on_message(message):
            await self.on_message(message)

        @self.bot.event
        async def on_command_error(ctx, error):
            await self.on_command_error(ctx, error)

    async def deepwork(self, ctx, text: str):
        """Start or end the author's deep work session"""
        async def ack():
            try:
                await ctx.message.add_reaction(self.ACK_EMOJI)
            except discord.DiscordException as e:
                logger.debug(f"Could not acknowledge command: {e}")

        invocation = CommandInvocation(
            user_id=str(ctx.author.id),
            text=text,
            channel_id=str(ctx.channel.id),
            lookup_profile=self.notifier.lookup_profile,
            ack=ack,
        )
        await self.command_controller.handle(invocation)

    async def on_message(self, message: discord.Message):
        """Greet plain mentions; commands go to the command framework"""
        if message.author == self.bot.user:
            return

        if message.content.startswith(self.bot.command_prefix):
            await self.bot.process_commands(message)
            return

        if self.bot.user is not None and self.bot.user in message.mentions:
            await message.channel.send(self.GREETING)

    async def on_command_error(self, ctx, error):
        """Handle command errors"""
        if isinstance(error, commands.CommandNotFound):
            return
        logger.error(f"Command error: {error}")
        await ctx.send(f"An error occurred: {error}")
