"""
deepwork-tracker
Tracks per-user deep work sessions from Slack or Discord and times out forgotten ones
"""

import asyncio
import logging
import sys

import discord
import uvicorn
from discord.ext import commands
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from controllers.command_controller import CommandController
from controllers.discord_controller import DiscordController
from controllers.session_controller import SessionController
from controllers.slack_controller import SlackController
from services.errors import ConfigError, StoreUnavailableError
from services.inactivity_sweeper import InactivitySweeper
from services.notifier import ChannelNotifier, DiscordNotifier, SlackNotifier
from services.session_manager import SessionManager
from services.session_store import SessionStore
from utils.config import TrackerConfig

logger = logging.getLogger("deepwork-tracker")


def configure_logging(level: str = "INFO"):
    """Configure logging for the whole process"""
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


def create_discord_bot() -> commands.Bot:
    """Create a Discord bot able to read command messages"""
    intents = discord.Intents.default()
    intents.message_content = True

    bot = commands.Bot(
        command_prefix='!',
        intents=intents,
        description='Deep work session tracker'
    )

    @bot.event
    async def on_ready():
        logger.info(f"Bot logged in as {bot.user.name} ({bot.user.id})")

    return bot


def create_app(config: TrackerConfig,
               store: SessionStore,
               notifier: ChannelNotifier,
               sweeper: InactivitySweeper,
               command_controller: CommandController) -> FastAPI:
    """Build the HTTP application around already constructed services"""
    app = FastAPI(
        title="deepwork-tracker",
        description="Deep work session tracker"
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    session_controller = SessionController(store, sweeper)
    app.include_router(session_controller.router)

    if config.platform == "slack":
        slack_controller = SlackController(
            command_controller,
            notifier,
            signing_secret=config.slack_signing_secret,
            command_name=config.slack_command,
        )
        app.include_router(slack_controller.router)

    return app


async def main() -> int:
    """Main entry point"""
    try:
        config = TrackerConfig.from_env()
        config.validate()
    except ConfigError as e:
        configure_logging()
        logger.error(f"Invalid configuration: {e}")
        return 1

    configure_logging(config.log_level)

    store = SessionStore(
        config.mongodb_uri,
        database=config.mongodb_database,
        collection=config.mongodb_collection,
    )
    try:
        await store.connect()
    except StoreUnavailableError as e:
        logger.error(str(e))
        return 1

    bot = None
    if config.platform == "discord":
        bot = create_discord_bot()
        notifier = DiscordNotifier(bot)
    else:
        notifier = SlackNotifier(token=config.slack_bot_token)

    session_manager = SessionManager(store, notifier)
    sweeper = InactivitySweeper(
        store,
        session_manager,
        timeout_minutes=config.timeout_minutes,
        interval_minutes=config.sweep_interval_minutes,
    )
    command_controller = CommandController(session_manager, notifier)
    if bot is not None:
        DiscordController(bot, command_controller, notifier)

    app = create_app(config, store, notifier, sweeper, command_controller)
    server = uvicorn.Server(uvicorn.Config(app, host="0.0.0.0", port=config.port))

    async def run_bot():
        try:
            await bot.start(config.discord_bot_token)
        finally:
            # Stop serving once the bot disconnects
            server.should_exit = True

    await sweeper.start()
    logger.info(f"deepwork-tracker running on port {config.port} ({config.platform})")
    try:
        if bot is not None:
            await asyncio.gather(server.serve(), run_bot())
        else:
            await server.serve()
    finally:
        await sweeper.stop()
        await notifier.close()
        await store.close()

    return 0


def run():
    """Console script entry point"""
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    run()
