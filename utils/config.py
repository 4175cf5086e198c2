"""
Configuration
Loads tracker settings from the environment (and a .env file if present)
"""

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from services.errors import ConfigError

PLATFORMS = ("slack", "discord")


def _positive_int(name: str, default: int) -> int:
    """Read a positive integer environment variable"""
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {raw!r}")
    if value <= 0:
        raise ConfigError(f"{name} must be positive, got {value}")
    return value


@dataclass
class TrackerConfig:
    """Runtime configuration for the tracker"""
    timeout_minutes: int = 180
    sweep_interval_minutes: int = 15
    port: int = 3000
    platform: str = "slack"
    log_level: str = "INFO"

    mongodb_uri: Optional[str] = None
    mongodb_database: str = "deep_work_tracker"
    mongodb_collection: str = "sessions"

    slack_bot_token: Optional[str] = None
    slack_signing_secret: Optional[str] = None
    slack_command: str = "/deepwork"

    discord_bot_token: Optional[str] = None

    @classmethod
    def from_env(cls, load_env_file: bool = True) -> 'TrackerConfig':
        """Build the configuration from environment variables"""
        if load_env_file:
            load_dotenv()

        platform = os.getenv("CHAT_PLATFORM", "slack").strip().lower()
        if platform not in PLATFORMS:
            raise ConfigError(f"CHAT_PLATFORM must be one of {PLATFORMS}, got {platform!r}")

        return cls(
            timeout_minutes=_positive_int("SESSION_TIMEOUT_MINUTES", 180),
            sweep_interval_minutes=_positive_int("SWEEP_INTERVAL_MINUTES", 15),
            port=_positive_int("PORT", 3000),
            platform=platform,
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            mongodb_uri=os.getenv("MONGODB_URI"),
            mongodb_database=os.getenv("MONGODB_DATABASE", "deep_work_tracker"),
            mongodb_collection=os.getenv("MONGODB_COLLECTION", "sessions"),
            slack_bot_token=os.getenv("SLACK_BOT_TOKEN"),
            slack_signing_secret=os.getenv("SLACK_SIGNING_SECRET"),
            slack_command=os.getenv("SLACK_COMMAND", "/deepwork"),
            discord_bot_token=os.getenv("DISCORD_BOT_TOKEN"),
        )

    def validate(self):
        """Check that the secrets required by the selected platform are present"""
        if not self.mongodb_uri:
            raise ConfigError("MONGODB_URI not configured")
        if self.platform == "slack" and not self.slack_bot_token:
            raise ConfigError("SLACK_BOT_TOKEN not configured")
        if self.platform == "slack" and not self.slack_signing_secret:
            raise ConfigError("SLACK_SIGNING_SECRET not configured")
        if self.platform == "discord" and not self.discord_bot_token:
            raise ConfigError("DISCORD_BOT_TOKEN not configured")
