"""
Services package for deepwork-tracker
"""

from services.errors import (
    TrackerError,
    ConfigError,
    StoreError,
    StoreUnavailableError
)
from services.session_store import SessionStore
from services.session_manager import SessionManager, Reply
from services.inactivity_sweeper import InactivitySweeper, SweepResult
from services.notifier import ChannelNotifier, SlackNotifier, DiscordNotifier

__all__ = [
    "TrackerError",
    "ConfigError",
    "StoreError",
    "StoreUnavailableError",
    "SessionStore",
    "SessionManager",
    "Reply",
    "InactivitySweeper",
    "SweepResult",
    "ChannelNotifier",
    "SlackNotifier",
    "DiscordNotifier"
]
