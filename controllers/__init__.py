"""
Controllers package for deepwork-tracker
"""

from controllers.command_controller import CommandController, CommandInvocation
from controllers.discord_controller import DiscordController
from controllers.session_controller import SessionController
from controllers.slack_controller import SlackController

__all__ = [
    "CommandController",
    "CommandInvocation",
    "DiscordController",
    "SessionController",
    "SlackController",
]
