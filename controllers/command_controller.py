"""
Command Controller
Platform-neutral handling of the deep work command
"""

import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional

from services.notifier import ChannelNotifier
from services.session_manager import ProfileLookup, Reply, SessionManager

logger = logging.getLogger("deepwork-tracker")


@dataclass
class CommandInvocation:
    """One inbound deep work command"""
    user_id: str
    text: str
    channel_id: str
    lookup_profile: ProfileLookup
    ack: Optional[Callable[[], Awaitable[None]]] = None


class CommandController:
    """Controller for the start/end command"""

    FAILURE_NOTICE = "Something went wrong while updating your deep work session. Please try again."

    def __init__(self, session_manager: SessionManager, notifier: ChannelNotifier):
        """
        Initialize the command controller.

        Args:
            session_manager: Lifecycle manager for focus sessions
            notifier: Delivers replies back to the chat platform
        """
        self.session_manager = session_manager
        self.notifier = notifier

    async def handle(self, invocation: CommandInvocation) -> Optional[Reply]:
        """Acknowledge, run the transition, then deliver the reply"""
        if invocation.ack is not None:
            await invocation.ack()

        try:
            reply = await self.session_manager.start_or_end(
                invocation.user_id,
                invocation.text,
                invocation.channel_id,
                invocation.lookup_profile,
            )
        except Exception as e:
            logger.error(f"Command failed for user {invocation.user_id}: {e}")
            await self._deliver(invocation, Reply(self.FAILURE_NOTICE))
            return None

        await self._deliver(invocation, reply)
        return reply

    async def _deliver(self, invocation: CommandInvocation, reply: Reply):
        try:
            if reply.ephemeral:
                await self.notifier.post_ephemeral(invocation.channel_id, invocation.user_id, reply.text)
            else:
                await self.notifier.post(invocation.channel_id, reply.text)
        except Exception as e:
            logger.error(f"Failed to deliver reply to user {invocation.user_id}: {e}")
