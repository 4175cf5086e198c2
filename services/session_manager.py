"""
Session Manager
Owns the start/end/timeout transitions of focus sessions and their persistence side effects
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Awaitable, Callable, Optional

from models.focus_session import (
    CloseReason,
    FocusSession,
    SessionStatus,
    UserProfile,
    compute_duration,
    utcnow,
)
from services.notifier import ChannelNotifier
from services.session_store import SessionStore
from utils.message_utils import mention

logger = logging.getLogger("deepwork-tracker")

ProfileLookup = Callable[[str], Awaitable[UserProfile]]


@dataclass
class Reply:
    """User-facing answer to a command"""
    text: str
    ephemeral: bool = True


class SessionManager:
    """Service for starting and closing focus sessions"""

    DESCRIPTION_REQUIRED = (
        "Please describe what you are going to work on. "
        "Usage: `/deepwork <description>`"
    )
    REFLECTION_REQUIRED = (
        "You have a deep work session in progress. "
        "Add a reflection to end it. Usage: `/deepwork <reflection>`"
    )

    def __init__(self,
                 store: SessionStore,
                 notifier: ChannelNotifier,
                 clock: Optional[Callable[[], datetime]] = None):
        """
        Initialize the session manager.

        Args:
            store: Persistence for sessions
            notifier: Posts close announcements to the session's channel
            clock: Returns the current aware UTC time (injectable for tests)
        """
        self.store = store
        self.notifier = notifier
        self.clock = clock or utcnow

    async def start_or_end(self,
                           user_id: str,
                           text: str,
                           channel_id: str,
                           lookup_profile: ProfileLookup) -> Reply:
        """
        Toggle the user's session: end the active one, or start a new one.

        Args:
            user_id: Chat platform user issuing the command
            text: Raw command argument (description or reflection)
            channel_id: Channel the command was issued in
            lookup_profile: Resolves name/email of a user, only called on start

        Returns:
            The reply to deliver to the user
        """
        text = (text or "").strip()
        active = await self.store.find_active_for_user(user_id)

        if active is not None:
            if not text:
                return Reply(self.REFLECTION_REQUIRED)

            active.reflection = text
            closed = await self.close(active, CloseReason.USER)
            if not closed:
                return Reply("Your deep work session had already been closed.")
            return Reply(
                f"Session ended after {active.duration} minutes. Reflection: {text}"
            )

        if not text:
            return Reply(self.DESCRIPTION_REQUIRED)

        profile = await lookup_profile(user_id)
        session = FocusSession(
            user_id=user_id,
            name=profile.name,
            email=profile.email,
            channel_id=channel_id,
            description=text,
            start_time=self.clock(),
        )
        await self.store.insert(session)
        logger.info(f"Started session {session.id} for user {user_id}")

        return Reply(
            f"{mention(user_id)} has started a deep work session: {text}",
            ephemeral=False,
        )

    async def close(self, session: FocusSession, reason: str, now: Optional[datetime] = None) -> bool:
        """
        Move an in-progress session to its terminal state and announce it.

        The write only applies while the stored session is still in progress,
        so a session closed concurrently by another actor is left untouched.
        On success the terminal fields (status, end_time, duration) are copied
        onto the given session; when the write is refused it is not modified.

        Args:
            session: Session believed to be in progress
            reason: CloseReason.USER (reflection attached) or CloseReason.TIMEOUT
            now: Close time, defaults to the clock

        Returns:
            True if this call closed the session, False if it was already closed
        """
        if reason == CloseReason.USER:
            status = SessionStatus.CONCLUDED
        elif reason == CloseReason.TIMEOUT:
            status = SessionStatus.TIMED_OUT
        else:
            raise ValueError(f"Unknown close reason: {reason}")

        if not session.is_active():
            logger.debug(f"Session {session.id} is already {session.status}, not closing")
            return False

        end_time = now or self.clock()
        closing = FocusSession(**vars(session))
        closing.end_time = end_time
        closing.duration = compute_duration(session.start_time, end_time)
        closing.status = status
        if reason == CloseReason.TIMEOUT:
            closing.reflection = None

        if not await self.store.close_if_in_progress(closing):
            logger.info(f"Session {session.id} was closed concurrently, skipping {reason} close")
            return False

        session.end_time = closing.end_time
        session.duration = closing.duration
        session.status = closing.status
        session.reflection = closing.reflection
        logger.info(
            f"Closed session {session.id} for user {session.user_id} "
            f"({status}, {session.duration} minutes)"
        )

        try:
            await self.notifier.post(session.channel_id, self.close_message(session))
        except Exception as e:
            logger.error(f"Failed to announce close of session {session.id}: {e}")

        return True

    @staticmethod
    def close_message(session: FocusSession) -> str:
        """Channel announcement for a closed session"""
        if session.status == SessionStatus.TIMED_OUT:
            return (
                f"{mention(session.user_id)}'s deep work session is invalid due to timeout "
                f"(elapsed: {session.duration} minutes)"
            )
        return (
            f"{mention(session.user_id)} has ended their deep work session "
            f"(duration: {session.duration} minutes)\n"
            f"Reflection: {session.reflection}"
        )
